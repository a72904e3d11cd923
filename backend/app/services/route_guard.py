"""Route guard: decides whether an identity may view a screen.

Each navigation attempt moves from ``pending`` to exactly one terminal state:
``denied_no_session``, ``denied_wrong_role`` or ``allowed``. Decisions are
computed from the current auth state on every call and never cached, so a
change of identity or role is picked up on the next evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

PENDING = "pending"
DENIED_NO_SESSION = "denied_no_session"
DENIED_WRONG_ROLE = "denied_wrong_role"
ALLOWED = "allowed"

LOADING_NOTICE = "Loading..."
NO_SESSION_NOTICE = "Please sign in to access this page"
WRONG_ROLE_NOTICE = "You don't have permission to access this page"


@dataclass(frozen=True)
class SessionInfo:
    uid: str
    email: str
    display_name: str
    token_id: Optional[str] = None


@dataclass(frozen=True)
class AuthState:
    session: Optional[SessionInfo]
    role: Optional[str]
    resolved: bool = True


@dataclass(frozen=True)
class GuardDecision:
    state: str
    redirect_to: Optional[str] = None
    notice: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.state == ALLOWED


@dataclass(frozen=True)
class Screen:
    path: str
    allowed_roles: tuple[str, ...] = ()
    fallback: str = "/"

    @property
    def public(self) -> bool:
        return not self.allowed_roles


SCREENS: dict[str, Screen] = {
    s.path: s
    for s in (
        Screen("/"),
        Screen("/student"),
        Screen("/teacher/login"),
        Screen("/admin/login"),
        Screen("/student/feedback", ("student",), "/student"),
        Screen("/teacher/profile", ("teacher",), "/teacher/login"),
        Screen("/teacher/dashboard", ("teacher",), "/teacher/login"),
        Screen("/admin/dashboard", ("admin",), "/admin/login"),
    )
}


def find_screen(path: str) -> Optional[Screen]:
    normalized = "/" + path.strip().strip("/") if path.strip("/ ") else "/"
    return SCREENS.get(normalized)


def evaluate(state: AuthState, allowed_roles: Iterable[str], fallback: str) -> GuardDecision:
    """Evaluate one navigation attempt against the allowed-role set."""
    if not state.resolved:
        return GuardDecision(PENDING, notice=LOADING_NOTICE)
    if state.session is None:
        return GuardDecision(DENIED_NO_SESSION, redirect_to=fallback, notice=NO_SESSION_NOTICE)
    if not state.role or state.role not in set(allowed_roles):
        return GuardDecision(DENIED_WRONG_ROLE, redirect_to=fallback, notice=WRONG_ROLE_NOTICE)
    return GuardDecision(ALLOWED)


def evaluate_screen(state: AuthState, screen: Screen) -> GuardDecision:
    if screen.public:
        return GuardDecision(ALLOWED)
    return evaluate(state, screen.allowed_roles, screen.fallback)


class AccessDenied(Exception):
    """Raised by API dependencies when the guard does not allow a request."""

    def __init__(self, decision: GuardDecision):
        super().__init__(decision.notice or decision.state)
        self.decision = decision

    @property
    def status_code(self) -> int:
        if self.decision.state == DENIED_NO_SESSION:
            return 401
        if self.decision.state == PENDING:
            return 503
        return 403
