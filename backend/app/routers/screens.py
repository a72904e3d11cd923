"""Screens router: route guard decisions for the client-side routes."""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.middleware.auth import get_auth_state
from app.schemas.screen import ScreenAccessResponse
from app.services.route_guard import AuthState, evaluate_screen, find_screen

router = APIRouter(prefix="/api/screens", tags=["screens"])


@router.get("/access", response_model=ScreenAccessResponse)
def screen_access(
    path: str = Query(...),
    state: AuthState = Depends(get_auth_state),
):
    """Decide whether the caller may open ``path``.

    Evaluated against the current session and role on every call.
    """
    screen = find_screen(path)
    if screen is None:
        raise HTTPException(status_code=404, detail="Page not found")
    decision = evaluate_screen(state, screen)
    return ScreenAccessResponse(
        path=screen.path,
        state=decision.state,
        allowed=decision.allowed,
        redirect_to=decision.redirect_to,
        notice=decision.notice,
        role=state.role,
    )
