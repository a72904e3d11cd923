"""Route guard schemas."""

from typing import Optional

from pydantic import BaseModel


class ScreenAccessResponse(BaseModel):
    path: str
    state: str  # pending | denied_no_session | denied_wrong_role | allowed
    allowed: bool
    redirect_to: Optional[str] = None
    notice: Optional[str] = None
    role: Optional[str] = None
