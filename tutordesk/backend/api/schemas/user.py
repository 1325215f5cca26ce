# tutordesk/backend/api/schemas/user.py
from pydantic import BaseModel
from typing import Optional


class AdminIdentity(BaseModel):
    """The verified caller, as carried by the bearer token."""
    id: str
    email: Optional[str] = None


# Internal representation of JWT data
class TokenData(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
