"""Session user model"""
from typing import Optional
from pydantic import BaseModel


class SessionUser(BaseModel):
    """Authenticated identity as reported by Supabase Auth"""
    id: str  # UUID as string
    email: Optional[str] = None
    display_name: Optional[str] = None
