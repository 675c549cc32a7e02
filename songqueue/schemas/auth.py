"""
Pydantic schemas for authentication
"""
from pydantic import BaseModel
from typing import Optional


class OAuthSessionRequest(BaseModel):
    """Access token handed back by the identity provider after the OAuth redirect"""
    access_token: str


class Token(BaseModel):
    """Schema for JWT token response"""
    access_token: str
    token_type: str = "bearer"


class Identity(BaseModel):
    """Identity resolved from the provider; trusted as-is"""
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
