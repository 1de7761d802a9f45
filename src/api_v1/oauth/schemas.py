from datetime import datetime

from pydantic import BaseModel


class AuthUrlResponse(BaseModel):
    platform: str
    auth_url: str
    state: str


class AccountStatusResponse(BaseModel):
    platform: str
    connected: bool
    token_type: str | None = None
    scope: str | None = None
    expires_at: datetime | None = None
