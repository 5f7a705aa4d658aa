# student_invoice/schemas/gmail.py - Gmail OAuth tokens and draft payloads
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GmailToken(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


class GmailMessageRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    thread_id: Optional[str] = Field(None, alias="threadId")


class GmailDraft(BaseModel):
    id: str
    message: GmailMessageRef


class GmailAuthUrlOut(BaseModel):
    auth_url: str
    state: str


class GmailStatusOut(BaseModel):
    connected: bool
    has_token: bool
    has_client_id: bool
    has_client_secret: bool
    token_expires_at: Optional[datetime] = None
    current_time: datetime
