# student_invoice/services/gmail_service.py - Gmail OAuth and draft creation
import base64
import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from email.mime.text import MIMEText
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import urlencode

import httpx
from sqlalchemy.orm import Session

from student_invoice.core.config import settings
from student_invoice.schemas.gmail import GmailAuthUrlOut, GmailDraft, GmailStatusOut, GmailToken
from student_invoice.schemas.invoice import InvoiceResult
from student_invoice.services.settings_service import (
    SettingsService,
    GMAIL_TOKEN_KEY,
    GMAIL_PENDING_AUTH_KEY,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600


class GmailError(Exception):
    """Base error for Gmail integration failures"""


class GmailConfigurationError(GmailError):
    """Client id/secret missing or authorization state invalid"""


class GmailNotConnectedError(GmailError):
    """No usable token; the user has to connect Gmail again"""


class GmailApiError(GmailError):
    """Google answered with an error status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _pkce_pair() -> Tuple[str, str]:
    """Return (code_verifier, S256 code_challenge)"""
    verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


def build_raw_message(subject: str, body: str, to: str = "") -> str:
    """RFC 2822 message encoded the way the Gmail API expects in ``raw``"""
    msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = subject
    msg["To"] = to
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii")


class GmailClient:
    """Thin OAuth2 + Gmail REST client"""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: httpx.Client,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = settings.GMAIL_REDIRECT_URI
        self.http = http_client

    def get_auth_url(self) -> Tuple[str, str, str]:
        """
        Build the consent URL.

        Returns:
            (auth_url, state, pkce_verifier)
        """
        verifier, challenge = _pkce_pair()
        state = secrets.token_urlsafe(16)
        query = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(settings.GMAIL_SCOPES),
            "state": state,
            "code_challenge": challenge,
            "code_challenge_method": "S256",
            "access_type": "offline",
            "prompt": "consent",
        })
        return f"{settings.GMAIL_AUTH_URL}?{query}", state, verifier

    def _token_request(self, data: Dict[str, str]) -> dict:
        try:
            response = self.http.post(settings.GMAIL_TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            logger.error(f"Token endpoint unreachable: {e}", exc_info=True)
            raise GmailApiError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            raise GmailApiError(f"Token request rejected: {response.text}", response.status_code)
        try:
            payload = response.json()
        except ValueError as e:
            raise GmailApiError(f"Token endpoint returned invalid JSON: {e}", response.status_code) from e
        if not isinstance(payload, dict):
            raise GmailApiError("Token endpoint returned an unexpected payload", response.status_code)
        return payload

    @staticmethod
    def _token_from_response(payload: dict, refresh_token: Optional[str] = None) -> GmailToken:
        access_token = payload.get("access_token")
        if not access_token:
            raise GmailApiError("No access token in token response")
        expires_in = int(payload.get("expires_in") or DEFAULT_EXPIRES_IN)
        return GmailToken(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )

    def exchange_code(self, code: str, pkce_verifier: str) -> GmailToken:
        payload = self._token_request({
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": pkce_verifier,
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        })
        return self._token_from_response(payload)

    def refresh_access_token(self, refresh_token: str) -> GmailToken:
        payload = self._token_request({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        })
        return self._token_from_response(payload, refresh_token=refresh_token)

    def get_valid_token(self, token: GmailToken) -> GmailToken:
        """Return ``token`` or a refreshed copy if it has expired"""
        if not token.is_expired():
            return token
        if not token.refresh_token:
            raise GmailNotConnectedError("Token expired and no refresh token available")
        logger.info("Gmail access token expired, refreshing")
        return self.refresh_access_token(token.refresh_token)

    def create_draft(self, token: GmailToken, subject: str, body: str) -> GmailDraft:
        """Create a draft with an empty To: line for the user to address"""
        url = f"{settings.GMAIL_API_BASE_URL}/users/me/drafts"
        payload = {"message": {"raw": build_raw_message(subject, body)}}
        try:
            response = self.http.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {token.access_token}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Gmail API unreachable: {e}", exc_info=True)
            raise GmailApiError(f"Draft request failed: {e}") from e

        if response.status_code == 401:
            raise GmailNotConnectedError("Gmail rejected the access token")
        if response.status_code >= 400:
            raise GmailApiError(f"Gmail API error: {response.text}", response.status_code)

        try:
            return GmailDraft.model_validate(response.json())
        except ValueError as e:
            # JSONDecodeError and ValidationError both subclass ValueError
            raise GmailApiError(f"Unexpected draft response: {e}", response.status_code) from e


class GmailService:
    """Gmail connection state kept in the settings store, plus draft dispatch"""

    def __init__(self, db: Session, http_client: Optional[httpx.Client] = None):
        self.settings = SettingsService(db)
        self._http_client = http_client
        self._owns_http_client = False

    def __enter__(self) -> "GmailService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def http_client(self) -> httpx.Client:
        """Injected client, or one created on first use and owned by this service"""
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=settings.GMAIL_TIMEOUT_SECONDS)
            self._owns_http_client = True
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this service created it"""
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None
            self._owns_http_client = False

    def _client(self) -> GmailClient:
        app_settings = self.settings.get_settings()
        if not app_settings.has_gmail_credentials:
            raise GmailConfigurationError("Gmail client ID and secret must be configured in settings")
        return GmailClient(
            app_settings.gmail_client_id,
            app_settings.gmail_client_secret,
            http_client=self.http_client,
        )

    def _stored_token(self) -> Optional[GmailToken]:
        raw = self.settings.get_value(GMAIL_TOKEN_KEY)
        return GmailToken.model_validate(raw) if raw else None

    def _store_token(self, token: GmailToken) -> None:
        self.settings.set_value(GMAIL_TOKEN_KEY, token.model_dump(mode="json"))

    def start_authorization(self) -> GmailAuthUrlOut:
        """Generate the consent URL and remember the PKCE verifier for the callback"""
        auth_url, state, verifier = self._client().get_auth_url()
        self.settings.set_value(GMAIL_PENDING_AUTH_KEY, {"state": state, "verifier": verifier})
        logger.info("Gmail authorization started")
        return GmailAuthUrlOut(auth_url=auth_url, state=state)

    def complete_authorization(self, code: str, state: str) -> GmailToken:
        """Exchange the callback code for tokens"""
        pending = self.settings.get_value(GMAIL_PENDING_AUTH_KEY)
        if not pending or pending.get("state") != state:
            raise GmailConfigurationError("No matching authorization in progress")

        token = self._client().exchange_code(code, pending["verifier"])
        self._store_token(token)
        self.settings.delete_value(GMAIL_PENDING_AUTH_KEY)
        logger.info("Gmail connected")
        return token

    def status(self) -> GmailStatusOut:
        app_settings = self.settings.get_settings()
        token = self._stored_token()
        now = datetime.now(timezone.utc)
        # An expired token still counts while it can be refreshed
        usable = token is not None and (not token.is_expired(now) or bool(token.refresh_token))
        return GmailStatusOut(
            connected=usable and app_settings.has_gmail_credentials,
            has_token=token is not None,
            has_client_id=bool(app_settings.gmail_client_id),
            has_client_secret=bool(app_settings.gmail_client_secret),
            token_expires_at=token.expires_at if token else None,
            current_time=now,
        )

    def disconnect(self) -> None:
        self.settings.delete_value(GMAIL_TOKEN_KEY, commit=False)
        self.settings.delete_value(GMAIL_PENDING_AUTH_KEY, commit=False)
        self.settings.db.commit()
        logger.info("Gmail disconnected")

    def create_draft(self, subject: str, body: str) -> GmailDraft:
        """Create one draft, refreshing and re-storing the token when needed"""
        token = self._stored_token()
        if token is None:
            raise GmailNotConnectedError("Not authenticated with Gmail")

        client = self._client()
        valid = client.get_valid_token(token)
        if valid is not token:
            self._store_token(valid)

        draft = client.create_draft(valid, subject, body)
        logger.info(f"Gmail draft created: {draft.id}")
        return draft

    def create_drafts(self, invoices: Iterable[InvoiceResult]) -> dict:
        """Create a draft per invoice; failures are collected, not raised"""
        results = {
            "success": 0,
            "failed": 0,
            "errors": [],
            "draft_ids": [],
        }

        for invoice in invoices:
            try:
                draft = self.create_draft(invoice.subject, invoice.body)
            except GmailError as e:
                logger.error(f"Failed to create draft for {invoice.recipient}: {e}")
                results["failed"] += 1
                results["errors"].append(f"{invoice.recipient}: {e}")
                continue

            results["success"] += 1
            results["draft_ids"].append(draft.id)

        return results
