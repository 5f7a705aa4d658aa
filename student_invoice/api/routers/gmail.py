# student_invoice/api/routers/gmail.py - Gmail connection
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import HTMLResponse
import logging

from student_invoice.api.deps.services import get_gmail_service
from student_invoice.schemas.gmail import GmailAuthUrlOut, GmailStatusOut
from student_invoice.services.gmail_service import (
    GmailApiError,
    GmailConfigurationError,
    GmailService,
)

logger = logging.getLogger(__name__)
router = APIRouter()

CALLBACK_PAGE = """<!DOCTYPE html>
<html>
<head><title>Student Invoice</title></head>
<body>
<h2>{message}</h2>
<p>You can close this window and return to Student Invoice.</p>
</body>
</html>"""


@router.post("/auth-url", response_model=GmailAuthUrlOut)
async def get_auth_url(service: GmailService = Depends(get_gmail_service)):
    """Start the OAuth flow; the shell opens the returned URL in a browser"""
    try:
        return service.start_authorization()
    except GmailConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/callback", response_class=HTMLResponse)
def oauth_callback(
    code: str = Query(...),
    state: str = Query(...),
    service: GmailService = Depends(get_gmail_service),
):
    """Redirect target for Google's consent screen"""
    try:
        service.complete_authorization(code, state)
    except GmailConfigurationError as e:
        logger.warning(f"OAuth callback rejected: {e}")
        return HTMLResponse(CALLBACK_PAGE.format(message="Authorization failed"), status_code=400)
    except GmailApiError as e:
        logger.error(f"OAuth code exchange failed: {e}")
        return HTMLResponse(CALLBACK_PAGE.format(message="Authorization failed"), status_code=502)

    return HTMLResponse(CALLBACK_PAGE.format(message="Gmail connected successfully"))


@router.get("/status", response_model=GmailStatusOut)
async def get_status(service: GmailService = Depends(get_gmail_service)):
    return service.status()


@router.post("/disconnect", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(service: GmailService = Depends(get_gmail_service)):
    service.disconnect()
