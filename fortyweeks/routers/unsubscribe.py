"""Unsubscribe links from village emails."""

import html

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from fortyweeks.core.config import settings
from fortyweeks.core.deps import get_db
from fortyweeks.core.rate_limit import limiter
from fortyweeks.services import village_service

router = APIRouter(prefix="/email", tags=["email"])

UNSUBSCRIBED = (
    "Unsubscribed",
    "You will no longer receive pregnancy update emails.",
)
# Unknown tokens get a neutral page so links can't be probed for validity.
RECEIVED = (
    "Unsubscribe request received",
    "If this link is valid, its address has been unsubscribed.",
)


def _page(title: str, message: str) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html lang="en">
  <head><meta charset="utf-8"><title>{html.escape(title)} - {html.escape(settings.SENDER_NAME)}</title></head>
  <body style="font-family: sans-serif; padding: 24px;">
    <h2>{html.escape(title)}</h2>
    <p>{html.escape(message)}</p>
  </body>
</html>
"""
    )


@router.api_route("/unsubscribe/{token}", methods=["GET", "POST"], response_class=HTMLResponse)
@limiter.exempt
def unsubscribe(token: str, db: Session = Depends(get_db)) -> HTMLResponse:
    """Link clicks (GET) and List-Unsubscribe-Post one-click requests (POST)."""
    member = village_service.unsubscribe(db, token)
    if member is None:
        return _page(*RECEIVED)
    db.commit()
    return _page(*UNSUBSCRIBED)
