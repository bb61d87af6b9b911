"""Share page - the HTML entry point for /view/{share_id} links with social meta tags."""

import html

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_db
from fortyweeks.services import milestone_service, pregnancy_service
from fortyweeks.utils.datetime_parsing import format_long_date

router = APIRouter(tags=["pages"])


def _share_page(share_id: str, title: str, description: str) -> str:
    title = html.escape(title)
    description = html.escape(description)
    share_id = html.escape(share_id)
    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title}</title>
    <meta name="description" content="{description}">
    <meta property="og:type" content="website">
    <meta property="og:title" content="{title}">
    <meta property="og:description" content="{description}">
    <meta name="twitter:card" content="summary">
    <meta name="twitter:title" content="{title}">
    <meta name="twitter:description" content="{description}">
  </head>
  <body style="font-family: sans-serif; padding: 24px;">
    <div id="timeline" data-share-id="{share_id}">
      <h2>{title}</h2>
      <p>{description}</p>
    </div>
  </body>
</html>
"""


@router.get("/view/{share_id}", response_class=HTMLResponse)
def view_timeline(share_id: str, db: Session = Depends(get_db)) -> HTMLResponse:
    """Page shell whose meta tags preview the journey when the link is shared."""
    pregnancy = pregnancy_service.get_pregnancy_by_share_id(db, share_id)
    if not pregnancy:
        raise HTTPException(status_code=404, detail="Timeline not found")

    parent_names = pregnancy_service.parent_names(pregnancy) or "Parent"
    current_week = milestone_service.pregnancy_current_week(pregnancy)
    title = f"Follow {parent_names}'s journey!"
    description = (
        f"Follow {parent_names}'s pregnancy journey. "
        f"Currently at week {current_week}, due {format_long_date(pregnancy.due_date)}"
    )
    return HTMLResponse(content=_share_page(share_id, title, description))
