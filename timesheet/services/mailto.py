from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from timesheet.services.dates import month_name

if TYPE_CHECKING:
    from timesheet.schemas.settings import Configuration


def build_subject(config: Configuration) -> str:
    subject = f"Timesheet - {month_name(config.month)} {config.year}"
    if config.name:
        subject += f" - {config.name}"
    return subject


def build_body(config: Configuration) -> str:
    return f"Hi,\n\nPlease find my timesheet for {month_name(config.month)} {config.year} attached.\n\nThanks"


def build_mailto_link(config: Configuration) -> str | None:
    """Compose a mailto link to the configured recipients, or None without recipients."""
    if not config.email_to:
        return None
    subject = quote(build_subject(config), safe="")
    body = quote(build_body(config), safe="")
    return f"mailto:{config.email_to}?subject={subject}&body={body}"
