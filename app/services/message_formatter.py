"""Formatting of the outbound Telegram notification."""

from __future__ import annotations

from app.schemas.submission import SubmissionRequest

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)

FOOTER_RULE = "━" * 20


def escape_html(text: str) -> str:
    """Escape the characters Telegram's HTML parse mode treats as markup.

    Only ``&``, ``<`` and ``>`` are replaced; quotes and every other
    character pass through unchanged. ``&`` goes first so produced
    entities are not escaped twice.
    """
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def build_notification_message(submission: SubmissionRequest) -> str:
    """Render a validated submission as Telegram HTML.

    Args:
        submission: Request with non-empty email and description.

    Returns:
        Message text with every user-supplied field escaped.
    """
    email = escape_html(submission.email or "")
    description = escape_html(submission.description or "")
    timestamp = escape_html(submission.timestamp) if submission.timestamp else "-"

    if submission.has_url:
        url_line = f"<code>{escape_html(submission.url or '')}</code>"
    else:
        url_line = "<i>None</i>"

    return (
        "\n"
        "🔔 <b>NEW REQUEST - Scrape &amp; Feature</b>\n"
        "\n"
        "👤 <b>Email:</b>\n"
        f"<code>{email}</code>\n"
        "\n"
        "🔗 <b>Target URL:</b>\n"
        f"{url_line}\n"
        "\n"
        "📝 <b>Request Description:</b>\n"
        f"{description}\n"
        "\n"
        "⏰ <b>Time:</b>\n"
        f"{timestamp}\n"
        "\n"
        f"{FOOTER_RULE}\n"
    )
