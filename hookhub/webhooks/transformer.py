"""Turn GitHub event payloads into Slack notifications."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from hookhub.config import SlackOptions
from hookhub.models import Attachment, MessageBuilder, NotificationMessage
from hookhub.utils.logging import get_logger

log = get_logger(__name__)

FALLBACK_TEXT = "Required plain-text summary of the attachment."
COLOR = "#0000cc"
FOOTER = "Via: hookhub"


class EventKind(str, Enum):
    PUSH = "push"
    ISSUES = "issues"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, tag: str) -> EventKind:
        """Map an X-GitHub-Event value onto a known kind, or UNKNOWN."""
        if tag in (cls.PUSH.value, cls.ISSUES.value):
            return cls(tag)
        return cls.UNKNOWN


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def to_epoch_seconds(value: str | None) -> int | None:
    """Parse an ISO-8601 timestamp into whole epoch seconds (half rounds up).

    Timestamps without an offset are read as UTC. Returns None for missing
    or unparseable values.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return math.floor(parsed.timestamp() + 0.5)


def _obj(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _repo_name(payload: dict[str, Any]) -> str:
    return _obj(payload.get("repository")).get("name") or "unknown"


# ---------------------------------------------------------------------------
# Per-event builders
# ---------------------------------------------------------------------------

def _push(builder: MessageBuilder, event_type: str, payload: dict[str, Any]) -> None:
    lead = f"The following commit(s) got pushed to '{_repo_name(payload)}':\r\r"
    sender = _obj(payload.get("sender"))
    commits = payload.get("commits")
    if not isinstance(commits, list):
        commits = []

    for commit in commits:
        if not isinstance(commit, dict):
            continue
        builder.add(
            lead,
            Attachment(
                fallback=FALLBACK_TEXT,
                color=COLOR,
                author_name=sender.get("login"),
                author_link=sender.get("html_url"),
                author_icon=sender.get("avatar_url"),
                title=f"Commit: {commit.get('id', '')}",
                title_link=commit.get("url"),
                text=commit.get("message"),
                footer=FOOTER,
                ts=to_epoch_seconds(commit.get("timestamp")),
            ),
        )


def _issues(builder: MessageBuilder, event_type: str, payload: dict[str, Any]) -> None:
    action = payload.get("action", "")
    issue = _obj(payload.get("issue"))
    user = _obj(issue.get("user"))
    login = user.get("login", "unknown")
    number = issue.get("number", "?")
    title = issue.get("title", "")

    if action == "closed":
        lead = f"Issue {number} - {title} was closed by {login}\r\r"
        body = "See issue for closing comment"
        ts = to_epoch_seconds(issue.get("closed_at"))
    else:
        lead = f"Issue {number} - {title} was {action} by {login}\r\r"
        body = "See issue for more info"
        # closed_at is null for issues that were never closed
        ts = to_epoch_seconds(issue.get("closed_at") or issue.get("updated_at"))

    builder.add(
        lead,
        Attachment(
            fallback=FALLBACK_TEXT,
            color=COLOR,
            author_name=user.get("login"),
            author_link=user.get("html_url"),
            author_icon=user.get("avatar_url"),
            title=f"Issue: {number}",
            title_link=issue.get("html_url"),
            text=body,
            footer=FOOTER,
            ts=ts,
        ),
    )


def _unknown(builder: MessageBuilder, event_type: str, payload: dict[str, Any]) -> None:
    builder.add(
        f"We received a new '{event_type}' notification for "
        f"'{_repo_name(payload)}', but we didn't know what to do with this event!"
    )


_BUILDERS: dict[EventKind, Callable[[MessageBuilder, str, dict[str, Any]], None]] = {
    EventKind.PUSH: _push,
    EventKind.ISSUES: _issues,
    EventKind.UNKNOWN: _unknown,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def generate_message(
    event_type: str, payload: dict[str, Any], options: SlackOptions
) -> NotificationMessage:
    """Build the notification for one GitHub delivery.

    Pure function of its arguments: the same event type, payload and
    options always produce an equal message. Unknown event types yield a
    single generic notice rather than an error.
    """
    kind = EventKind.parse(event_type)
    log.debug("generating_message", event_type=event_type, kind=kind.value)

    builder = MessageBuilder(
        username=options.username,
        icon_emoji=options.icon_emoji,
        channel=options.channel,
    )
    _BUILDERS[kind](builder, event_type, payload)
    message = builder.build()

    log.debug("message_generated", event_type=event_type, sections=len(message.sections))
    return message
