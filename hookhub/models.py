"""Typed models for inbound webhook deliveries and outbound notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class IncomingEvent:
    """A webhook delivery that passed the signature gate."""
    event_type: str
    raw_body: bytes
    payload: dict[str, Any]
    signature: str


@dataclass(frozen=True)
class Attachment:
    fallback: str
    color: str | None = None
    author_name: str | None = None
    author_link: str | None = None
    author_icon: str | None = None
    title: str | None = None
    title_link: str | None = None
    text: str | None = None
    footer: str | None = None
    ts: int | None = None

    def __post_init__(self) -> None:
        # Slack rejects attachments without a plain-text fallback
        if not self.fallback:
            raise ValueError("attachment fallback text is required")

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("fallback", self.fallback),
                ("color", self.color),
                ("author_name", self.author_name),
                ("author_link", self.author_link),
                ("author_icon", self.author_icon),
                ("title", self.title),
                ("title_link", self.title_link),
                ("text", self.text),
                ("footer", self.footer),
                ("ts", self.ts),
            )
            if value is not None
        }


@dataclass(frozen=True)
class NotificationSection:
    lead_text: str
    attachment: Attachment | None = None


@dataclass(frozen=True)
class NotificationMessage:
    username: str
    icon_emoji: str
    channel: str
    sections: tuple[NotificationSection, ...] = ()

    @property
    def text(self) -> str:
        """Lead texts in order, repeated lines collapsed into one."""
        seen: list[str] = []
        for section in self.sections:
            if section.lead_text not in seen:
                seen.append(section.lead_text)
        return "".join(seen)

    @property
    def attachments(self) -> list[Attachment]:
        return [s.attachment for s in self.sections if s.attachment is not None]

    def to_dict(self) -> dict[str, Any]:
        """Render the Slack incoming-webhook JSON body."""
        body: dict[str, Any] = {
            "username": self.username,
            "icon_emoji": self.icon_emoji,
            "channel": self.channel,
        }
        if self.text:
            body["text"] = self.text
        attachments = self.attachments
        if attachments:
            body["attachments"] = [a.to_dict() for a in attachments]
        return body


@dataclass
class MessageBuilder:
    """Accumulates sections and produces an immutable NotificationMessage."""
    username: str
    icon_emoji: str
    channel: str
    _sections: list[NotificationSection] = field(default_factory=list, init=False, repr=False)

    def add(self, lead_text: str, attachment: Attachment | None = None) -> MessageBuilder:
        self._sections.append(NotificationSection(lead_text, attachment))
        return self

    def build(self) -> NotificationMessage:
        return NotificationMessage(
            username=self.username,
            icon_emoji=self.icon_emoji,
            channel=self.channel,
            sections=tuple(self._sections),
        )
