"""Abstract transport base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from hookhub.models import NotificationMessage


class Transport(ABC):
    @property
    @abstractmethod
    def platform_name(self) -> str: ...

    @abstractmethod
    async def send(self, message: NotificationMessage) -> Any:
        """Deliver ``message`` and return the downstream response body."""
        ...

    async def close(self) -> None:
        return None
