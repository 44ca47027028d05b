"""
Outbound command channel for confirmations and notifications.

The calendar and the booking wizard never talk to dialogs directly. They
send commands into a channel: a ``ConfirmRequest`` suspends the caller
until the UI answers, a ``Notice`` is fire-and-forget. Any UI toolkit (or
a script) sits on the other end.

Usage:
    channel = QueuedNotificationChannel()
    # business side
    approved = await channel.confirm("Move appointment", "Move ... to ...?")
    # UI side
    command = await channel.next_command()
    if isinstance(command, ConfirmRequest):
        command.respond(True)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    CONFLICT = "conflict"


class ConfirmTone(str, Enum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class Notice:
    """Transient success/error message."""
    level: NoticeLevel
    message: str


@dataclass
class ConfirmRequest:
    """Yes/no question; the sender awaits ``answer``."""
    title: str
    message: str
    tone: ConfirmTone = ConfirmTone.INFO
    answer: Optional[asyncio.Future] = field(default=None, repr=False)

    def respond(self, approved: bool) -> None:
        if self.answer is not None and not self.answer.done():
            self.answer.set_result(approved)


Command = Union[ConfirmRequest, Notice]


class NotificationChannel(ABC):
    """Base channel. Subclasses decide how confirmations get answered."""

    def __init__(self) -> None:
        self.history: list[Command] = []

    @abstractmethod
    async def confirm(
        self, title: str, message: str, tone: ConfirmTone = ConfirmTone.INFO
    ) -> bool:
        """Ask the user and return their answer."""

    def notify(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self.history.append(notice)
        self._deliver(notice)
        logger.debug("Notice [%s]: %s", level.value, message)
        return notice

    def success(self, message: str) -> Notice:
        return self.notify(NoticeLevel.SUCCESS, message)

    def error(self, message: str) -> Notice:
        return self.notify(NoticeLevel.ERROR, message)

    def conflict(self, message: str) -> Notice:
        return self.notify(NoticeLevel.CONFLICT, message)

    def _deliver(self, command: Command) -> None:
        """Hand a command to the presentation side."""

    # Convenience views over history, mostly for demos and tests
    @property
    def notices(self) -> list[Notice]:
        return [c for c in self.history if isinstance(c, Notice)]

    @property
    def confirmations(self) -> list[ConfirmRequest]:
        return [c for c in self.history if isinstance(c, ConfirmRequest)]


class QueuedNotificationChannel(NotificationChannel):
    """Message-passing channel: commands go to an outbox a UI loop drains."""

    def __init__(self) -> None:
        super().__init__()
        self._outbox: asyncio.Queue = asyncio.Queue()

    async def confirm(
        self, title: str, message: str, tone: ConfirmTone = ConfirmTone.INFO
    ) -> bool:
        loop = asyncio.get_running_loop()
        request = ConfirmRequest(title=title, message=message, tone=tone, answer=loop.create_future())
        self.history.append(request)
        self._deliver(request)
        approved = await request.answer
        logger.debug("Confirmation '%s' answered: %s", title, approved)
        return bool(approved)

    def _deliver(self, command: Command) -> None:
        self._outbox.put_nowait(command)

    async def next_command(self) -> Command:
        return await self._outbox.get()

    def pending(self) -> int:
        return self._outbox.qsize()


class ScriptedNotificationChannel(NotificationChannel):
    """Answers confirmations from a fixed script, in order.

    When the script runs out every further confirmation gets ``default``.
    Used by the offline console demo to replay scenarios.
    """

    def __init__(self, answers: Optional[list[bool]] = None, default: bool = True) -> None:
        super().__init__()
        self._answers = list(answers or [])
        self._default = default

    async def confirm(
        self, title: str, message: str, tone: ConfirmTone = ConfirmTone.INFO
    ) -> bool:
        request = ConfirmRequest(title=title, message=message, tone=tone)
        self.history.append(request)
        approved = self._answers.pop(0) if self._answers else self._default
        logger.debug("Scripted confirmation '%s' -> %s", title, approved)
        return approved
