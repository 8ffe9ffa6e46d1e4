"""Registry of open provider channels, keyed by session id."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..errors import SequenceError
from .realtime_channel import RealtimeChannel

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[str, str], RealtimeChannel]
ExpiryCallback = Callable[[str], Awaitable[None]]


@dataclass
class ChannelEntry:
    """An open channel plus the bookkeeping needed to route input to it."""

    session_id: str
    owner: str
    model: str
    channel: RealtimeChannel
    opened_at: float = field(default_factory=time.monotonic)
    last_activity: float = field(default_factory=time.monotonic)
    last_sequence: int | None = None

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_seconds(self, now: float | None = None) -> float:
        return (now if now is not None else time.monotonic()) - self.last_activity


class ChannelRegistry:
    """Owns every open provider channel in this process.

    Built once in the application lifespan and handed to request handlers
    through dependencies. ``start`` launches the idle sweeper and ``shutdown``
    stops it and closes all channels.
    """

    def __init__(
        self,
        channel_factory: ChannelFactory,
        session_timeout: float = 30 * 60,
        cleanup_interval: float = 60,
        on_expired: ExpiryCallback | None = None,
    ):
        self.channel_factory = channel_factory
        self.session_timeout = session_timeout
        self.cleanup_interval = cleanup_interval
        self.on_expired = on_expired
        self._entries: dict[str, ChannelEntry] = {}
        self._open_lock = asyncio.Lock()
        self._cleanup_task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    async def open(self, session_id: str, owner: str, model: str) -> ChannelEntry:
        """Return the open channel for ``session_id``, connecting one if needed."""
        async with self._open_lock:
            existing = self._entries.get(session_id)
            if existing is not None:
                existing.touch()
                return existing

            channel = self.channel_factory(session_id, model)
            await channel.connect()
            entry = ChannelEntry(session_id=session_id, owner=owner, model=model, channel=channel)
            self._entries[session_id] = entry
            logger.info(f"Registered channel for session {session_id} ({len(self._entries)} open)")
            return entry

    def get(self, session_id: str, touch: bool = True) -> ChannelEntry | None:
        entry = self._entries.get(session_id)
        if entry is not None and touch:
            entry.touch()
        return entry

    async def close(self, session_id: str) -> bool:
        entry = self._entries.pop(session_id, None)
        if entry is None:
            return False
        try:
            await entry.channel.close()
        except Exception as e:
            logger.warning(f"Error closing channel for session {session_id}: {e}")
        return True

    def accept_sequence(self, entry: ChannelEntry, sequence_number: int | None) -> None:
        """Check ``sequence_number`` and record it as the last one seen."""
        self.check_sequence(entry, sequence_number)
        if sequence_number is not None:
            entry.last_sequence = sequence_number

    def check_sequence(self, entry: ChannelEntry, sequence_number: int | None) -> None:
        """Reject duplicate or stale sequence numbers; gaps are only logged.

        Nothing is recorded, so a message that later fails can be resent
        with the same number.
        """
        if sequence_number is None:
            return
        last = entry.last_sequence
        if last is not None:
            if sequence_number <= last:
                raise SequenceError(
                    f"Sequence number {sequence_number} is not after {last}",
                    extra={"lastSequenceNumber": last},
                )
            if sequence_number > last + 1:
                logger.warning(
                    f"Session {entry.session_id}: sequence gap {last} -> {sequence_number}"
                )

    async def cleanup_idle(self) -> list[str]:
        """Close channels idle longer than the session timeout."""
        now = time.monotonic()
        expired = [
            session_id
            for session_id, entry in self._entries.items()
            if entry.idle_seconds(now) > self.session_timeout
        ]
        for session_id in expired:
            logger.info(f"Cleaning up inactive session: {session_id}")
            await self.close(session_id)
            if self.on_expired is not None:
                try:
                    await self.on_expired(session_id)
                except Exception:
                    logger.error(f"Expiry handler failed for session {session_id}", exc_info=True)
        return expired

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            await self.cleanup_idle()

    def start(self) -> None:
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def shutdown(self) -> None:
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        session_ids = list(self._entries)
        await asyncio.gather(*(self.close(session_id) for session_id in session_ids))
        if session_ids:
            logger.info(f"Closed {len(session_ids)} channels on shutdown")
