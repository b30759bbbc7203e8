"""
New record announcements.

Announcing never blocks a submission: publish() puts the record on a bounded
queue and returns. A single worker task drains the queue and posts each record
to a Discord webhook. When the queue is full the record is dropped and logged.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .catalogue import Hole, Lang
from .config import (
    ANNOUNCE_QUEUE_SIZE,
    ANNOUNCE_TIMEOUT_SECONDS,
    DISCORD_WEBHOOK_URL,
    SITE_URL,
)
from .ranks import RankUpdate

logger = logging.getLogger(__name__)


@dataclass
class RecordAnnouncement:
    golfer_name: str
    hole: Hole
    lang: Lang
    updates: List[RankUpdate]


def discord_payload(announcement: RecordAnnouncement, site_url: str = SITE_URL) -> Dict[str, Any]:
    """Webhook body with one embed field per record-breaking scoring."""
    hole, lang = announcement.hole, announcement.lang
    return {
        "embeds": [{
            "title": f"New 🏆 on {hole.name} in {lang.name}!",
            "url": f"{site_url}/{hole.id}#{lang.id}",
            "author": {
                "name": announcement.golfer_name,
                "url": f"{site_url}/golfers/{announcement.golfer_name}",
            },
            "fields": [
                {
                    "name": update.scoring.value.capitalize(),
                    "value": f"{update.to.strokes:,}",
                    "inline": True,
                }
                for update in announcement.updates
            ],
        }],
    }


class RecordAnnouncer:
    """
    Bounded, fire-and-forget record announcements.

    Usage:
        announcer = RecordAnnouncer()
        await announcer.start()
        announcer.publish("alice", hole, lang, records)
        await announcer.stop()
    """

    def __init__(
        self,
        webhook_url: str = DISCORD_WEBHOOK_URL,
        max_queue_size: int = ANNOUNCE_QUEUE_SIZE,
        timeout_seconds: int = ANNOUNCE_TIMEOUT_SECONDS,
    ):
        self.webhook_url = webhook_url
        self.max_queue_size = max_queue_size
        self.timeout_seconds = timeout_seconds
        self.dropped = 0
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._worker = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the worker. Queued announcements are discarded."""
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        self._queue = None

    async def drain(self) -> None:
        """Wait until every queued announcement has been handled."""
        if self._queue is not None:
            await self._queue.join()

    def publish(self, golfer_name: str, hole: Hole, lang: Lang, updates: List[RankUpdate]) -> bool:
        """Queue an announcement. Never raises and never waits."""
        if not updates:
            return False

        if not self.running:
            logger.warning(f"Announcer not running, dropping record by {golfer_name} on {hole.id}/{lang.id}")
            self.dropped += 1
            return False

        try:
            self._queue.put_nowait(RecordAnnouncement(golfer_name, hole, lang, list(updates)))
            return True
        except asyncio.QueueFull:
            logger.warning(f"Announcement queue full, dropping record by {golfer_name} on {hole.id}/{lang.id}")
            self.dropped += 1
            return False

    async def _run(self) -> None:
        while True:
            announcement = await self._queue.get()
            try:
                await asyncio.to_thread(self.send, announcement)
            except Exception:
                logger.exception(
                    f"Failed to announce record by {announcement.golfer_name} "
                    f"on {announcement.hole.id}/{announcement.lang.id}"
                )
            finally:
                self._queue.task_done()

    def send(self, announcement: RecordAnnouncement) -> None:
        if not self.webhook_url:
            logger.info(
                f"New record by {announcement.golfer_name} on "
                f"{announcement.hole.id}/{announcement.lang.id} (no webhook configured)"
            )
            return

        response = requests.post(
            self.webhook_url,
            json=discord_payload(announcement),
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
