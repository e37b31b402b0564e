"""DiscoveryNotifier — tells every attached client that the tool list changed."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from gitmcp.server.protocol import NOTIFICATION_TOOLS_LIST_CHANGED

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gitmcp.server.session import SessionManager

logger = logging.getLogger(__name__)


class DiscoveryNotifier:
    """Fans ``notifications/tools/list_changed`` out to all sessions.

    Only active when dynamic tool discovery is enabled, and only for real
    changes: comparing the visible tool names before and after a change is
    what decides whether anything is sent.
    """

    def __init__(self, sessions: SessionManager, *, enabled: bool = False) -> None:
        self._sessions = sessions
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def tools_changed(self, previous: Sequence[str], current: Sequence[str]) -> int:
        """Notify all sessions if *current* differs from *previous*.

        Returns the number of sessions notified.
        """
        if not self._enabled:
            return 0
        if tuple(previous) == tuple(current):
            logger.debug("Tool list unchanged, no notification sent")
            return 0
        return await self.broadcast()

    async def broadcast(self) -> int:
        """Send the change notification to every attached session."""
        sessions = list(self._sessions)
        results = await asyncio.gather(
            *(s.send_notification(NOTIFICATION_TOOLS_LIST_CHANGED) for s in sessions),
            return_exceptions=True,
        )
        delivered = 0
        for session, result in zip(sessions, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Failed to notify session %s of tool list change: %s",
                    session.session_id,
                    result,
                )
            else:
                delivered += 1
        logger.info("Tool list change sent to %d session(s)", delivered)
        return delivered
