"""
Location: bluepages_mcp/notifications.py

Summary:
    Best-effort notifications to the MCP host: log-message notifications
    (credit alerts, batch progress) and progress notifications for callers
    that supplied a progress token. Delivery failures are logged locally
    and never raised.

Usage:
    server.py builds one SessionNotifier bound to the MCP server; credits.py
    and tools.py call notify()/progress() on it.

Example:
    notifier = SessionNotifier(server)
    await notifier.notify("warning", "Low credits: 900 remaining.", {"credits": 900})
"""

import logging
from typing import Any, Literal, Optional, Protocol

logger = logging.getLogger(__name__)

NotificationLevel = Literal["debug", "info", "notice", "warning", "error", "critical"]

LOGGER_NAME = "bluepages"

# RFC 5424 severities, lowest first
LEVEL_ORDER = ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")


class Notifier(Protocol):
    """Protocol for host notifications. Implementations must not raise."""

    async def notify(
        self,
        level: NotificationLevel,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        ...

    async def progress(
        self,
        current: float,
        total: Optional[float] = None,
        message: Optional[str] = None,
    ) -> None:
        ...


class NullNotifier:
    """Notifier that only writes to the local log."""

    async def notify(
        self,
        level: NotificationLevel,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        logger.debug("[%s] %s", level, message)

    async def progress(
        self,
        current: float,
        total: Optional[float] = None,
        message: Optional[str] = None,
    ) -> None:
        return None


class SessionNotifier:
    """
    Sends notifications through the session of the request being handled.

    The session is looked up at send time from the server's request
    context, so one instance serves every request. Outside a request there
    is nobody to notify and the call is a no-op.
    """

    def __init__(self, server: Any):
        """
        Args:
            server: mcp.server.lowlevel.Server instance
        """
        self._server = server
        self.min_level: Optional[str] = None

    def set_level(self, level: str) -> None:
        """Drop host notifications below this severity (logging/setLevel)."""
        if level not in LEVEL_ORDER:
            raise ValueError(f"Unknown logging level: {level}")
        self.min_level = level

    def _enabled(self, level: str) -> bool:
        if self.min_level is None:
            return True
        return LEVEL_ORDER.index(level) >= LEVEL_ORDER.index(self.min_level)

    def _context(self) -> Any:
        try:
            return self._server.request_context
        except LookupError:
            return None

    async def notify(
        self,
        level: NotificationLevel,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Send a notifications/message to the host.

        Args:
            level: Severity ("info", "warning", "error", ...)
            message: Human-readable text
            data: Optional structured payload merged next to the message
        """
        if not self._enabled(level):
            return

        ctx = self._context()
        if ctx is None:
            logger.debug("No active request; dropping notification: %s", message)
            return

        payload = {"message": message, **(data or {})}
        try:
            await ctx.session.send_log_message(
                level=level,
                data=payload,
                logger=LOGGER_NAME,
                related_request_id=ctx.request_id,
            )
        except Exception as e:
            logger.warning("Failed to send notification: %s", e)

    async def progress(
        self,
        current: float,
        total: Optional[float] = None,
        message: Optional[str] = None,
    ) -> None:
        """
        Send a notifications/progress if the caller asked for progress.

        Args:
            current: Progress so far
            total: Total expected, if known
            message: Optional status text
        """
        ctx = self._context()
        if ctx is None or ctx.meta is None or ctx.meta.progressToken is None:
            return

        try:
            await ctx.session.send_progress_notification(
                progress_token=ctx.meta.progressToken,
                progress=current,
                total=total,
                message=message,
                related_request_id=ctx.request_id,
            )
        except Exception as e:
            logger.warning("Failed to send progress notification: %s", e)
