"""
Pooled SMTP transport for the email channel.

Wraps :mod:`aiosmtplib` with a small connection pool:

* **Connections**: at most ``max_connections`` open at once.  Idle
  connections are reused; one that went stale is replaced transparently.
* **Recycling**: a connection is closed after ``max_messages`` sends.
* **Throughput**: a sliding one-second window caps the pool at
  ``rate_limit`` messages per second; senders over the cap wait.

Implicit TLS is used on port 465; other ports connect in plain text and
upgrade with STARTTLS when the server offers it.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib
import structlog

logger = structlog.get_logger()

_SMTPS_PORT = 465


@dataclass
class _PooledConnection:
    smtp: aiosmtplib.SMTP
    sent: int = 0


class _RateLimiter:
    """Sliding-window limiter: at most *limit* acquisitions per *period* seconds."""

    def __init__(self, limit: int, period: float = 1.0) -> None:
        self.limit = limit
        self.period = period
        self._stamps: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        while self._stamps and self._stamps[0] <= now - self.period:
            self._stamps.popleft()

    async def wait(self) -> None:
        async with self._lock:
            now = time.monotonic()
            self._prune(now)
            if len(self._stamps) >= self.limit:
                delay = self._stamps[0] + self.period - now
                logger.debug("smtp_rate_limited", delay_s=round(delay, 3))
                await asyncio.sleep(delay)
                now = time.monotonic()
                self._prune(now)
            self._stamps.append(now)


class SMTPTransport:
    """Reusable, pooled SMTP connection handle.

    Connections are opened lazily on the first send, so constructing a
    transport performs no network I/O.

    Args:
        host: SMTP server hostname.
        port: SMTP server port.
        username: Auth user (``None`` skips AUTH).
        password: Auth password.
        max_connections: Upper bound on open connections.
        max_messages: Sends per connection before it is recycled.
        rate_limit: Messages per second across the pool.
        connect_timeout: Timeout for connecting and each SMTP command.
        client_factory: Builds a fresh ``aiosmtplib.SMTP``; defaults to one
            configured from the arguments above.

    Raises:
        ValueError: *host* is empty, *port* is out of range, or a pool bound
            is not positive.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: str | None = None,
        password: str | None = None,
        max_connections: int = 5,
        max_messages: int = 100,
        rate_limit: int = 10,
        connect_timeout: float = 10.0,
        client_factory: Callable[[], aiosmtplib.SMTP] | None = None,
    ) -> None:
        if not host:
            raise ValueError("SMTP host is required")
        if not 1 <= int(port) <= 65535:
            raise ValueError(f"invalid SMTP port {port!r}")
        if max_connections < 1 or max_messages < 1 or rate_limit < 1:
            raise ValueError("pool bounds must be positive")

        self.host = host
        self.port = int(port)
        self.username = username or None
        self.password = password
        self.max_connections = max_connections
        self.max_messages = max_messages
        self.connect_timeout = connect_timeout
        self._client_factory = client_factory or self._default_client

        self._idle: list[_PooledConnection] = []
        self._slots = asyncio.Semaphore(max_connections)
        self._rate = _RateLimiter(rate_limit)
        self._closed = False

    @property
    def use_tls(self) -> bool:
        return self.port == _SMTPS_PORT

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def idle_connections(self) -> int:
        return len(self._idle)

    def _default_client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=(self.password or "") if self.username else None,
            use_tls=self.use_tls,
            start_tls=False if self.use_tls else None,
            timeout=self.connect_timeout,
        )

    # ── pool ──

    async def _connect(self) -> _PooledConnection:
        smtp = self._client_factory()
        await smtp.connect()
        logger.debug("smtp_connection_opened", host=self.host, port=self.port)
        return _PooledConnection(smtp=smtp)

    async def _acquire(self) -> _PooledConnection:
        await self._slots.acquire()
        try:
            while self._idle:
                conn = self._idle.pop()
                if conn.smtp.is_connected:
                    return conn
                self._discard(conn)
            return await self._connect()
        except BaseException:
            self._slots.release()
            raise

    def _discard(self, conn: _PooledConnection) -> None:
        try:
            conn.smtp.close()
        except Exception as exc:  # noqa: BLE001
            logger.debug("smtp_close_failed", error=str(exc))

    def _release(self, conn: _PooledConnection, *, broken: bool) -> None:
        if broken or self._closed or conn.sent >= self.max_messages:
            self._discard(conn)
        else:
            self._idle.append(conn)
        self._slots.release()

    # ── delivery ──

    async def send_message(self, message: EmailMessage) -> None:
        """Send *message* over a pooled connection.

        Raises:
            RuntimeError: The transport has been closed.
            aiosmtplib.SMTPException: The server rejected the connection or message.
        """
        if self._closed:
            raise RuntimeError("SMTP transport is closed")

        await self._rate.wait()
        conn = await self._acquire()
        broken = True
        try:
            await conn.smtp.send_message(message)
            conn.sent += 1
            broken = False
        finally:
            self._release(conn, broken=broken)

    def close(self) -> None:
        """Close idle connections and refuse new sends.

        Connections still in use are closed when their send finishes.
        """
        self._closed = True
        while self._idle:
            self._discard(self._idle.pop())
