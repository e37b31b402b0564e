"""StdioServerTransport — newline-delimited JSON over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any
from uuid import uuid4

from gitmcp.transports.base import MessageDecodeError, TransportClosedError

_STREAM_LIMIT = 16 * 1024 * 1024


class StdioServerTransport:
    """Serves one client over the process's standard streams.

    Each message is a single line of JSON.  *reader* and *writer* default to
    asyncio streams bound to ``sys.stdin``/``sys.stdout`` when
    :meth:`start` runs; tests inject their own.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader | None = None,
        writer: asyncio.StreamWriter | None = None,
    ) -> None:
        self._session_id = uuid4().hex
        self._reader = reader
        self._writer = writer
        self._write_lock = asyncio.Lock()
        self._closed = False

    @property
    def session_id(self) -> str:
        return self._session_id

    async def start(self) -> None:
        """Bind asyncio streams to stdin/stdout unless already provided."""
        loop = asyncio.get_running_loop()
        if self._reader is None:
            reader = asyncio.StreamReader(limit=_STREAM_LIMIT)
            await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
            self._reader = reader
        if self._writer is None:
            transport, protocol = await loop.connect_write_pipe(
                asyncio.streams.FlowControlMixin, sys.stdout
            )
            self._writer = asyncio.StreamWriter(transport, protocol, None, loop)

    async def send(self, message: dict[str, Any]) -> None:
        """Write *message* as one JSON line."""
        if self._closed:
            msg = "Transport closed"
            raise TransportClosedError(msg)
        if self._writer is None:
            msg = "Transport not started"
            raise RuntimeError(msg)
        line = json.dumps(message, separators=(",", ":")) + "\n"
        async with self._write_lock:
            self._writer.write(line.encode())
            await self._writer.drain()

    async def receive(self) -> Any:
        """Read the next JSON line, skipping blank lines."""
        if self._reader is None:
            msg = "Transport not started"
            raise RuntimeError(msg)
        while True:
            if self._closed:
                msg = "Transport closed"
                raise TransportClosedError(msg)
            line = await self._readline()
            if not line:
                msg = "stdin closed"
                raise TransportClosedError(msg)
            if not line.strip():
                continue
            try:
                return json.loads(line.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise MessageDecodeError(line, str(exc)) from exc

    async def _readline(self) -> bytes:
        """Return the next line, or raise after discarding one over the limit."""
        assert self._reader is not None
        try:
            return await self._reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            return exc.partial
        except asyncio.LimitOverrunError as exc:
            consumed = exc.consumed
        # readuntil leaves overlong data buffered; drop it up to the next newline.
        while True:
            await self._reader.readexactly(consumed)
            try:
                await self._reader.readuntil(b"\n")
                break
            except asyncio.IncompleteReadError:
                break
            except asyncio.LimitOverrunError as exc:
                consumed = exc.consumed
        msg = "Message exceeds the stream limit"
        raise MessageDecodeError(b"", msg)

    async def close(self) -> None:
        """Stop accepting messages.  stdout is left open for the process."""
        self._closed = True
