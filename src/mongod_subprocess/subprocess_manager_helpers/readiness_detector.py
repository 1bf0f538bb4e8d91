"""Watch mongod output for the "waiting for connections" readiness marker."""

from __future__ import annotations

import asyncio
import codecs
import logging
from typing import AsyncIterator, Callable, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)
output_logger = logger.getChild("output")

READINESS_MARKER = "waiting for connections"
DEFAULT_CHUNK_SIZE = 4096
DEFAULT_LOOKBEHIND = 256

ReadinessPredicate = Callable[[str], bool]


def marker_predicate(marker: str = READINESS_MARKER) -> ReadinessPredicate:
    """Build a case-insensitive substring predicate for *marker*."""
    needle = marker.lower()

    def _contains_marker(text: str) -> bool:
        return needle in text.lower()

    return _contains_marker


class OutputMultiplexer:
    """Fan several named output streams into one ordered stream of text chunks."""

    def __init__(
        self,
        streams: Mapping[str, Optional[asyncio.StreamReader]],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._streams = {name: stream for name, stream in streams.items() if stream is not None}
        self._chunk_size = chunk_size
        self._queue: asyncio.Queue[Tuple[str, Optional[str]]] = asyncio.Queue()
        self._pumps: List[asyncio.Task] = []

    def start(self) -> None:
        """Start one reader task per stream."""
        if self._pumps:
            return
        for name, stream in self._streams.items():
            self._pumps.append(asyncio.create_task(self._pump(name, stream), name=f"mongod-{name}-pump"))

    async def _pump(self, name: str, stream: asyncio.StreamReader) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                data = await stream.read(self._chunk_size)
                if not data:
                    remainder = decoder.decode(b"", final=True)
                    if remainder:
                        self._queue.put_nowait((name, remainder))
                    break
                text = decoder.decode(data)
                if text:
                    self._queue.put_nowait((name, text))
        except OSError as exc:  # policy_guard: allow-silent-handler
            logger.debug("Stopped reading mongod %s: %s", name, exc)
        finally:
            self._queue.put_nowait((name, None))

    async def chunks(self) -> AsyncIterator[Tuple[str, str]]:
        """Yield ``(stream_name, text)`` until every stream reaches EOF."""
        open_streams = len(self._streams)
        while open_streams:
            name, text = await self._queue.get()
            if text is None:
                open_streams -= 1
                continue
            yield name, text

    async def aclose(self) -> None:
        """Cancel the reader tasks."""
        for task in self._pumps:
            task.cancel()
        await asyncio.gather(*self._pumps, return_exceptions=True)


class ReadinessDetector:
    """
    Single-fire readiness signal over a process's combined output.

    Each chunk is checked together with a short tail of the previous chunk
    from the same stream, so a marker split across two reads still matches.
    Once ready, scanning stops but output keeps being drained so the child
    never blocks on a full pipe.
    """

    def __init__(
        self,
        streams: Mapping[str, Optional[asyncio.StreamReader]],
        predicate: Optional[ReadinessPredicate] = None,
        *,
        lookbehind: int = DEFAULT_LOOKBEHIND,
    ):
        self._multiplexer = OutputMultiplexer(streams)
        self._predicate = predicate or marker_predicate()
        self._lookbehind = lookbehind
        self._tails: Dict[str, str] = {}
        self._ready = False
        self._decided = asyncio.Event()
        self._finished = asyncio.Event()
        self._consumer: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        return self._ready

    def start(self) -> None:
        if self._consumer is not None:
            return
        self._multiplexer.start()
        self._consumer = asyncio.create_task(self._consume(), name="mongod-readiness")

    async def _consume(self) -> None:
        try:
            async for name, text in self._multiplexer.chunks():
                output_logger.debug("[%s] %s", name, text.rstrip())
                if not self._ready and self._matches(name, text):
                    self._ready = True
                    self._decided.set()
                    logger.info("MongoDB readiness marker seen on %s", name)
        finally:
            self._finished.set()
            self._decided.set()

    def _matches(self, name: str, text: str) -> bool:
        window = self._tails.get(name, "") + text
        self._tails[name] = window[-self._lookbehind :]
        return self._predicate(window)

    async def wait_ready(self) -> bool:
        """Return True once ready, or False if all output closed first."""
        await self._decided.wait()
        return self._ready

    async def wait_finished(self) -> None:
        """Wait until every stream reached EOF and all output was scanned."""
        await self._finished.wait()

    async def aclose(self) -> None:
        await self._multiplexer.aclose()
        if self._consumer is not None:
            await asyncio.gather(self._consumer, return_exceptions=True)
