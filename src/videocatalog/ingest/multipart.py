"""Incremental multipart/form-data decoding over an async byte stream.

``MultipartReader`` turns a forward-only body stream into a sequence of
``UploadSection`` objects, each exposing its own lazy chunk stream. The
push-style ``python_multipart`` parser is fed one inbound chunk at a time
and its callbacks are queued as events, so memory use is bounded by the
size of a single inbound chunk no matter how large the upload is.
"""

from collections import deque
from typing import AsyncIterable, AsyncIterator, Deque, Dict, Optional, Tuple

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from videocatalog.core.exceptions import IncompleteBodyError, MultipartFormatError

_HEADERS = "headers"
_DATA = "data"
_END = "end"

Event = Tuple[str, object]


def normalize_file_name(raw: str) -> str:
    """Trim surrounding quotes and any client-side directory components."""
    name = raw.strip().strip('"').strip()
    # Some clients send the full local path
    return name.replace("\\", "/").rsplit("/", 1)[-1]


class UploadSection:
    """One part of a multipart body.

    The body is not buffered: ``chunks()`` pulls from the shared reader and
    can only be consumed once, before the next section is requested.
    """

    def __init__(self, reader: "MultipartReader", headers: Dict[str, str]):
        self._reader = reader
        self.headers = headers
        self.bytes_read = 0
        self.complete = False

        disposition, params = parse_options_header(headers.get("content-disposition", ""))
        self.disposition_type = disposition.decode("latin-1").lower()
        self.field_name = _param(params, b"name")
        raw_file_name = _param(params, b"filename")
        self.file_name = normalize_file_name(raw_file_name) if raw_file_name else None

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def is_file(self) -> bool:
        """True for form-data parts that carry a non-empty file name."""
        return self.disposition_type == "form-data" and bool(self.file_name)

    async def chunks(self) -> AsyncIterator[bytes]:
        """Yield the section body chunk by chunk.

        Raises:
            IncompleteBodyError: If the body ends before the section does
            MultipartFormatError: If the body cannot be decoded
        """
        while not self.complete:
            event = await self._reader._next_event()
            if event is None:
                raise IncompleteBodyError("Multipart body ended inside a section")

            kind, payload = event
            if kind == _DATA:
                self.bytes_read += len(payload)
                yield payload
            elif kind == _END:
                self.complete = True

    async def discard(self) -> None:
        """Consume the rest of the body without keeping it."""
        async for _ in self.chunks():
            pass


class MultipartReader:
    """Reads sections one at a time from a streamed multipart body."""

    def __init__(self, stream: AsyncIterable[bytes], boundary: str):
        if not boundary:
            raise ValueError("boundary is required")

        self._stream = stream.__aiter__()
        self._events: Deque[Event] = deque()
        self._exhausted = False
        self._current: Optional[UploadSection] = None

        self._header_field = bytearray()
        self._header_value = bytearray()
        self._headers: Dict[str, str] = {}

        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
            },
        )

    async def next_section(self) -> Optional[UploadSection]:
        """Advance to the next section, skipping whatever is left of the current one.

        Returns:
            The next section, or None once the body is exhausted
        """
        if self._current is not None and not self._current.complete:
            await self._current.discard()
        self._current = None

        while True:
            event = await self._next_event()
            if event is None:
                return None

            kind, payload = event
            if kind == _HEADERS:
                self._current = UploadSection(self, payload)
                return self._current

    def __aiter__(self) -> "MultipartReader":
        return self

    async def __anext__(self) -> UploadSection:
        section = await self.next_section()
        if section is None:
            raise StopAsyncIteration
        return section

    async def _next_event(self) -> Optional[Event]:
        """Pop the next parser event, reading more of the body as needed."""
        while not self._events:
            if self._exhausted:
                return None

            try:
                chunk = await self._stream.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                self._parser.finalize()
                continue

            if chunk:
                try:
                    self._parser.write(chunk)
                except MultipartParseError as e:
                    self._exhausted = True
                    raise MultipartFormatError(f"Malformed multipart body: {e}") from e

        return self._events.popleft()

    # Parser callbacks

    def _on_part_begin(self) -> None:
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        name = self._header_field.decode("latin-1").strip().lower()
        self._headers[name] = self._header_value.decode("latin-1").strip()
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        self._events.append((_HEADERS, self._headers))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._events.append((_DATA, bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._events.append((_END, None))


def _param(params: Dict[bytes, bytes], key: bytes) -> Optional[str]:
    value = params.get(key)
    if value is None:
        return None
    return value.decode("utf-8", errors="replace")


def parse_boundary(content_type: Optional[str]) -> Optional[str]:
    """Extract the boundary parameter from a Content-Type header value."""
    if not content_type:
        return None
    _, params = parse_options_header(content_type)
    boundary = params.get(b"boundary")
    if not boundary:
        return None
    return boundary.decode("latin-1")
