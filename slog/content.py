"""Content profiles and the rendering of S3 server access log lines."""

import enum
import io
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, Optional, TextIO, Tuple, Union

from slog.errors import UnsupportedContentError

logger = logging.getLogger(__name__)


class ContentProfile(enum.Enum):
    """Which fields of each access log line are displayed."""
    BASIC = "basic"
    REQUESTID = "requestid"
    BUCKET = "bucket"
    RICH = "rich"
    RAW = "raw"

    @classmethod
    def parse(cls, text: str) -> "ContentProfile":
        try:
            return cls(text.strip().lower())
        except (AttributeError, ValueError):
            raise UnsupportedContentError(text) from None


# Bracketed timestamps and quoted strings are single fields even though they contain spaces
FIELD_PATTERN = re.compile(r'\[[^\]]*\]|"(?:[^"\\]|\\.)*"|\S+')

# Field positions counted from the start of the line
BUCKET = 1
TIME = 2
REMOTE_IP = 3
REQUEST_ID = 5
OPERATION = 6
KEY = 7
REQUEST_URI = 8
USER_AGENT = 16


@dataclass(frozen=True)
class AccessLogLine:
    line: str
    spans: Tuple[Tuple[int, int], ...]

    @classmethod
    def parse(cls, line: str) -> "AccessLogLine":
        return cls(line, tuple(m.span() for m in FIELD_PATTERN.finditer(line)))

    @property
    def complete(self) -> bool:
        return len(self.spans) > USER_AGENT

    def field(self, index: int) -> Optional[str]:
        if index >= len(self.spans):
            return None
        start, end = self.spans[index]
        return self.line[start:end]

    def middle(self) -> str:
        """The request URI through the user agent, exactly as logged."""
        return self.line[self.spans[REQUEST_URI][0]:self.spans[USER_AGENT][1]]


def _join(entry: AccessLogLine, leading: Iterable[int]) -> str:
    return " ".join([entry.field(i) for i in leading] + [entry.middle()])


def basic_content(entry: AccessLogLine) -> str:
    """Time, remote IP and the request through to the user agent."""
    return _join(entry, (TIME, REMOTE_IP))


def request_content(entry: AccessLogLine) -> str:
    """Basic content plus the S3 generated request ID."""
    return _join(entry, (TIME, REMOTE_IP, REQUEST_ID))


def bucket_content(entry: AccessLogLine) -> str:
    """Basic content plus the name of the bucket the request was served from."""
    return _join(entry, (BUCKET, TIME, REMOTE_IP))


def rich_content(entry: AccessLogLine) -> str:
    """Everything except owner and requester IDs and the trailing TLS/auth noise."""
    return _join(entry, (BUCKET, TIME, REMOTE_IP, REQUEST_ID, OPERATION, KEY))


RENDERERS = {
    ContentProfile.BASIC: basic_content,
    ContentProfile.REQUESTID: request_content,
    ContentProfile.BUCKET: bucket_content,
    ContentProfile.RICH: rich_content,
}


class LineRenderer:
    """Turns downloaded log object content into display lines."""

    def __init__(self, content: ContentProfile, source_buckets: Optional[Iterable[str]] = None):
        if content is not ContentProfile.RAW and content not in RENDERERS:
            raise UnsupportedContentError(content)
        self.content = content
        self.source_buckets = frozenset(source_buckets or ())

    def render(self, data: bytes) -> Iterator[Union[str, bytes]]:
        """Yield display lines, or for raw content the stored bytes untouched."""

        # Raw output reproduces the stored object exactly and ignores source bucket filters
        if self.content is ContentProfile.RAW:
            yield data
            return

        render_line = RENDERERS[self.content]
        for line in data.decode("utf-8", errors="replace").split("\n"):
            if not line:
                continue

            entry = AccessLogLine.parse(line)
            if self.source_buckets and entry.field(BUCKET) not in self.source_buckets:
                continue

            if not entry.complete:
                logger.debug("Passing through line with %d fields: %s", len(entry.spans), line)
                yield line
                continue

            yield render_line(entry)

    def _chunks(self, data: bytes) -> Iterator[bytes]:
        for chunk in self.render(data):
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8") + b"\n"
            yield chunk

    def write(self, data: bytes, out: Union[TextIO, BinaryIO]) -> None:
        """Write each line, or the raw object, to out as soon as it is rendered."""
        sink = binary_sink(out)
        if sink is None:
            # Text only streams such as StringIO cannot hold arbitrary bytes
            for chunk in self._chunks(data):
                print(chunk.decode("utf-8", errors="replace"), end="", file=out, flush=True)
            return

        if sink is not out:
            # Text already buffered above the byte stream must come out first
            out.flush()
        for chunk in self._chunks(data):
            sink.write(chunk)
            sink.flush()


def binary_sink(out: Union[TextIO, BinaryIO]) -> Optional[BinaryIO]:
    """The byte stream beneath out, out itself if it takes bytes, or None."""
    if isinstance(out, io.TextIOBase):
        return getattr(out, "buffer", None)
    return out
