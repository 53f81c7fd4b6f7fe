"""Read web access logs stored in S3 for a given time window."""

from slog.content import ContentProfile
from slog.errors import (
    DownloadError,
    ListingError,
    SessionActivationError,
    SlogError,
    UnsupportedContentError,
)
from slog.read import display_log
from slog.session import SlogSession

__all__ = [
    "ContentProfile",
    "DownloadError",
    "ListingError",
    "SessionActivationError",
    "SlogError",
    "SlogSession",
    "UnsupportedContentError",
    "display_log",
]
