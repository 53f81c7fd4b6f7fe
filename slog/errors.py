"""
Exceptions raised by the slog read pipeline.

Each pipeline stage raises exactly one of these and stops; the first one to
reach the orchestrator is the outcome of the whole run.
"""


class SlogError(Exception):
    """Base class for all slog failures."""


class SessionActivationError(SlogError):
    """Raised when an S3 client cannot be created for the session region."""

    def __init__(self, region, details=None):
        self.region = region
        msg = f"Error creating session for region {region!r}"
        if details:
            msg += f": {details}"
        super().__init__(msg)


class ListingError(SlogError):
    """Raised when listing the log object keys of a bucket fails."""

    def __init__(self, bucket, prefix, details=None):
        self.bucket = bucket
        self.prefix = prefix
        msg = f"Failed to list s3://{bucket}/{prefix}"
        if details:
            msg += f": {details}"
        super().__init__(msg)


class DownloadError(SlogError):
    """Raised when the content of a log object cannot be downloaded."""

    def __init__(self, bucket, key, details=None):
        self.bucket = bucket
        self.key = key
        msg = f"Failed to download s3://{bucket}/{key}"
        if details:
            msg += f": {details}"
        super().__init__(msg)


class UnsupportedContentError(SlogError):
    """
    Raised when a content type has no rendering implementation.

    Example:
        'basic', 'rich', 'raw'   <- supported
        'cheese'                 <- raises this exception
    """

    def __init__(self, content):
        self.content = content
        super().__init__(f"No implementation for content type: {content}")
