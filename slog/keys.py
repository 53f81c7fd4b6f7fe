"""
Listing of the log object keys that fall inside a session's time window.

S3 server access log keys look like ``<folder>/2020-03-20-13-30-00-AA960FCC76F5673E``,
so sorting the keys as strings sorts them by time, to the second. S3 lists
keys in that order, which lets us start the listing just before the window
and stop at the first key past it.
"""

import logging
from datetime import datetime, timezone
from typing import Iterator, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from slog.errors import ListingError
from slog.session import SlogSession

logger = logging.getLogger(__name__)

TIMESTAMP_LAYOUT = "%Y-%m-%d-%H-%M-%S"


def window_cursors(folder: str, start: datetime, end: datetime) -> Tuple[str, str, str]:
    """Return the folder prefix, the key to list after and the last key inside the window."""
    prefix = folder + "/"
    start_after = prefix + start.astimezone(timezone.utc).strftime(TIMESTAMP_LAYOUT)
    end_after = prefix + end.astimezone(timezone.utc).strftime(TIMESTAMP_LAYOUT)
    return prefix, start_after, end_after


def list_log_object_keys(session: SlogSession) -> Iterator[str]:
    prefix, start_after, end_after = window_cursors(session.folder, session.start, session.end)
    logger.debug("Listing s3://%s/%s after %s until %s", session.log_bucket, prefix, start_after, end_after)

    paginator = session.s3.get_paginator("list_objects_v2")
    pages = paginator.paginate(
        Bucket=session.log_bucket,
        Prefix=prefix,
        StartAfter=start_after,
        PaginationConfig={"PageSize": session.page_size},
    )

    try:
        for page in pages:
            for obj in page.get("Contents", []):
                key = obj.get("Key")

                # Some stores list the folder itself as an object
                if not key or key in (session.folder, prefix):
                    continue

                # Keys arrive in order so the first one past the window ends the listing
                if key > end_after:
                    return

                yield key
    except (ClientError, BotoCoreError) as e:
        raise ListingError(session.log_bucket, prefix, e) from e
