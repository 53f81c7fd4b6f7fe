"""
The read pipeline: list keys, download objects, render lines.

The three stages run on their own worker threads and are chained by small
bounded channels, so that slow S3 requests overlap with rendering. The first
stage to fail decides the outcome of the run; the others are told to stop.
"""

import concurrent.futures
import logging
import queue
import sys
import threading
from typing import Any, BinaryIO, Iterator, Optional, TextIO, Union

from botocore.exceptions import BotoCoreError, ClientError

from slog.content import LineRenderer
from slog.errors import DownloadError
from slog.keys import list_log_object_keys
from slog.session import SlogSession

logger = logging.getLogger(__name__)

CHANNEL_CAPACITY = 5
POLL_INTERVAL = 0.1


class Channel:
    """A bounded queue between two pipeline stages that the producer closes when done."""

    _CLOSED = object()

    def __init__(self, stop: threading.Event, capacity: int = CHANNEL_CAPACITY):
        self._queue: queue.Queue = queue.Queue(maxsize=capacity)
        self._stop = stop

    def send(self, item: Any) -> bool:
        """Block until there is room for item; False if the pipeline was stopped first."""
        while not self._stop.is_set():
            try:
                self._queue.put(item, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def close(self) -> None:
        self.send(self._CLOSED)

    def __iter__(self) -> Iterator[Any]:
        while not self._stop.is_set():
            try:
                item = self._queue.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
            if item is self._CLOSED:
                return
            yield item


def download_log_object(session: SlogSession, key: str) -> bytes:
    """Download the whole of one log object into memory."""
    try:
        response = session.s3.get_object(Bucket=session.log_bucket, Key=key)
        return response["Body"].read()
    except (ClientError, BotoCoreError) as e:
        raise DownloadError(session.log_bucket, key, e) from e


def fetch_log_object_keys(session: SlogSession, keys: Channel) -> None:
    try:
        for key in list_log_object_keys(session):
            if not keys.send(key):
                break
    finally:
        keys.close()


def fetch_log_object_data(session: SlogSession, keys: Channel, buffers: Channel) -> None:
    try:
        for key in keys:
            logger.debug("Downloading %s", key)
            if not buffers.send(download_log_object(session, key)):
                break
    finally:
        buffers.close()


def display_log_data(session: SlogSession, buffers: Channel, out: Union[TextIO, BinaryIO]) -> None:
    renderer = LineRenderer(session.content, session.source_buckets)
    for data in buffers:
        renderer.write(data, out)


def display_log(session: SlogSession, out: Optional[Union[TextIO, BinaryIO]] = None) -> None:
    """
    Print the web logs in the session's bucket and folder between its start and end times.

    out may be a text or a byte stream; raw content reaches the underlying bytes
    unchanged whenever there is one. Raises the first SlogError seen from any stage.
    """
    if out is None:
        out = sys.stdout

    # Fails before any worker is started if there is no usable S3 client
    session.activate()

    stop = threading.Event()
    keys = Channel(stop)
    buffers = Channel(stop)

    logger.info("Reading s3://%s/%s from %s to %s", session.log_bucket, session.folder,
                session.start.isoformat(), session.end.isoformat())

    with concurrent.futures.ThreadPoolExecutor(max_workers=3, thread_name_prefix="slog") as executor:
        futures = [
            executor.submit(fetch_log_object_keys, session, keys),
            executor.submit(fetch_log_object_data, session, keys, buffers),
            executor.submit(display_log_data, session, buffers, out),
        ]

        try:
            for future in concurrent.futures.as_completed(futures):
                error = future.exception()
                if error is not None:
                    logger.debug("Pipeline stopped by %r", error)
                    raise error
        finally:
            # Unblocks whatever is still running so the executor can shut down
            stop.set()
