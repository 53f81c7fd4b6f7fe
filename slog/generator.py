"""Generates realistic S3 server access log objects for trying out slog offline."""

import concurrent.futures
import datetime
import pathlib
import random
from typing import Callable, Iterator, List, Sequence, Tuple

from slog.keys import TIMESTAMP_LAYOUT

SOURCE_BUCKETS = ["static.example-site.com", "images.example-site.com"]

_OWNER = "79a59df900b949e55d96a1e698fbacedfd6e09d98eacf8f8d5218e7cd47ef2be"
_TRAILER = "SigV4 ECDHE-RSA-AES128-GCM-SHA256 AuthHeader {host} TLSv1.2"
_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/80.0.3987.149 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_3) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/13.0.5 Safari/605.1.15",
    "curl/7.64.1",
]
_OBJECTS = ["index.html", "robots.txt", "css/site.css", "images/logo.png", "blog/2020/03/hello.html"]
_STATUSES = [200, 200, 200, 304, 403, 404]


def _hex(length: int) -> str:
    return "".join(random.choice("0123456789ABCDEF") for _ in range(length))


def _log_line(when: datetime.datetime, bucket: str) -> str:
    key = random.choice(_OBJECTS)
    status = random.choice(_STATUSES)
    error = "-" if status < 400 else ("AccessDenied" if status == 403 else "NoSuchKey")
    size = random.randint(200, 90000)
    return " ".join([
        _OWNER,
        bucket,
        when.strftime("[%d/%b/%Y:%H:%M:%S +0000]"),
        f"{random.randint(1, 223)}.{random.randint(0, 255)}.{random.randint(0, 255)}.{random.randint(1, 254)}",
        "-",
        _hex(16),
        "WEBSITE.GET.OBJECT",
        key,
        f'"GET /{key} HTTP/1.1"',
        str(status),
        error,
        str(size) if status == 200 else "-",
        str(size),
        str(random.randint(10, 200)),
        str(random.randint(1, 50)),
        '"-"',
        f'"{random.choice(_AGENTS)}"',
        "-",
        _hex(76),
        _TRAILER.format(host=bucket),
    ])


def generate_log_objects(folder: str, start: datetime.datetime, count: int, lines_per_object: int = 5,
                         buckets: Sequence[str] = SOURCE_BUCKETS) -> Iterator[Tuple[str, bytes]]:
    """Yield (key, body) pairs for count log objects, the first at start and then seconds to minutes apart."""
    random.seed(a=42)
    when = start.astimezone(datetime.timezone.utc)
    for _ in range(count):
        lines = [_log_line(when, random.choice(buckets)) for _ in range(lines_per_object)]
        key = f"{folder}/{when.strftime(TIMESTAMP_LAYOUT)}-{_hex(16)}"
        yield key, ("\n".join(lines) + "\n").encode("utf-8")
        when += datetime.timedelta(seconds=random.randint(1, 300))


class _LocalWriter:
    def __init__(self, dir: pathlib.Path):
        self._dir = dir

    def __call__(self, key: str, body: bytes) -> None:
        path = self._dir / key
        path.parent.mkdir(parents=True, exist_ok=True)
        print(f"writing {path}")
        path.write_bytes(body)


def main(objects: List[Tuple[str, bytes]], writer: Callable[[str, bytes], None]) -> None:
    with concurrent.futures.ThreadPoolExecutor(max_workers=20) as executor:
        futures = [executor.submit(writer, key, body) for key, body in objects]
        for future in concurrent.futures.as_completed(futures):
            future.result()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Generate sample S3 web access log objects into a local directory.")
    parser.add_argument("dir", help="Local directory path to write the objects under.")
    parser.add_argument("--path", default="root", help="Folder the log object keys are placed in.")
    parser.add_argument("--start", default="2020-03-20T13:30:00+00:00", help="Timestamp of the first object.")
    parser.add_argument("--count", type=int, default=20, help="Number of log objects to generate.")
    parser.add_argument("--lines", type=int, default=5, help="Log lines per object.")

    args = parser.parse_args()
    start = datetime.datetime.fromisoformat(args.start)
    objects = list(generate_log_objects(args.path, start, args.count, args.lines))
    main(objects, _LocalWriter(pathlib.Path(args.dir)))
