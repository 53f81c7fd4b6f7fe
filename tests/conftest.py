import io
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from slog.content import ContentProfile
from slog.generator import generate_log_objects
from slog.session import SlogSession

WINDOW_START = datetime(2020, 3, 20, 13, 30, tzinfo=timezone.utc)
WINDOW_END = datetime(2020, 3, 20, 14, 0, tzinfo=timezone.utc)


class FakePaginator:
    def __init__(self, client):
        self._client = client

    def paginate(self, Bucket, Prefix="", StartAfter="", PaginationConfig=None):
        page_size = (PaginationConfig or {}).get("PageSize", 1000)
        if Bucket not in self._client.buckets:
            raise ClientError({"Error": {"Code": "NoSuchBucket", "Message": "The specified bucket does not exist"}},
                              "ListObjectsV2")
        keys = sorted(k for k in self._client.buckets[Bucket] if k.startswith(Prefix) and k > StartAfter)
        pages_served = 0
        for i in range(0, len(keys), page_size):
            if pages_served == self._client.fail_after_pages:
                self._client.before_listing_failure()
                raise ClientError({"Error": {"Code": "InternalError", "Message": "We encountered an internal error"}},
                                  "ListObjectsV2")
            pages_served += 1
            self._client.pages_listed += 1
            yield {"Contents": [{"Key": key} for key in keys[i:i + page_size]]}


class FakeS3Client:
    """Just enough of a boto3 S3 client for the read pipeline."""

    def __init__(self, bucket, objects, fail_keys=(), fail_after_pages=None, before_listing_failure=lambda: None):
        self.buckets = {bucket: dict(objects)}
        self.fail_keys = set(fail_keys)
        self.fail_after_pages = fail_after_pages
        self.before_listing_failure = before_listing_failure
        self.requested = []
        self.pages_listed = 0

    def get_paginator(self, operation_name):
        assert operation_name == "list_objects_v2"
        return FakePaginator(self)

    def get_object(self, Bucket, Key):
        self.requested.append(Key)
        objects = self.buckets.get(Bucket, {})
        if Key in self.fail_keys or Key not in objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                              "GetObject")
        return {"Body": io.BytesIO(objects[Key])}


@pytest.fixture
def log_objects():
    # Twelve objects, the first one on the start of the window
    return list(generate_log_objects("root", WINDOW_START, 12, lines_per_object=4))


@pytest.fixture
def fake_s3(log_objects):
    return FakeS3Client("log-bucket", log_objects)


@pytest.fixture
def make_session(fake_s3):
    def _make(**overrides):
        params = dict(
            region="us-east-1",
            log_bucket="log-bucket",
            folder="root",
            start=WINDOW_START,
            end=datetime(2020, 3, 21, tzinfo=timezone.utc),
            content=ContentProfile.BASIC,
            s3=fake_s3,
        )
        params.update(overrides)
        return SlogSession(**params)
    return _make
