import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from slog.content import ContentProfile
from slog.errors import SessionActivationError

logger = logging.getLogger(__name__)

# Max number of keys to fetch per listing page
MAX_LIST_KEYS = 100


@dataclass
class SlogSession:
    """The parameters of one read run, plus the S3 client once activated."""
    region: str
    log_bucket: str
    folder: str
    start: datetime
    end: datetime
    content: ContentProfile = ContentProfile.BASIC
    source_buckets: List[str] = field(default_factory=list)
    page_size: int = MAX_LIST_KEYS
    s3: Optional[Any] = field(default=None, repr=False)

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("start and end must be timezone aware")
        if self.end < self.start:
            raise ValueError(f"end {self.end.isoformat()} is before start {self.start.isoformat()}")

    def activate(self) -> Any:
        """Create the S3 client if we do not already have one and return it."""
        if self.s3 is not None:
            return self.s3

        # Default credentials come from the environment and/or the AWS config files
        try:
            session = boto3.Session(region_name=self.region)
            self.s3 = session.client("s3")
        except (BotoCoreError, ValueError) as e:
            raise SessionActivationError(self.region, e) from e

        logger.debug("Opened S3 client for region %s", self.region)
        return self.s3
