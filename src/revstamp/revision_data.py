"""Revision data collected from a version control working directory."""

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

EMPTY_COMMIT_HASH = "0" * 40

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"


@dataclass(frozen=True)
class RevisionData:
    """
    Immutable snapshot of the checked out revision.

    String fields are never None: missing values are normalized to an
    empty string when the instance is created. The author time falls back
    to the commit time when a VCS does not record it separately.
    """

    commit_time: datetime
    commit_hash: str = ""
    revision_number: int = 0
    author_time: Optional[datetime] = None
    is_modified: bool = False
    is_mixed: bool = False
    repository_url: str = ""
    committer_name: str = ""
    committer_email: str = ""
    author_name: str = ""
    author_email: str = ""
    branch: str = ""
    tag: str = ""
    commits_after_tag: int = 0
    vcs_provider: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.type is str and getattr(self, f.name) is None:
                object.__setattr__(self, f.name, "")
        if self.author_time is None:
            object.__setattr__(self, "author_time", self.commit_time)

    @classmethod
    def dummy(cls) -> "RevisionData":
        """Data used when no VCS provider could process the directory."""
        return cls(
            commit_time=datetime.now().astimezone(),
            commit_hash=EMPTY_COMMIT_HASH,
        )

    @property
    def has_commit_hash(self) -> bool:
        return bool(self.commit_hash) and self.commit_hash.strip("0") != ""

    def dump(self) -> None:
        """Log all fields at debug level."""
        logger.debug("Revision data:")
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = value.strftime(_TIME_FORMAT)
            logger.debug("  %s: %s", f.name, value)
