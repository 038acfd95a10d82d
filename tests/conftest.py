"""
Shared pytest fixtures for revstamp tests.

Provides revision data with fixed, timezone-aware times so format
resolution results do not depend on the machine running the tests.
"""

import os
import time
from datetime import datetime, timedelta, timezone

import pytest

from revstamp.revision_data import RevisionData

COMMIT_HASH = "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678"

# 2016-03-05 13:30:15 UTC
COMMIT_TIME = datetime(2016, 3, 5, 14, 30, 15, tzinfo=timezone(timedelta(hours=1)))
AUTHOR_TIME = datetime(2016, 3, 4, 9, 5, 0, tzinfo=timezone(timedelta(hours=-5)))


@pytest.fixture
def revision() -> RevisionData:
    """Clean revision of a Git working directory."""
    return RevisionData(
        commit_time=COMMIT_TIME,
        commit_hash=COMMIT_HASH,
        author_time=AUTHOR_TIME,
        repository_url="https://example.com/project.git",
        committer_name="Jane Committer",
        committer_email="jane@example.com",
        author_name="John Author",
        author_email="john@example.com",
        branch="main",
        tag="1.4.0",
        commits_after_tag=3,
        vcs_provider="git",
    )


@pytest.fixture
def modified_revision(revision: RevisionData) -> RevisionData:
    """Same revision with uncommitted changes in the working directory."""
    return RevisionData(
        commit_time=revision.commit_time,
        commit_hash=revision.commit_hash,
        author_time=revision.author_time,
        is_modified=True,
        vcs_provider="git",
    )


@pytest.fixture
def local_timezone():
    """Switch the process time zone for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    original = os.environ.get("TZ")

    def set_timezone(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    yield set_timezone

    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()
