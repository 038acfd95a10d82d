"""
Git VCS provider.

Collects the revision data of the commit checked out in a Git working
directory by querying the git command line client.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..revision_data import RevisionData
from ..utils.git_runner import DEFAULT_TIMEOUT, find_git_executable, git_output

logger = logging.getLogger(__name__)

GIT_LOG_FORMAT = "%H %ci %ai%n%cN%n%cE%n%aN%n%aE"
GIT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_TIMESTAMP = r"[0-9-]{10} [0-9:]{8} [0-9+-]{5}"
_LOG_HEADER_PATTERN = re.compile(
    rf"^([0-9a-fA-F]{{40,64}}) ({_TIMESTAMP}) ({_TIMESTAMP})"
)
_DESCRIBE_PATTERN = re.compile(r"^(.*)-([0-9]+)-g[0-9a-fA-F]+$")
_TAG_V_PATTERN = re.compile(r"^[vV](?=[0-9])")


class GitProvider:
    """
    Revision data provider for Git working directories.

    Tag lookup follows the first-parent history. A tag_match of None
    accepts all tags, an empty string disables the tag lookup.
    """

    name = "git"

    def __init__(
        self,
        tag_match: Optional[str] = None,
        remove_tag_v: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.tag_match = tag_match
        self.remove_tag_v = remove_tag_v
        self.timeout = timeout
        self.git_executable: Optional[str] = None

    def __str__(self) -> str:
        return "Git VCS provider"

    def check_environment(self) -> bool:
        """Check whether git can be executed on this machine."""
        logger.debug("Git environment check")
        self.git_executable = find_git_executable()
        return self.git_executable is not None

    def find_root(self, path: Path) -> Optional[Path]:
        """Walk up from path to the directory that contains .git."""
        logger.debug("Checking directory tree for Git working directory")
        for candidate in [path] + list(path.parents):
            if (candidate / ".git").exists():
                logger.debug("  Found %s", candidate)
                return candidate
        logger.debug("Not a Git working directory: %s", path)
        return None

    def process_directory(self, path: Path) -> RevisionData:
        """
        Query the revision data of a Git working directory.

        Args:
            path: Directory inside the working directory

        Returns:
            Revision data; only the commit time is set if git log fails
        """
        log_output = self._git(
            ["log", "-n", "1", f"--format=format:{GIT_LOG_FORMAT}"], path
        )
        if not log_output:
            logger.warning("git log returned no commit for %s", path)
            return RevisionData(
                commit_time=datetime.now().astimezone(), vcs_provider=self.name
            )

        lines = log_output.splitlines() + [""] * 5
        header = _LOG_HEADER_PATTERN.match(lines[0])
        if header is None:
            logger.warning("Unexpected git log output: %s", lines[0])
            return RevisionData(
                commit_time=datetime.now().astimezone(), vcs_provider=self.name
            )

        tag, commits_after_tag = self._read_tag(path)
        return RevisionData(
            vcs_provider=self.name,
            commit_hash=header.group(1),
            commit_time=datetime.strptime(header.group(2), GIT_TIME_FORMAT),
            author_time=datetime.strptime(header.group(3), GIT_TIME_FORMAT),
            committer_name=lines[1].strip(),
            committer_email=lines[2].strip(),
            author_name=lines[3].strip(),
            author_email=lines[4].strip(),
            is_modified=bool(self._git(["status", "--porcelain"], path)),
            branch=self._read_branch(path),
            tag=tag,
            commits_after_tag=commits_after_tag,
            revision_number=self._read_revision_number(path),
            repository_url=self._git(["config", "--get", "remote.origin.url"], path)
            or "",
        )

    def _git(self, args, path: Path) -> Optional[str]:
        return git_output(
            args,
            path,
            git_executable=self.git_executable or "git",
            timeout=self.timeout,
        )

    def _read_branch(self, path: Path) -> str:
        branch = self._git(["rev-parse", "--abbrev-ref", "HEAD"], path) or ""

        # GitLab runners check out a detached HEAD; the branch name is only
        # available from the CI environment there.
        if (branch == "HEAD" or branch.startswith("heads/")) and os.environ.get(
            "CI_SERVER"
        ) == "yes":
            if os.environ.get("CI_COMMIT_REF_NAME") and not os.environ.get(
                "CI_COMMIT_TAG"
            ):
                logger.debug("Reading branch name from CI_COMMIT_REF_NAME")
                branch = os.environ["CI_COMMIT_REF_NAME"]
            elif os.environ.get("CI_BUILD_REF_NAME") and not os.environ.get(
                "CI_BUILD_TAG"
            ):
                logger.debug("Reading branch name from CI_BUILD_REF_NAME")
                branch = os.environ["CI_BUILD_REF_NAME"]
            else:
                logger.debug("No branch name available in CI environment")
                branch = ""
        return branch

    def _read_tag(self, path: Path):
        if self.tag_match == "":
            return "", 0

        args = ["describe", "--tags", "--first-parent", "--long"]
        if self.tag_match is not None:
            args += ["--match", self.tag_match]
        description = self._git(args, path)
        if not description:
            return "", 0

        match = _DESCRIBE_PATTERN.match(description.splitlines()[0].strip())
        if match is None:
            return "", 0
        tag = match.group(1).strip()
        if self.remove_tag_v:
            tag = _TAG_V_PATTERN.sub("", tag)
        return tag, int(match.group(2))

    def _read_revision_number(self, path: Path) -> int:
        count = self._git(["rev-list", "--first-parent", "--count", "HEAD"], path)
        try:
            return int(count or "")
        except ValueError:
            logger.debug("Revision count could not be parsed: %r", count)
            return 0
