"""Version control providers that produce RevisionData."""

import logging
from pathlib import Path
from typing import List, Optional

from ..revision_data import RevisionData
from .git_provider import GitProvider

logger = logging.getLogger(__name__)


def read_revision(
    path: Path,
    providers: List[GitProvider],
    scan_root: bool = False,
    required_vcs: Optional[str] = None,
) -> RevisionData:
    """
    Process a directory with the first provider that can handle it.

    Args:
        path: Directory to read the revision of
        providers: Providers to try, in order
        scan_root: Read the working directory root instead of path
        required_vcs: Only use the provider of this name (case-insensitive)

    Returns:
        Revision data; dummy data if no provider could process the directory
    """
    data: Optional[RevisionData] = None
    for provider in providers:
        logger.debug("Found VCS provider: %s", provider)
        if required_vcs and provider.name.lower() != required_vcs.lower():
            logger.debug("Provider is not what is required, skipping")
            continue
        if not provider.check_environment():
            continue
        root = provider.find_root(path)
        if root is None:
            continue
        logger.debug("Provider can process this directory")
        data = provider.process_directory(root if scan_root else path)
        break

    if data is None:
        logger.debug("No provider used, returning dummy data")
        data = RevisionData.dummy()

    data.dump()
    return data


__all__ = ["GitProvider", "read_revision"]
