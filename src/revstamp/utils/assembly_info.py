"""
AssemblyInfo format discovery.

.NET projects keep the revision format in the AssemblyInformationalVersion
attribute of their AssemblyInfo source file. A build step that patches the
file leaves a .bak copy of the original behind, and that copy holds the
unresolved format, so it is preferred when it exists.
"""

import logging
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ASSEMBLY_INFO_CANDIDATES = [
    Path("Properties") / "AssemblyInfo.cs",
    Path("My Project") / "AssemblyInfo.vb",
    Path("AssemblyInfo.cs"),
    Path("AssemblyInfo.vb"),
]

_CS_ATTRIBUTE_PATTERN = re.compile(
    r'^(\s*\[\s*assembly\s*:\s*AssemblyInformationalVersion\s*\(\s*")(.*?)("\s*\)\s*\].*)$',
    re.IGNORECASE,
)
_VB_ATTRIBUTE_PATTERN = re.compile(
    r'^(\s*<\s*assembly\s*:\s*AssemblyInformationalVersion\s*\(\s*")(.*?)("\s*\)\s*>.*)$',
    re.IGNORECASE,
)


def find_assembly_info_file(project_dir: Path) -> Optional[Path]:
    """
    Find the AssemblyInfo file of a project directory.

    Args:
        project_dir: Directory of the project

    Returns:
        Path of the file to read (a .bak backup if present), None if the
        project has no AssemblyInfo file
    """
    for candidate in ASSEMBLY_INFO_CANDIDATES:
        path = project_dir / candidate
        backup = path.with_name(path.name + ".bak")
        if backup.is_file():
            logger.debug("Found AssemblyInfo backup file %s", backup)
            return backup
        if path.is_file():
            logger.debug("Found AssemblyInfo file %s", path)
            return path
    logger.debug("No AssemblyInfo file found in %s", project_dir)
    return None


def read_revision_format(project_dir: Path) -> Optional[str]:
    """Read the AssemblyInformationalVersion format of a project, if any."""
    path = find_assembly_info_file(project_dir)
    if path is None:
        return None

    base_name = path.name[:-4] if path.suffix == ".bak" else path.name
    pattern = (
        _VB_ATTRIBUTE_PATTERN
        if base_name.lower().endswith(".vb")
        else _CS_ATTRIBUTE_PATTERN
    )

    with open(path, "r", encoding="utf-8-sig") as f:
        for line in f:
            match = pattern.match(line.rstrip("\r\n"))
            if match:
                logger.debug("Found AssemblyInformationalVersion format in %s", path)
                return match.group(2)

    logger.debug("No AssemblyInformationalVersion attribute in %s", path)
    return None
