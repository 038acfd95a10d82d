"""
Git command runner.

Runs git with the working directory marked as a safe directory, so
revision queries also work in build environments where the checkout is
owned by another user (CI runners, containers, sudo).
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def find_git_executable() -> Optional[str]:
    """Locate the git executable on PATH, None if it is not installed."""
    git = shutil.which("git")
    if git:
        logger.debug("Found git executable at %s", git)
    else:
        logger.debug("git executable not found on PATH")
    return git


def get_git_environment(project_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands to handle dubious ownership.

    Existing GIT_CONFIG_KEY_n/GIT_CONFIG_VALUE_n pairs from the calling
    environment are kept and shifted behind the safe.directory entry.

    Args:
        project_dir: Path to the working directory

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()
    inherited = int(os.environ.get("GIT_CONFIG_COUNT", "0") or "0")

    for idx in reversed(range(inherited)):
        key = os.environ.get(f"GIT_CONFIG_KEY_{idx}")
        value = os.environ.get(f"GIT_CONFIG_VALUE_{idx}")
        if key is None or value is None:
            continue
        env[f"GIT_CONFIG_KEY_{idx + 1}"] = key
        env[f"GIT_CONFIG_VALUE_{idx + 1}"] = value

    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(project_dir.resolve())
    env["GIT_CONFIG_COUNT"] = str(inherited + 1)
    return env


def run_git_command(
    args: List[str],
    cwd: Path,
    git_executable: str = "git",
    check: bool = True,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> subprocess.CompletedProcess:
    """
    Run a git command and capture its text output.

    Args:
        args: Git arguments without the executable (e.g., ["status", "--porcelain"])
        cwd: Working directory for the command
        git_executable: Path or name of the git executable
        check: Whether to raise CalledProcessError on non-zero exit
        timeout: Optional timeout in seconds

    Returns:
        CompletedProcess instance with the command result

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout is exceeded
    """
    logger.debug("Executing: git %s", " ".join(args))
    logger.debug("  WorkingDirectory: %s", cwd)
    return subprocess.run(
        [git_executable, *args],
        cwd=cwd,
        check=check,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=get_git_environment(cwd),
    )


def git_output(
    args: List[str],
    cwd: Path,
    git_executable: str = "git",
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> Optional[str]:
    """Run a git command and return its stripped stdout, None if it failed."""
    try:
        result = run_git_command(
            args, cwd, git_executable=git_executable, timeout=timeout
        )
    except subprocess.CalledProcessError as e:
        logger.debug("git %s failed: %s", " ".join(args), (e.stderr or "").strip())
        return None
    except subprocess.TimeoutExpired:
        logger.warning("git %s timed out after %s seconds", " ".join(args), timeout)
        return None
    return result.stdout.strip()
