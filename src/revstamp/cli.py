"""Command line interface for revstamp."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console

from . import __version__
from .config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, Config, ConfigManager
from .exceptions import (
    ExitCode,
    RejectMixedError,
    RejectModifiedError,
    RevstampError,
)
from .formatting.decode_predict import (
    DEFAULT_PREDICT_COUNT,
    compact_placeholder,
    decode_from_format,
    decode_value,
    format_decoded,
    format_prediction,
    normalize_scheme,
    predict_from_format,
    predict_values,
)
from .formatting.placeholders import COMPACT_TIME_SCHEMES, FormatCatalogue
from .formatting.resolver import RevisionFormatResolver
from .revision_data import RevisionData
from .utils.assembly_info import read_revision_format
from .vcs import GitProvider, read_revision

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)

SUPPRESS_ENV_VAR = "REVSTAMP_SUPPRESS"

CATALOGUE_CHOICES = [catalogue.value for catalogue in FormatCatalogue]
SCHEME_CHOICES = list(COMPACT_TIME_SCHEMES[FormatCatalogue.CURRENT])


def determine_format(
    format_string: Optional[str],
    config: Config,
    project_dir: Path,
    revision: RevisionData,
) -> str:
    """
    Pick the format to resolve.

    The first available of: the explicit format, the configured default
    format, the AssemblyInformationalVersion attribute of the project,
    "{revnum}" for numbered revisions, "{chash:8}" for hashed revisions.
    Without any of these the format is empty.
    """
    if format_string is not None:
        return format_string
    if config.default_format is not None:
        logger.debug("Using default format from configuration")
        return config.default_format

    assembly_format = read_revision_format(project_dir)
    if assembly_format is not None:
        return assembly_format

    if revision.revision_number > 0:
        logger.debug("No format available, using revision number format")
        return "{revnum}"
    if revision.has_commit_hash:
        logger.debug("No format available, using commit hash format")
        return "{chash:8}"
    logger.debug("No format available, using empty format")
    return ""


def _exit_with_error(error: RevstampError) -> NoReturn:
    error_console.print(f"❌ {error}", style="red", markup=False)
    sys.exit(int(error.exit_code))


def _exit_unhandled(error: Exception) -> NoReturn:
    logger.debug("Unhandled exception", exc_info=True)
    error_console.print(
        f"❌ Unexpected error: {type(error).__name__}: {error}",
        style="red",
        markup=False,
    )
    sys.exit(int(ExitCode.UNHANDLED))


def _print_decoded(scheme: str, instant: Optional[datetime]) -> None:
    if instant is None:
        error_console.print(f"Invalid {scheme} value.", markup=False)
        return
    for line in format_decoded(instant):
        click.echo(line)


@click.group()
@click.version_option(version=__version__, prog_name="revstamp")
def cli():
    """Revision stamping for builds.

    \b
    Resolves a format string against the revision checked out in a Git
    working directory and prints the result.

    \b
    PLACEHOLDERS:
      {!} {!:text}              Marker for uncommitted changes
      {commit} {commit:8}       Commit hash, optionally truncated
      {revnum} {branch} {tag}   Revision number, branch and tag names
      {date} {time} {utdate}    Commit time (also adate/atime, builddate)
      {date:ymd-} {time:hm:}    Date/time with a sub-format
      {xmin:2015} {bmin:2015}   Compact time since a base year
      {dmin:2015} {d2min:2015}  Dotted decimal time since a base year

    \b
    EXAMPLES:
      revstamp show -f "{!}{commit:8}-{date}"
      revstamp show -f "1.{dmin:2015}" --predict
      revstamp decode bmin 2015 4hm2
    """
    # Configure logging at WARNING level for clean CLI output
    logging.basicConfig(
        level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s"
    )


@cli.command()
@click.argument(
    "path", required=False, type=click.Path(file_okay=False, path_type=Path)
)
@click.option(
    "--format",
    "-f",
    "format_string",
    help="Format string to resolve (default: configured or detected format)",
)
@click.option(
    "--catalogue",
    type=click.Choice(CATALOGUE_CHOICES),
    help="Placeholder catalogue version (default: from configuration)",
)
@click.option(
    "--reject-modified",
    is_flag=True,
    help="Fail if the working directory contains uncommitted changes",
)
@click.option(
    "--reject-mixed",
    is_flag=True,
    help="Fail if the working directory contains mixed revisions",
)
@click.option(
    "--require-vcs",
    metavar="NAME",
    help="Fail if the directory is not a working directory of the VCS named NAME",
)
@click.option(
    "--root",
    "scan_root",
    is_flag=True,
    help="Read the revision of the whole working directory instead of PATH",
)
@click.option("--tag-match", help="Only consider tags matching this glob pattern")
@click.option(
    "--remove-tag-v",
    is_flag=True,
    help="Remove a leading 'v' followed by a digit from the tag name",
)
@click.option(
    "--decode",
    "decode_token",
    metavar="VALUE",
    help="Decode VALUE with the compact time placeholder of the format",
)
@click.option(
    "--predict",
    is_flag=True,
    help="List the next values of the compact time placeholder of the format",
)
@click.option("--debug", is_flag=True, help="Log revision data and git commands")
def show(
    path: Optional[Path],
    format_string: Optional[str],
    catalogue: Optional[str],
    reject_modified: bool,
    reject_mixed: bool,
    require_vcs: Optional[str],
    scan_root: bool,
    tag_match: Optional[str],
    remove_tag_v: bool,
    decode_token: Optional[str],
    predict: bool,
    debug: bool,
):
    """Resolve a revision format for PATH (default: current directory).

    \b
    The format is the first available of:
      1. --format
      2. default_format in .revstamp/config.json
      3. AssemblyInformationalVersion in the project's AssemblyInfo file
      4. {revnum} if the revision is numbered, {chash:8} if it is hashed

    Nothing is printed while the REVSTAMP_SUPPRESS environment variable is set.
    """
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if os.environ.get(SUPPRESS_ENV_VAR, "").strip():
        logger.debug("%s environment variable is set, quitting", SUPPRESS_ENV_VAR)
        return

    try:
        project_dir = path or Path.cwd()
        if not project_dir.is_dir():
            raise RevstampError(
                f"The project directory does not exist: {project_dir}",
                ExitCode.FILE_NOT_FOUND,
            )

        config = ConfigManager.create_with_backtrack(project_dir).load()
        active_catalogue = FormatCatalogue(catalogue or config.format_catalogue)
        provider = GitProvider(
            tag_match=tag_match if tag_match is not None else config.tag_match,
            remove_tag_v=remove_tag_v or config.remove_tag_v,
            timeout=config.git_timeout,
        )
        build_time = datetime.now().astimezone()
        revision = read_revision(
            project_dir, [provider], scan_root=scan_root, required_vcs=require_vcs
        )

        if require_vcs and revision.vcs_provider.lower() != require_vcs.lower():
            raise RevstampError(
                f'Required VCS "{require_vcs}" not present', ExitCode.REQUIRED_VCS
            )
        if reject_modified and revision.is_modified:
            raise RejectModifiedError(
                "The working directory contains uncommitted changes"
            )
        if reject_mixed and revision.is_mixed:
            raise RejectMixedError("The working directory contains mixed revisions")

        resolved_format = determine_format(
            format_string, config, project_dir, revision
        )
        logger.debug("Format: %s", resolved_format)

        if decode_token is not None:
            scheme = compact_placeholder(resolved_format).scheme
            _print_decoded(
                scheme,
                decode_from_format(resolved_format, decode_token, active_catalogue),
            )
        elif predict:
            for prediction in predict_from_format(
                resolved_format, catalogue=active_catalogue
            ):
                click.echo(format_prediction(prediction))
        else:
            resolver = RevisionFormatResolver(
                revision, build_time=build_time, catalogue=active_catalogue
            )
            click.echo(resolver.resolve(resolved_format))
    except RevstampError as e:
        _exit_with_error(e)
    except Exception as e:
        _exit_unhandled(e)


@cli.command()
@click.argument("scheme", type=click.Choice(SCHEME_CHOICES, case_sensitive=False))
@click.argument("base_year", type=click.IntRange(1, 9999))
@click.argument("value")
@click.option(
    "--catalogue",
    type=click.Choice(CATALOGUE_CHOICES),
    default=FormatCatalogue.CURRENT.value,
    show_default=True,
    help="Placeholder catalogue version used for bmin",
)
def decode(scheme: str, base_year: int, value: str, catalogue: str):
    """Decode a compact time VALUE of SCHEME relative to BASE_YEAR.

    \b
    Prints the decoded time in UTC and in local time.
    """
    scheme = normalize_scheme(scheme)
    try:
        instant = decode_value(scheme, base_year, value, FormatCatalogue(catalogue))
    except RevstampError as e:
        _exit_with_error(e)
    _print_decoded(scheme, instant)


@cli.command()
@click.argument("scheme", type=click.Choice(SCHEME_CHOICES, case_sensitive=False))
@click.argument("base_year", type=click.IntRange(1, 9999))
@click.option(
    "--count",
    "-n",
    type=click.IntRange(min=1),
    default=DEFAULT_PREDICT_COUNT,
    show_default=True,
    help="Number of values to list",
)
@click.option(
    "--catalogue",
    type=click.Choice(CATALOGUE_CHOICES),
    default=FormatCatalogue.CURRENT.value,
    show_default=True,
    help="Placeholder catalogue version used for bmin",
)
def predict(scheme: str, base_year: int, count: int, catalogue: str):
    """List the next COUNT values of SCHEME relative to BASE_YEAR."""
    try:
        predictions = predict_values(
            normalize_scheme(scheme),
            base_year,
            count=count,
            catalogue=FormatCatalogue(catalogue),
        )
    except RevstampError as e:
        _exit_with_error(e)
    for prediction in predictions:
        click.echo(format_prediction(prediction))


@cli.command()
@click.argument(
    "path", required=False, type=click.Path(file_okay=False, path_type=Path)
)
@click.option(
    "--catalogue",
    type=click.Choice(CATALOGUE_CHOICES),
    help="Placeholder catalogue version",
)
@click.option("--default-format", help="Format used when --format is not given")
@click.option("--tag-match", help="Only consider tags matching this glob pattern")
@click.option(
    "--remove-tag-v",
    is_flag=True,
    help="Remove a leading 'v' followed by a digit from tag names",
)
@click.option("--force", is_flag=True, help="Overwrite an existing configuration")
def init(
    path: Optional[Path],
    catalogue: Optional[str],
    default_format: Optional[str],
    tag_match: Optional[str],
    remove_tag_v: bool,
    force: bool,
):
    """Create .revstamp/config.json in PATH (default: current directory)."""
    project_dir = path or Path.cwd()
    config_manager = ConfigManager(project_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME)
    if config_manager.config_path.exists() and not force:
        error_console.print(
            f"❌ Configuration already exists: {config_manager.config_path}",
            style="red",
            markup=False,
        )
        error_console.print("Use --force to overwrite it")
        sys.exit(int(ExitCode.CMDLINE_ERROR))

    settings = {"remove_tag_v": remove_tag_v}
    if catalogue is not None:
        settings["format_catalogue"] = catalogue
    if default_format is not None:
        settings["default_format"] = default_format
    if tag_match is not None:
        settings["tag_match"] = tag_match

    config_manager.save(Config(**settings))
    console.print(
        f"✅ Created configuration {config_manager.config_path}",
        style="green",
        markup=False,
    )


if __name__ == "__main__":
    cli()
