"""
Placeholder catalogue and format string tokenizer.

A format string is split once into literal text and structured
placeholders. Placeholders whose name is not in the catalogue stay part of
the literal text, so braces used for other purposes survive untouched.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

from ..exceptions import FormatError
from .time_codecs import (
    BASE28_MINUTES,
    BASE36_MINUTES,
    DECIMAL_2_MINUTES,
    DECIMAL_MINUTES,
    HEX_MINUTES,
    DecimalTimeCodec,
    PositionalTimeCodec,
)

logger = logging.getLogger(__name__)

TimeCodec = Union[PositionalTimeCodec, DecimalTimeCodec]

# "{!:<text>}" runs to the first closing brace; everything else is
# "{name}" or "{name:args}" with args free of braces.
_PLACEHOLDER_PATTERN = re.compile(
    r"\{(?:!:(?P<marker_text>[^}]*)|(?P<name>!|[A-Za-z0-9]+)(?::(?P<args>[^{}]*))?)\}"
)
_YEAR_PATTERN = re.compile(r"^[0-9]{4}$")
_LENGTH_PATTERN = re.compile(r"^[0-9]{1,2}$")
_COUNT_PATTERN = re.compile(r"^[0-9]+$")


class PlaceholderFamily(Enum):
    """Kinds of placeholders, each rendered by its own dispatch branch."""

    CONDITIONAL_MARKER = "conditional-marker"
    LITERAL_FIELD = "literal-field"
    DATE_TIME = "date-time"
    COMPACT_TIME = "compact-time"


class FormatCatalogue(str, Enum):
    """Versions of the placeholder catalogue.

    The tool family changed the meaning of {bmin} over time: the legacy
    catalogue renders it as base36 10-minute units, the current one as
    base28 20-minute units. {b36min} is base36 in both.
    """

    CURRENT = "current"
    LEGACY = "legacy"


class DateTimeRule(NamedTuple):
    source: str  # "commit", "author" or "build"
    utc: bool
    default_format: str


DATE_DEFAULT_FORMAT = "%Y%m%d"
TIME_DEFAULT_FORMAT = "%H%M%S"

DATE_TIME_SUB_FORMATS: Dict[str, str] = {
    "ymd-": "%Y-%m-%d",
    "hms": "%H%M%S",
    "hms:": "%H:%M:%S",
    "hm": "%H%M",
    "hm:": "%H:%M",
    "h": "%H",
    "o": "%z",
}

DATE_TIME_PLACEHOLDERS: Dict[str, DateTimeRule] = {
    "date": DateTimeRule("commit", False, DATE_DEFAULT_FORMAT),
    "time": DateTimeRule("commit", False, TIME_DEFAULT_FORMAT),
    "utdate": DateTimeRule("commit", True, DATE_DEFAULT_FORMAT),
    "uttime": DateTimeRule("commit", True, TIME_DEFAULT_FORMAT),
    "adate": DateTimeRule("author", False, DATE_DEFAULT_FORMAT),
    "atime": DateTimeRule("author", False, TIME_DEFAULT_FORMAT),
    "utadate": DateTimeRule("author", True, DATE_DEFAULT_FORMAT),
    "utatime": DateTimeRule("author", True, TIME_DEFAULT_FORMAT),
    "builddate": DateTimeRule("build", False, DATE_DEFAULT_FORMAT),
    "buildtime": DateTimeRule("build", False, TIME_DEFAULT_FORMAT),
    "utbuilddate": DateTimeRule("build", True, DATE_DEFAULT_FORMAT),
    "utbuildtime": DateTimeRule("build", True, TIME_DEFAULT_FORMAT),
}

# Placeholder name -> RevisionData attribute
LITERAL_FIELD_PLACEHOLDERS: Dict[str, str] = {
    "commit": "commit_hash",
    "chash": "commit_hash",
    "url": "repository_url",
    "revnum": "revision_number",
    "branch": "branch",
    "tag": "tag",
    "tagadd": "commits_after_tag",
    "cname": "committer_name",
    "cmail": "committer_email",
    "aname": "author_name",
    "amail": "author_email",
}

# Literal fields that accept a ":<length>" prefix argument
TRUNCATABLE_FIELDS = frozenset({"commit", "chash"})

COMPACT_TIME_SCHEMES: Dict[FormatCatalogue, Dict[str, TimeCodec]] = {
    FormatCatalogue.CURRENT: {
        "xmin": HEX_MINUTES,
        "bmin": BASE28_MINUTES,
        "b36min": BASE36_MINUTES,
        "dmin": DECIMAL_MINUTES,
        "d2min": DECIMAL_2_MINUTES,
    },
    FormatCatalogue.LEGACY: {
        "xmin": HEX_MINUTES,
        "bmin": BASE36_MINUTES,
        "b36min": BASE36_MINUTES,
        "dmin": DECIMAL_MINUTES,
        "d2min": DECIMAL_2_MINUTES,
    },
}

UPPERCASE_COMPACT_NAMES: Dict[str, str] = {
    "Xmin": "xmin",
    "Bmin": "bmin",
    "B36min": "b36min",
}

# Schemes whose placeholders take an optional ":<length>" after the year
PADDED_SCHEMES = frozenset({"xmin", "bmin", "b36min"})


def classify(name: str) -> Optional[PlaceholderFamily]:
    """Return the family of a placeholder name, or None if it is unknown."""
    if name == "!":
        return PlaceholderFamily.CONDITIONAL_MARKER
    if name in LITERAL_FIELD_PLACEHOLDERS:
        return PlaceholderFamily.LITERAL_FIELD
    if name in DATE_TIME_PLACEHOLDERS:
        return PlaceholderFamily.DATE_TIME
    if (
        name in UPPERCASE_COMPACT_NAMES
        or name in COMPACT_TIME_SCHEMES[FormatCatalogue.CURRENT]
    ):
        return PlaceholderFamily.COMPACT_TIME
    return None


def codec_for_scheme(scheme: str, catalogue: FormatCatalogue) -> TimeCodec:
    """Look up the codec of a lowercase compact scheme name."""
    try:
        return COMPACT_TIME_SCHEMES[catalogue][scheme]
    except KeyError:
        raise FormatError(f"Unknown compact time scheme: {scheme}")


@dataclass(frozen=True)
class Placeholder:
    """A recognized "{name[:args]}" span of a format string."""

    text: str
    name: str
    family: PlaceholderFamily
    args: Optional[str] = None

    @property
    def scheme(self) -> str:
        """Lowercase compact scheme name ("Xmin" -> "xmin")."""
        return UPPERCASE_COMPACT_NAMES.get(self.name, self.name)

    @property
    def uppercase(self) -> bool:
        return self.name in UPPERCASE_COMPACT_NAMES

    def compact_arguments(self) -> Tuple[int, int]:
        """Parse "<year>" or "<year>:<length>" into (base_year, min_length)."""
        parts = self.args.split(":") if self.args is not None else []
        if not parts or not _YEAR_PATTERN.match(parts[0]):
            raise FormatError(f"{self.text}: a 4-digit base year is required")
        if len(parts) == 1:
            return int(parts[0]), 1
        if len(parts) > 2 or self.scheme not in PADDED_SCHEMES:
            raise FormatError(f"{self.text}: unexpected arguments")
        if not _LENGTH_PATTERN.match(parts[1]) or int(parts[1]) < 1:
            raise FormatError(f"{self.text}: length must be a number from 1 to 99")
        return int(parts[0]), int(parts[1])

    def prefix_length(self) -> Optional[int]:
        """Parse the ":<length>" of a truncatable literal field, None if absent."""
        if self.args is None:
            return None
        if self.name not in TRUNCATABLE_FIELDS:
            raise FormatError(f"{self.text}: this placeholder takes no arguments")
        if not _COUNT_PATTERN.match(self.args) or int(self.args) < 1:
            raise FormatError(f"{self.text}: length must be a positive number")
        return int(self.args)


FormatSegment = Union[str, Placeholder]


def tokenize(format_string: str) -> List[FormatSegment]:
    """Split a format string into literal text and recognized placeholders.

    Unrecognized "{...}" spans stay inside the surrounding literal text.
    """
    segments: List[FormatSegment] = []
    position = 0

    for match in _PLACEHOLDER_PATTERN.finditer(format_string):
        placeholder = _placeholder_from_match(match)
        if placeholder is None:
            logger.debug("Unknown placeholder %s left as literal text", match.group(0))
            continue
        if match.start() > position:
            segments.append(format_string[position : match.start()])
        segments.append(placeholder)
        position = match.end()

    if position < len(format_string):
        segments.append(format_string[position:])
    return segments


def find_placeholders(
    format_string: str, family: Optional[PlaceholderFamily] = None
) -> List[Placeholder]:
    """Return the recognized placeholders of a format, optionally of one family."""
    return [
        segment
        for segment in tokenize(format_string)
        if isinstance(segment, Placeholder)
        and (family is None or segment.family is family)
    ]


def _placeholder_from_match(match: "re.Match[str]") -> Optional[Placeholder]:
    if match.group("marker_text") is not None:
        return Placeholder(
            text=match.group(0),
            name="!",
            family=PlaceholderFamily.CONDITIONAL_MARKER,
            args=match.group("marker_text"),
        )

    name = match.group("name")
    family = classify(name)
    if family is None:
        return None
    return Placeholder(
        text=match.group(0), name=name, family=family, args=match.group("args")
    )
