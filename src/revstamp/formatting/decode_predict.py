"""
Decoding and previewing compact time tokens.

Decode mode turns a token such as "1000" for {xmin:2011} back into the
instant it represents. Predict mode lists the tokens a compact placeholder
will produce over the next few steps, so a format can be checked for
unfortunate-looking values before it ships.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, NamedTuple, Optional

from ..exceptions import FormatError
from .placeholders import (
    UPPERCASE_COMPACT_NAMES,
    FormatCatalogue,
    Placeholder,
    PlaceholderFamily,
    codec_for_scheme,
    find_placeholders,
)
from .time_codecs import base_epoch, truncate_to_step

logger = logging.getLogger(__name__)

DEFAULT_PREDICT_COUNT = 10

_DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


class Prediction(NamedTuple):
    instant: datetime
    token: str


def compact_placeholder(format_string: str) -> Placeholder:
    """Return the only compact time placeholder of a format.

    Raises:
        FormatError: If the format has no or more than one compact placeholder
    """
    found = find_placeholders(format_string, PlaceholderFamily.COMPACT_TIME)
    if not found:
        raise FormatError(
            f"The format {format_string!r} contains no compact time placeholder"
        )
    if len(found) > 1:
        names = ", ".join(p.text for p in found)
        raise FormatError(
            f"The format {format_string!r} contains more than one compact time "
            f"placeholder: {names}"
        )
    return found[0]


def normalize_scheme(scheme: str) -> str:
    return UPPERCASE_COMPACT_NAMES.get(scheme, scheme.lower())


def check_base_year(base_year: int) -> None:
    """Raise FormatError if January 1 of the base year is not a valid date."""
    try:
        base_epoch(base_year)
    except ValueError as e:
        raise FormatError(f"Invalid base year {base_year}: {e}")


def decode_value(
    scheme: str,
    base_year: int,
    token: str,
    catalogue: FormatCatalogue = FormatCatalogue.CURRENT,
) -> Optional[datetime]:
    """Decode a token of a compact scheme, returning None if it is invalid.

    Instants that cannot be shown in local time are invalid as well.

    Raises:
        FormatError: If the scheme or the base year is invalid
    """
    codec = codec_for_scheme(normalize_scheme(scheme), catalogue)
    check_base_year(base_year)
    instant = codec.decode(base_year, token)
    if instant is None:
        return None
    try:
        instant.astimezone()
    except (OverflowError, ValueError):
        logger.debug("Decoded instant %s is out of the local date range", instant)
        return None
    return instant


def decode_from_format(
    format_string: str,
    token: str,
    catalogue: FormatCatalogue = FormatCatalogue.CURRENT,
) -> Optional[datetime]:
    """Decode a token using the compact placeholder found in a format."""
    placeholder = compact_placeholder(format_string)
    base_year, _ = placeholder.compact_arguments()
    return decode_value(placeholder.scheme, base_year, token, catalogue)


def predict_values(
    scheme: str,
    base_year: int,
    count: int = DEFAULT_PREDICT_COUNT,
    now: Optional[datetime] = None,
    catalogue: FormatCatalogue = FormatCatalogue.CURRENT,
    min_length: int = 1,
    uppercase: bool = False,
) -> List[Prediction]:
    """
    List the next tokens of a compact scheme.

    Args:
        scheme: Compact scheme name (xmin, bmin, b36min, dmin, d2min)
        base_year: Base year of the encoding
        count: Number of consecutive steps to list
        now: Start instant, defaults to the current time
        catalogue: Placeholder catalogue version used for bmin
        min_length: Minimum token length
        uppercase: Render alphabetic digits in uppercase

    Returns:
        One prediction per step, starting at now rounded down to the step
    """
    codec = codec_for_scheme(normalize_scheme(scheme), catalogue)
    check_base_year(base_year)
    step = timedelta(minutes=codec.step_minutes)
    instant = truncate_to_step(now or datetime.now(timezone.utc), codec.step_minutes)

    predictions = []
    for _ in range(count):
        token = codec.encode(instant, base_year, min_length)
        predictions.append(Prediction(instant, token.upper() if uppercase else token))
        instant += step
    return predictions


def predict_from_format(
    format_string: str,
    count: int = DEFAULT_PREDICT_COUNT,
    now: Optional[datetime] = None,
    catalogue: FormatCatalogue = FormatCatalogue.CURRENT,
) -> List[Prediction]:
    """List the next tokens of the compact placeholder found in a format."""
    placeholder = compact_placeholder(format_string)
    base_year, min_length = placeholder.compact_arguments()
    return predict_values(
        placeholder.scheme,
        base_year,
        count=count,
        now=now,
        catalogue=catalogue,
        min_length=min_length,
        uppercase=placeholder.uppercase,
    )


def format_decoded(instant: datetime) -> List[str]:
    """Render a decoded instant as a UTC line and a local time line."""
    utc = instant.astimezone(timezone.utc)
    local = instant.astimezone()
    return [
        utc.strftime(_DISPLAY_FORMAT) + " UTC",
        local.strftime(_DISPLAY_FORMAT + " %z"),
    ]


def format_prediction(prediction: Prediction) -> str:
    local = prediction.instant.astimezone()
    return f"{local.strftime(_DISPLAY_FORMAT + ' %z')} = {prediction.token}"
