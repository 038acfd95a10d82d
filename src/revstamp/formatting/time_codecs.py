"""
Compact time codecs.

Every codec measures the time elapsed since January 1 of a base year
(00:00 UTC), divides it by a fixed step in minutes and renders the number
of steps as a short token. Instants before the base year are rendered as
the magnitude with a leading "-". Decoders return None for anything they
cannot turn back into a point in time.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

MICROSECONDS_PER_MINUTE = 60 * 1_000_000

# Consonants only, without letters easily confused with digits when
# hand-written. No vowels means no accidental words.
BASE28_ALPHABET = "0123456789bcdfghjkmnpqrtvwxy"
BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
HEX_ALPHABET = "0123456789abcdef"

# Upper bound (exclusive) for the day component of decimal tokens
MAX_DECIMAL_DAYS = 65535

_DECIMAL_TOKEN = re.compile(r"^([0-9]+)\.([0-9]+)$")


def base_epoch(base_year: int) -> datetime:
    """Return January 1 of the base year, 00:00 UTC.

    Raises:
        ValueError: If the year is outside the supported date range.
    """
    return datetime(base_year, 1, 1, tzinfo=timezone.utc)


def elapsed_units(instant: datetime, base_year: int, step_minutes: int) -> int:
    """Count whole steps between the base year epoch and an instant.

    The count is truncated toward the epoch and is negative for instants
    before it. Naive datetimes are interpreted as local time.
    """
    delta = instant.astimezone(timezone.utc) - base_epoch(base_year)
    micro = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    units = abs(micro) // (step_minutes * MICROSECONDS_PER_MINUTE)
    return -units if micro < 0 else units


def instant_from_units(
    base_year: int, units: int, step_minutes: int
) -> Optional[datetime]:
    """Turn a step count back into a UTC instant, or None if out of range."""
    try:
        return base_epoch(base_year) + timedelta(minutes=units * step_minutes)
    except (OverflowError, ValueError):
        return None


def truncate_to_step(instant: datetime, step_minutes: int) -> datetime:
    """Round a UTC instant down to the previous step boundary of its day."""
    instant = instant.astimezone(timezone.utc)
    minute_of_day = instant.hour * 60 + instant.minute
    minute_of_day -= minute_of_day % step_minutes
    return instant.replace(
        hour=minute_of_day // 60, minute=minute_of_day % 60, second=0, microsecond=0
    )


def _split_sign(token: str) -> Tuple[bool, str]:
    if token.startswith("-"):
        return True, token[1:]
    return False, token


class PositionalTimeCodec:
    """Positional numeral system over a custom alphabet."""

    def __init__(self, name: str, alphabet: str, step_minutes: int):
        self.name = name
        self.alphabet = alphabet
        self.step_minutes = step_minutes
        self._digit_values: Dict[str, int] = {
            char: value for value, char in enumerate(alphabet)
        }

    @property
    def radix(self) -> int:
        return len(self.alphabet)

    def encode(self, instant: datetime, base_year: int, min_length: int = 1) -> str:
        units = elapsed_units(instant, base_year, self.step_minutes)
        value = abs(units)
        digits = []
        while value > 0:
            value, digit = divmod(value, self.radix)
            digits.append(self.alphabet[digit])
        token = "".join(reversed(digits)).rjust(min_length, "0")
        return "-" + token if units < 0 else token

    def decode(self, base_year: int, token: str) -> Optional[datetime]:
        negative, magnitude = _split_sign(token.strip().lower())
        if not magnitude:
            return None
        value = 0
        for char in magnitude:
            digit = self._digit_values.get(char)
            if digit is None:
                return None
            value = value * self.radix + digit
        return instant_from_units(
            base_year, -value if negative else value, self.step_minutes
        )

    def __repr__(self) -> str:
        return (
            f"PositionalTimeCodec({self.name!r}, radix={self.radix}, "
            f"step={self.step_minutes})"
        )


class DecimalTimeCodec:
    """Dotted decimal "days.unit_of_day" tokens for numeric-only version fields."""

    def __init__(self, name: str, step_minutes: int):
        self.name = name
        self.step_minutes = step_minutes
        self.units_per_day = 24 * 60 // step_minutes

    def encode(self, instant: datetime, base_year: int, min_length: int = 1) -> str:
        # Decimal tokens are never padded
        units = elapsed_units(instant, base_year, self.step_minutes)
        days, unit_of_day = divmod(abs(units), self.units_per_day)
        token = f"{days}.{unit_of_day}"
        return "-" + token if units < 0 else token

    def decode(self, base_year: int, token: str) -> Optional[datetime]:
        negative, magnitude = _split_sign(token.strip())
        match = _DECIMAL_TOKEN.match(magnitude)
        if not match:
            return None
        days = int(match.group(1))
        unit_of_day = int(match.group(2))
        if days >= MAX_DECIMAL_DAYS or unit_of_day >= self.units_per_day:
            return None
        units = days * self.units_per_day + unit_of_day
        return instant_from_units(
            base_year, -units if negative else units, self.step_minutes
        )

    def __repr__(self) -> str:
        return f"DecimalTimeCodec({self.name!r}, step={self.step_minutes})"


HEX_MINUTES = PositionalTimeCodec("hex-minutes", HEX_ALPHABET, 1)
BASE28_MINUTES = PositionalTimeCodec("base28-minutes", BASE28_ALPHABET, 20)
BASE36_MINUTES = PositionalTimeCodec("base36-minutes", BASE36_ALPHABET, 10)
DECIMAL_MINUTES = DecimalTimeCodec("decimal-minutes", 15)
DECIMAL_2_MINUTES = DecimalTimeCodec("decimal-2-minutes", 2)
