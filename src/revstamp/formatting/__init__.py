"""Revision format language and compact time codecs."""

from .placeholders import FormatCatalogue, Placeholder, PlaceholderFamily, tokenize
from .resolver import RevisionFormatResolver
from .time_codecs import (
    BASE28_MINUTES,
    BASE36_MINUTES,
    DECIMAL_2_MINUTES,
    DECIMAL_MINUTES,
    HEX_MINUTES,
)

__all__ = [
    "FormatCatalogue",
    "Placeholder",
    "PlaceholderFamily",
    "tokenize",
    "RevisionFormatResolver",
    "HEX_MINUTES",
    "BASE28_MINUTES",
    "BASE36_MINUTES",
    "DECIMAL_MINUTES",
    "DECIMAL_2_MINUTES",
]
