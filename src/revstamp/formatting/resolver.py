"""
Revision format resolution.

Turns a format string such as "{!}{commit:8}-{date}" into a version
string using the data of one checked out revision and the build time.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import FormatError, RevisionRangeError
from ..revision_data import RevisionData
from .placeholders import (
    DATE_TIME_PLACEHOLDERS,
    DATE_TIME_SUB_FORMATS,
    LITERAL_FIELD_PLACEHOLDERS,
    FormatCatalogue,
    Placeholder,
    PlaceholderFamily,
    codec_for_scheme,
    tokenize,
)

logger = logging.getLogger(__name__)


class RevisionFormatResolver:
    """
    Resolves format strings against one revision.

    The resolver holds no mutable state: the revision data, the build time
    and the catalogue version are fixed at construction, so one instance
    can resolve any number of format strings with consistent results.
    """

    def __init__(
        self,
        revision: RevisionData,
        build_time: Optional[datetime] = None,
        catalogue: FormatCatalogue = FormatCatalogue.CURRENT,
    ):
        """
        Initialize RevisionFormatResolver.

        Args:
            revision: Data of the checked out revision
            build_time: Build timestamp, defaults to the current local time
            catalogue: Placeholder catalogue version used for {bmin}
        """
        self.revision = revision
        self.build_time = build_time or datetime.now().astimezone()
        self.catalogue = FormatCatalogue(catalogue)

    def resolve(self, format_string: str) -> str:
        """
        Resolve all placeholders of a format string.

        Args:
            format_string: Text with zero or more placeholders

        Returns:
            The resolved string

        Raises:
            FormatError: If a placeholder has malformed arguments
            RevisionRangeError: If {commit:<N>} asks for more characters than
                the commit hash has
        """
        parts = []
        for segment in tokenize(format_string):
            if isinstance(segment, Placeholder):
                parts.append(self._render(segment))
            else:
                parts.append(segment)
        resolved = "".join(parts)
        logger.debug("Resolved format %r to %r", format_string, resolved)
        return resolved

    def _render(self, placeholder: Placeholder) -> str:
        family = placeholder.family
        if family is PlaceholderFamily.CONDITIONAL_MARKER:
            return self._render_marker(placeholder)
        if family is PlaceholderFamily.LITERAL_FIELD:
            return self._render_literal_field(placeholder)
        if family is PlaceholderFamily.DATE_TIME:
            return self._render_date_time(placeholder)
        if family is PlaceholderFamily.COMPACT_TIME:
            return self._render_compact_time(placeholder)
        raise FormatError(f"Unsupported placeholder: {placeholder.text}")

    def _render_marker(self, placeholder: Placeholder) -> str:
        if not self.revision.is_modified:
            return ""
        return "!" if placeholder.args is None else placeholder.args

    def _render_literal_field(self, placeholder: Placeholder) -> str:
        attribute = LITERAL_FIELD_PLACEHOLDERS[placeholder.name]
        value = str(getattr(self.revision, attribute))
        length = placeholder.prefix_length()
        if length is None:
            return value
        if length > len(value):
            raise RevisionRangeError(
                f"{placeholder.text}: the commit identifier {value!r} has only "
                f"{len(value)} characters"
            )
        return value[:length]

    def _render_date_time(self, placeholder: Placeholder) -> str:
        rule = DATE_TIME_PLACEHOLDERS[placeholder.name]
        if placeholder.args is None:
            time_format = rule.default_format
        else:
            try:
                time_format = DATE_TIME_SUB_FORMATS[placeholder.args]
            except KeyError:
                raise FormatError(
                    f"{placeholder.text}: unknown date/time format {placeholder.args!r}"
                )

        value = self._source_time(rule.source)
        if rule.utc:
            value = value.astimezone(timezone.utc)
        return value.strftime(time_format)

    def _source_time(self, source: str) -> datetime:
        if source == "build":
            return self.build_time
        if source == "author" and self.revision.author_time is not None:
            return self.revision.author_time
        return self.revision.commit_time

    def _render_compact_time(self, placeholder: Placeholder) -> str:
        base_year, min_length = placeholder.compact_arguments()
        codec = codec_for_scheme(placeholder.scheme, self.catalogue)
        try:
            token = codec.encode(self.revision.commit_time, base_year, min_length)
        except ValueError as e:
            raise FormatError(f"{placeholder.text}: invalid base year ({e})")
        return token.upper() if placeholder.uppercase else token
