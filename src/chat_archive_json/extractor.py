# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Message extraction from a parsed archive page.

Message containers, their headers, authors, dates and body text are located
purely by class tokens and tree shape; the saved pages carry no other schema.
"""

from __future__ import annotations

import logging
import re

from bs4.element import PageElement

from .config import DEFAULT_CONFIG, ExtractorConfig
from .errors import DateFormatError, MalformedMessageError, UnrecognizedMonthError
from .models import MessageRecord, Timestamp
from .tree import find_by_class, has_class, is_element, is_text, search

LOGGER = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# Date patterns                                                               #
# --------------------------------------------------------------------------- #

# Stage 1: picks the header fragment holding the date, e.g. "..., 5 мар 2020 в 13:02:07".
# The leading comma separates it from other header text such as status lines.
_DATE_LINE_RE = re.compile(r", \d{1,2} \S{2,3} \d{4}")

# Stage 2: day, month abbreviation, year, one separator word, H:MM:SS.
_DATE_FIELDS_RE = re.compile(
    r"(\d{1,2}) (\D{2,3}) (\d{4}) \D (\d{1,2}):(\d{1,2}):(\d{1,2})"
)

# A newline run followed by indentation left over from wrapped markup.
_WRAPPED_LINE_RE = re.compile(r"\n+\s+")

_FRAGMENT_SEPARATOR = "\n\n"


def join_text_fragments(fragments: list[str]) -> str:
    """Join body text fragments with a blank line between them."""
    return _FRAGMENT_SEPARATOR.join(fragments)


def normalize_body_text(text: str) -> str:
    """Collapse newline runs and their trailing indentation, then trim."""
    return _WRAPPED_LINE_RE.sub("\n", text).strip()


class MessageExtractor:
    """Turns message containers of one markup dialect into MessageRecords.

    The extractor holds only its immutable configuration, so one instance can
    be shared between threads or sent to worker processes.
    """

    def __init__(self, config: ExtractorConfig = DEFAULT_CONFIG, strict: bool = False) -> None:
        self.config = config
        self.strict = strict

    def __repr__(self) -> str:
        return f"{type(self).__name__}(config={self.config!r}, strict={self.strict!r})"

    # ------------------------------------------------------------------ #
    # Locating                                                           #
    # ------------------------------------------------------------------ #

    def find_messages(self, document: PageElement | None) -> list[PageElement]:
        """All message containers in *document*, nested ones included."""
        return find_by_class(document, self.config.message_class)

    def find_message_header(self, message: PageElement | None) -> PageElement | None:
        """First node under *message* (inclusive) carrying the header class."""
        headers = find_by_class(message, self.config.header_class)
        return headers[0] if headers else None

    # ------------------------------------------------------------------ #
    # Field extractors                                                   #
    # ------------------------------------------------------------------ #

    def parse_author_name(self, message: PageElement) -> str:
        """Return the name in the header's first profile link.

        Messages without a header or without a link were sent by the archive
        owner and get the configured self label.

        Raises:
            MalformedMessageError: If the first link does not start with text
        """
        header = self.find_message_header(message)
        links = search(header, lambda node: is_element(node, self.config.link_tag))
        if not links:
            return self.config.self_label

        first_link = links[0]
        first_child = first_link.contents[0] if first_link.contents else None
        if first_child is None or not is_text(first_child):
            raise MalformedMessageError(
                f"Author link <{self.config.link_tag}> in message header has no leading text"
            )
        return str(first_child).strip()

    def find_date_line(self, header: PageElement | None) -> str | None:
        """Return the first header text fragment that looks like a date line."""
        for node in search(header, is_text):
            if _DATE_LINE_RE.search(str(node)):
                return str(node)
        return None

    def parse_date_line(self, fragment: str) -> Timestamp:
        """Parse day, month, year and time out of a date line.

        Raises:
            DateFormatError: If the fragment has no ``D MMM YYYY <sep> H:MM:SS`` part
            UnrecognizedMonthError: If the month is not in the month table
        """
        match = _DATE_FIELDS_RE.search(fragment)
        if match is None:
            raise DateFormatError(fragment)

        day, month_name, year, hour, minute, second = match.groups()
        month = self.config.month_number(month_name)
        if month is None:
            raise UnrecognizedMonthError(month_name, fragment)

        return Timestamp(
            year=int(year),
            month=month,
            day=int(day),
            hour=int(hour),
            minute=int(minute),
            second=int(second),
        )

    def parse_date(self, message: PageElement) -> Timestamp | None:
        """Timestamp from the message header, or None when it carries no date."""
        fragment = self.find_date_line(self.find_message_header(message))
        if fragment is None:
            return None
        return self.parse_date_line(fragment)

    def parse_message_text(self, message: PageElement) -> str:
        """Body text of *message*; header text never contributes."""
        header_class = self.config.header_class
        texts = search(message, is_text, lambda node: not has_class(node, header_class))
        return normalize_body_text(join_text_fragments([str(t) for t in texts]))

    def parse_message(self, message: PageElement) -> MessageRecord:
        return MessageRecord(
            text=self.parse_message_text(message),
            author=self.parse_author_name(message),
            date=self.parse_date(message),
        )

    # ------------------------------------------------------------------ #
    # Page                                                               #
    # ------------------------------------------------------------------ #

    def extract_page(
        self, document: PageElement | None, source: str = "<document>"
    ) -> list[MessageRecord]:
        """Extract every message of one parsed page, in document order.

        Records whose extraction fails are logged and dropped unless the
        extractor is strict, in which case the error propagates.
        """
        nodes = self.find_messages(document)
        LOGGER.debug("%s: found %d message containers", source, len(nodes))

        records: list[MessageRecord] = []
        for i, node in enumerate(nodes):
            try:
                records.append(self.parse_message(node))
            except UnrecognizedMonthError as exc:
                if self.strict:
                    raise
                LOGGER.warning(
                    "%s: message %d dropped, month '%s' is not in the month table: %s",
                    source, i, exc.month, exc.fragment,
                )
            except MalformedMessageError as exc:
                if self.strict:
                    raise
                LOGGER.warning("%s: message %d dropped: %s", source, i, exc)

        dropped = len(nodes) - len(records)
        if dropped:
            LOGGER.info("%s: extracted %d messages, dropped %d", source, len(records), dropped)
        else:
            LOGGER.debug("%s: extracted %d messages", source, len(records))
        return records


_DEFAULT_EXTRACTOR = MessageExtractor()


def extract_page(document: PageElement | None) -> list[MessageRecord]:
    """Extract messages from *document* with the default archive dialect."""
    return _DEFAULT_EXTRACTOR.extract_page(document)
