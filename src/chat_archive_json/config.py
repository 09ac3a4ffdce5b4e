# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Fixed markup and locale constants for the archive format."""

from __future__ import annotations

from dataclasses import dataclass

MESSAGES_FOLDER = "messages"
MESSAGE_CLASS = "message"
MESSAGE_HEADER_CLASS = "message__header"
LINK_TAG = "a"
# Author of messages without a profile link: the archive owner.
SELF_LABEL = "You"

RU_MONTHS: tuple[str, ...] = (
    "янв",
    "фев",
    "мар",
    "апр",
    "мая",
    "июн",
    "июл",
    "авг",
    "сен",
    "окт",
    "ноя",
    "дек",
)

DEFAULT_ENCODING = "cp1251"
DEFAULT_PARSER = "html.parser"
SUPPORTED_PARSERS = ("html.parser", "lxml")


@dataclass(frozen=True)
class ExtractorConfig:
    """Markup dialect and locale the message extractor is built for.

    Attributes:
        message_class: Class token marking a message container
        header_class: Class token marking the sender/date header of a message
        months: Month abbreviations, January first
        link_tag: Tag name of the profile link carrying the author name
        self_label: Author used when the header has no profile link
    """

    message_class: str = MESSAGE_CLASS
    header_class: str = MESSAGE_HEADER_CLASS
    months: tuple[str, ...] = RU_MONTHS
    link_tag: str = LINK_TAG
    self_label: str = SELF_LABEL

    def __post_init__(self) -> None:
        if len(self.months) != 12:
            raise ValueError(f"Month table must have 12 entries, got {len(self.months)}")
        if not self.message_class.strip() or not self.header_class.strip():
            raise ValueError("Message and header class tokens must be non-empty")

    def month_number(self, abbreviation: str) -> int | None:
        """Return the 1-based month for *abbreviation*, or None if unknown."""
        try:
            return self.months.index(abbreviation) + 1
        except ValueError:
            return None


DEFAULT_CONFIG = ExtractorConfig()
