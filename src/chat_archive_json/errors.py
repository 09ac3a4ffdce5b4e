# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Exceptions raised while reading an archive and extracting messages."""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for every error raised by this package."""


class ArchiveLayoutError(ArchiveError):
    """The archive directory does not have the expected layout."""


class PageDecodeError(ArchiveError):
    """Raw page bytes could not be decoded with the configured encoding."""


class MalformedMessageError(ArchiveError):
    """A single message container could not be turned into a record.

    Raised by the field extractors; the page extractor drops the offending
    record and keeps going.
    """


class DateFormatError(MalformedMessageError):
    """A header fragment looks like a date line but its fields do not parse."""

    def __init__(self, fragment: str) -> None:
        super().__init__(fragment)
        self.fragment = fragment

    def __str__(self) -> str:
        return f"Cannot parse date fields from header text {self.fragment!r}"


class UnrecognizedMonthError(MalformedMessageError):
    """A date parsed but its month abbreviation is not in the month table."""

    def __init__(self, month: str, fragment: str) -> None:
        # args mirror the constructor so the error survives pickling
        super().__init__(month, fragment)
        self.month = month
        self.fragment = fragment

    def __str__(self) -> str:
        return f"Unrecognized month abbreviation {self.month!r} in header text {self.fragment!r}"
