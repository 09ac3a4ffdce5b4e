# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Extract chat messages from a saved HTML messaging archive into JSON."""

from .config import DEFAULT_CONFIG, ExtractorConfig
from .errors import (
    ArchiveError,
    ArchiveLayoutError,
    DateFormatError,
    MalformedMessageError,
    PageDecodeError,
    UnrecognizedMonthError,
)
from .extractor import MessageExtractor, extract_page
from .models import MessageRecord, Timestamp, UserMessages

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "ArchiveError",
    "ArchiveLayoutError",
    "DateFormatError",
    "ExtractorConfig",
    "MalformedMessageError",
    "MessageExtractor",
    "MessageRecord",
    "PageDecodeError",
    "Timestamp",
    "UnrecognizedMonthError",
    "UserMessages",
    "__version__",
    "extract_page",
]
