# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Decoding saved pages and parsing them into BeautifulSoup trees."""

from __future__ import annotations

import codecs
import logging

from bs4 import BeautifulSoup

from .config import DEFAULT_ENCODING, DEFAULT_PARSER, SUPPORTED_PARSERS
from .errors import PageDecodeError

LOGGER = logging.getLogger(__name__)


def decode_page(raw: bytes, encoding: str = DEFAULT_ENCODING, source: str = "<bytes>") -> str:
    """Decode raw page bytes strictly.

    Args:
        raw: Page content as read from disk
        encoding: Codec name, cp1251 for the archive's own pages
        source: Label used in log and error messages

    Returns:
        Decoded markup

    Raises:
        PageDecodeError: If the codec is unknown or the bytes are invalid for it
    """
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise PageDecodeError(f"Unknown encoding '{encoding}' for {source}") from exc

    try:
        text = raw.decode(encoding)  # Strict decoding - raise on invalid bytes
    except UnicodeDecodeError as exc:
        LOGGER.error("Cannot decode %s with encoding %s: %s", source, encoding, exc)
        raise PageDecodeError(f"Cannot decode {source} with encoding {encoding}: {exc}") from exc

    LOGGER.debug("Decoded %s with %s: %d bytes -> %d chars", source, encoding, len(raw), len(text))
    return text


def _merge_duplicate_attribute(attrs: dict[str, str], key: str, value: str) -> None:
    """Join repeated class attributes; other repeated attributes keep their first value."""
    if key == "class":
        attrs[key] = f"{attrs[key]} {value}"


def parse_document(html: str, parser: str = DEFAULT_PARSER) -> BeautifulSoup:
    """Parse *html* into a BeautifulSoup document.

    With ``html.parser`` an element's repeated ``class`` attributes are merged
    into one token list. lxml drops repeated attributes before BeautifulSoup
    sees them, so only the first ``class`` survives there.

    Raises:
        ValueError: If *parser* is not one of SUPPORTED_PARSERS
    """
    if parser not in SUPPORTED_PARSERS:
        raise ValueError(
            f"Unsupported parser '{parser}'. Use one of: {', '.join(SUPPORTED_PARSERS)}"
        )

    if parser == "html.parser":
        soup = BeautifulSoup(html, parser, on_duplicate_attribute=_merge_duplicate_attribute)
    else:
        soup = BeautifulSoup(html, parser)
    LOGGER.debug("Parsed %d chars of markup with %s", len(html), parser)
    return soup
