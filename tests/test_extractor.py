# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later
"""Tests for the extractor module."""

import logging
import pickle

import pytest

from chat_archive_json.config import ExtractorConfig
from chat_archive_json.errors import (
    DateFormatError,
    MalformedMessageError,
    UnrecognizedMonthError,
)
from chat_archive_json.extractor import (
    MessageExtractor,
    extract_page,
    join_text_fragments,
    normalize_body_text,
)
from chat_archive_json.markup import parse_document
from chat_archive_json.models import MessageRecord, Timestamp


def _message(html: str):
    extractor = MessageExtractor()
    return extractor.find_messages(parse_document(html))[0]


def test_parse_date_line() -> None:
    """Test the documented header date example."""
    extractor = MessageExtractor()

    assert extractor.parse_date_line(", 5 мар 2020 в 13:02:07") == Timestamp(
        year=2020, month=3, day=5, hour=13, minute=2, second=7
    )


def test_parse_date_from_header() -> None:
    """Test that the date line is picked among several header text fragments."""
    message = _message(
        '<div class="message"><div class="message__header">'
        '<a href="/id1">Иван</a>, 12 мая 2019 в 9:05:00 (ред.)'
        "</div><div>text</div></div>"
    )

    assert MessageExtractor().parse_date(message) == Timestamp(2019, 5, 12, 9, 5, 0)


def test_parse_date_skips_non_date_fragments() -> None:
    """Test that header text without the comma-prefixed date is ignored."""
    message = _message(
        '<div class="message"><div class="message__header">'
        "<span>online 5 мар 2020</span><span>Иван, 1 янв 2021 в 0:00:01</span>"
        "</div></div>"
    )

    assert MessageExtractor().parse_date(message) == Timestamp(2021, 1, 1, 0, 0, 1)


def test_parse_date_without_date_text() -> None:
    """Test that a header with no date-like text yields None."""
    message = _message('<div class="message"><div class="message__header">Иван</div></div>')

    assert MessageExtractor().parse_date(message) is None


def test_parse_date_without_header() -> None:
    """Test that a message without a header yields None."""
    message = _message('<div class="message"><div>, 5 мар 2020 в 13:02:07</div></div>')

    assert MessageExtractor().parse_date(message) is None


def test_parse_date_unrecognized_month() -> None:
    """Test that an unknown month is an error distinct from a missing date."""
    message = _message(
        '<div class="message"><div class="message__header">Иван, 5 xyz 2020 в 13:02:07</div></div>'
    )

    with pytest.raises(UnrecognizedMonthError) as excinfo:
        MessageExtractor().parse_date(message)
    assert excinfo.value.month == "xyz"


def test_parse_date_line_without_time() -> None:
    """Test that a date line lacking the time part raises DateFormatError."""
    message = _message(
        '<div class="message"><div class="message__header">Иван, 5 мар 2020</div></div>'
    )

    with pytest.raises(DateFormatError):
        MessageExtractor().parse_date(message)


def test_parse_date_values_taken_literally() -> None:
    """Test that out-of-range components are not validated."""
    assert MessageExtractor().parse_date_line(", 31 фев 2020 в 25:61:61") == Timestamp(
        2020, 2, 31, 25, 61, 61
    )


def test_parse_author_name_from_link() -> None:
    """Test that the first header link's text is the author."""
    message = _message(
        '<div class="message"><div class="message__header">'
        '<a href="/id1">  Иван </a>, <a href="/id2">Пётр</a></div></div>'
    )

    assert MessageExtractor().parse_author_name(message) == "Иван"


def test_parse_author_name_without_link() -> None:
    """Test that headers without a link belong to the archive owner."""
    message = _message('<div class="message"><div class="message__header">Вы, 5 мар 2020</div></div>')

    assert MessageExtractor().parse_author_name(message) == "You"


def test_parse_author_name_without_header() -> None:
    """Test that a message without a header defaults to the self label."""
    message = _message('<div class="message"><a href="/id1">Иван</a></div>')

    assert MessageExtractor().parse_author_name(message) == "You"


def test_parse_author_name_link_without_text() -> None:
    """Test that a link not starting with text is a malformed message."""
    message = _message(
        '<div class="message"><div class="message__header"><a href="/id1"><img src="a.png"/>Иван</a></div></div>'
    )

    with pytest.raises(MalformedMessageError):
        MessageExtractor().parse_author_name(message)


def test_join_text_fragments() -> None:
    """Test that fragments are separated by a blank line before normalization."""
    assert join_text_fragments(["Hello", "World"]) == "Hello\n\nWorld"


def test_normalize_body_text() -> None:
    """Test that wrapped-line indentation collapses to a single newline."""
    assert normalize_body_text("\n  first\n        second\n\n\n  third  \n") == "first\nsecond\nthird"


def test_parse_message_text_fragments_at_different_depths() -> None:
    """Test joining and normalizing text from different nesting levels."""
    message = _message('<div class="message"><p>Hello</p><div><span>World</span></div></div>')

    assert MessageExtractor().parse_message_text(message) == "Hello\nWorld"


def test_parse_message_text_excludes_deep_header() -> None:
    """Test that header text is excluded even when nested under other nodes."""
    message = _message(
        '<div class="message"><div><div><div class="message__header">'
        '<a href="/id1">Иван</a>, 5 мар 2020 в 13:02:07</div></div>'
        "<p>Body</p></div></div>"
    )
    extractor = MessageExtractor()

    assert extractor.parse_message_text(message) == "Body"
    assert extractor.parse_author_name(message) == "Иван"


def test_find_message_header_first_in_preorder() -> None:
    """Test that the first header in document order is used."""
    message = _message(
        '<div class="message"><div class="message__header" id="h1"></div>'
        '<div class="message__header" id="h2"></div></div>'
    )

    assert MessageExtractor().find_message_header(message)["id"] == "h1"


def test_extract_page(page_one_html: str) -> None:
    """Test extracting a realistic page in document order."""
    records = extract_page(parse_document(page_one_html))

    assert records == [
        MessageRecord(
            text="Привет!\nКак дела?",
            author="Иван",
            date=Timestamp(2020, 3, 5, 13, 2, 7),
        ),
        MessageRecord(text="Отлично", author="You", date=Timestamp(2020, 3, 5, 13, 5, 41)),
    ]


def test_extract_page_without_messages() -> None:
    """Test that a page without message containers yields an empty list."""
    assert extract_page(parse_document("<html><body><p>nothing</p></body></html>")) == []
    assert extract_page(None) == []


def test_extract_page_drops_malformed_records(caplog: pytest.LogCaptureFixture) -> None:
    """Test that one bad message is dropped while its siblings are kept."""
    html = (
        '<div class="message"><div class="message__header">Вы, 1 янв 2020 в 1:00:00</div>one</div>'
        '<div class="message"><div class="message__header">Вы, 2 foo 2020 в 1:00:00</div>two</div>'
        '<div class="message"><div class="message__header"><a href="/x"><b>?</b></a></div>three</div>'
        '<div class="message">four</div>'
    )

    with caplog.at_level(logging.WARNING, logger="chat_archive_json.extractor"):
        records = MessageExtractor().extract_page(parse_document(html), source="page.html")

    assert [r.text for r in records] == ["one", "four"]
    assert records[1] == MessageRecord(text="four", author="You", date=None)
    assert "month 'foo' is not in the month table" in caplog.text
    assert "no leading text" in caplog.text


def test_extract_page_strict_raises() -> None:
    """Test that a strict extractor propagates record errors."""
    html = '<div class="message"><div class="message__header">Вы, 2 foo 2020 в 1:00:00</div>x</div>'

    with pytest.raises(UnrecognizedMonthError):
        MessageExtractor(strict=True).extract_page(parse_document(html))


def test_custom_config() -> None:
    """Test that class tokens, month table and self label are configurable."""
    config = ExtractorConfig(
        message_class="msg",
        header_class="msg-head",
        months=("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
        self_label="Me",
    )
    html = '<div class="msg"><div class="msg-head">Me, 7 Jun 2018 @ 8:09:10</div><p>hi</p></div>'

    records = MessageExtractor(config).extract_page(parse_document(html))

    assert records == [MessageRecord(text="hi", author="Me", date=Timestamp(2018, 6, 7, 8, 9, 10))]


def test_config_rejects_bad_month_table() -> None:
    """Test that a month table must have twelve entries."""
    with pytest.raises(ValueError, match="12 entries"):
        ExtractorConfig(months=("янв",))


def test_record_to_dict() -> None:
    """Test the JSON-ready shape of a record."""
    record = MessageRecord(text="t", author="a", date=Timestamp(2020, 3, 5, 13, 2, 7))

    assert record.to_dict() == {
        "text": "t",
        "author": "a",
        "date": {"year": 2020, "month": 3, "day": 5, "hour": 13, "minute": 2, "second": 7},
    }
    assert MessageRecord(text="t", author="a").to_dict()["date"] is None


def test_date_errors_survive_pickling() -> None:
    """Test that date errors keep their fields when sent between processes."""
    month_error = pickle.loads(pickle.dumps(UnrecognizedMonthError("abc", ", 3 abc 2015 в 1:02:03")))
    format_error = pickle.loads(pickle.dumps(DateFormatError(", 5 мар 2020")))

    assert isinstance(month_error, UnrecognizedMonthError)
    assert month_error.month == "abc"
    assert month_error.fragment == ", 3 abc 2015 в 1:02:03"
    assert "'abc'" in str(month_error)
    assert format_error.fragment == ", 5 мар 2020"
    assert str(format_error) == "Cannot parse date fields from header text ', 5 мар 2020'"
