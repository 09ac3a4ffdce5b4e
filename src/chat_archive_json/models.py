# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Records produced by the extractor and the archive aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Timestamp:
    """Local wall-clock time of a message; no timezone, no range checks."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    def to_dict(self) -> dict[str, int]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "hour": self.hour,
            "minute": self.minute,
            "second": self.second,
        }


@dataclass(frozen=True)
class MessageRecord:
    """One chat message: body text, author name and optional timestamp."""

    text: str
    author: str
    date: Timestamp | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "author": self.author,
            "date": self.date.to_dict() if self.date is not None else None,
        }


@dataclass(frozen=True)
class UserMessages:
    """All messages of one archive user folder, pages concatenated in order."""

    user_id: str
    messages: tuple[MessageRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "messages": [m.to_dict() for m in self.messages],
        }
