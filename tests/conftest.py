# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later
"""Shared fixtures: sample pages and a small on-disk archive."""

import tempfile
from pathlib import Path
from typing import Iterator

import pytest

PAGE_ONE = """<!DOCTYPE html>
<html>
<head><meta charset="windows-1251"><title>Сообщения</title></head>
<body>
<div class="wrap_page_content">
  <div class="item">
    <div class="message" data-id="101">
      <div class="message__header"><a href="https://vk.com/id1">Иван</a>, 5 мар 2020 в 13:02:07</div>
      <div>Привет!
        Как дела?</div>
      <div class="kludges"></div>
    </div>
  </div>
  <div class="item">
    <div class="message" data-id="102">
      <div class="message__header">Вы, 5 мар 2020 в 13:05:41</div>
      <div>Отлично</div>
    </div>
  </div>
</div>
</body>
</html>
"""

PAGE_TWO = """<html><body>
<div class="message"><div class="message__header"><a href="https://vk.com/id1">Иван</a>, 12 мая 2019 в 9:00:00 (ред.)</div><div>Ещё одно</div></div>
</body></html>
"""


@pytest.fixture
def sample_archive() -> Iterator[Path]:
    """Archive with one user holding two pages and one user with none."""
    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        messages = root / "messages"
        user = messages / "12345"
        user.mkdir(parents=True)
        (user / "messages0.html").write_bytes(PAGE_ONE.encode("cp1251"))
        (user / "messages50.html").write_bytes(PAGE_TWO.encode("cp1251"))
        (user / "notes.txt").write_text("not a page", encoding="utf-8")
        (messages / "67890").mkdir()
        (messages / "index-messages.html").write_bytes(b"<html></html>")
        yield root


@pytest.fixture
def page_one_html() -> str:
    return PAGE_ONE
