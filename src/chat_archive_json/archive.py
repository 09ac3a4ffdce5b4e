# Copyright (C) 2025 Torsten Knodt and contributors
# GNU General Public License
# SPDX-License-Identifier: GPL-3.0-or-later

"""Archive traversal: user folders of saved pages to per-user message lists."""

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_ENCODING, DEFAULT_PARSER, MESSAGES_FOLDER
from .errors import ArchiveError, ArchiveLayoutError, MalformedMessageError
from .extractor import MessageExtractor
from .markup import decode_page, parse_document
from .models import MessageRecord, UserMessages

LOGGER = logging.getLogger(__name__)

PAGE_SUFFIXES = (".html",)


@dataclass(frozen=True)
class UserFolder:
    """A user's folder in the archive and the pages found in it."""

    user_id: str
    path: Path
    pages: tuple[Path, ...]


# --------------------------------------------------------------------------- #
# Discovery                                                                   #
# --------------------------------------------------------------------------- #


def messages_path(archive_path: Path) -> Path:
    return archive_path / MESSAGES_FOLDER


def find_user_folders(archive_path: Path) -> list[UserFolder]:
    """Return every user folder under ``<archive>/messages`` with its pages.

    Raises:
        ArchiveLayoutError: If the archive has no messages directory
    """
    root = messages_path(archive_path)
    if not root.is_dir():
        raise ArchiveLayoutError(f"Archive {archive_path} has no '{MESSAGES_FOLDER}' folder")

    folders: list[UserFolder] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            LOGGER.debug("Skipping non-directory entry: %s", entry)
            continue
        pages = tuple(
            p for p in sorted(entry.iterdir())
            if p.is_file() and p.suffix.lower() in PAGE_SUFFIXES
        )
        LOGGER.debug("User folder %s: %d page(s)", entry.name, len(pages))
        folders.append(UserFolder(user_id=entry.name, path=entry, pages=pages))

    LOGGER.info("Found %d user folder(s) in %s", len(folders), root)
    return folders


# --------------------------------------------------------------------------- #
# Per-page / per-folder workers                                               #
# --------------------------------------------------------------------------- #


def parse_page(
    path: Path,
    extractor: MessageExtractor,
    encoding: str = DEFAULT_ENCODING,
    parser: str = DEFAULT_PARSER,
) -> list[MessageRecord]:
    """Read, decode, parse and extract one saved page."""
    LOGGER.debug("Processing page: %s", path)
    html = decode_page(path.read_bytes(), encoding, source=str(path))
    document = parse_document(html, parser)
    return extractor.extract_page(document, source=path.name)


def _parse_user_folder(
    folder: UserFolder,
    extractor: MessageExtractor,
    encoding: str,
    parser: str,
) -> tuple[UserMessages, list[str]]:
    """Parse all pages of one folder.

    Unreadable or undecodable pages are returned as failures. Malformed
    messages only get here from a strict extractor and propagate.
    """
    messages: list[MessageRecord] = []
    failures: list[str] = []
    for page in folder.pages:
        try:
            messages.extend(parse_page(page, extractor, encoding, parser))
        except MalformedMessageError:
            raise
        except (ArchiveError, OSError) as exc:
            LOGGER.error("Failed to process page %s: %s", page, exc)
            failures.append(f"{page}: {exc}")
    LOGGER.info("User %s: %d message(s) from %d page(s)",
                folder.user_id, len(messages), len(folder.pages))
    return UserMessages(user_id=folder.user_id, messages=tuple(messages)), failures


# --------------------------------------------------------------------------- #
# Whole archive                                                               #
# --------------------------------------------------------------------------- #


def parse_archive(
    archive_path: Path,
    extractor: MessageExtractor | None = None,
    encoding: str = DEFAULT_ENCODING,
    parser: str = DEFAULT_PARSER,
    jobs: int = 0,
    processes: bool | None = None,
) -> list[UserMessages]:
    """Extract the messages of every user folder in the archive.

    Args:
        archive_path: Root of the unpacked archive
        extractor: Extractor to apply to each page; default dialect if None
        encoding: Codec of the saved pages
        parser: BeautifulSoup parser name
        jobs: Parallel workers (0 means CPU count)
        processes: Use worker processes (True) or threads (False); None picks
            processes only for large archives

    Returns:
        One entry per user folder, in folder name order

    Raises:
        ArchiveLayoutError: If the archive has no messages directory
        ArchiveError: If any page failed, after all folders were processed
        MalformedMessageError: If the extractor is strict and a message is malformed
    """
    extractor = extractor or MessageExtractor()
    folders = find_user_folders(archive_path)
    if not folders:
        LOGGER.warning("No user folders found in %s", messages_path(archive_path))
        return []

    total_size = 0
    page_count = 0
    for folder in folders:
        for page in folder.pages:
            page_count += 1
            with contextlib.suppress(OSError):
                total_size += page.stat().st_size

    if processes is None:
        processes = (page_count >= 8) and (total_size >= 8 * 1024 * 1024)
    max_workers = max(1, jobs or os.cpu_count() or 4)
    executor = ProcessPoolExecutor if processes else ThreadPoolExecutor

    LOGGER.info("Archive processing configuration: executor=%s, workers=%d, pages=%d, total_size=%d bytes",
                executor.__name__, max_workers, page_count, total_size)

    results: list[UserMessages | None] = [None] * len(folders)
    failures: list[str] = []

    with executor(max_workers=max_workers) as ex:
        futs = {
            ex.submit(_parse_user_folder, folder, extractor, encoding, parser): i
            for i, folder in enumerate(folders)
        }
        for fut in as_completed(futs):
            index = futs[fut]
            user_messages, folder_failures = fut.result()
            results[index] = user_messages
            failures.extend(folder_failures)

    if failures:
        LOGGER.critical("Archive processing completed with %d failed page(s)", len(failures))
        raise ArchiveError("Some pages failed:\n" + "\n".join(sorted(failures)))

    users = [r for r in results if r is not None]
    LOGGER.info("Archive processing completed: %d user(s), %d message(s)",
                len(users), sum(len(u.messages) for u in users))
    return users


def archive_to_json(users: Sequence[UserMessages], indent: int | None = None) -> str:
    """Serialize per-user messages as a JSON array, keeping non-ASCII text."""
    return json.dumps([u.to_dict() for u in users], ensure_ascii=False, indent=indent)
