"""
Copyright 2025 DNAi inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
Read-side archive helpers.

Every function opens the archive, does its work and closes it again before
returning. A missing entry is reported as None, never as an error; a
malformed archive raises zipfile.BadZipFile (or OSError) everywhere except
in is_broken().

Example:
    data = extract_entry("archive.zip", "docs/readme.txt")
    names = get_entries("archive.zip", r".*\\.txt")
"""

import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import Iterator, Optional

from .constants import COPY_BUFFER_SIZE, MATCH_ALL
from .utils import compile_pattern, safe_extract_path, unix_path

logger = logging.getLogger(__name__)


def open_archive(archive_path: str | os.PathLike) -> zipfile.ZipFile:
    """Open an archive for reading.

    The returned handle must be used as a context manager (or closed by the
    caller).

    Raises:
        zipfile.BadZipFile: If the file is not a ZIP archive.
        OSError: If the file cannot be opened.
    """
    logger.debug("Opening archive %s", archive_path)
    return zipfile.ZipFile(archive_path, "r")


def iter_entries(archive: zipfile.ZipFile, pattern=MATCH_ALL) -> Iterator[zipfile.ZipInfo]:
    """Yield the entries of an open archive whose whole name matches pattern.

    Names are compared after backslash normalization. Entries are yielded in
    archive (central directory) order.

    Args:
        archive: Open ZipFile.
        pattern: Regular expression source or compiled pattern.

    Yields:
        ZipInfo objects.
    """
    regex = compile_pattern(pattern)
    for info in archive.infolist():
        if regex.fullmatch(unix_path(info.filename)):
            yield info


def _find_entry(archive: zipfile.ZipFile, entry_name: str) -> Optional[zipfile.ZipInfo]:
    entry_name = unix_path(entry_name)
    try:
        return archive.getinfo(entry_name)
    except KeyError:
        pass
    # Stored names may still use backslashes
    for info in archive.infolist():
        if unix_path(info.filename) == entry_name:
            return info
    return None


def extract_entry(archive_path: str | os.PathLike, entry_name: str) -> Optional[bytes]:
    """Extract a single entry into memory.

    Args:
        archive_path: Path to the ZIP file.
        entry_name: Name of the entry (must match exactly after normalization).

    Returns:
        Entry payload, or None if the archive has no such entry.
    """
    with open_archive(archive_path) as archive:
        info = _find_entry(archive, entry_name)
        if info is None:
            logger.debug("Entry %r not found in %s", entry_name, archive_path)
            return None
        return archive.read(info)


def extract_entry_to_file(
    archive_path: str | os.PathLike, entry_name: str, output_dir: str | os.PathLike
) -> Optional[Path]:
    """Stream a single entry into a file under output_dir.

    The payload is copied in chunks, so large entries are never held in
    memory. No directories are created: output_dir, and any directory the
    entry name refers to, must already exist.

    Args:
        archive_path: Path to the ZIP file.
        entry_name: Name of the entry.
        output_dir: Existing directory to write into.

    Returns:
        Path of the written file, or None if the archive has no such entry.

    Raises:
        EntryNameError: If the entry name would escape output_dir.
        OSError: If the target file cannot be written.
    """
    with open_archive(archive_path) as archive:
        info = _find_entry(archive, entry_name)
        if info is None:
            logger.debug("Entry %r not found in %s", entry_name, archive_path)
            return None

        target = safe_extract_path(output_dir, info.filename)
        if info.is_dir():
            # Directory entries carry no payload
            return target

        with archive.open(info) as source, open(target, "wb") as destination:
            shutil.copyfileobj(source, destination, COPY_BUFFER_SIZE)

    logger.debug("Extracted %r from %s to %s", entry_name, archive_path, target)
    return target


def get_entries(archive_path: str | os.PathLike, pattern=MATCH_ALL) -> list[str]:
    """List the names of all entries whose whole name matches pattern.

    Matching uses ``re.fullmatch``: the pattern ``r"a\\.txt"`` matches
    ``"a.txt"`` but not ``"xa.txt.bak"``.

    Args:
        archive_path: Path to the ZIP file.
        pattern: Regular expression source or compiled pattern (default: all).

    Returns:
        Normalized entry names in archive order. The archive is closed
        before the list is returned.
    """
    with open_archive(archive_path) as archive:
        return [unix_path(info.filename) for info in iter_entries(archive, pattern)]


def is_broken(path: str | os.PathLike) -> bool:
    """Check whether a file is a broken ZIP archive.

    Only opening the archive and walking its central directory is checked;
    entry payloads are not decompressed.

    Args:
        path: Path to the file to check.

    Returns:
        True if the file cannot be opened or enumerated as an archive.
    """
    try:
        get_entries(path)
    except Exception:
        logger.warning("Broken archive: %s", path, exc_info=True)
        return True
    return False
