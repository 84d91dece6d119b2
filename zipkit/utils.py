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
Utility functions for zipkit.

This module provides helpers for entry name normalization and validation,
pattern compilation, timestamp conversion and compression method lookup.
"""

import os
import re
import time
import zipfile
from pathlib import Path

from .constants import COMPRESSION_METHODS, MAX_DATE_TIME, MAX_NAME_LENGTH, MIN_DATE_TIME
from .errors import EntryNameError, UnsupportedCompressionError


def unix_path(path: str) -> str:
    """Rewrite backslashes to forward slashes."""
    return path.replace("\\", "/")


def name_only(entry: zipfile.ZipInfo | str) -> str:
    """Return the last component of an entry name, including its leading separator.

    The separator is kept: ``name_only("dir/sub/file.txt")`` is ``"/file.txt"``.
    Existing callers rely on this, so do not strip it.

    Args:
        entry: ZipInfo object or entry name.

    Returns:
        Substring of the normalized name starting at the last "/", or the
        whole name when it contains no separator.
    """
    name = entry.filename if isinstance(entry, zipfile.ZipInfo) else entry
    name = unix_path(name)
    index = name.rfind("/")
    if index == -1:
        return name
    return name[index:]


def compile_pattern(pattern: str | re.Pattern) -> re.Pattern:
    """Compile a pattern for whole-name matching.

    Args:
        pattern: Regular expression source or an already compiled pattern.

    Returns:
        Compiled pattern. Callers must use ``fullmatch`` on it.
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def validate_entry_name(name: str) -> str:
    """Normalize and validate a name for writing into an archive.

    Args:
        name: Entry name (path within ZIP archive).

    Returns:
        Name with forward slashes.

    Raises:
        EntryNameError: If the name is empty, contains null bytes or is too long.
    """
    name = unix_path(name)

    if not name:
        raise EntryNameError("Entry name cannot be empty")

    if "\x00" in name:
        raise EntryNameError("Entry name cannot contain null bytes")

    encoded_length = len(name.encode("utf-8"))
    if encoded_length > MAX_NAME_LENGTH:
        raise EntryNameError(
            f"Entry name too long: {encoded_length} bytes (max {MAX_NAME_LENGTH} bytes)"
        )

    return name


def safe_extract_path(output_dir: str | os.PathLike, name: str) -> Path:
    """Resolve the target path for extracting an entry into a directory.

    Args:
        output_dir: Directory the entry is extracted into.
        name: Entry name.

    Returns:
        ``output_dir / name``.

    Raises:
        EntryNameError: If the name is absolute or escapes output_dir.
    """
    name = unix_path(name)
    parts = name.split("/")
    if name.startswith("/") or re.match(r"^[A-Za-z]:", name) or ".." in parts:
        raise EntryNameError(f"Unsafe entry name for extraction: {name!r}")
    return Path(output_dir).joinpath(*[part for part in parts if part])


def mtime_to_date_time(mtime: float) -> tuple[int, int, int, int, int, int]:
    """Convert a filesystem modification time to a ZIP date_time tuple.

    ZIP entries store local time in DOS format, which covers 1980 through
    2107 with two-second resolution. Out-of-range times are clamped.

    Args:
        mtime: Seconds since the epoch, as returned by os.stat().

    Returns:
        (year, month, day, hour, minute, second) tuple.
    """
    date_time = tuple(time.localtime(mtime)[:6])
    if date_time < MIN_DATE_TIME:
        return MIN_DATE_TIME
    if date_time > MAX_DATE_TIME:
        return MAX_DATE_TIME
    return date_time


def resolve_compression(name: str) -> int:
    """Map a compression method name to its zipfile constant.

    Raises:
        UnsupportedCompressionError: If the name is not known.
    """
    if name not in COMPRESSION_METHODS:
        raise UnsupportedCompressionError(f"Unsupported compression method: {name}")
    return COMPRESSION_METHODS[name]
