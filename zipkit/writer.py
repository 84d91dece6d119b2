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
Archive construction helpers.

This module provides the ArchiveWriter class, an append-only write session
over a new ZIP file, and the functions that build whole archives from a
directory tree, from named byte streams, or from two existing archives.
Writers are not safe for concurrent use.
"""

import logging
import os
import shutil
import time
import warnings
import zipfile
from collections import Counter
from pathlib import Path
from typing import BinaryIO, Iterable, Optional

from .constants import (
    COPY_BUFFER_SIZE,
    DEFAULT_COMPRESSION,
    DUPLICATE_POLICIES,
    DUPLICATES_ERROR,
    DUPLICATES_FIRST,
    DUPLICATES_KEEP,
    DUPLICATES_LAST,
)
from .errors import ArchiveError, DuplicateEntryError
from .reader import open_archive
from .utils import mtime_to_date_time, resolve_compression, unix_path, validate_entry_name

logger = logging.getLogger(__name__)

DateTime = tuple[int, int, int, int, int, int]


class ArchiveWriter:
    """Append-only writer for a new ZIP archive.

    Entries are written in the order they are added. Once closed, the
    archive cannot be modified.

    Example:
        with ArchiveWriter("archive.zip") as z:
            z.add_bytes("hello.txt", b"Hello, World!")
            z.add_file("doc.pdf", "/path/to/doc.pdf")
    """

    def __init__(self, file: str | os.PathLike | BinaryIO, compression: str = DEFAULT_COMPRESSION):
        """Initialize ArchiveWriter with a file path or file-like object.

        Args:
            file: Path of the ZIP file to create (overwritten if present) or a
                binary file-like object opened for writing.
            compression: Compression method ("stored", "deflate", "bzip2", "lzma").

        Raises:
            UnsupportedCompressionError: If the compression method is not known.
            OSError: If the file cannot be created.
        """
        self._compress_type = resolve_compression(compression)
        self._path = os.fspath(file) if isinstance(file, (str, os.PathLike)) else repr(file)
        self._zip = zipfile.ZipFile(file, "w", compression=self._compress_type)
        self._names: list[str] = []
        self._seen: set[str] = set()
        self._closed: bool = False
        logger.debug("Opened %s for writing (%s)", self._path, compression)

    @property
    def names(self) -> list[str]:
        """Names written so far, in write order."""
        return list(self._names)

    def _new_info(self, name: str, date_time: Optional[DateTime]) -> zipfile.ZipInfo:
        if self._closed:
            raise ArchiveError("Archive is closed")

        name = validate_entry_name(name)
        if date_time is None:
            date_time = mtime_to_date_time(time.time())

        info = zipfile.ZipInfo(name, date_time=date_time)
        info.compress_type = self._compress_type
        if name.endswith("/"):
            info.external_attr = (0o040755 << 16) | 0x10  # Directory, MS-DOS directory flag
        else:
            info.external_attr = 0o100644 << 16  # Regular file
        return info

    def _register(self, name: str) -> None:
        if name in self._seen:
            logger.warning("Duplicate entry name %r written to %s", name, self._path)
        self._seen.add(name)
        self._names.append(name)

    def add_bytes(self, name: str, data: bytes, date_time: Optional[DateTime] = None) -> None:
        """Add an entry from bytes data.

        Args:
            name: Entry name (path within ZIP archive).
            data: Entry payload.
            date_time: Modification time tuple (default: now).

        Raises:
            ArchiveError: If the archive is closed.
            EntryNameError: If the name is invalid.
        """
        info = self._new_info(name, date_time)
        with warnings.catch_warnings():
            # Duplicates are reported through the logger
            warnings.simplefilter("ignore", UserWarning)
            self._zip.writestr(info, data)
        self._register(info.filename)

    def add_stream(
        self,
        name: str,
        stream: BinaryIO,
        date_time: Optional[DateTime] = None,
        size: Optional[int] = None,
    ) -> None:
        """Add an entry from a binary stream.

        The stream is copied in chunks and is not closed. Without a size the
        entry is written with ZIP64 extensions, so it may grow past 4 GiB.

        Args:
            name: Entry name (path within ZIP archive).
            stream: Binary file-like object to read from.
            date_time: Modification time tuple (default: now).
            size: Expected payload size in bytes, if known.

        Raises:
            ArchiveError: If the archive is closed or the stream is not readable.
            EntryNameError: If the name is invalid.
        """
        if not hasattr(stream, "read"):
            raise ArchiveError("Stream object must have a read() method")

        info = self._new_info(name, date_time)
        if size is not None:
            info.file_size = size
        self._copy_into(info, stream, force_zip64=size is None)

    def add_file(self, name: str, source_path: str | os.PathLike) -> None:
        """Add an entry from a file on disk, keeping its mtime and permissions.

        Args:
            name: Entry name (path within ZIP archive).
            source_path: File to read.

        Raises:
            ArchiveError: If the archive is closed.
            EntryNameError: If the name is invalid.
            OSError: If the file cannot be read.
        """
        st = os.stat(source_path)
        info = self._new_info(name, mtime_to_date_time(st.st_mtime))
        info.external_attr = (st.st_mode & 0xFFFF) << 16
        info.file_size = st.st_size

        with open(source_path, "rb") as source:
            self._copy_into(info, source)

    def _copy_into(self, info: zipfile.ZipInfo, source: BinaryIO, force_zip64: bool = False) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            with self._zip.open(info, "w", force_zip64=force_zip64) as destination:
                shutil.copyfileobj(source, destination, COPY_BUFFER_SIZE)
        self._register(info.filename)

    def close(self) -> None:
        """Finalize the archive by writing the central directory."""
        if self._closed:
            return

        self._closed = True
        self._zip.close()
        logger.debug("Closed %s (%d entries)", self._path, len(self._names))

    def __enter__(self) -> "ArchiveWriter":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def _add_source(writer: ArchiveWriter, name: str, source: bytes | BinaryIO) -> None:
    if isinstance(source, (bytes, bytearray, memoryview)):
        writer.add_bytes(name, bytes(source))
    else:
        writer.add_stream(name, source)


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True


def _same_file(path: str | os.PathLike, other: str | os.PathLike) -> bool:
    if Path(path).resolve() == Path(other).resolve():
        return True
    try:
        return os.path.samefile(path, other)
    except OSError:
        return False


def _collect_files(root: Path, exclude: Path) -> list[Path]:
    files = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            path = Path(dirpath, filename)
            if not path.is_file():
                logger.debug("Skipping non-regular file %s", path)
                continue
            if path.resolve() == exclude:
                logger.warning("Skipping output archive %s found under %s", path, root)
                continue
            files.append(path)
    return files


def copy_to_zip(
    output_path: str | os.PathLike,
    root_dir: str | os.PathLike,
    move: bool = False,
    compression: str = DEFAULT_COMPRESSION,
) -> list[str]:
    """Pack every regular file under root_dir into a new archive.

    Entry names are the file paths relative to root_dir, with forward
    slashes. Directories are not stored as entries. Each entry keeps its
    file's modification time. Files are written in filesystem traversal
    order.

    Args:
        output_path: Archive to create (overwritten if present).
        root_dir: Directory to pack.
        move: Remove root_dir and everything under it once the archive has
            been written and closed.
        compression: Compression method name.

    Returns:
        Entry names written. Empty, and no archive created, when root_dir
        holds no regular files.

    Raises:
        ArchiveError: If move is requested while output_path lies under root_dir.
        OSError: On filesystem failures; a partial archive may be left behind.
    """
    root = Path(root_dir)
    output = Path(output_path).resolve()

    if move and _is_within(output, root.resolve()):
        raise ArchiveError(f"Cannot move {root} into an archive inside it: {output_path}")

    files = _collect_files(root, exclude=output)
    if not files:
        logger.debug("No regular files under %s, archive not created", root)
        return []

    with ArchiveWriter(output_path, compression) as writer:
        for path in files:
            writer.add_file(unix_path(os.path.relpath(path, root)), path)
    names = writer.names

    if move:
        shutil.rmtree(root)
        logger.debug("Removed %s after packing into %s", root, output_path)

    return names


def write_into_zip(
    output_path: str | os.PathLike,
    entry_name: str,
    input_stream: bytes | BinaryIO,
    compression: str = DEFAULT_COMPRESSION,
) -> None:
    """Create a single-entry archive from one byte stream.

    Args:
        output_path: Archive to create (overwritten if present).
        entry_name: Name of the entry.
        input_stream: Binary stream (or bytes) holding the payload.
        compression: Compression method name.
    """
    with ArchiveWriter(output_path, compression) as writer:
        _add_source(writer, entry_name, input_stream)


def copy_into_zip(
    output_path: str | os.PathLike,
    named_streams: Iterable[tuple[str, bytes | BinaryIO]],
    compression: str = DEFAULT_COMPRESSION,
) -> list[str]:
    """Create an archive from (name, stream) pairs, in input order.

    The iterable is consumed once. Names are normalized to forward slashes.

    Args:
        output_path: Archive to create (overwritten if present).
        named_streams: Pairs of entry name and binary stream (or bytes).
        compression: Compression method name.

    Returns:
        Entry names written.
    """
    with ArchiveWriter(output_path, compression) as writer:
        for name, stream in named_streams:
            _add_source(writer, name, stream)
    return writer.names


def _select_entries(
    sources: list[tuple[zipfile.ZipFile, zipfile.ZipInfo]], on_duplicate: str
) -> list[tuple[zipfile.ZipFile, zipfile.ZipInfo]]:
    names = [unix_path(info.filename) for _, info in sources]

    if on_duplicate == DUPLICATES_KEEP:
        return sources

    if on_duplicate == DUPLICATES_ERROR:
        counts = Counter(names)
        duplicates = [name for name in counts if counts[name] > 1]
        if duplicates:
            raise DuplicateEntryError(duplicates)
        return sources

    if on_duplicate == DUPLICATES_FIRST:
        seen: set[str] = set()
        selected = []
        for source, name in zip(sources, names):
            if name not in seen:
                seen.add(name)
                selected.append(source)
        return selected

    if on_duplicate == DUPLICATES_LAST:
        last_index = {name: index for index, name in enumerate(names)}
        return [source for index, (source, name) in enumerate(zip(sources, names)) if last_index[name] == index]

    raise ValueError(f"Unknown duplicate policy: {on_duplicate!r}")


def merge_zip_files(
    archive_a: str | os.PathLike,
    archive_b: str | os.PathLike,
    output_path: str | os.PathLike,
    on_duplicate: str = DUPLICATES_KEEP,
    compression: str = DEFAULT_COMPRESSION,
) -> list[str]:
    """Write the entries of archive_a followed by those of archive_b into a new archive.

    Payloads are streamed from the source archives and keep their
    modification times.

    Args:
        archive_a: First source archive.
        archive_b: Second source archive.
        output_path: Archive to create (overwritten if present).
        on_duplicate: What to do with names that occur more than once:
            "keep" writes every occurrence (the container then holds
            duplicate names), "first" or "last" keeps a single occurrence,
            "error" raises DuplicateEntryError before the output is created.
        compression: Compression method name.

    Returns:
        Entry names written, in write order.

    Raises:
        ValueError: If on_duplicate is not a known policy.
        DuplicateEntryError: If on_duplicate is "error" and a name repeats.
        ArchiveError: If output_path is one of the source archives.
    """
    if on_duplicate not in DUPLICATE_POLICIES:
        raise ValueError(f"Unknown duplicate policy: {on_duplicate!r} (expected one of {DUPLICATE_POLICIES})")

    for source in (archive_a, archive_b):
        if _same_file(output_path, source):
            raise ArchiveError(f"Cannot merge {source} into itself: {output_path}")

    with open_archive(archive_a) as first, open_archive(archive_b) as second:
        sources = [(first, info) for info in first.infolist()]
        sources += [(second, info) for info in second.infolist()]
        selected = _select_entries(sources, on_duplicate)

        with ArchiveWriter(output_path, compression) as writer:
            for archive, info in selected:
                with archive.open(info) as stream:
                    writer.add_stream(info.filename, stream, date_time=info.date_time, size=info.file_size)

    logger.debug(
        "Merged %s and %s into %s (%d of %d entries)",
        archive_a,
        archive_b,
        output_path,
        len(selected),
        len(sources),
    )
    return writer.names
