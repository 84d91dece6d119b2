"""
Shared fixtures for zipkit tests.
"""

import os
import time
import zipfile

import pytest

SAMPLE_ENTRIES = {
    "a.txt": b"alpha",
    "xa.txt.bak": b"backup of alpha",
    "dir/sub/file.txt": b"nested file\n" * 100,
    "dir/other.bin": bytes(range(256)) * 8,
}

TREE_FILES = {
    "top.txt": b"top level",
    "docs/readme.md": b"# readme\n",
    "docs/deep/nested/data.bin": os.urandom(4096),
    "empty.dat": b"",
}

# Even seconds, representable in DOS time
TREE_MTIME = time.mktime((2020, 5, 17, 12, 30, 44, 0, 0, -1))


@pytest.fixture
def sample_entries():
    return dict(SAMPLE_ENTRIES)


@pytest.fixture
def tree_files():
    return dict(TREE_FILES)


@pytest.fixture
def sample_archive(tmp_path):
    """Archive holding SAMPLE_ENTRIES, written in dict order."""
    path = tmp_path / "sample.zip"
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in SAMPLE_ENTRIES.items():
            zf.writestr(name, data)
    return path


@pytest.fixture
def source_tree(tmp_path):
    """Directory holding TREE_FILES, each with mtime TREE_MTIME."""
    root = tmp_path / "tree"
    for name, data in TREE_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        os.utime(path, (TREE_MTIME, TREE_MTIME))
    (root / "docs" / "empty_dir").mkdir()
    return root


@pytest.fixture
def make_archive(tmp_path):
    """Factory writing (name, data) pairs into a new archive, duplicates included."""

    def _make(filename, entries):
        path = tmp_path / filename
        with zipfile.ZipFile(path, "w") as zf:
            for name, data in entries:
                zf.writestr(name, data)
        return path

    return _make
