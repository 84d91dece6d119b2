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
Run a function over every matching entry of an archive.

The function is called as ``func(name, data)`` with the normalized entry
name and its full payload. Results are always returned in archive order,
for the sequential and the parallel variant alike.

Example:
    sizes = process_entries("archive.zip", lambda name, data: len(data))
    sizes = pprocess_entries("archive.zip", lambda name, data: len(data))
"""

import concurrent.futures
import logging
import os
import threading
import zipfile
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .constants import MATCH_ALL
from .reader import iter_entries, open_archive
from .utils import unix_path

logger = logging.getLogger(__name__)

EntryFunc = Callable[[str, bytes], Any]

_pool: Optional[ThreadPoolExecutor] = None
_pool_lock = threading.Lock()

# Marks threads currently running a pprocess_entries() task
_worker = threading.local()


def _shared_pool() -> ThreadPoolExecutor:
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = ThreadPoolExecutor(thread_name_prefix="zipkit")
            logger.debug("Created shared worker pool")
        return _pool


def shutdown_pool(wait: bool = True) -> None:
    """Shut down the shared worker pool used by pprocess_entries().

    The next parallel call creates a new pool.

    Args:
        wait: Block until running tasks have finished.
    """
    global _pool
    with _pool_lock:
        pool, _pool = _pool, None
    if pool is not None:
        pool.shutdown(wait=wait)


def _apply(func: EntryFunc, archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Any:
    return func(unix_path(info.filename), archive.read(info))


def _apply_in_worker(func: EntryFunc, archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Any:
    _worker.active = True
    try:
        return _apply(func, archive, info)
    finally:
        _worker.active = False


def _in_worker() -> bool:
    return getattr(_worker, "active", False)


def process_entries(archive_path: str | os.PathLike, func: EntryFunc, pattern=MATCH_ALL) -> list:
    """Call func for every matching entry, one entry at a time.

    Args:
        archive_path: Path to the ZIP file.
        func: Called with (entry name, entry bytes).
        pattern: Regular expression the whole entry name must match.

    Returns:
        List of func results in archive order.
    """
    with open_archive(archive_path) as archive:
        return [_apply(func, archive, info) for info in iter_entries(archive, pattern)]


def each_entry(archive_path: str | os.PathLike, func: EntryFunc, pattern=MATCH_ALL) -> None:
    """Call func for every matching entry for its side effects only."""
    with open_archive(archive_path) as archive:
        for info in iter_entries(archive, pattern):
            _apply(func, archive, info)


def pprocess_entries(
    archive_path: str | os.PathLike,
    func: EntryFunc,
    pattern=MATCH_ALL,
    max_workers: Optional[int] = None,
) -> list:
    """Call func for every matching entry in parallel.

    Each entry (payload read plus func call) runs as one task on a thread
    pool. Results are collected by task position, so the returned list has
    the same order as process_entries() would produce.

    If func raises for any entry, pending tasks are cancelled, running tasks
    are allowed to finish, and the failure of the earliest failing entry is
    raised. No partial results are returned.

    A call made from inside another batch's func with max_workers=None runs
    sequentially in the calling thread, since waiting on the shared pool
    from one of its own workers can exhaust it.

    Args:
        archive_path: Path to the ZIP file.
        func: Called with (entry name, entry bytes). Must be thread-safe.
        pattern: Regular expression the whole entry name must match.
        max_workers: Size of a dedicated pool for this call. None uses the
            process-wide shared pool.

    Returns:
        List of func results in archive order.
    """
    if max_workers is None:
        if _in_worker():
            logger.debug("Nested batch over %s runs in the calling worker", archive_path)
            return process_entries(archive_path, func, pattern)
        return _run_parallel(archive_path, func, pattern, _shared_pool())

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="zipkit") as pool:
        return _run_parallel(archive_path, func, pattern, pool)


def _run_parallel(
    archive_path: str | os.PathLike, func: EntryFunc, pattern, pool: ThreadPoolExecutor
) -> list:
    futures: list[Future] = []
    with open_archive(archive_path) as archive:
        try:
            for info in iter_entries(archive, pattern):
                futures.append(pool.submit(_apply_in_worker, func, archive, info))
            logger.debug("Dispatched %d entries of %s", len(futures), archive_path)
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            # The archive must stay open until no task can read from it
            concurrent.futures.wait(futures)
            raise
