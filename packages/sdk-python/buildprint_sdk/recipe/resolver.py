"""
Path Resolution
===============

Expands source references into file entries using a pool of worker threads.

- Remote references (http/https URLs) are never fetched. They become a
  single entry whose content depends on the configured RemoteTreatment.
- Local references are resolved against the build context directory and
  walked: a file yields one entry, a directory one entry per regular file
  below it, a wildcard pattern one walk per match.

Entries only carry the capability to open their content; the resolver
itself never opens a file.

Work arrives on a bounded queue fed by a producer thread. The first error
raised by any worker is kept in a single-assignment cell and a shared
cancellation event stops the producer and all workers promptly.

Usage:
    resolver = PathResolver(Path("."), DigestConfig(), workers=4)
    for entry in resolver.resolve(["app.go", "lib/"]):
        print(entry.filename)  # unordered
"""

import io
import os
import posixpath
import queue
import re
import stat
import threading
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from buildprint_common import DigestDefaults, ResolveError, get_logger
from buildprint_schema import DigestConfig, RemoteTreatment

from .entries import OpenedFileEntry

logger = get_logger("sdk.resolver")

_WILDCARD = re.compile(r"[*?\[]")

# Queue markers
_STOP = object()
_WORKER_DONE = object()


class FirstError:
    """Thread-safe cell that keeps only the first error recorded."""

    def __init__(self):
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None

    def record(self, error: BaseException) -> bool:
        """Store ``error`` unless one is already set. Returns True if stored."""
        with self._lock:
            if self._error is not None:
                return False
            self._error = error
            return True

    @property
    def error(self) -> Optional[BaseException]:
        with self._lock:
            return self._error

    def raise_if_set(self) -> None:
        error = self.error
        if error is not None:
            raise error


def _now_text() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_remote_reference(reference: str) -> bool:
    """Check whether a source reference names a URL rather than a local path."""
    return reference.lower().startswith(DigestDefaults.REMOTE_SCHEMES)


def normalize_reference(reference: str) -> str:
    """
    Turn a source reference into a context-relative POSIX path.

    A leading ``/`` is relative to the build context, as in Docker.
    ``./app.go`` and ``app.go`` normalize the same way, and ``lib/``
    becomes ``lib``.

    Raises:
        ResolveError: If the reference points outside the build context
    """
    normalized = posixpath.normpath(reference.lstrip("/") or ".")
    if normalized == ".." or normalized.startswith("../"):
        raise ResolveError(f"source '{reference}' is outside the build context", reference=reference)
    return normalized


def _raise_walk_error(error: OSError) -> None:
    raise error


class PathResolver:
    """
    Resolves source references into OpenedFileEntry values concurrently.

    Each call to ``resolve`` runs its own producer and worker threads and
    keeps no state afterwards.
    """

    def __init__(
        self,
        context_dir: Union[str, Path],
        config: Optional[DigestConfig] = None,
        workers: int = DigestDefaults.WORKERS,
        buffer_size: int = DigestDefaults.BUFFER_SIZE,
    ):
        """
        Initialize the resolver.

        Args:
            context_dir: Directory local references are relative to
            config: Digest configuration, defaults to DigestConfig()
            workers: Number of worker threads
            buffer_size: Capacity of the reference and entry queues
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be at least 1, got {buffer_size}")
        self.context_dir = Path(context_dir)
        self.config = config or DigestConfig()
        self.workers = workers
        self.buffer_size = buffer_size

    def resolve(
        self,
        references: Iterable[str],
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[OpenedFileEntry]:
        """
        Resolve ``references`` and yield entries in production order.

        The generator finishes once every reference is resolved. If any
        worker failed, the first error is raised after all threads have
        stopped and entries produced after the failure are dropped.

        Args:
            references: Source references, consumed on a producer thread
            cancel: Optional event to stop resolution from outside

        Yields:
            OpenedFileEntry values, in no particular order

        Raises:
            ResolveError: If a local reference cannot be walked, or if
                ``cancel`` was set before resolution finished
        """
        cancel = cancel or threading.Event()
        errors = FirstError()
        pending: "queue.Queue[object]" = queue.Queue(maxsize=self.buffer_size)
        entries: "queue.Queue[object]" = queue.Queue(maxsize=self.buffer_size)

        threads: List[threading.Thread] = [
            threading.Thread(
                target=self._produce,
                args=(references, pending, cancel, errors),
                name="buildprint-producer",
                daemon=True,
            )
        ]
        for i in range(self.workers):
            threads.append(
                threading.Thread(
                    target=self._work,
                    args=(pending, entries, cancel, errors),
                    name=f"buildprint-resolver-{i}",
                    daemon=True,
                )
            )

        logger.debug("Resolving references", workers=self.workers, context=str(self.context_dir))
        for thread in threads:
            thread.start()

        finished = 0
        try:
            while finished < self.workers:
                item = entries.get()
                if item is _WORKER_DONE:
                    finished += 1
                    continue
                if not cancel.is_set():
                    yield item
        finally:
            if finished < self.workers:
                # Consumer went away early; unblock and wait for the workers
                cancel.set()
                while finished < self.workers:
                    if entries.get() is _WORKER_DONE:
                        finished += 1
            for thread in threads:
                thread.join()

        errors.raise_if_set()
        if cancel.is_set():
            raise ResolveError("resolution cancelled before all references were resolved")

    def _put(self, target: "queue.Queue[object]", item: object, cancel: threading.Event) -> bool:
        while not cancel.is_set():
            try:
                target.put(item, timeout=DigestDefaults.QUEUE_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _get(self, source: "queue.Queue[object]", cancel: threading.Event) -> object:
        while not cancel.is_set():
            try:
                return source.get(timeout=DigestDefaults.QUEUE_POLL_INTERVAL)
            except queue.Empty:
                continue
        return _STOP

    def _fail(self, error: BaseException, cancel: threading.Event, errors: FirstError) -> None:
        if errors.record(error):
            logger.debug("Resolution failed, cancelling workers", error=str(error))
        cancel.set()

    def _produce(
        self,
        references: Iterable[str],
        pending: "queue.Queue[object]",
        cancel: threading.Event,
        errors: FirstError,
    ) -> None:
        try:
            for reference in references:
                if not self._put(pending, reference, cancel):
                    return
            for _ in range(self.workers):
                if not self._put(pending, _STOP, cancel):
                    return
        except Exception as e:
            self._fail(e, cancel, errors)

    def _work(
        self,
        pending: "queue.Queue[object]",
        entries: "queue.Queue[object]",
        cancel: threading.Event,
        errors: FirstError,
    ) -> None:
        try:
            while True:
                reference = self._get(pending, cancel)
                if reference is _STOP:
                    return
                for entry in self.resolve_reference(reference, cancel):
                    if not self._put(entries, entry, cancel):
                        return
        except Exception as e:
            self._fail(e, cancel, errors)
        finally:
            # The consumer drains until every worker reports in
            entries.put(_WORKER_DONE)

    def resolve_reference(
        self,
        reference: str,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[OpenedFileEntry]:
        """
        Expand one reference into entries.

        Raises:
            ResolveError: If a local reference cannot be walked
        """
        if is_remote_reference(reference):
            yield self._remote_entry(reference)
            return

        relative = normalize_reference(reference)
        if _WILDCARD.search(relative):
            matches = sorted(self.context_dir.glob(relative))
            if not matches:
                raise ResolveError(f"no source files match '{reference}'", reference=reference)
            for match in matches:
                yield from self._walk(reference, match.relative_to(self.context_dir).as_posix(), cancel)
            return

        yield from self._walk(reference, relative, cancel)

    def _remote_entry(self, url: str) -> OpenedFileEntry:
        if self.config.remote_treatment == RemoteTreatment.UNCHANGED:
            content = url
        else:
            content = _now_text()
        data = content.encode("utf-8")
        return OpenedFileEntry(filename=url, late_open=partial(io.BytesIO, data))

    def _walk(
        self,
        reference: str,
        relative: str,
        cancel: Optional[threading.Event],
    ) -> Iterator[OpenedFileEntry]:
        root = os.path.join(self.context_dir, relative)
        try:
            mode = os.stat(root).st_mode
            if not stat.S_ISDIR(mode):
                yield self._local_entry(relative, root)
                return

            for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
                if cancel is not None and cancel.is_set():
                    return
                for name in filenames:
                    path = os.path.join(dirpath, name)
                    if not os.path.isfile(path):
                        continue
                    below = Path(os.path.relpath(path, root)).as_posix()
                    yield self._local_entry(posixpath.normpath(posixpath.join(relative, below)), path)
        except OSError as e:
            raise ResolveError(
                f"cannot resolve source '{reference}': {e.strerror or e}",
                reference=reference,
            ) from e

    def _local_entry(self, filename: str, path: str) -> OpenedFileEntry:
        return OpenedFileEntry(filename=filename, late_open=partial(open, path, "rb"))
