"""Access to a mounted proc pseudo-filesystem."""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from procinspect.models import ExtractionFailure

logger = logging.getLogger(__name__)

MAX_LINE = 1024


class ProcFS:
    """
    Handle on a proc mount point.

    All paths handed to this class are relative to the root. Files are read
    one byte at a time through an unbuffered descriptor, which is fine for
    proc entries since they are small and generated on access.

    Reads never raise for a missing or unreadable file: the problem is logged,
    recorded in ``failures`` and the caller sees no lines.
    """

    def __init__(self, root: str | os.PathLike[str] = ".") -> None:
        """
        Initialize the ProcFS.

        Args:
            root: Directory where proc is mounted. Defaults to the current
                directory, which is where the session controller moves to.
        """
        self._root = Path(root)
        self.failures: list[ExtractionFailure] = []

    @property
    def root(self) -> Path:
        """Get the proc root."""
        return self._root

    def path(self, relative: str) -> Path:
        """Resolve a proc-relative path."""
        return self._root / relative

    def record_failure(self, source: str, reason: str) -> None:
        """Add an entry to the failure channel."""
        self.failures.append(ExtractionFailure(source=source, reason=reason))

    def clear_failures(self) -> None:
        """Forget previously recorded failures."""
        self.failures.clear()

    def iter_lines(self, relative: str, *, quiet: bool = False) -> Iterator[str]:
        """
        Yield each line of a proc file.

        The newline (or NUL) ending a line is replaced by a single space, so
        every yielded line is space-terminated except possibly the last one
        of a file with no trailing newline.

        Args:
            relative: Proc-relative file name, e.g. "meminfo".
            quiet: Log an unopenable file at DEBUG instead of WARNING. Used
                for per-task files which routinely vanish.
        """
        try:
            stream = open(self.path(relative), "rb", buffering=0)
        except OSError as exc:
            level = logging.DEBUG if quiet else logging.WARNING
            logger.log(level, "open %s: %s", relative, exc.strerror or exc)
            self.record_failure(relative, f"open failed: {exc.strerror or exc}")
            return

        with stream:
            while True:
                try:
                    line = _read_line(stream)
                except OSError as exc:
                    # Task exited while we were reading its status
                    logger.debug("read %s: %s", relative, exc)
                    self.record_failure(relative, f"read failed: {exc.strerror or exc}")
                    return
                if not line:
                    return
                yield line

    def read_first_line(self, relative: str) -> str:
        """Return the first line of a proc file, or "" if unavailable."""
        for line in self.iter_lines(relative):
            return line
        return ""

    def list_entries(self) -> list[str]:
        """List the names in the proc root."""
        try:
            return os.listdir(self._root)
        except OSError as exc:
            logger.warning("opendir %s: %s", self._root, exc.strerror or exc)
            self.record_failure(str(self._root), f"opendir failed: {exc.strerror or exc}")
            return []

    def owner_uid(self, relative: str) -> int | None:
        """Return the user id owning a proc file, or None if it is gone."""
        try:
            return self.path(relative).stat().st_uid
        except OSError as exc:
            logger.debug("stat %s: %s", relative, exc)
            return None


def _read_line(stream) -> str:
    """
    Read one line from an unbuffered binary stream, byte by byte.

    Returns "" at end of file. Lines longer than MAX_LINE are split.
    """
    data = bytearray()
    while len(data) < MAX_LINE:
        byte = stream.read(1)
        if not byte:
            break
        if byte in (b"\n", b"\0"):
            data += b" "
            break
        data += byte
    return data.decode("utf-8", errors="replace")
