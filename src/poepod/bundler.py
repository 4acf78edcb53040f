#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Bundle creation: delimited blocks written to a single text artifact."""

from collections.abc import Iterable
import io
import os
from pathlib import Path
import time
from typing import TYPE_CHECKING, NamedTuple

import attrs
from provide.foundation import logger
from provide.foundation.file import atomic_write

from poepod.config import DEFAULT_ENCODING, PoepodConfig
from poepod.encoder import BinaryEntry, ContentEncoder, FailedEntry, ProcessedEntry, TextEntry
from poepod.errors import DestinationOpenError, FileWriteError

if TYPE_CHECKING:
    from poepod.progress import ProgressReporter

START_MARKER = "--- START FILE: {path} ---"
END_MARKER = "--- END FILE: {path} ---"


class BundleResult(NamedTuple):
    total_files: int
    copied_files: int


@attrs.define(slots=True)
class ProcessingSession:
    """Failures and warnings gathered during one bundling run.

    Owned by the caller; nothing is shared between sessions.
    """

    failed_files: list[Path] = attrs.field(factory=list)
    warnings: list[str] = attrs.field(factory=list)

    def record_failure(self, path: Path, reason: str) -> None:
        """Record a failed file; its reason is also kept as a warning."""
        self.failed_files.append(path)
        self.warnings.append(f"{path}: {reason}")

    def warn(self, message: str) -> None:
        self.warnings.append(message)


def display_path(file_path: Path, base_dir: Path | None) -> str:
    """Path written into the delimiters: relative to ``base_dir`` when possible.

    Args:
        file_path: Absolute path of the bundled file
        base_dir: Directory labels are relative to, if any

    Returns:
        POSIX relative path, or the absolute path for files outside ``base_dir``
    """
    if base_dir is not None:
        try:
            return file_path.relative_to(base_dir).as_posix()
        except ValueError:
            logger.debug("bundle.path.outside_base_dir", path=str(file_path), base_dir=str(base_dir))
    return str(file_path)


def format_block(path_label: str, content: str) -> str:
    """Wrap ``content`` in START/END delimiters, ending the body with a newline."""
    lines = [START_MARKER.format(path=path_label), "\n", content]
    if content and not content.endswith("\n"):
        lines.append("\n")
    lines.extend([END_MARKER.format(path=path_label), "\n"])
    return "".join(lines)


def check_destination(destination: Path) -> None:
    """Fail before any processing if ``destination`` cannot be written."""
    if destination.is_dir():
        raise DestinationOpenError(f"Output path '{destination}' is a directory.")
    parent = destination.parent
    if not parent.is_dir():
        raise DestinationOpenError(f"Output directory '{parent}' does not exist.")
    if destination.exists() and not os.access(destination, os.W_OK):
        raise DestinationOpenError(f"Output file '{destination}' is not writable.")
    if not os.access(parent, os.W_OK):
        raise DestinationOpenError(f"Output directory '{parent}' is not writable.")


class BundleWriter:
    """Serializes candidate files into the bundle format."""

    def __init__(
        self,
        config: PoepodConfig,
        encoder: ContentEncoder | None = None,
        progress_reporter: "ProgressReporter | None" = None,
    ) -> None:
        self.config = config
        self.encoder = encoder if encoder is not None else ContentEncoder(config)
        self.progress_reporter = progress_reporter

    def write(
        self,
        paths: Iterable[Path],
        destination: Path | None = None,
        session: ProcessingSession | None = None,
        preamble: str | None = None,
    ) -> BundleResult:
        """Write the bundle for ``paths`` to ``destination``.

        Args:
            paths: Candidate files (already filtered)
            destination: Output file; defaults to the configured output file
            session: Collects failed files and warnings for the caller
            preamble: Optional text written before the first block

        Returns:
            BundleResult(total_files, copied_files)

        Raises:
            DestinationOpenError: If the destination cannot be written
            FileWriteError: If writing the bundle fails
        """
        target = destination if destination is not None else self.config.output_file
        if target is None:
            raise DestinationOpenError("Output file path cannot be None for bundling")
        target = Path(os.path.abspath(target))
        check_destination(target)

        if session is None:
            session = ProcessingSession()

        sorted_paths = sorted(set(paths), key=str)
        total_files = len(sorted_paths)
        logger.info("bundle.create.start", output_file=str(target), candidate_count=total_files)
        start_time = time.monotonic()

        buffer = io.StringIO()
        if preamble:
            buffer.write(preamble)
        copied_files = self._write_entries(buffer, sorted_paths, session)

        self._write_to_disk(target, buffer.getvalue())

        logger.info(
            "bundle.create.complete",
            total_files=total_files,
            copied_files=copied_files,
            failed_files=len(session.failed_files),
            duration_seconds=time.monotonic() - start_time,
        )
        return BundleResult(total_files=total_files, copied_files=copied_files)

    def _write_entries(self, buffer: io.StringIO, sorted_paths: list[Path], session: ProcessingSession) -> int:
        """Encode each path and append its block to ``buffer``.

        Skipped binaries produce no block. Failed entries still produce one.

        Args:
            buffer: In-memory bundle being built
            sorted_paths: Paths in output order
            session: Receives failures

        Returns:
            Number of files copied successfully
        """
        copied = 0
        blocks_written = 0
        for file_path in sorted_paths:
            entry = self.encoder.encode(file_path)
            if entry is None:
                if self.progress_reporter:
                    self.progress_reporter.file_progress(file_path, "skipped", details="binary")
                continue

            label = display_path(file_path, self.config.base_dir)
            if blocks_written:
                buffer.write("\n")
            buffer.write(format_block(label, self._entry_body(entry)))
            blocks_written += 1

            # Failed entries keep a block carrying the reason and are also reported as warnings.
            if isinstance(entry, FailedEntry):
                logger.warning("bundle.file.failed", path=str(file_path), reason=entry.reason)
                session.record_failure(file_path, entry.reason)
                if self.progress_reporter:
                    self.progress_reporter.file_progress(file_path, "error", details=entry.reason)
                continue

            copied += 1
            if self.progress_reporter:
                self.progress_reporter.file_progress(file_path, "included")
        return copied

    def _entry_body(self, entry: ProcessedEntry) -> str:
        """Block body for an entry: its content, or the failure reason."""
        if isinstance(entry, TextEntry | BinaryEntry):
            return entry.content
        return entry.reason

    def _write_to_disk(self, target: Path, content: str) -> None:
        """Write the finished bundle atomically.

        Args:
            target: Destination file
            content: Full bundle text

        Raises:
            FileWriteError: If the write fails
        """
        try:
            data = content.encode(DEFAULT_ENCODING)
            atomic_write(target, data)
            logger.info("bundle.write.success", path=str(target), size_bytes=len(data))
        except Exception as e:
            logger.error("bundle.write.failure", path=str(target), error=str(e))
            raise FileWriteError(f"Failed to write bundle: {e}") from e


# 🐝📁🔚
