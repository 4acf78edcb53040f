#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""File collection for bundling operations."""

from collections.abc import Iterable, Iterator
import glob
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TypeAlias

import attrs
from provide.foundation import logger

from poepod.errors import FileCollectionError
from poepod.exclusions import ExclusionEngine, absolute_path, is_glob_pattern
from poepod.manifest import ManifestFileSet, resolve_manifest_file_set
from poepod.vcs import VersionControl

if TYPE_CHECKING:
    from poepod.progress import ProgressReporter


@attrs.define(frozen=True, slots=True)
class ManifestRef:
    """Input specifier naming a package manifest."""

    path: Path = attrs.field(converter=Path)


Specifier: TypeAlias = str | Path | ManifestRef


class FileSource(Protocol):
    """Anything that can list the candidate files of a bundle."""

    def list_candidates(self) -> set[Path]: ...


def _walk_files(directory: Path) -> Iterator[Path]:
    """Yield every regular file below ``directory``, dotfiles included."""
    for root_str, _dirs, files in os.walk(directory, onerror=_handle_walk_error):
        root = Path(root_str)
        for file_name in files:
            yield root / file_name


def _handle_walk_error(error: OSError) -> None:
    logger.warning("file.walk.error", error=str(error))


class FileCollector:
    """Expands specifiers into a deduplicated set of absolute file paths."""

    def __init__(
        self,
        exclusion_engine: ExclusionEngine,
        vcs: VersionControl | None = None,
        progress_reporter: "ProgressReporter | None" = None,
    ) -> None:
        self.exclusion_engine = exclusion_engine
        self.vcs = vcs
        self.progress_reporter = progress_reporter
        self.manifest_file_sets: list[ManifestFileSet] = []

    def collect(self, specifiers: Iterable[Specifier]) -> set[Path]:
        """Collect candidate files for every specifier.

        Specifiers that match nothing contribute nothing. Manifest errors
        and unsupported specifier types propagate to the caller.
        """
        collected: set[Path] = set()
        for specifier in specifiers:
            before = len(collected)
            if isinstance(specifier, ManifestRef):
                self._collect_manifest(specifier, collected)
            elif isinstance(specifier, (str, Path)):
                self._collect_specifier(specifier, collected)
            else:
                raise FileCollectionError(f"Unsupported input specifier: {specifier!r}")
            logger.debug(
                "file.collect.specifier",
                specifier=str(specifier),
                added=len(collected) - before,
            )

        logger.info("file.collect.complete", candidate_count=len(collected))
        return collected

    def _collect_specifier(self, specifier: str | Path, collected: set[Path]) -> None:
        """Expand a literal file, directory or glob pattern into ``collected``."""
        spec_str = str(specifier)
        path = Path(specifier)

        if path.is_dir():
            self._collect_directory(path, collected)
        elif path.is_file():
            self._add_if_included(path, collected)
        elif is_glob_pattern(spec_str):
            matches = sorted(glob.glob(spec_str, recursive=True, include_hidden=True))
            if not matches:
                logger.debug("file.glob.no_match", pattern=spec_str)
            for match in matches:
                match_path = Path(match)
                if match_path.is_dir():
                    self._collect_directory(match_path, collected)
                elif match_path.is_file():
                    self._add_if_included(match_path, collected)
        else:
            logger.debug("file.specifier.no_match", specifier=spec_str)

    def _collect_directory(self, directory: Path, collected: set[Path]) -> None:
        """Add every included file below ``directory``."""
        logger.debug("file.scan.directory", path=str(directory))
        for file_path in _walk_files(directory):
            if file_path.is_file():
                self._add_if_included(file_path, collected)

    def _collect_manifest(self, ref: ManifestRef, collected: set[Path]) -> None:
        """Add the files a package manifest selects.

        Entries are resolved against the manifest directory. Entries missing
        on disk are logged and skipped.

        Args:
            ref: Manifest reference
            collected: Set being filled
        """
        file_set = resolve_manifest_file_set(
            ref.path,
            include_unstaged=self.exclusion_engine.config.include_unstaged,
            vcs=self.vcs,
        )
        self.manifest_file_sets.append(file_set)
        root = file_set.manifest.root

        for relative_path in file_set.files:
            path = root / relative_path
            if path.is_dir():
                self._collect_directory(path, collected)
            elif path.is_file():
                self._add_if_included(path, collected)
            else:
                logger.warning("manifest.file.missing", path=relative_path)

    def _add_if_included(self, file_path: Path, collected: set[Path]) -> None:
        """Add a file to the candidate set unless the exclusion engine rejects it.

        Args:
            file_path: File to check
            collected: Set being filled; receives the absolute path
        """
        path = absolute_path(file_path)
        reason = self.exclusion_engine.is_excluded(path)
        if reason:
            logger.debug("exclusion.file.matched", path=str(path), reason=reason)
            if self.progress_reporter:
                self.progress_reporter.file_progress(path, "excluded", details=reason)
            return
        if path not in collected:
            collected.add(path)
            logger.debug("file.found.candidate", path=str(path))
            if self.progress_reporter:
                self.progress_reporter.file_progress(path, "found")


class GlobFileSource:
    """Candidates from literal paths, directories and glob patterns."""

    def __init__(self, specifiers: Iterable[str | Path], collector: FileCollector) -> None:
        self.specifiers = list(specifiers)
        self.collector = collector

    def list_candidates(self) -> set[Path]:
        """Collect the configured specifiers."""
        return self.collector.collect(self.specifiers)


class ManifestFileSource:
    """Candidates declared by a package manifest."""

    def __init__(self, manifest_path: Path | str, collector: FileCollector) -> None:
        self.manifest_path = Path(manifest_path)
        self.collector = collector
        self.file_set: ManifestFileSet | None = None

    def list_candidates(self) -> set[Path]:
        """Collect the manifest's files and keep its file set for reporting."""
        candidates = self.collector.collect([ManifestRef(self.manifest_path)])
        self.file_set = self.collector.manifest_file_sets[-1]
        return candidates


def collect(
    specifiers: Iterable[Specifier],
    exclusion_engine: ExclusionEngine,
    vcs: VersionControl | None = None,
) -> set[Path]:
    """Expand ``specifiers`` into the set of absolute file paths to bundle."""
    return FileCollector(exclusion_engine, vcs=vcs).collect(specifiers)


# 🐝📁🔚
