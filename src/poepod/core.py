#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Core orchestration for the concat and wrap operations."""

from collections.abc import Iterable
from pathlib import Path
import time

import attrs
from provide.foundation import logger

from poepod.bundler import BundleResult, BundleWriter, ProcessingSession, check_destination
from poepod.collection import FileCollector, FileSource, GlobFileSource, ManifestFileSource
from poepod.config import PoepodConfig, load_config_overlay
from poepod.exclusions import ExclusionEngine, ExclusionReason, absolute_path
from poepod.manifest import load_manifest
from poepod.progress import ProgressReporter
from poepod.vcs import VersionControl

DEFAULT_CONCAT_OUTPUT = "concatenated_output.txt"


@attrs.define(frozen=True, slots=True)
class ConcatResult:
    output_file: Path
    total_files: int
    copied_files: int
    failed_files: tuple[Path, ...] = ()
    warnings: tuple[str, ...] = ()
    excluded: dict[Path, ExclusionReason] = attrs.field(factory=dict)


@attrs.define(frozen=True, slots=True)
class WrapResult:
    package_name: str
    output_file: Path
    total_files: int
    copied_files: int
    unstaged_files: tuple[str, ...] = ()
    failed_files: tuple[Path, ...] = ()
    warnings: tuple[str, ...] = ()
    excluded: dict[Path, ExclusionReason] = attrs.field(factory=dict)


class Processor:
    """Shared pipeline: apply the configuration overlay, collect from a source, write the bundle."""

    def __init__(
        self,
        config: PoepodConfig,
        config_file: Path | str | None = None,
        vcs: VersionControl | None = None,
        progress_reporter: ProgressReporter | None = None,
    ) -> None:
        self.config = config.with_overlay(load_config_overlay(config_file))
        self.exclusion_engine = ExclusionEngine(self.config)
        self.collector = FileCollector(self.exclusion_engine, vcs=vcs, progress_reporter=progress_reporter)
        self.writer = BundleWriter(self.config, progress_reporter=progress_reporter)

    def run(
        self, source: FileSource, destination: Path, preamble: str | None = None
    ) -> tuple[BundleResult, ProcessingSession]:
        """Collect candidates from ``source`` and write the bundle.

        Args:
            source: Candidate file provider
            destination: Output file, checked before collection starts
            preamble: Optional text written before the first block

        Returns:
            The bundle counts and the session holding failures and warnings
        """
        start_time = time.monotonic()
        check_destination(destination)

        candidates = source.list_candidates()
        session = ProcessingSession()
        result = self.writer.write(candidates, destination, session=session, preamble=preamble)

        logger.info(
            "process.complete",
            total_files=result.total_files,
            copied_files=result.copied_files,
            duration_seconds=time.monotonic() - start_time,
        )
        return result, session


def concat_files(
    files: Iterable[str | Path],
    output_file: Path | str | None = None,
    config: PoepodConfig | None = None,
    config_file: Path | str | None = None,
    progress_reporter: ProgressReporter | None = None,
) -> ConcatResult:
    """Concatenate files, directories and glob matches into one bundle."""
    if config is None:
        config = PoepodConfig()
    target = absolute_path(output_file or config.output_file or DEFAULT_CONCAT_OUTPUT)
    if config.output_file != target:
        config = attrs.evolve(config, output_file=target)

    logger.info("concat.start", output_file=str(target))
    processor = Processor(config, config_file=config_file, progress_reporter=progress_reporter)
    source = GlobFileSource(files, processor.collector)
    result, session = processor.run(source, target)

    return ConcatResult(
        output_file=target,
        total_files=result.total_files,
        copied_files=result.copied_files,
        failed_files=tuple(session.failed_files),
        warnings=tuple(session.warnings),
        excluded=processor.exclusion_engine.get_all_exclusions(),
    )


def wrap_header(package_name: str, manifest_path: Path) -> str:
    return f"# Wrapped Package: {package_name}\n## Manifest: {manifest_path.name}\n\n"


def wrap_package(
    manifest_path: Path | str,
    output_file: Path | str | None = None,
    config: PoepodConfig | None = None,
    config_file: Path | str | None = None,
    vcs: VersionControl | None = None,
    progress_reporter: ProgressReporter | None = None,
) -> WrapResult:
    """Wrap the files a package manifest declares into one bundle.

    Raises:
        ManifestNotFound: The manifest does not exist.
        ManifestLoadError: The manifest cannot be parsed.
    """
    if config is None:
        config = PoepodConfig()
    manifest = load_manifest(manifest_path)

    target = absolute_path(output_file or config.output_file or f"{manifest.name}_wrapped.txt")
    changes: dict[str, Path] = {}
    if config.output_file != target:
        changes["output_file"] = target
    if config.base_dir is None:
        changes["base_dir"] = manifest.root
    if changes:
        config = attrs.evolve(config, **changes)

    logger.info("wrap.start", package=manifest.name, output_file=str(target))
    processor = Processor(config, config_file=config_file, vcs=vcs, progress_reporter=progress_reporter)
    source = ManifestFileSource(manifest.path, processor.collector)
    preamble = wrap_header(manifest.name, manifest.path) if config.include_header else None
    result, session = processor.run(source, target, preamble=preamble)

    file_set = source.file_set
    unstaged = file_set.unstaged_files if file_set else ()
    warnings = [*(file_set.warnings if file_set else ()), *session.warnings]

    return WrapResult(
        package_name=manifest.name,
        output_file=target,
        total_files=result.total_files,
        copied_files=result.copied_files,
        unstaged_files=unstaged,
        failed_files=tuple(session.failed_files),
        warnings=tuple(warnings),
        excluded=processor.exclusion_engine.get_all_exclusions(),
    )


# 🐝📁🔚
