#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Package manifest loading and the manifest file set.

A manifest is a TOML descriptor listing the files of a packaged library::

    [package]
    name = "demo"
    files = ["lib/demo.py", "lib/demo/"]
    test_files = ["tests/test_demo.py"]
    executables_dir = "bin"

The keys may also sit at the top level of the document.
"""

import glob
import os
from pathlib import Path
import tomllib
from typing import Any

import attrs
from provide.foundation import logger

from poepod.errors import ManifestLoadError, ManifestNotFound, VersionControlError
from poepod.exclusions import is_glob_pattern
from poepod.vcs import GitStatus, VersionControl

UNSTAGED_SOURCE_PREFIXES: tuple[str, ...] = ("bin/", "exe/", "lib/", "spec/", "src/", "test/", "tests/")


@attrs.define(frozen=True, slots=True)
class PackageManifest:
    """Structured fields read from a package manifest."""

    path: Path
    name: str
    files: tuple[str, ...] = ()
    test_files: tuple[str, ...] = ()
    executables_dir: str | None = None

    @property
    def root(self) -> Path:
        return self.path.parent


@attrs.define(frozen=True, slots=True)
class ManifestFileSet:
    """Relative paths selected for wrapping, plus what git reported as unstaged."""

    manifest: PackageManifest
    files: tuple[str, ...]
    unstaged_files: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def _string_list(data: dict[str, Any], key: str, required: bool) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        if required:
            raise ManifestLoadError(f"Manifest is missing the '{key}' list.")
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ManifestLoadError(f"Manifest key '{key}' must be a list of strings.")
    return tuple(value)


def load_manifest(manifest_path: Path | str) -> PackageManifest:
    """Load a package manifest.

    Raises:
        ManifestNotFound: The manifest path does not exist.
        ManifestLoadError: The manifest is not valid TOML or lacks required fields.
    """
    path = Path(os.path.abspath(manifest_path))
    if not path.exists():
        raise ManifestNotFound(f"The specified manifest file '{manifest_path}' does not exist.")

    try:
        document = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestLoadError(f"Error loading manifest: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestLoadError(f"Error loading manifest: {e}") from e

    data = document.get("package", document)
    if not isinstance(data, dict):
        raise ManifestLoadError("Manifest 'package' entry must be a table.")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestLoadError("Manifest is missing a package 'name'.")

    executables_dir = data.get("executables_dir")
    if executables_dir is not None and not isinstance(executables_dir, str):
        raise ManifestLoadError("Manifest key 'executables_dir' must be a string.")

    manifest = PackageManifest(
        path=path,
        name=name,
        files=_string_list(data, "files", required=True),
        test_files=_string_list(data, "test_files", required=False),
        executables_dir=executables_dir,
    )
    logger.info(
        "manifest.loaded",
        path=str(path),
        name=manifest.name,
        files=len(manifest.files),
        test_files=len(manifest.test_files),
    )
    return manifest


def _relative(path: Path, root: Path) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def _expand_declared(entries: tuple[str, ...], root: Path) -> set[str]:
    expanded: set[str] = set()
    for entry in entries:
        if is_glob_pattern(entry):
            matches = glob.glob(str(root / entry), recursive=True, include_hidden=True)
            if not matches:
                logger.debug("manifest.glob.no_match", pattern=entry)
            expanded.update(_relative(Path(m), root) for m in matches)
        else:
            expanded.add(Path(entry).as_posix())
    return expanded


def _executable_files(manifest: PackageManifest) -> set[str]:
    if not manifest.executables_dir:
        return set()
    exe_dir = manifest.root / manifest.executables_dir
    if not exe_dir.is_dir():
        logger.warning("manifest.executables_dir.missing", path=str(exe_dir))
        return set()
    return {_relative(p, manifest.root) for p in exe_dir.rglob("*") if p.is_file()}


def find_readme_files(manifest: PackageManifest) -> set[str]:
    return {_relative(p, manifest.root) for p in manifest.root.glob("README*") if p.is_file()}


def check_unstaged_files(
    manifest: PackageManifest, vcs: VersionControl
) -> tuple[list[str], list[str]]:
    """Return (unstaged source files, warnings). Never raises on VCS failure."""
    try:
        status = vcs.status(manifest.root)
    except VersionControlError as e:
        message = f"Git error: {e}. Assuming no unstaged files."
        logger.warning("vcs.status.failed", root=str(manifest.root), error=str(e))
        return [], [message]

    unstaged = sorted(
        path for path in status.unstaged if path.startswith(UNSTAGED_SOURCE_PREFIXES)
    )
    if unstaged:
        logger.info("manifest.unstaged.found", count=len(unstaged))
    return unstaged, []


def resolve_manifest_file_set(
    manifest_path: Path | str,
    include_unstaged: bool = False,
    vcs: VersionControl | None = None,
) -> ManifestFileSet:
    """Gather the relative paths a package manifest selects.

    The unstaged-files check always runs so callers can warn about them;
    they only join the file set when ``include_unstaged`` is true.
    """
    manifest = load_manifest(manifest_path)
    root = manifest.root

    files = _expand_declared(manifest.files, root)
    files |= _expand_declared(manifest.test_files, root)
    files |= _executable_files(manifest)
    files |= find_readme_files(manifest)

    unstaged, warnings = check_unstaged_files(manifest, vcs if vcs is not None else GitStatus())
    if include_unstaged:
        files |= set(unstaged)

    file_set = ManifestFileSet(
        manifest=manifest,
        files=tuple(sorted(files)),
        unstaged_files=tuple(unstaged),
        warnings=tuple(warnings),
    )
    logger.debug("manifest.file_set.resolved", count=len(file_set.files), unstaged=len(unstaged))
    return file_set


# 🐝📁🔚
