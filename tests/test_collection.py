#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#


from pathlib import Path

import pytest

from poepod.collection import FileCollector, GlobFileSource, ManifestFileSource, ManifestRef, collect
from poepod.config import PoepodConfig
from poepod.errors import FileCollectionError, ManifestNotFound
from poepod.exclusions import ExclusionEngine


@pytest.fixture
def engine() -> ExclusionEngine:
    return ExclusionEngine(PoepodConfig())


def test_directory_is_walked_recursively(mixed_project: Path, engine: ExclusionEngine):
    paths = collect([mixed_project], engine)
    assert paths == {
        mixed_project / "a.txt",
        mixed_project / "b.txt",
        mixed_project / "pkg" / "mod.py",
    }
    assert engine.reason_for(mixed_project / ".env") == "dotfile"
    assert engine.reason_for(mixed_project / "photo.jpg") == "binary"


def test_walk_reaches_dotfiles_when_enabled(mixed_project: Path):
    engine = ExclusionEngine(PoepodConfig(include_dot_files=True))
    assert mixed_project / ".env" in collect([mixed_project], engine)


def test_literal_file(text_project: Path, engine: ExclusionEngine):
    assert collect([str(text_project / "a.txt")], engine) == {text_project / "a.txt"}


def test_literal_file_is_still_filtered(mixed_project: Path, engine: ExclusionEngine):
    assert collect([mixed_project / "photo.jpg"], engine) == set()


def test_glob_pattern(mixed_project: Path, engine: ExclusionEngine):
    assert collect([str(mixed_project / "*.txt")], engine) == {
        mixed_project / "a.txt",
        mixed_project / "b.txt",
    }


def test_recursive_glob(mixed_project: Path, engine: ExclusionEngine):
    assert collect([str(mixed_project / "**" / "*.py")], engine) == {mixed_project / "pkg" / "mod.py"}


def test_glob_matching_directory_expands_it(mixed_project: Path, engine: ExclusionEngine):
    assert collect([str(mixed_project / "pk?")], engine) == {mixed_project / "pkg" / "mod.py"}


def test_relative_specifiers_become_absolute(
    text_project: Path, engine: ExclusionEngine, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.chdir(text_project)
    paths = collect(["a.txt", "*.txt"], engine)
    assert paths == {text_project / "a.txt", text_project / "b.txt"}
    assert all(p.is_absolute() for p in paths)


def test_overlapping_specifiers_deduplicate(text_project: Path, engine: ExclusionEngine):
    paths = collect([text_project, text_project / "a.txt", str(text_project / "*.txt")], engine)
    assert len(paths) == 2


def test_unmatched_specifiers_yield_nothing(tmp_path: Path, engine: ExclusionEngine):
    assert collect([tmp_path / "missing.txt", str(tmp_path / "*.none")], engine) == set()


def test_unsupported_specifier(engine: ExclusionEngine):
    with pytest.raises(FileCollectionError, match="Unsupported input specifier"):
        collect([42], engine)


def test_manifest_reference(manifest_path: Path, package_dir: Path, fake_vcs, engine: ExclusionEngine):
    paths = collect([ManifestRef(manifest_path)], engine, vcs=fake_vcs())
    assert paths == {
        package_dir / "README.md",
        package_dir / "exe" / "demo",
        package_dir / "lib" / "a.rb",
        package_dir / "lib" / "demo" / "version.rb",
        package_dir / "spec" / "a_spec.rb",
    }


def test_manifest_entries_missing_on_disk_are_skipped(
    manifest_path: Path, package_dir: Path, fake_vcs, engine: ExclusionEngine
):
    (package_dir / "spec" / "a_spec.rb").unlink()
    paths = collect([ManifestRef(manifest_path)], engine, vcs=fake_vcs())
    assert package_dir / "spec" / "a_spec.rb" not in paths
    assert package_dir / "lib" / "a.rb" in paths


def test_manifest_declared_directory_is_expanded(package_dir: Path, fake_vcs, engine: ExclusionEngine):
    manifest = package_dir / "dir.toml"
    manifest.write_text('name = "dir"\nfiles = ["lib"]\n')
    paths = collect([ManifestRef(manifest)], engine, vcs=fake_vcs())
    assert package_dir / "lib" / "demo" / "version.rb" in paths


def test_manifest_mixed_with_other_specifiers(
    manifest_path: Path, package_dir: Path, text_project: Path, fake_vcs, engine: ExclusionEngine
):
    paths = collect([ManifestRef(manifest_path), text_project / "a.txt"], engine, vcs=fake_vcs())
    assert text_project / "a.txt" in paths
    assert package_dir / "lib" / "a.rb" in paths


def test_missing_manifest_propagates(tmp_path: Path, fake_vcs, engine: ExclusionEngine):
    with pytest.raises(ManifestNotFound):
        collect([ManifestRef(tmp_path / "none.toml")], engine, vcs=fake_vcs())


def test_file_sources(manifest_path: Path, text_project: Path, fake_vcs, engine: ExclusionEngine):
    collector = FileCollector(engine, vcs=fake_vcs(untracked=["lib/b.rb"]))

    glob_source = GlobFileSource([text_project], collector)
    assert glob_source.list_candidates() == {text_project / "a.txt", text_project / "b.txt"}

    manifest_source = ManifestFileSource(manifest_path, collector)
    assert manifest_source.file_set is None
    manifest_source.list_candidates()
    assert manifest_source.file_set is not None
    assert manifest_source.file_set.unstaged_files == ("lib/b.rb",)


# 🐝📁🔚
