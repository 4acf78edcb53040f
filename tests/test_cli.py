#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Command-line tests for ``poepod concat`` and ``poepod wrap``."""

from pathlib import Path

import pytest

from poepod.cli import cli


@pytest.fixture
def stub_git(monkeypatch: pytest.MonkeyPatch, fake_vcs):
    """Replace the git collaborator used by ``wrap`` with a fake."""

    def _install(untracked: list[str] | None = None):
        vcs = fake_vcs(untracked=untracked or [])
        monkeypatch.setattr("poepod.manifest.GitStatus", lambda: vcs)
        return vcs

    return _install


def test_concat_summary(run_cli, text_project: Path, output_dir: Path):
    target = output_dir / "bundle.txt"
    result = run_cli(["concat", str(text_project / "a.txt"), str(text_project / "b.txt"), "-o", str(target)])

    assert result.exit_code == 0, result.output
    assert "-> 2 files detected." in result.output
    assert "=> 2 files have been concatenated into" in result.output
    assert "bundle.txt" in result.output
    assert "--- START FILE:" in target.read_text()


def test_concat_default_output(run_cli, text_project: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(text_project)
    result = run_cli(["concat", "."])

    assert result.exit_code == 0, result.output
    assert "concatenated_output.txt" in result.output
    assert (text_project / "concatenated_output.txt").is_file()


def test_concat_base_dir(run_cli, text_project: Path, output_dir: Path):
    target = output_dir / "bundle.txt"
    result = run_cli(["concat", str(text_project), "-o", str(target), "--base-dir", str(text_project)])

    assert result.exit_code == 0, result.output
    assert "--- START FILE: a.txt ---" in target.read_text()


def test_concat_requires_files(runner):
    result = runner.invoke(cli, ["concat"])
    assert result.exit_code != 0
    assert "Missing argument" in result.output


def test_concat_exclude_replaces_defaults(run_cli, mixed_project: Path, output_dir: Path):
    (mixed_project / "node_modules").mkdir()
    (mixed_project / "node_modules" / "dep.js").write_text("module.exports = 1;\n")
    target = output_dir / "bundle.txt"

    result = run_cli(
        ["concat", str(mixed_project), "-o", str(target), "-e", "*.py", "--base-dir", str(mixed_project)]
    )

    assert result.exit_code == 0, result.output
    content = target.read_text()
    assert "pkg/mod.py" not in content
    assert "node_modules/dep.js" in content


def test_concat_binary_and_dotfile_flags(run_cli, mixed_project: Path, output_dir: Path):
    target = output_dir / "bundle.txt"
    result = run_cli(
        [
            "concat",
            str(mixed_project),
            "-o",
            str(target),
            "--include-binary",
            "--include-dot-files",
            "--base-dir",
            str(mixed_project),
        ]
    )

    assert result.exit_code == 0, result.output
    content = target.read_text()
    assert "Content-Type: image/jpeg" in content
    assert "--- START FILE: .env ---" in content


def test_concat_show_excluded(run_cli, mixed_project: Path, output_dir: Path):
    result = run_cli(["concat", str(mixed_project), "-o", str(output_dir / "b.txt"), "--show-excluded"])

    assert result.exit_code == 0, result.output
    assert "--- Excluded Files ---" in result.output
    assert "photo.jpg: binary" in result.output


def test_concat_reports_decode_failures(run_cli, text_project: Path, output_dir: Path):
    (text_project / "latin.txt").write_bytes(b"caf\xe9\n")
    result = run_cli(["concat", str(text_project), "-o", str(output_dir / "b.txt")])

    assert result.exit_code == 0, result.output
    assert "-> 3 files detected." in result.output
    assert "=> 2 files have been concatenated" in result.output
    assert "not saved with UTF-8 encoding" in result.output


def test_concat_bad_config(run_cli, text_project: Path, output_dir: Path, tmp_path: Path):
    bad = tmp_path / "bad.yml"
    bad.write_text("exclude: [oops\n")
    result = run_cli(["concat", str(text_project), "-o", str(output_dir / "b.txt"), "--config", str(bad)])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_concat_unwritable_destination(run_cli, text_project: Path, tmp_path: Path):
    result = run_cli(["concat", str(text_project), "-o", str(tmp_path / "missing" / "b.txt")])

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_concat_progress(run_cli, mixed_project: Path, output_dir: Path):
    result = run_cli(
        ["concat", str(mixed_project), "-o", str(output_dir / "b.txt"), "--progress", "--no-emoji"]
    )

    assert result.exit_code == 0, result.output
    assert "+ Found:" in result.output
    assert "+ Included:" in result.output
    assert "x Excluded:" in result.output
    assert "(binary)" in result.output


def test_concat_json_output(run_cli, text_project: Path, output_dir: Path):
    result = run_cli(["concat", str(text_project), "-o", str(output_dir / "b.txt"), "--json"])

    assert result.exit_code == 0, result.output
    assert "copied_files" in result.output
    assert "files have been concatenated" not in result.output


def test_wrap_summary_and_unstaged_warning(
    run_cli, stub_git, manifest_path: Path, output_dir: Path
):
    stub_git(untracked=["lib/b.rb"])
    target = output_dir / "demo.txt"

    result = run_cli(["wrap", str(manifest_path), "-o", str(target)])

    assert result.exit_code == 0, result.output
    assert "=> The package has been wrapped into" in result.output
    assert "demo.txt'" in result.output
    assert "Warning: The following files are not staged in git:" in result.output
    assert "  - lib/b.rb" in result.output
    assert "Use --include-unstaged to include these files in the wrapped output." in result.output
    assert "--- START FILE: lib/a.rb ---" in target.read_text()


def test_wrap_include_unstaged(run_cli, stub_git, manifest_path: Path, package_dir: Path, output_dir: Path):
    stub_git(untracked=["lib/b.rb"])
    (package_dir / "lib" / "b.rb").write_text("module B; end\n")
    target = output_dir / "demo.txt"

    result = run_cli(["wrap", str(manifest_path), "-o", str(target), "--include-unstaged"])

    assert result.exit_code == 0, result.output
    assert "Use --include-unstaged" not in result.output
    assert "--- START FILE: lib/b.rb ---" in target.read_text()


def test_wrap_header_flag(run_cli, stub_git, manifest_path: Path, output_dir: Path):
    stub_git()
    target = output_dir / "demo.txt"

    result = run_cli(["wrap", str(manifest_path), "-o", str(target), "--header"])

    assert result.exit_code == 0, result.output
    assert target.read_text().startswith("# Wrapped Package: demo\n## Manifest: demo.toml\n\n")


def test_wrap_default_output(run_cli, stub_git, manifest_path: Path, tmp_path: Path, monkeypatch):
    stub_git()
    monkeypatch.chdir(tmp_path)

    result = run_cli(["wrap", str(manifest_path)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "demo_wrapped.txt").is_file()


def test_wrap_missing_manifest(run_cli, tmp_path: Path):
    result = run_cli(["wrap", str(tmp_path / "absent.toml")])

    assert result.exit_code == 1
    assert "Error: The specified manifest file" in result.output
    assert "does not exist." in result.output


def test_wrap_invalid_manifest(run_cli, tmp_path: Path):
    manifest = tmp_path / "bad.toml"
    manifest.write_text("[package\n")

    result = run_cli(["wrap", str(manifest)])

    assert result.exit_code == 1
    assert "Error: Error loading manifest" in result.output


def test_version(run_cli):
    result = run_cli(["--version"])
    assert result.exit_code == 0
    assert "poepod version" in result.output


# 🐝📁🔚
