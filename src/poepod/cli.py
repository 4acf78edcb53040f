#!/usr/bin/env python3
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#


import os
from pathlib import Path

import click
from provide.foundation import logger
from provide.foundation.cli.decorators import output_options
from provide.foundation.console import perr, pout
from provide.foundation.context import CLIContext

from poepod import __version__
from poepod.config import ExcludePattern, PoepodConfig, _get_default_exclude_patterns
from poepod.core import DEFAULT_CONCAT_OUTPUT, concat_files, wrap_package
from poepod.errors import ManifestError, PoepodError
from poepod.exclusions import display_exclusions
from poepod.progress import ProgressReporter


def _cli_context(ctx: click.Context, json_output: bool | None, no_color: bool, no_emoji: bool) -> CLIContext:
    if not hasattr(ctx, "obj") or ctx.obj is None:
        ctx.obj = CLIContext()
    cli_context = ctx.obj
    if json_output is not None:
        cli_context.json_output = json_output
    if no_color:
        cli_context.no_color = no_color
    if no_emoji:
        cli_context.no_emoji = no_emoji
    return cli_context


def _exclude_patterns(exclude: tuple[str, ...]) -> list[ExcludePattern]:
    # User patterns replace the defaults rather than extending them.
    if exclude:
        return list(exclude)
    return _get_default_exclude_patterns()


def _display(path: Path) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        return str(path)


def _report_warnings(warnings: tuple[str, ...]) -> None:
    for warning in warnings:
        perr(f"Warning: {warning}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, package_name="poepod", message="%(package)s version %(version)s")
def cli() -> None:
    """
    poepod: Concatenate files or wrap a package into a single text file

    for feeding to text-consuming tools.
    """


@cli.command(name="concat", context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("files", nargs=-1, required=True)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Output file path. [default: {DEFAULT_CONCAT_OUTPUT}]",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    type=str,
    help="Exclusion pattern (regex or glob). Replaces the defaults. Use multiple times.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file with additional 'exclude' patterns.",
)
@click.option("--include-binary", is_flag=True, default=False, help="Include binary files as base64 blocks.")
@click.option("--include-dot-files", is_flag=True, default=False, help="Include files starting with a dot.")
@click.option(
    "--base-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Write file paths relative to this directory.",
)
@click.option("--show-excluded", is_flag=True, default=False, help="List excluded files after processing.")
@click.option("--progress/--no-progress", default=False, help="Show per-file progress.")
@output_options
@click.pass_context
def concat(
    ctx: click.Context,
    files: tuple[str, ...],
    output: Path | None,
    exclude: tuple[str, ...],
    config_file: Path | None,
    include_binary: bool,
    include_dot_files: bool,
    base_dir: Path | None,
    show_excluded: bool,
    progress: bool,
    json_output: bool | None,
    no_color: bool,
    no_emoji: bool,
) -> None:
    """Concatenate files, directories or glob patterns into one text file."""
    cli_context = _cli_context(ctx, json_output, no_color, no_emoji)
    logger.debug(
        "cli.concat.arguments",
        files=list(files),
        output=str(output) if output else None,
        exclude=list(exclude),
        config=str(config_file) if config_file else None,
        include_binary=include_binary,
        include_dot_files=include_dot_files,
        base_dir=str(base_dir) if base_dir else None,
    )

    try:
        config = PoepodConfig(
            output_file=Path(os.path.abspath(output or DEFAULT_CONCAT_OUTPUT)),
            exclude_patterns=_exclude_patterns(exclude),
            include_binary=include_binary,
            include_dot_files=include_dot_files,
            base_dir=base_dir,
            show_progress=progress,
        )
        reporter = ProgressReporter(enabled=config.show_progress, cli_context=cli_context, base_dir=config.base_dir)
        result = concat_files(files, config=config, config_file=config_file, progress_reporter=reporter)
    except PoepodError as e:
        logger.error("cli.concat.failed", error=str(e))
        perr(f"Error: {e}")
        raise SystemExit(1) from None
    except OSError as e:  # pragma: no cover
        logger.critical(f"File system error: {e}", exc_info=False)
        perr(f"Error: {e}")
        raise SystemExit(1) from None

    if cli_context.json_output:
        pout(
            {
                "total_files": result.total_files,
                "copied_files": result.copied_files,
                "output_file": str(result.output_file),
                "failed_files": [str(p) for p in result.failed_files],
            },
            json_key="concat",
            ctx=cli_context,
        )
    else:
        pout(f"-> {result.total_files} files detected.", ctx=cli_context)
        pout(
            f"=> {result.copied_files} files have been concatenated into {_display(result.output_file)}.",
            ctx=cli_context,
        )
    _report_warnings(result.warnings)

    if show_excluded:
        display_exclusions(result.excluded, base_dir=config.base_dir)


@cli.command(name="wrap", context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("manifest", type=click.Path(path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file path. [default: <package>_wrapped.txt]",
)
@click.option(
    "--include-unstaged",
    is_flag=True,
    default=False,
    help="Include untracked and modified files from lib/, spec/, test/ and friends.",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    type=str,
    help="Exclusion pattern (regex or glob). Replaces the defaults. Use multiple times.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file with additional 'exclude' patterns.",
)
@click.option("--include-binary", is_flag=True, default=False, help="Include binary files as base64 blocks.")
@click.option("--include-dot-files", is_flag=True, default=False, help="Include files starting with a dot.")
@click.option(
    "--base-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Write file paths relative to this directory. [default: the manifest's directory]",
)
@click.option("--header", is_flag=True, default=False, help="Prepend the package name and manifest file.")
@click.option("--show-excluded", is_flag=True, default=False, help="List excluded files after processing.")
@click.option("--progress/--no-progress", default=False, help="Show per-file progress.")
@output_options
@click.pass_context
def wrap(
    ctx: click.Context,
    manifest: Path,
    output: Path | None,
    include_unstaged: bool,
    exclude: tuple[str, ...],
    config_file: Path | None,
    include_binary: bool,
    include_dot_files: bool,
    base_dir: Path | None,
    header: bool,
    show_excluded: bool,
    progress: bool,
    json_output: bool | None,
    no_color: bool,
    no_emoji: bool,
) -> None:
    """Wrap the files declared by a package manifest into one text file."""
    cli_context = _cli_context(ctx, json_output, no_color, no_emoji)

    try:
        config = PoepodConfig(
            output_file=Path(os.path.abspath(output)) if output else None,
            exclude_patterns=_exclude_patterns(exclude),
            include_binary=include_binary,
            include_dot_files=include_dot_files,
            include_unstaged=include_unstaged,
            include_header=header,
            base_dir=base_dir,
            show_progress=progress,
        )
        reporter = ProgressReporter(enabled=config.show_progress, cli_context=cli_context, base_dir=config.base_dir)
        result = wrap_package(manifest, config=config, config_file=config_file, progress_reporter=reporter)
    except ManifestError as e:
        logger.error("cli.wrap.manifest_failed", manifest=str(manifest), error=str(e))
        perr(f"Error: {e}")
        raise SystemExit(1) from None
    except PoepodError as e:
        logger.error("cli.wrap.failed", error=str(e))
        perr(f"Error: {e}")
        raise SystemExit(1) from None

    if cli_context.json_output:
        pout(
            {
                "package": result.package_name,
                "total_files": result.total_files,
                "copied_files": result.copied_files,
                "output_file": str(result.output_file),
                "unstaged_files": list(result.unstaged_files),
                "failed_files": [str(p) for p in result.failed_files],
            },
            json_key="wrap",
            ctx=cli_context,
        )
    else:
        pout(f"-> {result.total_files} files detected.", ctx=cli_context)
        pout(f"=> The package has been wrapped into '{_display(result.output_file)}'.", ctx=cli_context)
    _report_warnings(result.warnings)

    if result.unstaged_files:
        perr("\nWarning: The following files are not staged in git:")
        for path in result.unstaged_files:
            perr(f"  - {path}")
        if include_unstaged:
            perr("These files have been included in the wrapped output.")
        else:
            perr("Use --include-unstaged to include these files in the wrapped output.")

    if show_excluded:
        display_exclusions(result.excluded, base_dir=config.base_dir)


if __name__ == "__main__":  # pragma: no cover
    cli()

# 🐝📁🔚
