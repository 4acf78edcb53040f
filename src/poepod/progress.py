#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Per-file progress output for the command line."""

from pathlib import Path
from typing import Literal

from provide.foundation.console import pout
from provide.foundation.context import CLIContext

ProgressStatus = Literal["found", "included", "excluded", "skipped", "error"]

_SYMBOLS: dict[str, tuple[str, str]] = {
    "found": ("✓", "+"),
    "included": ("✓", "+"),
    "excluded": ("⊘", "x"),
    "skipped": ("⏭", "-"),
    "error": ("✗", "!"),
}

_COLORS: dict[str, str] = {
    "found": "green",
    "included": "green",
    "excluded": "yellow",
    "skipped": "yellow",
    "error": "red",
}


class ProgressReporter:
    """Reports file progress through ``pout``. Disabled in JSON mode."""

    def __init__(
        self,
        enabled: bool = True,
        cli_context: CLIContext | None = None,
        base_dir: Path | None = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            enabled: Whether progress lines are printed
            cli_context: Output settings; JSON mode disables the reporter
            base_dir: Paths under it are shown relative
        """
        self.enabled = enabled and not (cli_context and cli_context.json_output)
        self.cli_context = cli_context
        self.base_dir = base_dir

    def file_progress(self, file_path: Path, status: ProgressStatus, details: str | None = None) -> None:
        """Print one progress line for a file.

        Args:
            file_path: File being reported
            status: Processing status
            details: Optional detail shown in parentheses
        """
        if not self.enabled:
            return

        display = file_path
        if self.base_dir is not None and file_path.is_relative_to(self.base_dir):
            display = file_path.relative_to(self.base_dir)

        emoji, plain = _SYMBOLS.get(status, ("?", "?"))
        symbol = plain if self.cli_context and self.cli_context.no_emoji else emoji
        details_str = f" ({details})" if details else ""
        pout(
            f"  {symbol} {status.capitalize()}: {display.as_posix()}{details_str}",
            color=_COLORS.get(status, "white"),
            ctx=self.cli_context,
        )


# 🐝📁🔚
