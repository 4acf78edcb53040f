#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Version-control status queries used to spot unstaged package files."""

from pathlib import Path
import subprocess
from typing import Protocol

import attrs
from provide.foundation import logger

from poepod.errors import VersionControlError


@attrs.define(frozen=True, slots=True)
class VcsStatus:
    """Paths relative to the queried directory."""

    untracked: frozenset[str] = attrs.field(factory=frozenset, converter=frozenset)
    modified: frozenset[str] = attrs.field(factory=frozenset, converter=frozenset)

    @property
    def unstaged(self) -> frozenset[str]:
        return self.untracked | self.modified


class VersionControl(Protocol):
    def status(self, root: Path) -> VcsStatus: ...


class GitStatus:
    """Query git for untracked and modified files below a directory."""

    def __init__(self, git_executable: str = "git", timeout: float | None = 30.0) -> None:
        self.git_executable = git_executable
        self.timeout = timeout

    def status(self, root: Path) -> VcsStatus:
        """Untracked and modified files under ``root``, relative to it.

        Raises:
            VersionControlError: If git is missing or the command fails
        """
        untracked = self._ls_files(root, "--others", "--exclude-standard")
        modified = self._ls_files(root, "--modified")
        logger.debug(
            "vcs.status.complete",
            root=str(root),
            untracked=len(untracked),
            modified=len(modified),
        )
        return VcsStatus(untracked=untracked, modified=modified)

    def _ls_files(self, root: Path, *args: str) -> set[str]:
        # ls-files reports paths relative to the working directory it runs in.
        command = [self.git_executable, "ls-files", "-z", *args]
        try:
            result = subprocess.run(
                command,
                cwd=str(root),
                capture_output=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise VersionControlError(f"git executable not found: {e}") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            raise VersionControlError(stderr or f"git exited with status {e.returncode}") from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise VersionControlError(f"git invocation failed: {e}") from e

        output = result.stdout.decode("utf-8", errors="replace")
        return {entry for entry in output.split("\0") if entry}


# 🐝📁🔚
