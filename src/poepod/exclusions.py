#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#


from collections.abc import Callable, Sequence
import fnmatch
import os
from pathlib import Path
import re
from typing import Literal, TypeAlias

import attrs
from provide.foundation import logger
from provide.foundation.console import pout

from poepod.classifier import Classification, classify
from poepod.config import ExcludePattern, PoepodConfig

ExclusionReason: TypeAlias = Literal["dotfile", "binary", "regex", "glob"] | None

GLOB_METACHARACTERS = ("*", "?", "[")
# Syntax fnmatch has no use for; a pattern containing any of these is a regex.
REGEX_ONLY_SYNTAX = ("\\", "^", "$", ".*", ".+", "(", "|", "{")


def is_glob_pattern(pattern: str) -> bool:
    """Return True if ``pattern`` contains shell wildcard characters."""
    return any(char in pattern for char in GLOB_METACHARACTERS)


def looks_like_regex(pattern: str) -> bool:
    """Return True if ``pattern`` uses syntax that only makes sense as a regex."""
    return any(token in pattern for token in REGEX_ONLY_SYNTAX)


@attrs.define(frozen=True, slots=True)
class RegexRule:
    """Exclude rule matched with ``re.search`` against the full path."""

    pattern: re.Pattern[str]
    kind: Literal["regex"] = "regex"

    def matches(self, path_str: str, name: str) -> bool:
        return self.pattern.search(path_str) is not None

    def __str__(self) -> str:
        return self.pattern.pattern


@attrs.define(frozen=True, slots=True)
class GlobRule:
    """Exclude rule matched with shell filename semantics against the path or its basename."""

    pattern: str
    kind: Literal["glob"] = "glob"

    def matches(self, path_str: str, name: str) -> bool:
        return fnmatch.fnmatch(path_str, self.pattern) or fnmatch.fnmatch(name, self.pattern)

    def __str__(self) -> str:
        return self.pattern


ExcludeRule: TypeAlias = RegexRule | GlobRule


def compile_exclude_rule(pattern: ExcludePattern) -> ExcludeRule:
    """Turn a raw pattern into a tagged rule.

    Compiled patterns are regexes. A string using regex-only syntax
    (backslash escapes, anchors, ``.*``, groups, alternation, repetition
    braces) is a regex. Otherwise a string containing ``*``, ``?`` or ``[``
    is a glob, and anything else is a regex. Strings that fail to compile as
    a regex fall back to a glob literal.

    Args:
        pattern: Raw pattern from the configuration

    Returns:
        The tagged rule
    """
    if isinstance(pattern, re.Pattern):
        return RegexRule(pattern)
    if not isinstance(pattern, str):
        raise TypeError(f"Unsupported exclude pattern type: {type(pattern)}")
    if is_glob_pattern(pattern) and not looks_like_regex(pattern):
        return GlobRule(pattern)
    try:
        return RegexRule(re.compile(pattern))
    except re.error:
        logger.debug("exclude.pattern.not_regex", pattern=pattern)
        return GlobRule(pattern)


def compile_exclude_rules(patterns: Sequence[ExcludePattern]) -> list[ExcludeRule]:
    """Compile every configured pattern, keeping their order."""
    rules = [compile_exclude_rule(p) for p in patterns]
    logger.debug(
        "exclude.rules.compiled",
        regex=sum(1 for r in rules if r.kind == "regex"),
        glob=sum(1 for r in rules if r.kind == "glob"),
    )
    return rules


def absolute_path(path: Path | str) -> Path:
    """Absolute, normalized path without resolving symlinks."""
    return Path(os.path.abspath(path))


class ExclusionEngine:
    """Decide whether a candidate path is left out of the bundle.

    Rules are evaluated in order and the first match wins:
    1. dotfiles, unless ``include_dot_files``;
    2. binary content, unless ``include_binary``;
    3. the configured exclude patterns (regex or glob).
    """

    def __init__(
        self,
        config: PoepodConfig,
        classifier: Callable[[Path], Classification] = classify,
    ) -> None:
        self.config = config
        self.classifier = classifier
        self.rules: list[ExcludeRule] = compile_exclude_rules(config.exclude_patterns)
        self.excluded_items: dict[Path, ExclusionReason] = {}

    def is_excluded(self, path_to_check: Path) -> ExclusionReason:
        """Check whether a path is excluded.

        Args:
            path_to_check: Candidate file path, absolute or relative to the cwd

        Returns:
            The exclusion reason, or None if the path is included
        """
        path = absolute_path(path_to_check)

        if not self.config.include_dot_files and path.name.startswith("."):
            return self._record(path, "dotfile")

        if not self.config.include_binary and self.classifier(path).is_binary:
            return self._record(path, "binary")

        path_str = path.as_posix()
        for rule in self.rules:
            if rule.matches(path_str, path.name):
                logger.debug("exclude.rule.match", path=path_str, pattern=str(rule), kind=rule.kind)
                return self._record(path, rule.kind)

        logger.debug("exclude.no_match", path=path_str)
        return None

    def should_exclude(self, path_to_check: Path) -> bool:
        """Return True if ``path_to_check`` is left out of the bundle."""
        return self.is_excluded(path_to_check) is not None

    def reason_for(self, path_to_check: Path) -> ExclusionReason:
        """Return the recorded exclusion reason for a path already checked, or None."""
        return self.excluded_items.get(absolute_path(path_to_check))

    def _record(self, path: Path, reason: ExclusionReason) -> ExclusionReason:
        """Remember why ``path`` was excluded and pass the reason through."""
        logger.debug("exclude.matched", path=str(path), reason=reason)
        self.excluded_items[path] = reason
        return reason

    def get_all_exclusions(self) -> dict[Path, ExclusionReason]:
        """Get all excluded paths with their reasons.

        Returns:
            Mapping of absolute path to exclusion reason, sorted by path
        """
        return dict(sorted(self.excluded_items.items()))


def display_exclusions(excluded: dict[Path, ExclusionReason], base_dir: Path | None = None) -> None:
    """Display excluded files with their reasons.

    Args:
        excluded: Mapping of excluded path to reason
        base_dir: Paths under this directory are shown relative to it
    """
    if not excluded:
        pout("No files were excluded.")
        return

    pout("\n--- Excluded Files ---")
    pout(f"Total Excluded Items: {len(excluded)}")
    for path_obj, reason in sorted(excluded.items()):
        display = path_obj.as_posix()
        if base_dir is not None and path_obj.is_relative_to(base_dir):
            display = path_obj.relative_to(base_dir).as_posix()
        pout(f"- {display}: {reason}")
    pout("--- End of Exclusions ---")


# 🐝📁🔚
