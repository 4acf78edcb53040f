#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#


import os
from pathlib import Path
import re
from typing import Any, TypeAlias

import attrs
from provide.foundation import logger
from provide.foundation.config.base import BaseConfig, field
import yaml

from poepod.errors import ConfigurationError, InvalidPathError

ExcludePattern: TypeAlias = str | re.Pattern[str]

DEFAULT_ENCODING = "utf-8"
DEFAULT_EXCLUDE_PATTERNS: list[ExcludePattern] = [
    "node_modules/",
    r"\.git/",
    r"\.gitignore$",
    r"\.DS_Store$",
]


def _get_default_exclude_patterns() -> list[ExcludePattern]:
    return list(DEFAULT_EXCLUDE_PATTERNS)


def _convert_optional_path(value: str | Path | None) -> Path | None:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    try:
        return Path(value)
    except TypeError as e:
        raise TypeError(f"Cannot convert value of type {type(value)} to Path or None.") from e


def _literal_path_rule(path: Path) -> re.Pattern[str]:
    return re.compile(f"^{re.escape(str(path))}$")


@attrs.define(kw_only=True, slots=True)
class PoepodConfig(BaseConfig):
    """Options shared by every poepod pipeline, including the exclusion policy."""

    base_dir: Path | None = field(  # noqa: RUF009
        default=None,
        converter=_convert_optional_path,
        validator=attrs.validators.optional(attrs.validators.instance_of(Path)),
        description="Directory that display paths are made relative to",
        env_var="POEPOD_BASE_DIR",
    )
    output_file: Path | None = field(  # noqa: RUF009
        default=None,
        converter=_convert_optional_path,
        validator=attrs.validators.optional(attrs.validators.instance_of(Path)),
        description="Output bundle file path",
        env_var="POEPOD_OUTPUT",
    )
    exclude_patterns: list[ExcludePattern] = field(  # noqa: RUF009
        factory=_get_default_exclude_patterns,
        validator=attrs.validators.deep_iterable(
            member_validator=attrs.validators.instance_of((str, re.Pattern)),
            iterable_validator=attrs.validators.instance_of(list),
        ),
        description="Regex or glob patterns to exclude",
    )
    include_binary: bool = field(
        default=False,
        description="Embed binary files as base64 blocks",
        env_var="POEPOD_INCLUDE_BINARY",
    )
    include_dot_files: bool = field(
        default=False,
        description="Include files whose name starts with a dot",
        env_var="POEPOD_INCLUDE_DOT_FILES",
    )
    include_unstaged: bool = field(
        default=False,
        description="Include untracked and modified files when wrapping a package",
        env_var="POEPOD_INCLUDE_UNSTAGED",
    )
    include_header: bool = field(
        default=False,
        description="Prepend the package header when wrapping a package",
    )
    show_progress: bool = field(
        default=False,
        description="Show per-file progress while bundling",
        env_var="POEPOD_SHOW_PROGRESS",
    )

    def __attrs_post_init__(self) -> None:
        super().__attrs_post_init__()
        self.validate()

    def validate(self) -> None:
        if self.base_dir is not None:
            # Candidate paths keep symlinked components, so base_dir must too.
            self.base_dir = Path(os.path.abspath(self.base_dir))
            if not self.base_dir.exists():
                raise InvalidPathError(f"Base directory '{self.base_dir}' not found.")
            if not self.base_dir.is_dir():
                raise InvalidPathError(f"Base path '{self.base_dir}' is not a directory.")

        if self.output_file is not None:
            if not self.output_file.is_absolute():
                self.output_file = Path(os.path.abspath(self.output_file))
            output_rule = _literal_path_rule(self.output_file)
            already_excluded = any(
                isinstance(p, re.Pattern) and p.pattern == output_rule.pattern for p in self.exclude_patterns
            )
            if not already_excluded:
                self.exclude_patterns = [*self.exclude_patterns, output_rule]
                logger.debug("config.exclude.output_file", path=str(self.output_file))
        else:
            logger.debug("config.output_file.none")
        logger.debug("config.initialized", config=str(self))

    def with_overlay(self, overlay: dict[str, Any]) -> "PoepodConfig":
        """Return a copy with the overlay's ``exclude`` patterns merged in."""
        extra = overlay.get("exclude")
        if extra is None:
            return self
        if isinstance(extra, str):
            extra = [extra]
        if not isinstance(extra, list) or not all(isinstance(p, str) for p in extra):
            raise ConfigurationError("Configuration key 'exclude' must be a list of pattern strings.")

        merged = list(self.exclude_patterns)
        for pattern in extra:
            if pattern not in merged:
                merged.append(pattern)
        logger.debug("config.overlay.merged", added=len(merged) - len(self.exclude_patterns))
        return attrs.evolve(self, exclude_patterns=merged)


def load_config_overlay(config_file: Path | str | None) -> dict[str, Any]:
    """Load the optional YAML overlay; a missing file is an empty overlay."""
    if config_file is None:
        return {}
    path = Path(config_file)
    if not path.is_file():
        logger.debug("config.overlay.missing", path=str(path))
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding=DEFAULT_ENCODING))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid configuration file '{path}': {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file '{path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{path}' must contain a mapping.")

    unknown = sorted(str(k) for k in data if k != "exclude")
    if unknown:
        logger.debug("config.overlay.unknown_keys", path=str(path), keys=unknown)
    logger.info("config.overlay.loaded", path=str(path))
    return data


# 🐝📁🔚
