#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Error types for poepod operations."""

from provide.foundation import FoundationError


class PoepodError(FoundationError):
    """Base error for all poepod operations."""

    pass


class ConfigurationError(PoepodError):
    """Error in poepod configuration or configuration overlay."""

    pass


class InvalidPathError(ConfigurationError):
    """Invalid or unusable path in configuration."""

    pass


class ManifestError(PoepodError):
    """Error while loading a package manifest."""

    pass


class ManifestNotFound(ManifestError):
    """The manifest path does not exist."""

    pass


class ManifestLoadError(ManifestError):
    """The manifest exists but could not be parsed."""

    pass


class FileCollectionError(PoepodError):
    """Error during file collection phase."""

    pass


class FileReadError(PoepodError):
    """Failed to read file content."""

    pass


class EncodingDecodeError(FileReadError):
    """File content is not valid UTF-8."""

    pass


class FileWriteError(PoepodError):
    """Failed to write the bundle."""

    pass


class DestinationOpenError(FileWriteError):
    """The bundle destination cannot be opened for writing."""

    pass


class VersionControlError(PoepodError):
    """Version-control status query failed."""

    pass


# 🐝📁🔚
