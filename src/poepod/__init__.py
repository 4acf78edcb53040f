#
# SPDX-FileCopyrightText: Copyright (c) provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""poepod: Concatenate files or wrap a package into one text bundle.

Integrated with provide-foundation for logging, console output and configuration.
"""

from provide.foundation import get_hub, logger
from provide.foundation.utils.versioning import get_version

from poepod.bundler import BundleResult, BundleWriter, ProcessingSession
from poepod.classifier import Classification, classify
from poepod.collection import FileCollector, GlobFileSource, ManifestFileSource, ManifestRef, collect
from poepod.config import PoepodConfig
from poepod.core import ConcatResult, Processor, WrapResult, concat_files, wrap_package
from poepod.encoder import BinaryEntry, ContentEncoder, FailedEntry, TextEntry
from poepod.exclusions import ExclusionEngine
from poepod.manifest import ManifestFileSet, PackageManifest, load_manifest, resolve_manifest_file_set
from poepod.vcs import GitStatus, VcsStatus

# Initialize the Foundation Hub (available for advanced usage)
_hub = get_hub()

logger.debug(
    "poepod.init",
    foundation_hub_available=True,
    components_available=["Collector", "Encoder", "BundleWriter", "Manifest"],
)

__all__ = [
    "BinaryEntry",
    "BundleResult",
    "BundleWriter",
    "Classification",
    "ConcatResult",
    "ContentEncoder",
    "ExclusionEngine",
    "FailedEntry",
    "FileCollector",
    "GitStatus",
    "GlobFileSource",
    "ManifestFileSet",
    "ManifestFileSource",
    "ManifestRef",
    "PackageManifest",
    "PoepodConfig",
    "ProcessingSession",
    "Processor",
    "TextEntry",
    "VcsStatus",
    "WrapResult",
    "classify",
    "collect",
    "concat_files",
    "get_hub",
    "load_manifest",
    "resolve_manifest_file_set",
    "wrap_package",
]

__version__ = get_version("poepod", caller_file=__file__)

# 🐝📁🔚
