#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Per-file content encoding: verbatim text, base64 binary, or a recorded failure."""

import base64
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import attrs
from provide.foundation import logger
from provide.foundation.resilience import retry

from poepod.classifier import Classification, classify
from poepod.config import DEFAULT_ENCODING, PoepodConfig
from poepod.errors import EncodingDecodeError, FileReadError

DECODE_FAILURE_MESSAGE = "Failed to decode the file, as it is not saved with UTF-8 encoding."


@attrs.define(frozen=True, slots=True)
class TextEntry:
    path: Path
    content: str


@attrs.define(frozen=True, slots=True)
class BinaryEntry:
    path: Path
    mime_type: str
    payload: str

    @property
    def content(self) -> str:
        return format_binary_block(self.mime_type, self.payload)


@attrs.define(frozen=True, slots=True)
class FailedEntry:
    path: Path
    reason: str


ProcessedEntry: TypeAlias = TextEntry | BinaryEntry | FailedEntry


def format_binary_block(mime_type: str, payload: str) -> str:
    return f"Content-Type: {mime_type}\nContent-Transfer-Encoding: base64\n\n{payload}"


class ContentEncoder:
    """Turns one candidate file into a processed entry."""

    def __init__(
        self,
        config: PoepodConfig,
        classifier: Callable[[Path], Classification] = classify,
    ) -> None:
        self.config = config
        self.classifier = classifier

    def encode(self, file_path: Path) -> ProcessedEntry | None:
        """Encode ``file_path``.

        Returns None for a binary file when binary inclusion is off; such a
        path should already have been excluded during collection. Read and
        decode failures become a FailedEntry rather than an exception.
        """
        classification = self.classifier(file_path)

        if classification.is_binary and not self.config.include_binary:
            logger.debug("file.encode.binary_skipped", path=str(file_path))
            return None

        try:
            raw = self._read_bytes(file_path)
            if classification.is_binary:
                return self._encode_binary(file_path, raw, classification.mime_type)
            content = self._decode(file_path, raw)
        except EncodingDecodeError as e:
            logger.warning("file.read.decode_error", path=str(file_path), error=str(e))
            return FailedEntry(path=file_path, reason=DECODE_FAILURE_MESSAGE)
        except FileReadError as e:
            logger.error("file.read.os_error", path=str(file_path), error=str(e))
            return FailedEntry(path=file_path, reason=str(e))

        logger.debug("file.read.success", path=str(file_path), size=len(content))
        return TextEntry(path=file_path, content=content)

    @retry(max_attempts=2)
    def _read_bytes(self, file_path: Path) -> bytes:
        try:
            return file_path.read_bytes()
        except OSError as e:
            raise FileReadError(f"Failed to read the file: {e.strerror or e}") from e

    def _decode(self, file_path: Path, raw: bytes) -> str:
        try:
            return raw.decode(DEFAULT_ENCODING)
        except UnicodeDecodeError as e:
            raise EncodingDecodeError(f"{file_path}: {e}") from e

    def _encode_binary(self, file_path: Path, raw: bytes, mime_type: str) -> BinaryEntry:
        payload = base64.encodebytes(raw).decode("ascii")
        logger.debug("file.encode.binary", path=str(file_path), mime_type=mime_type, size=len(raw))
        return BinaryEntry(path=file_path, mime_type=mime_type, payload=payload)


# 🐝📁🔚
