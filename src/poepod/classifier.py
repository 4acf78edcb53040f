#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Binary/text classification from a content prefix and the file name."""

import mimetypes
from pathlib import Path

import attrs
from provide.foundation import logger

SNIFF_SIZE = 8192
TEXT_HINT = "text/plain"
DEFAULT_BINARY_TYPE = "application/octet-stream"

mimetypes.init()
mimetypes.add_type("text/markdown", ".md")
mimetypes.add_type("text/x-python", ".py")
mimetypes.add_type("text/x-ruby", ".rb")
mimetypes.add_type("text/x-yaml", ".yaml")
mimetypes.add_type("text/x-yaml", ".yml")
mimetypes.add_type("text/x-toml", ".toml")
mimetypes.add_type("text/x-rust", ".rs")
mimetypes.add_type("text/x-go", ".go")
mimetypes.add_type("text/typescript", ".ts")
mimetypes.add_type("text/x-shellscript", ".sh")

# Used when mimetypes has no answer.
_MIME_TYPE_FALLBACKS: dict[str, str] = {
    ".js": "text/javascript",
    ".ts": "text/typescript",
    ".java": "text/x-java-source",
    ".c": "text/x-c",
    ".h": "text/x-c",
    ".cpp": "text/x-c++src",
    ".hpp": "text/x-c++src",
    ".cs": "text/x-csharp",
    ".php": "text/x-php",
    ".json": "application/json",
    ".html": "text/html",
    ".css": "text/css",
    ".ini": "text/plain",
    ".cfg": "text/plain",
    ".txt": "text/plain",
    ".gemspec": "text/x-ruby",
    "makefile": "text/plain",
    "dockerfile": "text/plain",
    "gemfile": "text/x-ruby",
    "rakefile": "text/x-ruby",
}

# Ordered: longer and more specific signatures first.
_MAGIC_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"PK\x05\x06", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"\xfd7zXZ\x00", "application/x-xz"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"\x7fELF", "application/x-executable"),
    (b"\xcf\xfa\xed\xfe", "application/x-mach-binary"),
    (b"\xfe\xed\xfa\xcf", "application/x-mach-binary"),
    (b"\xca\xfe\xba\xbe", "application/java-vm"),
    (b"SQLite format 3\x00", "application/vnd.sqlite3"),
    (b"\x00asm", "application/wasm"),
    (b"\x00\x00\x01\x00", "image/vnd.microsoft.icon"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"ID3", "audio/mpeg"),
    (b"OggS", "audio/ogg"),
    (b"fLaC", "audio/flac"),
]

_BINARY_MAJOR_TYPES = frozenset({"image", "audio", "video", "font", "model"})
_BINARY_APPLICATION_TYPES = frozenset(
    {
        "application/octet-stream",
        "application/pdf",
        "application/zip",
        "application/gzip",
        "application/x-gzip",
        "application/x-tar",
        "application/x-bzip2",
        "application/x-xz",
        "application/x-7z-compressed",
        "application/x-rar-compressed",
        "application/java-archive",
        "application/java-vm",
        "application/wasm",
        "application/x-executable",
        "application/x-msdownload",
        "application/x-sharedlib",
        "application/vnd.sqlite3",
        "application/msword",
        "application/vnd.ms-excel",
        "application/vnd.ms-powerpoint",
    }
)


@attrs.define(frozen=True, slots=True)
class Classification:
    """Outcome of classifying one file."""

    is_binary: bool
    mime_type: str


def is_textual_mime(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type == "application/json"


def guess_mime_from_name(file_path: Path) -> str | None:
    """Guess a MIME type from the file name alone, or None if unknown."""
    mime_type, _ = mimetypes.guess_type(file_path.name, strict=False)
    if mime_type:
        return mime_type

    ext_fallback = _MIME_TYPE_FALLBACKS.get(file_path.suffix.lower())
    if ext_fallback:
        return ext_fallback

    return _MIME_TYPE_FALLBACKS.get(file_path.name.lower())


def _is_binary_name_guess(mime_type: str) -> bool:
    if mime_type in _BINARY_APPLICATION_TYPES or mime_type.startswith("application/vnd.openxmlformats"):
        return True
    return mime_type.split("/", 1)[0] in _BINARY_MAJOR_TYPES


def sniff_mime_type(prefix: bytes, file_path: Path) -> str:
    """Resolve a MIME type from a content prefix, using the name as a hint."""
    for signature, mime_type in _MAGIC_SIGNATURES:
        if prefix.startswith(signature):
            return mime_type

    if prefix[8:12] == b"WEBP" and prefix.startswith(b"RIFF"):
        return "image/webp"

    name_guess = guess_mime_from_name(file_path)

    if b"\x00" in prefix:
        if name_guess and _is_binary_name_guess(name_guess):
            return name_guess
        return DEFAULT_BINARY_TYPE

    if name_guess is None or name_guess.endswith("+xml"):
        return TEXT_HINT
    if is_textual_mime(name_guess) or _is_binary_name_guess(name_guess):
        return name_guess
    # Script-like application/* types (xml, javascript, x-sh, ...) with text content.
    return TEXT_HINT


def classify(file_path: Path) -> Classification:
    """Classify a file as binary or text from its first 8 KiB and its name.

    Missing paths and non-regular files classify as text so that the
    caller's own existence checks stay authoritative.
    """
    try:
        if not file_path.is_file():
            return Classification(is_binary=False, mime_type=TEXT_HINT)
        with file_path.open("rb") as f:
            prefix = f.read(SNIFF_SIZE)
    except OSError as e:
        logger.debug("classify.read_error", path=str(file_path), error=str(e))
        return Classification(is_binary=False, mime_type=TEXT_HINT)

    mime_type = sniff_mime_type(prefix, file_path)
    result = Classification(is_binary=not is_textual_mime(mime_type), mime_type=mime_type)
    logger.debug(
        "classify.result",
        path=str(file_path),
        mime_type=result.mime_type,
        is_binary=result.is_binary,
    )
    return result


# 🐝📁🔚
