#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#


import base64
from pathlib import Path

from poepod.config import PoepodConfig
from poepod.encoder import (
    DECODE_FAILURE_MESSAGE,
    BinaryEntry,
    ContentEncoder,
    FailedEntry,
    TextEntry,
    format_binary_block,
)


def test_text_is_verbatim(text_project: Path):
    entry = ContentEncoder(PoepodConfig()).encode(text_project / "a.txt")
    assert entry == TextEntry(path=text_project / "a.txt", content="alpha")


def test_non_utf8_text_fails(tmp_path: Path):
    latin = tmp_path / "latin.txt"
    latin.write_bytes("café".encode("latin-1"))

    entry = ContentEncoder(PoepodConfig()).encode(latin)
    assert isinstance(entry, FailedEntry)
    assert entry.reason == DECODE_FAILURE_MESSAGE


def test_binary_skipped_without_include_binary(tmp_path: Path, png_bytes: bytes):
    image = tmp_path / "image.png"
    image.write_bytes(png_bytes)

    assert ContentEncoder(PoepodConfig()).encode(image) is None


def test_binary_block(tmp_path: Path, png_bytes: bytes):
    image = tmp_path / "image.png"
    image.write_bytes(png_bytes)

    entry = ContentEncoder(PoepodConfig(include_binary=True)).encode(image)
    assert isinstance(entry, BinaryEntry)
    assert entry.mime_type == "image/png"

    header, payload = entry.content.split("\n\n", 1)
    assert header == "Content-Type: image/png\nContent-Transfer-Encoding: base64"
    assert base64.b64decode(payload) == png_bytes


def test_large_binary_payload_is_wrapped(tmp_path: Path, png_bytes: bytes):
    blob = tmp_path / "big.png"
    raw = png_bytes + bytes(range(256)) * 4
    blob.write_bytes(raw)

    entry = ContentEncoder(PoepodConfig(include_binary=True)).encode(blob)
    assert isinstance(entry, BinaryEntry)
    assert all(len(line) <= 76 for line in entry.payload.splitlines())
    assert base64.b64decode(entry.payload) == raw


def test_format_binary_block():
    assert format_binary_block("image/gif", "R0lG\n") == (
        "Content-Type: image/gif\nContent-Transfer-Encoding: base64\n\nR0lG\n"
    )


# 🐝📁🔚
