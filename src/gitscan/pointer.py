"""
Git LFS pointer decoding and canonical encoding.

A canonical pointer looks like::

    version https://git-lfs.github.com/spec/v1
    oid sha256:4d7a214614ab2935c943f9e0ff69d22eadbb8f32b1258daaa5e2ca24d17e2393
    size 12345

with optional ``ext-<n>-<name> sha256:<oid>`` lines between ``version`` and
``oid``, ordered by priority. Any other byte layout that still carries the
same fields decodes, but is not canonical.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

VERSION_LATEST = "https://git-lfs.github.com/spec/v1"
VERSION_ALIASES = (
    "http://git-media.io/v/2",
    "https://hawser.github.com/spec/v1",
    VERSION_LATEST,
)
OID_TYPE = "sha256"
MAX_POINTER_SIZE = 1024
EMPTY_OID = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

OID_RE = re.compile(r"^[0-9a-f]{64}$")
EXT_KEY_RE = re.compile(r"^ext-(\d)-(\w+)$")
KEY_RE = re.compile(r"^[a-z0-9.-]+$")


class NotAPointerError(ValueError):
    """Raised when blob content does not decode as a pointer."""


@dataclass(frozen=True)
class PointerExtension:
    name: str
    priority: int
    oid: str


@dataclass(frozen=True)
class Pointer:
    """Decoded pointer fields."""

    oid: str
    size: int
    extensions: tuple[PointerExtension, ...] = ()

    def encode(self) -> bytes:
        """Return the canonical serialization.

        A size-0 pointer is canonically the empty blob.
        """
        if self.size == 0:
            return b""
        lines = [f"version {VERSION_LATEST}"]
        for ext in sorted(self.extensions, key=lambda item: item.priority):
            lines.append(f"ext-{ext.priority}-{ext.name} {OID_TYPE}:{ext.oid}")
        lines.append(f"oid {OID_TYPE}:{self.oid}")
        lines.append(f"size {self.size}")
        return ("\n".join(lines) + "\n").encode("utf-8")


def is_valid_oid(value: str) -> bool:
    return bool(OID_RE.match(value))


def decode_pointer(data: bytes) -> Pointer:
    """Decode pointer bytes, raising NotAPointerError when they are not one.

    Empty data is the pointer of an empty file.
    """
    if not data:
        return Pointer(oid=EMPTY_OID, size=0)
    if len(data) >= MAX_POINTER_SIZE:
        raise NotAPointerError(f"pointer data is too large ({len(data)} bytes)")
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise NotAPointerError("pointer data is not UTF-8") from exc

    fields: dict[str, str] = {}
    order: list[str] = []
    for raw_line in text.strip().splitlines():
        line = raw_line.strip()
        if not line:
            continue
        key, sep, value = line.partition(" ")
        if not sep or not KEY_RE.match(key):
            raise NotAPointerError(f"invalid pointer line: {line!r}")
        if key in fields:
            raise NotAPointerError(f"duplicate pointer key: {key}")
        fields[key] = value.strip()
        order.append(key)

    if not order or order[0] != "version":
        raise NotAPointerError("missing version line")
    if fields["version"] not in VERSION_ALIASES:
        raise NotAPointerError(f"unsupported pointer version: {fields['version']}")

    oid = _parse_oid(fields.get("oid"), "oid")
    size_value = fields.get("size")
    if size_value is None:
        raise NotAPointerError("missing size")
    if not size_value.isdigit():
        raise NotAPointerError(f"invalid size: {size_value!r}")

    extensions = []
    for key in order:
        match = EXT_KEY_RE.match(key)
        if match is None:
            continue
        extensions.append(
            PointerExtension(
                name=match.group(2),
                priority=int(match.group(1)),
                oid=_parse_oid(fields[key], key),
            )
        )
    priorities = [ext.priority for ext in extensions]
    if len(set(priorities)) != len(priorities):
        raise NotAPointerError("duplicate extension priority")

    return Pointer(oid=oid, size=int(size_value), extensions=tuple(extensions))


def is_canonical(data: bytes, pointer: Pointer) -> bool:
    return pointer.encode() == data


def _parse_oid(value: str | None, key: str) -> str:
    if value is None:
        raise NotAPointerError(f"missing {key}")
    oid_type, sep, oid = value.partition(":")
    if not sep or oid_type != OID_TYPE:
        raise NotAPointerError(f"unsupported {key} type: {value!r}")
    if not is_valid_oid(oid):
        raise NotAPointerError(f"invalid {key}: {oid!r}")
    return oid
