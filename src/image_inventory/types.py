"""Data models shared by analyzers and resolvers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NewType

# Extracted image contents: layer-relative path (no leading slash) to bytes.
FileMap = dict[str, bytes]

FilePath = NewType("FilePath", str)

TYPE_BINARY = "binary"
TYPE_SOURCE = "source"


@dataclass(frozen=True)
class OS:
    """Operating system identity detected in an image."""

    name: str
    family: str


@dataclass(frozen=True)
class Package:
    """A package record from an OS package database."""

    name: str
    version: str
    release: str = ""
    epoch: int = 0  # 0 means unset
    type: str = TYPE_BINARY


@dataclass
class SrcPackage:
    """A source package and the binary packages built from it."""

    name: str
    version: str
    binary_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "version": self.version,
            "binaryNames": list(self.binary_names),
        }


@dataclass(frozen=True)
class Library:
    """A language-level dependency found in a lockfile or manifest."""

    name: str
    version: str
