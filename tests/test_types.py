"""Tests for data models."""

import dataclasses

import pytest

from image_inventory.types import OS, TYPE_BINARY, TYPE_SOURCE, Package, SrcPackage


def test_package_defaults() -> None:
    pkg = Package(name="musl", version="1.2.4")

    assert pkg.release == ""
    assert pkg.epoch == 0
    assert pkg.type == TYPE_BINARY


def test_records_are_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        OS(name="12", family="debian").family = "ubuntu"


def test_src_package_to_dict() -> None:
    src = SrcPackage(name="glibc", version="2.36", binary_names=["libc6", "libc-bin"])

    assert src.to_dict() == {
        "name": "glibc",
        "version": "2.36",
        "binaryNames": ["libc6", "libc-bin"],
    }
    assert TYPE_SOURCE == "source"
