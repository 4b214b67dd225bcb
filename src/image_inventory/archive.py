"""Read required files out of a ``docker save`` image archive.

The archive holds a ``manifest.json`` and one tarball per layer. Layers are
applied bottom-up; whiteout entries (``.wh.<name>`` and the opaque marker
``.wh..wh..opq``) remove files contributed by lower layers.

Only files whose full path or base name appears in the requested filenames
are kept in memory.
"""

from __future__ import annotations

import json
import logging
import posixpath
import tarfile
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import IO

from .errors import ExtractionError
from .types import FileMap

logger = logging.getLogger(__name__)

WHITEOUT_PREFIX = ".wh."
OPAQUE_WHITEOUT = ".wh..wh..opq"

# Top-level members of an image archive that are never layers.
_METADATA_MEMBERS = {"manifest.json", "repositories", "index.json", "oci-layout"}


@dataclass
class LayerContents:
    """Wanted files and deletions recorded in one layer."""

    files: FileMap = field(default_factory=dict)
    whiteouts: set[str] = field(default_factory=set)
    opaque_dirs: set[str] = field(default_factory=set)


def normalize_path(path: str) -> str:
    """Strip ``./`` and leading slashes so layer and request paths compare."""
    path = posixpath.normpath(path.lstrip("/"))
    return "" if path == "." else path


class _Wanted:
    """Matches layer paths against requested filenames."""

    def __init__(self, filenames: Iterable[str]) -> None:
        self.paths = {normalize_path(name) for name in filenames}

    def __contains__(self, path: str) -> bool:
        return path in self.paths or posixpath.basename(path) in self.paths

    def __iter__(self):
        return iter(self.paths)


def read_layer(
    fileobj: IO[bytes],
    filenames: Iterable[str],
    check: Callable[[], None] | None = None,
) -> LayerContents:
    """
    Collect wanted files and whiteouts from a single layer tarball.

    Args:
        fileobj: Readable layer tarball, optionally compressed
        filenames: Requested paths or base names
        check: Called before each layer member; raises to abort

    Returns:
        Layer contents restricted to the wanted files
    """
    wanted = _Wanted(filenames)
    contents = LayerContents()

    with tarfile.open(fileobj=fileobj, mode="r|*") as layer:
        for member in layer:
            if check is not None:
                check()

            path = normalize_path(member.name)
            if not path:
                continue

            directory, base = posixpath.split(path)
            if base == OPAQUE_WHITEOUT:
                contents.opaque_dirs.add(directory)
                continue
            if base.startswith(WHITEOUT_PREFIX):
                contents.whiteouts.add(
                    posixpath.join(directory, base[len(WHITEOUT_PREFIX) :])
                )
                continue

            if not member.isfile() or path not in wanted:
                continue

            data = layer.extractfile(member)
            if data is None:
                continue
            contents.files[path] = data.read()

    return contents


def _is_under(path: str, directory: str) -> bool:
    return directory == "" or path == directory or path.startswith(directory + "/")


def apply_layer(file_map: FileMap, layer: LayerContents) -> None:
    """Apply one layer on top of the files accumulated from lower layers."""
    for directory in layer.opaque_dirs:
        for path in [p for p in file_map if _is_under(p, directory) and p != directory]:
            del file_map[path]

    for removed in layer.whiteouts:
        for path in [p for p in file_map if _is_under(p, removed)]:
            del file_map[path]

    file_map.update(layer.files)


def _resolve_layer(
    name: str, layers: dict[str, LayerContents], aliases: dict[str, str]
) -> LayerContents | None:
    seen = set()
    while name not in layers and name in aliases and name not in seen:
        seen.add(name)
        name = aliases[name]
    return layers.get(name)


def read_image_archive(
    stream: IO[bytes],
    filenames: Iterable[str],
    check: Callable[[], None] | None = None,
) -> FileMap:
    """
    Build a file map from a ``docker save`` archive.

    The stream is read once, front to back, so it may be a pipe. Layers are
    buffered (wanted files only) until the manifest fixes their order.

    Args:
        stream: Readable image archive
        filenames: Requested paths or base names
        check: Called between archive members and layer members; raises
            to abort

    Returns:
        Mapping of layer-relative path to file contents

    Raises:
        ExtractionError: If the archive is malformed or incomplete
    """
    wanted = _Wanted(filenames)
    manifest = None
    layers: dict[str, LayerContents] = {}
    # Repeated layers are stored once; later copies link to the first.
    aliases: dict[str, str] = {}

    try:
        with tarfile.open(fileobj=stream, mode="r|*") as archive:
            for member in archive:
                if check is not None:
                    check()

                name = normalize_path(member.name)
                if member.issym():
                    aliases[name] = normalize_path(
                        posixpath.join(posixpath.dirname(name), member.linkname)
                    )
                    continue
                if member.islnk():
                    aliases[name] = normalize_path(member.linkname)
                    continue
                if not member.isfile():
                    continue

                data = archive.extractfile(member)
                if data is None:
                    continue

                if name == "manifest.json":
                    manifest = json.loads(data.read())
                    continue
                if name in _METADATA_MEMBERS or name.endswith(".json"):
                    continue

                try:
                    layers[name] = read_layer(data, wanted, check)
                except tarfile.TarError:
                    # OCI blobs directory also holds config and index blobs.
                    logger.debug("Skipping non-layer member %s", name)
    except (tarfile.TarError, json.JSONDecodeError, OSError) as e:
        raise ExtractionError(f"invalid image archive: {e}") from e

    if not isinstance(manifest, list) or not manifest:
        raise ExtractionError("invalid image archive: manifest.json not found")

    file_map: FileMap = {}
    for layer_name in manifest[0].get("Layers", []):
        layer = _resolve_layer(normalize_path(layer_name), layers, aliases)
        if layer is None:
            raise ExtractionError(f"invalid image archive: missing layer {layer_name}")
        apply_layer(file_map, layer)

    logger.debug("Extracted %d files from image archive", len(file_map))
    return file_map
