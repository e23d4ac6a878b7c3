"""Obtaining decoded descriptor sets from disk or from protoc."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from typing import Iterable, List, Sequence, Union

from google.protobuf import descriptor_pb2 as d2
from google.protobuf.message import DecodeError

from protoc_registry.registry import DescriptorRegistry

logger = logging.getLogger(__name__)


class RegistryLoadError(Exception):
    """Raised when a descriptor set cannot be read or compiled."""


def load_descriptor_set(path: str) -> d2.FileDescriptorSet:
    """Read a binary descriptor set as written by ``protoc -o``."""
    fds = d2.FileDescriptorSet()
    try:
        with open(path, "rb") as f:
            fds.ParseFromString(f.read())
    except OSError as e:
        raise RegistryLoadError(f"Cannot read descriptor set '{path}': {e}") from e
    except DecodeError as e:
        raise RegistryLoadError(f"'{path}' is not a valid descriptor set: {e}") from e
    logger.debug("Loaded %d file(s) from %s", len(fds.file), path)
    return fds


def compile_descriptor_set(
    proto_paths: Sequence[str],
    include_dirs: Iterable[str] = (),
) -> d2.FileDescriptorSet:
    """Run protoc over ``proto_paths`` and decode the descriptor set it emits."""
    includes: List[str] = [os.path.dirname(os.path.abspath(p)) for p in proto_paths]
    includes.extend(include_dirs)

    # de-dup while preserving order
    seen = set()
    inc_args: List[str] = []
    for inc in includes:
        if inc and inc not in seen:
            seen.add(inc)
            inc_args.extend(["-I", inc])

    with tempfile.TemporaryDirectory() as td:
        desc_path = os.path.join(td, "descriptor_set.pb")
        cmd = ["protoc", "--include_imports", f"--descriptor_set_out={desc_path}"] + inc_args + list(proto_paths)
        logger.debug("Running %s", " ".join(cmd))
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except FileNotFoundError as e:
            raise RegistryLoadError(
                "'protoc' not found. Please install Protocol Buffers compiler and ensure it is in PATH."
            ) from e
        except subprocess.CalledProcessError as e:
            raise RegistryLoadError(f"protoc failed: {e.stderr.decode('utf-8', errors='ignore')}") from e

        return load_descriptor_set(desc_path)


def load_registry(
    inputs: Union[str, Sequence[str]],
    include_dirs: Iterable[str] = (),
    resolve: bool = True,
) -> DescriptorRegistry:
    """Build a registry from descriptor set files and/or ``.proto`` sources.

    Descriptor set files are imported first, in the order given; all
    ``.proto`` inputs are then compiled together in one protoc run.
    References are resolved once everything is loaded.
    """
    if isinstance(inputs, str):
        inputs = [inputs]

    proto_paths = [p for p in inputs if p.lower().endswith(".proto")]
    set_paths = [p for p in inputs if not p.lower().endswith(".proto")]

    registry = DescriptorRegistry()
    for path in set_paths:
        registry.add_file_set_proto(load_descriptor_set(path))
    if proto_paths:
        registry.add_file_set_proto(compile_descriptor_set(proto_paths, include_dirs))

    if resolve:
        registry.resolve_refs()
    return registry
