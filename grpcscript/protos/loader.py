"""
Runtime compilation of .proto files.

Protos are compiled with the protoc bundled in grpcio-tools into a
FileDescriptorSet, which is then loaded into a Registry. No generated
Python code is needed.
"""

from __future__ import annotations

import logging
import os
import tempfile
from importlib import resources
from pathlib import Path

from google.protobuf import descriptor_pb2
from grpc_tools import protoc

from .registry import Registry

logger = logging.getLogger(__name__)


class ProtoLoadError(RuntimeError):
    """Proto files could not be found or compiled."""


def find_proto_files(root: Path) -> list[Path]:
    """Find all .proto files under `root`, skipping hidden directories."""
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for filename in sorted(filenames):
            if filename.endswith(".proto"):
                found.append(Path(dirpath) / filename)
    return found


def _well_known_include() -> str:
    # google/protobuf/*.proto shipped with grpcio-tools
    return str(resources.files("grpc_tools") / "_proto")


def compile_protos(
    root: Path,
    files: list[Path],
    import_paths: list[str] | None = None,
) -> descriptor_pb2.FileDescriptorSet:
    """
    Compile proto files into a FileDescriptorSet including all imports.

    Raises:
        ProtoLoadError: If protoc reports an error
    """
    include_args = [f"--proto_path={root}"]
    include_args += [f"--proto_path={Path(p).resolve()}" for p in import_paths or []]
    include_args.append(f"--proto_path={_well_known_include()}")

    with tempfile.TemporaryDirectory(prefix="grpcscript-") as tmp:
        out = Path(tmp) / "descriptors.pb"
        args = [
            "grpc_tools.protoc",
            *include_args,
            "--include_imports",
            f"--descriptor_set_out={out}",
            *[str(f) for f in files],
        ]
        logger.debug(f"Running protoc: {' '.join(args[1:])}")
        code = protoc.main(args)
        if code != 0:
            raise ProtoLoadError(f"failed to compile protos (protoc exited with {code})")
        return descriptor_pb2.FileDescriptorSet.FromString(out.read_bytes())


def load_protos(proto_path: str | Path, import_paths: list[str] | None = None) -> Registry:
    """
    Load all .proto files under `proto_path` into a Registry.

    Args:
        proto_path: Directory containing .proto files
        import_paths: Extra directories searched for imported protos

    Raises:
        ProtoLoadError: If the directory is unusable or compilation fails
    """
    root = Path(proto_path)
    if not root.exists():
        raise ProtoLoadError(f"proto path does not exist: {proto_path}")
    if not root.is_dir():
        raise ProtoLoadError(f"proto path is not a directory: {proto_path}")

    root = root.resolve()
    files = find_proto_files(root)
    if not files:
        raise ProtoLoadError(f"no .proto files found in: {proto_path}")

    descriptor_set = compile_protos(root, files, import_paths)
    registry = Registry()
    registry.add_descriptor_set(descriptor_set)
    logger.info(
        f"Loaded {len(files)} proto file(s) with {len(registry.service_names)} service(s)"
    )
    return registry
