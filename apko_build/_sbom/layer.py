"""Content-addressed access to a built layer tarball.

The layer digest is the sha256 of the compressed blob, as it would be pushed
to a registry. Uncompressed tarballs are gzip-compressed with a fixed mtime
so their digest is reproducible.
"""

import gzip
import hashlib
import tarfile
from dataclasses import dataclass
from typing import BinaryIO, Callable

import zstandard

from apko_build.exceptions import DigestError, LayerReadError
from apko_build.logging_config import logger

GZIP_MAGIC = b"\x1f\x8b"
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

CHUNK_SIZE = 1024 * 1024


class _HashWriter:
    """File-like sink that only feeds a hash."""

    def __init__(self, hasher) -> None:
        self._hasher = hasher

    def write(self, data: bytes) -> int:
        self._hasher.update(data)
        return len(data)

    def flush(self) -> None:
        pass


def _copy_chunks(src: BinaryIO, write: Callable[[bytes], object]) -> None:
    while True:
        chunk = src.read(CHUNK_SIZE)
        if not chunk:
            break
        write(chunk)


def _detect_compression(header: bytes) -> str:
    if header.startswith(GZIP_MAGIC):
        return "gzip"
    if header.startswith(ZSTD_MAGIC):
        return "zstd"
    return "none"


@dataclass(frozen=True)
class Layer:
    """A layer backed by a tarball on disk."""

    path: str
    compression: str

    @classmethod
    def from_file(cls, path: str) -> "Layer":
        """
        Open the tarball at ``path`` as a layer.

        Raises:
            LayerReadError: If the file cannot be read or is not a (compressed) tarball
        """
        try:
            with open(path, "rb") as f:
                header = f.read(4)
        except OSError as e:
            raise LayerReadError(f"failed to create OCI layer from {path}: {e}") from e

        compression = _detect_compression(header)
        if compression == "none":
            try:
                is_tar = tarfile.is_tarfile(path)
            except OSError as e:
                raise LayerReadError(f"failed to create OCI layer from {path}: {e}") from e
            if not is_tar:
                raise LayerReadError(f"failed to create OCI layer from {path}: not a tar archive")

        logger.debug(f"Opened layer {path} (compression={compression})")
        return cls(path=path, compression=compression)

    def digest(self) -> str:
        """
        Return the digest of the compressed layer blob (``sha256:<hex>``).

        Raises:
            DigestError: If the layer cannot be read while hashing
        """
        hasher = hashlib.sha256()
        try:
            with open(self.path, "rb") as f:
                if self.compression == "none":
                    with gzip.GzipFile(fileobj=_HashWriter(hasher), mode="wb", mtime=0) as gz:
                        _copy_chunks(f, gz.write)
                else:
                    _copy_chunks(f, hasher.update)
        except OSError as e:
            raise DigestError(f"could not calculate layer digest: {e}") from e
        return f"sha256:{hasher.hexdigest()}"

    def diff_id(self) -> str:
        """
        Return the digest of the uncompressed layer contents (``sha256:<hex>``).

        Raises:
            DigestError: If the layer cannot be decompressed
        """
        hasher = hashlib.sha256()
        try:
            if self.compression == "gzip":
                with gzip.open(self.path, "rb") as f:
                    _copy_chunks(f, hasher.update)
            elif self.compression == "zstd":
                dctx = zstandard.ZstdDecompressor()
                with open(self.path, "rb") as fh:
                    with dctx.stream_reader(fh) as reader:
                        _copy_chunks(reader, hasher.update)
            else:
                with open(self.path, "rb") as f:
                    _copy_chunks(f, hasher.update)
        except (OSError, EOFError, zstandard.ZstdError) as e:
            raise DigestError(f"could not calculate layer diff id: {e}") from e
        return f"sha256:{hasher.hexdigest()}"
