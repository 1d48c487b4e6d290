"""
Go build information reader.

Every Go binary carries a build-info blob that starts with a 14 byte magic
followed by the pointer size, a flags byte and padding up to 32 bytes. Since
Go 1.18 the version string is stored inline right after that header,
prefixed with its uvarint length. Older binaries store pointers instead,
which are not followed here; such binaries are still recognised as Go but
report an unknown version.
"""

from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from ..utils.logging import get_logger

logger = get_logger(__name__)

BUILDINFO_MAGIC = b"\xff Go buildinf:"
HEADER_SIZE = 32
FLAGS_VERSION_INLINE = 0x2
UNKNOWN_VERSION = "unknown"

# A version string is short; more than this is a corrupt length prefix
_MAX_VERSION_LEN = 1024


def read_uvarint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode an unsigned LEB128 varint.

    Returns:
        (value, offset just past the varint)

    Raises:
        ValueError: if the data ends mid-varint or the value overflows 64 bits
    """
    value = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise ValueError("truncated uvarint")
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        if byte < 0x80:
            return value, pos
        shift += 7
        if shift >= 64:
            raise ValueError("uvarint overflows 64 bits")


def parse_buildinfo(blob: bytes) -> Optional[str]:
    """
    Extract the Go version from a build-info blob starting at the magic.

    Returns:
        The version string, UNKNOWN_VERSION for the pointer-based layout,
        or None if blob is not a build-info header.
    """
    if len(blob) < HEADER_SIZE or not blob.startswith(BUILDINFO_MAGIC):
        return None

    flags = blob[len(BUILDINFO_MAGIC) + 1]
    if not flags & FLAGS_VERSION_INLINE:
        return UNKNOWN_VERSION

    try:
        length, start = read_uvarint(blob, HEADER_SIZE)
    except ValueError:
        return UNKNOWN_VERSION
    if length == 0 or length > _MAX_VERSION_LEN or start + length > len(blob):
        return UNKNOWN_VERSION
    return blob[start:start + length].decode("utf-8", "replace")


def _scan(f: BinaryIO, max_bytes: int, chunk_size: int) -> Optional[str]:
    """Scan an open binary for the build-info magic."""
    # Enough tail kept between chunks to hold a header plus a long version
    overlap = HEADER_SIZE + _MAX_VERSION_LEN + 16
    carry = b""
    consumed = 0

    while consumed < max_bytes:
        chunk = f.read(min(chunk_size, max_bytes - consumed))
        if not chunk:
            break
        consumed += len(chunk)
        window = carry + chunk

        pos = window.find(BUILDINFO_MAGIC)
        if pos != -1:
            tail = window[pos:]
            if len(tail) < overlap:
                tail += f.read(overlap - len(tail))
            return parse_buildinfo(tail)

        carry = window[-(len(BUILDINFO_MAGIC) - 1):]

    return None


def read_go_version(
    path: Union[str, Path],
    max_bytes: int = 256 * 1024 * 1024,
    chunk_size: int = 1024 * 1024
) -> Optional[str]:
    """
    Return the Go version an executable was built with.

    Args:
        path: Executable to inspect
        max_bytes: Stop scanning after this many bytes
        chunk_size: Read size per iteration

    Returns:
        The version, UNKNOWN_VERSION for old Go binaries, or None when the
        file is not a Go binary.

    Raises:
        OSError: if the file cannot be opened or read
    """
    with open(path, "rb") as f:
        version = _scan(f, max_bytes, chunk_size)
    logger.debug("buildinfo_scanned", path=str(path), version=version)
    return version
