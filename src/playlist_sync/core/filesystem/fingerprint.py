"""Content fingerprints used to detect changed playlist files."""

import logging
import zlib
from typing import BinaryIO, Optional

from .sync_folder import SyncFile, SyncFolder

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


def compute_fingerprint(stream: BinaryIO) -> int:
    """Compute the CRC-32 of a byte stream.

    Args:
        stream: Binary stream, read until exhausted in 4096-byte chunks

    Returns:
        Unsigned 32-bit checksum
    """
    crc = 0
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        crc = zlib.crc32(chunk, crc)
    return crc & 0xFFFFFFFF


def fingerprint_bytes(data: bytes) -> int:
    """Compute the CRC-32 of an in-memory buffer."""
    return zlib.crc32(data) & 0xFFFFFFFF


def fingerprint_file(folder: SyncFolder, file: SyncFile) -> Optional[int]:
    """Fingerprint a file of the sync folder.

    Returns:
        Checksum, or None if the file could not be read
    """
    try:
        with folder.open_read(file) as stream:
            return compute_fingerprint(stream)
    except OSError as e:
        logger.error("Failed to hash file %s: %s", file, e)
        return None
