"""Tests for content fingerprints."""

import io
import zlib

from playlist_sync.core.filesystem import LocalSyncFolder, SyncFile
from playlist_sync.core.filesystem.fingerprint import (
    CHUNK_SIZE,
    compute_fingerprint,
    fingerprint_bytes,
    fingerprint_file,
)


class TestComputeFingerprint:
    """Test compute_fingerprint."""

    def test_known_value(self):
        """Test the CRC-32 check value."""
        assert compute_fingerprint(io.BytesIO(b"123456789")) == 0xCBF43926

    def test_empty_stream(self):
        """Test an empty stream hashes to zero."""
        assert compute_fingerprint(io.BytesIO(b"")) == 0

    def test_chunked_matches_whole(self):
        """Test hashing in chunks equals hashing the whole buffer."""
        data = bytes(range(256)) * ((3 * CHUNK_SIZE) // 256 + 7)
        assert compute_fingerprint(io.BytesIO(data)) == zlib.crc32(data) & 0xFFFFFFFF

    def test_stable_and_non_negative(self):
        """Test re-reading identical content gives the same value."""
        data = b"/music/a.mp3\n/music/b.mp3\n"
        first = compute_fingerprint(io.BytesIO(data))
        second = compute_fingerprint(io.BytesIO(data))
        assert first == second == fingerprint_bytes(data)
        assert 0 <= first <= 0xFFFFFFFF

    def test_content_change(self):
        """Test different content gives a different value."""
        assert fingerprint_bytes(b"a.mp3\n") != fingerprint_bytes(b"b.mp3\n")


class TestFingerprintFile:
    """Test fingerprint_file."""

    def test_reads_file(self, tmp_path):
        """Test hashing a file of the sync folder."""
        (tmp_path / "Mix.m3u").write_bytes(b"a.mp3\n")
        folder = LocalSyncFolder(tmp_path)

        result = fingerprint_file(folder, folder.find_file("Mix.m3u"))

        assert result == fingerprint_bytes(b"a.mp3\n")

    def test_unavailable(self, tmp_path):
        """Test an unreadable file yields None."""
        folder = LocalSyncFolder(tmp_path)
        missing = SyncFile(name="Gone.m3u", path=tmp_path / "Gone.m3u")

        assert fingerprint_file(folder, missing) is None
