"""Tests for exporting library playlists to the sync folder."""

from unittest.mock import Mock, patch

import pytest

from playlist_sync.core.filesystem import (
    LocalSyncFolder,
    SyncFile,
    fingerprint_bytes,
)
from playlist_sync.core.sync import PlaylistExporter, PlaylistImporter
from playlist_sync.database import DatabaseService, FileQuery, PlaylistLibrary


@pytest.fixture
def db_service(tmp_path):
    """Create a temporary metadata store."""
    db = DatabaseService(tmp_path / "sync.db")
    yield db
    db.close()


@pytest.fixture
def library(tmp_path, db_service):
    """Create a library sharing the metadata database."""
    lib = PlaylistLibrary(tmp_path / "sync.db")
    yield lib
    lib.close()


@pytest.fixture
def music_dir(tmp_path):
    """Create the sync folder directory."""
    path = tmp_path / "music"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def sync_folder(music_dir):
    """Open the sync folder."""
    return LocalSyncFolder(music_dir)


@pytest.fixture
def road_trip(library, music_dir):
    """Create a playlist with two entries below the sync folder."""
    paths = [str(music_dir / "a.mp3"), str(music_dir / "sub" / "b.mp3")]
    playlist_id = library.create_playlist("Road Trip")
    for path in paths:
        library.add_media(path)
        library.append_entry(playlist_id, FileQuery(path))
    return playlist_id


class ReadOnlyFolder(LocalSyncFolder):
    """Local folder whose file contents cannot be written."""

    def open_write(self, file):
        raise OSError("read-only")


class TestExportPlaylist:
    """Test PlaylistExporter.export_playlist."""

    def test_relative_export(
        self, db_service, library, sync_folder, music_dir, road_trip
    ):
        """Test entries below the folder are written relative to it."""
        exporter = PlaylistExporter(db_service, library, sync_folder)

        assert exporter.export_playlist(road_trip) is True

        content = (music_dir / "Road Trip.m3u").read_bytes()
        assert content == b"a.mp3\nsub/b.mp3\n"
        record = db_service.get_record_by_id(road_trip)
        assert record.name == "Road Trip"
        assert record.hash == fingerprint_bytes(content)

    def test_absolute_export(
        self, db_service, library, sync_folder, music_dir, road_trip
    ):
        """Test absolute paths when relative export is disabled."""
        exporter = PlaylistExporter(
            db_service, library, sync_folder, export_relative_paths=False
        )

        exporter.export_playlist(road_trip)

        lines = (music_dir / "Road Trip.m3u").read_text().splitlines()
        assert lines == [str(music_dir / "a.mp3"), str(music_dir / "sub" / "b.mp3")]

    def test_absolute_export_without_real_path(
        self, db_service, library, music_dir, road_trip
    ):
        """Test absolute paths when the folder hides its real path."""
        folder = LocalSyncFolder(music_dir, expose_real_path=False)
        exporter = PlaylistExporter(db_service, library, folder)

        exporter.export_playlist(road_trip)

        lines = (music_dir / "Road Trip.m3u").read_text().splitlines()
        assert lines[0] == str(music_dir / "a.mp3")

    def test_paths_outside_folder_stay_absolute(
        self, db_service, library, sync_folder, music_dir
    ):
        """Test entries outside the folder are written unchanged."""
        library.add_media("/elsewhere/c.mp3")
        playlist_id = library.create_playlist("Mix")
        library.append_entry(playlist_id, FileQuery("/elsewhere/c.mp3"))
        exporter = PlaylistExporter(db_service, library, sync_folder)

        exporter.export_playlist(playlist_id)

        assert (music_dir / "Mix.m3u").read_text() == "/elsewhere/c.mp3\n"

    def test_export_overwrites_existing_file(
        self, db_service, library, sync_folder, music_dir, road_trip
    ):
        """Test exporting replaces an existing file."""
        (music_dir / "Road Trip.m3u").write_text("stale.mp3\nmore.mp3\nlines.mp3\n")
        exporter = PlaylistExporter(db_service, library, sync_folder)

        exporter.export_playlist(road_trip)

        assert (music_dir / "Road Trip.m3u").read_text() == "a.mp3\nsub/b.mp3\n"

    def test_empty_playlist(self, db_service, library, sync_folder, music_dir):
        """Test an empty playlist produces an empty file."""
        playlist_id = library.create_playlist("Empty")
        exporter = PlaylistExporter(db_service, library, sync_folder)

        assert exporter.export_playlist(playlist_id) is True

        assert (music_dir / "Empty.m3u").read_bytes() == b""
        assert db_service.get_record_by_id(playlist_id).hash == 0

    def test_sanitized_filename(self, db_service, library, sync_folder, music_dir):
        """Test separators in playlist names are replaced in the filename."""
        playlist_id = library.create_playlist("a/b")
        exporter = PlaylistExporter(db_service, library, sync_folder)

        exporter.export_playlist(playlist_id)

        assert (music_dir / "a_b.m3u").exists()
        assert db_service.get_record_by_id(playlist_id).name == "a/b"

    def test_backup_export_keeps_records(
        self, db_service, library, sync_folder, music_dir, road_trip
    ):
        """Test backup exports do not touch sync records."""
        exporter = PlaylistExporter(db_service, library, sync_folder)

        assert exporter.export_playlist(road_trip, "backup") is True

        assert (music_dir / "Road Trip.backup").read_text() == "a.mp3\nsub/b.mp3\n"
        assert db_service.get_all_records() == []

    def test_missing_playlist(self, db_service, library, sync_folder, music_dir):
        """Test exporting an unknown playlist writes nothing."""
        exporter = PlaylistExporter(db_service, library, sync_folder)

        assert exporter.export_playlist(42) is False

        assert list(music_dir.iterdir()) == []
        assert db_service.get_all_records() == []

    def test_create_failure(self, db_service, library, road_trip):
        """Test a file that cannot be created aborts the export."""
        folder = Mock()
        folder.find_file.return_value = None
        folder.create_file.return_value = None
        exporter = PlaylistExporter(db_service, library, folder)

        assert exporter.export_playlist(road_trip) is False

        folder.open_write.assert_not_called()
        assert db_service.get_all_records() == []

    def test_write_failure(self, db_service, library, music_dir, road_trip):
        """Test a write error leaves no sync record."""
        folder = Mock()
        folder.find_file.return_value = SyncFile(
            name="Road Trip.m3u", path=music_dir / "Road Trip.m3u"
        )
        folder.best_effort_real_path.return_value = music_dir
        folder.open_write.side_effect = OSError("read-only")
        exporter = PlaylistExporter(db_service, library, folder)

        assert exporter.export_playlist(road_trip) is False

        assert db_service.get_all_records() == []

    def test_write_failure_removes_created_file(
        self, db_service, library, music_dir, road_trip
    ):
        """Test a failed export does not leave an empty file behind."""
        exporter = PlaylistExporter(db_service, library, ReadOnlyFolder(music_dir))

        assert exporter.export_playlist(road_trip) is False

        assert list(music_dir.iterdir()) == []
        assert db_service.get_all_records() == []

    def test_failed_export_does_not_clear_playlist(
        self, db_service, library, sync_folder, music_dir, road_trip
    ):
        """Test a later import after a failed export keeps the entries."""
        exporter = PlaylistExporter(db_service, library, ReadOnlyFolder(music_dir))
        exporter.export_playlist(road_trip)
        importer = PlaylistImporter(db_service, library, sync_folder)

        for file in sync_folder.list_files():
            importer.import_file(file)

        assert sync_folder.find_file("Road Trip.m3u") is None
        assert library.count_entries(road_trip) == 2

    def test_write_failure_keeps_existing_file(
        self, db_service, library, music_dir, road_trip
    ):
        """Test a failed export leaves a file it did not create in place."""
        (music_dir / "Road Trip.m3u").write_text("old.mp3\n")
        exporter = PlaylistExporter(db_service, library, ReadOnlyFolder(music_dir))

        assert exporter.export_playlist(road_trip) is False

        assert (music_dir / "Road Trip.m3u").read_text() == "old.mp3\n"

    def test_library_error_removes_created_file(
        self, db_service, library, sync_folder, music_dir, road_trip
    ):
        """Test an error while streaming entries also removes the new file."""
        exporter = PlaylistExporter(db_service, library, sync_folder)

        with patch.object(
            library, "stream_paths", side_effect=RuntimeError("database gone")
        ):
            with pytest.raises(RuntimeError):
                exporter.export_playlist(road_trip)

        assert list(music_dir.iterdir()) == []
        assert db_service.get_all_records() == []


class TestRoundTrip:
    """Test exporting and importing back."""

    def test_export_then_import(self, db_service, library, sync_folder, road_trip):
        """Test a relative export imports back to the original paths."""
        original = list(library.stream_paths(road_trip))
        PlaylistExporter(db_service, library, sync_folder).export_playlist(road_trip)
        db_service.delete_record(road_trip)
        library.delete_playlist(road_trip)

        importer = PlaylistImporter(db_service, library, sync_folder)
        assert importer.import_file(sync_folder.find_file("Road Trip.m3u")) is True

        playlist_id = library.get_playlist_id("Road Trip")
        assert list(library.stream_paths(playlist_id)) == original

    def test_exported_file_is_not_reimported(
        self, db_service, library, sync_folder, road_trip
    ):
        """Test the record written by an export makes the import a no-op."""
        PlaylistExporter(db_service, library, sync_folder).export_playlist(road_trip)

        importer = PlaylistImporter(db_service, library, sync_folder)

        assert importer.import_file(sync_folder.find_file("Road Trip.m3u")) is False
