"""Tests for the local sync folder backend."""

import pytest

from playlist_sync.core.filesystem import LocalSyncFolder, SyncFile, SyncFolderError


@pytest.fixture
def folder_path(tmp_path):
    """Create an empty sync folder."""
    path = tmp_path / "playlists"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def folder(folder_path):
    """Open the sync folder."""
    return LocalSyncFolder(folder_path)


class TestLocalSyncFolderInit:
    """Test opening a sync folder."""

    def test_missing_directory(self, tmp_path):
        """Test a missing directory cannot be opened."""
        with pytest.raises(SyncFolderError):
            LocalSyncFolder(tmp_path / "missing")

    def test_file_instead_of_directory(self, tmp_path):
        """Test a regular file cannot be opened."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(SyncFolderError):
            LocalSyncFolder(path)

    def test_real_path(self, folder, folder_path):
        """Test the real path is exposed by default."""
        assert folder.best_effort_real_path() == folder_path

    def test_real_path_disabled(self, folder_path):
        """Test hiding the real path."""
        folder = LocalSyncFolder(folder_path, expose_real_path=False)
        assert folder.best_effort_real_path() is None


class TestListAndFind:
    """Test listing and finding files."""

    def test_list_files(self, folder, folder_path):
        """Test only regular files are listed, sorted by name."""
        (folder_path / "b.m3u").write_text("")
        (folder_path / "a.m3u").write_text("")
        (folder_path / "sub").mkdir()

        assert [f.name for f in folder.list_files()] == ["a.m3u", "b.m3u"]

    def test_find_file(self, folder, folder_path):
        """Test finding a file by name."""
        (folder_path / "Mix.m3u").write_text("")

        file = folder.find_file("Mix.m3u")

        assert file == SyncFile(name="Mix.m3u", path=folder_path / "Mix.m3u")
        assert folder.find_file("Other.m3u") is None

    def test_find_ignores_directories(self, folder, folder_path):
        """Test directories are not files."""
        (folder_path / "Mix.m3u").mkdir()

        assert folder.find_file("Mix.m3u") is None

    def test_resolve(self, folder, folder_path):
        """Test mapping watcher paths to folder files."""
        (folder_path / "Mix.m3u").write_text("")
        (folder_path / "sub").mkdir()
        (folder_path / "sub" / "Nested.m3u").write_text("")

        assert folder.resolve(str(folder_path / "Mix.m3u")).name == "Mix.m3u"
        assert folder.resolve(folder_path / "sub" / "Nested.m3u") is None
        assert folder.resolve(folder_path / "Gone.m3u") is None
        assert folder.resolve(folder_path / "sub") is None


class TestCreateAndRename:
    """Test creating, renaming and deleting files."""

    def test_create_file(self, folder, folder_path):
        """Test creating an empty file."""
        file = folder.create_file("audio/x-mpegurl", "Mix.m3u")

        assert file is not None
        assert (folder_path / "Mix.m3u").read_bytes() == b""

    def test_create_existing_fails(self, folder, folder_path):
        """Test creating a file that already exists."""
        (folder_path / "Mix.m3u").write_text("keep")

        assert folder.create_file("audio/x-mpegurl", "Mix.m3u") is None
        assert (folder_path / "Mix.m3u").read_text() == "keep"

    def test_rename(self, folder, folder_path):
        """Test renaming a file."""
        (folder_path / "Mix.m3u").write_text("a.mp3\n")

        assert folder.rename(folder.find_file("Mix.m3u"), "Mix.backup") is True

        assert not (folder_path / "Mix.m3u").exists()
        assert (folder_path / "Mix.backup").read_text() == "a.mp3\n"

    def test_rename_refuses_overwrite(self, folder, folder_path):
        """Test renaming onto an existing file fails."""
        (folder_path / "Mix.m3u").write_text("new")
        (folder_path / "Mix.backup").write_text("old")

        assert folder.rename(folder.find_file("Mix.m3u"), "Mix.backup") is False

        assert (folder_path / "Mix.m3u").read_text() == "new"
        assert (folder_path / "Mix.backup").read_text() == "old"

    def test_delete(self, folder, folder_path):
        """Test deleting a file."""
        (folder_path / "Mix.m3u").write_text("a.mp3\n")

        assert folder.delete(folder.find_file("Mix.m3u")) is True

        assert list(folder_path.iterdir()) == []

    def test_delete_missing_file(self, folder, folder_path):
        """Test deleting a file that is already gone."""
        file = SyncFile(name="Mix.m3u", path=folder_path / "Mix.m3u")

        assert folder.delete(file) is True


class TestReadWrite:
    """Test reading and writing file contents."""

    def test_open_read(self, folder, folder_path):
        """Test reading bytes."""
        (folder_path / "Mix.m3u").write_bytes(b"a.mp3\n")

        with folder.open_read(folder.find_file("Mix.m3u")) as stream:
            assert stream.read() == b"a.mp3\n"

    def test_open_write_replaces_content(self, folder, folder_path):
        """Test writing replaces the whole file."""
        (folder_path / "Mix.m3u").write_bytes(b"old content that is longer\n")

        with folder.open_write(folder.find_file("Mix.m3u")) as sink:
            sink.write(b"new\n")

        assert (folder_path / "Mix.m3u").read_bytes() == b"new\n"
        assert [p.name for p in folder_path.iterdir()] == ["Mix.m3u"]

    def test_open_write_failure_keeps_original(self, folder, folder_path):
        """Test an error while writing leaves the file untouched."""
        (folder_path / "Mix.m3u").write_bytes(b"old\n")

        with pytest.raises(OSError):
            with folder.open_write(folder.find_file("Mix.m3u")) as sink:
                sink.write(b"partial")
                raise OSError("disk full")

        assert (folder_path / "Mix.m3u").read_bytes() == b"old\n"
        assert [p.name for p in folder_path.iterdir()] == ["Mix.m3u"]
