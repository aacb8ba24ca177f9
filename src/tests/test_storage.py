"""Unit tests for ContentStore."""

import pytest

from pressroom.core.storage import ContentStore, InvalidPath


@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path)


# ============================================================
# Path handling
# ============================================================


class TestSafeJoin:
    def test_relative_path(self, store, tmp_path):
        assert store.safe_join("posts/a.md") == tmp_path / "posts" / "a.md"

    def test_backslashes_normalized(self, store, tmp_path):
        assert store.safe_join("posts\\a.md") == tmp_path / "posts" / "a.md"

    def test_inner_dot_segments_collapsed(self, store, tmp_path):
        assert store.safe_join("posts/./x/../a.md") == tmp_path / "posts" / "a.md"

    @pytest.mark.parametrize(
        "path", ["", "/etc/passwd", "../secret.md", "posts/../../x.md", ".", "posts/.."]
    )
    def test_rejected(self, store, path):
        with pytest.raises(InvalidPath):
            store.safe_join(path)

    def test_invalid_path_is_value_error(self, store):
        with pytest.raises(ValueError):
            store.read_raw("../x.md")


# ============================================================
# Read / write
# ============================================================


class TestReadWrite:
    def test_missing_returns_none(self, store):
        assert store.read_raw("posts/none.md") is None
        assert store.exists("posts/none.md") is False

    def test_write_creates_parents(self, store, tmp_path):
        store.write_raw("posts/2024/trip/index.md", b"---\ntitle: Trip\n---\n")
        assert (tmp_path / "posts/2024/trip/index.md").read_bytes() == (
            b"---\ntitle: Trip\n---\n"
        )
        assert store.exists("posts/2024/trip/index.md")

    def test_round_trip_bytes(self, store):
        data = "café\r\n".encode("utf-8")
        store.write_raw("a.md", data)
        assert store.read_raw("a.md") == data

    def test_overwrite(self, store):
        store.write_raw("a.md", b"one")
        store.write_raw("a.md", b"two")
        assert store.read_raw("a.md") == b"two"

    def test_directory_is_not_a_file(self, store, tmp_path):
        (tmp_path / "posts").mkdir()
        assert store.read_raw("posts") is None
        assert store.exists("posts") is False


# ============================================================
# Delete
# ============================================================


class TestDelete:
    def test_missing(self, store):
        assert store.delete("posts/none.md") is False

    def test_delete_file(self, store, tmp_path):
        store.write_raw("posts/a.md", b"x")
        store.write_raw("posts/b.md", b"y")
        assert store.delete("posts/a.md") is True
        assert not (tmp_path / "posts/a.md").exists()
        assert (tmp_path / "posts/b.md").exists()

    def test_collection_folder_kept(self, store, tmp_path):
        store.write_raw("posts/a.md", b"x")
        store.delete("posts/a.md")
        assert (tmp_path / "posts").is_dir()

    def test_empty_bundle_removed(self, store, tmp_path):
        store.write_raw("posts/trip/index.md", b"x")
        store.delete("posts/trip/index.md")
        assert not (tmp_path / "posts/trip").exists()
        assert (tmp_path / "posts").is_dir()

    def test_bundle_with_assets_kept(self, store, tmp_path):
        store.write_raw("posts/trip/index.md", b"x")
        store.write_raw("posts/trip/photo.jpg", b"\xff\xd8")
        store.delete("posts/trip/index.md")
        assert (tmp_path / "posts/trip/photo.jpg").exists()
