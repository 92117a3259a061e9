"""Tests for the saved-thread store."""

from unittest.mock import patch

import pytest

from app.core.storage import (
    InvalidFilenameError,
    ThreadNotFoundError,
    ThreadStore,
    validate_filename,
)


def doc(saved_at, body="Body\n"):
    return f'---\nauthor: "@jack"\nsaved_at: "{saved_at}"\n---\n\n{body}'


@pytest.fixture
def store(tmp_path):
    s = ThreadStore(root=tmp_path / "threads")
    s.init()
    return s


class TestValidateFilename:
    @pytest.mark.parametrize("name", ["a.md", "2025-Oct-15_jack_123.md"])
    def test_valid(self, name):
        assert validate_filename(name) == name

    @pytest.mark.parametrize(
        "name", ["a.txt", "../a.md", "x/../a.md", "dir/a.md", "..md", ".hidden.md", "a\\b.md"]
    )
    def test_invalid(self, name):
        with pytest.raises(InvalidFilenameError):
            validate_filename(name)


class TestThreadStore:
    """Save, list and delete round trips on a temp directory."""

    def test_save_and_read(self, store):
        path = store.save("a.md", doc("2025-01-01T00:00:00.000Z"))
        assert path.read_text(encoding="utf-8").startswith("---\n")

        thread = store.read("a.md")
        assert thread.meta == {"author": "@jack", "saved_at": "2025-01-01T00:00:00.000Z"}
        assert thread.content == "Body\n"

    def test_save_leaves_no_temp_files(self, store):
        store.save("a.md", doc("x"))
        assert [p.name for p in store.root.iterdir()] == ["a.md"]

    def test_save_overwrites(self, store):
        store.save("a.md", doc("1", "old\n"))
        store.save("a.md", doc("2", "new\n"))
        assert store.read("a.md").content == "new\n"

    def test_failed_save_keeps_previous_file(self, store):
        store.save("a.md", doc("1", "old\n"))
        with patch("app.core.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.save("a.md", doc("2", "new\n"))
        assert store.read("a.md").content == "old\n"
        assert [p.name for p in store.root.iterdir()] == ["a.md"]

    def test_save_creates_directory(self, tmp_path):
        s = ThreadStore(root=tmp_path / "missing")
        s.save("a.md", "x")
        assert (tmp_path / "missing" / "a.md").exists()

    def test_save_rejects_bad_name(self, store):
        with pytest.raises(InvalidFilenameError):
            store.save("../escape.md", "x")

    def test_list_sorted_newest_first(self, store):
        store.save("old.md", doc("2025-01-01T00:00:00.000Z"))
        store.save("new.md", doc("2025-06-01T00:00:00.000Z"))
        store.save("mid.md", doc("2025-03-01T00:00:00.000Z"))
        assert [t.filename for t in store.list_threads()] == ["new.md", "mid.md", "old.md"]

    def test_list_ignores_other_files(self, store):
        store.save("a.md", doc("1"))
        (store.root / "notes.txt").write_text("x")
        (store.root / ".a.md.abc.tmp").write_text("partial")
        assert [t.filename for t in store.list_threads()] == ["a.md"]

    def test_list_without_frontmatter(self, store):
        store.save("plain.md", "# no header\n")
        [thread] = store.list_threads()
        assert thread.meta == {}
        assert thread.content == "# no header\n"
        assert thread.to_dict() == {"filename": "plain.md", "content": "# no header\n"}

    def test_list_skips_undecodable_file(self, store, caplog):
        store.save("good.md", doc("1"))
        (store.root / "bad.md").write_bytes(b"\xff\xfe---\n")

        with caplog.at_level("WARNING", logger="app.core.storage"):
            threads = store.list_threads()

        assert [t.filename for t in threads] == ["good.md"]
        assert "bad.md" in caplog.text

    def test_list_missing_directory(self, tmp_path):
        assert ThreadStore(root=tmp_path / "nope").list_threads() == []

    def test_to_dict_flattens_meta(self, store):
        store.save("a.md", doc("1"))
        assert store.read("a.md").to_dict() == {
            "filename": "a.md",
            "author": "@jack",
            "saved_at": "1",
            "content": "Body\n",
        }

    def test_delete(self, store):
        store.save("a.md", doc("1"))
        store.delete("a.md")
        assert store.list_threads() == []

    def test_delete_missing(self, store):
        with pytest.raises(ThreadNotFoundError):
            store.delete("gone.md")

    def test_delete_invalid(self, store):
        with pytest.raises(InvalidFilenameError):
            store.delete("../a.md")
