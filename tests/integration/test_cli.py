"""Integration tests for the imgman command line."""

import json
import re

import pytest

from imgman.cli import build_events, main
from imgman.models.paste import EventKind
from imgman.services.placeholder_service import FAILURE_MESSAGE_TEXT


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def image_file(tmp_path, png_bytes):
    path = tmp_path / "shot.png"
    path.write_bytes(png_bytes)
    return path


class TestConfigCommand:
    """Tests for `imgman config`."""

    def test_show_defaults(self, settings_file, capsys):
        exit_code = main(["--settings", str(settings_file), "config", "show"])

        assert exit_code == 0
        out = capsys.readouterr().out
        data = json.loads(out[out.index("{"):])
        assert data == {"target_directory": "", "save_on_paste": True}

    def test_set_persists(self, settings_file):
        exit_code = main([
            "--settings", str(settings_file), "config", "set", "--dir", "img", "--no-save-on-paste"
        ])

        assert exit_code == 0
        assert json.loads(settings_file.read_text()) == {
            "target_directory": "img",
            "save_on_paste": False,
        }

    def test_corrupt_settings_file(self, settings_file):
        settings_file.write_text("{oops")

        assert main(["--settings", str(settings_file), "config", "show"]) == 2


class TestPasteCommand:
    """Tests for `imgman paste`."""

    def test_paste_file_into_note(self, tmp_path, settings_file, image_file, png_bytes):
        main(["--settings", str(settings_file), "config", "set", "--dir", "img"])
        note = tmp_path / "note.md"
        note.write_text("# Trip\nDay one")

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note), str(image_file),
            "--vault", str(tmp_path),
        ])

        assert exit_code == 0
        match = re.fullmatch(r"# Trip\nDay one\n!\[\]\(img/(\d{20}\.png)\)\n", note.read_text())
        assert match, note.read_text()
        assert (tmp_path / "img" / match.group(1)).read_bytes() == png_bytes

    def test_paste_at_line(self, tmp_path, settings_file, image_file):
        note = tmp_path / "note.md"
        note.write_text("first\nsecond\n")

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note), str(image_file),
            "--line", "1", "--vault", str(tmp_path),
        ])

        assert exit_code == 0
        lines = note.read_text().split("\n")
        assert lines[0] == "first"
        assert re.fullmatch(r"!\[\]\(\d{20}\.png\)", lines[1])
        assert lines[2] == "second"

    def test_failed_download_exit_code(self, tmp_path, settings_file):
        note = tmp_path / "note.md"

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note),
            "http://127.0.0.1:1/missing.png", "--vault", str(tmp_path),
        ])

        assert exit_code == 1
        assert note.read_text() == FAILURE_MESSAGE_TEXT + "\n"

    def test_non_image_file_exit_code(self, tmp_path, settings_file):
        note = tmp_path / "note.md"
        notes_file = tmp_path / "todo.txt"
        notes_file.write_text("not an image")

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note), str(notes_file),
            "--vault", str(tmp_path),
        ])

        assert exit_code == 1
        assert note.read_text() == ""

    def test_non_image_next_to_image_is_counted(self, tmp_path, settings_file, image_file):
        note = tmp_path / "note.md"
        notes_file = tmp_path / "todo.txt"
        notes_file.write_text("not an image")

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note), str(image_file), str(notes_file),
            "--vault", str(tmp_path),
        ])

        assert exit_code == 1
        assert re.fullmatch(r"!\[\]\(\d{20}\.png\)\n", note.read_text())

    def test_disabled_capture_exit_code(self, tmp_path, settings_file):
        main(["--settings", str(settings_file), "config", "set", "--no-save-on-paste"])
        note = tmp_path / "note.md"

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note),
            "https://example.com/a.png", "--vault", str(tmp_path),
        ])

        assert exit_code == 1
        assert note.read_text() == "![](https://example.com/a.png)"

    def test_missing_image_file(self, tmp_path, settings_file):
        note = tmp_path / "note.md"

        exit_code = main([
            "--settings", str(settings_file), "paste", str(note), str(tmp_path / "nope.png"),
        ])

        assert exit_code == 2
        assert not note.exists()


class TestBuildEvents:
    """Tests for build_events()."""

    def test_files_and_urls_become_separate_events(self, image_file):
        events = build_events([str(image_file), "https://example.com/a.png"])

        assert [e.kind for e in events] == [EventKind.DROP, EventKind.PASTE]
        assert events[0].files[0].mime_type == "image/png"
        assert events[1].text == "![](https://example.com/a.png)"
