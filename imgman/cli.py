#!/usr/bin/env python3
"""
Command line entry point for imgman.

Edits the persisted plugin settings and pastes images into Markdown notes
through the same interceptor an editor integration uses.
"""
import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from imgman.config import get_settings
from imgman.models.editor import Position, TextEditor
from imgman.models.paste import ClipboardFile, EventKind, PasteEvent
from imgman.plugin import ImgmanPlugin
from imgman.services.fetch_store_service import FetchStoreService
from imgman.services.interceptor_service import extract_image_sources, extract_image_urls
from imgman.services.placeholder_service import FAILURE_MESSAGE_TEXT
from imgman.services.settings_service import SettingsError
from imgman.utils.logging_config import setup_logging


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="imgman", description="Save pasted images next to your notes")
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Path of the plugin settings file (default: IMGMAN_SETTINGS_PATH)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    config_parser = subparsers.add_parser("config", help="Show or change plugin settings")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Print the current settings as JSON")
    set_parser = config_sub.add_parser("set", help="Change settings; saved immediately")
    set_parser.add_argument("--dir", dest="target_directory", default=None, help="Directory to save images")
    set_parser.add_argument(
        "--save-on-paste",
        dest="save_on_paste",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Save images while pasting",
    )

    paste_parser = subparsers.add_parser("paste", help="Paste images into a Markdown note")
    paste_parser.add_argument("note", type=str, help="Markdown file to paste into")
    paste_parser.add_argument("sources", nargs="+", help="Image files or http(s) URLs")
    paste_parser.add_argument(
        "--line",
        type=int,
        default=None,
        help="Zero-based line to paste at (default: end of note)",
    )
    paste_parser.add_argument(
        "--vault",
        type=str,
        default=None,
        help="Directory the save directory is relative to (default: IMGMAN_VAULT_ROOT)",
    )
    return parser


def build_events(sources: List[str]) -> List[PasteEvent]:
    """Turn command line sources into the events an editor would receive."""
    files = []
    urls = []
    for source in sources:
        if source.startswith(("http://", "https://")):
            urls.append(source)
            continue
        path = Path(source)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        files.append(ClipboardFile(name=path.name, mime_type=mime_type, data=path.read_bytes()))

    events = []
    if files:
        events.append(PasteEvent(kind=EventKind.DROP, files=files))
    if urls:
        events.append(PasteEvent(kind=EventKind.PASTE, text="\n".join(f"![]({url})" for url in urls)))
    return events


async def paste_into_note(
    plugin: ImgmanPlugin,
    note: Path,
    sources: List[str],
    line: Optional[int] = None
) -> int:
    """
    Paste ``sources`` into ``note`` and write it back.

    Returns:
        int: Number of sources that were not stored, either because storing
        failed or because they were not captured as images at all
    """
    text = note.read_text(encoding="utf-8") if note.exists() else ""
    editor = TextEditor(text, name=note.name)
    if line is not None:
        editor.set_cursor(Position(line, 0))
    elif text and not text.endswith("\n"):
        editor.replace_selection("\n")

    skipped = 0
    plugin.register_editor(editor)
    try:
        for event in build_events(sources):
            carried = len(event.files) + len(extract_image_urls(event.text))
            editor.paste(event)
            if event.default_prevented:
                captured = len(extract_image_sources(event))
                if carried > captured:
                    logger.warning(f"{carried - captured} non-image source(s) skipped")
            else:
                captured = 0
                logger.warning(f"{event.kind.value} event was not handled as an image paste")
            skipped += carried - captured
        await plugin.drain_pending()
    finally:
        plugin.unload()

    result = editor.get_value()
    note.write_text(result, encoding="utf-8")
    failed = result.count(FAILURE_MESSAGE_TEXT) - text.count(FAILURE_MESSAGE_TEXT)
    return failed + skipped


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app_settings = get_settings()
    setup_logging(
        log_level=app_settings.log_level,
        log_to_file=app_settings.LOG_TO_FILE,
        log_dir=app_settings.LOG_DIR,
    )

    fetch_store = None
    if getattr(args, "vault", None):
        fetch_store = FetchStoreService(
            base_dir=Path(args.vault),
            timeout=app_settings.FETCH_TIMEOUT,
            max_image_size=app_settings.MAX_IMAGE_SIZE,
        )

    try:
        plugin = ImgmanPlugin(
            settings_path=args.settings,
            app_settings=app_settings,
            fetch_store=fetch_store,
        ).load()

        if args.command == "config":
            if args.config_command == "set":
                changes = {
                    key: value
                    for key, value in (
                        ("target_directory", args.target_directory),
                        ("save_on_paste", args.save_on_paste),
                    )
                    if value is not None
                }
                plugin.update_settings(**changes)
            print(plugin.settings.model_dump_json(indent=2))
            return 0

        failures = asyncio.run(paste_into_note(plugin, Path(args.note), args.sources, args.line))
    except SettingsError as e:
        logger.error(str(e))
        return 2
    except OSError as e:
        logger.error(f"Cannot access file: {e}")
        return 2

    if failures:
        logger.error(f"{failures} image(s) could not be saved")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
