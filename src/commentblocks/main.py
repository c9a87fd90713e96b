#!/usr/bin/env python3
# commentblocks/main.py
"""
commentblocks Main Entry Point
==============================

This module is the command-line entry point. It performs:
1) Environment Loading: reads ~/.config/commentblocks/.env early, so
   COMMENTBLOCKS_* overrides are visible to everything that follows.
2) Argument Parsing: argparse flags plus the file to highlight.
3) Configuration & Logging: loads config and initializes logging ASAP.
4) Rendering: highlights the file once, or keeps re-rendering it on every
   change when `--watch` is given.

Usage:
    commentblocks [--watch] [--include-boundaries] [--language ID] [--config PATH] FILE
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from commentblocks.core.BlockMatcher import BlockRange
from commentblocks.core.Document import Document
from commentblocks.core.Highlighter import CommentBlockHighlighter
from commentblocks.ui.TerminalRenderer import TerminalRenderer
from commentblocks.utils.logging_config import setup_logging
from commentblocks.utils.utils import DEFAULT_BASE_BACKGROUND, get_user_config_dir, load_config


logger = logging.getLogger("commentblocks")

WATCH_POLL_INTERVAL = 0.25
CLEAR_SCREEN = "\x1b[2J\x1b[H"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commentblocks",
        description="Highlights nested comment-marker blocks with rotating background colors.",
    )
    parser.add_argument(
        "-w", "--watch", action="store_true",
        help="re-render the file after every change until interrupted",
    )
    parser.add_argument(
        "-b", "--include-boundaries", action="store_true",
        help="color the start and end marker lines as part of each block",
    )
    parser.add_argument(
        "-l", "--language", metavar="ID",
        help="language id to use instead of detecting it (e.g. python)",
    )
    parser.add_argument(
        "-c", "--config", metavar="PATH",
        help="config.toml to load instead of ~/.config/commentblocks/config.toml",
    )
    parser.add_argument("file", metavar="FILE", help="file to highlight")
    return parser


def _load_document(path: Path, language: Optional[str]) -> Optional[Document]:
    try:
        return Document.from_file(path, language_id=language)
    except OSError as e:
        logger.error("Could not read %s: %s", path, e)
        print(f"commentblocks: cannot read '{path}': {e}", file=sys.stderr)
        return None


def run_once(highlighter: CommentBlockHighlighter, renderer: TerminalRenderer, document: Document) -> int:
    """Highlights `document` once and prints it. Returns the exit code."""
    if not highlighter.update_decorations(document) and highlighter.enabled:
        print(highlighter.status_message, file=sys.stderr)
        return 2
    print(renderer.render(document.lines))
    return 0


def run_watch(
    highlighter: CommentBlockHighlighter,
    renderer: TerminalRenderer,
    path: Path,
    language: Optional[str],
) -> int:
    """Re-renders `path` after every change until interrupted."""

    def redraw(document: Document, _result: dict[int, list[BlockRange]]) -> None:
        sys.stdout.write(CLEAR_SCREEN + renderer.render(document.lines) + "\n")
        sys.stdout.flush()

    highlighter.on_result = redraw
    last_mtime: Optional[float] = None
    try:
        while True:
            try:
                mtime = path.stat().st_mtime
            except OSError:
                mtime = None
            if mtime is not None and mtime != last_mtime:
                last_mtime = mtime
                document = _load_document(path, language)
                if document is not None:
                    highlighter.trigger_update(document)
            time.sleep(WATCH_POLL_INTERVAL)
    except KeyboardInterrupt:
        logger.info("Watch interrupted by user.")
    finally:
        highlighter.close()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Runs the CLI and returns the process exit code.

    Bad arguments make argparse print usage and raise `SystemExit(2)`.
    """
    args = build_parser().parse_args(argv)

    config_path = Path(args.config).expanduser() if args.config else None
    config = load_config(config_path)
    setup_logging(config)
    if args.include_boundaries:
        config["highlighter"]["include_start_end_lines"] = True

    highlighter_config = config.get("highlighter", {})
    renderer = TerminalRenderer(
        base_background=str(highlighter_config.get("base_background", DEFAULT_BASE_BACKGROUND))
    )
    highlighter = CommentBlockHighlighter(renderer, config)

    path = Path(args.file).expanduser()
    if args.watch:
        return run_watch(highlighter, renderer, path, args.language)

    document = _load_document(path, args.language)
    if document is None:
        return 1
    return run_once(highlighter, renderer, document)


def start() -> None:
    """Console-script entry point."""
    # Load ~/.config/commentblocks/.env before anything reads the environment.
    load_dotenv(dotenv_path=get_user_config_dir() / ".env")
    try:
        sys.exit(main())
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
