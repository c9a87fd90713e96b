"""Pytest configuration with shared fixtures for the commentblocks tests.

Tooling: pytest
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Iterator

import pytest

from commentblocks.core.Highlighter import CommentBlockHighlighter
from commentblocks.utils.utils import DEFAULT_CONFIG
from tests.stubs import RecordingSink


# --- Environment isolation ---
@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir and drop COMMENTBLOCKS_* variables.

    Keeps `load_config()` from reading or creating files in the real
    `~/.config/commentblocks` directory.

    Returns:
        Path: The temporary home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("COMMENTBLOCKS_CONFIG", raising=False)
    monkeypatch.delenv("COMMENTBLOCKS_TRACE", raising=False)
    return home


# --- Base fixtures for configuration ---
@pytest.fixture
def base_config() -> dict[str, Any]:
    """Provide a deep copy of the built-in configuration.

    Returns:
        dict[str, Any]: Configuration dictionary safe to mutate.
    """
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a fresh recording sink."""
    return RecordingSink()


@pytest.fixture
def highlighter(
    sink: RecordingSink, base_config: dict[str, Any]
) -> Iterator[CommentBlockHighlighter]:
    """Create a highlighter over the recording sink with default settings.

    The debounce interval is long so that scheduled passes only run when a
    test calls `flush_pending()`.
    """
    base_config["highlighter"]["debounce_ms"] = 60_000
    hl = CommentBlockHighlighter(sink, base_config)
    yield hl
    hl.close()


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root and trace loggers back after `setup_logging()` runs."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    trace = logging.getLogger("commentblocks.trace")
    saved_trace = (trace.handlers[:], trace.disabled, trace.propagate)
    yield
    for handler in root.handlers + trace.handlers:
        if handler not in saved_handlers and handler not in saved_trace[0]:
            handler.close()
    root.handlers, root.level = saved_handlers, saved_level
    trace.handlers, trace.disabled, trace.propagate = saved_trace
