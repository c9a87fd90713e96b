# commentblocks/core/Highlighter.py
"""Highlighter Module
==================
This module defines `CommentBlockHighlighter`, the owned state object that
ties configuration, the active document, the debounced update cycle and the
rendering sink together.

Key Features:
-------------
- Explicit state: settings, enabled flag, active document, last result and
  status message live on one instance that the caller constructs.
- Debounced passes: edits call `trigger_update()`; bursts collapse into one
  pass after `debounce_ms`, and a superseded pass never reaches the sink.
- Excluded languages: documents in `excluded_languages` are never scanned and
  their highlighting is cleared.
- Pattern errors: a bad regex keeps the last good decorations on screen and
  reports the problem once, not on every keystroke.
- Toggle: disabling clears the sink, enabling runs a fresh full pass.

Classes:
--------
- `CommentBlockHighlighter`: Orchestrates passes of the block matcher and
  pushes their output to a `DecorationSink`.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional

from commentblocks.core.BlockMatcher import BlockRange, PatternConfigError, match_blocks
from commentblocks.core.Debouncer import Debouncer
from commentblocks.core.Document import Document
from commentblocks.core.PatternResolver import resolve_patterns
from commentblocks.core.Settings import HighlighterSettings


if TYPE_CHECKING:
    from commentblocks.ui.TerminalRenderer import DecorationSink


ResultCallback = Callable[[Document, dict[int, list[BlockRange]]], None]


## ==================== CommentBlockHighlighter Class ====================
class CommentBlockHighlighter:
    """Class CommentBlockHighlighter
    ===============================
    Runs the block matcher over the active document and keeps a rendering sink
    in sync with its output.

    Attributes:
        sink (DecorationSink): Receives the ranges of every level on each pass.
        settings (HighlighterSettings): Current configuration snapshot.
        enabled (bool): Whether passes run at all.
        document (Optional[Document]): The active document snapshot.
        last_result (dict[int, list[BlockRange]]): Output of the last applied pass.
        status_message (str): Last user-facing message (toggle, pattern errors).
        on_result (Optional[ResultCallback]): Called after every applied pass,
            e.g. to redraw the screen.

    Methods:
        load_configuration(config):
            Rebuilds settings and the sink's levels from a config dictionary.
        on_configuration_changed(config):
            Reloads configuration and reruns a pass if enabled.
        set_document(document):
            Makes `document` active and schedules a debounced pass.
        trigger_update(document=None):
            Schedules a debounced pass, superseding any pending one.
        update_decorations(document=None) -> bool:
            Runs a pass immediately and applies it.
        clear_decorations():
            Empties every level in the sink.
        toggle() -> bool:
            Flips `enabled`, clearing or refreshing the sink accordingly.
        close():
            Cancels pending work and clears the sink.
    """

    def __init__(
        self,
        sink: "DecorationSink",
        config: Optional[dict[str, Any]] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self.sink = sink
        self.on_result = on_result
        self.document: Optional[Document] = None
        self.last_result: dict[int, list[BlockRange]] = {}
        self.status_message: str = "Ready"
        self._last_error: Optional[str] = None
        self._state_lock = threading.RLock()
        self.settings = HighlighterSettings()
        self.enabled: bool = True
        self._levels_ready: bool = False
        self._debouncer = Debouncer(self.settings.debounce_ms / 1000)
        self.load_configuration(config or {})

    # --- Configuration ---
    def load_configuration(self, config: dict[str, Any]) -> None:
        """Rebuilds settings from `config`.

        The sink's levels are only recreated when the colors change, so a
        config edit that breaks a pattern leaves the current highlighting up.
        """
        settings = HighlighterSettings.from_config(config)
        with self._state_lock:
            colors_changed = settings.colors != self.settings.colors or not self._levels_ready
            self.settings = settings
            self.enabled = settings.enabled
            self._debouncer.delay = settings.debounce_ms / 1000
            self._last_error = None
            if colors_changed:
                self.sink.configure_levels(settings.colors)
                self._levels_ready = True
                self.last_result = {}
        if settings.level_count == 0:
            logging.warning("Highlighter: no colors configured, highlighting is a no-op.")
        logging.info(
            f"Highlighter: configuration loaded ({settings.level_count} levels, "
            f"{len(settings.start_patterns)} start / {len(settings.end_patterns)} end patterns)."
        )

    def on_configuration_changed(self, config: dict[str, Any]) -> None:
        self.load_configuration(config)
        if self.enabled:
            self.update_decorations()

    # --- Document tracking ---
    def set_document(self, document: Optional[Document]) -> None:
        """Makes `document` the active one (e.g. after switching files)."""
        with self._state_lock:
            self.document = document
        if self.enabled and document is not None:
            self.trigger_update()

    def trigger_update(self, document: Optional[Document] = None) -> int:
        """Schedules a debounced pass over `document` (or the active document).

        Returns:
            int: Generation of the scheduled pass, or 0 if nothing was scheduled.
        """
        with self._state_lock:
            if document is not None:
                self.document = document
            if not self.enabled or self.document is None:
                return 0
        return self._debouncer.schedule(self._run_scheduled_pass)

    def flush_pending(self) -> bool:
        """Runs a pending debounced pass immediately, if there is one."""
        return self._debouncer.flush()

    def _run_scheduled_pass(self, generation: int) -> None:
        with self._state_lock:
            document = self.document
        if document is None:
            return
        result = self._compute(document)
        if result is None:
            return
        with self._state_lock:
            if not self._debouncer.is_current(generation) or not self.enabled:
                logging.debug(f"Highlighter: discarding superseded pass {generation}.")
                return
            self._apply(document, result)

    # --- Passes ---
    def update_decorations(self, document: Optional[Document] = None) -> bool:
        """Runs one full pass right now and applies it to the sink.

        Returns:
            bool: True if the sink was updated (including being cleared for an
                  excluded language), False if nothing was applied.
        """
        if document is not None:
            # A debounced pass over an older snapshot must not land after this one.
            self._debouncer.cancel()
        with self._state_lock:
            if document is not None:
                self.document = document
            document = self.document
            if not self.enabled or document is None:
                return False

        result = self._compute(document)
        if result is None:
            return False
        with self._state_lock:
            self._apply(document, result)
        return True

    def _compute(self, document: Document) -> Optional[dict[int, list[BlockRange]]]:
        """Runs the matcher; returns None if the patterns are broken."""
        settings = self.settings
        if document.language_id in settings.excluded_languages:
            logging.debug(f"Highlighter: language '{document.language_id}' is excluded.")
            return {level: [] for level in range(settings.level_count)}

        patterns = resolve_patterns(document.language_id, settings)
        try:
            result = match_blocks(
                document.lines,
                patterns.start_patterns,
                patterns.end_patterns,
                settings.level_count,
                settings.include_start_end_lines,
            )
        except PatternConfigError as e:
            self._report_pattern_error(e)
            return None

        self._last_error = None
        return result

    def _apply(self, document: Document, result: dict[int, list[BlockRange]]) -> None:
        # Caller holds self._state_lock.
        for level in range(self.settings.level_count):
            self.sink.set_decorations(level, result.get(level, []))
        self.last_result = result
        total = sum(len(ranges) for ranges in result.values())
        logging.debug(f"Highlighter: applied {total} block(s) to '{document.filename or '<buffer>'}'.")
        if self.on_result is not None:
            self.on_result(document, result)

    def _report_pattern_error(self, error: PatternConfigError) -> None:
        message = f"Comment Block Highlighter: {error}"
        if message == self._last_error:
            return
        self._last_error = message
        self.status_message = message
        logging.error(message)

    # --- Clearing and toggling ---
    def clear_decorations(self) -> None:
        """Empties every level in the sink."""
        with self._state_lock:
            for level in range(self.settings.level_count):
                self.sink.set_decorations(level, [])
            self.last_result = {}

    def toggle(self) -> bool:
        """Enables or disables highlighting.

        Returns:
            bool: The new enabled state.
        """
        with self._state_lock:
            self.enabled = not self.enabled
            enabled = self.enabled
        self.status_message = f"Comment Block Highlighting {'enabled' if enabled else 'disabled'}"
        logging.info(self.status_message)

        if enabled:
            self.update_decorations()
        else:
            self._debouncer.cancel()
            self.clear_decorations()
        return enabled

    def close(self) -> None:
        """Cancels pending work and clears the sink."""
        self._debouncer.cancel()
        self.clear_decorations()
        logging.info("Highlighter closed.")
