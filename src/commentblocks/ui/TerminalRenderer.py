# commentblocks/ui/TerminalRenderer.py
"""TerminalRenderer Module
=======================
Rendering sink that paints comment blocks as whole-line background colors in
an xterm-256 terminal.

The highlighter talks to any object implementing `DecorationSink`: it first
announces how many levels exist, then replaces the ranges of each level on
every pass. `TerminalRenderer` keeps those ranges and, on `render()`, emits the
document with one background color per level. Lines are padded to the
terminal width (measured with wcwidth, so wide characters count double) to
mimic the whole-line decorations of a graphical editor.
"""

import logging
import shutil
import threading
from typing import Optional, Protocol, Sequence

from wcwidth import wcswidth

from commentblocks.core.BlockMatcher import BlockRange
from commentblocks.utils.utils import DEFAULT_BASE_BACKGROUND, color_to_xterm


RESET = "\x1b[0m"


class DecorationSink(Protocol):
    """What the highlighter needs from a renderer."""

    def configure_levels(self, colors: Sequence[str]) -> None: ...

    def set_decorations(self, level: int, ranges: Sequence[BlockRange]) -> None: ...


## ==================== TerminalRenderer Class ====================
class TerminalRenderer:
    """Whole-line background decorations rendered with ANSI escape codes.

    Attributes:
        colors (list[str]): Configured CSS-style colors, one per level.
        xterm_colors (list[int]): The same colors mapped to xterm-256 indices.
        decorations (dict[int, list[BlockRange]]): Current ranges per level.
        width (int | None): Fixed line width; None means the terminal width.
    """

    def __init__(
        self,
        colors: Sequence[str] = (),
        base_background: str = DEFAULT_BASE_BACKGROUND,
        width: Optional[int] = None,
    ) -> None:
        self.base_background = base_background
        self.width = width
        self.colors: list[str] = []
        self.xterm_colors: list[int] = []
        self.decorations: dict[int, list[BlockRange]] = {}
        self._lock = threading.Lock()
        self.configure_levels(colors)

    def configure_levels(self, colors: Sequence[str]) -> None:
        """Replaces the per-level colors and drops every existing decoration."""
        with self._lock:
            self.colors = list(colors)
            self.xterm_colors = [color_to_xterm(c, self.base_background) for c in self.colors]
            self.decorations = {level: [] for level in range(len(self.colors))}
        logging.debug(f"TerminalRenderer: {len(self.colors)} decoration level(s): {self.xterm_colors}")

    def set_decorations(self, level: int, ranges: Sequence[BlockRange]) -> None:
        """Replaces (never appends to) the ranges shown for `level`."""
        with self._lock:
            if level not in self.decorations:
                logging.warning(f"TerminalRenderer: ignoring decorations for unknown level {level}.")
                return
            self.decorations[level] = list(ranges)

    def line_levels(self, line_count: int) -> list[Optional[int]]:
        """Returns the level painted on each line, or None for undecorated lines.

        Where ranges overlap, the one that starts later (the inner block) wins.
        """
        painted: list[Optional[int]] = [None] * line_count
        with self._lock:
            all_ranges = [r for ranges in self.decorations.values() for r in ranges]
        for block in sorted(all_ranges, key=lambda r: (r.first_line, -r.last_line)):
            for line_no in range(block.first_line, min(block.last_line, line_count - 1) + 1):
                painted[line_no] = block.level
        return painted

    def render(self, lines: Sequence[str]) -> str:
        """Renders `lines` with block backgrounds applied."""
        width = self.width or shutil.get_terminal_size().columns
        out: list[str] = []
        for line, level in zip(lines, self.line_levels(len(lines))):
            line = line.rstrip("\r").expandtabs(4)
            if level is None:
                out.append(line)
                continue
            display_width = wcswidth(line)
            padding = max(width - display_width, 0) if display_width >= 0 else 0
            out.append(f"\x1b[48;5;{self.xterm_colors[level]}m{line}{' ' * padding}{RESET}")
        return "\n".join(out)
