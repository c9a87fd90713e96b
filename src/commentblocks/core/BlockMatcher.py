# commentblocks/core/BlockMatcher.py
"""BlockMatcher Module
===================
This module turns a document snapshot plus two lists of marker patterns into
highlightable line ranges, grouped by rotating visual level.

Key Features:
-------------
- Single forward pass over the lines with a stack of open blocks, so nested
  regions close innermost-first.
- Levels rotate by nesting depth (`depth % level_count`), not by which
  pattern opened the block.
- Start and end checks on a line are independent: a line may push a block
  and then immediately pop one.
- Unmatched end markers, unmatched start markers and blocks with no lines
  left after boundary trimming are dropped silently.
- A pattern that does not compile aborts the pass with `PatternConfigError`.

The pass is pure: no I/O, no state kept between calls.
"""

import logging
import re
from typing import NamedTuple, Sequence


TRACE_LOGGER = logging.getLogger("commentblocks.trace")


class PatternConfigError(ValueError):
    """Raised when a configured start/end pattern is not a valid regex."""

    def __init__(self, pattern: str, kind: str, reason: str) -> None:
        self.pattern = pattern
        self.kind = kind
        self.reason = reason
        super().__init__(f"Invalid {kind} pattern {pattern!r}: {reason}")


class BlockRange(NamedTuple):
    """Inclusive line range of one block, tagged with its visual level."""

    level: int
    first_line: int
    last_line: int


class PendingBlock(NamedTuple):
    """A block whose start marker was seen and whose end is still awaited."""

    start_line: int
    level: int


def compile_patterns(patterns: Sequence[str], kind: str) -> list[re.Pattern[str]]:
    """Compiles regex sources, raising `PatternConfigError` on the first bad one.

    Args:
        patterns: Regex source strings in configuration order.
        kind: "start" or "end"; used in the error message.
    """
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except (re.error, TypeError) as e:
            raise PatternConfigError(str(pattern), kind, str(e)) from e
    return compiled


def _matches_any(regexes: Sequence[re.Pattern[str]], line: str) -> bool:
    return any(regex.search(line) for regex in regexes)


def match_blocks(
    lines: Sequence[str],
    start_patterns: Sequence[str],
    end_patterns: Sequence[str],
    level_count: int,
    include_boundary_lines: bool,
) -> dict[int, list[BlockRange]]:
    """Finds every closed block in `lines` and buckets it by level.

    Args:
        lines: Snapshot of the document, one string per line.
        start_patterns: Regex sources marking the first line of a block.
        end_patterns: Regex sources marking the last line of a block.
        level_count: Number of rotating levels; 0 or less yields `{}`.
        include_boundary_lines: Whether marker lines belong to the range.

    Returns:
        A dict with a (possibly empty) list for every level in
        `range(level_count)`, each sorted by first line.

    Raises:
        PatternConfigError: If any pattern fails to compile.
    """
    if level_count <= 0:
        return {}

    start_regexes = compile_patterns(start_patterns, "start")
    end_regexes = compile_patterns(end_patterns, "end")

    ranges_by_level: dict[int, list[BlockRange]] = {level: [] for level in range(level_count)}
    block_stack: list[PendingBlock] = []

    for i, line in enumerate(lines):
        if _matches_any(start_regexes, line):
            block = PendingBlock(start_line=i, level=len(block_stack) % level_count)
            block_stack.append(block)
            TRACE_LOGGER.debug("push line=%d level=%d depth=%d", i, block.level, len(block_stack))

        # Not an elif: a line may open a block and close one in the same step.
        if not (block_stack and _matches_any(end_regexes, line)):
            continue

        block = block_stack.pop()
        first_line = block.start_line if include_boundary_lines else block.start_line + 1
        last_line = i if include_boundary_lines else i - 1

        if first_line <= last_line:
            ranges_by_level[block.level].append(BlockRange(block.level, first_line, last_line))
            TRACE_LOGGER.debug("pop line=%d level=%d range=%d-%d", i, block.level, first_line, last_line)
        else:
            TRACE_LOGGER.debug("pop line=%d level=%d empty, dropped", i, block.level)

    if block_stack:
        logging.debug(f"BlockMatcher: discarding {len(block_stack)} unclosed block(s).")

    # Blocks close innermost-first; nesting deeper than level_count puts an
    # outer block after its inner one on the same level.
    for ranges in ranges_by_level.values():
        ranges.sort(key=lambda r: (r.first_line, r.last_line))

    return ranges_by_level
