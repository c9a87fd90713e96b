# src/commentblocks/core/__init__.py
"""Public facade for commentblocks.core: re-export main names from CamelCase modules.

Keeps Java-like file names (BlockMatcher.py, Highlighter.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .BlockMatcher import BlockRange, PatternConfigError, match_blocks  # noqa: F401
from .Debouncer import Debouncer  # noqa: F401
from .Document import Document, detect_language_id  # noqa: F401
from .Highlighter import CommentBlockHighlighter  # noqa: F401
from .PatternResolver import ResolvedPatterns, resolve_patterns  # noqa: F401
from .Settings import HighlighterSettings  # noqa: F401


__all__ = [
    "BlockRange",
    "CommentBlockHighlighter",
    "Debouncer",
    "Document",
    "HighlighterSettings",
    "PatternConfigError",
    "ResolvedPatterns",
    "detect_language_id",
    "match_blocks",
    "resolve_patterns",
]
