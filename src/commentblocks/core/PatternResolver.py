# commentblocks/core/PatternResolver.py
"""PatternResolver Module
======================
Resolves which start/end marker patterns apply to a document of a given language.

The highlighter carries one default list of start patterns and one of end
patterns. Language groups (`"python,ruby"`) may override either side. The
first group that names the language wins; later groups are not consulted.

Regex sources are passed through untouched. Compiling, and reporting a bad
pattern, is the job of `BlockMatcher`.
"""

import logging
from typing import TYPE_CHECKING, Any, Mapping, NamedTuple, Optional


if TYPE_CHECKING:
    from commentblocks.core.Settings import HighlighterSettings


class ResolvedPatterns(NamedTuple):
    """The effective pattern lists for one language."""

    start_patterns: list[str]
    end_patterns: list[str]


def resolve_patterns(language_id: str, settings: "HighlighterSettings") -> ResolvedPatterns:
    """Returns the start/end pattern lists that apply to `language_id`.

    Args:
        language_id: Editor language identifier of the document (e.g. "python").
        settings: Highlighter settings holding the defaults and overrides.

    Returns:
        ResolvedPatterns with fresh lists; mutating them never touches `settings`.
    """
    start_patterns = list(settings.start_patterns)
    end_patterns = list(settings.end_patterns)

    group_key, overrides = _find_language_group(language_id, settings.language_patterns)
    if group_key is None:
        return ResolvedPatterns(start_patterns, end_patterns)

    if overrides.get("start_patterns") is not None:
        start_patterns = list(overrides["start_patterns"])
    if overrides.get("end_patterns") is not None:
        end_patterns = list(overrides["end_patterns"])

    logging.debug(f"PatternResolver: '{language_id}' uses overrides from group '{group_key}'.")
    return ResolvedPatterns(start_patterns, end_patterns)


def _find_language_group(
    language_id: str, language_patterns: Mapping[str, Mapping[str, Any]]
) -> tuple[Optional[str], Mapping[str, Any]]:
    """Returns the first (key, overrides) pair whose key lists `language_id`."""
    for group_key, overrides in language_patterns.items():
        if language_id in group_key.split(","):
            return group_key, overrides
    return None, {}
