# commentblocks/core/Settings.py
"""Settings Module
===============
Typed view of the `[highlighter]` configuration section.

`HighlighterSettings.from_config` reads the merged configuration dictionary
(see `commentblocks.utils.utils.load_config`) with lenient `.get` lookups, so
a partially broken config.toml degrades to defaults instead of stopping the
highlighter. Values that cannot be used are logged and replaced.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from commentblocks.utils.utils import DEFAULT_BASE_BACKGROUND, DEFAULT_CONFIG


_DEFAULTS: dict[str, Any] = DEFAULT_CONFIG["highlighter"]


@dataclass(frozen=True)
class HighlighterSettings:
    """Immutable snapshot of the highlighter configuration.

    Attributes:
        enabled: Whether highlighting runs at all.
        colors: One background color per level; its length is the level count.
        start_patterns: Default regex sources that open a block.
        end_patterns: Default regex sources that close a block.
        language_patterns: Comma-joined language group -> optional
            `start_patterns` / `end_patterns` overrides.
        excluded_languages: Language ids the highlighter never runs on.
        include_start_end_lines: Whether marker lines are part of a block.
        debounce_ms: Quiet interval before an edit-triggered pass runs.
        base_background: Terminal background translucent colors blend over.
    """

    enabled: bool = True
    colors: tuple[str, ...] = tuple(_DEFAULTS["colors"])
    start_patterns: tuple[str, ...] = tuple(_DEFAULTS["start_patterns"])
    end_patterns: tuple[str, ...] = tuple(_DEFAULTS["end_patterns"])
    language_patterns: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    excluded_languages: tuple[str, ...] = ()
    include_start_end_lines: bool = False
    debounce_ms: int = 300
    base_background: str = DEFAULT_BASE_BACKGROUND

    @property
    def level_count(self) -> int:
        """Number of rotating visual levels (one per configured color)."""
        return len(self.colors)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "HighlighterSettings":
        """Builds settings from a merged configuration dictionary."""
        section = config.get("highlighter", {})
        if not isinstance(section, dict):
            logging.warning("Settings: [highlighter] is not a table, using defaults.")
            section = {}

        return cls(
            enabled=bool(section.get("enabled", True)),
            colors=_string_tuple(section, "colors"),
            start_patterns=_string_tuple(section, "start_patterns"),
            end_patterns=_string_tuple(section, "end_patterns"),
            language_patterns=_language_patterns(section.get("language_patterns", {})),
            excluded_languages=_string_tuple(section, "excluded_languages"),
            include_start_end_lines=bool(section.get("include_start_end_lines", False)),
            debounce_ms=_debounce_ms(section.get("debounce_ms", 300)),
            base_background=str(section.get("base_background", DEFAULT_BASE_BACKGROUND)),
        )


def _string_tuple(section: dict[str, Any], key: str) -> tuple[str, ...]:
    """Reads a list of strings, falling back to the built-in default."""
    value = section.get(key, _DEFAULTS[key])
    if not isinstance(value, (list, tuple)):
        logging.warning(f"Settings: '{key}' must be a list, got {type(value).__name__}. Using default.")
        value = _DEFAULTS[key]
    return tuple(str(item) for item in value)


def _language_patterns(value: Any) -> dict[str, dict[str, list[str]]]:
    """Keeps only well-formed language group overrides, preserving their order."""
    if not isinstance(value, dict):
        logging.warning("Settings: 'language_patterns' must be a table. Ignoring it.")
        return {}

    groups: dict[str, dict[str, list[str]]] = {}
    for group_key, overrides in value.items():
        if not isinstance(overrides, dict):
            logging.warning(f"Settings: language group '{group_key}' is not a table. Skipping.")
            continue
        entry: dict[str, list[str]] = {}
        for side in ("start_patterns", "end_patterns"):
            patterns = overrides.get(side)
            if patterns is None:
                continue
            if not isinstance(patterns, (list, tuple)):
                logging.warning(f"Settings: '{group_key}.{side}' must be a list. Skipping.")
                continue
            entry[side] = [str(p) for p in patterns]
        groups[str(group_key)] = entry
    return groups


def _debounce_ms(value: Any) -> int:
    try:
        delay = int(value)
        if delay < 0:
            raise ValueError
    except (ValueError, TypeError):
        logging.warning(f"Settings: invalid debounce_ms ({value!r}), defaulting to 300.")
        return 300
    return delay
