# commentblocks/utils/utils.py
"""
commentblocks.utils.utils.py
============================

This module provides a collection of core utility functions for commentblocks.

Key functionalities include:
- Automatic User Configuration: Creates and loads the user-specific
  configuration files (`config.toml`, `.env`) in `~/.config/commentblocks`,
  ensuring a seamless first-run experience.
- Robust Configuration Loading: Implements a multi-layered strategy that loads a
  hardcoded, built-in default configuration, then recursively merges it with
  user-defined settings from the user's `config.toml`.
- Color Conversion: Turns the CSS-style colors used for block backgrounds
  (`#rrggbb`, `rgb(...)`, `rgba(...)`) into xterm-256 color indices.
- Helper Utilities: Includes a function for deep-merging dictionaries.

This architecture ensures the highlighter is always runnable, even if user
configuration files are missing or corrupted, by falling back to the
embedded defaults.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger("commentblocks")

# --- Constants ---
WHITE_FG_IDX = 255
DEFAULT_BASE_BACKGROUND = "#1e1e1e"
CONFIG_ENV_VAR = "COMMENTBLOCKS_CONFIG"

ENV_TEMPLATE = """# Environment overrides for commentblocks
# COMMENTBLOCKS_CONFIG=/path/to/config.toml
# COMMENTBLOCKS_TRACE=1
"""

# Single source of truth for every setting. The user's config.toml is merged on top.
DEFAULT_CONFIG: Dict[str, Any] = {
    "highlighter": {
        "enabled": True,
        "colors": [
            "rgba(255, 255, 64, 0.07)",
            "rgba(127, 255, 127, 0.07)",
            "rgba(255, 127, 255, 0.07)",
            "rgba(79, 236, 236, 0.07)",
        ],
        "start_patterns": [
            r"^\s*#\s*(?:start|region|begin)",
            r"^\s*//\s*(?:start|region|begin)",
        ],
        "end_patterns": [
            r"^\s*#\s*(?:end|endregion)",
            r"^\s*//\s*(?:end|endregion)",
        ],
        "language_patterns": {},
        "excluded_languages": [],
        "include_start_end_lines": False,
        "debounce_ms": 300,
        "base_background": DEFAULT_BASE_BACKGROUND,
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
}

_RGB_FUNC_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9.]+)\s*)?\)$",
    re.IGNORECASE,
)


# --- Helper Functions ---

def get_user_config_dir() -> Path:
    """Returns the directory holding the user's config.toml and .env."""
    return Path.home() / ".config" / "commentblocks"


def ensure_user_config_exists() -> None:
    """Checks for user config files in `~/.config/commentblocks` and creates them if missing."""
    try:
        config_dir = get_user_config_dir()
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            user_config_path.write_text(toml.dumps(DEFAULT_CONFIG), encoding="utf-8")
            logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.

    The explicit `config_path` wins, then the `COMMENTBLOCKS_CONFIG` environment
    variable, then `~/.config/commentblocks/config.toml` (created on first run).
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    if config_path is None and os.environ.get(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR]).expanduser()

    if config_path is None:
        ensure_user_config_exists()
        config_path = get_user_config_dir() / "config.toml"

    if config_path.is_file():
        try:
            user_config = toml.load(config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{config_path}': {e}. Using defaults.")
    else:
        logger.warning(f"Config file '{config_path}' not found. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX
    return rgb_to_xterm(r, g, b)


def rgb_to_xterm(r: int, g: int, b: int) -> int:
    """Maps an RGB triple onto the xterm-256 grayscale ramp or 6x6x6 cube."""
    if r == g == b:
        if r < 8: return 16
        if r > 248: return 231
        return round(((r - 8) / 247) * 24) + 232

    return int(
        16
        + (36 * round(r / 255 * 5))
        + (6 * round(g / 255 * 5))
        + round(b / 255 * 5)
    )


def parse_color(color: str) -> Optional[tuple[int, int, int, float]]:
    """
    Parses `#rrggbb`, `rgb(r, g, b)` or `rgba(r, g, b, a)` into an RGBA tuple.

    Returns None for anything it does not understand.
    """
    color = color.strip()
    if color.startswith("#"):
        raw = color[1:]
        if len(raw) != 6:
            return None
        try:
            r, g, b = (int(raw[i:i+2], 16) for i in (0, 2, 4))
        except ValueError:
            return None
        return r, g, b, 1.0

    match = _RGB_FUNC_RE.match(color)
    if not match:
        return None
    r, g, b = (min(int(match.group(i)), 255) for i in (1, 2, 3))
    alpha = float(match.group(4)) if match.group(4) is not None else 1.0
    return r, g, b, max(0.0, min(alpha, 1.0))


def color_to_xterm(color: str, base_background: str = DEFAULT_BASE_BACKGROUND) -> int:
    """
    Converts a CSS-style color into an xterm-256 index.

    Translucent colors are blended over `base_background`, since a terminal
    cell cannot be partially transparent.
    """
    parsed = parse_color(color)
    if parsed is None:
        logger.warning(f"Unrecognized color '{color}', using white.")
        return WHITE_FG_IDX
    r, g, b, alpha = parsed
    if alpha < 1.0:
        base = parse_color(base_background) or (0, 0, 0, 1.0)
        r, g, b = (
            round(channel * alpha + base_channel * (1 - alpha))
            for channel, base_channel in zip((r, g, b), base[:3])
        )
    return rgb_to_xterm(r, g, b)
