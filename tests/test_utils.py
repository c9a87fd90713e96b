# tests/test_utils.py
"""Unit tests for utility functions in the `commentblocks.utils` module."""

from pathlib import Path

from commentblocks.utils import utils


def test_deep_merge() -> None:
    """Verify that `deep_merge` correctly merges nested dictionaries.

    This test ensures:
    - Existing values are preserved if not overridden.
    - Nested dictionaries are merged recursively.
    - Conflicting keys are overridden by values from the second dictionary.
    """
    base = {"a": 1, "b": {"x": 10, "y": 20}}
    override = {"b": {"y": 99, "z": 100}, "c": 3}
    result = utils.deep_merge(base, override)
    expected = {"a": 1, "b": {"x": 10, "y": 99, "z": 100}, "c": 3}
    assert result == expected


def test_hex_to_xterm_valid_color() -> None:
    """Ensure `hex_to_xterm` returns the correct xterm color code for valid hex values.

    Examples tested:
    - White (`#ffffff`) should map to 231.
    - Black (`000000`) should map to 16.
    """
    assert utils.hex_to_xterm("#ffffff") == 231
    assert utils.hex_to_xterm("000000") == 16


def test_hex_to_xterm_invalid_color() -> None:
    """Verify that `hex_to_xterm` falls back to 255 for invalid hex strings."""
    assert utils.hex_to_xterm("#zzz") == 255
    assert utils.hex_to_xterm("12") == 255


def test_parse_color_forms() -> None:
    """`parse_color` understands hex, rgb() and rgba()."""
    assert utils.parse_color("#ff8000") == (255, 128, 0, 1.0)
    assert utils.parse_color("rgb(1, 2, 3)") == (1, 2, 3, 1.0)
    assert utils.parse_color("rgba(255, 255, 64, 0.07)") == (255, 255, 64, 0.07)
    assert utils.parse_color("RGBA(300, 0, 0, 2)") == (255, 0, 0, 1.0)
    assert utils.parse_color("blue") is None
    assert utils.parse_color("#12") is None


def test_color_to_xterm_blends_alpha() -> None:
    """Translucent colors are blended over the base background.

    - Fully opaque red is plain red (196).
    - Fully transparent red over black is black (16).
    - The default 7% tints stay dark over the default background.
    """
    assert utils.color_to_xterm("rgb(255, 0, 0)") == 196
    assert utils.color_to_xterm("rgba(255, 0, 0, 0)", "#000000") == 16
    tint = utils.color_to_xterm("rgba(255, 255, 64, 0.07)")
    assert tint != utils.color_to_xterm("rgb(255, 255, 64)")
    assert 16 <= tint <= 255


def test_color_to_xterm_invalid() -> None:
    """Unknown colors fall back to white (255)."""
    assert utils.color_to_xterm("not-a-color") == 255


def test_load_config_defaults_and_first_run(isolated_environment: Path) -> None:
    """Without a user config, defaults load and templates are created."""
    config = utils.load_config()
    assert config["highlighter"] == utils.DEFAULT_CONFIG["highlighter"]

    config_dir = isolated_environment / ".config" / "commentblocks"
    assert (config_dir / "config.toml").is_file()
    assert (config_dir / ".env").is_file()

    # The generated template loads back to the same patterns.
    reloaded = utils.load_config()
    assert reloaded["highlighter"]["start_patterns"] == utils.DEFAULT_CONFIG["highlighter"]["start_patterns"]


def test_load_config_merges_user_file(tmp_path: Path) -> None:
    """Values from config.toml override defaults; the rest stays."""
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        '[highlighter]\ncolors = ["#000000"]\n'
        '[highlighter.language_patterns."python,ruby"]\nstart_patterns = ["^#>"]\n',
        encoding="utf-8",
    )
    config = utils.load_config(config_file)
    assert config["highlighter"]["colors"] == ["#000000"]
    assert config["highlighter"]["language_patterns"] == {"python,ruby": {"start_patterns": ["^#>"]}}
    assert config["highlighter"]["end_patterns"] == utils.DEFAULT_CONFIG["highlighter"]["end_patterns"]


def test_load_config_env_var(tmp_path: Path, monkeypatch) -> None:
    """COMMENTBLOCKS_CONFIG points at an alternative config file."""
    config_file = tmp_path / "alt.toml"
    config_file.write_text("[highlighter]\ndebounce_ms = 42\n", encoding="utf-8")
    monkeypatch.setenv("COMMENTBLOCKS_CONFIG", str(config_file))
    assert utils.load_config()["highlighter"]["debounce_ms"] == 42


def test_load_config_broken_file_uses_defaults(tmp_path: Path) -> None:
    """A config.toml that fails to parse falls back to defaults."""
    config_file = tmp_path / "broken.toml"
    config_file.write_text("[highlighter\ncolors = ", encoding="utf-8")
    assert utils.load_config(config_file) == utils.DEFAULT_CONFIG


def test_load_config_missing_file_uses_defaults(tmp_path: Path) -> None:
    """An explicit path that does not exist falls back to defaults."""
    assert utils.load_config(tmp_path / "nope.toml") == utils.DEFAULT_CONFIG


def test_load_config_returns_independent_copy(tmp_path: Path) -> None:
    """Mutating a loaded config never reaches DEFAULT_CONFIG."""
    config_file = tmp_path / "logging_only.toml"
    config_file.write_text("[logging]\nlog_to_console = true\n", encoding="utf-8")

    config = utils.load_config(config_file)
    config["highlighter"]["include_start_end_lines"] = True
    config["highlighter"]["colors"].append("#ffffff")

    assert utils.DEFAULT_CONFIG["highlighter"]["include_start_end_lines"] is False
    assert len(utils.DEFAULT_CONFIG["highlighter"]["colors"]) == 4
