"""Unit tests for `commentblocks.core.PatternResolver`.

Verifies that `resolve_patterns`:
- Returns the default pattern lists when no language group matches.
- Applies only the sides a matching group overrides.
- Stops at the first matching group, in configuration order.
- Never hands out the settings' own sequences.
"""

from commentblocks.core.PatternResolver import ResolvedPatterns, resolve_patterns
from commentblocks.core.Settings import HighlighterSettings


def make_settings(language_patterns):
    """Settings with short, recognizable defaults."""
    return HighlighterSettings(
        start_patterns=("^S",),
        end_patterns=("^E",),
        language_patterns=language_patterns,
    )


def test_defaults_without_groups() -> None:
    """No language groups: defaults come back verbatim."""
    resolved = resolve_patterns("python", make_settings({}))
    assert resolved == ResolvedPatterns(["^S"], ["^E"])


def test_defaults_when_no_group_matches() -> None:
    """Groups for other languages leave the defaults in place."""
    settings = make_settings({"ruby,perl": {"start_patterns": ["^=begin"]}})
    assert resolve_patterns("python", settings) == ResolvedPatterns(["^S"], ["^E"])


def test_partial_override_start_only() -> None:
    """A group defining only start patterns keeps the default end patterns."""
    settings = make_settings({"python,ruby": {"start_patterns": ["^#>"]}})
    resolved = resolve_patterns("ruby", settings)
    assert resolved.start_patterns == ["^#>"]
    assert resolved.end_patterns == ["^E"]


def test_partial_override_end_only() -> None:
    """A group defining only end patterns keeps the default start patterns."""
    settings = make_settings({"lua": {"end_patterns": ["^--<"]}})
    resolved = resolve_patterns("lua", settings)
    assert resolved == ResolvedPatterns(["^S"], ["^--<"])


def test_full_override() -> None:
    """Both sides can be replaced at once."""
    settings = make_settings(
        {"html,xml": {"start_patterns": ["<!-- region"], "end_patterns": ["<!-- endregion"]}}
    )
    resolved = resolve_patterns("xml", settings)
    assert resolved == ResolvedPatterns(["<!-- region"], ["<!-- endregion"])


def test_empty_override_list_applies() -> None:
    """An explicitly empty list disables that side for the language."""
    settings = make_settings({"markdown": {"start_patterns": []}})
    assert resolve_patterns("markdown", settings).start_patterns == []


def test_first_matching_group_wins() -> None:
    """Only the first group listing the language is consulted."""
    settings = make_settings(
        {
            "javascript,typescript": {"start_patterns": ["^first"]},
            "typescript": {"start_patterns": ["^second"], "end_patterns": ["^second_end"]},
        }
    )
    resolved = resolve_patterns("typescript", settings)
    assert resolved.start_patterns == ["^first"]
    assert resolved.end_patterns == ["^E"]


def test_group_members_are_exact() -> None:
    """Members are compared as written: no substring or whitespace matching."""
    settings = make_settings({"python, ruby": {"start_patterns": ["^x"]}, "pythonic": {}})
    assert resolve_patterns("ruby", settings).start_patterns == ["^S"]
    assert resolve_patterns("python", settings).start_patterns == ["^x"]
    assert resolve_patterns("pyth", settings).start_patterns == ["^S"]


def test_result_does_not_alias_settings() -> None:
    """Mutating the result leaves the settings untouched."""
    overrides = {"go": {"start_patterns": ["^//go:region"]}}
    settings = make_settings(overrides)
    resolved = resolve_patterns("go", settings)
    resolved.start_patterns.append("extra")
    resolved.end_patterns.append("extra")
    assert overrides["go"]["start_patterns"] == ["^//go:region"]
    assert settings.end_patterns == ("^E",)
