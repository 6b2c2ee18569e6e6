"""Unit tests for game name normalization."""
import pytest

from certtool.normalize import clean_game_name_for_display, normalize_game_name


@pytest.mark.unit
class TestNormalizeGameName:
    """Tests for normalize_game_name."""

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_input_returns_empty_string(self, value):
        assert normalize_game_name(value) == ""

    def test_strips_symbols_copy_and_version_suffix(self):
        assert normalize_game_name("Mega Fortune™ (copy) 94%") == normalize_game_name("mega fortune")
        assert normalize_game_name("mega fortune") == "mega fortune"

    def test_removes_v94_suffix_case_insensitively(self):
        assert normalize_game_name("Book of Dead V94") == "book of dead"

    def test_version_suffix_only_removed_at_end(self):
        assert normalize_game_name("94% Club") == "94% club"

    def test_copy_token_removed_anywhere(self):
        assert normalize_game_name("Starburst (Copy) Deluxe") == "starburst deluxe"

    def test_collapses_whitespace_and_strips_symbols(self):
        assert normalize_game_name("  Gonzo's®   Quest©\t ") == "gonzo's quest"

    @pytest.mark.parametrize("value", [
        "Mega Fortune™ (copy) 94%",
        "Foo 94% v94",
        "Foo 94% ™",
        "Bar (copy) (copy)",
        "(co(copy)py) Baz",
        "Already normalized",
        "   ",
        "94%",
    ])
    def test_idempotent(self, value):
        once = normalize_game_name(value)
        assert normalize_game_name(once) == once


@pytest.mark.unit
class TestCleanGameNameForDisplay:
    """Tests for clean_game_name_for_display."""

    @pytest.mark.parametrize("value", [None, "", "™"])
    def test_empty_returns_na(self, value):
        assert clean_game_name_for_display(value) == "N/A"

    def test_keeps_case(self):
        assert clean_game_name_for_display("Mega Fortune™ (copy) 94%") == "Mega Fortune"
