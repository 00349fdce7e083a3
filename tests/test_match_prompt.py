"""Tests for the multiple-match selection UI (cli/match_prompt.py).

``questionary`` and the Rich table class are mocked so no terminal is
needed.  We test the mapping between the user's choice and the
returned entry id.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from lpass_wrap.cli.match_prompt import _build_choice_label, prompt_match_selection
from lpass_wrap.core.models import Match
from lpass_wrap.exceptions import SelectionCancelledError

_MATCHES = (Match("foo", "1"), Match("Work/foo", "2"), Match("Old/foo", "3"))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fake_choice_class() -> type:
    """Return a minimal Choice-like class for mocking questionary.Choice."""

    class FakeChoice:
        def __init__(self, title: str, value: str) -> None:
            self.title = title
            self.value = value

    return FakeChoice


def _fake_table_class() -> type:
    """Return a minimal Table-like class for tests without rich."""

    class FakeTable:
        rows: list[tuple[object, ...]] = []

        def __init__(self, *args: object, **kwargs: object) -> None:
            self.args = args
            self.kwargs = kwargs
            FakeTable.rows = []

        def add_column(self, *args: object, **kwargs: object) -> None:
            _ = args, kwargs

        def add_row(self, *args: object, **kwargs: object) -> None:
            FakeTable.rows.append(args)

    return FakeTable


def _fake_questionary(answer: str | None) -> MagicMock:
    questionary_mod = MagicMock()
    questionary_mod.Choice = _fake_choice_class()
    questionary_mod.select.return_value.ask.return_value = answer
    return questionary_mod


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

class TestBuildChoiceLabel:
    def test_index_is_one_based(self) -> None:
        assert _build_choice_label(0, Match("foo", "1")).strip().startswith("1.")

    def test_contains_name_and_id(self) -> None:
        label = _build_choice_label(1, Match("Work/foo", "2"))
        assert "2." in label
        assert "Work/foo" in label
        assert "[id: 2]" in label


# ---------------------------------------------------------------------------
# prompt_match_selection
# ---------------------------------------------------------------------------

class TestPromptMatchSelection:
    @patch("lpass_wrap.cli.match_prompt._import_questionary")
    def test_returns_selected_id(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _fake_questionary("2")
        with patch(
            "lpass_wrap.cli.match_prompt._import_rich_table",
            return_value=_fake_table_class(),
        ):
            assert prompt_match_selection("foo", _MATCHES) == "2"

    @patch("lpass_wrap.cli.match_prompt._import_questionary")
    def test_one_choice_per_match(self, mock_q: MagicMock) -> None:
        questionary_mod = _fake_questionary("1")
        mock_q.return_value = questionary_mod
        with patch(
            "lpass_wrap.cli.match_prompt._import_rich_table",
            return_value=_fake_table_class(),
        ):
            prompt_match_selection("foo", _MATCHES)

        choices = questionary_mod.select.call_args.kwargs["choices"]
        assert [choice.value for choice in choices] == ["1", "2", "3"]

    @patch("lpass_wrap.cli.match_prompt._import_questionary")
    def test_table_lists_candidates(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _fake_questionary("1")
        table_class = _fake_table_class()
        with patch(
            "lpass_wrap.cli.match_prompt._import_rich_table",
            return_value=table_class,
        ):
            prompt_match_selection("foo", _MATCHES)

        assert table_class.rows == [("1", "foo", "1"), ("2", "Work/foo", "2"), ("3", "Old/foo", "3")]

    @patch("lpass_wrap.cli.match_prompt._import_questionary")
    def test_names_are_escaped_as_markup(self, mock_q: MagicMock) -> None:
        from rich.markup import escape

        names = ("Work/[old] wiki", "Shares\\")
        mock_q.return_value = _fake_questionary("1")
        table_class = _fake_table_class()
        with patch(
            "lpass_wrap.cli.match_prompt._import_rich_table",
            return_value=table_class,
        ):
            prompt_match_selection("wiki", [Match(name, str(i)) for i, name in enumerate(names)])

        assert [row[1] for row in table_class.rows] == [escape(name) for name in names]
        assert table_class.rows[1][1] != "Shares\\"

    @patch("lpass_wrap.cli.match_prompt._import_questionary")
    def test_cancel_raises(self, mock_q: MagicMock) -> None:
        mock_q.return_value = _fake_questionary(None)
        with patch(
            "lpass_wrap.cli.match_prompt._import_rich_table",
            return_value=_fake_table_class(),
        ):
            with pytest.raises(SelectionCancelledError, match="No entry selected"):
                prompt_match_selection("foo", _MATCHES)
