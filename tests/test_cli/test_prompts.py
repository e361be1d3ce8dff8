"""Tests for terminal prompters."""

from unittest.mock import MagicMock, patch

import pytest
import typer

from scriptcli.cli.prompts import (
    ACCESSIBLE_ENV,
    PlainPrompter,
    QuestionaryPrompter,
    _questionary_validator,
    accessible_mode,
    make_prompter,
)
from scriptcli.errors import PromptError
from scriptcli.utils.validation import validate_size
from scriptcli.workflow.prompts import Choice


CHOICES = [Choice("debian 12", 0), Choice("alpine 3.20", 1), Choice("ubuntu 24.04", 2)]


class TestAccessibleMode:
    """Test the ACCESSIBLE environment toggle."""

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on", "t"])
    def test_enabled(self, monkeypatch, value):
        """Test truthy values."""
        monkeypatch.setenv(ACCESSIBLE_ENV, value)

        assert accessible_mode() is True

    @pytest.mark.parametrize("value", ["", "0", "false", "no"])
    def test_disabled(self, monkeypatch, value):
        """Test falsy values."""
        monkeypatch.setenv(ACCESSIBLE_ENV, value)

        assert accessible_mode() is False

    def test_make_prompter(self, monkeypatch):
        """Test the prompter follows the toggle."""
        monkeypatch.setenv(ACCESSIBLE_ENV, "1")
        assert isinstance(make_prompter(), PlainPrompter)

        monkeypatch.delenv(ACCESSIBLE_ENV)
        assert isinstance(make_prompter(), QuestionaryPrompter)
        assert isinstance(make_prompter(accessible=True), PlainPrompter)

    def test_make_prompter_console(self):
        """Test the console is handed to either prompter."""
        console = MagicMock()

        assert make_prompter(accessible=True, console=console).console is console
        assert make_prompter(accessible=False, console=console).console is console


def test_questionary_validator():
    """Test raising validators are adapted to questionary's protocol."""
    check = _questionary_validator(validate_size)

    assert check("20GiB") is True
    assert check("20") == "size must have a valid unit (MB, MiB, GB, GiB, TB, TiB)"
    assert _questionary_validator(None) is None


class TestQuestionaryPrompter:
    """Test QuestionaryPrompter error handling."""

    def test_answer(self):
        """Test answers are returned."""
        question = MagicMock()
        question.unsafe_ask.return_value = True

        assert QuestionaryPrompter()._ask(question) is True

    def test_interrupted(self):
        """Test Ctrl-C becomes PromptError."""
        question = MagicMock()
        question.unsafe_ask.side_effect = KeyboardInterrupt

        with pytest.raises(PromptError):
            QuestionaryPrompter()._ask(question)

    def test_no_answer(self):
        """Test a missing answer becomes PromptError."""
        question = MagicMock()
        question.unsafe_ask.return_value = None

        with pytest.raises(PromptError):
            QuestionaryPrompter()._ask(question)

    @patch("scriptcli.cli.prompts.questionary.select")
    def test_select_default(self, mock_select):
        """Test the default choice is preselected."""
        mock_select.return_value.unsafe_ask.return_value = 1

        assert QuestionaryPrompter().select("Choose OS Option", CHOICES, default=1) == 1

        options = mock_select.call_args.kwargs["choices"]
        assert mock_select.call_args.kwargs["default"] is options[1]

    @patch("scriptcli.cli.prompts.questionary.checkbox")
    def test_checkbox_without_choices(self, mock_checkbox):
        """Test an empty multi-select never reaches questionary."""
        with pytest.raises(PromptError, match="No options"):
            QuestionaryPrompter().checkbox("Select Additional Incus Profiles", [])

        mock_checkbox.assert_not_called()

    @patch("scriptcli.cli.prompts.questionary.select")
    def test_select_without_choices(self, mock_select):
        """Test an empty single select never reaches questionary."""
        with pytest.raises(PromptError, match="No options"):
            QuestionaryPrompter().select("Choose Network Bridge", [])

        mock_select.assert_not_called()


class TestPlainPrompter:
    """Test PlainPrompter."""

    @pytest.fixture
    def prompter(self):
        """Prompter with a throwaway console."""
        return PlainPrompter(console=MagicMock())

    @patch("scriptcli.cli.prompts.typer.confirm", return_value=True)
    def test_confirm(self, mock_confirm, prompter):
        """Test yes/no questions."""
        assert prompter.confirm("Continue?", default=True) is True
        mock_confirm.assert_called_once_with("Continue?", default=True)

    @patch("scriptcli.cli.prompts.typer.confirm", side_effect=typer.Abort())
    def test_abort(self, mock_confirm, prompter):
        """Test aborted prompts raise PromptError."""
        with pytest.raises(PromptError):
            prompter.confirm("Continue?")

    @patch("scriptcli.cli.prompts.typer.prompt", side_effect=[9, 2])
    def test_select_reasks_out_of_range(self, mock_prompt, prompter):
        """Test an invalid number is asked again."""
        assert prompter.select("Choose OS Option", CHOICES, default=2) == 1
        assert mock_prompt.call_count == 2
        assert mock_prompt.call_args.kwargs["default"] == 3

    def test_select_without_choices(self, prompter):
        """Test an empty choice list."""
        with pytest.raises(PromptError):
            prompter.select("Choose Network Bridge", [])

    def test_checkbox_without_choices(self, prompter):
        """Test an empty multi-select list."""
        with pytest.raises(PromptError):
            prompter.checkbox("Select Additional Incus Profiles", [])

    @patch("scriptcli.cli.prompts.typer.prompt", side_effect=["1, 3, 3"])
    def test_checkbox(self, mock_prompt, prompter):
        """Test comma separated numbers."""
        assert prompter.checkbox("Profiles", CHOICES) == [0, 2]

    @patch("scriptcli.cli.prompts.typer.prompt", side_effect=["x", "4", ""])
    def test_checkbox_reasks(self, mock_prompt, prompter):
        """Test invalid selections are asked again and empty selects none."""
        assert prompter.checkbox("Profiles", CHOICES) == []
        assert mock_prompt.call_count == 3

    @patch("scriptcli.cli.prompts.typer.prompt", side_effect=["20", "0GiB", "20GiB"])
    def test_text_validation(self, mock_prompt, prompter):
        """Test text is asked until it validates."""
        assert prompter.text("Root Disk Size", default="2GiB", validate=validate_size) == "20GiB"
        assert mock_prompt.call_count == 3
        assert mock_prompt.call_args.kwargs["default"] == "2GiB"

    @patch("scriptcli.cli.prompts.typer.prompt", return_value="secret")
    def test_password_hidden(self, mock_prompt, prompter):
        """Test passwords are not echoed."""
        assert prompter.text("Enter Root Password", password=True) == "secret"
        assert mock_prompt.call_args.kwargs["hide_input"] is True
