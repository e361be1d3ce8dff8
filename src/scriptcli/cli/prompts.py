"""Terminal prompters: questionary forms and an accessible line mode."""

import os
from typing import Any, List, Optional

import questionary
import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from scriptcli.errors import PromptError, ValidationError
from scriptcli.workflow.prompts import Choice, Prompter, Validator


ACCESSIBLE_ENV = "ACCESSIBLE"
_TRUE_VALUES = ("1", "t", "true", "y", "yes", "on")


def accessible_mode() -> bool:
    """Read the ACCESSIBLE environment toggle."""
    return os.environ.get(ACCESSIBLE_ENV, "").strip().lower() in _TRUE_VALUES


def _questionary_validator(validate: Optional[Validator]):
    """Adapt a raising validator to questionary's True-or-message protocol."""
    if validate is None:
        return None

    def check(value: str):
        try:
            validate(value)
        except ValidationError as e:
            return str(e)
        return True

    return check


class QuestionaryPrompter(Prompter):
    """Interactive forms rendered with questionary."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize prompter."""
        self.console = console or Console()

    def _ask(self, question) -> Any:
        try:
            answer = question.unsafe_ask()
        except (KeyboardInterrupt, EOFError) as e:
            raise PromptError("Prompt interrupted") from e
        if answer is None:
            raise PromptError("No answer received")
        return answer

    def note(self, title: str, body: str) -> None:
        """Show a note in a panel."""
        self.console.print(Panel(Markdown(body), title=title))

    def confirm(self, title, default=False, description=None) -> bool:
        """Ask a yes/no question."""
        return self._ask(
            questionary.confirm(title, default=default, instruction=description)
        )

    def select(self, title, choices, default=None, description=None) -> Any:
        """Pick one value."""
        if not choices:
            raise PromptError(f"No options available for {title}")
        options = [questionary.Choice(choice.title, value=choice.value) for choice in choices]
        selected = next((o for o in options if o.value == default), None)
        return self._ask(
            questionary.select(title, choices=options, default=selected, instruction=description)
        )

    def checkbox(self, title, choices, description=None) -> List[Any]:
        """Pick any number of values."""
        if not choices:
            raise PromptError(f"No options available for {title}")
        options = [questionary.Choice(choice.title, value=choice.value) for choice in choices]
        return self._ask(questionary.checkbox(title, choices=options, instruction=description))

    def text(self, title, default="", validate=None, password=False, description=None) -> str:
        """Ask for free text."""
        factory = questionary.password if password else questionary.text
        return self._ask(
            factory(
                title,
                default=default or "",
                validate=_questionary_validator(validate),
                instruction=description,
            )
        )


class PlainPrompter(Prompter):
    """Line-based prompts for screen readers."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize prompter."""
        self.console = console or Console(no_color=True, highlight=False)

    def _call(self, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (typer.Abort, KeyboardInterrupt, EOFError) as e:
            raise PromptError("Prompt interrupted") from e

    def _describe(self, description: Optional[str]):
        if description:
            self.console.print(description)

    def note(self, title: str, body: str) -> None:
        """Print a note as plain text."""
        self.console.print(title)
        self.console.print(body)

    def confirm(self, title, default=False, description=None) -> bool:
        """Ask a yes/no question."""
        self._describe(description)
        return self._call(typer.confirm, title, default=default)

    def _pick(self, title: str, choices: List[Choice], default: Any) -> Optional[int]:
        """List numbered choices and return the default's number."""
        self.console.print(title)
        default_number = None
        for number, choice in enumerate(choices, start=1):
            self.console.print(f"  {number}. {choice.title}")
            if default_number is None and choice.value == default:
                default_number = number
        return default_number

    def select(self, title, choices, default=None, description=None) -> Any:
        """Pick one value by number."""
        if not choices:
            raise PromptError(f"No options available for {title}")
        self._describe(description)
        default_number = self._pick(title, choices, default) or 1
        while True:
            number = self._call(typer.prompt, "Enter a number", default=default_number, type=int)
            if 1 <= number <= len(choices):
                return choices[number - 1].value
            self.console.print(f"Invalid: choose a number between 1 and {len(choices)}")

    def checkbox(self, title, choices, description=None) -> List[Any]:
        """Pick values by comma separated numbers."""
        if not choices:
            raise PromptError(f"No options available for {title}")
        self._describe(description)
        self._pick(title, choices, None)
        while True:
            answer = self._call(
                typer.prompt, "Enter numbers separated by commas", default="", show_default=False
            )
            try:
                numbers = [int(part) for part in answer.replace(" ", "").split(",") if part]
            except ValueError:
                self.console.print("Invalid: enter numbers only")
                continue
            if all(1 <= number <= len(choices) for number in numbers):
                return [choices[number - 1].value for number in dict.fromkeys(numbers)]
            self.console.print(f"Invalid: choose numbers between 1 and {len(choices)}")

    def text(self, title, default="", validate=None, password=False, description=None) -> str:
        """Ask for free text, re-asking until it validates."""
        self._describe(description)
        while True:
            kwargs = {"hide_input": password}
            if default:
                kwargs["default"] = default
            elif password:
                kwargs["default"] = ""
                kwargs["show_default"] = False
            value = self._call(typer.prompt, title, **kwargs)
            if validate is None:
                return value
            try:
                validate(value)
            except ValidationError as e:
                self.console.print(f"Invalid: {e}")
                continue
            return value


def make_prompter(accessible: Optional[bool] = None, console: Optional[Console] = None) -> Prompter:
    """Return the prompter for the current interaction mode."""
    if accessible is None:
        accessible = accessible_mode()
    if accessible:
        return PlainPrompter(console=console)
    return QuestionaryPrompter(console=console)
