"""Prompt interface used by the negotiation steps."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


# Raises scriptcli.errors.ValidationError on bad input
Validator = Callable[[str], None]


@dataclass
class Choice:
    """Selectable option."""
    title: str
    value: Any


class Prompter(ABC):
    """Renders questions and returns answers.

    Implementations raise PromptError when the session cannot be read, and
    re-ask a question while its validator raises ValidationError.
    """

    @abstractmethod
    def note(self, title: str, body: str) -> None:
        """Show an informational note."""
        pass

    @abstractmethod
    def confirm(self, title: str, default: bool = False, description: Optional[str] = None) -> bool:
        """Ask a yes/no question."""
        pass

    @abstractmethod
    def select(
        self,
        title: str,
        choices: List[Choice],
        default: Any = None,
        description: Optional[str] = None,
    ) -> Any:
        """Pick one value from ``choices``."""
        pass

    @abstractmethod
    def checkbox(
        self, title: str, choices: List[Choice], description: Optional[str] = None
    ) -> List[Any]:
        """Pick any number of values from ``choices``."""
        pass

    @abstractmethod
    def text(
        self,
        title: str,
        default: str = "",
        validate: Optional[Validator] = None,
        password: bool = False,
        description: Optional[str] = None,
    ) -> str:
        """Ask for free text."""
        pass
