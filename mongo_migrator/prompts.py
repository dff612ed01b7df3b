import logging
from typing import Iterable, Optional

from rich.console import Console

from .exceptions import InputStreamError
from .models import AnswerSet, Domain, Question

logger = logging.getLogger(__name__)


class ConsoleTerminal:
    """Line based terminal I/O backed by a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def write_line(self, text: str, style: str = "white") -> None:
        # Prompts contain literal brackets such as "[Mandatory]"; never parse them as markup
        self.console.print(text, style=style, markup=False, highlight=False)

    def read_line(self, prompt: str = "") -> str:
        try:
            return self.console.input(prompt)
        except (EOFError, KeyboardInterrupt) as e:
            raise InputStreamError("Input stream closed before all questions were answered") from e


class PromptEngine:
    """Ask questions in order and collect the raw answers.

    Destination questions are skipped when the operator declined the import,
    so the will-import question has to come before them in the list.
    """

    def __init__(self, terminal):
        self.terminal = terminal

    def should_ask(self, question: Question, answers: AnswerSet) -> bool:
        return question.domain != Domain.DESTINATION or answers.will_import

    def run_all(self, questions: Iterable[Question]) -> AnswerSet:
        answers = AnswerSet()
        for question in questions:
            if not self.should_ask(question, answers):
                logger.debug(f"Skipping {question.domain.value}.{question.key}")
                continue
            self.terminal.write_line(question.resolve_prompt(answers), question.display_style)
            answers.record(question.domain, question.key, self.terminal.read_line(""))
        return answers
