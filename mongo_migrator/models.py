from enum import Enum
from typing import Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict

# Answers that close a gate; anything else (including no answer) keeps it open
NEGATIVE_ANSWERS = ("n", "no", "0")


def is_affirmative(answer: Optional[str]) -> bool:
    """Evaluate a yes/no answer with the "default yes" policy."""
    if answer is None:
        return True
    return answer.lower() not in NEGATIVE_ANSWERS


class Domain(str, Enum):
    ORIGIN = "origin"
    DESTINATION = "destination"
    GLOBAL = "global"


class AnswerSet(BaseModel):
    """Raw operator answers, grouped by the server they describe.

    Values are stored exactly as typed. An empty string means the operator
    accepted the default for that question.
    """
    answers: Dict[Domain, Dict[str, str]] = {}

    def model_post_init(self, __context) -> None:
        for domain in Domain:
            self.answers.setdefault(domain, {})

    def record(self, domain: Domain, key: str, value: str) -> None:
        self.answers[domain][key] = value

    def get(self, domain: Domain, key: str, default: str = "") -> str:
        return self.answers[domain].get(key, default)

    @property
    def origin(self) -> Dict[str, str]:
        return self.answers[Domain.ORIGIN]

    @property
    def destination(self) -> Dict[str, str]:
        return self.answers[Domain.DESTINATION]

    @property
    def globals(self) -> Dict[str, str]:
        return self.answers[Domain.GLOBAL]

    @property
    def will_import(self) -> bool:
        return is_affirmative(self.globals.get("willImport"))

    @property
    def keep_backup(self) -> bool:
        return is_affirmative(self.globals.get("keepBackup"))


class Question(BaseModel):
    """A single configuration question shown to the operator."""
    model_config = ConfigDict(frozen=True)

    domain: Domain
    key: str
    # Either literal text or a function of the answers given so far
    prompt: Union[str, Callable[[AnswerSet], str]]
    display_style: str = "white"

    def resolve_prompt(self, answers: AnswerSet) -> str:
        if callable(self.prompt):
            return self.prompt(answers)
        return self.prompt


class MigrationConfig(BaseModel):
    """Core configuration class for the collection migration tool.

    Controls where export files are written and which binaries move the
    data. Connection details are never stored here; they are asked for
    interactively on every run.
    """
    temp_dir: str = "temp"
    export_binary: str = "mongoexport"
    import_binary: str = "mongoimport"
    # Print commands instead of running them
    dry_run: bool = False
    verbose: bool = False
    show_progress: bool = True
