from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

ANY_ANSWER = "*"


@dataclass(frozen=True)
class QuestionOption:
    value: str
    label: str


@dataclass(frozen=True)
class QuestionDefinition:
    """An immutable question: stable id, prompt text and selectable options.

    ``rules`` maps an answer value (or ``ANY_ANSWER``) to the id of the
    question that follows it. A rule whose target is ``END`` finishes the quiz.
    """
    id: str
    prompt: str
    options: Tuple[QuestionOption, ...] = ()
    rules: Mapping[str, Optional[str]] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))

    def option(self, value: str) -> Optional[QuestionOption]:
        for option in self.options:
            if option.value == value:
                return option
        return None


class QuestionCatalog:
    """Ordered, read-only collection of question definitions."""

    def __init__(self, questions: Sequence[QuestionDefinition], webhook_url: Optional[str] = None):
        self._questions: List[QuestionDefinition] = list(questions)
        self._by_id: Dict[str, QuestionDefinition] = {}
        self._index: Dict[str, int] = {}
        for i, question in enumerate(self._questions):
            if question.id in self._by_id:
                raise ValueError(f"Duplicate question id in catalog: {question.id!r}")
            self._by_id[question.id] = question
            self._index[question.id] = i
        self.webhook_url = webhook_url

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[QuestionDefinition]:
        return iter(self._questions)

    @property
    def first_id(self) -> Optional[str]:
        return self._questions[0].id if self._questions else None

    def get(self, question_id: Optional[str]) -> Optional[QuestionDefinition]:
        if question_id is None:
            return None
        return self._by_id.get(question_id)

    def index_of(self, question_id: Optional[str]) -> int:
        if question_id is None:
            return -1
        return self._index.get(question_id, -1)

    def at(self, index: int) -> Optional[QuestionDefinition]:
        if 0 <= index < len(self._questions):
            return self._questions[index]
        return None


def next_question_id(current_id: str, answers, catalog: QuestionCatalog) -> Optional[str]:
    """Resolves the question that follows ``current_id``.

    Branch rules keyed by the recorded answer win, then the wildcard rule,
    then plain catalog order. Returns None once the sequence is exhausted.
    Rule targets are trusted as-is.
    """
    question = catalog.get(current_id)
    if question is None:
        return None

    if question.rules:
        answer = answers.get(current_id)
        if answer is not None and answer.value in question.rules:
            return question.rules[answer.value]
        if ANY_ANSWER in question.rules:
            return question.rules[ANY_ANSWER]

    following = catalog.at(catalog.index_of(current_id) + 1)
    return following.id if following else None


def question_text(question_id: str, catalog: QuestionCatalog) -> str:
    question = catalog.get(question_id)
    return question.prompt if question else question_id


def option_text(question_id: str, value: str, catalog: QuestionCatalog) -> str:
    question = catalog.get(question_id)
    if question is None:
        return value
    option = question.option(value)
    return option.label if option else value
