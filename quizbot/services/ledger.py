from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional


@dataclass(frozen=True)
class Answer:
    question_id: str
    value: str


class AnswerLedger:
    """
    Recorded answers in insertion order, at most one per question.
    Re-answering a question replaces the value but keeps its position.
    """

    def __init__(self):
        self._answers: List[Answer] = []
        self._positions: Dict[str, int] = {}

    def record(self, answer: Answer) -> None:
        position = self._positions.get(answer.question_id)
        if position is None:
            self._positions[answer.question_id] = len(self._answers)
            self._answers.append(answer)
        else:
            self._answers[position] = answer

    def get(self, question_id: str) -> Optional[Answer]:
        position = self._positions.get(question_id)
        return self._answers[position] if position is not None else None

    def is_empty(self) -> bool:
        return not self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __iter__(self) -> Iterator[Answer]:
        return iter(list(self._answers))
