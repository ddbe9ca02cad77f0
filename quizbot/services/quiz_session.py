import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .catalog import QuestionCatalog, QuestionDefinition
from .completion import CompletionTrigger
from .interstitials import InterstitialKind
from .ledger import Answer
from .navigation import Navigator, Stage


@dataclass(frozen=True)
class ScreenView:
    """Everything a renderer needs to draw the current screen."""
    stage: Stage
    question: Optional[QuestionDefinition]
    selected_value: Optional[str]
    interstitial: Optional[InterstitialKind]
    can_go_back: bool
    progress: int
    question_number: int
    total_questions: int
    transitioning: bool


def progress_percent(catalog: QuestionCatalog, question_id: Optional[str]) -> int:
    if not question_id or len(catalog) == 0:
        return 0
    index = catalog.index_of(question_id)
    if index == -1:
        return 0
    # Rounds half up.
    return int(math.floor(100 * (index + 1) / len(catalog) + 0.5))


def question_number(catalog: QuestionCatalog, question_id: Optional[str]) -> int:
    if not question_id:
        return 1
    return catalog.index_of(question_id) + 1


class QuizSession:
    """
    Accepts the three user intents (answer, next, previous) and re-runs the
    completion check after every change.
    """

    def __init__(self, navigator: Navigator, trigger: CompletionTrigger):
        self.navigator = navigator
        self.trigger = trigger
        navigator.subscribe(trigger.check)

    @property
    def catalog(self) -> QuestionCatalog:
        return self.navigator.catalog

    @property
    def completed(self) -> bool:
        return self.navigator.state.completion_fired

    def subscribe(self, listener: Callable[[], None]) -> None:
        self.navigator.subscribe(listener)

    def select_answer(self, question_id: str, value: str) -> None:
        self.navigator.record_answer(Answer(question_id=question_id, value=value))

    def next(self) -> bool:
        stage = self.navigator.state.stage
        if stage == Stage.INTERSTITIAL:
            return self.navigator.exit_interstitial_forward()
        return self.navigator.advance()

    def previous(self) -> bool:
        return self.navigator.retreat()

    def view(self) -> ScreenView:
        state = self.navigator.state
        question = None
        selected = None
        if state.stage == Stage.QUESTIONS:
            question = self.catalog.get(state.current_question_id)
            answer = self.navigator.ledger.get(state.current_question_id) if question else None
            selected = answer.value if answer else None
        return ScreenView(
            stage=state.stage,
            question=question,
            selected_value=selected,
            interstitial=state.active_interstitial,
            can_go_back=self.navigator.can_go_back,
            progress=progress_percent(self.catalog, question.id if question else None),
            question_number=question_number(self.catalog, question.id if question else None),
            total_questions=len(self.catalog),
            transitioning=state.transition_in_flight,
        )

    def close(self) -> None:
        self.navigator.close()


class SessionRegistry:
    """In-memory quiz sessions keyed by chat id."""

    def __init__(self):
        self._sessions: Dict[int, QuizSession] = {}

    def start(self, chat_id: int, session: QuizSession) -> QuizSession:
        self.discard(chat_id)
        self._sessions[chat_id] = session
        logging.info(f"Quiz session started for chat {chat_id}.")
        return session

    def get(self, chat_id: int) -> Optional[QuizSession]:
        return self._sessions.get(chat_id)

    def discard(self, chat_id: int) -> None:
        session = self._sessions.pop(chat_id, None)
        if session is not None:
            session.close()

    def __len__(self) -> int:
        return len(self._sessions)
