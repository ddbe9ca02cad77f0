import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .catalog import QuestionCatalog, next_question_id
from .interstitials import DEFAULT_BINDINGS, InterstitialBindings, InterstitialKind
from .ledger import Answer, AnswerLedger
from .scheduler import Cancelable, LoopScheduler, Scheduler


class Stage(str, enum.Enum):
    QUESTIONS = "questions"
    INTERSTITIAL = "interstitial"
    COMPLETING = "completing"


@dataclass(frozen=True)
class NavigationTimings:
    """Presentation delays, in seconds."""
    question_fade: float = 0.05
    interstitial_enter: float = 0.3
    interstitial_exit: float = 0.5


@dataclass
class NavigationState:
    stage: Stage = Stage.QUESTIONS
    current_question_id: Optional[str] = None
    history: List[str] = field(default_factory=list)
    active_interstitial: Optional[InterstitialKind] = None
    transition_in_flight: bool = False
    completion_fired: bool = False


Listener = Callable[[], None]


class Navigator:
    """
    Decides which screen is shown next.

    Every move goes through a timed transition. While one is pending, further
    navigation intents are dropped; answers can still be recorded. State is
    only changed when the scheduled callback fires, and a closed navigator
    ignores callbacks that fire late.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        ledger: Optional[AnswerLedger] = None,
        bindings: InterstitialBindings = DEFAULT_BINDINGS,
        scheduler: Optional[Scheduler] = None,
        timings: Optional[NavigationTimings] = None,
        resolver=next_question_id,
    ):
        self.catalog = catalog
        self.ledger = ledger if ledger is not None else AnswerLedger()
        self.bindings = bindings
        self.scheduler = scheduler or LoopScheduler()
        self.timings = timings or NavigationTimings()
        self._resolve = resolver
        self._listeners: List[Listener] = []
        self._pending: Optional[Cancelable] = None
        self._closed = False

        first_id = catalog.first_id
        if first_id is None:
            self.state = NavigationState(stage=Stage.COMPLETING)
        else:
            self.state = NavigationState(current_question_id=first_id, history=[first_id])

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def can_go_back(self) -> bool:
        if self.state.stage == Stage.INTERSTITIAL:
            return True
        return self.state.stage == Stage.QUESTIONS and len(self.state.history) > 1

    def record_answer(self, answer: Answer) -> None:
        self.ledger.record(answer)
        self._notify()

    def advance(self) -> bool:
        state = self.state
        if self._closed or state.transition_in_flight or state.stage != Stage.QUESTIONS:
            return False
        current_id = state.current_question_id
        if current_id is None:
            return False

        next_id = self._resolve(current_id, self.ledger, self.catalog)
        if next_id is None:
            logging.info(f"Question sequence exhausted after {current_id}.")
            state.stage = Stage.COMPLETING
            state.current_question_id = None
            self._notify()
            return True

        kind = self.bindings.kind_for(current_id, next_id)
        if kind is not None:
            def enter_interstitial():
                state.stage = Stage.INTERSTITIAL
                state.active_interstitial = kind

            self._begin(self.timings.interstitial_enter, enter_interstitial)
        else:
            def show_next():
                state.current_question_id = next_id
                state.history.append(next_id)

            self._begin(self.timings.question_fade, show_next)
        return True

    def retreat(self) -> bool:
        state = self.state
        if self._closed or state.transition_in_flight:
            return False

        if state.stage == Stage.INTERSTITIAL:
            previous_id = self.bindings.reverse_target(state.active_interstitial)
            if previous_id is None:
                return False

            def leave_backwards():
                state.stage = Stage.QUESTIONS
                state.current_question_id = previous_id
                state.active_interstitial = None

            self._begin(self.timings.interstitial_exit, leave_backwards)
            return True

        if state.stage != Stage.QUESTIONS or len(state.history) <= 1:
            return False

        def step_back():
            state.history.pop()
            state.current_question_id = state.history[-1]

        self._begin(self.timings.question_fade, step_back)
        return True

    def exit_interstitial_forward(self) -> bool:
        state = self.state
        if self._closed or state.transition_in_flight or state.stage != Stage.INTERSTITIAL:
            return False
        next_id = self.bindings.forward_target(state.active_interstitial)
        if next_id is None:
            return False

        def leave_forwards():
            state.stage = Stage.QUESTIONS
            state.current_question_id = next_id
            state.history.append(next_id)
            state.active_interstitial = None

        self._begin(self.timings.interstitial_exit, leave_forwards)
        return True

    def close(self) -> None:
        self._closed = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._listeners.clear()

    def _begin(self, delay: float, apply: Callable[[], None]) -> None:
        self.state.transition_in_flight = True

        def complete():
            if self._closed:
                return
            self._pending = None
            apply()
            self.state.transition_in_flight = False
            logging.debug(
                f"Transition complete: stage={self.state.stage.value} "
                f"question={self.state.current_question_id} history={self.state.history}"
            )
            self._notify()

        self._pending = self.scheduler.call_later(delay, complete)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
