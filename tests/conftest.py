import os
from typing import Callable, List

import pytest

# Handlers import the settings module, which requires a token.
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")

from quizbot.services.catalog import QuestionCatalog, QuestionDefinition, QuestionOption
from quizbot.services.completion import CompletionIdentity, CompletionTrigger
from quizbot.services.navigation import NavigationTimings, Navigator
from quizbot.services.quiz_session import QuizSession


class ManualHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Fake clock: callbacks only run when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.handles: List[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((h for h in self.pending if h.when <= self.now), key=lambda h: h.when)
        for handle in due:
            self.handles.remove(handle)
            handle.callback()

    def run_all(self) -> None:
        while self.pending:
            handle = min(self.pending, key=lambda h: h.when)
            self.now = max(self.now, handle.when)
            self.handles.remove(handle)
            handle.callback()


class FakeNotifier:
    def __init__(self):
        self.payloads = []

    def dispatch(self, payload):
        self.payloads.append(payload)
        return None


class FakeRedirector:
    def __init__(self):
        self.urls = []

    async def redirect(self, url):
        self.urls.append(url)
        return "direct"


def make_question(question_id: str, prompt: str = None, rules=None) -> QuestionDefinition:
    return QuestionDefinition(
        id=question_id,
        prompt=prompt or f"Prompt {question_id}?",
        options=(
            QuestionOption(value="yes", label=f"Yes ({question_id})"),
            QuestionOption(value="no", label=f"No ({question_id})"),
        ),
        rules=rules or {},
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def timings():
    return NavigationTimings()


@pytest.fixture
def six_questions():
    return QuestionCatalog([make_question(f"q{i}") for i in range(1, 7)])


@pytest.fixture
def navigator(six_questions, scheduler):
    return Navigator(six_questions, scheduler=scheduler)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def redirector():
    return FakeRedirector()


@pytest.fixture
def identity():
    return CompletionIdentity(name="Spanish Learner", email="learner@example.com", quiz_id="fall-sale")


@pytest.fixture
def make_session(scheduler, notifier, redirector, identity):
    def factory(catalog: QuestionCatalog) -> QuizSession:
        navigator = Navigator(catalog, scheduler=scheduler)
        trigger = CompletionTrigger(
            navigator, notifier=notifier, redirector=redirector,
            identity=identity, redirect_url="https://example.com/offer",
        )
        return QuizSession(navigator, trigger)

    return factory
