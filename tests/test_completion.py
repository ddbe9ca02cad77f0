import json

from quizbot.services.catalog import QuestionCatalog
from quizbot.services.completion import CompletionTrigger, build_answer_summary, build_payload
from quizbot.services.ledger import Answer, AnswerLedger
from quizbot.services.navigation import Navigator, Stage

from conftest import make_question


async def test_single_question_quiz_completes_once(make_session, scheduler, notifier, redirector):
    session = make_session(QuestionCatalog([make_question("q1", prompt="Why Spanish?")]))

    session.select_answer("q1", "yes")
    assert session.next() is True

    assert session.completed
    assert session.navigator.state.stage == Stage.COMPLETING
    assert len(notifier.payloads) == 1
    assert json.loads(notifier.payloads[0]["score"]) == {"Why Spanish?": "Yes (q1)"}

    await session.trigger.redirect_task
    assert redirector.urls == ["https://example.com/offer"]

    # Re-checking after firing never dispatches again.
    for _ in range(3):
        assert session.trigger.check() is False
    session.select_answer("q1", "no")
    assert len(notifier.payloads) == 1
    assert redirector.urls == ["https://example.com/offer"]


async def test_no_completion_without_answers(make_session, notifier, redirector):
    session = make_session(QuestionCatalog([make_question("q1")]))

    session.next()

    assert session.navigator.state.stage == Stage.COMPLETING
    assert not session.completed
    assert notifier.payloads == []

    # An answer arriving later satisfies the condition.
    session.select_answer("q1", "no")
    assert session.completed
    assert len(notifier.payloads) == 1
    await session.trigger.redirect_task


def test_empty_catalog_never_completes(make_session, notifier):
    session = make_session(QuestionCatalog([]))
    assert session.trigger.check() is False
    assert not session.completed
    assert notifier.payloads == []


async def test_full_walk_through_six_questions(make_session, scheduler, six_questions, notifier, redirector):
    session = make_session(six_questions)

    for question in six_questions:
        if session.navigator.state.stage == Stage.INTERSTITIAL:
            session.next()
            scheduler.run_all()
        assert session.navigator.state.current_question_id == question.id
        session.select_answer(question.id, "yes")
        session.next()
        scheduler.run_all()

    assert session.completed
    assert session.navigator.state.history == ["q1", "q2", "q3", "q4", "q5", "q6"]
    summary = json.loads(notifier.payloads[0]["score"])
    assert list(summary) == [f"Prompt q{i}?" for i in range(1, 7)]
    await session.trigger.redirect_task


async def test_latch_is_set_before_side_effects(scheduler, identity):
    catalog = QuestionCatalog([make_question("q1")])
    navigator = Navigator(catalog, scheduler=scheduler)
    observed = []

    class ReentrantNotifier:
        def dispatch(self, payload):
            observed.append(navigator.state.completion_fired)
            # Re-entering the check while dispatching must not fire again.
            observed.append(trigger.check())

    class NullRedirector:
        async def redirect(self, url):
            return "direct"

    trigger = CompletionTrigger(navigator, ReentrantNotifier(), NullRedirector(), identity, "https://x")
    navigator.record_answer(Answer("q1", "yes"))
    navigator.advance()

    assert trigger.check() is True
    await trigger.redirect_task
    assert observed == [True, False]
    assert navigator.state.completion_fired


async def test_dispatch_error_does_not_block_redirect(scheduler, identity, redirector):
    catalog = QuestionCatalog([make_question("q1")])
    navigator = Navigator(catalog, scheduler=scheduler)

    class BrokenNotifier:
        def dispatch(self, payload):
            raise RuntimeError("boom")

    trigger = CompletionTrigger(navigator, BrokenNotifier(), redirector, identity, "https://offer")
    navigator.record_answer(Answer("q1", "yes"))
    navigator.advance()

    assert trigger.check() is True
    await trigger.redirect_task
    assert redirector.urls == ["https://offer"]


def test_summary_uses_last_value_and_one_entry_per_question(six_questions):
    ledger = AnswerLedger()
    ledger.record(Answer("q1", "yes"))
    ledger.record(Answer("q2", "no"))
    ledger.record(Answer("q1", "no"))

    assert build_answer_summary(ledger, six_questions) == {
        "Prompt q1?": "No (q1)",
        "Prompt q2?": "No (q2)",
    }


def test_payload_carries_fixed_identity(identity):
    payload = build_payload(identity, {"¿Por qué?": "Viajar"})
    assert payload == {
        "name": "Spanish Learner",
        "email": "learner@example.com",
        "score": '{"¿Por qué?": "Viajar"}',
        "quizz-id": "fall-sale",
    }
