import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .catalog import QuestionCatalog, option_text, question_text
from .ledger import AnswerLedger
from .navigation import Navigator, Stage
from .notifier import Redirector, WebhookNotifier


@dataclass(frozen=True)
class CompletionIdentity:
    """Fixed sender tags sent with every completion, set by the operator."""
    name: str
    email: str
    quiz_id: str


def build_answer_summary(ledger: AnswerLedger, catalog: QuestionCatalog) -> Dict[str, str]:
    """ Maps each answered question's prompt to the label of the chosen option. """
    summary = {}
    for answer in ledger:
        summary[question_text(answer.question_id, catalog)] = option_text(answer.question_id, answer.value, catalog)
    return summary


def build_payload(identity: CompletionIdentity, summary: Dict[str, str]) -> Dict[str, str]:
    return {
        "name": identity.name,
        "email": identity.email,
        "score": json.dumps(summary, ensure_ascii=False),
        "quizz-id": identity.quiz_id,
    }


class CompletionTrigger:
    """
    One-shot gate run after every navigation or ledger change.

    Fires when the questions are exhausted and at least one answer exists.
    The latch on the navigation state is set before any side effect, so a
    re-entrant check can never dispatch twice.
    """

    def __init__(
        self,
        navigator: Navigator,
        notifier: WebhookNotifier,
        redirector: Redirector,
        identity: CompletionIdentity,
        redirect_url: str,
    ):
        self.navigator = navigator
        self.notifier = notifier
        self.redirector = redirector
        self.identity = identity
        self.redirect_url = redirect_url
        self.summary: Optional[Dict[str, str]] = None
        self.redirect_task: Optional[asyncio.Task] = None

    def should_fire(self) -> bool:
        state = self.navigator.state
        return (
            not state.completion_fired
            and state.stage == Stage.COMPLETING
            and state.current_question_id is None
            and not self.navigator.ledger.is_empty()
        )

    def check(self) -> bool:
        if not self.should_fire():
            return False
        self.navigator.state.completion_fired = True

        logging.info("=== QUIZ COMPLETE - SENDING WEBHOOK & REDIRECT ===")
        self.summary = build_answer_summary(self.navigator.ledger, self.navigator.catalog)
        payload = build_payload(self.identity, self.summary)

        try:
            self.notifier.dispatch(payload)
        except Exception as e:
            logging.error(f"Could not dispatch completion webhook: {e}")

        self.redirect_task = asyncio.get_running_loop().create_task(self.redirector.redirect(self.redirect_url))
        return True
