import asyncio
import logging
from typing import Optional, Set

from aiogram import Router, F, types, Bot
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.fsm.context import FSMContext

from ..config import settings
from ..keyboards.quiz import (
    ANSWER_PREFIX,
    NEXT_CALLBACK,
    PREV_CALLBACK,
    get_redirect_keyboard,
    parse_answer_callback,
    render_screen,
)
from ..services.catalog import QuestionCatalog
from ..services.catalog_service import CatalogService
from ..services.completion import CompletionTrigger
from ..services.navigation import Navigator
from ..services.notifier import Redirector, WebhookNotifier
from ..services.quiz_session import QuizSession, SessionRegistry
from ..services.scheduler import LoopScheduler
from ..states.quiz import QuizFSM

router = Router()

NO_SESSION_TEXT = "This quiz has expired. Send /start to begin again."


class QuizMessage:
    """
    Keeps one Telegram message in sync with a quiz session.
    Navigation listeners are synchronous, so every edit is scheduled as a task.
    """

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        message_id: int,
        session: QuizSession,
        registry: SessionRegistry,
        state: Optional[FSMContext] = None,
    ):
        self.bot = bot
        self.chat_id = chat_id
        self.message_id = message_id
        self.session = session
        self.registry = registry
        self.state = state
        self._last_text: Optional[str] = None
        self._tasks: Set[asyncio.Task] = set()

    def on_change(self) -> None:
        if self.session.completed:
            # The redirect owns the message from here on.
            self.registry.discard(self.chat_id)
            if self.state is not None:
                self._spawn(self.state.clear())
            return
        self._spawn(self.render())

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def render(self) -> None:
        text, markup = render_screen(self.session.view())
        snapshot = f"{text}|{markup.model_dump_json() if markup else ''}"
        if snapshot == self._last_text:
            return
        self._last_text = snapshot
        await self._edit(text, markup)

    async def navigate(self, url: str) -> None:
        await self._edit("Redirecting you to our special offer...", get_redirect_keyboard(url))

    async def _edit(self, text: str, markup) -> None:
        try:
            await self.bot.edit_message_text(
                chat_id=self.chat_id, message_id=self.message_id,
                text=text, reply_markup=markup
            )
        except TelegramBadRequest as e:
            if "message is not modified" not in str(e):
                logging.error(f"Failed to update quiz message in chat {self.chat_id}: {e}")
        except TelegramAPIError as e:
            logging.error(f"Failed to update quiz message in chat {self.chat_id}: {e}")


def build_session(
    bot: Bot,
    chat_id: int,
    message_id: int,
    catalog: QuestionCatalog,
    registry: SessionRegistry,
    state: Optional[FSMContext] = None,
) -> QuizMessage:
    """ Wires navigator, completion trigger and message renderer for one chat. """
    navigator = Navigator(catalog, scheduler=LoopScheduler(), timings=settings.navigation_timings)
    notifier = WebhookNotifier(
        catalog.webhook_url or settings.COMPLETION_WEBHOOK_URL,
        timeout=settings.COMPLETION_WEBHOOK_TIMEOUT,
    )

    # Created first so the trigger can point its redirect at the message.
    message = QuizMessage(bot, chat_id, message_id, session=None, registry=registry, state=state)
    trigger = CompletionTrigger(
        navigator,
        notifier=notifier,
        redirector=Redirector(navigate=message.navigate),
        identity=settings.completion_identity,
        redirect_url=settings.REDIRECT_URL,
    )
    session = QuizSession(navigator, trigger)
    message.session = session
    session.subscribe(message.on_change)
    registry.start(chat_id, session)
    return message


@router.callback_query(F.data == "start_quiz")
async def start_quiz_handler(cb: types.CallbackQuery, state: FSMContext, catalog_service: CatalogService, quiz_sessions: SessionRegistry):
    catalog = catalog_service.get_catalog(settings.QUIZ_TITLE)
    if catalog is None or len(catalog) == 0:
        await cb.message.edit_text("The quiz is not configured yet.")
        await cb.answer()
        return

    await state.set_state(QuizFSM.IN_QUIZ)
    message = build_session(cb.bot, cb.from_user.id, cb.message.message_id, catalog, quiz_sessions, state=state)
    await message.render()
    await cb.answer()


@router.callback_query(F.data.startswith(f"{ANSWER_PREFIX}:"))
async def answer_handler(cb: types.CallbackQuery, quiz_sessions: SessionRegistry):
    session = quiz_sessions.get(cb.from_user.id)
    if session is None:
        await cb.answer(NO_SESSION_TEXT, show_alert=True)
        return

    question_id, option_index = parse_answer_callback(cb.data)
    question = session.catalog.get(question_id)
    if question is None or not 0 <= option_index < len(question.options):
        logging.warning(f"Stale answer callback {cb.data!r} from chat {cb.from_user.id}")
        await cb.answer()
        return

    session.select_answer(question_id, question.options[option_index].value)
    await cb.answer()


@router.callback_query(F.data == NEXT_CALLBACK)
async def next_handler(cb: types.CallbackQuery, quiz_sessions: SessionRegistry):
    session = quiz_sessions.get(cb.from_user.id)
    if session is None:
        await cb.answer(NO_SESSION_TEXT, show_alert=True)
        return

    view = session.view()
    if view.question is not None and view.selected_value is None:
        await cb.answer("Please choose an answer first.")
        return

    session.next()
    await cb.answer()


@router.callback_query(F.data == PREV_CALLBACK)
async def previous_handler(cb: types.CallbackQuery, quiz_sessions: SessionRegistry):
    session = quiz_sessions.get(cb.from_user.id)
    if session is None:
        await cb.answer(NO_SESSION_TEXT, show_alert=True)
        return

    session.previous()
    await cb.answer()


@router.message(QuizFSM.IN_QUIZ, F.text)
async def text_during_quiz_handler(message: types.Message, state: FSMContext, quiz_sessions: SessionRegistry):
    if quiz_sessions.get(message.from_user.id) is None:
        await state.clear()
        await message.answer(NO_SESSION_TEXT)
        return
    await message.answer("Please use the buttons to answer.")
