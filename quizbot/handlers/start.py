import logging
from aiogram import Router
from aiogram.filters import CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message
from aiogram.utils.markdown import hbold

from ..keyboards.start import get_start_keyboard
from ..services.quiz_session import SessionRegistry

router = Router()


@router.message(CommandStart())
async def command_start_handler(message: Message, state: FSMContext, quiz_sessions: SessionRegistry) -> None:
    """
    This handler receives messages with `/start` command,
    drops any quiz in progress and offers to start a new one.
    """
    logging.info("command_start_handler: Received /start command.")
    quiz_sessions.discard(message.from_user.id)
    await state.clear()

    await message.answer(
        f"¡Hola, {hbold(message.from_user.full_name)}!\n\n"
        "Answer a few quick questions and we'll match you with the right Spanish program.",
        reply_markup=get_start_keyboard()
    )
    logging.info("command_start_handler: Sent welcome message.")
