from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup


def get_start_keyboard() -> InlineKeyboardMarkup:
    """
    Returns the welcome keyboard with a single "start quiz" button.
    """
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="Start the quiz 🚀", callback_data="start_quiz")]
    ])
