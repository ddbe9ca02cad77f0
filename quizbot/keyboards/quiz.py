from typing import Optional, Tuple

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.markdown import hbold, hitalic
from aiogram.utils.text_decorations import html_decoration

from ..services.interstitials import InterstitialKind
from ..services.navigation import Stage
from ..services.quiz_session import ScreenView

NEXT_CALLBACK = "quiz_next"
PREV_CALLBACK = "quiz_prev"
ANSWER_PREFIX = "q_answer"

PROGRESS_BAR_WIDTH = 10

INTERSTITIAL_CONTENT = {
    InterstitialKind.A: (
        "You're in the right place!",
        [
            "Live classes with native Spanish teachers",
            "A plan built around your goals",
            "Thousands of adults already speaking with confidence",
        ],
    ),
    InterstitialKind.B: (
        "Busy schedule? No problem.",
        [
            "Short lessons that fit your week",
            "Classes available morning to night",
            "Practice anywhere from your phone",
        ],
    ),
    InterstitialKind.C: (
        "Almost done!",
        [
            "Your personalised recommendation is ready",
            "One more question to tailor your offer",
        ],
    ),
}


def answer_callback(question_id: str, option_index: int) -> str:
    # The option index keeps callback data under Telegram's 64-byte limit
    return f"{ANSWER_PREFIX}:{question_id}:{option_index}"


def parse_answer_callback(data: str) -> Tuple[str, int]:
    _, payload = data.split(":", 1)
    question_id, index = payload.rsplit(":", 1)
    return question_id, int(index)


def render_progress(view: ScreenView) -> str:
    filled = round(PROGRESS_BAR_WIDTH * view.progress / 100)
    bar = "▰" * filled + "▱" * (PROGRESS_BAR_WIDTH - filled)
    return f"Question {view.question_number} of {view.total_questions}\n{bar} {view.progress}%"


def get_question_keyboard(view: ScreenView) -> InlineKeyboardMarkup:
    """
    Option buttons for the current question, the chosen one marked,
    then Back / Next navigation. Navigation is hidden while a transition
    is in flight, since the navigator drops those presses anyway.
    """
    buttons = []
    for index, option in enumerate(view.question.options):
        text = option.label
        if option.value == view.selected_value:
            text = f"✅ {text}"
        buttons.append([InlineKeyboardButton(text=text, callback_data=answer_callback(view.question.id, index))])

    nav_row = []
    if view.can_go_back and not view.transitioning:
        nav_row.append(InlineKeyboardButton(text="⬅️ Back", callback_data=PREV_CALLBACK))
    if view.selected_value is not None and not view.transitioning:
        nav_row.append(InlineKeyboardButton(text="Next ➡️", callback_data=NEXT_CALLBACK))
    if nav_row:
        buttons.append(nav_row)

    return InlineKeyboardMarkup(inline_keyboard=buttons)


def get_interstitial_keyboard(view: ScreenView) -> Optional[InlineKeyboardMarkup]:
    if view.transitioning:
        return None
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="⬅️ Back", callback_data=PREV_CALLBACK),
            InlineKeyboardButton(text="Continue ➡️", callback_data=NEXT_CALLBACK),
        ]
    ])


def get_redirect_keyboard(url: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🎁 See my special offer", url=url)]
    ])


def render_screen(view: ScreenView) -> Tuple[str, InlineKeyboardMarkup | None]:
    if view.stage == Stage.QUESTIONS and view.question is not None:
        text = f"{render_progress(view)}\n\n{hbold(view.question.prompt)}"
        return text, get_question_keyboard(view)

    if view.stage == Stage.INTERSTITIAL and view.interstitial is not None:
        title, features = INTERSTITIAL_CONTENT[view.interstitial]
        lines = [hbold(title), ""] + [f"• {html_decoration.quote(feature)}" for feature in features]
        return "\n".join(lines), get_interstitial_keyboard(view)

    return hitalic("Finalizing..."), None
