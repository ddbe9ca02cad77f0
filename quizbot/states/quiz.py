from aiogram.fsm.state import StatesGroup, State


class QuizFSM(StatesGroup):
    """
    Finite State Machine for the quiz.
    A single state; screen-level navigation lives in the QuizSession.
    """
    IN_QUIZ = State()
