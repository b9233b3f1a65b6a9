"""FSM states for MathBot."""

from aiogram.fsm.state import State, StatesGroup


class SolveFlow(StatesGroup):
    """States for question entry and follow-up chat."""

    # Waiting for the MCQ question text or photo
    mcq_question = State()

    # Waiting for the MCQ options
    mcq_options = State()

    # A follow-up conversation is active
    chatting = State()
