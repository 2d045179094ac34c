from .question import Question, QuestionOption
from .attempt import Attempt, AttemptAnswer

__all__ = ["Question", "QuestionOption", "Attempt", "AttemptAnswer"]
