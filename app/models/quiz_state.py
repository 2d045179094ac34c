from pydantic import BaseModel, Field, ValidationError, model_validator
from typing import Any, Dict, List, Literal, Optional
from app.config import CLASS_MIN, CLASS_MAX
from app.utils.scoring import calculate_score, count_correct
import time

SCOPE_ERROR = "Either chapter or topic must be selected based on mode"

class QuizConfig(BaseModel):
    class_: int = Field(..., alias="class", ge=CLASS_MIN, le=CLASS_MAX)
    subject: str = Field(..., min_length=1)
    mode: Literal["chapter", "topic"]
    chapter: Optional[str] = None
    topic: Optional[str] = None
    question_count: Literal[10, 20]

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def check_scope(self):
        if self.mode == "chapter":
            valid = bool(self.chapter) and not self.topic
        else:
            valid = bool(self.topic) and not self.chapter
        if not valid:
            raise ValueError(SCOPE_ERROR)
        return self

    @property
    def scope_value(self) -> str:
        return self.chapter if self.mode == "chapter" else self.topic

def config_errors(data: Dict[str, Any]) -> Dict[str, str]:
    """Validate a quiz config, returning field name to message (empty when valid)"""
    try:
        QuizConfig.model_validate(data)
        return {}
    except ValidationError as e:
        errors = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "scope"
            errors.setdefault(field, err["msg"])
        return errors

class AnswerRecord(BaseModel):
    question_id: str
    selected_option_id: str
    time_taken_seconds: int = 0

def student_view(question: Dict[str, Any]) -> Dict[str, Any]:
    """Question as served to a student: options in order, correctness hidden"""
    options = sorted(question.get("options", []), key=lambda o: o.get("option_order", 0))
    return {
        "id": question["id"],
        "question_text": question.get("question_text"),
        "question_image_url": question.get("question_image_url"),
        "options": [
            {
                "id": opt["id"],
                "option_text": opt.get("option_text"),
                "option_image_url": opt.get("option_image_url"),
                "option_order": opt.get("option_order"),
            }
            for opt in options
        ],
    }

class AttemptState(BaseModel):
    attempt: Dict[str, Any]
    user_id: str
    questions: List[Dict[str, Any]] = []
    current_index: int = 0
    answers: Dict[str, AnswerRecord] = {}
    created_at: float = Field(default_factory=time.time)

    @property
    def attempt_id(self) -> str:
        return str(self.attempt["id"])

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Dict[str, Any]]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def has_next(self) -> bool:
        return self.current_index < len(self.questions) - 1

    @property
    def has_previous(self) -> bool:
        return self.current_index > 0

    @property
    def progress(self) -> float:
        if not self.questions:
            return 0
        return (self.current_index + 1) / len(self.questions) * 100

    def get_question(self, question_id: str) -> Optional[Dict[str, Any]]:
        for question in self.questions:
            if str(question["id"]) == str(question_id):
                return question
        return None

    def next_question(self) -> None:
        self.current_index = max(0, min(self.current_index + 1, len(self.questions) - 1))

    def previous_question(self) -> None:
        self.current_index = max(self.current_index - 1, 0)

    def record_answer(self, question_id: str, selected_option_id: str, time_taken_seconds: int) -> AnswerRecord:
        question = self.get_question(question_id)
        if question is None:
            raise ValueError("Question is not part of this attempt")
        if not any(str(opt["id"]) == str(selected_option_id) for opt in question.get("options", [])):
            raise ValueError("Option does not belong to this question")

        record = AnswerRecord(
            question_id=str(question_id),
            selected_option_id=str(selected_option_id),
            time_taken_seconds=max(0, int(time_taken_seconds)),
        )
        self.answers[str(question_id)] = record
        return record

    def correct_count(self) -> int:
        return count_correct(
            self.questions,
            {qid: answer.selected_option_id for qid, answer in self.answers.items()},
        )

    def score(self) -> float:
        return calculate_score(self.correct_count(), self.total_questions)

    def answer_rows(self) -> List[Dict[str, Any]]:
        return [
            {
                "attempt_id": self.attempt_id,
                "question_id": answer.question_id,
                "selected_option_id": answer.selected_option_id,
                "time_taken_seconds": answer.time_taken_seconds,
            }
            for answer in self.answers.values()
        ]

    def snapshot(self) -> Dict[str, Any]:
        current = self.current_question
        selected = self.answers.get(str(current["id"])) if current else None
        return {
            "attempt_id": self.attempt_id,
            "current_index": self.current_index,
            "total_questions": self.total_questions,
            "current_question": student_view(current) if current else None,
            "selected_option_id": selected.selected_option_id if selected else None,
            "answered": len(self.answers),
            "has_next": self.has_next,
            "has_previous": self.has_previous,
            "progress": round(self.progress, 2),
        }

# In-memory storage
class AttemptStore:
    def __init__(self):
        self.states: Dict[str, AttemptState] = {}

    def add(self, state: AttemptState) -> AttemptState:
        self.states[state.attempt_id] = state
        return state

    def get(self, attempt_id: str) -> Optional[AttemptState]:
        return self.states.get(str(attempt_id))

    def remove(self, attempt_id: str) -> None:
        self.states.pop(str(attempt_id), None)

    def cleanup_stale(self, max_age_hours: int = 2) -> int:
        """Drop states older than max_age_hours and return how many were removed"""
        cutoff = time.time() - max_age_hours * 3600
        stale = [aid for aid, state in self.states.items() if state.created_at < cutoff]
        for attempt_id in stale:
            self.remove(attempt_id)
        return len(stale)

# Global attempt storage instance
attempt_store = AttemptStore()
