from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.database import db
from app.config import settings, CLASS_MIN, CLASS_MAX
from app.models.quiz_state import AttemptState, QuizConfig, attempt_store, config_errors
from app.utils.auth_utils import require_student
from app.utils.question_utils import distinct_sorted, fetch_questions_with_options
from app.utils.time_utils import get_ist_time
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
import logging
import random

router = APIRouter()

class SaveAnswerRequest(BaseModel):
    question_id: str
    selected_option_id: str
    time_taken_seconds: int = Field(0, ge=0)

def get_owned_state(attempt_id: str, current_user: dict) -> AttemptState:
    state = attempt_store.get(attempt_id)
    if not state:
        raise HTTPException(status_code=404, detail="No active attempt")
    if state.user_id != str(current_user["id"]):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return state

def persist_answer(state: AttemptState, question_id: str) -> None:
    """Save one answer row; failures are logged and the local answer kept"""
    answer = state.answers[str(question_id)]
    try:
        db.upsert("attempt_answers", {
            "attempt_id": state.attempt_id,
            "question_id": answer.question_id,
            "selected_option_id": answer.selected_option_id,
            "time_taken_seconds": answer.time_taken_seconds,
        }, on_conflict="attempt_id,question_id")
    except Exception as e:
        logging.error(f"Error saving answer for attempt {state.attempt_id}: {e}")

@router.get("/classes")
async def get_classes(current_user: dict = Depends(require_student)):
    """Classes that have active questions"""
    try:
        rows = db.select("questions", "class", {"is_active": True})
        classes = sorted({row["class"] for row in rows if CLASS_MIN <= row["class"] <= CLASS_MAX})
        return {"classes": classes}
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch classes: {str(e)}")

@router.get("/subjects")
async def get_subjects(
    class_: Optional[int] = Query(None, alias="class", description="Only subjects taught in this class"),
    current_user: dict = Depends(require_student)
):
    """Subjects that have active questions"""
    try:
        filters = {"is_active": True}
        if class_ is not None:
            filters["class"] = class_
        rows = db.select("questions", "subject", filters)
        return {"subjects": distinct_sorted(rows, "subject")}
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch subjects: {str(e)}")

@router.get("/scopes")
async def get_scopes(
    class_: int = Query(..., alias="class"),
    subject: str = Query(...),
    current_user: dict = Depends(require_student)
):
    """Chapters and topics available for a class and subject"""
    try:
        rows = db.select("questions", "chapter,topic", {"class": class_, "subject": subject, "is_active": True})
        return {
            "chapters": distinct_sorted(rows, "chapter"),
            "topics": distinct_sorted(rows, "topic"),
        }
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch chapters and topics: {str(e)}")

@router.post("/config/validate")
async def validate_config(config: Dict[str, Any], current_user: dict = Depends(require_student)):
    """Check a quiz configuration and report errors per field"""
    errors = config_errors(config)
    return {"valid": not errors, "errors": errors}

@router.post("/attempts")
async def start_attempt(config: QuizConfig, current_user: dict = Depends(require_student)):
    """Start a quiz attempt for the chosen scope"""
    try:
        attempt_store.cleanup_stale(settings.attempt_state_max_age_hours)

        filters = {"class": config.class_, "subject": config.subject, "is_active": True}
        filters[config.mode] = config.scope_value
        questions = fetch_questions_with_options(filters)

        if not questions:
            raise HTTPException(status_code=404, detail="No questions found for the selected criteria")

        attempt = db.insert("attempts", {
            "user_id": current_user["id"],
            "class": config.class_,
            "subject": config.subject,
            "scope_type": config.mode,
            "scope_value": config.scope_value,
            "question_count": config.question_count,
        })

        random.shuffle(questions)
        state = attempt_store.add(AttemptState(
            attempt=attempt,
            user_id=str(current_user["id"]),
            questions=questions[:config.question_count],
        ))

        logging.info(f"Attempt {state.attempt_id} started with {state.total_questions} questions")
        return {"attempt": attempt, **state.snapshot()}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to start quiz attempt: {str(e)}")

@router.get("/attempts/{attempt_id}")
async def get_attempt_state(attempt_id: str, current_user: dict = Depends(require_student)):
    """Current question and progress of an active attempt"""
    return get_owned_state(attempt_id, current_user).snapshot()

@router.post("/attempts/{attempt_id}/answers")
async def save_answer(attempt_id: str, answer: SaveAnswerRequest, current_user: dict = Depends(require_student)):
    """Record the selected option for a question"""
    state = get_owned_state(attempt_id, current_user)
    try:
        state.record_answer(answer.question_id, answer.selected_option_id, answer.time_taken_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    persist_answer(state, answer.question_id)
    return state.snapshot()

@router.post("/attempts/{attempt_id}/next")
async def next_question(attempt_id: str, current_user: dict = Depends(require_student)):
    """Move to the next question; stays on the last one"""
    state = get_owned_state(attempt_id, current_user)
    state.next_question()
    return state.snapshot()

@router.post("/attempts/{attempt_id}/previous")
async def previous_question(attempt_id: str, current_user: dict = Depends(require_student)):
    """Move to the previous question; stays on the first one"""
    state = get_owned_state(attempt_id, current_user)
    state.previous_question()
    return state.snapshot()

@router.post("/attempts/{attempt_id}/submit")
async def submit_attempt(attempt_id: str, current_user: dict = Depends(require_student)):
    """Score the attempt and store the result"""
    state = get_owned_state(attempt_id, current_user)
    try:
        correct_count = state.correct_count()
        score = state.score()

        answer_rows = state.answer_rows()
        if answer_rows:
            db.upsert("attempt_answers", answer_rows, on_conflict="attempt_id,question_id")

        db.update("attempts", {
            "score": score,
            "completed_at": get_ist_time().isoformat(),
        }, {"id": state.attempt_id})

        attempt_store.remove(state.attempt_id)
        logging.info(f"Attempt {state.attempt_id} submitted: {correct_count}/{state.total_questions}")

        return {
            "attempt_id": state.attempt_id,
            "score": score,
            "correct_count": correct_count,
            "total_questions": state.total_questions,
        }

    except Exception as e:
        logging.error(f"Submit failed for attempt {attempt_id}: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to submit attempt: {str(e)}")

@router.delete("/attempts/{attempt_id}")
async def reset_attempt(attempt_id: str, current_user: dict = Depends(require_student)):
    """Discard the in-progress state of an attempt"""
    state = get_owned_state(attempt_id, current_user)
    attempt_store.remove(state.attempt_id)
    return {"message": "Attempt reset", "attempt_id": state.attempt_id}
