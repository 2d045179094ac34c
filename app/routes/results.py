from fastapi import APIRouter, Depends, HTTPException
from app.database import db
from app.utils.auth_utils import get_current_user, require_student, is_admin_user
from app.utils.analytics import scope_averages, score_trend
from app.utils.question_utils import fetch_questions_with_options
from app.utils.scoring import is_answer_correct

router = APIRouter()

def find_option(question: dict, option_id) -> dict:
    for option in question.get("options", []):
        if str(option["id"]) == str(option_id):
            return option
    return None

@router.get("/me/dashboard")
async def get_my_dashboard(current_user: dict = Depends(require_student)):
    """Five most recent attempts of the current student"""
    try:
        attempts = db.select(
            "attempts", "*", {"user_id": current_user["id"]},
            limit=5, order_by="created_at", desc=True
        )
        return {"recent_attempts": attempts}
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch recent attempts: {str(e)}")

@router.get("/me/analytics")
async def get_my_analytics(current_user: dict = Depends(require_student)):
    """Score trend and chapter/topic averages for the current student"""
    try:
        attempts = db.select(
            "attempts", "*", {"user_id": current_user["id"]},
            order_by="created_at", desc=True
        )

        return {
            "score_trend": score_trend(attempts, limit=10),
            "chapter_performance": scope_averages(attempts, "chapter"),
            "topic_performance": scope_averages(attempts, "topic"),
            "recent_attempts": attempts[:10],
            "total_attempts": len(attempts),
        }
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch analytics: {str(e)}")

@router.get("/{attempt_id}")
async def get_attempt_result(attempt_id: str, current_user: dict = Depends(get_current_user)):
    """Per-question review of a submitted attempt"""
    try:
        attempts = db.select("attempts", "*", {"id": attempt_id})
        if not attempts:
            raise HTTPException(status_code=404, detail="Result not found")

        attempt = attempts[0]
        if str(attempt["user_id"]) != str(current_user["id"]) and not is_admin_user(current_user):
            raise HTTPException(status_code=403, detail="Access denied")
        if attempt.get("completed_at") is None and not is_admin_user(current_user):
            raise HTTPException(status_code=409, detail="Attempt has not been submitted yet")

        answers = db.select("attempt_answers", "*", {"attempt_id": attempt_id})
        questions = {}
        if answers:
            rows = fetch_questions_with_options(in_filters={"id": [a["question_id"] for a in answers]})
            questions = {str(q["id"]): q for q in rows}

        review = []
        for answer in answers:
            question = questions.get(str(answer["question_id"]))
            if not question:
                continue
            correct = is_answer_correct(question, answer["selected_option_id"])
            correct_option = next((opt for opt in question["options"] if opt.get("is_correct")), None)
            review.append({
                "answer_id": answer.get("id"),
                "question_id": question["id"],
                "question_text": question.get("question_text"),
                "question_image_url": question.get("question_image_url"),
                "status": "correct" if correct else "incorrect",
                "selected_option": find_option(question, answer["selected_option_id"]),
                "correct_option": correct_option,
                "time_taken_seconds": answer.get("time_taken_seconds"),
            })

        return {"attempt": attempt, "answers": review}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to get result: {str(e)}")
