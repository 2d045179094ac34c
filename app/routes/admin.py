from fastapi import APIRouter, Depends, HTTPException, Query
from app.database import db
from app.utils.auth_utils import require_admin
from app.utils.analytics import scope_averages, strongest_and_weakest, question_success_rates

router = APIRouter()

@router.get("/dashboard")
async def get_dashboard_stats(admin_user: dict = Depends(require_admin)):
    """Totals for the admin dashboard"""
    try:
        total_questions = db.count("questions")
        active_questions = db.count("questions", {"is_active": True})
        total_attempts = db.count("attempts")

        attempt_users = db.select("attempts", "user_id", {})
        total_students = len({row["user_id"] for row in attempt_users})

        return {
            "total_questions": total_questions,
            "active_questions": active_questions,
            "total_attempts": total_attempts,
            "total_students": total_students
        }

    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to get dashboard statistics: {str(e)}")

@router.get("/analytics")
async def get_analytics(
    limit: int = Query(5, ge=1, le=50, description="Size of the strongest/weakest lists"),
    admin_user: dict = Depends(require_admin)
):
    """Average scores per chapter and topic, and per-question success rates"""
    try:
        chapter_attempts = db.select("attempts", "scope_type,scope_value,score", {"scope_type": "chapter"})
        topic_attempts = db.select("attempts", "scope_type,scope_value,score", {"scope_type": "topic"})

        chapter_stats = scope_averages(chapter_attempts)
        topic_stats = scope_averages(topic_attempts)

        answers = db.select("attempt_answers", "question_id,selected_option_id", {})
        question_stats = []
        if answers:
            options = db.select(
                "question_options", "id,is_correct",
                in_filters={"question_id": {a["question_id"] for a in answers}}
            )
            question_stats = question_success_rates(answers, options)

        return {
            "chapter_performance": chapter_stats,
            "topic_performance": topic_stats,
            "chapters": strongest_and_weakest(chapter_stats, limit),
            "topics": strongest_and_weakest(topic_stats, limit),
            "question_success": question_stats
        }

    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to get analytics: {str(e)}")
