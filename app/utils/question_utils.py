from app.database import db
from typing import Dict, List, Optional

MIN_FORM_OPTIONS = 2

def attach_options(questions: List[dict], options: List[dict]) -> List[dict]:
    """Attach option rows to their question rows as an ordered 'options' list"""
    by_question: Dict[str, List[dict]] = {}
    for option in options:
        by_question.setdefault(str(option["question_id"]), []).append(option)

    for question in questions:
        question["options"] = sorted(
            by_question.get(str(question["id"]), []),
            key=lambda o: o.get("option_order", 0),
        )
    return questions

def fetch_questions_with_options(filters: dict = None, in_filters: dict = None, **kwargs) -> List[dict]:
    questions = db.select("questions", "*", filters or {}, in_filters=in_filters, **kwargs)
    if not questions:
        return []
    options = db.select("question_options", "*", in_filters={"question_id": [q["id"] for q in questions]})
    return attach_options(questions, options)

def fetch_question_with_options(question_id: str) -> Optional[dict]:
    questions = fetch_questions_with_options({"id": question_id})
    return questions[0] if questions else None

def validate_question_content(question_text: Optional[str], question_image_url: Optional[str]) -> None:
    if not question_text and not question_image_url:
        raise ValueError("Question must have either text or image")

def validate_form_options(options: List[dict]) -> List[dict]:
    """Keep options that have text or an image and check the form rules.

    Returns the usable options in their submitted order.
    """
    if not any(opt.get("is_correct") for opt in options):
        raise ValueError("At least one option must be marked as correct")

    usable = [opt for opt in options if opt.get("option_text") or opt.get("option_image_url")]
    if len(usable) < MIN_FORM_OPTIONS:
        raise ValueError(f"At least {MIN_FORM_OPTIONS} options are required")
    if not any(opt.get("is_correct") for opt in usable):
        raise ValueError("At least one option must be marked as correct")
    return usable

def distinct_sorted(rows: List[dict], key: str) -> list:
    return sorted({row[key] for row in rows if row.get(key)})
