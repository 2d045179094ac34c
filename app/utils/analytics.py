from typing import Dict, Iterable, List, Optional
from app.utils.time_utils import format_date_for_display

def scope_averages(attempts: Iterable[dict], scope_type: Optional[str] = None) -> List[dict]:
    """Average score per scope value.

    Unscored (unsubmitted) attempts are ignored. When scope_type is given
    only attempts of that type are counted.
    """
    totals: Dict[str, Dict[str, float]] = {}
    for attempt in attempts:
        if attempt.get("score") is None:
            continue
        if scope_type and attempt.get("scope_type") != scope_type:
            continue
        entry = totals.setdefault(attempt["scope_value"], {"total": 0, "sum": 0.0})
        entry["total"] += 1
        entry["sum"] += attempt["score"]

    return [
        {"name": name, "average": round(data["sum"] / data["total"], 2), "attempts": data["total"]}
        for name, data in totals.items()
    ]

def strongest_and_weakest(stats: List[dict], limit: int = 5) -> dict:
    ordered = sorted(stats, key=lambda x: x["average"], reverse=True)
    return {
        "strongest": ordered[:limit],
        "weakest": sorted(stats, key=lambda x: x["average"])[:limit],
    }

def score_trend(attempts: List[dict], limit: int = 10) -> List[dict]:
    """Oldest-first trend of the latest scored attempts.

    attempts must be ordered newest first, as the attempts query returns them.
    """
    scored = [a for a in attempts if a.get("score") is not None][:limit]
    scored.reverse()
    return [
        {
            "attempt": index + 1,
            "score": attempt["score"],
            "date": format_date_for_display(attempt["created_at"]) if attempt.get("created_at") else None,
        }
        for index, attempt in enumerate(scored)
    ]

def question_success_rates(answers: Iterable[dict], options: Iterable[dict]) -> List[dict]:
    """Share of saved answers per question that picked a correct option"""
    correct_ids = {str(opt["id"]) for opt in options if opt.get("is_correct")}

    per_question: Dict[str, Dict[str, int]] = {}
    for answer in answers:
        entry = per_question.setdefault(str(answer["question_id"]), {"answered": 0, "correct": 0})
        entry["answered"] += 1
        if str(answer["selected_option_id"]) in correct_ids:
            entry["correct"] += 1

    rates = [
        {
            "question_id": question_id,
            "answered": data["answered"],
            "correct": data["correct"],
            "success_rate": round(data["correct"] / data["answered"] * 100, 2),
        }
        for question_id, data in per_question.items()
    ]
    rates.sort(key=lambda x: x["success_rate"])
    return rates
