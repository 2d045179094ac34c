from typing import Dict, Iterable, List, Optional


def calculate_score(correct_count: int, total_questions: int) -> float:
    """Percentage score for an attempt.

    Unanswered questions count against the student because the denominator
    is the number of questions served, not the number answered.
    """
    if total_questions <= 0:
        return 0.0
    return correct_count / total_questions * 100


def correct_option_ids(options: Iterable[dict]) -> set:
    return {str(opt["id"]) for opt in options if opt.get("is_correct")}


def is_answer_correct(question: dict, selected_option_id: Optional[str]) -> bool:
    if selected_option_id is None:
        return False
    return str(selected_option_id) in correct_option_ids(question.get("options", []))


def count_correct(questions: List[dict], answers: Dict[str, str]) -> int:
    """Count answers whose selected option is marked correct.

    answers maps question id to selected option id; answers for questions
    that were not served are ignored.
    """
    by_id = {str(q["id"]): q for q in questions}
    correct = 0
    for question_id, option_id in answers.items():
        question = by_id.get(str(question_id))
        if question and is_answer_correct(question, option_id):
            correct += 1
    return correct
