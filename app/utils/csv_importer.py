"""
Bulk question import from CSV.

Each row becomes one question plus up to four options. Rows are handled
independently: a bad row is reported and skipped, and when a question was
already inserted for it the question is deleted again. The delete is best
effort, there is no transaction around a row.
"""
from app.database import db
from app.config import CLASS_MIN, CLASS_MAX, CSV_OPTION_COUNT
from typing import Dict, List, Optional
import csv
import io
import logging

CSV_COLUMNS = [
    "class", "subject", "chapter", "topic", "subtopic", "question_text", "question_image",
] + [
    f"option{n}_{field}" for n in range(1, CSV_OPTION_COUNT + 1) for field in ("text", "image", "correct")
]

TRUE_VALUES = ("true", "1")

def clean(value: Optional[str]) -> Optional[str]:
    """Strip a cell; blank cells become None"""
    if value is None:
        return None
    value = value.strip()
    return value or None

def parse_class(value: str) -> Optional[int]:
    try:
        class_num = int(value.strip())
    except (TypeError, ValueError):
        return None
    if class_num < CLASS_MIN or class_num > CLASS_MAX:
        return None
    return class_num

def is_true_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in TRUE_VALUES

def resolve_image(filename: Optional[str], image_map: Dict[str, str]) -> Optional[str]:
    filename = clean(filename)
    if not filename:
        return None
    return image_map.get(filename)

def build_options(row: dict, question_id, image_map: Dict[str, str]) -> List[dict]:
    options = []
    for n in range(1, CSV_OPTION_COUNT + 1):
        text = clean(row.get(f"option{n}_text"))
        image_name = clean(row.get(f"option{n}_image"))
        if not text and not image_name:
            continue
        options.append({
            "question_id": question_id,
            "option_text": text,
            "option_image_url": resolve_image(image_name, image_map),
            "is_correct": is_true_flag(row.get(f"option{n}_correct")),
            "option_order": n,
        })
    return options

class QuestionImporter:
    """Row-by-row CSV importer writing to the questions tables"""

    def __init__(self, database=None):
        self.db = database or db

    def import_csv(self, csv_content: str, image_map: Dict[str, str] = None) -> dict:
        image_map = image_map or {}
        reader = csv.DictReader(io.StringIO(csv_content))
        rows = list(reader)

        errors: List[str] = []
        processed = 0

        for index, row in enumerate(rows):
            row_number = index + 2  # header is line 1
            try:
                error = self._import_row(row, image_map)
            except Exception as e:
                error = str(e) or "Unknown error"
            if error:
                errors.append(f"Row {row_number}: {error}")
            else:
                processed += 1

        logging.info(f"CSV import finished: {processed} processed, {len(errors)} errors")
        return {"success": len(errors) == 0, "processed": processed, "errors": errors}

    def _import_row(self, row: dict, image_map: Dict[str, str]) -> Optional[str]:
        """Import one row. Returns an error message, or None on success."""
        if not clean(row.get("class")) or not clean(row.get("subject")):
            return "Missing class or subject"

        class_num = parse_class(row["class"])
        if class_num is None:
            return f"Invalid class (must be {CLASS_MIN}-{CLASS_MAX})"

        question_text = clean(row.get("question_text"))
        question_image_url = resolve_image(row.get("question_image"), image_map)
        if not question_text and not question_image_url:
            return "Question must have text or image"

        try:
            question = self.db.insert("questions", {
                "class": class_num,
                "subject": clean(row["subject"]),
                "chapter": clean(row.get("chapter")),
                "topic": clean(row.get("topic")),
                "subtopic": clean(row.get("subtopic")),
                "question_text": question_text,
                "question_image_url": question_image_url,
                "is_active": True,
            })
        except Exception as e:
            return str(e)

        options = build_options(row, question["id"], image_map)

        if not options:
            self._rollback(question["id"])
            return "No options provided"

        if not any(opt["is_correct"] for opt in options):
            self._rollback(question["id"])
            return "No correct option marked"

        try:
            self.db.insert_many("question_options", options)
        except Exception as e:
            self._rollback(question["id"])
            return str(e)

        return None

    def _rollback(self, question_id):
        try:
            self.db.delete("questions", {"id": question_id})
        except Exception as e:
            logging.error(f"Could not remove question {question_id} after a failed import row: {e}")

def import_questions(csv_content: str, image_map: Dict[str, str] = None, database=None) -> dict:
    return QuestionImporter(database).import_csv(csv_content, image_map)
