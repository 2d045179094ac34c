from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File
from app.database import db
from app.config import CLASS_MIN, CLASS_MAX
from app.utils.auth_utils import require_admin
from app.utils.csv_importer import import_questions
from app.utils.question_utils import (
    fetch_question_with_options,
    validate_question_content,
    validate_form_options,
)
from app.utils.storage_utils import upload_image, upload_image_batch
from app.utils.time_utils import get_ist_time
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

router = APIRouter()

class OptionInput(BaseModel):
    option_text: Optional[str] = None
    option_image_url: Optional[str] = None
    is_correct: bool = False

class QuestionCreate(BaseModel):
    class_: int = Field(..., alias="class", ge=CLASS_MIN, le=CLASS_MAX)
    subject: str = Field(..., min_length=1)
    chapter: Optional[str] = None
    topic: Optional[str] = None
    subtopic: Optional[str] = None
    question_text: Optional[str] = None
    question_image_url: Optional[str] = None
    options: List[OptionInput] = []

    class Config:
        populate_by_name = True

class OptionUpdate(OptionInput):
    id: str

class QuestionUpdate(BaseModel):
    class_: int = Field(..., alias="class", ge=CLASS_MIN, le=CLASS_MAX)
    subject: str = Field(..., min_length=1)
    chapter: Optional[str] = None
    topic: Optional[str] = None
    subtopic: Optional[str] = None
    question_text: Optional[str] = None
    question_image_url: Optional[str] = None
    is_active: bool = True
    options: List[OptionUpdate] = []

    class Config:
        populate_by_name = True

def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None

def question_row(data) -> dict:
    return {
        "class": data.class_,
        "subject": data.subject.strip(),
        "chapter": blank_to_none(data.chapter),
        "topic": blank_to_none(data.topic),
        "subtopic": blank_to_none(data.subtopic),
        "question_text": blank_to_none(data.question_text),
        "question_image_url": blank_to_none(data.question_image_url),
    }

@router.get("")
async def list_questions(
    class_: Optional[int] = Query(None, alias="class", description="Filter by class"),
    subject: Optional[str] = Query(None, description="Filter by subject"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    admin_user: dict = Depends(require_admin)
):
    """List questions, newest first"""
    try:
        filters = {}
        if class_ is not None:
            filters["class"] = class_
        if subject:
            filters["subject"] = subject
        if is_active is not None:
            filters["is_active"] = is_active

        return db.select("questions", "*", filters, order_by="created_at", desc=True)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch questions: {str(e)}")

@router.post("")
async def create_question(question_data: QuestionCreate, admin_user: dict = Depends(require_admin)):
    """Create a question with its options"""
    try:
        row = question_row(question_data)
        try:
            validate_question_content(row["question_text"], row["question_image_url"])
            options = validate_form_options([
                {
                    "option_text": blank_to_none(opt.option_text),
                    "option_image_url": blank_to_none(opt.option_image_url),
                    "is_correct": opt.is_correct,
                }
                for opt in question_data.options
            ])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        row["is_active"] = True
        question = db.insert("questions", row)

        option_rows = [
            {**opt, "question_id": question["id"], "option_order": index + 1}
            for index, opt in enumerate(options)
        ]
        try:
            created_options = db.insert_many("question_options", option_rows)
        except Exception:
            db.delete("questions", {"id": question["id"]})
            raise

        logging.info(f"Question {question['id']} created by {admin_user['id']}")
        return {**question, "options": created_options}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to create question: {str(e)}")

@router.post("/images")
async def upload_question_image(file: UploadFile = File(...), admin_user: dict = Depends(require_admin)):
    """Upload a single image for a question or option"""
    content = await file.read()
    url = upload_image(content, file.filename, file.content_type)
    return {"url": url, "filename": file.filename}

@router.post("/upload")
async def upload_questions_csv(
    file: UploadFile = File(...),
    images: List[UploadFile] = File(default=[]),
    admin_user: dict = Depends(require_admin)
):
    """Import questions from a CSV file, uploading the referenced images first"""
    try:
        if not file.filename.endswith('.csv'):
            raise HTTPException(status_code=400, detail="Only CSV files are allowed")

        image_files = []
        for image in images:
            image_files.append((image.filename, await image.read(), image.content_type))
        image_map = upload_image_batch(image_files)

        content = await file.read()
        csv_content = content.decode('utf-8-sig')

        result = import_questions(csv_content, image_map)
        result["images_uploaded"] = len(image_map)
        return result

    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"CSV upload failed: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to process CSV: {str(e)}")

@router.get("/{question_id}")
async def get_question(question_id: str, admin_user: dict = Depends(require_admin)):
    """Get a question with its options in display order"""
    try:
        question = fetch_question_with_options(question_id)
        if not question:
            raise HTTPException(status_code=404, detail="Question not found")
        return question
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to load question: {str(e)}")

@router.put("/{question_id}")
async def update_question(question_id: str, question_data: QuestionUpdate, admin_user: dict = Depends(require_admin)):
    """Update a question and its existing options"""
    try:
        existing = fetch_question_with_options(question_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Question not found")

        row = question_row(question_data)
        try:
            validate_question_content(row["question_text"], row["question_image_url"])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        known_ids = {str(opt["id"]) for opt in existing["options"]}
        for option in question_data.options:
            if option.id not in known_ids:
                raise HTTPException(status_code=400, detail=f"Option {option.id} does not belong to this question")

        edits = {
            option.id: {
                "option_text": blank_to_none(option.option_text),
                "option_image_url": blank_to_none(option.option_image_url),
                "is_correct": option.is_correct,
            }
            for option in question_data.options
        }
        merged = [{**opt, **edits.get(str(opt["id"]), {})} for opt in existing["options"]]
        try:
            validate_form_options(merged)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        row["is_active"] = question_data.is_active
        row["updated_at"] = get_ist_time().isoformat()
        db.update("questions", row, {"id": question_id})

        for option_id, values in edits.items():
            db.update("question_options", values, {"id": option_id})

        return fetch_question_with_options(question_id)

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to update question: {str(e)}")

@router.post("/{question_id}/toggle")
async def toggle_question_active(question_id: str, admin_user: dict = Depends(require_admin)):
    """Flip the active flag of a question"""
    try:
        questions = db.select("questions", "id,is_active", {"id": question_id})
        if not questions:
            raise HTTPException(status_code=404, detail="Question not found")

        new_status = not questions[0]["is_active"]
        db.update("questions", {"is_active": new_status, "updated_at": get_ist_time().isoformat()}, {"id": question_id})
        return {"id": question_id, "is_active": new_status}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to toggle question: {str(e)}")
