from fastapi import HTTPException
from app.database import get_supabase_admin_client
from app.config import settings
from typing import Dict, List, Tuple
from uuid import uuid4
import logging

DEFAULT_FOLDER = "questions"

def build_storage_path(filename: str, folder: str = DEFAULT_FOLDER) -> str:
    """Random object name that keeps the original extension"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"{folder}/{uuid4().hex}.{ext}"

def upload_image(content: bytes, filename: str, content_type: str = None, folder: str = DEFAULT_FOLDER) -> str:
    """Upload an image to the storage bucket and return its public URL"""
    if content_type and not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Please select an image file")

    path = build_storage_path(filename, folder)
    bucket = get_supabase_admin_client().storage.from_(settings.storage_bucket)
    try:
        bucket.upload(path, content, {"content-type": content_type or "application/octet-stream"})
        return bucket.get_public_url(path)
    except Exception as e:
        logging.error(f"Image upload failed for {filename}: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to upload image: {str(e)}")

def upload_image_batch(files: List[Tuple[str, bytes, str]]) -> Dict[str, str]:
    """Upload (filename, content, content_type) triples.

    Returns a filename to public URL map. A file that fails to upload is
    logged and left out of the map so the rows referencing it fail their
    own validation.
    """
    image_map = {}
    for filename, content, content_type in files:
        try:
            image_map[filename] = upload_image(content, filename, content_type)
        except HTTPException as e:
            logging.error(f"Skipping image {filename}: {e.detail}")
    return image_map
