from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database import get_supabase_client
from app.config import settings
import logging

security = HTTPBearer()

ADMIN_ROLE = "admin"
STUDENT_ROLE = "student"

def verify_supabase_token(token: str):
    """Verify Supabase JWT token"""
    try:
        user = get_supabase_client().auth.get_user(token)
        if user and user.user:
            return user.user
        return None
    except Exception as e:
        logging.error(f"Supabase token verification failed: {e}")
        return None

def resolve_role(email: str, metadata: dict) -> str:
    """Role from auth metadata; configured admin emails are always admins"""
    if email and email.lower() in settings.admin_email_list:
        return ADMIN_ROLE
    role = (metadata or {}).get("role")
    return ADMIN_ROLE if role == ADMIN_ROLE else STUDENT_ROLE

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Get current user from Supabase JWT token"""
    token = credentials.credentials

    user = verify_supabase_token(token)
    if user:
        metadata = user.user_metadata or {}
        return {
            "id": user.id,
            "email": user.email,
            "role": resolve_role(user.email, metadata),
            "metadata": metadata
        }

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials"
    )

def is_admin_user(user: dict) -> bool:
    return user.get("role") == ADMIN_ROLE

async def require_admin(current_user: dict = Depends(get_current_user)):
    """Require admin privileges"""
    if not is_admin_user(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return current_user

async def require_student(current_user: dict = Depends(get_current_user)):
    """Require the student role"""
    if current_user.get("role") != STUDENT_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access only"
        )
    return current_user

def dashboard_path(user: dict) -> str:
    return "/admin/dashboard" if is_admin_user(user) else "/student/dashboard"
