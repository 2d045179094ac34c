from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from app.database import get_supabase_client
from app.utils.auth_utils import get_current_user, resolve_role, dashboard_path, STUDENT_ROLE
from typing import Optional
import logging

router = APIRouter()

# Pydantic models for request/response
class SignUpRequest(BaseModel):
    email: EmailStr
    password: str

class SignInRequest(BaseModel):
    email: EmailStr
    password: str

class AuthResponse(BaseModel):
    message: str
    user: dict
    access_token: Optional[str] = None

@router.post("/signup", response_model=AuthResponse)
async def signup(request: SignUpRequest):
    """Sign up a new student using Supabase Auth"""
    try:
        # Accounts always start as students; admins are promoted out of band
        auth_response = get_supabase_client().auth.sign_up({
            "email": request.email,
            "password": request.password,
            "options": {
                "data": {
                    "role": STUDENT_ROLE
                }
            }
        })
    except Exception as e:
        logging.error(f"Signup error: {e}")
        if "already registered" in str(e).lower() or "duplicate" in str(e).lower():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Signup failed: {str(e)}"
        )

    if not auth_response.user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to create user"
        )

    user = auth_response.user
    return AuthResponse(
        message="User created successfully. Please check your email for verification.",
        user={
            "id": user.id,
            "email": user.email,
            "role": resolve_role(user.email, user.user_metadata),
            "email_confirmed": user.email_confirmed_at is not None
        },
        access_token=auth_response.session.access_token if auth_response.session else None
    )

@router.post("/signin", response_model=AuthResponse)
async def signin(request: SignInRequest):
    """Sign in user using Supabase Auth"""
    try:
        auth_response = get_supabase_client().auth.sign_in_with_password({
            "email": request.email,
            "password": request.password
        })
    except Exception as e:
        logging.error(f"Signin error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not (auth_response.user and auth_response.session):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    user = auth_response.user
    role = resolve_role(user.email, user.user_metadata)
    return AuthResponse(
        message="Login successful",
        user={
            "id": user.id,
            "email": user.email,
            "role": role,
            "home": dashboard_path({"role": role}),
            "email_confirmed": user.email_confirmed_at is not None
        },
        access_token=auth_response.session.access_token
    )

@router.post("/signout")
async def signout(current_user: dict = Depends(get_current_user)):
    """Sign out user"""
    try:
        get_supabase_client().auth.sign_out()
        return {"message": "Signed out successfully"}
    except Exception as e:
        logging.error(f"Signout error: {e}")
        return {"message": "Signed out"}

@router.get("/me")
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """Get current user information"""
    return {
        "id": current_user["id"],
        "email": current_user["email"],
        "role": current_user["role"]
    }

@router.get("/home")
async def get_home(current_user: dict = Depends(get_current_user)):
    """Dashboard route for the signed-in user's role"""
    return {"role": current_user["role"], "redirect": dashboard_path(current_user)}
