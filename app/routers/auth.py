from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Dict, Any
from ..database import get_db
from ..models.user import User
from ..services.auth_service import AuthService
from ..schemas.user import UserResponse
from ..schemas.auth import RegisterRequest, LoginRequest, AuthResponse
from ..dependencies.permissions import get_current_user
from ..utils.router_helpers import handle_service_errors, RouterResponse
router = APIRouter(tags=["authentication"])


def _auth_payload(result: Dict[str, Any]) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(result["user"]), token=result["token"]
    )


@router.post("/register", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def register_user(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user and return an access token"""
    result = AuthService(db).register(
        username=user_data.username,
        password=user_data.password,
        email=user_data.email,
        phone=user_data.phone,
    )
    return RouterResponse.created(
        data=_auth_payload(result), message="User registered successfully"
    )


@router.post("/login", response_model=Dict[str, Any])
@handle_service_errors
async def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Login with email, username or phone"""
    result = AuthService(db).login(login_data.identifier, login_data.password)
    return RouterResponse.success(data=_auth_payload(result), message="Login successful")


@router.get("/me", response_model=Dict[str, Any])
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the current user"""
    return RouterResponse.success(data=UserResponse.model_validate(current_user))
