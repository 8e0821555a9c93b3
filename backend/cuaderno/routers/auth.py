# cuaderno/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cuaderno.database import get_db
from cuaderno.deps import get_auth_service, get_chat_registry, get_current_user
from cuaderno.models.user import User
from cuaderno.schemas.user import AuthResponse, LoginRequest, SignupRequest, UserResponse
from cuaderno.services.auth_service import AuthService, AuthError
from cuaderno.services.chat_service import ChatRegistry

router = APIRouter(prefix="/auth", tags=["auth"])

# ---- Routes ----
@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and receive an access token",
)
def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        user = auth.register_user(db, payload.email, payload.password, full_name=payload.full_name)
    except ValueError as e:
        if str(e) == "email_already_registered":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        raise

    return AuthResponse(user_id=user.id, access_token=auth.create_access_token(user), token_type="bearer")

@router.post("/login", response_model=AuthResponse, summary="Login and receive an access token")
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        result = auth.authenticate(db, payload.email, payload.password)
        return AuthResponse(**result)
    except AuthError as e:
        # Always 401 to avoid account enumeration, but include a safe error_code for UX branching.
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.public_detail,
            headers={"X-Error-Code": e.code},
        )

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Sign out everywhere")
def logout(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    registry: ChatRegistry = Depends(get_chat_registry),
):
    auth.sign_out(db, user)
    registry.discard(user.id)
    return

@router.get("/me", response_model=UserResponse, summary="Return the current authenticated identity")
def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
