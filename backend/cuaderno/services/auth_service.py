# cuaderno/services/auth_service.py
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional, Dict, Tuple
import logging
from dataclasses import dataclass

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from cuaderno.config import settings
from cuaderno.models.user import User
from cuaderno.repositories.user import UserRepository
from cuaderno.schemas.user import UserCreate, UserUpdate

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
logger = logging.getLogger(__name__)

# --- AuthError for safe, classifiable failures ---
@dataclass
class AuthError(Exception):
    code: str                 # "NO_ACCOUNT" | "BAD_PASSWORD" | "UNEXPECTED"
    public_detail: str        # safe message for clients
    log_detail: str = ""      # extra info for server logs


def display_name(user: Optional[User]) -> str:
    """Name the assistant uses for the student."""
    if user is None:
        return "the student"
    return (user.full_name or "").strip() or user.email or "the student"


class AuthService:
    def __init__(self, user_repo: Optional[UserRepository] = None):
        self.user_repo = user_repo or UserRepository()

    # ---- password helpers ----
    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return pwd_context.verify(plain, hashed)

    # ---- JWT helpers ----
    def create_access_token(self, user: User, minutes: Optional[int] = None) -> str:
        exp_min = minutes if minutes is not None else settings.JWT_EXPIRE_MIN
        payload = {
            "sub": str(user.id),
            "ver": int(user.token_version or 0),
            "exp": datetime.utcnow() + timedelta(minutes=exp_min),
        }
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

    def verify(self, token: str) -> Optional[Tuple[int, int]]:
        """Returns (user_id, token_version) for a valid, unexpired token."""
        try:
            payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
            return int(payload.get("sub")), int(payload.get("ver", 0))
        except (JWTError, TypeError, ValueError):
            return None

    def resolve_user(self, db: Session, token: str) -> Optional[User]:
        """Current-user accessor: the token's user, unless it was signed out since."""
        claims = self.verify(token)
        if not claims:
            return None
        user_id, version = claims
        user = self.user_repo.get(db, user_id)
        if not user or int(user.token_version or 0) != version:
            return None
        return user

    # ---- high-level auth ----
    def authenticate(self, db: Session, email: str, password: str) -> Dict:
        """
        On failure, raises AuthError with a code you can safely surface to the client:
          - NO_ACCOUNT: no user row
          - BAD_PASSWORD: hash check failed
        """
        email_norm = email.strip().lower()
        user = self.user_repo.get_by_email(db, email_norm)

        if not user:
            logger.warning({
                "step": "authenticate_failed",
                "reason": "user_not_found",
                "email_norm": email_norm,
            })
            raise AuthError(
                code="NO_ACCOUNT",
                public_detail="We couldn’t find an account with that email.",
                log_detail=f"no user for {email_norm}",
            )

        try:
            ok = self.verify_password(password, user.password_hash)
        except Exception as e:
            # Rare env/backend issues (bcrypt backend problems etc)
            logger.exception({"step": "authenticate_verify_exception", "email_norm": email_norm})
            raise AuthError(
                code="UNEXPECTED",
                public_detail="We couldn’t sign you in. Please try again.",
                log_detail=str(e),
            )

        if not ok:
            logger.warning({
                "step": "authenticate_failed",
                "reason": "bad_password",
                "user_id": user.id,
            })
            raise AuthError(
                code="BAD_PASSWORD",
                public_detail="Incorrect email or password.",
                log_detail=f"bad password for uid={user.id}",
            )

        self.user_repo.update_last_login(db, user)

        token = self.create_access_token(user)
        logger.info({"step": "authenticate_success", "user_id": user.id})
        return {"user_id": user.id, "access_token": token, "token_type": "bearer"}

    def register_user(
        self,
        db: Session,
        email: str,
        password: str,
        *,
        full_name: Optional[str] = None,
    ) -> User:
        """
        Create a new account. Raises ValueError("email_already_registered") on duplicates.
        """
        email_norm = email.strip().lower()
        if self.user_repo.get_by_email(db, email_norm):
            raise ValueError("email_already_registered")

        user = self.user_repo.create(
            db,
            UserCreate(email=email_norm, password_hash=self.hash_password(password), full_name=full_name),
        )
        user = self.user_repo.update(db, user, UserUpdate(last_login_at=datetime.utcnow()))
        logger.info({"step": "register_success", "user_id": user.id})
        return user

    def sign_out(self, db: Session, user: User) -> None:
        """Revoke every outstanding token for this user."""
        self.user_repo.bump_token_version(db, user)
        logger.info({"step": "sign_out", "user_id": user.id})
