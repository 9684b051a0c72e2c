from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from typing import Optional, Dict, Any
import logging

from ..models.user import User
from ..utils.validation import ValidationHelpers
from ..utils.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    decode_access_token,
    TokenError,
)
from .errors import (
    ServiceError,
    ValidationError,
    ConflictError,
    AuthenticationError,
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a user and return it with a fresh access token"""

        username = username.strip()
        email = email.strip().lower() if email else None
        phone = phone.strip() if phone else None

        if not email and not phone:
            raise ValidationError("Either email or phone is required")
        problems = ValidationHelpers.password_problems(password)
        if problems:
            raise ValidationError(f"Password must {', '.join(problems)}")

        clauses = [User.username == username]
        if email:
            clauses.append(func.lower(User.email) == email)
        if phone:
            clauses.append(User.phone == phone)

        if self.db.query(User).filter(or_(*clauses)).first():
            raise ConflictError("User with this username, email or phone already exists")

        try:
            user = User(
                username=username,
                email=email,
                phone=phone,
                hashed_password=get_password_hash(password),
                is_active=True,
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to register user: {str(e)}")

        logger.info(f"Registered user {user.id} ({user.username})")
        return {"user": user, "token": create_access_token(user.id)}

    def login(self, identifier: str, password: str) -> Dict[str, Any]:
        """Authenticate by email, username or phone"""

        identifier = identifier.strip()
        user = (
            self.db.query(User)
            .filter(
                or_(
                    func.lower(User.email) == identifier.lower(),
                    User.username == identifier,
                    User.phone == identifier,
                )
            )
            .first()
        )

        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("User account is disabled")

        return {"user": user, "token": create_access_token(user.id)}

    def get_user_from_token(self, token: str) -> User:
        """Verify the token, then load a fresh user snapshot from the database"""

        try:
            user_id = decode_access_token(token)
        except TokenError as e:
            raise AuthenticationError(str(e))

        user = (
            self.db.query(User)
            .filter(User.id == user_id, User.is_active == True)  # noqa: E712
            .first()
        )
        if not user:
            raise AuthenticationError("User not found or inactive")
        return user
