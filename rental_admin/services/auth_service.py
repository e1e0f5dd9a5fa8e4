import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from starlette import status
from rental_admin.config import settings
from rental_admin.models.user import User, UserRole

logger = logging.getLogger(__name__)

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM

oauth2_bearer = OAuth2PasswordBearer(tokenUrl="auth/signin", auto_error=False)


def resolve_role(email: Optional[str]) -> Optional[UserRole]:
    """Look the email up in the configured role policy."""
    if not email:
        return None
    role = settings.ROLE_POLICY.get(email.strip().lower())
    return UserRole(role) if role else None


def create_access_token(email: str, user_id: int, role: str, expires_delta: timedelta):
    encode = {"sub": email, "id": user_id, "role": role}
    expires = datetime.now(timezone.utc) + expires_delta
    encode.update({"exp": expires})
    return jwt.encode(encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])


def sign_in(db: Session, email: str, name: Optional[str] = None) -> User:
    """Admit an identity the provider has vouched for, if the policy knows it.

    The stored role is overwritten with the policy role so the users table
    follows configuration changes.
    """
    email = email.strip().lower()
    role = resolve_role(email)
    if role is None:
        logger.info("Sign-in refused for %s: not in role policy", email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This account is not allowed to sign in",
        )

    user: User = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email, name=name, role=role, is_active=True)
        db.add(user)
    else:
        user.role = role
        if name:
            user.name = name
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This account has been deactivated",
        )
    logger.info("%s signed in as %s", email, role.value)
    return user


async def get_current_user(
    request: Request, token: Annotated[Optional[str], Depends(oauth2_bearer)]
):
    token = token or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not authenticate user",
        )
    email: str = payload.get("sub")
    user_id: int = payload.get("id")
    if not email or not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not authenticate user",
        )
    # Roster changes apply immediately, without waiting for the token to expire
    role = resolve_role(email)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session is no longer authorized",
        )
    return {"email": email, "id": user_id, "role": role.value}
