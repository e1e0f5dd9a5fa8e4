from datetime import timedelta
from fastapi import APIRouter, Request, Response
from starlette import status

from rental_admin.config import settings
from rental_admin.dependencies import CurrentUser, activity_log_dependency, db_dependency
from rental_admin.limits import limiter
from rental_admin.schemas.user import SessionResponse, SignInRequest, Token
from rental_admin.services.auth_service import create_access_token, sign_in

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signin", response_model=Token, status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def sign_in_with_provider(
    request: Request,
    response: Response,
    body: SignInRequest,
    db: db_dependency,
    activity_log: activity_log_dependency,
):
    """Open a session for an identity returned by the Google sign-in callback.

    Only emails listed in ROLE_POLICY are admitted; the session token is
    returned and also set as an HTTP-only cookie.
    """
    user = sign_in(db, body.email, body.name)
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token(user.email, user.id, user.role.value, expires)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(expires.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    activity_log.append(f"Signed in: {user.email} ({user.role.value})")
    return {"access_token": token, "token_type": "bearer", "role": user.role.value}


@router.post("/signout", status_code=status.HTTP_200_OK)
async def sign_out(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Signed out"}


@router.get("/me", response_model=SessionResponse)
async def read_session(user: CurrentUser):
    return user
