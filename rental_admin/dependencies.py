from typing import Annotated

from fastapi import Depends, HTTPException
from starlette import status
from sqlalchemy.orm import Session

from rental_admin.database import SessionLocal
from rental_admin.models.user import UserRole
from rental_admin.services.activity_log import ActivityLog, get_activity_log
from rental_admin.services.auth_service import get_current_user
from rental_admin.services.file_store import LocalFileStore, get_file_store
from rental_admin.services.image_service import ImageService


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


db_dependency = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
activity_log_dependency = Annotated[ActivityLog, Depends(get_activity_log)]
file_store_dependency = Annotated[LocalFileStore, Depends(get_file_store)]


def require_admin(current_user: CurrentUser) -> dict:
    """Gate for every mutation: signed in, and holding the admin role."""
    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not authenticate user",
        )
    if current_user.get("role") != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: Admin access required",
        )
    return current_user


AdminUser = Annotated[dict, Depends(require_admin)]


def get_image_service(
    file_store: file_store_dependency, activity_log: activity_log_dependency
) -> ImageService:
    return ImageService(file_store, activity_log)


image_service_dependency = Annotated[ImageService, Depends(get_image_service)]
