from typing import List
from fastapi import APIRouter

from rental_admin.dependencies import CurrentUser, activity_log_dependency
from rental_admin.schemas.activity_log import LogEntry

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("/", response_model=List[LogEntry])
async def get_activity_logs(user: CurrentUser, activity_log: activity_log_dependency):
    return activity_log.entries()
