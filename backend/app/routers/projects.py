"""Project name routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.services.decisions import list_projects

router = APIRouter(prefix="/projects")


@router.get("", response_model=ApiResponse[list[str]])
def get_projects(db: Session = Depends(get_db)) -> ApiResponse[list[str]]:
    """Distinct project names for autocomplete."""

    return ApiResponse(data=list_projects(db))
