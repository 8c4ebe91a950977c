# club_selection/api/routers/embed.py - Compact status for the embeddable widget
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Optional

from club_selection.core.db import get_db
from club_selection.core.exceptions import ValidationError
from club_selection.services.student_service import StudentService
from club_selection.schemas.student import EmbedStatusOut, ProjectBriefOut

router = APIRouter()


@router.get("", response_model=EmbedStatusOut)
def embed_status(
    token: Optional[str] = Query(default=None),
    project: Optional[UUID] = Query(default=None),
    db: Session = Depends(get_db)
):
    if not token or not token.strip():
        raise ValidationError("Token is required")

    view = StudentService(db).get_embed_view(token.strip(), project)
    return EmbedStatusOut(
        project=ProjectBriefOut.model_validate(view.project),
        status=view.status.status,
        status_message=view.status.message,
        has_submitted=view.has_submitted,
        submitted_at=view.submitted_at,
    )
