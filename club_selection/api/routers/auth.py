# club_selection/api/routers/auth.py - Admin login
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from club_selection.core.db import get_db
from club_selection.core.security import token_manager
from club_selection.services.admin_service import AdminService
from club_selection.schemas.admin import LoginIn, LoginOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginOut)
def login(
    credentials: LoginIn,
    db: Session = Depends(get_db)
):
    """Authenticate an admin and issue an access token"""
    admin = AdminService(db).authenticate(credentials.username, credentials.password)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = token_manager.create_access_token(
        subject=admin.id,
        role="admin",
        additional_claims={"username": admin.username},
    )
    return LoginOut(access_token=access_token)
