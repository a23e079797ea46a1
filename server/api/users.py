# server/api/users.py

import mimetypes

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from api.auth import get_context, get_current_user
from core.accounts import get_profile, leaderboard
from core.context import ServiceContext
from database import get_db


router = APIRouter()


class Profile(BaseModel):
    """
    Public view of a user; the password hash never leaves the server.
    """
    model_config = ConfigDict(from_attributes=True)

    username: str
    email: str | None = None
    avatar_url: str | None = None
    score: int


@router.get("/user", response_model=Profile)
def read_current_user(db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return get_profile(db, current_user)


@router.get("/leaderboard", response_model=list[Profile])
def read_leaderboard(db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    """
    All users ordered by score, highest first.
    """
    return leaderboard(db)


@router.get("/uploads/{ref}")
def view_upload(ref: str, ctx: ServiceContext = Depends(get_context)):
    """
    Returns a stored proof or avatar for inline viewing.
    """
    data = ctx.sink.get(ref)
    media_type = mimetypes.guess_type(ref)[0] or "application/octet-stream"
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f"inline; filename={ref}"}
    )
