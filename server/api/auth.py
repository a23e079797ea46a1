# server/api/auth.py

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.accounts import authenticate_user, register_user
from core.context import ServiceContext
from core.errors import Unauthenticated
from core.security import create_access_token, decode_access_token
from database import get_db


logger = logging.getLogger(__name__)

router = APIRouter()
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


class LoginRequest(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    token: str
    token_type: str = "bearer"


def get_context(request: Request) -> ServiceContext:
    return request.app.state.ctx


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    ctx: ServiceContext = Depends(get_context),
) -> str:
    if not token:
        raise Unauthenticated("Not authenticated.")
    settings = ctx.settings
    return decode_access_token(token, settings.jwt_secret_key, settings.jwt_algorithm)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    username: str = Form(...),
    password: str = Form(...),
    email: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    ctx: ServiceContext = Depends(get_context),
):
    avatar_upload = None
    if avatar is not None and avatar.filename:
        avatar_upload = (avatar.filename, avatar.file.read())

    register_user(
        db,
        ctx.sink,
        username,
        password,
        email=email,
        avatar=avatar_upload,
        upload_attempts=ctx.settings.upload_attempts,
        upload_backoff=ctx.settings.upload_backoff_seconds,
    )
    return {"message": "User registered successfully."}


@router.post("/login", response_model=Token)
def login(req: LoginRequest, db: Session = Depends(get_db), ctx: ServiceContext = Depends(get_context)):
    user = authenticate_user(db, req.username, req.password)
    settings = ctx.settings
    token = create_access_token(
        user.username,
        settings.jwt_secret_key,
        settings.jwt_algorithm,
        settings.access_token_expire_minutes,
    )
    logger.info("User %s logged in", user.username)
    return {"token": token, "token_type": "bearer"}


@router.post("/logout")
def logout():
    # tokens are stateless; the client just drops it
    return {"message": "Successfully logged out."}
