# shopcart/auth/controller.py
from fastapi import APIRouter
from starlette import status

from ..database.core import DbSession
from . import models
from . import service

router = APIRouter(prefix='/auth', tags=['auth'])


@router.post("/signup", status_code=status.HTTP_200_OK)
def sign_up(db: DbSession, register_user_request: models.SignUpRequest):
    service.register_user(db, register_user_request)
    return {"message": "User created successfully"}


@router.post("/signin", status_code=status.HTTP_200_OK)
def sign_in(db: DbSession, login_request: models.SignInRequest):
    """Returns a fresh access/refresh pair; any earlier pair stops working."""
    token_pair = service.login_user(db, login_request)
    return {"message": token_pair.model_dump()}


@router.post("/tokenrefresh", status_code=status.HTTP_200_OK)
def token_refresh(db: DbSession, refresh_request: models.TokenRefreshRequest):
    """Exchanges the current refresh token for a new access token."""
    access_token = service.refresh_access_token(db, refresh_request)
    return {"message": access_token}
