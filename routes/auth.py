from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import Principal, authenticate_user, create_user_token, require_roles
from core.security import ROLE_LOGGED
from database.db import get_db
from models.users import Profile

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Request model for JSON login (username or email)."""
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str


@router.post("/getToken", response_model=TokenResponse)
def get_token(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Login endpoint that accepts JSON and returns a JWT.
    """
    user = authenticate_user(db, login_data.username, login_data.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bad credentials")
    return {"token": create_user_token(user)}


@router.post("/token")
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    OAuth2 compatible token endpoint (form-data).
    Used by Swagger UI and OAuth2 clients.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bad credentials")
    return {"access_token": create_user_token(user), "token_type": "bearer"}


@router.get("/profile", response_model=Profile)
def profile(principal: Principal = Depends(require_roles(ROLE_LOGGED))):
    """Datos del usuario autenticado y sus roles efectivos."""
    if principal.user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Las API keys no tienen perfil de usuario"
        )
    data = Profile.model_validate(principal.user).model_dump()
    data["roles"] = principal.reachable_roles
    return data


@router.get("/roles", response_model=List[str])
def roles(principal: Principal = Depends(require_roles(ROLE_LOGGED))):
    """Roles alcanzables por el principal según la jerarquía."""
    return principal.reachable_roles
