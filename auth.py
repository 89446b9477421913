import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi.security import APIKeyHeader
from fastapi import Depends, HTTPException, Security, status
from sqlalchemy.orm import Session

from database import UserORM, ApiKeyORM
from database.db import get_db
from repositories.user_repository import UserRepository
from repositories.api_key_repository import ApiKeyRepository
from core.exceptions import ForbiddenException
from core.security import (
    ROLE_LOGGED,
    get_reachable_roles,
    is_granted,
    require_role,
    verify_password,
)
from config import settings

logger = logging.getLogger(__name__)

# "Authorization: Bearer <jwt>" o "Authorization: ApiKey <token>"
authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    description="`Bearer <jwt>` o `ApiKey <token>`",
)

AUTH_JWT = "jwt"
AUTH_API_KEY = "api_key"


@dataclass
class Principal:
    """Identidad autenticada de la petición: un usuario o una API key."""
    identifier: str
    username: str
    roles: list[str]
    auth_method: str
    user: Optional[UserORM] = None
    api_key: Optional[ApiKeyORM] = None

    @classmethod
    def for_user(cls, user: UserORM) -> "Principal":
        return cls(
            identifier=user.id,
            username=user.username,
            roles=sorted(set(user.roles) | {ROLE_LOGGED}),
            auth_method=AUTH_JWT,
            user=user,
        )

    @classmethod
    def for_api_key(cls, api_key: ApiKeyORM) -> "Principal":
        return cls(
            identifier=api_key.id,
            username=f"ApiKey-{api_key.id}",
            roles=api_key.roles,
            auth_method=AUTH_API_KEY,
            api_key=api_key,
        )

    @property
    def user_id(self) -> Optional[str]:
        """ID para los campos de auditoría (None para API keys)."""
        return self.user.id if self.user is not None else None

    @property
    def reachable_roles(self) -> list[str]:
        return get_reachable_roles(self.roles)

    def is_granted(self, *roles: str) -> bool:
        return is_granted(self.roles, *roles)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token including standard claims (sub, iat, exp, iss, aud).

    `data` should include an identifier under the "sub" key (user id).
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_minutes))
    # Ensure standard claims
    if "sub" not in to_encode:
        raise ValueError("`data` must include `sub` (subject / user id)")
    to_encode.update({
        "exp": expire,
        "iat": now,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_user_token(user: UserORM, expires_delta: Optional[timedelta] = None) -> str:
    """JWT para un usuario con su username y sus roles."""
    return create_access_token(
        {"sub": user.id, "username": user.username, "roles": user.roles},
        expires_delta=expires_delta,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token.

    Validates signature, expiration, issuer and audience. Raises HTTPException(401)
    for any invalid token state.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )
        return payload
    except ExpiredSignatureError:
        logger.info("Token expirado")
        raise _unauthorized("Token expirado")
    except JWTError as e:
        logger.info(f"Token inválido o claim mismatch: {e}")
        raise _unauthorized("Token inválido o expirado")


def authenticate_user(db: Session, username: str, password: str) -> Optional[UserORM]:
    """Devuelve el usuario si username (o email) y contraseña son correctos."""
    user = UserRepository(db).load_user_by_username(username)
    if user is None or not verify_password(user.password, password):
        logger.info(f"Login fallido para '{username}'")
        return None
    return user


def authenticate(authorization: Optional[str], db: Session) -> Principal:
    """Resuelve el principal a partir de la cabecera Authorization.

    El usuario de un JWT se recarga de la base de datos en cada petición,
    así los cambios de grupos se aplican sin esperar a que caduque el token.
    """
    if not authorization:
        raise _unauthorized("No autenticado")

    scheme, _, credentials = authorization.strip().partition(" ")
    credentials = credentials.strip()
    if not credentials:
        raise _unauthorized("No autenticado")

    if scheme.lower() == "bearer":
        payload = decode_token(credentials)
        user_id = payload.get("sub")
        if not user_id:
            raise _unauthorized("Token inválido: sub faltante")
        user = UserRepository(db).find(user_id)
        if user is None:
            raise _unauthorized("Usuario no encontrado")
        return Principal.for_user(user)

    if scheme.lower() == "apikey":
        api_key = ApiKeyRepository(db).find_by_token(credentials)
        if api_key is None:
            logger.info("API key inválida")
            raise _unauthorized("API key inválida")
        return Principal.for_api_key(api_key)

    raise _unauthorized(f"Esquema de autenticación no soportado: {scheme}")


def get_current_principal(
    authorization: Optional[str] = Security(authorization_header),
    db: Session = Depends(get_db),
) -> Principal:
    return authenticate(authorization, db)


def require_roles(*required_roles):
    """Dependency factory that ensures the principal has ALL the required roles.

    Usage in route: principal = Depends(require_roles(ROLE_ADMIN))
    """

    def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        try:
            require_role(principal.roles, *required_roles)
        except ForbiddenException as e:
            logger.info(f"Acceso denegado a {principal.username}: requiere {list(required_roles)}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
        return principal

    return _dependency
