from datetime import timedelta
from typing import Dict, Optional
import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from crud import kv_store
from database import get_db
from utils import utc_now
from utils.permissions import is_allowed

load_dotenv()

logger = logging.getLogger(__name__)

# === Token Configuration ===
# Override SECRET_KEY in every deployed environment.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-factory-ops-development-key")
# Algorithm used to encode the JWT token
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = utc_now() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Dict[str, any]:
    """
    FastAPI dependency resolving the bearer token in the Authorization header
    to the stored user record ``{id, email, name, role, factory_id}``.

    Usage:
        @router.get("/me")
        def me(user: dict = Depends(get_current_user)):
            return {"user": user}
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    token = parts[1]
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = kv_store.get_value(db, f"users:{user_id}")
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def get_user_identifier(user: dict) -> str:
    """Best human-readable identifier for audit fields and log lines."""
    return user.get("email") or user.get("id") or "unknown"


def require_permission(action: str, entity: str):
    """
    Dependency factory gating an endpoint through the policy table in
    utils/permissions.py. Users without a factory are always rejected.
    """
    def dependency(user: dict = Depends(get_current_user)) -> dict:
        if not user.get("factory_id") or not is_allowed(user.get("role"), action, entity):
            logger.warning(
                f"Denied {action} on {entity} for user {get_user_identifier(user)} with role {user.get('role')}"
            )
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return user

    return dependency
