import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from starlette import status

from crud import users as crud_users
from database import get_db
from schemas.auth import LoginRequest, SignupRequest
from utils.auth_utils import create_access_token, get_current_user, get_user_identifier, require_permission

router = APIRouter(tags=["auth"])
logger = logging.getLogger("auth")


@router.post("/signup")
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    """Create an identity; an Owner supplying ``factory_name`` also creates the factory."""
    if crud_users.email_taken(db, body.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A user with this email already exists")

    user, factory_id = crud_users.create_user(db, body)
    logger.info(f"User {user['email']} signed up as {user['role']} (factory {factory_id})")
    return {"success": True, "user": user, "factory_id": factory_id}


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = crud_users.authenticate(db, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login credentials")

    access_token = create_access_token(data={"sub": user["id"]})
    return {"success": True, "access_token": access_token, "token_type": "bearer", "user": user}


@router.get("/me")
def me(user: dict = Depends(get_current_user)):
    return {"user": user}


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_factory_user(
    body: SignupRequest,
    db: Session = Depends(get_db),
    owner: dict = Depends(require_permission("create", "users")),
):
    """Owner adds a staff member to their own factory."""
    if crud_users.email_taken(db, body.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A user with this email already exists")

    user, _ = crud_users.create_user(db, body, factory_id=owner["factory_id"])
    logger.info(f"User {user['email']} ({user['role']}) added by {get_user_identifier(owner)} to factory {owner['factory_id']}")
    return {"success": True, "user": user}
