from typing import Optional, Tuple

from sqlalchemy.orm import Session

from crud import kv_store
from schemas.auth import Factory, SignupRequest, User
from utils import generate_id, utc_now_iso
from utils.auth_utils import hash_password, verify_password
from utils.permissions import Role


def _credential_key(email: str) -> str:
    return f"credentials:{email.strip().lower()}"


def get_user(db: Session, user_id: str) -> Optional[dict]:
    return kv_store.get_value(db, f"users:{user_id}")


def get_factory(db: Session, factory_id: str) -> Optional[dict]:
    return kv_store.get_value(db, f"factories:{factory_id}")


def email_taken(db: Session, email: str) -> bool:
    return kv_store.get_value(db, _credential_key(email)) is not None


def create_user(db: Session, signup: SignupRequest, factory_id: Optional[str] = None) -> Tuple[dict, Optional[str]]:
    """
    Store a user and its hashed credential. An Owner signing up with a
    factory name also creates that factory. Returns ``(user, factory_id)``.
    """
    user_id = generate_id()
    writes = []

    if signup.role == Role.OWNER and signup.factory_name and factory_id is None:
        factory_id = generate_id()
        factory = Factory(id=factory_id, name=signup.factory_name, created_at=utc_now_iso()).model_dump()
        writes.append((f"factories:{factory_id}", factory))

    user = User(
        id=user_id,
        email=signup.email,
        name=signup.name,
        factory_id=factory_id,
        role=signup.role,
        created_at=utc_now_iso(),
    ).model_dump(mode="json")
    writes.append((f"users:{user_id}", user))
    writes.append((_credential_key(signup.email), {"user_id": user_id, "hashed_password": hash_password(signup.password)}))

    kv_store.set_many(db, writes)
    return user, factory_id


def authenticate(db: Session, email: str, password: str) -> Optional[dict]:
    credential = kv_store.get_value(db, _credential_key(email))
    if not credential or not verify_password(password, credential["hashed_password"]):
        return None
    return get_user(db, credential["user_id"])
