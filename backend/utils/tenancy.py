from fastapi import Depends

from utils.auth_utils import get_current_user


def get_factory_id(user: dict = Depends(get_current_user)) -> str:
    """
    Factory scope of the caller. Routes pair this with ``require_permission``,
    which already rejects users not yet assigned to a factory.
    """
    return user["factory_id"]
