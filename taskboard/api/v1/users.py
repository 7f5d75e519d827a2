from fastapi import APIRouter, Depends

from taskboard.api.responses import success
from taskboard.dependencies import get_auth_service, get_current_user
from taskboard.services.auth import AuthPayload, AuthService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(
    current_user: AuthPayload = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    return success("All users.", auth.list_users())
