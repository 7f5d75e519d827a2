"""Sign-up and sign-in endpoints"""
from fastapi import APIRouter, Depends, status

from taskboard.api.responses import success
from taskboard.dependencies import get_auth_service
from taskboard.schemas import AuthResponse, SignInRequest, SignUpRequest
from taskboard.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.sign_up(payload)
    return success(
        "User account created.",
        AuthResponse(user=user, token=token),
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/sign-in")
def sign_in(payload: SignInRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.sign_in(payload)
    return success("Sign in successful.", AuthResponse(user=user, token=token))
