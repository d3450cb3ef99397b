"""
Identity Controllers (API Routes)
=================================

Sign-in, sign-out, password reset and current-user endpoints.
"""

from fastapi import APIRouter, Depends

from seva.identity.application import (
    AuthService,
    AuthUserResponse,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
)
from seva.identity.domain import AuthSession, AuthUser
from seva.identity.interfaces.dependencies import (
    get_auth_service,
    get_auth_session,
    require_user,
)

router = APIRouter(prefix="/auth", tags=["Identity"])


@router.post(
    "/login",
    response_model=AuthUserResponse,
    summary="Sign in with email and password",
    description="""
    Exchange credentials for an ID token issued by the identity provider.

    Send the returned `id_token` as `Authorization: Bearer <id_token>` on
    every admin route.

    **Errors (401)**:
    - Invalid email or password.
    - Too many failed attempts. Please try again later or reset your password.
    - This account has been disabled. Please contact support.
    - Invalid credentials. Please try again.
    """
)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthUserResponse:
    session = AuthSession()
    user = await auth_service.login(session, payload.email, payload.password)
    return AuthUserResponse(
        uid=user.uid,
        email=user.email,
        display_name=user.display_name,
        id_token=user.id_token,
    )


@router.post("/logout", response_model=MessageResponse, summary="Sign out")
async def logout(
    session: AuthSession = Depends(get_auth_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.logout(session)
    return MessageResponse(message="Signed out")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Send a password reset email"
)
async def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.reset_password(payload.email)
    return MessageResponse(message="Password reset email sent")


@router.get("/me", response_model=AuthUserResponse, summary="Current user")
async def me(user: AuthUser = Depends(require_user)) -> AuthUserResponse:
    return AuthUserResponse(uid=user.uid, email=user.email, display_name=user.display_name)


identity_router = router
