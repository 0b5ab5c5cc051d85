from fastapi import APIRouter, Depends, status

from auth_api.core.auth import get_current_auth, get_recovery_auth
from auth_api.core.config import Settings
from auth_api.core.deps import get_auth_service, get_settings, get_token_issuer
from auth_api.core.responses import api_response
from auth_api.core.security import TokenIssuer
from auth_api.models.auth import Auth
from auth_api.schemas.auth import (
    ActivateRequest,
    AuthResponse,
    ChangePasswordRequest,
    GoogleSignInRequest,
    LoginRequest,
    OtpMethod,
    RecoveryRequest,
    RecoveryVerifyRequest,
    RegisterRequest,
    ResendOtpRequest,
    ResetPasswordRequest,
)
from auth_api.schemas.user import UserResponse
from auth_api.services.auth_service import AuthService, SignIn

router = APIRouter()


def _sign_in_data(result: SignIn) -> dict:
    data = {"access_token": result.access_token}
    if result.refresh_token:
        data["refresh_token"] = result.refresh_token
    data["auth"] = AuthResponse.model_validate(result.auth).model_dump(mode="json")
    data["user"] = UserResponse.model_validate(result.user).model_dump(mode="json") if result.user else None
    return data


def _with_otp(data: dict, key: str, otp, app_settings: Settings) -> dict:
    # OTPs travel through the notifier; echoing them is a dev/test convenience only
    if app_settings.EXPOSE_OTP_IN_RESPONSE and otp:
        data[key] = otp
    return data


@router.post("/register")
def register(
    body: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_settings),
):
    """Create an unverified account and email a verification code."""
    result = service.register(
        email=body.email,
        password=body.password,
        confirm_password=body.confirm_password,
        name=body.name,
        phone_number=body.phone_number,
    )
    data = _with_otp({"is_verified": result.auth.is_verified}, "verification_otp", result.otp, app_settings)
    if not result.created:
        return api_response(
            "Your account already exists. Please verify now.",
            data,
            status_code=status.HTTP_409_CONFLICT,
            success=False,
        )
    return api_response("Registration successful", data, status_code=status.HTTP_201_CREATED)


@router.post("/activate")
def activate(body: ActivateRequest, service: AuthService = Depends(get_auth_service)):
    result = service.activate(body.email, body.verification_otp)
    return api_response("Account successfully verified.", _sign_in_data(result))


@router.post("/login")
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = service.login(body.email, body.password)
    return api_response("Login successful", _sign_in_data(result))


@router.post("/signin-with-google")
def signin_with_google(body: GoogleSignInRequest, service: AuthService = Depends(get_auth_service)):
    """Sign in with a Google identity already verified by the client."""
    result = service.sign_in_with_google(
        google_id=body.google_id,
        name=body.name,
        email=body.email,
        avatar=body.avatar,
    )
    return api_response("Login successful", _sign_in_data(result))


@router.post("/recovery")
def recovery(
    body: RecoveryRequest,
    service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_settings),
):
    """Email a short-lived recovery code."""
    result = service.request_recovery(body.email)
    return api_response("Success", _with_otp({}, "recovery_otp", result.otp, app_settings))


@router.post("/recovery-verify")
def recovery_verify(
    body: RecoveryVerifyRequest,
    service: AuthService = Depends(get_auth_service),
    tokens: TokenIssuer = Depends(get_token_issuer),
):
    """Check the recovery code; returns a recovery token that unlocks /auth/reset-password."""
    auth = service.verify_recovery(body.email, body.recovery_otp)
    return api_response(
        "Email successfully verified.",
        {"recovery_token": tokens.issue_recovery(auth.id, auth.recovery_nonce)},
    )


@router.put("/reset-password")
def reset_password(
    body: ResetPasswordRequest,
    auth: Auth = Depends(get_recovery_auth),
    service: AuthService = Depends(get_auth_service),
):
    service.reset_password(auth, body.password, body.confirm_password)
    return api_response("Password reset successful")


@router.post("/resend-otp")
def resend_otp(
    body: ResendOtpRequest,
    service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_settings),
):
    result = service.resend_otp(body.method, body.email)
    if result.already_verified:
        return api_response(
            "Your account is already verified. Please login.",
            {"is_verified": True},
            status_code=status.HTTP_409_CONFLICT,
        )
    if body.method == OtpMethod.email_recovery:
        data = _with_otp({}, "recovery_otp", result.otp, app_settings)
    else:
        data = _with_otp({"is_verified": result.auth.is_verified}, "verification_otp", result.otp, app_settings)
    return api_response("OTP resend successful", data)


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    auth: Auth = Depends(get_current_auth),
    service: AuthService = Depends(get_auth_service),
):
    service.change_password(auth.id, body.old_password, body.new_password)
    return api_response("Password changed successfully")


@router.delete("/delete")
def delete_account(
    auth: Auth = Depends(get_current_auth),
    service: AuthService = Depends(get_auth_service),
):
    service.remove_account(auth)
    return api_response("User Removed successfully")
