# pharmadir/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pharmadir.api.v1.deps import get_context, get_current_identity
from pharmadir.core.context import AppContext
from pharmadir.schemas.auth import EmailIn, LoginIn, RegisterIn, ResetPasswordIn
from pharmadir.schemas.identity import UserIdentity

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register")
async def register(body: RegisterIn, ctx: AppContext = Depends(get_context)):
    """
    Register a new account.

    Creates the identity-provider account and the user profile (role USER),
    then emails a verification link. The account cannot log in until the
    link has been followed.

    Returns:
        dict: {"success": True, "data": {"message": str}}

    Error codes:
        - INVALID_INPUT (400): Provider rejected the account (duplicate email,
          weak password, malformed email); the provider's message is returned
    """
    data = await ctx.auth.register(body.email, body.password, body.name)
    return {"success": True, "data": data}

@router.post("/login")
async def login(body: LoginIn, ctx: AppContext = Depends(get_context)):
    """
    Authenticate and obtain a session token.

    Returns:
        dict: {"success": True, "data": {"token": str, "user": {name, email, role}}}

    Error codes:
        - UNAUTHORIZED (401): "Invalid credentials" or "Email is not verified"
    """
    data = await ctx.auth.login(body.email, body.password)
    return {"success": True, "data": data}

@router.get("/verify-email")
async def verify_email(
    token: str = Query(..., min_length=1),
    continueUrl: str | None = Query(default=None),
    ctx: AppContext = Depends(get_context),
):
    """
    Target of the emailed verification link.

    Marks the account verified, then redirects to continueUrl when the link
    carries one (the client's "email verified" page), otherwise answers JSON.

    Error codes:
        - INVALID_INPUT (400): Invalid or expired verification link
    """
    data = await ctx.auth.verify_email(token)
    if continueUrl:
        return RedirectResponse(continueUrl, status_code=303)
    return {"success": True, "data": data}

@router.post("/resend-verification")
async def resend_verification(body: EmailIn, ctx: AppContext = Depends(get_context)):
    """
    Send a fresh verification email. Same answer whether or not the account exists.
    """
    data = await ctx.auth.resend_verification(body.email)
    return {"success": True, "data": data}

@router.post("/forgot-password")
async def forgot_password(body: EmailIn, ctx: AppContext = Depends(get_context)):
    """
    Email a password reset link.

    Always returns the same message so the endpoint cannot be used to find
    out which emails are registered.
    """
    data = await ctx.auth.forgot_password(body.email)
    return {"success": True, "data": data}

@router.post("/reset-password")
async def reset_password(body: ResetPasswordIn, ctx: AppContext = Depends(get_context)):
    """
    Set a new password using the token from the reset link.

    Error codes:
        - INVALID_INPUT (400): Invalid, expired or already used reset token
    """
    data = await ctx.auth.reset_password(body.token, body.newPassword)
    return {"success": True, "data": data}

@router.get("/me")
async def me(identity: UserIdentity = Depends(get_current_identity)):
    """
    Identity of the caller as resolved from the bearer token.
    """
    return {"success": True, "data": identity.model_dump(mode="json")}
