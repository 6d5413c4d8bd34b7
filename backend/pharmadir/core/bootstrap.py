# pharmadir/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the default admin account on first startup.
"""
import logging
from pharmadir.core.context import AppContext
from pharmadir.schemas.identity import Role
from pharmadir.services.identity_base import AccountNotFoundError, ProviderError
from pharmadir.services.store_base import SERVER_TIMESTAMP

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin(ctx: AppContext) -> None:
    """
    Create a verified ADMIN account from ADMIN_EMAIL / ADMIN_PASSWORD if that
    account does not exist yet.
    Only takes effect when ADMIN_PASSWORD is set (to avoid a default weak password).
    """
    settings = ctx.settings
    if not settings.admin_password:
        logger.warning("[bootstrap] ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    try:
        await ctx.provider.get_account_by_email(settings.admin_email)
        return  # Already bootstrapped (or the email was registered by hand)
    except AccountNotFoundError:
        pass

    try:
        account = await ctx.provider.create_account(settings.admin_email, settings.admin_password, settings.admin_name)
    except ProviderError as exc:
        logger.warning("[bootstrap] Default admin not created: %s", exc.message)
        return
    await ctx.provider.update_account(account.uid, email_verified=True)
    await ctx.store.set("users", account.uid, {
        "email": account.email,
        "displayName": account.display_name,
        "role": Role.ADMIN.value,
        "favorites": [],
        "createdAt": SERVER_TIMESTAMP,
    })
    logger.warning("[bootstrap] Created default admin -> email=%s uid=%s", account.email, account.uid)
