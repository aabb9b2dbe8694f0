"""Test configuration and shared helpers."""

from datetime import datetime, timedelta
from uuid import uuid4

from dishka import AsyncContainer

from cabinet.config import AuthSettings
from cabinet.domain.model import Account, LinkedIdentity
from cabinet.domain.repository import AccountRepository, LinkedIdentityRepository
from cabinet.domain.service.telegram_auth_service import sign_login_data
from cabinet.domain.value import (
    AccountId,
    AuthProvider,
    LinkedIdentityId,
    TelegramLoginData,
)
from cabinet.util.clock import Clock


async def make_account(env: AsyncContainer, **fields) -> Account:
    """Store an active account.

    Args:
        env: Request container of the test environment
        **fields: Account field overrides (balance_kopeks, is_active...)

    Returns:
        The stored account
    """
    repo = await env.get(AccountRepository)
    return await repo.save(Account(id=AccountId(uuid4()), **fields))


async def make_identity(
    env: AsyncContainer,
    account: Account,
    provider: AuthProvider,
    provider_user_id: str,
    linked_at: datetime | None = None,
) -> LinkedIdentity:
    """Store an identity directly, bypassing the attach rules.

    Identities default to being linked two days ago so that the identity
    change cooldown does not interfere with tests that are not about it.
    """
    clock = await env.get(Clock)
    repo = await env.get(LinkedIdentityRepository)
    linked = linked_at or clock.now() - timedelta(days=2)
    return await repo.save(
        LinkedIdentity(
            id=LinkedIdentityId(uuid4()),
            account_id=account.id,
            provider=provider,
            provider_user_id=provider_user_id,
            linked_at=linked,
            created_at=linked,
            updated_at=linked,
        )
    )


async def make_telegram_account(
    env: AsyncContainer, telegram_id: str, **fields
) -> Account:
    """Store an account whose only sign-in method is Telegram."""
    account = await make_account(
        env, primary_auth_provider=AuthProvider.TELEGRAM, **fields
    )
    await make_identity(env, account, AuthProvider.TELEGRAM, telegram_id)
    return account


async def signed_login_data(env: AsyncContainer, **fields) -> TelegramLoginData:
    """Login widget payload signed with the configured bot token."""
    clock = await env.get(Clock)
    settings = await env.get(AuthSettings)
    values = {
        "id": 123456789,
        "first_name": "Ivan",
        "username": "ivan",
        "auth_date": int(clock.now().timestamp()),
        "hash": "",
    }
    values.update(fields)
    unsigned = TelegramLoginData(**values)
    return unsigned.model_copy(
        update={"hash": sign_login_data(unsigned, settings.telegram_bot_token)}
    )
