"""Unit tests for the linked identity use cases."""

from datetime import timedelta

import pytest

from cabinet.adapter.notification.otp import MockOtpSender
from cabinet.adapter.yandex.client import YandexOAuthClient
from cabinet.application.usecase.identity import (
    ConfirmUnlinkRequest,
    ConfirmUnlinkUseCase,
    InitiateOAuthLinkRequest,
    InitiateOAuthLinkUseCase,
    LinkOAuthIdentityRequest,
    LinkOAuthIdentityUseCase,
    LinkTelegramRequest,
    LinkTelegramUseCase,
    ListLinkedIdentitiesRequest,
    ListLinkedIdentitiesUseCase,
    RequestUnlinkRequest,
    RequestUnlinkUseCase,
)
from cabinet.domain.error import (
    DependencyUnavailableError,
    PolicyBlockError,
    StateConflictError,
)
from cabinet.domain.repository import AccountRepository
from cabinet.domain.value import AuthProvider
from cabinet.util.clock import Clock
from tests.conftest import (
    make_account,
    make_identity,
    make_telegram_account,
    signed_login_data,
)
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def telegram_and_email(env):
    account = await make_telegram_account(env, "123456789")
    await make_identity(env, account, AuthProvider.EMAIL, "user@example.com")
    return account


def by_provider(response):
    return {item.provider: item for item in response.identities}


class TestListLinkedIdentities:
    """Tests for ListLinkedIdentitiesUseCase."""

    @pytest.mark.asyncio
    async def test_session_provider_defaults_to_primary(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ListLinkedIdentitiesUseCase)
        account = await telegram_and_email(unit_env)

        # Act
        response = await use_case.execute(
            ListLinkedIdentitiesRequest(account_id=str(account.id))
        )

        # Assert
        items = by_provider(response)
        assert items[AuthProvider.TELEGRAM].can_unlink is False
        assert items[AuthProvider.TELEGRAM].blocked_reason == "current_auth_provider"
        assert items[AuthProvider.TELEGRAM].provider_user_id_masked == "...789"
        assert items[AuthProvider.EMAIL].can_unlink is True
        assert items[AuthProvider.EMAIL].blocked_reason is None
        assert response.telegram_relink.requires_unlink_first is True
        assert response.telegram_relink.can_start_relink is False

    @pytest.mark.asyncio
    async def test_recent_link_blocks_other_identities(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ListLinkedIdentitiesUseCase)
        clock = await unit_env.get(Clock)
        account = await telegram_and_email(unit_env)
        await make_identity(
            unit_env,
            account,
            AuthProvider.YANDEX,
            "yandex-1",
            linked_at=clock.now() - timedelta(hours=1),
        )

        # Act
        response = await use_case.execute(
            ListLinkedIdentitiesRequest(account_id=str(account.id))
        )

        # Assert
        email = by_provider(response)[AuthProvider.EMAIL]
        assert email.can_unlink is False
        assert email.blocked_reason == "cooldown_active"
        assert email.retry_after_seconds == 23 * 3600
        assert email.blocked_until == clock.now() + timedelta(hours=23)
        assert by_provider(response)[AuthProvider.YANDEX].can_unlink is True

    @pytest.mark.asyncio
    async def test_single_identity_is_last(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ListLinkedIdentitiesUseCase)
        account = await make_telegram_account(unit_env, "1")

        # Act
        response = await use_case.execute(
            ListLinkedIdentitiesRequest(
                account_id=str(account.id), auth_provider=AuthProvider.EMAIL
            )
        )

        # Assert
        assert response.identities[0].blocked_reason == "last_identity"


class TestLinkTelegram:
    """Tests for LinkTelegramUseCase."""

    @pytest.mark.asyncio
    async def test_links_verified_telegram(self, unit_env):
        # Arrange
        use_case = await unit_env.get(LinkTelegramUseCase)
        account = await make_account(unit_env, primary_auth_provider=AuthProvider.EMAIL)
        await make_identity(unit_env, account, AuthProvider.EMAIL, "user@example.com")
        login_data = await signed_login_data(unit_env)

        # Act
        response = await use_case.execute(
            LinkTelegramRequest(account_id=str(account.id), login_data=login_data)
        )

        # Assert
        assert response.provider == AuthProvider.TELEGRAM
        assert response.provider_user_id_masked == "...789"

    @pytest.mark.asyncio
    async def test_telegram_of_another_account(self, unit_env):
        # Arrange
        use_case = await unit_env.get(LinkTelegramUseCase)
        await make_telegram_account(unit_env, "123456789")
        account = await make_account(unit_env, primary_auth_provider=AuthProvider.EMAIL)
        login_data = await signed_login_data(unit_env)

        # Act & Assert
        with pytest.raises(StateConflictError) as exc_info:
            await use_case.execute(
                LinkTelegramRequest(account_id=str(account.id), login_data=login_data)
            )
        assert exc_info.value.code.value == "identity_linked_to_other_account"


class TestOAuthLink:
    """Tests for the OAuth initiate and link use cases."""

    @pytest.mark.asyncio
    async def test_initiate_returns_state_in_url(self, unit_env):
        # Arrange
        use_case = await unit_env.get(InitiateOAuthLinkUseCase)

        # Act
        response = await use_case.execute(InitiateOAuthLinkRequest(provider="vk"))

        # Assert
        assert response.state
        assert f"state={response.state}" in response.authorization_url

    @pytest.mark.asyncio
    async def test_initiate_for_non_oauth_provider(self, unit_env):
        # Arrange
        use_case = await unit_env.get(InitiateOAuthLinkUseCase)

        # Act & Assert
        with pytest.raises(PolicyBlockError) as exc_info:
            await use_case.execute(InitiateOAuthLinkRequest(provider="telegram"))
        assert exc_info.value.code.value == "provider_not_supported"

    @pytest.mark.asyncio
    async def test_link_yandex(self, unit_env):
        # Arrange
        use_case = await unit_env.get(LinkOAuthIdentityUseCase)
        account = await make_telegram_account(unit_env, "1")

        # Act
        response = await use_case.execute(
            LinkOAuthIdentityRequest(
                account_id=str(account.id), provider="Yandex", code="c", state="s"
            )
        )

        # Assert
        assert response.provider == AuthProvider.YANDEX

    @pytest.mark.asyncio
    async def test_provider_failure_is_dependency_error(self, unit_env):
        # Arrange
        use_case = await unit_env.get(LinkOAuthIdentityUseCase)
        yandex = await unit_env.get(YandexOAuthClient)
        yandex.fail = True
        account = await make_telegram_account(unit_env, "1")

        # Act & Assert
        with pytest.raises(DependencyUnavailableError) as exc_info:
            await use_case.execute(
                LinkOAuthIdentityRequest(
                    account_id=str(account.id), provider="yandex", code="c", state="s"
                )
            )
        assert exc_info.value.code.value == "oauth_failed"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, unit_env):
        # Arrange
        use_case = await unit_env.get(LinkOAuthIdentityUseCase)
        account = await make_telegram_account(unit_env, "1")

        # Act & Assert
        with pytest.raises(PolicyBlockError) as exc_info:
            await use_case.execute(
                LinkOAuthIdentityRequest(
                    account_id=str(account.id), provider="myspace", code="c", state="s"
                )
            )
        assert exc_info.value.code.value == "provider_not_supported"


class TestUnlinkUseCases:
    """Tests for the request and confirm unlink use cases."""

    @pytest.mark.asyncio
    async def test_request_then_confirm(self, unit_env):
        # Arrange
        request_unlink = await unit_env.get(RequestUnlinkUseCase)
        confirm_unlink = await unit_env.get(ConfirmUnlinkUseCase)
        list_identities = await unit_env.get(ListLinkedIdentitiesUseCase)
        sender = await unit_env.get(MockOtpSender)
        account = await telegram_and_email(unit_env)

        # Act
        issued = await request_unlink.execute(
            RequestUnlinkRequest(account_id=str(account.id), provider="email")
        )
        confirmed = await confirm_unlink.execute(
            ConfirmUnlinkRequest(
                account_id=str(account.id),
                provider="email",
                request_token=issued.request_token,
                otp_code=sender.last_otp,
            )
        )

        # Assert
        assert issued.provider == AuthProvider.EMAIL
        assert issued.expires_in_seconds == 600
        assert issued.resend_available_in_seconds == 60
        assert confirmed.success is True
        assert confirmed.provider == AuthProvider.EMAIL
        remaining = await list_identities.execute(
            ListLinkedIdentitiesRequest(account_id=str(account.id))
        )
        assert [item.provider for item in remaining.identities] == [
            AuthProvider.TELEGRAM
        ]

    @pytest.mark.asyncio
    async def test_unlinking_telegram_starts_relink_cooldown(self, unit_env):
        # Arrange
        request_unlink = await unit_env.get(RequestUnlinkUseCase)
        confirm_unlink = await unit_env.get(ConfirmUnlinkUseCase)
        list_identities = await unit_env.get(ListLinkedIdentitiesUseCase)
        sender = await unit_env.get(MockOtpSender)
        accounts = await unit_env.get(AccountRepository)
        account = await telegram_and_email(unit_env)

        # Act
        issued = await request_unlink.execute(
            RequestUnlinkRequest(
                account_id=str(account.id),
                provider="telegram",
                auth_provider=AuthProvider.EMAIL,
            )
        )
        await confirm_unlink.execute(
            ConfirmUnlinkRequest(
                account_id=str(account.id),
                provider="telegram",
                request_token=issued.request_token,
                otp_code=sender.last_otp,
                auth_provider=AuthProvider.EMAIL,
            )
        )

        # Assert
        response = await list_identities.execute(
            ListLinkedIdentitiesRequest(
                account_id=str(account.id), auth_provider=AuthProvider.EMAIL
            )
        )
        assert response.telegram_relink.can_start_relink is False
        assert response.telegram_relink.requires_unlink_first is False
        assert response.telegram_relink.retry_after_seconds == 30 * 86400
        stored = await accounts.find_by_id(account.id)
        assert stored.primary_auth_provider == AuthProvider.EMAIL

    @pytest.mark.asyncio
    async def test_request_for_unknown_provider(self, unit_env):
        # Arrange
        use_case = await unit_env.get(RequestUnlinkUseCase)
        account = await telegram_and_email(unit_env)

        # Act & Assert
        with pytest.raises(PolicyBlockError) as exc_info:
            await use_case.execute(
                RequestUnlinkRequest(account_id=str(account.id), provider="myspace")
            )
        assert exc_info.value.reason == "provider_not_supported"
