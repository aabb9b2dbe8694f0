"""Unit tests for IdentityService and the unlink availability rules."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from cabinet.config import UnlinkSettings
from cabinet.domain.error import PolicyBlockError, StateConflictError
from cabinet.domain.model import LinkedIdentity
from cabinet.domain.repository import IdentityUnlinkEventRepository
from cabinet.domain.service import IdentityService, evaluate_unlink
from cabinet.domain.value import (
    AccountId,
    AuthProvider,
    Blocked,
    BlockReason,
    LinkedIdentityId,
    Unblocked,
    UnlinkEventReason,
)
from cabinet.util.clock import FrozenClock
from tests.conftest import make_account, make_identity, make_telegram_account
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ACCOUNT = AccountId(uuid4())


def identity(provider: AuthProvider, linked_days_ago: float = 10) -> LinkedIdentity:
    linked_at = NOW - timedelta(days=linked_days_ago)
    return LinkedIdentity(
        id=LinkedIdentityId(uuid4()),
        account_id=ACCOUNT,
        provider=provider,
        provider_user_id=f"{provider.value}-id",
        linked_at=linked_at,
    )


class TestEvaluateUnlink:
    """Tests for the ordered unlink rules."""

    def test_unblocked(self):
        identities = [identity(AuthProvider.TELEGRAM), identity(AuthProvider.EMAIL)]

        result = evaluate_unlink(
            identities, AuthProvider.EMAIL, AuthProvider.TELEGRAM, NOW, UnlinkSettings()
        )

        assert result == Unblocked()

    def test_missing_identity_comes_first(self):
        result = evaluate_unlink([], AuthProvider.VK, None, NOW, UnlinkSettings())

        assert result == Blocked(reason=BlockReason.IDENTITY_NOT_LINKED)

    def test_last_identity_before_current_provider(self):
        """A sole identity that is also the session provider reports last_identity."""
        identities = [identity(AuthProvider.TELEGRAM)]

        result = evaluate_unlink(
            identities,
            AuthProvider.TELEGRAM,
            AuthProvider.TELEGRAM,
            NOW,
            UnlinkSettings(),
        )

        assert result.reason == BlockReason.LAST_IDENTITY

    def test_required_telegram(self):
        identities = [identity(AuthProvider.TELEGRAM), identity(AuthProvider.EMAIL)]

        result = evaluate_unlink(
            identities,
            AuthProvider.TELEGRAM,
            AuthProvider.EMAIL,
            NOW,
            UnlinkSettings(telegram_required=True),
        )

        assert result == Blocked(reason=BlockReason.TELEGRAM_REQUIRED)

    def test_cooldown_uses_latest_other_link(self):
        identities = [
            identity(AuthProvider.TELEGRAM),
            identity(AuthProvider.EMAIL, linked_days_ago=0.5),
            identity(AuthProvider.VK, linked_days_ago=0.25),
        ]

        result = evaluate_unlink(
            identities, AuthProvider.TELEGRAM, None, NOW, UnlinkSettings()
        )

        assert result.reason == BlockReason.COOLDOWN_ACTIVE
        assert result.until == NOW + timedelta(hours=18)

    def test_own_recent_link_does_not_block(self):
        """An identity linked a minute ago can itself be unlinked."""
        identities = [
            identity(AuthProvider.TELEGRAM),
            identity(AuthProvider.EMAIL, linked_days_ago=0.001),
        ]

        result = evaluate_unlink(
            identities, AuthProvider.EMAIL, AuthProvider.TELEGRAM, NOW, UnlinkSettings()
        )

        assert result == Unblocked()

    def test_blocked_cooldown_requires_until(self):
        with pytest.raises(ValueError):
            Blocked(reason=BlockReason.COOLDOWN_ACTIVE)

    def test_untimed_block_rejects_until(self):
        with pytest.raises(ValueError):
            Blocked(reason=BlockReason.LAST_IDENTITY, until=NOW)


class TestTelegramRelink:
    """Tests for the 30 day Telegram relink cooldown."""

    @pytest.mark.asyncio
    async def test_attached_telegram_requires_unlink_first(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        account = await make_telegram_account(unit_env, "1")

        # Act
        status = await service.telegram_relink_status(account.id)

        # Assert
        assert status.can_start_relink is False
        assert status.requires_unlink_first is True

        with pytest.raises(PolicyBlockError) as exc_info:
            await service.attach(account.id, AuthProvider.TELEGRAM, "2")
        assert exc_info.value.code.value == "telegram_relink_requires_unlink"

    @pytest.mark.asyncio
    async def test_cooldown_counts_down_and_lifts(self, unit_env):
        """retry_after shrinks as time passes and relink opens after 30 days."""
        # Arrange
        service = await unit_env.get(IdentityService)
        clock = await unit_env.get(FrozenClock)
        account = await make_account(unit_env)
        await make_identity(unit_env, account, AuthProvider.EMAIL, "e@x.io")
        telegram = await make_identity(unit_env, account, AuthProvider.TELEGRAM, "77")
        await service.detach(telegram, UnlinkEventReason.USER_UNLINK)
        unlinked_at = clock.now()

        # Act
        first = await service.telegram_relink_status(account.id)
        clock.advance(days=10)
        second = await service.telegram_relink_status(account.id)
        clock.advance(days=20)
        lifted = await service.telegram_relink_status(account.id)

        # Assert
        assert first.can_start_relink is False
        assert first.cooldown_until == unlinked_at + timedelta(days=30)
        assert first.retry_after_seconds == 30 * 86400
        assert second.retry_after_seconds == 20 * 86400
        assert second.retry_after_seconds < first.retry_after_seconds
        assert lifted.can_start_relink is True
        assert lifted.retry_after_seconds is None

    @pytest.mark.asyncio
    async def test_attach_during_cooldown_is_blocked(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        clock = await unit_env.get(FrozenClock)
        account = await make_account(unit_env)
        await make_identity(unit_env, account, AuthProvider.EMAIL, "e@x.io")
        telegram = await make_identity(unit_env, account, AuthProvider.TELEGRAM, "77")
        await service.detach(telegram, UnlinkEventReason.USER_UNLINK)
        clock.advance(days=29)

        # Act & Assert
        with pytest.raises(PolicyBlockError) as exc_info:
            await service.attach(account.id, AuthProvider.TELEGRAM, "78")
        assert exc_info.value.code.value == "telegram_relink_cooldown_active"
        assert exc_info.value.retry_after_seconds == 86400

    @pytest.mark.asyncio
    async def test_merge_replacement_does_not_start_cooldown(self, unit_env):
        """Only user-initiated unlinks count towards the relink cooldown."""
        # Arrange
        service = await unit_env.get(IdentityService)
        account = await make_account(unit_env)
        await make_identity(unit_env, account, AuthProvider.EMAIL, "e@x.io")
        telegram = await make_identity(unit_env, account, AuthProvider.TELEGRAM, "77")
        await service.detach(telegram, UnlinkEventReason.REPLACED_BY_MERGE)

        # Act
        status = await service.telegram_relink_status(account.id)

        # Assert
        assert status.can_start_relink is True


class TestAttachDetach:
    """Tests for attaching and detaching identities."""

    @pytest.mark.asyncio
    async def test_attach_new_identity(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        clock = await unit_env.get(FrozenClock)
        account = await make_telegram_account(unit_env, "1")

        # Act
        attached = await service.attach(
            account.id, AuthProvider.YANDEX, "ya-1", "Yandex User"
        )

        # Assert
        assert attached.account_id == account.id
        assert attached.linked_at == clock.now()
        assert attached.display_name == "Yandex User"

    @pytest.mark.asyncio
    async def test_attach_same_identity_twice_is_noop(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        account = await make_telegram_account(unit_env, "1")
        first = await service.attach(account.id, AuthProvider.VK, "vk-1")

        # Act
        second = await service.attach(account.id, AuthProvider.VK, "vk-1")

        # Assert
        assert second.id == first.id

    @pytest.mark.asyncio
    async def test_attach_identity_of_other_account(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        owner = await make_account(unit_env)
        await make_identity(unit_env, owner, AuthProvider.VK, "vk-1")
        account = await make_telegram_account(unit_env, "1")

        # Act & Assert
        with pytest.raises(StateConflictError) as exc_info:
            await service.attach(account.id, AuthProvider.VK, "vk-1")
        assert exc_info.value.code.value == "identity_linked_to_other_account"

    @pytest.mark.asyncio
    async def test_attach_second_identity_of_provider(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        account = await make_telegram_account(unit_env, "1")
        await make_identity(unit_env, account, AuthProvider.VK, "vk-1")

        # Act & Assert
        with pytest.raises(PolicyBlockError) as exc_info:
            await service.attach(account.id, AuthProvider.VK, "vk-2")
        assert exc_info.value.code.value == "provider_already_linked"

    @pytest.mark.asyncio
    async def test_detach_records_event(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        events = await unit_env.get(IdentityUnlinkEventRepository)
        account = await make_telegram_account(unit_env, "1")
        email = await make_identity(unit_env, account, AuthProvider.EMAIL, "e@x.io")

        # Act
        event = await service.detach(email, UnlinkEventReason.USER_UNLINK)

        # Assert
        assert event.provider_user_id == "e@x.io"
        assert await service.list_identities(account.id) != []
        latest = await events.find_latest(
            account.id, AuthProvider.EMAIL, UnlinkEventReason.USER_UNLINK
        )
        assert latest == event

    @pytest.mark.asyncio
    async def test_identity_hints_are_masked(self, unit_env):
        # Arrange
        service = await unit_env.get(IdentityService)
        account = await make_telegram_account(unit_env, "987654321")
        await make_identity(unit_env, account, AuthProvider.EMAIL, "alice@example.com")

        # Act
        hints = await service.identity_hints(account.id)

        # Assert
        assert hints == {"telegram": "...321", "email": "a***@example.com"}
