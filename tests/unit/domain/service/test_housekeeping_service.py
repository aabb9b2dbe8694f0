"""Unit tests for HousekeepingService."""

from datetime import timedelta

import pytest

from cabinet.adapter.notification.otp import MockOtpSender
from cabinet.domain.error import ValidationError
from cabinet.domain.repository import (
    LinkCodeRepository,
    OtpAttemptRepository,
    UnlinkRequestRepository,
)
from cabinet.domain.service import (
    HousekeepingService,
    LinkCodeService,
    ManualMergeService,
    UnlinkService,
)
from cabinet.domain.value import AuthProvider
from cabinet.util.clock import FrozenClock
from tests.conftest import make_account, make_identity, make_telegram_account
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestPurgeExpired:
    """Tests for purging expired linking state."""

    @pytest.mark.asyncio
    async def test_nothing_to_purge(self, unit_env):
        # Arrange
        service = await unit_env.get(HousekeepingService)

        # Act
        result = await service.purge_expired()

        # Assert
        assert result.link_codes == 0
        assert result.unlink_requests == 0
        assert result.otp_attempts == 0

    @pytest.mark.asyncio
    async def test_purges_stale_codes_but_keeps_recent_ones(self, unit_env):
        # Arrange
        service = await unit_env.get(HousekeepingService)
        link_codes = await unit_env.get(LinkCodeService)
        repo = await unit_env.get(LinkCodeRepository)
        clock = await unit_env.get(FrozenClock)
        old = await link_codes.create(await make_telegram_account(unit_env, "1"))
        clock.advance(hours=25)
        fresh = await link_codes.create(await make_telegram_account(unit_env, "2"))

        # Act
        result = await service.purge_expired()

        # Assert
        assert result.link_codes == 1
        assert await repo.find_by_id(old.id) is None
        assert await repo.find_by_id(fresh.id) is not None

    @pytest.mark.asyncio
    async def test_codes_under_review_are_kept(self, unit_env):
        # Arrange
        service = await unit_env.get(HousekeepingService)
        link_codes = await unit_env.get(LinkCodeService)
        manual_merges = await unit_env.get(ManualMergeService)
        repo = await unit_env.get(LinkCodeRepository)
        clock = await unit_env.get(FrozenClock)
        source = await make_telegram_account(unit_env, "1", balance_kopeks=5)
        requester = await make_telegram_account(unit_env, "2", balance_kopeks=5)
        code = await link_codes.create(source)
        await manual_merges.submit(code.code.root, requester.id)
        clock.advance(days=3)

        # Act
        result = await service.purge_expired()

        # Assert
        assert result.link_codes == 0
        assert await repo.find_by_id(code.id) is not None

    @pytest.mark.asyncio
    async def test_purges_expired_unlink_requests_and_old_attempts(self, unit_env):
        # Arrange
        service = await unit_env.get(HousekeepingService)
        unlink = await unit_env.get(UnlinkService)
        sender = await unit_env.get(MockOtpSender)
        requests = await unit_env.get(UnlinkRequestRepository)
        attempts = await unit_env.get(OtpAttemptRepository)
        clock = await unit_env.get(FrozenClock)
        account = await make_account(
            unit_env, primary_auth_provider=AuthProvider.TELEGRAM
        )
        await make_identity(unit_env, account, AuthProvider.TELEGRAM, "1")
        await make_identity(unit_env, account, AuthProvider.EMAIL, "e@x.io")
        issued = await unlink.request_unlink(
            account, AuthProvider.EMAIL, AuthProvider.TELEGRAM
        )
        wrong = "000000" if sender.last_otp != "000000" else "111111"
        with pytest.raises(ValidationError):
            await unlink.confirm_unlink(
                account,
                AuthProvider.EMAIL,
                issued.request_token,
                wrong,
                AuthProvider.TELEGRAM,
            )
        clock.advance(minutes=20)

        # Act
        result = await service.purge_expired()

        # Assert
        assert result.unlink_requests == 1
        assert result.otp_attempts == 1
        assert (
            await requests.find_by_account_and_provider(account.id, AuthProvider.EMAIL)
            is None
        )
        since = clock.now() - timedelta(days=1)
        assert await attempts.find_since(account.id, since) == []
