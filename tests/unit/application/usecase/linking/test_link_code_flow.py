"""Unit tests for the create, preview and confirm link code use cases."""

from uuid import uuid4

import pytest

from cabinet.application.usecase.linking import (
    ConfirmLinkCodeRequest,
    ConfirmLinkCodeUseCase,
    CreateLinkCodeRequest,
    CreateLinkCodeUseCase,
    PreviewLinkCodeRequest,
    PreviewLinkCodeUseCase,
)
from cabinet.domain.error import (
    ManualMergeRequiredError,
    NotFoundError,
    PolicyBlockError,
)
from cabinet.domain.service import JWTService
from cabinet.domain.value import AuthProvider
from tests.conftest import make_account, make_identity, make_telegram_account
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestCreateLinkCode:
    """Tests for CreateLinkCodeUseCase."""

    @pytest.mark.asyncio
    async def test_returns_code_and_expiry(self, unit_env):
        # Arrange
        use_case = await unit_env.get(CreateLinkCodeUseCase)
        account = await make_telegram_account(unit_env, "1")

        # Act
        response = await use_case.execute(
            CreateLinkCodeRequest(account_id=str(account.id))
        )

        # Assert
        assert len(response.code) == 8
        assert response.expires_in_seconds == 600

    @pytest.mark.asyncio
    async def test_unknown_account(self, unit_env):
        # Arrange
        use_case = await unit_env.get(CreateLinkCodeUseCase)

        # Act & Assert
        with pytest.raises(NotFoundError):
            await use_case.execute(CreateLinkCodeRequest(account_id=str(uuid4())))

    @pytest.mark.asyncio
    async def test_inactive_account(self, unit_env):
        # Arrange
        use_case = await unit_env.get(CreateLinkCodeUseCase)
        account = await make_telegram_account(unit_env, "1", is_active=False)

        # Act & Assert
        with pytest.raises(PolicyBlockError) as exc_info:
            await use_case.execute(CreateLinkCodeRequest(account_id=str(account.id)))
        assert exc_info.value.code.value == "account_inactive"


class TestPreviewLinkCode:
    """Tests for PreviewLinkCodeUseCase."""

    @pytest.mark.asyncio
    async def test_clean_preview(self, unit_env):
        # Arrange
        create = await unit_env.get(CreateLinkCodeUseCase)
        preview = await unit_env.get(PreviewLinkCodeUseCase)
        source = await make_telegram_account(unit_env, "123456789")
        target = await make_account(unit_env, primary_auth_provider=AuthProvider.EMAIL)
        await make_identity(unit_env, target, AuthProvider.EMAIL, "t@x.io")
        created = await create.execute(CreateLinkCodeRequest(account_id=str(source.id)))

        # Act
        response = await preview.execute(
            PreviewLinkCodeRequest(code=created.code.lower(), account_id=str(target.id))
        )

        # Assert
        assert response.source_user_id == str(source.id)
        assert response.source_identity_hints == {"telegram": "...789"}
        assert response.manual_merge_required is False
        assert response.conflict_reason is None
        assert response.telegram_replace_warning is False

    @pytest.mark.asyncio
    async def test_conflicting_preview(self, unit_env):
        # Arrange
        create = await unit_env.get(CreateLinkCodeUseCase)
        preview = await unit_env.get(PreviewLinkCodeUseCase)
        source = await make_telegram_account(unit_env, "1", has_active_subscription=True)
        target = await make_telegram_account(unit_env, "2", balance_kopeks=1000)
        created = await create.execute(CreateLinkCodeRequest(account_id=str(source.id)))

        # Act
        response = await preview.execute(
            PreviewLinkCodeRequest(code=created.code, account_id=str(target.id))
        )

        # Assert
        assert response.manual_merge_required is True
        assert response.conflict_reason == "both_have_data"


class TestConfirmLinkCode:
    """Tests for ConfirmLinkCodeUseCase."""

    @pytest.mark.asyncio
    async def test_confirm_reissues_session_for_survivor(self, unit_env):
        # Arrange
        create = await unit_env.get(CreateLinkCodeUseCase)
        confirm = await unit_env.get(ConfirmLinkCodeUseCase)
        jwt_service = await unit_env.get(JWTService)
        source = await make_telegram_account(unit_env, "1", balance_kopeks=250)
        target = await make_account(unit_env, primary_auth_provider=AuthProvider.EMAIL)
        await make_identity(unit_env, target, AuthProvider.EMAIL, "t@x.io")
        created = await create.execute(CreateLinkCodeRequest(account_id=str(source.id)))

        # Act
        response = await confirm.execute(
            ConfirmLinkCodeRequest(
                code=created.code,
                account_id=str(target.id),
                auth_provider=AuthProvider.EMAIL,
            )
        )

        # Assert
        assert response.user.id == str(target.id)
        assert response.user.balance_kopeks == 250
        assert response.token_type == "bearer"
        payload = jwt_service.verify_access_token(response.access_token)
        assert payload.sub == str(target.id)
        assert payload.auth_provider == "email"

    @pytest.mark.asyncio
    async def test_confirm_conflict(self, unit_env):
        # Arrange
        create = await unit_env.get(CreateLinkCodeUseCase)
        confirm = await unit_env.get(ConfirmLinkCodeUseCase)
        source = await make_account(unit_env, balance_kopeks=1)
        await make_identity(unit_env, source, AuthProvider.GOOGLE, "g-1")
        target = await make_account(unit_env, balance_kopeks=1)
        await make_identity(unit_env, target, AuthProvider.GOOGLE, "g-2")
        created = await create.execute(CreateLinkCodeRequest(account_id=str(source.id)))

        # Act & Assert
        with pytest.raises(ManualMergeRequiredError) as exc_info:
            await confirm.execute(
                ConfirmLinkCodeRequest(code=created.code, account_id=str(target.id))
            )
        assert exc_info.value.reason == "identity_conflict"
