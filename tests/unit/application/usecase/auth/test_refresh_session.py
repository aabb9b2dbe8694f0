"""Unit tests for RefreshSessionUseCase."""

import pytest

from cabinet.application.usecase.auth import (
    RefreshSessionRequest,
    RefreshSessionUseCase,
)
from cabinet.domain.error import PolicyBlockError
from cabinet.domain.service import JWTService
from cabinet.domain.value import AuthProvider
from cabinet.util.jwt import JWTError
from tests.conftest import make_telegram_account
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestRefreshSession:
    """Tests for exchanging refresh tokens."""

    @pytest.mark.asyncio
    async def test_refresh_keeps_session_provider(self, unit_env):
        # Arrange
        use_case = await unit_env.get(RefreshSessionUseCase)
        jwt_service = await unit_env.get(JWTService)
        account = await make_telegram_account(unit_env, "1")
        session = jwt_service.issue_session(account.id, AuthProvider.EMAIL)

        # Act
        response = await use_case.execute(
            RefreshSessionRequest(refresh_token=session.refresh_token)
        )

        # Assert
        assert response.user.id == str(account.id)
        payload = jwt_service.verify_access_token(response.access_token)
        assert payload.auth_provider == "email"

    @pytest.mark.asyncio
    async def test_access_token_is_refused(self, unit_env):
        # Arrange
        use_case = await unit_env.get(RefreshSessionUseCase)
        jwt_service = await unit_env.get(JWTService)
        account = await make_telegram_account(unit_env, "1")
        session = jwt_service.issue_session(account.id, None)

        # Act & Assert
        with pytest.raises(JWTError):
            await use_case.execute(
                RefreshSessionRequest(refresh_token=session.access_token)
            )

    @pytest.mark.asyncio
    async def test_merged_away_account_cannot_refresh(self, unit_env):
        # Arrange
        use_case = await unit_env.get(RefreshSessionUseCase)
        jwt_service = await unit_env.get(JWTService)
        account = await make_telegram_account(unit_env, "1", is_active=False)
        session = jwt_service.issue_session(account.id, AuthProvider.TELEGRAM)

        # Act & Assert
        with pytest.raises(PolicyBlockError):
            await use_case.execute(
                RefreshSessionRequest(refresh_token=session.refresh_token)
            )
