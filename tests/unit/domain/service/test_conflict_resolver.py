"""Unit tests for ConflictResolver."""

import pytest

from cabinet.domain.service import ConflictResolver
from cabinet.domain.value import AuthProvider, CleanMerge, ConflictedMerge, ConflictReason
from tests.conftest import make_account, make_identity, make_telegram_account
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestEvaluate:
    """Tests for merge conflict detection."""

    @pytest.mark.asyncio
    async def test_disjoint_providers_without_data_is_clean(self, unit_env):
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_telegram_account(unit_env, "1")
        target = await make_account(unit_env)
        await make_identity(unit_env, target, AuthProvider.YANDEX, "ya-1")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert evaluation == CleanMerge(replaces_telegram=False, carry_source_state=False)

    @pytest.mark.asyncio
    async def test_different_identity_of_same_provider_conflicts(self, unit_env):
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_account(unit_env)
        await make_identity(unit_env, source, AuthProvider.EMAIL, "a@x.io")
        target = await make_account(unit_env)
        await make_identity(unit_env, target, AuthProvider.EMAIL, "b@x.io")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert isinstance(evaluation, ConflictedMerge)
        assert evaluation.reason == ConflictReason.IDENTITY_CONFLICT

    @pytest.mark.asyncio
    async def test_identity_conflict_wins_over_data_conflict(self, unit_env):
        """Rules are ordered: the identity check runs first."""
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_account(unit_env, balance_kopeks=1)
        await make_identity(unit_env, source, AuthProvider.VK, "vk-1")
        target = await make_account(unit_env, has_active_subscription=True)
        await make_identity(unit_env, target, AuthProvider.VK, "vk-2")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert evaluation.reason == ConflictReason.IDENTITY_CONFLICT

    @pytest.mark.asyncio
    async def test_telegram_on_both_sides_is_not_a_conflict(self, unit_env):
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_telegram_account(unit_env, "1")
        target = await make_telegram_account(unit_env, "2")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert isinstance(evaluation, CleanMerge)
        assert evaluation.replaces_telegram is True

    @pytest.mark.parametrize(
        "source_state, target_state",
        [
            ({"balance_kopeks": 100}, {"balance_kopeks": 50}),
            ({"has_active_subscription": True}, {"referral_count": 2}),
            ({"referral_count": 1}, {"has_active_subscription": True}),
        ],
    )
    @pytest.mark.asyncio
    async def test_both_with_data_conflicts(self, unit_env, source_state, target_state):
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_telegram_account(unit_env, "1", **source_state)
        target = await make_account(unit_env, **target_state)
        await make_identity(unit_env, target, AuthProvider.EMAIL, "t@x.io")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert isinstance(evaluation, ConflictedMerge)
        assert evaluation.reason == ConflictReason.BOTH_HAVE_DATA

    @pytest.mark.asyncio
    async def test_only_source_with_data_carries_state(self, unit_env):
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_telegram_account(unit_env, "1", balance_kopeks=300)
        target = await make_account(unit_env)
        await make_identity(unit_env, target, AuthProvider.EMAIL, "t@x.io")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert isinstance(evaluation, CleanMerge)
        assert evaluation.carry_source_state is True

    @pytest.mark.asyncio
    async def test_only_target_with_data_keeps_target_state(self, unit_env):
        # Arrange
        resolver = await unit_env.get(ConflictResolver)
        source = await make_telegram_account(unit_env, "1")
        target = await make_account(unit_env, balance_kopeks=10)
        await make_identity(unit_env, target, AuthProvider.GOOGLE, "g-1")

        # Act
        evaluation = await resolver.evaluate(source, target)

        # Assert
        assert isinstance(evaluation, CleanMerge)
        assert evaluation.carry_source_state is False
