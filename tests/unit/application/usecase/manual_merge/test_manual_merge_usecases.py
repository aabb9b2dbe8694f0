"""Unit tests for the manual merge use cases."""

from uuid import uuid4

import pytest

from cabinet.application.usecase.linking import (
    CreateLinkCodeRequest,
    CreateLinkCodeUseCase,
)
from cabinet.application.usecase.manual_merge import (
    GetLatestManualMergeRequest,
    GetLatestManualMergeUseCase,
    ListManualMergesRequest,
    ListManualMergesUseCase,
    ResolveManualMergeRequest,
    ResolveManualMergeUseCase,
    SubmitManualMergeRequest,
    SubmitManualMergeUseCase,
)
from cabinet.config import AuthSettings
from cabinet.domain.error import NotAuthorizedError, NotFoundError
from cabinet.domain.repository import AccountRepository
from cabinet.domain.value import ManualMergeDecision, ManualMergeStateFilter
from tests.conftest import make_account, make_telegram_account
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def submitted_ticket(env, comment=None):
    """Open a ticket for two accounts that both hold data; returns its id last."""
    create = await env.get(CreateLinkCodeUseCase)
    submit = await env.get(SubmitManualMergeUseCase)
    source = await make_telegram_account(env, "5550111", balance_kopeks=500)
    requester = await make_telegram_account(
        env, "5550222", has_active_subscription=True
    )
    created = await create.execute(CreateLinkCodeRequest(account_id=str(source.id)))
    submitted = await submit.execute(
        SubmitManualMergeRequest(
            code=created.code, account_id=str(requester.id), comment=comment
        )
    )
    return source, requester, submitted.ticket_id


async def make_admin(env):
    admin = await make_account(env)
    auth_settings = await env.get(AuthSettings)
    auth_settings.admin_account_ids = [str(admin.id)]
    return admin


class TestSubmitManualMerge:
    """Tests for SubmitManualMergeUseCase and the requester's view."""

    @pytest.mark.asyncio
    async def test_submit_opens_pending_ticket(self, unit_env):
        # Arrange
        list_tickets = await unit_env.get(ListManualMergesUseCase)
        admin = await make_admin(unit_env)

        # Act
        source, requester, ticket_id = await submitted_ticket(
            unit_env, comment="Both are mine"
        )

        # Assert
        queue = await list_tickets.execute(
            ListManualMergesRequest(admin_id=str(admin.id))
        )
        item = queue.items[0]
        assert item.ticket_id == ticket_id
        assert item.status == "pending"
        assert item.decision is None
        assert item.source_user_id == str(source.id)
        assert item.requester_user_id == str(requester.id)
        assert item.current_user_id == str(requester.id)
        assert item.conflict_reason == "both_have_data"
        assert item.source_identity_hints == {"telegram": "...111"}
        assert item.user_comment == "Both are mine"

    @pytest.mark.asyncio
    async def test_latest_ticket_of_requester(self, unit_env):
        # Arrange
        get_latest = await unit_env.get(GetLatestManualMergeUseCase)
        _, requester, ticket_id = await submitted_ticket(unit_env)

        # Act
        latest = await get_latest.execute(
            GetLatestManualMergeRequest(account_id=str(requester.id))
        )

        # Assert
        assert latest is not None
        assert latest.ticket_id == ticket_id
        assert latest.decision is None
        assert latest.resolution_comment is None

    @pytest.mark.asyncio
    async def test_no_latest_ticket(self, unit_env):
        # Arrange
        get_latest = await unit_env.get(GetLatestManualMergeUseCase)
        account = await make_account(unit_env)

        # Act
        latest = await get_latest.execute(
            GetLatestManualMergeRequest(account_id=str(account.id))
        )

        # Assert
        assert latest is None

    @pytest.mark.asyncio
    async def test_latest_shows_rejection(self, unit_env):
        # Arrange
        get_latest = await unit_env.get(GetLatestManualMergeUseCase)
        resolve = await unit_env.get(ResolveManualMergeUseCase)
        admin = await make_admin(unit_env)
        _, requester, ticket_id = await submitted_ticket(unit_env)
        await resolve.execute(
            ResolveManualMergeRequest(
                admin_id=str(admin.id),
                ticket_id=ticket_id,
                action="reject",
                comment="Not the same person",
            )
        )

        # Act
        latest = await get_latest.execute(
            GetLatestManualMergeRequest(account_id=str(requester.id))
        )

        # Assert
        assert latest.ticket_id == ticket_id
        assert latest.status == "rejected"
        assert latest.decision == ManualMergeDecision.REJECT
        assert latest.resolution_comment == "Not the same person"


class TestAdminQueue:
    """Tests for listing and resolving tickets as an admin."""

    @pytest.mark.asyncio
    async def test_non_admin_cannot_list(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ListManualMergesUseCase)
        account = await make_account(unit_env)

        # Act & Assert
        with pytest.raises(NotAuthorizedError):
            await use_case.execute(ListManualMergesRequest(admin_id=str(account.id)))

    @pytest.mark.asyncio
    async def test_admin_lists_pending(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ListManualMergesUseCase)
        admin = await make_admin(unit_env)
        _, _, ticket_id = await submitted_ticket(unit_env)

        # Act
        response = await use_case.execute(
            ListManualMergesRequest(admin_id=str(admin.id))
        )

        # Assert
        assert response.total == 1
        assert [item.ticket_id for item in response.items] == [ticket_id]
        assert response.page == 1
        assert response.pages == 1

    @pytest.mark.asyncio
    async def test_empty_queue_has_no_pages(self, unit_env):
        # Arrange
        use_case = await unit_env.get(ListManualMergesUseCase)
        admin = await make_admin(unit_env)

        # Act
        response = await use_case.execute(
            ListManualMergesRequest(admin_id=str(admin.id), per_page=5)
        )

        # Assert
        assert response.items == []
        assert response.total == 0
        assert response.pages == 0

    @pytest.mark.asyncio
    async def test_approve_merges_into_chosen_primary(self, unit_env):
        # Arrange
        resolve = await unit_env.get(ResolveManualMergeUseCase)
        list_tickets = await unit_env.get(ListManualMergesUseCase)
        accounts = await unit_env.get(AccountRepository)
        admin = await make_admin(unit_env)
        source, requester, ticket_id = await submitted_ticket(unit_env)

        # Act
        resolved = await resolve.execute(
            ResolveManualMergeRequest(
                admin_id=str(admin.id),
                ticket_id=ticket_id,
                action="approve",
                primary_user_id=source.id,
                comment="Checked with the user",
            )
        )

        # Assert
        assert resolved.ticket_id == ticket_id
        assert resolved.status == "approved"
        assert resolved.decision == ManualMergeDecision.APPROVE
        assert resolved.primary_user_id == str(source.id)
        assert resolved.resolution_comment == "Checked with the user"
        merged_away = await accounts.find_by_id(requester.id)
        assert merged_away.is_active is False
        survivor = await accounts.find_by_id(source.id)
        assert survivor.has_active_subscription is True
        assert survivor.balance_kopeks == 500
        approved = await list_tickets.execute(
            ListManualMergesRequest(
                admin_id=str(admin.id), state=ManualMergeStateFilter.APPROVED
            )
        )
        assert approved.total == 1

    @pytest.mark.asyncio
    async def test_non_admin_cannot_resolve(self, unit_env):
        # Arrange
        resolve = await unit_env.get(ResolveManualMergeUseCase)
        _, requester, ticket_id = await submitted_ticket(unit_env)

        # Act & Assert
        with pytest.raises(NotAuthorizedError):
            await resolve.execute(
                ResolveManualMergeRequest(
                    admin_id=str(requester.id), ticket_id=ticket_id, action="reject"
                )
            )

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, unit_env):
        # Arrange
        resolve = await unit_env.get(ResolveManualMergeUseCase)
        admin = await make_admin(unit_env)

        # Act & Assert
        with pytest.raises(NotFoundError):
            await resolve.execute(
                ResolveManualMergeRequest(
                    admin_id=str(admin.id), ticket_id=uuid4(), action="reject"
                )
            )
