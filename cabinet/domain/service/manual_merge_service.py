"""Manual merge ticket domain service."""

from uuid import uuid4

import logfire

from cabinet.config import SupportSettings
from cabinet.domain.error import (
    DependencyUnavailableError,
    ErrorCode,
    NotFoundError,
    PolicyBlockError,
    StateConflictError,
    ValidationError,
)
from cabinet.domain.model import Account, ManualMergeTicket
from cabinet.domain.repository import AccountRepository, ManualMergeTicketRepository
from cabinet.domain.value import (
    AccountId,
    CleanMerge,
    ManualMergeDecision,
    ManualMergeStateFilter,
    ManualMergeTicketId,
)
from cabinet.util.clock import Clock

from .base import Service
from .identity_service import IdentityService
from .link_code_service import LinkCodeService
from .merge_service import AccountMergeService, StateTransfer


class ManualMergeService(Service):
    """Domain service for manual merge tickets and their adjudication."""

    def __init__(
        self,
        manual_merge_ticket_repository: ManualMergeTicketRepository,
        account_repository: AccountRepository,
        link_code_service: LinkCodeService,
        identity_service: IdentityService,
        merge_service: AccountMergeService,
        support_settings: SupportSettings,
        clock: Clock,
    ) -> None:
        """Initialize manual merge service.

        Args:
            manual_merge_ticket_repository: Ticket repository
            account_repository: Account repository
            link_code_service: Link code validation
            identity_service: Identity domain service (for identity hints)
            merge_service: Account merge routine
            support_settings: Support toggles
            clock: Wall clock
        """
        self.manual_merge_ticket_repository = manual_merge_ticket_repository
        self.account_repository = account_repository
        self.link_code_service = link_code_service
        self.identity_service = identity_service
        self.merge_service = merge_service
        self.support_settings = support_settings
        self.clock = clock

    async def submit(
        self, code: str, requester_id: AccountId, comment: str | None = None
    ) -> ManualMergeTicket:
        """Open a ticket for a link code whose merge needs a human decision.

        The code is validated like a preview but no attempt is spent. On
        success the code moves to ``manual_review`` and cannot be redeemed.

        Args:
            code: Link code as entered by the user
            requester_id: Account that redeemed the code
            comment: Optional free text for support

        Returns:
            The pending ticket

        Raises:
            DependencyUnavailableError: If support is disabled
            ValidationError: If the merge can be done automatically
            StateConflictError: If the requester already has a pending ticket
            PolicyBlockError: If this pair was rejected and resubmission is off
        """
        with logfire.span(
            "manual_merge_service.submit", requester_id=str(requester_id)
        ):
            if not self.support_settings.enabled:
                raise DependencyUnavailableError(ErrorCode.SUPPORT_DISABLED)

            resolved = await self.link_code_service.resolve(
                code, requester_id, consume_attempt=False
            )
            if isinstance(resolved.evaluation, CleanMerge):
                raise ValidationError(ErrorCode.MANUAL_MERGE_NOT_REQUIRED)

            latest = await self.manual_merge_ticket_repository.find_latest_by_requester(
                requester_id
            )
            if latest is not None and latest.is_pending:
                raise StateConflictError(ErrorCode.MANUAL_MERGE_ALREADY_PENDING)

            previous = await self.manual_merge_ticket_repository.find_latest_for_pair(
                requester_id, resolved.source.id
            )
            if (
                previous is not None
                and previous.decision == ManualMergeDecision.REJECT
                and not self.support_settings.allow_resubmit_after_reject
            ):
                raise PolicyBlockError(ErrorCode.MANUAL_MERGE_REJECTED)

            await self.link_code_service.claim_for_manual_review(
                resolved.link_code, requester_id
            )

            now = self.clock.now()
            ticket = await self.manual_merge_ticket_repository.save(
                ManualMergeTicket(
                    id=ManualMergeTicketId(uuid4()),
                    requester_account_id=requester_id,
                    source_account_id=resolved.source.id,
                    link_code_id=resolved.link_code.id,
                    conflict_reason=resolved.evaluation.reason.value,
                    requester_identity_hints=await self.identity_service.identity_hints(
                        requester_id
                    ),
                    source_identity_hints=resolved.link_code.source_identity_hints,
                    comment=comment,
                    created_at=now,
                    updated_at=now,
                )
            )
            logfire.info(
                "Manual merge requested",
                ticket_id=str(ticket.id),
                requester_id=str(requester_id),
                source_account_id=str(resolved.source.id),
                conflict_reason=ticket.conflict_reason,
            )
            return ticket

    async def get_latest(self, account_id: AccountId) -> ManualMergeTicket | None:
        """Newest ticket raised by an account, if any."""
        return await self.manual_merge_ticket_repository.find_latest_by_requester(
            account_id
        )

    async def list_tickets(
        self,
        state_filter: ManualMergeStateFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[ManualMergeTicket], int]:
        """List tickets for adjudication, newest first.

        Returns:
            Page of tickets and the total matching the filter
        """
        decision = state_filter.decision
        offset = (page - 1) * per_page
        tickets = await self.manual_merge_ticket_repository.find_by_decision(
            decision, limit=per_page, offset=offset
        )
        total = await self.manual_merge_ticket_repository.count_by_decision(decision)
        return tickets, total

    async def resolve(
        self,
        ticket_id: ManualMergeTicketId,
        admin_id: AccountId,
        decision: ManualMergeDecision,
        primary_account_id: AccountId | None = None,
        comment: str | None = None,
    ) -> ManualMergeTicket:
        """Approve or reject a pending ticket.

        Approving merges the non-primary account of the pair into the primary
        one. No conflict check runs; both sides' state is combined.

        Args:
            ticket_id: Ticket to resolve
            admin_id: Adjudicating admin account
            decision: ``approve`` or ``reject``
            primary_account_id: Surviving account, required to approve
            comment: Optional resolution note

        Returns:
            The resolved ticket

        Raises:
            NotFoundError: If the ticket does not exist
            StateConflictError: If the ticket is already resolved
            ValidationError: If the primary account is not part of the pair
        """
        with logfire.span(
            "manual_merge_service.resolve",
            ticket_id=str(ticket_id),
            decision=decision.value,
        ):
            ticket = await self.manual_merge_ticket_repository.find_by_id(ticket_id)
            if ticket is None:
                raise NotFoundError("ManualMergeTicket", str(ticket_id))
            if not ticket.is_pending:
                raise StateConflictError(ErrorCode.MANUAL_MERGE_ALREADY_RESOLVED)
            if decision == ManualMergeDecision.PENDING:
                raise ValidationError(
                    ErrorCode.MANUAL_MERGE_INVALID_PRIMARY,
                    "Decision must be approve or reject",
                )

            update: dict[str, object] = {
                "decision": decision,
                "resolution_comment": comment,
                "resolved_by_account_id": admin_id,
                "updated_at": self.clock.now(),
            }

            if decision == ManualMergeDecision.APPROVE:
                pair = (ticket.requester_account_id, ticket.source_account_id)
                if primary_account_id not in pair:
                    raise ValidationError(ErrorCode.MANUAL_MERGE_INVALID_PRIMARY)
                secondary_id = pair[1] if primary_account_id == pair[0] else pair[0]

                primary = await self._load_active(primary_account_id)
                secondary = await self._load_active(secondary_id)
                await self.merge_service.merge(
                    secondary,
                    primary,
                    source_wins_telegram=False,
                    state_transfer=StateTransfer.COMBINE,
                )
                update["primary_account_id"] = primary_account_id

            resolved = await self.manual_merge_ticket_repository.save(
                ticket.model_copy(update=update)
            )
            logfire.info(
                "Manual merge resolved",
                ticket_id=str(ticket_id),
                decision=decision.value,
                admin_id=str(admin_id),
            )
            return resolved

    async def _load_active(self, account_id: AccountId) -> Account:
        account = await self.account_repository.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account", str(account_id))
        if not account.is_active:
            raise PolicyBlockError(ErrorCode.ACCOUNT_INACTIVE)
        return account
