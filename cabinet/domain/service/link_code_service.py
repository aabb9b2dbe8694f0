"""Link code domain service.

Issues, previews and redeems link codes. Redeeming a code merges the code's
source account into the redeeming (target) account.
"""

from datetime import timedelta
from uuid import uuid4

import logfire
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from cabinet.config import LinkingSettings
from cabinet.domain.error import (
    ErrorCode,
    ManualMergeRequiredError,
    PolicyBlockError,
    RateLimitError,
    StateConflictError,
    ValidationError,
)
from cabinet.domain.model import Account, LinkCode
from cabinet.domain.repository import AccountRepository, LinkCodeRepository
from cabinet.domain.value import (
    AccountId,
    ConflictedMerge,
    LinkCodeId,
    LinkCodeStatus,
    LinkCodeValue,
    MergeEvaluation,
)
from cabinet.util.clock import Clock
from cabinet.util.tokens import generate_link_code

from .base import Service
from .conflict_resolver import ConflictResolver
from .identity_service import IdentityService
from .merge_service import AccountMergeService, StateTransfer

# Regenerations allowed when a fresh code collides with an active one
_MAX_GENERATION_TRIES = 5


class ResolvedLinkCode(BaseModel):
    """A link code validated against a requester, with its merge evaluation."""

    model_config = ConfigDict(frozen=True)

    link_code: LinkCode
    source: Account
    target: Account
    evaluation: MergeEvaluation


class LinkCodeService(Service):
    """Domain service for link code issuance and redemption."""

    def __init__(
        self,
        link_code_repository: LinkCodeRepository,
        account_repository: AccountRepository,
        identity_service: IdentityService,
        conflict_resolver: ConflictResolver,
        merge_service: AccountMergeService,
        linking_settings: LinkingSettings,
        clock: Clock,
    ) -> None:
        """Initialize link code service.

        Args:
            link_code_repository: Link code repository
            account_repository: Account repository
            identity_service: Identity domain service (for identity hints)
            conflict_resolver: Merge conflict detection
            merge_service: Account merge routine
            linking_settings: Link code TTL, length and attempt budget
            clock: Wall clock
        """
        self.link_code_repository = link_code_repository
        self.account_repository = account_repository
        self.identity_service = identity_service
        self.conflict_resolver = conflict_resolver
        self.merge_service = merge_service
        self.linking_settings = linking_settings
        self.clock = clock

    async def create(self, account: Account) -> LinkCode:
        """Issue a fresh link code for an account, revoking its previous one.

        Args:
            account: Active source account

        Returns:
            The new active link code
        """
        with logfire.span("link_code_service.create", account_id=str(account.id)):
            revoked = await self.link_code_repository.revoke_active_for_account(
                account.id
            )
            if revoked:
                logfire.info(
                    "Previous link codes revoked",
                    account_id=str(account.id),
                    count=revoked,
                )

            code = await self._generate_unique_code()
            hints = await self.identity_service.identity_hints(account.id)
            now = self.clock.now()
            link_code = LinkCode(
                id=LinkCodeId(uuid4()),
                code=code,
                source_account_id=account.id,
                source_identity_hints=hints,
                max_attempts=self.linking_settings.link_code_max_attempts,
                created_at=now,
                expires_at=now
                + timedelta(seconds=self.linking_settings.link_code_ttl_seconds),
            )
            saved = await self.link_code_repository.save(link_code)
            logfire.info(
                "Link code created",
                account_id=str(account.id),
                link_code_id=str(saved.id),
                expires_at=saved.expires_at.isoformat(),
            )
            return saved

    async def preview(self, code: str, requester_id: AccountId) -> ResolvedLinkCode:
        """Validate a code and evaluate the merge it would perform.

        A conflicting merge is returned, not raised, so the caller can offer
        a manual merge request.

        Args:
            code: Code as entered by the user
            requester_id: Account that would survive the merge

        Returns:
            The resolved code with its evaluation
        """
        with logfire.span("link_code_service.preview", requester_id=str(requester_id)):
            resolved = await self.resolve(code, requester_id, consume_attempt=True)
            logfire.info(
                "Link code previewed",
                link_code_id=str(resolved.link_code.id),
                evaluation=resolved.evaluation.kind,
            )
            return resolved

    async def confirm(self, code: str, requester_id: AccountId) -> Account:
        """Redeem a code and merge its source account into the requester's.

        Args:
            code: Code as entered by the user
            requester_id: Account that survives the merge

        Returns:
            The updated requester account

        Raises:
            ManualMergeRequiredError: If the merge needs a human decision
            StateConflictError: If another confirm already redeemed the code
        """
        with logfire.span("link_code_service.confirm", requester_id=str(requester_id)):
            resolved = await self.resolve(code, requester_id, consume_attempt=True)

            evaluation = resolved.evaluation
            if isinstance(evaluation, ConflictedMerge):
                logfire.info(
                    "Confirm refused, manual merge required",
                    link_code_id=str(resolved.link_code.id),
                    reason=evaluation.reason.value,
                )
                raise ManualMergeRequiredError(reason=evaluation.reason.value)

            claimed = await self.link_code_repository.claim(
                resolved.link_code.id,
                LinkCodeStatus.CONSUMED,
                requester_id,
                self.clock.now(),
            )
            if not claimed:
                logfire.warn(
                    "Link code claimed concurrently",
                    link_code_id=str(resolved.link_code.id),
                )
                raise StateConflictError(ErrorCode.LINK_CODE_INVALID)

            merged = await self.merge_service.merge(
                resolved.source,
                resolved.target,
                source_wins_telegram=evaluation.replaces_telegram,
                state_transfer=StateTransfer.CARRY_SOURCE
                if evaluation.carry_source_state
                else StateTransfer.KEEP_TARGET,
            )
            logfire.info(
                "Link code confirmed",
                link_code_id=str(resolved.link_code.id),
                source_account_id=str(resolved.source.id),
                target_account_id=str(merged.id),
            )
            return merged

    async def claim_for_manual_review(
        self, link_code: LinkCode, requester_id: AccountId
    ) -> None:
        """Hand a code over to a manual merge ticket.

        Raises:
            StateConflictError: If the code is no longer active
        """
        claimed = await self.link_code_repository.claim(
            link_code.id,
            LinkCodeStatus.MANUAL_REVIEW,
            requester_id,
            self.clock.now(),
        )
        if not claimed:
            raise StateConflictError(ErrorCode.LINK_CODE_INVALID)

    async def resolve(
        self, code: str, requester_id: AccountId, consume_attempt: bool
    ) -> ResolvedLinkCode:
        """Validate a code for a requester.

        Checks run in order: format, existence and status, expiry, attempt
        budget, same account, both accounts active, conflicts.

        Args:
            code: Code as entered by the user
            requester_id: Redeeming account
            consume_attempt: Whether this call spends one attempt

        Returns:
            The resolved code

        Raises:
            ValidationError: Malformed code or the requester's own code
            StateConflictError: Unknown, expired or used code
            RateLimitError: Attempt budget exceeded
            PolicyBlockError: Source or target account inactive
        """
        try:
            value = LinkCodeValue(code)
        except PydanticValidationError:
            raise ValidationError(
                ErrorCode.LINK_CODE_INVALID, "Link code format is invalid"
            )

        link_code = await self.link_code_repository.find_by_code(value)
        if link_code is None:
            logfire.info("Link code not found")
            raise StateConflictError(ErrorCode.LINK_CODE_INVALID)

        if link_code.status == LinkCodeStatus.EXHAUSTED:
            raise RateLimitError(ErrorCode.LINK_CODE_ATTEMPTS_EXCEEDED)

        if link_code.status != LinkCodeStatus.ACTIVE or link_code.is_expired(
            self.clock.now()
        ):
            logfire.info(
                "Link code not usable",
                link_code_id=str(link_code.id),
                status=link_code.status.value,
            )
            raise StateConflictError(ErrorCode.LINK_CODE_INVALID)

        if consume_attempt:
            updated = await self.link_code_repository.consume_attempt(link_code.id)
            if updated is None:
                raise StateConflictError(ErrorCode.LINK_CODE_INVALID)
            if updated.status == LinkCodeStatus.EXHAUSTED:
                logfire.warn(
                    "Link code attempts exhausted",
                    link_code_id=str(link_code.id),
                    attempts_used=updated.attempts_used,
                )
                raise RateLimitError(ErrorCode.LINK_CODE_ATTEMPTS_EXCEEDED)
            link_code = updated

        if link_code.source_account_id == requester_id:
            raise ValidationError(ErrorCode.LINK_CODE_SAME_ACCOUNT)

        source = await self.account_repository.find_by_id(link_code.source_account_id)
        if source is None or not source.is_active:
            raise PolicyBlockError(ErrorCode.LINK_CODE_SOURCE_INACTIVE)

        target = await self.account_repository.find_by_id(requester_id)
        if target is None or not target.is_active:
            raise PolicyBlockError(ErrorCode.LINK_CODE_TARGET_INACTIVE)

        evaluation = await self.conflict_resolver.evaluate(source, target)
        return ResolvedLinkCode(
            link_code=link_code, source=source, target=target, evaluation=evaluation
        )

    async def _generate_unique_code(self) -> LinkCodeValue:
        for _ in range(_MAX_GENERATION_TRIES):
            candidate = LinkCodeValue(
                generate_link_code(self.linking_settings.link_code_length)
            )
            if not await self.link_code_repository.exists_active_code(candidate):
                return candidate
        raise RuntimeError("Could not generate a unique link code")


