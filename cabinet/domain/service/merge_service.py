"""Account merge domain service."""

from enum import Enum

import logfire

from cabinet.domain.model import Account
from cabinet.domain.repository import AccountRepository, LinkedIdentityRepository
from cabinet.domain.value import AuthProvider, UnlinkEventReason
from cabinet.util.clock import Clock

from .base import Service
from .identity_service import IdentityService


class StateTransfer(str, Enum):
    """What happens to monetizable state during a merge."""

    KEEP_TARGET = "keep_target"
    CARRY_SOURCE = "carry_source"  # Target has none, source's moves over
    COMBINE = "combine"  # Adjudicated merge, both sides are summed


class AccountMergeService(Service):
    """Merges one account into another.

    All writes go through the request's database session, so the merge
    commits or rolls back as a whole.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        linked_identity_repository: LinkedIdentityRepository,
        identity_service: IdentityService,
        clock: Clock,
    ) -> None:
        """Initialize merge service.

        Args:
            account_repository: Account repository
            linked_identity_repository: Identity bindings
            identity_service: Identity domain service (for detaching overlaps)
            clock: Wall clock
        """
        self.account_repository = account_repository
        self.linked_identity_repository = linked_identity_repository
        self.identity_service = identity_service
        self.clock = clock

    async def merge(
        self,
        source: Account,
        target: Account,
        *,
        source_wins_telegram: bool,
        state_transfer: StateTransfer,
    ) -> Account:
        """Move everything from ``source`` into ``target`` and deactivate it.

        Where both accounts hold the same provider, the target's identity is
        kept, except Telegram when ``source_wins_telegram`` is set. The losing
        identity is detached and recorded as replaced.

        Args:
            source: Account merged away
            target: Surviving account
            source_wins_telegram: Replace the target's Telegram with the source's
            state_transfer: Monetizable state policy

        Returns:
            The updated target account
        """
        with logfire.span(
            "merge_service.merge",
            source_account_id=str(source.id),
            target_account_id=str(target.id),
            state_transfer=state_transfer.value,
        ):
            now = self.clock.now()

            source_identities = await self.linked_identity_repository.find_by_account(
                source.id
            )
            target_identities = await self.linked_identity_repository.find_by_account(
                target.id
            )
            target_by_provider = {i.provider: i for i in target_identities}

            for identity in source_identities:
                overlapping = target_by_provider.get(identity.provider)
                if overlapping is None:
                    continue
                if identity.provider == AuthProvider.TELEGRAM and source_wins_telegram:
                    await self.identity_service.detach(
                        overlapping, UnlinkEventReason.REPLACED_BY_MERGE
                    )
                else:
                    await self.identity_service.detach(
                        identity, UnlinkEventReason.REPLACED_BY_MERGE
                    )

            moved = await self.linked_identity_repository.reassign_all(
                source.id, target.id, now
            )

            target_update = self._merged_state(source, target, state_transfer)
            target_update["updated_at"] = now
            if target.primary_auth_provider is None:
                target_update["primary_auth_provider"] = source.primary_auth_provider
            merged_target = target.model_copy(update=target_update)

            source_update = {
                "is_active": False,
                "merged_into_id": target.id,
                "deactivated_at": now,
                "updated_at": now,
            }
            if state_transfer != StateTransfer.KEEP_TARGET:
                # State now lives on the target
                source_update.update(
                    has_active_subscription=False, balance_kopeks=0, referral_count=0
                )
            deactivated_source = source.model_copy(update=source_update)

            await self.account_repository.save(deactivated_source)
            saved_target = await self.account_repository.save(merged_target)

            logfire.info(
                "Accounts merged",
                source_account_id=str(source.id),
                target_account_id=str(target.id),
                identities_moved=moved,
            )
            return saved_target

    @staticmethod
    def _merged_state(
        source: Account, target: Account, state_transfer: StateTransfer
    ) -> dict[str, object]:
        if state_transfer == StateTransfer.CARRY_SOURCE:
            return {
                "has_active_subscription": source.has_active_subscription,
                "balance_kopeks": source.balance_kopeks,
                "referral_count": source.referral_count,
            }
        if state_transfer == StateTransfer.COMBINE:
            return {
                "has_active_subscription": source.has_active_subscription
                or target.has_active_subscription,
                "balance_kopeks": source.balance_kopeks + target.balance_kopeks,
                "referral_count": source.referral_count + target.referral_count,
            }
        return {}
