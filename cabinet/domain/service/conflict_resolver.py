"""Merge conflict detection."""

import logfire

from cabinet.domain.model import Account
from cabinet.domain.repository import LinkedIdentityRepository
from cabinet.domain.value import (
    AuthProvider,
    CleanMerge,
    ConflictedMerge,
    ConflictReason,
    MergeEvaluation,
)

from .base import Service


class ConflictResolver(Service):
    """Decides whether two accounts can be merged without a human.

    Rules, first match wins:
    1. Both accounts hold a different identity of the same non-Telegram
       provider: one of them would have to be dropped.
    2. Both accounts hold monetizable state: one side's entitlements would
       be lost.
    3. Otherwise the merge is clean. A Telegram identity on both sides is
       flagged so the caller can warn that the target's one gets replaced.
    """

    def __init__(self, linked_identity_repository: LinkedIdentityRepository) -> None:
        self.linked_identity_repository = linked_identity_repository

    async def evaluate(self, source: Account, target: Account) -> MergeEvaluation:
        """Evaluate merging ``source`` into ``target``.

        Args:
            source: Account that would be deactivated
            target: Account that would survive

        Returns:
            ``CleanMerge`` or ``ConflictedMerge``
        """
        with logfire.span(
            "conflict_resolver.evaluate",
            source_account_id=str(source.id),
            target_account_id=str(target.id),
        ):
            source_identities = await self.linked_identity_repository.find_by_account(
                source.id
            )
            target_identities = await self.linked_identity_repository.find_by_account(
                target.id
            )
            source_by_provider = {i.provider: i for i in source_identities}
            target_by_provider = {i.provider: i for i in target_identities}

            shared = set(source_by_provider) & set(target_by_provider)
            for provider in shared:
                if provider == AuthProvider.TELEGRAM:
                    continue
                if (
                    source_by_provider[provider].provider_user_id
                    != target_by_provider[provider].provider_user_id
                ):
                    logfire.info(
                        "Merge conflict: identity",
                        provider=provider.value,
                    )
                    return ConflictedMerge(reason=ConflictReason.IDENTITY_CONFLICT)

            if source.has_monetizable_state and target.has_monetizable_state:
                logfire.info("Merge conflict: both accounts have data")
                return ConflictedMerge(reason=ConflictReason.BOTH_HAVE_DATA)

            evaluation = CleanMerge(
                replaces_telegram=AuthProvider.TELEGRAM in shared,
                carry_source_state=source.has_monetizable_state,
            )
            logfire.info(
                "Merge is clean",
                replaces_telegram=evaluation.replaces_telegram,
                carry_source_state=evaluation.carry_source_state,
            )
            return evaluation
