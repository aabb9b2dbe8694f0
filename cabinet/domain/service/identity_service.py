"""Linked identity domain service.

Owns the rules around an account's identities: when one may be unlinked,
when a Telegram identity may be (re)attached and how identities are attached
and detached.
"""

from datetime import datetime, timedelta
from uuid import uuid4

import logfire

from cabinet.config import UnlinkSettings
from cabinet.domain.error import ErrorCode, PolicyBlockError, StateConflictError
from cabinet.domain.model import IdentityUnlinkEvent, LinkedIdentity
from cabinet.domain.repository import (
    IdentityUnlinkEventRepository,
    LinkedIdentityRepository,
)
from cabinet.domain.value import (
    AccountId,
    AuthProvider,
    Blocked,
    BlockReason,
    IdentityUnlinkEventId,
    LinkedIdentityId,
    TelegramRelinkStatus,
    Unblocked,
    UnlinkAvailability,
    UnlinkEventReason,
)
from cabinet.util.clock import Clock, seconds_until

from .base import Service


def evaluate_unlink(
    identities: list[LinkedIdentity],
    provider: AuthProvider,
    current_auth_provider: AuthProvider | None,
    now: datetime,
    settings: UnlinkSettings,
) -> UnlinkAvailability:
    """Decide whether the identity of ``provider`` may be unlinked.

    Rules are checked in order and the first match wins.

    Args:
        identities: All identities of the account
        provider: Provider to unlink
        current_auth_provider: Provider of the caller's session (or the
            account's primary provider when the session does not say)
        now: Current time
        settings: Unlink settings

    Returns:
        ``Unblocked`` or ``Blocked`` with its reason
    """
    target = next((i for i in identities if i.provider == provider), None)
    if target is None:
        return Blocked(reason=BlockReason.IDENTITY_NOT_LINKED)

    if len(identities) == 1:
        return Blocked(reason=BlockReason.LAST_IDENTITY)

    if current_auth_provider is not None and provider == current_auth_provider:
        return Blocked(reason=BlockReason.CURRENT_AUTH_PROVIDER)

    if provider == AuthProvider.TELEGRAM and settings.telegram_required:
        return Blocked(reason=BlockReason.TELEGRAM_REQUIRED)

    cooldown = timedelta(hours=settings.identity_change_cooldown_hours)
    recent_ends = [
        other.linked_at + cooldown
        for other in identities
        if other.id != target.id and other.linked_at + cooldown > now
    ]
    if recent_ends:
        return Blocked(reason=BlockReason.COOLDOWN_ACTIVE, until=max(recent_ends))

    return Unblocked()


def unlink_block_error(blocked: Blocked, now: datetime) -> PolicyBlockError:
    """Build the error raised when an unlink is attempted while blocked."""
    if blocked.reason == BlockReason.IDENTITY_NOT_LINKED:
        return PolicyBlockError(
            ErrorCode.IDENTITY_NOT_LINKED, reason=blocked.reason.value
        )
    if blocked.reason == BlockReason.LAST_IDENTITY:
        return PolicyBlockError(ErrorCode.LAST_IDENTITY, reason=blocked.reason.value)
    if blocked.reason == BlockReason.COOLDOWN_ACTIVE and blocked.until is not None:
        return PolicyBlockError(
            ErrorCode.COOLDOWN_ACTIVE,
            reason=blocked.reason.value,
            retry_after_seconds=seconds_until(blocked.until, now),
            blocked_until=blocked.until,
        )
    return PolicyBlockError(
        ErrorCode.PROVIDER_NOT_SUPPORTED, reason=blocked.reason.value
    )


class IdentityService(Service):
    """Domain service for the IdentityStore."""

    def __init__(
        self,
        linked_identity_repository: LinkedIdentityRepository,
        identity_unlink_event_repository: IdentityUnlinkEventRepository,
        unlink_settings: UnlinkSettings,
        clock: Clock,
    ) -> None:
        """Initialize identity service.

        Args:
            linked_identity_repository: Identity bindings
            identity_unlink_event_repository: Unlink history
            unlink_settings: Unlink and relink policy settings
            clock: Wall clock
        """
        self.linked_identity_repository = linked_identity_repository
        self.identity_unlink_event_repository = identity_unlink_event_repository
        self.unlink_settings = unlink_settings
        self.clock = clock

    async def list_identities(self, account_id: AccountId) -> list[LinkedIdentity]:
        """List identities of an account, oldest link first."""
        return await self.linked_identity_repository.find_by_account(account_id)

    async def identity_hints(self, account_id: AccountId) -> dict[str, str]:
        """Masked provider user ids keyed by provider, safe to show to others."""
        identities = await self.list_identities(account_id)
        return {i.provider.value: i.masked_provider_user_id for i in identities}

    async def unlink_availability(
        self,
        account_id: AccountId,
        provider: AuthProvider,
        current_auth_provider: AuthProvider | None,
    ) -> UnlinkAvailability:
        """Evaluate unlink availability for one provider of an account."""
        identities = await self.list_identities(account_id)
        return evaluate_unlink(
            identities,
            provider,
            current_auth_provider,
            self.clock.now(),
            self.unlink_settings,
        )

    def availability_for(
        self,
        identities: list[LinkedIdentity],
        provider: AuthProvider,
        current_auth_provider: AuthProvider | None,
    ) -> UnlinkAvailability:
        """Evaluate unlink availability against already loaded identities."""
        return evaluate_unlink(
            identities,
            provider,
            current_auth_provider,
            self.clock.now(),
            self.unlink_settings,
        )

    async def telegram_relink_status(
        self, account_id: AccountId
    ) -> TelegramRelinkStatus:
        """Whether a new Telegram identity can be attached to the account.

        While a Telegram identity is attached it must be unlinked first; after
        a user-initiated Telegram unlink a fixed cooldown applies.
        """
        current = await self.linked_identity_repository.find_by_account_and_provider(
            account_id, AuthProvider.TELEGRAM
        )
        if current is not None:
            return TelegramRelinkStatus(
                can_start_relink=False, requires_unlink_first=True
            )

        last_unlink = await self.identity_unlink_event_repository.find_latest(
            account_id, AuthProvider.TELEGRAM, UnlinkEventReason.USER_UNLINK
        )
        if last_unlink is not None:
            now = self.clock.now()
            cooldown_until = last_unlink.unlinked_at + timedelta(
                days=self.unlink_settings.telegram_relink_cooldown_days
            )
            if now < cooldown_until:
                return TelegramRelinkStatus(
                    can_start_relink=False,
                    requires_unlink_first=False,
                    cooldown_until=cooldown_until,
                    retry_after_seconds=seconds_until(cooldown_until, now),
                )

        return TelegramRelinkStatus(can_start_relink=True, requires_unlink_first=False)

    async def attach(
        self,
        account_id: AccountId,
        provider: AuthProvider,
        provider_user_id: str,
        display_name: str | None = None,
    ) -> LinkedIdentity:
        """Attach an external identity to an account.

        Attaching an identity already bound to the same account is a no-op.

        Args:
            account_id: Account to attach to
            provider: Identity provider
            provider_user_id: Provider-specific user ID
            display_name: Optional display handle

        Returns:
            The attached identity

        Raises:
            StateConflictError: If the identity belongs to another account
            PolicyBlockError: If the provider is already linked or the
                Telegram relink policy forbids it
        """
        with logfire.span(
            "identity_service.attach",
            account_id=str(account_id),
            provider=provider.value,
        ):
            existing = await self.linked_identity_repository.find_by_provider_user_id(
                provider, provider_user_id
            )
            if existing is not None:
                if existing.account_id == account_id:
                    logfire.info(
                        "Identity already attached", identity_id=str(existing.id)
                    )
                    return existing
                logfire.warn(
                    "Identity bound to another account",
                    account_id=str(account_id),
                    provider=provider.value,
                )
                raise StateConflictError(ErrorCode.IDENTITY_LINKED_TO_OTHER_ACCOUNT)

            if provider == AuthProvider.TELEGRAM:
                status = await self.telegram_relink_status(account_id)
                if status.requires_unlink_first:
                    raise PolicyBlockError(ErrorCode.TELEGRAM_RELINK_REQUIRES_UNLINK)
                if not status.can_start_relink:
                    logfire.warn(
                        "Telegram relink cooldown active",
                        account_id=str(account_id),
                        retry_after_seconds=status.retry_after_seconds,
                    )
                    raise PolicyBlockError(
                        ErrorCode.TELEGRAM_RELINK_COOLDOWN_ACTIVE,
                        retry_after_seconds=status.retry_after_seconds,
                        blocked_until=status.cooldown_until,
                    )
            else:
                current = (
                    await self.linked_identity_repository.find_by_account_and_provider(
                        account_id, provider
                    )
                )
                if current is not None:
                    raise PolicyBlockError(ErrorCode.PROVIDER_ALREADY_LINKED)

            now = self.clock.now()
            identity = LinkedIdentity(
                id=LinkedIdentityId(uuid4()),
                account_id=account_id,
                provider=provider,
                provider_user_id=provider_user_id,
                display_name=display_name,
                linked_at=now,
                created_at=now,
                updated_at=now,
            )
            saved = await self.linked_identity_repository.save(identity)
            logfire.info(
                "Identity attached",
                account_id=str(account_id),
                provider=provider.value,
                identity_id=str(saved.id),
            )
            return saved

    async def detach(
        self, identity: LinkedIdentity, reason: UnlinkEventReason
    ) -> IdentityUnlinkEvent:
        """Remove an identity and append it to the unlink history.

        Args:
            identity: Identity to remove
            reason: Why it is removed

        Returns:
            The recorded unlink event
        """
        with logfire.span(
            "identity_service.detach",
            account_id=str(identity.account_id),
            provider=identity.provider.value,
            reason=reason.value,
        ):
            await self.linked_identity_repository.delete(identity.id)
            event = await self.identity_unlink_event_repository.save(
                IdentityUnlinkEvent(
                    id=IdentityUnlinkEventId(uuid4()),
                    account_id=identity.account_id,
                    provider=identity.provider,
                    provider_user_id=identity.provider_user_id,
                    reason=reason,
                    unlinked_at=self.clock.now(),
                )
            )
            logfire.info(
                "Identity detached",
                account_id=str(identity.account_id),
                provider=identity.provider.value,
            )
            return event
