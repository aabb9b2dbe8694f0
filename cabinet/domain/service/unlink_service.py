"""Unlink domain service.

Two-step, OTP-confirmed detachment of an identity. Request tokens and OTPs
are stored only as hashes; attempt counters, resend cooldowns and the
per-account confirm log are durable so they survive restarts.
"""

from datetime import timedelta
from uuid import uuid4

import logfire
from pydantic import BaseModel, ConfigDict

from cabinet.config import UnlinkSettings
from cabinet.domain.error import (
    DependencyUnavailableError,
    ErrorCode,
    RateLimitError,
    StateConflictError,
    ValidationError,
)
from cabinet.domain.model import Account, LinkedIdentity, UnlinkRequest
from cabinet.domain.repository import (
    AccountRepository,
    OtpAttemptRepository,
    UnlinkRequestRepository,
)
from cabinet.domain.value import (
    AuthProvider,
    Blocked,
    OtpChannel,
    OtpDestination,
    UnlinkEventReason,
    UnlinkRequestId,
)
from cabinet.util.clock import Clock, seconds_until
from cabinet.util.tokens import (
    generate_otp,
    generate_request_token,
    hash_otp,
    hash_request_token,
    verify_otp,
)

from .base import Service
from .identity_service import IdentityService, unlink_block_error
from .notification import OtpDeliveryError, OtpSender


class IssuedUnlinkRequest(BaseModel):
    """A stored unlink request together with its plain token."""

    model_config = ConfigDict(frozen=True)

    request: UnlinkRequest
    request_token: str
    expires_in_seconds: int


def otp_destination(
    identities: list[LinkedIdentity], provider: AuthProvider
) -> OtpDestination | None:
    """Pick where the OTP for unlinking ``provider`` is sent.

    Telegram and email identities receive their own code; other providers
    fall back to the account's Telegram, then its email.
    """
    by_provider = {i.provider: i for i in identities}

    if provider == AuthProvider.EMAIL:
        order = [AuthProvider.EMAIL, AuthProvider.TELEGRAM]
    else:
        order = [AuthProvider.TELEGRAM, AuthProvider.EMAIL]

    for candidate in order:
        identity = by_provider.get(candidate)
        if identity is None:
            continue
        channel = (
            OtpChannel.TELEGRAM
            if candidate == AuthProvider.TELEGRAM
            else OtpChannel.EMAIL
        )
        return OtpDestination(channel=channel, address=identity.provider_user_id)
    return None


class UnlinkService(Service):
    """Domain service for the OTP-gated unlink flow."""

    def __init__(
        self,
        unlink_request_repository: UnlinkRequestRepository,
        otp_attempt_repository: OtpAttemptRepository,
        account_repository: AccountRepository,
        identity_service: IdentityService,
        otp_sender: OtpSender,
        unlink_settings: UnlinkSettings,
        clock: Clock,
    ) -> None:
        """Initialize unlink service.

        Args:
            unlink_request_repository: Live unlink requests
            otp_attempt_repository: Per-account confirm attempt log
            account_repository: Account repository
            identity_service: Identity domain service
            otp_sender: Out-of-band OTP delivery
            unlink_settings: TTLs, attempt budgets and cooldowns
            clock: Wall clock
        """
        self.unlink_request_repository = unlink_request_repository
        self.otp_attempt_repository = otp_attempt_repository
        self.account_repository = account_repository
        self.identity_service = identity_service
        self.otp_sender = otp_sender
        self.unlink_settings = unlink_settings
        self.clock = clock

    async def request_unlink(
        self,
        account: Account,
        provider: AuthProvider,
        current_auth_provider: AuthProvider | None,
    ) -> IssuedUnlinkRequest:
        """Start unlinking an identity and deliver an OTP.

        A live request still inside its resend cooldown is kept and the call
        fails; otherwise any previous request is replaced. When delivery fails
        the new request and its resend cooldown are kept.

        Args:
            account: Account unlinking the identity
            provider: Provider to unlink
            current_auth_provider: Provider of the caller's session

        Returns:
            The issued request with its plain token

        Raises:
            PolicyBlockError: If the identity cannot be unlinked
            RateLimitError: If a new OTP was requested too soon
            DependencyUnavailableError: If the OTP could not be delivered
        """
        with logfire.span(
            "unlink_service.request_unlink",
            account_id=str(account.id),
            provider=provider.value,
        ):
            now = self.clock.now()
            identities = await self.identity_service.list_identities(account.id)
            availability = self.identity_service.availability_for(
                identities, provider, current_auth_provider
            )
            if isinstance(availability, Blocked):
                logfire.info(
                    "Unlink blocked",
                    account_id=str(account.id),
                    provider=provider.value,
                    reason=availability.reason.value,
                )
                raise unlink_block_error(availability, now)

            existing = await self.unlink_request_repository.find_by_account_and_provider(
                account.id, provider
            )
            if existing is not None and not existing.is_expired(now):
                if now < existing.resend_available_at:
                    raise RateLimitError(
                        ErrorCode.UNLINK_OTP_RESEND_COOLDOWN,
                        retry_after_seconds=seconds_until(
                            existing.resend_available_at, now
                        ),
                        blocked_until=existing.resend_available_at,
                    )
            await self.unlink_request_repository.delete_for_account_and_provider(
                account.id, provider
            )

            request_token = generate_request_token()
            otp = generate_otp(self.unlink_settings.otp_length)
            request = await self.unlink_request_repository.save(
                UnlinkRequest(
                    id=UnlinkRequestId(uuid4()),
                    token_hash=hash_request_token(request_token),
                    account_id=account.id,
                    provider=provider,
                    otp_hash=hash_otp(otp, request_token),
                    attempts_left=self.unlink_settings.otp_max_attempts,
                    expires_at=now
                    + timedelta(seconds=self.unlink_settings.request_ttl_seconds),
                    resend_available_at=now
                    + timedelta(
                        seconds=self.unlink_settings.otp_resend_cooldown_seconds
                    ),
                    created_at=now,
                )
            )

            destination = otp_destination(identities, provider)
            if destination is None:
                logfire.warn(
                    "No OTP channel for account",
                    account_id=str(account.id),
                    provider=provider.value,
                )
                raise DependencyUnavailableError(ErrorCode.UNLINK_OTP_DELIVERY_FAILED)

            try:
                await self.otp_sender.send_otp(destination, otp, provider)
            except OtpDeliveryError as e:
                logfire.error(
                    "OTP delivery failed",
                    account_id=str(account.id),
                    channel=destination.channel.value,
                    error=str(e),
                )
                raise DependencyUnavailableError(ErrorCode.UNLINK_OTP_DELIVERY_FAILED)

            request = await self.unlink_request_repository.save(
                request.model_copy(update={"delivered": True})
            )
            logfire.info(
                "Unlink requested",
                account_id=str(account.id),
                provider=provider.value,
                channel=destination.channel.value,
            )
            return IssuedUnlinkRequest(
                request=request,
                request_token=request_token,
                expires_in_seconds=seconds_until(request.expires_at, now),
            )

    async def confirm_unlink(
        self,
        account: Account,
        provider: AuthProvider,
        request_token: str,
        otp_code: str,
        current_auth_provider: AuthProvider | None,
    ) -> LinkedIdentity:
        """Verify the OTP and detach the identity.

        Args:
            account: Account unlinking the identity
            provider: Provider the caller is unlinking
            request_token: Token returned by ``request_unlink``
            otp_code: Code delivered out-of-band
            current_auth_provider: Provider of the caller's session

        Returns:
            The detached identity

        Raises:
            StateConflictError: Unknown or expired request
            ValidationError: Request mismatch or wrong OTP
            RateLimitError: OTP attempts exhausted or account rate limited
            PolicyBlockError: The identity became unlinkable meanwhile
        """
        with logfire.span(
            "unlink_service.confirm_unlink",
            account_id=str(account.id),
            provider=provider.value,
        ):
            now = self.clock.now()

            request = await self.unlink_request_repository.find_by_token_hash(
                hash_request_token(request_token)
            )
            if request is None:
                raise StateConflictError(ErrorCode.UNLINK_REQUEST_INVALID)
            if request.is_expired(now):
                await self.unlink_request_repository.delete(request.id)
                raise StateConflictError(ErrorCode.UNLINK_REQUEST_INVALID)
            if request.account_id != account.id or request.provider != provider:
                logfire.warn(
                    "Unlink request mismatch",
                    account_id=str(account.id),
                    provider=provider.value,
                )
                raise ValidationError(ErrorCode.UNLINK_REQUEST_MISMATCH)

            await self._enforce_rate_limit(account)
            await self.otp_attempt_repository.record(account.id, now)

            if not verify_otp(otp_code, request_token, request.otp_hash):
                attempts_left = await self.unlink_request_repository.decrement_attempts(
                    request.id
                )
                if not attempts_left:
                    await self.unlink_request_repository.delete(request.id)
                    logfire.warn(
                        "Unlink OTP attempts exhausted", account_id=str(account.id)
                    )
                    raise RateLimitError(ErrorCode.UNLINK_OTP_ATTEMPTS_EXCEEDED)
                logfire.info(
                    "Unlink OTP rejected",
                    account_id=str(account.id),
                    attempts_left=attempts_left,
                )
                raise ValidationError(
                    ErrorCode.UNLINK_OTP_INVALID,
                    f"Confirmation code is incorrect, {attempts_left} attempts left",
                )

            identities = await self.identity_service.list_identities(account.id)
            availability = self.identity_service.availability_for(
                identities, provider, current_auth_provider
            )
            if isinstance(availability, Blocked):
                await self.unlink_request_repository.delete(request.id)
                raise unlink_block_error(availability, now)

            identity = next(i for i in identities if i.provider == provider)
            await self.identity_service.detach(identity, UnlinkEventReason.USER_UNLINK)
            await self.unlink_request_repository.delete(request.id)

            if account.primary_auth_provider == provider:
                await self.account_repository.save(
                    account.model_copy(
                        update={
                            "primary_auth_provider": current_auth_provider,
                            "updated_at": now,
                        }
                    )
                )

            logfire.info(
                "Identity unlinked",
                account_id=str(account.id),
                provider=provider.value,
            )
            return identity

    async def _enforce_rate_limit(self, account: Account) -> None:
        now = self.clock.now()
        window = timedelta(seconds=self.unlink_settings.otp_rate_limit_window_seconds)
        recent = await self.otp_attempt_repository.find_since(account.id, now - window)
        if len(recent) >= self.unlink_settings.otp_rate_limit_max_attempts:
            # The window frees up when its oldest attempt ages out
            free_at = recent[0] + window
            logfire.warn(
                "Unlink confirm rate limited",
                account_id=str(account.id),
                attempts=len(recent),
            )
            raise RateLimitError(
                ErrorCode.UNLINK_OTP_RATE_LIMITED,
                retry_after_seconds=seconds_until(free_at, now),
                blocked_until=free_at,
            )
