"""Purge of expired linking state.

Expiry is evaluated lazily on access, so expired rows stay in place until
this service removes them.
"""

from datetime import timedelta

import logfire
from pydantic import BaseModel

from cabinet.config import LinkingSettings, UnlinkSettings
from cabinet.domain.repository import (
    LinkCodeRepository,
    OtpAttemptRepository,
    UnlinkRequestRepository,
)
from cabinet.util.clock import Clock

from .base import Service


class PurgeResult(BaseModel):
    """Rows removed by one purge run."""

    link_codes: int
    unlink_requests: int
    otp_attempts: int


class HousekeepingService(Service):
    """Domain service for periodic cleanup."""

    def __init__(
        self,
        link_code_repository: LinkCodeRepository,
        unlink_request_repository: UnlinkRequestRepository,
        otp_attempt_repository: OtpAttemptRepository,
        linking_settings: LinkingSettings,
        unlink_settings: UnlinkSettings,
        clock: Clock,
    ) -> None:
        self.link_code_repository = link_code_repository
        self.unlink_request_repository = unlink_request_repository
        self.otp_attempt_repository = otp_attempt_repository
        self.linking_settings = linking_settings
        self.unlink_settings = unlink_settings
        self.clock = clock

    async def purge_expired(self) -> PurgeResult:
        """Delete expired link codes, unlink requests and old OTP attempts.

        OTP attempts are kept for one rate limit window; older ones can no
        longer influence a decision.
        """
        with logfire.span("housekeeping_service.purge_expired"):
            now = self.clock.now()
            link_codes = await self.link_code_repository.delete_stale(
                now - timedelta(hours=self.linking_settings.stale_code_retention_hours)
            )
            unlink_requests = await self.unlink_request_repository.delete_expired(now)
            otp_attempts = await self.otp_attempt_repository.delete_before(
                now
                - timedelta(seconds=self.unlink_settings.otp_rate_limit_window_seconds)
            )
            result = PurgeResult(
                link_codes=link_codes,
                unlink_requests=unlink_requests,
                otp_attempts=otp_attempts,
            )
            logfire.info("Expired linking state purged", **result.model_dump())
            return result
