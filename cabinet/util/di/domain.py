"""Domain layer DI providers."""

from dishka import Scope, provide

from cabinet.config import AuthSettings, LinkingSettings, SupportSettings, UnlinkSettings
from cabinet.domain.repository import (
    AccountRepository,
    IdentityUnlinkEventRepository,
    LinkCodeRepository,
    LinkedIdentityRepository,
    ManualMergeTicketRepository,
    OtpAttemptRepository,
    UnlinkRequestRepository,
)
from cabinet.domain.service import (
    AccountMergeService,
    AccountService,
    AuthService,
    ConflictResolver,
    HousekeepingService,
    IdentityService,
    JWTService,
    LinkCodeService,
    ManualMergeService,
    OAuthClient,
    OtpSender,
    TelegramAuthService,
    UnlinkService,
)
from cabinet.domain.value import AuthProvider
from cabinet.util.clock import Clock
from cabinet.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances sharing one transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide OAuth domain service."""
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_telegram_auth_service(
        self, auth_settings: AuthSettings, clock: Clock
    ) -> TelegramAuthService:
        """Provide Telegram login widget verification."""
        return TelegramAuthService(auth_settings=auth_settings, clock=clock)

    @provide
    def get_jwt_service(self, auth_settings: AuthSettings, clock: Clock) -> JWTService:
        """Provide session token domain service."""
        return JWTService(auth_settings=auth_settings, clock=clock)

    @provide
    def get_account_service(
        self, account_repository: AccountRepository
    ) -> AccountService:
        """Provide account domain service."""
        return AccountService(account_repository=account_repository)

    @provide
    def get_identity_service(
        self,
        linked_identity_repository: LinkedIdentityRepository,
        identity_unlink_event_repository: IdentityUnlinkEventRepository,
        unlink_settings: UnlinkSettings,
        clock: Clock,
    ) -> IdentityService:
        """Provide identity domain service."""
        return IdentityService(
            linked_identity_repository=linked_identity_repository,
            identity_unlink_event_repository=identity_unlink_event_repository,
            unlink_settings=unlink_settings,
            clock=clock,
        )

    @provide
    def get_conflict_resolver(
        self, linked_identity_repository: LinkedIdentityRepository
    ) -> ConflictResolver:
        """Provide merge conflict detection."""
        return ConflictResolver(linked_identity_repository=linked_identity_repository)

    @provide
    def get_merge_service(
        self,
        account_repository: AccountRepository,
        linked_identity_repository: LinkedIdentityRepository,
        identity_service: IdentityService,
        clock: Clock,
    ) -> AccountMergeService:
        """Provide account merge domain service."""
        return AccountMergeService(
            account_repository=account_repository,
            linked_identity_repository=linked_identity_repository,
            identity_service=identity_service,
            clock=clock,
        )

    @provide
    def get_link_code_service(
        self,
        link_code_repository: LinkCodeRepository,
        account_repository: AccountRepository,
        identity_service: IdentityService,
        conflict_resolver: ConflictResolver,
        merge_service: AccountMergeService,
        linking_settings: LinkingSettings,
        clock: Clock,
    ) -> LinkCodeService:
        """Provide link code domain service."""
        return LinkCodeService(
            link_code_repository=link_code_repository,
            account_repository=account_repository,
            identity_service=identity_service,
            conflict_resolver=conflict_resolver,
            merge_service=merge_service,
            linking_settings=linking_settings,
            clock=clock,
        )

    @provide
    def get_unlink_service(
        self,
        unlink_request_repository: UnlinkRequestRepository,
        otp_attempt_repository: OtpAttemptRepository,
        account_repository: AccountRepository,
        identity_service: IdentityService,
        otp_sender: OtpSender,
        unlink_settings: UnlinkSettings,
        clock: Clock,
    ) -> UnlinkService:
        """Provide unlink domain service."""
        return UnlinkService(
            unlink_request_repository=unlink_request_repository,
            otp_attempt_repository=otp_attempt_repository,
            account_repository=account_repository,
            identity_service=identity_service,
            otp_sender=otp_sender,
            unlink_settings=unlink_settings,
            clock=clock,
        )

    @provide
    def get_manual_merge_service(
        self,
        manual_merge_ticket_repository: ManualMergeTicketRepository,
        account_repository: AccountRepository,
        link_code_service: LinkCodeService,
        identity_service: IdentityService,
        merge_service: AccountMergeService,
        support_settings: SupportSettings,
        clock: Clock,
    ) -> ManualMergeService:
        """Provide manual merge domain service."""
        return ManualMergeService(
            manual_merge_ticket_repository=manual_merge_ticket_repository,
            account_repository=account_repository,
            link_code_service=link_code_service,
            identity_service=identity_service,
            merge_service=merge_service,
            support_settings=support_settings,
            clock=clock,
        )

    @provide
    def get_housekeeping_service(
        self,
        link_code_repository: LinkCodeRepository,
        unlink_request_repository: UnlinkRequestRepository,
        otp_attempt_repository: OtpAttemptRepository,
        linking_settings: LinkingSettings,
        unlink_settings: UnlinkSettings,
        clock: Clock,
    ) -> HousekeepingService:
        """Provide expired state purge service."""
        return HousekeepingService(
            link_code_repository=link_code_repository,
            unlink_request_repository=unlink_request_repository,
            otp_attempt_repository=otp_attempt_repository,
            linking_settings=linking_settings,
            unlink_settings=unlink_settings,
            clock=clock,
        )
