"""Application layer DI providers."""

from dishka import Scope, provide

from cabinet.application.usecase.auth import RefreshSessionUseCase
from cabinet.application.usecase.identity import (
    ConfirmUnlinkUseCase,
    InitiateOAuthLinkUseCase,
    LinkOAuthIdentityUseCase,
    LinkTelegramUseCase,
    ListLinkedIdentitiesUseCase,
    RequestUnlinkUseCase,
)
from cabinet.application.usecase.linking import (
    ConfirmLinkCodeUseCase,
    CreateLinkCodeUseCase,
    PreviewLinkCodeUseCase,
)
from cabinet.application.usecase.manual_merge import (
    GetLatestManualMergeUseCase,
    ListManualMergesUseCase,
    ResolveManualMergeUseCase,
    SubmitManualMergeUseCase,
)
from cabinet.config import AuthSettings
from cabinet.domain.service import (
    AccountService,
    AuthService,
    IdentityService,
    JWTService,
    LinkCodeService,
    ManualMergeService,
    TelegramAuthService,
    UnlinkService,
)
from cabinet.util.clock import Clock
from cabinet.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application layer provider - concrete, no mocks needed.

    Use cases are REQUEST-scoped: they depend on REQUEST-scoped domain services.
    """

    # Link code use cases
    @provide(scope=Scope.REQUEST)
    def get_create_link_code_use_case(
        self,
        account_service: AccountService,
        link_code_service: LinkCodeService,
        clock: Clock,
    ) -> CreateLinkCodeUseCase:
        """Provide create link code use case."""
        return CreateLinkCodeUseCase(
            account_service=account_service,
            link_code_service=link_code_service,
            clock=clock,
        )

    @provide(scope=Scope.REQUEST)
    def get_preview_link_code_use_case(
        self, link_code_service: LinkCodeService
    ) -> PreviewLinkCodeUseCase:
        """Provide preview link code use case."""
        return PreviewLinkCodeUseCase(link_code_service=link_code_service)

    @provide(scope=Scope.REQUEST)
    def get_confirm_link_code_use_case(
        self, link_code_service: LinkCodeService, jwt_service: JWTService
    ) -> ConfirmLinkCodeUseCase:
        """Provide confirm link code use case."""
        return ConfirmLinkCodeUseCase(
            link_code_service=link_code_service, jwt_service=jwt_service
        )

    # Manual merge use cases
    @provide(scope=Scope.REQUEST)
    def get_submit_manual_merge_use_case(
        self, manual_merge_service: ManualMergeService
    ) -> SubmitManualMergeUseCase:
        """Provide submit manual merge use case."""
        return SubmitManualMergeUseCase(manual_merge_service=manual_merge_service)

    @provide(scope=Scope.REQUEST)
    def get_get_latest_manual_merge_use_case(
        self, manual_merge_service: ManualMergeService
    ) -> GetLatestManualMergeUseCase:
        """Provide get latest manual merge use case."""
        return GetLatestManualMergeUseCase(manual_merge_service=manual_merge_service)

    @provide(scope=Scope.REQUEST)
    def get_list_manual_merges_use_case(
        self, manual_merge_service: ManualMergeService, auth_settings: AuthSettings
    ) -> ListManualMergesUseCase:
        """Provide list manual merges use case."""
        return ListManualMergesUseCase(
            manual_merge_service=manual_merge_service, auth_settings=auth_settings
        )

    @provide(scope=Scope.REQUEST)
    def get_resolve_manual_merge_use_case(
        self, manual_merge_service: ManualMergeService, auth_settings: AuthSettings
    ) -> ResolveManualMergeUseCase:
        """Provide resolve manual merge use case."""
        return ResolveManualMergeUseCase(
            manual_merge_service=manual_merge_service, auth_settings=auth_settings
        )

    # Identity use cases
    @provide(scope=Scope.REQUEST)
    def get_list_linked_identities_use_case(
        self,
        account_service: AccountService,
        identity_service: IdentityService,
        clock: Clock,
    ) -> ListLinkedIdentitiesUseCase:
        """Provide list linked identities use case."""
        return ListLinkedIdentitiesUseCase(
            account_service=account_service,
            identity_service=identity_service,
            clock=clock,
        )

    @provide(scope=Scope.REQUEST)
    def get_request_unlink_use_case(
        self,
        account_service: AccountService,
        unlink_service: UnlinkService,
        clock: Clock,
    ) -> RequestUnlinkUseCase:
        """Provide request unlink use case."""
        return RequestUnlinkUseCase(
            account_service=account_service,
            unlink_service=unlink_service,
            clock=clock,
        )

    @provide(scope=Scope.REQUEST)
    def get_confirm_unlink_use_case(
        self, account_service: AccountService, unlink_service: UnlinkService
    ) -> ConfirmUnlinkUseCase:
        """Provide confirm unlink use case."""
        return ConfirmUnlinkUseCase(
            account_service=account_service, unlink_service=unlink_service
        )

    @provide(scope=Scope.REQUEST)
    def get_link_telegram_use_case(
        self,
        account_service: AccountService,
        identity_service: IdentityService,
        telegram_auth_service: TelegramAuthService,
    ) -> LinkTelegramUseCase:
        """Provide link Telegram use case."""
        return LinkTelegramUseCase(
            account_service=account_service,
            identity_service=identity_service,
            telegram_auth_service=telegram_auth_service,
        )

    @provide(scope=Scope.REQUEST)
    def get_initiate_oauth_link_use_case(
        self, auth_service: AuthService
    ) -> InitiateOAuthLinkUseCase:
        """Provide initiate OAuth link use case."""
        return InitiateOAuthLinkUseCase(auth_service=auth_service)

    @provide(scope=Scope.REQUEST)
    def get_link_oauth_identity_use_case(
        self,
        account_service: AccountService,
        auth_service: AuthService,
        identity_service: IdentityService,
    ) -> LinkOAuthIdentityUseCase:
        """Provide link OAuth identity use case."""
        return LinkOAuthIdentityUseCase(
            account_service=account_service,
            auth_service=auth_service,
            identity_service=identity_service,
        )

    # Session use cases
    @provide(scope=Scope.REQUEST)
    def get_refresh_session_use_case(
        self, jwt_service: JWTService, account_service: AccountService
    ) -> RefreshSessionUseCase:
        """Provide refresh session use case."""
        return RefreshSessionUseCase(
            jwt_service=jwt_service, account_service=account_service
        )
