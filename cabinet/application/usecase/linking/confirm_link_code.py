"""Confirm link code use case."""

from uuid import UUID

import logfire
from pydantic import BaseModel

from cabinet.application.usecase.common import AccountInfo, session_provider
from cabinet.domain.service import JWTService, LinkCodeService
from cabinet.domain.value import AccountId, AuthProvider


class ConfirmLinkCodeRequest(BaseModel):
    """Confirm link code request."""

    code: str
    account_id: str  # Authenticated account (the one that survives)
    auth_provider: AuthProvider | None = None  # Provider of the caller's session


class ConfirmLinkCodeResponse(BaseModel):
    """Fresh session for the merged account."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AccountInfo


class ConfirmLinkCodeUseCase:
    """Use case for redeeming a link code and merging the two accounts."""

    def __init__(
        self, link_code_service: LinkCodeService, jwt_service: JWTService
    ) -> None:
        """Initialize confirm link code use case.

        Args:
            link_code_service: Link code domain service
            jwt_service: Session token domain service
        """
        self.link_code_service = link_code_service
        self.jwt_service = jwt_service

    async def execute(self, request: ConfirmLinkCodeRequest) -> ConfirmLinkCodeResponse:
        """Execute confirm flow.

        Steps:
        1. Re-validate the code exactly like a preview (spends an attempt)
        2. Refuse conflicting merges with ``manual_merge_required``
        3. Claim the code and merge the source account into the caller's
        4. Issue a new session for the caller

        Raises:
            ManualMergeRequiredError: If the merge needs a human decision
            StateConflictError: If the code was already redeemed
        """
        merged = await self.link_code_service.confirm(
            request.code, AccountId(UUID(request.account_id))
        )
        tokens = self.jwt_service.issue_session(
            merged.id, session_provider(merged, request.auth_provider)
        )
        logfire.info("Session reissued after merge", account_id=str(merged.id))
        return ConfirmLinkCodeResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_in=tokens.expires_in,
            user=AccountInfo.from_account(merged),
        )
