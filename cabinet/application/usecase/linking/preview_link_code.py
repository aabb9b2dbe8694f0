"""Preview link code use case."""

from uuid import UUID

from pydantic import BaseModel

from cabinet.domain.service import LinkCodeService
from cabinet.domain.value import AccountId, CleanMerge


class PreviewLinkCodeRequest(BaseModel):
    """Preview link code request."""

    code: str
    account_id: str  # Authenticated account (the one that survives)


class PreviewLinkCodeResponse(BaseModel):
    """What confirming the code would do."""

    source_user_id: str
    source_identity_hints: dict[str, str]
    manual_merge_required: bool
    conflict_reason: str | None = None
    telegram_replace_warning: bool = False


class PreviewLinkCodeUseCase:
    """Use case for previewing the merge a link code would perform."""

    def __init__(self, link_code_service: LinkCodeService) -> None:
        """Initialize preview link code use case.

        Args:
            link_code_service: Link code domain service
        """
        self.link_code_service = link_code_service

    async def execute(self, request: PreviewLinkCodeRequest) -> PreviewLinkCodeResponse:
        """Execute preview flow.

        A conflicting merge is reported as ``manual_merge_required`` rather
        than as an error. The preview spends one attempt of the code.

        Raises:
            ValidationError: Malformed code or the caller's own code
            StateConflictError: Unknown, expired or used code
            RateLimitError: Attempt budget exceeded
            PolicyBlockError: Source or target account inactive
        """
        resolved = await self.link_code_service.preview(
            request.code, AccountId(UUID(request.account_id))
        )
        evaluation = resolved.evaluation
        if isinstance(evaluation, CleanMerge):
            return PreviewLinkCodeResponse(
                source_user_id=str(resolved.source.id),
                source_identity_hints=resolved.link_code.source_identity_hints,
                manual_merge_required=False,
                telegram_replace_warning=evaluation.replaces_telegram,
            )
        return PreviewLinkCodeResponse(
            source_user_id=str(resolved.source.id),
            source_identity_hints=resolved.link_code.source_identity_hints,
            manual_merge_required=True,
            conflict_reason=evaluation.reason.value,
        )
