"""Link code use cases."""

from .confirm_link_code import (
    ConfirmLinkCodeRequest,
    ConfirmLinkCodeResponse,
    ConfirmLinkCodeUseCase,
)
from .create_link_code import (
    CreateLinkCodeRequest,
    CreateLinkCodeResponse,
    CreateLinkCodeUseCase,
)
from .preview_link_code import (
    PreviewLinkCodeRequest,
    PreviewLinkCodeResponse,
    PreviewLinkCodeUseCase,
)

__all__ = [
    "ConfirmLinkCodeRequest",
    "ConfirmLinkCodeResponse",
    "ConfirmLinkCodeUseCase",
    "CreateLinkCodeRequest",
    "CreateLinkCodeResponse",
    "CreateLinkCodeUseCase",
    "PreviewLinkCodeRequest",
    "PreviewLinkCodeResponse",
    "PreviewLinkCodeUseCase",
]
