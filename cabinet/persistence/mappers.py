"""Mappers for converting between database rows and domain models.

Domain models are immutable Pydantic models, so rows are mapped by hand
instead of through SQLAlchemy's ORM mapping.
"""

from typing import Any, Dict
from uuid import UUID

from cabinet.domain.model import (
    Account,
    IdentityUnlinkEvent,
    LinkCode,
    LinkedIdentity,
    ManualMergeTicket,
    UnlinkRequest,
)
from cabinet.domain.value import (
    AccountId,
    AuthProvider,
    IdentityUnlinkEventId,
    LinkCodeId,
    LinkCodeStatus,
    LinkCodeValue,
    LinkedIdentityId,
    ManualMergeDecision,
    ManualMergeTicketId,
    UnlinkEventReason,
    UnlinkRequestId,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def _optional_account_id(value: Any) -> AccountId | None:
    return AccountId(_uuid(value)) if value is not None else None


def row_to_account(row: Dict[str, Any]) -> Account:
    """Convert database row to Account domain model."""
    provider = row.get("primary_auth_provider")
    return Account(
        id=AccountId(_uuid(row["id"])),
        is_active=row["is_active"],
        primary_auth_provider=AuthProvider(provider) if provider else None,
        has_active_subscription=row["has_active_subscription"],
        balance_kopeks=row["balance_kopeks"],
        referral_count=row["referral_count"],
        merged_into_id=_optional_account_id(row.get("merged_into_id")),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deactivated_at=row.get("deactivated_at"),
    )


def account_to_dict(account: Account) -> Dict[str, Any]:
    """Convert Account domain model to database dict."""
    data = account.model_dump()
    data["primary_auth_provider"] = (
        account.primary_auth_provider.value if account.primary_auth_provider else None
    )
    return data


def row_to_linked_identity(row: Dict[str, Any]) -> LinkedIdentity:
    """Convert database row to LinkedIdentity domain model."""
    return LinkedIdentity(
        id=LinkedIdentityId(_uuid(row["id"])),
        account_id=AccountId(_uuid(row["account_id"])),
        provider=AuthProvider(row["provider"]),
        provider_user_id=row["provider_user_id"],
        display_name=row.get("display_name"),
        linked_at=row["linked_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def linked_identity_to_dict(identity: LinkedIdentity) -> Dict[str, Any]:
    """Convert LinkedIdentity domain model to database dict."""
    data = identity.model_dump()
    data["provider"] = identity.provider.value
    return data


def row_to_link_code(row: Dict[str, Any]) -> LinkCode:
    """Convert database row to LinkCode domain model."""
    return LinkCode(
        id=LinkCodeId(_uuid(row["id"])),
        code=LinkCodeValue(row["code"]),
        source_account_id=AccountId(_uuid(row["source_account_id"])),
        source_identity_hints=row.get("source_identity_hints") or {},
        status=LinkCodeStatus(row["status"]),
        attempts_used=row["attempts_used"],
        max_attempts=row["max_attempts"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
        consumed_at=row.get("consumed_at"),
        consumed_by_account_id=_optional_account_id(
            row.get("consumed_by_account_id")
        ),
    )


def link_code_to_dict(link_code: LinkCode) -> Dict[str, Any]:
    """Convert LinkCode domain model to database dict."""
    data = link_code.model_dump()
    data["code"] = link_code.code.root
    data["status"] = link_code.status.value
    return data


def row_to_unlink_request(row: Dict[str, Any]) -> UnlinkRequest:
    """Convert database row to UnlinkRequest domain model."""
    return UnlinkRequest(
        id=UnlinkRequestId(_uuid(row["id"])),
        token_hash=row["token_hash"],
        account_id=AccountId(_uuid(row["account_id"])),
        provider=AuthProvider(row["provider"]),
        otp_hash=row["otp_hash"],
        attempts_left=row["attempts_left"],
        expires_at=row["expires_at"],
        resend_available_at=row["resend_available_at"],
        delivered=row["delivered"],
        created_at=row["created_at"],
    )


def unlink_request_to_dict(request: UnlinkRequest) -> Dict[str, Any]:
    """Convert UnlinkRequest domain model to database dict."""
    data = request.model_dump()
    data["provider"] = request.provider.value
    return data


def row_to_identity_unlink_event(row: Dict[str, Any]) -> IdentityUnlinkEvent:
    """Convert database row to IdentityUnlinkEvent domain model."""
    return IdentityUnlinkEvent(
        id=IdentityUnlinkEventId(_uuid(row["id"])),
        account_id=AccountId(_uuid(row["account_id"])),
        provider=AuthProvider(row["provider"]),
        provider_user_id=row["provider_user_id"],
        reason=UnlinkEventReason(row["reason"]),
        unlinked_at=row["unlinked_at"],
    )


def identity_unlink_event_to_dict(event: IdentityUnlinkEvent) -> Dict[str, Any]:
    """Convert IdentityUnlinkEvent domain model to database dict."""
    data = event.model_dump()
    data["provider"] = event.provider.value
    data["reason"] = event.reason.value
    return data


def row_to_manual_merge_ticket(row: Dict[str, Any]) -> ManualMergeTicket:
    """Convert database row to ManualMergeTicket domain model."""
    return ManualMergeTicket(
        id=ManualMergeTicketId(_uuid(row["id"])),
        requester_account_id=AccountId(_uuid(row["requester_account_id"])),
        source_account_id=AccountId(_uuid(row["source_account_id"])),
        link_code_id=LinkCodeId(_uuid(row["link_code_id"])),
        conflict_reason=row["conflict_reason"],
        requester_identity_hints=row.get("requester_identity_hints") or {},
        source_identity_hints=row.get("source_identity_hints") or {},
        comment=row.get("comment"),
        decision=ManualMergeDecision(row["decision"]),
        primary_account_id=_optional_account_id(row.get("primary_account_id")),
        resolution_comment=row.get("resolution_comment"),
        resolved_by_account_id=_optional_account_id(
            row.get("resolved_by_account_id")
        ),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def manual_merge_ticket_to_dict(ticket: ManualMergeTicket) -> Dict[str, Any]:
    """Convert ManualMergeTicket domain model to database dict."""
    data = ticket.model_dump()
    data["decision"] = ticket.decision.value
    return data
