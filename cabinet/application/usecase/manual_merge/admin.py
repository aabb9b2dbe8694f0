"""Admin access check for ticket adjudication."""

from cabinet.config import AuthSettings
from cabinet.domain.error import NotAuthorizedError


def ensure_admin(account_id: str, auth_settings: AuthSettings, action: str) -> None:
    """Raise unless the account is configured as an admin.

    Raises:
        NotAuthorizedError: If the account is not an admin
    """
    if account_id not in auth_settings.admin_account_ids:
        raise NotAuthorizedError(account_id, action)
