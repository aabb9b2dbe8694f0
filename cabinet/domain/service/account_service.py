"""Account domain service."""

import logfire

from cabinet.domain.error import ErrorCode, NotFoundError, PolicyBlockError
from cabinet.domain.model import Account
from cabinet.domain.repository import AccountRepository
from cabinet.domain.value import AccountId

from .base import Service


class AccountService(Service):
    """Domain service for account lookups."""

    def __init__(self, account_repository: AccountRepository) -> None:
        self.account_repository = account_repository

    async def get_by_id(self, account_id: AccountId) -> Account:
        """Get an account by ID.

        Raises:
            NotFoundError: If the account does not exist
        """
        account = await self.account_repository.find_by_id(account_id)
        if not account:
            logfire.warn("Account not found", account_id=str(account_id))
            raise NotFoundError("Account", str(account_id))
        return account

    async def get_active(self, account_id: AccountId) -> Account:
        """Get an account that is allowed to act.

        Raises:
            NotFoundError: If the account does not exist
            PolicyBlockError: If the account was deactivated (e.g. merged away)
        """
        account = await self.get_by_id(account_id)
        if not account.is_active:
            logfire.warn("Inactive account rejected", account_id=str(account_id))
            raise PolicyBlockError(ErrorCode.ACCOUNT_INACTIVE)
        return account
