"""In-memory OTP attempt log for testing."""

from datetime import datetime

from cabinet.domain.repository import OtpAttemptRepository
from cabinet.domain.value import AccountId

from .store import InMemoryStore


class InMemoryOtpAttemptRepository(OtpAttemptRepository):
    """In-memory implementation of OtpAttemptRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def record(self, account_id: AccountId, attempted_at: datetime) -> None:
        """Record one confirm attempt."""
        self._store.otp_attempts.append((account_id, attempted_at))

    async def find_since(
        self, account_id: AccountId, since: datetime
    ) -> list[datetime]:
        """Attempt times of an account at or after ``since``, oldest first."""
        return sorted(
            at
            for owner, at in self._store.otp_attempts
            if owner == account_id and at >= since
        )

    async def delete_before(self, before: datetime) -> int:
        """Delete attempts older than ``before``."""
        kept = [(o, at) for o, at in self._store.otp_attempts if at >= before]
        deleted = len(self._store.otp_attempts) - len(kept)
        self._store.otp_attempts[:] = kept
        return deleted
