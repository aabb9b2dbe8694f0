"""Mock persistence providers for testing."""

from dishka import Scope, provide

from cabinet.domain.repository import (
    AccountRepository,
    IdentityUnlinkEventRepository,
    LinkCodeRepository,
    LinkedIdentityRepository,
    ManualMergeTicketRepository,
    OtpAttemptRepository,
    UnlinkRequestRepository,
)
from cabinet.persistence.repository.inmemory import (
    InMemoryAccountRepository,
    InMemoryIdentityUnlinkEventRepository,
    InMemoryLinkCodeRepository,
    InMemoryLinkedIdentityRepository,
    InMemoryManualMergeTicketRepository,
    InMemoryOtpAttemptRepository,
    InMemoryStore,
    InMemoryUnlinkRequestRepository,
)
from cabinet.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    The store lives for the whole container so that consecutive requests of
    one test see each other's writes; every test builds a fresh container.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_store(self) -> InMemoryStore:
        """Provide the shared in-memory store."""
        return InMemoryStore()

    @provide(scope=Scope.REQUEST)
    def get_account_repository(self, store: InMemoryStore) -> AccountRepository:
        """Provide in-memory account repository."""
        return InMemoryAccountRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_linked_identity_repository(
        self, store: InMemoryStore
    ) -> LinkedIdentityRepository:
        """Provide in-memory linked identity repository."""
        return InMemoryLinkedIdentityRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_link_code_repository(self, store: InMemoryStore) -> LinkCodeRepository:
        """Provide in-memory link code repository."""
        return InMemoryLinkCodeRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_unlink_request_repository(
        self, store: InMemoryStore
    ) -> UnlinkRequestRepository:
        """Provide in-memory unlink request repository."""
        return InMemoryUnlinkRequestRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_otp_attempt_repository(self, store: InMemoryStore) -> OtpAttemptRepository:
        """Provide in-memory OTP attempt log."""
        return InMemoryOtpAttemptRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_identity_unlink_event_repository(
        self, store: InMemoryStore
    ) -> IdentityUnlinkEventRepository:
        """Provide in-memory unlink event repository."""
        return InMemoryIdentityUnlinkEventRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_manual_merge_ticket_repository(
        self, store: InMemoryStore
    ) -> ManualMergeTicketRepository:
        """Provide in-memory manual merge ticket repository."""
        return InMemoryManualMergeTicketRepository(store)
