"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cabinet.config import Settings
from cabinet.domain.error import LinkingError
from cabinet.domain.repository import (
    AccountRepository,
    IdentityUnlinkEventRepository,
    LinkCodeRepository,
    LinkedIdentityRepository,
    ManualMergeTicketRepository,
    OtpAttemptRepository,
    UnlinkRequestRepository,
)
from cabinet.persistence.database import create_engine, create_session_factory
from cabinet.persistence.repository import (
    PostgresAccountRepository,
    PostgresIdentityUnlinkEventRepository,
    PostgresLinkCodeRepository,
    PostgresLinkedIdentityRepository,
    PostgresManualMergeTicketRepository,
    PostgresOtpAttemptRepository,
    PostgresUnlinkRequestRepository,
)
from cabinet.util.di.base import ProviderBase
from cabinet.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_engine(self, settings: Settings) -> AsyncEngine:
        """Provide database engine."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        return engine

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session commits when the request succeeds or ends in a linking
        error, so attempt counters and OTP logs written before the error are
        kept. Any other exception rolls the whole request back.
        """
        async with session_factory() as session:
            try:
                yield session
            except LinkingError as e:
                await session.commit()
                logfire.info("Session committed after domain error", code=e.code.value)
                raise
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise
            else:
                await session.commit()
                logfire.info("Session committed")

    @provide(scope=Scope.REQUEST)
    def get_account_repository(self, session: AsyncSession) -> AccountRepository:
        """Provide Account repository."""
        return PostgresAccountRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_linked_identity_repository(
        self, session: AsyncSession
    ) -> LinkedIdentityRepository:
        """Provide LinkedIdentity repository."""
        return PostgresLinkedIdentityRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_link_code_repository(self, session: AsyncSession) -> LinkCodeRepository:
        """Provide LinkCode repository."""
        return PostgresLinkCodeRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_unlink_request_repository(
        self, session: AsyncSession
    ) -> UnlinkRequestRepository:
        """Provide UnlinkRequest repository."""
        return PostgresUnlinkRequestRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_otp_attempt_repository(
        self, session: AsyncSession
    ) -> OtpAttemptRepository:
        """Provide OTP attempt log repository."""
        return PostgresOtpAttemptRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_identity_unlink_event_repository(
        self, session: AsyncSession
    ) -> IdentityUnlinkEventRepository:
        """Provide IdentityUnlinkEvent repository."""
        return PostgresIdentityUnlinkEventRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_manual_merge_ticket_repository(
        self, session: AsyncSession
    ) -> ManualMergeTicketRepository:
        """Provide ManualMergeTicket repository."""
        return PostgresManualMergeTicketRepository(session)
