"""
Test configuration and fixtures for the donation drive backend tests.
"""
import os

# Settings are read once at import time, so point them at the test
# database before anything from the application is imported.
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-key")

import pytest
import pytest_asyncio
from decimal import Decimal
from typing import AsyncGenerator, Optional
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from donation_drive.main import app
from donation_drive.core.config import settings
from donation_drive.core.deps import get_dispatcher, get_sender
from donation_drive.db.base import Base, get_db
from donation_drive.models.campaign import Campaign
from donation_drive.models.donation import DonationEntry
from donation_drive.services.email import EmailDeliveryError, EmailSender
from donation_drive.services.ledger import LedgerStore
from donation_drive.services.notifications import NotificationDispatcher


class FakeEmailSender(EmailSender):
    """Records sends; recipients in ``failing`` raise instead."""

    def __init__(self, failing: Optional[set[str]] = None):
        self.sent: list[tuple[str, str, str]] = []
        self.failing = failing or set()

    async def send(self, to: str, subject: str, html_body: str) -> None:
        if to in self.failing:
            raise EmailDeliveryError(f"Mailbox unavailable: {to}")
        self.sent.append((to, subject, html_body))

    @property
    def recipients(self) -> list[str]:
        return [to for to, _, _ in self.sent]


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    # Clean up test database file
    try:
        os.remove("./test.db")
    except OSError:
        pass


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, fake_sender: FakeEmailSender) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session and email overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sender] = lambda: fake_sender
    app.dependency_overrides[get_dispatcher] = lambda: NotificationDispatcher(fake_sender, delay_seconds=0)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Key": settings.ADMIN_SECRET_KEY}


@pytest.fixture
def ledger(db_session: AsyncSession) -> LedgerStore:
    return LedgerStore(db_session)


@pytest_asyncio.fixture
async def test_campaign(db_session: AsyncSession) -> Campaign:
    """A donor-gated donation drive with a 1,000 PHP goal."""
    campaign = Campaign(
        slug="typhoon-relief",
        title="Typhoon Relief Drive",
        currency="PHP",
        donation_goal=Decimal("1000.00"),
        is_donation_drive=True,
        is_donor_gated=True,
    )
    db_session.add(campaign)
    await db_session.flush()
    return campaign


@pytest_asyncio.fixture
async def other_campaign(db_session: AsyncSession) -> Campaign:
    """A second, ungated campaign."""
    campaign = Campaign(
        slug="school-supplies",
        title="School Supplies",
        currency="PHP",
        donation_goal=Decimal("500.00"),
        is_donation_drive=True,
        is_donor_gated=False,
    )
    db_session.add(campaign)
    await db_session.flush()
    return campaign


@pytest.fixture
def add_donation(ledger: LedgerStore):
    """Factory appending a donation entry straight to the ledger."""
    counter = {"n": 0}

    async def _add(
        campaign: Campaign,
        amount: str = "100.00",
        email: str = "donor@example.com",
        name: str = "Donor",
        tx: Optional[str] = None,
        notify_on_updates: bool = False,
        is_anonymous: bool = False,
        message: Optional[str] = None,
    ) -> DonationEntry:
        counter["n"] += 1
        entry = DonationEntry(
            campaign_id=campaign.id,
            donor_name=name,
            donor_email=email,
            amount=Decimal(amount),
            currency=campaign.currency,
            message=message,
            is_anonymous=is_anonymous,
            notify_on_updates=notify_on_updates,
            external_transaction_id=tx or f"TX-{counter['n']:04d}",
        )
        return await ledger.append_donation(entry)

    return _add
