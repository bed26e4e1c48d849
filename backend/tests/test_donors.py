"""
Tests for donor verification and subscriber derivation.
"""
import pytest

from donation_drive.models.commenter import CommentType
from donation_drive.services import commenters
from donation_drive.services.donors import DonorRegistry, Subscriber
from donation_drive.services.stats import StatsAggregator


@pytest.fixture
def registry(ledger) -> DonorRegistry:
    return DonorRegistry(ledger)


class TestIsDonor:

    @pytest.mark.asyncio
    async def test_is_donor_case_insensitive(self, registry, test_campaign, add_donation):
        await add_donation(test_campaign, email="Jane@Example.com")

        assert await registry.is_donor(test_campaign.id, "jane@example.com") is True
        assert await registry.is_donor(test_campaign.id, " JANE@EXAMPLE.COM ") is True

    @pytest.mark.asyncio
    async def test_non_ascii_email_matches_like_donor_count(self, registry, ledger, test_campaign, add_donation):
        await add_donation(test_campaign, email="ÉLODIE@example.com", tx="TX-E1")
        await add_donation(test_campaign, email="élodie@example.com", tx="TX-E2")

        assert await registry.is_donor(test_campaign.id, "Élodie@Example.com") is True
        stats = await StatsAggregator(ledger).compute_stats(test_campaign.id)
        assert stats.donor_count == 1

    @pytest.mark.asyncio
    async def test_anonymous_donation_still_qualifies(self, registry, test_campaign, add_donation):
        await add_donation(test_campaign, email="quiet@example.com", amount="0.01", is_anonymous=True)
        assert await registry.is_donor(test_campaign.id, "quiet@example.com") is True

    @pytest.mark.asyncio
    async def test_non_donor(self, registry, test_campaign, add_donation):
        await add_donation(test_campaign, email="jane@example.com")
        assert await registry.is_donor(test_campaign.id, "john@example.com") is False

    @pytest.mark.asyncio
    async def test_donor_of_other_campaign_does_not_qualify(
        self, registry, test_campaign, other_campaign, add_donation
    ):
        await add_donation(other_campaign, email="jane@example.com")
        assert await registry.is_donor(test_campaign.id, "jane@example.com") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", [None, "", "   "])
    async def test_missing_email_is_not_donor(self, registry, test_campaign, add_donation, email):
        await add_donation(test_campaign)
        assert await registry.is_donor(test_campaign.id, email) is False


class TestUpdateSubscribers:

    @pytest.mark.asyncio
    async def test_only_opted_in_donors_in_first_donation_order(self, registry, test_campaign, add_donation):
        await add_donation(test_campaign, email="b@example.com", name="B", notify_on_updates=True)
        await add_donation(test_campaign, email="nope@example.com", name="Nope", notify_on_updates=False)
        await add_donation(test_campaign, email="a@example.com", name="A", notify_on_updates=True)
        await add_donation(test_campaign, email="B@Example.com", name="B again", notify_on_updates=True)

        subscribers = await registry.list_update_subscribers(test_campaign.id)
        assert subscribers == [
            Subscriber(email="b@example.com", name="B"),
            Subscriber(email="a@example.com", name="A"),
        ]

    @pytest.mark.asyncio
    async def test_no_subscribers(self, registry, test_campaign, add_donation):
        await add_donation(test_campaign, notify_on_updates=False)
        assert await registry.list_update_subscribers(test_campaign.id) == []


class TestReplySubscribers:

    @pytest.mark.asyncio
    async def test_register_and_list(self, db_session, test_campaign):
        await commenters.register_commenter(
            db_session, test_campaign.id, CommentType.PUBLIC,
            name="Ana", email="Ana@Example.com", notify_on_replies=True,
        )
        await commenters.register_commenter(
            db_session, test_campaign.id, CommentType.PUBLIC,
            name="Ben", email="ben@example.com", notify_on_replies=False,
        )
        await commenters.register_commenter(
            db_session, test_campaign.id, CommentType.PUBLIC,
            name="Guest", email=None, notify_on_replies=True,
        )
        await commenters.register_commenter(
            db_session, test_campaign.id, CommentType.DONOR_GATED,
            name="Cara", email="cara@example.com", notify_on_replies=True,
        )

        public = await commenters.list_reply_subscribers(db_session, test_campaign.id, CommentType.PUBLIC)
        assert public == [Subscriber(email="ana@example.com", name="Ana")]

        gated = await commenters.list_reply_subscribers(db_session, test_campaign.id, CommentType.DONOR_GATED)
        assert [s.email for s in gated] == ["cara@example.com"]

    @pytest.mark.asyncio
    async def test_register_existing_email_returns_profile(self, db_session, test_campaign):
        first, created = await commenters.register_commenter(
            db_session, test_campaign.id, CommentType.PUBLIC, name="Ana", email="ana@example.com",
        )
        again, created_again = await commenters.register_commenter(
            db_session, test_campaign.id, CommentType.PUBLIC, name="Other", email="ANA@example.com",
        )
        assert created is True
        assert created_again is False
        assert again.id == first.id
        assert again.name == "Ana"
