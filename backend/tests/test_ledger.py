"""
Tests for the append-only ledger store.
"""
import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import inspect

from donation_drive.core.errors import DuplicateTransactionError, NotFoundError, ValidationError
from donation_drive.models.campaign import Campaign
from donation_drive.models.commenter import Commenter
from donation_drive.models.donation import DonationEntry
from donation_drive.models.expense import ExpenseEntry


class TestDonations:
    """Appending and listing donation entries."""

    @pytest.mark.asyncio
    async def test_list_donations_newest_first(self, ledger, test_campaign, add_donation):
        first = await add_donation(test_campaign, amount="10.00")
        second = await add_donation(test_campaign, amount="20.00")

        donations = await ledger.list_donations(test_campaign.id)
        assert [d.id for d in donations] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_donations_scoped_to_campaign(self, ledger, test_campaign, other_campaign, add_donation):
        await add_donation(test_campaign)
        await add_donation(other_campaign)

        assert len(await ledger.list_donations(test_campaign.id)) == 1
        assert len(await ledger.list_donations(other_campaign.id)) == 1

    @pytest.mark.asyncio
    async def test_duplicate_transaction_rejected(self, ledger, test_campaign, add_donation):
        original = await add_donation(test_campaign, amount="50.00", tx="PAYPAL-123")

        with pytest.raises(DuplicateTransactionError) as exc_info:
            await add_donation(test_campaign, amount="75.00", tx="PAYPAL-123")

        assert exc_info.value.existing.id == original.id
        donations = await ledger.list_donations(test_campaign.id)
        assert len(donations) == 1
        assert donations[0].amount == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_duplicate_transaction_rejected_across_campaigns(
        self, ledger, test_campaign, other_campaign, add_donation
    ):
        """Transaction ids are unique across all campaigns."""
        await add_donation(test_campaign, tx="PAYPAL-999")

        with pytest.raises(DuplicateTransactionError):
            await add_donation(other_campaign, tx="PAYPAL-999")

        assert await ledger.list_donations(other_campaign.id) == []

    @pytest.mark.asyncio
    async def test_find_donation_by_transaction(self, ledger, test_campaign, add_donation):
        entry = await add_donation(test_campaign, tx="PAYPAL-42")

        assert (await ledger.find_donation_by_transaction("PAYPAL-42")).id == entry.id
        assert await ledger.find_donation_by_transaction("PAYPAL-43") is None

    @pytest.mark.asyncio
    async def test_append_donation_returns_persisted_entry(self, ledger, test_campaign):
        entry = DonationEntry(
            campaign_id=test_campaign.id,
            donor_name="Jane",
            donor_email="jane@example.com",
            amount=Decimal("12.50"),
            currency="PHP",
            external_transaction_id="PAYPAL-1",
        )
        recorded = await ledger.append_donation(entry)
        assert recorded.id
        assert recorded.created is not None
        assert recorded.is_anonymous is False

    @pytest.mark.asyncio
    async def test_insert_race_keeps_pending_work(self, ledger, test_campaign, add_donation, monkeypatch):
        recorded = await add_donation(test_campaign, tx="RACE-1")
        pending = await ledger.create_campaign(
            slug="pending-one", title="Pending", donation_goal=Decimal("50.00")
        )

        # The first lookup misses, as if a concurrent capture committed in between
        lookup = ledger.find_donation_by_transaction
        calls = []

        async def stale_lookup(external_transaction_id):
            calls.append(external_transaction_id)
            if len(calls) == 1:
                return None
            return await lookup(external_transaction_id)

        monkeypatch.setattr(ledger, "find_donation_by_transaction", stale_lookup)

        with pytest.raises(DuplicateTransactionError) as exc_info:
            await ledger.append_donation(DonationEntry(
                campaign_id=test_campaign.id,
                donor_name="Retry",
                donor_email="retry@example.com",
                amount=Decimal("5.00"),
                currency="PHP",
                external_transaction_id="RACE-1",
            ))

        assert exc_info.value.existing.id == recorded.id
        assert len(calls) == 2
        assert (await ledger.get_campaign_by_slug("pending-one")).id == pending.id
        donations = await ledger.list_donations(test_campaign.id)
        assert [d.external_transaction_id for d in donations] == ["RACE-1"]

    @pytest.mark.asyncio
    async def test_donor_email_stored_normalized(self, ledger, test_campaign, add_donation):
        entry = await add_donation(test_campaign, email="  Jane.Doe@Example.COM ")
        assert entry.donor_email == "jane.doe@example.com"


class TestExpenses:
    """Appending and listing expense entries."""

    @pytest.mark.asyncio
    async def test_record_expense_uses_campaign_currency(self, ledger, test_campaign):
        expense = await ledger.record_expense(
            test_campaign,
            title="Rice packs",
            amount=Decimal("300.00"),
            description="50 packs of rice",
            expense_date=date(2025, 1, 10),
            beneficiaries="Barangay 12 families",
            receipts=["https://example.com/receipt1.jpg"],
        )
        assert expense.currency == "PHP"
        assert expense.receipts == ["https://example.com/receipt1.jpg"]

    @pytest.mark.asyncio
    async def test_list_expenses_newest_first(self, ledger, test_campaign):
        older = await ledger.record_expense(
            test_campaign, title="Water", amount=Decimal("100.00"),
            description="Bottled water", expense_date=date(2025, 1, 5),
        )
        newer = await ledger.record_expense(
            test_campaign, title="Blankets", amount=Decimal("200.00"),
            description="Blankets", expense_date=date(2025, 2, 1),
        )
        expenses = await ledger.list_expenses(test_campaign.id)
        assert [e.id for e in expenses] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_non_positive_expense_rejected(self, ledger, test_campaign):
        with pytest.raises(ValidationError):
            await ledger.record_expense(
                test_campaign, title="Nothing", amount=Decimal("0"),
                description="-", expense_date=date(2025, 1, 1),
            )
        assert await ledger.list_expenses(test_campaign.id) == []

    @pytest.mark.asyncio
    async def test_get_expense_from_other_campaign_not_found(self, ledger, test_campaign, other_campaign):
        expense = await ledger.record_expense(
            test_campaign, title="Water", amount=Decimal("100.00"),
            description="Bottled water", expense_date=date(2025, 1, 5),
        )
        with pytest.raises(NotFoundError):
            await ledger.get_expense(other_campaign.id, expense.id)


class TestCampaigns:
    """Campaign creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_campaign_defaults_currency(self, ledger):
        campaign = await ledger.create_campaign(
            slug="flood-relief", title="Flood Relief", donation_goal=Decimal("5000")
        )
        assert campaign.currency == "PHP"
        assert campaign.is_donation_drive is True

    @pytest.mark.asyncio
    async def test_create_campaign_rejects_zero_goal(self, ledger):
        with pytest.raises(ValidationError):
            await ledger.create_campaign(slug="zero", title="Zero", donation_goal=Decimal("0"))

    @pytest.mark.asyncio
    async def test_create_campaign_rejects_duplicate_slug(self, ledger, test_campaign):
        with pytest.raises(ValidationError):
            await ledger.create_campaign(
                slug=test_campaign.slug, title="Again", donation_goal=Decimal("10")
            )

    @pytest.mark.asyncio
    async def test_unknown_campaign_not_found(self, ledger):
        with pytest.raises(NotFoundError):
            await ledger.get_campaign("doesnotexist123")
        with pytest.raises(NotFoundError):
            await ledger.get_campaign_by_slug("no-such-slug")


@pytest.mark.parametrize("model", [Campaign, DonationEntry, ExpenseEntry, Commenter])
def test_models_declare_no_relationships(model):
    # Ledger reads go through explicit queries scoped by campaign_id
    assert list(inspect(model).relationships) == []
