"""
Campaign statistics derived from the ledger.

Totals are recomputed from the full entry set on every call rather than
kept in a mutable counter, so concurrent captures can never lose an update.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from donation_drive.services.ledger import LedgerStore


@dataclass(frozen=True)
class CampaignStats:
    total_donations: Decimal
    total_expenses: Decimal
    remaining_balance: Decimal
    donor_count: int
    percent_complete: int


def percent_of_goal(total_donations: Decimal, goal: Decimal) -> int:
    """
    Progress toward the goal, rounded half up and clamped to [0, 100].

    A non-positive goal counts as met once any money has come in.
    """
    if goal is None or goal <= 0:
        return 100 if total_donations > 0 else 0
    percent = (total_donations / goal * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(percent)))


def summarize(
    goal: Decimal,
    donations: Iterable[Tuple[Decimal, str]],
    expense_amounts: Iterable[Decimal],
) -> CampaignStats:
    """Pure aggregation over (amount, donor email) pairs and expense amounts."""
    total_donations = Decimal(0)
    donors: set[str] = set()
    for amount, email in donations:
        total_donations += amount
        if email:
            donors.add(email.strip().lower())

    total_expenses = sum(expense_amounts, Decimal(0))

    return CampaignStats(
        total_donations=total_donations,
        total_expenses=total_expenses,
        remaining_balance=total_donations - total_expenses,
        donor_count=len(donors),
        percent_complete=percent_of_goal(total_donations, goal),
    )


class StatsAggregator:
    """Read-only statistics over a LedgerStore snapshot."""

    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    async def compute_stats(self, campaign_id: str) -> CampaignStats:
        campaign = await self.ledger.get_campaign(campaign_id)
        donations = await self.ledger.donation_amounts_and_emails(campaign.id)
        expenses = await self.ledger.expense_amounts(campaign.id)
        return summarize(campaign.donation_goal, donations, expenses)
