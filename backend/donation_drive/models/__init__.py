"""
SQLAlchemy models for the donation drive.

- Campaigns: donation-drive blog posts with a goal and currency
- Ledger: donation and expense entries (append-only)
- Comments: commenter registrations used for gating and notifications
"""
from donation_drive.models.campaign import Campaign
from donation_drive.models.donation import DonationEntry
from donation_drive.models.expense import ExpenseEntry
from donation_drive.models.commenter import Commenter, CommentType

__all__ = [
    # Campaigns
    "Campaign",
    # Ledger
    "DonationEntry",
    "ExpenseEntry",
    # Comments
    "Commenter",
    "CommentType",
]
