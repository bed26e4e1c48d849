"""
Rendered emails for donation drive notifications.
"""
from decimal import Decimal
from html import escape
from typing import Optional

from donation_drive.core.config import settings
from donation_drive.models.campaign import Campaign
from donation_drive.models.donation import DonationEntry
from donation_drive.models.expense import ExpenseEntry
from donation_drive.schemas.common import money
from donation_drive.services.notifications import NotificationEvent

DONATION_THANK_YOU = "donation_thank_you"
EXPENSE_POSTED = "expense_posted"
COMMENT_POSTED = "comment_posted"

_STYLE = """
        body { font-family: 'Segoe UI', Arial, sans-serif; line-height: 1.6; color: #292524; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; }
        .header { text-align: center; padding: 20px 0; font-size: 22px; font-weight: bold; color: #d97706; }
        .content { background: #fafaf9; border-radius: 12px; padding: 30px; margin: 20px 0; }
        .info { background: white; border-left: 4px solid #d97706; padding: 15px; margin: 20px 0; }
        .button { display: inline-block; background: #d97706; color: white !important; padding: 14px 28px; text-decoration: none; border-radius: 8px; font-weight: 600; }
        .footer { text-align: center; color: #78716c; font-size: 14px; padding: 20px 0; }
"""


def _layout(heading: str, inner: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>{_STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="header">Donation Drive</div>
        <div class="content">
            <h2>{escape(heading)}</h2>
            {inner}
        </div>
        <div class="footer">
            <p>You are receiving this because you opted in to updates.</p>
        </div>
    </div>
</body>
</html>
"""


def _amount(value: Decimal, currency: str) -> str:
    return f"{escape(currency)} {money(value):,}"


def campaign_url(campaign: Campaign, transparency: bool = False) -> str:
    base = settings.SITE_URL.rstrip("/")
    if transparency:
        return f"{base}/transparency/{campaign.slug}"
    return f"{base}/blog/{campaign.slug}"


def render_donation_thank_you(campaign: Campaign, donation: DonationEntry) -> NotificationEvent:
    url = campaign_url(campaign, transparency=True)
    inner = f"""
            <p>Dear {escape(donation.donor_name)},</p>
            <p>Thank you for your donation to <strong>{escape(campaign.title)}</strong>.</p>
            <div class="info">
                <p><strong>Amount:</strong> {_amount(donation.amount, donation.currency)}</p>
                <p><strong>Reference:</strong> {escape(donation.external_transaction_id)}</p>
            </div>
            <p>You can follow how every contribution is used on the transparency page:</p>
            <p style="text-align: center;"><a href="{url}" class="button">View Transparency Report</a></p>
"""
    return NotificationEvent(
        kind=DONATION_THANK_YOU,
        subject=f"Thank you for supporting {campaign.title}",
        html_body=_layout("Thank you!", inner),
    )


def render_expense_posted(campaign: Campaign, expense: ExpenseEntry) -> NotificationEvent:
    url = campaign_url(campaign, transparency=True)
    beneficiaries = (
        f"<p><strong>Beneficiaries:</strong> {escape(expense.beneficiaries)}</p>"
        if expense.beneficiaries else ""
    )
    inner = f"""
            <p>A new distribution was posted for <strong>{escape(campaign.title)}</strong>.</p>
            <div class="info">
                <p><strong>{escape(expense.title)}</strong></p>
                <p><strong>Amount:</strong> {_amount(expense.amount, expense.currency)}</p>
                <p><strong>Date:</strong> {expense.expense_date.strftime("%B %d, %Y")}</p>
                {beneficiaries}
                <p>{escape(expense.description)}</p>
            </div>
            <p style="text-align: center;"><a href="{url}" class="button">See Proof of Distribution</a></p>
"""
    return NotificationEvent(
        kind=EXPENSE_POSTED,
        subject=f"Update: {expense.title} ({campaign.title})",
        html_body=_layout("How your donation is being used", inner),
    )


def render_comment_posted(
    campaign: Campaign,
    author_name: str,
    excerpt: Optional[str],
    transparency: bool = False,
) -> NotificationEvent:
    url = campaign_url(campaign, transparency=transparency)
    quote = f'<div class="info"><p><em>"{escape(excerpt)}"</em></p></div>' if excerpt else ""
    page = "transparency page" if transparency else "post"
    inner = f"""
            <p><strong>{escape(author_name)}</strong> commented on the {page} of <strong>{escape(campaign.title)}</strong>.</p>
            {quote}
            <p style="text-align: center;"><a href="{url}" class="button">Read the Discussion</a></p>
"""
    return NotificationEvent(
        kind=COMMENT_POSTED,
        subject=f"New comment on {campaign.title}",
        html_body=_layout("New comment", inner),
    )
