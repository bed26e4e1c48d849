"""
Campaign endpoints: statistics, ledger listings, donation capture,
expenses, donor checks, comment gating and subscriber notifications.
"""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status

from donation_drive.core.deps import (
    get_capture_adapter,
    get_dispatcher,
    get_donor_registry,
    get_ledger,
    get_stats,
    require_admin,
)
from donation_drive.core.errors import ConfigurationError, ValidationError
from donation_drive.models.campaign import Campaign
from donation_drive.models.commenter import CommentType
from donation_drive.models.donation import DonationEntry
from donation_drive.schemas.campaign import (
    CampaignCreate,
    CampaignResponse,
    CampaignStatsResponse,
    TransparencyReport,
)
from donation_drive.schemas.comment import (
    CommentAccessRequest,
    CommentAccessResponse,
    CommenterCheck,
    CommenterCheckResponse,
    CommenterRegister,
    CommenterResponse,
)
from donation_drive.schemas.common import money
from donation_drive.schemas.donation import (
    CaptureResponse,
    DonationCapture,
    DonationResponse,
    DonorCheckRequest,
    DonorCheckResponse,
    PublicDonationResponse,
)
from donation_drive.schemas.expense import ExpenseCreate, ExpenseCreatedResponse, ExpenseResponse
from donation_drive.schemas.notification import (
    DispatchErrorResponse,
    DispatchResultResponse,
    NotificationKind,
    NotifyRequest,
)
from donation_drive.services import commenters
from donation_drive.services.comment_gate import CommentGate
from donation_drive.services.donors import DonorRegistry, Subscriber
from donation_drive.services.email_templates import (
    render_comment_posted,
    render_donation_thank_you,
    render_expense_posted,
)
from donation_drive.services.ledger import LedgerStore
from donation_drive.services.notifications import DispatchResult, NotificationDispatcher, NotificationEvent
from donation_drive.services.payments import PaymentCaptureAdapter
from donation_drive.services.stats import CampaignStats, StatsAggregator

logger = logging.getLogger(__name__)

router = APIRouter()


def stats_to_response(stats: CampaignStats, campaign: Campaign) -> CampaignStatsResponse:
    return CampaignStatsResponse(
        total_donations=money(stats.total_donations),
        total_expenses=money(stats.total_expenses),
        remaining_balance=money(stats.remaining_balance),
        donor_count=stats.donor_count,
        percent_complete=stats.percent_complete,
        currency=campaign.currency,
    )


def donation_to_public(donation: DonationEntry) -> PublicDonationResponse:
    return PublicDonationResponse(
        id=donation.id,
        donor_name=donation.display_name,
        amount=money(donation.amount),
        currency=donation.currency,
        message=donation.message,
        date=donation.created,
    )


def result_to_response(result: DispatchResult) -> DispatchResultResponse:
    return DispatchResultResponse(
        successful=result.successful,
        failed=result.failed,
        errors=[DispatchErrorResponse(recipient=e.recipient, reason=e.reason) for e in result.errors],
        skipped=result.skipped,
        cancelled=result.cancelled,
    )


async def run_dispatch(
    dispatcher: NotificationDispatcher,
    subscribers: list[Subscriber],
    event: NotificationEvent,
    exclude_email: Optional[str] = None,
) -> None:
    """Background wrapper: notifications never affect the ledger response."""
    try:
        await dispatcher.dispatch(subscribers, event, exclude_email=exclude_email)
    except ConfigurationError as e:
        logger.warning(f"Notification batch skipped: kind={event.kind}, reason={e.message}")


# ============================================================================
# CAMPAIGNS
# ============================================================================

@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_admin)])
async def create_campaign(
    data: CampaignCreate,
    ledger: LedgerStore = Depends(get_ledger),
):
    """Publish a donation drive. Admin only."""
    campaign = await ledger.create_campaign(
        slug=data.slug,
        title=data.title,
        donation_goal=data.donation_goal,
        currency=data.currency,
        is_donor_gated=data.is_donor_gated,
    )
    return CampaignResponse.model_validate(campaign)


@router.get("/{slug}", response_model=CampaignResponse)
async def get_campaign(slug: str, ledger: LedgerStore = Depends(get_ledger)):
    campaign = await ledger.get_campaign_by_slug(slug)
    return CampaignResponse.model_validate(campaign)


@router.get("/{slug}/stats", response_model=CampaignStatsResponse)
async def get_campaign_stats(
    slug: str,
    ledger: LedgerStore = Depends(get_ledger),
    aggregator: StatsAggregator = Depends(get_stats),
):
    """Derived totals, donor count and progress toward the goal."""
    campaign = await ledger.get_campaign_by_slug(slug)
    stats = await aggregator.compute_stats(campaign.id)
    return stats_to_response(stats, campaign)


@router.get("/{slug}/transparency", response_model=TransparencyReport)
async def get_transparency_report(
    slug: str,
    ledger: LedgerStore = Depends(get_ledger),
    aggregator: StatsAggregator = Depends(get_stats),
):
    """Funds raised reconciled against funds distributed."""
    campaign = await ledger.get_campaign_by_slug(slug)
    stats = await aggregator.compute_stats(campaign.id)
    donations = await ledger.list_donations(campaign.id)
    expenses = await ledger.list_expenses(campaign.id)
    return TransparencyReport(
        campaign=CampaignResponse.model_validate(campaign),
        summary=stats_to_response(stats, campaign),
        donations=[donation_to_public(d) for d in donations],
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
    )


# ============================================================================
# DONATIONS
# ============================================================================

@router.get("/{slug}/donations", response_model=list[PublicDonationResponse])
async def list_donations(slug: str, ledger: LedgerStore = Depends(get_ledger)):
    """Donations, newest first. Anonymous donors are masked and emails never exposed."""
    campaign = await ledger.get_campaign_by_slug(slug)
    donations = await ledger.list_donations(campaign.id)
    return [donation_to_public(d) for d in donations]


@router.post("/{slug}/donations/capture", response_model=CaptureResponse,
             status_code=status.HTTP_201_CREATED)
async def record_donation(
    slug: str,
    data: DonationCapture,
    response: Response,
    background_tasks: BackgroundTasks,
    ledger: LedgerStore = Depends(get_ledger),
    adapter: PaymentCaptureAdapter = Depends(get_capture_adapter),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Record a payment the gateway has captured.

    Retries of an already recorded transaction return 200 with
    ``duplicate: true`` and the original entry.
    """
    campaign = await ledger.get_campaign_by_slug(slug)
    result = await adapter.capture(
        campaign_id=campaign.id,
        external_transaction_id=data.external_transaction_id,
        amount=data.amount,
        donor_email=str(data.donor_email),
        donor_name=data.donor_name,
        message=data.message,
        is_anonymous=data.is_anonymous,
        notify_on_updates=data.notify_on_updates,
        currency=data.currency,
    )

    if result.duplicate:
        response.status_code = status.HTTP_200_OK
    elif dispatcher.sender.configured:
        event = render_donation_thank_you(campaign, result.entry)
        background_tasks.add_task(
            run_dispatch,
            dispatcher,
            [Subscriber(email=result.entry.donor_email, name=result.entry.donor_name)],
            event,
        )

    return CaptureResponse(
        duplicate=result.duplicate,
        donation=DonationResponse.model_validate(result.entry),
    )


@router.post("/{slug}/donor-check", response_model=DonorCheckResponse)
async def check_donor(
    slug: str,
    data: DonorCheckRequest,
    ledger: LedgerStore = Depends(get_ledger),
    registry: DonorRegistry = Depends(get_donor_registry),
):
    """Verify a visitor's email against the campaign's donors."""
    campaign = await ledger.get_campaign_by_slug(slug)
    return DonorCheckResponse(is_donor=await registry.is_donor(campaign.id, str(data.email)))


# ============================================================================
# EXPENSES
# ============================================================================

@router.get("/{slug}/expenses", response_model=list[ExpenseResponse])
async def list_expenses(slug: str, ledger: LedgerStore = Depends(get_ledger)):
    """Distribution reports, newest first."""
    campaign = await ledger.get_campaign_by_slug(slug)
    expenses = await ledger.list_expenses(campaign.id)
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.post("/{slug}/expenses", response_model=ExpenseCreatedResponse,
             status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def record_expense(
    slug: str,
    data: ExpenseCreate,
    background_tasks: BackgroundTasks,
    ledger: LedgerStore = Depends(get_ledger),
    registry: DonorRegistry = Depends(get_donor_registry),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Record a distribution of funds. Admin only.

    Donors who opted into updates are notified in the background.
    """
    campaign = await ledger.get_campaign_by_slug(slug)
    expense = await ledger.record_expense(
        campaign,
        title=data.title,
        amount=data.amount,
        description=data.description,
        expense_date=data.expense_date,
        beneficiaries=data.beneficiaries,
        receipts=[str(url) for url in data.receipts],
    )

    queued = False
    if data.notify_donors:
        subscribers = await registry.list_update_subscribers(campaign.id)
        if subscribers and dispatcher.sender.configured:
            background_tasks.add_task(
                run_dispatch, dispatcher, subscribers, render_expense_posted(campaign, expense)
            )
            queued = True
        elif subscribers:
            logger.warning(f"Expense notifications not sent for {slug}: email provider not configured")

    return ExpenseCreatedResponse(
        expense=ExpenseResponse.model_validate(expense),
        notifications_queued=queued,
    )


# ============================================================================
# NOTIFICATIONS
# ============================================================================

@router.post("/{slug}/notifications", response_model=DispatchResultResponse,
             dependencies=[Depends(require_admin)])
async def notify_subscribers(
    slug: str,
    data: NotifyRequest,
    ledger: LedgerStore = Depends(get_ledger),
    registry: DonorRegistry = Depends(get_donor_registry),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Send a notification batch and wait for the per-recipient result. Admin only.
    """
    campaign = await ledger.get_campaign_by_slug(slug)

    if data.kind == NotificationKind.EXPENSE_POSTED:
        if not data.expense_id:
            raise ValidationError("expense_id is required", {"expense_id": {"message": "Required"}})
        expense = await ledger.get_expense(campaign.id, data.expense_id)
        subscribers = await registry.list_update_subscribers(campaign.id)
        event = render_expense_posted(campaign, expense)
    else:
        try:
            comment_type = CommentType(data.comment_type or CommentType.PUBLIC.value)
        except ValueError:
            raise ValidationError("Invalid comment type", {"comment_type": {"message": "Invalid comment type"}})
        subscribers = await commenters.list_reply_subscribers(ledger.db, campaign.id, comment_type)
        event = render_comment_posted(
            campaign,
            author_name=data.author_name or "Someone",
            excerpt=data.comment_excerpt,
            transparency=comment_type == CommentType.DONOR_GATED,
        )

    result = await dispatcher.dispatch(
        subscribers,
        event,
        exclude_email=str(data.exclude_email) if data.exclude_email else None,
    )
    return result_to_response(result)


# ============================================================================
# COMMENT GATING
# ============================================================================

@router.post("/{slug}/comment-access", response_model=CommentAccessResponse)
async def check_comment_access(
    slug: str,
    data: CommentAccessRequest,
    ledger: LedgerStore = Depends(get_ledger),
    registry: DonorRegistry = Depends(get_donor_registry),
):
    """What a visitor may do in a thread; transparency threads need a donor email."""
    campaign = await ledger.get_campaign_by_slug(slug)
    gate = CommentGate.for_campaign(registry, campaign, transparency=data.transparency)
    if data.email:
        await gate.verify(str(data.email))
    return CommentAccessResponse(
        comment_type=gate.comment_type,
        state=gate.state.value,
        can_comment=gate.can_comment,
        can_view_comments=gate.can_view_comments,
    )


@router.post("/{slug}/commenters", response_model=CommenterResponse, status_code=status.HTTP_201_CREATED)
async def register_commenter(
    slug: str,
    data: CommenterRegister,
    response: Response,
    ledger: LedgerStore = Depends(get_ledger),
    registry: DonorRegistry = Depends(get_donor_registry),
):
    """Register a commenter profile. Gated threads accept donors only."""
    campaign = await ledger.get_campaign_by_slug(slug)
    gate = CommentGate.for_campaign(registry, campaign, transparency=data.transparency)
    await gate.verify(str(data.email) if data.email else None)
    if not gate.can_comment:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only donors can comment on transparency pages"
        )

    commenter, created = await commenters.register_commenter(
        ledger.db,
        campaign.id,
        gate.comment_type,
        name=data.name,
        email=str(data.email) if data.email else None,
        website=str(data.website) if data.website else None,
        notify_on_replies=data.notify_on_replies,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return CommenterResponse.model_validate(commenter)


@router.post("/{slug}/commenters/check", response_model=CommenterCheckResponse)
async def check_commenter(
    slug: str,
    data: CommenterCheck,
    ledger: LedgerStore = Depends(get_ledger),
    registry: DonorRegistry = Depends(get_donor_registry),
):
    """Look up an existing profile so returning commenters skip registration."""
    campaign = await ledger.get_campaign_by_slug(slug)
    gate = CommentGate.for_campaign(registry, campaign, transparency=data.transparency)
    await gate.verify(str(data.email))
    if not gate.can_view_comments:
        return CommenterCheckResponse(exists=False)

    commenter = await commenters.find_commenter(ledger.db, campaign.id, gate.comment_type, str(data.email))
    if commenter is None:
        return CommenterCheckResponse(exists=False)
    return CommenterCheckResponse(exists=True, commenter=CommenterResponse.model_validate(commenter))
