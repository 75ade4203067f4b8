"""FastAPI routes for the Ratings bounded context.

Each route translates between Pydantic schemas (external contract) and
Protean commands (internal domain concepts). The acting reviewer is taken
from the ``X-Reviewer-Id`` header set by the identity layer in front of us.
"""

from fastapi import APIRouter, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from ratings.api.schemas import (
    ChangeRoleRequest,
    EditReviewRequest,
    HelpfulCountResponse,
    JobResultResponse,
    ModerateReviewRequest,
    ModerationResponse,
    OverrideTierRequest,
    PreviousRoleResponse,
    PreviousTierResponse,
    QueueEntryResponse,
    RegisterReviewerRequest,
    RegisterStoreRequest,
    ReviewerIdResponse,
    ReviewerResponse,
    ReviewIdResponse,
    ReviewResponse,
    RunJobRequest,
    StatusResponse,
    StoreIdResponse,
    StoreScorecardResponse,
    SubmitReviewRequest,
    SuspendReviewRequest,
)
from ratings.errors import Forbidden, PreconditionFailed, Unauthenticated
from ratings.policy.access import require_admin
from ratings.policy.jobs import JOBS
from ratings.projections.moderation_queue import ModerationQueue
from ratings.projections.store_scorecard import StoreScorecard
from ratings.review.deletion import DeleteReview
from ratings.review.editing import EditReview
from ratings.review.moderation import ModerateReview
from ratings.review.submission import SubmitReview
from ratings.review.suspension import SuspendReview
from ratings.review.visibility import review_view
from ratings.review.voting import CastHelpfulVote, RevokeHelpfulVote
from ratings.reviewer.administration import ChangeReviewerRole, OverrideReviewerTier
from ratings.reviewer.registration import RegisterReviewer, RevokePhoneVerification, VerifyPhone
from ratings.reviewer.reviewer import Reviewer
from ratings.store.registration import RegisterStore

reviewer_router = APIRouter(prefix="/reviewers", tags=["reviewers"])
store_router = APIRouter(prefix="/stores", tags=["stores"])
review_router = APIRouter(prefix="/reviews", tags=["reviews"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])

QUEUE_PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
def register_error_handlers(app: FastAPI) -> None:
    """Map the engine's own error kinds to HTTP statuses.

    Registered on top of Protean's handlers; PreconditionFailed is matched
    before its ValidationError base.
    """

    @app.exception_handler(PreconditionFailed)
    async def precondition_failed(request: Request, exc: PreconditionFailed):
        return JSONResponse(status_code=409, content={"error": exc.messages, "kind": exc.kind})

    @app.exception_handler(Unauthenticated)
    async def unauthenticated(request: Request, exc: Unauthenticated):
        return JSONResponse(status_code=401, content={"error": exc.reason, "kind": exc.kind})

    @app.exception_handler(Forbidden)
    async def forbidden(request: Request, exc: Forbidden):
        return JSONResponse(status_code=403, content={"error": exc.reason, "kind": exc.kind})


# ---------------------------------------------------------------------------
# Reviewers
# ---------------------------------------------------------------------------
@reviewer_router.post("", status_code=201, response_model=ReviewerIdResponse)
async def register_reviewer(body: RegisterReviewerRequest) -> ReviewerIdResponse:
    """Register a new reviewer as an unverified User."""
    command = RegisterReviewer(nickname=body.nickname, email=body.email)
    reviewer_id = current_domain.process(command, asynchronous=False)
    return ReviewerIdResponse(reviewer_id=reviewer_id)


@reviewer_router.get("/{reviewer_id}", response_model=ReviewerResponse)
async def get_reviewer(reviewer_id: str) -> ReviewerResponse:
    reviewer = current_domain.repository_for(Reviewer).get(reviewer_id)
    return ReviewerResponse(
        reviewer_id=str(reviewer.id),
        nickname=reviewer.nickname,
        role=reviewer.role,
        tier=reviewer.tier,
        tier_mode=reviewer.tier_mode,
        is_deviation_target=bool(reviewer.is_deviation_target),
        is_phone_verified=bool(reviewer.is_phone_verified),
        review_count=reviewer.review_count,
        helpful_count=reviewer.helpful_count,
        violation_count=reviewer.violation_count,
    )


@reviewer_router.put("/{reviewer_id}/phone-verification", response_model=StatusResponse)
async def verify_phone(
    reviewer_id: str,
    x_reviewer_id: str | None = Header(default=None),
) -> StatusResponse:
    """Record a successful phone verification (administrators only)."""
    command = VerifyPhone(actor_id=x_reviewer_id, reviewer_id=reviewer_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@reviewer_router.delete("/{reviewer_id}/phone-verification", response_model=StatusResponse)
async def revoke_phone_verification(
    reviewer_id: str,
    x_reviewer_id: str | None = Header(default=None),
) -> StatusResponse:
    command = RevokePhoneVerification(actor_id=x_reviewer_id, reviewer_id=reviewer_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@reviewer_router.put("/{reviewer_id}/tier", response_model=PreviousTierResponse)
async def override_tier(
    reviewer_id: str,
    body: OverrideTierRequest,
    x_reviewer_id: str | None = Header(default=None),
) -> PreviousTierResponse:
    """Pin a reviewer's tier (administrators only)."""
    command = OverrideReviewerTier(
        actor_id=x_reviewer_id,
        reviewer_id=reviewer_id,
        tier=body.tier,
        elite=body.elite,
    )
    previous_tier = current_domain.process(command, asynchronous=False)
    return PreviousTierResponse(reviewer_id=reviewer_id, previous_tier=previous_tier)


@reviewer_router.put("/{reviewer_id}/role", response_model=PreviousRoleResponse)
async def change_role(
    reviewer_id: str,
    body: ChangeRoleRequest,
    x_reviewer_id: str | None = Header(default=None),
) -> PreviousRoleResponse:
    """Change a reviewer's role (administrators only, never their own)."""
    command = ChangeReviewerRole(actor_id=x_reviewer_id, reviewer_id=reviewer_id, role=body.role)
    previous_role = current_domain.process(command, asynchronous=False)
    return PreviousRoleResponse(reviewer_id=reviewer_id, previous_role=previous_role)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------
@store_router.post("", status_code=201, response_model=StoreIdResponse)
async def register_store(body: RegisterStoreRequest) -> StoreIdResponse:
    store_id = current_domain.process(RegisterStore(name=body.name), asynchronous=False)
    return StoreIdResponse(store_id=store_id)


@store_router.get("/{store_id}", response_model=StoreScorecardResponse)
async def get_store_scorecard(store_id: str) -> StoreScorecardResponse:
    """Public aggregate of a store; scores are hidden while it is blind."""
    card = current_domain.repository_for(StoreScorecard).get(store_id)
    return StoreScorecardResponse(
        store_id=str(card.store_id),
        name=card.name,
        review_count_valid=card.review_count_valid,
        avg_rating=card.avg_rating,
        score_weighted=card.score_weighted,
        is_blind=bool(card.is_blind),
    )


@store_router.post("/{store_id}/reviews", status_code=201, response_model=ReviewIdResponse)
async def submit_review(
    store_id: str,
    body: SubmitReviewRequest,
    x_reviewer_id: str | None = Header(default=None),
) -> ReviewIdResponse:
    """Submit a review of a store."""
    command = SubmitReview(
        actor_id=x_reviewer_id,
        store_id=store_id,
        taste=body.taste,
        value=body.value,
        ambiance=body.ambiance,
        service=body.service,
        content=body.content,
        title=body.title,
        party_size=body.party_size,
        visit_date=body.visit_date,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=review_id)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
@review_router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: str) -> ReviewResponse:
    """Review detail; scores are masked while the store is blind."""
    return ReviewResponse(**review_view(review_id))


@review_router.put("/{review_id}", response_model=StatusResponse)
async def edit_review(
    review_id: str,
    body: EditReviewRequest,
    x_reviewer_id: str | None = Header(default=None),
) -> StatusResponse:
    command = EditReview(actor_id=x_reviewer_id, review_id=review_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(
    review_id: str,
    x_reviewer_id: str | None = Header(default=None),
) -> StatusResponse:
    current_domain.process(DeleteReview(actor_id=x_reviewer_id, review_id=review_id), asynchronous=False)
    return StatusResponse()


@review_router.put("/{review_id}/moderate", response_model=ModerationResponse)
async def moderate_review(
    review_id: str,
    body: ModerateReviewRequest,
    x_reviewer_id: str | None = Header(default=None),
) -> ModerationResponse:
    """Approve or reject a pending review."""
    command = ModerateReview(
        actor_id=x_reviewer_id,
        review_id=review_id,
        action=body.action,
        reason=body.reason,
    )
    status = current_domain.process(command, asynchronous=False)
    return ModerationResponse(review_id=review_id, status=status)


@review_router.put("/{review_id}/suspend", response_model=StatusResponse)
async def suspend_review(
    review_id: str,
    body: SuspendReviewRequest,
    x_reviewer_id: str | None = Header(default=None),
) -> StatusResponse:
    command = SuspendReview(actor_id=x_reviewer_id, review_id=review_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@review_router.post("/{review_id}/helpful", status_code=201, response_model=HelpfulCountResponse)
async def cast_helpful_vote(
    review_id: str,
    x_reviewer_id: str | None = Header(default=None),
) -> HelpfulCountResponse:
    command = CastHelpfulVote(actor_id=x_reviewer_id, review_id=review_id)
    helpful_count = current_domain.process(command, asynchronous=False)
    return HelpfulCountResponse(review_id=review_id, helpful_count=helpful_count)


@review_router.delete("/{review_id}/helpful", response_model=HelpfulCountResponse)
async def revoke_helpful_vote(
    review_id: str,
    x_reviewer_id: str | None = Header(default=None),
) -> HelpfulCountResponse:
    command = RevokeHelpfulVote(actor_id=x_reviewer_id, review_id=review_id)
    helpful_count = current_domain.process(command, asynchronous=False)
    return HelpfulCountResponse(review_id=review_id, helpful_count=helpful_count)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------
@admin_router.get("/moderation-queue", response_model=list[QueueEntryResponse])
async def moderation_queue(x_reviewer_id: str | None = Header(default=None)) -> list[QueueEntryResponse]:
    """Reviews awaiting moderation, oldest first."""
    require_admin(x_reviewer_id)
    entries = (
        current_domain.repository_for(ModerationQueue)
        ._dao.query.order_by("submitted_at")
        .limit(QUEUE_PAGE_SIZE)
        .all()
        .items
    )
    return [
        QueueEntryResponse(
            review_id=str(entry.review_id),
            store_id=str(entry.store_id),
            reviewer_id=str(entry.reviewer_id),
            title=entry.title,
            content=entry.content,
            composite_score=entry.composite_score,
            submitted_at=entry.submitted_at,
        )
        for entry in entries
    ]


@admin_router.post("/maintenance/jobs/{job}", response_model=JobResultResponse)
async def run_job(
    job: str,
    body: RunJobRequest | None = None,
    x_reviewer_id: str | None = Header(default=None),
) -> JobResultResponse:
    """Run one scheduled job now.

    Meant for an external scheduler or an administrator; every job is
    idempotent, so repeated calls are safe.
    """
    require_admin(x_reviewer_id)
    if job not in JOBS:
        raise HTTPException(status_code=404, detail=f"Unknown job: {job}")

    processed = JOBS[job](as_of=body.as_of if body else None)
    return JobResultResponse(job=job, processed=processed)
