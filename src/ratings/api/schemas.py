"""Pydantic request/response schemas for the Ratings API.

These are separate from Protean commands (anti-corruption pattern).
The API layer is the external contract; commands are internal domain concepts.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class RegisterReviewerRequest(BaseModel):
    nickname: str = Field(max_length=50)
    email: str = Field(max_length=100)


class OverrideTierRequest(BaseModel):
    tier: str
    elite: bool = False


class ChangeRoleRequest(BaseModel):
    role: str


class RegisterStoreRequest(BaseModel):
    name: str = Field(max_length=100)


class SubmitReviewRequest(BaseModel):
    taste: float = Field(ge=0, le=5)
    value: float = Field(ge=0, le=5)
    ambiance: float = Field(ge=0, le=5)
    service: float = Field(ge=0, le=5)
    content: str = Field(min_length=1)
    title: str | None = Field(default=None, max_length=200)
    party_size: int = Field(default=1, ge=1)
    visit_date: date | None = None


class EditReviewRequest(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    party_size: int | None = Field(default=None, ge=1)
    taste: float | None = Field(default=None, ge=0, le=5)
    value: float | None = Field(default=None, ge=0, le=5)
    ambiance: float | None = Field(default=None, ge=0, le=5)
    service: float | None = Field(default=None, ge=0, le=5)


class ModerateReviewRequest(BaseModel):
    action: str  # "Approve" or "Reject"
    reason: str | None = None


class SuspendReviewRequest(BaseModel):
    reason: str = Field(min_length=1)


class RunJobRequest(BaseModel):
    as_of: datetime | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewerIdResponse(BaseModel):
    reviewer_id: str


class StoreIdResponse(BaseModel):
    store_id: str


class ReviewIdResponse(BaseModel):
    review_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class PreviousTierResponse(BaseModel):
    reviewer_id: str
    previous_tier: str


class PreviousRoleResponse(BaseModel):
    reviewer_id: str
    previous_role: str


class ReviewerResponse(BaseModel):
    reviewer_id: str
    nickname: str
    role: str
    tier: str
    tier_mode: str
    is_deviation_target: bool
    is_phone_verified: bool
    review_count: int
    helpful_count: int
    violation_count: int


class StoreScorecardResponse(BaseModel):
    store_id: str
    name: str
    review_count_valid: int
    avg_rating: float | None = None
    score_weighted: float | None = None
    is_blind: bool


class ReviewResponse(BaseModel):
    review_id: str
    store_id: str
    reviewer_id: str
    title: str | None = None
    content: str
    party_size: int
    visit_date: date | None = None
    status: str
    visit_count: int
    helpful_count: int
    composite_score: float | None = None
    taste: float | None = None
    value: float | None = None
    ambiance: float | None = None
    service: float | None = None
    scores_masked: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ModerationResponse(BaseModel):
    review_id: str
    status: str


class HelpfulCountResponse(BaseModel):
    review_id: str
    helpful_count: int


class QueueEntryResponse(BaseModel):
    review_id: str
    store_id: str
    reviewer_id: str
    title: str | None = None
    content: str
    composite_score: float
    submitted_at: datetime | None = None


class JobResultResponse(BaseModel):
    job: str
    processed: int
