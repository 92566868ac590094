"""
Employer-facing candidate routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import structlog

from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.core.timeutils import as_utc, to_iso
from app.auth.dependencies import require_employer
from app.auth.schemas import TokenPayload
from app.models.user import User, UserProfile, UserSkill
from app.models.job import Job
from app.models.application import Application
from app.candidates.schemas import (
    CandidateDetailResponse,
    CandidateListResponse,
    CandidateProfileSnippet,
    CandidateSummary,
    CandidateUser,
)

router = APIRouter(prefix="/api/employer/candidates", tags=["Candidates"])
logger = structlog.get_logger()

# Application status -> pipeline bucket shown on the candidates board
STATUS_BUCKETS = {
    "screening": "reviewing",
    "interview": "interview",
    "offer": "interview",
    "hired": "hired",
    "rejected": "rejected",
}

# Lower rank = further along
BUCKET_RANK = {"hired": 0, "interview": 1, "reviewing": 2, "new": 3, "rejected": 4}


def bucket_for(status: str) -> str:
    return STATUS_BUCKETS.get(status, "new")


@router.get("", response_model=CandidateListResponse)
def list_candidates(
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Everyone who applied to the caller's jobs, one entry per candidate"""
    rows = (
        db.query(Application, User)
        .join(Job, Application.job_id == Job.id)
        .join(User, Application.candidate_id == User.id)
        .filter(Job.employer_id == claims.sub)
        .order_by(Application.created_at.desc())
        .all()
    )

    aggregates = {}
    for application, candidate in rows:
        agg = aggregates.get(candidate.id)
        if agg is None:
            agg = aggregates[candidate.id] = {
                "user": candidate,
                "job_ids": set(),
                "bucket": bucket_for(application.status),
                "last_active_at": None,
            }
        else:
            bucket = bucket_for(application.status)
            if BUCKET_RANK[bucket] < BUCKET_RANK[agg["bucket"]]:
                agg["bucket"] = bucket

        agg["job_ids"].add(application.job_id)

        activity = application.next_interview_at or application.created_at
        if activity is not None:
            activity = as_utc(activity)
            if agg["last_active_at"] is None or activity > agg["last_active_at"]:
                agg["last_active_at"] = activity

    candidate_ids = list(aggregates)
    profiles = {}
    skills = {candidate_id: [] for candidate_id in candidate_ids}
    if candidate_ids:
        for profile in db.query(UserProfile).filter(UserProfile.user_id.in_(candidate_ids)):
            profiles[profile.user_id] = profile
        for skill in db.query(UserSkill).filter(UserSkill.user_id.in_(candidate_ids)).order_by(UserSkill.skill):
            skills[skill.user_id].append(skill.skill)

    candidates = []
    for candidate_id, agg in aggregates.items():
        user = agg["user"]
        profile = profiles.get(candidate_id)
        candidates.append(
            CandidateSummary(
                id=user.id,
                name=user.name,
                email=user.email,
                headline=profile.headline if profile else None,
                location=profile.location if profile else None,
                experience_years=profile.experience_years if profile else None,
                skills=skills[candidate_id],
                last_active_at=to_iso(agg["last_active_at"], default=None),
                applied_jobs_count=len(agg["job_ids"]),
                status=agg["bucket"],
            )
        )

    return CandidateListResponse(candidates=candidates, total=len(candidates))


@router.get("/{candidate_id}", response_model=CandidateDetailResponse)
def get_candidate(
    candidate_id: str,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Candidate details, visible only once they applied to one of the caller's jobs"""
    candidate_id = candidate_id.strip()
    related = (
        db.query(Application.id)
        .join(Job, Application.job_id == Job.id)
        .filter(Application.candidate_id == candidate_id, Job.employer_id == claims.sub)
        .first()
    )
    if not related:
        logger.warning("candidate_access_denied", employer_id=claims.sub, candidate_id=candidate_id)
        raise NotFoundError("Candidate")

    user = db.query(User).filter(User.id == candidate_id).first()
    if not user:
        raise NotFoundError("Candidate")

    profile = db.query(UserProfile).filter(UserProfile.user_id == candidate_id).first()
    skills = [
        row.skill
        for row in db.query(UserSkill).filter(UserSkill.user_id == candidate_id).order_by(UserSkill.skill)
    ]

    return CandidateDetailResponse(
        user=CandidateUser(id=user.id, name=user.name, email=user.email),
        profile=(
            CandidateProfileSnippet(
                headline=profile.headline,
                bio=profile.bio,
                location=profile.location,
                resume_url=profile.resume_url,
            )
            if profile
            else None
        ),
        skills=skills,
    )
