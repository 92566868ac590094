from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import User, UserProfile, UserSkill


def test_candidates_board_aggregates_per_candidate(
    client: TestClient, db: Session, make_user, make_job, make_application, auth_headers, employer: User, candidate: User
) -> None:
    first = make_job(employer)
    second = make_job(employer)
    make_application(first, candidate, status="screening")
    make_application(
        second, candidate, status="interview", next_interview_at=datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)
    )
    newcomer = make_user("candidate")
    make_application(first, newcomer)
    db.add(UserProfile(user_id=candidate.id, headline="Backend developer", experience_years=4))
    db.add_all([UserSkill(user_id=candidate.id, skill="Python"), UserSkill(user_id=candidate.id, skill="SQL")])
    db.commit()

    body = client.get("/api/employer/candidates", headers=auth_headers(employer)).json()

    assert body["total"] == 2
    by_id = {item["id"]: item for item in body["candidates"]}
    summary = by_id[candidate.id]
    assert summary["status"] == "interview"
    assert summary["appliedJobsCount"] == 2
    assert summary["headline"] == "Backend developer"
    assert summary["experienceYears"] == 4
    assert summary["skills"] == ["Python", "SQL"]
    assert summary["lastActiveAt"] == "2030-05-01T09:00:00.000Z"
    assert by_id[newcomer.id]["status"] == "new"
    assert by_id[newcomer.id]["skills"] == []


def test_candidates_board_excludes_other_employers(
    client: TestClient, make_user, make_job, make_application, auth_headers, employer: User, candidate: User
) -> None:
    make_application(make_job(make_user("employer")), candidate)

    body = client.get("/api/employer/candidates", headers=auth_headers(employer)).json()

    assert body == {"candidates": [], "total": 0}


def test_candidate_detail_requires_relationship(
    client: TestClient, db: Session, make_user, make_job, make_application, auth_headers, employer: User, candidate: User
) -> None:
    make_application(make_job(employer), candidate)
    db.add(UserProfile(user_id=candidate.id, bio="Likes queues", resume_url="/uploads/resumes/cv.pdf"))
    db.commit()
    stranger = make_user("candidate")

    related = client.get(f"/api/employer/candidates/{candidate.id}", headers=auth_headers(employer))
    unrelated = client.get(f"/api/employer/candidates/{stranger.id}", headers=auth_headers(employer))

    assert related.status_code == 200
    assert related.json()["user"]["email"] == candidate.email
    assert related.json()["profile"]["resumeUrl"] == "/uploads/resumes/cv.pdf"
    assert unrelated.status_code == 404


def test_candidate_detail_without_profile(
    client: TestClient, make_job, make_application, auth_headers, employer: User, candidate: User
) -> None:
    make_application(make_job(employer), candidate)

    body = client.get(f"/api/employer/candidates/{candidate.id}", headers=auth_headers(employer)).json()

    assert body["profile"] is None
    assert body["skills"] == []
