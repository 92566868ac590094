from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.timeutils import utcnow
from app.models import SavedJob, User


def test_candidate_dashboard(
    client: TestClient, db: Session, make_job, make_application, auth_headers, employer: User, candidate: User
) -> None:
    interviewing = make_job(employer, title="Interviewing")
    rejected = make_job(employer, title="Rejected")
    make_job(employer, title="Draft", status="draft", published_at=None)
    make_application(interviewing, candidate, status="interview", next_interview_at=utcnow() + timedelta(days=2))
    make_application(rejected, candidate, status="rejected")
    db.add(SavedJob(candidate_id=candidate.id, job_id=rejected.id))
    db.commit()

    body = client.get("/api/dashboard/candidate", headers=auth_headers(candidate)).json()

    assert body["stats"] == {"activeApplications": 1, "upcomingInterviews": 1, "savedJobs": 1}
    assert {item["title"] for item in body["recentApplications"]} == {"Interviewing", "Rejected"}
    assert "Draft" not in {job["title"] for job in body["recommendedJobs"]}
    assert body["recommendedJobs"][0]["company"] == "Orbit Labs"


def test_employer_dashboard(
    client: TestClient, make_user, make_job, make_application, auth_headers, employer: User
) -> None:
    open_job = make_job(employer, title="Open role")
    paused = make_job(employer, title="Paused role", status="paused")
    first, second = make_user("candidate"), make_user("candidate")
    make_application(open_job, first, status="interview", next_interview_at=utcnow() + timedelta(days=1))
    make_application(paused, first, status="applied")
    make_application(open_job, second, status="applied")

    body = client.get("/api/dashboard/employer", headers=auth_headers(employer)).json()

    assert body["stats"] == {"openRoles": 1, "activeCandidates": 2, "interviewsThisWeek": 1}
    jobs = {job["title"]: job for job in body["recentJobs"]}
    assert jobs["Open role"]["status"] == "Open"
    assert jobs["Open role"]["applicants"] == 2
    assert jobs["Paused role"]["status"] == "Paused"
    pipeline = {row["label"]: row["count"] for row in body["pipeline"]}
    assert pipeline == {"Applied": 2, "Interview": 1}


def test_dashboards_are_role_specific(client: TestClient, auth_headers, employer: User, candidate: User) -> None:
    assert client.get("/api/dashboard/candidate", headers=auth_headers(employer)).status_code == 403
    assert client.get("/api/dashboard/employer", headers=auth_headers(candidate)).status_code == 403
