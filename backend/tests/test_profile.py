from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import Application, Job, User, UserSkill


def test_new_candidate_profile_is_blank(client: TestClient, auth_headers, candidate: User) -> None:
    body = client.get("/api/profile", headers=auth_headers(candidate)).json()

    assert body["user"]["provider"] == "credentials"
    assert body["profile"]["headline"] == ""
    assert body["profile"]["skills"] == []
    assert body["profile"]["experienceYears"] is None
    assert body["employerProfile"] is None


def test_candidate_profile_update(client: TestClient, db: Session, auth_headers, candidate: User) -> None:
    headers = auth_headers(candidate)

    response = client.patch(
        "/api/profile",
        json={
            "name": "Asha R",
            "headline": "  Python developer ",
            "experienceYears": "3.7",
            "skills": ["Python", " SQL ", "Python", ""],
        },
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Profile updated successfully"
    assert body["user"]["name"] == "Asha R"
    assert body["profile"]["headline"] == "Python developer"
    assert body["profile"]["experienceYears"] == 3
    assert sorted(body["profile"]["skills"]) == ["Python", "SQL"]

    cleared = client.patch("/api/profile", json={"headline": "", "name": "  "}, headers=headers).json()
    assert cleared["profile"]["headline"] == ""
    assert cleared["user"]["name"] == "Asha R"
    assert sorted(cleared["profile"]["skills"]) == ["Python", "SQL"]

    client.patch("/api/profile", json={"skills": []}, headers=headers)
    assert db.query(UserSkill).filter(UserSkill.user_id == candidate.id).count() == 0


def test_employer_profile_update(client: TestClient, auth_headers, employer: User) -> None:
    response = client.patch(
        "/api/profile",
        json={"companyName": "Orbit Labs India", "companySize": "51-200", "headline": "ignored"},
        headers=auth_headers(employer),
    )

    body = response.json()
    assert body["user"]["companyName"] == "Orbit Labs India"
    assert body["employerProfile"]["companySize"] == "51-200"
    assert body["profile"] is None


def test_resume_upload_and_download(client: TestClient, auth_headers, candidate: User) -> None:
    headers = auth_headers(candidate)

    assert client.get("/api/profile/resume", headers=headers).json() == {"url": None}

    upload = client.post(
        "/api/profile/resume",
        files={"resume": ("My CV.pdf", b"%PDF-1.4 resume", "application/pdf")},
        headers=headers,
    )

    assert upload.status_code == 200
    url = upload.json()["url"]
    assert url.startswith(f"/uploads/resumes/{candidate.id}-")
    assert url.endswith("-My_CV.pdf")
    assert client.get("/api/profile/resume", headers=headers).json() == {"url": url}
    served = client.get(url)
    assert served.status_code == 200
    assert served.content == b"%PDF-1.4 resume"


def test_resume_upload_rejects_missing_or_wrong_file(client: TestClient, auth_headers, candidate: User) -> None:
    headers = auth_headers(candidate)

    missing = client.post("/api/profile/resume", headers=headers)
    wrong = client.post(
        "/api/profile/resume", files={"resume": ("cv.txt", b"plain", "text/plain")}, headers=headers
    )

    assert missing.status_code == 400
    assert missing.json()["error"]["message"] == "Missing resume file"
    assert wrong.status_code == 400


def test_settings_defaults_and_update(client: TestClient, auth_headers, candidate: User) -> None:
    headers = auth_headers(candidate)

    defaults = client.get("/api/settings", headers=headers).json()
    updated = client.patch("/api/settings", json={"marketingEmails": True, "theme": "dark"}, headers=headers).json()
    invalid = client.patch("/api/settings", json={"theme": "neon"}, headers=headers)

    assert defaults == {
        "jobAlertsEmail": True,
        "jobAlertsPush": True,
        "activityEmails": True,
        "marketingEmails": False,
        "loginAlerts": True,
        "twoFactor": False,
        "theme": "system",
    }
    assert updated["marketingEmails"] is True
    assert updated["theme"] == "dark"
    assert updated["jobAlertsEmail"] is True
    assert invalid.status_code == 400


def test_delete_account_cascades(
    client: TestClient, db: Session, make_job, make_application, auth_headers, employer: User, candidate: User
) -> None:
    job = make_job(employer)
    make_application(job, candidate)
    candidate_headers = auth_headers(candidate)
    employer_id = employer.id

    response = client.delete("/api/account", headers=auth_headers(employer))

    assert response.status_code == 200
    assert response.json() == {"message": "Account deleted successfully"}
    db.expire_all()
    assert db.query(User).filter(User.id == employer_id).count() == 0
    assert db.query(Job).count() == 0
    assert db.query(Application).count() == 0
    assert client.get("/api/applications/candidate", headers=candidate_headers).json()["stats"]["total"] == 0


def test_deleted_account_token_is_rejected_for_profile(client: TestClient, auth_headers, candidate: User) -> None:
    headers = auth_headers(candidate)
    client.delete("/api/account", headers=headers)

    assert client.get("/api/profile", headers=headers).status_code == 401
    assert client.delete("/api/account", headers=headers).status_code == 404
