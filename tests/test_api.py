import json

from conftest import ADMIN_TOKEN, create_job
from services.resume import ResumeHandler

MIB = 1024 * 1024


def _admin():
    return {"X-Admin-Token": ADMIN_TOKEN}


async def test_health(client):
    r = await client.get("/health")

    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_job_form_lists_questions_in_order(client, seeded):
    r = await client.get(f"/jobs/{seeded.slug}")

    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["requiresResume"] is False
    assert data["position"]["title"] == "Backend Engineer"
    assert [q["label"] for q in data["questions"]] == ["Full name", "Skills", "Seniority", "Cover letter"]
    skills = data["questions"][1]
    assert skills["type"] == "MULTIPLE_CHOICE"
    assert [o["label"] for o in skills["options"]] == ["Python", "SQL"]
    assert [o["orderIndex"] for o in skills["options"]] == [0, 1]


async def test_submit_json_map_payload(client, seeded):
    body = {
        "answers": {
            seeded.name_question: "Jane Doe",
            seeded.skills_question: [seeded.python_option, seeded.sql_option],
        },
        "recaptchaToken": "test-token",
    }

    r = await client.post(f"/applications/submit/{seeded.slug}", json=body)

    assert r.status_code == 201, r.text
    payload = r.json()
    assert payload["success"] is True
    assert payload["message"] == "Application submitted successfully"
    assert payload["data"]["jobId"] == seeded.job_id
    assert payload["data"]["submittedAt"]
    rows = {(a["questionId"], a["textValue"], a["questionOptionId"]) for a in payload["data"]["answers"]}
    assert rows == {
        (seeded.name_question, "Jane Doe", None),
        (seeded.skills_question, None, seeded.python_option),
        (seeded.skills_question, None, seeded.sql_option),
    }


async def test_submit_json_array_payload(client, seeded):
    body = {"answers": [{"questionId": seeded.name_question, "value": "Jane"}]}

    r = await client.post(f"/applications/submit/{seeded.slug}", json=body)

    assert r.status_code == 201, r.text
    assert len(r.json()["data"]["answers"]) == 1


async def test_missing_required_answer_returns_400(client, seeded):
    body = {"answers": {seeded.skills_question: [seeded.python_option]}}

    r = await client.post(f"/applications/submit/{seeded.slug}", json=body)

    assert r.status_code == 400
    payload = r.json()
    assert payload["success"] is False
    assert payload["error"] == "BAD_REQUEST"
    assert payload["message"] == 'The question "Full name" is required'
    assert "timestamp" in payload


async def test_malformed_answers_return_400(client, seeded):
    r = await client.post(f"/applications/submit/{seeded.slug}", json={"answers": 12})

    assert r.status_code == 400
    assert r.json()["message"] == "Each answer must have either a text value or a selected option"


async def test_inactive_and_missing_jobs_return_same_404(client, session_factory):
    closed = await create_job(session_factory, slug="closed-role", is_active=False)
    body = {"answers": {closed.name_question: "Jane"}}

    missing = await client.post("/applications/submit/unknown-role", json=body)
    inactive = await client.post(f"/applications/submit/{closed.slug}", json=body)

    assert missing.status_code == inactive.status_code == 404
    assert missing.json()["error"] == inactive.json()["error"] == "NOT_FOUND"
    assert missing.json()["message"] == inactive.json()["message"]


async def test_multipart_submission_with_resume(client, resume_job, settings, minimal_pdf):
    answers = {resume_job.name_question: "Jane", resume_job.seniority_question: resume_job.senior_option}

    r = await client.post(
        f"/applications/submit/{resume_job.slug}",
        data={"answers": json.dumps(answers), "recaptchaToken": "test-token"},
        files={"resume": ("jane-cv.pdf", minimal_pdf, "application/pdf")},
    )

    assert r.status_code == 201, r.text
    stored = list(settings.upload_directory.iterdir())
    assert len(stored) == 1
    assert stored[0].name.startswith("jane-cv-")
    assert stored[0].read_bytes() == minimal_pdf


async def test_multipart_without_required_resume(client, resume_job):
    r = await client.post(
        f"/applications/submit/{resume_job.slug}",
        data={"answers": json.dumps({resume_job.name_question: "Jane"})},
    )

    assert r.status_code == 400
    assert r.json()["message"] == "A resume is required for this job"


async def test_multipart_rejects_text_resume(client, resume_job):
    r = await client.post(
        f"/applications/submit/{resume_job.slug}",
        data={"answers": json.dumps({resume_job.name_question: "Jane"})},
        files={"resume": ("cv.txt", b"plain text", "text/plain")},
    )

    assert r.status_code == 400
    assert r.json()["message"] == "Invalid file type"


async def test_multipart_rejects_large_resume(client, resume_job):
    r = await client.post(
        f"/applications/submit/{resume_job.slug}",
        data={"answers": json.dumps({resume_job.name_question: "Jane"})},
        files={"resume": ("cv.pdf", b"%PDF" + b"0" * (6 * MIB), "application/pdf")},
    )

    assert r.status_code == 400
    assert r.json()["message"] == "File is too large"


async def test_admin_routes_require_token(client):
    assert (await client.get("/admin/applications")).status_code == 401
    r = await client.get("/admin/applications", headers={"X-Admin-Token": "wrong"})
    assert r.status_code == 401
    assert r.json()["error"] == "UNAUTHORIZED"


async def test_admin_read_and_delete_flow(client, seeded):
    body = {"answers": {seeded.name_question: "Jane", seeded.skills_question: [seeded.sql_option]}}
    created = (await client.post(f"/applications/submit/{seeded.slug}", json=body)).json()["data"]

    listing = await client.get("/admin/applications", headers=_admin())
    assert listing.status_code == 200
    assert listing.json()["pagination"] == {"limit": 10, "offset": 0, "total": 1}
    assert listing.json()["data"][0]["id"] == created["id"]

    by_job = await client.get(f"/admin/applications/job/{seeded.job_id}", headers=_admin())
    assert [item["id"] for item in by_job.json()["data"]] == [created["id"]]

    detail = await client.get(f"/admin/applications/{created['id']}", headers=_admin())
    assert detail.status_code == 200
    answers = detail.json()["data"]["answers"]
    assert {a["optionLabel"] for a in answers if a["questionOptionId"]} == {"SQL"}
    assert {a["questionLabel"] for a in answers} == {"Full name", "Skills"}

    stats = await client.get("/admin/applications/stats/overview", headers=_admin())
    assert stats.json()["data"]["totalApplications"] == 1
    assert stats.json()["data"]["applicationsByJob"][0]["applications"] == 1

    deleted = await client.delete(f"/admin/applications/{created['id']}", headers=_admin())
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Application deleted successfully"

    gone = await client.get(f"/admin/applications/{created['id']}", headers=_admin())
    assert gone.status_code == 404
    assert gone.json()["message"] == "Application not found"


async def test_oversized_upload_is_read_only_up_to_the_limit(client, resume_job, settings, monkeypatch):
    seen = []
    original_check = ResumeHandler.check

    def _recording_check(self, requires_resume, resume):
        seen.append(resume)
        return original_check(self, requires_resume, resume)

    monkeypatch.setattr(ResumeHandler, "check", _recording_check)
    content = b"%PDF" + b"0" * (12 * MIB)

    r = await client.post(
        f"/applications/submit/{resume_job.slug}",
        data={"answers": json.dumps({resume_job.name_question: "Jane"})},
        files={"resume": ("cv.pdf", content, "application/pdf")},
    )

    assert r.status_code == 400
    assert r.json()["message"] == "File is too large"
    assert seen[0].size == len(content)
    assert len(seen[0].buffer) == settings.max_resume_size_bytes + 1


async def test_unknown_job_is_reported_before_the_body_is_read(client):
    malformed_json = await client.post(
        "/applications/submit/unknown-role",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    malformed_form = await client.post("/applications/submit/unknown-role", data={"answers": "{not json"})

    assert malformed_json.status_code == malformed_form.status_code == 404
    assert malformed_json.json()["error"] == malformed_form.json()["error"] == "NOT_FOUND"


async def test_slug_wins_when_it_equals_another_jobs_id(client, session_factory, seeded):
    shadow = await create_job(session_factory, slug=seeded.job_id)
    body = {"answers": {shadow.name_question: "Jane"}}

    r = await client.post(f"/applications/submit/{seeded.job_id}", json=body)

    assert r.status_code == 201, r.text
    assert r.json()["data"]["jobId"] == shadow.job_id
