import fitz
import pytest

from screening.errors import LLMServiceError


def create_listing(client, **overrides):
    body = {
        "title": "Data Engineer",
        "department": "Data",
        "description": "Build and run batch pipelines.",
        "requirements": ["R1", "R2"],
        "preferredSkills": ["S1"],
    }
    body.update(overrides)
    response = client.post("/job-listings", json=body)
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_processed_resume(client, fake_llm, analysis, resume_body):
    fake_llm.queue(analysis)

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "processed"
    assert data["aiScore"] == 82
    assert data["matchScore"] == 76
    assert data["aiFeedback"]["recommendation"].startswith("Strong candidate")
    assert data["aiFeedback"]["analysisMode"] == "enhanced"
    assert data["parsedSkills"] == ["Python", "FastAPI", "PostgreSQL"]
    assert data["suggestedQuestions"] == analysis["suggestedQuestions"]
    assert data["education"][0]["degree"] == "BSc Computer Science"
    assert client.get(f"/resumes/{data['id']}").json()["status"] == "processed"


def test_out_of_range_scores_are_clamped(client, fake_llm, analysis, resume_body):
    analysis["score"] = 150
    analysis["matchScore"] = -5
    fake_llm.queue(analysis)

    data = client.post("/resumes", json=resume_body).json()

    assert data["aiScore"] == 100
    assert data["matchScore"] == 1


@pytest.mark.parametrize("reply", [
    "The candidate seems strong, I'd hire.",
    {"score": 80, "matchScore": 70, "feedback": {"strengths": [], "weaknesses": [],
                                                 "skillsIdentified": [], "recommendation": "Hire"},
     "suggestedQuestions": [], "experience": []},
    LLMServiceError("Groq request failed: 503 Server Error"),
])
def test_failed_analysis_still_returns_created_record(client, fake_llm, resume_body, reply):
    fake_llm.queue(reply)

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "error"
    assert data["aiScore"] is None
    assert data["aiFeedback"]["error"]
    assert data["aiFeedback"]["retryable"] is True
    assert len(client.get("/resumes").json()) == 1


def test_education_as_plain_strings_is_an_analysis_error(client, fake_llm, analysis, resume_body):
    analysis["education"] = ["BSc Computer Science, MIT, 2016"]
    fake_llm.queue(analysis)

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "error"
    assert data["aiScore"] is None
    assert data["aiFeedback"]["errorType"] == "invalid_response_shape"
    listed = client.get("/resumes")
    assert listed.status_code == 200
    assert listed.json()[0]["status"] == "error"


def test_short_resume_text_rejected(client, fake_llm, resume_body):
    resume_body["resumeText"] = "x" * 49

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"
    assert "resumeText" in [e["field"] for e in response.json()["errors"]]
    assert client.get("/resumes").json() == []
    assert fake_llm.calls == []


def test_position_or_listing_required(client, fake_llm, resume_body):
    del resume_body["position"]

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 400
    assert client.get("/resumes").json() == []
    assert fake_llm.calls == []


def test_resume_against_job_listing(client, fake_llm, analysis, resume_body):
    listing = create_listing(client)
    del resume_body["position"]
    resume_body["jobListingId"] = listing["id"]
    fake_llm.queue(analysis)

    data = client.post("/resumes", json=resume_body).json()

    assert data["jobListingId"] == listing["id"]
    assert data["position"] == "Data Engineer"
    prompt = fake_llm.calls[0][1]
    assert "R1, R2" in prompt
    assert "S1" in prompt


def test_unknown_listing_falls_back_to_position(client, fake_llm, analysis, resume_body):
    resume_body["jobListingId"] = 999
    fake_llm.queue(analysis)

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 201
    assert "Backend Engineer" in fake_llm.calls[0][1]
    assert response.json()["jobListingId"] is None


def test_unknown_listing_without_position_rejected(client, resume_body):
    del resume_body["position"]
    resume_body["jobListingId"] = 999

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "jobListingId"


def test_closed_listing_rejects_applications(client, resume_body):
    listing = create_listing(client)
    client.patch(f"/job-listings/{listing['id']}/status", json={"status": "closed"})
    resume_body["jobListingId"] = listing["id"]

    response = client.post("/resumes", json=resume_body)

    assert response.status_code == 400
    assert client.get("/resumes").json() == []


def test_job_listing_lifecycle(client, fake_llm, analysis, resume_body):
    listing = create_listing(client)
    assert listing["status"] == "active"
    assert client.get("/job-listings", params={"status": "active"}).json()[0]["id"] == listing["id"]

    closed = client.patch(f"/job-listings/{listing['id']}/status", json={"status": "closed"})
    assert closed.json()["status"] == "closed"
    assert client.patch(f"/job-listings/{listing['id']}/status", json={"status": "archived"}).status_code == 400

    other = create_listing(client, title="Analyst")
    resume_body["jobListingId"] = other["id"]
    fake_llm.queue(analysis)
    client.post("/resumes", json=resume_body)

    assert client.delete(f"/job-listings/{other['id']}").status_code == 409
    assert client.delete(f"/job-listings/{listing['id']}").status_code == 204
    assert client.get(f"/job-listings/{listing['id']}").status_code == 404


def test_missing_resume_is_404(client):
    assert client.get("/resumes/12345").status_code == 404


def test_pdf_upload(client, fake_llm, analysis):
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Jane Doe\nSenior backend engineer\nPython, FastAPI, PostgreSQL\n7 years at Acme Corp")
    pdf_bytes = doc.tobytes()
    doc.close()
    fake_llm.queue(analysis)

    response = client.post(
        "/resumes/upload",
        data={"candidateName": "Jane Doe", "email": "jane@example.com", "position": "Backend Engineer"},
        files={"resume": ("jane.pdf", pdf_bytes, "application/pdf")},
    )

    assert response.status_code == 201
    assert "FastAPI" in response.json()["resumeText"]
    assert response.json()["status"] == "processed"


def test_unreadable_upload_rejected(client):
    response = client.post(
        "/resumes/upload",
        data={"candidateName": "Jane Doe", "email": "jane@example.com", "position": "Backend Engineer"},
        files={"resume": ("jane.pdf", b"not a pdf", "application/pdf")},
    )
    assert response.status_code == 400
    assert client.get("/resumes").json() == []


def test_employees_leaves_evaluations(client):
    employee = client.post("/employees", json={
        "firstName": "Sam", "lastName": "Lee", "email": "sam@example.com",
        "position": "Designer", "department": "Product", "joinDate": "2023-04-01",
    })
    assert employee.status_code == 201
    employee_id = employee.json()["id"]
    assert employee.json()["status"] == "active"

    duplicate = client.post("/employees", json={
        "firstName": "Sam", "lastName": "Other", "email": "sam@example.com",
        "position": "Designer", "department": "Product", "joinDate": "2023-04-01",
    })
    assert duplicate.status_code == 409

    leave = client.post("/leaves", json={
        "employeeId": employee_id, "startDate": "2024-07-01", "endDate": "2024-07-05",
        "type": "vacation", "reason": "Summer break",
    })
    assert leave.status_code == 201
    assert leave.json()["status"] == "pending"
    approved = client.patch(f"/leaves/{leave.json()['id']}/status", json={"status": "approved"})
    assert approved.json()["status"] == "approved"

    backwards = client.post("/leaves", json={
        "employeeId": employee_id, "startDate": "2024-07-05", "endDate": "2024-07-01",
        "type": "vacation", "reason": "Oops",
    })
    assert backwards.status_code == 400

    evaluation = client.post("/evaluations", json={
        "employeeId": employee_id, "evaluationDate": "2024-06-30", "performance": 4,
        "feedback": "Solid half.", "goals": ["Ship design system v2"],
    })
    assert evaluation.status_code == 201
    assert client.post("/evaluations", json={
        "employeeId": employee_id, "evaluationDate": "2024-06-30", "performance": 6,
        "feedback": "Too good", "goals": [],
    }).status_code == 400
    assert client.post("/evaluations", json={
        "employeeId": 999, "evaluationDate": "2024-06-30", "performance": 3,
        "feedback": "Who?", "goals": [],
    }).status_code == 400

    assert len(client.get(f"/employees/{employee_id}/evaluations").json()) == 1
    assert client.get("/employees/999").status_code == 404
