import json

from app.services.ai.errors import NetworkError

CASE_DETAILS = {
    "diagnosis": "Asthma",
    "primaryInfo": "## BIODATA\nAmaka, 19, student.",
    "openingLine": "I can't catch my breath.",
    "patientProfile": {
        "age": 19,
        "gender": "female",
        "presentingComplaint": "wheeze",
        "educationLevel": "moderate",
        "occupation": "student",
    },
}

EXAMINATION_RESULTS = [
    {
        "name": "Respiratory Rate",
        "type": "quantitative",
        "category": "vital_signs",
        "value": 28,
        "unit": "breaths/min",
        "status": "High",
    },
    {
        "name": "Respiratory Examination",
        "type": "descriptive",
        "category": "system_examination",
        "findings": "Widespread expiratory wheeze",
    },
]

INVESTIGATION_RESULTS = [
    {"name": "Peak flow", "type": "quantitative", "category": "laboratory", "value": 210, "unit": "L/min"},
]

COMPREHENSIVE_FEEDBACK = {
    "diagnosis": "Asthma",
    "keyLearningPoint": "Assess severity with peak flow early.",
    "whatYouDidWell": ["Asked about triggers", "Checked inhaler use"],
    "clinicalReasoning": "You linked nocturnal cough to airway inflammation.",
    "clinicalOpportunities": {
        "areasForImprovement": ["Ask about previous admissions"],
        "missedOpportunities": [
            {"opportunity": "Smoking history", "clinicalSignificance": "Affects control"}
        ],
    },
    "clinicalPearls": ["Silent chest is an emergency", "Check technique before escalating"],
}


def _create_case(client, email="ada@example.com", department="Cardiology", details=None):
    return client.post(
        "/api/cases",
        json={
            "email": email,
            "country": "NG",
            "departmentName": department,
            "caseDetails": details or CASE_DETAILS,
        },
    )


def _completion_handler(prompt: str):
    if prompt.startswith("Provide comprehensive clinical feedback"):
        return json.dumps(COMPREHENSIVE_FEEDBACK)
    if prompt.startswith("Generate a concise clinical summary"):
        return "A 19-year-old student with acute wheeze consistent with asthma."
    if "APPROPRIATE management plan" in prompt:
        return NetworkError("fetch failed")
    if "generate 2-3 clinical pearls" in prompt:
        return "- Silent chest is an emergency"
    return json.dumps([{"item": "generated"}])


def _complete_payload(**overrides):
    payload = {
        "finalDiagnosis": "Acute asthma",
        "managementPlan": "Salbutamol nebuliser and oral prednisolone",
        "examinationPlan": "Respiratory examination",
        "investigationPlan": "Peak flow",
        "examinationResults": EXAMINATION_RESULTS,
        "investigationResults": INVESTIGATION_RESULTS,
        "messages": [
            {"sender": "student", "text": "What brings you in?"},
            {"sender": "patient", "text": "tightness in my chest"},
        ],
        "makeVisible": True,
    }
    payload.update(overrides)
    return payload


def test_create_case_creates_user_and_opening_message(client, user_repository):
    response = _create_case(client)

    assert response.status_code == 201
    case = response.json()
    assert case["id"] == 1
    assert case["department"] == "Internal Medicine"
    assert case["diagnosis"] == "Asthma"
    assert case["difficultyLevel"] == "standard"
    assert case["isPediatric"] is False
    assert case["isCompleted"] is False
    assert case["caseProfile"]["presentingComplaint"] == "wheeze"
    assert case["messages"] == [
        {
            "id": 1,
            "sender": "system",
            "text": 'The patient is here today with the following complaint:\n\n"I can\'t catch my breath."',
            "speakerLabel": None,
            "timestamp": case["messages"][0]["timestamp"],
        }
    ]
    assert case["clinicalSummary"] == (
        "A 19-year-old student with moderate education level presented with symptoms."
    )


def test_create_pediatric_case_keeps_pediatric_profile(client):
    details = {
        "diagnosis": "Bronchiolitis",
        "primaryInfo": "## BIODATA (child age, parent)",
        "openingLine": "She keeps coughing.",
        "isPediatric": True,
        "pediatricProfile": {
            "patientAge": 0.5,
            "ageGroup": "infant",
            "respondingParent": "mother",
            "parentProfile": {"educationLevel": "basic", "occupation": "trader"},
        },
    }

    response = _create_case(client, department="Neonatology", details=details)

    assert response.status_code == 201
    case = response.json()
    assert case["department"] == "Pediatrics"
    assert case["isPediatric"] is True
    assert case["caseProfile"]["respondingParent"] == "mother"
    assert case["caseProfile"]["parentProfile"]["occupation"] == "trader"


def test_create_case_validation(client):
    missing_details = client.post("/api/cases", json={"email": "ada@example.com"})
    missing_opening = _create_case(
        client, details={"diagnosis": "Asthma", "primaryInfo": "## BIODATA"}
    )
    unknown_department = _create_case(client, department="Astrology")

    assert missing_details.status_code == 400
    assert missing_details.json() == {"error": "Email and case details are required"}
    assert missing_opening.status_code == 400
    assert missing_opening.json() == {
        "error": "Case details must include diagnosis, primary info and opening line"
    }
    assert unknown_department.status_code == 404
    assert unknown_department.json() == {"error": "Department not found"}


def test_list_cases_for_user_and_invalidate_on_create(client):
    _create_case(client)

    first = client.get("/api/cases", params={"email": "ada@example.com"})
    assert first.status_code == 200
    assert [c["id"] for c in first.json()] == [1]
    assert first.json()[0]["department"] == "Internal Medicine"

    _create_case(client)
    second = client.get("/api/cases", params={"email": "ada@example.com"})

    assert {c["id"] for c in second.json()} == {1, 2}


def test_list_cases_requires_known_email(client):
    missing = client.get("/api/cases")
    unknown = client.get("/api/cases", params={"email": "ghost@example.com"})

    assert missing.status_code == 400
    assert missing.json() == {"error": "Email is required"}
    assert unknown.status_code == 404
    assert unknown.json() == {"error": "User not found"}


def test_append_messages(client):
    _create_case(client)

    response = client.post(
        "/api/cases/1/messages",
        json={"messages": [{"sender": "student", "text": "Any wheeze?"}]},
    )
    empty = client.post("/api/cases/1/messages", json={"messages": []})
    unknown = client.post(
        "/api/cases/99/messages",
        json={"messages": [{"sender": "student", "text": "Hello?"}]},
    )

    assert response.status_code == 201
    assert response.json()[0]["id"] == 2
    assert response.json()[0]["sender"] == "student"
    assert empty.status_code == 400
    assert unknown.status_code == 404
    assert unknown.json() == {"error": "Case not found"}
    assert len(client.get("/api/cases/1").json()["messages"]) == 2


def test_complete_case_generates_feedback_and_report(client, model_client):
    model_client.handler = _completion_handler
    _create_case(client)

    response = client.post("/api/cases/1/complete", json=_complete_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["caseId"] == 1
    assert body["message"] == "Case completed successfully"
    assert body["feedback"] == COMPREHENSIVE_FEEDBACK
    report = body["caseReport"]
    assert report["clinicalSummary"].startswith("A 19-year-old student")
    assert report["clinicalPearls"] == "- Silent chest is an emergency"
    assert report["managementPlan"][0]["intervention"] == "Standard management for this condition"
    assert "management_plan" not in report["generatedFields"]
    assert len(report["generatedFields"]) == 5
    assert len(model_client.prompts) == 7

    case = client.get("/api/cases/1").json()
    assert case["isCompleted"] is True
    assert case["isVisible"] is True
    assert case["finalDiagnosis"] == "Acute asthma"
    assert case["examinationResults"] == EXAMINATION_RESULTS
    assert case["feedback"]["whatCouldBeImproved"] == ["Ask about previous admissions"]
    assert case["feedback"]["missedOpportunities"][0]["opportunity"] == "Smoking history"
    assert case["feedback"]["clinicalTip"] == "Silent chest is an emergency"
    assert case["report"]["clinicalPearls"] == "- Silent chest is an emergency"
    assert [m["sender"] for m in case["messages"]] == ["system", "student", "patient"]
    summary = case["clinicalSummary"]
    assert "presented with tightness in my chest" in summary
    assert "vital signs showed Respiratory Rate 28 breaths/min" in summary
    assert "Widespread expiratory wheeze" in summary
    assert "Investigations revealed Peak flow 210 L/min" in summary
    assert "A diagnosis of Asthma was made." in summary


def test_complete_case_falls_back_when_feedback_fails(client, model_client):
    def handler(prompt: str):
        if prompt.startswith("Provide comprehensive clinical feedback"):
            return NetworkError("fetch failed")
        return _completion_handler(prompt)

    model_client.handler = handler
    _create_case(client)

    response = client.post("/api/cases/1/complete", json=_complete_payload())

    assert response.status_code == 200
    feedback = response.json()["feedback"]
    assert feedback["diagnosis"] == "Asthma"
    assert feedback["clinicalReasoning"] == "Feedback could not be generated for this case."


def test_complete_case_validation_and_conflict(client, model_client):
    model_client.handler = _completion_handler
    _create_case(client)

    missing = client.post("/api/cases/1/complete", json={"finalDiagnosis": "Asthma"})
    assert missing.status_code == 400
    assert missing.json() == {"error": "Final diagnosis and management plan are required"}

    assert client.post("/api/cases/1/complete", json=_complete_payload()).status_code == 200
    again = client.post("/api/cases/1/complete", json=_complete_payload())
    late_message = client.post(
        "/api/cases/1/messages",
        json={"messages": [{"sender": "student", "text": "One more thing"}]},
    )

    assert again.status_code == 409
    assert again.json() == {"error": "Case is already completed"}
    assert late_message.status_code == 409


def test_visibility_only_for_completed_cases(client, model_client):
    model_client.handler = _completion_handler
    _create_case(client)

    before = client.patch("/api/cases/1/visibility", json={"isVisible": True})
    assert before.status_code == 404
    assert before.json() == {"error": "Case not found or not completed"}

    client.post("/api/cases/1/complete", json=_complete_payload(makeVisible=False))
    missing_flag = client.patch("/api/cases/1/visibility", json={})
    shown = client.patch("/api/cases/1/visibility", json={"isVisible": True})

    assert missing_flag.status_code == 400
    assert shown.status_code == 200
    assert shown.json()["isVisible"] is True
    assert shown.json()["isCompleted"] is True


def test_get_unknown_case_is_404(client):
    response = client.get("/api/cases/42")

    assert response.status_code == 404
    assert response.json() == {"error": "Case not found"}


def test_save_case_state_mid_case(client):
    _create_case(client)

    response = client.patch(
        "/api/cases/1/state",
        json={
            "preliminaryDiagnosis": "Asthma exacerbation",
            "examinationPlan": "Respiratory examination",
            "examinationResults": EXAMINATION_RESULTS,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["preliminaryDiagnosis"] == "Asthma exacerbation"
    assert body["examinationResults"] == EXAMINATION_RESULTS
    assert body["isCompleted"] is False
    saved = client.get("/api/cases/1").json()
    assert saved["examinationPlan"] == "Respiratory examination"
    assert saved["investigationPlan"] is None


def test_save_case_state_validation(client, model_client):
    model_client.handler = _completion_handler
    _create_case(client)

    empty = client.patch("/api/cases/1/state", json={})
    unknown = client.patch("/api/cases/42/state", json={"examinationPlan": "Chest exam"})
    client.post("/api/cases/1/complete", json=_complete_payload())
    completed = client.patch("/api/cases/1/state", json={"examinationPlan": "Chest exam"})

    assert empty.status_code == 400
    assert empty.json() == {"error": "No case state provided"}
    assert unknown.status_code == 404
    assert completed.status_code == 409
    assert completed.json() == {"error": "Case is already completed"}
