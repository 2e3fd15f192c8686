import json

from app.services.ai.errors import (
    AUTH_FAILURE_MESSAGE,
    QUOTA_EXCEEDED_MESSAGE,
    QuotaExceededError,
)

CASE_JSON = {
    "diagnosis": "Asthma",
    "primaryInfo": "## BIODATA\nAmaka, 19, student.",
    "openingLine": "I can't catch my breath.",
    "patientProfile": {"age": 19, "gender": "female", "presentingComplaint": "wheeze"},
}

CASE_STATE = {
    "department": "Internal Medicine",
    "caseDetails": {"diagnosis": "Asthma", "primaryInfo": "## BIODATA", "openingLine": "Help"},
    "messages": [{"sender": "student", "text": "Any wheeze?"}],
    "finalDiagnosis": "Asthma",
    "managementPlan": "Salbutamol",
}


def test_generate_case_returns_parsed_case(client, model_client):
    model_client.responses = ["```json\n" + json.dumps(CASE_JSON) + "\n```"]

    response = client.post(
        "/api/ai/generate-case",
        json={"departmentName": "Internal Medicine", "userCountry": "GB"},
    )

    assert response.status_code == 200
    assert response.json()["diagnosis"] == "Asthma"
    prompt = model_client.prompts[0]
    assert "**'Internal Medicine'**" in prompt
    assert "Current Date: Monday, March 2, 2026" in prompt
    assert "Timezone: Europe/London" in prompt


def test_generate_case_requires_department(client, model_client):
    response = client.post("/api/ai/generate-case", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Department name is required"}
    assert model_client.prompts == []


def test_patient_profile_requires_fields(client):
    response = client.post("/api/ai/patient-profile", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Diagnosis and department name are required"}


def test_patient_profile_uses_given_seed(client, model_client):
    profile = {
        "educationLevel": "basic",
        "healthLiteracy": "minimal",
        "occupation": "Trader",
        "recordKeeping": "minimal",
    }
    model_client.responses = [json.dumps(profile)]

    response = client.post(
        "/api/ai/patient-profile",
        json={"diagnosis": "Gout", "departmentName": "Internal Medicine", "randomSeed": 4321},
    )

    assert response.status_code == 200
    assert response.json() == profile
    assert "RANDOM SEED: 4321" in model_client.prompts[0]


def test_untagged_auth_failure_maps_to_401(client, model_client):
    model_client.responses = [Exception("403 authentication failed")]

    response = client.post(
        "/api/ai/patient-profile",
        json={"diagnosis": "Gout", "departmentName": "Internal Medicine"},
    )

    assert response.status_code == 401
    assert response.json() == {"error": AUTH_FAILURE_MESSAGE}


def test_quota_failure_maps_to_429(client, model_client):
    model_client.responses = [QuotaExceededError("quota exceeded")]

    response = client.post("/api/ai/feedback", json={"caseState": CASE_STATE})

    assert response.status_code == 429
    assert response.json() == {"error": QUOTA_EXCEEDED_MESSAGE}


def test_malformed_model_json_maps_to_500(client, model_client):
    model_client.responses = ["{not json"]

    response = client.post("/api/ai/generate-case", json={"departmentName": "Surgery"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "The AI returned malformed JSON for case generation. Please try again."
    }


def test_invalid_request_body_is_400(client):
    response = client.post(
        "/api/ai/generate-case",
        content="this is not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request format"}


def test_practice_case_rejects_inappropriate_custom_input(client, model_client):
    response = client.post(
        "/api/ai/practice-case",
        json={
            "departmentName": "Internal Medicine",
            "condition": "Chest pain after taking illegal drugs",
        },
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Inappropriate content detected"
    assert "suggestion" in body
    assert model_client.prompts == []


def test_practice_case_returns_case(client, model_client):
    model_client.responses = [json.dumps(CASE_JSON)]

    response = client.post(
        "/api/ai/practice-case",
        json={"departmentName": "Internal Medicine", "condition": "Asthma exacerbation"},
    )

    assert response.status_code == 200
    assert response.json()["openingLine"] == "I can't catch my breath."


def test_investigation_results_returns_list(client, model_client):
    results = [{"name": "Peak flow", "type": "quantitative", "value": 210, "unit": "L/min"}]
    model_client.responses = [json.dumps({"results": results})]

    response = client.post(
        "/api/ai/investigation-results",
        json={"plan": "Peak flow", "caseDetails": CASE_JSON},
    )

    assert response.status_code == 200
    assert response.json() == results
    assert "Patient: 19 year old female. Presenting symptoms: wheeze." in model_client.prompts[0]


def test_examination_results_require_plan(client):
    response = client.post("/api/ai/examination-results", json={"caseDetails": CASE_JSON})

    assert response.status_code == 400
    assert response.json() == {"error": "Plan and case details are required"}


def test_patient_response_requires_history(client):
    response = client.post("/api/ai/patient-response", json={"caseDetails": CASE_JSON})

    assert response.status_code == 400
    assert response.json() == {"error": "History and case details are required"}


def test_patient_response_for_adult(client, model_client):
    model_client.responses = ["Only when I climb stairs."]

    response = client.post(
        "/api/ai/patient-response",
        json={
            "history": [{"sender": "student", "text": "Are you breathless?"}],
            "caseDetails": CASE_JSON,
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "messages": [
            {"response": "Only when I climb stairs.", "sender": "patient", "speakerLabel": ""}
        ]
    }


def test_patient_response_pediatric_flag_without_profile(client, model_client):
    model_client.responses = ["It hurts near my belly button."]

    response = client.post(
        "/api/ai/patient-response",
        json={
            "history": [{"sender": "student", "text": "Where is the pain?"}],
            "caseDetails": {**CASE_JSON, "isPediatric": True},
        },
    )

    assert response.status_code == 200
    assert response.json()["messages"][0]["response"] == "It hurts near my belly button."


def test_pediatric_reply_without_messages_is_500(client, model_client):
    model_client.responses = [json.dumps({"reply": "She is feeding poorly"})]
    details = {
        **CASE_JSON,
        "isPediatric": True,
        "pediatricProfile": {"patientAge": 1, "ageGroup": "infant", "respondingParent": "mother"},
    }

    response = client.post(
        "/api/ai/patient-response",
        json={"history": [{"sender": "student", "text": "Is she feeding?"}], "caseDetails": details},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "AI response is not a list of patient messages"}


def test_detailed_feedback_requires_case_state(client):
    response = client.post("/api/ai/detailed-feedback", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Case state is required"}


def test_comprehensive_feedback_requires_case_data(client):
    response = client.post(
        "/api/ai/comprehensive-feedback",
        json={"caseState": {"department": "Surgery"}},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required case data for comprehensive feedback"}


def test_detailed_feedback_missing_fields_is_500(client, model_client):
    model_client.responses = [json.dumps({"diagnosis": "Asthma"})]

    response = client.post("/api/ai/detailed-feedback", json={"caseState": CASE_STATE})

    assert response.status_code == 500
    assert response.json()["error"].startswith("AI response missing required fields:")


def test_feedback_prompt_carries_case_state(client, model_client):
    feedback = {
        "diagnosis": "Asthma",
        "keyLearningPoint": "Check inhaler technique",
        "whatYouDidWell": ["Asked about triggers"],
        "whatCouldBeImproved": ["Ask about night symptoms"],
        "clinicalTip": "Peak flow variability supports the diagnosis",
    }
    model_client.responses = [json.dumps(feedback)]

    response = client.post("/api/ai/feedback", json={"caseState": CASE_STATE})

    assert response.status_code == 200
    assert response.json() == feedback
    prompt = model_client.prompts[0]
    assert "Case: Internal Medicine" in prompt
    assert "Management Plan: Salbutamol" in prompt


def test_missing_model_client_is_503(client, test_app):
    test_app.state.model_client = None

    response = client.post("/api/ai/generate-case", json={"departmentName": "Surgery"})

    assert response.status_code == 503
    assert response.json() == {"error": "Model client is not configured"}
