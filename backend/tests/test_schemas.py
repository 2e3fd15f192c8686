from datetime import datetime, timezone
from types import SimpleNamespace

from app.schemas.ai import CaseDetails, CaseState, PatientReply
from app.schemas.cases import CaseCompleteRequest, CaseSummaryResponse
from app.schemas.users import UserUpsert


def test_case_details_accept_camel_case_and_extra_keys():
    details = CaseDetails.model_validate(
        {
            "diagnosis": "Gout",
            "primaryInfo": "## BIODATA",
            "openingLine": "My toe is on fire.",
            "patientProfile": {"age": 58, "healthLiteracy": "average"},
            "bucket": "Endocrine/Metabolic",
        }
    )

    assert details.primary_info == "## BIODATA"
    assert details.patient_profile.health_literacy == "average"
    assert details.model_dump(by_alias=True, exclude_none=True)["bucket"] == "Endocrine/Metabolic"


def test_case_state_defaults_are_empty():
    state = CaseState()

    assert state.messages == []
    assert state.examination_results == []
    assert state.model_dump(by_alias=True, exclude_none=True) == {
        "messages": [],
        "examinationResults": [],
        "investigationResults": [],
    }


def test_snake_case_names_are_also_accepted():
    payload = UserUpsert(email="ada@example.com", country="NG")
    request = CaseCompleteRequest(final_diagnosis="Gout", make_visible=True)

    assert payload.country == "NG"
    assert request.final_diagnosis == "Gout"
    assert request.model_dump(by_alias=True)["makeVisible"] is True


def test_case_summary_reads_department_name_from_relationship():
    now = datetime.now(timezone.utc)
    case = SimpleNamespace(
        id=3,
        department=SimpleNamespace(name="Surgery"),
        diagnosis="Appendicitis",
        difficulty_level="standard",
        is_pediatric=False,
        is_completed=True,
        is_visible=False,
        created_at=now,
        completed_at=now,
    )

    summary = CaseSummaryResponse.model_validate(case)

    assert summary.department == "Surgery"
    assert summary.model_dump(by_alias=True)["difficultyLevel"] == "standard"


def test_patient_reply_defaults():
    reply = PatientReply(response="It hurts here.")

    assert reply.model_dump(by_alias=True) == {
        "response": "It hurts here.",
        "sender": "patient",
        "speakerLabel": "",
    }
