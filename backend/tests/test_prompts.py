import pytest

from app.services.ai.prompts import (
    build_patient_context,
    department_flags,
    examination_results_prompt,
    format_transcript,
    generate_case_prompt,
    investigation_results_prompt,
    parse_examination_scope,
    pediatric_age,
    surgical_teaching_context,
)
from app.services.ai.prompts.practice import (
    MAX_CUSTOM_CASE_LENGTH,
    detect_input_type,
    practice_case_prompt,
    validate_custom_case_input,
    validate_generated_case,
)
from app.services.ai.prompts.results import describe_examination_scope

TIME_CONTEXT = "\nTEMPORAL CONTEXT:\nCurrent Date: Monday, March 2, 2026\n"


def test_department_flags():
    cardiothoracic = department_flags("Cardiothoracic Surgery")
    general = department_flags("General Surgery")
    pediatrics = department_flags("Pediatrics")

    assert cardiothoracic.is_surgical and cardiothoracic.is_cardiothoracic
    assert not cardiothoracic.is_general_surgery
    assert general.is_general_surgery
    assert pediatrics.is_pediatric and not pediatrics.is_surgical


def test_adult_case_prompt():
    prompt = generate_case_prompt("Internal Medicine", "Vascular", TIME_CONTEXT)

    assert "**'Internal Medicine'**" in prompt
    assert '**"Vascular"** pathophysiology category' in prompt
    assert "Current Date: Monday, March 2, 2026" in prompt
    assert '"patientProfile"' in prompt
    assert '"pediatricProfile"' not in prompt
    assert "SURGICAL CASE REQUIREMENTS" not in prompt
    assert "DIFFICULTY REQUIREMENTS" not in prompt
    assert "Use culturally diverse names" in prompt


def test_pediatric_case_prompt():
    prompt = generate_case_prompt("Pediatric Cardiology", "Congenital", TIME_CONTEXT)

    assert "PEDIATRIC CASE REQUIREMENTS" in prompt
    assert '"pediatricProfile"' in prompt
    assert "## Developmental History" in prompt
    assert "## BIODATA (child age, parent)" in prompt
    assert "from parent/child" in prompt


def test_surgical_case_prompt_with_options():
    prompt = generate_case_prompt(
        "Cardiothoracic Surgery",
        "Trauma/Mechanical",
        TIME_CONTEXT,
        user_country="Nigeria",
        difficulty="difficult",
        specific_diagnosis="Tension pneumothorax",
        specific_patient_profile="A 30-year-old motorcyclist",
    )

    assert "SURGICAL CASE REQUIREMENTS" in prompt
    assert "For cardiothoracic" in prompt
    assert "DIFFICULT DIFFICULTY REQUIREMENTS" in prompt
    assert "LOCATION: Nigeria" in prompt
    assert "Diverse ethnic groups, tropical diseases" in prompt
    assert 'the diagnosis must be: "Tension pneumothorax"' in prompt
    assert 'the patient profile must be: "A 30-year-old motorcyclist"' in prompt
    assert "Aortic Aneurysm, CAD" in prompt
    assert "Fractures, Head Trauma, Bowel Obstruction" in prompt


@pytest.mark.parametrize(
    ("condition", "expected"),
    [
        ("Pneumonia", "diagnosis"),
        ("Diabetic ketoacidosis", "diagnosis"),
        ("Kawasaki", "diagnosis"),
        ("45 year-old male with crushing chest pain", "custom"),
        ("x" * 100, "custom"),
        ("Acute appendicitis in a patient", "diagnosis"),
    ],
)
def test_detect_input_type(condition, expected):
    assert detect_input_type(condition) == expected


def test_custom_input_validation():
    assert validate_custom_case_input("A woman with chest pain and fever").is_valid

    too_long = validate_custom_case_input("chest pain " * (MAX_CUSTOM_CASE_LENGTH // 10))
    assert not too_long.is_valid
    assert too_long.error == "Case description is too long"

    no_medical = validate_custom_case_input("A patient who feels tired and sleeps a lot")
    assert no_medical.error == "Missing medical content"
    assert no_medical.suggestion

    inappropriate = validate_custom_case_input("Chest pain after taking illegal drugs")
    assert inappropriate.error == "Inappropriate content detected"


def test_generated_case_validation():
    valid = {"diagnosis": "Asthma", "primaryInfo": "## BIODATA", "openingLine": "I can't breathe"}

    assert validate_generated_case(valid).is_valid
    assert (
        validate_generated_case({**valid, "openingLine": ""}).error
        == "Generated case is missing required information"
    )
    assert (
        validate_generated_case({**valid, "primaryInfo": "History of violence"}).error
        == "Generated case contains inappropriate content"
    )
    assert validate_generated_case({**valid, "diagnosis": "MI"}).error == "Generated diagnosis is invalid"


def test_practice_prompt_variants():
    diagnosis_prompt = practice_case_prompt("Obstetrics", "Pre-eclampsia", "diagnosis")
    custom_prompt = practice_case_prompt(
        "Obstetrics", "A pregnant woman with headache", "custom", "India", "intermediate"
    )

    assert 'You MUST generate a case for exactly: "Pre-eclampsia"' in diagnosis_prompt
    assert "CUSTOM CASE DESCRIPTION" not in diagnosis_prompt
    assert 'CUSTOM CASE DESCRIPTION:\n"A pregnant woman with headache"' in custom_prompt
    assert "LOCATION: India" in custom_prompt
    assert "INTERMEDIATE DIFFICULTY REQUIREMENTS" in custom_prompt


def test_examination_scope_matches_requested_systems():
    scope = parse_examination_scope("Cardiovascular and respiratory exam")

    assert scope.systems == ["cardiovascular", "respiratory"]
    assert scope.other_systems == []
    assert describe_examination_scope(scope) == (
        "Cardiovascular examination, Respiratory examination"
    )


def test_examination_scope_defaults_to_general():
    scope = parse_examination_scope("Examine them")

    assert scope.systems == ["general"]


def test_examination_scope_other_systems():
    scope = parse_examination_scope("Psychiatric review")

    assert scope.systems == []
    assert scope.other_systems == ["psychiatric"]
    assert describe_examination_scope(scope) == "Other systems: psychiatric"


def test_patient_context_from_profile():
    details = {"patientProfile": {"age": 54, "gender": "female", "presentingComplaint": "cough"}}

    assert build_patient_context(details) == (
        "Patient: 54 year old female. Presenting symptoms: cough."
    )
    assert build_patient_context({}) == (
        "Patient: unknown age year old patient. Presenting symptoms: various symptoms."
    )


def test_pediatric_age_only_for_pediatric_cases():
    profile = {"patientAge": 2, "ageGroup": "toddler"}

    assert pediatric_age({"isPediatric": True, "pediatricProfile": profile}) == (2, "toddler")
    assert pediatric_age({"isPediatric": False, "pediatricProfile": profile}) == (None, None)
    assert pediatric_age({"isPediatric": True}) == (None, None)


def test_investigation_prompt_adds_pediatric_ranges():
    prompt = investigation_results_prompt("FBC", "Patient: child", 2, "toddler")
    adult = investigation_results_prompt("FBC, U&E", "Patient: adult")

    assert "PATIENT AGE: 2 years old (toddler)" in prompt
    assert "AGE-SPECIFIC REFERENCE RANGES (toddler)" in prompt
    assert "100-140 bpm" in prompt
    assert "Use age-appropriate reference ranges" in prompt
    assert "AGE-SPECIFIC" not in adult
    assert adult.endswith('Plan: "FBC, U&E"')
    assert 'OUTPUT: {"results": [...]}' in adult


def test_examination_prompt_includes_scope():
    prompt = examination_results_prompt("Abdominal exam", "Patient: adult")

    assert "EXAMINATION SCOPE: Abdominal examination" in prompt
    assert 'Plan: "Abdominal exam"' in prompt


def test_format_transcript_drops_system_messages():
    history = [
        {"sender": "system", "text": "The patient is here today"},
        {"sender": "student", "text": "What brings you in?"},
        {"sender": "parent", "text": "She has had a fever."},
        {"sender": "patient", "text": "My ear hurts."},
    ]

    assert format_transcript(history) == (
        "STUDENT: What brings you in?\n\nPARENT: She has had a fever.\n\nPATIENT: My ear hurts."
    )


def test_surgical_teaching_context():
    assert surgical_teaching_context("Internal Medicine") == ""
    assert surgical_teaching_context(None) == ""

    general = surgical_teaching_context("General Surgery")
    assert general.startswith("SURGICAL TEACHING FOCUS:")
    assert "abdominal examination" in general
    assert "cardiothoracic" not in general
