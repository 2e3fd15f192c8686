"""Prompts and input checks for practice cases built around a chosen condition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from app.services.ai.prompts.case_generation import (
    LOCATION_CONTEXTS,
    get_difficulty_prompt,
)

InputType = Literal["diagnosis", "custom"]

MAX_CUSTOM_CASE_LENGTH = 2000

_DIAGNOSIS_TERMS = (
    "infarction", "pneumonia", "eclampsia", "appendicitis", "ketoacidosis",
    "sepsis", "meningitis", "arthritis", "diabetes", "hypertension",
    "cancer", "tumor", "fracture", "trauma", "infection", "disease",
    "syndrome", "disorder", "failure", "shock", "embolism", "thrombosis",
)

_CUSTOM_CASE_INDICATORS = (
    "year-old", "male", "female", "patient", "presenting", "complaining",
    "symptoms", "history", "pain", "fever", "shortness", "breath",
    "headache", "nausea", "vomiting", "diarrhea", "constipation",
)

_MEDICAL_CONTENT_TERMS = (
    "pain", "fever", "shortness", "breath", "headache", "nausea", "vomiting",
    "diarrhea", "constipation", "cough", "sore throat", "rash", "swelling",
    "bleeding", "dizziness", "fatigue", "weakness", "numbness", "tingling",
    "chest", "abdominal", "back", "joint", "muscle", "bone", "heart",
    "lung", "liver", "kidney", "brain", "blood", "infection", "injury",
)

INAPPROPRIATE_TERMS = (
    "kill", "suicide", "self-harm", "abuse", "illegal", "drugs",
    "weapon", "violence", "hate", "discrimination",
)

_SECTIONS = """    - ## BIODATA
    - ## Presenting Complaint
    - ## History of Presenting Complaint
    - ## Past Medical and Surgical History
    - ## Drug History
    - ## Family History
    - ## Social History
    - ## Review of Systems"""


@dataclass(frozen=True)
class InputCheck:
    is_valid: bool
    error: Optional[str] = None
    suggestion: Optional[str] = None


def detect_input_type(condition: str) -> InputType:
    """Decide whether the student typed a diagnosis or a case description."""
    text = condition.strip().lower()
    if len(text) < 100 and any(term in text for term in _DIAGNOSIS_TERMS):
        return "diagnosis"
    if len(text) >= 100 or any(term in text for term in _CUSTOM_CASE_INDICATORS):
        return "custom"
    return "diagnosis"


def validate_custom_case_input(condition: str) -> InputCheck:
    text = condition.strip()
    lowered = text.lower()
    if len(text) > MAX_CUSTOM_CASE_LENGTH:
        return InputCheck(
            False,
            "Case description is too long",
            f"Please keep your description under {MAX_CUSTOM_CASE_LENGTH} characters. "
            "Focus on the most relevant medical details.",
        )
    if not any(term in lowered for term in _MEDICAL_CONTENT_TERMS):
        return InputCheck(
            False,
            "Missing medical content",
            "Please include medical symptoms, conditions, or patient details relevant to clinical practice.",
        )
    if any(term in lowered for term in INAPPROPRIATE_TERMS):
        return InputCheck(
            False,
            "Inappropriate content detected",
            "Please focus on standard medical scenarios suitable for educational practice.",
        )
    return InputCheck(True)


def validate_generated_case(case: dict) -> InputCheck:
    """Sanity-check a generated practice case before it reaches the student."""
    diagnosis = case.get("diagnosis")
    if not diagnosis or not case.get("primaryInfo") or not case.get("openingLine"):
        return InputCheck(False, "Generated case is missing required information")
    text = f"{diagnosis} {case['primaryInfo']} {case['openingLine']}".lower()
    if any(term in text for term in (*INAPPROPRIATE_TERMS, "inappropriate")):
        return InputCheck(False, "Generated case contains inappropriate content")
    if not 3 <= len(str(diagnosis)) <= 100:
        return InputCheck(False, "Generated diagnosis is invalid")
    return InputCheck(True)


def _practice_location_prompt(user_country: Optional[str]) -> str:
    if not user_country:
        return "Use culturally diverse names and consider common global disease patterns."
    return f"""LOCATION: {user_country}

CULTURAL CONSIDERATIONS:
- Use culturally authentic names and contexts appropriate to {user_country}
- Consider local healthcare systems and communication styles
- Reflect diverse socioeconomic and cultural backgrounds within the region
- Maintain cultural sensitivity while avoiding stereotypes

LOCATION-SPECIFIC CONTEXT: {LOCATION_CONTEXTS.get(user_country, "local cultural context")}"""


def practice_case_prompt(
    department_name: str,
    condition: str,
    input_type: InputType,
    user_country: Optional[str] = None,
    difficulty: str = "standard",
) -> str:
    location_prompt = _practice_location_prompt(user_country)
    difficulty_prompt = get_difficulty_prompt(difficulty)
    difficulty_block = f"\n\n{difficulty_prompt}" if difficulty_prompt else ""
    output_rule = (
        "The output MUST be a single, perfectly valid JSON object with this exact structure: "
        '{"diagnosis": string, "primaryInfo": string, "openingLine": string}.'
    )

    if input_type == "diagnosis":
        return f"""Generate a realistic and challenging clinical case for a medical student simulation in the '{department_name}' department.

{location_prompt}

MANDATORY DIAGNOSIS REQUIREMENT:
- You MUST generate a case for exactly: "{condition}"
- The "diagnosis" field in your JSON response MUST be "{condition}" or a very close variation
- The entire case history must support the diagnosis of "{condition}"

CASE REQUIREMENTS:
- The case should be solvable by a medical student
- Balance regional authenticity with educational value
- Create a realistic presentation of "{condition}"{difficulty_block}

{output_rule}

- "diagnosis": MUST be "{condition}" or a very close variation
- "primaryInfo": A detailed clinical history string with markdown headings. It MUST include:
{_SECTIONS}
- "openingLine": A natural, first-person statement from the patient that initiates the consultation."""

    return f"""Generate a structured clinical case based on the following custom case description for a medical student simulation in the '{department_name}' department.

{location_prompt}

CUSTOM CASE DESCRIPTION:
"{condition}"

MANDATORY CONTEXT PRESERVATION REQUIREMENTS:
- Use the provided case description as the EXACT foundation
- ALL key symptoms, conditions, and medical details from the description MUST be included
- Do NOT change the core medical scenario or add unrelated conditions

CASE STRUCTURE REQUIREMENTS:
- Expand the description into a complete clinical scenario solvable by a medical student
- Create a realistic and challenging presentation{difficulty_block}

{output_rule}

- "diagnosis": The most likely diagnosis based on the provided description
- "primaryInfo": A detailed clinical history string with markdown headings. It MUST include:
{_SECTIONS}
- "openingLine": A natural, first-person statement from the patient that initiates the consultation."""


def practice_retry_prompt(original_prompt: str) -> str:
    return original_prompt + (
        "\n\nIMPORTANT: The previous attempt failed validation. Please ensure:\n"
        "- All required sections are present in primaryInfo\n"
        "- The case is clinically appropriate and educational\n"
        "- No inappropriate content is included"
    )
