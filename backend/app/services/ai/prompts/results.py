"""Prompts for examination and investigation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

_EXAMINATION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "general": ("general examination", "general exam", "basic examination", "vital signs", "general appearance"),
    "cardiovascular": ("cardiovascular", "cardiac", "heart", "cv examination", "cv exam"),
    "respiratory": ("respiratory", "chest", "lung"),
    "abdominal": ("abdominal", "abdomen", "gastrointestinal", "gi"),
    "neurological": ("neurological", "neurology", "neuro"),
    "musculoskeletal": ("musculoskeletal", "msk", "orthopedic", "joint"),
}

_OTHER_SYSTEMS = (
    "obstetric", "gynecological", "dermatological", "psychiatric",
    "ophthalmological", "ent", "ear nose throat",
)

_SCOPE_LABELS = {
    "general": "General examination (vital signs + general appearance)",
    "cardiovascular": "Cardiovascular examination",
    "respiratory": "Respiratory examination",
    "abdominal": "Abdominal examination",
    "neurological": "Neurological examination",
    "musculoskeletal": "Musculoskeletal examination",
}


@dataclass
class ExaminationScope:
    systems: list[str] = field(default_factory=list)
    other_systems: list[str] = field(default_factory=list)


def parse_examination_scope(plan: str) -> ExaminationScope:
    """Work out which systems the student actually asked to examine.

    Matching is plain substring search, so short keywords such as ``gi``
    can fire inside longer words. A plan naming nothing recognisable is
    treated as a general examination.
    """
    plan_lower = plan.lower()
    scope = ExaminationScope()
    for system, keywords in _EXAMINATION_KEYWORDS.items():
        if any(keyword in plan_lower for keyword in keywords):
            scope.systems.append(system)
    scope.other_systems = [kw for kw in _OTHER_SYSTEMS if kw in plan_lower]
    if not scope.systems and not scope.other_systems:
        scope.systems.append("general")
    return scope


def describe_examination_scope(scope: ExaminationScope) -> str:
    instructions = [_SCOPE_LABELS[system] for system in scope.systems]
    if scope.other_systems:
        instructions.append(f"Other systems: {', '.join(scope.other_systems)}")
    return ", ".join(instructions)


def build_patient_context(case_details: dict[str, Any]) -> str:
    profile = case_details.get("patientProfile") or {}
    age = profile.get("age") or "unknown age"
    gender = profile.get("gender") or "patient"
    complaint = profile.get("presentingComplaint") or "various symptoms"
    return f"Patient: {age} year old {gender}. Presenting symptoms: {complaint}."


def pediatric_age(case_details: dict[str, Any]) -> tuple[Optional[int], Optional[str]]:
    profile = case_details.get("pediatricProfile")
    if not case_details.get("isPediatric") or not profile:
        return None, None
    return profile.get("patientAge"), profile.get("ageGroup")


def get_age_specific_ranges(age: float, age_group: str) -> str:
    lines = [f"\nAGE-SPECIFIC REFERENCE RANGES ({age_group}):"]

    if age <= 1:
        lines += [
            "- Heart Rate: 120-160 bpm (normal for infants)",
            "- Blood Pressure: 70-90/50-65 mmHg (normal for infants)",
            "- Respiratory Rate: 30-60 breaths/min (normal for infants)",
            "- Temperature: 36.5-37.5°C (slightly higher normal range)",
        ]
    elif age <= 3:
        lines += [
            "- Heart Rate: 100-140 bpm (normal for toddlers)",
            "- Blood Pressure: 80-110/55-75 mmHg (normal for toddlers)",
            "- Respiratory Rate: 24-40 breaths/min (normal for toddlers)",
            "- Temperature: 36.5-37.5°C",
        ]
    elif age <= 6:
        lines += [
            "- Heart Rate: 80-120 bpm (normal for preschoolers)",
            "- Blood Pressure: 85-115/55-75 mmHg (normal for preschoolers)",
            "- Respiratory Rate: 20-30 breaths/min (normal for preschoolers)",
            "- Temperature: 36.5-37.5°C",
        ]
    elif age <= 12:
        lines += [
            "- Heart Rate: 70-110 bpm (normal for school-age children)",
            "- Blood Pressure: 90-120/60-80 mmHg (normal for school-age children)",
            "- Respiratory Rate: 18-25 breaths/min (normal for school-age children)",
            "- Temperature: 36.5-37.5°C",
        ]
    else:
        lines += [
            "- Heart Rate: 60-100 bpm (approaching adult ranges)",
            "- Blood Pressure: 95-125/65-85 mmHg (approaching adult ranges)",
            "- Respiratory Rate: 16-20 breaths/min (approaching adult ranges)",
            "- Temperature: 36.5-37.5°C",
        ]

    if age <= 1:
        lines += [
            "- Hemoglobin: 10-14 g/dL (lower normal range for infants)",
            "- WBC: 6-17.5 x10^9/L (higher normal range for infants)",
            "- Creatinine: 0.2-0.4 mg/dL (lower normal range for infants)",
        ]
    elif age <= 6:
        lines += [
            "- Hemoglobin: 11-14 g/dL (normal for young children)",
            "- WBC: 5-15.5 x10^9/L (normal for young children)",
            "- Creatinine: 0.3-0.7 mg/dL (normal for young children)",
        ]
    elif age <= 12:
        lines += [
            "- Hemoglobin: 11.5-15.5 g/dL (approaching adult ranges)",
            "- WBC: 4.5-13.5 x10^9/L (approaching adult ranges)",
            "- Creatinine: 0.4-0.9 mg/dL (approaching adult ranges)",
        ]
    else:
        lines += [
            "- Hemoglobin: 12-16 g/dL (adult ranges)",
            "- WBC: 4-11 x10^9/L (adult ranges)",
            "- Creatinine: 0.5-1.2 mg/dL (adult ranges)",
        ]
    return "\n".join(lines) + "\n"


def investigation_results_prompt(
    plan: str,
    patient_context: str,
    patient_age: Optional[float] = None,
    age_group: Optional[str] = None,
) -> str:
    age_line = f"PATIENT AGE: {patient_age} years old ({age_group})" if patient_age else ""
    ranges = get_age_specific_ranges(patient_age, age_group or "") if patient_age and age_group else ""
    pediatric_rule = "\n- Use age-appropriate reference ranges for pediatric patients" if patient_age else ""

    return f"""Generate investigation results for a patient based on their presenting symptoms and clinical context.
PATIENT CONTEXT: {patient_context}
{age_line}
{ranges}

Return JSON array with two formats:

QUANTITATIVE: {{"name": string, "type": "quantitative", "category": "laboratory"|"specialized", "urgency": "routine"|"urgent"|"critical", "value": number, "unit": string, "range": {{"low": number, "high": number}}, "status": "Normal"|"High"|"Low"|"Critical"}}

DESCRIPTIVE: {{"name": string, "type": "descriptive", "category": "imaging"|"pathology"|"specialized", "urgency": "routine"|"urgent"|"critical", "findings": string, "impression": string, "recommendation": string, "abnormalFlags": string[], "reportType": "radiology"|"pathology"|"ecg"|"echo"|"specialist"}}

GUIDELINES:
- Generate medically plausible results based on patient's presenting symptoms
- Results should be consistent with the patient's condition but not reveal the diagnosis
- FBC: Hemoglobin, PCV, WBC, Platelets (quantitative)
  * PCV range: 36-46% (females), 40-50% (males)
  * Hemoglobin range: 12-16 g/dL (females), 13-17 g/dL (males)
- U&E: Sodium, Potassium, Urea, Creatinine (quantitative)
- LFT: Bilirubin, ALT, AST (quantitative)
- Imaging: Detailed reports with findings and impressions
- ECGs: Professional interpretation with rhythm, axis, intervals
- Echo: Structured cardiac findings with measurements
- Include ALL requested tests
- Make some results abnormal if consistent with presenting symptoms
- Use professional medical terminology{pediatric_rule}

OUTPUT: {{"results": [...]}}

Plan: "{plan}\""""


def examination_results_prompt(plan: str, patient_context: str) -> str:
    scope = describe_examination_scope(parse_examination_scope(plan))

    return f"""Generate examination results for a patient based on their presenting symptoms and clinical context.
PATIENT CONTEXT: {patient_context}
EXAMINATION SCOPE: {scope}

Return consolidated examination reports as JSON array:

QUANTITATIVE: {{"name": string, "type": "quantitative", "category": "vital_signs"|"system_examination"|"special_tests", "urgency": "routine"|"urgent"|"critical", "value": number, "unit": string, "range": {{"low": number, "high": number}}, "status": "Normal"|"High"|"Low"|"Critical"}}

DESCRIPTIVE: {{"name": string, "type": "descriptive", "category": "vital_signs"|"system_examination"|"special_tests", "urgency": "routine"|"urgent"|"critical", "findings": string, "impression": string, "recommendation": string, "abnormalFlags": string[], "reportType": "cardiovascular"|"respiratory"|"abdominal"|"neurological"|"musculoskeletal"|"general"|"obstetric"|"pediatric"}}

GUIDELINES:
- Generate realistic examination findings based on patient's presenting symptoms
- DO NOT reveal the underlying diagnosis - only provide findings that could be elicited through physical examination
- Each examination type = ONE comprehensive report
- Include inspection, palpation, percussion, auscultation in ONE report
- ALWAYS generate vital signs as separate quantitative results (if general examination is included):
  * BP: systolic/diastolic (120/80 mmHg, range 90-140/60-90)
  * HR: bpm (72 bpm, range 60-100)
  * Temp: Celsius (37.2°C, range 36.5-37.5)
  * RR: bpm (16 bpm, range 12-20)
  * O2 Sat: % (98%, range 95-100)
- Make some vital signs abnormal if consistent with presenting symptoms
- Consider patient age, gender, and presenting symptoms

CRITICAL SCOPE RULES:
- ONLY provide results for examinations that were actually requested
- If student only requested "general examination", provide ONLY vital signs and general appearance
- DO NOT provide findings for systems that were not examined
- DO NOT assume examinations were done if not explicitly requested
- "full examination" or "complete examination" → ALL systems

REALISTIC EXAMINATION RULES:
- DO NOT include findings that would require imaging, lab tests, or other investigations
- DO NOT mention specific diagnoses in the findings
- DO NOT include pathognomonic signs unless they are subtle and require careful examination
- Include both normal and abnormal findings as appropriate

OUTPUT: {{"results": [...]}}

Plan: "{plan}\""""
