"""Prompts for generating a new clinical case for a department."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

MEDICAL_BUCKETS = (
    "Vascular",
    "Infectious/Inflammatory",
    "Neoplastic",
    "Degenerative",
    "Idiopathic/Iatrogenic/Inherited",
    "Congenital",
    "Autoimmune",
    "Trauma/Mechanical",
    "Endocrine/Metabolic",
    "Psychiatric/Functional",
)

LOCATION_CONTEXTS = {
    "United States": "Diverse multicultural society, insurance-based healthcare",
    "United Kingdom": "NHS universal healthcare, British cultural norms",
    "Canada": "Multicultural society, universal healthcare, cold climate",
    "Australia": "Multicultural society, Medicare system, sun exposure risks",
    "India": "Diverse regional cultures, tropical climate, family-oriented",
    "Nigeria": "Diverse ethnic groups, tropical diseases, mixed healthcare approaches",
    "Germany": "Universal healthcare, strong social support, temperate climate",
    "France": "Social healthcare system, Mediterranean influences",
    "Japan": "Aging population, respectful cultural norms, modern lifestyle",
    "Brazil": "Diverse cultural heritage, tropical climate, socioeconomic diversity",
}

_INTERMEDIATE_REQUIREMENTS = """
INTERMEDIATE DIFFICULTY REQUIREMENTS:
- Include 1-2 relevant comorbidities
- Slightly atypical presentation of the primary diagnosis
- Some conflicting or unclear information
- Multiple possible diagnoses to consider
- Age-related factors affecting presentation
- Medication interactions or side effects
- Social factors influencing care
- Require more detailed history taking and examination
"""

_DIFFICULT_REQUIREMENTS = """
DIFFICULT DIFFICULTY REQUIREMENTS:
- Multiple comorbidities (3+ relevant conditions)
- Highly atypical presentation of the primary diagnosis
- Red herrings and confounding factors
- Complex social determinants of health
- Multiple organ system involvement
- Rare disease presentations or complications
- Complex medication interactions
- Cultural or language barriers
- Require comprehensive assessment and differential diagnosis
"""


@dataclass(frozen=True)
class DepartmentFlags:
    is_pediatric: bool
    is_surgical: bool
    is_cardiothoracic: bool
    is_general_surgery: bool


def department_flags(department_name: str) -> DepartmentFlags:
    name = department_name.lower()
    return DepartmentFlags(
        is_pediatric="pediatric" in name or "paediatric" in name,
        is_surgical="surgery" in name or "surgical" in name,
        is_cardiothoracic="cardiothoracic" in name or "cardiac" in name,
        is_general_surgery="general surgery" in name,
    )


def get_difficulty_prompt(difficulty: str) -> str:
    if difficulty == "intermediate":
        return _INTERMEDIATE_REQUIREMENTS
    if difficulty == "difficult":
        return _DIFFICULT_REQUIREMENTS
    return ""


def get_location_prompt(user_country: Optional[str]) -> str:
    if not user_country:
        return "Use culturally diverse names and consider common global disease patterns."
    context = LOCATION_CONTEXTS.get(user_country, "local cultural context")
    return f"""LOCATION: {user_country}
SPECIFIC LOCATION REQUIREMENTS:
- Generate a SPECIFIC city, neighborhood, and landmark for the patient
- Use REALISTIC local place names and addresses
- Include actual hospitals, clinics, or medical facilities in the area
- Consider local socioeconomic factors and cultural context
- Choose a REAL city within {user_country} (not generic descriptions)
- Generate a realistic state of origin or city of origin for the patient

AVOID GENERIC DESCRIPTIONS such as "I live in a suburban area of [city]".

LOCATION-SPECIFIC CONTEXT: {context}
CULTURAL CONSIDERATIONS: Use diverse culturally authentic names, consider local healthcare systems, regional factors, socioeconomic diversity"""


def get_surgical_prompt(is_surgical: bool, is_cardiothoracic: bool, is_general_surgery: bool) -> str:
    if not is_surgical:
        return ""
    lines = [
        "",
        "SURGICAL CASE REQUIREMENTS:",
        "- Focus on conditions requiring surgical intervention",
        "- Include surgical history and previous operations",
        "- Consider pre-operative assessment and risk factors",
        "- Mention surgical techniques and post-operative care",
    ]
    if is_cardiothoracic:
        lines.append(
            "- For cardiothoracic: cardiac/pulmonary function assessment, risk factors, "
            "ECG findings, cardiac imaging, surgical procedures, post-operative monitoring"
        )
    if is_general_surgery:
        lines.append(
            "- For general surgery: abdominal examination, common conditions (hernias, appendicitis), "
            "imaging findings, surgical approaches, post-operative care"
        )
    return "\n".join(lines) + "\n"


def get_pediatric_prompt(is_pediatric: bool) -> str:
    if not is_pediatric:
        return ""
    return """
PEDIATRIC CASE REQUIREMENTS:
- Include patient age (months for infants <2 years, years for older children)
- Specify accompanying parent (mother or father)
- Parent provides most history for young children; older children answer for themselves
- Include birth, developmental and immunisation history
- Use age-appropriate vital sign ranges and presentations
"""


def _output_schema(is_pediatric: bool) -> str:
    parent_profile = (
        '{"educationLevel": "basic"|"moderate"|"well-informed", '
        '"healthLiteracy": "minimal"|"average"|"high", "occupation": string, '
        '"recordKeeping": "detailed"|"basic"|"minimal"}'
    )
    if is_pediatric:
        return (
            '{"diagnosis": string, "primaryInfo": string, "openingLine": string, "isPediatric": true, '
            '"pediatricProfile": {"patientAge": number, "ageGroup": string, '
            '"respondingParent": "mother"|"father", '
            f'"parentProfile": {parent_profile}, '
            '"developmentalStage": string, "communicationLevel": string}}'
        )
    return (
        '{"diagnosis": string, "primaryInfo": string, "openingLine": string, '
        '"patientProfile": {"age": number, "gender": string, "presentingComplaint": string, '
        f'{parent_profile[1:]}}}'
    )


def generate_case_prompt(
    department_name: str,
    bucket: str,
    time_context: str,
    user_country: Optional[str] = None,
    difficulty: str = "standard",
    specific_diagnosis: Optional[str] = None,
    specific_patient_profile: Optional[str] = None,
) -> str:
    """Build the case-generation prompt for ``department_name``.

    ``bucket`` is the pathophysiology category the caller picked from
    ``MEDICAL_BUCKETS``; ``time_context`` is the formatted temporal block.
    """
    flags = department_flags(department_name)
    location_prompt = get_location_prompt(user_country)
    surgical_prompt = get_surgical_prompt(
        flags.is_surgical, flags.is_cardiothoracic, flags.is_general_surgery
    )
    pediatric_prompt = get_pediatric_prompt(flags.is_pediatric)
    difficulty_prompt = get_difficulty_prompt(difficulty)

    if specific_patient_profile:
        profile_rule = (
            f'**For this specific case, the patient profile must be: "{specific_patient_profile}".** '
            "This instruction overrides general diversity guidelines."
        )
    else:
        profile_rule = (
            "Aim for broad and realistic diversity, considering the LOCATION CONTEXT provided."
        )
    if specific_diagnosis:
        diagnosis_rule = (
            f'**For this specific case, the diagnosis must be: "{specific_diagnosis}".** '
            "This instruction overrides general diagnostic diversity guidelines."
        )
    else:
        diagnosis_rule = "Ensure diagnostic variety within the specified constraints."

    department_lower = department_name.lower()
    vascular_extra = ", Aortic Aneurysm, CAD" if "cardiothoracic" in department_lower else ""
    infectious_extra = ", Appendicitis, Cholecystitis" if "surgery" in department_lower else ""
    trauma_extra = ", Bowel Obstruction" if "surgery" in department_lower else ""

    requirement_lines = [
        f'- Pathophysiology category: "{bucket}"',
        "- Solvable by medical students",
        "- Balance authenticity with educational value",
    ]
    if flags.is_pediatric:
        requirement_lines.append("- Age-appropriate presentation and developmental context")
    if flags.is_surgical:
        requirement_lines.append(
            "- Focus on surgical intervention and context (pre-op, intra-op, post-op considerations where relevant)"
        )
    history_sections = [
        f"  * ## BIODATA{' (child age, parent)' if flags.is_pediatric else ''}",
        "  * ## Presenting Complaint",
        "  * ## History of Presenting Complaint",
        "  * ## Past Medical/Surgical History",
        "  * ## Drug History",
        "  * ## Family History",
        "  * ## Social History (INCLUDE SPECIFIC LOCATION: city, neighborhood, landmark, local hospital)",
        "  * ## Review of Systems",
    ]
    if flags.is_pediatric:
        history_sections.append("  * ## Developmental History")

    speaker = "from parent/child" if flags.is_pediatric else "from patient"
    sections = "\n".join(history_sections)
    requirements = "\n".join(requirement_lines)
    difficulty_block = f"\n\n{difficulty_prompt}" if difficulty_prompt else ""

    return f"""You are an experienced clinical educator creating realistic medical cases for medical students. Your goal is to create cases that are:
- Educationally valuable and clinically relevant
- Solvable by medical students with proper history taking and examination
- Realistic and authentic to real clinical practice

Your task is to generate a detailed clinical case for medical students in the **'{department_name}'** department, focusing on the **"{bucket}"** pathophysiology category.

{time_context}
{location_prompt}
{surgical_prompt}
{pediatric_prompt}{difficulty_block}

CRITICAL GUIDELINES FOR PATIENT PROFILE DIVERSITY AND AVOIDING STEREOTYPES:
1. Do NOT stereotype education, health literacy or occupation by location.
2. Actively vary education levels, health literacy, occupations, socioeconomic status, age and marital status across cases.
3. {profile_rule}

CRITICAL GUIDELINES FOR DIAGNOSIS VARIETY:
1. Within the '{department_name}' department and "{bucket}" category, do not always generate the single most common condition.
2. For 'Intermediate' and 'Difficult' cases, you may explore less common conditions or more complex presentations.
3. {diagnosis_rule}

REQUIREMENTS:
{requirements}

PATIENT COMMUNICATION GUIDELINES:
- Patients use lay terms, not medical terminology
- Medications are described in common terms (e.g., "blood pressure pills", "diabetes medicine")
- Match communication style to education level and health literacy

EXAMPLES by category (DON'T LIMIT YOURSELF TO THESE):
- Vascular: MI, Stroke, PVD{vascular_extra}
- Infectious/Inflammatory: Pneumonia, Sepsis, Gastroenteritis{infectious_extra}
- Neoplastic: Breast Cancer, Lung Cancer, Lymphoma
- Degenerative: Osteoarthritis, Alzheimer's, Parkinson's
- Autoimmune: RA, SLE, Multiple Sclerosis
- Trauma/Mechanical: Fractures, Head Trauma{trauma_extra}
- Endocrine/Metabolic: Diabetes, Thyroid Disease, Electrolyte Imbalances
- Psychiatric/Functional: Depression, Anxiety, Functional Disorders

OUTPUT: {_output_schema(flags.is_pediatric)}

CRITICAL JSON FORMATTING RULES:
- ALL FIELDS ARE REQUIRED - DO NOT OMIT ANY FIELD
- ESCAPE ALL QUOTES in primaryInfo and openingLine fields using backslash
- Use single quotes for patient quotes within text

- "diagnosis": Most likely diagnosis fitting the {bucket} category
- "primaryInfo": Detailed clinical history with markdown headings:
{sections}
- "openingLine": REQUIRED - Natural first-person statement {speaker} that will be the first words in the consultation

Generate the complete JSON output for this clinical case."""
