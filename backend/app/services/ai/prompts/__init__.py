"""Prompt builders for every model-backed operation."""

from app.services.ai.prompts.case_generation import (
    LOCATION_CONTEXTS,
    MEDICAL_BUCKETS,
    department_flags,
    generate_case_prompt,
)
from app.services.ai.prompts.feedback import (
    COMPREHENSIVE_FEEDBACK_FIELDS,
    DETAILED_FEEDBACK_FIELDS,
    comprehensive_feedback_prompt,
    detailed_feedback_prompt,
    feedback_prompt,
    surgical_teaching_context,
)
from app.services.ai.prompts.osce import (
    FOLLOWUP_DOMAINS,
    OSCE_EVALUATION_FIELDS,
    OSCE_QUESTION_COUNT,
    OSCE_SCORE_FIELDS,
    OSCE_STATION_MINUTES,
    PERFORMANCE_FIELDS,
    PERFORMANCE_SECTION_FIELDS,
    QUESTION_CATEGORIES,
    osce_case_prompt,
    osce_evaluation_prompt,
    osce_followup_questions_prompt,
    osce_opening_line_prompt,
    osce_performance_prompt,
    osce_questions_prompt,
)
from app.services.ai.prompts.patient_profile import patient_profile_prompt
from app.services.ai.prompts.patient_response import (
    adult_system_instruction,
    current_question,
    format_transcript,
    patient_response_prompt,
    pediatric_system_instruction,
)
from app.services.ai.prompts.practice import (
    detect_input_type,
    practice_case_prompt,
    practice_retry_prompt,
    validate_custom_case_input,
    validate_generated_case,
)
from app.services.ai.prompts.results import (
    build_patient_context,
    examination_results_prompt,
    investigation_results_prompt,
    parse_examination_scope,
    pediatric_age,
)
from app.services.ai.prompts.summary import (
    clinical_opportunities_prompt,
    clinical_pearls_prompt,
    clinical_summary_prompt,
    investigations_prompt,
    key_findings_prompt,
    management_plan_prompt,
)

__all__ = [
    "COMPREHENSIVE_FEEDBACK_FIELDS",
    "DETAILED_FEEDBACK_FIELDS",
    "FOLLOWUP_DOMAINS",
    "LOCATION_CONTEXTS",
    "MEDICAL_BUCKETS",
    "OSCE_EVALUATION_FIELDS",
    "OSCE_QUESTION_COUNT",
    "OSCE_SCORE_FIELDS",
    "OSCE_STATION_MINUTES",
    "PERFORMANCE_FIELDS",
    "PERFORMANCE_SECTION_FIELDS",
    "QUESTION_CATEGORIES",
    "adult_system_instruction",
    "build_patient_context",
    "clinical_opportunities_prompt",
    "clinical_pearls_prompt",
    "clinical_summary_prompt",
    "comprehensive_feedback_prompt",
    "current_question",
    "department_flags",
    "detailed_feedback_prompt",
    "detect_input_type",
    "examination_results_prompt",
    "feedback_prompt",
    "format_transcript",
    "generate_case_prompt",
    "investigation_results_prompt",
    "investigations_prompt",
    "key_findings_prompt",
    "management_plan_prompt",
    "osce_case_prompt",
    "osce_evaluation_prompt",
    "osce_followup_questions_prompt",
    "osce_opening_line_prompt",
    "osce_performance_prompt",
    "osce_questions_prompt",
    "parse_examination_scope",
    "patient_profile_prompt",
    "patient_response_prompt",
    "pediatric_age",
    "pediatric_system_instruction",
    "practice_case_prompt",
    "practice_retry_prompt",
    "surgical_teaching_context",
    "validate_custom_case_input",
    "validate_generated_case",
]
