"""Feedback and teaching-note prompts built from the finished case state."""

from __future__ import annotations

import json
from typing import Any, Mapping

DETAILED_FEEDBACK_FIELDS = (
    "diagnosis",
    "keyLearningPoint",
    "clerkingStructure",
    "missedOpportunities",
    "clinicalReasoning",
    "communicationNotes",
    "clinicalPearls",
)

COMPREHENSIVE_FEEDBACK_FIELDS = (
    "diagnosis",
    "keyLearningPoint",
    "whatYouDidWell",
    "clinicalReasoning",
    "clinicalOpportunities",
    "clinicalPearls",
)

_DIAGNOSIS_RULE = (
    'IMPORTANT: The "diagnosis" field should contain ONLY the CORRECT diagnosis name '
    "(from case generation), NOT the student's diagnosis, not explanations or commentary."
)

_MISSED_OPPORTUNITIES = """MISSED OPPORTUNITIES ANALYSIS:
**CRITICAL: Before identifying any missed opportunities, you MUST cross-reference what the student actually did with what they should have done.**

STEP 1: CROSS-REFERENCE ANALYSIS
- Check the examination plan against the examination results; only flag examinations that were NOT requested AND would be clinically relevant
- Check the investigation plan against the investigation results; only flag investigations that were NOT requested AND would be clinically relevant
- Check the management plan; only flag management gaps that are actually missing from the plan

STEP 2: REASONING VALIDATION
For each potential missed opportunity, ask yourself:
- "Did the student actually request this?" → If YES, do not flag
- "Did the student receive results for this?" → If YES, do not flag
- "Would this be clinically relevant for this specific case?" → If NO, do not flag

STEP 3: IDENTIFY ACTUAL GAPS
Cover clerking, examination, investigation and management opportunities. For each, explain what was missed, why it matters clinically, and how it could have changed the patient's care.

**VALIDATION CHECK**: Before finalizing, verify that you are NOT flagging anything the student actually did or requested."""


def _department(case_state: Mapping[str, Any]) -> str:
    return case_state.get("department") or "Unknown"


def _correct_diagnosis(case_state: Mapping[str, Any]) -> str:
    details = case_state.get("caseDetails") or {}
    return details.get("diagnosis") or "Unknown"


def _conversation(case_state: Mapping[str, Any]) -> str:
    return json.dumps(case_state.get("messages") or [])


def _case_block(case_state: Mapping[str, Any]) -> str:
    return f"""Case: {_department(case_state)}
Correct Diagnosis: {_correct_diagnosis(case_state)}
Your Diagnosis: {case_state.get("finalDiagnosis") or "Not provided"}
Examination Plan: {case_state.get("examinationPlan") or "Not provided"}
Investigation Plan: {case_state.get("investigationPlan") or "Not provided"}
Management Plan: {case_state.get("managementPlan") or "Not provided"}
Conversation: {_conversation(case_state)}"""


def surgical_teaching_context(department: str | None) -> str:
    """Extra teaching focus for surgical departments, empty otherwise."""
    if not department:
        return ""
    lowered = department.lower()
    if "surgery" not in lowered and "surgical" not in lowered:
        return ""

    lines = [
        "SURGICAL TEACHING FOCUS:",
        "- Emphasize surgical history taking and risk assessment",
        "- Highlight pre-operative assessment requirements",
        "- Focus on surgical indications and contraindications",
        "- Address post-operative care and complications",
    ]
    if "cardiothoracic" in lowered or "cardiac" in lowered:
        lines += [
            "- For cardiothoracic cases, emphasize cardiac/pulmonary examination",
            "- Include cardiac risk assessment and imaging interpretation",
        ]
    if "general surgery" in lowered:
        lines += [
            "- For general surgery cases, emphasize abdominal examination",
            "- Cover common surgical conditions, approaches and techniques",
        ]
    return "\n".join(lines)


def feedback_prompt(case_state: Mapping[str, Any]) -> str:
    return f"""Provide clinical feedback. JSON: {{
    "diagnosis": string,
    "keyLearningPoint": string,
    "whatYouDidWell": string[],
    "whatCouldBeImproved": string[],
    "clinicalTip": string
}}

{_DIAGNOSIS_RULE}

Use direct address ("you"). Be encouraging and educational. Focus on learning opportunities.

Case: {_department(case_state)}
Correct Diagnosis: {_correct_diagnosis(case_state)}
Your Diagnosis: {case_state.get("finalDiagnosis") or "Not provided"}
Conversation: {_conversation(case_state)}
Management Plan: {case_state.get("managementPlan") or "Not provided"}"""


def detailed_feedback_prompt(case_state: Mapping[str, Any]) -> str:
    surgical = surgical_teaching_context(case_state.get("department"))
    return f"""Provide clinical teaching notes. JSON: {{
    "diagnosis": string,
    "keyLearningPoint": string,
    "clerkingStructure": string,
    "missedOpportunities": [{{"opportunity": string, "clinicalSignificance": string}}],
    "clinicalReasoning": string,
    "communicationNotes": string,
    "clinicalPearls": string[]
}}

{_DIAGNOSIS_RULE}

Use direct address ("you"). Be encouraging and educational. Explain clinical significance.

{_MISSED_OPPORTUNITIES}
AVOID DUPLICATION: Do not include diagnostic reasoning gaps in missed opportunities as these are covered in the clinical reasoning section.

{surgical}

{_case_block(case_state)}"""


def comprehensive_feedback_prompt(case_state: Mapping[str, Any]) -> str:
    surgical = surgical_teaching_context(case_state.get("department"))
    return f"""Provide comprehensive clinical feedback that combines immediate feedback with detailed teaching notes. JSON: {{
    "diagnosis": string,
    "keyLearningPoint": string,
    "whatYouDidWell": string[],
    "clinicalReasoning": string,
    "clinicalOpportunities": {{
        "areasForImprovement": string[],
        "missedOpportunities": [{{"opportunity": string, "clinicalSignificance": string}}]
    }},
    "clinicalPearls": string[]
}}

{_DIAGNOSIS_RULE}
- "whatYouDidWell" should include 4-5 points, incorporating positive communication and clerking structure feedback
- "clinicalReasoning" should analyze the student's thinking process and diagnostic reasoning
- "areasForImprovement" should include general improvement areas and negative communication/clerking feedback if any
- "clinicalPearls" should be 3-5 actionable clinical tips

{_MISSED_OPPORTUNITIES}

Use direct address ("you"). Be encouraging and educational. Focus on learning opportunities.

{surgical}

{_case_block(case_state)}"""
