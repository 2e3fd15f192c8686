"""Prompts for the saved-case summary generated when a case is completed."""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def _result_line(result: Mapping[str, Any], *, with_status: bool = False) -> str:
    name = result.get("name", "Unnamed")
    if result.get("type") == "quantitative":
        line = f"- {name}: {result.get('value')} {result.get('unit', '')}".rstrip()
        if with_status and result.get("status"):
            line += f" ({result['status']})"
        return line
    line = f"- {name}: {result.get('findings', '')}"
    if with_status and result.get("impression"):
        line += f" ({result['impression']})"
    return line


def format_results(results: Iterable[Mapping[str, Any]], *, with_status: bool = False) -> str:
    lines = [_result_line(result, with_status=with_status) for result in results]
    return "\n".join(lines) or "- None recorded"


def _joined(values: Any) -> str:
    if not values:
        return "Not provided"
    if isinstance(values, str):
        return values
    return ", ".join(str(value) for value in values)


def clinical_summary_prompt(
    case_details: Mapping[str, Any],
    examination_results: list[dict],
    investigation_results: list[dict],
) -> str:
    return f"""Generate a concise clinical summary for this patient case:

Patient Information:
- Primary Info: {case_details.get("primaryInfo", "")}
- Opening Line: {case_details.get("openingLine", "")}
- Diagnosis: {case_details.get("diagnosis", "")}

Key Examination Findings:
{format_results(examination_results, with_status=True)}

Key Investigation Results:
{format_results(investigation_results)}

Please provide a 2-3 sentence clinical summary that captures the patient's presentation, key findings, and diagnosis. Focus on the most clinically relevant information."""


def key_findings_prompt(examination_results: list[dict], investigation_results: list[dict]) -> str:
    return f"""Analyze these examination and investigation results to identify the most important clinical findings with detailed rationale:

Examination Results:
{format_results(examination_results, with_status=True)}

Investigation Results:
{format_results(investigation_results)}

Please return a JSON array of the 5-8 most important findings in this format:
[
  {{
    "finding": "ST elevation in leads II, III, aVF",
    "significance": "Indicates inferior STEMI",
    "rationale": "ST elevation in the inferior leads indicates transmural injury of the inferior wall.",
    "category": "ECG"
  }}
]

Focus on abnormal findings and clinically significant results."""


def investigations_prompt(diagnosis: str, case_details: Mapping[str, Any]) -> str:
    return f"""Based on the diagnosis and patient presentation, generate the APPROPRIATE investigations that SHOULD be ordered for this condition (not what the student actually ordered):

Diagnosis: {diagnosis}
Patient Presentation: {case_details.get("primaryInfo", "")} {case_details.get("openingLine", "")}

Please return a JSON array of the appropriate investigations in this format:
[
  {{
    "investigation": "Troponin",
    "rationale": "Cardiac biomarker to confirm myocardial injury.",
    "expectedFindings": "Elevated levels (>99th percentile of normal) indicate myocardial injury",
    "clinicalSignificance": "Confirms the diagnosis and helps risk stratify patients"
  }}
]

Focus on what investigations are STANDARD OF CARE for this condition, not what the student chose."""


def management_plan_prompt(diagnosis: str, case_details: Mapping[str, Any]) -> str:
    return f"""Based on the diagnosis and patient presentation, generate the APPROPRIATE management plan that SHOULD be implemented for this condition (not what the student actually wrote):

Diagnosis: {diagnosis}
Patient Presentation: {case_details.get("primaryInfo", "")} {case_details.get("openingLine", "")}

Please return a JSON array of the appropriate management steps in this format:
[
  {{
    "intervention": "Immediate PCI (Percutaneous Coronary Intervention)",
    "rationale": "Primary PCI is the gold standard treatment for STEMI.",
    "timing": "Immediate (within 90 minutes)",
    "expectedOutcome": "Restoration of coronary blood flow and improved survival"
  }}
]

Focus on what management is STANDARD OF CARE for this condition, not what the student chose."""


def clinical_opportunities_prompt(feedback: Mapping[str, Any], diagnosis: str) -> str:
    opportunities = feedback.get("clinicalOpportunities") or {}
    missed = opportunities.get("missedOpportunities") or []
    missed_text = ", ".join(
        f"{item.get('opportunity')}: {item.get('clinicalSignificance')}"
        for item in missed
        if isinstance(item, Mapping)
    )
    return f"""Based on the feedback and diagnosis, identify the clinical opportunities that were missed or could be improved:

Diagnosis: {diagnosis}

Feedback:
- Areas for Improvement: {_joined(opportunities.get("areasForImprovement"))}
- Missed Opportunities: {missed_text or "Not provided"}
- Key Learning Point: {_joined(feedback.get("keyLearningPoint"))}

Please return a JSON array of clinical opportunities in this format:
[
  {{
    "opportunity": "Early ECG interpretation",
    "clinicalSignificance": "Delayed recognition of STEMI can lead to increased myocardial damage",
    "learningPoint": "Always prioritize ECG interpretation in chest pain patients"
  }}
]"""


def clinical_pearls_prompt(feedback: Mapping[str, Any], diagnosis: str) -> str:
    opportunities = feedback.get("clinicalOpportunities") or {}
    return f"""Based on this feedback and diagnosis, generate 2-3 clinical pearls for learning:

Diagnosis: {diagnosis}

Feedback:
- Key Learning Point: {_joined(feedback.get("keyLearningPoint"))}
- Areas for Improvement: {_joined(opportunities.get("areasForImprovement"))}
- Strengths: {_joined(feedback.get("whatYouDidWell"))}

Please provide 2-3 concise clinical pearls that would help a medical student learn from this case. Focus on practical clinical knowledge and common pitfalls."""
