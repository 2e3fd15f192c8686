import asyncio
import json

import pytest

from app.services.ai.errors import RateLimitedError
from app.services.ai.summary import SUMMARY_FIELDS, fallback_summary, generate_case_summary

CASE_DETAILS = {
    "diagnosis": "Community-acquired pneumonia",
    "primaryInfo": "## BIODATA\nMr. Okafor, 62, retired teacher.",
    "openingLine": "I have been coughing for a week.",
    "patientProfile": {"age": 62, "gender": "male", "presentingComplaint": "cough"},
}

EXAMINATION_RESULTS = [
    {
        "name": "Temperature",
        "type": "quantitative",
        "category": "vital_signs",
        "value": 38.9,
        "unit": "°C",
        "status": "High",
    },
    {
        "name": "Heart Rate",
        "type": "quantitative",
        "category": "vital_signs",
        "value": 80,
        "unit": "bpm",
        "status": "Normal",
    },
    {
        "name": "Respiratory Examination",
        "type": "descriptive",
        "category": "system_examination",
        "findings": "Bronchial breathing at the right base",
    },
]

INVESTIGATION_RESULTS = [
    {"name": "WBC", "type": "quantitative", "category": "laboratory", "value": 15.2, "unit": "x10^9/L"},
    {"name": "Chest X-ray", "type": "descriptive", "category": "imaging", "findings": "Right lower lobe consolidation"},
]

FEEDBACK = {
    "diagnosis": "Community-acquired pneumonia",
    "clinicalPearls": ["Use CURB-65 to grade severity", "Repeat the X-ray at six weeks"],
    "clinicalOpportunities": {"areasForImprovement": ["Ask about travel"], "missedOpportunities": []},
}


def _route(prompt: str):
    if prompt.startswith("Generate a concise clinical summary"):
        return "A 62-year-old man with a week of productive cough and fever."
    if prompt.startswith("Analyze these examination and investigation results"):
        return "not json at all"
    if "APPROPRIATE investigations" in prompt:
        return json.dumps([{"investigation": "Sputum culture"}])
    if "APPROPRIATE management plan" in prompt:
        return RateLimitedError("429 Too Many Requests")
    if "identify the clinical opportunities" in prompt:
        return '```json\n[{"opportunity": "Ask about travel"}]\n```'
    if "generate 2-3 clinical pearls" in prompt:
        return "- Pearl one\n- Pearl two"
    raise AssertionError(f"unexpected prompt: {prompt[:60]}")


@pytest.mark.asyncio
async def test_failed_branches_fall_back_independently(model_client):
    model_client.handler = _route

    summary = await generate_case_summary(
        model_client,
        case_details=CASE_DETAILS,
        examination_results=EXAMINATION_RESULTS,
        investigation_results=INVESTIGATION_RESULTS,
        feedback=FEEDBACK,
        timeout_seconds=5,
    )

    fallbacks = fallback_summary(CASE_DETAILS, EXAMINATION_RESULTS, INVESTIGATION_RESULTS, FEEDBACK)
    assert len(model_client.prompts) == len(SUMMARY_FIELDS)
    assert summary.generated_fields == [
        "clinical_summary",
        "investigations",
        "clinical_opportunities",
        "clinical_pearls",
    ]
    assert summary.clinical_summary.startswith("A 62-year-old man")
    assert summary.investigations == [{"investigation": "Sputum culture"}]
    assert summary.clinical_opportunities == [{"opportunity": "Ask about travel"}]
    assert summary.clinical_pearls == "- Pearl one\n- Pearl two"
    assert summary.key_findings == fallbacks["key_findings"]
    assert summary.management_plan == fallbacks["management_plan"]


@pytest.mark.asyncio
async def test_slow_branch_times_out_to_fallback(model_client):
    async def slow_pearls(prompt: str):
        if "generate 2-3 clinical pearls" in prompt:
            await asyncio.sleep(1)
            return "too late"
        return _route(prompt)

    model_client.handler = slow_pearls

    summary = await generate_case_summary(
        model_client,
        case_details=CASE_DETAILS,
        examination_results=EXAMINATION_RESULTS,
        investigation_results=INVESTIGATION_RESULTS,
        feedback=FEEDBACK,
        timeout_seconds=0.05,
    )

    assert "clinical_pearls" not in summary.generated_fields
    assert summary.clinical_pearls == (
        "- Use CURB-65 to grade severity\n- Repeat the X-ray at six weeks"
    )


@pytest.mark.asyncio
async def test_empty_text_branch_uses_fallback(model_client):
    def handler(prompt: str):
        if prompt.startswith("Generate a concise clinical summary"):
            return "   "
        return _route(prompt)

    model_client.handler = handler

    summary = await generate_case_summary(
        model_client,
        case_details=CASE_DETAILS,
        examination_results=EXAMINATION_RESULTS,
        investigation_results=INVESTIGATION_RESULTS,
        feedback=FEEDBACK,
        timeout_seconds=5,
    )

    assert "clinical_summary" not in summary.generated_fields
    assert summary.clinical_summary == (
        "## BIODATA\nMr. Okafor, 62, retired teacher. I have been coughing for a week."
    )


def test_fallback_key_findings_skip_normal_results():
    fallbacks = fallback_summary(CASE_DETAILS, EXAMINATION_RESULTS, INVESTIGATION_RESULTS)

    findings = [item["finding"] for item in fallbacks["key_findings"]]
    assert findings == [
        "Temperature: 38.9 °C",
        "Respiratory Examination: Bronchial breathing at the right base",
    ]
    assert fallbacks["key_findings"][0]["significance"] == "High"
    assert fallbacks["key_findings"][1]["significance"] == "Abnormal"


def test_fallback_limits_and_defaults():
    many = [
        {"name": f"Test {index}", "status": "Low", "value": index, "unit": "mg"}
        for index in range(8)
    ]

    fallbacks = fallback_summary({}, many, many)

    assert len(fallbacks["key_findings"]) == 5
    assert len(fallbacks["investigations"]) == 5
    assert fallbacks["investigations"][0]["expectedFindings"] == "Results available"
    assert fallbacks["clinical_pearls"] == (
        "Always reflect on completed cases to improve future practice."
    )
    assert fallbacks["clinical_summary"] == ""
    assert len(fallbacks["management_plan"]) == 1
