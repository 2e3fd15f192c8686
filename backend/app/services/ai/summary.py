"""Concurrent generation of the saved-case summary.

Six independent model calls are issued together when a case is completed.
Each branch is bounded by its own timeout and a failed branch is replaced
by a fallback built from the case data; the others are unaffected.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable

from app.services.ai.client import ModelClient, call_model
from app.services.ai.errors import ProviderError
from app.services.ai.parsing import parse_json_response
from app.services.ai.prompts import (
    clinical_opportunities_prompt,
    clinical_pearls_prompt,
    clinical_summary_prompt,
    investigations_prompt,
    key_findings_prompt,
    management_plan_prompt,
)

logger = logging.getLogger("clerksmart.ai.summary")

SUMMARY_FIELDS = (
    "clinical_summary",
    "key_findings",
    "investigations",
    "management_plan",
    "clinical_opportunities",
    "clinical_pearls",
)

_ABNORMAL_STATUSES = {"High", "Low", "Critical"}


@dataclass
class CaseSummary:
    clinical_summary: str
    key_findings: list[dict[str, Any]]
    investigations: list[dict[str, Any]]
    management_plan: list[dict[str, Any]]
    clinical_opportunities: list[dict[str, Any]]
    clinical_pearls: str
    generated_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def fallback_summary(
    case_details: dict[str, Any],
    examination_results: list[dict[str, Any]],
    investigation_results: list[dict[str, Any]],
    feedback: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Deterministic values used for any branch that fails."""
    clinical_summary = (
        f"{case_details.get('primaryInfo', '')} {case_details.get('openingLine', '')}"
    ).strip()

    key_findings = []
    for result in examination_results:
        status = result.get("status")
        if status not in _ABNORMAL_STATUSES and not result.get("findings"):
            continue
        value = result.get("findings") or result.get("value")
        unit = f" {result['unit']}" if result.get("unit") else ""
        key_findings.append(
            {
                "finding": f"{result.get('name')}: {value}{unit}",
                "significance": status or "Abnormal",
                "rationale": f"This finding indicates {status or 'an abnormality'} in {result.get('name')}",
                "category": result.get("category"),
            }
        )
        if len(key_findings) == 5:
            break

    investigations = [
        {
            "investigation": result.get("name"),
            "rationale": "Standard investigation for this condition",
            "expectedFindings": result.get("findings") or "Results available",
            "clinicalSignificance": "Important for diagnosis and management",
        }
        for result in investigation_results[:5]
    ]

    pearls = (feedback or {}).get("clinicalPearls") or []
    clinical_pearls = (
        "\n".join(f"- {pearl}" for pearl in pearls)
        if isinstance(pearls, list) and pearls
        else "Always reflect on completed cases to improve future practice."
    )

    return {
        "clinical_summary": clinical_summary,
        "key_findings": key_findings,
        "investigations": investigations,
        "management_plan": [
            {
                "intervention": "Standard management for this condition",
                "rationale": "Based on current clinical guidelines",
                "timing": "As appropriate for the condition",
                "expectedOutcome": "Improved patient outcomes",
            }
        ],
        "clinical_opportunities": [
            {
                "opportunity": "Review case for learning opportunities",
                "clinicalSignificance": "Important for improving clinical skills",
                "learningPoint": "Always reflect on cases to improve future practice",
            }
        ],
        "clinical_pearls": clinical_pearls,
    }


async def _generate_text(client: ModelClient, prompt: str, context: str) -> str:
    text = (await call_model(client, prompt)).strip()
    if not text:
        raise ProviderError(f"Model returned an empty response for {context}")
    return text


async def _generate_list(client: ModelClient, prompt: str, context: str) -> list[dict[str, Any]]:
    return parse_json_response(await call_model(client, prompt), context, shape="array")


async def generate_case_summary(
    client: ModelClient,
    *,
    case_details: dict[str, Any],
    examination_results: list[dict[str, Any]],
    investigation_results: list[dict[str, Any]],
    feedback: dict[str, Any],
    timeout_seconds: float,
) -> CaseSummary:
    diagnosis = case_details.get("diagnosis") or "Unknown"
    branches: dict[str, Callable[[], Awaitable[Any]]] = {
        "clinical_summary": lambda: _generate_text(
            client,
            clinical_summary_prompt(case_details, examination_results, investigation_results),
            "clinical summary",
        ),
        "key_findings": lambda: _generate_list(
            client, key_findings_prompt(examination_results, investigation_results), "key findings"
        ),
        "investigations": lambda: _generate_list(
            client, investigations_prompt(diagnosis, case_details), "investigations"
        ),
        "management_plan": lambda: _generate_list(
            client, management_plan_prompt(diagnosis, case_details), "management plan"
        ),
        "clinical_opportunities": lambda: _generate_list(
            client, clinical_opportunities_prompt(feedback, diagnosis), "clinical opportunities"
        ),
        "clinical_pearls": lambda: _generate_text(
            client, clinical_pearls_prompt(feedback, diagnosis), "clinical pearls"
        ),
    }

    outcomes = await asyncio.gather(
        *(asyncio.wait_for(branches[name](), timeout_seconds) for name in SUMMARY_FIELDS),
        return_exceptions=True,
    )

    fallbacks = fallback_summary(case_details, examination_results, investigation_results, feedback)
    values: dict[str, Any] = {}
    generated: list[str] = []
    for name, outcome in zip(SUMMARY_FIELDS, outcomes):
        if isinstance(outcome, BaseException):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            logger.warning(
                "Summary branch %s failed (%s); using fallback",
                name,
                outcome.__class__.__name__,
            )
            values[name] = fallbacks[name]
        else:
            values[name] = outcome
            generated.append(name)

    return CaseSummary(**values, generated_fields=generated)
