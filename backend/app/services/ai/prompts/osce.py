"""Prompts for the timed OSCE station and its follow-up assessment."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Optional

OSCE_STATION_MINUTES = 5
OSCE_QUESTION_COUNT = 10

FOLLOWUP_DOMAINS = (
    "primary_diagnosis",
    "differential_diagnosis",
    "risk_factors",
    "investigations",
    "management",
    "complications",
)

QUESTION_CATEGORIES = (
    "diagnosis",
    "management",
    "investigation",
    "complications",
    "clinical reasoning",
    "prognosis",
)

OSCE_EVALUATION_FIELDS = (
    "diagnosis",
    "scoreBreakdown",
    "rationaleForScore",
    "clinicalOpportunities",
    "followupAnswers",
    "clinicalPearls",
)

OSCE_SCORE_FIELDS = (
    "historyCoverage",
    "relevanceOfQuestions",
    "clinicalReasoning",
    "followupQuestions",
    "overallScore",
)

PERFORMANCE_FIELDS = ("overallScore", "scoreBreakdown", "strengths", "areasForImprovement")
PERFORMANCE_SECTION_FIELDS = ("historyStructure", "questionRelevance", "coverage", "diagnosticAccuracy")

_STATION_REQUIREMENTS = f"""

OSCE SPECIFIC REQUIREMENTS:
- This case is for an OSCE (Objective Structured Clinical Examination) station
- The student will have {OSCE_STATION_MINUTES} minutes to take a focused history
- Generate a case that is suitable for focused history-taking within this time constraint
- The case should have clear, identifiable symptoms that a medical student can explore in {OSCE_STATION_MINUTES} minutes
- Avoid overly complex multi-system presentations that would be difficult to cover in the time limit
- Focus on a single primary condition with clear diagnostic features"""


def osce_case_prompt(base_prompt: str, department_name: str, subspecialty: Optional[str]) -> str:
    """Append the station constraints (and subspecialty focus) to a case prompt."""
    prompt = base_prompt + _STATION_REQUIREMENTS
    if subspecialty:
        prompt += (
            f"\n\nSUBSPECIALTY CONTEXT: This case should be specifically tailored for "
            f"{subspecialty} subspecialty within {department_name}. Focus on conditions and "
            f"presentations commonly seen in {subspecialty}."
        )
    return prompt


def osce_opening_line_prompt(diagnosis: str) -> str:
    return f"""Generate a natural first-person opening statement for a patient with {diagnosis} in an OSCE setting.

The statement should be:
- Natural and conversational
- In first person (patient speaking)
- Related to the main symptoms of {diagnosis}
- 1-2 sentences maximum
- Suitable for a focused {OSCE_STATION_MINUTES}-minute history taking session

Return ONLY the opening statement, no JSON formatting."""


def _patient_phrase(patient_age: Any, patient_gender: Optional[str]) -> str:
    if patient_age and patient_gender:
        age = f"{patient_age:g}" if isinstance(patient_age, (int, float)) else str(patient_age)
        return f"{age}-year-old {patient_gender.lower()} patient"
    return "patient"


def osce_followup_questions_prompt(
    diagnosis: str,
    patient_history: str,
    department_name: str,
    patient_age: Any = None,
    patient_gender: Optional[str] = None,
) -> str:
    patient = _patient_phrase(patient_age, patient_gender)
    return f"""Generate exactly {OSCE_QUESTION_COUNT} OSCE-style follow-up questions to assess clinical knowledge and reasoning for a medical student who just completed clerking this {patient}.

PATIENT CONTEXT:
- Primary Diagnosis: {diagnosis}
- Department: {department_name}
- Patient History: {patient_history}

QUESTION REQUIREMENTS:
- Format: Short answer questions only
- Style: Balance generic OSCE format with patient-specific context
- Use patient's age, gender, and presentation in questions where relevant
- Reference specific symptoms/findings from the patient history
- Realistic OSCE exam style questions

QUESTION DOMAINS (distribute {OSCE_QUESTION_COUNT} questions across these 6 areas):
1. Primary Diagnosis (1-2 questions) - most likely diagnosis, diagnostic reasoning
2. Differential Diagnosis (1-2 questions) - alternative diagnoses to consider
3. Risk Factors (2 questions) - factors that contributed to this condition
4. Investigations (2 questions) - appropriate tests and imaging
5. Management/Treatment (2 questions) - treatment plans and interventions
6. Complications/Monitoring (1 question) - potential complications to watch for

QUESTION EXAMPLES:
- "What is the most likely diagnosis for this {patient}?"
- "Given this patient's presentation, what risk factors likely contributed to their condition?"
- "What investigations would you order to confirm the diagnosis?"
- "Outline your initial management plan for this patient"
- "What complications should you monitor for in this case?"

OUTPUT FORMAT:
Return a JSON object with questions and corresponding answers:

{{
  "questions": [
    {{
      "id": "q1",
      "domain": "primary_diagnosis",
      "question": "What is the most likely diagnosis for this patient?",
      "answer": "Detailed correct answer with clinical reasoning"
    }}
  ]
}}

IMPORTANT:
- "domain" must be one of: {", ".join(FOLLOWUP_DOMAINS)}
- Questions should test clinical knowledge appropriate for medical students
- Answers should be comprehensive but concise
- Ensure questions cover all 6 domains listed above
- Each question should have a unique ID (q1, q2, ... q{OSCE_QUESTION_COUNT})"""


def _format_responses(
    responses: Iterable[Mapping[str, Any]],
    answers: Mapping[str, str],
    questions: Mapping[str, str],
) -> str:
    blocks = []
    for response in responses:
        question_id = response.get("questionId", "")
        blocks.append(
            f"Question: {questions.get(question_id, 'Unknown')}\n"
            f"Student Answer: {response.get('studentAnswer', '')}\n"
            f"Correct Answer: {answers.get(question_id, 'Unknown')}\n---"
        )
    return "\n".join(blocks)


def osce_evaluation_prompt(
    case_state: Mapping[str, Any],
    responses: Iterable[Mapping[str, Any]],
    answers: Mapping[str, str],
    questions: Mapping[str, str],
) -> str:
    """Score a finished station: the timed clerking plus the follow-up answers.

    ``answers`` and ``questions`` are keyed by question id.
    """
    details = case_state.get("caseDetails") or {}
    diagnosis = details.get("diagnosis") or "Unknown"
    return f"""Provide comprehensive OSCE evaluation for a medical student who completed a timed clerking session and follow-up questions.

EVALUATION CONTEXT:
Department: {case_state.get("department") or "Unknown"}
Correct Diagnosis: {diagnosis}
Student's Final Assessment: {case_state.get("finalDiagnosis") or "Not provided"}

CLERKING PERFORMANCE:
Conversation History: {json.dumps(case_state.get("messages") or [])}
Examination Plan: {case_state.get("examinationPlan") or "Not provided"}
Investigation Plan: {case_state.get("investigationPlan") or "Not provided"}

FOLLOW-UP QUESTIONS PERFORMANCE:
{_format_responses(responses, answers, questions)}

SCORING REQUIREMENTS:
Evaluate the student across these 4 categories (each scored 0-100):

1. **History Coverage (0-100)**: How thoroughly did they gather relevant history? Did they explore symptoms adequately?
2. **Relevance of Questions (0-100)**: Were their questions clinically relevant and logically ordered?
3. **Clinical Reasoning (0-100)**: Did they try to rule diagnoses in or out and characterize symptoms properly?
4. **Follow-up Questions (0-100)**: How accurate were their answers to the {OSCE_QUESTION_COUNT} follow-up questions?

EVALUATION OUTPUT FORMAT:
Return JSON with this exact structure:

{{
  "diagnosis": "{diagnosis}",
  "scoreBreakdown": {{
    "historyCoverage": number (0-100),
    "relevanceOfQuestions": number (0-100),
    "clinicalReasoning": number (0-100),
    "followupQuestions": number (0-100),
    "overallScore": number (average of above 4)
  }},
  "rationaleForScore": "Why the student received these specific scores, referencing their actual questions and reasoning.",
  "clinicalOpportunities": {{
    "areasForImprovement": ["specific areas where student could improve"],
    "missedOpportunities": [
      {{"opportunity": "missed opportunity in clerking or follow-up", "clinicalSignificance": "why this matters clinically"}}
    ]
  }},
  "followupAnswers": [
    {{"questionId": "q1", "question": "the actual question text", "correctAnswer": "the correct answer for learning"}}
  ],
  "clinicalPearls": ["educational insights related to this case"]
}}

IMPORTANT GUIDELINES:
- Focus ONLY on clerking and follow-up questions (no management plan evaluation)
- Be encouraging but honest about areas needing improvement
- Use direct address ("you") throughout
- Ensure scores reflect actual performance, not just participation"""


def osce_questions_prompt(case_history: str, diagnosis: str, department_name: str) -> str:
    categories = ", ".join(f'"{category}"' for category in QUESTION_CATEGORIES)
    return f"""You are an expert medical educator creating OSCE (Objective Structured Clinical Examination) follow-up questions.

**Case Context:**
- Department: {department_name}
- Case History: {case_history}
- Target Diagnosis: {diagnosis}

**Task:**
Generate exactly {OSCE_QUESTION_COUNT} follow-up questions that a medical student should be able to answer after taking this patient's history. These questions should test diagnostic reasoning, management principles, investigations, complications and clinical reasoning based on the history taken.

**IMPORTANT:** The first question must always ask about the student's diagnosis for this case.

**Response Format:**
Return a JSON array with exactly {OSCE_QUESTION_COUNT} questions, each with:
- question: The question text
- category: One of {categories}

Example format:
[
  {{"question": "What is your diagnosis for this patient?", "category": "diagnosis"}},
  {{"question": "What are the first-line investigations you would order?", "category": "investigation"}}
]

Generate {OSCE_QUESTION_COUNT} questions now:"""


def osce_performance_prompt(
    original_case: Mapping[str, Any],
    history_questions: Iterable[str],
    followup_answers: Iterable[Mapping[str, Any]],
    student_diagnosis: str,
) -> str:
    asked = "\n".join(f"{i}. {question}" for i, question in enumerate(history_questions, start=1))
    answered = "\n\n".join(
        f"{i}. Q: {item.get('question', '')}\n   A: {item.get('answer', '')}\n   Category: {item.get('category', '')}"
        for i, item in enumerate(followup_answers, start=1)
    )
    key_points = ", ".join(original_case.get("keyHistoryPoints") or [])
    return f"""You are an expert medical educator evaluating an OSCE (Objective Structured Clinical Examination) performance.

**Case Details:**
- Department: {original_case.get("department", "")}
- Target Diagnosis: {original_case.get("targetDiagnosis", "")}
- Key History Points: {key_points}

**History Taking Questions Asked:**
{asked}

**Follow-up Question Answers:**
{answered}

**Student's Diagnosis:** {student_diagnosis}

**Evaluation Criteria (Total: 100 points):**
1. **History Structure (25 points):** systematic approach, logical flow, open and closed questions, communication
2. **Question Relevance (25 points):** questions tied to the presenting complaint, appropriate depth, screening questions
3. **Coverage (25 points):** essential history points covered, key differentials addressed
4. **Diagnostic Accuracy (25 points):** key symptoms identified, sound differential, correct final diagnosis

**Response Format:**
Return a JSON object with this exact structure:

{{
  "overallScore": 85,
  "scoreBreakdown": {{
    "historyStructure": 20,
    "questionRelevance": 22,
    "coverage": 23,
    "diagnosticAccuracy": 20,
    "total": 85
  }},
  "strengths": ["Good systematic approach to history taking"],
  "areasForImprovement": ["Could have explored family history more thoroughly"],
  "specificFeedback": {{
    "historyTaking": "Your history taking showed...",
    "followUpQuestions": "Your answers to follow-up questions demonstrated...",
    "diagnosticReasoning": "Your diagnostic approach was..."
  }},
  "recommendations": ["Focus on red flag symptoms for this condition"]
}}

Evaluate the performance now:"""
