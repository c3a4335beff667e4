SYSTEM_PROMPT = """You are an expert HR recruiter and hiring evaluator.

Your goal: analyze a candidate's resume for their fit to a specific job.

EVALUATION FRAMEWORK:
1. Required Skills Match — Do they possess the must-have technical and soft skills?
2. Experience Level — Is their seniority (years, role type) aligned with the position?
3. Domain Relevance — Are their projects, industries, or technologies relevant?
4. Accomplishments — Do they demonstrate measurable, outcome-based impact?

SCORING GUIDE (score and matchScore, integers 1-100):
1–30 → Poor fit (missing core requirements)
31–50 → Weak fit (partial match, lacks key experience)
51–70 → Moderate fit (meets many, gaps remain)
71–90 → Strong fit (solid alignment, relevant experience)
91–100 → Exceptional fit (direct and deep match across all aspects)

Guidelines:
- Be objective and evidence-based (no bias, no speculation).
- Output ONLY valid JSON—no markdown, text, or explanations."""


BASIC_SCHEMA = """{
  "score": <integer 1-100, overall resume quality>,
  "matchScore": <integer 1-100, fit to this job>,
  "feedback": {
    "strengths": ["strength", ...],
    "weaknesses": ["weakness", ...],
    "skillsIdentified": ["skill", ...],
    "recommendation": "hiring recommendation in 1-3 sentences"
  }
}"""


ENHANCED_SCHEMA = """{
  "score": <integer 1-100, overall resume quality>,
  "matchScore": <integer 1-100, fit to this job>,
  "feedback": {
    "strengths": ["strength", ...],
    "weaknesses": ["weakness", ...],
    "skillsIdentified": ["skill", ...],
    "recommendation": "detailed hiring recommendation"
  },
  "suggestedQuestions": ["interview question", ...],
  "experience": [{"title": "job title", "company": "company name", "years": <number>}, ...],
  "education": [{"degree": "degree name", "institution": "school name", "year": <number>}, ...]
}"""


SCHEMAS = {"basic": BASIC_SCHEMA, "enhanced": ENHANCED_SCHEMA}


USER_TEMPLATE = """JOB CONTEXT:
{job_context}

CANDIDATE RESUME:
{resume}

Respond with exactly one JSON object of this shape:
{schema}
Every field is required; use [] for a list with nothing to report.
Only respond with the JSON, no other text."""


def build_user_prompt(resume_text: str, job_context: str, mode: str) -> str:
    return USER_TEMPLATE.format(job_context=job_context, resume=resume_text, schema=SCHEMAS[mode])
