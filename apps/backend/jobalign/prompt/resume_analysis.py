from ..core import settings

PROMPT = """
You are an ATS (Applicant Tracking System) performing a technical resume analysis for an individual job seeker.
Your job is to:
– Compare the candidate's resume with the target job description.
– Identify concrete overlaps in skills, experience and keywords.
– Identify genuine gaps; never invent roles, employers, dates or qualifications.
– Be objective and technical. Use third-person perspective in the summary.

Job Description:
\"\"\"
{job_description}
\"\"\"

Resume:
\"\"\"
{resume_text}
\"\"\"

Output strictly in this format, one label per line, no markdown:
SCORE: [Number 0-100]%
MISSING: [Comma separated list of missing critical skills]
SUMMARY: [One professional sentence summary]
FEEDBACK: [3-4 detailed bullet points on specific changes]
SEARCH_QUERY: [The best 3-4 word job search query, e.g. Junior React Developer Remote]
STRENGTHS: [Comma separated list of requirements the resume clearly meets]
PARTIAL: [Comma separated list of requirements the resume only partially meets]
WEAK: [Comma separated list of requirements the resume does not meet]
RESUME_TIPS:
- [Concrete resume improvement tip]
- [Concrete resume improvement tip]
- [Concrete resume improvement tip]
"""


def _truncate(text: str, max_chars: int) -> str:
    text = (text or "").strip()
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def build_analysis_prompt(
    job_description: str,
    resume_text: str,
    max_chars: int = settings.PROMPT_MAX_CHARS,
) -> str:
    """
    Build the analysis prompt for one resume / job description pair.

    Both texts are truncated independently to ``max_chars`` characters so the
    prompt stays within provider limits.
    """
    return PROMPT.format(
        job_description=_truncate(job_description, max_chars),
        resume_text=_truncate(resume_text, max_chars),
    ).strip()
