from .resume_analysis import PROMPT as RESUME_ANALYSIS_PROMPT, build_analysis_prompt

__all__ = ["RESUME_ANALYSIS_PROMPT", "build_analysis_prompt"]
