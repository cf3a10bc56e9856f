"""
Response parsing and normalization.

Turns the free-text completion returned by the LLM into an ``AnalysisResult``.
The provider is asked for a labeled-line grammar (``SCORE:``, ``MISSING:`` ...)
but nothing guarantees it follows it, so every field is extracted on its own
by an ordered list of strategies and falls back to a default. Nothing in
this module raises on malformed input.

Labels are matched case-insensitively at the start of a line, optionally
decorated with markdown (``**Summary:**``, ``## Missing Keywords``, ``- **Weak:**``).
A labeled block runs until the next known label, the next markdown heading,
or the end of the text.
"""

import logging
import math
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..schemas.pydantic.resume_analysis import (
    DEFAULT_FEEDBACK,
    DEFAULT_SEARCH_QUERY,
    DEFAULT_SUMMARY,
    MAX_SUMMARY_LENGTH,
    NO_GAPS_SENTINEL,
    AnalysisResult,
    AnalysisStatus,
    ScoreBreakdown,
)

logger = logging.getLogger(__name__)

DEFAULT_MATCH_SCORE = 50
MAX_KEYWORDS = 8
MAX_TIPS = 6
MAX_TIP_LENGTH = 300
MAX_SEARCH_QUERY_LENGTH = 100
MIN_CONFIDENT_SUMMARY = 50
MIN_FALLBACK_LINE = 60

# Label name -> regex alternatives, longest first so "Missing Keywords" is
# not consumed as "Missing".
LABELS: Dict[str, Tuple[str, ...]] = {
    "score": (r"match[ \t]+score", r"score", r"match"),
    "missing": (r"missing[ \t]+keywords", r"missing[ \t]+skills", r"missing"),
    "summary": (r"summary",),
    "initial_impression": (r"initial[ \t]+impression",),
    "assessment": (r"assessment",),
    "feedback": (r"feedback",),
    "search_query": (r"search[ _]query",),
    "strengths": (r"strengths",),
    "partial": (r"partial",),
    "weak": (r"weak",),
    "resume_tips": (r"resume[ _]tips",),
}

# Section labels may sit behind blockquote, heading or emphasis markup. A list
# bullet only counts when the label after it is bold ("- **Weak:**"), so
# "- Weak: ..." inside a FEEDBACK block stays part of that block.
_LEAD = r"^[ \t]*(?:>[ \t]*)*(?:#{1,6}[ \t]*)?(?:[-*•+][ \t]+(?=\*\*|__))?(?:\*\*|__|\*(?![ \t])|_(?![ \t]))?"
_SCORE_LEAD = r"^[ \t>*#_\-•]*"
_TAIL = r"[ \t*_]*(?::[ \t*_]*|$)"
_NUMBER = r"((?<![\d.])-?\d+(?:\.\d+)?)"

_ALL_ALTERNATIVES = "|".join(alt for alts in LABELS.values() for alt in alts)
_ANY_LABEL = re.compile(
    rf"{_LEAD}(?:{_ALL_ALTERNATIVES})\b{_TAIL}|^[ \t]*#{{2,}}[ \t]",
    re.IGNORECASE | re.MULTILINE,
)
_LABEL_IN_LINE = re.compile(
    rf"\b(?:{_ALL_ALTERNATIVES})\b[ \t*_]*:|match[ \t]+score|missing[ \t]+keywords",
    re.IGNORECASE,
)

_SCORE_LABELED = re.compile(
    rf"{_SCORE_LEAD}(?:match[ \t]+score|score|match)\b[ \t*_]*[:=][ \t*_\[(]*{_NUMBER}",
    re.IGNORECASE | re.MULTILINE,
)
_SCORE_INLINE = re.compile(rf"\bscore\b[^\d\n]{{0,20}}?{_NUMBER}[ \t]*%", re.IGNORECASE)
_BARE_PERCENT = re.compile(rf"{_NUMBER}[ \t]*%")

_BULLET = re.compile(r"^[ \t]*(?:[-•*▪●‣◦]|\d{1,2}[.)])[ \t]+(.+?)[ \t]*$", re.MULTILINE)
_PARENTHETICAL = re.compile(r"[ \t]*\([^)]*\)")
_FILLER = re.compile(
    r"\b(?:e\.g\.|i\.e\.|etc\.?|specific|technologies|technology|tools)(?=\W|$)",
    re.IGNORECASE,
)
_CONTROL = re.compile(r"[\x00-\x1f\x7f]+")
_SUMMARY_MARKDOWN = re.compile(r"[*#`]+|__")
_WHITESPACE = re.compile(r"\s+")

_PLACEHOLDERS = {"none", "n/a", "na", "nothing", "none identified", "not applicable"}
_QUOTES = "\"'“”‘’`"


def _label_pattern(names: Sequence[str]) -> "re.Pattern[str]":
    alternatives = "|".join(alt for name in names for alt in LABELS[name])
    return re.compile(rf"{_LEAD}(?:{alternatives})\b{_TAIL}", re.IGNORECASE | re.MULTILINE)


_BLOCK_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    name: _label_pattern((name,)) for name in LABELS
}


def find_block(text: str, name: str) -> Optional[str]:
    """
    Return the text following the first ``name`` label up to the next label.

    ``None`` when the label does not occur at all; an empty string when it
    occurs with nothing after it.
    """
    match = _BLOCK_PATTERNS[name].search(text)
    if not match:
        return None
    start = match.end()
    following = _ANY_LABEL.search(text, start)
    end = following.start() if following else len(text)
    return text[start:end].strip()


# ---------------------------------------------------------------------------
# Score
# ---------------------------------------------------------------------------

def normalize_score(raw: float) -> int:
    """
    Map a raw number to an integer percentage.

    Values up to 1 are read as fractions, values up to 10 as a 0-10 rating.
    This makes small percentages ambiguous: "8%" becomes 80.
    """
    if raw <= 1:
        raw *= 100
    elif raw <= 10:
        raw *= 10
    clamped = min(max(raw, 0.0), 100.0)
    return int(math.floor(clamped + 0.5))


def _first_number(pattern: "re.Pattern[str]", text: str) -> Optional[float]:
    match = pattern.search(text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def score_from_label(text: str) -> Optional[float]:
    return _first_number(_SCORE_LABELED, text)


def score_from_inline_percent(text: str) -> Optional[float]:
    return _first_number(_SCORE_INLINE, text)


def score_from_bare_percent(text: str) -> Optional[float]:
    return _first_number(_BARE_PERCENT, text)


SCORE_STRATEGIES: Sequence[Callable[[str], Optional[float]]] = (
    score_from_label,
    score_from_inline_percent,
    score_from_bare_percent,
)


def extract_match_score(text: str) -> int:
    for strategy in SCORE_STRATEGIES:
        raw = strategy(text)
        if raw is not None:
            return normalize_score(raw)
    logger.debug("No score found in completion, using default")
    return DEFAULT_MATCH_SCORE


# ---------------------------------------------------------------------------
# Keyword-style lists (missing keywords, score breakdown)
# ---------------------------------------------------------------------------

def _strip_asides(block: str) -> str:
    block = _PARENTHETICAL.sub("", block)
    return _FILLER.sub("", block)


def _clean_item(item: str) -> str:
    item = item.replace("*", "").replace("`", "")
    item = _WHITESPACE.sub(" ", item)
    item = item.strip(" \t-–—:;,[]" + _QUOTES + "_").rstrip(".").strip()
    return item


def _keep_item(item: str) -> bool:
    return 2 < len(item) < 100 and item.lower() not in _PLACEHOLDERS


def items_from_bullets(block: str) -> List[str]:
    """One item per bullet line; non-bullet lines are ignored."""
    return _BULLET.findall(block)


def items_from_commas(block: str) -> List[str]:
    return re.split(r"[,\n]", block)


LIST_STRATEGIES: Sequence[Callable[[str], List[str]]] = (
    items_from_bullets,
    items_from_commas,
)


def split_keyword_block(block: Optional[str], limit: int = MAX_KEYWORDS) -> List[str]:
    """Split a labeled block into cleaned keyword entries, capped at ``limit``."""
    if not block:
        return []
    block = _strip_asides(block)
    for strategy in LIST_STRATEGIES:
        raw_items = strategy(block)
        items = [item for item in map(_clean_item, raw_items) if _keep_item(item)]
        if items:
            return items[:limit]
    return []


def extract_missing_keywords(text: str) -> List[str]:
    block = find_block(text, "missing")
    keywords = split_keyword_block(block)
    return keywords or [NO_GAPS_SENTINEL]


def extract_score_breakdown(text: str) -> ScoreBreakdown:
    return ScoreBreakdown(
        strengths=split_keyword_block(find_block(text, "strengths")),
        partial=split_keyword_block(find_block(text, "partial")),
        missing=split_keyword_block(find_block(text, "weak")),
    )


def extract_resume_tips(text: str) -> List[str]:
    block = find_block(text, "resume_tips")
    if not block:
        return []
    lines = items_from_bullets(block) or block.splitlines()
    tips = []
    for line in lines:
        tip = _WHITESPACE.sub(" ", line.replace("*", "")).strip()
        if len(tip) < 3:
            continue
        if len(tip) > MAX_TIP_LENGTH:
            tip = tip[: MAX_TIP_LENGTH - 3] + "..."
        tips.append(tip)
    return tips[:MAX_TIPS]


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def clean_summary_text(text: str) -> str:
    text = _SUMMARY_MARKDOWN.sub("", text)
    text = _CONTROL.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def _truncate_summary(summary: str) -> str:
    if len(summary) > MAX_SUMMARY_LENGTH:
        return summary[: MAX_SUMMARY_LENGTH - 3] + "..."
    return summary


def summary_from_labels(text: str) -> Optional[str]:
    """
    First labeled summary of confident length, else the first non-empty one.
    """
    fallback = None
    for name in ("summary", "initial_impression", "assessment"):
        block = find_block(text, name)
        if not block:
            continue
        candidate = clean_summary_text(block)
        if len(candidate) >= MIN_CONFIDENT_SUMMARY:
            return candidate
        if candidate and fallback is None:
            fallback = candidate
    return fallback


def summary_from_first_paragraph(text: str) -> Optional[str]:
    for line in text.splitlines():
        if _LABEL_IN_LINE.search(line) or _ANY_LABEL.match(line):
            continue
        candidate = clean_summary_text(line)
        if len(candidate) > MIN_FALLBACK_LINE:
            return candidate
    return None


def extract_summary(text: str) -> str:
    labeled = summary_from_labels(text)
    if labeled and len(labeled) >= MIN_CONFIDENT_SUMMARY:
        return _truncate_summary(labeled)
    paragraph = summary_from_first_paragraph(text)
    if paragraph:
        return _truncate_summary(paragraph)
    if labeled:
        return _truncate_summary(labeled)
    return DEFAULT_SUMMARY


# ---------------------------------------------------------------------------
# Feedback and search query
# ---------------------------------------------------------------------------

def extract_feedback(text: str) -> str:
    block = find_block(text, "feedback")
    return block or DEFAULT_FEEDBACK


def extract_search_query(text: str) -> str:
    block = find_block(text, "search_query")
    if not block:
        return DEFAULT_SEARCH_QUERY
    first_line = next((line for line in block.splitlines() if line.strip()), "")
    query = first_line.replace("*", "").strip().strip(_QUOTES).strip()
    query = _WHITESPACE.sub(" ", query)[:MAX_SEARCH_QUERY_LENGTH].strip()
    return query or DEFAULT_SEARCH_QUERY


def parse_analysis_response(text: Optional[str]) -> AnalysisResult:
    """
    Parse a raw completion into a normalized ``AnalysisResult``.

    Pure function of ``text``: parsing the same completion twice gives equal
    results.
    """
    text = text or ""
    result = AnalysisResult(
        match_score=extract_match_score(text),
        missing_keywords=extract_missing_keywords(text),
        summary=extract_summary(text),
        feedback=extract_feedback(text),
        search_query=extract_search_query(text),
        score_breakdown=extract_score_breakdown(text),
        resume_tips=extract_resume_tips(text),
        status=AnalysisStatus.OK,
    )
    logger.debug(
        f"Parsed completion: score={result.match_score}, "
        f"keywords={len(result.missing_keywords)}, summary_len={len(result.summary)}"
    )
    return result
