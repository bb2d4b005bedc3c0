import re

from models.search_result import SearchResult
from orchestrator.pipeline_types import AnswerValidation

MIN_ANSWER_CHARS = 100
MAX_EXPECTED_CITATIONS = 5
MIN_SECTIONS = 3
EXCERPT_CHARS = 200

_CITATION_RE = re.compile(r"\[\d+\]")
_SECTION_RE = re.compile(r"#{2,3}\s+\w+")


def _short(text: str, limit: int = EXCERPT_CHARS) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _reference_line(index: int, result: SearchResult) -> str:
    line = f"[{index}] {result.title}. Available at: {result.url}"
    if result.published_date:
        line += f" (Published: {result.published_date})"
    return line


def build_report_template(query: str, results: list[SearchResult] | tuple[SearchResult, ...]) -> str:
    """Structured report made only from result titles, urls and snippets."""
    top = list(results[:5])
    if not top:
        return (
            f"# Research Report: {query}\n\n"
            "## Executive Summary\n"
            f'No sources could be retrieved for "{query}", so no findings can be reported. '
            "Confidence in any answer to this query is low.\n\n"
            "## Suggested Next Steps\n"
            "- Rephrase the query with more specific terms\n"
            "- Try again later in case search providers were unavailable"
        )

    parts = [
        f"# Research Report: {query}",
        "## Executive Summary",
        f'This report compiles what {len(top)} sources say about "{query}". {_short(top[0].snippet)} [1]',
        "## Source Analysis",
    ]
    for i, result in enumerate(top, start=1):
        parts.append(f"### Source {i}: {result.title}\n\n**URL**: {result.url}\n\n{result.snippet} [{i}]")
    parts.append("## Complete Source References")
    parts.append("\n".join(_reference_line(i, r) for i, r in enumerate(top, start=1)))
    return "\n\n".join(parts)


class AnswerValidator:
    """
    Checks a generated answer for length, citations and structure, and repairs
    deficiencies by appending material taken verbatim from the search results.
    """

    def __init__(self, min_response_length: int = 800, force_comprehensive: bool = True):
        self.min_response_length = min_response_length
        self.force_comprehensive = force_comprehensive

    def expected_citations(self, results) -> int:
        return min(MAX_EXPECTED_CITATIONS, len(results))

    def validate(self, answer: str, results: list[SearchResult] | tuple[SearchResult, ...]) -> AnswerValidation:
        text = answer or ""
        word_count = len(text.split())
        citation_count = len(_CITATION_RE.findall(text))
        section_count = len(_SECTION_RE.findall(text))
        mentions_sources = "source" in text.lower()

        reasons: list[str] = []
        if len(text.strip()) < MIN_ANSWER_CHARS:
            reasons.append("too_short")
        if self.force_comprehensive and word_count < self.min_response_length:
            reasons.append("below_min_words")
        if results and citation_count < self.expected_citations(results):
            reasons.append("missing_citations")
        if section_count < MIN_SECTIONS:
            reasons.append("missing_sections")
        if results and not mentions_sources:
            reasons.append("missing_source_references")

        return AnswerValidation(
            ok=not reasons,
            word_count=word_count,
            citation_count=citation_count,
            section_count=section_count,
            mentions_sources=mentions_sources,
            reasons=tuple(reasons),
        )

    def enhance(self, answer: str, query: str, results: list[SearchResult] | tuple[SearchResult, ...]) -> str:
        """Apply repairs in a fixed order. Deterministic for a given input."""
        results = list(results)
        text = (answer or "").strip()

        if len(text) < MIN_ANSWER_CHARS:
            return build_report_template(query, results)

        validation = self.validate(text, results)

        if "missing_citations" in validation.reasons:
            lines = "\n".join(
                f"- [{i}] {r.title} ({r.url})"
                for i, r in enumerate(results[:MAX_EXPECTED_CITATIONS], start=1)
            )
            text += f"\n\n---\n\n**Additional Sources Referenced**:\n\n{lines}"

        if "missing_sections" in validation.reasons:
            text = self._restructure(text, query, results)

        if results and "source" not in text.lower():
            refs = "\n".join(_reference_line(i, r) for i, r in enumerate(results, start=1))
            text += f"\n\n## Complete Source References\n\n{refs}"

        if (
            results
            and self.force_comprehensive
            and len(text.split()) < self.min_response_length
        ):
            excerpts = "\n\n".join(
                f"**[{i}] {r.title}**\n> {r.snippet}" for i, r in enumerate(results, start=1)
            )
            text += f"\n\n## Key Source Excerpts\n\n{excerpts}"

        return text

    def _restructure(self, text: str, query: str, results: list[SearchResult]) -> str:
        lower = text.lower()
        parts = [f"# Comprehensive Analysis: {query}"]

        if "summary" not in lower:
            if results:
                summary = f"{_short(results[0].snippet)} [1]"
            else:
                summary = "No sources were available for this query; treat the analysis below with lower confidence."
            parts.append(f"## Executive Summary\n{summary}")

        parts.append(f"## Main Analysis\n\n{text}")

        if results and "findings" not in lower and "conclusion" not in lower:
            findings = "\n".join(
                f"- Source [{i}] ({r.title}): {_short(r.snippet, 120)}"
                for i, r in enumerate(results[:3], start=1)
            )
            parts.append(f"## Key Findings\n{findings}")

        return "\n\n".join(parts)
