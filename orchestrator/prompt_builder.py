"""
Prompt construction for answer synthesis.

Both prompt variants are pure functions of the PromptContext: the same
context always renders the same text.
"""

from config.config import ResponseComplexity
from models.search_request import QueryIntent
from models.search_result import SearchResult
from orchestrator.pipeline_types import PromptContext

MAX_PROMPT_SOURCES = 8
SIMPLIFIED_PROMPT_SOURCES = 3
MAX_PREVIOUS_QUERIES = 3

PERSONAS = {
    ResponseComplexity.SIMPLE: (
        "You are a helpful AI assistant that provides clear, concise answers to user "
        "questions. Keep your responses simple and easy to understand."
    ),
    ResponseComplexity.DETAILED: (
        "You are an expert research assistant with deep knowledge across multiple domains. "
        "Provide comprehensive, well-structured answers that synthesize information from "
        "multiple sources."
    ),
    ResponseComplexity.EXPERT: (
        "You are a highly specialized research analyst with expert-level knowledge. Provide "
        "detailed, technical responses with nuanced analysis and professional insights."
    ),
}

INTENT_GUIDANCE = {
    QueryIntent.RESEARCH: {
        ResponseComplexity.SIMPLE: "Focus on providing factual information with clear explanations.",
        ResponseComplexity.DETAILED: (
            "Provide an analytical response with proper citations. Focus on accuracy, depth, "
            "and presenting multiple perspectives where relevant."
        ),
        ResponseComplexity.EXPERT: (
            "Deliver a scholarly analysis with critical evaluation of sources, methodology "
            "discussion, and academic rigor."
        ),
    },
    QueryIntent.TECHNICAL: {
        ResponseComplexity.SIMPLE: "Provide step-by-step guidance with clear instructions.",
        ResponseComplexity.DETAILED: (
            "Provide comprehensive technical guidance with step-by-step procedures, code "
            "examples, and best practices."
        ),
        ResponseComplexity.EXPERT: (
            "Deliver expert-level technical analysis with advanced concepts, architectural "
            "considerations, and professional recommendations."
        ),
    },
    QueryIntent.SHOPPING: {
        ResponseComplexity.SIMPLE: "Help compare options and highlight key features.",
        ResponseComplexity.DETAILED: (
            "Compare options thoroughly, analyze features and pricing, and provide purchasing "
            "recommendations with pros and cons."
        ),
        ResponseComplexity.EXPERT: (
            "Provide detailed market analysis, a feature comparison matrix, and strategic "
            "purchasing advice."
        ),
    },
    QueryIntent.NEWS: {
        ResponseComplexity.SIMPLE: "Summarize the key facts and recent developments.",
        ResponseComplexity.DETAILED: (
            "Summarize recent developments with a timeline, key facts, and context about "
            "their significance."
        ),
        ResponseComplexity.EXPERT: (
            "Provide comprehensive news analysis with background context, implications, and "
            "expert commentary."
        ),
    },
    QueryIntent.GENERAL: {
        ResponseComplexity.SIMPLE: "Provide a helpful and informative response.",
        ResponseComplexity.DETAILED: "Provide a comprehensive answer that addresses all aspects of the question.",
        ResponseComplexity.EXPERT: "Deliver an expert-level response with deep analysis and professional insights.",
    },
}

NO_SOURCES_BLOCK = (
    "No sources are available for this query. Answer from general knowledge only, "
    "do not fabricate citations, and state clearly that confidence is lower because "
    "no sources could be consulted."
)

STRUCTURE_REQUIREMENTS = """YOUR RESPONSE MUST FOLLOW THIS STRUCTURE:

## Executive Summary
[Concise overview of the key findings, with citations]

## Comprehensive Analysis
[Detailed main analysis with sub-sections where useful, with citations]

## Key Findings
- [Finding with citations]
- [Finding with citations]
- [Finding with citations]

## Sources
- [n] Source title: what information was taken from it"""

CITATION_RULE = (
    "Cite every claim with numbered references such as [1], [2] that match the source "
    "numbers above. Rely exclusively on the provided sources and never invent facts, "
    "figures, or quotes that are not present in them."
)


def format_source(index: int, result: SearchResult) -> str:
    lines = [
        f"Source [{index}]: {result.title}",
        f"URL: {result.url}",
        f"Domain: {result.domain or result.source_provider}",
        f"Relevance: {result.relevance_score:.1f}%",
    ]
    if result.published_date:
        lines.append(f"Published: {result.published_date}")
    lines.extend(["", "CONTENT:", result.snippet, "", "---"])
    return "\n".join(lines)


def format_sources(results: tuple[SearchResult, ...] | list[SearchResult]) -> str:
    if not results:
        return NO_SOURCES_BLOCK
    return "\n\n".join(format_source(i, r) for i, r in enumerate(results, start=1))


class PromptBuilder:
    def __init__(self, max_sources: int = MAX_PROMPT_SOURCES):
        self.max_sources = max_sources

    def build(self, ctx: PromptContext) -> str:
        """Full prompt: persona, intent guidance, history, sources and structure rules."""
        results = ctx.results[: self.max_sources]
        complexity = ctx.complexity
        guidance = INTENT_GUIDANCE.get(ctx.intent, INTENT_GUIDANCE[QueryIntent.GENERAL])

        sections = [
            PERSONAS[complexity],
            guidance[complexity],
            f'QUERY: "{ctx.query}"',
        ]

        previous = ctx.previous_queries[-MAX_PREVIOUS_QUERIES:]
        if previous:
            sections.append("Previous conversation context: " + ", ".join(previous))

        sections.append("SEARCH RESULTS:\n" + format_sources(results))
        sections.append(STRUCTURE_REQUIREMENTS)
        sections.append(CITATION_RULE)
        return "\n\n".join(sections)

    def build_simplified(self, ctx: PromptContext) -> str:
        """Short prompt over the top sources only; used when the full prompt fails."""
        results = ctx.results[:SIMPLIFIED_PROMPT_SOURCES]
        if results:
            sources = "\n\n".join(
                f"[{i}] {r.title}\n{r.url}\n{r.snippet}" for i, r in enumerate(results, start=1)
            )
        else:
            sources = NO_SOURCES_BLOCK

        return (
            f'Answer this question: "{ctx.query}"\n\n'
            f"Here's information from search results:\n{sources}\n\n"
            "Write a clear, well-organized answer citing sources as [1], [2], etc. "
            "Include specific details from each source."
        )
