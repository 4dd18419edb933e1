"""Academic research agents.

Both agents search through deterministic stand-in tools; swapping in a real
scholarly search API only means changing the tool functions below.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

from eduassist.schemas.research import (
    FutureResearchInput,
    Paper,
    RecentPapersInput,
    ResearchDirections,
    SearchInput,
    SearchResult,
)
from eduassist.services.generation import Tool, generate


logger = logging.getLogger(__name__)

NO_RESULTS_REPORT = "I couldn't find any academic information on that topic. Please try a different query."


def recent_papers_search(args: RecentPapersInput) -> List[Paper]:
    topic = args.topic.strip()
    logger.info("recentPapersSearch: %r", topic)
    last_word = topic.split(" ")[-1] if topic else topic
    return [
        Paper(
            title=f"Advances in {last_word}",
            authors=["A. Researcher", "B. Scholar"],
            year=2024,
            source="Journal of Modern AI",
            url="https://example.com/paper1",
        ),
        Paper(
            title=f"A New Framework for {topic}",
            authors=["C. Innovator"],
            year=2023,
            source="AI Conference Proceedings",
            url="https://example.com/paper2",
        ),
    ]


FUTURE_RESEARCH_PROMPT = """Role: You are an AI Research Foresight Agent.

Seminal paper or topic:
{seminal_paper}

Recent papers that cite, extend or relate to it:
{recent_citing_papers}

Analyze the core concepts and impact of the seminal work, then synthesize the trends, gaps and open
questions in the recent papers. From that synthesis, identify at least 3 distinct, novel and
underexplored future research areas with strong potential. Balance the list between practical
utility, paradigm-shifting ideas and emerging areas of interest.

Return "research_directions": a list of objects with "area" (a concise title) and "description"
(a 2-4 sentence rationale)."""


def future_research_suggester(args: FutureResearchInput) -> List[Dict[str, Any]]:
    logger.info("futureResearchSuggester: %r", args.seminal_topic)
    prompt = FUTURE_RESEARCH_PROMPT.format(
        seminal_paper=args.seminal_topic,
        recent_citing_papers=json.dumps([p.model_dump() for p in args.recent_papers], ensure_ascii=False, indent=2),
    )
    res = generate(prompt, output_schema=ResearchDirections)
    return [d.model_dump() for d in res.output.research_directions]


RECENT_PAPERS_TOOL = Tool(
    name="recentPapersSearch",
    description="Finds recent academic papers that cite a seminal work or topic.",
    input_model=RecentPapersInput,
    fn=recent_papers_search,
)

FUTURE_RESEARCH_TOOL = Tool(
    name="futureResearchSuggester",
    description="Suggests potential future research directions based on a seminal work and recent papers.",
    input_model=FutureResearchInput,
    fn=future_research_suggester,
)


def _coordinator_system(topic: str) -> str:
    return (
        "You are an AI Research Assistant. Analyze the seminal paper topic given by the user and help them "
        "explore the recent academic landscape that grew out of it.\n\n"
        "Workflow:\n"
        f'1. Analyze the seminal topic "{topic}": a concise summary, key topics/keywords and up to 5 key contributions.\n'
        "2. Call the recentPapersSearch tool to find recent related papers.\n"
        "3. Call the futureResearchSuggester tool with the original topic and the papers you found.\n"
        "4. Compile everything into one Markdown report with the sections "
        '"Seminal Paper Analysis", "Recent Citing Papers" and "Potential Future Research Directions". '
        "Use bulleted or numbered lists for papers and research directions."
    )


def run_academic_coordinator(*, topic: str) -> Dict[str, Any]:
    res = generate(
        f'Please perform the tasks outlined in the system prompt for the topic: "{topic}"',
        system=_coordinator_system(topic),
        tools=[RECENT_PAPERS_TOOL, FUTURE_RESEARCH_TOOL],
    )
    logger.info("academic coordinator: %s tool calls", len(res.tool_calls))
    return {"report": res.text}


def _slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.lower())


def academic_web_search(args: SearchInput) -> List[SearchResult]:
    query = args.query
    logger.info("academicWebSearch: %r", query)
    return [
        SearchResult(
            title=f"The Foundational Principles of {query}",
            url="https://arxiv.org/abs/2401.12345",
            snippet=f"A foundational paper on {query} published in a leading academic journal, exploring its theoretical underpinnings and implications for future research.",
        ),
        SearchResult(
            title=f"A Longitudinal Study on the Effects of {query}",
            url="https://www.jstor.org/stable/12345",
            snippet=f"This study, conducted over ten years, provides empirical evidence on the long-term impact of {query} in a controlled environment.",
        ),
        SearchResult(
            title=f"Cross-Disciplinary Applications of {query}",
            url=f"https://www.university.edu/research/paper-on-{_slug(query)}",
            snippet=f"A university research paper that details the novel applications of {query} in fields ranging from computer science to sociology.",
        ),
    ]


WEB_SEARCH_TOOL = Tool(
    name="academicWebSearch",
    description="Performs a web search for the given query and returns a list of academic-focused results.",
    input_model=SearchInput,
    fn=academic_web_search,
)


def run_academic_research_agent(*, topic: str) -> Dict[str, Any]:
    search = generate(
        f'Use the academic web search tool to find information about "{topic}".',
        tools=[WEB_SEARCH_TOOL],
    )
    results = [SearchResult.model_validate(r) for batch in search.tool_outputs(WEB_SEARCH_TOOL.name) for r in batch]
    if not results:
        return {"report": NO_RESULTS_REPORT, "references": []}

    sources = "\n\n".join(f"### {r.title}\n**URL:** {r.url}\n**Snippet:** {r.snippet}" for r in results)
    prompt = (
        "You are a research analyst specializing in academic summaries.\n"
        f'Synthesize the following search results into a formal academic report on the topic: "{topic}".\n'
        "Use a formal academic tone and Markdown, with the sections: **Abstract**, **Introduction**, "
        "**Key Findings**, **Conclusion** and **References**.\n\n"
        f"Search Results:\n{sources}"
    )
    report = generate(prompt)
    return {
        "report": report.text,
        "references": [{"title": r.title, "url": r.url} for r in results],
    }
