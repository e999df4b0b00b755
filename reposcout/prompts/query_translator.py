"""
Prompt template for the Query Translator.

Responsibilities:
  1. Extract primary keywords
  2. Expand keywords according to the search mode
  3. Infer language, popularity (star range) and GitHub topics

NOT in scope: ranking, relevance judgment.
"""

from __future__ import annotations

import json

EXPANSION_GUIDANCE: dict[str, str] = {
    "focused": "Do NOT expand keywords. Return an empty array for expanded_keywords.",
    "balanced": "Expand with 2-3 close synonyms or related terms for expanded_keywords.",
    "exploratory": (
        "Expand with 5-8 semantic terms including broader concepts, related "
        "technologies, and synonyms for expanded_keywords."
    ),
}

FEW_SHOT_EXAMPLES: list[dict] = [
    {
        "query": "popular React animation library",
        "mode": "balanced",
        "output": {
            "keywords": ["React", "animation", "library"],
            "expanded_keywords": ["motion", "transition"],
            "language": "TypeScript",
            "starRange": {"min": 1000},
            "topics": ["react", "animation"],
        },
    },
    {
        "query": "new Rust web framework",
        "mode": "exploratory",
        "output": {
            "keywords": ["Rust", "web", "framework"],
            "expanded_keywords": ["http", "server", "async", "axum", "actix"],
            "language": "Rust",
            "starRange": {"min": 10, "max": 1000},
            "topics": ["rust", "web", "framework"],
        },
    },
    {
        "query": "TypeScript ORM for PostgreSQL",
        "mode": "focused",
        "output": {
            "keywords": ["TypeScript", "ORM", "PostgreSQL"],
            "expanded_keywords": [],
            "language": "TypeScript",
            "starRange": {"min": 50},
            "topics": ["typescript", "orm", "postgresql", "database"],
        },
    },
    {
        "query": "lightweight state management",
        "mode": "balanced",
        "output": {
            "keywords": ["lightweight", "state", "management"],
            "expanded_keywords": ["store", "context"],
            "language": None,
            "starRange": {"min": 50},
            "topics": ["state-management"],
        },
    },
    {
        "query": "CLI tool for developers",
        "mode": "exploratory",
        "output": {
            "keywords": ["CLI", "tool", "developers"],
            "expanded_keywords": ["terminal", "command-line", "productivity", "devtools"],
            "language": None,
            "starRange": {"min": 50},
            "topics": ["cli", "developer-tools"],
        },
    },
]


def build_query_translator_prompt(
    query: str,
    mode: str,
    *,
    default_min_stars: int,
    popular_min_stars: int,
    mature_min_stars: int,
    emerging_min_stars: int,
    emerging_max_stars: int,
) -> tuple[str, str]:
    """
    Build the system and user prompts for query translation.

    Returns:
        (system_prompt, user_prompt)
    """
    system_prompt = (
        "You are a query translator for GitHub repository search.\n\n"
        "Your task:\n"
        "1. Extract primary keywords from the user query (3-6 words max)\n"
        f"2. Generate expanded_keywords based on search mode: {EXPANSION_GUIDANCE[mode]}\n"
        "3. Infer programming language if mentioned (return null if not clear)\n"
        "4. Infer star range based on POPULARITY/MATURITY only (independent of search mode):\n"
        f'   - "popular", "widely used", "mainstream" → {{"min": {popular_min_stars}}}\n'
        f'   - "new", "recent", "emerging", "fresh" → {{"min": {emerging_min_stars}, "max": {emerging_max_stars}}}\n'
        f'   - "mature", "stable", "established", "production-ready" → {{"min": {mature_min_stars}}}\n'
        f'   - No popularity keywords → {{"min": {default_min_stars}}}\n'
        '   - Do NOT infer star range from feature keywords like "lightweight", "small", "fast".\n'
        "5. Extract relevant GitHub topics (lowercase, hyphenated)\n\n"
        "Return ONLY valid JSON, no markdown, no explanation:\n"
        "{\n"
        '  "keywords": string[],\n'
        '  "expanded_keywords": string[],\n'
        '  "language": string | null,\n'
        '  "starRange": {"min": number, "max"?: number},\n'
        '  "createdAfter"?: "YYYY-MM-DD",\n'
        '  "topics": string[]\n'
        "}"
    )

    examples = "\n\n".join(
        f'Query: "{ex["query"]}" (mode: {ex["mode"]})\nOutput: {json.dumps(ex["output"])}'
        for ex in FEW_SHOT_EXAMPLES
    )
    user_prompt = (
        f"{examples}\n\n"
        "Now translate this query:\n"
        f'Query: "{query}" (mode: {mode})\n'
        "Output:"
    )
    return system_prompt, user_prompt
