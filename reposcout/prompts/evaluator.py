"""
Prompt template for the README evaluator (Screener Stage 2).

Scores three dimensions on 0-10: documentation, ease of use and
relevance to the user's query.
"""

from __future__ import annotations

from reposcout.schemas.repository import Repository

SYSTEM_PROMPT = (
    "You are a code quality analyst evaluating GitHub repositories. "
    "Output only valid JSON."
)


def build_evaluator_prompt(repo: Repository, readme: str, query: str) -> tuple[str, str]:
    """
    Build the system and user prompts for one repository.

    ``readme`` is expected to be truncated by the caller.

    Returns:
        (system_prompt, user_prompt)
    """
    user_prompt = f"""Analyze the following repository and provide scores (0-10) for three quality dimensions.

Repository: {repo.full_name}
Description: {repo.description or "No description"}
Language: {repo.language or "Unknown"}
Stars: {repo.stars:,}
User Query: "{query}"

README Content (first {len(readme)} chars):
---
{readme}
---

1. documentation (0-10):
   10: comprehensive docs with examples, API reference, contributing guide
   7-9: good README with installation, usage, API overview
   4-6: basic README, minimal examples, missing sections
   1-3: sparse, hard to understand
   0: no meaningful documentation

2. ease_of_use (0-10):
   10: crystal clear API, abundant examples, quick start, beginner-friendly
   7-9: good examples, clear API, reasonable learning curve
   4-6: some examples, moderate complexity
   1-3: poor examples, confusing API
   0: no examples, extremely difficult to use

3. relevance (0-10):
   10: solves exactly what the user query asks for
   7-9: strong match with minor gaps
   4-6: related but not an ideal fit
   1-3: tangentially related
   0: not relevant

## OUTPUT (JSON only)
{{"documentation": <score>, "ease_of_use": <score>, "relevance": <score>, "reasoning": {{"documentation": "<max 100 chars>", "ease_of_use": "<max 100 chars>", "relevance": "<max 100 chars>"}}}}
"""
    return SYSTEM_PROMPT, user_prompt
