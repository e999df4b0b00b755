"""
Cost/Budget Estimator.

Projects LLM token usage and USD cost for one search run.  Pure: no
I/O, no environment reads.  Use provider_for_settings() to pick the
provider matching the configured credentials.

Assumptions per run:
  - Query Translator: 1 LLM call, ~500 input / ~100 output tokens
  - Per evaluated repository: 1 LLM call, ~1500 input / ~150 output
    tokens, plus 1 README fetch
  - Scout: 3 repository search calls
  - Index (GitHub) calls are free with a token
"""

from __future__ import annotations

from reposcout.core.config import Settings
from reposcout.schemas.cost import CostEstimate, MonthlyCostEstimate, ProviderPricing

TRANSLATOR_INPUT_TOKENS = 500
TRANSLATOR_OUTPUT_TOKENS = 100
EVALUATION_INPUT_TOKENS = 1500
EVALUATION_OUTPUT_TOKENS = 150
SCOUT_SEARCH_CALLS = 3

DEFAULT_AVG_REPOS = 20

# USD per one million tokens
PRICING: dict[str, ProviderPricing] = {
    "deepseek": ProviderPricing(input=0.27, output=1.10),
    "openai": ProviderPricing(input=0.15, output=0.60),
}


def provider_for_settings(settings: Settings) -> str:
    return "deepseek" if settings.deepseek_api_key else "openai"


def estimate_cost(
    num_repos: int,
    provider: str = "openai",
    *,
    pricing_table: dict[str, ProviderPricing] | None = None,
) -> CostEstimate:
    """
    Estimate the cost of one search that evaluates ``num_repos`` repositories.

    ``estimate_cost(0)`` is the translation call alone.

    Raises:
        ValueError: ``num_repos`` is negative (or not an integer), or the
            provider has no pricing entry.
    """
    table = PRICING if pricing_table is None else pricing_table
    if isinstance(num_repos, bool) or not isinstance(num_repos, int) or num_repos < 0:
        raise ValueError(f"num_repos must be a non-negative integer, got {num_repos!r}")
    if provider not in table:
        raise ValueError(f"Unknown provider {provider!r}; expected one of {sorted(table)}")

    pricing = table[provider]
    input_tokens = TRANSLATOR_INPUT_TOKENS + EVALUATION_INPUT_TOKENS * num_repos
    output_tokens = TRANSLATOR_OUTPUT_TOKENS + EVALUATION_OUTPUT_TOKENS * num_repos
    llm_cost = input_tokens / 1_000_000 * pricing.input + output_tokens / 1_000_000 * pricing.output

    llm_calls = 1 + num_repos
    index_calls = SCOUT_SEARCH_CALLS + num_repos

    return CostEstimate(
        provider=provider,
        pricing=pricing,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        llm_calls=llm_calls,
        index_calls=index_calls,
        total_api_calls=llm_calls + index_calls,
        llm_cost=llm_cost,
        total_cost=llm_cost,
    )


def format_cost_estimate(estimate: CostEstimate) -> str:
    return "\n".join([
        f"Cost Estimate ({estimate.provider.upper()})",
        "",
        "LLM Usage:",
        f"  Calls:         {estimate.llm_calls}",
        f"  Input Tokens:  {estimate.input_tokens:,}",
        f"  Output Tokens: {estimate.output_tokens:,}",
        f"  Cost: ${estimate.llm_cost:.4f}",
        "",
        "GitHub API:",
        f"  Calls: {estimate.index_calls} (free with token)",
        "",
        f"Total Cost: ${estimate.total_cost:.4f} per search",
    ])


def estimate_monthly_cost(
    searches_per_month: int,
    avg_repos: int = DEFAULT_AVG_REPOS,
    provider: str = "openai",
) -> MonthlyCostEstimate:
    if searches_per_month < 0:
        raise ValueError(f"searches_per_month must be non-negative, got {searches_per_month!r}")

    estimate = estimate_cost(avg_repos, provider)
    total = estimate.total_cost * searches_per_month
    breakdown = "\n".join([
        f"Monthly Cost Estimate ({searches_per_month:,} searches/month)",
        "",
        f"Provider: {provider.upper()}",
        f"Avg Repos Evaluated: {avg_repos}",
        "",
        f"Per Search: ${estimate.total_cost:.4f}",
        f"Monthly Total: ${total:.2f}",
        "",
        "Breakdown:",
        f"  LLM API: ${total:.2f}",
        "  GitHub API: $0.00 (free)",
    ])
    return MonthlyCostEstimate(
        searches_per_month=searches_per_month,
        avg_repos_evaluated=avg_repos,
        cost_per_search=estimate.total_cost,
        total_cost=total,
        breakdown=breakdown,
    )
