"""
Schemas for the Cost/Budget Estimator.

Purely derived values, never persisted.
"""

from __future__ import annotations

from pydantic import BaseModel


class ProviderPricing(BaseModel):
    """USD per one million tokens."""
    input: float
    output: float


class CostEstimate(BaseModel):
    provider: str
    pricing: ProviderPricing
    input_tokens: int
    output_tokens: int
    llm_calls: int
    index_calls: int
    total_api_calls: int
    llm_cost: float
    total_cost: float


class MonthlyCostEstimate(BaseModel):
    searches_per_month: int
    avg_repos_evaluated: int
    cost_per_search: float
    total_cost: float
    breakdown: str
