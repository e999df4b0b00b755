import pytest

from reposcout.pipeline.cost_estimator import (
    PRICING,
    estimate_cost,
    estimate_monthly_cost,
    format_cost_estimate,
    provider_for_settings,
)
from reposcout.schemas.cost import ProviderPricing


def test_zero_repos_is_translation_call_only():
    estimate = estimate_cost(0)
    assert estimate.input_tokens == 500
    assert estimate.output_tokens == 100
    assert estimate.llm_calls == 1
    assert estimate.index_calls == 3
    assert estimate.total_api_calls == 4
    assert estimate.total_cost == pytest.approx(500 / 1e6 * 0.15 + 100 / 1e6 * 0.60)


def test_per_repo_assumptions():
    estimate = estimate_cost(20, "deepseek")
    assert estimate.input_tokens == 500 + 1500 * 20
    assert estimate.output_tokens == 100 + 150 * 20
    assert estimate.llm_calls == 21
    assert estimate.index_calls == 23
    assert estimate.pricing == PRICING["deepseek"]
    assert estimate.total_cost == pytest.approx(30500 / 1e6 * 0.27 + 3100 / 1e6 * 1.10)


def test_cost_is_strictly_increasing_in_repo_count():
    for provider in PRICING:
        costs = [estimate_cost(n, provider).total_cost for n in range(60)]
        assert all(b > a for a, b in zip(costs, costs[1:]))


def test_cost_is_linear_in_pricing():
    doubled = {"openai": ProviderPricing(input=0.30, output=1.20)}
    for n in (0, 5, 25):
        base = estimate_cost(n, "openai").total_cost
        assert estimate_cost(n, "openai", pricing_table=doubled).total_cost == pytest.approx(2 * base)


@pytest.mark.parametrize("num_repos", [-1, 2.5, True])
def test_rejects_bad_repo_count(num_repos):
    with pytest.raises(ValueError):
        estimate_cost(num_repos)


def test_rejects_unknown_provider():
    with pytest.raises(ValueError):
        estimate_cost(3, "anthropic-free-tier")


def test_format_and_monthly_projection():
    estimate = estimate_cost(20, "openai")
    text = format_cost_estimate(estimate)
    assert "Cost Estimate (OPENAI)" in text
    assert "Input Tokens:  30,500" in text
    assert f"Total Cost: ${estimate.total_cost:.4f} per search" in text

    monthly = estimate_monthly_cost(1000, 20, "openai")
    assert monthly.cost_per_search == pytest.approx(estimate.total_cost)
    assert monthly.total_cost == pytest.approx(estimate.total_cost * 1000)
    assert "1,000 searches/month" in monthly.breakdown


def test_provider_follows_configured_key(settings):
    assert provider_for_settings(settings) == "openai"
    assert provider_for_settings(settings.model_copy(update={"deepseek_api_key": "ds"})) == "deepseek"
