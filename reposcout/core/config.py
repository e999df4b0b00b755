from pydantic_settings import BaseSettings

from reposcout.schemas.scoring import ScoreWeights


class Settings(BaseSettings):
    app_name: str = "RepoScout Search API"
    environment: str = "development"
    host: str = "127.0.0.1"
    port: int = 8000

    # GitHub repository index
    github_token: str | None = None
    github_api_base: str = "https://api.github.com"
    index_request_timeout_s: float = 15.0

    # LLM providers (DeepSeek is preferred when its key is set; OpenAI-compatible API)
    openai_api_key: str | None = None
    deepseek_api_key: str | None = None
    deepseek_base_url: str = "https://api.deepseek.com"
    openai_model: str = "gpt-4o-mini"
    deepseek_model: str = "deepseek-chat"
    llm_temperature: float = 0.3

    # Per-call timeouts (must stay below the pipeline deadline)
    query_translator_timeout_s: float = 5.0
    readme_fetch_timeout_s: float = 10.0
    evaluator_timeout_s: float = 15.0

    # Whole-run deadline used when the caller does not pass one
    pipeline_timeout_ms: int = 90000

    # Input validation
    max_query_length: int = 200

    # Scout
    results_per_strategy: int = 30
    min_candidates: int = 50
    max_candidates: int = 100
    recency_star_divisor: int = 3
    expanded_star_divisor: int = 5
    recency_min_floor: int = 10
    expanded_min_floor: int = 5

    # Star range inference (independent of search mode)
    default_min_stars: int = 50
    popular_min_stars: int = 1000
    mature_min_stars: int = 5000
    emerging_min_stars: int = 10
    emerging_max_stars: int = 1000

    # Screener Stage 1
    coarse_min_stars: int = 50
    coarse_updated_within_months: int = 12
    coarse_require_readme: bool = True
    coarse_target_count: int = 25
    coarse_min_count: int = 10

    # Screener Stage 2
    final_results_count: int = 10
    evaluator_concurrency: int = 3
    evaluator_max_tokens: int = 500
    readme_preview_chars: int = 4000
    score_weights: ScoreWeights = ScoreWeights()

    # Request-layer result cache
    cache_ttl_minutes: int = 15
    cache_max_entries: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"  # Ignore extra environment variables that aren't in the Settings class


settings = Settings()
