"""
Pipeline modules for the repository search-and-scoring architecture.

Stage 0: Input validation          (validation.py)
Stage 1: Query Translator          (query_translator.py)
Stage 2: Scout                     (scout.py)
Stage 3: Screener Stage 1, coarse  (coarse_filter.py)
Stage 4: Screener Stage 2, fine    (fine_scoring.py, dimensions.py, evaluator.py)

Support: cost_estimator.py (budget projection), events.py (progress observers)

Orchestrated by: orchestrator.py
"""
