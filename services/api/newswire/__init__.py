"""RSS news aggregation API with LLM summaries, fact-checks and search answers."""

__version__ = "1.0.0"
