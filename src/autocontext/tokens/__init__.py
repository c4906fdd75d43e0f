"""Token management and tracking.

Provides the token estimators used to evaluate the compression budget
and a tracker for the tokens spent by summarizer calls.

Standalone Usage:
    >>> from autocontext.tokens import ApproximateTokenCounter, TokenCounter
    >>> estimator = ApproximateTokenCounter()
    >>> estimator.count_messages([])
    0
    >>> counter = TokenCounter(encoding="cl100k_base")  # tiktoken-backed
"""

from autocontext.tokens.counter import ApproximateTokenCounter, TokenCounter, TokenEstimator
from autocontext.tokens.tracker import TokenUsage, UsageRecord, UsageTracker

__all__ = [
    "ApproximateTokenCounter",
    "TokenCounter",
    "TokenEstimator",
    "TokenUsage",
    "UsageRecord",
    "UsageTracker",
]
