"""Compaction strategies, in the order the chain applies them."""

from autocontext.context.compaction.base import CompactionStrategy, StrategyContext, StrategyResult
from autocontext.context.compaction.chain import ChainResult, StrategyChain, default_strategies
from autocontext.context.compaction.current_round import CurrentRoundCompressionStrategy
from autocontext.context.compaction.large_message import CurrentRoundLargeMessageStrategy
from autocontext.context.compaction.large_payload import LargeMessageOffloadStrategy
from autocontext.context.compaction.round_summary import RoundSummaryStrategy
from autocontext.context.compaction.tool_invocation import ToolInvocationCompressionStrategy

__all__ = [
    "ChainResult",
    "CompactionStrategy",
    "CurrentRoundCompressionStrategy",
    "CurrentRoundLargeMessageStrategy",
    "LargeMessageOffloadStrategy",
    "RoundSummaryStrategy",
    "StrategyChain",
    "StrategyContext",
    "StrategyResult",
    "ToolInvocationCompressionStrategy",
    "default_strategies",
]
