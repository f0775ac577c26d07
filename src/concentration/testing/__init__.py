"""Playtesting framework for Concentration.

Key classes:
- MatchRunner: Plays a full match between a simulated human and an AI suggester
- MatchResult: Summary of one match

Usage:
    from concentration.opponents import Difficulty, MemorySuggester
    from concentration.testing import MatchRunner

    runner = MatchRunner(4, 4, human=MemorySuggester(), ai=MemorySuggester(),
                         difficulty=Difficulty.HARD)
    result = await runner.run_match()
"""

from .match_runner import MatchResult, MatchRunner, run_match_sync

__all__ = ["MatchResult", "MatchRunner", "run_match_sync"]
