#!/usr/bin/env python3
"""Offline playtest runner - simulated human vs. AI suggester.

Plays many matches with the real engine and arbitration loop and reports
win rates per difficulty. Deterministic suggesters need no LLM; pass
``--ai claude`` to playtest the Claude player (requires credentials).

Usage:
    python scripts/simulate_matches.py --rows 4 --cols 4 --games 200 \\
        --ai memory --difficulty hard --output results.json
"""

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path

from concentration.opponents import SUGGESTER_TYPES, Difficulty, get_suggester
from concentration.testing import run_match_sync

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--rows", type=int, default=4)
    parser.add_argument("--cols", type=int, default=4)
    parser.add_argument("--games", type=int, default=100)
    parser.add_argument("--human", choices=SUGGESTER_TYPES, default="memory")
    parser.add_argument("--ai", choices=SUGGESTER_TYPES, default="memory")
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty], default="medium")
    parser.add_argument("--seed", type=int, default=None, help="Base seed; game i uses seed+i")
    parser.add_argument("--output", type=Path, default=None, help="Write per-game results as JSON")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    difficulty = Difficulty(args.difficulty)

    results = []
    for i in range(args.games):
        seed = None if args.seed is None else args.seed + i
        human_kwargs = {} if args.human == "claude" else {"seed": seed}
        ai_kwargs = {} if args.ai == "claude" else {"seed": None if seed is None else seed + 10_000}
        result = run_match_sync(
            args.rows,
            args.cols,
            human=get_suggester(args.human, **human_kwargs),
            ai=get_suggester(args.ai, **ai_kwargs),
            difficulty=difficulty,
            random_seed=seed,
        )
        results.append(result)

    winners = Counter(r.winner for r in results)
    avg_attempts = sum(r.pair_attempts for r in results) / max(1, len(results))
    print(f"{args.games} games, {args.rows}x{args.cols}, human={args.human} ai={args.ai} ({difficulty.value})")
    for outcome in ("user", "ai", "draw", "unfinished"):
        print(f"  {outcome:<10} {winners.get(outcome, 0):>5} ({winners.get(outcome, 0) / max(1, args.games):.1%})")
    print(f"  avg pair attempts: {avg_attempts:.1f}")

    if args.output:
        args.output.write_text(json.dumps([r.to_dict() for r in results], indent=2))
        print(f"Wrote {len(results)} results to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
