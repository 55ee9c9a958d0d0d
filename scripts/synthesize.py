"""Write a synthetic test signal to a JSON sample file."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from tswhist import generate_synthetic_series


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic signal for sliding histogram runs")
    parser.add_argument("output", type=Path, help="Destination JSON file")
    parser.add_argument("--n-samples", type=int, default=10_000)
    parser.add_argument("--kind", choices=["gaussian", "sine"], default="gaussian")
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    samples = generate_synthetic_series(args.n_samples, args.kind, seed=args.seed)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(json.dumps({"samples": samples, "kind": args.kind}), encoding="utf-8")
    print(f"Wrote {len(samples)} {args.kind} samples to {args.output}")


if __name__ == "__main__":
    main()
