#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging

from dyncache.config import get_settings
from dyncache.simulation import standard_workloads


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Report cache size and hit rate on synthetic workloads")
    parser.add_argument(
        "--mem-len",
        type=int,
        default=settings.mem_len,
        help=f"Request memory length (default: {settings.mem_len})",
    )
    parser.add_argument(
        "--sample-size",
        type=int,
        default=4096,
        help="Requests per random workload (default: 4096)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    print(f"Simulating with mem_len={args.mem_len} sample_size={args.sample_size}...")
    for report in standard_workloads(
        mem_len=args.mem_len,
        sample_size=args.sample_size,
        seed=args.seed,
    ):
        print(f"- {report.describe()}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
