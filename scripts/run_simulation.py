#!/usr/bin/env python3
"""Run the position simulator.

Usage:
    python scripts/run_simulation.py --config examples/default.yaml --out out --charts

Outputs:
    results.json - Full ResultSet
    sha256.txt - SHA256 digest of the ResultSet
    profit_loss.png, position.png - Charts (with --charts)
"""

from __future__ import annotations

import sys

from cfdsim.cli import main

if __name__ == "__main__":
    sys.exit(main())
