#!/usr/bin/env python
"""
Evaluate Datapoints — Rate and classify a JSON file of measurements

Usage:
    python scripts/evaluate_datapoints.py data/sample_datapoints.json
    python scripts/evaluate_datapoints.py data.json --norm-file norms.json --norm-id my-norm --csv out.csv
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from corrosion_risk.cli import main


if __name__ == "__main__":
    sys.exit(main())
