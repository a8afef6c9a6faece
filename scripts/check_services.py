"""
Smoke-check the external services the form depends on.

Geocodes a city, builds its 14-day window from the archive, and sends one
prediction request for the recommended models.

Usage:
    python scripts/check_services.py --city Berlin
"""

import sys
import argparse
import logging
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from mintemp.errors import MinTempError
from mintemp.logging_config import setup_logging
from mintemp.models import ModelSelection
from mintemp.orchestrator import PredictionOrchestrator, RequestFailed, Success
from mintemp.weather_client import OpenMeteoClient


def main():
    parser = argparse.ArgumentParser(description="Check geocoding, archive and inference services")
    parser.add_argument("--city", default="Berlin")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    print("\n" + "="*80)
    print("SERVICE CHECK")
    print("="*80)

    print(f"\n[1/2] Fetching history for {args.city}...")
    try:
        location, matrix = OpenMeteoClient().fetch_city_window(args.city)
    except MinTempError as e:
        print(f"❌ {e}")
        sys.exit(1)
    print(f"✓ {location.label}: {matrix.dates[0]} .. {matrix.dates[-1]}")
    print(matrix.to_frame().to_string())

    print("\n[2/2] Requesting predictions...")
    outcome = PredictionOrchestrator().submit(ModelSelection.recommended(), matrix)
    if isinstance(outcome, RequestFailed):
        print(f"❌ {outcome.message}")
        sys.exit(1)

    for model_id, result in outcome.outcomes.items():
        if isinstance(result, Success):
            print(f"✓ {model_id}: {result.value:.2f}{result.unit}")
        else:
            print(f"⚠ {model_id}: {result.message}")


if __name__ == "__main__":
    main()
