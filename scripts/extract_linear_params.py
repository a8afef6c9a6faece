"""
Extract coefficients from a saved linear regression model.

Prints a LINEAR_MODEL_PARAMS block for mintemp/config.py and checks that
the embedded evaluation reproduces the estimator's own predictions.

Usage:
    python scripts/extract_linear_params.py models/linear_regression_model.joblib
"""

import sys
import argparse
import json
from pathlib import Path

import joblib
import numpy as np

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from mintemp.config import RANDOM_STATE, WINDOW_DAYS
from mintemp.linear_model import load_linear_parameters, predict_linear


def verify_against_estimator(model_path, params, n_samples=200):
    """
    Compare embedded predictions with ``estimator.predict`` on random windows.

    Returns:
    --------
    max_abs_diff : float
        Largest absolute difference seen
    """
    model_data = joblib.load(model_path)
    estimator = model_data.get('model') if isinstance(model_data, dict) else model_data

    rng = np.random.default_rng(RANDOM_STATE)
    X = rng.normal(15.0, 8.0, size=(n_samples, params.n_features))

    expected = estimator.predict(X)
    actual = np.array([predict_linear(row, params) for row in X])
    return float(np.max(np.abs(expected - actual)))


def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("model_path", type=Path, help="joblib file with a fitted linear regressor")
    parser.add_argument("--fields", nargs="+", default=["min_temp"],
                        help="measurement fields the model was fitted on, in order")
    args = parser.parse_args()

    print("\n" + "="*80)
    print("LINEAR MODEL PARAMETER EXTRACTION")
    print("="*80)

    if not args.model_path.exists():
        print(f"❌ Model file not found: {args.model_path}")
        sys.exit(1)

    params = load_linear_parameters(args.model_path, fields=args.fields)
    expected_features = WINDOW_DAYS * len(params.fields)
    print(f"✓ Loaded {params.n_features} coefficients, intercept {params.intercept!r}")

    if params.n_features != expected_features:
        print(f"⚠ Expected {expected_features} coefficients for fields {list(params.fields)}")

    diff = verify_against_estimator(args.model_path, params)
    print(f"✓ Max |estimator - embedded| on random windows: {diff:.3e}")

    print("\nLINEAR_MODEL_PARAMS = " + json.dumps({
        'coef': list(params.coef),
        'intercept': params.intercept,
        'fields': list(params.fields),
    }, indent=4))


if __name__ == "__main__":
    main()
