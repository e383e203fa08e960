"""Post-clone environment check.

Run once after installing the project:

    python -m venv .venv && source .venv/bin/activate
    pip install -e ".[test]"
    python setup_env.py

This script:
1. Verifies all third-party imports resolve.
2. Verifies the package modules import cleanly.
3. Checks that config.yaml loads.
"""

import sys


def verify_imports() -> None:
    print("Verifying core imports...")
    required = [
        ("yfinance", "yfinance"),
        ("pandas", "pandas"),
        ("requests", "requests"),
        ("yaml", "PyYAML"),
        ("dotenv", "python-dotenv"),
    ]
    all_ok = True
    for mod, pkg in required:
        try:
            __import__(mod)
            print(f"  [OK] {pkg}")
        except ImportError:
            print(f"  [MISSING] {pkg}  →  run: pip install {pkg}")
            all_ok = False

    if not all_ok:
        print("\nSome packages are missing. Run:  pip install -e .")
        sys.exit(1)


def verify_package_imports() -> None:
    print("\nVerifying package imports...")
    try:
        from sentiment_index.providers.market import YFinanceProvider  # noqa: F401
        from sentiment_index.scoring.history import HistoricalReconstructor  # noqa: F401
        from sentiment_index.pipeline.engine import PipelineEngine  # noqa: F401
        print("  [OK] All pipeline modules import cleanly.")
    except Exception as exc:
        print(f"  [ERROR] Pipeline import failed: {exc}")
        sys.exit(1)


def verify_config() -> None:
    print("\nLoading config.yaml...")
    from sentiment_index.core.config import load_config
    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        print(f"  [ERROR] {exc}")
        sys.exit(1)
    keys = ", ".join(entry["key"] for entry in config["indices"])
    print(f"  [OK] {len(config['indices'])} indices configured: {keys}")


if __name__ == "__main__":
    print("=" * 60)
    print("  Market Sentiment Index — Environment Setup Check")
    print("=" * 60)
    verify_imports()
    verify_package_imports()
    verify_config()
    print("\n" + "=" * 60)
    print("  Setup complete. You can now run: python run_pipeline.py")
    print("=" * 60)
