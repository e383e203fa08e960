"""Market sentiment index refresh entry point.

Usage:
    python run_pipeline.py [config.yaml]

Loads the config, fetches the tracked indices, writes the current snapshot and
the causal sentiment history, and reports success/failure to stdout and the
pipeline log.
"""

import os
import sys
from dotenv import load_dotenv

load_dotenv()  # must precede package imports so env vars are available at module load

from sentiment_index.core.config import load_config  # noqa: E402
from sentiment_index.core.logger import logger  # noqa: E402
from sentiment_index.pipeline.engine import PipelineEngine  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    """Run one refresh. Returns 0 on success, 1 on failure."""
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else "config.yaml"

    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"run_pipeline: failed to load config: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    output_dir = config.get("output_dir", "data")

    try:
        engine = PipelineEngine(config=config, output_dir=output_dir)
        snapshot, history = engine.run()
    except Exception as exc:
        logger.error(f"run_pipeline: PipelineEngine raised: {exc}", exc_info=True)
        print(f"ERROR: pipeline failed — {exc}", file=sys.stderr)
        return 1

    sentiment = snapshot["sentiment"]
    print(
        f"SUCCESS: {sentiment['label']} ({sentiment['score']}) on {snapshot['date']}, "
        f"{len(history)} historical days written to {os.path.abspath(output_dir)}"
    )
    logger.info(f"run_pipeline: completed — {len(history)} days → {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
