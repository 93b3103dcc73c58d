import argparse
import logging
import os
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

from dendro_overlap.api.server import create_app
from dendro_overlap.api.state import ViewState
from dendro_overlap.data.sample import sample_dataset
from dendro_overlap.logging_utils import setup_logging


def parse_args():
    parser = argparse.ArgumentParser(description="Start the dendrogram overlap API server")
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5001,
        help="Port to bind to (default: 5001)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode"
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Serve the built-in 8-document sample instead of the configured sources"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    # Configure logging level via environment if not set
    if not os.getenv("API_LOG_LEVEL"):
        os.environ["API_LOG_LEVEL"] = "DEBUG" if args.debug else "INFO"
    setup_logging(console_level=logging.DEBUG if args.debug else logging.INFO)

    overrides = {}
    if args.sample:
        state = ViewState()
        state.commit_load(state.begin_load(), sample_dataset())
        overrides = {"VIEW_STATE": state, "LOAD_ON_STARTUP": False}

    print(f"Starting Flask API server on http://{args.host}:{args.port}")

    app = create_app(overrides)
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
