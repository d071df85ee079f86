"""Protean Engine runner for the marketplace domain.

Processes events asynchronously in production: notification handlers run
here instead of inside the request's unit of work.

Usage:
    python src/server.py
    python src/server.py --test-mode   # exit once pending events are processed
"""

import argparse

from marketplace.domain import marketplace
from marketplace.utils.logging import configure_logging
from protean.server.engine import Engine


def main():
    parser = argparse.ArgumentParser(description="Marketplace Engine runner")
    parser.add_argument("--test-mode", action="store_true", help="Stop after processing pending events")
    args = parser.parse_args()

    configure_logging()
    marketplace.init()
    with marketplace.domain_context():
        Engine(marketplace, test_mode=args.test_mode).run()


if __name__ == "__main__":
    main()
