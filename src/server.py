"""Protean Engine runner for the Ratings domain.

Starts Engine workers that consume Ordering events asynchronously and keep
the CustomerOrders projection current. Only needed when event processing is
async (production); in test and development the handlers run inline.

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine

from ratings.domain import ratings
from ratings.utils.logging import configure_logging


async def run():
    ratings.init()
    await Engine(ratings).run()


def main():
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
