"""
link_crawler.py: crawl an in-memory site with the iterative coordinator.

Pages are fetched concurrently and links found in each page are remapped.
Fragment links count as the page they point into, and broken links end up
in ``rejected_keys`` without stopping the crawl.

Usage:
    PYTHONPATH=src python examples/link_crawler.py
"""

import asyncio
import logging
import random

from itermap import IterativeCoordinator

SITE = {
    "/": ["/docs", "/blog", "/about"],
    "/docs": ["/docs/install", "/docs/api", "/"],
    "/docs/install": ["/docs"],
    "/docs/api": ["/docs", "/docs/api#errors"],
    "/docs/api#errors": [],
    "/blog": ["/blog/launch", "/"],
    "/blog/launch": ["/docs/install", "/missing"],
    "/about": [],
}


async def fetch(path: str) -> list[str]:
    await asyncio.sleep(random.uniform(0.001, 0.02))
    if path not in SITE:
        raise LookupError(f"404 {path}")
    return SITE[path]


def same_page(path1: str, path2: str) -> bool:
    return path1.split("#", 1)[0] == path2.split("#", 1)[0]


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    coordinator = IterativeCoordinator(["/"], equals=same_page, name="crawler")

    def collect(links, found, remap, path, resolved, rejected):
        for link in found:
            remap(link)
        return {**links, path: found}

    def finish(links, remap, resolved, rejected):
        print(f"cycle {coordinator.cycles}: {len(resolved)} ok, {len(rejected)} failed")

    coordinator.init({}).reduce(collect).end(finish)
    coordinator.map(fetch)

    links = await coordinator
    for path in sorted(links):
        print(f"{path:16} -> {', '.join(links[path]) or '-'}")
    print(coordinator.snapshot().model_dump_json(indent=2))


if __name__ == "__main__":
    asyncio.run(main())
