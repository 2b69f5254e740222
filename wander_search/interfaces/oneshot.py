"""One-shot interface: run a single search, print JSON results, exit."""

from __future__ import annotations

import argparse
import asyncio
import json

from wander_search.core.bootstrap import setup_search
from wander_search.interfaces.http import serialize_results
from wander_search.search.errors import DispatchError


async def run_oneshot(
    query: str,
    category: str | None,
    latitude: float | None = None,
    longitude: float | None = None,
) -> int:
    try:
        dispatcher = setup_search()
    except ValueError as e:
        print(f"Error: {e}")
        return 2

    payload = {
        "query": query,
        "type": category,
        "latitude": latitude,
        "longitude": longitude,
    }
    try:
        response = await dispatcher.dispatch(payload)
    except DispatchError as e:
        print(json.dumps(e.to_body().model_dump(), indent=2))
        return 2 if e.is_validation else 1
    print(json.dumps(serialize_results(response), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wander-search oneshot",
        description="Search places, users, or hazards once and print the results.",
    )
    parser.add_argument("--type", dest="category", required=True, help="places | users | hazards")
    parser.add_argument("--lat", dest="latitude", type=float, default=None)
    parser.add_argument("--lon", dest="longitude", type=float, default=None)
    parser.add_argument("query", nargs="*", help="Query text (empty matches everything)")
    return parser


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    query = " ".join(args.query).strip()
    return asyncio.run(
        run_oneshot(
            query=query,
            category=args.category,
            latitude=args.latitude,
            longitude=args.longitude,
        )
    )
