#!/usr/bin/env python3
"""Generate a markdown list of 42 campus IDs grouped by country.

Usage:
    fortytwo-campus-list [OUTPUT]   (default: 42-campus-ids.md)
"""

import argparse
import asyncio
import re
import sys
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import config
from services.api_client import ApiClient, build_api_client
from utils.errors import ConfigError, GatewayError
from utils.logging_ import logger

DEFAULT_OUTPUT = "42-campus-ids.md"
MAX_PAGES = 10


def group_by_country(campuses: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    groups: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for campus in campuses:
        groups[campus.get("country") or "Unknown"].append(campus)
    return {
        country: sorted(groups[country], key=lambda c: (c.get("name") or "").lower())
        for country in sorted(groups)
    }


def _anchor(country: str) -> str:
    return re.sub(r"\s+", "-", country.lower())


def render_markdown(campuses: List[Dict[str, Any]], generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    by_country = group_by_country(campuses)

    lines = [
        "# 42 School Campus IDs by Country",
        "",
        f"Generated on: {generated_at.isoformat()}",
        f"Total campuses: {len(campuses)}",
        f"Total countries: {len(by_country)}",
        "",
        "---",
        "",
        "## Table of Contents",
        "",
    ]
    lines += [f"- [{country}](#{_anchor(country)})" for country in by_country]
    lines += ["", "---", ""]

    for country, entries in by_country.items():
        lines += [f"## {country}", "", "| ID | Campus Name | City |", "|----|-------------|------|"]
        for campus in entries:
            lines.append(f"| {campus.get('id')} | {campus.get('name') or 'N/A'} | {campus.get('city') or 'N/A'} |")
        lines.append("")

    lines += [
        "---",
        "",
        "## Summary Statistics",
        "",
        "| Country | Number of Campuses |",
        "|---------|--------------------|",
    ]
    lines += [f"| {country} | {len(entries)} |" for country, entries in by_country.items()]
    lines += [
        "",
        "> This list was generated using the 42 API and may not include all campuses.",
        "> For the most up-to-date information, please refer to the official 42 Intranet.",
        "",
    ]
    return "\n".join(lines)


async def fetch_campuses(api: ApiClient) -> List[Dict[str, Any]]:
    return await api.paginate("/v2/campus", page_size=100, max_pages=MAX_PAGES)


async def generate(output: Path, api: ApiClient) -> Dict[str, List[Dict[str, Any]]]:
    campuses = await fetch_campuses(api)
    logger.info(f"Total campuses fetched: {len(campuses)}")
    output.write_text(render_markdown(campuses), encoding="utf-8")
    logger.info(f"Markdown file created: {output}")
    return group_by_country(campuses)


async def _run(output: Path, client_id: str, client_secret: str):
    api = build_api_client(client_id, client_secret)
    try:
        by_country = await generate(output, api)
    finally:
        await api.aclose()
    for country, entries in by_country.items():
        print(f"{country}: {len(entries)} campuses")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="fortytwo-campus-list", description=__doc__.splitlines()[0])
    parser.add_argument("output", nargs="?", default=DEFAULT_OUTPUT, help="Markdown file to write")
    args = parser.parse_args(argv)

    try:
        client_id, client_secret = config.load_credentials()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        asyncio.run(_run(Path(args.output), client_id, client_secret))
    except GatewayError as e:
        logger.error(f"Campus list generation failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
