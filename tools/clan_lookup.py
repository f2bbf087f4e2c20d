"""Look up clans from the terminal through the same gateway the site uses.

Usage:
    python -m tools.clan_lookup "the crushers"
    python -m tools.clan_lookup "#9Q2YJ0U"
    python -m tools.clan_lookup legends --location 57000249 --variants
"""

import argparse
import asyncio
import sys

sys.path.insert(0, "backend")

from clash_hub.middleware.logging import setup_logging
from clash_hub.providers.royale_api import RoyaleApiGateway
from clash_hub.services.fuzzy_search import generate_search_variations
from clash_hub.services.hub_client import RoyaleHubClient
from clash_hub.services.pages import ClanSearchPage
from clash_hub.services.renderer import clan_card_view


async def run(query: str, location_id: str | None, show_variants: bool) -> int:
    if show_variants:
        for variant in generate_search_variations(query):
            print(f"variant: {variant!r}")

    gateway = RoyaleApiGateway()
    page = ClanSearchPage(RoyaleHubClient(gateway), page_size=50)
    try:
        result = await page.search(query, location_id)
    finally:
        await gateway.aclose()

    if result.error:
        print(result.error)
        return 1

    for clan in page.paginator.revealed_items():
        view = clan_card_view(clan)
        print(
            f"{view.tag:<12} {view.name:<24} members={view.members:<6} "
            f"score={view.score:<8} {view.type_info.label} ({view.location_name})"
        )
    print(f"{page.paginator.state.total} clan(s) for {query!r}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Search clans by tag or fuzzy name.")
    parser.add_argument("query", help="Clan tag (#ABC123) or name.")
    parser.add_argument("--location", type=str, default=None, help="Optional locationId filter.")
    parser.add_argument("--variants", action="store_true", help="Print the name variants that will be tried.")
    args = parser.parse_args()
    setup_logging()
    raise SystemExit(asyncio.run(run(args.query, args.location, args.variants)))


if __name__ == "__main__":
    main()
