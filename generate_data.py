"""
Warm the local movie cache from the upstream catalog.

Fetches the top-rated, now-playing, popular and upcoming lists for pages
1..N and upserts every movie into the store, so fans can like and critics
can recommend them before anyone has browsed the lists.
"""

import argparse
import logging
import sys
import time

from moviefan.catalog import LIST_TYPES
from moviefan.config import Config
from moviefan.errors import UpstreamUnavailable
from moviefan.ingest import IngestService
from moviefan.main import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Cache catalog movie lists in the local store.")
    parser.add_argument("--pages", type=int, default=3, help="pages per list to fetch (default: 3)")
    parser.add_argument("--region", default="us", help="ISO 3166-1 region (default: us)")
    parser.add_argument("--lang", default="en-US", help="IETF language tag (default: en-US)")
    parser.add_argument("--delay", type=float, default=0.1,
                        help="seconds to sleep between catalog calls (default: 0.1)")
    return parser.parse_args(argv)


def warm_cache(catalog, ingest, pages, region, lang, delay=0.0):
    """Fetch and ingest every list page; returns the number of movies stored."""
    total = 0
    for kind in LIST_TYPES:
        for page in range(1, pages + 1):
            logging.info(f"Fetching {kind.name} page {page}")
            try:
                records = catalog.fetch(kind, language=lang, region=region, page=str(page))
            except UpstreamUnavailable as e:
                logging.warning(f"Skipping {kind.name} page {page}: {e}")
                continue
            if not records:
                logging.warning(f"No movies found on {kind.name} page {page}.")
                continue
            total += len(ingest.ingest(records))
            logging.info(f"Stored {len(records)} movies from {kind.name} page {page}. "
                         f"Total so far: {total}")
            if delay:
                time.sleep(delay)  # respect the catalog's rate limits
    return total


def main(argv=None):
    args = parse_args(argv)
    if not Config.TMDB_API_KEY:
        logging.error("TMDB_API_KEY not set in environment variables")
        return 1

    app = create_app()
    catalog = app.extensions['moviefan.catalog']
    with app.app_context():
        total = warm_cache(catalog, IngestService(catalog), args.pages,
                           args.region, args.lang, args.delay)
    if not total:
        logging.error("No movies fetched from the catalog.")
        return 1
    logging.info(f"Cache warm-up finished: {total} movies stored.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
