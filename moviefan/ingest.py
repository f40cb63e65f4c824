# moviefan/ingest.py
# Caches catalog results in the local store
# -----------------------------------------
# Every movie the catalog returns is upserted by its catalog id so later
# social actions (likes, recommendations, reviews) can point at it.

import logging

from .catalog import GetMovieType, normalize_query
from .errors import UpstreamUnavailable
from .store import Store

logger = logging.getLogger(__name__)


class IngestService:
    def __init__(self, catalog, store=Store):
        self.catalog = catalog
        self.store = store

    def ingest(self, records):
        """Upsert *records* and return the stored movies in the same order."""
        records = list(records)
        if not records:
            return []
        movies = self.store.upsert_movies(records)
        for record in records:
            if record.get("cast"):
                self.store.attach_cast_if_empty(record["id"], record["cast"])
        logger.info(f"Ingested {len(movies)} movies from the catalog.")
        return movies

    def browse(self, kind, language=None, region=None, query=None, page=None):
        """
        Fetch a catalog list, cache it and return the stored movies.
        An unavailable catalog yields an empty list.
        """
        if GetMovieType(kind) is GetMovieType.SEARCH and not normalize_query(query):
            return []
        try:
            records = self.catalog.fetch(kind, language=language, region=region,
                                         query=query, page=page)
        except UpstreamUnavailable as e:
            logger.error(f"Catalog unavailable for {GetMovieType(kind).name}: {e}")
            return []
        return self.ingest(records)

    def movie_by_id(self, movie_id):
        """
        Fetch one movie from the catalog and cache it.

        Falls back to the cached row when the catalog cannot answer; returns
        None when neither has it.
        """
        try:
            records = self.catalog.fetch(GetMovieType.BY_ID, movie_id=movie_id)
        except UpstreamUnavailable as e:
            logger.error(f"Catalog unavailable for movie {movie_id}: {e}")
            return self.store.movie(movie_id)
        movies = self.ingest(records)
        return movies[0] if movies else None
