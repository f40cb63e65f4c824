# moviefan/catalog.py
# Client for the upstream movie catalog (TMDb)
# --------------------------------------------
# Issues one of the categorical list queries, a title search or a by-id lookup
# and turns the TMDb payload into plain movie records, keeping the upstream
# order. Any transport, status or decoding failure surfaces as
# UpstreamUnavailable; records are never invented to fill a gap.

import enum
import logging
from urllib.parse import quote, urlencode

import requests

from .errors import BadRequest, UpstreamUnavailable

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"
DEFAULT_REGION = "us"
DEFAULT_PAGE = "1"
CAST_LIMIT = 10


class GetMovieType(enum.Enum):
    SEARCH = "search"
    TOP_RATED = "top_rated"
    NOW_PLAYING = "now_playing"
    POPULAR = "popular"
    UPCOMING = "upcoming"
    BY_ID = "by_id"


LIST_TYPES = (
    GetMovieType.TOP_RATED,
    GetMovieType.NOW_PLAYING,
    GetMovieType.POPULAR,
    GetMovieType.UPCOMING,
)


def normalize_query(query):
    """Collapse whitespace runs into '+' as the upstream search expects."""
    return "+".join((query or "").split())


def parse_movie(payload, region=None):
    """
    Map one TMDb movie object onto the fields the store keeps.

    Returns None when the object has no usable id or a malformed rating.
    ``region`` is only set for list queries, which are region scoped, so a
    search hit or a by-id lookup never clears a stored region.
    """
    if not isinstance(payload, dict):
        return None
    try:
        movie_id = int(payload["id"])
        rating = payload.get("vote_average")
        rating = float(rating) if rating is not None else None
    except (KeyError, TypeError, ValueError):
        return None
    record = {
        "id": movie_id,
        "title": payload.get("title") or payload.get("original_title") or "",
        "overview": payload.get("overview"),
        "language": payload.get("original_language"),
        "release_date": payload.get("release_date") or None,
        "rating": rating,
        "poster_path": payload.get("poster_path"),
    }
    if region:
        record["region"] = region.upper()
    return record


def parse_cast(payload, limit=CAST_LIMIT):
    """Return the billed cast as ``[{'id', 'name'}]`` from an appended credits block."""
    credits = payload.get("credits") or {}
    cast = []
    for entry in (credits.get("cast") or [])[:limit]:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        try:
            actor_id = int(entry["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping cast entry without a usable id: {entry!r}")
            continue
        cast.append({"id": actor_id, "name": entry["name"]})
    return cast


class CatalogClient:
    """Thin wrapper around The Movie Database REST API."""

    def __init__(self, api_key, base_url="https://api.themoviedb.org/3", timeout=10):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch(self, kind, language=DEFAULT_LANGUAGE, region=DEFAULT_REGION,
              query=None, page=DEFAULT_PAGE, movie_id=None):
        """
        Run one catalog query and return the movie records in upstream order.

        ``BY_ID`` returns a list holding at most one record, which also carries
        a ``cast`` entry. Raises BadRequest for missing inputs and
        UpstreamUnavailable when the catalog cannot answer.
        """
        kind = GetMovieType(kind)
        language = language or DEFAULT_LANGUAGE
        page = str(page or DEFAULT_PAGE)

        if kind is GetMovieType.SEARCH:
            normalized = normalize_query(query)
            if not normalized:
                raise BadRequest("search requires a non-empty query")
            payload = self._get("/search/movie", {
                "language": language, "query": normalized, "page": page,
            })
            return self._parse_results(payload, None)

        if kind is GetMovieType.BY_ID:
            try:
                movie_id = int(movie_id)
            except (TypeError, ValueError):
                raise BadRequest(f"invalid movie id: {movie_id!r}")
            payload = self._get(f"/movie/{movie_id}", {
                "language": language, "append_to_response": "credits",
            })
            record = parse_movie(payload)
            if record is None:
                raise UpstreamUnavailable(f"malformed movie payload for id {movie_id}")
            record["cast"] = parse_cast(payload)
            return [record]

        region = region or DEFAULT_REGION
        payload = self._get(f"/movie/{kind.value}", {
            "language": language, "region": region.upper(), "page": page,
        })
        return self._parse_results(payload, region)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _get(self, path, params):
        params = dict(params, api_key=self.api_key)
        # '+' in the search query is already the wire form; keep it literal.
        query_string = urlencode(params, safe="+", quote_via=quote)
        url = f"{self.base_url}{path}"
        shown = {k: v for k, v in params.items() if k != "api_key"}
        logger.info(f"Fetching from catalog: {path} with params: {shown}")
        try:
            response = requests.get(url, params=query_string, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout while fetching {path}")
            raise UpstreamUnavailable(f"timeout fetching {path}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching {path}: {str(e)}")
            raise UpstreamUnavailable(str(e)) from e
        except ValueError as e:
            logger.error(f"Undecodable catalog response for {path}: {str(e)}")
            raise UpstreamUnavailable(f"invalid JSON from {path}") from e

    @staticmethod
    def _parse_results(payload, region):
        if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
            raise UpstreamUnavailable("catalog response has no results list")
        records = []
        for item in payload["results"]:
            record = parse_movie(item, region)
            if record is None:
                logger.warning(f"Skipping malformed catalog entry: {item!r}")
                continue
            records.append(record)
        return records
