# moviefan/recommender.py
# Personalized movie feed for a fan
# ---------------------------------
# The feed is built from the fan's social graph: first every movie recommended
# by the critics the fan follows, then every movie liked by the fans they
# follow, skipping movies the fan already likes. Relation order is the order
# the edges were created in. A movie reachable through several sources appears
# once per source; dedupe_feed() is the wrapper for callers that want it once.

import logging

from .store import Store

logger = logging.getLogger(__name__)


def recommend_for_fan(fan_id, store=Store):
    """
    Return the ordered feed of Movie rows for *fan_id*.
    An unknown fan gets an empty feed. Read-only: no catalog calls, no writes.
    """
    fan = store.fan_with_feed_sources(fan_id)
    if fan is None:
        logger.info(f"Feed requested for unknown fan {fan_id}.")
        return []

    already_liked = {movie.id for movie in fan.liked_movies}
    feed = []

    # Critic pass always precedes the fan pass.
    for critic in fan.critics_followed:
        for movie in critic.recommended_movies:
            if movie.id not in already_liked:
                feed.append(movie)
    from_critics = len(feed)

    for followed in fan.fans_followed:
        for movie in followed.liked_movies:
            if movie.id not in already_liked:
                feed.append(movie)

    logger.info(f"Feed for fan {fan_id}: {from_critics} from critics, "
                f"{len(feed) - from_critics} from fans.")
    return feed


def dedupe_feed(feed):
    """Drop repeated movies, keeping the first occurrence."""
    seen = set()
    unique = []
    for movie in feed:
        if movie.id not in seen:
            seen.add(movie.id)
            unique.append(movie)
    return unique
