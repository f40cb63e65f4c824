# moviefan/social.py
# Social graph between fans, critics, movies and reviews
# ------------------------------------------------------
# Mutations are idempotent and silently skip unknown fans, critics, movies or
# reviews; queries answer False/None in that case. Each mutation is a single
# store transaction.

import logging

from .errors import BadRequest
from .models import (
    critic_recommends, fan_dislikes, fan_follows_critics, fan_follows_fans, fan_likes,
)
from .store import Store

logger = logging.getLogger(__name__)


class SocialGraphService:
    def __init__(self, store=Store):
        self.store = store

    # --- Mutations ---
    def like(self, username, movie_id):
        """Fan likes a movie; any dislike of it by the same fan is removed."""
        fan_id = self._fan_and_movie(username, movie_id)
        if fan_id is None:
            return
        self.store.move_edge(fan_likes, fan_dislikes, fan_id, movie_id)

    def dislike(self, username, movie_id):
        """Fan dislikes a movie; any like of it by the same fan is removed."""
        fan_id = self._fan_and_movie(username, movie_id)
        if fan_id is None:
            return
        self.store.move_edge(fan_dislikes, fan_likes, fan_id, movie_id)

    def recommend(self, critic_username, movie_id):
        critic_id = self._critic_and_movie(critic_username, movie_id)
        if critic_id is None:
            return
        self.store.save_edge(critic_recommends, critic_id, movie_id)

    def attach_review(self, movie_id, review_id):
        if self.store.movie(movie_id) is None or self.store.review(review_id) is None:
            logger.info(f"Review {review_id} not attached: movie {movie_id} or review unknown.")
            return
        self.store.attach_review(review_id, movie_id)

    def follow_fan(self, username, other_username):
        fan_id = self.store.fan_id_by_username(username)
        other_id = self.store.fan_id_by_username(other_username)
        if fan_id is None or other_id is None or fan_id == other_id:
            logger.info(f"Follow skipped: {username} -> fan {other_username}.")
            return
        self.store.save_edge(fan_follows_fans, fan_id, other_id)

    def follow_critic(self, username, critic_username):
        fan_id = self.store.fan_id_by_username(username)
        critic_id = self.store.critic_id_by_username(critic_username)
        if fan_id is None or critic_id is None:
            logger.info(f"Follow skipped: {username} -> critic {critic_username}.")
            return
        self.store.save_edge(fan_follows_critics, fan_id, critic_id)

    # --- Queries ---
    def is_liked_by(self, username, movie_id):
        fan_id = self._fan_and_movie(username, movie_id)
        if fan_id is None:
            return False
        return self.store.has_edge(fan_likes, fan_id, movie_id)

    def is_disliked_by(self, username, movie_id):
        fan_id = self._fan_and_movie(username, movie_id)
        if fan_id is None or not self.store.has_edge(fan_dislikes, fan_id, movie_id):
            return None
        return self.store.fan(fan_id)

    def is_recommended_by(self, critic_username, movie_id):
        critic_id = self._critic_and_movie(critic_username, movie_id)
        if critic_id is None or not self.store.has_edge(critic_recommends, critic_id, movie_id):
            return None
        return self.store.critic(critic_id)

    # The list queries return None for an unknown movie, an empty list for a
    # known movie with no edges.
    def fans_who_liked(self, movie_id):
        return self.store.movie_relation(movie_id, "liked_by")

    def fans_who_disliked(self, movie_id):
        return self.store.movie_relation(movie_id, "disliked_by")

    def critics_who_recommended(self, movie_id):
        return self.store.movie_relation(movie_id, "recommended_by")

    def reviews_of(self, movie_id):
        return self.store.movie_relation(movie_id, "reviews")

    def cast_of(self, movie_id):
        return self.store.movie_relation(movie_id, "cast")

    # --- Entities ---
    def create_fan(self, data):
        username = _required_username(data)
        return self.store.create_fan(
            username, first_name=data.get("first_name"), last_name=data.get("last_name")
        )

    def create_critic(self, data):
        username = _required_username(data)
        return self.store.create_critic(
            username,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            publication=data.get("publication"),
        )

    def create_review(self, data):
        if not isinstance(data, dict) or not str(data.get("author") or "").strip():
            raise BadRequest("review requires an 'author'")
        score = data.get("score")
        if score is not None:
            try:
                score = float(score)
            except (TypeError, ValueError):
                raise BadRequest(f"invalid review score: {score!r}")
        return self.store.create_review(
            str(data["author"]).strip(), str(data.get("body") or ""), score
        )

    # --- Helpers ---
    def _fan_and_movie(self, username, movie_id):
        fan_id = self.store.fan_id_by_username(username)
        if fan_id is None or self.store.movie(movie_id) is None:
            logger.info(f"Fan '{username}' or movie {movie_id} not found; nothing to do.")
            return None
        return fan_id

    def _critic_and_movie(self, username, movie_id):
        critic_id = self.store.critic_id_by_username(username)
        if critic_id is None or self.store.movie(movie_id) is None:
            logger.info(f"Critic '{username}' or movie {movie_id} not found; nothing to do.")
            return None
        return critic_id


def _required_username(data):
    if not isinstance(data, dict):
        raise BadRequest("request body must be a JSON object")
    username = str(data.get("username") or "").strip()
    if not username:
        raise BadRequest("'username' is required")
    return username
