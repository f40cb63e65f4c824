# moviefan/store.py
# Repository over the relational store
# ------------------------------------
# All SQLAlchemy access lives here; the services and routes call this module
# instead of touching db.session directly. Every public call runs as one
# transaction: it either commits or rolls back and raises StoreUnavailable.

import functools
import logging

from sqlalchemy import delete, exists, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from .errors import Conflict, StoreUnavailable
from .models import Actor, Critic, Fan, Movie, Review, db, movie_cast

logger = logging.getLogger(__name__)

# Movie relations the list queries may read through Store.movie_relation
MOVIE_RELATIONS = ("liked_by", "disliked_by", "recommended_by", "reviews", "cast")


def _transactional(func):
    """Roll back and re-raise any SQLAlchemy failure as StoreUnavailable."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Store error in {func.__name__}: {e}")
            raise StoreUnavailable(str(e)) from e
    return wrapper


def _retry_on_conflict(write, label):
    """
    Run *write* (which commits) and retry it once after a unique-key clash.

    A concurrent request may insert the same catalog row between our read and
    our commit; after the rollback the retry reads that row and updates it.
    """
    try:
        return write()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Concurrent insert during {label}, retrying once: {e.orig}")
    return write()


def _endpoints(table):
    left, right = [c for c in table.c if c.name != "id"]
    return left, right


def _edge_exists(table, left_id, right_id):
    left, right = _endpoints(table)
    stmt = select(exists().where(left == left_id, right == right_id))
    return bool(db.session.execute(stmt).scalar())


def _insert_edge(table, left_id, right_id):
    if _edge_exists(table, left_id, right_id):
        return False
    left, right = _endpoints(table)
    db.session.execute(insert(table).values({left.name: left_id, right.name: right_id}))
    return True


def _delete_edge(table, left_id, right_id):
    left, right = _endpoints(table)
    result = db.session.execute(delete(table).where(left == left_id, right == right_id))
    return result.rowcount > 0


class Store:
    """By-id lookups, username lookups, movie upserts and edge writes."""

    # --- Lookups ---
    @staticmethod
    @_transactional
    def movie(movie_id):
        return db.session.get(Movie, movie_id)

    @staticmethod
    @_transactional
    def fan(fan_id):
        return db.session.get(Fan, fan_id)

    @staticmethod
    @_transactional
    def critic(critic_id):
        return db.session.get(Critic, critic_id)

    @staticmethod
    @_transactional
    def review(review_id):
        return db.session.get(Review, review_id)

    @staticmethod
    @_transactional
    def fan_id_by_username(username):
        return db.session.execute(
            select(Fan.id).where(Fan.username == username)
        ).scalar_one_or_none()

    @staticmethod
    @_transactional
    def critic_id_by_username(username):
        return db.session.execute(
            select(Critic.id).where(Critic.username == username)
        ).scalar_one_or_none()

    @staticmethod
    @_transactional
    def all_movies():
        return list(db.session.execute(select(Movie).order_by(Movie.id)).scalars())

    @staticmethod
    @_transactional
    def has_edge(table, left_id, right_id):
        return _edge_exists(table, left_id, right_id)

    @staticmethod
    @_transactional
    def movie_relation(movie_id, relation):
        """
        Return the rows of one movie relation (``liked_by``, ``reviews``, ...)
        in insertion order, or None when the movie is unknown.
        """
        if relation not in MOVIE_RELATIONS:
            raise ValueError(f"unknown movie relation: {relation}")
        attribute = getattr(Movie, relation)
        stmt = (
            select(Movie)
            .where(Movie.id == movie_id)
            .options(selectinload(attribute))
            .execution_options(populate_existing=True)
        )
        movie = db.session.execute(stmt).scalars().first()
        return list(getattr(movie, relation)) if movie is not None else None

    @staticmethod
    @_transactional
    def fan_with_feed_sources(fan_id):
        """Load a fan with every relation the feed reads, in batched queries.

        One query per relation level instead of one per followed critic/fan.
        """
        stmt = (
            select(Fan)
            .where(Fan.id == fan_id)
            .options(
                selectinload(Fan.liked_movies),
                selectinload(Fan.critics_followed).selectinload(Critic.recommended_movies),
                selectinload(Fan.fans_followed).selectinload(Fan.liked_movies),
            )
        )
        return db.session.execute(stmt).scalars().first()

    # --- Writers ---
    @staticmethod
    @_transactional
    def upsert_movies(records):
        """Insert or update movies by id, touching catalog fields only.

        Relation tables (likes, dislikes, recommendations, reviews, cast) are
        never written here, and a field missing from a record keeps its stored
        value. Returns the rows in the order of *records*.
        """
        records = list(records)

        def write():
            movies = []
            batch = {}
            for record in records:
                movie = batch.get(record["id"]) or db.session.get(Movie, record["id"])
                if movie is None:
                    movie = Movie(id=record["id"])
                    db.session.add(movie)
                batch[movie.id] = movie
                for field in Movie.CATALOG_FIELDS:
                    if field in record:
                        setattr(movie, field, record[field])
                if movie.title is None:
                    movie.title = ""
                movies.append(movie)
            db.session.commit()
            return movies

        return _retry_on_conflict(write, "movie upsert")

    @staticmethod
    def upsert_movie(record):
        return Store.upsert_movies([record])[0]

    @staticmethod
    @_transactional
    def attach_cast_if_empty(movie_id, actors):
        """Attach *actors* to a movie that has no cast yet.

        A movie that already has cast rows is left untouched.
        """
        if not actors:
            return False

        def write():
            if db.session.get(Movie, movie_id) is None:
                return False
            has_cast = db.session.execute(
                select(exists().where(movie_cast.c.movie_id == movie_id))
            ).scalar()
            if has_cast:
                return False
            for entry in actors:
                if db.session.get(Actor, entry["id"]) is None:
                    db.session.add(Actor(id=entry["id"], name=entry["name"]))
                    db.session.flush()
                _insert_edge(movie_cast, movie_id, entry["id"])
            db.session.commit()
            return True

        return _retry_on_conflict(write, "cast attach")

    @staticmethod
    @_transactional
    def save_edge(table, left_id, right_id):
        """Idempotently add one edge. Returns False when it was already there."""
        try:
            created = _insert_edge(table, left_id, right_id)
            db.session.commit()
        except IntegrityError:
            # A concurrent request added the same edge first.
            db.session.rollback()
            return False
        return created

    @staticmethod
    @_transactional
    def move_edge(add_to, remove_from, left_id, right_id):
        """Add an edge to *add_to* and drop it from *remove_from* atomically."""
        try:
            _delete_edge(remove_from, left_id, right_id)
            created = _insert_edge(add_to, left_id, right_id)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return False
        return created

    @staticmethod
    @_transactional
    def attach_review(review_id, movie_id):
        review = db.session.get(Review, review_id)
        review.movie_id = movie_id
        db.session.commit()

    @staticmethod
    @_transactional
    def create_fan(username, first_name=None, last_name=None):
        fan = Fan(username=username, first_name=first_name, last_name=last_name)
        db.session.add(fan)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise Conflict(f"fan username already taken: {username}") from e
        return fan

    @staticmethod
    @_transactional
    def create_critic(username, first_name=None, last_name=None, publication=None):
        critic = Critic(username=username, first_name=first_name,
                        last_name=last_name, publication=publication)
        db.session.add(critic)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise Conflict(f"critic username already taken: {username}") from e
        return critic

    @staticmethod
    @_transactional
    def create_review(author, body, score=None):
        review = Review(author=author, body=body, score=score)
        db.session.add(review)
        db.session.commit()
        return review
