# moviefan/models.py
# Relational schema for the Movie Fan backend
# -------------------------------------------
# One table per entity and one association table per relation. Every
# association table carries a surrogate autoincrement id so relations can be
# read back in the order their edges were created, and a unique constraint
# over the endpoint ids so each relation stays a set.

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _edge_table(name, left, left_fk, right, right_fk):
    return db.Table(
        name,
        db.Column("id", db.Integer, primary_key=True, autoincrement=True),
        db.Column(left, db.Integer, db.ForeignKey(left_fk), nullable=False),
        db.Column(right, db.Integer, db.ForeignKey(right_fk), nullable=False),
        db.UniqueConstraint(left, right, name=f"uq_{name}"),
    )


fan_likes = _edge_table("fan_likes", "fan_id", "fans.id", "movie_id", "movies.id")
fan_dislikes = _edge_table("fan_dislikes", "fan_id", "fans.id", "movie_id", "movies.id")
critic_recommends = _edge_table(
    "critic_recommends", "critic_id", "critics.id", "movie_id", "movies.id"
)
fan_follows_fans = _edge_table(
    "fan_follows_fans", "follower_id", "fans.id", "followed_id", "fans.id"
)
fan_follows_critics = _edge_table(
    "fan_follows_critics", "fan_id", "fans.id", "critic_id", "critics.id"
)
movie_cast = _edge_table("movie_cast", "movie_id", "movies.id", "actor_id", "actors.id")


class Movie(db.Model):
    __tablename__ = "movies"

    # Catalog-sourced columns; the only ones an ingest may overwrite.
    CATALOG_FIELDS = (
        "title", "overview", "language", "region",
        "release_date", "rating", "poster_path",
    )

    id           = db.Column(db.Integer, primary_key=True, autoincrement=False)
    title        = db.Column(db.String(255), nullable=False, default="")
    overview     = db.Column(db.Text)
    language     = db.Column(db.String(16))
    region       = db.Column(db.String(8))
    release_date = db.Column(db.String(16))
    rating       = db.Column(db.Float)
    poster_path  = db.Column(db.String(512))

    liked_by = db.relationship(
        "Fan", secondary=fan_likes, order_by=fan_likes.c.id, viewonly=True
    )
    disliked_by = db.relationship(
        "Fan", secondary=fan_dislikes, order_by=fan_dislikes.c.id, viewonly=True
    )
    recommended_by = db.relationship(
        "Critic", secondary=critic_recommends, order_by=critic_recommends.c.id,
        viewonly=True,
    )
    reviews = db.relationship("Review", order_by="Review.id", viewonly=True)
    cast = db.relationship(
        "Actor", secondary=movie_cast, order_by=movie_cast.c.id, viewonly=True
    )

    def __repr__(self):
        return f"<Movie {self.id}:{self.title}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "overview": self.overview,
            "language": self.language,
            "region": self.region,
            "release_date": self.release_date,
            "rating": self.rating,
            "poster_path": self.poster_path,
        }


class Fan(db.Model):
    __tablename__ = "fans"

    id         = db.Column(db.Integer, primary_key=True)
    username   = db.Column(db.String(80), unique=True, nullable=False)
    first_name = db.Column(db.String(120))
    last_name  = db.Column(db.String(120))

    liked_movies = db.relationship(
        "Movie", secondary=fan_likes, order_by=fan_likes.c.id, viewonly=True
    )
    disliked_movies = db.relationship(
        "Movie", secondary=fan_dislikes, order_by=fan_dislikes.c.id, viewonly=True
    )
    fans_followed = db.relationship(
        "Fan",
        secondary=fan_follows_fans,
        primaryjoin=id == fan_follows_fans.c.follower_id,
        secondaryjoin=id == fan_follows_fans.c.followed_id,
        order_by=fan_follows_fans.c.id,
        viewonly=True,
    )
    critics_followed = db.relationship(
        "Critic", secondary=fan_follows_critics, order_by=fan_follows_critics.c.id,
        viewonly=True,
    )

    def __repr__(self):
        return f"<Fan {self.id}:{self.username}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


class Critic(db.Model):
    __tablename__ = "critics"

    id          = db.Column(db.Integer, primary_key=True)
    username    = db.Column(db.String(80), unique=True, nullable=False)
    first_name  = db.Column(db.String(120))
    last_name   = db.Column(db.String(120))
    publication = db.Column(db.String(255))

    recommended_movies = db.relationship(
        "Movie", secondary=critic_recommends, order_by=critic_recommends.c.id,
        viewonly=True,
    )
    followers = db.relationship(
        "Fan", secondary=fan_follows_critics, order_by=fan_follows_critics.c.id,
        viewonly=True,
    )

    def __repr__(self):
        return f"<Critic {self.id}:{self.username}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "publication": self.publication,
        }


class Review(db.Model):
    __tablename__ = "reviews"

    id       = db.Column(db.Integer, primary_key=True)
    author   = db.Column(db.String(80), nullable=False)
    body     = db.Column(db.Text, nullable=False, default="")
    score    = db.Column(db.Float)
    movie_id = db.Column(db.Integer, db.ForeignKey("movies.id"), index=True)

    def __repr__(self):
        return f"<Review {self.id} by {self.author}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author": self.author,
            "body": self.body,
            "score": self.score,
            "movie_id": self.movie_id,
        }


class Actor(db.Model):
    __tablename__ = "actors"

    id   = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(255), nullable=False)

    def __repr__(self):
        return f"<Actor {self.id}:{self.name}>"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}
