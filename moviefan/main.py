# moviefan/main.py
# Flask Backend for the Movie Fan community
# -----------------------------------------
# This file defines the HTTP API: catalog browsing and search (cached in the
# store), fan/critic social actions, and the personalized recommendation feed.

import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from .catalog import CatalogClient, GetMovieType
from .config import Config
from .errors import BadRequest, Conflict, NotFound, StoreUnavailable
from .ingest import IngestService
from .models import db
from .recommender import dedupe_feed, recommend_for_fan
from .social import SocialGraphService
from .store import Store

# Configure logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)


def _ingest():
    return current_app.extensions['moviefan.ingest']


def _social():
    return current_app.extensions['moviefan.social']


def _dump(entity):
    return entity.to_dict() if entity is not None else None


def _dump_all(entities):
    return [e.to_dict() for e in entities] if entities is not None else None


def _no_content():
    return '', 200


# --- Catalog browsing ---

@api.route('/')
def home():
    """Root endpoint to confirm the backend is running."""
    return jsonify({"message": "Movie Fan API is running!"})


@api.route('/api/search/movies', methods=['GET'])
def search_movies():
    """Search the catalog; an empty query gives an empty list without a catalog call."""
    query = request.args.get('query', '')
    movies = _ingest().browse(GetMovieType.SEARCH, language='en-US', query=query, page='1')
    logger.info(f"Search query: '{query}', found {len(movies)} results.")
    return jsonify(_dump_all(movies))


def _browse(kind):
    region = request.args.get('region', 'us')
    lang = request.args.get('lang', 'en-US')
    page = request.args.get('page', '1')
    movies = _ingest().browse(kind, language=lang, region=region, page=page)
    logger.info(f"{kind.name} region={region} lang={lang} page={page}: {len(movies)} movies.")
    return jsonify(_dump_all(movies))


@api.route('/api/movies/top_rated', methods=['GET'])
def top_rated_movies():
    return _browse(GetMovieType.TOP_RATED)


@api.route('/api/movies/now_playing', methods=['GET'])
def now_playing_movies():
    return _browse(GetMovieType.NOW_PLAYING)


@api.route('/api/movies/popular', methods=['GET'])
def popular_movies():
    return _browse(GetMovieType.POPULAR)


@api.route('/api/movies/upcoming', methods=['GET'])
def upcoming_movies():
    return _browse(GetMovieType.UPCOMING)


@api.route('/api/movies/<int:movie_id>', methods=['GET'])
def get_movie(movie_id):
    movie = _ingest().movie_by_id(movie_id)
    if movie is None:
        logger.info(f"Movie with ID {movie_id} not found.")
        return jsonify(None), 404
    return jsonify(movie.to_dict())


@api.route('/api/movies', methods=['GET'])
def all_movies():
    return jsonify(_dump_all(Store.all_movies()))


@api.route('/api/movie', methods=['POST'])
def create_movie():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("request body must be a JSON movie object")
    try:
        data['id'] = int(data['id'])
    except (KeyError, TypeError, ValueError):
        raise BadRequest("movie requires an integer 'id'")
    movie = Store.upsert_movie(data)
    return jsonify(movie.to_dict())


# --- Social actions ---

@api.route('/api/like/movie/<int:movie_id>/fan/<username>', methods=['POST'])
def like_movie(movie_id, username):
    _social().like(username, movie_id)
    return _no_content()


@api.route('/api/dislike/movie/<int:movie_id>/fan/<username>', methods=['POST'])
def dislike_movie(movie_id, username):
    _social().dislike(username, movie_id)
    return _no_content()


@api.route('/api/recommend/movie/<int:movie_id>/critic/<username>', methods=['POST'])
def recommend_movie(movie_id, username):
    _social().recommend(username, movie_id)
    return _no_content()


@api.route('/api/reviews/movie/<int:movie_id>/review/<int:review_id>', methods=['POST'])
def review_movie(movie_id, review_id):
    _social().attach_review(movie_id, review_id)
    return _no_content()


@api.route('/api/check/like/fan/<username>/movie/<int:movie_id>', methods=['GET'])
def check_like(username, movie_id):
    return jsonify(_social().is_liked_by(username, movie_id))


@api.route('/api/check/dislike/fan/<username>/movie/<int:movie_id>', methods=['GET'])
def check_dislike(username, movie_id):
    return jsonify(_dump(_social().is_disliked_by(username, movie_id)))


@api.route('/api/check/recommend/critic/<username>/movie/<int:movie_id>', methods=['GET'])
def check_recommend(username, movie_id):
    return jsonify(_dump(_social().is_recommended_by(username, movie_id)))


@api.route('/api/like/movie/<int:movie_id>/likedbyfans', methods=['GET'])
def fans_who_liked(movie_id):
    # Existing clients only ever got null here; the real list is served by the v2 route.
    logger.warning(f"v1 likedbyfans for movie {movie_id} always answers null; use /api/v2.")
    return jsonify(None)


@api.route('/api/dislike/movie/<int:movie_id>/dislikedbyfans', methods=['GET'])
def fans_who_disliked(movie_id):
    return jsonify(_dump_all(_social().fans_who_disliked(movie_id)))


@api.route('/api/recommend/movie/<int:movie_id>/recommendedby', methods=['GET'])
def critics_who_recommended(movie_id):
    return jsonify(_dump_all(_social().critics_who_recommended(movie_id)))


@api.route('/api/movie/<int:movie_id>/reviews', methods=['GET'])
def movie_reviews(movie_id):
    return jsonify(_dump_all(_social().reviews_of(movie_id)))


@api.route('/api/movie/<int:movie_id>/cast', methods=['GET'])
def movie_cast(movie_id):
    return jsonify(_dump_all(_social().cast_of(movie_id)))


@api.route('/api/fan/<int:fan_id>/movies/recommended', methods=['GET'])
def recommended_for_fan(fan_id):
    return jsonify(_dump_all(recommend_for_fan(fan_id)))


# --- Fans, critics, reviews and follows ---

@api.route('/api/fan', methods=['POST'])
def create_fan():
    return jsonify(_social().create_fan(request.get_json(silent=True)).to_dict()), 201


@api.route('/api/critic', methods=['POST'])
def create_critic():
    return jsonify(_social().create_critic(request.get_json(silent=True)).to_dict()), 201


@api.route('/api/review', methods=['POST'])
def create_review():
    return jsonify(_social().create_review(request.get_json(silent=True)).to_dict()), 201


@api.route('/api/fan/<username>/follow/fan/<other>', methods=['POST'])
def follow_fan(username, other):
    _social().follow_fan(username, other)
    return _no_content()


@api.route('/api/fan/<username>/follow/critic/<critic>', methods=['POST'])
def follow_critic(username, critic):
    _social().follow_critic(username, critic)
    return _no_content()


# --- Versioned routes with a structured error envelope ---

@api.route('/api/v2/fan/<int:fan_id>/movies/recommended', methods=['GET'])
def recommended_for_fan_v2(fan_id):
    if Store.fan(fan_id) is None:
        raise NotFound(f"No fan with id {fan_id}", code="fan_not_found")
    return jsonify(_dump_all(dedupe_feed(recommend_for_fan(fan_id))))


@api.route('/api/v2/like/movie/<int:movie_id>/likedbyfans', methods=['GET'])
def fans_who_liked_v2(movie_id):
    fans = _social().fans_who_liked(movie_id)
    if fans is None:
        raise NotFound(f"No movie with id {movie_id}", code="movie_not_found")
    return jsonify(_dump_all(fans))


# --- Error handlers ---

def _bad_request(e):
    return jsonify({"error": str(e)}), 400


def _conflict(e):
    return jsonify({"error": str(e)}), 409


def _not_found(e):
    # Only the versioned routes raise NotFound; they answer with an error envelope.
    return jsonify({"error": {"code": e.code, "message": str(e)}}), 404


def _store_unavailable(e):
    logger.error(f"Store unavailable: {e}")
    return jsonify({"error": "store unavailable"}), 503


def create_app(config_object=Config, catalog=None, **overrides):
    """Build the Flask app, its store and services."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.update(overrides)
    # Keep responses in the order the routes build them
    app.json.sort_keys = False

    CORS(
        app,
        origins=[app.config['CORS_ORIGIN']],
        max_age=app.config['CORS_MAX_AGE'],
        supports_credentials=True,
    )

    db.init_app(app)
    with app.app_context():
        db.create_all()

    if catalog is None:
        catalog = CatalogClient(
            app.config['TMDB_API_KEY'],
            base_url=app.config['TMDB_BASE_URL'],
            timeout=app.config['TMDB_TIMEOUT'],
        )
    app.extensions['moviefan.catalog'] = catalog
    app.extensions['moviefan.ingest'] = IngestService(catalog)
    app.extensions['moviefan.social'] = SocialGraphService()

    app.register_blueprint(api)
    app.register_error_handler(BadRequest, _bad_request)
    app.register_error_handler(Conflict, _conflict)
    app.register_error_handler(NotFound, _not_found)
    app.register_error_handler(StoreUnavailable, _store_unavailable)

    # --- Log all registered routes for debugging and documentation ---
    logger.info("--- Flask URL Map (Registered Routes) ---")
    for rule in app.url_map.iter_rules():
        logger.info(f"Rule: {rule.endpoint} | Path: {rule.rule} | Methods: {rule.methods}")
    logger.info("---------------------------------------")
    return app


if __name__ == '__main__':
    application = create_app()
    application.run(host='0.0.0.0', port=application.config['PORT'], debug=False)
