# moviefan/config.py
# Runtime configuration for the Movie Fan backend
# -----------------------------------------------
# All settings come from environment variables so the same code runs locally,
# under the test suite and on the deployment host.

import os


class Config:
    """Default settings, loaded into ``app.config`` by the application factory."""

    # --- Upstream catalog (TMDb) ---
    TMDB_API_KEY = os.getenv('TMDB_API_KEY', '')
    TMDB_BASE_URL = os.getenv('TMDB_BASE_URL', 'https://api.themoviedb.org/3')
    TMDB_TIMEOUT = float(os.getenv('TMDB_TIMEOUT', 10))

    # --- Store ---
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///moviefan.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- CORS for the web frontend ---
    CORS_ORIGIN = os.getenv('CORS_ORIGIN', 'http://localhost:3000')
    CORS_MAX_AGE = int(os.getenv('CORS_MAX_AGE', 3600))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    PORT = int(os.getenv('PORT', 5001))


class TestConfig(Config):
    TESTING = True
    TMDB_API_KEY = 'test-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
