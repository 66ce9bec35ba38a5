import os
from dotenv import load_dotenv

# Load .env file only in development environment
if os.environ.get('FLASK_ENV') != 'production':
    load_dotenv()


def _model_ladder(purpose, default):
    """Ordered model list for a call purpose, overridable as a comma-separated env var."""
    raw = os.environ.get(f'GEMINI_MODELS_{purpose.upper()}')
    if not raw:
        return list(default)
    return [name.strip() for name in raw.split(',') if name.strip()]


# Highest capability first for article generation
QUALITY_LADDER = ['gemini-2.5-flash', 'gemini-2.0-flash', 'gemini-2.5-flash-lite', 'gemini-2.0-flash-lite']
# Cheapest first for latency-sensitive calls
LATENCY_LADDER = ['gemini-2.0-flash-lite', 'gemini-2.5-flash-lite', 'gemini-2.0-flash', 'gemini-2.5-flash']


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'a_very_secret_key_for_dev')
    MONGO_URI = os.environ.get('MONGODB_URI')
    MONGO_DB_NAME = os.environ.get('MONGODB_DB_NAME', 'newsroom')
    # First present wins
    GOOGLE_API_KEY = os.environ.get('GOOGLE_AI_API_KEY') or os.environ.get('GEMINI_API_KEY')
    ADMIN_API_KEY = os.environ.get('ADMIN_API_KEY')
    FLASK_ENV = os.environ.get('FLASK_ENV', 'development')
    FLASK_DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'

    GEMINI_TIMEOUT_MS = int(os.environ.get('GEMINI_TIMEOUT_MS', 60000))
    TRENDING_REGION = os.environ.get('TRENDING_REGION', 'India')

    MODEL_PROFILES = {
        'front_page': {
            'models': _model_ladder('front_page', QUALITY_LADDER),
            'temperature': 0.7,
            'max_output_tokens': 16384,
        },
        'search': {
            'models': _model_ladder('search', QUALITY_LADDER),
            'temperature': 0.7,
            'max_output_tokens': 4096,
        },
        'trending': {
            'models': _model_ladder('trending', QUALITY_LADDER),
            'temperature': 0.7,
            'max_output_tokens': 16384,
        },
        'fact_check': {
            'models': _model_ladder('fact_check', LATENCY_LADDER),
            'temperature': 0.3,
            'max_output_tokens': 8192,
        },
    }

    SEARCH_SATISFACTION_THRESHOLD = 3
    SEARCH_STORAGE_LIMIT = 10
    RECENT_ARTICLE_HOURS = 12
    FRONT_PAGE_CANDIDATE_TOPICS = 10
    FRONT_PAGE_BATCH_SIZE = 5
    TRENDING_RETENTION_HOURS = 24
    FACT_CHECK_SUMMARY_POINTS = 4


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    FLASK_ENV = 'production'


class TestingConfig(Config):
    TESTING = True
    MONGO_URI = 'mongodb://localhost:27017'
    MONGO_DB_NAME = 'newsroom_test'
    GOOGLE_API_KEY = 'test-google-key'
    ADMIN_API_KEY = 'test-admin-key'
    MODEL_PROFILES = {
        purpose: dict(profile, models=['model-a', 'model-b', 'model-c', 'model-d'])
        for purpose, profile in Config.MODEL_PROFILES.items()
    }


def get_config():
    env = os.environ.get('FLASK_ENV', 'development')
    if env == 'development':
        return DevelopmentConfig
    if env == 'testing':
        return TestingConfig
    return ProductionConfig
