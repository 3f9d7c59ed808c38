import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def normalize_database_url(database_url):
    """SQLAlchemy needs postgresql:// rather than postgres://"""
    if database_url and database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


class Config:
    """Base configuration"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    SQLALCHEMY_DATABASE_URI = None  # Set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }

    CORS_ORIGINS = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]
    CORS_SUPPORTS_CREDENTIALS = True

    # Document generation
    DOCUMENT_ASSETS_FOLDER = os.environ.get('DOCUMENT_ASSETS_FOLDER', os.path.join(BASE_DIR, 'static'))
    MAX_CONTENT_LENGTH = 4 * 1024 * 1024

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = normalize_database_url(
            os.environ.get('DATABASE_URL') or 'sqlite:///dev_app.db'
        )


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True
    DEVELOPMENT = True

    def __init__(self):
        super().__init__()

        dev_database_url = os.environ.get('DEV_DATABASE_URL')
        if dev_database_url:
            self.SQLALCHEMY_DATABASE_URI = normalize_database_url(dev_database_url)
        else:
            self.SQLALCHEMY_DATABASE_URI = 'sqlite:///dev_app.db'

        self.CORS_ORIGINS = [
            'http://localhost:3000',
            'http://127.0.0.1:3000',
            'http://localhost:3001',
        ]


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    DEVELOPMENT = False

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        database_url = os.environ.get('DATABASE_URL')
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required for production")
        self.SQLALCHEMY_DATABASE_URI = normalize_database_url(database_url)

        origins = os.environ.get('CORS_ORIGINS')
        if origins:
            self.CORS_ORIGINS = [origin.strip() for origin in origins.split(',') if origin.strip()]

        self.SQLALCHEMY_ENGINE_OPTIONS = {
            'pool_recycle': 3600,
            'pool_pre_ping': True,
            'pool_size': 10,
            'max_overflow': 20,
            'pool_timeout': 30,
        }


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.CORS_ORIGINS = ['*']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from FLASK_ENV, falling back to hints in the environment"""
    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    if os.environ.get('DATABASE_URL') and os.environ.get('SECRET_KEY'):
        return 'production'

    return 'development'


__all__ = [
    'config',
    'get_config_name',
]
