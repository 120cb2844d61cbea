import os
from datetime import timedelta

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(os.path.dirname(basedir), '.env'))


def _normalize_database_url(database_url):
    """Heroku/Azure style postgres:// URLs are rejected by SQLAlchemy 2.x"""
    if database_url and database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


class Config:
    """Base configuration"""

    # Security Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    SQLALCHEMY_DATABASE_URI = None  # Will be set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pool settings only apply to server databases; SQLite gets none
    POSTGRES_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'pool_size': 10,
        'max_overflow': 20,
        'pool_timeout': 30,
    }
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Session Configuration
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'None'
    SESSION_COOKIE_NAME = 'paintquote_auth'

    CORS_ORIGINS = [
        'http://localhost:3000',
        'http://127.0.0.1:3000',
    ]
    CORS_SUPPORTS_CREDENTIALS = True

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # --- Pricing defaults (used when a scheme leaves a value unset) ---
    DEFAULT_COVERAGE = float(os.environ.get('DEFAULT_COVERAGE', 350))
    DEFAULT_COST_PER_GALLON = float(os.environ.get('DEFAULT_COST_PER_GALLON', 40))
    DEFAULT_COATS = int(os.environ.get('DEFAULT_COATS', 2))
    DEFAULT_BILLABLE_LABOR_RATE = float(os.environ.get('DEFAULT_BILLABLE_LABOR_RATE', 50))
    DEFAULT_CREW_SIZE = int(os.environ.get('DEFAULT_CREW_SIZE', 2))
    DEFAULT_DEPOSIT_PERCENT = float(os.environ.get('DEFAULT_DEPOSIT_PERCENT', 50))
    DEFAULT_TIER = os.environ.get('DEFAULT_TIER', 'better')

    # --- Business & proposal settings ---
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'PaintQuote Contractor')
    COMPANY_ADDRESS = os.environ.get('COMPANY_ADDRESS', '123 Main Street, Anytown, CA 92000')
    COMPANY_PHONE = os.environ.get('COMPANY_PHONE', '(555) 555-5555')
    COMPANY_EMAIL = os.environ.get('COMPANY_EMAIL', 'estimates@example.com')
    COMPANY_LICENSE = os.environ.get('COMPANY_LICENSE', '#123456')

    @staticmethod
    def get_database_url():
        """Get properly formatted database URL string"""
        database_url = os.environ.get('DATABASE_URL')
        if database_url:
            return _normalize_database_url(database_url)
        # Relative SQLite paths resolve inside the Flask instance folder
        return 'sqlite:///paintquote_dev.db'

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = self.get_database_url()
        self.SQLALCHEMY_ENGINE_OPTIONS = self.engine_options_for(self.SQLALCHEMY_DATABASE_URI)

    def engine_options_for(self, database_url):
        if database_url and database_url.startswith('postgresql'):
            return dict(self.POSTGRES_ENGINE_OPTIONS)
        return {}


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True
    DEVELOPMENT = True

    def __init__(self):
        super().__init__()

        # Relaxed settings for development
        self.SESSION_COOKIE_SECURE = False
        self.SESSION_COOKIE_SAMESITE = 'Lax'

        self.CORS_ORIGINS = [
            'http://localhost:3000',
            'http://127.0.0.1:3000',
            'http://localhost:3001',
            'http://localhost:5173',
        ]

        dev_database_url = os.environ.get('DEV_DATABASE_URL')
        if dev_database_url:
            self.SQLALCHEMY_DATABASE_URI = _normalize_database_url(dev_database_url)
            self.SQLALCHEMY_ENGINE_OPTIONS = self.engine_options_for(self.SQLALCHEMY_DATABASE_URI)


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
        self.SQLALCHEMY_DATABASE_URI = _normalize_database_url(database_url)

        origins = os.environ.get('CORS_ORIGINS', '')
        self.CORS_ORIGINS = [origin.strip() for origin in origins.split(',') if origin.strip()]

        self.SQLALCHEMY_ENGINE_OPTIONS = self.engine_options_for(self.SQLALCHEMY_DATABASE_URI)
        if self.SQLALCHEMY_ENGINE_OPTIONS:
            self.SQLALCHEMY_ENGINE_OPTIONS.update({
                'pool_size': 20,
                'max_overflow': 30,
                'pool_timeout': 60,
            })


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.SESSION_COOKIE_SECURE = False
        self.SESSION_COOKIE_SAMESITE = 'Lax'
        self.CORS_ORIGINS = ['*']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from process variables"""

    # Check explicit environment setting
    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    # Check for testing environment
    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    # A managed postgres URL means we are deployed
    if os.environ.get('DATABASE_URL', '').startswith(('postgres://', 'postgresql://')):
        return 'production'

    return 'development'


def validate_config():
    """Validate required environment for the detected configuration"""
    config_name = get_config_name()

    if config_name == 'production':
        required_vars = [
            'SECRET_KEY',
            'DATABASE_URL'
        ]

        missing_vars = [var for var in required_vars if not os.environ.get(var)]

        if missing_vars:
            return False, f"Missing required environment variables: {', '.join(missing_vars)}"

    return True, "Configuration is valid"


__all__ = [
    'config',
    'get_config_name',
    'validate_config',
]
