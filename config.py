"""
Flask Configuration Management

Environment-specific configuration classes for development, testing and
production deployments of the storefront API. Values are read from the
process environment; a ``.env`` file in the working directory is loaded
through python-dotenv before the classes are evaluated.

Environment Variables:
    FLASK_CONFIG: Configuration name ('development', 'testing', 'production')
    SECRET_KEY: Flask secret key
    LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR)
    LOG_JSON: Render JSON log lines ('true'/'false')
    MAX_CONTENT_LENGTH: Maximum accepted request body size in bytes
    VALIDATION_LOG_FAILURES: Log rejected request bodies ('true'/'false')
"""

import os
from typing import Optional, Type

from dotenv import load_dotenv

load_dotenv(override=False)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration class containing common settings for all environments.
    """

    # Flask Core Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-in-production'

    # Request bodies larger than this are rejected by Werkzeug with 413
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', str(2 * 1024 * 1024)))

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_JSON = _env_flag('LOG_JSON', 'true')

    # Validation Layer
    VALIDATION_LOG_FAILURES = _env_flag('VALIDATION_LOG_FAILURES', 'true')

    @staticmethod
    def init_app(app):
        """
        Initialize application with configuration-specific settings.

        Args:
            app: Flask application instance
        """
        pass


class DevelopmentConfig(Config):
    """Development configuration: debug mode, console logging."""

    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    LOG_JSON = _env_flag('LOG_JSON', 'false')


class TestingConfig(Config):
    """
    Testing configuration optimized for automated test runs.
    """

    TESTING = True
    DEBUG = False
    SECRET_KEY = 'testing-secret-key'

    # Reduce log noise during testing
    LOG_LEVEL = 'WARNING'
    LOG_JSON = False
    VALIDATION_LOG_FAILURES = False


class ProductionConfig(Config):
    """Production configuration: JSON logs, secret key required."""

    DEBUG = False
    TESTING = False

    @staticmethod
    def init_app(app):
        Config.init_app(app)

        if app.config['SECRET_KEY'] == 'dev-key-change-in-production':
            app.logger.warning("SECRET_KEY is not set for production")


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}


def get_config(config_name: Optional[str] = None) -> Type[Config]:
    """
    Get configuration class based on environment name.

    Args:
        config_name: Name of the configuration environment

    Returns:
        Configuration class for the specified environment
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'default')

    return config.get(config_name, DevelopmentConfig)
