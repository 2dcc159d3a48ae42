"""Application configuration"""
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration class"""

    # Flask configuration
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-change-in-production')

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///menucraft.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None  # No time limit on CSRF tokens
    SESSION_COOKIE_SECURE = False  # Set True in production with HTTPS
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    TALISMAN_ENABLED = False

    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True

    # Hosts a post-login redirect may point at
    REDIRECT_ALLOWED_HOSTS = [
        host.strip() for host in os.environ.get('REDIRECT_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if host.strip()
    ]

    # Menu limits
    MENU_LABEL_MIN = 2
    MENU_LABEL_MAX = 50
    MENU_MAX_ITEMS = 200

    # Default admin account created on first start
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin')
    CREATE_DEFAULT_ADMIN = True


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SESSION_COOKIE_SECURE = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    TALISMAN_ENABLED = True

    # Override secret key requirement
    def __init__(self):
        if self.SECRET_KEY == 'your-secret-key-change-in-production':
            raise ValueError("Must set SECRET_KEY environment variable in production!")


class TestingConfig(Config):
    """Testing configuration (in-memory database, no CSRF or rate limits)"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    CREATE_DEFAULT_ADMIN = False


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
