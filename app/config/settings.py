# app/config/settings.py
# Application configuration loaded from the environment

import os
from dotenv import load_dotenv

load_dotenv()


def _split(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


class AppConfig:
    """Configuration for the application"""

    DATABASE = {
        'url': os.getenv('DATABASE_URL', 'sqlite:///./task_manager.db'),
        # Only used for PostgreSQL connections (Render, Railway...)
        'sslmode': os.getenv('DB_SSLMODE', 'require'),
    }

    AUTH = {
        'secret_key': os.getenv('SECRET_KEY', 'change-me-in-production'),
        'algorithm': os.getenv('ALGORITHM', 'HS256'),
        'access_token_expire_minutes': int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 60 * 24)),
    }

    MAIL = {
        'host': os.getenv('EMAIL_HOST', 'smtp.gmail.com'),
        'port': int(os.getenv('EMAIL_PORT', 587)),
        'user': os.getenv('EMAIL_USER'),
        'password': os.getenv('EMAIL_PASSWORD'),
        'from_address': os.getenv('EMAIL_FROM') or os.getenv('EMAIL_USER'),
        'client_url': os.getenv('CLIENT_URL', 'http://localhost:3000'),
        'timeout': int(os.getenv('EMAIL_TIMEOUT', 10)),
    }

    PAGINATION = {
        'default_page_size': int(os.getenv('DEFAULT_PAGE_SIZE', 10)),
        'max_page_size': int(os.getenv('MAX_PAGE_SIZE', 100)),
    }

    SERVER = {
        'host': os.getenv('HOST', '0.0.0.0'),
        'port': int(os.getenv('PORT', 8000)),
        'reload': os.getenv('RELOAD', 'true').lower() == 'true',
        'log_level': os.getenv('LOG_LEVEL', 'INFO').upper(),
        'cors_origins': _split(os.getenv(
            'CORS_ORIGINS',
            'http://localhost:3000,http://localhost:3001,http://127.0.0.1:3000',
        )),
    }

    @classmethod
    def is_mail_configured(cls) -> bool:
        """Mail is only attempted when credentials are present"""
        return bool(cls.MAIL['user'] and cls.MAIL['password'])

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE['url'].lower().startswith('sqlite')
