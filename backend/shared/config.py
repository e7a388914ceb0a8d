"""
Environment configuration for the digest notifier.

Values are read from the process environment (optionally seeded from a .env
file) on every call so tests and CLI flags can override them at runtime.
"""

import os

from dotenv import load_dotenv

from models.resource import Application

load_dotenv()

DEFAULT_ENVIRONMENT = "dev"
DEFAULT_TIMEZONE = "Europe/Helsinki"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_WORKERS = 4
DEFAULT_FROM_EMAIL = "mscr-notifications@example.org"

# Base URL per application, overridable with <APPLICATION>_API_URL
DEFAULT_PROVIDER_URLS: dict[Application, str] = {
    Application.DATAMODEL: "http://yti-datamodel-api:9004/datamodel-api",
}


def get_environment() -> str:
    """Deployment environment label used to decorate links ("prod", "staging", ...)."""
    return os.getenv("MESSAGING_ENV", DEFAULT_ENVIRONMENT)


def get_provider_url(application: Application) -> str:
    """
    Base URL of the resource provider for an application.

    Raises:
        ValueError: If no URL is configured for the application
    """
    url = os.getenv(f"{application.value.upper()}_API_URL") or DEFAULT_PROVIDER_URLS.get(
        application
    )
    if not url:
        raise ValueError(f"{application.value.upper()}_API_URL must be set")
    return url.rstrip("/")


def get_provider_timeout() -> float:
    return float(os.getenv("PROVIDER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))


def get_timezone() -> str:
    return os.getenv("NOTIFICATION_TIMEZONE", DEFAULT_TIMEZONE)


def get_max_workers() -> int:
    return max(1, int(os.getenv("NOTIFICATION_MAX_WORKERS", DEFAULT_MAX_WORKERS)))


def get_from_email() -> str:
    return os.getenv("NOTIFICATION_FROM_EMAIL", DEFAULT_FROM_EMAIL)
