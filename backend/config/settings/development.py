"""
Development settings for WhichOneTho project.

Plain HTTP on localhost: the anonymous-id cookie is not marked Secure,
uploaded images are served by Django and the frontend dev server may call
the API cross-origin with credentials.
"""

from .base import *  # noqa: F403, F401

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

INSTALLED_APPS += [  # noqa: F405
    "debug_toolbar",
    "django_extensions",
]

MIDDLEWARE += [  # noqa: F405
    "debug_toolbar.middleware.DebugToolbarMiddleware",
]

INTERNAL_IPS = ["127.0.0.1"]

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
ANON_ID_COOKIE_SECURE = False

CORS_ALLOWED_ORIGINS = env.list(  # noqa: F405
    "CORS_ALLOWED_ORIGINS", default=["http://localhost:3000", "http://localhost:5173"]
)

# Let developers post more than a handful of polls a day
POLL_RATE_LIMIT = env.int("POLL_RATE_LIMIT", default=50)  # noqa: F405

LOGGING["root"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["apps"] = {"handlers": ["console"], "level": "DEBUG", "propagate": False}  # noqa: F405
