"""
Root-level conftest.py so fixtures are discovered when running from the repo root.
"""
from backend.conftest import *  # noqa: F403, F401
