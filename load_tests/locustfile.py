"""
Main Locust configuration file.

Run against development settings (the anonymous-id cookie is only marked
Secure in production, so plain-HTTP runs need ANON_ID_COOKIE_SECURE=False):
    locust -f locustfile.py --host=http://localhost:8000

Or with specific user classes:
    locust -f locustfile.py --host=http://localhost:8000 VotingUser PollCreatorUser
"""

from voting_load_test import VotingUser, PollCreatorUser  # noqa: F401
from data_integrity_test import DataIntegrityUser  # noqa: F401
