"""
Factory Boy factories for users and identity profiles.
"""

import uuid

import factory
from django.contrib.auth.models import User

from .models import UserProfile


class UserFactory(factory.django.DjangoModelFactory):
    """Factory for a bare User (no profile, i.e. a permanent account)."""

    class Meta:
        model = User
        django_get_or_create = ("username",)

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "testpass123")


class AnonymousProfileFactory(factory.django.DjangoModelFactory):
    """Factory for an anonymous identity bound to a cookie token."""

    class Meta:
        model = UserProfile

    user = factory.SubFactory(
        UserFactory, username=factory.LazyFunction(lambda: f"anon-{uuid.uuid4().hex}"), email=""
    )
    is_anonymous = True
    anon_token = factory.Faker("sha256")


class PermanentProfileFactory(factory.django.DjangoModelFactory):
    """Factory for a signed-up account with a public username."""

    class Meta:
        model = UserProfile

    user = factory.SubFactory(UserFactory)
    username = factory.SelfAttribute("user.username")
    is_anonymous = False
    anon_token = None
