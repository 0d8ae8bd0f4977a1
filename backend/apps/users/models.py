"""
User models for WhichOneTho.
"""

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models


class UserProfile(models.Model):
    """
    Identity profile attached to every account.

    Anonymous identities are real accounts bound to an opaque cookie token;
    upgrading one to a permanent account keeps the same ``user.id``.
    """

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    username = models.CharField(
        max_length=30,
        unique=True,
        null=True,
        blank=True,
        help_text="Public username (lower-cased, permanent accounts only, immutable)",
    )
    is_anonymous = models.BooleanField(default=True, db_index=True)
    anon_token = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Opaque token carried by the HttpOnly anonymous-id cookie",
    )
    upgraded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "user_profiles"

    def __str__(self):
        if self.is_anonymous:
            return f"Anonymous profile for user {self.user_id}"
        return f"Profile for {self.username}"

    def clean(self):
        """Validate that an assigned username never changes."""
        if not self.pk:
            return
        stored = UserProfile.objects.filter(pk=self.pk).values_list("username", flat=True).first()
        if stored and stored != self.username:
            raise ValidationError("Username cannot be changed once set.")

    def save(self, *args, **kwargs):
        """Override save to call clean validation."""
        self.clean()
        super().save(*args, **kwargs)
