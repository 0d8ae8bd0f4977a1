"""
Poll models for WhichOneTho.
"""

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class Gender(models.TextChoices):
    FEMALE = "female", "Female"
    MALE = "male", "Male"
    NONBINARY = "nonbinary", "Non-binary"


class BodyType(models.TextChoices):
    PETITE = "petite", "Petite"
    SLIM = "slim", "Slim"
    ATHLETIC = "athletic", "Athletic"
    CURVY = "curvy", "Curvy"
    PLUS_SIZE = "plus-size", "Plus-size"
    PREFER_NOT = "prefer-not", "Prefer not to say"


class PollContext(models.TextChoices):
    DATE = "date", "Date"
    WORK = "work", "Work"
    CASUAL = "casual", "Casual"
    EVENT = "event", "Event"
    OTHER = "other", "Other"


class PollStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    CLOSED = "closed", "Closed"


class ReportReason(models.TextChoices):
    INAPPROPRIATE = "inappropriate", "Inappropriate"
    SPAM = "spam", "Spam"
    OFFENSIVE = "offensive", "Offensive"
    OTHER = "other", "Other"


def allowed_durations():
    """Allowed poll durations in minutes."""
    return list(getattr(settings, "POLL_DURATIONS_MINUTES", [15, 60, 240, 480]))


class Poll(models.Model):
    """
    A two-outfit poll.

    ``expires_at`` is fixed at creation. ``status`` only ever moves from
    active to closed; a poll whose ``expires_at`` has passed is treated as
    closed at read time even before the sweeper flips its status.
    """

    poster_gender = models.CharField(max_length=16, choices=Gender.choices)
    body_type = models.CharField(max_length=16, choices=BodyType.choices, null=True, blank=True)
    context = models.CharField(max_length=16, choices=PollContext.choices, null=True, blank=True)
    image_a_url = models.CharField(max_length=500)
    image_b_url = models.CharField(max_length=500)
    image_folder = models.CharField(
        max_length=64, help_text="Correlation id the images were stored under"
    )
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name="polls")
    created_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField()
    status = models.CharField(
        max_length=16, choices=PollStatus.choices, default=PollStatus.ACTIVE
    )

    class Meta:
        db_table = "polls"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"], name="polls_status_expires_idx"),
            models.Index(fields=["created_by", "created_at"], name="polls_creator_created_idx"),
        ]

    def __str__(self):
        return f"Poll {self.pk} ({self.poster_gender}, {self.status})"

    def is_expired(self, now=None):
        """Closed wins even if ``expires_at`` has not passed yet."""
        now = now or timezone.now()
        return self.status == PollStatus.CLOSED or self.expires_at <= now

    @property
    def is_open(self):
        return not self.is_expired()

    def close(self):
        """Mark the poll closed. Returns False if it was already closed."""
        if self.status == PollStatus.CLOSED:
            return False
        self.status = PollStatus.CLOSED
        self.save(update_fields=["status"])
        return True

    def clean(self):
        """Validate duration and the one-way status / fixed expiry rules."""
        if self.duration_minutes not in allowed_durations():
            raise ValidationError(
                f"Duration must be one of {allowed_durations()} minutes."
            )

        if not self.pk:
            return

        stored = Poll.objects.filter(pk=self.pk).values("expires_at", "status").first()
        if stored is None:
            return
        if stored["expires_at"] != self.expires_at:
            raise ValidationError("Poll expiry cannot be changed after creation.")
        if stored["status"] == PollStatus.CLOSED and self.status != PollStatus.CLOSED:
            raise ValidationError("A closed poll cannot be reopened.")

    def save(self, *args, **kwargs):
        """Override save to derive expiry and call clean validation."""
        if self.expires_at is None and self.duration_minutes:
            self.expires_at = self.created_at + timedelta(minutes=self.duration_minutes)
        self.clean()
        super().save(*args, **kwargs)


class PollReport(models.Model):
    """A report against a poll. One per (poll, reporter)."""

    poll = models.ForeignKey(Poll, on_delete=models.CASCADE, related_name="reports")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="poll_reports")
    reason = models.CharField(max_length=16, choices=ReportReason.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "poll_reports"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["poll", "user"], name="unique_poll_report"),
        ]

    def __str__(self):
        return f"Report on poll {self.poll_id} by user {self.user_id}: {self.reason}"


class PollCreationLog(models.Model):
    """Append-only record of poll creations, read by the rate limiter."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="poll_creation_log")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "poll_creation_log"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="poll_log_user_created_idx"),
        ]

    def __str__(self):
        return f"Poll created by user {self.user_id} at {self.created_at}"
