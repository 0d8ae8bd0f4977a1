"""
Vote models for WhichOneTho.
"""

from apps.polls.models import Gender, Poll
from django.contrib.auth.models import User
from django.db import models


class VoteSide(models.TextChoices):
    A = "A", "Outfit A"
    B = "B", "Outfit B"


class Vote(models.Model):
    """A vote for one side of a poll. One per (poll, voter), enforced by the database."""

    poll = models.ForeignKey(Poll, on_delete=models.CASCADE, related_name="votes")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="votes")
    voted_for = models.CharField(max_length=1, choices=VoteSide.choices)
    voter_gender = models.CharField(max_length=16, choices=Gender.choices, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "votes"
        constraints = [
            models.UniqueConstraint(fields=["poll", "user"], name="unique_poll_voter"),
        ]
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="votes_user_created_idx"),
        ]

    def __str__(self):
        return f"User {self.user_id} voted {self.voted_for} on poll {self.poll_id}"


class VoteCounts(models.Model):
    """
    Aggregate vote counts for a poll.

    Created together with the poll and incremented with F() expressions in the
    same transaction as each vote insert, so ``total_votes`` always equals
    ``votes_a + votes_b``.
    """

    poll = models.OneToOneField(Poll, on_delete=models.CASCADE, related_name="vote_counts")
    votes_a = models.PositiveIntegerField(default=0)
    votes_b = models.PositiveIntegerField(default=0)
    total_votes = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "vote_counts"
        verbose_name_plural = "vote counts"

    def __str__(self):
        return f"Poll {self.poll_id}: A={self.votes_a} B={self.votes_b}"

    def as_dict(self):
        return {
            "votes_a": self.votes_a,
            "votes_b": self.votes_b,
            "total_votes": self.total_votes,
        }
