"""
Admin configuration for Votes app.
"""

from django.contrib import admin

from .models import Vote, VoteCounts


@admin.register(Vote)
class VoteAdmin(admin.ModelAdmin):
    """Admin interface for Vote model."""

    list_display = ["user", "poll", "voted_for", "voter_gender", "created_at"]
    list_filter = ["voted_for", "voter_gender", "created_at"]
    search_fields = ["user__username"]
    readonly_fields = ["created_at"]


@admin.register(VoteCounts)
class VoteCountsAdmin(admin.ModelAdmin):
    """Admin interface for the per-poll aggregate rows (maintained by the vote ledger)."""

    list_display = ["poll", "votes_a", "votes_b", "total_votes", "updated_at"]
    readonly_fields = ["poll", "votes_a", "votes_b", "total_votes", "updated_at"]
