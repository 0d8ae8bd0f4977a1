"""
Admin configuration for Users app.
"""

from django.contrib import admin

from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    """Admin interface for UserProfile model."""

    list_display = ["user", "username", "is_anonymous", "upgraded_at", "created_at"]
    list_filter = ["is_anonymous", "created_at"]
    search_fields = ["user__username", "username", "user__email"]
    readonly_fields = ["anon_token", "upgraded_at", "created_at", "updated_at"]
    date_hierarchy = "created_at"
