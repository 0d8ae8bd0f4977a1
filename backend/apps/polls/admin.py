"""
Admin configuration for Polls app.
"""

from django.contrib import admin

from .models import Poll, PollCreationLog, PollReport


@admin.register(Poll)
class PollAdmin(admin.ModelAdmin):
    """Admin interface for Poll model."""

    list_display = ["id", "poster_gender", "context", "created_by", "created_at", "expires_at", "status", "report_count"]
    list_filter = ["status", "poster_gender", "context", "body_type", "created_at"]
    search_fields = ["created_by__username", "image_folder"]
    readonly_fields = ["created_at", "expires_at", "duration_minutes", "image_folder"]
    fieldsets = (
        ("Poster", {"fields": ("created_by", "poster_gender", "body_type", "context")}),
        ("Images", {"fields": ("image_a_url", "image_b_url", "image_folder")}),
        ("Timing", {"fields": ("created_at", "duration_minutes", "expires_at", "status")}),
    )

    def report_count(self, obj):
        """Get count of reports against this poll."""
        return obj.reports.count()

    report_count.short_description = "Reports"


@admin.register(PollReport)
class PollReportAdmin(admin.ModelAdmin):
    """Admin interface for PollReport model."""

    list_display = ["poll", "user", "reason", "created_at"]
    list_filter = ["reason", "created_at"]
    search_fields = ["user__username"]
    readonly_fields = ["created_at"]
    date_hierarchy = "created_at"


@admin.register(PollCreationLog)
class PollCreationLogAdmin(admin.ModelAdmin):
    """Admin interface for PollCreationLog model."""

    list_display = ["user", "created_at"]
    search_fields = ["user__username"]
    readonly_fields = ["user", "created_at"]
