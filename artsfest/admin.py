"""Admin registrations for the arts festival application."""
from django.contrib import admin

from . import models


@admin.register(models.Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "color_hex", "penalty_points", "access_override")
    list_filter = ("access_override",)
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(models.Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("name", "chest_no", "class_grade", "section", "team")
    list_filter = ("section", "team")
    search_fields = ("name", "chest_no", "class_grade")


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("name", "event_code", "category", "grade_type", "max_participants_per_team")
    list_filter = ("category", "grade_type")
    search_fields = ("name", "event_code", "description")


@admin.register(models.Participation)
class ParticipationAdmin(admin.ModelAdmin):
    list_display = (
        "event",
        "student",
        "team",
        "status",
        "result_position",
        "performance_grade",
        "attendance_status",
        "points_earned",
    )
    list_filter = ("event__category", "status", "result_position", "attendance_status", "team")
    search_fields = ("event__name", "student__name", "student__chest_no", "team__name")
    raw_id_fields = ("student", "event")


@admin.register(models.GradeSetting)
class GradeSettingAdmin(admin.ModelAdmin):
    list_display = ("grade_type", "first_place", "second_place", "third_place")


@admin.register(models.Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "role", "team")
    list_filter = ("role", "team")
    search_fields = ("user__username", "user__email", "full_name")


@admin.register(models.SiteAsset)
class SiteAssetAdmin(admin.ModelAdmin):
    list_display = ("key", "title", "uploaded_at")
    search_fields = ("key", "title")


@admin.register(models.AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key",)


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("ts", "action")
    list_filter = ("action", "ts")
    search_fields = ("action",)
