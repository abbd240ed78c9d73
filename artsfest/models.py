"""Database models for the arts festival portal."""
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


SECTIONS: tuple[str, ...] = ("Senior", "Junior", "Sub-Junior")
OVERLAY_TIERS: tuple[str, ...] = ("General", "Foundation")
TIERS: tuple[str, ...] = SECTIONS + OVERLAY_TIERS


def validate_tiers(value) -> None:
    """Ensure an applicable-section list only names known tiers."""

    if not isinstance(value, list):
        raise ValidationError("Applicable sections must be a list.")
    unknown = [item for item in value if item not in TIERS]
    if unknown:
        raise ValidationError(f"Unknown section(s): {', '.join(map(str, unknown))}")


class Team(models.Model):
    """A competing house. Students belong to exactly one team."""

    name = models.CharField(max_length=80, unique=True)
    slug = models.SlugField(unique=True)
    color_hex = models.CharField(max_length=9, default="#64748b")
    penalty_points = models.PositiveIntegerField(default=0)
    access_override = models.BooleanField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Student(models.Model):
    class Section(models.TextChoices):
        SENIOR = "Senior", "Senior"
        JUNIOR = "Junior", "Junior"
        SUB_JUNIOR = "Sub-Junior", "Sub-Junior"

    name = models.CharField(max_length=120)
    chest_no = models.CharField(max_length=16, unique=True, blank=True, null=True)
    class_grade = models.CharField(max_length=16, blank=True)
    section = models.CharField(max_length=12, choices=Section.choices)
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="students")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        if self.chest_no:
            return f"{self.name} ({self.chest_no})"
        return self.name

    def clean(self) -> None:
        super().clean()
        # Blank chest numbers are stored as NULL so the unique index ignores them.
        if self.chest_no is not None:
            self.chest_no = self.chest_no.strip() or None


class Event(models.Model):
    """A competition item. Grade tier C marks a team-level group event."""

    class Category(models.TextChoices):
        ON_STAGE = "ON STAGE", "On stage"
        OFF_STAGE = "OFF STAGE", "Off stage"

    class GradeType(models.TextChoices):
        A = "A", "Grade A"
        B = "B", "Grade B"
        C = "C", "Grade C (group)"

    name = models.CharField(max_length=120)
    event_code = models.CharField(max_length=24, unique=True, blank=True, null=True)
    category = models.CharField(max_length=9, choices=Category.choices)
    grade_type = models.CharField(max_length=1, choices=GradeType.choices, default=GradeType.A)
    applicable_sections = models.JSONField(default=list, blank=True, validators=[validate_tiers])
    max_participants_per_team = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        if self.event_code:
            return f"{self.event_code} {self.name}"
        return self.name

    @property
    def is_group_event(self) -> bool:
        return self.grade_type == self.GradeType.C

    @property
    def is_general(self) -> bool:
        return "General" in (self.applicable_sections or [])

    def applies_to(self, tier: str) -> bool:
        return tier in (self.applicable_sections or [])

    def clean(self) -> None:
        super().clean()
        if self.event_code is not None:
            self.event_code = self.event_code.strip() or None


class Participation(models.Model):
    """Links a student (or a whole team for group events) to an event."""

    class Status(models.TextChoices):
        REGISTERED = "registered", "Registered"
        COMPLETED = "completed", "Completed"
        DISQUALIFIED = "disqualified", "Disqualified"
        WINNER = "winner", "Winner"

    class Position(models.TextChoices):
        FIRST = "FIRST", "First"
        SECOND = "SECOND", "Second"
        THIRD = "THIRD", "Third"

    class PerformanceGrade(models.TextChoices):
        A = "A", "A"
        B = "B", "B"
        C = "C", "C"

    class Attendance(models.TextChoices):
        PENDING = "pending", "Pending"
        PRESENT = "present", "Present"
        ABSENT = "absent", "Absent"

    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name="participations",
        blank=True,
        null=True,
    )
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="participations")
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="participations")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.REGISTERED)
    result_position = models.CharField(max_length=6, choices=Position.choices, blank=True, null=True)
    performance_grade = models.CharField(
        max_length=1, choices=PerformanceGrade.choices, blank=True, null=True
    )
    attendance_status = models.CharField(
        max_length=8, choices=Attendance.choices, default=Attendance.PENDING
    )
    points_earned = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student", "event"],
                condition=models.Q(student__isnull=False),
                name="unique_student_per_event",
            ),
        ]
        ordering = ("event", "created_at", "pk")

    def __str__(self) -> str:
        who = self.student.name if self.student_id else f"{self.team.name} (team)"
        return f"{who} - {self.event.name}"

    def clean(self) -> None:
        super().clean()
        if self.points_earned and not self.result_position:
            raise ValidationError(
                {"points_earned": "Points can only be awarded with a result position."}
            )
        if self.student_id and self.team_id and self.student.team_id != self.team_id:
            raise ValidationError({"team": "Participation team must match the student's team."})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class GradeSetting(models.Model):
    """Editable point values for one grade tier."""

    grade_type = models.CharField(max_length=1, choices=Event.GradeType.choices, unique=True)
    first_place = models.PositiveIntegerField()
    second_place = models.PositiveIntegerField()
    third_place = models.PositiveIntegerField()

    class Meta:
        ordering = ("grade_type",)

    def __str__(self) -> str:
        return f"Grade {self.grade_type}: {self.first_place}/{self.second_place}/{self.third_place}"


class Profile(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", "Administrator"
        CAPTAIN = "captain", "Team captain"

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=8, choices=Role.choices, default=Role.CAPTAIN)
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, related_name="captains", blank=True, null=True)
    full_name = models.CharField(max_length=120, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.full_name or self.user} ({self.role})"

    def clean(self) -> None:
        super().clean()
        if self.role == self.Role.CAPTAIN and not self.team_id:
            raise ValidationError({"team": "Captains must be attached to a team."})


class SiteAsset(models.Model):
    """Uploaded artwork such as report headers and logos."""

    key = models.SlugField(unique=True)
    title = models.CharField(max_length=120, blank=True)
    file = models.FileField(upload_to="site-assets/")
    uploaded_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("key",)

    def __str__(self) -> str:
        return self.title or self.key


class AppSetting(models.Model):
    """Runtime switches editable by administrators."""

    key = models.CharField(max_length=64, unique=True)
    value = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("key",)

    def __str__(self) -> str:
        return self.key


class KeepAliveStatus(models.Model):
    last_ping = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return f"Last ping {self.last_ping or 'never'}"


class AuditLog(models.Model):
    """Simple audit trail for administrative actions."""

    ts = models.DateTimeField(auto_now_add=True)
    action = models.CharField(max_length=64)
    payload = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ("-ts",)

    def __str__(self) -> str:
        return f"{self.action} at {self.ts:%Y-%m-%d %H:%M:%S}"
