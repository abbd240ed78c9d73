"""Serializers for the arts festival REST endpoints."""

from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from . import scoring, services
from .models import Event, GradeSetting, Participation, Profile, Student, Team, TIERS


class TeamSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(required=False)

    class Meta:
        model = Team
        fields = ["id", "name", "slug", "color_hex", "penalty_points", "access_override", "created_at"]
        read_only_fields = ["created_at"]

    def create(self, validated_data: Dict[str, Any]) -> Team:
        if not validated_data.get("slug"):
            validated_data["slug"] = services.unique_team_slug(validated_data["name"])
        return super().create(validated_data)


class StudentSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source="team.name", read_only=True)

    class Meta:
        model = Student
        fields = ["id", "name", "chest_no", "class_grade", "section", "team", "team_name", "created_at"]
        read_only_fields = ["created_at"]

    def validate_chest_no(self, value):
        return (value or "").strip() or None


class EventSerializer(serializers.ModelSerializer):
    applicable_sections = serializers.ListField(
        child=serializers.ChoiceField(choices=TIERS), required=False
    )

    class Meta:
        model = Event
        fields = [
            "id",
            "name",
            "event_code",
            "category",
            "grade_type",
            "applicable_sections",
            "max_participants_per_team",
            "description",
            "created_at",
        ]
        read_only_fields = ["created_at"]

    def validate_event_code(self, value):
        return (value or "").strip() or None


class ParticipationSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source="student.name", read_only=True, default=None)
    chest_no = serializers.CharField(source="student.chest_no", read_only=True, default=None)
    event_name = serializers.CharField(source="event.name", read_only=True)
    team_name = serializers.CharField(source="team.name", read_only=True)

    class Meta:
        model = Participation
        fields = [
            "id",
            "student",
            "student_name",
            "chest_no",
            "event",
            "event_name",
            "team",
            "team_name",
            "status",
            "result_position",
            "performance_grade",
            "attendance_status",
            "points_earned",
            "created_at",
        ]
        # Results and points only change through the result recording actions.
        read_only_fields = ["status", "result_position", "performance_grade", "points_earned", "created_at"]


class GradeSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = GradeSetting
        fields = ["grade_type", "first_place", "second_place", "third_place"]
        # Rows are updated in place by grade type.
        extra_kwargs = {"grade_type": {"validators": []}}


class PenaltySerializer(serializers.Serializer):
    team = serializers.PrimaryKeyRelatedField(queryset=Team.objects.all())
    penalty_points = serializers.IntegerField(min_value=0)


class PlacementSerializer(serializers.Serializer):
    """One placed entry; ``id`` is a participation id or, for group events, a team id."""

    id = serializers.IntegerField()
    position = serializers.ChoiceField(choices=scoring.POSITIONS)
    performance_grade = serializers.ChoiceField(
        choices=services.PERFORMANCE_GRADES, required=False, allow_null=True, allow_blank=True
    )


class ResultsSerializer(serializers.Serializer):
    placements = PlacementSerializer(many=True)

    def to_winners(self) -> Dict[str, Dict[int, str | None]]:
        winners: Dict[str, Dict[int, str | None]] = {position: {} for position in scoring.POSITIONS}
        seen = set()
        for placement in self.validated_data["placements"]:
            if placement["id"] in seen:
                raise serializers.ValidationError("A participant can only hold one position.")
            seen.add(placement["id"])
            winners[placement["position"]][placement["id"]] = placement.get("performance_grade") or None
        return winners


class AttendanceSerializer(serializers.Serializer):
    attendance_status = serializers.ChoiceField(choices=Participation.Attendance.choices)


class RegistrationSerializer(serializers.Serializer):
    student = serializers.PrimaryKeyRelatedField(queryset=Student.objects.select_related("team"))
    event = serializers.PrimaryKeyRelatedField(queryset=Event.objects.all())


class RegistrationSettingSerializer(serializers.Serializer):
    registration_open = serializers.BooleanField()


class UploadSerializer(serializers.Serializer):
    file = serializers.FileField()


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


class ProfileSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.CharField(source="user.email", read_only=True)
    team_name = serializers.CharField(source="team.name", read_only=True, default=None)

    class Meta:
        model = Profile
        fields = ["username", "email", "full_name", "role", "team", "team_name"]
        read_only_fields = fields


class SectionBreakdownSerializer(serializers.Serializer):
    def to_representation(self, instance: scoring.SectionBreakdown) -> Dict[str, int]:
        return instance.as_dict()


class TeamStandingSerializer(serializers.Serializer):
    rank = serializers.IntegerField()
    team_id = serializers.IntegerField()
    name = serializers.CharField()
    color = serializers.CharField()
    earned = serializers.IntegerField()
    penalty = serializers.IntegerField()
    total = serializers.IntegerField()
    first = serializers.IntegerField()
    second = serializers.IntegerField()
    third = serializers.IntegerField()
    sections = SectionBreakdownSerializer()


class DashboardTeamSerializer(serializers.Serializer):
    standing = TeamStandingSerializer()
    participants = serializers.IntegerField()
    on_stage_points = serializers.IntegerField()
    off_stage_points = serializers.IntegerField()


class DashboardSerializer(serializers.Serializer):
    students = serializers.IntegerField()
    events = serializers.IntegerField()
    registrations = serializers.IntegerField()
    total_points = serializers.IntegerField()
    leader = TeamStandingSerializer(allow_null=True)
    teams = DashboardTeamSerializer(many=True)
    categories = serializers.DictField(child=serializers.IntegerField())


class StudentStandingSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    name = serializers.CharField()
    chest_no = serializers.CharField()
    section = serializers.CharField()
    class_grade = serializers.CharField()
    team_name = serializers.CharField()
    team_color = serializers.CharField()
    total = serializers.IntegerField()
    first = serializers.IntegerField()
    second = serializers.IntegerField()
    third = serializers.IntegerField()


class ChampionSerializer(serializers.Serializer):
    section = serializers.CharField()
    award = serializers.CharField()
    student_id = serializers.IntegerField()
    name = serializers.CharField()
    team = serializers.CharField()
    total = serializers.IntegerField()
    qualifying_wins = serializers.IntegerField()


class StudentComplianceSerializer(serializers.Serializer):
    student_id = serializers.IntegerField(source="student.id")
    name = serializers.CharField(source="student.name")
    chest_no = serializers.CharField(source="student.chest_no")
    section = serializers.CharField(source="student.section")
    has_on_stage = serializers.BooleanField()
    has_off_stage = serializers.BooleanField()
    absences = serializers.IntegerField()
    penalty = serializers.IntegerField()
    status = serializers.CharField(source="status_label")


class ComplianceReportSerializer(serializers.Serializer):
    students = StudentComplianceSerializer(many=True)
    compliance_penalty = serializers.IntegerField()
    attendance_penalty = serializers.IntegerField()
    non_compliant_count = serializers.IntegerField()
    absent_count = serializers.IntegerField()
    total = serializers.IntegerField()


class ParticipationRowSerializer(serializers.Serializer):
    event_id = serializers.IntegerField(source="event.id")
    event_name = serializers.CharField(source="event.name")
    category = serializers.CharField(source="event.category")
    grade_type = serializers.CharField(source="event.grade_type")
    student = serializers.CharField(source="student.name", default=None)
    result_position = serializers.CharField(allow_null=True)
    performance_grade = serializers.CharField(allow_null=True)
    attendance_status = serializers.CharField()
    points_earned = serializers.IntegerField()
