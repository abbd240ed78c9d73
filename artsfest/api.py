"""REST API views for the arts festival portal."""

from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model, login, logout
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .models import Event, GradeSetting, Participation, Student, Team
from .permissions import IsFestivalAdmin, IsTeamCaptain, captain_team, get_profile
from .serializers import (
    AttendanceSerializer,
    ChampionSerializer,
    ComplianceReportSerializer,
    DashboardSerializer,
    EventSerializer,
    GradeSettingSerializer,
    LoginSerializer,
    ParticipationRowSerializer,
    ParticipationSerializer,
    PenaltySerializer,
    ProfileSerializer,
    RegistrationSerializer,
    RegistrationSettingSerializer,
    ResultsSerializer,
    StudentSerializer,
    StudentStandingSerializer,
    TeamSerializer,
    TeamStandingSerializer,
    UploadSerializer,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        identifier = serializer.validated_data["email"].strip()
        account = get_user_model().objects.filter(email__iexact=identifier).first()
        username = account.get_username() if account else identifier
        user = authenticate(request, username=username, password=serializer.validated_data["password"])
        if user is None:
            logger.warning("Failed sign-in for %s", identifier)
            return Response({"detail": "Invalid email or password."}, status=status.HTTP_400_BAD_REQUEST)
        login(request, user)
        logger.info("User %s signed in", user.get_username())
        return Response(_me_payload(user))


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    def get(self, request):
        return Response(_me_payload(request.user))


def _me_payload(user):
    profile = get_profile(user)
    payload = {"id": user.pk, "username": user.get_username(), "email": user.email, "profile": None}
    if profile is not None:
        payload["profile"] = ProfileSerializer(profile).data
    return payload


# ---------------------------------------------------------------------------
# Public scoreboards
# ---------------------------------------------------------------------------


class TeamLeaderboardView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response(TeamStandingSerializer(services.team_standings(), many=True).data)


class IndividualLeaderboardView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        rankings = services.individual_rankings()
        return Response(
            {tier: StudentStandingSerializer(standings, many=True).data for tier, standings in rankings.items()}
        )


class ChampionsView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response(ChampionSerializer(services.champions(), many=True).data)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


class TeamViewSet(viewsets.ModelViewSet):
    queryset = Team.objects.all()
    serializer_class = TeamSerializer
    permission_classes = [IsFestivalAdmin]

    @action(detail=True, methods=["get"])
    def details(self, request, pk=None):
        data = services.team_details(self.get_object())
        return Response(
            {
                "team": TeamSerializer(data["team"]).data,
                "standing": TeamStandingSerializer(data["standing"]).data,
                "results": ParticipationRowSerializer(data["rows"], many=True).data,
                "events": [
                    {
                        "event": entry["event"].pk,
                        "name": entry["event"].name,
                        "category": entry["event"].category,
                        "limit": entry["event"].max_participants_per_team,
                        "registered": entry["registered"],
                        "status": entry["status"],
                    }
                    for entry in data["events"]
                ],
            }
        )

    @action(detail=True, methods=["get"])
    def compliance(self, request, pk=None):
        report = services.team_compliance(self.get_object())
        return Response(ComplianceReportSerializer(report).data)


class StudentViewSet(viewsets.ModelViewSet):
    queryset = Student.objects.select_related("team")
    serializer_class = StudentSerializer
    permission_classes = [IsFestivalAdmin]

    def get_queryset(self):
        queryset = super().get_queryset()
        team = self.request.query_params.get("team")
        section = self.request.query_params.get("section")
        if team:
            queryset = queryset.filter(team_id=team)
        if section:
            queryset = queryset.filter(section=section)
        return queryset

    @action(detail=True, methods=["get"])
    def details(self, request, pk=None):
        data = services.student_details(self.get_object())
        tally = data["tally"]
        return Response(
            {
                "student": StudentSerializer(data["student"]).data,
                "total": tally.total,
                "first": tally.first,
                "second": tally.second,
                "third": tally.third,
                "participations": ParticipationRowSerializer(data["rows"], many=True).data,
            }
        )


class EventViewSet(viewsets.ModelViewSet):
    queryset = Event.objects.all()
    serializer_class = EventSerializer
    permission_classes = [IsFestivalAdmin]

    @action(detail=False, methods=["get"])
    def completed(self, request):
        return Response({"events": sorted(services.completed_event_ids())})

    @action(detail=True, methods=["get", "post"])
    def results(self, request, pk=None):
        event = self.get_object()
        if request.method == "POST":
            serializer = ResultsSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            winners = serializer.to_winners()
            if event.is_group_event:
                services.record_team_results(event, winners)
            else:
                services.record_individual_results(event, winners)
        participations = event.participations.select_related("student", "team", "event")
        return Response(ParticipationSerializer(participations, many=True).data)


class ParticipationViewSet(viewsets.ModelViewSet):
    queryset = Participation.objects.select_related("student", "event", "team")
    serializer_class = ParticipationSerializer
    permission_classes = [IsFestivalAdmin]

    def get_queryset(self):
        queryset = super().get_queryset()
        event = self.request.query_params.get("event")
        team = self.request.query_params.get("team")
        if event:
            queryset = queryset.filter(event_id=event)
        if team:
            queryset = queryset.filter(team_id=team)
        return queryset

    @action(detail=True, methods=["post"])
    def attendance(self, request, pk=None):
        serializer = AttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        participation = services.mark_attendance(
            self.get_object(), serializer.validated_data["attendance_status"]
        )
        return Response(ParticipationSerializer(participation).data)


class GradeSettingsView(APIView):
    permission_classes = [IsFestivalAdmin]

    def get(self, request):
        return Response(GradeSettingSerializer(GradeSetting.objects.all(), many=True).data)

    def put(self, request):
        serializer = GradeSettingSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)
        services.update_grade_settings(
            {
                item["grade_type"]: (item["first_place"], item["second_place"], item["third_place"])
                for item in serializer.validated_data
            }
        )
        return Response(GradeSettingSerializer(GradeSetting.objects.all(), many=True).data)


class PenaltiesView(APIView):
    permission_classes = [IsFestivalAdmin]

    def post(self, request):
        serializer = PenaltySerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)
        services.set_team_penalties(
            {item["team"].pk: item["penalty_points"] for item in serializer.validated_data}
        )
        return Response(TeamStandingSerializer(services.team_standings(), many=True).data)


class OverviewView(APIView):
    permission_classes = [IsFestivalAdmin]

    def get(self, request):
        data = services.overview()
        return Response(
            {
                "teams": TeamStandingSerializer(data["teams"], many=True).data,
                "classes": data["classes"],
                "top_students": StudentStandingSerializer(data["top_students"], many=True).data,
            }
        )


class DashboardView(APIView):
    permission_classes = [IsFestivalAdmin]

    def get(self, request):
        return Response(DashboardSerializer(services.dashboard()).data)


class _ImportView(APIView):
    permission_classes = [IsFestivalAdmin]
    parser_classes = [MultiPartParser, FormParser]
    importer = None

    def post(self, request):
        serializer = UploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.importer(serializer.validated_data["file"])
        return Response(result, status=status.HTTP_201_CREATED)


class StudentImportView(_ImportView):
    importer = staticmethod(services.import_students_csv)


class EventImportView(_ImportView):
    importer = staticmethod(services.import_events_csv)


class RegistrationSettingView(APIView):
    permission_classes = [IsFestivalAdmin]

    def get(self, request):
        return Response({"registration_open": services.registration_open()})

    def put(self, request):
        serializer = RegistrationSettingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.set_setting("registration_open", serializer.validated_data["registration_open"])
        return Response({"registration_open": services.registration_open()})


# ---------------------------------------------------------------------------
# Team captains
# ---------------------------------------------------------------------------


class RegistrationView(APIView):
    """List, add and remove the registrations of the captain's own team."""

    permission_classes = [IsTeamCaptain]

    def get(self, request):
        team = captain_team(request.user)
        participations = (
            Participation.objects.filter(team=team, student__isnull=False)
            .select_related("student", "event", "team")
        )
        return Response(
            {
                "registration_open": services.registration_open(team),
                "participations": ParticipationSerializer(participations, many=True).data,
            }
        )

    def post(self, request):
        return self._toggle(request, services.register_student, status.HTTP_201_CREATED)

    def delete(self, request):
        return self._toggle(request, services.withdraw_student, status.HTTP_200_OK)

    def _toggle(self, request, command, success_status):
        team = captain_team(request.user)
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = command(team, serializer.validated_data["student"], serializer.validated_data["event"])
        if not outcome.ok:
            return Response({"detail": outcome.message}, status=status.HTTP_400_BAD_REQUEST)
        payload = {"detail": outcome.message}
        if outcome.participation is not None:
            payload["participation"] = ParticipationSerializer(outcome.participation).data
        return Response(payload, status=success_status)


class CaptainStatusView(APIView):
    permission_classes = [IsTeamCaptain]

    def get(self, request):
        team = captain_team(request.user)
        report = services.team_compliance(team)
        return Response(
            {
                "team": TeamSerializer(team).data,
                "compliance": ComplianceReportSerializer(report).data,
            }
        )
