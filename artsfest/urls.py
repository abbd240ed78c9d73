"""URL configuration for the arts festival app."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import api, views

router = DefaultRouter()
router.register(r"teams", api.TeamViewSet, basename="team")
router.register(r"students", api.StudentViewSet, basename="student")
router.register(r"events", api.EventViewSet, basename="event")
router.register(r"participations", api.ParticipationViewSet, basename="participation")

api_urlpatterns = [
    path("auth/login/", api.LoginView.as_view(), name="auth-login"),
    path("auth/logout/", api.LogoutView.as_view(), name="auth-logout"),
    path("auth/me/", api.MeView.as_view(), name="auth-me"),
    path("leaderboard/teams/", api.TeamLeaderboardView.as_view(), name="leaderboard-teams"),
    path("leaderboard/individuals/", api.IndividualLeaderboardView.as_view(), name="leaderboard-individuals"),
    path("champions/", api.ChampionsView.as_view(), name="champions"),
    path("grade-settings/", api.GradeSettingsView.as_view(), name="grade-settings"),
    path("penalties/", api.PenaltiesView.as_view(), name="penalties"),
    path("overview/", api.OverviewView.as_view(), name="overview"),
    path("dashboard/", api.DashboardView.as_view(), name="dashboard"),
    path("imports/students/", api.StudentImportView.as_view(), name="import-students"),
    path("imports/events/", api.EventImportView.as_view(), name="import-events"),
    path("settings/registration/", api.RegistrationSettingView.as_view(), name="settings-registration"),
    path("registrations/", api.RegistrationView.as_view(), name="registrations"),
    path("captain/status/", api.CaptainStatusView.as_view(), name="captain-status"),
    path("keepalive/", views.keepalive, name="keepalive"),
    path("cron/", views.cron, name="cron"),
    path("", include(router.urls)),
]

urlpatterns = [
    path("api/", include(api_urlpatterns)),
    path("exports/leaderboard.xlsx", views.leaderboard_xlsx, name="export-leaderboard"),
    path("exports/students.xlsx", views.students_xlsx, name="export-students"),
    path("exports/call-sheets.pdf", views.call_sheets_pdf, name="export-call-sheets"),
    path("exports/teams/<int:pk>/report.pdf", views.team_report_pdf, name="export-team-report"),
    path("exports/overview.pdf", views.overview_pdf, name="export-overview"),
]
