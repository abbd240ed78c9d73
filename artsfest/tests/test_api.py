"""Tests for the arts festival REST API."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.test import APIClient

from artsfest import models


class ApiTestCase(TestCase):
    def setUp(self):
        User = get_user_model()
        self.red = models.Team.objects.create(name="Red", slug="red")
        self.blue = models.Team.objects.create(name="Blue", slug="blue")
        self.asha = models.Student.objects.create(
            name="Asha", chest_no="101", class_grade="11", section="Senior", team=self.red
        )
        self.ben = models.Student.objects.create(
            name="Ben", chest_no="201", class_grade="11", section="Senior", team=self.blue
        )
        self.song = models.Event.objects.create(
            name="Light Music",
            event_code="ON01",
            category="ON STAGE",
            applicable_sections=["Senior"],
            max_participants_per_team=2,
        )

        self.admin_user = User.objects.create_user(username="admin", email="admin@example.com", password="pw")
        models.Profile.objects.create(user=self.admin_user, role=models.Profile.Role.ADMIN, full_name="Admin")
        self.captain_user = User.objects.create_user(username="captain", email="cap@example.com", password="pw")
        models.Profile.objects.create(user=self.captain_user, role=models.Profile.Role.CAPTAIN, team=self.red)

        self.admin = APIClient()
        self.admin.force_authenticate(user=self.admin_user)
        self.captain = APIClient()
        self.captain.force_authenticate(user=self.captain_user)
        self.anonymous = APIClient()


class AuthApiTests(ApiTestCase):
    def test_login_with_email(self):
        response = self.anonymous.post(
            "/api/auth/login/", {"email": "cap@example.com", "password": "pw"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["profile"]["role"], "captain")
        self.assertEqual(response.json()["profile"]["team_name"], "Red")

        me = self.anonymous.get("/api/auth/me/")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["username"], "captain")

    def test_login_rejects_bad_password(self):
        response = self.anonymous.post(
            "/api/auth/login/", {"email": "cap@example.com", "password": "nope"}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_me_requires_authentication(self):
        self.assertEqual(self.anonymous.get("/api/auth/me/").status_code, 403)


class ScoreboardApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.participation = models.Participation.objects.create(
            student=self.asha, event=self.song, team=self.red
        )

    def test_record_results_and_public_leaderboards(self):
        response = self.admin.post(
            f"/api/events/{self.song.pk}/results/",
            {"placements": [{"id": self.participation.pk, "position": "FIRST", "performance_grade": "A"}]},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["points_earned"], 20)

        teams = self.anonymous.get("/api/leaderboard/teams/").json()
        self.assertEqual([team["name"] for team in teams], ["Red", "Blue"])
        self.assertEqual(teams[0]["total"], 20)
        self.assertEqual(teams[0]["sections"]["Senior"], 20)

        individuals = self.anonymous.get("/api/leaderboard/individuals/").json()
        self.assertEqual(individuals["Senior"][0]["name"], "Asha")
        self.assertEqual(individuals["General"], [])

        champions = self.anonymous.get("/api/champions/").json()
        self.assertEqual(champions[0]["award"], "SARGGA")

        completed = self.admin.get("/api/events/completed/").json()
        self.assertEqual(completed["events"], [self.song.pk])

    def test_duplicate_positions_rejected(self):
        response = self.admin.post(
            f"/api/events/{self.song.pk}/results/",
            {
                "placements": [
                    {"id": self.participation.pk, "position": "FIRST"},
                    {"id": self.participation.pk, "position": "SECOND"},
                ]
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_group_event_results(self):
        group = models.Event.objects.create(
            name="Group Song", event_code="GRP01", category="ON STAGE", grade_type="C", applicable_sections=["Senior"]
        )
        response = self.admin.post(
            f"/api/events/{group.pk}/results/",
            {"placements": [{"id": self.blue.pk, "position": "FIRST"}]},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["team_name"], "Blue")
        self.assertEqual(response.json()[0]["points_earned"], 20)

    def test_penalties_and_overview(self):
        response = self.admin.post(
            "/api/penalties/", [{"team": self.red.pk, "penalty_points": 7}], format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.red.refresh_from_db()
        self.assertEqual(self.red.penalty_points, 7)
        overview = self.admin.get("/api/overview/").json()
        self.assertEqual({team["name"] for team in overview["teams"]}, {"Red", "Blue"})

    def test_dashboard(self):
        self.admin.post(
            f"/api/events/{self.song.pk}/results/",
            {"placements": [{"id": self.participation.pk, "position": "FIRST"}]},
            format="json",
        )
        models.Participation.objects.create(student=self.ben, event=self.song, team=self.blue)
        data = self.admin.get("/api/dashboard/").json()
        self.assertEqual((data["students"], data["events"], data["registrations"]), (2, 1, 2))
        self.assertEqual(data["total_points"], 15)
        self.assertEqual(data["leader"]["name"], "Red")
        self.assertEqual(data["categories"], {"ON STAGE": 2, "OFF STAGE": 0})
        red = next(entry for entry in data["teams"] if entry["standing"]["name"] == "Red")
        self.assertEqual((red["participants"], red["on_stage_points"]), (1, 15))
        self.assertEqual(self.captain.get("/api/dashboard/").status_code, 403)

    def test_grade_settings(self):
        response = self.admin.put(
            "/api/grade-settings/",
            [{"grade_type": "B", "first_place": 12, "second_place": 6, "third_place": 2}],
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(models.GradeSetting.objects.get(grade_type="B").first_place, 12)

    def test_attendance_and_details(self):
        response = self.admin.post(
            f"/api/participations/{self.participation.pk}/attendance/",
            {"attendance_status": "absent"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        compliance = self.admin.get(f"/api/teams/{self.red.pk}/compliance/").json()
        self.assertEqual(compliance["absent_count"], 1)
        self.assertEqual(compliance["students"][0]["status"], "No Events")

        details = self.admin.get(f"/api/students/{self.asha.pk}/details/").json()
        self.assertEqual(len(details["participations"]), 1)
        team = self.admin.get(f"/api/teams/{self.red.pk}/details/").json()
        self.assertEqual(team["events"][0]["status"], "PARTIAL")

    def test_admin_endpoints_require_admin(self):
        self.assertEqual(self.captain.get("/api/teams/").status_code, 403)
        self.assertEqual(self.anonymous.get("/api/overview/").status_code, 403)


class AdminCrudApiTests(ApiTestCase):
    def test_create_team_generates_slug(self):
        response = self.admin.post("/api/teams/", {"name": "Green Leaf"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["slug"], "green-leaf")

    def test_create_event_validates_sections(self):
        response = self.admin.post(
            "/api/events/",
            {"name": "Mime", "category": "ON STAGE", "applicable_sections": ["Seniors"]},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_participation_team_must_match_student(self):
        response = self.admin.post(
            "/api/participations/",
            {"student": self.asha.pk, "event": self.song.pk, "team": self.blue.pk},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_participation_crud_ignores_result_fields(self):
        response = self.admin.post(
            "/api/participations/",
            {
                "student": self.asha.pk,
                "event": self.song.pk,
                "team": self.red.pk,
                "status": "winner",
                "result_position": "FIRST",
                "performance_grade": "C",
                "points_earned": 999,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        created = response.json()
        self.assertEqual(created["points_earned"], 0)
        self.assertIsNone(created["result_position"])
        self.assertEqual(created["status"], "registered")

        patched = self.admin.patch(
            f"/api/participations/{created['id']}/", {"points_earned": 500}, format="json"
        )
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["points_earned"], 0)

        response = self.admin.post(
            f"/api/events/{self.song.pk}/results/",
            {"placements": [{"id": created["id"], "position": "FIRST", "performance_grade": "C"}]},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["points_earned"], 16)
        teams = self.anonymous.get("/api/leaderboard/teams/").json()
        self.assertEqual(teams[0]["total"], 16)

    def test_import_students(self):
        upload = SimpleUploadedFile(
            "students.csv",
            b"name,chest_no,class,section,team_name\nDiya,301,9,Junior,Red\n",
            content_type="text/csv",
        )
        response = self.admin.post("/api/imports/students/", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["created"], 1)

    def test_import_events_errors_are_reported(self):
        upload = SimpleUploadedFile(
            "events.csv",
            b"name,event_code,category,limit,grade,section\nDance,ON09,BACKSTAGE,1,A,Senior\n",
            content_type="text/csv",
        )
        response = self.admin.post("/api/imports/events/", {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid category", response.json()[0])


class CaptainApiTests(ApiTestCase):
    def test_register_and_withdraw(self):
        response = self.captain.post(
            "/api/registrations/", {"student": self.asha.pk, "event": self.song.pk}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        listing = self.captain.get("/api/registrations/").json()
        self.assertTrue(listing["registration_open"])
        self.assertEqual(len(listing["participations"]), 1)

        response = self.captain.delete(
            "/api/registrations/", {"student": self.asha.pk, "event": self.song.pk}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(models.Participation.objects.exists())

    def test_cannot_register_other_team_student(self):
        response = self.captain.post(
            "/api/registrations/", {"student": self.ben.pk, "event": self.song.pk}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("does not belong", response.json()["detail"])

    def test_registration_switch(self):
        response = self.admin.put("/api/settings/registration/", {"registration_open": False}, format="json")
        self.assertEqual(response.status_code, 200)
        response = self.captain.post(
            "/api/registrations/", {"student": self.asha.pk, "event": self.song.pk}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Registration is closed.")

    def test_captain_status(self):
        response = self.captain.get("/api/captain/status/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["team"]["name"], "Red")
        self.assertEqual(response.json()["compliance"]["non_compliant_count"], 1)

    def test_admin_is_not_a_captain(self):
        self.assertEqual(self.admin.get("/api/registrations/").status_code, 403)


class KeepAliveTests(TestCase):
    def test_keepalive(self):
        response = self.client.get("/api/keepalive/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_cron_updates_last_ping(self):
        response = self.client.get("/api/cron/")
        self.assertEqual(response.status_code, 200)
        self.assertIsNotNone(models.KeepAliveStatus.objects.get(pk=1).last_ping)
