import io

from django.core.exceptions import ValidationError
from django.test import TestCase

from artsfest import models, scoring, services


def make_event(name, code, category="ON STAGE", grade="A", sections=("Senior",), limit=2):
    return models.Event.objects.create(
        name=name,
        event_code=code,
        category=category,
        grade_type=grade,
        applicable_sections=list(sections),
        max_participants_per_team=limit,
    )


class FestivalTestCase(TestCase):
    def setUp(self):
        self.red = models.Team.objects.create(name="Red", slug="red", color_hex="#ff0000")
        self.blue = models.Team.objects.create(name="Blue", slug="blue", color_hex="#0000ff")
        self.asha = models.Student.objects.create(
            name="Asha", chest_no="101", class_grade="11", section="Senior", team=self.red
        )
        self.ben = models.Student.objects.create(
            name="Ben", chest_no="201", class_grade="12", section="Senior", team=self.blue
        )
        self.cara = models.Student.objects.create(
            name="Cara", chest_no="102", class_grade="8", section="Junior", team=self.red
        )
        self.song = make_event("Light Music", "ON01")
        self.drawing = make_event("Pencil Drawing", "OFF01", category="OFF STAGE")
        self.group = make_event("Group Song", "GRP01", grade="C", sections=("Senior", "Junior"), limit=1)


class ResultRecordingTests(FestivalTestCase):
    def setUp(self):
        super().setUp()
        self.asha_song = models.Participation.objects.create(student=self.asha, event=self.song, team=self.red)
        self.ben_song = models.Participation.objects.create(student=self.ben, event=self.song, team=self.blue)

    def test_first_place_without_grade_earns_base_points(self):
        services.record_individual_results(self.song, {"FIRST": {self.asha_song.pk: None}})
        self.asha_song.refresh_from_db()
        self.assertEqual(self.asha_song.points_earned, 15)
        self.assertEqual(self.asha_song.status, models.Participation.Status.WINNER)

    def test_performance_grade_adds_bonus_and_resets_others(self):
        services.record_individual_results(
            self.song, {"FIRST": {self.asha_song.pk: "A"}, "SECOND": {self.ben_song.pk: "B"}}
        )
        self.ben_song.refresh_from_db()
        self.assertEqual(self.ben_song.points_earned, 13)

        services.record_individual_results(self.song, {"FIRST": {self.ben_song.pk: "A"}})
        self.asha_song.refresh_from_db()
        self.ben_song.refresh_from_db()
        self.assertEqual(self.ben_song.points_earned, 20)
        self.assertIsNone(self.asha_song.result_position)
        self.assertEqual(self.asha_song.points_earned, 0)
        self.assertEqual(self.asha_song.status, models.Participation.Status.REGISTERED)

    def test_participant_cannot_hold_two_positions(self):
        with self.assertRaises(ValidationError):
            services.record_individual_results(
                self.song, {"FIRST": {self.asha_song.pk: "A"}, "SECOND": {self.asha_song.pk: "A"}}
            )

    def test_unknown_participation_rejected(self):
        with self.assertRaises(ValidationError):
            services.record_individual_results(self.drawing, {"FIRST": {self.asha_song.pk: "A"}})
        self.asha_song.refresh_from_db()
        self.assertEqual(self.asha_song.points_earned, 0)

    def test_grade_settings_override_points(self):
        services.update_grade_settings({"A": (30, 20, 10)})
        services.record_individual_results(self.song, {"SECOND": {self.asha_song.pk: None}})
        self.asha_song.refresh_from_db()
        self.assertEqual(self.asha_song.points_earned, 20)
        self.assertTrue(models.AuditLog.objects.filter(action="grade_settings.update").exists())

    def test_negative_grade_setting_rejected(self):
        with self.assertRaises(ValidationError):
            services.update_grade_settings({"B": (10, -1, 3)})

    def test_team_results_replace_previous_rows(self):
        services.record_team_results(self.group, {"FIRST": {self.red.pk: None}, "SECOND": {self.blue.pk: None}})
        services.record_team_results(self.group, {"FIRST": {self.blue.pk: "A"}})
        rows = list(self.group.participations.all())
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].team, self.blue)
        self.assertIsNone(rows[0].student)
        self.assertEqual(rows[0].points_earned, 25)

    def test_team_results_only_for_group_events(self):
        with self.assertRaises(ValidationError):
            services.record_team_results(self.song, {"FIRST": {self.red.pk: None}})
        with self.assertRaises(ValidationError):
            services.record_individual_results(self.group, {})

    def test_completed_events(self):
        self.assertEqual(services.completed_event_ids(), set())
        services.record_individual_results(self.song, {"THIRD": {self.ben_song.pk: None}})
        self.assertEqual(services.completed_event_ids(), {self.song.pk})

    def test_points_require_position(self):
        self.asha_song.points_earned = 5
        with self.assertRaises(ValidationError):
            self.asha_song.save()


class StandingsTests(FestivalTestCase):
    def setUp(self):
        super().setUp()
        asha_song = models.Participation.objects.create(student=self.asha, event=self.song, team=self.red)
        asha_drawing = models.Participation.objects.create(student=self.asha, event=self.drawing, team=self.red)
        ben_song = models.Participation.objects.create(student=self.ben, event=self.song, team=self.blue)
        services.record_individual_results(self.song, {"FIRST": {asha_song.pk: "A"}, "SECOND": {ben_song.pk: "A"}})
        services.record_individual_results(self.drawing, {"FIRST": {asha_drawing.pk: "A"}})
        services.record_team_results(self.group, {"FIRST": {self.blue.pk: None}})

    def test_team_standings_apply_penalties(self):
        services.set_team_penalties({self.red.pk: 35})
        standings = services.team_standings()
        self.assertEqual([s.name for s in standings], ["Blue", "Red"])
        blue, red = standings
        self.assertEqual(blue.total, 35)
        self.assertEqual((red.earned, red.penalty, red.total), (40, 35, 5))

    def test_negative_penalty_rejected(self):
        with self.assertRaises(ValidationError):
            services.set_team_penalties({self.red.pk: -5})

    def test_champions_and_rankings(self):
        champions = services.champions()
        self.assertEqual(
            [(c.award, c.name) for c in champions],
            [(scoring.KALA, "Asha"), (scoring.SARGGA, "Ben")],
        )
        rankings = services.individual_rankings()
        self.assertEqual([s.name for s in rankings["Senior"]], ["Asha", "Ben"])

    def test_overview_and_details(self):
        data = services.overview()
        self.assertEqual(data["teams"][0].name, "Red")
        self.assertEqual(data["top_students"][0].name, "Asha")
        details = services.team_details(self.red)
        statuses = {entry["event"].event_code: entry["status"] for entry in details["events"]}
        self.assertEqual(statuses["ON01"], "PARTIAL")
        self.assertEqual(statuses["GRP01"], "EMPTY")
        student = services.student_details(self.asha)
        self.assertEqual(student["tally"].total, 40)
        self.assertEqual(student["tally"].first, 2)

    def test_dashboard_counts_unscored_registrations(self):
        models.Participation.objects.create(student=self.ben, event=self.drawing, team=self.blue)
        data = services.dashboard()
        self.assertEqual((data["students"], data["events"], data["registrations"]), (3, 3, 5))
        self.assertEqual(data["total_points"], 75)
        self.assertEqual(data["categories"], {scoring.ON_STAGE: 3, scoring.OFF_STAGE: 2})
        self.assertEqual(data["leader"].name, "Red")
        teams = {entry["standing"].name: entry for entry in data["teams"]}
        self.assertEqual(teams["Red"]["participants"], 2)
        self.assertEqual(teams["Blue"]["participants"], 3)
        self.assertEqual((teams["Red"]["on_stage_points"], teams["Red"]["off_stage_points"]), (20, 20))
        self.assertEqual((teams["Blue"]["on_stage_points"], teams["Blue"]["off_stage_points"]), (35, 0))
        self.assertEqual(teams["Blue"]["standing"].first, 1)

    def test_dashboard_without_teams(self):
        models.Team.objects.all().delete()
        data = services.dashboard()
        self.assertIsNone(data["leader"])
        self.assertEqual(data["registrations"], 0)
        self.assertEqual(data["categories"], {scoring.ON_STAGE: 0, scoring.OFF_STAGE: 0})


class RegistrationTests(FestivalTestCase):
    def test_register_and_withdraw(self):
        outcome = services.register_student(self.red, self.asha, self.song)
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.participation.team, self.red)
        outcome = services.withdraw_student(self.red, self.asha, self.song)
        self.assertTrue(outcome.ok)
        self.assertFalse(models.Participation.objects.exists())

    def test_duplicate_registration(self):
        services.register_student(self.red, self.asha, self.song)
        outcome = services.register_student(self.red, self.asha, self.song)
        self.assertFalse(outcome.ok)
        self.assertIn("already registered", outcome.message)

    def test_other_team_student_rejected(self):
        outcome = services.register_student(self.red, self.ben, self.song)
        self.assertFalse(outcome.ok)

    def test_section_must_match(self):
        outcome = services.register_student(self.red, self.cara, self.song)
        self.assertFalse(outcome.ok)
        general = make_event("Quiz", "GEN01", sections=("General",))
        self.assertTrue(services.register_student(self.red, self.cara, general).ok)

    def test_category_limit(self):
        for number in range(3):
            event = make_event(f"Solo {number}", f"S{number}")
            self.assertTrue(services.register_student(self.red, self.asha, event).ok)
        outcome = services.register_student(self.red, self.asha, make_event("Solo 4", "S4"))
        self.assertFalse(outcome.ok)
        self.assertIn("Limit reached", outcome.message)
        # Off-stage events have their own allowance.
        self.assertTrue(services.register_student(self.red, self.asha, self.drawing).ok)

    def test_general_limit_independent_of_category(self):
        for number in range(2):
            event = make_event(f"General {number}", f"G{number}", sections=("General",))
            self.assertTrue(services.register_student(self.red, self.asha, event).ok)
        outcome = services.register_student(self.red, self.asha, make_event("General 3", "G3", sections=("General",)))
        self.assertFalse(outcome.ok)
        self.assertTrue(services.register_student(self.red, self.asha, self.song).ok)

    def test_team_capacity(self):
        solo = make_event("Solo", "SOLO", limit=1)
        second = models.Student.objects.create(name="Dev", chest_no="103", section="Senior", team=self.red)
        self.assertTrue(services.register_student(self.red, self.asha, solo).ok)
        outcome = services.register_student(self.red, second, solo)
        self.assertFalse(outcome.ok)
        self.assertIn("Event full", outcome.message)
        self.assertTrue(services.register_student(self.blue, self.ben, solo).ok)

    def test_closed_registration_and_override(self):
        services.set_setting("registration_open", False)
        self.assertFalse(services.register_student(self.red, self.asha, self.song).ok)
        self.red.access_override = True
        self.red.save()
        self.assertTrue(services.register_student(self.red, self.asha, self.song).ok)

    def test_withdraw_refused_after_results(self):
        participation = services.register_student(self.red, self.asha, self.song).participation
        services.record_individual_results(self.song, {"FIRST": {participation.pk: None}})
        outcome = services.withdraw_student(self.red, self.asha, self.song)
        self.assertFalse(outcome.ok)
        self.assertTrue(models.Participation.objects.filter(pk=participation.pk).exists())


class ComplianceTests(FestivalTestCase):
    def test_team_compliance(self):
        models.Participation.objects.create(student=self.asha, event=self.song, team=self.red)
        models.Participation.objects.create(
            student=self.asha,
            event=self.drawing,
            team=self.red,
            attendance_status=models.Participation.Attendance.ABSENT,
        )
        report = services.team_compliance(self.red)
        by_name = {entry.student.name: entry for entry in report.students}
        self.assertEqual(by_name["Asha"].status_label, "Missing Off-Stage")
        self.assertEqual(by_name["Asha"].penalty, 15)
        self.assertEqual(by_name["Cara"].status_label, "No Events")
        self.assertEqual(report.total, 25)

    def test_mark_attendance(self):
        participation = models.Participation.objects.create(student=self.asha, event=self.song, team=self.red)
        services.mark_attendance(participation, "present")
        participation.refresh_from_db()
        self.assertEqual(participation.attendance_status, "present")
        with self.assertRaises(ValidationError):
            services.mark_attendance(participation, "late")


class CsvImportTests(FestivalTestCase):
    def test_import_students(self):
        upload = io.BytesIO(
            b"\xef\xbb\xbfname,chest_no,class,section,team_name\n"
            b"Diya,301,9,junior,Red\n"
            b"Eli,302,6,Sub-Junior,blue\n"
        )
        result = services.import_students_csv(upload)
        self.assertEqual(result["created"], 2)
        eli = models.Student.objects.get(chest_no="302")
        self.assertEqual(eli.team, self.blue)
        self.assertEqual(eli.section, "Sub-Junior")

    def test_import_students_is_all_or_nothing(self):
        upload = io.BytesIO(
            b"name,chest_no,class,section,team_name\n"
            b"Diya,301,9,Junior,Red\n"
            b"Eli,101,6,Junior,Green\n"
        )
        with self.assertRaises(ValidationError) as ctx:
            services.import_students_csv(upload)
        self.assertIn("Row 3: Team 'Green' not found.", ctx.exception.messages)
        self.assertFalse(models.Student.objects.filter(chest_no="301").exists())

    def test_import_students_duplicate_chest_numbers(self):
        upload = io.BytesIO(
            b"name,chest_no,class,section,team_name\n"
            b"Diya,101,9,Junior,Red\n"
        )
        with self.assertRaises(ValidationError) as ctx:
            services.import_students_csv(upload)
        self.assertIn("Chest numbers already in use: 101", ctx.exception.messages)

    def test_import_students_missing_headers(self):
        with self.assertRaises(ValidationError):
            services.import_students_csv(io.BytesIO(b"name,class\nDiya,9\n"))

    def test_import_events(self):
        upload = io.BytesIO(
            b"name,event_code,category,limit,grade,section,description\n"
            b"Quiz,GEN02,off stage,1,A,General,Written round\n"
            b"Rangoli,FND02,OFF STAGE,2,b,Foundation|Sub-Junior,\n"
        )
        result = services.import_events_csv(upload)
        self.assertEqual(result["created"], 2)
        rangoli = models.Event.objects.get(event_code="FND02")
        self.assertEqual(rangoli.applicable_sections, ["Foundation", "Sub-Junior"])
        self.assertEqual(rangoli.grade_type, "B")
        self.assertEqual(rangoli.max_participants_per_team, 2)

    def test_import_events_rejects_bad_category(self):
        upload = io.BytesIO(
            b"name,event_code,category,limit,grade,section\n"
            b"Dance,ON09,BACKSTAGE,1,A,Senior\n"
        )
        with self.assertRaises(ValidationError):
            services.import_events_csv(upload)
        self.assertFalse(models.Event.objects.filter(event_code="ON09").exists())

    def test_import_events_duplicate_code(self):
        upload = io.BytesIO(
            b"name,event_code,category,limit,grade,section\n"
            b"Dance,ON01,ON STAGE,1,A,Senior\n"
        )
        with self.assertRaises(ValidationError) as ctx:
            services.import_events_csv(upload)
        self.assertIn("Duplicate event codes found: ON01", ctx.exception.messages)


class DemoDataTests(TestCase):
    def test_seed_is_repeatable(self):
        first = services.seed_demo_festival(students_per_section=2)
        second = services.seed_demo_festival(students_per_section=2)
        self.assertEqual(first, second)
        self.assertEqual(first["teams"], 4)
        self.assertEqual(first["students"], 24)
        self.assertTrue(services.completed_event_ids())
