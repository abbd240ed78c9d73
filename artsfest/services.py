"""Data access and write commands for the arts festival portal."""

from __future__ import annotations

import csv
import random
import io
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.text import slugify

from . import models, scoring

__all__ = [
    "RegistrationOutcome",
    "participation_rows",
    "log_action",
    "unique_team_slug",
    "team_refs",
    "points_table",
    "update_grade_settings",
    "set_team_penalties",
    "record_individual_results",
    "record_team_results",
    "completed_event_ids",
    "registration_open",
    "register_student",
    "withdraw_student",
    "mark_attendance",
    "import_students_csv",
    "import_events_csv",
    "team_standings",
    "individual_rankings",
    "champions",
    "overview",
    "dashboard",
    "team_details",
    "student_details",
    "team_compliance",
    "keepalive_ping",
    "get_setting",
    "set_setting",
    "seed_demo_festival",
]

logger = logging.getLogger(__name__)

PERFORMANCE_GRADES = ("A", "B", "C")


@dataclass(frozen=True)
class RegistrationOutcome:
    """Result of a registration toggle; callers roll back on ``ok=False``."""

    ok: bool
    message: str = ""
    participation: models.Participation | None = None


# ---------------------------------------------------------------------------
# Loading records for the scoring core
# ---------------------------------------------------------------------------


def _team_ref(team: models.Team) -> scoring.TeamRef:
    return scoring.TeamRef(
        id=team.pk,
        name=team.name,
        color=team.color_hex or "",
        penalty=team.penalty_points or 0,
    )


def _student_ref(student: models.Student) -> scoring.StudentRef:
    return scoring.StudentRef(
        id=student.pk,
        name=student.name,
        chest_no=student.chest_no or "",
        section=student.section,
        class_grade=student.class_grade or "",
    )


def _event_ref(event: models.Event) -> scoring.EventRef:
    return scoring.EventRef(
        id=event.pk,
        name=event.name,
        category=event.category,
        grade_type=event.grade_type or "A",
        applicable_sections=tuple(event.applicable_sections or ()),
        code=event.event_code or "",
    )


def _row(participation: models.Participation) -> scoring.ParticipationRow:
    return scoring.ParticipationRow(
        event=_event_ref(participation.event),
        team=_team_ref(participation.team),
        student=_student_ref(participation.student) if participation.student_id else None,
        points_earned=participation.points_earned or 0,
        result_position=participation.result_position or None,
        performance_grade=participation.performance_grade or None,
        attendance_status=participation.attendance_status or models.Participation.Attendance.PENDING,
    )


def participation_rows(
    queryset: QuerySet | None = None, *, scored_only: bool = True
) -> list[scoring.ParticipationRow]:
    """Fetch participations in bulk and convert them to scoring rows."""

    qs = models.Participation.objects.all() if queryset is None else queryset
    qs = qs.select_related("event", "team", "student")
    if scored_only:
        qs = qs.filter(points_earned__gt=0)
    return [_row(participation) for participation in qs]


def team_refs() -> list[scoring.TeamRef]:
    return [_team_ref(team) for team in models.Team.objects.order_by("name")]


def log_action(action: str, payload: dict | None = None) -> models.AuditLog:
    return models.AuditLog.objects.create(action=action, payload=payload or {})


# ---------------------------------------------------------------------------
# Grade settings and penalties
# ---------------------------------------------------------------------------


def points_table() -> scoring.PointsTable:
    """Default points overridden by whatever is stored in grade settings."""

    table = scoring.PointsTable(dict(settings.FESTIVAL_DEFAULT_POINTS))
    overrides = {
        setting.grade_type: (setting.first_place, setting.second_place, setting.third_place)
        for setting in models.GradeSetting.objects.all()
    }
    return table.with_overrides(overrides)


@transaction.atomic
def update_grade_settings(values: Mapping[str, Iterable[int]]) -> list[models.GradeSetting]:
    """Store new first/second/third values for the supplied grade tiers."""

    updated: list[models.GradeSetting] = []
    for grade_type, points in values.items():
        if grade_type not in models.Event.GradeType.values:
            raise ValidationError({"grade_type": f"Unknown grade '{grade_type}'."})
        try:
            first, second, third = (int(value) for value in points)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                {grade_type: "Provide three whole numbers for first, second and third place."}
            ) from exc
        if min(first, second, third) < 0:
            raise ValidationError({grade_type: "Points cannot be negative."})
        setting, _ = models.GradeSetting.objects.update_or_create(
            grade_type=grade_type,
            defaults={"first_place": first, "second_place": second, "third_place": third},
        )
        updated.append(setting)
    log_action(
        "grade_settings.update",
        {setting.grade_type: [setting.first_place, setting.second_place, setting.third_place] for setting in updated},
    )
    logger.info("Grade settings updated for %s", ", ".join(s.grade_type for s in updated))
    return updated


@transaction.atomic
def set_team_penalties(penalties: Mapping[int, int]) -> list[models.Team]:
    """Replace the administrative penalty of each listed team."""

    teams = models.Team.objects.in_bulk(list(penalties))
    missing = [str(team_id) for team_id in penalties if team_id not in teams]
    if missing:
        raise ValidationError({"team": f"Unknown team(s): {', '.join(missing)}"})
    changed: list[models.Team] = []
    for team_id, raw in penalties.items():
        try:
            penalty = int(raw or 0)
        except (TypeError, ValueError) as exc:
            raise ValidationError({"penalty_points": "Penalty must be a whole number."}) from exc
        if penalty < 0:
            raise ValidationError({"penalty_points": "Penalty cannot be negative."})
        team = teams[team_id]
        if team.penalty_points != penalty:
            team.penalty_points = penalty
            team.save(update_fields=["penalty_points"])
            changed.append(team)
    log_action("teams.penalties", {str(team.pk): team.penalty_points for team in changed})
    logger.info("Penalties updated for %d team(s)", len(changed))
    return changed


# ---------------------------------------------------------------------------
# Result recording
# ---------------------------------------------------------------------------


def _normalise_placements(winners: Mapping[str, Mapping[int, str | None]]) -> dict[int, tuple[str, str | None]]:
    """Flatten ``{position: {id: grade}}`` into ``{id: (position, grade)}``."""

    placements: dict[int, tuple[str, str | None]] = {}
    for position, entries in winners.items():
        if position not in scoring.POSITIONS:
            raise ValidationError({"position": f"Unknown position '{position}'."})
        for key, grade in (entries or {}).items():
            grade = (grade or "").upper() or None
            if grade is not None and grade not in PERFORMANCE_GRADES:
                raise ValidationError({"performance_grade": f"Unknown performance grade '{grade}'."})
            key = int(key)
            if key in placements:
                raise ValidationError("A participant can only hold one position.")
            placements[key] = (position, grade)
    return placements


def record_individual_results(
    event: models.Event, winners: Mapping[str, Mapping[int, str | None]]
) -> list[models.Participation]:
    """Write placings for an individual event.

    ``winners`` maps a position to ``{participation_id: performance_grade}``.
    Every student participation of the event is rewritten: placed entries get
    points and the ``winner`` status, the rest are reset.
    """

    if event.is_group_event:
        raise ValidationError("Group events are scored per team.")
    placements = _normalise_placements(winners)
    table = points_table()
    bonus = settings.FESTIVAL_PERFORMANCE_BONUS

    with transaction.atomic():
        participations = list(
            event.participations.filter(student__isnull=False)
            .select_related("student", "team", "event")
            .select_for_update(of=("self",))
        )
        known = {participation.pk for participation in participations}
        unknown = sorted(set(placements) - known)
        if unknown:
            raise ValidationError(
                f"Participation(s) {', '.join(map(str, unknown))} are not registered for {event.name}."
            )
        for participation in participations:
            position, grade = placements.get(participation.pk, (None, None))
            participation.result_position = position
            participation.performance_grade = grade
            participation.points_earned = scoring.award_points(table, event.grade_type, position, grade, bonus)
            participation.status = (
                models.Participation.Status.WINNER if position else models.Participation.Status.REGISTERED
            )
            participation.save(
                update_fields=["result_position", "performance_grade", "points_earned", "status"]
            )
        log_action(
            "results.individual",
            {"event": event.pk, "placements": {str(pk): list(value) for pk, value in placements.items()}},
        )
    logger.info("Recorded %d placing(s) for %s", len(placements), event)
    return participations


def record_team_results(
    event: models.Event, winners: Mapping[str, Mapping[int, str | None]]
) -> list[models.Participation]:
    """Replace the team-level results of a group event.

    ``winners`` maps a position to ``{team_id: performance_grade}``. Existing
    student-less rows for the event are deleted and recreated in one
    transaction.
    """

    if not event.is_group_event:
        raise ValidationError("Only group (grade C) events take team results.")
    placements = _normalise_placements(winners)
    teams = models.Team.objects.in_bulk(list(placements))
    unknown = sorted(set(placements) - set(teams))
    if unknown:
        raise ValidationError({"team": f"Unknown team(s): {', '.join(map(str, unknown))}"})
    table = points_table()
    bonus = settings.FESTIVAL_PERFORMANCE_BONUS

    created: list[models.Participation] = []
    with transaction.atomic():
        removed, _ = event.participations.filter(student__isnull=True).delete()
        for team_id, (position, grade) in placements.items():
            created.append(
                models.Participation.objects.create(
                    event=event,
                    team=teams[team_id],
                    student=None,
                    result_position=position,
                    performance_grade=grade,
                    points_earned=scoring.award_points(table, event.grade_type, position, grade, bonus),
                    status=models.Participation.Status.WINNER,
                )
            )
        log_action(
            "results.team",
            {"event": event.pk, "placements": {str(pk): list(value) for pk, value in placements.items()}},
        )
    logger.info("Replaced %d team result(s) with %d for %s", removed, len(created), event)
    return created


def completed_event_ids(events: Iterable[models.Event] | None = None) -> set[int]:
    """Events with at least one recorded position."""

    qs = models.Participation.objects.filter(result_position__isnull=False)
    if events is not None:
        qs = qs.filter(event__in=list(events))
    return set(qs.values_list("event_id", flat=True).distinct())


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def get_setting(key: str, default=None):
    setting = models.AppSetting.objects.filter(key=key).first()
    if setting is None:
        return default
    return setting.value


def set_setting(key: str, value) -> models.AppSetting:
    setting, _ = models.AppSetting.objects.update_or_create(key=key, defaults={"value": value})
    log_action("settings.update", {"key": key, "value": value})
    logger.info("Setting %s changed to %r", key, value)
    return setting


def registration_open(team: models.Team | None = None) -> bool:
    if team is not None and team.access_override:
        return True
    return bool(get_setting("registration_open", True))


def _registration_limit(student: models.Student, event: models.Event) -> tuple[str, int]:
    limits = settings.FESTIVAL_REGISTRATION_LIMITS
    section_limits = limits.get(student.section) or limits["Senior"]
    bucket = "General" if event.is_general else event.category
    return bucket, section_limits[bucket]


def _registrations_in_bucket(student: models.Student, event: models.Event) -> int:
    count = 0
    for participation in student.participations.select_related("event"):
        other = participation.event
        if event.is_general:
            count += other.is_general
        else:
            count += (not other.is_general) and other.category == event.category
    return count


def register_student(
    team: models.Team, student: models.Student, event: models.Event
) -> RegistrationOutcome:
    """Register a student of ``team`` for ``event`` if every rule allows it."""

    if not registration_open(team):
        return _rejected("Registration is closed.")
    if student.team_id != team.pk:
        return _rejected(f"{student.name} does not belong to {team.name}.")
    if not any(event.applies_to(tier) for tier in scoring.eligible_tiers(student.section)):
        return _rejected(f"{event.name} is not open to {student.section} students.")
    if models.Participation.objects.filter(student=student, event=event).exists():
        return _rejected(f"{student.name} is already registered for {event.name}.")

    bucket, limit = _registration_limit(student, event)
    if _registrations_in_bucket(student, event) >= limit:
        label = "General" if bucket == "General" else f"{student.section} {bucket}"
        return _rejected(f"Limit reached! {student.name} can only do {limit} {label} events.")

    team_count = models.Participation.objects.filter(event=event, team=team, student__isnull=False).count()
    if team_count >= event.max_participants_per_team:
        return _rejected(f"Event full! Only {event.max_participants_per_team} per team allowed.")

    try:
        with transaction.atomic():
            participation = models.Participation.objects.create(
                student=student,
                event=event,
                team=team,
                status=models.Participation.Status.REGISTERED,
            )
    except (IntegrityError, ValidationError) as exc:
        logger.warning("Registration of %s for %s failed: %s", student, event, exc)
        return RegistrationOutcome(ok=False, message=f"Error adding: {exc}")
    logger.info("Registered %s for %s", student, event)
    return RegistrationOutcome(ok=True, message="Registered.", participation=participation)


def withdraw_student(
    team: models.Team, student: models.Student, event: models.Event
) -> RegistrationOutcome:
    if not registration_open(team):
        return _rejected("Registration is closed.")
    participation = models.Participation.objects.filter(student=student, event=event, team=team).first()
    if participation is None:
        return _rejected(f"{student.name} is not registered for {event.name}.")
    if participation.result_position:
        return _rejected("Results have already been recorded for this registration.")
    participation.delete()
    logger.info("Withdrew %s from %s", student, event)
    return RegistrationOutcome(ok=True, message="Withdrawn.")


def _rejected(message: str) -> RegistrationOutcome:
    logger.warning("Registration rejected: %s", message)
    return RegistrationOutcome(ok=False, message=message)


def mark_attendance(participation: models.Participation, status: str) -> models.Participation:
    if status not in models.Participation.Attendance.values:
        raise ValidationError({"attendance_status": f"Unknown attendance status '{status}'."})
    participation.attendance_status = status
    participation.save(update_fields=["attendance_status"])
    logger.info("Attendance for %s set to %s", participation, status)
    return participation


# ---------------------------------------------------------------------------
# CSV imports
# ---------------------------------------------------------------------------


def _read_csv(upload) -> tuple[list[str], list[dict[str, str]]]:
    raw = upload.read()
    if isinstance(raw, bytes):
        try:
            data = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            data = raw.decode("latin-1")
    else:
        data = raw
    reader = csv.DictReader(io.StringIO(data))
    headers = [(name or "").strip().lower() for name in (reader.fieldnames or [])]
    rows = []
    for row in reader:
        cleaned = {(key or "").strip().lower(): (value or "").strip() for key, value in row.items() if key}
        if any(cleaned.values()):
            rows.append(cleaned)
    return headers, rows


def _require_headers(headers: list[str], required: Iterable[str]) -> None:
    missing = [name for name in required if name not in headers]
    if missing:
        raise ValidationError(f"Invalid CSV headers. Missing: {', '.join(missing)}")


def _normalise_section(value: str) -> str | None:
    lookup = {tier.lower().replace("-", "").replace(" ", ""): tier for tier in scoring.TIERS}
    return lookup.get(value.lower().replace("-", "").replace(" ", ""))


def import_students_csv(upload) -> dict[str, object]:
    """Create students from ``name, chest_no, class, section, team_name`` rows.

    The import is all-or-nothing: any invalid row rejects the whole file.
    """

    headers, rows = _read_csv(upload)
    _require_headers(headers, ("name", "chest_no", "class", "section", "team_name"))
    if not rows:
        raise ValidationError("CSV file is empty or formatted incorrectly.")

    teams = {team.name.lower(): team for team in models.Team.objects.all()}
    errors: list[str] = []
    pending: list[models.Student] = []
    for line_number, row in enumerate(rows, start=2):
        team = teams.get(row.get("team_name", "").lower())
        if team is None:
            errors.append(f"Row {line_number}: Team '{row.get('team_name', '')}' not found.")
            continue
        section = _normalise_section(row.get("section", ""))
        if section not in scoring.SECTIONS:
            errors.append(f"Row {line_number}: invalid section '{row.get('section', '')}'.")
            continue
        if not row.get("name"):
            errors.append(f"Row {line_number}: missing name.")
            continue
        pending.append(
            models.Student(
                name=row["name"],
                chest_no=row.get("chest_no") or None,
                class_grade=row.get("class", ""),
                section=section,
                team=team,
            )
        )

    chest_numbers = [student.chest_no for student in pending if student.chest_no]
    duplicates = sorted(number for number, count in Counter(chest_numbers).items() if count > 1)
    if duplicates:
        errors.append(f"Duplicate chest numbers inside the file: {', '.join(duplicates)}")
    existing = sorted(
        models.Student.objects.filter(chest_no__in=chest_numbers).values_list("chest_no", flat=True)
    )
    if existing:
        errors.append(f"Chest numbers already in use: {', '.join(existing)}")
    if errors:
        logger.warning("Student import rejected with %d error(s)", len(errors))
        raise ValidationError(errors)

    with transaction.atomic():
        models.Student.objects.bulk_create(pending)
        log_action("students.import", {"created": len(pending)})
    logger.info("Imported %d students", len(pending))
    return {"created": len(pending), "errors": []}


def import_events_csv(upload) -> dict[str, object]:
    """Create events from ``name, event_code, category, limit, grade, section`` rows.

    ``section`` may list several tiers separated by ``|`` or ``;``.
    """

    headers, rows = _read_csv(upload)
    _require_headers(headers, ("name", "event_code", "category", "limit", "grade", "section"))
    if not rows:
        raise ValidationError("File is empty or invalid.")

    errors: list[str] = []
    pending: list[models.Event] = []
    for line_number, row in enumerate(rows, start=2):
        category = row.get("category", "").upper()
        if category not in models.Event.Category.values:
            errors.append(
                f"Row {line_number}: Invalid category '{row.get('category', '')}'. Must be ON STAGE or OFF STAGE."
            )
            continue
        grade = (row.get("grade") or "A").upper()
        if grade not in models.Event.GradeType.values:
            errors.append(f"Row {line_number}: Invalid grade '{row.get('grade')}'.")
            continue
        sections = []
        for chunk in row.get("section", "").replace(";", "|").split("|"):
            if not chunk.strip():
                continue
            tier = _normalise_section(chunk.strip())
            if tier is None:
                errors.append(f"Row {line_number}: Invalid section '{chunk.strip()}'.")
                break
            sections.append(tier)
        else:
            try:
                limit = int(row.get("limit") or 1)
            except ValueError:
                limit = 1
            pending.append(
                models.Event(
                    name=row.get("name", ""),
                    event_code=row.get("event_code") or None,
                    category=category,
                    max_participants_per_team=max(limit, 1),
                    grade_type=grade,
                    applicable_sections=sections,
                    description=row.get("description", ""),
                )
            )

    codes = [event.event_code for event in pending if event.event_code]
    duplicates = sorted(code for code, count in Counter(codes).items() if count > 1)
    existing = sorted(models.Event.objects.filter(event_code__in=codes).values_list("event_code", flat=True))
    if duplicates or existing:
        errors.append(f"Duplicate event codes found: {', '.join(sorted(set(duplicates) | set(existing)))}")
    if errors:
        logger.warning("Event import rejected with %d error(s)", len(errors))
        raise ValidationError(errors)

    with transaction.atomic():
        models.Event.objects.bulk_create(pending)
        log_action("events.import", {"created": len(pending)})
    logger.info("Imported %d events", len(pending))
    return {"created": len(pending), "errors": []}


def unique_team_slug(name: str) -> str:
    base = slugify(name) or "team"
    slug = base
    suffix = 2
    while models.Team.objects.filter(slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


# ---------------------------------------------------------------------------
# Leaderboards and reports
# ---------------------------------------------------------------------------


def team_standings() -> list[scoring.TeamStanding]:
    return scoring.team_standings(team_refs(), participation_rows())


def individual_rankings(top_n: int | None = None) -> dict[str, list[scoring.StudentStanding]]:
    if top_n is None:
        top_n = settings.FESTIVAL_LEADERBOARD_TOP_N
    return scoring.individual_rankings(participation_rows(), top_n=top_n)


def champions() -> list[scoring.Champion]:
    rows = participation_rows(models.Participation.objects.filter(student__isnull=False))
    return scoring.select_champions(rows)


def overview(top_students: int = 5) -> dict[str, object]:
    """Team standings, class totals and top students from a single fetch."""

    rows = participation_rows()
    return {
        "teams": scoring.team_standings(team_refs(), rows),
        "classes": scoring.class_totals(rows),
        "top_students": scoring.student_standings(rows)[:top_students],
    }


def dashboard() -> dict[str, object]:
    """Admin dashboard counters, covering registrations that have no result yet."""

    rows = participation_rows(scored_only=False)
    standings = scoring.team_standings(team_refs(), rows)
    participants = Counter(row.team.id for row in rows)
    stage_points = scoring.category_totals(rows)
    teams = [
        {
            "standing": standing,
            "participants": participants.get(standing.team_id, 0),
            "on_stage_points": stage_points.get(standing.team_id, {}).get(scoring.ON_STAGE, 0),
            "off_stage_points": stage_points.get(standing.team_id, {}).get(scoring.OFF_STAGE, 0),
        }
        for standing in standings
    ]
    return {
        "students": models.Student.objects.count(),
        "events": models.Event.objects.count(),
        "registrations": len(rows),
        "total_points": sum(row.points_earned for row in rows),
        "leader": standings[0] if standings else None,
        "teams": teams,
        "categories": scoring.category_counts(rows),
    }


def team_details(team: models.Team) -> dict[str, object]:
    rows = participation_rows(models.Participation.objects.filter(team=team))
    standing = next(s for s in scoring.team_standings([_team_ref(team)], rows))
    counts = Counter(
        models.Participation.objects.filter(team=team, student__isnull=False).values_list("event_id", flat=True)
    )
    events = []
    for event in models.Event.objects.all():
        registered = counts.get(event.pk, 0)
        if registered >= event.max_participants_per_team:
            status = "FULL"
        elif registered == 0:
            status = "EMPTY"
        else:
            status = "PARTIAL"
        events.append({"event": event, "registered": registered, "status": status})
    return {"team": team, "standing": standing, "rows": rows, "events": events}


def student_details(student: models.Student) -> dict[str, object]:
    rows = participation_rows(student.participations.all(), scored_only=False)
    tally = scoring.aggregate_by_student(rows).get(student.pk, scoring.Tally())
    return {"student": student, "rows": rows, "tally": tally}


def team_compliance(team: models.Team) -> scoring.ComplianceReport:
    rows_by_student: dict[int, list[scoring.ParticipationRow]] = defaultdict(list)
    for row in participation_rows(
        models.Participation.objects.filter(team=team, student__isnull=False), scored_only=False
    ):
        rows_by_student[row.student.id].append(row)
    students = [
        (_student_ref(student), rows_by_student.get(student.pk, []))
        for student in team.students.order_by("name")
    ]
    return scoring.compliance_report(
        students,
        compliance_penalty=settings.FESTIVAL_COMPLIANCE_PENALTY,
        absence_penalty=settings.FESTIVAL_ABSENCE_PENALTY,
    )


def keepalive_ping() -> models.KeepAliveStatus:
    status, _ = models.KeepAliveStatus.objects.get_or_create(pk=1)
    status.last_ping = timezone.now()
    status.save(update_fields=["last_ping"])
    return status


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------

DEMO_TEAMS = (
    ("Rubies", "#dc2626"),
    ("Emeralds", "#16a34a"),
    ("Sapphires", "#2563eb"),
    ("Topaz", "#ca8a04"),
)

DEMO_EVENTS = (
    # name, code, category, grade, sections, per-team limit
    ("Light Music", "ON01", "ON STAGE", "A", ["Senior"], 2),
    ("Elocution", "ON02", "ON STAGE", "A", ["Junior"], 2),
    ("Story Telling", "ON03", "ON STAGE", "B", ["Sub-Junior"], 2),
    ("Pencil Drawing", "OFF01", "OFF STAGE", "A", ["Senior"], 2),
    ("Essay Writing", "OFF02", "OFF STAGE", "A", ["Junior"], 2),
    ("Colouring", "OFF03", "OFF STAGE", "B", ["Sub-Junior"], 2),
    ("Quiz", "GEN01", "OFF STAGE", "A", ["General"], 1),
    ("Rangoli", "FND01", "OFF STAGE", "B", ["Foundation", "Sub-Junior"], 1),
    ("Group Song", "GRP01", "ON STAGE", "C", ["Senior", "Junior", "Sub-Junior"], 1),
)

DEMO_CLASSES = {"Senior": ("11", "12"), "Junior": ("8", "9"), "Sub-Junior": ("5", "6")}


def seed_demo_festival(*, students_per_section: int = 3, seed: int = 7) -> dict[str, int]:
    """Create demo teams, students, events, registrations and results.

    Existing teams and events are reused, so running the seed twice only
    tops up what is missing.
    """

    rng = random.Random(seed)
    with transaction.atomic():
        teams = []
        for name, color in DEMO_TEAMS:
            team, _ = models.Team.objects.get_or_create(
                name=name, defaults={"slug": unique_team_slug(name), "color_hex": color}
            )
            teams.append(team)

        chest = 100
        for team in teams:
            for section in scoring.SECTIONS:
                for number in range(1, students_per_section + 1):
                    chest += 1
                    models.Student.objects.get_or_create(
                        chest_no=str(chest),
                        defaults={
                            "name": f"{team.name} {section} {number}",
                            "class_grade": rng.choice(DEMO_CLASSES[section]),
                            "section": section,
                            "team": team,
                        },
                    )

        events = []
        for name, code, category, grade, sections, limit in DEMO_EVENTS:
            event, _ = models.Event.objects.get_or_create(
                event_code=code,
                defaults={
                    "name": name,
                    "category": category,
                    "grade_type": grade,
                    "applicable_sections": sections,
                    "max_participants_per_team": limit,
                },
            )
            events.append(event)

        for event in events:
            if event.is_group_event:
                continue
            for team in teams:
                eligible = [
                    student
                    for student in team.students.all()
                    if any(event.applies_to(tier) for tier in scoring.eligible_tiers(student.section))
                    and (not event.is_general or student.section == "Senior")
                ]
                for student in rng.sample(eligible, min(len(eligible), event.max_participants_per_team)):
                    models.Participation.objects.get_or_create(student=student, event=event, team=team)

    for event in events:
        if event.is_group_event:
            order = rng.sample(teams, len(teams))
            record_team_results(
                event, {position: {team.pk: "A"} for position, team in zip(scoring.POSITIONS, order)}
            )
            continue
        entries = list(event.participations.filter(student__isnull=False))
        rng.shuffle(entries)
        winners = {
            position: {entry.pk: rng.choice(PERFORMANCE_GRADES)}
            for position, entry in zip(scoring.POSITIONS, entries)
        }
        record_individual_results(event, winners)

    counts = {
        "teams": models.Team.objects.count(),
        "students": models.Student.objects.count(),
        "events": models.Event.objects.count(),
        "participations": models.Participation.objects.count(),
    }
    logger.info("Demo festival seeded: %s", counts)
    return counts
