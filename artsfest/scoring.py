"""Scoring helpers for the arts festival.

Everything in this module works on plain, immutable records so that the
leaderboards, champion boards and reports all share one implementation of
the point arithmetic. Nothing here touches the database; see
:mod:`artsfest.services` for the loaders that build the records.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Sequence

__all__ = [
    "SECTIONS",
    "TIERS",
    "ON_STAGE",
    "OFF_STAGE",
    "POSITIONS",
    "DEFAULT_POINTS",
    "PERFORMANCE_BONUS",
    "KALA",
    "SARGGA",
    "StudentRef",
    "TeamRef",
    "EventRef",
    "ParticipationRow",
    "PointsTable",
    "Tally",
    "SectionBreakdown",
    "TeamStanding",
    "StudentStanding",
    "Champion",
    "StudentCompliance",
    "ComplianceReport",
    "performance_bonus",
    "award_points",
    "aggregate_by_student",
    "aggregate_by_team",
    "rows_for_tier",
    "eligible_tiers",
    "team_section_breakdown",
    "category_totals",
    "category_counts",
    "adjust_for_penalty",
    "team_standings",
    "student_standings",
    "individual_rankings",
    "class_totals",
    "select_champions",
    "compliance_report",
]


SECTIONS: tuple[str, ...] = ("Senior", "Junior", "Sub-Junior")
TIERS: tuple[str, ...] = ("Senior", "Junior", "Sub-Junior", "General", "Foundation")
GENERAL = "General"
FOUNDATION = "Foundation"

ON_STAGE = "ON STAGE"
OFF_STAGE = "OFF STAGE"

FIRST, SECOND, THIRD = "FIRST", "SECOND", "THIRD"
POSITIONS: tuple[str, ...] = (FIRST, SECOND, THIRD)

GROUP_TIER = "C"

DEFAULT_POINTS: dict[str, tuple[int, int, int]] = {
    "A": (15, 10, 5),
    "B": (10, 5, 3),
    "C": (20, 15, 10),
}

PERFORMANCE_BONUS: dict[str, int] = {"A": 5, "B": 3, "C": 1}

KALA = "KALA"
SARGGA = "SARGGA"


@dataclass(frozen=True)
class StudentRef:
    id: int
    name: str
    chest_no: str = ""
    section: str = ""
    class_grade: str = ""


@dataclass(frozen=True)
class TeamRef:
    id: int
    name: str
    color: str = ""
    penalty: int = 0


@dataclass(frozen=True)
class EventRef:
    id: int
    name: str
    category: str
    grade_type: str = "A"
    applicable_sections: tuple[str, ...] = ()
    code: str = ""

    def applies_to(self, tier: str) -> bool:
        return tier in self.applicable_sections

    @property
    def is_general(self) -> bool:
        return self.applies_to(GENERAL)

    @property
    def is_group(self) -> bool:
        return self.grade_type == GROUP_TIER


@dataclass(frozen=True)
class ParticipationRow:
    """One participation with the event, team and (optional) student attached."""

    event: EventRef
    team: TeamRef
    student: StudentRef | None = None
    points_earned: int = 0
    result_position: str | None = None
    performance_grade: str | None = None
    attendance_status: str = "pending"

    @property
    def is_individual(self) -> bool:
        """True for rows that count towards a student's personal total."""

        return self.student is not None and not self.event.is_group

    @property
    def is_qualifying_win(self) -> bool:
        return (
            self.result_position == FIRST
            and self.performance_grade == "A"
            and self.event.grade_type == "A"
            and not self.event.is_general
        )


@dataclass(frozen=True)
class PointsTable:
    """Lookup from (grade tier, position) to placing points."""

    values: Mapping[str, tuple[int, int, int]]

    @classmethod
    def default(cls) -> "PointsTable":
        return cls(dict(DEFAULT_POINTS))

    def with_overrides(self, overrides: Mapping[str, Sequence[int]]) -> "PointsTable":
        """Return a copy where the supplied tiers replace the current values."""

        merged = dict(self.values)
        for tier, points in overrides.items():
            first, second, third = (int(value) for value in points)
            merged[tier] = (first, second, third)
        return PointsTable(merged)

    def points_for(self, tier: str, position: str) -> int:
        return self.values[tier][POSITIONS.index(position)]


def performance_bonus(grade: str | None, bonus: Mapping[str, int] = PERFORMANCE_BONUS) -> int:
    if not grade:
        return 0
    return bonus.get(grade, 0)


def award_points(
    table: PointsTable,
    tier: str,
    position: str | None,
    grade: str | None = None,
    bonus: Mapping[str, int] = PERFORMANCE_BONUS,
) -> int:
    """Points earned for a placing: base points plus the performance bonus."""

    if not position:
        return 0
    return table.points_for(tier or "A", position) + performance_bonus(grade, bonus)


@dataclass
class Tally:
    total: int = 0
    first: int = 0
    second: int = 0
    third: int = 0

    def add(self, row: ParticipationRow) -> None:
        self.total += row.points_earned
        if row.result_position == FIRST:
            self.first += 1
        elif row.result_position == SECOND:
            self.second += 1
        elif row.result_position == THIRD:
            self.third += 1


def aggregate_by_student(rows: Iterable[ParticipationRow]) -> dict[int, Tally]:
    """Sum points and placings per student, skipping team-only events."""

    tallies: dict[int, Tally] = {}
    for row in rows:
        if not row.is_individual:
            continue
        tallies.setdefault(row.student.id, Tally()).add(row)
    return tallies


def aggregate_by_team(rows: Iterable[ParticipationRow]) -> dict[int, Tally]:
    tallies: dict[int, Tally] = {}
    for row in rows:
        tallies.setdefault(row.team.id, Tally()).add(row)
    return tallies


def rows_for_tier(rows: Iterable[ParticipationRow], tier: str) -> list[ParticipationRow]:
    return [row for row in rows if row.event.applies_to(tier)]


def eligible_tiers(section: str) -> tuple[str, ...]:
    """Tiers whose events are offered to a student of the given section."""

    return (section, GENERAL, FOUNDATION)


@dataclass
class SectionBreakdown:
    senior: int = 0
    junior: int = 0
    sub_junior: int = 0
    general: int = 0
    foundation: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "Senior": self.senior,
            "Junior": self.junior,
            "Sub-Junior": self.sub_junior,
            "General": self.general,
            "Foundation": self.foundation,
        }


_SECTION_ATTRS = {"Senior": "senior", "Junior": "junior", "Sub-Junior": "sub_junior"}


def team_section_breakdown(rows: Iterable[ParticipationRow]) -> dict[int, SectionBreakdown]:
    """Per-team points split by tier.

    General-tagged rows are only counted in the General column so the section
    columns do not double count them. Foundation is reported as its own
    overlay column.
    """

    breakdown: dict[int, SectionBreakdown] = defaultdict(SectionBreakdown)
    for row in rows:
        entry = breakdown[row.team.id]
        event = row.event
        if event.is_general:
            entry.general += row.points_earned
        else:
            for tier, attr in _SECTION_ATTRS.items():
                if event.applies_to(tier):
                    setattr(entry, attr, getattr(entry, attr) + row.points_earned)
        if event.applies_to(FOUNDATION):
            entry.foundation += row.points_earned
    return dict(breakdown)


def category_totals(rows: Iterable[ParticipationRow]) -> dict[int, dict[str, int]]:
    totals: dict[int, dict[str, int]] = defaultdict(lambda: {ON_STAGE: 0, OFF_STAGE: 0})
    for row in rows:
        if row.event.category in (ON_STAGE, OFF_STAGE):
            totals[row.team.id][row.event.category] += row.points_earned
    return dict(totals)


def category_counts(rows: Iterable[ParticipationRow]) -> dict[str, int]:
    """Number of participations on each stage category."""

    counts = {ON_STAGE: 0, OFF_STAGE: 0}
    for row in rows:
        if row.event.category in counts:
            counts[row.event.category] += 1
    return counts


def adjust_for_penalty(raw: int, penalty: int) -> int:
    return max(0, raw - (penalty or 0))


@dataclass(frozen=True)
class TeamStanding:
    team_id: int
    name: str
    color: str
    earned: int
    penalty: int
    total: int
    first: int
    second: int
    third: int
    sections: SectionBreakdown
    rank: int = 0


@dataclass(frozen=True)
class StudentStanding:
    student_id: int
    name: str
    chest_no: str
    section: str
    class_grade: str
    team_name: str
    team_color: str
    total: int
    first: int
    second: int
    third: int


def _standing_key(total: int, first: int, name: str, pk: int) -> tuple:
    return (-total, -first, name.lower(), pk)


def team_standings(teams: Iterable[TeamRef], rows: Iterable[ParticipationRow]) -> list[TeamStanding]:
    """Rank every team by penalty-adjusted total.

    Ties on the adjusted total fall back to first-place count, then name.
    """

    rows = list(rows)
    tallies = aggregate_by_team(rows)
    breakdown = team_section_breakdown(rows)
    standings: list[TeamStanding] = []
    for team in teams:
        tally = tallies.get(team.id, Tally())
        standings.append(
            TeamStanding(
                team_id=team.id,
                name=team.name,
                color=team.color,
                earned=tally.total,
                penalty=team.penalty,
                total=adjust_for_penalty(tally.total, team.penalty),
                first=tally.first,
                second=tally.second,
                third=tally.third,
                sections=breakdown.get(team.id, SectionBreakdown()),
            )
        )
    standings.sort(key=lambda item: _standing_key(item.total, item.first, item.name, item.team_id))
    return [
        replace(standing, rank=position)
        for position, standing in enumerate(standings, start=1)
    ]


def student_standings(rows: Iterable[ParticipationRow]) -> list[StudentStanding]:
    """Every student with individual points, best first."""

    students: dict[int, tuple[StudentRef, TeamRef]] = {}
    individual = [row for row in rows if row.is_individual]
    for row in individual:
        students.setdefault(row.student.id, (row.student, row.team))
    tallies = aggregate_by_student(individual)
    standings = []
    for student_id, tally in tallies.items():
        student, team = students[student_id]
        standings.append(
            StudentStanding(
                student_id=student.id,
                name=student.name,
                chest_no=student.chest_no,
                section=student.section,
                class_grade=student.class_grade,
                team_name=team.name,
                team_color=team.color,
                total=tally.total,
                first=tally.first,
                second=tally.second,
                third=tally.third,
            )
        )
    standings.sort(key=lambda item: _standing_key(item.total, item.first, item.name, item.student_id))
    return standings


def individual_rankings(
    rows: Iterable[ParticipationRow], top_n: int | None = 10
) -> dict[str, list[StudentStanding]]:
    """Top students per tier.

    Section tiers rank students of that section on all their individual
    points. The General and Foundation tiers rank students on the points won
    in events tagged with that tier only.
    """

    rows = list(rows)
    overall = student_standings(rows)
    rankings: dict[str, list[StudentStanding]] = {}
    for tier in TIERS:
        if tier in SECTIONS:
            ranked = [standing for standing in overall if standing.section == tier]
        else:
            ranked = student_standings(rows_for_tier(rows, tier))
        rankings[tier] = ranked[:top_n] if top_n else ranked
    return rankings


def class_totals(rows: Iterable[ParticipationRow]) -> list[dict[str, object]]:
    """Points per (section, class) for the section analysis chart."""

    totals: dict[tuple[str, str], int] = defaultdict(int)
    for row in rows:
        if row.student is None or not row.student.class_grade:
            continue
        totals[(row.student.section, row.student.class_grade)] += row.points_earned
    result = [
        {"section": section, "class_grade": class_grade, "total": total}
        for (section, class_grade), total in totals.items()
    ]
    result.sort(key=lambda item: (item["section"], -item["total"], item["class_grade"]))
    return result


@dataclass(frozen=True)
class Champion:
    section: str
    award: str
    student_id: int
    name: str
    team: str
    total: int
    qualifying_wins: int


@dataclass
class _ChampionTally:
    student: StudentRef
    team: TeamRef
    total: int = 0
    qualifying_wins: int = 0
    on_stage_win: bool = False
    off_stage_win: bool = False

    def sort_key(self) -> tuple:
        return (-self.total, -self.qualifying_wins, self.student.name.lower(), self.student.id)


def _champion_tallies(rows: Iterable[ParticipationRow]) -> dict[int, _ChampionTally]:
    tallies: dict[int, _ChampionTally] = {}
    for row in rows:
        if not row.is_individual or row.event.is_general or row.points_earned <= 0:
            continue
        tally = tallies.get(row.student.id)
        if tally is None:
            tally = tallies[row.student.id] = _ChampionTally(student=row.student, team=row.team)
        tally.total += row.points_earned
        if row.is_qualifying_win:
            tally.qualifying_wins += 1
            if row.event.category == ON_STAGE:
                tally.on_stage_win = True
            elif row.event.category == OFF_STAGE:
                tally.off_stage_win = True
    return tallies


def select_champions(rows: Iterable[ParticipationRow]) -> list[Champion]:
    """Pick the Kala (primary) and Sargga (secondary) awardees per section.

    The primary awardee needs a qualifying win on stage and off stage. The
    secondary awardee is the best remaining student of the section with no
    win requirement. Both are ordered by total points, then qualifying wins.
    """

    tallies = _champion_tallies(rows)
    champions: list[Champion] = []
    for section in SECTIONS:
        pool = sorted(
            (tally for tally in tallies.values() if tally.student.section == section),
            key=_ChampionTally.sort_key,
        )
        primary = next((tally for tally in pool if tally.on_stage_win and tally.off_stage_win), None)
        if primary is not None:
            champions.append(_to_champion(section, KALA, primary))
        secondary = next((tally for tally in pool if tally is not primary), None)
        if secondary is not None:
            champions.append(_to_champion(section, SARGGA, secondary))
    return champions


def _to_champion(section: str, award: str, tally: _ChampionTally) -> Champion:
    return Champion(
        section=section,
        award=award,
        student_id=tally.student.id,
        name=tally.student.name,
        team=tally.team.name,
        total=tally.total,
        qualifying_wins=tally.qualifying_wins,
    )


@dataclass(frozen=True)
class StudentCompliance:
    student: StudentRef
    has_on_stage: bool
    has_off_stage: bool
    absences: int
    penalty: int

    @property
    def is_compliant(self) -> bool:
        return self.has_on_stage and self.has_off_stage

    @property
    def status_label(self) -> str:
        if not self.has_on_stage and not self.has_off_stage:
            return "No Events"
        if not self.has_on_stage:
            return "Missing On-Stage"
        if not self.has_off_stage:
            return "Missing Off-Stage"
        return "Good"


@dataclass(frozen=True)
class ComplianceReport:
    students: list[StudentCompliance] = field(default_factory=list)
    compliance_penalty: int = 0
    attendance_penalty: int = 0
    non_compliant_count: int = 0
    absent_count: int = 0

    @property
    def total(self) -> int:
        return self.compliance_penalty + self.attendance_penalty


def compliance_report(
    students: Iterable[tuple[StudentRef, Sequence[ParticipationRow]]],
    *,
    compliance_penalty: int = 10,
    absence_penalty: int = 5,
) -> ComplianceReport:
    """Suggested deductions for a team.

    Every student must take part in at least one on-stage and one off-stage
    event; registrations marked absent do not count. Each absence costs
    ``absence_penalty`` on top of that.
    """

    rows: list[StudentCompliance] = []
    compliance_total = attendance_total = non_compliant = absent = 0
    for student, participations in students:
        attended = [p for p in participations if p.attendance_status != "absent"]
        has_on_stage = any(p.event.category == ON_STAGE for p in attended)
        has_off_stage = any(p.event.category == OFF_STAGE for p in attended)
        absences = len(participations) - len(attended)
        penalty = absences * absence_penalty
        if not (has_on_stage and has_off_stage):
            penalty += compliance_penalty
            compliance_total += compliance_penalty
            non_compliant += 1
        attendance_total += absences * absence_penalty
        absent += absences
        rows.append(
            StudentCompliance(
                student=student,
                has_on_stage=has_on_stage,
                has_off_stage=has_off_stage,
                absences=absences,
                penalty=penalty,
            )
        )
    return ComplianceReport(
        students=rows,
        compliance_penalty=compliance_total,
        attendance_penalty=attendance_total,
        non_compliant_count=non_compliant,
        absent_count=absent,
    )
