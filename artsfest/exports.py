"""Spreadsheet and PDF exports for the arts festival."""

from __future__ import annotations

import logging
import re
from io import BytesIO
from typing import Iterable, Sequence

import pandas as pd
from django.conf import settings
from django.utils import timezone
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from . import models, scoring, services

__all__ = [
    "XLSX_CONTENT_TYPE",
    "chest_sort_key",
    "leaderboard_workbook",
    "students_workbook",
    "call_sheets_pdf",
    "team_report_pdf",
    "overview_pdf",
]

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
HEADER_ASSET_KEY = "report-header"

HEADER_FILL = PatternFill("solid", fgColor="1E293B")
HEADER_FONT = Font(bold=True, color="FFFFFF")
TABLE_HEADER_BG = colors.HexColor("#1e293b")
TABLE_STRIPE_BG = colors.HexColor("#f1f5f9")


def chest_sort_key(chest_no: str | None) -> tuple:
    """Order chest numbers numerically; non-numeric numbers follow, then blanks."""

    value = (chest_no or "").strip()
    if not value:
        return (2, 0, "")
    digits = re.match(r"\d+", value)
    if digits and digits.group(0) == value:
        return (0, int(value), value)
    return (1, int(digits.group(0)) if digits else 0, value.lower())


# ---------------------------------------------------------------------------
# XLSX
# ---------------------------------------------------------------------------


def _team_frame(standings: Sequence[scoring.TeamStanding]) -> pd.DataFrame:
    rows = []
    for standing in standings:
        row = {
            "Rank": standing.rank,
            "Team": standing.name,
            "Earned": standing.earned,
            "Penalty": standing.penalty,
            "Net": standing.total,
            "1st": standing.first,
            "2nd": standing.second,
            "3rd": standing.third,
        }
        row.update(standing.sections.as_dict())
        rows.append(row)
    return pd.DataFrame(rows, columns=["Rank", "Team", "Earned", "Penalty", "Net", "1st", "2nd", "3rd", *scoring.TIERS])


def _student_frame(standings: Iterable[scoring.StudentStanding]) -> pd.DataFrame:
    rows = [
        {
            "Rank": position,
            "Chest No": standing.chest_no,
            "Name": standing.name,
            "Class": standing.class_grade,
            "Section": standing.section,
            "Team": standing.team_name,
            "Points": standing.total,
            "1st": standing.first,
            "2nd": standing.second,
            "3rd": standing.third,
        }
        for position, standing in enumerate(standings, start=1)
    ]
    return pd.DataFrame(
        rows, columns=["Rank", "Chest No", "Name", "Class", "Section", "Team", "Points", "1st", "2nd", "3rd"]
    )


def _champion_frame(champions: Iterable[scoring.Champion]) -> pd.DataFrame:
    labels = {scoring.KALA: "Kala Prathibha", scoring.SARGGA: "Sargga Prathibha"}
    rows = [
        {
            "Section": champion.section,
            "Award": labels.get(champion.award, champion.award),
            "Name": champion.name,
            "Team": champion.team,
            "Points": champion.total,
            "Qualifying wins": champion.qualifying_wins,
        }
        for champion in champions
    ]
    return pd.DataFrame(rows, columns=["Section", "Award", "Name", "Team", "Points", "Qualifying wins"])


def _write_workbook(sheets: Sequence[tuple[str, pd.DataFrame]]) -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for title, frame in sheets:
            frame.to_excel(writer, sheet_name=title[:31], index=False)
            worksheet = writer.sheets[title[:31]]
            for cell in worksheet[1]:
                cell.fill = HEADER_FILL
                cell.font = HEADER_FONT
            for column in worksheet.columns:
                width = max(len(str(cell.value or "")) for cell in column) + 2
                worksheet.column_dimensions[column[0].column_letter].width = min(width, 40)
    return buffer.getvalue()


def leaderboard_workbook() -> bytes:
    """Team standings, per-tier individual rankings and champions in one workbook."""

    rows = services.participation_rows()
    sheets = [("Teams", _team_frame(scoring.team_standings(services.team_refs(), rows)))]
    rankings = scoring.individual_rankings(rows, top_n=settings.FESTIVAL_LEADERBOARD_TOP_N)
    for tier in scoring.TIERS:
        sheets.append((tier, _student_frame(rankings[tier])))
    sheets.append(("Champions", _champion_frame(services.champions())))
    logger.info("Built leaderboard workbook with %d sheet(s)", len(sheets))
    return _write_workbook(sheets)


def students_workbook() -> bytes:
    students = sorted(
        models.Student.objects.select_related("team"),
        key=lambda student: (student.team.name, chest_sort_key(student.chest_no)),
    )
    frame = pd.DataFrame(
        [
            {
                "Chest No": student.chest_no or "",
                "Name": student.name,
                "Class": student.class_grade,
                "Section": student.section,
                "Team": student.team.name,
                "Events": student.participations.count(),
            }
            for student in students
        ],
        columns=["Chest No", "Name", "Class", "Section", "Team", "Events"],
    )
    return _write_workbook([("Students", frame)])


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


def _styles():
    styles = getSampleStyleSheet()
    title = ParagraphStyle("FestivalTitle", parent=styles["Heading1"], alignment=1, spaceAfter=4)
    subtitle = ParagraphStyle("FestivalSubtitle", parent=styles["Heading2"], alignment=1, spaceAfter=10)
    return styles, title, subtitle


def _header(subtitle_text: str) -> list:
    styles, title_style, subtitle_style = _styles()
    elements = []
    asset = models.SiteAsset.objects.filter(key=HEADER_ASSET_KEY).first()
    if asset is not None and asset.file:
        try:
            elements.append(Image(asset.file.path, width=170 * mm, height=30 * mm))
        except (OSError, NotImplementedError) as exc:
            logger.warning("Report header image %s unavailable: %s", asset.file.name, exc)
    elements.append(Paragraph(settings.FESTIVAL_NAME, title_style))
    elements.append(Paragraph(subtitle_text, subtitle_style))
    return elements


def _table(data: list[list], col_widths=None) -> Table:
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), TABLE_HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, TABLE_STRIPE_BG]),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
            ]
        )
    )
    return table


def _render(elements: list) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=settings.FESTIVAL_NAME,
    )
    doc.build(elements)
    return buffer.getvalue()


def _generated_line():
    styles = getSampleStyleSheet()
    return Paragraph(f"Generated {timezone.localtime():%d %b %Y %H:%M}", styles["Italic"])


def call_sheets_pdf(events: Sequence[models.Event]) -> bytes:
    """One page per event listing participants by chest number with a blank grade column."""

    styles = getSampleStyleSheet()
    elements: list = []
    for index, event in enumerate(events):
        if index:
            elements.append(PageBreak())
        elements.extend(_header(f"Call sheet: {event.name}"))
        meta = f"Code: {event.event_code or '-'} &nbsp;&nbsp; Category: {event.category} &nbsp;&nbsp; Grade: {event.grade_type}"
        elements.append(Paragraph(meta, styles["Normal"]))
        elements.append(Spacer(1, 6 * mm))

        participations = sorted(
            event.participations.filter(student__isnull=False).select_related("student", "team"),
            key=lambda participation: chest_sort_key(participation.student.chest_no),
        )
        data = [["#", "Chest No", "Name", "Class", "Team", "Attendance", "Grade / Signature"]]
        for number, participation in enumerate(participations, start=1):
            data.append(
                [
                    number,
                    participation.student.chest_no or "",
                    participation.student.name,
                    participation.student.class_grade,
                    participation.team.name,
                    participation.get_attendance_status_display(),
                    "",
                ]
            )
        if len(data) == 1:
            elements.append(Paragraph("No participants registered.", styles["Normal"]))
        else:
            elements.append(_table(data, col_widths=[10 * mm, 20 * mm, 50 * mm, 16 * mm, 30 * mm, 22 * mm, 32 * mm]))
    if not elements:
        elements.append(Paragraph("No events selected.", styles["Normal"]))
    logger.info("Built call sheets for %d event(s)", len(events))
    return _render(elements)


def team_report_pdf(team: models.Team) -> bytes:
    details = services.team_details(team)
    standing: scoring.TeamStanding = details["standing"]
    styles = getSampleStyleSheet()
    elements = _header(f"Team report: {team.name}")
    summary = [
        ["Earned", "Penalty", "Net", "1st", "2nd", "3rd"],
        [standing.earned, standing.penalty, standing.total, standing.first, standing.second, standing.third],
    ]
    elements.append(_table(summary))
    elements.append(Spacer(1, 6 * mm))
    elements.append(Paragraph("Section breakdown", styles["Heading3"]))
    breakdown = standing.sections.as_dict()
    elements.append(_table([list(breakdown), list(breakdown.values())]))
    elements.append(Spacer(1, 6 * mm))
    elements.append(Paragraph("Results", styles["Heading3"]))
    rows = sorted(details["rows"], key=lambda row: (row.event.name.lower(), row.student.name if row.student else ""))
    data = [["Event", "Participant", "Position", "Grade", "Points"]]
    for row in rows:
        data.append(
            [
                row.event.name,
                row.student.name if row.student else "Team",
                row.result_position or "",
                row.performance_grade or "",
                row.points_earned,
            ]
        )
    if len(data) == 1:
        elements.append(Paragraph("No points recorded yet.", styles["Normal"]))
    else:
        elements.append(_table(data))
    elements.append(Spacer(1, 4 * mm))
    elements.append(_generated_line())
    return _render(elements)


def overview_pdf() -> bytes:
    data = services.overview()
    styles = getSampleStyleSheet()
    elements = _header("Overall standings")
    table = [["Rank", "Team", "Earned", "Penalty", "Net", "1st", "2nd", "3rd"]]
    for standing in data["teams"]:
        table.append(
            [
                standing.rank,
                standing.name,
                standing.earned,
                standing.penalty,
                standing.total,
                standing.first,
                standing.second,
                standing.third,
            ]
        )
    elements.append(_table(table))
    elements.append(Spacer(1, 6 * mm))
    elements.append(Paragraph("Top students", styles["Heading3"]))
    students = [["#", "Chest No", "Name", "Section", "Team", "Points"]]
    for position, standing in enumerate(data["top_students"], start=1):
        students.append(
            [position, standing.chest_no, standing.name, standing.section, standing.team_name, standing.total]
        )
    if len(students) == 1:
        elements.append(Paragraph("No individual points yet.", styles["Normal"]))
    else:
        elements.append(_table(students))
    elements.append(Spacer(1, 4 * mm))
    elements.append(_generated_line())
    return _render(elements)
