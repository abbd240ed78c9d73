"""Plain Django views: keep-alive pings and file downloads."""
from __future__ import annotations

import logging
from functools import wraps

from django.core.exceptions import PermissionDenied
from django.db import DatabaseError, connection
from django.http import HttpRequest, HttpResponse, HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET

from . import exports, models, services
from .permissions import is_festival_admin

logger = logging.getLogger(__name__)


def festival_admin_required(view_func):
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        if not is_festival_admin(request.user):
            raise PermissionDenied("Administrator access required.")
        return view_func(request, *args, **kwargs)
    return _wrapped_view


def _download(content: bytes, content_type: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@require_GET
def keepalive(request: HttpRequest) -> JsonResponse:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        logger.exception("Keep-alive database ping failed")
        return JsonResponse({"status": "error"}, status=503)
    return JsonResponse({"status": "ok", "ts": timezone.now().isoformat()})


@require_GET
def cron(request: HttpRequest) -> JsonResponse:
    status = services.keepalive_ping()
    return JsonResponse({"status": "ok", "last_ping": status.last_ping.isoformat()})


@require_GET
@festival_admin_required
def leaderboard_xlsx(request: HttpRequest) -> HttpResponse:
    stamp = timezone.localdate().isoformat()
    return _download(exports.leaderboard_workbook(), exports.XLSX_CONTENT_TYPE, f"leaderboard-{stamp}.xlsx")


@require_GET
@festival_admin_required
def students_xlsx(request: HttpRequest) -> HttpResponse:
    return _download(exports.students_workbook(), exports.XLSX_CONTENT_TYPE, "students.xlsx")


@require_GET
@festival_admin_required
def call_sheets_pdf(request: HttpRequest) -> HttpResponse:
    ids = request.GET.getlist("event")
    if not ids:
        return HttpResponseBadRequest("Select at least one event.")
    try:
        wanted = [int(value) for value in ids]
    except ValueError:
        return HttpResponseBadRequest("Event ids must be numbers.")
    events = models.Event.objects.in_bulk(wanted)
    missing = [str(pk) for pk in wanted if pk not in events]
    if missing:
        return HttpResponseBadRequest(f"Unknown event(s): {', '.join(missing)}")
    content = exports.call_sheets_pdf([events[pk] for pk in wanted])
    return _download(content, "application/pdf", "call-sheets.pdf")


@require_GET
@festival_admin_required
def team_report_pdf(request: HttpRequest, pk: int) -> HttpResponse:
    team = get_object_or_404(models.Team, pk=pk)
    return _download(exports.team_report_pdf(team), "application/pdf", f"team-{team.slug}.pdf")


@require_GET
@festival_admin_required
def overview_pdf(request: HttpRequest) -> HttpResponse:
    return _download(exports.overview_pdf(), "application/pdf", "overview.pdf")
