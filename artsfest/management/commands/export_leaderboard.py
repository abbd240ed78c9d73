from __future__ import annotations

import pathlib

from django.core.management.base import BaseCommand, CommandError

from artsfest import exports


class Command(BaseCommand):
    help = "Write the leaderboard workbook (teams, individual rankings, champions) to an XLSX file"

    def add_arguments(self, parser):
        parser.add_argument("path", help="Destination .xlsx path")

    def handle(self, *args, **options):
        path = pathlib.Path(options["path"])
        if not path.parent.exists():
            raise CommandError(f"Directory '{path.parent}' does not exist")
        path.write_bytes(exports.leaderboard_workbook())
        self.stdout.write(self.style.SUCCESS(f"Leaderboard written to {path}"))
