from __future__ import annotations

import pathlib

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from artsfest import services


class Command(BaseCommand):
    help = "Import students from a CSV file (name, chest_no, class, section, team_name)"

    def add_arguments(self, parser):
        parser.add_argument("csv", help="Path to the CSV file")

    def handle(self, *args, **options):
        csv_path = pathlib.Path(options["csv"])
        if not csv_path.exists():
            raise CommandError(f"CSV file '{csv_path}' does not exist")
        with csv_path.open("rb") as handle:
            try:
                result = services.import_students_csv(handle)
            except ValidationError as exc:
                raise CommandError("\n".join(exc.messages)) from exc
        self.stdout.write(self.style.SUCCESS(f"Imported {result['created']} students."))
