from __future__ import annotations

from django.core.management.base import BaseCommand

from artsfest import services


class Command(BaseCommand):
    help = "Seed demo teams, students, events and results"

    def add_arguments(self, parser):
        parser.add_argument("--students", type=int, default=3, help="Students per team and section")
        parser.add_argument("--seed", type=int, default=7, help="Random seed for the sample results")
        parser.add_argument("--no-output", action="store_true", help="Suppress success output")

    def handle(self, *args, **options):
        counts = services.seed_demo_festival(students_per_section=options["students"], seed=options["seed"])
        if not options["no_output"]:
            summary = ", ".join(f"{value} {key}" for key, value in counts.items())
            self.stdout.write(self.style.SUCCESS(f"Seeded festival: {summary}"))
