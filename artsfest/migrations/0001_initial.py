import artsfest.models
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AppSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=64, unique=True)),
                ("value", models.JSONField(blank=True, default=dict)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ("key",)},
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ts", models.DateTimeField(auto_now_add=True)),
                ("action", models.CharField(max_length=64)),
                ("payload", models.JSONField(blank=True, default=dict)),
            ],
            options={"ordering": ("-ts",)},
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("event_code", models.CharField(blank=True, max_length=24, null=True, unique=True)),
                (
                    "category",
                    models.CharField(
                        choices=[("ON STAGE", "On stage"), ("OFF STAGE", "Off stage")],
                        max_length=9,
                    ),
                ),
                (
                    "grade_type",
                    models.CharField(
                        choices=[("A", "Grade A"), ("B", "Grade B"), ("C", "Grade C (group)")],
                        default="A",
                        max_length=1,
                    ),
                ),
                (
                    "applicable_sections",
                    models.JSONField(blank=True, default=list, validators=[artsfest.models.validate_tiers]),
                ),
                (
                    "max_participants_per_team",
                    models.PositiveIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="GradeSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "grade_type",
                    models.CharField(
                        choices=[("A", "Grade A"), ("B", "Grade B"), ("C", "Grade C (group)")],
                        max_length=1,
                        unique=True,
                    ),
                ),
                ("first_place", models.PositiveIntegerField()),
                ("second_place", models.PositiveIntegerField()),
                ("third_place", models.PositiveIntegerField()),
            ],
            options={"ordering": ("grade_type",)},
        ),
        migrations.CreateModel(
            name="KeepAliveStatus",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("last_ping", models.DateTimeField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name="SiteAsset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.SlugField(unique=True)),
                ("title", models.CharField(blank=True, max_length=120)),
                ("file", models.FileField(upload_to="site-assets/")),
                ("uploaded_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ("key",)},
        ),
        migrations.CreateModel(
            name="Team",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=80, unique=True)),
                ("slug", models.SlugField(unique=True)),
                ("color_hex", models.CharField(default="#64748b", max_length=9)),
                ("penalty_points", models.PositiveIntegerField(default=0)),
                ("access_override", models.BooleanField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("chest_no", models.CharField(blank=True, max_length=16, null=True, unique=True)),
                ("class_grade", models.CharField(blank=True, max_length=16)),
                (
                    "section",
                    models.CharField(
                        choices=[("Senior", "Senior"), ("Junior", "Junior"), ("Sub-Junior", "Sub-Junior")],
                        max_length=12,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "team",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="students",
                        to="artsfest.team",
                    ),
                ),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("admin", "Administrator"), ("captain", "Team captain")],
                        default="captain",
                        max_length=8,
                    ),
                ),
                ("full_name", models.CharField(blank=True, max_length=120)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "team",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="captains",
                        to="artsfest.team",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Participation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("registered", "Registered"),
                            ("completed", "Completed"),
                            ("disqualified", "Disqualified"),
                            ("winner", "Winner"),
                        ],
                        default="registered",
                        max_length=12,
                    ),
                ),
                (
                    "result_position",
                    models.CharField(
                        blank=True,
                        choices=[("FIRST", "First"), ("SECOND", "Second"), ("THIRD", "Third")],
                        max_length=6,
                        null=True,
                    ),
                ),
                (
                    "performance_grade",
                    models.CharField(
                        blank=True,
                        choices=[("A", "A"), ("B", "B"), ("C", "C")],
                        max_length=1,
                        null=True,
                    ),
                ),
                (
                    "attendance_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("present", "Present"), ("absent", "Absent")],
                        default="pending",
                        max_length=8,
                    ),
                ),
                ("points_earned", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participations",
                        to="artsfest.event",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participations",
                        to="artsfest.student",
                    ),
                ),
                (
                    "team",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participations",
                        to="artsfest.team",
                    ),
                ),
            ],
            options={"ordering": ("event", "created_at", "pk")},
        ),
        migrations.AddConstraint(
            model_name="participation",
            constraint=models.UniqueConstraint(
                condition=models.Q(("student__isnull", False)),
                fields=("student", "event"),
                name="unique_student_per_event",
            ),
        ),
    ]
