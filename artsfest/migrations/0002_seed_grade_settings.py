from django.db import migrations


DEFAULT_POINTS = {
    # grade tier: first, second, third
    "A": (15, 10, 5),
    "B": (10, 5, 3),
    "C": (20, 15, 10),
}


def seed_grade_settings(apps, schema_editor):
    GradeSetting = apps.get_model("artsfest", "GradeSetting")
    for grade_type, (first, second, third) in DEFAULT_POINTS.items():
        GradeSetting.objects.update_or_create(
            grade_type=grade_type,
            defaults=dict(first_place=first, second_place=second, third_place=third),
        )


def seed_app_settings(apps, schema_editor):
    AppSetting = apps.get_model("artsfest", "AppSetting")
    AppSetting.objects.get_or_create(key="registration_open", defaults={"value": True})
    KeepAliveStatus = apps.get_model("artsfest", "KeepAliveStatus")
    KeepAliveStatus.objects.get_or_create(pk=1)


def unseed(apps, schema_editor):
    apps.get_model("artsfest", "GradeSetting").objects.filter(grade_type__in=list(DEFAULT_POINTS)).delete()
    apps.get_model("artsfest", "AppSetting").objects.filter(key="registration_open").delete()


class Migration(migrations.Migration):

    dependencies = [
        ("artsfest", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_grade_settings, reverse_code=migrations.RunPython.noop),
        migrations.RunPython(seed_app_settings, reverse_code=unseed),
    ]
