from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("events", "0001_initial"),
        ("waivers", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="event",
            name="required_waivers",
            field=models.ManyToManyField(
                blank=True,
                limit_choices_to={"kind": "template"},
                related_name="required_by_events",
                to="waivers.waiver",
            ),
        ),
    ]
