from django.db import migrations

KEYS = ['instagram_handle', 'instagram_url', 'email', 'location', 'response_time']


def seed(apps, schema_editor):
    ContactSetting = apps.get_model('catalog', 'ContactSetting')
    for key in KEYS:
        ContactSetting.objects.get_or_create(key=key, defaults={'value': ''})


def unseed(apps, schema_editor):
    ContactSetting = apps.get_model('catalog', 'ContactSetting')
    ContactSetting.objects.filter(key__in=KEYS, value='').delete()


class Migration(migrations.Migration):

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed, unseed),
    ]
