import logging
import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

logger = logging.getLogger(__name__)

User = get_user_model()


class Command(BaseCommand):
    help = 'Create a back-office admin if no staff user exists (uses DJANGO_SUPERUSER_* env vars)'

    def add_arguments(self, parser):
        parser.add_argument('--username', default=os.environ.get('DJANGO_SUPERUSER_USERNAME', 'admin'))
        parser.add_argument('--email', default=os.environ.get('DJANGO_SUPERUSER_EMAIL', 'admin@example.com'))

    def handle(self, *args, **options):
        if User.objects.filter(is_staff=True).exists():
            self.stdout.write('Admin user already exists, skipping.')
            return

        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD')
        if not password:
            self.stdout.write('DJANGO_SUPERUSER_PASSWORD not set, skipping admin creation.')
            return

        username = options['username']
        User.objects.create_superuser(username=username, email=options['email'], password=password)
        logger.info('Created admin user %s', username)
        self.stdout.write(f'Admin "{username}" created successfully.')
