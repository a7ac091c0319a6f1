"""
Management command that blocks until the database accepts connections.
"""
import time
from django.db import connections
from django.db.utils import OperationalError
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    """Pauses startup until the default database is reachable."""
    help = 'Waits for the default database to accept connections'

    def add_arguments(self, parser):
        parser.add_argument('--interval', type=float, default=1.0)

    def handle(self, *args, **options):
        self.stdout.write('Waiting for database...')
        db_up = False
        while not db_up:
            try:
                connections['default'].ensure_connection()
                db_up = True
            except OperationalError:
                self.stdout.write('Database unavailable, waiting %s second(s)...' % options['interval'])
                time.sleep(options['interval'])

        self.stdout.write(self.style.SUCCESS('Database available!'))
