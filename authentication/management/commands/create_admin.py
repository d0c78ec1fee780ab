"""
Management command to create (or promote) a CivicPulse admin.

Usage:
    python manage.py create_admin --email admin@example.com --password 'S3cure-pass'

Defaults come from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME in the
environment. An existing account with that email is promoted to admin
and reactivated; its password is only reset with --force.
"""

from decouple import config
from django.core.management.base import BaseCommand, CommandError

from authentication.models import User, UserRole, UserStatus


class Command(BaseCommand):
    help = 'Create an admin user, or promote an existing account to admin'

    def add_arguments(self, parser):
        parser.add_argument('--email', default=config('ADMIN_EMAIL', default=''))
        parser.add_argument('--password', default=config('ADMIN_PASSWORD', default=''))
        parser.add_argument('--name', default=config('ADMIN_NAME', default='Administrator'))
        parser.add_argument(
            '--force',
            action='store_true',
            help='Reset the password if the user already exists',
        )

    def handle(self, *args, **options):
        email = (options['email'] or '').strip().lower()
        password = options['password']

        if not email:
            raise CommandError('An email is required (--email or ADMIN_EMAIL)')

        user = User.objects.all_with_deleted().filter(email__iexact=email).first()

        if user is None:
            if not password:
                raise CommandError('A password is required (--password or ADMIN_PASSWORD)')
            User.objects.create_superuser(email, password, name=options['name'])
            self.stdout.write(self.style.SUCCESS(f'  Created admin: {email}'))
            return

        user.role = UserRole.ADMIN
        user.status = UserStatus.ACTIVE
        user.is_staff = True
        user.is_superuser = True
        if user.is_deleted:
            user.restore()
        if options['force'] and password:
            user.set_password(password)
        user.save()
        self.stdout.write(self.style.WARNING(f'  Promoted to admin: {email}'))
