"""
Management command to seed the default catalogue.

Usage:
    python manage.py seed_defaults

Creates the default report categories (Road, Electricity, Water,
Sanitation, Public Property, Parks) and regions (Zone A/B/C) when the
respective tables are empty.
"""

from django.core.management.base import BaseCommand

from organization.defaults import create_default_categories, create_default_regions


class Command(BaseCommand):
    help = 'Create default categories and regions if none exist'

    def handle(self, *args, **options):
        categories = create_default_categories()
        regions = create_default_regions()

        if categories:
            self.stdout.write(self.style.SUCCESS(f'  Created {categories} categories'))
        else:
            self.stdout.write(self.style.NOTICE('  Categories already present, skipped'))

        if regions:
            self.stdout.write(self.style.SUCCESS(f'  Created {regions} regions'))
        else:
            self.stdout.write(self.style.NOTICE('  Regions already present, skipped'))

        self.stdout.write(self.style.SUCCESS('Done!'))
