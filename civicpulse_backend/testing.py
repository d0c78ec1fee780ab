"""
Shared fixtures for the app test suites.
"""

import shutil
import tempfile
from pathlib import Path

from django.core.cache import cache
from django.test import override_settings
from rest_framework.test import APITestCase

from authentication.models import User, UserRole
from organization.models import Category, Department, Region, RegionType
from reports.lifecycle import ReportLifecycle
from reports.models import Report

TEST_PASSWORD = 'StrongPass123!'


class CivicPulseTestCase(APITestCase):
    """
    APITestCase with one user per role, a category and a temporary upload
    directory. Geocoding is switched off.
    """

    def setUp(self):
        # Throttle counters live in the cache
        cache.clear()

        self.upload_dir = tempfile.mkdtemp()
        self.settings_override = override_settings(
            FILE_UPLOAD_PATH=Path(self.upload_dir),
            GEOCODING_ENABLED=False,
        )
        self.settings_override.enable()

        self.citizen = self.create_user('citizen@example.com', name='Casey Citizen')
        self.other_citizen = self.create_user('other@example.com', name='Olive Other')
        self.officer = self.create_user('officer@example.com', name='Oscar Officer', role=UserRole.OFFICER)
        self.admin = self.create_user('admin@example.com', name='Ada Admin', role=UserRole.ADMIN)
        self.category = Category.objects.create(name='Road', description='Roads and traffic')

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def create_user(self, email, name='Test User', role=UserRole.CITIZEN, **extra):
        return User.objects.create_user(email, TEST_PASSWORD, name=name, role=role, **extra)

    def create_department(self, name='Public Works', **extra):
        data = {
            'name': name,
            'description': 'Roads, bridges and drains',
            'head_officer': 'Dana Head',
            'headquarters': 'City Hall',
        }
        data.update(extra)
        return Department.objects.create(**data)

    def create_region(self, name='Zone A', **extra):
        data = {
            'name': name,
            'type': RegionType.URBAN,
            'population': 125000,
            'area': 24.5,
            'latitude': 37.7749,
            'longitude': -122.4194,
        }
        data.update(extra)
        return Region.objects.create(**data)

    def create_report(self, citizen=None, **extra):
        """A submitted report with its initial timeline entry."""
        citizen = citizen or self.citizen
        data = {
            'title': 'Pothole on Main St',
            'description': 'Deep pothole near the crossing',
            'category': self.category,
            'location_address': '12 Main St',
            'latitude': 37.7749,
            'longitude': -122.4194,
            'citizen': citizen,
        }
        data.update(extra)
        report = Report.objects.create(**data)
        return ReportLifecycle(report, citizen).submit()

    def login_as(self, user):
        self.client.force_authenticate(user=user)
