from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework import status

from audit.models import AuditEventType, AuditLog
from authentication.models import UserRole
from civicpulse_backend.testing import CivicPulseTestCase
from reports.models import ReportStatus
from .defaults import DEFAULT_CATEGORIES, DEFAULT_REGIONS
from .models import CatalogueStatus, Category, Department, Region


class DepartmentTests(CivicPulseTestCase):
    list_url = '/api/departments/'

    def test_list_is_public_and_sorted_by_name(self):
        self.create_department('Water Board')
        self.create_department('Animal Control')

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [row['name'] for row in response.json()['data']]
        self.assertEqual(names, ['Animal Control', 'Water Board'])

    def test_admin_creates_department(self):
        self.login_as(self.admin)
        response = self.client.post(self.list_url, {
            'name': 'Roads',
            'description': 'Road maintenance',
            'headOfficer': 'A. Officer',
            'headquarters': 'City Hall',
            'location': {'address': '1 Civic Plaza', 'coordinates': {'lat': 37.78, 'lng': -122.41}},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()['data']
        self.assertEqual(data['headOfficer'], 'A. Officer')
        self.assertEqual(data['location']['coordinates'], {'lat': 37.78, 'lng': -122.41})
        self.assertTrue(AuditLog.objects.filter(event_type=AuditEventType.CATALOGUE_CREATED).exists())

    def test_citizen_cannot_create_department(self):
        self.login_as(self.citizen)
        response = self.client.post(self.list_url, {
            'name': 'Roads',
            'description': 'Road maintenance',
            'headOfficer': 'A. Officer',
            'headquarters': 'City Hall',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Department.objects.filter(name='Roads').exists())

    def test_missing_department_is_404(self):
        response = self.client.get(f'{self.list_url}00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(
            response.json()['message'],
            'Department not found with id of 00000000-0000-0000-0000-000000000000',
        )

    def test_admin_soft_deletes_department(self):
        department = self.create_department()
        self.login_as(self.admin)

        response = self.client.delete(f'{self.list_url}{department.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Department.objects.filter(pk=department.pk).exists())
        self.assertTrue(Department.all_objects.filter(pk=department.pk).exists())

    def test_stats_for_officers(self):
        department = self.create_department()
        self.officer.department = department
        self.officer.save()
        self.create_report(department=department)
        self.create_report(department=department, status=ReportStatus.RESOLVED)

        self.login_as(self.officer)
        response = self.client.get(f'{self.list_url}stats/all/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['officerStats'], [
            {'id': str(department.id), 'department': 'Public Works', 'count': 1},
        ])
        self.assertEqual(data['reportStats'][0]['activeReports'], 2)
        self.assertEqual(data['resolvedReportStats'][0]['resolvedReports'], 1)

    def test_stats_forbidden_for_citizens(self):
        self.login_as(self.citizen)
        response = self.client.get(f'{self.list_url}stats/all/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class RegionTests(CivicPulseTestCase):
    list_url = '/api/regions/'

    def test_admin_creates_region_with_boundaries(self):
        self.login_as(self.admin)
        response = self.client.post(self.list_url, {
            'name': 'Harbour',
            'type': 'Industrial',
            'population': 4000,
            'area': 3.5,
            'coordinates': {'lat': 37.80, 'lng': -122.39},
            'boundaries': {
                'type': 'Polygon',
                'coordinates': [[[-122.40, 37.79], [-122.38, 37.79], [-122.38, 37.81], [-122.40, 37.79]]],
            },
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        region = Region.objects.get(name='Harbour')
        self.assertEqual(region.latitude, 37.80)
        self.assertEqual(region.boundaries['type'], 'Polygon')
        self.assertEqual(len(region.boundaries['coordinates'][0]), 4)

    def test_invalid_boundaries_are_rejected(self):
        self.login_as(self.admin)
        response = self.client.post(self.list_url, {
            'name': 'Broken',
            'type': 'Rural',
            'population': 10,
            'area': 1,
            'coordinates': {'lat': 37.80, 'lng': -122.39},
            'boundaries': {'type': 'Point', 'coordinates': [1, 2]},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_out_of_range_coordinates_are_rejected(self):
        self.login_as(self.admin)
        response = self.client.post(self.list_url, {
            'name': 'Nowhere',
            'type': 'Rural',
            'population': 10,
            'area': 1,
            'coordinates': {'lat': 91, 'lng': 0},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_population(self):
        self.create_region('Small', population=1000)
        self.create_region('Large', population=900000)

        response = self.client.get(self.list_url, {'population[gte]': 50000})

        self.assertEqual([row['name'] for row in response.json()['data']], ['Large'])

    def test_stats_totals(self):
        self.create_region('Zone A', population=100, area=2.5)
        self.create_region('Zone B', population=50, area=1.5)
        self.create_region('Old Zone', population=999, area=9, status=CatalogueStatus.INACTIVE)

        self.login_as(self.admin)
        response = self.client.get(f'{self.list_url}stats/all/')

        self.assertEqual(response.json()['data']['totalStats'], {
            'totalRegions': 2,
            'totalPopulation': 150,
            'totalArea': 4.0,
        })


class CategoryTests(CivicPulseTestCase):
    list_url = '/api/categories/'

    def test_only_active_categories_are_listed(self):
        Category.objects.create(name='Retired', description='old', status=CatalogueStatus.INACTIVE)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['data'][0]['name'], 'Road')

    def test_delete_deactivates(self):
        self.login_as(self.admin)
        response = self.client.delete(f'{self.list_url}{self.category.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.category.refresh_from_db()
        self.assertEqual(self.category.status, CatalogueStatus.INACTIVE)
        self.assertFalse(self.category.is_deleted)

    def test_officer_cannot_create_category(self):
        self.login_as(self.officer)
        response = self.client.post(self.list_url, {'name': 'Noise', 'description': 'Noise'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            response.json()['message'],
            f'User role {UserRole.OFFICER} is not authorized to access this route',
        )


class SeedDefaultsCommandTests(TestCase):
    def test_seeds_once(self):
        call_command('seed_defaults', stdout=StringIO())

        self.assertEqual(Category.objects.count(), len(DEFAULT_CATEGORIES))
        self.assertEqual(Region.objects.count(), len(DEFAULT_REGIONS))

        out = StringIO()
        call_command('seed_defaults', stdout=out)

        self.assertEqual(Category.objects.count(), len(DEFAULT_CATEGORIES))
        self.assertEqual(Region.objects.count(), len(DEFAULT_REGIONS))
        self.assertIn('already present', out.getvalue())
