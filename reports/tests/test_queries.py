from django.test import SimpleTestCase
from rest_framework import status

from civicpulse_backend.testing import CivicPulseTestCase
from reports.models import Report, ReportSeverity, ReportStatus
from reports.queries import EARTH_RADIUS_MILES, central_angle, within_radius

SAN_FRANCISCO = (37.7749, -122.4194)
OAKLAND = (37.8044, -122.2711)


class CentralAngleTests(SimpleTestCase):
    def test_same_point(self):
        self.assertEqual(central_angle(*SAN_FRANCISCO, *SAN_FRANCISCO), 0)

    def test_san_francisco_to_oakland(self):
        miles = central_angle(*SAN_FRANCISCO, *OAKLAND) * EARTH_RADIUS_MILES
        self.assertAlmostEqual(miles, 8.3, delta=0.3)

    def test_across_the_antimeridian(self):
        miles = central_angle(0, 179.99, 0, -179.99) * EARTH_RADIUS_MILES
        self.assertLess(miles, 2)


class WithinRadiusTests(CivicPulseTestCase):
    def place(self, title, lat, lng):
        return self.create_report(title=title, latitude=lat, longitude=lng)

    def titles(self, queryset):
        return set(queryset.values_list('title', flat=True))

    def test_includes_near_and_excludes_far(self):
        self.place('Centre', *SAN_FRANCISCO)
        self.place('Three miles north', 37.8183, -122.4194)
        self.place('Oakland', *OAKLAND)

        result = within_radius(Report.objects.all(), *SAN_FRANCISCO, 5)

        self.assertEqual(self.titles(result), {'Centre', 'Three miles north'})

    def test_zero_radius_matches_exact_point(self):
        self.place('Centre', *SAN_FRANCISCO)
        self.place('Oakland', *OAKLAND)

        result = within_radius(Report.objects.all(), *SAN_FRANCISCO, 0)

        self.assertEqual(self.titles(result), {'Centre'})

    def test_circle_across_the_antimeridian(self):
        self.place('East side', 0, 179.99)
        self.place('Far away', 0, 170)

        result = within_radius(Report.objects.all(), 0, -179.99, 5)

        self.assertEqual(self.titles(result), {'East side'})

    def test_circle_around_the_pole(self):
        self.place('Other side of the pole', 89.99, 0)
        self.place('Greenland', 75, -40)

        result = within_radius(Report.objects.all(), 89.99, 180, 5)

        self.assertEqual(self.titles(result), {'Other side of the pole'})

    def test_radius_larger_than_the_planet(self):
        self.place('Centre', *SAN_FRANCISCO)
        self.place('Antipode', -37.7749, 57.5806)

        result = within_radius(Report.objects.all(), *SAN_FRANCISCO, 20000)

        self.assertEqual(result.count(), 2)


class ReportListQueryTests(CivicPulseTestCase):
    url = '/api/reports/'

    def setUp(self):
        super().setUp()
        self.low = self.create_report(title='Faded crossing', severity=ReportSeverity.LOW)
        self.high = self.create_report(title='Broken light', severity=ReportSeverity.HIGH)
        self.critical = self.create_report(
            title='Gas leak', severity=ReportSeverity.CRITICAL, status=ReportStatus.IN_PROGRESS,
        )
        self.far = self.create_report(title='Oakland pothole', latitude=OAKLAND[0], longitude=OAKLAND[1])

    def titles(self, response):
        return {row['title'] for row in response.json()['data']}

    def test_list_is_public(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['count'], 4)

    def test_filter_by_severity_list(self):
        response = self.client.get(self.url, {'severity[in]': 'High,Critical'})
        self.assertEqual(self.titles(response), {'Broken light', 'Gas leak'})

    def test_filter_by_status(self):
        response = self.client.get(self.url, {'status': 'In Progress'})
        self.assertEqual(self.titles(response), {'Gas leak'})

    def test_invalid_status_value_is_rejected(self):
        response = self.client.get(self.url, {'status': 'Done'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_radius_search_replaces_other_filters(self):
        response = self.client.get(self.url, {
            'lat': 37.77, 'lng': -122.42, 'radius': 5, 'severity': 'Critical',
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.titles(response), {'Faded crossing', 'Broken light', 'Gas leak'})

    def test_incomplete_radius_parameters_are_ignored(self):
        response = self.client.get(self.url, {'lat': 37.77, 'lng': -122.42})
        self.assertEqual(response.json()['count'], 4)

    def test_malformed_radius_is_rejected(self):
        response = self.client.get(self.url, {'lat': 'north', 'lng': -122.42, 'radius': 5})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sort_and_select(self):
        response = self.client.get(self.url, {'sort': 'title', 'select': 'title,status'})

        rows = response.json()['data']
        self.assertEqual(
            [row['title'] for row in rows],
            ['Broken light', 'Faded crossing', 'Gas leak', 'Oakland pothole'],
        )
        self.assertEqual(set(rows[0].keys()), {'id', 'title', 'status'})

    def test_unknown_sort_key_falls_back_to_newest_first(self):
        response = self.client.get(self.url, {'sort': 'password'})
        self.assertEqual(response.json()['data'][0]['title'], 'Oakland pothole')

    def test_pagination(self):
        response = self.client.get(self.url, {'sort': 'title', 'page': 2, 'limit': 1})

        body = response.json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['data'][0]['title'], 'Faded crossing')
        self.assertEqual(body['pagination'], {
            'next': {'page': 3, 'limit': 1},
            'prev': {'page': 1, 'limit': 1},
        })
