import os
from datetime import timedelta
from unittest import mock

import requests
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework import status

from civicpulse_backend.testing import CivicPulseTestCase
from reports.lifecycle import ReportLifecycle
from reports.models import Report, ReportStatus

BASE_URL = '/api/reports/'


def image(name='pothole.jpg', size=64):
    return SimpleUploadedFile(name, b'\xff\xd8\xff' + b'0' * size, content_type='image/jpeg')


def text_file(name='notes.txt'):
    return SimpleUploadedFile(name, b'not an image', content_type='text/plain')


class ReportApiTestCase(CivicPulseTestCase):
    def report_url(self, report, action=None):
        url = f'{BASE_URL}{report.id}/'
        return f'{url}{action}/' if action else url

    def resolve(self, report, officer=None):
        return ReportLifecycle(report, officer or self.officer).change_status(ReportStatus.RESOLVED)


class CreateReportTests(ReportApiTestCase):
    def payload(self, **extra):
        data = {
            'title': 'Pothole on Main St',
            'description': 'Deep pothole near the crossing',
            'category': str(self.category.id),
            'severity': 'High',
            'location': {
                'address': '12 Main St',
                'coordinates': {'lat': 37.7749, 'lng': -122.4194},
            },
        }
        data.update(extra)
        return data

    def test_citizen_creates_report(self):
        self.login_as(self.citizen)
        response = self.client.post(BASE_URL, self.payload(status='Resolved'), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()['data']
        self.assertEqual(data['status'], ReportStatus.PENDING)
        self.assertEqual(data['citizen'], {'id': str(self.citizen.id), 'name': 'Casey Citizen'})
        self.assertEqual(data['category']['name'], 'Road')
        self.assertEqual(data['location']['coordinates'], {'lat': 37.7749, 'lng': -122.4194})
        self.assertEqual(len(data['updates']), 1)
        self.assertEqual(data['updates'][0]['message'], 'Report submitted by citizen')
        self.assertIsNone(data['feedback'])

    def test_officer_cannot_create(self):
        self.login_as(self.officer)
        response = self.client.post(BASE_URL, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            response.json()['message'],
            'Only citizens can create reports (current role: officer)',
        )
        self.assertFalse(Report.objects.exists())

    def test_anonymous_cannot_create(self):
        response = self.client.post(BASE_URL, self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_coordinates_are_rejected(self):
        self.login_as(self.citizen)
        response = self.client.post(BASE_URL, self.payload(location={'address': 'Somewhere'}), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Report.objects.exists())

    def test_inactive_category_is_rejected(self):
        self.category.deactivate()
        self.login_as(self.citizen)

        response = self.client.post(BASE_URL, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.json()['errors'])
        self.assertFalse(Report.objects.exists())

    def test_multipart_with_images(self):
        self.login_as(self.citizen)
        response = self.client.post(BASE_URL, {
            'title': 'Broken bench',
            'description': 'Slats missing',
            'category': str(self.category.id),
            'location[address]': 'Dolores Park',
            'location[lat]': '37.7596',
            'location[lng]': '-122.4269',
            'images': [image('bench.jpg'), text_file()],
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()['data']
        self.assertEqual(data['location']['address'], 'Dolores Park')
        self.assertEqual(len(data['photos']), 1)

        photo = data['photos'][0]
        self.assertTrue(photo.startswith(f"/uploads/photo_{data['id']}_"))
        self.assertTrue(photo.endswith('.jpg'))
        self.assertTrue(os.path.exists(os.path.join(self.upload_dir, photo.rsplit('/', 1)[-1])))

    def test_address_resolved_from_coordinates(self):
        fake = mock.Mock()
        fake.json.return_value = {
            'address': {'road': 'Market Street', 'neighbourhood': 'SoMa', 'city': 'San Francisco'},
        }
        self.login_as(self.citizen)

        with self.settings(GEOCODING_ENABLED=True), \
                mock.patch('reports.services.requests.get', return_value=fake) as get:
            response = self.client.post(
                BASE_URL,
                self.payload(location={'coordinates': {'lat': 37.7749, 'lng': -122.4194}}),
                format='json',
            )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['data']['location']['address'], 'Market Street, SoMa, San Francisco')
        self.assertEqual(get.call_args.kwargs['timeout'], 3)

    def test_geocoding_timeout_falls_back_to_coordinates(self):
        self.login_as(self.citizen)

        with self.settings(GEOCODING_ENABLED=True), \
                mock.patch('reports.services.requests.get', side_effect=requests.Timeout):
            response = self.client.post(
                BASE_URL,
                self.payload(location={'coordinates': {'lat': 37.7749, 'lng': -122.4194}}),
                format='json',
            )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['data']['location']['address'], '37.7749, -122.4194')


class ReportDetailTests(ReportApiTestCase):
    def setUp(self):
        super().setUp()
        self.report = self.create_report()

    def test_detail_is_public(self):
        response = self.client.get(self.report_url(self.report))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['title'], 'Pothole on Main St')

    def test_missing_report(self):
        missing = '7d3c6f4e-0000-4000-8000-000000000000'
        response = self.client.get(f'{BASE_URL}{missing}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['message'], f'Report not found with id of {missing}')

    def test_owner_updates_title(self):
        self.login_as(self.citizen)
        response = self.client.put(self.report_url(self.report), {'title': 'Huge pothole'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['title'], 'Huge pothole')

    def test_owner_cannot_change_status(self):
        self.login_as(self.citizen)
        response = self.client.put(self.report_url(self.report), {'status': 'Resolved'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.PENDING)

    def test_officer_changes_status_with_message(self):
        self.login_as(self.officer)
        response = self.client.put(self.report_url(self.report), {
            'status': 'In Progress',
            'updateMessage': 'Crew dispatched',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['status'], ReportStatus.IN_PROGRESS)
        self.assertEqual(data['updates'][-1]['message'], 'Crew dispatched')
        self.assertEqual(data['updates'][-1]['updatedBy'], str(self.officer.id))

    def test_officer_assigns_report(self):
        self.login_as(self.admin)
        response = self.client.put(self.report_url(self.report), {
            'assignedOfficer': str(self.officer.id),
            'status': 'Assigned',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.report.refresh_from_db()
        self.assertEqual(self.report.assigned_officer, self.officer)
        self.assertEqual(self.report.status, ReportStatus.ASSIGNED)

    def test_other_citizen_cannot_update(self):
        self.login_as(self.other_citizen)
        response = self.client.put(self.report_url(self.report), {'title': 'Mine now'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['message'], 'Not authorized to update this report')

    def test_officer_cannot_delete(self):
        self.login_as(self.officer)
        response = self.client.delete(self.report_url(self.report))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_deletes(self):
        self.login_as(self.citizen)
        response = self.client.delete(self.report_url(self.report))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'success': True, 'data': {}})
        self.assertEqual(
            self.client.get(self.report_url(self.report)).status_code,
            status.HTTP_404_NOT_FOUND,
        )
        self.assertTrue(Report.all_objects.filter(pk=self.report.pk).exists())


class CitizenActionTests(ReportApiTestCase):
    def setUp(self):
        super().setUp()
        self.report = self.create_report()

    def test_cancel(self):
        self.login_as(self.citizen)
        response = self.client.patch(self.report_url(self.report, 'cancel'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['status'], ReportStatus.CANCELLED)
        self.assertEqual(len(data['updates']), 2)

    def test_cancel_after_work_started(self):
        ReportLifecycle(self.report, self.officer).change_status(ReportStatus.IN_PROGRESS)
        self.login_as(self.citizen)

        response = self.client.patch(self.report_url(self.report, 'cancel'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], "Only reports with 'Pending' status can be cancelled")

    def test_officer_cannot_cancel(self):
        self.login_as(self.officer)
        response = self.client.patch(self.report_url(self.report, 'cancel'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_non_owner_cannot_close(self):
        self.login_as(self.other_citizen)
        response = self.client.patch(self.report_url(self.report, 'close'))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['message'], 'Not authorized to close this report')
        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.PENDING)
        self.assertEqual(self.report.updates.count(), 1)

    def test_action_on_missing_report(self):
        self.login_as(self.citizen)
        response = self.client.patch(f'{BASE_URL}7d3c6f4e-0000-4000-8000-000000000000/close/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_close(self):
        self.login_as(self.citizen)
        response = self.client.patch(self.report_url(self.report, 'close'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], ReportStatus.CLOSED)
        self.assertIsNotNone(response.json()['data']['closedAt'])

    def test_acknowledge(self):
        self.resolve(self.report)
        self.login_as(self.citizen)

        response = self.client.patch(self.report_url(self.report, 'acknowledge'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['status'], ReportStatus.CLOSED)
        self.assertEqual(data['updates'][-1]['message'], 'Resolution acknowledged by citizen. Report closed.')

    def test_feedback_rating_out_of_range(self):
        self.resolve(self.report)
        self.login_as(self.citizen)

        response = self.client.post(self.report_url(self.report, 'feedback'), {'rating': 6}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Please provide a rating between 1 and 5')

    def test_feedback_on_resolved_report(self):
        self.resolve(self.report)
        self.login_as(self.citizen)

        response = self.client.post(
            self.report_url(self.report, 'feedback'),
            {'rating': 5, 'comment': 'Fixed in a day'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        feedback = response.json()['data']['feedback']
        self.assertEqual(feedback['rating'], 5)
        self.assertEqual(feedback['comment'], 'Fixed in a day')
        self.assertIsNotNone(feedback['submittedAt'])

    def test_feedback_on_pending_report(self):
        self.login_as(self.citizen)
        response = self.client.post(self.report_url(self.report, 'feedback'), {'rating': 3}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Can only add feedback to resolved reports')


class UpdateAndTimelineTests(ReportApiTestCase):
    def setUp(self):
        super().setUp()
        self.report = self.create_report(assigned_officer=self.officer)

    def test_assigned_officer_resolves(self):
        self.login_as(self.officer)
        response = self.client.post(
            self.report_url(self.report, 'updates'),
            {'message': 'Pothole filled', 'status': 'Resolved'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['status'], ReportStatus.RESOLVED)
        self.assertIsNotNone(data['resolvedAt'])
        self.assertEqual(data['updates'][-1]['message'], 'Pothole filled')

    def test_unassigned_officer_is_refused(self):
        stranger = self.create_user('stranger@example.com', name='Sam Stranger', role='officer')
        self.login_as(stranger)

        response = self.client.post(
            self.report_url(self.report, 'updates'),
            {'message': 'Taking over'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_comments_without_status(self):
        self.login_as(self.citizen)
        response = self.client.post(
            self.report_url(self.report, 'updates'),
            {'message': 'It got worse after the rain'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], ReportStatus.PENDING)

    def test_owner_cannot_set_status_through_update(self):
        self.login_as(self.citizen)
        response = self.client.post(
            self.report_url(self.report, 'updates'),
            {'message': 'Done?', 'status': 'Resolved'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_repeating_current_status_keeps_closed_at(self):
        ReportLifecycle(self.report, self.citizen).close()
        closed_at = timezone.now() - timedelta(days=3)
        Report.objects.filter(pk=self.report.pk).update(closed_at=closed_at)

        self.login_as(self.citizen)
        response = self.client.post(
            self.report_url(self.report, 'updates'),
            {'message': 'Thanks', 'status': 'Closed'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.CLOSED)
        self.assertEqual(self.report.closed_at, closed_at)
        statuses = list(self.report.updates.order_by('sequence').values_list('status', flat=True))
        self.assertEqual(statuses, [ReportStatus.PENDING, ReportStatus.CLOSED, ReportStatus.CLOSED])

    def test_update_needs_message(self):
        self.login_as(self.officer)
        response = self.client.post(self.report_url(self.report, 'updates'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_timeline_requires_login(self):
        response = self.client.get(self.report_url(self.report, 'timeline'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_timeline(self):
        ReportLifecycle(self.report, self.officer).add_update('Inspected', ReportStatus.IN_PROGRESS)
        self.login_as(self.other_citizen)

        response = self.client.get(self.report_url(self.report, 'timeline'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        timeline = response.json()['data']
        self.assertEqual([entry['status'] for entry in timeline], ['Pending', 'In Progress'])
        self.assertEqual(timeline[1]['updatedBy'], {
            'id': str(self.officer.id),
            'name': 'Oscar Officer',
            'role': 'officer',
        })
        self.assertIn('createdAt', timeline[0])


class PhotoUploadTests(ReportApiTestCase):
    def setUp(self):
        super().setUp()
        self.report = self.create_report()
        self.url = self.report_url(self.report, 'photo')

    def test_file_required(self):
        self.login_as(self.citizen)
        response = self.client.put(self.url, {}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Please upload a file')

    def test_image_required(self):
        self.login_as(self.citizen)
        response = self.client.put(self.url, {'file': text_file()}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Please upload an image file')

    def test_size_limit(self):
        self.login_as(self.citizen)
        with self.settings(MAX_FILE_UPLOAD=10):
            response = self.client.put(self.url, {'file': image(size=100)}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Please upload an image less than 10 bytes')

    def test_upload(self):
        self.login_as(self.officer)
        response = self.client.put(self.url, {'file': image('crack.png')}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        photos = response.json()['data']['photos']
        self.assertEqual(len(photos), 1)
        self.assertTrue(photos[0].endswith('.png'))
        self.assertEqual(len(os.listdir(self.upload_dir)), 1)

    def test_other_citizen_cannot_upload(self):
        self.login_as(self.other_citizen)
        response = self.client.put(self.url, {'file': image()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_storage_failure(self):
        self.login_as(self.citizen)
        with mock.patch.object(FileSystemStorage, 'save', side_effect=OSError('disk full')):
            response = self.client.put(self.url, {'file': image()}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json()['message'], 'Problem with file upload')
        self.report.refresh_from_db()
        self.assertEqual(self.report.photos, [])


class ReportListsTests(ReportApiTestCase):
    def setUp(self):
        super().setUp()
        self.mine = self.create_report(title='Mine')
        self.theirs = self.create_report(citizen=self.other_citizen, title='Theirs', assigned_officer=self.officer)

    def test_user_reports(self):
        self.login_as(self.citizen)
        response = self.client.get(f'{BASE_URL}user/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['data'][0]['title'], 'Mine')

    def test_assigned_reports(self):
        self.login_as(self.officer)
        response = self.client.get(f'{BASE_URL}assigned/')

        self.assertEqual([row['title'] for row in response.json()['data']], ['Theirs'])

    def test_assigned_reports_are_for_officers(self):
        self.login_as(self.citizen)
        response = self.client.get(f'{BASE_URL}assigned/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['message'], 'User role citizen is not authorized to access this route')


class AnalyticsTests(ReportApiTestCase):
    def setUp(self):
        super().setUp()
        self.department = self.create_department()
        self.region = self.create_region()
        report = self.create_report(department=self.department, region=self.region)
        self.resolve(report)
        ReportLifecycle(report, self.citizen).leave_feedback(4)
        self.create_report(department=self.department, severity='Critical')

    def test_report_analytics(self):
        self.login_as(self.admin)
        response = self.client.get(f'{BASE_URL}analytics/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['totalReports'], 2)
        self.assertEqual(data['resolvedReports'], 1)
        self.assertEqual(data['pendingReports'], 1)
        self.assertEqual(data['reportsByCategoryData'], [{'name': 'Road', 'count': 2}])
        self.assertEqual(data['reportsByRegionData'], [{'name': 'Zone A', 'count': 1}])
        self.assertEqual(len(data['monthlyTrendsData']), 12)
        self.assertEqual(sum(month['reports'] for month in data['monthlyTrendsData']), 2)
        self.assertEqual(data['performanceData'][0]['department'], 'Public Works')
        self.assertEqual(data['performanceData'][0]['reportsResolved'], 1)
        self.assertEqual(data['performanceData'][0]['satisfaction'], 80)

    def test_dashboard_stats(self):
        self.login_as(self.admin)
        response = self.client.get(f'{BASE_URL}dashboard-stats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(set(data), {'stats', 'userStats', 'departments', 'regions', 'recentUsers'})
        self.assertEqual(data['userStats']['total'], 4)
        self.assertEqual(data['userStats']['citizens'], 2)
        self.assertEqual(data['departments'][0]['assigned'], 2)
        self.assertEqual(data['departments'][0]['completed'], 1)
        self.assertEqual(data['departments'][0]['completionRate'], 50)
        self.assertEqual(len(data['recentUsers']), 4)

    def test_officers_cannot_see_analytics(self):
        self.login_as(self.officer)
        self.assertEqual(self.client.get(f'{BASE_URL}analytics/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            self.client.get(f'{BASE_URL}dashboard-stats/').status_code,
            status.HTTP_403_FORBIDDEN,
        )
