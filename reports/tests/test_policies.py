from core.exceptions import ForbiddenError, UnauthorizedError
from civicpulse_backend.testing import CivicPulseTestCase
from reports.policies import authorize


class AuthorizeTests(CivicPulseTestCase):
    def setUp(self):
        super().setUp()
        self.report = self.create_report()

    def test_only_citizens_create(self):
        authorize('create', self.citizen)
        with self.assertRaisesMessage(ForbiddenError, 'Only citizens can create reports (current role: officer)'):
            authorize('create', self.officer)

    def test_update_owner_or_staff(self):
        authorize('update', self.citizen, self.report)
        authorize('update', self.officer, self.report)
        authorize('update', self.admin, self.report)
        with self.assertRaisesMessage(UnauthorizedError, 'Not authorized to update this report'):
            authorize('update', self.other_citizen, self.report)

    def test_change_status_is_staff_only(self):
        authorize('change_status', self.officer)
        with self.assertRaisesMessage(ForbiddenError, 'Only officers and admins can change the status of a report'):
            authorize('change_status', self.citizen)

    def test_delete_owner_or_admin(self):
        authorize('delete', self.citizen, self.report)
        authorize('delete', self.admin, self.report)
        with self.assertRaisesMessage(UnauthorizedError, 'Not authorized to delete this report'):
            authorize('delete', self.officer, self.report)

    def test_add_update_needs_one_relation(self):
        authorize('add_update', self.admin, self.report)
        authorize('add_update', self.citizen, self.report)
        with self.assertRaisesMessage(UnauthorizedError, 'Not authorized to update this report'):
            authorize('add_update', self.officer, self.report)

        self.report.assigned_officer = self.officer
        authorize('add_update', self.officer, self.report)

    def test_citizen_actions_check_role_before_ownership(self):
        for action in ('cancel', 'acknowledge', 'close', 'feedback'):
            with self.subTest(action=action):
                authorize(action, self.citizen, self.report)
                with self.assertRaises(ForbiddenError):
                    authorize(action, self.admin, self.report)
                with self.assertRaises(UnauthorizedError):
                    authorize(action, self.other_citizen, self.report)

    def test_feedback_wording(self):
        with self.assertRaisesMessage(UnauthorizedError, 'Not authorized to add feedback to this report'):
            authorize('feedback', self.other_citizen, self.report)

    def test_upload_photo(self):
        authorize('upload_photo', self.officer, self.report)
        with self.assertRaisesMessage(UnauthorizedError, 'Not authorized to upload photos to this report'):
            authorize('upload_photo', self.other_citizen, self.report)

    def test_role_gated_lists(self):
        authorize('assigned_reports', self.officer)
        authorize('analytics', self.admin)
        authorize('dashboard_stats', self.admin)
        authorize('user_reports', self.citizen)
        authorize('view_timeline', self.other_citizen, self.report)

        with self.assertRaisesMessage(ForbiddenError, 'User role citizen is not authorized to access this route'):
            authorize('assigned_reports', self.citizen)
        with self.assertRaises(ForbiddenError):
            authorize('analytics', self.officer)
