from datetime import timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.utils import timezone

from audit.models import AuditEventType, AuditLog
from core.exceptions import BadRequestError, InvalidStateError
from civicpulse_backend.testing import CivicPulseTestCase
from reports.lifecycle import ReportLifecycle
from reports.models import ReportStatus, ReportUpdate


class ReportLifecycleTests(CivicPulseTestCase):
    def setUp(self):
        super().setUp()
        self.report = self.create_report()

    def citizen_actions(self):
        return ReportLifecycle(self.report, self.citizen)

    def officer_actions(self):
        return ReportLifecycle(self.report, self.officer)

    def messages(self):
        return list(self.report.updates.order_by('sequence').values_list('message', flat=True))

    def test_submit_records_initial_entry(self):
        update = self.report.updates.get()

        self.assertEqual(update.sequence, 1)
        self.assertEqual(update.status, ReportStatus.PENDING)
        self.assertEqual(update.message, 'Report submitted by citizen')
        self.assertEqual(update.updated_by, self.citizen)
        self.assertTrue(
            AuditLog.objects.filter(
                event_type=AuditEventType.REPORT_CREATED,
                target_id=str(self.report.pk),
            ).exists()
        )

    def test_cancel_pending(self):
        report = self.citizen_actions().cancel()

        self.assertEqual(report.status, ReportStatus.CANCELLED)
        self.assertEqual(self.messages(), ['Report submitted by citizen', 'Report cancelled by citizen'])

    def test_cancel_requires_pending(self):
        self.officer_actions().change_status(ReportStatus.IN_PROGRESS)

        with self.assertRaisesMessage(InvalidStateError, "Only reports with 'Pending' status can be cancelled"):
            self.citizen_actions().cancel()

        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.IN_PROGRESS)
        self.assertEqual(self.report.updates.count(), 2)

    def test_acknowledge_closes_resolved_report(self):
        self.officer_actions().change_status(ReportStatus.RESOLVED)
        report = self.citizen_actions().acknowledge()

        self.assertEqual(report.status, ReportStatus.CLOSED)
        self.assertIsNotNone(report.closed_at)
        self.assertEqual(self.messages()[-1], 'Resolution acknowledged by citizen. Report closed.')

    def test_acknowledge_requires_resolved(self):
        with self.assertRaisesMessage(InvalidStateError, "Only reports with 'Resolved' status can be acknowledged"):
            self.citizen_actions().acknowledge()

    def test_close_from_any_open_status(self):
        self.officer_actions().change_status(ReportStatus.REJECTED)
        report = self.citizen_actions().close()

        self.assertEqual(report.status, ReportStatus.CLOSED)
        self.assertEqual(self.messages()[-1], 'Report closed by citizen')

    def test_cannot_close_twice(self):
        self.citizen_actions().close()

        with self.assertRaisesMessage(InvalidStateError, 'Cannot close a report that is already closed'):
            self.citizen_actions().close()

    def test_cannot_close_cancelled(self):
        self.citizen_actions().cancel()

        with self.assertRaisesMessage(InvalidStateError, 'Cannot close a report that is already cancelled'):
            self.citizen_actions().close()

    def test_resolved_at_is_set_once(self):
        first = self.officer_actions().change_status(ReportStatus.RESOLVED)
        resolved_at = first.resolved_at
        self.assertIsNotNone(resolved_at)

        self.officer_actions().change_status(ReportStatus.IN_PROGRESS)
        again = self.officer_actions().change_status(ReportStatus.RESOLVED)

        self.assertEqual(again.resolved_at, resolved_at)

    def test_change_status_default_message(self):
        self.officer_actions().change_status(ReportStatus.ASSIGNED)
        self.assertEqual(self.messages()[-1], 'Status changed to Assigned')

    def test_change_status_to_same_status_is_noop(self):
        self.officer_actions().change_status(ReportStatus.PENDING, 'Still pending')
        self.assertEqual(self.report.updates.count(), 1)

    def test_change_status_rejects_unknown_status(self):
        with self.assertRaisesMessage(BadRequestError, 'Invalid status: Done'):
            self.officer_actions().change_status('Done')

    def test_add_update_keeps_status(self):
        report = self.officer_actions().add_update('Crew scheduled for Monday')

        self.assertEqual(report.status, ReportStatus.PENDING)
        update = report.updates.order_by('-sequence').first()
        self.assertEqual(update.status, ReportStatus.PENDING)
        self.assertEqual(update.updated_by, self.officer)

    def test_add_update_with_current_status_is_not_a_transition(self):
        resolved_at = self.officer_actions().change_status(ReportStatus.RESOLVED).resolved_at

        report = self.officer_actions().add_update('Checked again', ReportStatus.RESOLVED)

        self.assertEqual(report.resolved_at, resolved_at)
        self.assertIsNone(report.closed_at)
        self.assertEqual(self.messages()[-1], 'Checked again')
        self.assertEqual(report.updates.count(), 3)

    def test_add_update_requires_message(self):
        with self.assertRaisesMessage(BadRequestError, 'Please provide an update message'):
            self.officer_actions().add_update('   ')

    def test_sequences_and_timestamps_are_monotonic(self):
        later = timezone.now() + timedelta(minutes=5)
        ReportUpdate.objects.filter(report=self.report).update(timestamp=later)

        self.officer_actions().change_status(ReportStatus.ASSIGNED)
        self.officer_actions().add_update('On site')

        updates = list(self.report.updates.order_by('sequence'))
        self.assertEqual([u.sequence for u in updates], [1, 2, 3])
        timestamps = [u.timestamp for u in updates]
        self.assertEqual(timestamps, sorted(timestamps))
        self.assertEqual(updates[1].timestamp, later)

    def test_feedback_on_resolved_report(self):
        self.officer_actions().change_status(ReportStatus.RESOLVED)
        report = self.citizen_actions().leave_feedback(4, 'Fixed quickly')

        self.assertEqual(report.feedback_rating, 4)
        self.assertEqual(report.feedback_comment, 'Fixed quickly')
        self.assertIsNotNone(report.feedback_submitted_at)
        self.assertEqual(report.status, ReportStatus.RESOLVED)

    def test_feedback_requires_resolved(self):
        with self.assertRaisesMessage(InvalidStateError, 'Can only add feedback to resolved reports'):
            self.citizen_actions().leave_feedback(5)

    def test_attach_photos_appends(self):
        self.citizen_actions().attach_photos(['/uploads/a.jpg'])
        report = self.citizen_actions().attach_photos(['/uploads/b.jpg'])

        self.assertEqual(report.photos, ['/uploads/a.jpg', '/uploads/b.jpg'])

    def test_failed_transition_leaves_no_entry(self):
        with mock.patch.object(ReportLifecycle, '_append_update', side_effect=RuntimeError('boom')):
            with self.assertRaises(RuntimeError):
                self.officer_actions().change_status(ReportStatus.ASSIGNED)

        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.PENDING)
        self.assertEqual(self.report.updates.count(), 1)


class ReportUpdateImmutabilityTests(CivicPulseTestCase):
    def test_existing_entry_cannot_be_saved(self):
        update = self.create_report().updates.get()
        update.message = 'rewritten'

        with self.assertRaises(ValidationError):
            update.save()

    def test_entry_cannot_be_deleted(self):
        update = self.create_report().updates.get()

        with self.assertRaises(ValidationError):
            update.delete()
