from unittest import mock

from django.test import TestCase
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import Attendance, AttendanceStatus, ClassSession
from attendance_api.exceptions import AlreadyProcessed, Conflict
from audit.models import AuditLog
from courses.models import Course, Enrollment
from excuses.models import ExcuseRequest
from excuses.services import excuse_workflow
from notifications.models import Notification, NotificationType


class ExcuseWorkflowTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.other_instructor = User.objects.create_user(
            username='prof2', email='prof2@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.student = User.objects.create_user(username='stu', email='stu@school.com', password='pw')
        self.course = Course.objects.create(title='Physics', semester='2025-1', instructor=self.instructor)
        Enrollment.objects.create(course=self.course, student=self.student)
        self.session = ClassSession.objects.create(course=self.course, week=3, round=1)

    def _excuse(self):
        return excuse_workflow.create_excuse(self.session, self.student, reason_code='SICK', reason_text='flu')

    def test_create_notifies_instructor(self):
        excuse = self._excuse()
        self.assertEqual(excuse.status, ExcuseRequest.Status.PENDING)
        note = Notification.objects.get(user=self.instructor)
        self.assertEqual(note.type, NotificationType.EXCUSE_REQUESTED)
        self.assertEqual(note.link_url, f'/excuses/{excuse.pk}')

    def test_duplicate_pending_conflicts(self):
        self._excuse()
        with self.assertRaises(Conflict):
            self._excuse()

    def test_not_enrolled_forbidden(self):
        outsider = User.objects.create_user(username='out', email='out@school.com', password='pw')
        with self.assertRaises(PermissionDenied):
            excuse_workflow.create_excuse(self.session, outsider)

    def test_approve_without_attendance_creates_excused_row(self):
        excuse = self._excuse()
        result = excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'APPROVED', reply_text='get well')
        self.assertTrue(result['attendance_changed'])
        attendance = Attendance.objects.get(session=self.session, student=self.student)
        self.assertEqual(attendance.status, AttendanceStatus.EXCUSED)
        self.assertEqual(attendance.updated_by_id, self.instructor.pk)

        excuse.refresh_from_db()
        self.assertEqual(excuse.status, ExcuseRequest.Status.APPROVED)
        self.assertEqual(excuse.reviewed_by_id, self.instructor.pk)
        self.assertEqual(excuse.reply_text, 'get well')

        note = Notification.objects.get(user=self.student)
        self.assertEqual(note.type, NotificationType.EXCUSE_APPROVED)
        self.assertIn('get well', note.message)

    def test_approve_existing_absence_is_audited(self):
        attendance = Attendance.objects.create(session=self.session, student=self.student, status=AttendanceStatus.ABSENT)
        excuse = self._excuse()
        excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'APPROVED')

        attendance.refresh_from_db()
        self.assertEqual(attendance.status, AttendanceStatus.EXCUSED)
        entry = AuditLog.objects.get(target_type=AuditLog.TargetType.ATTENDANCE, target_id=attendance.pk)
        self.assertEqual(entry.before_value, {'status': 3})
        self.assertEqual(entry.after_value, {'status': 4})
        excuse_entry = AuditLog.objects.get(target_type=AuditLog.TargetType.EXCUSE_REQUEST, target_id=excuse.pk)
        self.assertEqual(excuse_entry.action, AuditLog.Action.APPROVE)
        self.assertEqual(excuse_entry.before_value['status'], 'PENDING')

    def test_reject_never_touches_attendance(self):
        attendance = Attendance.objects.create(session=self.session, student=self.student, status=AttendanceStatus.ABSENT)
        excuse = self._excuse()
        result = excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'REJECTED')
        self.assertFalse(result['attendance_changed'])
        attendance.refresh_from_db()
        self.assertEqual(attendance.status, AttendanceStatus.ABSENT)
        self.assertFalse(AuditLog.objects.filter(target_type=AuditLog.TargetType.ATTENDANCE).exists())
        self.assertEqual(Notification.objects.get(user=self.student).type, NotificationType.EXCUSE_REJECTED)

    def test_second_resolution_already_processed(self):
        excuse = self._excuse()
        excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'REJECTED')
        with self.assertRaises(AlreadyProcessed):
            excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'APPROVED')

    def test_other_instructor_cannot_resolve(self):
        excuse = self._excuse()
        with self.assertRaises(PermissionDenied):
            excuse_workflow.resolve_excuse(excuse.pk, self.other_instructor, 'APPROVED')
        excuse.refresh_from_db()
        self.assertEqual(excuse.status, ExcuseRequest.Status.PENDING)

    def test_notification_failure_does_not_block_resolution(self):
        excuse = self._excuse()
        with mock.patch('notifications.models.Notification.objects.create', side_effect=RuntimeError('db down')):
            result = excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'APPROVED')
        self.assertTrue(result['attendance_changed'])
        excuse.refresh_from_db()
        self.assertEqual(excuse.status, ExcuseRequest.Status.APPROVED)

    def test_api_flow(self):
        client = APIClient()
        client.force_authenticate(self.student)
        resp = client.post(f'/sessions/{self.session.pk}/excuses', {'reasonText': 'doctor'}, format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['excuse']['reasonCode'], 'ETC')
        excuse_id = resp.data['excuse']['id']

        resp = client.patch(f'/excuses/{excuse_id}', {'status': 'APPROVED'}, format='json')
        self.assertEqual(resp.status_code, 403)

        client.force_authenticate(self.instructor)
        resp = client.patch(f'/excuses/{excuse_id}', {'status': 'MAYBE'}, format='json')
        self.assertEqual(resp.status_code, 400)
        resp = client.patch(f'/excuses/{excuse_id}', {'status': 'APPROVED'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['ok'])
        self.assertTrue(resp.data['attendanceChanged'])
        resp = client.patch(f'/excuses/{excuse_id}', {'status': 'REJECTED'}, format='json')
        self.assertEqual(resp.status_code, 409)
