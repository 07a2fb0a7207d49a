from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import ClassSession
from attendance.services import session_state
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget
from courses.models import Course


class AuditServiceTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.course = Course.objects.create(title='Graphics', semester='2025-1', instructor=self.instructor)
        self.session = ClassSession.objects.create(course=self.course, week=1, round=1)

    def test_normalize_target_type(self):
        self.assertEqual(audit_service.normalize_target_type('excuse'), 'EXCUSE_REQUEST')
        self.assertEqual(audit_service.normalize_target_type('Session'), 'SESSION')
        self.assertIsNone(audit_service.normalize_target_type('FILE'))
        self.assertIsNone(audit_service.normalize_target_type(''))

    def test_rows_are_append_only(self):
        row = audit_service.record(AuditTarget.session(self.session), AuditLog.Action.OPEN, self.instructor,
                                   before={'status': 'CLOSED'}, after={'status': 'OPEN'})
        row.action = AuditLog.Action.CLOSE
        with self.assertRaises(ValueError):
            row.save()
        with self.assertRaises(ValueError):
            row.delete()
        self.assertEqual(AuditLog.objects.get(pk=row.pk).action, AuditLog.Action.OPEN)

    def test_failed_write_does_not_break_caller(self):
        with mock.patch.object(AuditLog.objects, 'create', side_effect=RuntimeError('db down')):
            with self.assertLogs('audit.services.audit_service', level='ERROR'):
                session = session_state.open_session(self.session, self.instructor)
        self.assertEqual(session.status, ClassSession.Status.OPEN)
        self.assertFalse(AuditLog.objects.exists())


class AuditApiTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.student = User.objects.create_user(username='stu', email='stu@school.com', password='pw')
        course = Course.objects.create(title='Graphics', semester='2025-1', instructor=self.instructor)
        self.session = ClassSession.objects.create(course=course, week=1, round=1)
        session_state.open_session(self.session, self.instructor)
        session_state.close_session(self.session, self.instructor)
        self.client = APIClient()

    def test_trail_newest_first(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.get('/audits', {'targetType': 'SESSION', 'targetId': self.session.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row['action'] for row in response.data['list']], ['CLOSE', 'OPEN'])
        self.assertEqual(response.data['list'][0]['beforeValue']['status'], 'OPEN')

    def test_students_forbidden(self):
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.get('/audits').status_code, 403)

    def test_unknown_target_type(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.get('/audits', {'targetType': 'NOPE'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['status_code'], 400)
