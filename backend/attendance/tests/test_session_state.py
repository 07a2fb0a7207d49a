from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import ClassSession
from attendance.services import session_state
from attendance_api.exceptions import InvalidTransition
from audit.models import AuditLog
from courses.models import Course


class SessionStateTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.course = Course.objects.create(title='Algorithms', semester='2025-1', instructor=self.instructor)
        self.session = ClassSession.objects.create(course=self.course, week=1)

    def test_new_session_starts_closed(self):
        self.assertEqual(self.session.status, ClassSession.Status.CLOSED)

    def test_close_then_open(self):
        session = session_state.open_session(self.session, self.instructor)
        session = session_state.close_session(session, self.instructor)
        session = session_state.open_session(session, self.instructor)
        self.assertEqual(session.status, ClassSession.Status.OPEN)

    def test_pause_closed_fails(self):
        with self.assertRaises(InvalidTransition):
            session_state.pause_session(self.session, self.instructor)
        self.session.refresh_from_db()
        self.assertEqual(self.session.status, ClassSession.Status.CLOSED)

    def test_open_twice_fails(self):
        session_state.open_session(self.session, self.instructor)
        with self.assertRaises(InvalidTransition):
            session_state.open_session(self.session, self.instructor)

    def test_pause_twice_and_close_twice_fail(self):
        session_state.open_session(self.session, self.instructor)
        session_state.pause_session(self.session, self.instructor)
        with self.assertRaises(InvalidTransition):
            session_state.pause_session(self.session, self.instructor)
        session_state.close_session(self.session, self.instructor)
        with self.assertRaises(InvalidTransition):
            session_state.close_session(self.session, self.instructor)

    def test_transitions_are_audited(self):
        session_state.open_session(self.session, self.instructor)
        entry = AuditLog.objects.get(target_type=AuditLog.TargetType.SESSION, target_id=self.session.pk)
        self.assertEqual(entry.action, AuditLog.Action.OPEN)
        self.assertEqual(entry.before_value['status'], 'CLOSED')
        self.assertEqual(entry.after_value['status'], 'OPEN')
        self.assertEqual(entry.actor_id, self.instructor.pk)

    def test_endpoint_reports_invalid_transition(self):
        client = APIClient()
        client.force_authenticate(self.instructor)
        resp = client.post(f'/sessions/{self.session.pk}/pause')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['status_code'], 400)
        resp = client.post(f'/sessions/{self.session.pk}/open')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['session']['status'], 'OPEN')

    def test_other_instructor_cannot_transition(self):
        other = User.objects.create_user(
            username='prof2', email='prof2@school.com', password='pw', role=User.Role.INSTRUCTOR)
        client = APIClient()
        client.force_authenticate(other)
        resp = client.post(f'/sessions/{self.session.pk}/open')
        self.assertEqual(resp.status_code, 403)
