from django.test import TestCase
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import Attendance, AttendanceStatus, ClassSession
from attendance.services import recorder
from audit.models import AuditLog
from courses.models import Course, Enrollment


class CheckInTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.student = User.objects.create_user(username='stu', email='stu@school.com', password='pw')
        self.outsider = User.objects.create_user(username='out', email='out@school.com', password='pw')
        self.course = Course.objects.create(title='Algorithms', semester='2025-1', instructor=self.instructor)
        Enrollment.objects.create(course=self.course, student=self.student)
        self.session = ClassSession.objects.create(
            course=self.course, week=1, status=ClassSession.Status.OPEN,
            attendance_method=ClassSession.Method.ELECTRONIC,
        )

    def test_check_in_is_idempotent(self):
        first = recorder.check_in(self.session, self.student)
        second = recorder.check_in(self.session, self.student)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Attendance.objects.filter(session=self.session, student=self.student).count(), 1)
        self.assertEqual(second.status, AttendanceStatus.PRESENT)
        self.assertIsNotNone(second.checked_at)

    def test_existing_status_is_kept(self):
        Attendance.objects.create(session=self.session, student=self.student, status=AttendanceStatus.LATE)
        attendance = recorder.check_in(self.session, self.student)
        self.assertEqual(attendance.status, AttendanceStatus.LATE)
        self.assertIsNotNone(attendance.checked_at)

    def test_unknown_status_promoted(self):
        Attendance.objects.create(session=self.session, student=self.student, status=AttendanceStatus.UNKNOWN)
        attendance = recorder.check_in(self.session, self.student)
        self.assertEqual(attendance.status, AttendanceStatus.PRESENT)

    def test_closed_session_rejected(self):
        self.session.status = ClassSession.Status.CLOSED
        self.session.save()
        with self.assertRaises(ValidationError):
            recorder.check_in(self.session, self.student)

    def test_roll_call_session_rejected(self):
        self.session.attendance_method = ClassSession.Method.ROLL_CALL
        self.session.save()
        with self.assertRaises(ValidationError):
            recorder.check_in(self.session, self.student)

    def test_not_enrolled_forbidden(self):
        with self.assertRaises(PermissionDenied):
            recorder.check_in(self.session, self.outsider)

    def test_wrong_code_creates_nothing(self):
        self.session.attendance_method = ClassSession.Method.CODE
        self.session.code = '123456'
        self.session.save()
        client = APIClient()
        client.force_authenticate(self.student)

        resp = client.post(f'/sessions/{self.session.pk}/attend', {'code': '654321'}, format='json')
        self.assertEqual(resp.status_code, 400)
        resp = client.post(f'/sessions/{self.session.pk}/attend', {}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Attendance.objects.filter(session=self.session).exists())

        resp = client.post(f'/sessions/{self.session.pk}/attend', {'code': '123456'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['attendance']['status'], 1)

    def test_instructor_cannot_check_in(self):
        client = APIClient()
        client.force_authenticate(self.instructor)
        resp = client.post(f'/sessions/{self.session.pk}/attend', {}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_student_never_sees_code(self):
        self.session.attendance_method = ClassSession.Method.CODE
        self.session.code = '123456'
        self.session.save()
        client = APIClient()
        client.force_authenticate(self.student)
        resp = client.get(f'/courses/{self.course.pk}/sessions')
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn('code', resp.data['list'][0])

        client.force_authenticate(self.instructor)
        resp = client.get(f'/courses/{self.course.pk}/sessions')
        self.assertEqual(resp.data['list'][0]['code'], '123456')

    def test_check_in_writes_no_audit(self):
        recorder.check_in(self.session, self.student)
        self.assertFalse(AuditLog.objects.filter(target_type=AuditLog.TargetType.ATTENDANCE).exists())


class RollCallAndCorrectionTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.s1 = User.objects.create_user(username='s1', email='s1@school.com', password='pw')
        self.s2 = User.objects.create_user(username='s2', email='s2@school.com', password='pw')
        self.outsider = User.objects.create_user(username='out', email='out@school.com', password='pw')
        self.course = Course.objects.create(title='Algorithms', semester='2025-1', instructor=self.instructor)
        Enrollment.objects.create(course=self.course, student=self.s1)
        Enrollment.objects.create(course=self.course, student=self.s2)
        self.session = ClassSession.objects.create(
            course=self.course, week=1, attendance_method=ClassSession.Method.ROLL_CALL,
        )
        self.client = APIClient()
        self.client.force_authenticate(self.instructor)

    def test_rollcall_sheet_defaults_to_unknown(self):
        Attendance.objects.create(session=self.session, student=self.s2, status=AttendanceStatus.LATE)
        resp = self.client.get(f'/sessions/{self.session.pk}/rollcall')
        self.assertEqual(resp.status_code, 200)
        rows = resp.data['list']
        self.assertEqual([r['studentId'] for r in rows], [self.s1.pk, self.s2.pk])
        self.assertEqual(rows[0]['status'], 0)
        self.assertEqual(rows[1]['status'], 2)

    def test_rollcall_skips_invalid_items(self):
        Attendance.objects.create(session=self.session, student=self.s2, status=AttendanceStatus.PRESENT)
        resp = self.client.patch(f'/sessions/{self.session.pk}/rollcall', {'items': [
            {'studentId': self.s1.pk, 'status': 1},
            {'studentId': self.s2.pk, 'status': 3},
            {'studentId': self.outsider.pk, 'status': 1},
            {'studentId': self.s1.pk, 'status': 9},
        ]}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['results'], {'updated': 1, 'created': 1, 'skipped': 2})
        self.assertEqual(Attendance.objects.get(session=self.session, student=self.s2).status, 3)
        self.assertFalse(Attendance.objects.filter(session=self.session, student=self.outsider).exists())

    def test_rollcall_skips_booleans_and_fractions(self):
        resp = self.client.patch(f'/sessions/{self.session.pk}/rollcall', {'items': [
            {'studentId': self.s1.pk + 0.7, 'status': 1},
            {'studentId': self.s1.pk, 'status': True},
            {'studentId': self.s2.pk, 'status': 2.5},
            {'studentId': True, 'status': 1},
        ]}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['results'], {'updated': 0, 'created': 0, 'skipped': 4})
        self.assertFalse(Attendance.objects.filter(session=self.session).exists())

    def test_rollcall_accepts_numeric_strings(self):
        resp = self.client.patch(f'/sessions/{self.session.pk}/rollcall', {'items': [
            {'studentId': str(self.s1.pk), 'status': '3'},
        ]}, format='json')
        self.assertEqual(resp.data['results'], {'updated': 0, 'created': 1, 'skipped': 0})
        self.assertEqual(Attendance.objects.get(session=self.session, student=self.s1).status, 3)

    def test_rollcall_requires_items(self):
        resp = self.client.patch(f'/sessions/{self.session.pk}/rollcall', {'items': []}, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_rollcall_only_for_roll_call_sessions(self):
        self.session.attendance_method = ClassSession.Method.CODE
        self.session.save()
        resp = self.client.get(f'/sessions/{self.session.pk}/rollcall')
        self.assertEqual(resp.status_code, 400)

    def test_correction_audited(self):
        attendance = Attendance.objects.create(session=self.session, student=self.s1, status=AttendanceStatus.ABSENT)
        resp = self.client.patch(f'/attendance/{attendance.pk}', {'status': 2}, format='json')
        self.assertEqual(resp.status_code, 200)
        attendance.refresh_from_db()
        self.assertEqual(attendance.status, AttendanceStatus.LATE)
        self.assertEqual(attendance.updated_by_id, self.instructor.pk)
        entry = AuditLog.objects.get(target_type=AuditLog.TargetType.ATTENDANCE, target_id=attendance.pk)
        self.assertEqual(entry.before_value, {'status': 3})
        self.assertEqual(entry.after_value, {'status': 2})

    def test_correction_rejects_unknown_status(self):
        attendance = Attendance.objects.create(session=self.session, student=self.s1, status=AttendanceStatus.ABSENT)
        resp = self.client.patch(f'/attendance/{attendance.pk}', {'status': 0}, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_summary_counts(self):
        Attendance.objects.create(session=self.session, student=self.s1, status=AttendanceStatus.PRESENT)
        Attendance.objects.create(session=self.session, student=self.s2, status=AttendanceStatus.EXCUSED)
        resp = self.client.get(f'/sessions/{self.session.pk}/attendance/summary')
        self.assertEqual(resp.data['summary'], {'present': 1, 'late': 0, 'absent': 0, 'excused': 1, 'unknown': 0})
