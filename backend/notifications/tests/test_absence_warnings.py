from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import Attendance, AttendanceStatus, ClassSession
from courses.models import AttendancePolicy, Course, Enrollment
from notifications.models import Notification, NotificationType
from notifications.services import absence_warnings
from notifications.services.absence_warnings import Thresholds


class AbsenceLevelTests(TestCase):
    def test_levels(self):
        t = Thresholds(warn_absences=2, danger_absences=4, fail_absences=6, late_to_absent=3)
        self.assertIsNone(absence_warnings.decide_level(1, t))
        self.assertEqual(absence_warnings.decide_level(2, t), 'WARN')
        self.assertEqual(absence_warnings.decide_level(5, t), 'DANGER')
        self.assertEqual(absence_warnings.decide_level(9, t), 'FAIL')

    def test_absence_equivalent(self):
        self.assertEqual(absence_warnings.absence_equivalent(1, 7, 3), 3)
        self.assertEqual(absence_warnings.absence_equivalent(0, 2, 0), 2)


class AbsenceWarningRunTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.other_instructor = User.objects.create_user(
            username='prof2', email='prof2@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.course = Course.objects.create(
            title='Statistics', semester='2025-2', department='Math', instructor=self.instructor)
        self.heavy = User.objects.create_user(username='heavy', email='heavy@school.com', password='pw')
        self.light = User.objects.create_user(username='light', email='light@school.com', password='pw')
        for student in (self.heavy, self.light):
            Enrollment.objects.create(course=self.course, student=student)

        sessions = [ClassSession.objects.create(course=self.course, week=w) for w in range(1, 6)]
        # heavy: 2 absences + 3 lates -> 3 absence-equivalents -> WARN
        for session, status in zip(sessions, [3, 3, 2, 2, 2]):
            Attendance.objects.create(session=session, student=self.heavy, status=status)
        for session in sessions:
            Attendance.objects.create(session=session, student=self.light, status=AttendanceStatus.PRESENT)

    def test_run_creates_and_dedupes(self):
        first = absence_warnings.run_absence_warnings(self.instructor, course_id=self.course.pk)
        self.assertEqual(first['created'], 1)
        self.assertEqual(first['checkedStudents'], 2)
        note = Notification.objects.get(user=self.heavy)
        self.assertEqual(note.type, NotificationType.ABSENCE_WARN)
        self.assertEqual(note.link_url, f'/courses/{self.course.pk}')

        second = absence_warnings.run_absence_warnings(self.instructor, course_id=self.course.pk)
        self.assertEqual(second['created'], 0)
        self.assertEqual(second['skipped'], 1)
        self.assertEqual(Notification.objects.count(), 1)

    def test_dry_run_writes_nothing(self):
        result = absence_warnings.run_absence_warnings(self.instructor, course_id=self.course.pk, dry_run=True)
        self.assertTrue(result['dryRun'])
        self.assertEqual(result['created'], 0)
        self.assertEqual(result['skipped'], 1)
        self.assertEqual(Notification.objects.count(), 0)

    def test_policy_thresholds_used(self):
        AttendancePolicy.objects.create(
            course=self.course, warn_absences=1, danger_absences=2, fail_absences=3, late_to_absent=1)
        absence_warnings.run_absence_warnings(self.instructor, course_id=self.course.pk)
        # 2 absences + 3 lates at 1:1 -> 5 -> FAIL
        self.assertEqual(Notification.objects.get(user=self.heavy).type, NotificationType.ABSENCE_FAIL)

    def test_instructor_limited_to_own_courses(self):
        result = absence_warnings.run_absence_warnings(self.other_instructor, course_id=self.course.pk)
        self.assertEqual(result['checkedCourses'], 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_semester_department_selection(self):
        result = absence_warnings.run_absence_warnings(self.instructor, semester='2025-2', department='Math')
        self.assertEqual(result['checkedCourses'], 1)
        result = absence_warnings.run_absence_warnings(self.instructor, semester='2024-1', department='Math')
        self.assertEqual(result['checkedCourses'], 0)

    def test_endpoint_and_command(self):
        client = APIClient()
        client.force_authenticate(self.instructor)
        resp = client.post('/admin/absence-warnings/run', {'courseId': self.course.pk, 'dryRun': True}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['perCourseSummary'][0]['thresholds']['warnAbsences'], 2)
        self.assertEqual(Notification.objects.count(), 0)

        student_client = APIClient()
        student_client.force_authenticate(self.light)
        resp = student_client.post('/admin/absence-warnings/run', {}, format='json')
        self.assertEqual(resp.status_code, 403)

        out = StringIO()
        call_command('run_absence_warnings', '--course', str(self.course.pk), stdout=out)
        self.assertIn('created=1', out.getvalue())
        self.assertEqual(Notification.objects.count(), 1)
