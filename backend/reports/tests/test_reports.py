from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import Attendance, ClassSession
from attendance.services import session_state
from audit.models import AuditLog
from courses.models import Course, Enrollment
from excuses.models import ExcuseRequest
from excuses.services import excuse_workflow


class ReportFixture(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.admin = User.objects.create_user(
            username='admin', email='admin@school.com', password='pw', role=User.Role.ADMIN)
        self.alice = User.objects.create_user(username='alice', email='alice@school.com', password='pw')
        self.bob = User.objects.create_user(username='bob', email='bob@school.com', password='pw')
        self.course = Course.objects.create(title='Operating Systems', semester='2025-1', instructor=self.instructor)
        for student in (self.alice, self.bob):
            Enrollment.objects.create(course=self.course, student=student)
        self.week1 = ClassSession.objects.create(course=self.course, week=1, round=1)
        self.week2 = ClassSession.objects.create(course=self.course, week=2, round=1)
        self.client = APIClient()
        self.client.force_authenticate(self.instructor)


class AttendanceReportTests(ReportFixture):
    def test_missing_rows_count_as_unknown(self):
        Attendance.objects.create(session=self.week1, student=self.alice, status=1)
        Attendance.objects.create(session=self.week2, student=self.alice, status=2)
        Attendance.objects.create(session=self.week2, student=self.bob, status=3)

        response = self.client.get('/reports/attendance', {'courseId': self.course.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['enrolledCount'], 2)
        first = response.data['sessions'][0]
        self.assertEqual((first['present'], first['unknown'], first['totalSlots']), (1, 1, 2))
        self.assertEqual(first['rates']['presentRate'], 50.0)
        second = response.data['byWeek'][1]
        self.assertEqual(second['rates']['attendedRate'], 50.0)
        self.assertEqual(second['rates']['absenceRate'], 50.0)

    def test_week_filter_and_range(self):
        response = self.client.get('/reports/attendance', {'courseId': self.course.pk, 'week': 2})
        self.assertEqual(response.data['sessionsCount'], 1)
        self.assertEqual(response.data['filter'], {'week': 2})
        response = self.client.get('/reports/attendance', {'courseId': self.course.pk, 'week': 41})
        self.assertEqual(response.status_code, 400)


class ExcuseReportTests(ReportFixture):
    def test_counts_by_status_and_week(self):
        first = excuse_workflow.create_excuse(self.week1, self.alice, reason_code='SICK')
        excuse_workflow.create_excuse(self.week1, self.bob)
        excuse_workflow.create_excuse(self.week2, self.alice)
        excuse_workflow.resolve_excuse(first.pk, self.instructor, 'APPROVED')

        response = self.client.get('/reports/excuses', {'courseId': self.course.pk})
        self.assertEqual(response.status_code, 200)
        stats = response.data['stats']
        self.assertEqual(stats['byStatus'], {'PENDING': 2, 'APPROVED': 1, 'REJECTED': 0})
        self.assertEqual(stats['approvedRate'], 33.33)
        self.assertEqual([w['week'] for w in stats['byWeek']], [1, 2])
        self.assertEqual(stats['byWeek'][0]['total'], 2)

        response = self.client.get('/reports/excuses', {'courseId': self.course.pk, 'status': 'pending'})
        self.assertEqual(response.data['count'], 2)
        self.assertTrue(all(row['status'] == ExcuseRequest.Status.PENDING for row in response.data['list']))

    def test_bad_status(self):
        response = self.client.get('/reports/excuses', {'courseId': self.course.pk, 'status': 'MAYBE'})
        self.assertEqual(response.status_code, 400)


class AuditReportTests(ReportFixture):
    def test_course_attribution_and_alias(self):
        other_course = Course.objects.create(title='Other', semester='2025-1', instructor=self.instructor)
        other_session = ClassSession.objects.create(course=other_course, week=1, round=1)
        session_state.open_session(self.week1, self.instructor)
        session_state.open_session(other_session, self.instructor)
        excuse = excuse_workflow.create_excuse(self.week2, self.bob)
        excuse_workflow.resolve_excuse(excuse.pk, self.instructor, 'APPROVED')

        response = self.client.get('/reports/audits', {'courseId': self.course.pk})
        self.assertEqual(response.status_code, 200)
        # session open, excuse approval, attendance created by the approval
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['stats']['byTargetType'], {'SESSION': 1, 'EXCUSE_REQUEST': 1, 'ATTENDANCE': 1})
        self.assertTrue(all(row['courseId'] == self.course.pk for row in response.data['list']))

        response = self.client.get('/reports/audits', {'courseId': self.course.pk, 'targetType': 'EXCUSE'})
        self.assertEqual(response.data['count'], 1)
        row = response.data['list'][0]
        self.assertEqual(row['targetType'], AuditLog.TargetType.EXCUSE_REQUEST)
        self.assertEqual(row['session']['week'], 2)
        self.assertEqual(row['after']['status'], 'APPROVED')

    def test_limit_and_date_filters(self):
        session_state.open_session(self.week1, self.instructor)
        session_state.close_session(self.week1, self.instructor)
        response = self.client.get('/reports/audits', {'courseId': self.course.pk, 'limit': 1})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['list'][0]['action'], 'CLOSE')

        response = self.client.get('/reports/audits', {'courseId': self.course.pk, 'to': '2000-01-01'})
        self.assertEqual(response.data['count'], 0)
        response = self.client.get('/reports/audits', {'courseId': self.course.pk, 'from': 'yesterday'})
        self.assertEqual(response.status_code, 400)
