from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import Attendance, ClassSession
from courses.models import Course, Enrollment
from reports.services import risk
from reports.services.risk import RiskThresholds


class StreakTests(SimpleTestCase):
    def test_absent_streak_example(self):
        result = risk.assess([3, 3, 1, 3, 3], RiskThresholds(absent_streak_min=2))
        self.assertEqual(result['streak']['maxAbsentStreak'], 2)
        self.assertEqual(result['streak']['currentAbsentStreak'], 2)
        self.assertIn('absentStreak>=2', result['flags'])
        self.assertEqual(result['totals']['absent'], 4)
        # 4*10 + 2*3 + 0*2
        self.assertEqual(result['riskScore'], 46)

    def test_late_or_absent_run_and_unknown(self):
        statuses = [2, 3, 0, 2, 1]
        self.assertEqual(risk.streaks(statuses)['maxLateOrAbsentStreak'], 2)
        self.assertEqual(risk.streaks(statuses, include_unknown=True)['maxLateOrAbsentStreak'], 4)
        self.assertEqual(risk.streaks(statuses)['currentLateOrAbsentStreak'], 0)
        # unknown never widens the plain absent run
        self.assertEqual(risk.streaks([3, 0, 3], include_unknown=True)['maxAbsentStreak'], 1)

    def test_clean_record_not_flagged(self):
        result = risk.assess([1, 1, 2, 1], RiskThresholds())
        self.assertEqual(result['flags'], [])

    def test_rank_by_score_then_absences(self):
        rows = [
            {'flags': ['x'], 'riskScore': 30, 'totals': {'absent': 1}, 'name': 'a'},
            {'flags': [], 'riskScore': 90, 'totals': {'absent': 9}, 'name': 'b'},
            {'flags': ['x'], 'riskScore': 30, 'totals': {'absent': 3}, 'name': 'c'},
            {'flags': ['x'], 'riskScore': 50, 'totals': {'absent': 0}, 'name': 'd'},
        ]
        self.assertEqual([r['name'] for r in risk.rank_flagged(rows)], ['d', 'c', 'a'])


class RiskReportApiTests(TestCase):
    def setUp(self):
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.other_instructor = User.objects.create_user(
            username='prof2', email='prof2@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.alice = User.objects.create_user(username='alice', email='alice@school.com', password='pw', name='Alice')
        self.bob = User.objects.create_user(username='bob', email='bob@school.com', password='pw', name='Bob')
        self.course = Course.objects.create(title='Algorithms', semester='2025-1', instructor=self.instructor)
        Enrollment.objects.create(course=self.course, student=self.alice)
        Enrollment.objects.create(course=self.course, student=self.bob)
        self.client = APIClient()

    def test_flagged_only_in_chronological_order(self):
        # created out of order on purpose
        weeks = [5, 1, 3, 2, 4]
        sessions = {w: ClassSession.objects.create(course=self.course, week=w, round=1) for w in weeks}
        for week, status in zip(range(1, 6), [3, 3, 1, 3, 3]):
            Attendance.objects.create(session=sessions[week], student=self.alice, status=status)
        for week in range(1, 6):
            Attendance.objects.create(session=sessions[week], student=self.bob, status=1)

        self.client.force_authenticate(self.instructor)
        response = self.client.get('/reports/risk', {'courseId': self.course.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual([s['week'] for s in response.data['sessionsMeta']], [1, 2, 3, 4, 5])
        row = response.data['list'][0]
        self.assertEqual(row['student']['id'], self.alice.pk)
        self.assertEqual(row['streak']['maxAbsentStreak'], 2)
        self.assertEqual(response.data['filter']['absentStreakMin'], 2)

    def test_no_sessions(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.get('/reports/risk', {'courseId': self.course.pk})
        self.assertEqual(response.data['sessionsCount'], 0)
        self.assertEqual(response.data['list'], [])

    def test_guards(self):
        self.client.force_authenticate(self.other_instructor)
        self.assertEqual(self.client.get('/reports/risk', {'courseId': self.course.pk}).status_code, 403)
        self.assertEqual(self.client.get('/reports/risk').status_code, 400)
        self.client.force_authenticate(self.alice)
        self.assertEqual(self.client.get('/reports/risk', {'courseId': self.course.pk}).status_code, 403)
