from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import User
from attendance.models import ClassSession
from audit.models import AuditLog
from courses.models import Course, Enrollment


@override_settings(DEFAULT_SEMESTER='2025-1', DEFAULT_DEPARTMENT='CS')
class CourseAdminTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            username='admin', email='admin@school.com', password='pw', role=User.Role.ADMIN)
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.student = User.objects.create_user(username='stu', email='stu@school.com', password='pw')
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_create_course_writes_audit(self):
        resp = self.client.post('/admin/courses', {
            'title': 'Compilers', 'semester': '2025-1', 'department': 'CS', 'instructorId': self.instructor.pk,
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        course_id = resp.data['course']['id']
        self.assertEqual(resp.data['course']['instructorId'], self.instructor.pk)
        entry = AuditLog.objects.get(target_type=AuditLog.TargetType.COURSE, target_id=course_id)
        self.assertEqual(entry.action, AuditLog.Action.CREATE)

    def test_create_course_rejects_student_instructor(self):
        resp = self.client.post('/admin/courses', {
            'title': 'X', 'semester': '2025-1', 'instructorId': self.student.pk,
        }, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(self.instructor)
        resp = self.client.post('/admin/courses', {'title': 'X', 'semester': '2025-1',
                                                   'instructorId': self.instructor.pk}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_enroll_duplicate_conflict(self):
        course = Course.objects.create(title='OS', semester='2025-1', department='CS', instructor=self.instructor)
        payload = {'courseId': course.pk, 'studentId': self.student.pk}
        self.assertEqual(self.client.post('/admin/enroll', payload, format='json').status_code, 201)
        resp = self.client.post('/admin/enroll', payload, format='json')
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(Enrollment.objects.filter(course=course).count(), 1)

    def test_delete_with_sessions_conflicts(self):
        course = Course.objects.create(title='OS', semester='2025-1', department='CS', instructor=self.instructor)
        ClassSession.objects.create(course=course, week=1)
        resp = self.client.delete(f'/admin/courses/{course.pk}')
        self.assertEqual(resp.status_code, 409)
        self.assertTrue(Course.objects.filter(pk=course.pk).exists())

    def test_delete_empty_course(self):
        course = Course.objects.create(title='OS', semester='2025-1', department='CS', instructor=self.instructor)
        resp = self.client.delete(f'/admin/courses/{course.pk}')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Course.objects.filter(pk=course.pk).exists())
        self.assertTrue(AuditLog.objects.filter(target_type='COURSE', target_id=course.pk, action='DELETE').exists())

    def test_course_list_scoped_by_role(self):
        mine = Course.objects.create(title='A', semester='2025-1', department='CS', instructor=self.instructor)
        Course.objects.create(title='B', semester='2025-1', department='CS', instructor=self.admin)
        Enrollment.objects.create(course=mine, student=self.student)

        resp = self.client.get('/courses')
        self.assertEqual(len(resp.data['list']), 2)
        self.assertEqual(resp.data['filter'], {'semester': '2025-1', 'department': 'CS'})

        self.client.force_authenticate(self.instructor)
        resp = self.client.get('/courses')
        self.assertEqual([c['id'] for c in resp.data['list']], [mine.pk])

        self.client.force_authenticate(self.student)
        resp = self.client.get('/courses')
        self.assertEqual([c['id'] for c in resp.data['list']], [mine.pk])

    def test_unauthenticated_is_401(self):
        resp = APIClient().get('/courses')
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data['status_code'], 401)
