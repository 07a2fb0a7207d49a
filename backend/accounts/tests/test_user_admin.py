from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from audit.models import AuditLog
from courses.models import Course


class AdminUserApiTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            username='admin', email='admin@school.com', password='pw', role=User.Role.ADMIN)
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_create_user_audited_without_password(self):
        response = self.client.post('/admin/users', {
            'email': 'New@School.com', 'password': 'pass1234', 'name': 'New', 'role': 'STUDENT',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['user']['email'], 'new@school.com')
        self.assertNotIn('password', response.data['user'])

        user = User.objects.get(email='new@school.com')
        self.assertTrue(user.check_password('pass1234'))
        log = AuditLog.objects.get(target_type='USER', target_id=user.pk)
        self.assertEqual(log.action, AuditLog.Action.CREATE)
        self.assertNotIn('password', log.after_value)

    def test_duplicate_email_conflict(self):
        response = self.client.post('/admin/users', {
            'email': 'prof@school.com', 'password': 'pass1234', 'name': 'Dup', 'role': 'STUDENT',
        }, format='json')
        self.assertEqual(response.status_code, 409)

        other = User.objects.create_user(username='x', email='x@school.com', password='pw')
        response = self.client.patch(f'/admin/users/{other.pk}', {'email': 'prof@school.com'}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_role_change_audited(self):
        student = User.objects.create_user(username='s', email='s@school.com', password='pw')
        response = self.client.patch(f'/admin/users/{student.pk}/role', {'role': 'INSTRUCTOR'}, format='json')
        self.assertEqual(response.status_code, 200)
        log = AuditLog.objects.get(target_type='USER', target_id=student.pk)
        self.assertEqual(log.action, AuditLog.Action.ROLE_CHANGE)
        self.assertEqual((log.before_value['role'], log.after_value['role']), ('STUDENT', 'INSTRUCTOR'))

        response = self.client.patch(f'/admin/users/{student.pk}/role', {'role': 'GOD'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_delete_rules(self):
        self.assertEqual(self.client.delete(f'/admin/users/{self.admin.pk}').status_code, 400)

        Course.objects.create(title='C', semester='2025-1', instructor=self.instructor)
        self.assertEqual(self.client.delete(f'/admin/users/{self.instructor.pk}').status_code, 409)

        student = User.objects.create_user(username='s', email='s@school.com', password='pw')
        response = self.client.delete(f'/admin/users/{student.pk}')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.filter(pk=student.pk).exists())
        self.assertTrue(AuditLog.objects.filter(target_type='USER', target_id=student.pk, action='DELETE').exists())

    def test_list_filters_and_paging(self):
        for i in range(3):
            User.objects.create_user(username=f's{i}', email=f's{i}@school.com', password='pw', name=f'Kim {i}')
        response = self.client.get('/admin/users', {'role': 'STUDENT', 'q': 'kim', 'limit': 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(len(response.data['list']), 2)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(self.instructor)
        self.assertEqual(self.client.get('/admin/users').status_code, 403)
        self.assertEqual(self.client.get('/users').status_code, 403)
