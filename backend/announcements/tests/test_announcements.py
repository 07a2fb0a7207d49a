from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from announcements.models import Announcement, AnnouncementRead
from courses.models import Course, Enrollment
from notifications.models import Notification, NotificationType


class AnnouncementApiTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            username='admin', email='admin@school.com', password='pw', role=User.Role.ADMIN)
        self.instructor = User.objects.create_user(
            username='prof', email='prof@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.other_instructor = User.objects.create_user(
            username='prof2', email='prof2@school.com', password='pw', role=User.Role.INSTRUCTOR)
        self.student = User.objects.create_user(username='stu', email='stu@school.com', password='pw')
        self.outsider = User.objects.create_user(username='out', email='out@school.com', password='pw')

        self.course = Course.objects.create(title='Databases', semester='2025-1', instructor=self.instructor)
        self.other_course = Course.objects.create(title='Networks', semester='2025-1', instructor=self.other_instructor)
        Enrollment.objects.create(course=self.course, student=self.student)
        self.client = APIClient()

    def test_course_announcement_notifies_enrolled_students(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post(
            f'/courses/{self.course.pk}/announcements', {'title': 'Quiz', 'content': 'Friday'}, format='json')
        self.assertEqual(response.status_code, 201)
        announcement_id = response.data['announcement']['id']

        note = Notification.objects.get(user=self.student)
        self.assertEqual(note.type, NotificationType.ANNOUNCEMENT_POSTED)
        self.assertEqual(note.message, 'Databases: Quiz')
        self.assertEqual(note.link_url, f'/announcements/{announcement_id}')
        self.assertFalse(Notification.objects.filter(user=self.outsider).exists())

    def test_other_instructor_cannot_post_to_course(self):
        self.client.force_authenticate(self.other_instructor)
        response = self.client.post(
            f'/courses/{self.course.pk}/announcements', {'title': 'x', 'content': 'y'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_global_post_requires_admin(self):
        self.client.force_authenticate(self.instructor)
        response = self.client.post('/announcements', {'title': 'x', 'content': 'y'}, format='json')
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post('/announcements', {'title': 'Holiday', 'content': 'No class'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['announcement']['scope'], 'GLOBAL')
        self.assertIsNone(response.data['announcement']['courseId'])

    def test_list_is_scoped_and_pinned_first(self):
        Announcement.objects.create(scope='GLOBAL', author=self.admin, title='global', content='c')
        Announcement.objects.create(course=self.course, author=self.instructor, title='mine', content='c', pinned=True)
        Announcement.objects.create(course=self.other_course, author=self.other_instructor, title='other', content='c')

        self.client.force_authenticate(self.student)
        response = self.client.get('/announcements')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([a['title'] for a in response.data['list']], ['mine', 'global'])
        self.assertFalse(response.data['list'][0]['isRead'])

        self.client.force_authenticate(self.admin)
        response = self.client.get('/announcements')
        self.assertEqual(response.data['count'], 3)

    def test_detail_forbidden_for_non_member(self):
        announcement = Announcement.objects.create(course=self.course, author=self.instructor, title='t', content='c')
        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(f'/announcements/{announcement.pk}').status_code, 403)
        self.assertEqual(self.client.get('/announcements/999').status_code, 404)

    def test_mark_read_is_idempotent(self):
        announcement = Announcement.objects.create(course=self.course, author=self.instructor, title='t', content='c')
        self.client.force_authenticate(self.student)
        first = self.client.post(f'/announcements/{announcement.pk}/read')
        second = self.client.post(f'/announcements/{announcement.pk}/read')
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.data['readAt'], second.data['readAt'])
        self.assertEqual(AnnouncementRead.objects.filter(user=self.student).count(), 1)

        response = self.client.get('/announcements')
        self.assertTrue(response.data['list'][0]['isRead'])
