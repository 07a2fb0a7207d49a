from django.urls import path

from announcements import views

urlpatterns = [
    path('announcements', views.AnnouncementListView.as_view(), name='announcement-list'),
    path('announcements/<int:announcement_id>', views.AnnouncementDetailView.as_view(), name='announcement-detail'),
    path('announcements/<int:announcement_id>/read', views.AnnouncementReadView.as_view(), name='announcement-read'),
    path('courses/<int:course_id>/announcements', views.CourseAnnouncementCreateView.as_view(),
         name='course-announcement-create'),
]
