from django.urls import path

from courses import views

urlpatterns = [
    path('courses', views.CourseListView.as_view(), name='course-list'),
    path('courses/<int:course_id>/enrollments', views.CourseEnrollmentListView.as_view(), name='course-enrollments'),
    path('courses/<int:course_id>/policy', views.CoursePolicyView.as_view(), name='course-policy'),
    path('courses/<int:course_id>/score/attendance', views.CourseScoreView.as_view(), name='course-score'),
    path('courses/<int:course_id>/score/attendance/export', views.CourseScoreExportView.as_view(), name='course-score-export'),
    path('admin/courses', views.AdminCourseCreateView.as_view(), name='admin-course-create'),
    path('admin/courses/<int:course_id>', views.AdminCourseDetailView.as_view(), name='admin-course-detail'),
    path('admin/enroll', views.AdminEnrollView.as_view(), name='admin-enroll'),
]
