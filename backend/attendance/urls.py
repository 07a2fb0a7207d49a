from django.urls import path

from attendance import views

urlpatterns = [
    path('courses/<int:course_id>/sessions', views.CourseSessionsView.as_view(), name='course-sessions'),
    path('courses/<int:course_id>/sessions/generate', views.GenerateSessionsView.as_view(), name='course-sessions-generate'),
    path('sessions/<int:session_id>', views.SessionDetailView.as_view(), name='session-detail'),
    path('sessions/<int:session_id>/open', views.SessionTransitionView.as_view(transition='open'), name='session-open'),
    path('sessions/<int:session_id>/pause', views.SessionTransitionView.as_view(transition='pause'), name='session-pause'),
    path('sessions/<int:session_id>/close', views.SessionTransitionView.as_view(transition='close'), name='session-close'),
    path('sessions/<int:session_id>/attend', views.CheckInView.as_view(), name='session-attend'),
    path('sessions/<int:session_id>/attendance/summary', views.SessionSummaryView.as_view(), name='session-summary'),
    path('sessions/<int:session_id>/rollcall', views.RollCallView.as_view(), name='session-rollcall'),
    path('attendance/<int:attendance_id>', views.AttendanceCorrectionView.as_view(), name='attendance-correct'),
    path('me/attendance', views.MyAttendanceView.as_view(), name='my-attendance'),
]
