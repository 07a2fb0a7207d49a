from django.urls import path

from excuses import views

urlpatterns = [
    path('sessions/<int:session_id>/excuses', views.SessionExcuseCreateView.as_view(), name='session-excuse-create'),
    path('excuses', views.ExcuseListView.as_view(), name='excuse-list'),
    path('excuses/<int:excuse_id>', views.ExcuseDetailView.as_view(), name='excuse-detail'),
    path('me/excuses', views.MyExcuseListView.as_view(), name='my-excuses'),
    path('attendance/<int:attendance_id>/appeals', views.AttendanceAppealCreateView.as_view(), name='attendance-appeal-create'),
    path('appeals', views.AppealListView.as_view(), name='appeal-list'),
    path('appeals/<int:appeal_id>', views.AppealDetailView.as_view(), name='appeal-detail'),
    path('me/appeals', views.MyAppealListView.as_view(), name='my-appeals'),
]
