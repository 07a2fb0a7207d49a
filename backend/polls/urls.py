from django.urls import path

from polls import views

urlpatterns = [
    path('courses/<int:course_id>/free-time-polls', views.CoursePollsView.as_view(), name='course-polls'),
    path('free-time-polls/<int:poll_id>', views.PollDetailView.as_view(), name='poll-detail'),
    path('free-time-polls/<int:poll_id>/vote', views.PollVoteView.as_view(), name='poll-vote'),
    path('free-time-polls/<int:poll_id>/close', views.PollCloseView.as_view(), name='poll-close'),
    path('free-time-polls/<int:poll_id>/results', views.PollResultsView.as_view(), name='poll-results'),
]
