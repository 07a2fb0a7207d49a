from django.urls import path

from notifications import views

urlpatterns = [
    path('me/notifications', views.MyNotificationListView.as_view(), name='my-notifications'),
    path('me/notifications/read', views.NotificationBulkReadView.as_view(), name='my-notifications-read'),
    path('me/notifications/<int:notification_id>/read', views.NotificationReadView.as_view(), name='notification-read'),
    path('messages', views.MessageCreateView.as_view(), name='message-create'),
    path('messages/<int:message_id>/read', views.MessageReadView.as_view(), name='message-read'),
    path('me/messages/inbox', views.InboxView.as_view(), name='message-inbox'),
    path('me/messages/sent', views.SentView.as_view(), name='message-sent'),
    path('admin/absence-warnings/run', views.AbsenceWarningRunView.as_view(), name='absence-warnings-run'),
]
