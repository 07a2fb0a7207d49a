from django.urls import path

from audit import views

urlpatterns = [
    path('audits', views.AuditLogListView.as_view(), name='audit-list'),
]
