from django.urls import path

from reports import views

urlpatterns = [
    path('reports/attendance', views.AttendanceReportView.as_view(), name='report-attendance'),
    path('reports/risk', views.RiskReportView.as_view(), name='report-risk'),
    path('reports/excuses', views.ExcuseReportView.as_view(), name='report-excuses'),
    path('reports/audits', views.AuditReportView.as_view(), name='report-audits'),
]
