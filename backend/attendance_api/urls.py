from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path

urlpatterns = [
    path('favicon.ico', lambda request: HttpResponse(status=204), name='favicon'),
    # API routes own the /admin/... prefix, so the Django admin lives elsewhere
    path('django-admin/', admin.site.urls),
    path('', include('accounts.urls')),
    path('', include('courses.urls')),
    path('', include('attendance.urls')),
    path('', include('excuses.urls')),
    path('', include('audit.urls')),
    path('', include('notifications.urls')),
    path('', include('announcements.urls')),
    path('', include('polls.urls')),
    path('', include('reports.urls')),
]
