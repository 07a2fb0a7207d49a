from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from accounts import views

urlpatterns = [
    path('auth/login', views.LoginView.as_view(), name='login'),
    path('auth/logout', views.LogoutView.as_view(), name='logout'),
    path('auth/me', views.MeView.as_view(), name='me'),
    path('auth/token', views.EmailTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh', TokenRefreshView.as_view(), name='token_refresh'),
    path('admin/users', views.AdminUserListView.as_view(), name='admin-user-list'),
    path('admin/users/<int:user_id>', views.AdminUserDetailView.as_view(), name='admin-user-detail'),
    path('admin/users/<int:user_id>/role', views.AdminUserRoleView.as_view(), name='admin-user-role'),
    path('users', views.UserListView.as_view(), name='user-list'),
]
