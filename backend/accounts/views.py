import logging

from django.conf import settings
from django.contrib.auth import login, logout
from rest_framework import permissions, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from accounts.models import User
from accounts.permissions import IsAdminRole
from accounts.serializers import (
    EmailTokenObtainPairSerializer,
    LoginSerializer,
    RoleChangeSerializer,
    SessionUserSerializer,
    UserCreateSerializer,
    UserQuerySerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from accounts.services import user_admin

log = logging.getLogger(__name__)


class LoginView(APIView):
    """Cookie-session login with email and password."""
    permission_classes = (permissions.AllowAny,)

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email'].strip()
        user = User.objects.filter(email__iexact=email).first()
        if user is None or not user.is_active or not user.check_password(serializer.validated_data['password']):
            log.info('%s', {'event': 'login_failed', 'email': email})
            raise AuthenticationFailed('Login failed')

        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        log.info('%s', {'event': 'login', 'user_id': user.pk, 'role': user.role})
        return Response({'message': 'Login successful', 'user': SessionUserSerializer(user).data})


class LogoutView(APIView):
    permission_classes = (permissions.AllowAny,)

    def post(self, request):
        logout(request)
        response = Response({'message': 'Logged out'})
        response.delete_cookie(settings.SESSION_COOKIE_NAME)
        return response


class MeView(APIView):
    permission_classes = (permissions.IsAuthenticated,)

    def get(self, request):
        return Response({'user': SessionUserSerializer(request.user).data})


class EmailTokenObtainPairView(TokenObtainPairView):
    serializer_class = EmailTokenObtainPairSerializer


class AdminUserListView(APIView):
    permission_classes = (IsAdminRole,)

    def get(self, request):
        params = UserQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        qs = user_admin.search_users(data.get('role'), data.get('department'), data.get('q'))
        offset = (data['page'] - 1) * data['limit']
        rows = qs[offset:offset + data['limit']]
        return Response({
            'page': data['page'],
            'limit': data['limit'],
            'total': qs.count(),
            'list': UserSerializer(rows, many=True).data,
        })

    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = user_admin.create_user(request.user, serializer.validated_data)
        return Response({'user': UserSerializer(user).data}, status=status.HTTP_201_CREATED)


class AdminUserDetailView(APIView):
    permission_classes = (IsAdminRole,)

    def get(self, request, user_id: int):
        return Response({'user': UserSerializer(user_admin.get_user(user_id)).data})

    def patch(self, request, user_id: int):
        user = user_admin.get_user(user_id)
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = user_admin.update_user(user, request.user, serializer.validated_data)
        return Response({'user': UserSerializer(user).data})

    def delete(self, request, user_id: int):
        user_admin.delete_user(user_admin.get_user(user_id), request.user)
        return Response({'ok': True})


class AdminUserRoleView(APIView):
    permission_classes = (IsAdminRole,)

    def patch(self, request, user_id: int):
        user = user_admin.get_user(user_id)
        serializer = RoleChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = user_admin.change_role(user, request.user, serializer.validated_data['role'])
        return Response({'user': UserSerializer(user).data})


class UserListView(APIView):
    permission_classes = (IsAdminRole,)

    def get(self, request):
        data = UserSerializer(User.objects.order_by('id'), many=True).data
        return Response({'count': len(data), 'list': data})
