from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import User


class UserSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = ('id', 'email', 'name', 'role', 'department', 'createdAt')


class SessionUserSerializer(serializers.Serializer):
    """What the login and `/auth/me` endpoints expose about the caller."""
    id = serializers.IntegerField(read_only=True)
    role = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    department = serializers.CharField(read_only=True, allow_null=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


class EmailTokenObtainPairSerializer(serializers.Serializer):
    """Authenticate with `email` + `password` and return a JWT pair.

    The role is added as a claim so token clients do not need a `/auth/me`
    round trip.
    """
    email = serializers.CharField(write_only=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        user = User.objects.filter(email__iexact=attrs['email'].strip()).first()
        # generic error message to avoid leaking which part failed
        if user is None or not user.check_password(attrs['password']):
            raise serializers.ValidationError('Unable to log in with provided credentials.')
        if not user.is_active:
            raise serializers.ValidationError('User account is disabled.')

        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role
        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=100)
    password = serializers.CharField(min_length=4, trim_whitespace=False)
    name = serializers.CharField(max_length=50)
    role = serializers.ChoiceField(choices=User.Role.choices)
    department = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=100, required=False)
    password = serializers.CharField(min_length=4, required=False, trim_whitespace=False)
    name = serializers.CharField(max_length=50, required=False)
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)
    department = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices)


class UserQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)
    department = serializers.CharField(required=False, allow_blank=True)
    q = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, default=1)
    limit = serializers.IntegerField(required=False, default=20)

    def validate(self, attrs):
        attrs['page'] = max(1, attrs['page'])
        attrs['limit'] = min(100, max(1, attrs['limit']))
        return attrs
