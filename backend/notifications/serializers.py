from rest_framework import serializers

from notifications.models import Notification, PersonalMessage


class NotificationSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    linkUrl = serializers.CharField(source='link_url', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    readAt = serializers.DateTimeField(source='read_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ('id', 'userId', 'type', 'title', 'message', 'linkUrl', 'isRead', 'readAt', 'createdAt')


class BulkReadSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False, allow_empty=True)
    all = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if not attrs.get('all') and not attrs.get('ids'):
            raise serializers.ValidationError('Send a non-empty ids list or all=true')
        return attrs


class PersonalMessageSerializer(serializers.ModelSerializer):
    senderId = serializers.IntegerField(source='sender_id', read_only=True)
    receiverId = serializers.IntegerField(source='receiver_id', read_only=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    readAt = serializers.DateTimeField(source='read_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = PersonalMessage
        fields = ('id', 'senderId', 'receiverId', 'title', 'content', 'isRead', 'readAt', 'createdAt')


class MessageCreateSerializer(serializers.Serializer):
    receiverId = serializers.IntegerField()
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    content = serializers.CharField()


class AbsenceWarningRunSerializer(serializers.Serializer):
    courseId = serializers.IntegerField(required=False, allow_null=True)
    semester = serializers.CharField(max_length=20, required=False, allow_blank=True)
    department = serializers.CharField(max_length=50, required=False, allow_blank=True)
    dryRun = serializers.BooleanField(required=False, default=False)


class NotificationQuerySerializer(serializers.Serializer):
    unreadOnly = serializers.BooleanField(required=False, default=False)
    limit = serializers.IntegerField(required=False, default=20)
    offset = serializers.IntegerField(required=False, default=0)

    def validate(self, attrs):
        # out of range paging values are clamped, not rejected
        attrs['limit'] = min(100, max(1, attrs['limit']))
        attrs['offset'] = max(0, attrs['offset'])
        return attrs
