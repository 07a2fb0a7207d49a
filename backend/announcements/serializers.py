from rest_framework import serializers

from announcements.models import Announcement


class AuthorSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    email = serializers.EmailField()


class AnnouncementSerializer(serializers.ModelSerializer):
    courseId = serializers.IntegerField(source='course_id', read_only=True)
    courseTitle = serializers.CharField(source='course.title', read_only=True, default=None)
    authorId = serializers.IntegerField(source='author_id', read_only=True)
    author = AuthorSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Announcement
        fields = ('id', 'scope', 'courseId', 'courseTitle', 'authorId', 'author', 'title', 'content',
                  'pinned', 'createdAt', 'updatedAt')

    def to_representation(self, instance):
        data = super().to_representation(instance)
        reads = self.context.get('reads')
        if reads is not None:
            read_at = reads.get(instance.pk)
            data['isRead'] = instance.pk in reads
            data['readAt'] = serializers.DateTimeField().to_representation(read_at) if read_at else None
        return data


class AnnouncementCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    content = serializers.CharField()
    pinned = serializers.BooleanField(required=False, default=False)
    notify = serializers.BooleanField(required=False, default=False)
