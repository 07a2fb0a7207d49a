from rest_framework import serializers

from polls.models import FreeTimePoll, FreeTimePollOption
from polls.services.poll_service import OptionInput


class PollOptionSerializer(serializers.ModelSerializer):
    pollId = serializers.IntegerField(source='poll_id', read_only=True)
    startAt = serializers.DateTimeField(source='start_at', read_only=True)
    endAt = serializers.DateTimeField(source='end_at', read_only=True)

    class Meta:
        model = FreeTimePollOption
        fields = ('id', 'pollId', 'label', 'startAt', 'endAt')


class PollSerializer(serializers.ModelSerializer):
    courseId = serializers.IntegerField(source='course_id', read_only=True)
    creatorId = serializers.IntegerField(source='creator_id', read_only=True)
    deadlineAt = serializers.DateTimeField(source='deadline_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = FreeTimePoll
        fields = ('id', 'courseId', 'creatorId', 'title', 'description', 'status', 'deadlineAt',
                  'createdAt', 'updatedAt')


class PollDetailSerializer(PollSerializer):
    options = PollOptionSerializer(many=True, read_only=True)

    class Meta(PollSerializer.Meta):
        fields = PollSerializer.Meta.fields + ('options',)


class OptionInputSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=100, allow_blank=True)
    startAt = serializers.DateTimeField(required=False, allow_null=True)
    endAt = serializers.DateTimeField(required=False, allow_null=True)


class PollCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    deadlineAt = serializers.DateTimeField(required=False, allow_null=True)
    options = OptionInputSerializer(many=True)

    def option_inputs(self):
        return [
            OptionInput(label=o['label'], start_at=o.get('startAt'), end_at=o.get('endAt'))
            for o in self.validated_data['options']
        ]


class VoteSerializer(serializers.Serializer):
    optionId = serializers.IntegerField()
