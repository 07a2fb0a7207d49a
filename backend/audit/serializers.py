from rest_framework import serializers

from audit.models import AuditLog
from audit.services.audit_service import normalize_target_type


class AuditLogSerializer(serializers.ModelSerializer):
    targetType = serializers.CharField(source='target_type', read_only=True)
    targetId = serializers.IntegerField(source='target_id', read_only=True)
    actorId = serializers.IntegerField(source='actor_id', read_only=True)
    beforeValue = serializers.JSONField(source='before_value', read_only=True)
    afterValue = serializers.JSONField(source='after_value', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = AuditLog
        fields = ('id', 'targetType', 'targetId', 'action', 'actorId', 'beforeValue', 'afterValue', 'createdAt')


class AuditQuerySerializer(serializers.Serializer):
    targetType = serializers.CharField(required=False, allow_blank=True)
    targetId = serializers.IntegerField(required=False, min_value=1)

    def validate_targetType(self, value):
        if not value:
            return None
        target_type = normalize_target_type(value)
        if target_type is None:
            raise serializers.ValidationError(f'unknown targetType {value}')
        return target_type
