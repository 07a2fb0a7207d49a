from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsInstructorOrAdmin
from audit.models import AuditLog
from audit.serializers import AuditLogSerializer, AuditQuerySerializer


class AuditLogListView(APIView):
    """Raw audit trail, newest first."""
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request):
        params = AuditQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        qs = AuditLog.objects.all()
        if params.validated_data.get('targetType'):
            qs = qs.filter(target_type=params.validated_data['targetType'])
        if params.validated_data.get('targetId'):
            qs = qs.filter(target_id=params.validated_data['targetId'])
        data = AuditLogSerializer(qs.order_by('-id'), many=True).data
        return Response({'count': len(data), 'list': data})
