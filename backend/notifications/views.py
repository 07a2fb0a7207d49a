from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsInstructorOrAdmin
from notifications.models import Notification, PersonalMessage
from notifications.serializers import (
    AbsenceWarningRunSerializer,
    BulkReadSerializer,
    MessageCreateSerializer,
    NotificationQuerySerializer,
    NotificationSerializer,
    PersonalMessageSerializer,
)
from notifications.services import absence_warnings, messaging


class MyNotificationListView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        params = NotificationQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        limit = params.validated_data['limit']
        offset = params.validated_data['offset']

        qs = Notification.objects.filter(user=request.user)
        if params.validated_data['unreadOnly']:
            qs = qs.filter(is_read=False)
        count = qs.count()
        rows = qs.order_by('is_read', '-created_at', '-id')[offset:offset + limit]
        return Response({
            'count': count,
            'limit': limit,
            'offset': offset,
            'list': NotificationSerializer(rows, many=True).data,
        })


class NotificationReadView(APIView):
    permission_classes = (IsAuthenticated,)

    def patch(self, request, notification_id: int):
        notification = Notification.objects.filter(pk=notification_id).first()
        if notification is None:
            raise NotFound('Notification not found')
        if notification.user_id != request.user.pk:
            raise PermissionDenied('You can only read your own notifications')
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=['is_read', 'read_at', 'updated_at'])
        return Response({'ok': True, 'notification': NotificationSerializer(notification).data})


class NotificationBulkReadView(APIView):
    permission_classes = (IsAuthenticated,)

    def patch(self, request):
        serializer = BulkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        qs = Notification.objects.filter(user=request.user, is_read=False)
        if not serializer.validated_data.get('all'):
            qs = qs.filter(pk__in=serializer.validated_data['ids'])
        updated = qs.update(is_read=True, read_at=timezone.now())
        return Response({'ok': True, 'updated': updated})


class MessageCreateView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = messaging.send_message(request.user, data['receiverId'], data['content'], data.get('title', ''))
        return Response({'message': PersonalMessageSerializer(message).data}, status=status.HTTP_201_CREATED)


class InboxView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        qs = PersonalMessage.objects.filter(receiver=request.user).order_by('-created_at')
        data = PersonalMessageSerializer(qs, many=True).data
        return Response({'count': len(data), 'list': data})


class SentView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        qs = PersonalMessage.objects.filter(sender=request.user).order_by('-created_at')
        data = PersonalMessageSerializer(qs, many=True).data
        return Response({'count': len(data), 'list': data})


class MessageReadView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, message_id: int):
        message = messaging.mark_read(message_id, request.user)
        return Response({'ok': True, 'message': PersonalMessageSerializer(message).data})


class AbsenceWarningRunView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def post(self, request):
        serializer = AbsenceWarningRunSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = absence_warnings.run_absence_warnings(
            actor=request.user,
            course_id=data.get('courseId'),
            semester=data.get('semester') or None,
            department=data.get('department') or None,
            dry_run=data['dryRun'],
        )
        return Response(result)
