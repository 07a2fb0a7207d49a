from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsInstructorOrAdmin, IsStudent
from attendance.services import recorder
from excuses.models import Appeal, ExcuseRequest
from excuses.serializers import (
    AppealCreateSerializer,
    AppealResolveSerializer,
    AppealSerializer,
    ExcuseCreateSerializer,
    ExcuseRequestSerializer,
    ExcuseResolveSerializer,
    ExcuseWithSessionSerializer,
)
from excuses.services import appeal_workflow, excuse_workflow


class SessionExcuseCreateView(APIView):
    permission_classes = (IsStudent,)

    def post(self, request, session_id: int):
        session = recorder.get_session(session_id)
        serializer = ExcuseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        excuse = excuse_workflow.create_excuse(
            session, request.user,
            reason_code=data.get('reasonCode'),
            reason_text=data.get('reasonText') or '',
            file_path=data.get('filePath'),
        )
        return Response({'excuse': ExcuseRequestSerializer(excuse).data}, status=status.HTTP_201_CREATED)


class ExcuseListView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request):
        qs = excuse_workflow.list_excuses(
            request.user, request.query_params.get('status'), request.query_params.get('courseId'),
        )
        data = ExcuseWithSessionSerializer(qs, many=True, context={'request': request}).data
        return Response({'count': len(data), 'list': data})


class ExcuseDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, excuse_id: int):
        excuse = excuse_workflow.get_excuse_for(request.user, excuse_id)
        return Response({'excuse': ExcuseWithSessionSerializer(excuse, context={'request': request}).data})

    def patch(self, request, excuse_id: int):
        if not IsInstructorOrAdmin().has_permission(request, self):
            self.permission_denied(request, message=IsInstructorOrAdmin.message)
        serializer = ExcuseResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = excuse_workflow.resolve_excuse(
            excuse_id, request.user, serializer.validated_data['status'],
            reply_text=serializer.validated_data.get('replyText'),
        )
        return Response({
            'ok': True,
            'excuse': ExcuseRequestSerializer(result['excuse']).data,
            'attendanceChanged': result['attendance_changed'],
        })


class MyExcuseListView(APIView):
    permission_classes = (IsStudent,)

    def get(self, request):
        qs = ExcuseRequest.objects.filter(student=request.user).select_related('session').order_by('-created_at')
        data = ExcuseWithSessionSerializer(qs, many=True, context={'request': request}).data
        return Response({'count': len(data), 'list': data})


class AttendanceAppealCreateView(APIView):
    permission_classes = (IsStudent,)

    def post(self, request, attendance_id: int):
        serializer = AppealCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        appeal = appeal_workflow.create_appeal(
            attendance_id, request.user,
            serializer.validated_data['message'],
            serializer.validated_data.get('requestedStatus'),
        )
        return Response({'appeal': AppealSerializer(appeal).data}, status=status.HTTP_201_CREATED)


class AppealListView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request):
        qs = appeal_workflow.list_appeals(
            request.user, request.query_params.get('status'), request.query_params.get('courseId'),
        )
        data = AppealSerializer(qs, many=True).data
        return Response({'count': len(data), 'list': data})


class AppealDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, appeal_id: int):
        appeal = appeal_workflow.get_appeal_for(request.user, appeal_id)
        return Response({'appeal': AppealSerializer(appeal).data})

    def patch(self, request, appeal_id: int):
        if not IsInstructorOrAdmin().has_permission(request, self):
            self.permission_denied(request, message=IsInstructorOrAdmin.message)
        serializer = AppealResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = appeal_workflow.resolve_appeal(
            appeal_id, request.user, data['status'],
            reply_text=data.get('replyText'),
            apply_attendance_status=data.get('applyAttendanceStatus'),
        )
        return Response({
            'ok': True,
            'appeal': AppealSerializer(result['appeal']).data,
            'attendanceChanged': result['attendance_changed'],
            'newAttendanceStatus': result['new_attendance_status'],
        })


class MyAppealListView(APIView):
    permission_classes = (IsStudent,)

    def get(self, request):
        qs = Appeal.objects.filter(student=request.user).order_by('-created_at')
        data = AppealSerializer(qs, many=True).data
        return Response({'count': len(data), 'list': data})
