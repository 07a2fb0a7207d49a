from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole, IsInstructorOrAdmin
from announcements.serializers import AnnouncementCreateSerializer, AnnouncementSerializer
from announcements.services import announcement_service
from courses.services import access


class AnnouncementListView(APIView):
    permission_classes = (IsAuthenticated,)

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdminRole()]
        return super().get_permissions()

    def get(self, request):
        announcements = list(announcement_service.visible_announcements(request.user))
        reads = announcement_service.read_map(request.user, [a.pk for a in announcements])
        data = AnnouncementSerializer(announcements, many=True, context={'reads': reads}).data
        return Response({'count': len(data), 'list': data})

    def post(self, request):
        serializer = AnnouncementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        announcement = announcement_service.create_global(
            request.user, data['title'], data['content'], pinned=data['pinned'], notify=data['notify'],
        )
        return Response({'announcement': AnnouncementSerializer(announcement).data}, status=status.HTTP_201_CREATED)


class CourseAnnouncementCreateView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def post(self, request, course_id: int):
        course = access.get_course(course_id)
        serializer = AnnouncementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        announcement = announcement_service.create_for_course(
            course, request.user, data['title'], data['content'], pinned=data['pinned'],
        )
        return Response({'announcement': AnnouncementSerializer(announcement).data}, status=status.HTTP_201_CREATED)


class AnnouncementDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, announcement_id: int):
        announcement = announcement_service.get_announcement_for(request.user, announcement_id)
        read_at = announcement_service.read_at_for(request.user, announcement)
        reads = {announcement.pk: read_at} if read_at else {}
        data = AnnouncementSerializer(announcement, context={'reads': reads}).data
        return Response({'announcement': data})


class AnnouncementReadView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request, announcement_id: int):
        row = announcement_service.mark_read(request.user, announcement_id)
        return Response({'ok': True, 'readAt': row.read_at})
