from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsInstructorOrAdmin, IsStudent
from courses.services import access
from polls.serializers import PollCreateSerializer, PollDetailSerializer, PollSerializer, VoteSerializer
from polls.services import poll_service


class CoursePollsView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, course_id: int):
        course = access.get_course(course_id)
        polls = poll_service.list_course_polls(request.user, course)
        data = PollSerializer(polls, many=True).data
        return Response({'count': len(data), 'list': data})

    def post(self, request, course_id: int):
        if not IsInstructorOrAdmin().has_permission(request, self):
            self.permission_denied(request, message=IsInstructorOrAdmin.message)
        course = access.get_course(course_id)
        serializer = PollCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        poll = poll_service.create_poll(
            course, request.user, data['title'], serializer.option_inputs(),
            description=data['description'], deadline_at=data.get('deadlineAt'),
        )
        return Response({'pollId': poll.pk}, status=status.HTTP_201_CREATED)


class PollDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, poll_id: int):
        poll = poll_service.get_poll_for(request.user, poll_id)
        return Response({'poll': PollDetailSerializer(poll).data})


class PollVoteView(APIView):
    permission_classes = (IsStudent,)

    def post(self, request, poll_id: int):
        serializer = VoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        poll_service.vote(poll_id, request.user, serializer.validated_data['optionId'])
        return Response({'ok': True})


class PollCloseView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def post(self, request, poll_id: int):
        poll = poll_service.close_poll(poll_id, request.user)
        return Response({'ok': True, 'poll': PollSerializer(poll).data})


class PollResultsView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, poll_id: int):
        poll = poll_service.get_poll_for(request.user, poll_id)
        return Response(poll_service.results(poll))
