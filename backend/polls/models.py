from django.conf import settings
from django.db import models


class FreeTimePoll(models.Model):
    """Course poll where students vote for a free time slot (e.g. a makeup class)."""

    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        CLOSED = 'CLOSED', 'Closed'

    course = models.ForeignKey('courses.Course', on_delete=models.CASCADE, related_name='free_time_polls')
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='created_polls')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    deadline_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-created_at',)

    def __str__(self):
        return self.title


class FreeTimePollOption(models.Model):
    poll = models.ForeignKey(FreeTimePoll, on_delete=models.CASCADE, related_name='options')
    label = models.CharField(max_length=100)
    start_at = models.DateTimeField(null=True, blank=True)
    end_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ('id',)

    def __str__(self):
        return self.label


class FreeTimePollVote(models.Model):
    poll = models.ForeignKey(FreeTimePoll, on_delete=models.CASCADE, related_name='votes')
    option = models.ForeignKey(FreeTimePollOption, on_delete=models.CASCADE, related_name='votes')
    voter = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='poll_votes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('poll', 'voter')
