from django.conf import settings
from django.db import models


class Announcement(models.Model):
    class Scope(models.TextChoices):
        GLOBAL = 'GLOBAL', 'Global'
        COURSE = 'COURSE', 'Course'

    scope = models.CharField(max_length=10, choices=Scope.choices, default=Scope.COURSE, db_index=True)
    course = models.ForeignKey(
        'courses.Course',
        on_delete=models.CASCADE,
        related_name='announcements',
        null=True,
        blank=True,
    )
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='announcements')
    title = models.CharField(max_length=200)
    content = models.TextField()
    pinned = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-pinned', '-created_at')

    def __str__(self):
        return f'[{self.scope}] {self.title}'


class AnnouncementRead(models.Model):
    announcement = models.ForeignKey(Announcement, on_delete=models.CASCADE, related_name='reads')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='announcement_reads')
    read_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('announcement', 'user')
