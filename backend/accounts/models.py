from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """
    Base user model.
    Every administrator, instructor and student is a User; what they may do
    is decided by the single `role` field.
    """

    class Role(models.TextChoices):
        ADMIN = 'ADMIN', 'Admin'
        INSTRUCTOR = 'INSTRUCTOR', 'Instructor'
        STUDENT = 'STUDENT', 'Student'

    email = models.EmailField('email address', max_length=100, unique=True)
    name = models.CharField(max_length=50, blank=True, default='')
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT, db_index=True)
    department = models.CharField(max_length=50, null=True, blank=True)

    class Meta:
        ordering = ('id',)

    def __str__(self):
        return f'{self.name or self.username} <{self.email}>'

    @property
    def is_admin_role(self) -> bool:
        return self.role == self.Role.ADMIN

    @property
    def is_instructor(self) -> bool:
        return self.role == self.Role.INSTRUCTOR

    @property
    def is_student(self) -> bool:
        return self.role == self.Role.STUDENT
