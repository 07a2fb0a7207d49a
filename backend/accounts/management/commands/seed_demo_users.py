from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import User

DEMO_USERS = (
    ('admin@school.com', 'Admin', User.Role.ADMIN, None),
    ('prof@school.com', 'Professor Kim', User.Role.INSTRUCTOR, 'Software'),
    ('student1@school.com', 'Student One', User.Role.STUDENT, 'Software'),
    ('student2@school.com', 'Student Two', User.Role.STUDENT, 'Software'),
)


class Command(BaseCommand):
    help = 'Create demo admin, instructor and student accounts (idempotent)'

    def add_arguments(self, parser):
        parser.add_argument('--password', dest='password', default='1234', help='Password for every demo user')

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        for email, name, role, department in DEMO_USERS:
            if User.objects.filter(email__iexact=email).exists():
                self.stdout.write(f'exists: {email}')
                continue
            User.objects.create_user(
                username=email, email=email, password=options['password'],
                name=name, role=role, department=department,
                is_staff=role == User.Role.ADMIN, is_superuser=role == User.Role.ADMIN,
            )
            created += 1
            self.stdout.write(self.style.SUCCESS(f'created: {email} ({role})'))
        self.stdout.write(self.style.SUCCESS(f'Done. created={created}'))
