from django.core.management.base import BaseCommand

from notifications.services import absence_warnings


class Command(BaseCommand):
    help = 'Create absence warning notifications for students over their course thresholds.'

    def add_arguments(self, parser):
        parser.add_argument('--course', type=int, help='Only check this course id')
        parser.add_argument('--semester', type=str, help='Semester filter (defaults to DEFAULT_SEMESTER)')
        parser.add_argument('--department', type=str, help='Department filter (defaults to DEFAULT_DEPARTMENT)')
        parser.add_argument('--dry-run', action='store_true', help='Report counts without writing notifications')

    def handle(self, *args, **options):
        result = absence_warnings.run_absence_warnings(
            actor=None,
            course_id=options.get('course'),
            semester=options.get('semester'),
            department=options.get('department'),
            dry_run=options.get('dry_run', False),
        )
        if not result.get('checkedCourses'):
            self.stdout.write(self.style.WARNING('No matching courses.'))
            return

        for summary in result['perCourseSummary']:
            self.stdout.write(
                f"Course {summary['courseId']} ({summary['courseTitle']}): "
                f"students={summary['students']} created={summary['created']} skipped={summary['skipped']}"
            )
        prefix = '[dry-run] ' if result.get('dryRun') else ''
        self.stdout.write(self.style.SUCCESS(
            f"{prefix}Done. courses={result['checkedCourses']} students={result['checkedStudents']} "
            f"created={result['created']} skipped={result['skipped']}"
        ))
