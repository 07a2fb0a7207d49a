import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=100)),
                ('section', models.CharField(blank=True, max_length=20, null=True)),
                ('semester', models.CharField(db_index=True, max_length=20)),
                ('department', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('instructor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='taught_courses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('-id',),
            },
        ),
        migrations.CreateModel(
            name='Enrollment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='courses.course')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('id',),
                'unique_together': {('course', 'student')},
            },
        ),
        migrations.CreateModel(
            name='AttendancePolicy',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('late_to_absent', models.PositiveSmallIntegerField(default=3, validators=[django.core.validators.MinValueValidator(1)])),
                ('w_present', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=5)),
                ('w_late', models.DecimalField(decimal_places=2, default=Decimal('0.50'), max_digits=5)),
                ('w_absent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('w_excused', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=5)),
                ('max_score', models.PositiveIntegerField(default=20, validators=[django.core.validators.MinValueValidator(1)])),
                ('missing_as_absent', models.BooleanField(default=True)),
                ('warn_absences', models.PositiveSmallIntegerField(default=2)),
                ('danger_absences', models.PositiveSmallIntegerField(default=4)),
                ('fail_absences', models.PositiveSmallIntegerField(default=6)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='attendance_policy', to='courses.course')),
            ],
            options={
                'verbose_name_plural': 'attendance policies',
            },
        ),
    ]
