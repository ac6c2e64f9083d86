import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('schools', '0002_school_user_links'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Case',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('is_deleted', models.BooleanField(db_index=True, default=False, help_text='Soft delete flag. Set instead of deleting the row.')),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('case_number', models.CharField(editable=False, max_length=32, unique=True)),
                ('incident_date', models.DateField()),
                ('incident_time', models.CharField(max_length=5, validators=[django.core.validators.RegexValidator(message='Invalid time format (HH:MM)', regex='^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')])),
                ('violence_type', models.CharField(choices=[('PHYSICAL', 'Physical'), ('VERBAL', 'Verbal'), ('PSYCHOLOGICAL', 'Psychological'), ('SEXUAL', 'Sexual'), ('CYBERBULLYING', 'Cyberbullying'), ('DISCRIMINATION', 'Discrimination'), ('PROPERTY_DAMAGE', 'Property damage'), ('OTHER', 'Other')], max_length=20)),
                ('description', models.TextField(validators=[django.core.validators.MinLengthValidator(10)])),
                ('location', models.CharField(choices=[('CLASSROOM', 'Classroom'), ('HALLWAY', 'Hallway'), ('BATHROOM', 'Bathroom'), ('PLAYGROUND', 'Playground'), ('CAFETERIA', 'Cafeteria'), ('GYM', 'Gym'), ('PARKING', 'Parking'), ('BUS', 'Bus'), ('ONLINE', 'Online'), ('OTHER', 'Other')], max_length=20)),
                ('custom_location', models.CharField(blank=True, default='', max_length=255)),
                ('victim_is_anonymous', models.BooleanField(default=False)),
                ('victim_name', models.CharField(max_length=255)),
                ('victim_age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('victim_grade', models.CharField(blank=True, default='', max_length=50)),
                ('aggressor_name', models.CharField(max_length=255)),
                ('aggressor_description', models.TextField(blank=True, default='')),
                ('relationship_to_victim', models.CharField(blank=True, default='', max_length=100)),
                ('witnesses', models.TextField(blank=True, default='')),
                ('evidence_files', models.JSONField(blank=True, default=list, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('IN_PROGRESS', 'In progress'), ('UNDER_REVIEW', 'Under review'), ('RESOLVED', 'Resolved'), ('CLOSED', 'Closed'), ('ARCHIVED', 'Archived')], db_index=True, default='OPEN', max_length=20)),
                ('priority', models.CharField(choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High'), ('URGENT', 'Urgent')], db_index=True, default='MEDIUM', max_length=10)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_created', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, help_text='User who soft deleted this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_deleted', to=settings.AUTH_USER_MODEL)),
                ('school', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cases', to='schools.school')),
            ],
            options={
                'db_table': 'cases',
                'ordering': ['-created_at'],
            },
        ),
    ]
