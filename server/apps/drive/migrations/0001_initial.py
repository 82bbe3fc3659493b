import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Entry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('file', 'File'), ('folder', 'Folder')], max_length=6)),
                ('name', models.CharField(max_length=255)),
                ('path', models.TextField(default='', help_text='Cached path derived from the parent chain')),
                ('content_key', models.CharField(blank=True, help_text='Object store key, empty for folders', max_length=1024, null=True, unique=True)),
                ('size_bytes', models.BigIntegerField(default=0, help_text='File size in bytes, always 0 for folders')),
                ('mime_type', models.CharField(blank=True, default='', max_length=255)),
                ('is_deleted', models.BooleanField(default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('is_starred', models.BooleanField(default=False)),
                ('last_accessed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('ai_summary', models.TextField(blank=True, null=True)),
                ('ai_key_points', models.JSONField(blank=True, default=list)),
                ('ai_tags', models.JSONField(blank=True, default=list)),
                ('ai_processed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('modified_at', models.DateTimeField(auto_now=True)),
                ('original_parent', models.ForeignKey(blank=True, help_text='Parent at the moment the entry was trashed', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='drive.entry')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='drive_entries', to=settings.AUTH_USER_MODEL)),
                ('parent', models.ForeignKey(blank=True, help_text='Containing folder, empty for root level entries', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='drive.entry')),
            ],
            options={
                'verbose_name': 'Entry',
                'verbose_name_plural': 'Entries',
                'ordering': ['-kind', 'name'],
                'indexes': [
                    models.Index(fields=['owner', 'parent', 'is_deleted'], name='drive_owner_parent_idx'),
                    models.Index(fields=['owner', 'is_starred', 'is_deleted'], name='drive_owner_starred_idx'),
                    models.Index(fields=['owner', '-last_accessed_at'], name='drive_owner_recent_idx'),
                    models.Index(fields=['owner', 'is_deleted', '-deleted_at'], name='drive_owner_trash_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False), ('parent__isnull', False)), fields=('owner', 'parent', 'kind', 'name'), name='drive_entry_sibling_unique'),
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False), ('parent__isnull', True)), fields=('owner', 'kind', 'name'), name='drive_entry_root_unique'),
                    models.CheckConstraint(condition=models.Q(('size_bytes__gte', 0)), name='drive_size_bytes_non_negative'),
                    models.CheckConstraint(condition=models.Q(('kind', 'file'), ('content_key__isnull', True), _connector='OR'), name='drive_folder_without_content'),
                ],
            },
        ),
    ]
