import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.TextField(unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'teams',
            },
        ),
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.TextField(primary_key=True, serialize=False)),
                ('username', models.TextField()),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='members',
                    to='api.team',
                )),
            ],
            options={
                'db_table': 'users',
                'indexes': [models.Index(fields=['team', 'is_active'], name='idx_users_team_active')],
            },
        ),
        migrations.CreateModel(
            name='PullRequest',
            fields=[
                ('id', models.TextField(primary_key=True, serialize=False)),
                ('name', models.TextField()),
                ('status', models.CharField(
                    choices=[('OPEN', 'Open'), ('MERGED', 'Merged')],
                    default='OPEN',
                    max_length=10,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('merged_at', models.DateTimeField(blank=True, null=True)),
                ('author', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='authored_prs',
                    to='api.user',
                )),
                ('team', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='pull_requests',
                    to='api.team',
                )),
            ],
            options={
                'db_table': 'pull_requests',
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(('merged_at__isnull', True), ('status', 'OPEN'))
                            | models.Q(('merged_at__isnull', False), ('status', 'MERGED'))
                        ),
                        name='pull_request_merged_at_matches_status',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReviewerAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('pull_request', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='assignments',
                    to='api.pullrequest',
                )),
                ('reviewer', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='review_assignments',
                    to='api.user',
                )),
            ],
            options={
                'db_table': 'pull_request_reviewers',
                'ordering': ['assigned_at', 'id'],
                'indexes': [models.Index(fields=['reviewer'], name='idx_pr_reviewers_reviewer')],
                'constraints': [
                    models.UniqueConstraint(fields=('pull_request', 'reviewer'), name='uniq_pull_request_reviewer'),
                ],
            },
        ),
        migrations.AddField(
            model_name='pullrequest',
            name='reviewers',
            field=models.ManyToManyField(
                blank=True,
                related_name='assigned_prs',
                through='api.ReviewerAssignment',
                to='api.user',
            ),
        ),
    ]
