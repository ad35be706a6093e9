import arena.models
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
            name='Contest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('difficulty', models.CharField(choices=[('beginner', 'Beginner'), ('intermediate', 'Intermediate'), ('advanced', 'Advanced')], default='beginner', max_length=20)),
                ('start_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('easy_per_day', models.PositiveIntegerField(default=2)),
                ('medium_per_day', models.PositiveIntegerField(default=1)),
                ('hard_days_per_problem', models.PositiveIntegerField(default=2)),
                ('penalty_amount', models.PositiveIntegerField(default=100, help_text='Charged for a failed weekend test')),
                ('time_zone', models.CharField(default=arena.models.default_contest_time_zone, max_length=64)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('creator', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='created_contests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-start_date'],
            },
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('leetcode_username', models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Streak',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('current_streak', models.PositiveIntegerField(default=0)),
                ('longest_streak', models.PositiveIntegerField(default=0)),
                ('last_active_at', models.DateTimeField(blank=True, null=True)),
                ('freezes_left', models.PositiveIntegerField(default=2)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='streak', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Topic',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('order_index', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=False)),
                ('has_started', models.BooleanField(default=False)),
                ('topic_started_at', models.DateTimeField(blank=True, null=True)),
                ('topic_completed_at', models.DateTimeField(blank=True, null=True)),
                ('contest', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='topics', to='arena.contest')),
            ],
            options={
                'ordering': ['contest', 'order_index'],
            },
        ),
        migrations.CreateModel(
            name='Problem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('difficulty', models.CharField(choices=[('Easy', 'Easy'), ('Medium', 'Medium'), ('Hard', 'Hard')], max_length=10)),
                ('leetcode_id', models.CharField(help_text='Ex: 1, 242', max_length=20)),
                ('title', models.CharField(max_length=200)),
                ('title_slug', models.SlugField(blank=True, max_length=200)),
                ('hyperlink', models.URLField(blank=True, max_length=500)),
                ('tags', models.CharField(blank=True, default='', max_length=500)),
                ('order_index', models.PositiveIntegerField(default=0)),
                ('topic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='problems', to='arena.topic')),
            ],
            options={
                'ordering': ['topic', 'order_index'],
            },
        ),
        migrations.CreateModel(
            name='WeekendTest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, max_length=200)),
                ('starts_on', models.DateField(help_text='Saturday that opens the weekend window')),
                ('contest', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='weekend_tests', to='arena.contest')),
                ('problems', models.ManyToManyField(blank=True, related_name='weekend_tests', to='arena.problem')),
            ],
            options={
                'ordering': ['-starts_on'],
            },
        ),
        migrations.CreateModel(
            name='UserProgress',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('completed', models.BooleanField(default=False)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('is_missed', models.BooleanField(default=False)),
                ('problem', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress', to='arena.problem')),
                ('topic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress', to='arena.topic')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'User Progress',
                'verbose_name_plural': 'User Progress',
            },
        ),
        migrations.CreateModel(
            name='ContestParticipant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(choices=[('creator', 'Creator'), ('participant', 'Participant')], default='participant', max_length=20)),
                ('current_streak', models.IntegerField(default=0)),
                ('points', models.IntegerField(default=0)),
                ('is_visible', models.BooleanField(default=False)),
                ('needs_payment', models.BooleanField(default=False)),
                ('has_paid', models.BooleanField(default=False)),
                ('last_weekend_attempt', models.DateTimeField(blank=True, null=True)),
                ('last_weekend_success', models.BooleanField(default=False)),
                ('last_payment_date', models.DateTimeField(blank=True, null=True)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('contest', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='arena.contest')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participations', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.AddIndex(
            model_name='problem',
            index=models.Index(fields=['topic', 'difficulty', 'order_index'], name='arena_probl_topic_i_3c1f0e_idx'),
        ),
        migrations.AddConstraint(
            model_name='topic',
            constraint=models.UniqueConstraint(fields=('contest', 'order_index'), name='topic_contest_order_uniq'),
        ),
        migrations.AddConstraint(
            model_name='topic',
            constraint=models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('contest',), name='topic_single_active_per_contest'),
        ),
        migrations.AddConstraint(
            model_name='weekendtest',
            constraint=models.UniqueConstraint(fields=('contest', 'starts_on'), name='weekend_test_contest_window_uniq'),
        ),
        migrations.AddIndex(
            model_name='userprogress',
            index=models.Index(fields=['user', 'topic', 'completed'], name='arena_userp_user_id_8a2d41_idx'),
        ),
        migrations.AddIndex(
            model_name='userprogress',
            index=models.Index(fields=['completed_at'], name='arena_userp_complet_5e7b90_idx'),
        ),
        migrations.AddConstraint(
            model_name='userprogress',
            constraint=models.UniqueConstraint(fields=('user', 'problem'), name='user_progress_user_problem_uniq'),
        ),
        migrations.AddConstraint(
            model_name='contestparticipant',
            constraint=models.UniqueConstraint(fields=('contest', 'user'), name='contest_participant_uniq'),
        ),
    ]
