import django.utils.timezone
from django.db import migrations, models

STATE_CHOICES = [('new', 'New'), ('learning', 'Learning'), ('review', 'Review'), ('mastered', 'Mastered')]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CardSchedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.UUIDField()),
                ('card_id', models.UUIDField()),
                ('state', models.CharField(choices=STATE_CHOICES, default='new', max_length=16)),
                ('stability', models.FloatField(blank=True, null=True)),
                ('difficulty', models.FloatField(blank=True, null=True)),
                ('review_count', models.PositiveIntegerField(default=0)),
                ('lapse_count', models.PositiveIntegerField(default=0)),
                ('due_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('last_reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('learning_step', models.PositiveSmallIntegerField(default=0)),
                ('consecutive_good_count', models.PositiveSmallIntegerField(default=0)),
                ('last_good_at', models.DateTimeField(blank=True, null=True)),
                ('version', models.PositiveIntegerField(default=0)),
            ],
            options={
                'unique_together': {('user_id', 'card_id')},
                'indexes': [
                    models.Index(fields=['user_id', 'due_at'], name='sched_user_due_idx'),
                    models.Index(fields=['user_id', 'state'], name='sched_user_state_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReviewEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.UUIDField()),
                ('card_id', models.UUIDField()),
                ('grade', models.SmallIntegerField()),
                ('state_before', models.CharField(choices=STATE_CHOICES, max_length=16)),
                ('state_after', models.CharField(choices=STATE_CHOICES, max_length=16)),
                ('graded_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('counts_toward_goal', models.BooleanField(default=False)),
                ('due_at', models.DateTimeField()),
                ('idempotency_key', models.CharField(blank=True, max_length=64, null=True)),
            ],
            options={
                'unique_together': {('user_id', 'card_id', 'idempotency_key')},
                'indexes': [
                    models.Index(fields=['card_id', 'user_id', 'graded_at'], name='event_card_user_time_idx'),
                    models.Index(fields=['user_id', 'counts_toward_goal', 'graded_at'], name='event_user_goal_time_idx'),
                ],
            },
        ),
    ]
