# Generated manually
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Poll',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('poster_gender', models.CharField(choices=[('female', 'Female'), ('male', 'Male'), ('nonbinary', 'Non-binary')], max_length=16)),
                ('body_type', models.CharField(blank=True, choices=[('petite', 'Petite'), ('slim', 'Slim'), ('athletic', 'Athletic'), ('curvy', 'Curvy'), ('plus-size', 'Plus-size'), ('prefer-not', 'Prefer not to say')], max_length=16, null=True)),
                ('context', models.CharField(blank=True, choices=[('date', 'Date'), ('work', 'Work'), ('casual', 'Casual'), ('event', 'Event'), ('other', 'Other')], max_length=16, null=True)),
                ('image_a_url', models.CharField(max_length=500)),
                ('image_b_url', models.CharField(max_length=500)),
                ('image_folder', models.CharField(help_text='Correlation id the images were stored under', max_length=64)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('expires_at', models.DateTimeField()),
                ('duration_minutes', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('closed', 'Closed')], default='active', max_length=16)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='polls', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'polls',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='poll',
            index=models.Index(fields=['status', 'expires_at'], name='polls_status_expires_idx'),
        ),
        migrations.AddIndex(
            model_name='poll',
            index=models.Index(fields=['created_by', 'created_at'], name='polls_creator_created_idx'),
        ),
        migrations.CreateModel(
            name='PollReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reason', models.CharField(choices=[('inappropriate', 'Inappropriate'), ('spam', 'Spam'), ('offensive', 'Offensive'), ('other', 'Other')], max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('poll', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reports', to='polls.poll')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='poll_reports', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'poll_reports',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='pollreport',
            constraint=models.UniqueConstraint(fields=('poll', 'user'), name='unique_poll_report'),
        ),
        migrations.CreateModel(
            name='PollCreationLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='poll_creation_log', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'poll_creation_log',
                'ordering': ['created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='pollcreationlog',
            index=models.Index(fields=['user', 'created_at'], name='poll_log_user_created_idx'),
        ),
    ]
