import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import subdomains.validators


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SubdomainRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True,
                                        serialize=False)),
                ('subdomain', models.CharField(
                    max_length=63, validators=[subdomains.validators.validate_subdomain])),
                ('record_type', models.CharField(
                    choices=[('A', 'A'), ('CNAME', 'CNAME'), ('TXT', 'TXT'), ('SRV', 'SRV'),
                             ('MX', 'MX')],
                    max_length=8)),
                ('target_value', models.CharField(max_length=255)),
                ('ttl', models.PositiveIntegerField(
                    default=3600,
                    validators=[django.core.validators.MinValueValidator(60),
                                django.core.validators.MaxValueValidator(86400)])),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('approved', 'Approved'),
                             ('rejected', 'Rejected')],
                    default='pending', editable=False, max_length=16)),
                ('reason', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now,
                                                    editable=False)),
                ('approved_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('approved_by', models.ForeignKey(
                    blank=True, editable=False, null=True,
                    on_delete=django.db.models.deletion.SET_NULL, related_name='+',
                    to=settings.AUTH_USER_MODEL)),
                ('owner', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='subdomain_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ('-created_at',),
            },
        ),
        migrations.AddConstraint(
            model_name='subdomainrequest',
            constraint=models.UniqueConstraint(condition=models.Q(('status', 'rejected'),
                                                                  _negated=True),
                                               fields=('subdomain',),
                                               name='unique_active_subdomain'),
        ),
        migrations.CreateModel(
            name='DnsRecord',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False,
                                        verbose_name='ID')),
                ('fqdn', models.CharField(max_length=255)),
                ('record_type', models.CharField(
                    choices=[('A', 'A'), ('CNAME', 'CNAME'), ('TXT', 'TXT'), ('SRV', 'SRV'),
                             ('MX', 'MX')],
                    max_length=8)),
                ('target_value', models.CharField(max_length=255)),
                ('ttl', models.PositiveIntegerField()),
                ('provider_record_id', models.CharField(max_length=64, unique=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now,
                                                    editable=False)),
                ('request', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE, related_name='dns_record',
                    to='subdomains.subdomainrequest')),
            ],
            options={
                'verbose_name': 'DNS record',
            },
        ),
        migrations.CreateModel(
            name='Subscription',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False,
                                        verbose_name='ID')),
                ('plan', models.CharField(
                    choices=[('free', 'Free'), ('pro', 'Pro'), ('enterprise', 'Enterprise')],
                    default='free', max_length=16)),
                ('user', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE, related_name='subscription',
                    to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='UserRole',
            fields=[
                ('id', models.AutoField(auto_created=True, primary_key=True, serialize=False,
                                        verbose_name='ID')),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('user', 'User')],
                                          default='user', max_length=16)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='roles',
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('user', 'role')},
            },
        ),
    ]
