from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from subdomains import plans
from subdomains.models import ADMIN, Subscription, UserRole


class Command(BaseCommand):
    help = 'Seed the DB'

    @transaction.atomic
    def handle(self, *a, **kwa):
        User = get_user_model()
        admin, _ = User.objects.get_or_create(username='admin', defaults={
            "email": "admin@example.com",
            "password": make_password("admin"),
            "is_staff": True,
            "is_superuser": True
        })
        UserRole.objects.get_or_create(user=admin, role=ADMIN)
        Subscription.objects.get_or_create(user=admin, defaults={'plan': plans.ENTERPRISE})

        user, _ = User.objects.get_or_create(username='user', defaults={
            "email": "user@example.com",
            "password": make_password("user"),
        })
        Subscription.objects.get_or_create(user=user, defaults={'plan': plans.FREE})
