import uuid
from collections import OrderedDict
from logging import getLogger

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models import Count, Q
from django.utils import timezone

from subdomains import plans
from subdomains.exceptions import Conflict, InvalidTransition, NotFound
from subdomains.records import TARGET_MAX_LENGTH, parse_target
from subdomains.validators import (DEFAULT_TTL, SUBDOMAIN_MAX_LENGTH, TTL_MAX, TTL_MIN,
                                   clean_subdomain, validate_subdomain, validate_ttl)


logger = getLogger(__name__)

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'

STATUS_CHOICES = OrderedDict([
    (PENDING, 'Pending'),
    (APPROVED, 'Approved'),
    (REJECTED, 'Rejected'),
])

ADMIN = 'admin'
USER = 'user'

ROLE_CHOICES = OrderedDict([
    (ADMIN, 'Admin'),
    (USER, 'User'),
])

DEFAULT_REJECT_REASON = 'Request rejected by admin'


class UserRole(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                             related_name='roles')
    role = models.CharField(max_length=16, choices=ROLE_CHOICES.items(), default=USER)

    class Meta:
        unique_together = ('user', 'role')

    def __str__(self):
        return '{} ({})'.format(self.user, self.role)


class Subscription(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                related_name='subscription')
    plan = models.CharField(max_length=16, choices=plans.PLAN_CHOICES.items(),
                            default=plans.FREE)

    def __str__(self):
        return '{} ({})'.format(self.user, self.plan)

    @classmethod
    def tier_for(cls, user_id):
        plan = cls.objects.filter(user_id=user_id).values_list('plan', flat=True).first()
        return plan or plans.FREE


class SubdomainRequestQuerySet(models.QuerySet):
    def active(self):
        """Requests that hold on to their subdomain."""
        return self.exclude(status=REJECTED)

    def for_owner(self, owner_id):
        # rejected requests are hidden from their owner
        return self.active().filter(owner_id=owner_id)

    def with_owner(self):
        return self.select_related('owner')

    def stats(self):
        return self.aggregate(
            total=Count('id'),
            **{status: Count('id', filter=Q(status=status)) for status in STATUS_CHOICES}
        )


class SubdomainRequest(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                              related_name='subdomain_requests')
    subdomain = models.CharField(max_length=SUBDOMAIN_MAX_LENGTH,
                                 validators=[validate_subdomain])
    record_type = models.CharField(max_length=8, choices=plans.RECORD_TYPE_CHOICES)
    target_value = models.CharField(max_length=TARGET_MAX_LENGTH)
    ttl = models.PositiveIntegerField(
        default=DEFAULT_TTL,
        validators=[MinValueValidator(TTL_MIN), MaxValueValidator(TTL_MAX)])
    status = models.CharField(max_length=16, choices=STATUS_CHOICES.items(), default=PENDING,
                              editable=False)
    reason = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    approved_at = models.DateTimeField(null=True, blank=True, editable=False)
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True,
                                    on_delete=models.SET_NULL, related_name='+',
                                    editable=False)

    objects = SubdomainRequestQuerySet.as_manager()

    class Meta:
        ordering = ('-created_at',)
        constraints = [
            models.UniqueConstraint(fields=['subdomain'], condition=~Q(status=REJECTED),
                                    name='unique_active_subdomain'),
        ]

    def __str__(self):
        return '{} {} ({})'.format(self.subdomain, self.record_type, self.status)

    @property
    def target(self):
        return parse_target(self.record_type, self.target_value)

    @property
    def is_pending(self):
        return self.status == PENDING

    def fqdn(self, base_domain=None):
        return '{}.{}'.format(self.subdomain, base_domain or settings.SUBDOMAINS_BASE_DOMAIN)

    def clean(self):
        try:
            self.target_value = str(parse_target(self.record_type, self.target_value))
        except ValidationError as excp:
            raise ValidationError({'target_value': excp.messages})

    @classmethod
    def submit(cls, owner, subdomain, record_type, target_value, ttl, availability):
        """
        Validate and store a new pending request.

        Plan limits are checked here no matter what the client already checked.
        `availability` is only a fast path, the partial unique index on
        `subdomain` has the final word when two owners race for one name.
        """
        errors = {}
        try:
            subdomain = clean_subdomain(subdomain)
        except ValidationError as excp:
            errors['subdomain'] = excp.messages
        try:
            validate_ttl(ttl)
        except ValidationError as excp:
            errors['ttl'] = excp.messages
        try:
            target = parse_target(record_type, target_value)
        except ValidationError as excp:
            errors['target_value'] = excp.messages
        if errors:
            raise ValidationError(errors)

        plans.check(Subscription.tier_for(owner.pk), record_type, ttl)

        if not availability.is_available(subdomain):
            raise Conflict('Subdomain {} is already taken.'.format(subdomain))

        try:
            with transaction.atomic():
                request = cls.objects.create(
                    owner=owner, subdomain=subdomain, record_type=record_type,
                    target_value=str(target), ttl=ttl)
        except IntegrityError:
            logger.info('lost the race for %s', subdomain)
            raise Conflict('Subdomain {} is already taken.'.format(subdomain))
        logger.info('new request %s for %s by %s', request.pk, subdomain, owner.pk)
        return request

    def _transition(self, status, **fields):
        updated = type(self).objects.filter(pk=self.pk, status=PENDING) \
                                    .update(status=status, **fields)
        if not updated:
            if not type(self).objects.filter(pk=self.pk).exists():
                raise NotFound('Request not found.')
            raise InvalidTransition()
        self.status = status
        for name, value in fields.items():
            setattr(self, name, value)

    def mark_approved(self, admin, approved_at=None):
        self._transition(APPROVED, approved_at=approved_at or timezone.now(),
                         approved_by=admin)

    def mark_rejected(self, reason=None):
        self._transition(REJECTED, reason=reason or DEFAULT_REJECT_REASON)


class DnsRecord(models.Model):
    request = models.OneToOneField(SubdomainRequest, on_delete=models.CASCADE,
                                   related_name='dns_record')
    fqdn = models.CharField(max_length=255)
    record_type = models.CharField(max_length=8, choices=plans.RECORD_TYPE_CHOICES)
    target_value = models.CharField(max_length=TARGET_MAX_LENGTH)
    ttl = models.PositiveIntegerField()
    provider_record_id = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        verbose_name = 'DNS record'

    def __str__(self):
        return '{} {} {}'.format(self.fqdn, self.record_type, self.provider_record_id)
