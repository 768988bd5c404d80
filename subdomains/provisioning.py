"""
Approval, rejection and deletion of subdomain requests.

Approval and deletion touch two systems, our database and the DNS provider,
with no transaction spanning both. When the second write fails after the
first one went through, a celery task takes over the repair (see
`subdomains.tasks`), keyed by the provider record id so it can run any
number of times.
"""
import logging
from collections import namedtuple
from concurrent import futures
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from subdomains import roles, tasks
from subdomains.cloudflare import (CloudflareError, CloudflareNotFound, is_managed,
                                   record_comment)
from subdomains.exceptions import (Forbidden, InvalidTransition, NotFound,
                                   ProvisioningError)
from subdomains.models import DnsRecord, SubdomainRequest

logger = logging.getLogger(__name__)

LINKED = 'linked'
DELETED = 'deleted'
MISSING = 'missing'

DeletionResult = namedtuple('DeletionResult', ['request_id', 'provider_error'])
ReconcileResult = namedtuple('ReconcileResult', ['orphaned', 'vanished'])


class Provisioner:

    def __init__(self, client, base_domain=None):
        self.client = client
        self.base_domain = base_domain or settings.SUBDOMAINS_BASE_DOMAIN

    def _load(self, request_id):
        try:
            return SubdomainRequest.objects.get(pk=request_id)
        except (SubdomainRequest.DoesNotExist, ValidationError):
            raise NotFound('Request not found.')

    def approve(self, request_id, admin):
        if not roles.is_admin(admin.pk):
            raise Forbidden()
        request = self._load(request_id)
        if not request.is_pending:
            raise InvalidTransition()

        fqdn = request.fqdn(self.base_domain)
        record = request.target.to_provider(fqdn, request.ttl)
        record['comment'] = record_comment(request.pk)
        try:
            created = self.client.create_record(record)
        except CloudflareError as excp:
            logger.error('failed to create %s for request %s: %s', fqdn, request.pk, excp)
            raise ProvisioningError(excp.message)
        provider_record_id = created['id']

        try:
            dns_record = self.link_record(request, provider_record_id, admin)
        except (InvalidTransition, NotFound):
            # somebody else decided on (or deleted) the request while the
            # provider call was in flight, the fresh record has no owner now
            logger.warning('request %s changed during approval, dropping provider record %s',
                           request.pk, provider_record_id)
            tasks.delete_provider_record.delay(provider_record_id)
            raise
        except DatabaseError:
            logger.exception('%s exists at the provider as %s but could not be saved',
                             fqdn, provider_record_id)
            tasks.reconcile_approval.delay(str(request.pk), provider_record_id, admin.pk)
            raise ProvisioningError(
                'DNS record was created but could not be saved, reconciliation scheduled.')

        logger.info('approved %s by %s as %s', fqdn, admin.pk, provider_record_id)
        return dns_record

    def link_record(self, request, provider_record_id, admin, approved_at=None):
        """Mark `request` approved and store the provider record it got."""
        snapshot = (request.status, request.approved_at, request.approved_by_id)
        try:
            with transaction.atomic():
                request.mark_approved(admin, approved_at)
                return DnsRecord.objects.create(
                    request=request,
                    fqdn=request.fqdn(self.base_domain),
                    record_type=request.record_type,
                    target_value=request.target_value,
                    ttl=request.ttl,
                    provider_record_id=provider_record_id,
                )
        except Exception:
            request.status, request.approved_at, request.approved_by_id = snapshot
            raise

    def reject(self, request_id, admin, reason=None):
        if not roles.is_admin(admin.pk):
            raise Forbidden()
        request = self._load(request_id)
        request.mark_rejected(reason)
        logger.info('rejected %s by %s: %s', request.subdomain, admin.pk, request.reason)
        return request

    def delete(self, request_id, caller):
        try:
            link = DnsRecord.objects.select_related('request') \
                                    .filter(request_id=request_id).first()
        except ValidationError:
            raise NotFound('Request not found.')
        request = link.request if link is not None else self._load(request_id)
        if not roles.can_manage(request, caller.pk):
            raise Forbidden()

        pool = futures.ThreadPoolExecutor(max_workers=1)
        try:
            cleanup = pool.submit(self._delete_provider_record, link) if link else None
            # the local row is what the user sees, its deletion decides the outcome
            SubdomainRequest.objects.filter(pk=request.pk).delete()
        finally:
            pool.shutdown(wait=True)

        provider_error = cleanup.result() if cleanup is not None else None
        logger.info('deleted request %s (%s) by %s', request.pk, request.subdomain, caller.pk)
        return DeletionResult(request.pk, provider_error)

    def _delete_provider_record(self, link):
        try:
            self.client.delete_record(link.provider_record_id)
        except CloudflareNotFound:
            logger.info('provider record %s was already gone', link.provider_record_id)
        except CloudflareError as excp:
            logger.error('failed to delete %s (%s) at the provider: %s',
                         link.fqdn, link.provider_record_id, excp)
            tasks.delete_provider_record.delay(link.provider_record_id)
            return 'Failed to delete DNS record at the provider: {}'.format(excp.message)
        return None

    def reconcile_approval(self, request_id, provider_record_id, admin_id):
        """
        Finish or undo an approval whose local write failed.

        Links the provider record to its request when the request is still
        pending, deletes the provider record otherwise.
        """
        if DnsRecord.objects.filter(provider_record_id=provider_record_id).exists():
            return LINKED
        try:
            self.client.get_record(provider_record_id)
        except CloudflareNotFound:
            logger.info('provider record %s is gone, nothing to reconcile', provider_record_id)
            return MISSING

        request = SubdomainRequest.objects.filter(pk=request_id).first()
        admin = get_user_model().objects.filter(pk=admin_id).first()
        if request is not None and request.is_pending and admin is not None:
            try:
                self.link_record(request, provider_record_id, admin)
            except (InvalidTransition, NotFound):
                pass
            else:
                logger.info('linked provider record %s to request %s',
                            provider_record_id, request_id)
                return LINKED

        logger.info('deleting orphaned provider record %s', provider_record_id)
        try:
            self.client.delete_record(provider_record_id)
        except CloudflareNotFound:
            return MISSING
        return DELETED

    def reconcile(self, dry_run=False, grace=None):
        """
        Sweep the zone for portal records no request links to, and for
        links whose provider record disappeared.

        Orphans are deleted (unless `dry_run`) once they are older than
        `grace` seconds. Vanished links are only logged.
        """
        if grace is None:
            grace = settings.SUBDOMAINS_RECONCILE_GRACE
        cutoff = timezone.now() - timedelta(seconds=grace)
        linked = set(DnsRecord.objects.values_list('provider_record_id', flat=True))

        orphaned = []
        seen = set()
        for record in self.client.list_records():
            seen.add(record['id'])
            if not is_managed(record) or record['id'] in linked:
                continue
            created_on = parse_datetime(record.get('created_on') or '')
            if created_on is not None and created_on > cutoff:
                continue
            orphaned.append(record)

        for record in orphaned:
            logger.info('%s orphaned record %s %s',
                        'would delete' if dry_run else 'deleting', record['id'], record['name'])
            if dry_run:
                continue
            try:
                self.client.delete_record(record['id'])
            except CloudflareError:
                logger.exception('failed to delete orphaned record %s', record['id'])

        vanished = list(DnsRecord.objects.filter(provider_record_id__in=linked - seen))
        for dns_record in vanished:
            logger.warning('%s points to provider record %s which no longer exists',
                           dns_record.fqdn, dns_record.provider_record_id)
        return ReconcileResult(orphaned, vanished)
