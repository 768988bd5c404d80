import redis

from celery import shared_task
from celery.exceptions import MaxRetriesExceededError
from celery.utils.log import get_task_logger
from django.conf import settings
from django.db import DatabaseError

from subdomains import provisioning
from subdomains.apps import get_dns_client
from subdomains.cloudflare import CloudflareError, CloudflareNotFound

logger = get_task_logger(__name__)


@shared_task(bind=True, ignore_result=True, default_retry_delay=60, max_retries=10)
def reconcile_approval(self, request_id, provider_record_id, admin_id):
    """Repair an approval whose provider record exists but whose local write failed."""
    provisioner = provisioning.Provisioner(client=get_dns_client())
    try:
        action = provisioner.reconcile_approval(request_id, provider_record_id, admin_id)
    except (CloudflareError, DatabaseError) as e:
        logger.exception(e)
        try:
            self.retry()
        except MaxRetriesExceededError:
            logger.error('Failed to reconcile provider record %s for request %s, '
                         'manual cleanup needed', provider_record_id, request_id)
    else:
        logger.info('provider record %s %s', provider_record_id, action)


@shared_task(bind=True, ignore_result=True, default_retry_delay=60, max_retries=10)
def delete_provider_record(self, provider_record_id):
    try:
        get_dns_client().delete_record(provider_record_id)
    except CloudflareNotFound:
        logger.info('provider record %s already deleted', provider_record_id)
    except CloudflareError as e:
        logger.exception(e)
        try:
            self.retry()
        except MaxRetriesExceededError:
            logger.error('Failed to remove provider record %s', provider_record_id)


@shared_task(bind=True, ignore_result=True)
def reconcile_records(self):
    """
    Periodic task that removes provider records left behind by failed approvals
    or deletions.
    """
    redis_client = redis.from_url(settings.LOCK_SERVER_URL)
    lock = redis_client.lock('reconcile_records', timeout=300)

    if not lock.acquire(blocking=False):
        logger.info('reconcile_records is already running, skipping')
        return

    try:
        provisioning.Provisioner(client=get_dns_client()).reconcile()
    except Exception:
        logger.exception("Could not reconcile provider records")
    finally:
        lock.release()
