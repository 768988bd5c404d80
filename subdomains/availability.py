import logging
from collections import namedtuple
from concurrent import futures

from django.conf import settings

from subdomains.cloudflare import CloudflareError
from subdomains.exceptions import UpstreamError
from subdomains.models import SubdomainRequest
from subdomains.validators import clean_subdomain

logger = logging.getLogger(__name__)

DATABASE = 'database'
PROVIDER = 'provider'

AvailabilityResult = namedtuple('AvailabilityResult', ['available', 'source'])


class Availability:
    """
    Tells whether a label is free, looking both at our requests and at the
    records already live at the provider.

    Nothing is reserved, so a positive answer can be stale by the time the
    caller acts on it.
    """

    def __init__(self, client, base_domain=None, timeout=None):
        self.client = client
        self.base_domain = base_domain or settings.SUBDOMAINS_BASE_DOMAIN
        self.timeout = timeout or settings.SUBDOMAINS_PROVIDER_TIMEOUT

    def check(self, label):
        label = clean_subdomain(label)
        fqdn = '{}.{}'.format(label, self.base_domain)

        # the provider lookup runs in a worker while this thread asks the
        # database, which keeps the query on this thread's connection
        pool = futures.ThreadPoolExecutor(max_workers=1)
        try:
            lookup = pool.submit(self.client.list_records, name=fqdn)
            taken_locally = SubdomainRequest.objects.active().filter(subdomain=label).exists()
            try:
                taken_remotely = bool(lookup.result(timeout=self.timeout))
            except futures.TimeoutError:
                logger.warning('provider lookup for %s timed out', fqdn)
                raise UpstreamError('Timed out while querying the DNS provider.')
            except CloudflareError as excp:
                logger.warning('provider lookup for %s failed: %s', fqdn, excp)
                raise UpstreamError('Failed to query the DNS provider: {}'.format(excp))
        finally:
            pool.shutdown(wait=False)

        if taken_locally:
            result = AvailabilityResult(False, DATABASE)
        elif taken_remotely:
            result = AvailabilityResult(False, PROVIDER)
        else:
            result = AvailabilityResult(True, None)
        logger.info('availability %s: %s (%s)', label, result.available, result.source or '-')
        return result

    def is_available(self, label):
        return self.check(label).available
