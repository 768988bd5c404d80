import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from django.conf import settings

logger = logging.getLogger('subdomains.cloudflare')

DEFAULT_ENDPOINT = 'https://api.cloudflare.com/client/v4'
PAGE_SIZE = 100


class CloudflareError(Exception):
    def __init__(self, message, errors=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.status_code = status_code


class CloudflareTimeout(CloudflareError):
    pass


class CloudflareNotFound(CloudflareError):
    pass


def _retrying_session():
    # POST is left out of allowed_methods on purpose: creating a record twice
    # leaves a duplicate at the provider
    retry = Retry(
        total=3,
        backoff_factor=0.4,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(['GET', 'DELETE']),
        raise_on_status=False,
    )
    session = requests.Session()
    session.mount('https://', HTTPAdapter(max_retries=retry))
    session.mount('http://', HTTPAdapter(max_retries=retry))
    return session


class CloudflareClient:
    """
    Thin wrapper over the DNS records endpoints of a single Cloudflare zone.

    Every method either returns the decoded `result` of the API envelope or
    raises `CloudflareError` carrying the first error message Cloudflare sent.
    """

    def __init__(self, api_token, zone_id, endpoint=DEFAULT_ENDPOINT, timeout=10,
                 session=None):
        self.api_token = api_token
        self.zone_id = zone_id
        self.endpoint = endpoint.rstrip('/')
        self.timeout = timeout
        self._session = session or _retrying_session()

    @classmethod
    def from_settings(cls):
        return cls(
            api_token=settings.SUBDOMAINS_CLOUDFLARE_API_TOKEN,
            zone_id=settings.SUBDOMAINS_CLOUDFLARE_ZONE_ID,
            endpoint=getattr(settings, 'SUBDOMAINS_CLOUDFLARE_ENDPOINT', DEFAULT_ENDPOINT),
            timeout=getattr(settings, 'SUBDOMAINS_PROVIDER_TIMEOUT', 10),
        )

    def __repr__(self):
        return '<CloudflareClient zone={}>'.format(self.zone_id)

    @property
    def records_url(self):
        return '{}/zones/{}/dns_records'.format(self.endpoint, self.zone_id)

    def _request(self, method, url, **kwargs):
        if not self.api_token or not self.zone_id:
            raise CloudflareError('Missing Cloudflare configuration')
        headers = {
            'Authorization': 'Bearer {}'.format(self.api_token),
            'Content-Type': 'application/json',
        }
        try:
            response = self._session.request(method, url, headers=headers,
                                             timeout=self.timeout, **kwargs)
        except requests.Timeout as excp:
            raise CloudflareTimeout('Cloudflare did not answer in {}s'.format(self.timeout)) \
                from excp
        except requests.RequestException as excp:
            raise CloudflareError('Cloudflare request failed: {}'.format(excp)) from excp

        try:
            data = response.json()
        except ValueError:
            raise CloudflareError(
                'Invalid response from Cloudflare (HTTP {})'.format(response.status_code),
                status_code=response.status_code)

        if not data.get('success'):
            errors = data.get('errors') or []
            message = errors[0].get('message') if errors else None
            error_class = CloudflareNotFound if response.status_code == 404 else CloudflareError
            raise error_class(message or 'Cloudflare request failed',
                              errors=errors, status_code=response.status_code)
        return data

    def list_records(self, name=None, **filters):
        """List the zone's records, following pagination. `name` filters on the fqdn."""
        params = dict(filters, per_page=PAGE_SIZE)
        if name is not None:
            params['name'] = name
        records = []
        page = 1
        while True:
            params['page'] = page
            data = self._request('GET', self.records_url, params=params)
            records.extend(data.get('result') or [])
            info = data.get('result_info') or {}
            if page >= info.get('total_pages', 1):
                break
            page += 1
        return records

    def get_record(self, record_id):
        url = '{}/{}'.format(self.records_url, record_id)
        return self._request('GET', url)['result']

    def create_record(self, record):
        logger.info("create %s %s -> %s", record.get('type'), record.get('name'),
                    record.get('content'))
        return self._request('POST', self.records_url, json=record)['result']

    def delete_record(self, record_id):
        logger.info("delete %s", record_id)
        url = '{}/{}'.format(self.records_url, record_id)
        self._request('DELETE', url)
