# pylint: disable=no-member,unused-argument,protected-access,redefined-outer-name
import itertools
from datetime import timedelta
import time
from collections import Counter, OrderedDict
from unittest.mock import patch

import pytest
from django.apps import apps
from django.contrib.auth import get_user_model
from django.utils import timezone
from django_dynamic_fixture import G
from rest_framework.test import APIClient

from subdomains import plans
from subdomains import models as m
from subdomains.cloudflare import CloudflareNotFound, record_comment


class FakeCloudflare:
    """In-memory stand-in for CloudflareClient. Counts calls and can be told to fail."""

    def __init__(self):
        self.records = OrderedDict()
        self.calls = Counter()
        self.fail = {}
        self.delay = {}
        self.on_create = None
        self.next_ids = []
        self._ids = itertools.count(1)

    @property
    def total_calls(self):
        return sum(self.calls.values())

    def _call(self, method):
        self.calls[method] += 1
        if method in self.delay:
            time.sleep(self.delay[method])
        error = self.fail.get(method)
        if error is not None:
            raise error

    def add(self, name, type='A', content='1.1.1.1', record_id=None, comment=None,
            created_on=None):
        record_id = record_id or 'rec{}'.format(next(self._ids))
        created_on = created_on or timezone.now() - timedelta(days=1)
        self.records[record_id] = {
            'id': record_id,
            'type': type,
            'name': name,
            'content': content,
            'ttl': 3600,
            'proxied': False,
            'comment': comment,
            'created_on': created_on.isoformat(),
        }
        return self.records[record_id]

    def list_records(self, name=None, **filters):
        self._call('list_records')
        return [dict(record) for record in self.records.values()
                if name is None or record['name'] == name]

    def get_record(self, record_id):
        self._call('get_record')
        try:
            return dict(self.records[record_id])
        except KeyError:
            raise CloudflareNotFound('Record does not exist.', status_code=404)

    def create_record(self, record):
        self._call('create_record')
        record_id = self.next_ids.pop(0) if self.next_ids else 'cf{}'.format(next(self._ids))
        stored = dict(record, id=record_id, created_on=timezone.now().isoformat())
        self.records[record_id] = stored
        if self.on_create is not None:
            self.on_create(stored)
        return dict(stored)

    def delete_record(self, record_id):
        self._call('delete_record')
        if record_id not in self.records:
            raise CloudflareNotFound('Record does not exist.', status_code=404)
        del self.records[record_id]


@pytest.fixture
def dns_client():
    client = FakeCloudflare()
    with patch.object(apps.get_app_config('subdomains'), 'dns_client', client):
        yield client


def create_user(username, plan=None, admin=False, **kwargs):
    kwargs.setdefault('email', '{}@example.com'.format(username))
    user = get_user_model().objects.create_user(username=username, password='secret',
                                                **kwargs)
    if plan is not None:
        G(m.Subscription, user=user, plan=plan)
    if admin:
        G(m.UserRole, user=user, role=m.ADMIN)
    return user


@pytest.fixture
def user(db):
    return create_user('owner', first_name='Olive', last_name='Owner')


@pytest.fixture
def other_user(db):
    return create_user('stranger')


@pytest.fixture
def pro_user(db):
    return create_user('pro', plan=plans.PRO)


@pytest.fixture
def admin_user(db):
    return create_user('admin', admin=True)


@pytest.fixture
def api_client(user):
    client = APIClient(format='json')
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient(format='json')
    client.force_authenticate(user=admin_user)
    return client


def make_request(owner, subdomain, record_type='A', target_value='1.2.3.4', ttl=3600,
                 status=m.PENDING, **kwargs):
    kwargs.setdefault('created_at', timezone.now())
    kwargs.setdefault('reason', None)
    kwargs.setdefault('approved_at', None)
    kwargs.setdefault('approved_by', None)
    return G(m.SubdomainRequest, owner=owner, subdomain=subdomain, record_type=record_type,
             target_value=target_value, ttl=ttl, status=status, **kwargs)


def make_approved(owner, subdomain, client, admin=None, **kwargs):
    """An approved request with its provider record and link in place."""
    request = make_request(owner, subdomain, status=m.APPROVED, approved_at=timezone.now(),
                           **kwargs)
    fqdn = request.fqdn()
    record = client.add(fqdn, type=request.record_type, content=request.target_value,
                        comment=record_comment(request.pk))
    G(m.DnsRecord, request=request, fqdn=fqdn, record_type=request.record_type,
      target_value=request.target_value, ttl=request.ttl, provider_record_id=record['id'])
    return request
