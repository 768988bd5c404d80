# pylint: disable=no-member,unused-argument,redefined-outer-name
from unittest.mock import patch

import pytest
from celery.exceptions import MaxRetriesExceededError

from tests.fixtures import admin_user, dns_client, make_request, user  # noqa: F401
from subdomains import models as m
from subdomains import tasks
from subdomains.cloudflare import CloudflareError, record_comment


@pytest.mark.django_db
def test_reconcile_approval_task(dns_client, user, admin_user):
    request = make_request(user, 'late')
    record = dns_client.add('late.seeky.click', comment=record_comment(request.pk))

    tasks.reconcile_approval.apply(args=(str(request.pk), record['id'], admin_user.pk))

    request.refresh_from_db()
    assert request.status == m.APPROVED
    assert request.dns_record.provider_record_id == record['id']


@pytest.mark.django_db
def test_reconcile_approval_task_gives_up(dns_client, user, admin_user):
    request = make_request(user, 'late')
    dns_client.fail['get_record'] = CloudflareError('Service unavailable')

    with patch.object(tasks.reconcile_approval, 'retry',
                      side_effect=MaxRetriesExceededError()) as retry:
        tasks.reconcile_approval.apply(args=(str(request.pk), 'cf1', admin_user.pk))

    assert retry.call_count == 1
    request.refresh_from_db()
    assert request.status == m.PENDING


def test_delete_provider_record_task(dns_client):
    record = dns_client.add('old.seeky.click')
    tasks.delete_provider_record.apply(args=(record['id'],))
    assert not dns_client.records


def test_delete_provider_record_task_already_gone(dns_client):
    with patch.object(tasks.delete_provider_record, 'retry') as retry:
        tasks.delete_provider_record.apply(args=('missing',))
    assert dns_client.calls['delete_record'] == 1
    assert not retry.called


def test_delete_provider_record_task_retries(dns_client):
    record = dns_client.add('old.seeky.click')
    dns_client.fail['delete_record'] = CloudflareError('Service unavailable')

    with patch.object(tasks.delete_provider_record, 'retry',
                      side_effect=MaxRetriesExceededError()) as retry:
        tasks.delete_provider_record.apply(args=(record['id'],))

    assert retry.call_count == 1
    assert record['id'] in dns_client.records


@pytest.mark.django_db
def test_reconcile_records_task(dns_client):
    orphan = dns_client.add('orphan.seeky.click', comment=record_comment('gone'))
    with patch('subdomains.tasks.redis.from_url') as from_url:
        lock = from_url.return_value.lock.return_value
        lock.acquire.return_value = True
        tasks.reconcile_records.apply()

    from_url.return_value.lock.assert_called_once_with('reconcile_records', timeout=300)
    lock.acquire.assert_called_once_with(blocking=False)
    lock.release.assert_called_once_with()
    assert orphan['id'] not in dns_client.records


@pytest.mark.django_db
def test_reconcile_records_task_locked(dns_client):
    orphan = dns_client.add('orphan.seeky.click', comment=record_comment('gone'))
    with patch('subdomains.tasks.redis.from_url') as from_url:
        lock = from_url.return_value.lock.return_value
        lock.acquire.return_value = False
        tasks.reconcile_records.apply()

    assert not lock.release.called
    assert dns_client.total_calls == 0
    assert orphan['id'] in dns_client.records
