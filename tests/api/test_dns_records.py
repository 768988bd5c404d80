# pylint: disable=no-member,unused-argument,redefined-outer-name
import uuid
from unittest.mock import patch

import pytest
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from tests.fixtures import (admin_client, admin_user, api_client, dns_client,  # noqa: F401
                            make_approved, make_request, other_user, user)
from subdomains import models as m
from subdomains.cloudflare import CloudflareError


def approval_payload(request):
    return {
        'requestId': str(request.pk),
        'subdomain': request.subdomain,
        'recordType': request.record_type,
        'targetValue': request.target_value,
        'ttl': request.ttl,
    }


@pytest.mark.django_db
def test_create_dns_record(admin_client, dns_client, user):
    request = make_request(user, 'api', record_type='CNAME', target_value='host.example.com')
    dns_client.next_ids = ['cf123']

    response = admin_client.post('/create-dns-record', approval_payload(request))

    assert response.status_code == 200, response.data
    assert response.data == {
        'success': True,
        'fqdn': 'api.seeky.click',
        'providerRecordId': 'cf123',
    }
    request.refresh_from_db()
    assert request.status == m.APPROVED


@pytest.mark.django_db
def test_create_dns_record_uses_stored_values(admin_client, dns_client, user):
    request = make_request(user, 'api', target_value='1.2.3.4')
    payload = dict(approval_payload(request), targetValue='6.6.6.6', ttl=60)

    response = admin_client.post('/create-dns-record', payload)

    assert response.status_code == 200, response.data
    record = dns_client.records[response.data['providerRecordId']]
    assert (record['content'], record['ttl']) == ('1.2.3.4', 3600)


@pytest.mark.django_db
def test_create_dns_record_with_bearer_token(dns_client, admin_user, user):
    request = make_request(user, 'api')
    token = Token.objects.create(user=admin_user)
    client = APIClient(format='json')
    client.credentials(HTTP_AUTHORIZATION='Bearer {}'.format(token.key))

    response = client.post('/create-dns-record', approval_payload(request))

    assert response.status_code == 200, response.data
    assert response.data['success'] is True


@pytest.mark.django_db
def test_create_dns_record_bad_token(dns_client, user):
    request = make_request(user, 'api')
    client = APIClient(format='json')
    client.credentials(HTTP_AUTHORIZATION='Bearer nope')

    response = client.post('/create-dns-record', approval_payload(request))

    assert response.status_code == 401
    assert response.data == {'error': 'Invalid token.'}


@pytest.mark.django_db
def test_create_dns_record_anonymous(dns_client, user):
    request = make_request(user, 'api')
    response = APIClient(format='json').post('/create-dns-record', approval_payload(request))
    assert response.status_code == 401
    assert dns_client.total_calls == 0


@pytest.mark.django_db
def test_create_dns_record_not_admin(api_client, dns_client, user):
    request = make_request(user, 'api')
    response = api_client.post('/create-dns-record', approval_payload(request))
    assert response.status_code == 403
    assert 'error' in response.data
    assert dns_client.total_calls == 0
    request.refresh_from_db()
    assert request.status == m.PENDING


@pytest.mark.django_db
def test_create_dns_record_provider_failure(admin_client, dns_client, user):
    request = make_request(user, 'api')
    dns_client.fail['create_record'] = CloudflareError('Record already exists.')

    response = admin_client.post('/create-dns-record', approval_payload(request))

    assert response.status_code == 502
    assert response.data == {'error': 'Record already exists.'}
    request.refresh_from_db()
    assert request.status == m.PENDING


@pytest.mark.django_db
def test_create_dns_record_already_decided(admin_client, dns_client, user):
    request = make_request(user, 'api', status=m.REJECTED)
    response = admin_client.post('/create-dns-record', approval_payload(request))
    assert response.status_code == 409
    assert dns_client.total_calls == 0


@pytest.mark.django_db
def test_create_dns_record_unknown_request(admin_client, dns_client):
    response = admin_client.post('/create-dns-record', {'requestId': str(uuid.uuid4())})
    assert response.status_code == 404
    assert response.data == {'error': 'Request not found.'}


@pytest.mark.django_db
def test_create_dns_record_missing_request_id(admin_client, dns_client):
    response = admin_client.post('/create-dns-record', {'subdomain': 'api'})
    assert response.status_code == 400
    assert 'requestId' in response.data['errors']


@pytest.mark.django_db
def test_delete_dns_record(api_client, dns_client, user):
    request = make_approved(user, 'bye', dns_client)

    response = api_client.post('/delete-dns-record', {'requestId': str(request.pk)})

    assert response.status_code == 200
    assert response.data == {'success': True}
    assert not m.SubdomainRequest.objects.exists()
    assert not dns_client.records


@pytest.mark.django_db
def test_delete_dns_record_by_admin(admin_client, dns_client, user):
    request = make_approved(user, 'bye', dns_client)
    response = admin_client.post('/delete-dns-record', {'requestId': str(request.pk)})
    assert response.data == {'success': True}
    assert not m.SubdomainRequest.objects.exists()


@pytest.mark.django_db
def test_delete_dns_record_of_someone_else(dns_client, user, other_user):
    request = make_approved(user, 'mine', dns_client)
    client = APIClient(format='json')
    client.force_authenticate(user=other_user)

    response = client.post('/delete-dns-record', {'requestId': str(request.pk)})

    assert response.status_code == 200
    assert response.data['success'] is False
    assert response.data['error']
    assert m.SubdomainRequest.objects.filter(pk=request.pk).exists()
    assert len(dns_client.records) == 1


@pytest.mark.django_db
def test_delete_dns_record_provider_failure(api_client, dns_client, user):
    request = make_approved(user, 'sticky', dns_client)
    dns_client.fail['delete_record'] = CloudflareError('Network is unreachable')

    with patch('subdomains.tasks.delete_provider_record.delay'):
        response = api_client.post('/delete-dns-record', {'requestId': str(request.pk)})

    assert response.status_code == 200
    assert response.data['success'] is True
    assert 'Network is unreachable' in response.data['error']
    assert not m.SubdomainRequest.objects.exists()


@pytest.mark.django_db
def test_delete_dns_record_unknown(api_client, dns_client):
    response = api_client.post('/delete-dns-record', {'requestId': str(uuid.uuid4())})
    assert response.status_code == 200
    assert response.data == {'success': False, 'error': 'Request not found.'}


@pytest.mark.django_db
def test_delete_dns_record_anonymous(dns_client, user):
    request = make_request(user, 'mine')
    response = APIClient(format='json').post('/delete-dns-record',
                                             {'requestId': str(request.pk)})
    assert response.status_code == 200
    assert response.data['success'] is False
    assert m.SubdomainRequest.objects.exists()


@pytest.mark.django_db
def test_delete_dns_record_bad_payload(api_client, dns_client):
    response = api_client.post('/delete-dns-record', {'requestId': 'nope'})
    assert response.status_code == 200
    assert response.data == {'success': False, 'error': 'Must be a valid UUID.'}


@pytest.mark.django_db
def test_delete_dns_record_database_failure(api_client, dns_client, user):
    request = make_request(user, 'mine')
    with patch.object(m.SubdomainRequestQuerySet, 'delete', side_effect=RuntimeError('boom')):
        response = api_client.post('/delete-dns-record', {'requestId': str(request.pk)})
    assert response.status_code == 200
    assert response.data == {'success': False, 'error': 'Failed to delete request.'}
