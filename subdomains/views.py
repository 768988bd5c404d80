import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import mixins, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import APIException, NotAuthenticated
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from subdomains import plans, roles
from subdomains.apps import get_dns_client
from subdomains.availability import Availability
from subdomains.middleware import error_message
from subdomains.models import Subscription, SubdomainRequest
from subdomains.permissions import IsPortalAdmin
from subdomains.provisioning import Provisioner
from subdomains.serializers import (AdminSubdomainRequestSerializer, CheckSubdomainSerializer,
                                    CreateDnsRecordSerializer, DeleteDnsRecordSerializer,
                                    RejectSerializer, SubdomainRequestCreateSerializer,
                                    SubdomainRequestSerializer)
from subdomains.utils import memoized_property

logger = logging.getLogger(__name__)


class ProvisioningMixin:

    @memoized_property
    def provisioner(self):
        return Provisioner(client=get_dns_client())

    @memoized_property
    def availability(self):
        return Availability(client=get_dns_client())


class CheckSubdomain(ProvisioningMixin, views.APIView):
    authentication_classes = ()
    permission_classes = ()

    def post(self, request, format=None):
        serializer = CheckSubdomainSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.availability.check(serializer.validated_data['subdomain'])
        return Response({'available': result.available})


class CreateDnsRecord(ProvisioningMixin, views.APIView):
    permission_classes = (IsAuthenticated, IsPortalAdmin)

    def post(self, request, format=None):
        serializer = CreateDnsRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dns_record = self.provisioner.approve(serializer.validated_data['requestId'],
                                              request.user)
        return Response({
            'success': True,
            'fqdn': dns_record.fqdn,
            'providerRecordId': dns_record.provider_record_id,
        })


class DeleteDnsRecord(ProvisioningMixin, views.APIView):
    """
    Deletes a request and its DNS record.

    Always answers 200, the outcome is in the `success` flag of the body.
    """
    permission_classes = ()

    def post(self, request, format=None):
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        serializer = DeleteDnsRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.provisioner.delete(serializer.validated_data['requestId'], request.user)
        data = {'success': True}
        if result.provider_error:
            data['error'] = result.provider_error
        return Response(data)

    def handle_exception(self, exc):
        if isinstance(exc, APIException):
            message = error_message(exc.detail)
        elif isinstance(exc, DjangoValidationError):
            message = exc.messages[0]
        else:
            logger.exception('failed to delete request')
            message = 'Failed to delete request.'
        return Response({'success': False, 'error': message}, status=status.HTTP_200_OK)


class SubdomainRequestViewset(ProvisioningMixin,
                              mixins.CreateModelMixin,
                              mixins.RetrieveModelMixin,
                              mixins.ListModelMixin,
                              viewsets.GenericViewSet):
    serializer_class = SubdomainRequestSerializer
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        user = self.request.user
        if self.action == 'list':
            return SubdomainRequest.objects.for_owner(user.pk)
        if roles.is_admin(user.pk):
            return SubdomainRequest.objects.with_owner()
        return SubdomainRequest.objects.filter(owner_id=user.pk)

    def get_serializer_class(self):
        if self.action == 'create':
            return SubdomainRequestCreateSerializer
        return SubdomainRequestSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['availability'] = self.availability
        return context

    @action(detail=False, url_path='all', permission_classes=[IsAuthenticated, IsPortalAdmin])
    def all_requests(self, request):
        queryset = SubdomainRequest.objects.with_owner()
        return Response(AdminSubdomainRequestSerializer(queryset, many=True).data)

    @action(detail=False, permission_classes=[IsAuthenticated, IsPortalAdmin])
    def stats(self, request):
        return Response(SubdomainRequest.objects.stats())

    @action(detail=True, methods=['post'],
            permission_classes=[IsAuthenticated, IsPortalAdmin])
    def approve(self, request, pk=None):
        dns_record = self.provisioner.approve(pk, request.user)
        return Response({
            'success': True,
            'fqdn': dns_record.fqdn,
            'providerRecordId': dns_record.provider_record_id,
        })

    @action(detail=True, methods=['post'],
            permission_classes=[IsAuthenticated, IsPortalAdmin])
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subdomain_request = self.provisioner.reject(
            pk, request.user, serializer.validated_data.get('reason'))
        return Response(SubdomainRequestSerializer(subdomain_request).data)


class Plan(views.APIView):

    def get(self, request, format=None):
        tier = Subscription.tier_for(request.user.pk)
        ttls = plans.allowed_ttls(tier)
        return Response({
            'plan': tier,
            'is_pro': plans.is_pro(tier),
            'record_types': [rtype for rtype in plans.RECORD_TYPES
                             if rtype in plans.allowed_record_types(tier)],
            'ttls': ttls if ttls == plans.ANY_TTL else sorted(ttls),
        })


class HealthCheck(views.APIView):
    authentication_classes = ()
    permission_classes = ()

    def get(self, request, format=None):
        return Response({'status': 'ok'})
