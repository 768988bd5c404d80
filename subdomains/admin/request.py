import logging

from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from rest_framework.exceptions import APIException

from subdomains.apps import get_dns_client
from subdomains.middleware import error_message
from subdomains.models import DnsRecord, SubdomainRequest
from subdomains.provisioning import Provisioner

logger = logging.getLogger('subdomains.admin')


def report_error(modeladmin, request, subdomain_request, excp):
    if isinstance(excp, ValidationError):
        message = '; '.join(excp.messages)
    else:
        message = error_message(excp.detail)
    modeladmin.message_user(request, '{}: {}'.format(subdomain_request.subdomain, message),
                            level=messages.ERROR)


def approve_selected(modeladmin, request, queryset):
    provisioner = Provisioner(client=get_dns_client())
    for subdomain_request in queryset:
        try:
            provisioner.approve(subdomain_request.pk, request.user)
        except (APIException, ValidationError) as excp:
            logger.exception("Error while approving %s", subdomain_request)
            report_error(modeladmin, request, subdomain_request, excp)
approve_selected.short_description = "Approve selected requests"  # noqa: E305


def reject_selected(modeladmin, request, queryset):
    provisioner = Provisioner(client=get_dns_client())
    for subdomain_request in queryset:
        try:
            provisioner.reject(subdomain_request.pk, request.user)
        except (APIException, ValidationError) as excp:
            report_error(modeladmin, request, subdomain_request, excp)
reject_selected.short_description = "Reject selected requests"  # noqa: E305


@admin.register(SubdomainRequest)
class SubdomainRequestAdmin(admin.ModelAdmin):
    list_filter = ('status', 'record_type')
    list_display = ('subdomain', 'record_type', 'target_value', 'ttl', 'owner', 'status',
                    'created_at')
    fields = ('subdomain', 'record_type', 'target_value', 'ttl', 'owner', 'status', 'reason',
              'created_at', 'approved_at', 'approved_by')
    # requests only come in through SubdomainRequest.submit, the admin decides on them
    readonly_fields = fields
    search_fields = ('subdomain', 'owner__email')
    actions = (approve_selected, reject_selected)

    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        """Delete through the provisioner so the provider record goes as well"""
        try:
            Provisioner(client=get_dns_client()).delete(obj.pk, request.user)
        except APIException as excp:
            report_error(self, request, obj, excp)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self.delete_model(request, obj)


@admin.register(DnsRecord)
class DnsRecordAdmin(admin.ModelAdmin):
    list_display = ('fqdn', 'record_type', 'target_value', 'ttl', 'provider_record_id',
                    'created_at')
    search_fields = ('fqdn', 'provider_record_id')
    readonly_fields = ('request', 'fqdn', 'record_type', 'target_value', 'ttl',
                       'provider_record_id', 'created_at')

    def has_add_permission(self, request):
        return False
