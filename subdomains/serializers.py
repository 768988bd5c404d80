from rest_framework import fields, serializers

from subdomains import plans
from subdomains.models import DnsRecord, SubdomainRequest


class OwnerSerializer(serializers.Serializer):
    id = fields.IntegerField()
    email = fields.EmailField()
    full_name = fields.SerializerMethodField()

    def get_full_name(self, obj):
        return obj.get_full_name() or None


class DnsRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = DnsRecord
        fields = ['fqdn', 'record_type', 'target_value', 'ttl', 'provider_record_id',
                  'created_at']
        read_only_fields = fields


class SubdomainRequestSerializer(serializers.ModelSerializer):
    fqdn = fields.SerializerMethodField()
    dns_record = fields.SerializerMethodField()

    class Meta:
        model = SubdomainRequest
        fields = ['id', 'subdomain', 'fqdn', 'record_type', 'target_value', 'ttl', 'status',
                  'reason', 'created_at', 'approved_at', 'approved_by', 'dns_record']
        read_only_fields = fields

    def get_fqdn(self, obj):
        return obj.fqdn()

    def get_dns_record(self, obj):
        try:
            return DnsRecordSerializer(obj.dns_record).data
        except DnsRecord.DoesNotExist:
            return None


class AdminSubdomainRequestSerializer(SubdomainRequestSerializer):
    owner = OwnerSerializer(read_only=True)

    class Meta(SubdomainRequestSerializer.Meta):
        fields = SubdomainRequestSerializer.Meta.fields + ['owner']
        read_only_fields = fields


class SubdomainRequestCreateSerializer(serializers.Serializer):
    # syntax and plan checks live in SubdomainRequest.submit, so that every
    # caller goes through them
    subdomain = fields.CharField(max_length=255)
    record_type = fields.ChoiceField(choices=plans.RECORD_TYPE_CHOICES)
    target_value = fields.CharField(max_length=255, trim_whitespace=False)
    ttl = fields.IntegerField()

    def create(self, validated_data):
        return SubdomainRequest.submit(
            owner=self.context['request'].user,
            availability=self.context['availability'],
            **validated_data
        )

    def to_representation(self, instance):
        return SubdomainRequestSerializer(instance, context=self.context).data


class RejectSerializer(serializers.Serializer):
    reason = fields.CharField(required=False, allow_blank=True, allow_null=True)


class CheckSubdomainSerializer(serializers.Serializer):
    subdomain = fields.CharField(max_length=255, allow_blank=True)


class CreateDnsRecordSerializer(serializers.Serializer):
    """
    Payload of the approval call. Only `requestId` is acted upon, the record
    itself is built from the stored request.
    """
    requestId = fields.UUIDField()
    subdomain = fields.CharField(required=False)
    recordType = fields.CharField(required=False)
    targetValue = fields.CharField(required=False)
    ttl = fields.IntegerField(required=False)


class DeleteDnsRecordSerializer(serializers.Serializer):
    requestId = fields.UUIDField()
