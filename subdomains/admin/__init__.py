from .request import SubdomainRequestAdmin, DnsRecordAdmin  # noqa: F401
from .account import UserRoleAdmin, SubscriptionAdmin  # noqa: F401
