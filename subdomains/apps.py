from django.apps import AppConfig, apps


class SubdomainsConfig(AppConfig):
    name = 'subdomains'
    verbose_name = 'Subdomains'
    default_auto_field = 'django.db.models.AutoField'

    dns_client = None

    def ready(self):
        from subdomains.cloudflare import CloudflareClient
        self.dns_client = CloudflareClient.from_settings()


def get_dns_client():
    """The provider client built when the app loaded."""
    return apps.get_app_config('subdomains').dns_client
