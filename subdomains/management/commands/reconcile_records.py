from django.core.management.base import BaseCommand

from subdomains.apps import get_dns_client
from subdomains.provisioning import Provisioner


class Command(BaseCommand):
    help = 'Delete provider records no request links to'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            dest='dry_run',
            default=False,
            help='Only print which records would be deleted',
        )
        parser.add_argument(
            '--grace',
            type=int,
            default=None,
            help='Skip records younger than this many seconds',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        result = Provisioner(client=get_dns_client()).reconcile(
            dry_run=dry_run, grace=options['grace'])
        for record in result.orphaned:
            self.stdout.write('{} {} ({})'.format(
                'would delete' if dry_run else 'deleted', record['name'], record['id']))
        for dns_record in result.vanished:
            self.stdout.write('missing at provider: {} ({})'.format(
                dns_record.fqdn, dns_record.provider_record_id))
