from django.core.management.base import BaseCommand

from inventory.sync import refresh_inventories


class Command(BaseCommand):
    help = 'Re-syncs the inventories of users active in the last 7 days (same as the daily cron endpoint).'

    def add_arguments(self, parser):
        parser.add_argument('--delay', type=float, default=None,
                            help='Seconds to wait between users (defaults to INVENTORY_REFRESH_DELAY_SECONDS).')

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('--- Refreshing inventories ---'))
        summary = refresh_inventories(delay=options['delay'])

        for error in summary['errors']:
            self.stdout.write(self.style.WARNING(f"  > user {error['user_id']}: {error['error']} {error['message']}"))
        self.stdout.write(self.style.SUCCESS(
            f"{summary['users_processed']}/{summary['total_eligible']} inventories refreshed "
            f"in {summary['duration']}s."))
