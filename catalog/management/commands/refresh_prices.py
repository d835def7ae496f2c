import requests
import structlog
from django.core.management.base import BaseCommand

from catalog.models import Item
from catalog.services import csgotrader, steam_market

logger = structlog.get_logger(__name__)


class Command(BaseCommand):
    help = 'Refreshes marketplace prices from the CSGOTrader feed (and optionally the Steam Market).'

    def add_arguments(self, parser):
        parser.add_argument('--steam-market', type=int, default=0, metavar='N',
                            help='Also query the Steam Market for up to N items without a Steam price.')

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('--- Refreshing marketplace prices ---'))

        try:
            data = csgotrader.fetch_bulk_prices()
        except requests.RequestException as e:
            logger.error("price_feed_failed", error=str(e))
            self.stdout.write(self.style.ERROR(f"Error fetching the price feed: {e}"))
            return

        stats = csgotrader.import_bulk_prices(data)
        self.stdout.write(self.style.SUCCESS(
            f"  > {stats['updated']} prices updated, {stats['skipped']} feed entries skipped."))

        limit = options['steam_market']
        if limit:
            missing = Item.objects.exclude(prices__platform='steam')[:limit]
            refreshed = sum(1 for item in missing if steam_market.refresh_steam_price(item))
            self.stdout.write(self.style.SUCCESS(f"  > {refreshed} Steam Market prices fetched."))
