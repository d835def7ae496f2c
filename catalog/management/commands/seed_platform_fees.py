from decimal import Decimal

from django.core.management.base import BaseCommand

from catalog.fees import DEFAULT_FEE_CONFIGS
from catalog.models import PlatformFeeConfig


class Command(BaseCommand):
    help = 'Creates or updates the marketplace fee configuration.'

    def handle(self, *args, **kwargs):
        for platform, config in DEFAULT_FEE_CONFIGS.items():
            _, created = PlatformFeeConfig.objects.update_or_create(
                platform=platform,
                defaults={
                    'buyer_fee_percent': Decimal(config['buyer']),
                    'seller_fee_percent': Decimal(config['seller']),
                    'hidden_markup_percent': Decimal(config['markup']),
                    'fee_notes': config['notes'],
                    'source_url': config['source_url'],
                },
            )
            verb = "Created" if created else "Updated"
            self.stdout.write(f"  > {verb} fees for {platform}")
        self.stdout.write(self.style.SUCCESS(f"{len(DEFAULT_FEE_CONFIGS)} platforms configured."))
