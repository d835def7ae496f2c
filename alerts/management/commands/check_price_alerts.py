from django.core.management.base import BaseCommand

from alerts.checker import check_alerts


class Command(BaseCommand):
    help = 'Fires the price alerts whose target price has been reached.'

    def handle(self, *args, **kwargs):
        summary = check_alerts()
        for detail in summary['triggered_details']:
            self.stdout.write(
                f"  > {detail['item_name']}: ${detail['triggered_price']} on {detail['platform']}"
            )
        self.stdout.write(self.style.SUCCESS(
            f"{summary['alerts_checked']} alerts checked, {summary['alerts_triggered']} triggered."
        ))
