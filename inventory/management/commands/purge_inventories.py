from django.core.management.base import BaseCommand

from inventory.gdpr import purge_scheduled_inventories


class Command(BaseCommand):
    help = 'Deletes inventories of users inactive beyond the retention window.'

    def handle(self, *args, **kwargs):
        purged = purge_scheduled_inventories()
        self.stdout.write(self.style.SUCCESS(f"{purged} inventories purged."))
