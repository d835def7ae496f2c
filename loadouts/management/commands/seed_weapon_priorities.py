from django.core.management.base import BaseCommand

from loadouts.allocation import DEFAULT_WEAPON_PRIORITIES
from loadouts.models import WeaponUsagePriority


class Command(BaseCommand):
    help = 'Creates or updates the per-weapon budget weights used by loadout allocation.'

    def handle(self, *args, **kwargs):
        for position, weapon in enumerate(DEFAULT_WEAPON_PRIORITIES, start=1):
            WeaponUsagePriority.objects.update_or_create(
                weapon_type=weapon.weapon_type,
                defaults={
                    'budget_weight': weapon.budget_weight,
                    'is_essential': weapon.is_essential,
                    'priority': position,
                },
            )
        self.stdout.write(self.style.SUCCESS(f"{len(DEFAULT_WEAPON_PRIORITIES)} weapon priorities configured."))
