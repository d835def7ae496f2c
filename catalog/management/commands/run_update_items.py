import requests
import structlog
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from catalog.models import Case, Collection, Item
from catalog.utils import normalize_item_name, quality_from_name

logger = structlog.get_logger(__name__)

API_BASE = "https://raw.githubusercontent.com/ByMykel/CSGO-API/main/public/api/en"
API_URL_SKINS = f"{API_BASE}/skins.json"
API_URL_SKINS_NOT_GROUPED = f"{API_BASE}/skins_not_grouped.json"

# Non-weapon catalogs that only need name/rarity/image
EXTRA_CATALOGS = {
    'agent': f"{API_BASE}/agents.json",
    'music_kit': f"{API_BASE}/music_kits.json",
    'sticker': f"{API_BASE}/stickers.json",
    'charm': f"{API_BASE}/keychains.json",
}

CATEGORY_TYPES = {
    'Knives': 'knife',
    'Gloves': 'gloves',
}


class Command(BaseCommand):
    help = 'Updates items, collections and cases from the ByMykel CSGO-API.'

    def add_arguments(self, parser):
        parser.add_argument('--skip-extras', action='store_true',
                            help='Only import weapon skins, knives and gloves.')

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("--- Starting item database update ---"))

        try:
            item_relations = self.fetch_collections_and_cases()
            self.fetch_all_items(item_relations)
            if not options['skip_extras']:
                for item_type, url in EXTRA_CATALOGS.items():
                    self.fetch_extra_items(item_type, url)
            self.stdout.write(self.style.SUCCESS("--- Update finished ---"))

        except requests.RequestException as e:
            logger.error("item_update_failed", error=str(e))
            self.stdout.write(self.style.ERROR(f"Error fetching data from the API: {e}"))

    def _get(self, url):
        self.stdout.write(f"Fetching {url}")
        response = requests.get(url, timeout=60)
        response.raise_for_status()
        return response.json()

    @transaction.atomic
    def fetch_collections_and_cases(self):
        """
        Creates the Collection and Case rows from 'skins.json' and returns the
        relation map (skin id -> collections, cases).
        """
        skins_data = self._get(API_URL_SKINS)

        item_relations_map = {}
        collections_to_create = []
        cases_to_create = []

        existing_collections = set(Collection.objects.values_list('id', flat=True))
        existing_cases = set(Case.objects.values_list('id', flat=True))

        for skin in skins_data:
            skin_id = skin.get('id')
            if not skin_id:
                continue

            collection_ids = []
            for coll in skin.get('collections') or []:
                coll_id = coll.get('id')
                collection_ids.append(coll_id)
                if coll_id not in existing_collections:
                    collections_to_create.append(Collection(
                        id=coll_id,
                        name=coll.get('name'),
                        slug=slugify(coll.get('name') or coll_id),
                        image=coll.get('image'),
                    ))
                    existing_collections.add(coll_id)

            case_ids = []
            for crate in skin.get('crates') or []:
                case_id = crate.get('id')
                case_ids.append(case_id)
                if case_id not in existing_cases:
                    cases_to_create.append(Case(
                        id=case_id,
                        name=crate.get('name'),
                        slug=slugify(crate.get('name') or case_id),
                        image=crate.get('image'),
                    ))
                    existing_cases.add(case_id)

            item_relations_map[skin_id] = {
                'collections': collection_ids,
                'cases': case_ids,
            }

        if collections_to_create:
            Collection.objects.bulk_create(collections_to_create, ignore_conflicts=True)
            self.stdout.write(self.style.SUCCESS(f"  > Created {len(collections_to_create)} collections."))

        if cases_to_create:
            Case.objects.bulk_create(cases_to_create, ignore_conflicts=True)
            self.stdout.write(self.style.SUCCESS(f"  > Created {len(cases_to_create)} cases."))

        return item_relations_map

    @transaction.atomic
    def fetch_all_items(self, item_relations_map):
        """Creates the weapon/knife/glove items from 'skins_not_grouped.json' that do not exist yet."""
        all_items_data = self._get(API_URL_SKINS_NOT_GROUPED)

        existing_item_ids = set(Item.objects.values_list('id', flat=True))
        items_to_create = []

        ItemCollectionRelation = Item.collections.through
        ItemCaseRelation = Item.cases.through
        collection_relations = []
        case_relations = []

        for data in all_items_data:
            item_id = data.get('id')
            market_hash_name = data.get('market_hash_name')
            if not item_id or not market_hash_name or item_id in existing_item_ids:
                continue

            category = (data.get('category') or {}).get('name')
            items_to_create.append(Item(
                id=item_id,
                name=data.get('name'),
                market_hash_name=market_hash_name,
                search_name=normalize_item_name(market_hash_name),
                type=CATEGORY_TYPES.get(category, 'skin'),
                weapon_type=(data.get('weapon') or {}).get('name'),
                rarity=(data.get('rarity') or {}).get('name'),
                quality=quality_from_name(market_hash_name),
                wear=(data.get('wear') or {}).get('name'),
                min_float=data.get('min_float'),
                max_float=data.get('max_float'),
                image=data.get('image'),
            ))
            existing_item_ids.add(item_id)

            relations = item_relations_map.get(data.get('skin_id') or item_id.split('_')[0])
            if relations:
                for coll_id in relations['collections']:
                    collection_relations.append(ItemCollectionRelation(item_id=item_id, collection_id=coll_id))
                for case_id in relations['cases']:
                    case_relations.append(ItemCaseRelation(item_id=item_id, case_id=case_id))

        if not items_to_create:
            self.stdout.write(self.style.SUCCESS("  > No new items found."))
            return

        Item.objects.bulk_create(items_to_create, ignore_conflicts=True)
        self.stdout.write(self.style.SUCCESS(f"  > Created {len(items_to_create)} items."))

        if collection_relations:
            ItemCollectionRelation.objects.bulk_create(collection_relations, ignore_conflicts=True)
        if case_relations:
            ItemCaseRelation.objects.bulk_create(case_relations, ignore_conflicts=True)
        logger.info("items_imported", items=len(items_to_create),
                    collection_links=len(collection_relations), case_links=len(case_relations))

    @transaction.atomic
    def fetch_extra_items(self, item_type, url):
        data = self._get(url)
        existing_item_ids = set(Item.objects.values_list('id', flat=True))

        items_to_create = [
            Item(
                id=entry['id'],
                name=entry.get('name'),
                market_hash_name=entry['market_hash_name'],
                search_name=normalize_item_name(entry['market_hash_name']),
                type=item_type,
                rarity=(entry.get('rarity') or {}).get('name'),
                image=entry.get('image'),
            )
            for entry in data
            if entry.get('id') and entry.get('market_hash_name') and entry['id'] not in existing_item_ids
        ]
        if items_to_create:
            Item.objects.bulk_create(items_to_create, ignore_conflicts=True)
        self.stdout.write(self.style.SUCCESS(f"  > {item_type}: created {len(items_to_create)} items."))
