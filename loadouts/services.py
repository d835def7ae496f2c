"""
Loadout operations used by the API and page views.

Ownership and visibility checks raise ``Forbidden``/``NotFound`` from
``csloadout.errors``; counters are updated with ``F()`` expressions inside
the same transaction as the row they count.
"""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal, InvalidOperation

import structlog
from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from catalog.models import Item
from csloadout.errors import Forbidden, NotFound, Unauthorized, ValidationError
from csloadout.utils import hash_ip
from loadouts.allocation import (
    CATEGORIES,
    CATEGORY_ITEM_TYPES,
    DEFAULT_WEAPON_PRIORITIES,
    WEIGHT_TOLERANCE,
    BudgetAllocation,
    WeaponPriority,
    allocate,
    validate_allocation,
)
from loadouts.models import PRIORITIZE_CHOICES, Loadout, LoadoutItem, LoadoutUpvote, LoadoutView, WeaponUsagePriority
from loadouts.slugs import generate_slug

logger = structlog.get_logger(__name__)

MIN_BUDGET = Decimal('10')
MAX_BUDGET = Decimal('100000')
SLUG_ATTEMPTS = 3
VIEW_DEDUP_WINDOW = timedelta(hours=24)
ANALYTICS_DAYS = 7


def weapon_priorities():
    """Stored weapon weights, or the defaults when none are configured or they do not sum to 1."""
    rows = list(WeaponUsagePriority.objects.all())
    if not rows:
        return DEFAULT_WEAPON_PRIORITIES

    total = sum((r.budget_weight for r in rows), Decimal('0'))
    if abs(total - 1) > WEIGHT_TOLERANCE:
        logger.warning("weapon_priorities_invalid", total_weight=str(total))
        return DEFAULT_WEAPON_PRIORITIES
    return tuple(WeaponPriority(r.weapon_type, r.budget_weight, r.is_essential) for r in rows)


def loadout_allocation(loadout: Loadout) -> BudgetAllocation:
    return allocate(loadout.budget, loadout.prioritize, loadout.custom_allocation, weapon_priorities())


def create_loadout(user: User, name: str, budget, description: str = '', theme: str = '',
                   prioritize: str = 'balance', custom_allocation: dict | None = None) -> Loadout:
    name = (name or '').strip()
    if not 3 <= len(name) <= 100:
        raise ValidationError("Name must be between 3 and 100 characters")

    try:
        budget = Decimal(str(budget))
    except (InvalidOperation, ValueError):
        raise ValidationError("Budget must be a number")
    if not budget.is_finite() or budget < MIN_BUDGET or budget > MAX_BUDGET:
        raise ValidationError(f"Budget must be between ${MIN_BUDGET} and ${MAX_BUDGET}")

    if prioritize not in dict(PRIORITIZE_CHOICES):
        raise ValidationError(f"Unknown prioritize mode: {prioritize}")

    if custom_allocation:
        errors = validate_allocation(custom_allocation)
        if errors:
            raise ValidationError("; ".join(errors))

    loadout = Loadout.objects.create(
        user=user,
        name=name,
        description=description or '',
        budget=budget.quantize(Decimal('0.01')),
        theme=theme or '',
        prioritize=prioritize,
        custom_allocation=custom_allocation or None,
    )
    logger.info("loadout_created", loadout_id=loadout.pk, user_id=user.pk, budget=str(loadout.budget))
    return loadout


def get_owned_loadout(user: User, loadout_id) -> Loadout:
    loadout = Loadout.objects.filter(pk=loadout_id).first()
    if loadout is None:
        raise NotFound("Loadout not found")
    if loadout.user_id != user.pk:
        raise Forbidden("You can only modify your own loadouts")
    return loadout


def toggle_publish(user: User, loadout_id) -> dict:
    """Flip ``is_public``; the first publish assigns a slug, unpublishing keeps it."""
    loadout = get_owned_loadout(user, loadout_id)
    loadout.is_public = not loadout.is_public

    if loadout.is_public and not loadout.slug:
        for attempt in range(SLUG_ATTEMPTS):
            loadout.slug = generate_slug(loadout.name, exclude_pk=loadout.pk)
            try:
                with transaction.atomic():
                    loadout.save(update_fields=['is_public', 'slug', 'updated_at'])
                break
            except IntegrityError:
                logger.warning("loadout_slug_collision", slug=loadout.slug, attempt=attempt + 1)
        else:
            raise ValidationError("Could not generate a unique URL for this loadout, please try again")
    else:
        loadout.save(update_fields=['is_public', 'updated_at'])

    logger.info("loadout_visibility_changed", loadout_id=loadout.pk, is_public=loadout.is_public)
    return {
        'success': True,
        'is_public': loadout.is_public,
        'slug': loadout.slug,
        'message': "Loadout is now public" if loadout.is_public else "Loadout is now private",
    }


def track_view(slug: str, ip: str) -> dict:
    """Count one view per hashed IP per 24 hours on a public loadout."""
    loadout = Loadout.objects.filter(slug=slug).first()
    if loadout is None:
        raise NotFound("Loadout not found")
    if not loadout.is_public:
        raise Forbidden("Views are only tracked on public loadouts")

    ip_hash = hash_ip(ip)
    since = timezone.now() - VIEW_DEDUP_WINDOW

    with transaction.atomic():
        seen = LoadoutView.objects.filter(
            loadout=loadout, viewer_ip_hash=ip_hash, viewed_at__gte=since,
        ).exists()
        if seen:
            return {'success': True, 'counted': False, 'views': loadout.views,
                    'message': "View already tracked (within 24 hours)"}

        LoadoutView.objects.create(loadout=loadout, viewer_ip_hash=ip_hash)
        Loadout.objects.filter(pk=loadout.pk).update(views=F('views') + 1)

    loadout.refresh_from_db(fields=['views'])
    return {'success': True, 'counted': True, 'views': loadout.views, 'message': "View tracked"}


def view_analytics(user: User, loadout_id, now=None) -> dict:
    """Views per day over the last week, for the owner."""
    loadout = get_owned_loadout(user, loadout_id)
    now = now or timezone.now()
    start = (now - timedelta(days=ANALYTICS_DAYS - 1)).date()

    per_day = dict(
        LoadoutView.objects.filter(loadout=loadout, viewed_at__date__gte=start)
        .annotate(day=TruncDate('viewed_at'))
        .values('day')
        .annotate(count=Count('id'))
        .values_list('day', 'count')
    )
    days = [start + timedelta(days=i) for i in range(ANALYTICS_DAYS)]
    return {
        'total_views': loadout.views,
        'daily': [{'date': day.isoformat(), 'views': per_day.get(day, 0)} for day in days],
    }


def toggle_upvote(user: User, loadout_id) -> dict:
    if user is None or not user.is_authenticated:
        raise Unauthorized("Sign in to upvote loadouts")

    loadout = Loadout.objects.filter(pk=loadout_id).first()
    if loadout is None:
        raise NotFound("Loadout not found")
    if not loadout.is_public:
        raise Forbidden("Only public loadouts can be upvoted")
    if loadout.user_id == user.pk:
        raise Forbidden("You cannot upvote your own loadout")

    with transaction.atomic():
        deleted, _ = LoadoutUpvote.objects.filter(loadout=loadout, user=user).delete()
        if deleted:
            Loadout.objects.filter(pk=loadout.pk).update(upvotes=F('upvotes') - 1)
            upvoted = False
        else:
            LoadoutUpvote.objects.create(loadout=loadout, user=user)
            Loadout.objects.filter(pk=loadout.pk).update(upvotes=F('upvotes') + 1)
            upvoted = True

    loadout.refresh_from_db(fields=['upvotes'])
    return {'success': True, 'upvoted': upvoted, 'upvotes': loadout.upvotes}


def _slot_for(item: Item, category: str) -> str:
    if category == 'weapon_skins':
        if not item.weapon_type:
            raise ValidationError("Weapon skins need a weapon type")
        return item.weapon_type
    return category


def _recompute_cost(loadout: Loadout):
    total = loadout.items.aggregate(total=Sum('price'))['total'] or Decimal('0')
    loadout.actual_cost = total
    loadout.save(update_fields=['actual_cost', 'updated_at'])


def add_item(user: User, loadout_id, item_id: str, category: str) -> LoadoutItem:
    """
    Put an item in its slot at the lowest marketplace total cost. An item
    already in the slot is replaced, and its price no longer counts against
    the budget.
    """
    loadout = get_owned_loadout(user, loadout_id)
    if category not in CATEGORIES:
        raise ValidationError(f"Unknown category: {category}")

    item = Item.objects.filter(pk=item_id).first()
    if item is None:
        raise NotFound("Item not found")
    if item.type != CATEGORY_ITEM_TYPES[category]:
        raise ValidationError(f"{item.name} does not belong in {category}")

    best = item.lowest_price()
    if best is None:
        raise ValidationError("No price data available")

    slot = _slot_for(item, category)
    with transaction.atomic():
        current = loadout.items.select_for_update().filter(slot=slot).first()
        spent = loadout.items.exclude(slot=slot).aggregate(total=Sum('price'))['total'] or Decimal('0')
        remaining = loadout.budget - spent
        if best.total_cost > remaining:
            raise ValidationError(f"Exceeds budget (${remaining:.2f} remaining)")

        if current is not None:
            current.item = item
            current.category = category
            current.price = best.total_cost
            current.selected_platform = best.platform
            current.save()
            entry = current
        else:
            entry = LoadoutItem.objects.create(
                loadout=loadout, item=item, category=category, slot=slot,
                price=best.total_cost, selected_platform=best.platform,
            )
        _recompute_cost(loadout)

    logger.info("loadout_item_added", loadout_id=loadout.pk, slot=slot, item_id=item.pk,
                replaced=current is not None)
    return entry


def remove_item(user: User, loadout_id, slot: str) -> Loadout:
    loadout = get_owned_loadout(user, loadout_id)
    with transaction.atomic():
        deleted, _ = loadout.items.filter(slot=slot).delete()
        if not deleted:
            raise NotFound("No item in this slot")
        _recompute_cost(loadout)
    return loadout
