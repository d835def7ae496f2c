"""Tests for loadout creation, publishing, views, upvotes and item selection."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from csloadout.errors import Forbidden, NotFound, Unauthorized, ValidationError
from loadouts import services
from loadouts.allocation import DEFAULT_WEAPON_PRIORITIES
from loadouts.models import Loadout, LoadoutItem, LoadoutView, WeaponUsagePriority
from loadouts.slugs import find_available_slug, generate_slug, slugify_name
from tests.conftest import make_item, make_price

pytestmark = pytest.mark.django_db


@pytest.fixture
def loadout(user):
    return services.create_loadout(user, "Red Dragon", Decimal("150"))


@pytest.fixture
def public_loadout(user, loadout):
    services.toggle_publish(user, loadout.pk)
    loadout.refresh_from_db()
    return loadout


class TestSlugs:
    def test_slugify_name(self) -> None:
        assert slugify_name("Red Dragon Loadout") == "red-dragon-loadout"
        assert slugify_name("  AK & AWP!! ") == "ak-awp"

    @pytest.mark.parametrize("name, slug", [
        ("my_loadout", "my-loadout"),
        ("red.dragon", "red-dragon"),
        ("Red -- Dragon__2", "red-dragon-2"),
        ("Drachen für Anfänger", "drachen-f-r-anf-nger"),
    ])
    def test_every_other_character_becomes_a_hyphen(self, name, slug) -> None:
        assert slugify_name(name) == slug

    def test_reserved_page_names_get_a_suffix(self) -> None:
        assert generate_slug("New") == "new-2"
        assert generate_slug("New loadout") == "new-loadout"

    def test_fallback_when_nothing_is_left(self) -> None:
        assert slugify_name("!!!") == "loadout"
        assert slugify_name("") == "loadout"

    def test_long_names_are_truncated(self) -> None:
        assert len(slugify_name("a" * 300)) == 100

    def test_base_when_free(self) -> None:
        assert generate_slug("Red Dragon") == "red-dragon"

    def test_first_collision_gets_suffix_2(self, user) -> None:
        Loadout.objects.create(user=user, name="Red Dragon", budget=Decimal("100"), slug="red-dragon")
        assert generate_slug("Red Dragon") == "red-dragon-2"

    def test_suffix_follows_highest(self, user) -> None:
        for slug in ("red-dragon", "red-dragon-2", "red-dragon-5", "red-dragon-loadout"):
            Loadout.objects.create(user=user, name="x", budget=Decimal("100"), slug=slug)
        assert find_available_slug("red-dragon") == "red-dragon-6"

    def test_own_slug_is_ignored(self, user) -> None:
        mine = Loadout.objects.create(user=user, name="Red Dragon", budget=Decimal("100"), slug="red-dragon")
        assert find_available_slug("red-dragon", exclude_pk=mine.pk) == "red-dragon"


class TestCreate:
    def test_defaults(self, loadout) -> None:
        assert loadout.budget == Decimal("150.00")
        assert loadout.actual_cost == Decimal("0")
        assert loadout.prioritize == "balance"
        assert loadout.is_public is False
        assert loadout.slug is None

    @pytest.mark.parametrize("name", ["ab", "x" * 101, "   "])
    def test_name_length(self, user, name) -> None:
        with pytest.raises(ValidationError) as exc_info:
            services.create_loadout(user, name, Decimal("150"))
        assert exc_info.value.message == "Name must be between 3 and 100 characters"

    @pytest.mark.parametrize("budget", ["9.99", "100000.01"])
    def test_budget_range(self, user, budget) -> None:
        with pytest.raises(ValidationError) as exc_info:
            services.create_loadout(user, "Budget build", Decimal(budget))
        assert exc_info.value.message == "Budget must be between $10 and $100000"

    def test_invalid_custom_allocation(self, user) -> None:
        custom = {"weapon_skins": 70, "knife": 15, "gloves": 10, "agents": 3, "music_kit": 1, "charms": 0}
        with pytest.raises(ValidationError) as exc_info:
            services.create_loadout(user, "Custom build", Decimal("150"), custom_allocation=custom)
        assert "Custom allocation must sum to 100.00%, got 99.00%" in exc_info.value.message


class TestWeaponPriorities:
    def test_stored_weights_are_used(self, loadout) -> None:
        WeaponUsagePriority.objects.create(weapon_type="AK-47", budget_weight=Decimal("0.600"), priority=1)
        WeaponUsagePriority.objects.create(weapon_type="AWP", budget_weight=Decimal("0.400"), priority=2)

        weapons = services.loadout_allocation(loadout).weapons

        assert [(w.weapon_type, w.allocated_budget) for w in weapons] == [
            ("AK-47", Decimal("63.00")), ("AWP", Decimal("42.00")),
        ]

    def test_weights_not_summing_to_one_fall_back_to_defaults(self, loadout, auth_client) -> None:
        WeaponUsagePriority.objects.create(weapon_type="AK-47", budget_weight=Decimal("0.500"), priority=1)

        weapons = services.loadout_allocation(loadout).weapons
        assert len(weapons) == len(DEFAULT_WEAPON_PRIORITIES)

        response = auth_client.get(f"/api/loadouts/{loadout.pk}/allocation/")
        assert response.status_code == 200


class TestPublish:
    def test_publish_assigns_slug(self, user, loadout) -> None:
        result = services.toggle_publish(user, loadout.pk)
        assert result == {"success": True, "is_public": True, "slug": "red-dragon",
                          "message": "Loadout is now public"}

    def test_unpublish_keeps_slug(self, user, public_loadout) -> None:
        result = services.toggle_publish(user, public_loadout.pk)
        assert result["is_public"] is False
        assert result["slug"] == "red-dragon"
        assert result["message"] == "Loadout is now private"

        # republishing reuses the same slug
        assert services.toggle_publish(user, public_loadout.pk)["slug"] == "red-dragon"

    def test_second_loadout_with_same_name(self, user, public_loadout) -> None:
        second = services.create_loadout(user, "Red Dragon", Decimal("200"))
        assert services.toggle_publish(user, second.pk)["slug"] == "red-dragon-2"

    def test_only_owner_can_publish(self, other_user, loadout) -> None:
        with pytest.raises(Forbidden):
            services.toggle_publish(other_user, loadout.pk)

    def test_missing_loadout(self, user) -> None:
        with pytest.raises(NotFound):
            services.toggle_publish(user, 999999)


class TestViews:
    def test_one_view_per_ip_per_day(self, public_loadout) -> None:
        first = services.track_view("red-dragon", "203.0.113.7")
        second = services.track_view("red-dragon", "203.0.113.7")

        assert first["counted"] is True
        assert first["views"] == 1
        assert second == {"success": True, "counted": False, "views": 1,
                          "message": "View already tracked (within 24 hours)"}

    def test_different_ips_both_count(self, public_loadout) -> None:
        services.track_view("red-dragon", "203.0.113.7")
        result = services.track_view("red-dragon", "198.51.100.1")
        assert result["views"] == 2

    def test_counts_again_after_24_hours(self, public_loadout) -> None:
        services.track_view("red-dragon", "203.0.113.7")
        LoadoutView.objects.update(viewed_at=timezone.now() - timedelta(hours=25))

        result = services.track_view("red-dragon", "203.0.113.7")

        assert result["counted"] is True
        assert result["views"] == 2

    def test_ip_is_stored_hashed(self, public_loadout) -> None:
        services.track_view("red-dragon", "203.0.113.7")
        stored = LoadoutView.objects.get()
        assert stored.viewer_ip_hash != "203.0.113.7"
        assert len(stored.viewer_ip_hash) == 64

    def test_private_loadout(self, user, public_loadout) -> None:
        services.toggle_publish(user, public_loadout.pk)
        with pytest.raises(Forbidden):
            services.track_view("red-dragon", "203.0.113.7")

    def test_unknown_slug(self) -> None:
        with pytest.raises(NotFound):
            services.track_view("nope", "203.0.113.7")

    def test_analytics_has_seven_days(self, user, public_loadout) -> None:
        services.track_view("red-dragon", "203.0.113.7")
        analytics = services.view_analytics(user, public_loadout.pk)

        assert analytics["total_views"] == 1
        assert len(analytics["daily"]) == 7
        assert analytics["daily"][-1]["views"] == 1


class TestUpvotes:
    def test_toggle(self, other_user, public_loadout) -> None:
        assert services.toggle_upvote(other_user, public_loadout.pk) == {
            "success": True, "upvoted": True, "upvotes": 1,
        }
        assert services.toggle_upvote(other_user, public_loadout.pk) == {
            "success": True, "upvoted": False, "upvotes": 0,
        }

    def test_cannot_upvote_own(self, user, public_loadout) -> None:
        with pytest.raises(Forbidden) as exc_info:
            services.toggle_upvote(user, public_loadout.pk)
        assert exc_info.value.message == "You cannot upvote your own loadout"

    def test_private_loadout(self, other_user, loadout) -> None:
        with pytest.raises(Forbidden):
            services.toggle_upvote(other_user, loadout.pk)

    def test_anonymous(self, public_loadout) -> None:
        with pytest.raises(Unauthorized):
            services.toggle_upvote(None, public_loadout.pk)


class TestItems:
    def test_add_uses_cheapest_listing(self, user, loadout, redline) -> None:
        entry = services.add_item(user, loadout.pk, redline.pk, "weapon_skins")

        assert entry.slot == "AK-47"
        assert entry.price == Decimal("46.50")
        assert entry.selected_platform == "csfloat"
        loadout.refresh_from_db()
        assert loadout.actual_cost == Decimal("46.50")
        assert loadout.remaining_budget == Decimal("103.50")

    def test_over_budget(self, user, loadout, karambit) -> None:
        with pytest.raises(ValidationError) as exc_info:
            services.add_item(user, loadout.pk, karambit.pk, "knife")
        assert exc_info.value.message == "Exceeds budget ($150.00 remaining)"
        assert not LoadoutItem.objects.exists()

    def test_replacing_a_slot(self, user, loadout, redline) -> None:
        vulcan = make_item("skin-vulcan-ft", "AK-47 | Vulcan (Field-Tested)", weapon_type="AK-47")
        make_price(vulcan, "steam", "120.00")
        services.add_item(user, loadout.pk, redline.pk, "weapon_skins")

        # 120 fits because the redline's 46.50 no longer counts
        services.add_item(user, loadout.pk, vulcan.pk, "weapon_skins")

        loadout.refresh_from_db()
        assert loadout.items.count() == 1
        assert loadout.items.get().item_id == "skin-vulcan-ft"
        assert loadout.actual_cost == Decimal("120.00")

    def test_category_must_match_item_type(self, user, loadout, karambit) -> None:
        with pytest.raises(ValidationError):
            services.add_item(user, loadout.pk, karambit.pk, "weapon_skins")

    def test_item_without_prices(self, user, loadout) -> None:
        item = make_item("skin-unpriced", "P90 | Asiimov (Field-Tested)", weapon_type="P90")
        with pytest.raises(ValidationError) as exc_info:
            services.add_item(user, loadout.pk, item.pk, "weapon_skins")
        assert exc_info.value.message == "No price data available"

    def test_remove(self, user, loadout, redline) -> None:
        services.add_item(user, loadout.pk, redline.pk, "weapon_skins")
        services.remove_item(user, loadout.pk, "AK-47")

        loadout.refresh_from_db()
        assert loadout.actual_cost == Decimal("0")
        with pytest.raises(NotFound):
            services.remove_item(user, loadout.pk, "AK-47")

    def test_other_user_cannot_add(self, other_user, loadout, redline) -> None:
        with pytest.raises(Forbidden):
            services.add_item(other_user, loadout.pk, redline.pk, "weapon_skins")


class TestApi:
    def test_create(self, auth_client) -> None:
        response = auth_client.post("/api/loadouts/", {"name": "Red Dragon", "budget": "150"}, format="json")
        assert response.status_code == 201
        assert response.data["budget"] == "150.00"
        assert response.data["owner"] == "gaben"
        assert response.data["remaining_budget"] == "150.00"

    def test_create_out_of_range_budget(self, auth_client) -> None:
        response = auth_client.post("/api/loadouts/", {"name": "Cheap", "budget": "5"}, format="json")
        assert response.status_code == 400
        assert response.data == {"error": "VALIDATION_ERROR",
                                  "message": "Budget must be between $10 and $100000"}

    def test_create_requires_login(self, api_client) -> None:
        response = api_client.post("/api/loadouts/", {"name": "Red Dragon", "budget": "150"}, format="json")
        assert response.status_code == 401

    def test_gallery_lists_public_only(self, api_client, user, public_loadout) -> None:
        services.create_loadout(user, "Secret build", Decimal("50"))
        response = api_client.get("/api/loadouts/")
        assert response.status_code == 200
        assert response.data["total"] == 1
        assert response.data["loadouts"][0]["slug"] == "red-dragon"

    def test_private_detail_hidden_from_others(self, api_client, loadout) -> None:
        response = api_client.get(f"/api/loadouts/{loadout.pk}/")
        assert response.status_code == 403

    def test_allocation(self, auth_client, loadout) -> None:
        response = auth_client.get(f"/api/loadouts/{loadout.pk}/allocation/")
        assert response.status_code == 200
        assert response.data["categories"]["knife"] == Decimal("22.50")
        assert response.data["float_guidance"]["wear"] == "Minimal Wear"

    def test_add_item(self, auth_client, loadout, redline) -> None:
        response = auth_client.post(f"/api/loadouts/{loadout.pk}/items/",
                                    {"item_id": redline.pk, "category": "weapon_skins"}, format="json")
        assert response.status_code == 200
        assert response.data["remaining_budget"] == Decimal("103.50")

    def test_track_view(self, api_client, public_loadout) -> None:
        response = api_client.post("/api/loadouts/red-dragon/view/", REMOTE_ADDR="203.0.113.7")
        assert response.status_code == 200
        assert response.data["counted"] is True

    def test_private_page_is_404(self, client, loadout) -> None:
        Loadout.objects.filter(pk=loadout.pk).update(slug="red-dragon")
        response = client.get("/loadouts/red-dragon/")
        assert response.status_code == 404
