from django.contrib import admin

from .models import Loadout, LoadoutItem, LoadoutUpvote, LoadoutView, WeaponUsagePriority


class LoadoutItemInline(admin.TabularInline):
    model = LoadoutItem
    extra = 0
    raw_id_fields = ('item',)


@admin.register(Loadout)
class LoadoutAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'budget', 'actual_cost', 'is_public', 'slug', 'views', 'upvotes')
    list_filter = ('is_public', 'prioritize')
    search_fields = ('name', 'slug', 'user__username')
    inlines = [LoadoutItemInline]


@admin.register(LoadoutView)
class LoadoutViewAdmin(admin.ModelAdmin):
    list_display = ('loadout', 'viewer_ip_hash', 'viewed_at')


@admin.register(LoadoutUpvote)
class LoadoutUpvoteAdmin(admin.ModelAdmin):
    list_display = ('loadout', 'user', 'created_at')


@admin.register(WeaponUsagePriority)
class WeaponUsagePriorityAdmin(admin.ModelAdmin):
    list_display = ('weapon_type', 'budget_weight', 'is_essential', 'priority')
    list_editable = ('budget_weight', 'is_essential', 'priority')
