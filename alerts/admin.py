from django.contrib import admin

from .models import AlertTrigger, PriceAlert, PushSubscription


class AlertTriggerInline(admin.TabularInline):
    model = AlertTrigger
    extra = 0
    readonly_fields = ('triggered_price', 'platform', 'listing_url', 'email_sent', 'push_sent', 'triggered_at')


@admin.register(PriceAlert)
class PriceAlertAdmin(admin.ModelAdmin):
    list_display = ('item', 'user', 'target_price', 'is_active', 'triggered_count', 'last_triggered_at')
    list_filter = ('is_active', 'notify_email', 'notify_push')
    search_fields = ('item__name', 'user__username')
    raw_id_fields = ('item',)
    inlines = [AlertTriggerInline]


@admin.register(PushSubscription)
class PushSubscriptionAdmin(admin.ModelAdmin):
    list_display = ('user', 'endpoint', 'created_at')
    search_fields = ('user__username', 'endpoint')
