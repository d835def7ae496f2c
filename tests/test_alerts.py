"""Tests for price alerts, the periodic checker and push delivery."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from django.utils import timezone
from pywebpush import WebPushException

from alerts import notifications, services
from alerts.checker import check_alerts
from alerts.models import AlertTrigger, PriceAlert, PushSubscription
from csloadout.errors import Forbidden, NotFound, ValidationError

pytestmark = pytest.mark.django_db

ENDPOINT = "https://fcm.googleapis.com/fcm/send/abc123"
KEYS = {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM",
        "auth": "tBHItJI5svbpez7KI4CCXg"}


class TestCreate:
    def test_create(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        assert alert.target_price == Decimal("50.00")
        assert alert.notify_email is True
        assert alert.notify_push is False
        assert alert.is_active is True

    @pytest.mark.parametrize("target", ["0", "-5"])
    def test_target_must_be_positive(self, user, redline, target) -> None:
        with pytest.raises(ValidationError) as exc_info:
            services.create_alert(user, redline.pk, target)
        assert exc_info.value.message == "Target price must be greater than $0"

    def test_needs_a_notification_method(self, user, redline) -> None:
        with pytest.raises(ValidationError) as exc_info:
            services.create_alert(user, redline.pk, "50", notify_email=False, notify_push=False)
        assert exc_info.value.message == "Select at least one notification method"

    def test_one_active_alert_per_item(self, user, redline) -> None:
        services.create_alert(user, redline.pk, "50")
        with pytest.raises(ValidationError) as exc_info:
            services.create_alert(user, redline.pk, "40")
        assert exc_info.value.message == "You already have an active alert for this item"

    def test_paused_alert_does_not_block(self, user, redline) -> None:
        first = services.create_alert(user, redline.pk, "50")
        services.toggle_alert(user, first.pk)
        assert services.create_alert(user, redline.pk, "40").is_active is True

    def test_unknown_item(self, user) -> None:
        with pytest.raises(NotFound):
            services.create_alert(user, "does-not-exist", "10")


class TestManage:
    def test_partial_update(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        updated = services.update_alert(user, alert.pk, target_price="45.5")
        assert updated.target_price == Decimal("45.50")
        assert updated.notify_email is True

    def test_cannot_disable_every_method(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        with pytest.raises(ValidationError):
            services.update_alert(user, alert.pk, notify_email=False)

    def test_other_users_alert(self, user, other_user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        with pytest.raises(Forbidden):
            services.update_alert(other_user, alert.pk, target_price="10")
        with pytest.raises(Forbidden):
            services.delete_alert(other_user, alert.pk)

    def test_resume_blocked_by_newer_active_alert(self, user, redline) -> None:
        first = services.create_alert(user, redline.pk, "50")
        services.toggle_alert(user, first.pk)
        services.create_alert(user, redline.pk, "40")
        with pytest.raises(ValidationError):
            services.toggle_alert(user, first.pk)

    def test_delete(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        services.delete_alert(user, alert.pk)
        assert not PriceAlert.objects.exists()


class TestChecker:
    def test_triggers_at_or_below_target(self, user, redline, mailoutbox) -> None:
        alert = services.create_alert(user, redline.pk, "46.50")

        summary = check_alerts()

        assert summary["alerts_checked"] == 1
        assert summary["alerts_triggered"] == 1
        assert summary["triggered_details"][0]["platform"] == "csfloat"
        trigger = AlertTrigger.objects.get(alert=alert)
        assert trigger.triggered_price == Decimal("46.50")
        assert trigger.email_sent is True
        alert.refresh_from_db()
        assert alert.triggered_count == 1
        assert alert.last_triggered_at is not None
        assert len(mailoutbox) == 1
        assert mailoutbox[0].subject == "🔔 Price Alert: AK-47 | Redline (Field-Tested) is now $46.50"
        assert mailoutbox[0].to == ["gaben@example.com"]

    def test_price_above_target(self, user, redline) -> None:
        services.create_alert(user, redline.pk, "40")
        summary = check_alerts()
        assert summary["alerts_triggered"] == 0
        assert not AlertTrigger.objects.exists()

    def test_cooldown(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        with patch("alerts.checker.notifications.send_alert_email", return_value=True) as send:
            check_alerts()
            assert check_alerts()["alerts_triggered"] == 0

            PriceAlert.objects.filter(pk=alert.pk).update(
                last_triggered_at=timezone.now() - timedelta(minutes=16),
            )
            assert check_alerts()["alerts_triggered"] == 1

        assert send.call_count == 2
        alert.refresh_from_db()
        assert alert.triggered_count == 2

    def test_paused_alerts_are_skipped(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        services.toggle_alert(user, alert.pk)
        assert check_alerts()["alerts_checked"] == 0

    def test_email_respects_profile_setting(self, user, redline, mailoutbox) -> None:
        user.steam_profile.email_notifications = False
        user.steam_profile.save()
        services.create_alert(user, redline.pk, "50")

        check_alerts()

        assert mailoutbox == []
        assert AlertTrigger.objects.get().email_sent is False


class TestPush:
    @pytest.fixture
    def subscription(self, user):
        return services.save_push_subscription(user, ENDPOINT, KEYS, user_agent="Firefox")

    def test_payload(self, user, redline) -> None:
        alert = services.create_alert(user, redline.pk, "50")
        payload = notifications.push_payload(alert, Decimal("46.50"))
        assert payload["title"] == "Price Alert: AK-47 | Redline (Field-Tested)"
        assert payload["body"] == "Now $46.50 - Your target: $50.00"
        assert payload["data"]["url"].endswith("/items/skin-redline-ft/")

    def test_delivery(self, user, redline, subscription) -> None:
        alert = services.create_alert(user, redline.pk, "50", notify_email=False, notify_push=True)
        with patch("alerts.notifications.webpush") as webpush:
            check_alerts()

        assert webpush.call_count == 1
        assert webpush.call_args.kwargs["subscription_info"] == {"endpoint": ENDPOINT, "keys": KEYS}
        assert AlertTrigger.objects.get(alert=alert).push_sent is True

    def test_gone_subscription_is_deleted(self, user, redline, subscription) -> None:
        alert = services.create_alert(user, redline.pk, "50", notify_email=False, notify_push=True)
        error = WebPushException("gone", response=MagicMock(status_code=410))
        with patch("alerts.notifications.webpush", side_effect=error):
            assert notifications.send_alert_push(alert, Decimal("46.50")) is False
        assert not PushSubscription.objects.exists()

    def test_other_failures_keep_subscription(self, subscription) -> None:
        error = WebPushException("server error", response=MagicMock(status_code=500))
        with patch("alerts.notifications.webpush", side_effect=error):
            assert notifications.send_push(subscription, {"title": "x"}) is False
        assert PushSubscription.objects.count() == 1

    def test_skipped_without_vapid_key(self, user, redline, subscription, settings) -> None:
        settings.VAPID_PRIVATE_KEY = ""
        alert = services.create_alert(user, redline.pk, "50", notify_push=True)
        with patch("alerts.notifications.webpush") as webpush:
            assert notifications.send_alert_push(alert, Decimal("46.50")) is False
        webpush.assert_not_called()

    def test_resubscribe_updates_keys(self, user, subscription) -> None:
        services.save_push_subscription(user, ENDPOINT, {"p256dh": "new", "auth": "new-auth"})
        stored = PushSubscription.objects.get()
        assert stored.p256dh == "new"
        assert stored.user_agent == "Unknown"

    def test_invalid_subscription(self, user) -> None:
        with pytest.raises(ValidationError):
            services.save_push_subscription(user, ENDPOINT, {"p256dh": "only"})


class TestApi:
    def test_create_and_list(self, auth_client, redline) -> None:
        response = auth_client.post("/api/alerts/", {"item_id": redline.pk, "target_price": "45"}, format="json")
        assert response.status_code == 201
        assert response.data["current_price"] == "46.50"

        response = auth_client.get("/api/alerts/")
        assert len(response.data["alerts"]) == 1

    def test_duplicate_is_400(self, auth_client, redline) -> None:
        auth_client.post("/api/alerts/", {"item_id": redline.pk, "target_price": "45"}, format="json")
        response = auth_client.post("/api/alerts/", {"item_id": redline.pk, "target_price": "40"}, format="json")
        assert response.status_code == 400
        assert response.data["message"] == "You already have an active alert for this item"

    def test_toggle_someone_elses_alert(self, auth_client, other_user, redline) -> None:
        alert = services.create_alert(other_user, redline.pk, "50")
        response = auth_client.post(f"/api/alerts/{alert.pk}/toggle/")
        assert response.status_code == 403

    def test_push_subscribe(self, auth_client, user) -> None:
        response = auth_client.post("/api/push/subscribe/", {"endpoint": ENDPOINT, "keys": KEYS},
                                    format="json", HTTP_USER_AGENT="Firefox")
        assert response.status_code == 200
        assert PushSubscription.objects.get().user == user

        response = auth_client.delete("/api/push/subscribe/", {"endpoint": ENDPOINT}, format="json")
        assert response.data == {"success": True, "removed": 1}

    def test_vapid_key_is_public(self, api_client) -> None:
        response = api_client.get("/api/push/vapid-key/")
        assert response.data == {"public_key": "test-public-key"}

    def test_cron_requires_secret(self, client) -> None:
        response = client.get("/api/cron/check-alerts/", HTTP_AUTHORIZATION="Bearer wrong")
        assert response.status_code == 401

    def test_cron_runs_check(self, client, user, redline) -> None:
        services.create_alert(user, redline.pk, "50")
        with patch("alerts.checker.notifications.send_alert_email", return_value=True):
            response = client.get("/api/cron/check-alerts/", HTTP_AUTHORIZATION="Bearer cron-secret")
        assert response.status_code == 200
        assert response.json()["alerts_triggered"] == 1
