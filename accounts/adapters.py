import structlog
from allauth.account.utils import get_adapter
from allauth.socialaccount.adapter import DefaultSocialAccountAdapter

from accounts.steam import is_valid_steam_id, update_profile_from_summary

logger = structlog.get_logger(__name__)


class SteamSocialAccountAdapter(DefaultSocialAccountAdapter):
    """
    Keeps the SteamProfile cache in sync with what Steam returned at login.

    allauth's Steam provider verifies the OpenID assertion and fetches the
    player summary with our Web API key; the summary ends up in
    ``sociallogin.account.extra_data``.
    """

    def is_open_for_signup(self, request, sociallogin):
        # Steam accounts are the only way in.
        return sociallogin.account.provider == 'steam'

    def pre_social_login(self, request, sociallogin):
        """Refresh the cached profile of returning users on every login."""
        if not sociallogin.is_existing:
            return
        summary = self._summary(sociallogin)
        if summary:
            update_profile_from_summary(sociallogin.user, summary)

    def populate_user(self, request, sociallogin, data):
        """Use the Steam persona name as the username when it is free."""
        user = super().populate_user(request, sociallogin, data)
        summary = self._summary(sociallogin)
        persona_name = (summary.get('personaname') or '').strip()
        user.username = get_adapter().generate_unique_username([
            persona_name,
            f"steam_{sociallogin.account.uid}",
            'user',
        ])
        return user

    def save_user(self, request, sociallogin, form=None):
        user = super().save_user(request, sociallogin, form)
        summary = self._summary(sociallogin)
        if summary:
            update_profile_from_summary(user, summary)
        logger.info("steam_user_created", user_id=user.pk, steam_id=sociallogin.account.uid)
        return user

    @staticmethod
    def _summary(sociallogin) -> dict:
        summary = dict(sociallogin.account.extra_data or {})
        if not is_valid_steam_id(summary.get('steamid')) and is_valid_steam_id(sociallogin.account.uid):
            summary['steamid'] = sociallogin.account.uid
        return summary
