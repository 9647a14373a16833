"""
Auto-sync settings client. Scheduling itself runs in the backend.
"""
from typing import Any, Dict

from clients.base import BackendClient
from core.exceptions import ValidationError
from core.schema import AutoSyncSettings

SETTINGS_ENDPOINT = "/autosync/settings"


def validate_auto_sync_settings(settings: AutoSyncSettings) -> None:
    """
    Check settings before they are saved.

    Raises:
        ValidationError: If auto-sync is enabled without a frequency or time
    """
    if not settings.enabled:
        return
    if not settings.frequency or settings.frequency == "manual":
        raise ValidationError("Please select a sync frequency when enabling auto-sync")
    if not settings.time:
        raise ValidationError("Please select a sync time when enabling auto-sync")


class AutoSyncClient(BackendClient):

    def get_settings(self) -> AutoSyncSettings:
        data = self.get(SETTINGS_ENDPOINT) or {}
        return self.parse_model(AutoSyncSettings, data, SETTINGS_ENDPOINT)

    def update_settings(self, settings: AutoSyncSettings) -> AutoSyncSettings:
        validate_auto_sync_settings(settings)
        data = self.put(SETTINGS_ENDPOINT, json_body=settings.model_dump(by_alias=True))
        # The backend may echo the stored settings back
        if isinstance(data, dict) and isinstance(data.get("settings"), dict):
            return self.parse_model(AutoSyncSettings, data["settings"], SETTINGS_ENDPOINT)
        return settings

    def test_sync(self) -> Dict[str, Any]:
        return self.post("/autosync/test") or {}

    def get_sync_history(self) -> Dict[str, Any]:
        return self.get("/users/sync-stats") or {}
