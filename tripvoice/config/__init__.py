"""Runtime configuration helpers."""

from tripvoice.config.settings import ProviderSnapshot, is_enabled, resolve_provider_snapshot

__all__ = ["ProviderSnapshot", "is_enabled", "resolve_provider_snapshot"]
