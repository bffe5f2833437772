"""
Session-scoped state: storage slots plus per-provider credentials and model.

Nothing here touches the disk.  Values live for as long as the owning
:class:`SessionContext` (normally the lifetime of the process) and vanish
with it, which mirrors browser ``sessionStorage`` semantics.

Usage::

    session = SessionContext()
    creds = session.credentials(get_provider("cerebras"))
    creds.set_key("csk-…")
"""

import logging
import threading

from .providers import ProviderConfig

log = logging.getLogger("codewhisper")


def _mask(secret: str) -> str:
    return f"{secret[:4]}… (len={len(secret)})" if secret else "(empty)"


class SessionStorage:
    """Thread-safe string key/value store that never outlives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class CredentialStore:
    """API key and selected model for one provider.

    Both values are cached in memory and mirrored to :class:`SessionStorage`
    under the provider's own slots, so two providers never see each other's
    key.
    """

    def __init__(self, storage: SessionStorage, provider: ProviderConfig) -> None:
        self._storage = storage
        self._provider = provider
        self._api_key: str | None = None
        self._model: str = provider.default_model

    @property
    def provider(self) -> ProviderConfig:
        return self._provider

    def set_key(self, key: str) -> None:
        """Store *key*, silently replacing any previous one."""
        self._api_key = key
        self._storage.set_item(self._provider.key_slot, key)
        log.debug("[SESSION] %s key set: %s", self._provider.name, _mask(key))

    def get_key(self) -> str | None:
        if not self._api_key:
            self._api_key = self._storage.get_item(self._provider.key_slot)
            if self._api_key:
                log.debug("[SESSION] %s key loaded from session storage.",
                          self._provider.name)
        return self._api_key or None

    def set_model(self, model: str) -> None:
        self._model = model
        self._storage.set_item(self._provider.model_slot, model)
        log.debug("[SESSION] %s model set: %s", self._provider.name, model)

    def get_model(self) -> str:
        stored = self._storage.get_item(self._provider.model_slot)
        if stored:
            self._model = stored
        return self._model


class SessionContext:
    """Explicitly constructed owner of all session state.

    The top-level application builds one and hands it to every component
    that needs credentials; there is no module-level singleton.
    """

    def __init__(self, storage: SessionStorage | None = None) -> None:
        self.storage = storage if storage is not None else SessionStorage()
        self._stores: dict[str, CredentialStore] = {}
        self._lock = threading.Lock()

    def credentials(self, provider: ProviderConfig) -> CredentialStore:
        """Return the (single) credential store for *provider*."""
        with self._lock:
            store = self._stores.get(provider.name)
            if store is None:
                store = CredentialStore(self.storage, provider)
                self._stores[provider.name] = store
            return store

    def clear(self) -> None:
        """End the session: forget every stored key and model."""
        with self._lock:
            self.storage.clear()
            self._stores.clear()
        log.debug("[SESSION] Session cleared.")
