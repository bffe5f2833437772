"""
HTTP binding to an OpenAI-compatible chat-completions endpoint.

:class:`ProviderClient` is bound to exactly one API key and one base URL.
:class:`ClientBinding` owns at most one such client and guarantees it is
never reused once the key changes::

    Unbound ──get(key)──▶ Bound(key)
       ▲                     │
       └──────reset()────────┘      (get(other_key) rebuilds as well)
"""

import logging
import threading

import requests

from .errors import TransportError, extract_error_detail
from .providers import ProviderConfig

log = logging.getLogger("codewhisper")


class ProviderClient:
    """Sends chat-completion requests for one provider with one key."""

    def __init__(self, provider: ProviderConfig, api_key: str,
                 timeout: float = 120.0) -> None:
        self.provider = provider
        self.api_key = api_key
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return self.provider.chat_url

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if self.provider.streaming else "application/json",
            **self.provider.auth_headers(self.api_key),
        }

    def chat_completions(self, payload: dict, stream: bool) -> requests.Response:
        """POST *payload* and return the successful response.

        Every call is an independent HTTP request; no connection state is
        shared between concurrent calls.

        Raises
        ------
        TransportError
            On connection failures, timeouts, and non-2xx answers.  The
            provider's own error text is included when it sent one.
        """
        url = self.endpoint
        model = payload.get("model", "")
        log.debug("[API] POST %s  model=%s  stream=%s  messages=%d",
                  url, model, stream, len(payload.get("messages", [])))
        try:
            response = requests.post(
                url,
                headers=self.headers(),
                json=payload,
                stream=stream,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(
                f"{self.provider.display_name} API error: could not reach "
                f"the provider ({type(exc).__name__}: {exc})",
                provider=self.provider.display_name,
                endpoint=url,
                model=model,
            ) from exc

        log.debug("[API] %s responded %s", url, response.status_code)

        if not response.ok:
            detail = extract_error_detail(response)
            body = response.text[:500] if response.text else ""
            response.close()
            raise TransportError(
                f"{self.provider.display_name} API error: {detail}",
                provider=self.provider.display_name,
                status_code=response.status_code,
                endpoint=url,
                model=model,
                response_body=body,
            )
        return response


class ClientBinding:
    """Lazily built, key-scoped :class:`ProviderClient` holder."""

    def __init__(self, provider: ProviderConfig, timeout: float = 120.0) -> None:
        self._provider = provider
        self._timeout = timeout
        self._client: ProviderClient | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        """``"unbound"`` or ``"bound"``."""
        return "bound" if self._client is not None else "unbound"

    @property
    def bound_key(self) -> str | None:
        client = self._client
        return client.api_key if client is not None else None

    def get(self, api_key: str) -> ProviderClient:
        """Return the client bound to *api_key*, building it if needed."""
        with self._lock:
            if self._client is None or self._client.api_key != api_key:
                if self._client is not None:
                    log.debug("[API] Key changed; rebinding %s client.",
                              self._provider.name)
                self._client = ProviderClient(self._provider, api_key, self._timeout)
                log.debug("[API] Bound %s client to %s",
                          self._provider.name, self._provider.base_url)
            return self._client

    def reset(self) -> None:
        with self._lock:
            self._client = None
