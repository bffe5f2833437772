"""
Provider descriptions.

Every supported backend speaks the OpenAI-compatible chat-completion
contract, so a provider is nothing more than data: where to send requests,
how to present the key, whether to stream, and which model to use by
default.  Adding a backend means registering another :class:`ProviderConfig`.
"""

from dataclasses import dataclass, field, replace

from . import config


@dataclass(frozen=True)
class ProviderConfig:
    """Static description of one OpenAI-compatible backend."""

    name: str
    display_name: str
    base_url: str
    default_model: str
    streaming: bool = False
    auth_header: str = "Authorization"
    auth_scheme: str = "Bearer"
    max_tokens: int = config.MAX_OUTPUT_TOKENS
    # Keys are labels shown in the UI; values are API model identifiers.
    models: dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def chat_url(self) -> str:
        return self.base_url.rstrip("/") + "/chat/completions"

    @property
    def key_slot(self) -> str:
        return f"{self.name}_api_key"

    @property
    def model_slot(self) -> str:
        return f"{self.name}_selected_model"

    def auth_headers(self, api_key: str) -> dict[str, str]:
        value = f"{self.auth_scheme} {api_key}" if self.auth_scheme else api_key
        return {self.auth_header: value}


# ---------------------------------------------------------------------------
# Built-in providers
# ---------------------------------------------------------------------------

CEREBRAS = ProviderConfig(
    name="cerebras",
    display_name="Cerebras",
    base_url="https://api.cerebras.ai/v1",
    default_model="llama3.1-8b",
    streaming=True,
    models={
        "Llama 3.1 8B":  "llama3.1-8b",
        "Llama 3.3 70B": "llama-3.3-70b",
    },
)

OPENAI = ProviderConfig(
    name="openai",
    display_name="OpenAI",
    base_url="https://api.openai.com/v1",
    default_model="gpt-4o-mini",
    streaming=False,
    models={
        "GPT-4o mini":   "gpt-4o-mini",
        "GPT-4o":        "gpt-4o",
        "GPT-4 Turbo":   "gpt-4-turbo-preview",
    },
)

_REGISTRY: dict[str, ProviderConfig] = {
    CEREBRAS.name: CEREBRAS,
    OPENAI.name: OPENAI,
}


def register_provider(provider: ProviderConfig) -> None:
    """Add (or replace) a provider under ``provider.name``."""
    _REGISTRY[provider.name] = provider


def provider_names() -> list[str]:
    return sorted(_REGISTRY)


def get_provider(name: str) -> ProviderConfig:
    """Return the provider called *name*, applying any base-URL override.

    Raises :exc:`KeyError` for unknown names.
    """
    try:
        provider = _REGISTRY[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown provider {name!r}. Known providers: {', '.join(provider_names())}"
        ) from None
    override = config.base_url_override(provider.name)
    if override:
        provider = replace(provider, base_url=override)
    return provider
