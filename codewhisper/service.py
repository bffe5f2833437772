"""
Code-generation service: the single entry point used by the UI.

Wires the credential store, client binding, request builder, response
consumer and code extractor together for one provider::

    session = SessionContext()
    service = CodeGenService(session, get_provider("cerebras"))
    service.set_api_key("csk-…")
    code = service.generate_code("write a function that adds two numbers")
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from . import config
from .client import ClientBinding, ProviderClient
from .errors import AuthenticationError, CodeGenError, classify_exception
from .extractor import extract_code, has_unclosed_fence
from .providers import ProviderConfig
from .request_builder import TASK_PREFIXES, build_messages, build_payload, resolve_model
from .response_consumer import accumulate_stream, read_completion
from .session import CredentialStore, SessionContext

log = logging.getLogger("codewhisper")


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    model: str | None = None
    task: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    """Extracted code plus what is needed to spot a cut-off answer."""

    code: str
    raw_text: str
    model: str
    truncated: bool = False


def _validate(request: GenerationRequest) -> None:
    if not request.prompt or not request.prompt.strip():
        raise ValueError("Prompt must not be empty.")
    if request.task and request.task not in TASK_PREFIXES:
        raise ValueError(
            f"Unknown task {request.task!r}; expected one of {sorted(TASK_PREFIXES)}"
        )


class CodeGenService:
    """Generate code with one provider, using keys from a session."""

    def __init__(
        self,
        session: SessionContext,
        provider: ProviderConfig,
        *,
        timeout: float | None = None,
        max_workers: int = 4,
    ) -> None:
        self._session = session
        self._provider = provider
        self._binding = ClientBinding(
            provider, timeout if timeout is not None else config.request_timeout(),
        )
        self._executor: ThreadPoolExecutor | None = None
        self._max_workers = max_workers

    @property
    def provider(self) -> ProviderConfig:
        return self._provider

    @property
    def binding(self) -> ClientBinding:
        return self._binding

    def _store(self) -> CredentialStore:
        return self._session.credentials(self._provider)

    # ------------------------------------------------------------------
    # Credentials & model
    # ------------------------------------------------------------------

    def set_api_key(self, key: str) -> None:
        """Store *key* and drop any client bound to the previous key."""
        self._store().set_key(key)
        self._binding.reset()

    def get_api_key(self) -> str | None:
        return self._store().get_key()

    def set_model(self, model: str) -> None:
        self._store().set_model(model)

    def get_model(self) -> str:
        return self._store().get_model()

    def get_client(self) -> ProviderClient:
        """Return a client bound to the current key.

        Raises :class:`AuthenticationError` when no key is set.
        """
        api_key = self.get_api_key()
        if not api_key:
            raise AuthenticationError(
                f"API key not set. Please set your "
                f"{self._provider.display_name} API key first.",
                provider=self._provider.display_name,
            )
        return self._binding.get(api_key)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one request to completion and return the extracted code.

        All failures are raised as :class:`~codewhisper.errors.CodeGenError`
        subclasses; nothing is retried.
        """
        _validate(request)
        client = self.get_client()
        return self._run(client, request)

    def _run(self, client: ProviderClient, request: GenerationRequest) -> GenerationResult:
        provider = self._provider
        model = resolve_model(request.model, self.get_model())
        messages = build_messages(request.prompt, request.task)
        payload = build_payload(
            messages, model,
            stream=provider.streaming,
            max_tokens=provider.max_tokens,
        )
        try:
            response = client.chat_completions(payload, stream=provider.streaming)
            if provider.streaming:
                streamed = accumulate_stream(response, provider.display_name)
                raw_text = streamed.text
                truncated = streamed.truncated or has_unclosed_fence(raw_text)
            else:
                raw_text = read_completion(response, provider.display_name, model)
                truncated = has_unclosed_fence(raw_text)
        except CodeGenError as exc:
            if not exc.model:
                exc.model = model
            if not exc.endpoint:
                exc.endpoint = client.endpoint
            log.error("[API] %s request failed: %s", provider.display_name, exc)
            raise
        except Exception as exc:  # noqa: BLE001
            log.error("[API] Unexpected %s error: %s", provider.display_name, exc,
                      exc_info=True)
            raise classify_exception(
                exc,
                provider=provider.display_name,
                endpoint=client.endpoint,
                model=model,
            ) from exc

        if truncated:
            log.warning("[API] %s answer looks truncated (model=%s, %d chars).",
                        provider.display_name, model, len(raw_text))
        return GenerationResult(
            code=extract_code(raw_text),
            raw_text=raw_text,
            model=model,
            truncated=truncated,
        )

    def generate_code(self, prompt: str, model: str | None = None,
                      task: str | None = None) -> str:
        """Return the code for *prompt* (blocking)."""
        return self.generate(GenerationRequest(prompt, model, task)).code

    def generate_code_async(self, prompt: str, model: str | None = None,
                            task: str | None = None) -> "Future[str]":
        """Start a request in the background and return its own future.

        Key and prompt are checked before anything is scheduled, so a
        missing key raises :class:`AuthenticationError` right here.
        """
        request = GenerationRequest(prompt, model, task)
        _validate(request)
        client = self.get_client()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix=f"codegen-{self._provider.name}",
            )
        return self._executor.submit(lambda: self._run(client, request).code)

    def close(self) -> None:
        """Stop the background pool; requests already running still finish."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
