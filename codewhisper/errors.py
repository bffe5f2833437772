"""
Error taxonomy for the code-generation client.

Every failure surfaced to the caller is one of four types:

* :class:`AuthenticationError`: no API key is available.
* :class:`TransportError`:      the provider could not be reached or
  answered with a non-2xx status.
* :class:`ProviderError`:       a 2xx answer that is malformed or carries an
  application-level error object.
* :class:`UnknownError`:        anything else; keeps the original message.

None of them is retried automatically.
"""

import requests


class CodeGenError(Exception):
    """Base class that preserves diagnostic context for display and logs.

    Attributes
    ----------
    provider : str
        Display name of the provider (``""`` when not known).
    status_code : int | None
        HTTP status code (``None`` for non-HTTP errors).
    endpoint : str
        The URL that was called.
    model : str
        Model identifier sent in the request.
    response_body : str
        First 500 chars of the response body.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str = "",
        status_code: int | None = None,
        endpoint: str = "",
        model: str = "",
        response_body: str = "",
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        self.endpoint = endpoint
        self.model = model
        self.response_body = response_body
        super().__init__(message)

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:  # noqa: D105
        parts = [super().__str__()]
        if self.status_code is not None:
            parts.append(f"  HTTP {self.status_code}")
        if self.endpoint:
            parts.append(f"  Endpoint: {self.endpoint}")
        if self.model:
            parts.append(f"  Model: {self.model}")
        if self.response_body:
            parts.append(f"  Response: {self.response_body[:500]}")
        return "\n".join(parts)


class AuthenticationError(CodeGenError):
    """No credential was available when a client had to be built."""


class TransportError(CodeGenError):
    """Network failure or non-2xx HTTP status."""


class ProviderError(CodeGenError):
    """Well-formed HTTP exchange, but the payload is unusable or an error."""


class UnknownError(CodeGenError):
    """Any failure not covered by the other types."""


def extract_error_detail(response: requests.Response) -> str:
    """Return the provider's own error description from *response*.

    Understands the OpenAI-style ``{"error": {"message": ..., "type": ...}}``
    body, falls back to the raw text (truncated to 500 chars), and finally to
    a generic message when the body is empty.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] if response.text else "(empty body)"
    if isinstance(body, dict) and "error" in body:
        err = body["error"]
        if isinstance(err, dict):
            message = err.get("message") or str(err)
            if err.get("type"):
                return f"[{err['type']}] {message}"
            return message
        return str(err)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:500] if response.text else "(empty body)"


def classify_exception(
    exc: BaseException,
    *,
    provider: str = "",
    endpoint: str = "",
    model: str = "",
) -> CodeGenError:
    """Map an arbitrary exception onto the error taxonomy.

    Already-classified errors are returned unchanged.  ``ProviderClient``
    checks ``response.ok`` itself, so :class:`requests.HTTPError` only
    arrives here from callers that drive ``requests`` directly and use
    ``raise_for_status()``; it is mapped the same way, to a
    :class:`TransportError` carrying the provider's message.
    """
    if isinstance(exc, CodeGenError):
        return exc
    prefix = f"{provider} API error" if provider else "API error"
    if isinstance(exc, requests.HTTPError):
        response = exc.response
        status = response.status_code if response is not None else None
        detail = extract_error_detail(response) if response is not None else str(exc)
        return TransportError(
            f"{prefix}: {detail}",
            provider=provider,
            status_code=status,
            endpoint=endpoint,
            model=model,
            response_body=(response.text[:500] if response is not None and response.text else ""),
        )
    if isinstance(exc, requests.RequestException):
        return TransportError(
            f"{prefix}: could not reach the provider ({type(exc).__name__}: {exc})",
            provider=provider,
            endpoint=endpoint,
            model=model,
        )
    message = str(exc) or type(exc).__name__
    return UnknownError(
        f"{prefix}: {message}",
        provider=provider,
        endpoint=endpoint,
        model=model,
    )
