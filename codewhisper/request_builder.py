"""Build chat-completion messages and payloads for code generation."""

from . import config

SYSTEM_PROMPT = (
    "You are a helpful coding assistant. When asked to write code, respond "
    "with only the code and no additional explanation. Format your response "
    "using markdown code blocks with the appropriate language specified."
)

#: Optional task-specific prefixes placed in front of the user's prompt.
TASK_PREFIXES: dict[str, str] = {
    "generate": "Generate code for the following requirement:",
    "improve":  "Improve or complete this code:",
}


def build_messages(prompt: str, task: str | None = None) -> list[dict]:
    """Return the fixed ``[system, user]`` message pair for *prompt*.

    The prompt is passed verbatim.  With a *task* key from
    :data:`TASK_PREFIXES` the matching prefix is put on its own line first.
    """
    if task:
        try:
            prefix = TASK_PREFIXES[task]
        except KeyError:
            raise ValueError(
                f"Unknown task {task!r}; expected one of {sorted(TASK_PREFIXES)}"
            ) from None
        content = f"{prefix}\n{prompt}"
    else:
        content = prompt
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]


def build_payload(
    messages: list[dict],
    model: str,
    *,
    stream: bool,
    max_tokens: int = config.MAX_OUTPUT_TOKENS,
) -> dict:
    """Build the request body.  Sampling parameters are not caller-tunable."""
    return {
        "model":       model,
        "messages":    messages,
        "temperature": config.TEMPERATURE,
        "max_tokens":  max_tokens,
        "stream":      stream,
    }


def resolve_model(requested: str | None, stored: str) -> str:
    return requested or stored
