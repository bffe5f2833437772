"""
Command-line entry point.

Run with::

    python -m codewhisper [--provider cerebras|openai] [--debug]
"""

import argparse
import logging

from . import config
from .providers import get_provider, provider_names
from .session import SessionContext

log = logging.getLogger("codewhisper")


def build_session() -> SessionContext:
    """Create the session and seed it with keys found in the environment."""
    session = SessionContext()
    for name in provider_names():
        key = config.env_api_key(name)
        if key:
            session.credentials(get_provider(name)).set_key(key)
            log.info("[APP] Using %s API key from the environment.", name)
    return session


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="codewhisper",
        description="Try-it window for generating code with a hosted LLM.",
    )
    parser.add_argument(
        "--provider", choices=provider_names(), default=config.default_provider(),
        help="backend to start with (default: %(default)s)",
    )
    parser.add_argument("--debug", action="store_true",
                        help="log requests and session activity to the console")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=config.log_level(args.debug),
        format="%(asctime)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    from .app import TryItApp  # tkinter is only needed for the window

    app = TryItApp(build_session(), args.provider)
    app.run()


if __name__ == "__main__":
    main()
