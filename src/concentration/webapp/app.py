"""Flask application factory."""

import logging
import os

from flask import Flask

from concentration.engine.match import MatchRegistry
from concentration.llm import has_claude_credentials
from concentration.opponents.base import get_suggester

from .config import Config

logger = logging.getLogger(__name__)


def check_claude_api_credentials() -> bool:
    """Check if Claude credentials are available for the Claude suggester.

    The claude-agent-sdk spawns Claude Code CLI which uses OAuth authentication,
    read from CLAUDE_CODE_OAUTH_TOKEN or ~/.claude/.credentials.json.

    Returns:
        bool: True if credentials are configured, False otherwise
    """
    if has_claude_credentials():
        logger.info("Claude credentials found")
        return True
    logger.warning(
        "Claude Code OAuth credentials not found! The Claude AI player will not work. "
        "For local dev: run 'claude login' or 'claude setup-token', "
        "or set CONCENTRATION_SUGGESTER=memory to play offline."
    )
    return False


def create_registry(config: dict) -> MatchRegistry:
    """Build the match registry from app config."""
    kind = config["SUGGESTER"]
    kwargs = {"model": config["CLAUDE_MODEL"]} if kind == "claude" else {}
    # Fail on unknown types at startup rather than on the first match
    get_suggester(kind, **kwargs)
    return MatchRegistry(
        suggester_factory=lambda: get_suggester(kind, **kwargs),
        max_matches=config["MAX_MATCHES"],
        ttl_seconds=config["MATCH_TTL"],
    )


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Check API credentials at startup - FAIL HARD if the LLM player can't work
    if app.config["SUGGESTER"] == "claude" and not check_claude_api_credentials():
        raise RuntimeError(
            "Claude credentials are not configured! Cannot start with the Claude AI player. "
            "Set CLAUDE_CODE_OAUTH_TOKEN or choose another CONCENTRATION_SUGGESTER."
        )

    app.extensions["match_registry"] = create_registry(app.config)

    # Register blueprints
    from .routes import api

    app.register_blueprint(api.bp)

    logger.info(f"Concentration API ready (suggester={app.config['SUGGESTER']})")
    return app


def main():
    """Entry point for `concentration-web` command."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = create_app()
    port = int(os.environ.get("PORT", "3001"))
    app.run(debug=True, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
