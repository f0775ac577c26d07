"""Flask configuration."""

import os


class Config:
    """Base configuration."""

    # AI player: 'claude', 'memory' or 'random'
    SUGGESTER = os.environ.get("CONCENTRATION_SUGGESTER", "claude")
    CLAUDE_MODEL = os.environ.get("CONCENTRATION_CLAUDE_MODEL") or None
    LLM_TIMEOUT = float(os.environ.get("CONCENTRATION_LLM_TIMEOUT", "60"))  # seconds per suggestion

    # Match registry
    MAX_MATCHES = int(os.environ.get("CONCENTRATION_MAX_MATCHES", "100"))
    MATCH_TTL = float(os.environ.get("CONCENTRATION_MATCH_TTL", "3600"))  # idle seconds

    # Largest accepted rows/cols for new games
    MAX_DIMENSION = int(os.environ.get("CONCENTRATION_MAX_DIMENSION", "20"))


class TestConfig(Config):
    """Testing configuration."""

    TESTING = True
    SUGGESTER = "memory"
    LLM_TIMEOUT = 5.0
    MAX_MATCHES = 10
