"""Application settings and configuration management.

Manages:
- Location of the bundled knowledge graph and lexicon
- Claude API configuration (key, model, sampling)
- Extraction policy and visualization defaults
- Logging options
"""

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PACKAGE_DIR = Path(__file__).parent.parent
DEFAULT_KNOWLEDGE_GRAPH_PATH = PACKAGE_DIR / "data" / "knowledge_graph.json"
DEFAULT_LEXICON_PATH = PACKAGE_DIR / "config" / "lexicon.yaml"
DEFAULT_PROMPTS_DIR = PACKAGE_DIR / "config" / "prompts"


class Settings(BaseModel):
    """Application configuration settings."""

    # Data files
    knowledge_graph_path: Path = Field(
        default=DEFAULT_KNOWLEDGE_GRAPH_PATH, description="Knowledge graph JSON ({meta, nodes, edges})"
    )
    lexicon_path: Path = Field(
        default=DEFAULT_LEXICON_PATH, description="Gene allow-list, keyword families, disease->gene table"
    )
    prompts_dir: Path = Field(default=DEFAULT_PROMPTS_DIR, description="System prompt and context header")

    # Claude API settings
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    api_key_prefix: str = Field(default="sk-ant-", description="Required literal prefix of the API key")
    claude_model: str = Field(default="claude-haiku-4-5", description="Claude model to use")
    claude_max_tokens: int = Field(default=1000, description="Max tokens per response")
    claude_temperature: float = Field(default=0.3, description="Sampling temperature")

    # Extraction settings
    quota_policy: Literal["shared", "per_anchor"] = Field(
        default="shared",
        description="Whether per-type caps are shared across anchor genes or reset per anchor",
    )

    # UI settings
    graph_layout: str = Field(default="cose", description="Cytoscape.js layout for subgraphs")
    show_debug_info: bool = Field(default=False, description="Show debug information in UI")

    # Logging
    log_level: str = Field(default="INFO", description="Root logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Build settings from environment variables (and an optional .env file).

        Args:
            env_file: Explicit .env path; defaults to python-dotenv discovery

        Returns:
            Settings with environment overrides applied
        """
        load_dotenv(dotenv_path=env_file)

        overrides = {}
        env_map = {
            "ANTHROPIC_API_KEY": "anthropic_api_key",
            "ONCOGRAPH_MODEL": "claude_model",
            "ONCOGRAPH_MAX_TOKENS": "claude_max_tokens",
            "ONCOGRAPH_TEMPERATURE": "claude_temperature",
            "ONCOGRAPH_KNOWLEDGE_GRAPH": "knowledge_graph_path",
            "ONCOGRAPH_LEXICON": "lexicon_path",
            "ONCOGRAPH_QUOTA_POLICY": "quota_policy",
            "ONCOGRAPH_GRAPH_LAYOUT": "graph_layout",
            "ONCOGRAPH_LOG_LEVEL": "log_level",
            "ONCOGRAPH_LOG_FILE": "log_file",
            "ONCOGRAPH_DEBUG": "show_debug_info",
        }
        for env_var, field_name in env_map.items():
            value = os.getenv(env_var)
            if value is not None and value != "":
                overrides[field_name] = value

        return cls(**overrides)


# Cached instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the application settings.

    Returns:
        Settings instance with default or environment-configured values
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    global _settings
    _settings = None
