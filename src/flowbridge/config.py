from __future__ import annotations

import os
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class ConverterConfig:
    id_prefix: str = "fb"
    format_marker: str = "@webflow/XscpData"
    max_variable_passes: int = 10
    strip_important: bool = True
    embed_chunk_size: int = 40_000  # chars per HtmlEmbed node
    embed_soft_limit: int = 10 * 1024
    embed_hard_limit: int = 100 * 1024
    project_api: str = ""  # e.g. "https://designer.example.com/api"
    project_id: str = ""
    project_token: str = ""
    lookup_timeout: float = 5.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ConverterConfig:
        """Build a config from ``FLOWBRIDGE_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        overrides: dict[str, object] = {}
        if env.get("FLOWBRIDGE_ID_PREFIX"):
            overrides["id_prefix"] = env["FLOWBRIDGE_ID_PREFIX"]
        if env.get("FLOWBRIDGE_PROJECT_API"):
            overrides["project_api"] = env["FLOWBRIDGE_PROJECT_API"]
        if env.get("FLOWBRIDGE_PROJECT_ID"):
            overrides["project_id"] = env["FLOWBRIDGE_PROJECT_ID"]
        if env.get("FLOWBRIDGE_PROJECT_TOKEN"):
            overrides["project_token"] = env["FLOWBRIDGE_PROJECT_TOKEN"]
        if env.get("FLOWBRIDGE_LOOKUP_TIMEOUT"):
            overrides["lookup_timeout"] = float(env["FLOWBRIDGE_LOOKUP_TIMEOUT"])
        return replace(config, **overrides) if overrides else config
