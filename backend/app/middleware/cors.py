from __future__ import annotations

# Local frontends (CRA / Vite) during development.
_DEV_ORIGINS = ("http://localhost:3000", "http://localhost:5173")


def build_allowed_origins(
    *,
    frontend_base_url: str | None,
    frontend_urls: str | None,
    include_dev_origins: bool = True,
) -> list[str]:
    """FRONTEND_BASE_URL plus the comma-separated FRONTEND_URLS, without trailing slashes."""
    candidates = [frontend_base_url or "", *str(frontend_urls or "").split(",")]
    if include_dev_origins:
        candidates.extend(_DEV_ORIGINS)
    return sorted({c.strip().rstrip("/") for c in candidates if c and c.strip()})
