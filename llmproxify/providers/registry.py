import json
import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from llmproxify.errors import ProviderNotFoundError, SerializationError

logger = logging.getLogger("uvicorn.error")

# Base URLs end with "/" so the remainder path is appended instead of
# replacing the last segment when joined.
DEFAULT_PROVIDERS: Tuple[Tuple[str, str], ...] = (
    ("openai", "https://api.openai.com/"),
    ("groq", "https://api.groq.com/"),
    ("cerebras", "https://api.cerebras.ai/"),
    ("gemini", "https://generativelanguage.googleapis.com/"),
    ("sambanova", "https://api.sambanova.ai/"),
    ("anthropic", "https://api.anthropic.com/"),
)


class ProviderRegistry:
    """Read-only mapping of provider name to upstream base URL."""

    def __init__(self, providers: Mapping[str, str]):
        self._providers = MappingProxyType(dict(providers))

    def resolve(self, name: str) -> str:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotFoundError(name) from None

    def get(self, name: str) -> Optional[str]:
        return self._providers.get(name)

    def names(self) -> list[str]:
        return sorted(self._providers)

    def as_mapping(self) -> Mapping[str, str]:
        return self._providers

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderRegistry({dict(self._providers)!r})"


def parse_provider_overrides(raw: str) -> Dict[str, str]:
    """
    Parse the ``API_PROVIDERS`` setting into a name -> base URL mapping.

    Entries whose value is not a string are skipped.

    Raises:
        SerializationError: if ``raw`` is not valid JSON or not a JSON object.
    """
    if not raw or not raw.strip():
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SerializationError(str(e)) from e

    if not isinstance(data, dict):
        raise SerializationError(
            f"expected a JSON object, got {type(data).__name__}"
        )

    overrides: Dict[str, str] = {}
    for name, url in data.items():
        if not isinstance(url, str):
            logger.warning(
                f"[Providers] Skipping override for '{name}': base URL must be a string"
            )
            continue
        overrides[name] = url
    return overrides


def build_registry(
    overrides: Optional[Mapping[str, str]] = None,
    defaults: Iterable[Tuple[str, str]] = DEFAULT_PROVIDERS,
) -> ProviderRegistry:
    providers = dict(defaults)
    if overrides:
        providers.update(overrides)
    return ProviderRegistry(providers)


def load_providers(raw: Optional[str]) -> ProviderRegistry:
    """Build the registry from the defaults and the raw override setting."""
    try:
        overrides = parse_provider_overrides(raw or "")
    except SerializationError as e:
        logger.warning(f"[Providers] Ignoring API_PROVIDERS: {e}")
        overrides = {}

    registry = build_registry(overrides)
    if overrides:
        logger.info(
            f"[Providers] Applied overrides for: {', '.join(sorted(overrides))}"
        )
    logger.debug(f"[Providers] Known providers: {', '.join(registry.names())}")
    return registry
