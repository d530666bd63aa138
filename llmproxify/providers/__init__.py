from .registry import (
    DEFAULT_PROVIDERS,
    ProviderRegistry,
    build_registry,
    load_providers,
    parse_provider_overrides,
)

__all__ = [
    "DEFAULT_PROVIDERS",
    "ProviderRegistry",
    "build_registry",
    "load_providers",
    "parse_provider_overrides",
]
