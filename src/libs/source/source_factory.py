"""Factory that creates the retrieval strategy named in settings.

Registration maps a provider name to a `BaseSource` subclass; creation reads
`settings.build_info.source` and instantiates the matching class, so callers
never branch on the deployment target themselves.
"""

from __future__ import annotations

from typing import Any

from src.libs.source.base_source import BaseSource


class SourceFactory:
    """Registry-based source factory."""

    _PROVIDERS: dict[str, type[BaseSource]] = {}

    @classmethod
    def register_provider(cls, name: str, provider_cls: type[BaseSource]) -> None:
        """Register a source class under a case-insensitive name."""

        normalized_name = name.strip().lower()
        if not normalized_name:
            raise ValueError("Provider name cannot be empty")

        if not issubclass(provider_cls, BaseSource):
            raise ValueError("Provider class must inherit from BaseSource")

        cls._PROVIDERS[normalized_name] = provider_cls

    @classmethod
    def create(cls, settings: Any, **kwargs: Any) -> BaseSource:
        """Create the source named by `settings.build_info.source`.

        Raises ValueError when the name is missing or not registered.
        """

        provider_name = getattr(getattr(settings, "build_info", None), "source", None)
        if not isinstance(provider_name, str) or not provider_name.strip():
            raise ValueError("Missing required setting: build_info.source")

        normalized_name = provider_name.strip().lower()
        provider_cls = cls._PROVIDERS.get(normalized_name)
        if provider_cls is None:
            available = ", ".join(cls.list_providers()) or "(none)"
            raise ValueError(
                f"Unsupported build info source '{provider_name}'. "
                f"Available sources: {available}"
            )

        return provider_cls(settings, **kwargs)

    @classmethod
    def list_providers(cls) -> list[str]:
        return sorted(cls._PROVIDERS)
