"""Build descriptor sources and default provider registration.

`from src.libs.source import SourceFactory` then create the strategy named
in settings.
"""

from src.libs.source.base_source import BaseSource, CompletionHandler
from src.libs.source.file_source import FileSource
from src.libs.source.fixed_source import FixedSource
from src.libs.source.http_source import HttpSource, HttpSourceError
from src.libs.source.source_factory import SourceFactory

if "file" not in SourceFactory._PROVIDERS:
    SourceFactory.register_provider("file", FileSource)
if "http" not in SourceFactory._PROVIDERS:
    SourceFactory.register_provider("http", HttpSource)
if "fixed" not in SourceFactory._PROVIDERS:
    SourceFactory.register_provider("fixed", FixedSource)

__all__ = [
    "BaseSource",
    "CompletionHandler",
    "FileSource",
    "FixedSource",
    "HttpSource",
    "HttpSourceError",
    "SourceFactory",
]
