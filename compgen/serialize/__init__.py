"""Construction and serialization of components, contexts and identifiers."""

from .components import ComponentConstructor
from .context import ContextConstructor, get_package_name_prefix
from .identifiers import FieldScope, IdentifierMinter
from .jsonld import ContextParser, JsonLdContext, PrefetchedDocumentLoader
from .parameters import ParameterTransformer

__all__ = [
    "ComponentConstructor",
    "ContextConstructor",
    "ContextParser",
    "FieldScope",
    "IdentifierMinter",
    "JsonLdContext",
    "ParameterTransformer",
    "PrefetchedDocumentLoader",
    "get_package_name_prefix",
]
