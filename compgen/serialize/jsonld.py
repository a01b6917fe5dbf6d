"""Minimal JSON-LD context processing: parsing, term expansion and IRI compaction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import DocumentLoadError
from ..io import ResolutionContext

NPMD = "https://linkedsoftwaredependencies.org/bundles/npm/"
COMPONENTSJS_CONTEXT_URL = (
    "https://linkedsoftwaredependencies.org/bundles/npm/componentsjs/^5.0.0/components/context.jsonld"
)

# Prefixes of the foundational components context that matter for compaction.
_FOUNDATION_CONTEXT: Dict[str, Any] = {
    "@context": {
        "npmd": NPMD,
        "oo": "https://linkedsoftwaredependencies.org/vocabularies/object-oriented#",
        "om": "https://linkedsoftwaredependencies.org/vocabularies/object-mapping#",
        "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
        "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
        "xsd": "http://www.w3.org/2001/XMLSchema#",
        "doap": "http://usefulinc.com/ns/doap#",
        "owl": "http://www.w3.org/2002/07/owl#",
        "dcterms": "http://purl.org/dc/terms/",
    }
}

_GEN_DELIMS = (":", "/", "?", "#", "[", "]", "@")


@dataclass(frozen=True)
class TermDefinition:
    iri: str
    prefix: bool


class JsonLdContext:
    """A normalized set of term definitions."""

    def __init__(self, terms: Mapping[str, TermDefinition]) -> None:
        self._terms = dict(terms)

    @property
    def terms(self) -> Dict[str, TermDefinition]:
        return dict(self._terms)

    def expand_term(self, term: str) -> str:
        if term in self._terms:
            return self._terms[term].iri
        if ":" in term:
            prefix, suffix = term.split(":", 1)
            if not suffix.startswith("//") and prefix in self._terms:
                return self._terms[prefix].iri + suffix
        return term

    def compact_iri(self, iri: str) -> str:
        """Compact ``iri`` with the shortest applicable prefix, or return it unchanged."""
        best: Optional[str] = None
        for term, definition in self._terms.items():
            if not definition.prefix or not iri.startswith(definition.iri):
                continue
            suffix = iri[len(definition.iri):]
            if not suffix:
                continue
            candidate = f"{term}:{suffix}"
            if best is None or (len(candidate), candidate) < (len(best), best):
                best = candidate
        return best if best is not None else iri


class PrefetchedDocumentLoader:
    """Serves context documents from memory, or from known files on disk."""

    def __init__(
        self,
        resolution_context: ResolutionContext,
        *,
        files: Optional[Mapping[str, str]] = None,
        documents: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._resolution_context = resolution_context
        self._files = dict(files or {})
        self._documents: Dict[str, Any] = {COMPONENTSJS_CONTEXT_URL: _FOUNDATION_CONTEXT}
        self._documents.update(documents or {})

    async def load(self, url: str) -> Any:
        if url in self._documents:
            return self._documents[url]
        path = self._files.get(url)
        if path is None:
            raise DocumentLoadError(f"Could not load context {url}: no local copy is available")
        document = await self._resolution_context.parse_json(path)
        self._documents[url] = document
        return document


class ContextParser:
    """Turns raw ``@context`` values into :class:`JsonLdContext` instances."""

    def __init__(self, document_loader: PrefetchedDocumentLoader) -> None:
        self._document_loader = document_loader
        self._cache: Dict[Tuple[str, ...], JsonLdContext] = {}

    async def parse(self, context: Any) -> JsonLdContext:
        cache_key = _cache_key(context)
        if cache_key is not None and cache_key in self._cache:
            return self._cache[cache_key]

        raw: Dict[str, Any] = {}
        await self._collect(context, raw, loading=())
        parsed = JsonLdContext(_normalize_terms(raw))
        if cache_key is not None:
            self._cache[cache_key] = parsed
        return parsed

    async def _collect(self, context: Any, raw: Dict[str, Any], loading: Tuple[str, ...]) -> None:
        if context is None:
            return
        if isinstance(context, dict) and "@context" in context and len(context) == 1:
            await self._collect(context["@context"], raw, loading)
        elif isinstance(context, list):
            for entry in context:
                await self._collect(entry, raw, loading)
        elif isinstance(context, str):
            if context in loading:
                raise DocumentLoadError(f"Detected a cyclic context import of {context}")
            document = await self._document_loader.load(context)
            embedded = document.get("@context") if isinstance(document, dict) else None
            await self._collect(embedded, raw, loading + (context,))
        elif isinstance(context, dict):
            for key, value in context.items():
                if key.startswith("@"):
                    continue
                raw[key] = value
        else:
            raise DocumentLoadError(f"Invalid JSON-LD context entry: {context!r}")


def _cache_key(context: Any) -> Optional[Tuple[str, ...]]:
    if isinstance(context, str):
        return (context,)
    if isinstance(context, list) and all(isinstance(entry, str) for entry in context):
        return tuple(context)
    return None


def _normalize_terms(raw: Mapping[str, Any]) -> Dict[str, TermDefinition]:
    simple: Dict[str, Tuple[str, Optional[bool]]] = {}
    for term, value in raw.items():
        if isinstance(value, str):
            simple[term] = (value, None)
        elif isinstance(value, dict) and isinstance(value.get("@id"), str):
            explicit = value.get("@prefix")
            simple[term] = (value["@id"], bool(explicit) if explicit is not None else False)

    terms: Dict[str, TermDefinition] = {}
    for term, (value, explicit_prefix) in simple.items():
        iri = _expand_raw(value, simple, seen=(term,))
        is_prefix = explicit_prefix if explicit_prefix is not None else iri.endswith(_GEN_DELIMS)
        terms[term] = TermDefinition(iri=iri, prefix=is_prefix)
    return terms


def _expand_raw(
    value: str, simple: Mapping[str, Tuple[str, Optional[bool]]], seen: Iterable[str]
) -> str:
    if ":" not in value:
        return value
    prefix, suffix = value.split(":", 1)
    if suffix.startswith("//") or prefix not in simple or prefix in seen:
        return value
    return _expand_raw(simple[prefix][0], simple, tuple(seen) + (prefix,)) + suffix


__all__ = [
    "COMPONENTSJS_CONTEXT_URL",
    "ContextParser",
    "JsonLdContext",
    "NPMD",
    "PrefetchedDocumentLoader",
    "TermDefinition",
]
