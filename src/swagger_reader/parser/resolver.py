"""Dereference ``$ref`` pointers in Swagger/OpenAPI documents.

Documents commonly use ``$ref`` pointers (e.g.
``{"$ref": "#/definitions/Pet"}`` or ``{"$ref": "common.yaml#/Error"}``) to
avoid repetition. This module replaces every reference with the structure it
points to, producing one self-contained tree:

1. :func:`dereference` fetches the root document, then every external
   document reachable through ``$ref`` values (relative or absolute URLs),
   each exactly once per call.
2. :func:`resolve_refs` walks the loaded documents depth-first. Each JSON
   location is materialised at most once, so every reference to
   ``#/definitions/Pet`` yields the *same* dict object. A schema that refers
   to itself therefore becomes a genuine object cycle instead of an infinite
   copy; bounding that cycle is the job of
   :func:`~swagger_reader.sanitize.sanitize`.

Sibling keys next to a ``$ref`` are ignored, as in JSON Reference. A pointer
that passes through a ``$ref`` node on its way (``#/definitions/Wrapper/properties/id``
where ``Wrapper`` is itself a reference) continues inside the referenced
structure.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import unquote, urldefrag, urljoin, urlsplit

from swagger_reader.exceptions import ResolutionError, SwaggerReaderError
from swagger_reader.output import debug
from swagger_reader.parser.fetcher import SpecFetcher
from swagger_reader.parser.loader import validate_version

_Location = tuple[str, str]


async def dereference(url: str, fetcher: SpecFetcher) -> dict[str, Any]:
    """Fetch the document at *url* and resolve all internal and external references.

    Args:
        url: HTTP(S) URL of the root document.
        fetcher: An open :class:`~swagger_reader.parser.fetcher.SpecFetcher`.

    Returns:
        A new dictionary with every ``$ref`` replaced by its target.

    Raises:
        ResolutionError: If the root or an external document cannot be
            fetched or parsed, the root is not a Swagger/OpenAPI document, a
            reference is malformed, a pointer dangles, or a chain of
            references loops without reaching a value.
    """
    try:
        root_url = urldefrag(url).url
        documents = await _load_documents(root_url, fetcher)
        validate_version(documents[root_url])
        return resolve_refs(documents[root_url], root_url, documents)
    except ResolutionError:
        raise
    except SwaggerReaderError as exc:
        raise ResolutionError(f"Failed to load {url}: {exc}", cause=exc) from exc
    except Exception as exc:
        raise ResolutionError(f"Failed to resolve {url}: {exc}", cause=exc) from exc


def resolve_refs(
    spec: dict[str, Any],
    base_url: str = "",
    documents: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Resolve the ``$ref`` pointers of a document that is already in memory.

    Args:
        spec: The document to resolve.
        base_url: URL that relative references in *spec* are joined against.
        documents: Other loaded documents keyed by URL, for external
            references. Without them only references into *spec* itself
            can be followed.

    The input is not modified.

    Example::

        resolved = resolve_refs(raw)
        pet = resolved["definitions"]["Pet"]
        assert resolved["paths"]["/pets"]["get"]["responses"]["200"]["schema"] is pet
    """
    resolver = _Resolver(documents)
    resolver.documents[base_url] = spec
    return resolver.resolve(base_url)


async def _load_documents(root_url: str, fetcher: SpecFetcher) -> dict[str, Any]:
    """Fetch *root_url* and, transitively, every externally referenced document."""
    documents: dict[str, Any] = {}
    pending = [root_url]
    while pending:
        doc_url = pending.pop()
        if doc_url in documents:
            continue
        if doc_url != root_url:
            debug(f"Following external $ref document {doc_url}")
        try:
            document = await fetcher.fetch_document(doc_url)
        except SwaggerReaderError as exc:
            if doc_url == root_url:
                raise
            raise ResolutionError(
                f"Failed to fetch external $ref document {doc_url}: {exc}",
                cause=exc,
            ) from exc
        documents[doc_url] = document
        for target in _external_targets(document, doc_url):
            if target not in documents:
                pending.append(target)
    return documents


class _Resolver:
    """Holds the loaded documents and materialised locations of one resolve call."""

    def __init__(self, documents: Optional[Mapping[str, Any]] = None) -> None:
        self.documents: dict[str, Any] = dict(documents or {})
        self._materialised: dict[_Location, Any] = {}

    def resolve(self, root_url: str) -> dict[str, Any]:
        try:
            return self._walk(self.documents[root_url], root_url, "")
        except RecursionError as exc:
            raise ResolutionError(
                "Document is nested too deeply to resolve", cause=exc
            ) from exc

    def _walk(self, node: Any, doc_url: str, pointer: str) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                return self._follow(ref, doc_url, frozenset())

            location = (doc_url, pointer)
            if location in self._materialised:
                return self._materialised[location]
            result: dict[str, Any] = {}
            # Registered before recursing so that a reference back to this
            # location closes the cycle on this very object.
            self._materialised[location] = result
            for key, value in node.items():
                result[key] = self._walk(value, doc_url, f"{pointer}/{_escape(str(key))}")
            return result

        if isinstance(node, list):
            location = (doc_url, pointer)
            if location in self._materialised:
                return self._materialised[location]
            items: list[Any] = []
            self._materialised[location] = items
            for index, value in enumerate(node):
                items.append(self._walk(value, doc_url, f"{pointer}/{index}"))
            return items

        return node

    def _follow(self, ref: str, base_url: str, chain: frozenset[_Location]) -> Any:
        location = _split_ref(ref, base_url)
        if location in chain:
            raise ResolutionError(f"Circular $ref chain cannot be resolved: {ref}")
        chain = chain | {location}

        target, (doc_url, pointer) = self._locate(location, ref, chain)
        if isinstance(target, dict) and isinstance(target.get("$ref"), str):
            return self._follow(target["$ref"], doc_url, chain)
        return self._walk(target, doc_url, pointer)

    def _locate(
        self, location: _Location, ref: str, chain: frozenset[_Location]
    ) -> tuple[Any, _Location]:
        """Navigate to *location* along its RFC 6901 JSON Pointer.

        Returns the target and its canonical location, which differs from
        *location* when the pointer passes through another reference.

        Raises:
            ResolutionError: If the document is not loaded, the pointer is
                malformed, a segment does not exist, or the references
                crossed on the way loop.
        """
        doc_url, pointer = location
        if doc_url not in self.documents:
            raise ResolutionError(
                f"External $ref not available: {ref}. "
                "Only references into loaded documents can be resolved."
            )
        if pointer and not pointer.startswith("/"):
            raise ResolutionError(f"Cannot resolve $ref '{ref}': unsupported fragment")

        current: Any = self.documents[doc_url]
        walked = ""
        for raw_segment in pointer[1:].split("/") if pointer else []:
            inner = current.get("$ref") if isinstance(current, dict) else None
            if isinstance(inner, str):
                inner_location = _split_ref(inner, doc_url)
                if inner_location in chain:
                    raise ResolutionError(f"Circular $ref chain cannot be resolved: {ref}")
                chain = chain | {inner_location}
                current, (doc_url, walked) = self._locate(inner_location, ref, chain)

            segment = raw_segment.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict):
                if segment not in current:
                    raise ResolutionError(
                        f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                    )
                current = current[segment]
            elif isinstance(current, list):
                try:
                    current = current[int(segment)]
                except (ValueError, IndexError) as exc:
                    raise ResolutionError(
                        f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                    ) from exc
            else:
                raise ResolutionError(
                    f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
                )
            walked = f"{walked}/{raw_segment}"

        return current, (doc_url, walked)


def _escape(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


def _split_ref(ref: str, base_url: str) -> _Location:
    """Split a ``$ref`` into the absolute document URL and the JSON pointer.

    Raises:
        ResolutionError: If the reference is not a valid URI reference.
    """
    try:
        doc_part, fragment = urldefrag(ref)
        doc_url = urljoin(base_url, doc_part) if doc_part else base_url
        return urldefrag(doc_url).url, unquote(fragment)
    except ValueError as exc:
        raise ResolutionError(f"Malformed $ref '{ref}': {exc}", cause=exc) from exc


def _external_targets(document: Any, doc_url: str) -> set[str]:
    """Collect the URLs of other documents referenced from *document*.

    Raises:
        ResolutionError: If a reference is malformed or points to a
            non-HTTP(S) location.
    """
    targets: set[str] = set()
    stack = [document]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and not ref.startswith("#"):
                target, _ = _split_ref(ref, doc_url)
                try:
                    scheme = urlsplit(target).scheme
                except ValueError as exc:
                    raise ResolutionError(f"Malformed $ref '{ref}': {exc}", cause=exc) from exc
                if scheme not in ("http", "https"):
                    raise ResolutionError(f"Unsupported external $ref: {ref}")
                if target != doc_url:
                    targets.add(target)
            stack.extend(node.values())
        elif isinstance(node, list):
            stack.extend(node)
    return targets
