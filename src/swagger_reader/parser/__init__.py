"""Document acquisition and reduction -- fetch, dereference, filter, normalize.

This sub-package is the front half of the swagger_reader pipeline: turning a
Swagger 2.0 / OpenAPI 3.x URL into a
:class:`~swagger_reader.models.DescriptionDocument` and reducing its paths to
what a caller asked for.

Typical usage::

    from swagger_reader.parser import SpecFetcher, load_document, filter_paths, simplify_paths

    async with SpecFetcher(config) as fetcher:
        document = await load_document(url, fetcher)
    matched, count = filter_paths(document.paths, keyword="user")
    projection = simplify_paths(matched)

Sub-modules:

* :mod:`~swagger_reader.parser.fetcher` -- HTTP(S) reads with a hard timeout.
* :mod:`~swagger_reader.parser.loader` -- JSON/YAML parsing, version checks
  and dialect tagging.
* :mod:`~swagger_reader.parser.resolver` -- ``$ref`` dereferencing, internal
  and external, with recursive schemas kept as object cycles.
* :mod:`~swagger_reader.parser.acquire` -- Dereference with a single raw-read
  fallback.
* :mod:`~swagger_reader.parser.filters` -- Keyword/tag selection and output
  limits.
* :mod:`~swagger_reader.parser.normalizer` -- The reduced per-operation
  projection, base URL and tag catalog.
"""

from swagger_reader.parser.acquire import load_document, read_raw, resolve_document
from swagger_reader.parser.fetcher import SpecFetcher
from swagger_reader.parser.filters import filter_paths, limit_paths
from swagger_reader.parser.loader import ingest_document, parse_content, validate_version
from swagger_reader.parser.normalizer import collect_tags, derive_base_url, simplify_paths
from swagger_reader.parser.resolver import dereference, resolve_refs

__all__ = [
    "SpecFetcher",
    "collect_tags",
    "dereference",
    "derive_base_url",
    "filter_paths",
    "ingest_document",
    "limit_paths",
    "load_document",
    "parse_content",
    "read_raw",
    "resolve_document",
    "resolve_refs",
    "simplify_paths",
    "validate_version",
]
