"""Acquire a description document: dereference first, raw read as fallback.

:func:`load_document` is what every tool calls. It runs
:func:`~swagger_reader.parser.resolver.dereference` under the configured
timeout; if that fails and fallback is enabled, it reads the raw JSON once
with :func:`read_raw`, leaving any references unexpanded. When both fail the
caller gets a :class:`~swagger_reader.exceptions.CompoundError` carrying both
messages.
"""

from __future__ import annotations

import asyncio

from swagger_reader.exceptions import (
    CompoundError,
    FetchTimeoutError,
    ResolutionError,
    SwaggerReaderError,
)
from swagger_reader.models import DescriptionDocument
from swagger_reader.output import info, progress, success, warning
from swagger_reader.parser.fetcher import SpecFetcher
from swagger_reader.parser.loader import ingest_document
from swagger_reader.parser.resolver import dereference


async def resolve_document(url: str, fetcher: SpecFetcher) -> DescriptionDocument:
    """Dereference the document at *url* within the fetcher's timeout.

    Raises:
        ResolutionError: On any resolution failure, including the timeout.
    """
    seconds = round(fetcher.timeout_ms / 1000)
    try:
        raw = await asyncio.wait_for(
            dereference(url, fetcher), timeout=fetcher.timeout_ms / 1000
        )
    except asyncio.TimeoutError as exc:
        cause = FetchTimeoutError(f"Reference resolution timed out ({seconds}s)")
        raise ResolutionError(str(cause), cause=cause) from exc
    try:
        return ingest_document(raw)
    except SwaggerReaderError as exc:
        raise ResolutionError(str(exc), cause=exc) from exc


async def read_raw(url: str, fetcher: SpecFetcher) -> DescriptionDocument:
    """Read the document at *url* as plain JSON, without resolving references."""
    raw = await fetcher.fetch_json(url)
    return ingest_document(raw)


async def load_document(
    url: str,
    fetcher: SpecFetcher,
    use_fallback: bool = True,
) -> DescriptionDocument:
    """Load the document at *url*, degrading to a raw read if resolution fails.

    The raw read is attempted at most once and only when *use_fallback* is
    set; otherwise the resolver's error propagates unchanged.

    Raises:
        ResolutionError: Resolution failed and fallback is disabled.
        CompoundError: Resolution and the fallback read both failed.
    """
    try:
        progress(f"Dereferencing {url} ...")
        document = await resolve_document(url, fetcher)
    except SwaggerReaderError as parse_error:
        warning(f"Reference resolution failed: {parse_error}")
        if not use_fallback:
            raise

        info("Falling back to reading the raw JSON document")
        try:
            document = await read_raw(url, fetcher)
        except SwaggerReaderError as fallback_error:
            raise CompoundError(parse_error, fallback_error) from fallback_error
        success("Fallback succeeded: read the raw JSON document")
        return document

    success("Dereferenced document")
    return document
