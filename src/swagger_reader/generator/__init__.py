"""Synthesizers that derive new artifacts from resolved schemas.

Sub-modules:

* :mod:`~swagger_reader.generator.mock` -- Example values for response
  schemas, attached to operations as ``mock_response``.
* :mod:`~swagger_reader.generator.typedefs` -- Python ``TypedDict`` /
  ``TypeAlias`` text for the schema-definition table, rendered through a
  Jinja2 template.
"""

from swagger_reader.generator.mock import attach_mock_responses, synthesize_example
from swagger_reader.generator.typedefs import synthesize_types

__all__ = ["attach_mock_responses", "synthesize_example", "synthesize_types"]
