"""Generate Python type definitions from a schema-definition table.

Every entry of ``definitions`` (Swagger 2.0) or ``components.schemas``
(OpenAPI 3.x) becomes one named Python type, whether or not anything refers
to it:

* objects with properties -> ``TypedDict`` classes (the functional
  ``TypedDict(...)`` form when a property name is not a valid identifier);
* everything else -> ``TypeAlias`` assignments (``Literal`` for enums,
  unions for ``oneOf``/``anyOf``, ``list``/``dict`` for containers).

Nested anonymous objects get their own helper ``TypedDict`` named after their
parent and property. References are recognised two ways: an unresolved
``$ref`` into the table, and (for dereferenced documents) a schema that *is*
one of the table's objects. Both produce the definition's name, which is what
keeps recursive schemas finite.

The text is rendered from ``templates/typedefs.py.j2`` with Jinja2.
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader

from swagger_reader.exceptions import TypeSynthesisError

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""

MAX_TYPE_DEPTH = 32

_PRIMITIVES = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "null": "None",
}

_REF_PREFIXES = ("#/definitions/", "#/components/schemas/")

# Names the generated module imports or relies on
_RESERVED = frozenset(
    {
        "Any", "Literal", "Required", "TypeAlias", "TypedDict", "annotations",
        "str", "int", "float", "bool", "list", "dict",
    }
)

_TOKEN = re.compile(r"[A-Za-z_]\w*")


@dataclass
class TypeField:
    key: str
    annotation: str


@dataclass
class TypeEntry:
    """One top-level definition in the generated text."""

    kind: str  # "class", "functional" or "alias"
    name: str
    doc: str = ""
    total: bool = True
    fields: list[TypeField] = field(default_factory=list)
    value: str = ""


def synthesize_types(definitions: dict[str, Any]) -> str:
    """Render Python type definitions for every entry of *definitions*.

    Args:
        definitions: Definition name to JSON Schema, resolved or raw.

    Returns:
        Python source text headed by ``# ----- Generated type definitions -----``.

    Raises:
        TypeSynthesisError: If the table cannot be turned into types.
    """
    try:
        entries = _TypeBuilder(definitions).build()
        template = _create_jinja_env().get_template("typedefs.py.j2")
        return template.render(entries=entries)
    except TypeSynthesisError:
        raise
    except Exception as exc:
        raise TypeSynthesisError(str(exc) or type(exc).__name__) from exc


def _create_jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class _TypeBuilder:
    """Turns a definition table into an ordered list of :class:`TypeEntry`."""

    def __init__(self, definitions: dict[str, Any]) -> None:
        self._definitions = definitions
        self._taken: set[str] = set(_RESERVED)
        self._names: dict[str, str] = {}
        self._by_identity: dict[int, str] = {}
        self._by_ref: dict[str, str] = {}
        self._ref_targets: dict[str, Any] = {}
        self._expanding: set[int] = set()
        self._entries: list[Optional[TypeEntry]] = []

        for key, schema in definitions.items():
            name = self._unique(key)
            self._names[key] = name
            if isinstance(schema, dict):
                self._by_identity.setdefault(id(schema), name)
            pointer = key.replace("~", "~0").replace("/", "~1")
            for prefix in _REF_PREFIXES:
                self._by_ref[prefix + pointer] = name
                self._ref_targets[prefix + pointer] = schema

    def build(self) -> list[TypeEntry]:
        for key, schema in self._definitions.items():
            name = self._names[key]
            canonical = self._by_identity.get(id(schema)) if isinstance(schema, dict) else None
            if canonical is not None and canonical != name:
                # Two table entries resolved to the same object
                self._entries.append(self._alias(name, canonical))
                continue
            self._define(name, schema, 0)
        return [entry for entry in self._entries if entry is not None]

    # ------------------------------------------------------------------ #
    # Definitions
    # ------------------------------------------------------------------ #

    def _define(self, name: str, schema: Any, depth: int) -> None:
        # Reserve the slot so a definition precedes the helpers it spawns
        index = len(self._entries)
        self._entries.append(None)

        members = self._object_members(schema) if isinstance(schema, dict) else None
        if members is not None:
            entry = self._typed_dict(name, schema, *members, depth=depth)
        else:
            entry = self._alias(name, self._annotation(schema, name, depth, expand=True))
        self._entries[index] = entry

    def _typed_dict(
        self,
        name: str,
        schema: dict[str, Any],
        properties: dict[str, Any],
        required: set[str],
        depth: int,
    ) -> TypeEntry:
        key = id(schema)
        self._expanding.add(key)
        try:
            members = [
                (prop, self._annotation(sub, name + _camel(prop), depth + 1), prop in required)
                for prop, sub in properties.items()
            ]
        finally:
            self._expanding.discard(key)

        total = all(is_required for _, _, is_required in members)
        annotated = [
            (prop, ann if total or not is_required else f"Required[{ann}]")
            for prop, ann, is_required in members
        ]

        if all(_is_field_name(prop) for prop, _ in annotated):
            return TypeEntry(
                kind="class",
                name=name,
                doc=_docline(schema.get("description")),
                total=total,
                fields=[TypeField(prop, ann) for prop, ann in annotated],
            )
        return TypeEntry(
            kind="functional",
            name=name,
            total=total,
            fields=[TypeField(repr(prop), repr(ann)) for prop, ann in annotated],
        )

    def _alias(self, name: str, value: str) -> TypeEntry:
        names = self._taken - _RESERVED
        if any(token in names for token in _TOKEN.findall(value)):
            value = repr(value)
        return TypeEntry(kind="alias", name=name, value=value)

    def _object_members(self, schema: dict[str, Any]) -> Optional[tuple[dict[str, Any], set[str]]]:
        """Collect the properties of *schema* and its ``allOf`` parts.

        Returns ``None`` when no part declares properties.
        """
        properties: dict[str, Any] = {}
        required: set[str] = set()
        found = False
        visited: set[int] = set()
        stack: list[Any] = [schema]

        while stack:
            node = stack.pop(0)
            if isinstance(node, dict) and isinstance(node.get("$ref"), str):
                node = self._ref_targets.get(node["$ref"])
            if not isinstance(node, dict) or id(node) in visited:
                continue
            visited.add(id(node))

            props = node.get("properties")
            if isinstance(props, dict):
                found = True
                properties.update(props)
            names = node.get("required")
            if isinstance(names, list):
                required.update(n for n in names if isinstance(n, str))
            parts = node.get("allOf")
            if isinstance(parts, list):
                stack.extend(parts)

        return (properties, required) if found else None

    # ------------------------------------------------------------------ #
    # Annotations
    # ------------------------------------------------------------------ #

    def _annotation(self, schema: Any, hint: str, depth: int, expand: bool = False) -> str:
        """Return the annotation text for *schema*.

        *hint* names any helper ``TypedDict`` that has to be created. With
        *expand* set, a table entry is expanded instead of referenced by name.
        """
        if not isinstance(schema, dict) or depth > MAX_TYPE_DEPTH:
            return "Any"

        ref = schema.get("$ref")
        if isinstance(ref, str):
            return self._by_ref.get(ref, "Any")

        key = id(schema)
        if not expand and key in self._by_identity:
            return self._by_identity[key]
        if key in self._expanding:
            return "Any"

        self._expanding.add(key)
        try:
            annotation = self._expand(schema, hint, depth)
        finally:
            self._expanding.discard(key)

        if _is_nullable(schema) and annotation not in ("Any", "None"):
            annotation = _union([annotation, "None"])
        return annotation

    def _expand(self, schema: dict[str, Any], hint: str, depth: int) -> str:
        literal = _literal(schema.get("enum"))
        if literal is not None:
            return literal

        for combinator in ("oneOf", "anyOf"):
            variants = schema.get(combinator)
            if isinstance(variants, list) and variants:
                return _union(
                    [
                        self._annotation(variant, f"{hint}Option{index}", depth + 1)
                        for index, variant in enumerate(variants, 1)
                    ]
                )

        members = self._object_members(schema)
        if members is not None:
            name = self._unique(hint)
            self._by_identity[id(schema)] = name
            self._define(name, schema, depth)
            return name

        kinds = _schema_types(schema)
        if not kinds:
            return "Any"
        return _union([self._for_kind(schema, kind, hint, depth) for kind in kinds])

    def _for_kind(self, schema: dict[str, Any], kind: str, hint: str, depth: int) -> str:
        if kind == "array":
            item = self._annotation(schema.get("items"), f"{hint}Item", depth + 1)
            return f"list[{item}]"
        if kind == "object":
            extra = schema.get("additionalProperties")
            if isinstance(extra, dict):
                value = self._annotation(extra, f"{hint}Value", depth + 1)
                return f"dict[str, {value}]"
            return "dict[str, Any]"
        return _PRIMITIVES.get(kind, "Any")

    def _unique(self, raw: str) -> str:
        ident = re.sub(r"\W", "_", str(raw), flags=re.ASCII) or "_"
        if ident[0].isdigit():
            ident = f"_{ident}"
        if keyword.iskeyword(ident):
            ident = f"{ident}_"

        candidate = ident
        counter = 2
        while candidate in self._taken:
            candidate = f"{ident}{counter}"
            counter += 1
        self._taken.add(candidate)
        return candidate


def _schema_types(schema: dict[str, Any]) -> list[str]:
    kind = schema.get("type")
    if isinstance(kind, list):
        kinds = [k for k in kind if isinstance(k, str) and k != "null"]
        return kinds or (["null"] if "null" in kind else [])
    if isinstance(kind, str):
        return [kind]
    if isinstance(schema.get("items"), dict):
        return ["array"]
    if isinstance(schema.get("additionalProperties"), dict):
        return ["object"]
    return []


def _is_nullable(schema: dict[str, Any]) -> bool:
    kind = schema.get("type")
    return schema.get("nullable") is True or (isinstance(kind, list) and "null" in kind)


def _literal(values: Any) -> Optional[str]:
    if not isinstance(values, list) or not values:
        return None
    if not all(v is None or isinstance(v, (str, int, bool)) for v in values):
        return None
    unique = list(dict.fromkeys(repr(v) for v in values))
    return f"Literal[{', '.join(unique)}]"


def _union(parts: list[str]) -> str:
    unique = list(dict.fromkeys(parts))
    if "Any" in unique:
        return "Any"
    return " | ".join(unique)


def _camel(name: str) -> str:
    pieces = re.split(r"[^0-9A-Za-z]+", name)
    return "".join(p[:1].upper() + p[1:] for p in pieces) or "Field"


def _is_field_name(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def _docline(text: Any) -> str:
    if not isinstance(text, str):
        return ""
    line = next((line.strip() for line in text.splitlines() if line.strip()), "")
    return line.replace("\\", "\\\\").replace('"', '\\"')
