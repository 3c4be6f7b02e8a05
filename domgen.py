"""DOM element bindings generator for TypeScript.

Generates typed element factories from a declarative element vocabulary
(machine-standards/dom/html.yaml). Produces a single declarations module,
src/html.ts by default, formatted with the project's prettier config.

Usage:
    python domgen.py --spec machine-standards/dom/html.yaml --output src/html.ts
"""

import argparse
import json
import re
import shlex
import subprocess
import sys
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TypeVar

import yaml

DEFAULT_SPEC_FILE = Path("machine-standards") / "dom" / "html.yaml"
DEFAULT_OUTPUT_FILE = Path("src") / "html.ts"
DEFAULT_PRETTIER_COMMAND: tuple[str, ...] = ("npx", "--no-install", "prettier")


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    spec_file: Path
    output_file: Path
    format_output: bool
    prettier_command: tuple[str, ...] = DEFAULT_PRETTIER_COMMAND


@dataclass(frozen=True)
class DiscoveryConfig:
    command: str
    filter_text: str | None
    info_element: str | None
    spec_file: Path


VALID_ERROR_CODES = {
    "CONFLICT_GENERATE_DISCOVERY",
    "FILTER_WITHOUT_LIST",
    "INVALID_ELEMENT_NAME",
    "INVALID_PRETTIER_COMMAND",
    "PATH_NOT_FOUND",
}
_ELEMENT_NAME_RE = re.compile(r"^\S+$")


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def validate_element_name(name: str) -> str:
    if _ELEMENT_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_ELEMENT_NAME",
        f"Invalid element name: {name!r}",
        "Pass a single element name without whitespace (for example --info div).",
    )


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


def parse_prettier_command(raw: str | None) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_PRETTIER_COMMAND
    parts = tuple(shlex.split(raw))
    if not parts:
        raise ConfigError(
            "INVALID_PRETTIER_COMMAND",
            "--prettier-command must not be empty.",
            'Pass a command line, for example --prettier-command "npx prettier".',
        )
    return parts


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate TypeScript DOM element bindings from a vocabulary"
    )

    parser.add_argument("--spec", type=Path, default=DEFAULT_SPEC_FILE)
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument("--no-format", action="store_true", default=False)
    parser.add_argument("--prettier-command", type=str, default=None)

    discovery_group = parser.add_mutually_exclusive_group()
    discovery_group.add_argument("--list-elements", action="store_true", default=False)
    discovery_group.add_argument("--info", type=str, default=None)

    parser.add_argument("--filter", type=str, default=None)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> GenerateConfig | DiscoveryConfig:
    has_generate_input = bool(
        args.output is not None or args.no_format or args.prettier_command is not None
    )
    has_discovery_command = bool(args.list_elements or args.info is not None)

    if args.filter is not None and not args.list_elements:
        raise ConfigError(
            "FILTER_WITHOUT_LIST",
            "--filter requires --list-elements.",
            "Add --list-elements or remove --filter.",
        )

    if has_generate_input and has_discovery_command:
        raise ConfigError(
            "CONFLICT_GENERATE_DISCOVERY",
            "Generate flags cannot be combined with discovery flags.",
            "Choose either generate mode or one discovery command.",
        )

    spec_file = validate_path_exists(
        args.spec,
        "--spec",
        "Pass the vocabulary file explicitly: --spec /path/to/html.yaml",
    )

    if has_discovery_command:
        command = "list-elements" if args.list_elements else "info"
        info_element = (
            validate_element_name(args.info) if args.info is not None else None
        )
        return DiscoveryConfig(
            command=command,
            filter_text=args.filter,
            info_element=info_element,
            spec_file=spec_file,
        )

    return GenerateConfig(
        spec_file=spec_file,
        output_file=args.output if args.output is not None else DEFAULT_OUTPUT_FILE,
        format_output=not args.no_format,
        prettier_command=parse_prettier_command(args.prettier_command),
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | DiscoveryConfig:
    return validate_config(parse_args(argv))


# ===--- Constants ---=== #

# ECMAScript reserved words plus the strict-mode and module-only ones.
TS_RESERVED = frozenset(
    {
        "await",
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "interface",
        "let",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "static",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    }
)
RESERVED_SUFFIX = "_"

EVENT_PREFIX = "on"
PATTERN_DELIMITER = "/"
TYPE_SEPARATOR = " | "
WILDCARD_TYPE = "string"
WILDCARD_MARKER = "({} & string)"
EMPTY_TYPE = "never"

# Typed-leaf kinds that contribute a primitive member to the type expression.
KIND_TYPES = {
    "boolean": "boolean",
    "integer": "number",
    "real": "number",
}
# Typed-leaf kinds that widen the expression to an open string.
WILDCARD_KINDS = frozenset({"string", "list"})

RUNTIME_MODULE = "./"
BASE_HOST_INTERFACE = "Element"
GLOBAL_ATTRIBS_TYPE = "GlobalAttributes"
GLOBAL_IFACE_PARAM = "IFace"

_INVALID_IDENT_CHARS_RE = re.compile(r"[^A-Za-z0-9_$]")


# ===--- Schema errors ---=== #

VALID_SCHEMA_ERROR_CODES = {
    "MALFORMED_SCHEMA",
    "RESERVED_ATTRIBUTE_PREFIX",
    "UNKNOWN_VALUE_TYPE",
    "UNRECOGNIZED_VALUE_SPEC",
}


class SchemaError(Exception):
    """Fatal vocabulary error. Aborts the generation pass before any write."""

    def __init__(self, code: str, message: str):
        if code not in VALID_SCHEMA_ERROR_CODES:
            raise ValueError(f"Unknown schema error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message


# ===--- Data classes ---=== #


@dataclass(frozen=True)
class LiteralValue:
    """An exact token, or a /.../ pattern meaning any matching string."""

    token: str
    is_pattern: bool = False


@dataclass(frozen=True)
class TypedValue:
    """A typed leaf: string, boolean, integer, real or list.

    Only `kind` takes part in type inference. The remaining fields are kept
    so that two leaves compare equal only when their whole definition does.
    """

    kind: str
    signed: bool | None = None
    separator: str | None = None
    ordered: bool | None = None
    unique: bool | None = None
    member_values: "ValueSpec | None" = None


@dataclass(frozen=True)
class ConditionalValue:
    when: str
    values: "ValueSpec"


@dataclass(frozen=True)
class UnionValue:
    members: tuple["ValueSpec", ...]


ValueSpec = LiteralValue | TypedValue | ConditionalValue | UnionValue


@dataclass(frozen=True)
class AttributeDef:
    description: str
    ref: str
    values: ValueSpec


@dataclass(frozen=True)
class EventDef:
    description: str
    ref: str
    interface: str


@dataclass(frozen=True)
class InterfaceEntries:
    """Attribute and event tables of one element, or of the common interface.

    Attributes:
        attributes: Attribute name -> definition, in source order.
        events: Event name (without the "on" prefix) -> definition.
    """

    attributes: dict[str, AttributeDef]
    events: dict[str, EventDef]


@dataclass(frozen=True)
class ElementDef:
    description: str
    ref: str
    interface: str
    attributes: dict[str, AttributeDef]
    events: dict[str, EventDef]

    @property
    def entries(self) -> InterfaceEntries:
        return InterfaceEntries(attributes=self.attributes, events=self.events)


@dataclass(frozen=True)
class SpecVersion:
    ref: str
    pubdate: str


@dataclass(frozen=True)
class Vocabulary:
    """A complete element vocabulary.

    Attributes:
        namespace: Document namespace URI passed to the runtime factory.
        version: Reference and publication date of the source standard.
        elements: Element name -> definition, in document declaration order.
            Emission order follows this order.
    """

    namespace: str
    version: SpecVersion
    elements: dict[str, ElementDef]


# ===--- Vocabulary loading ---=== #


def parse_value_spec(raw: object) -> ValueSpec:
    """Convert a loaded value-spec node into its tagged variant.

    Strings become literals (pattern literals when wrapped in slashes),
    sequences become unions, mappings with a `when` key become conditionals
    and mappings with a `type` key become typed leaves. The typed-leaf kind
    is not checked here; evaluate_value_spec rejects unknown kinds.

    Raises:
        SchemaError: UNRECOGNIZED_VALUE_SPEC when the node matches none of
            these shapes.
    """
    if isinstance(raw, str):
        is_pattern = (
            len(raw) > 1
            and raw.startswith(PATTERN_DELIMITER)
            and raw.endswith(PATTERN_DELIMITER)
        )
        return LiteralValue(token=raw, is_pattern=is_pattern)

    if isinstance(raw, list):
        return UnionValue(members=tuple(parse_value_spec(member) for member in raw))

    if isinstance(raw, dict):
        if "when" in raw:
            if "values" not in raw:
                raise SchemaError(
                    "UNRECOGNIZED_VALUE_SPEC",
                    f"Conditional value spec has no values: {raw!r}",
                )
            return ConditionalValue(
                when=str(raw["when"]), values=parse_value_spec(raw["values"])
            )
        kind = raw.get("type")
        if isinstance(kind, str):
            member_values = raw.get("member-values")
            return TypedValue(
                kind=kind,
                signed=raw.get("signed"),
                separator=raw.get("separator"),
                ordered=raw.get("ordered"),
                unique=raw.get("unique"),
                member_values=(
                    parse_value_spec(member_values)
                    if member_values is not None
                    else None
                ),
            )

    raise SchemaError("UNRECOGNIZED_VALUE_SPEC", f"Undecipherable values: {raw!r}")


def _require_mapping(raw: object, where: str) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SchemaError(
            "MALFORMED_SCHEMA",
            f"{where} must be a mapping, got {type(raw).__name__}",
        )
    for key in raw:
        if not isinstance(key, str) or not key:
            raise SchemaError(
                "MALFORMED_SCHEMA", f"{where} has a non-string or empty key: {key!r}"
            )
    return raw


def _require_str(raw: dict, key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise SchemaError("MALFORMED_SCHEMA", f"{where} is missing '{key}'")
    return value


def _optional_text(raw: dict, key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value).strip()


def parse_attribute(raw: object, where: str) -> AttributeDef:
    details = _require_mapping(raw, where)
    if "values" not in details:
        raise SchemaError("MALFORMED_SCHEMA", f"{where} is missing 'values'")
    return AttributeDef(
        description=_optional_text(details, "description"),
        ref=_optional_text(details, "ref"),
        values=parse_value_spec(details["values"]),
    )


def parse_event(raw: object, where: str) -> EventDef:
    details = _require_mapping(raw, where)
    return EventDef(
        description=_optional_text(details, "description"),
        ref=_optional_text(details, "ref"),
        interface=_require_str(details, "interface", where),
    )


def parse_element(raw: object, name: str) -> ElementDef:
    where = f"element '{name}'"
    details = _require_mapping(raw, where)
    attributes = _require_mapping(details.get("attributes"), f"{where} attributes")
    events = _require_mapping(details.get("events"), f"{where} events")
    return ElementDef(
        description=_optional_text(details, "description"),
        ref=_optional_text(details, "ref"),
        interface=_require_str(details, "interface", where),
        attributes={
            attr: parse_attribute(value, f"{where} attribute '{attr}'")
            for attr, value in attributes.items()
        },
        events={
            event: parse_event(value, f"{where} event '{event}'")
            for event, value in events.items()
        },
    )


def parse_vocabulary(raw: object) -> Vocabulary:
    """Convert a loaded vocabulary document into a Vocabulary.

    Missing `attributes`/`events` tables on an element are treated as empty.
    Element order is preserved from the document.

    Raises:
        SchemaError: MALFORMED_SCHEMA for missing or ill-typed keys,
            UNRECOGNIZED_VALUE_SPEC for undecipherable value specs.
    """
    document = _require_mapping(raw, "vocabulary document")
    version = _require_mapping(document.get("version"), "version")
    elements = _require_mapping(document.get("elements"), "elements")
    return Vocabulary(
        namespace=_require_str(document, "namespace", "vocabulary document"),
        version=SpecVersion(
            ref=_optional_text(version, "ref"),
            pubdate=_optional_text(version, "pubdate"),
        ),
        elements={name: parse_element(value, name) for name, value in elements.items()},
    )


class VocabularyLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 booleans.

    Only `true`/`false` resolve to bool, so attribute tokens such as
    `on`, `off`, `yes` and `no` load as plain strings.
    """


VocabularyLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:bool"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
VocabularyLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def load_vocabulary(spec_file: Path) -> Vocabulary:
    raw = yaml.load(Path(spec_file).read_text(encoding="utf-8"), Loader=VocabularyLoader)
    return parse_vocabulary(raw)


# ===--- Value-spec evaluation ---=== #


def quote_literal(token: str) -> str:
    return json.dumps(token, ensure_ascii=False)


def evaluate_value_spec(spec: ValueSpec) -> str:
    """Reduce a value spec to a TypeScript type expression.

    Walks the spec breadth-first. Pattern literals, `string` and `list`
    leaves widen to an open string; `boolean`, `integer` and `real` leaves
    add a primitive; plain literals are enumerated. Conditions are erased.

    Member order is primitives first, then literals, each in first-seen
    order without duplicates. A wildcard alone yields `string`; next to other
    members it appends the `({} & string)` marker so literal hints survive.
    A spec with no members at all yields `never`.

    Raises:
        SchemaError: UNKNOWN_VALUE_TYPE for a typed leaf of unknown kind.
    """
    use_wildcard = False
    kinds: dict[str, None] = {}  # ordered set via insertion-order dict
    literals: dict[str, None] = {}
    todo: deque[ValueSpec] = deque([spec])

    while todo:
        current = todo.popleft()
        if isinstance(current, LiteralValue):
            # Patterns are not translated into refined types.
            if current.is_pattern:
                use_wildcard = True
            else:
                literals.setdefault(quote_literal(current.token), None)
        elif isinstance(current, UnionValue):
            todo.extend(current.members)
        elif isinstance(current, ConditionalValue):
            todo.append(current.values)
        elif isinstance(current, TypedValue):
            if current.kind in WILDCARD_KINDS:
                use_wildcard = True
            elif current.kind in KIND_TYPES:
                kinds.setdefault(KIND_TYPES[current.kind], None)
            else:
                raise SchemaError(
                    "UNKNOWN_VALUE_TYPE", f"Unknown value type: {current.kind}"
                )
        else:
            raise SchemaError(
                "UNRECOGNIZED_VALUE_SPEC", f"Undecipherable values: {current!r}"
            )

    members = [*kinds, *literals]
    if use_wildcard:
        if not members:
            return WILDCARD_TYPE
        members.append(WILDCARD_MARKER)
    if not members:
        return EMPTY_TYPE
    return TYPE_SEPARATOR.join(members)


# ===--- Attribute/event tables ---=== #


def format_doc_comment(description: str, ref: str, indent: str = "") -> list[str]:
    """Return JSDoc lines for one documented declaration.

    `*/` in the text is escaped so it cannot terminate the comment.
    """
    description = description.replace("*/", "*\\/")
    ref = ref.replace("*/", "*\\/")
    lines = [f"{indent}/** {description}".rstrip(), f"{indent} *"]
    if ref:
        lines.append(f"{indent} * @see {ref}")
    lines.append(f"{indent} */")
    return lines


def build_interface_body(entries: InterfaceEntries, host_interface: str) -> list[str]:
    """Return the lines of an object type literal for one attribute table.

    Attributes become optional properties typed by evaluate_value_spec.
    Events become optional `on<event>` handler properties. Both groups are
    emitted in lexicographic name order.

    Args:
        entries: Attribute and event tables to render.
        host_interface: Interface the event handlers are bound to, either a
            concrete interface name or a type parameter.

    Returns:
        Lines starting with "{" and ending with "}", without a trailing ";".

    Raises:
        SchemaError: RESERVED_ATTRIBUTE_PREFIX when an attribute name starts
            with "on", which would clash with the event handler properties.
    """
    lines = ["{"]

    for name in sorted(entries.attributes):
        if name.startswith(EVENT_PREFIX):
            raise SchemaError(
                "RESERVED_ATTRIBUTE_PREFIX",
                f'Attribute names must not start with "{EVENT_PREFIX}", '
                f"{name} breaks this assumption",
            )
        details = entries.attributes[name]
        lines.extend(format_doc_comment(details.description, details.ref, "  "))
        type_expr = evaluate_value_spec(details.values)
        lines.append(f"  {quote_literal(name)}?: {type_expr};")
        lines.append("")

    for name in sorted(entries.events):
        details = entries.events[name]
        lines.extend(format_doc_comment(details.description, details.ref, "  "))
        handler = f"EventHandler<{host_interface}, {details.interface}>"
        lines.append(f"  {quote_literal(EVENT_PREFIX + name)}?: {handler};")
        lines.append("")

    if lines[-1] == "":
        lines.pop()
    lines.append("}")
    return lines


# ===--- Common interface extraction ---=== #

_Definition = TypeVar("_Definition", AttributeDef, EventDef)


def intersect_definitions(
    accumulator: Mapping[str, _Definition],
    candidate: Mapping[str, _Definition],
) -> dict[str, _Definition]:
    """Keep the accumulator entries that candidate defines identically.

    Comparison is structural (dataclass equality over the whole definition),
    never identity. Accumulator order is preserved.
    """
    return {
        name: definition
        for name, definition in accumulator.items()
        if name in candidate and candidate[name] == definition
    }


def extract_common(vocabulary: Vocabulary) -> tuple[Vocabulary, InterfaceEntries]:
    """Factor out the attributes and events every element defines identically.

    The common tables are seeded from the first element and narrowed by each
    following element; an entry dropped once never returns. The surviving
    names are then removed from every element, the first one included.

    The input vocabulary is not modified.

    Args:
        vocabulary: Vocabulary as loaded.

    Returns:
        (pruned, common) where pruned holds only element-specific entries and
        common is the shared interface. An empty vocabulary yields itself and
        empty common tables.
    """
    elements = list(vocabulary.elements.values())
    if not elements:
        return vocabulary, InterfaceEntries(attributes={}, events={})

    first, *rest = elements
    common_attrs = dict(first.attributes)
    common_events = dict(first.events)
    for element in rest:
        common_attrs = intersect_definitions(common_attrs, element.attributes)
        common_events = intersect_definitions(common_events, element.events)

    pruned_elements = {
        name: replace(
            element,
            attributes={
                attr: details
                for attr, details in element.attributes.items()
                if attr not in common_attrs
            },
            events={
                event: details
                for event, details in element.events.items()
                if event not in common_events
            },
        )
        for name, element in vocabulary.elements.items()
    }

    common = InterfaceEntries(attributes=common_attrs, events=common_events)
    return replace(vocabulary, elements=pruned_elements), common


# ===--- Identifiers ---=== #


def is_reserved(name: str) -> bool:
    return name in TS_RESERVED


def dereserve_name(name: str) -> str:
    return name + RESERVED_SUFFIX if is_reserved(name) else name


def sanitize_identifier(name: str) -> str:
    ident = _INVALID_IDENT_CHARS_RE.sub("_", name)
    if ident[:1].isdigit():
        ident = "_" + ident
    return ident


def factory_identifier(elem_name: str) -> str:
    return dereserve_name(sanitize_identifier(elem_name))


# ===--- Declarations emission ---=== #


def has_local_entries(element: ElementDef) -> bool:
    return bool(element.attributes or element.events)


def global_attribs_type(host_interface: str) -> str:
    return f"{GLOBAL_ATTRIBS_TYPE}<{host_interface}>"


def attribs_type_name(elem_name: str, element: ElementDef) -> str:
    if has_local_entries(element):
        return f"{sanitize_identifier(elem_name)}Attribs"
    return global_attribs_type(element.interface)


def _type_declaration(prefix: str, body: list[str]) -> list[str]:
    lines = [f"{prefix}{body[0]}"]
    lines.extend(body[1:-1])
    lines.append(f"{body[-1]};")
    return lines


def _check_unique_identifiers(vocabulary: Vocabulary) -> None:
    seen: dict[str, str] = {}
    for elem_name in vocabulary.elements:
        ident = factory_identifier(elem_name)
        if ident in seen:
            raise SchemaError(
                "MALFORMED_SCHEMA",
                f"Elements '{seen[ident]}' and '{elem_name}' both map to "
                f"identifier '{ident}'",
            )
        seen[ident] = elem_name


def build_declarations(
    vocabulary: Vocabulary, common: InterfaceEntries
) -> tuple[str, ...]:
    """Return the unformatted TypeScript declarations for a pruned vocabulary.

    Sections, in order: runtime import and namespace constant, the global
    attributes type built from the common interface, one attributes type per
    element with local entries, the ElementAttribsMap and ElementInterfaceMap
    lookup tables, the generic `create` wrapper, and one factory per element.
    Elements are emitted in vocabulary order.

    Args:
        vocabulary: Vocabulary pruned by extract_common.
        common: Common interface returned by extract_common.

    Returns:
        Source lines without trailing newlines.

    Raises:
        SchemaError: Propagated from build_interface_body/evaluate_value_spec,
            or MALFORMED_SCHEMA when two elements map to the same identifier.
    """
    _check_unique_identifiers(vocabulary)
    elements = vocabulary.elements

    lines: list[str] = [
        f"import {{ EventHandler, create as domCreate }} from {quote_literal(RUNTIME_MODULE)};",
        "",
        f"export const domNamespace = {quote_literal(vocabulary.namespace)};",
        "",
    ]

    global_body = build_interface_body(common, GLOBAL_IFACE_PARAM)
    lines.extend(
        _type_declaration(
            f"type {GLOBAL_ATTRIBS_TYPE}<{GLOBAL_IFACE_PARAM} extends {BASE_HOST_INTERFACE}> = ",
            global_body,
        )
    )
    lines.append("")

    for elem_name, element in elements.items():
        if not has_local_entries(element):
            continue
        body = build_interface_body(element.entries, element.interface)
        lines.append(f"/** Attributes for the {elem_name} element */")
        lines.extend(
            _type_declaration(
                f"export type {attribs_type_name(elem_name, element)} = "
                f"{global_attribs_type(element.interface)} & ",
                body,
            )
        )
        lines.append("")

    lines.append("export type ElementAttribsMap = {")
    for elem_name, element in elements.items():
        lines.append(
            f"  {quote_literal(elem_name)}: {attribs_type_name(elem_name, element)};"
        )
    lines.append("};")
    lines.append("")

    lines.append("export type ElementInterfaceMap = {")
    for elem_name, element in elements.items():
        lines.append(f"  {quote_literal(elem_name)}: {element.interface};")
    lines.append("};")
    lines.append("")

    lines.extend(
        [
            "export type Child = string | Element;",
            "",
            "export const create = <Name extends keyof ElementInterfaceMap>(",
            "  elemName: Name,",
            "  attribs: ElementAttribsMap[Name],",
            "  ...childs: Child[]",
            "): ElementInterfaceMap[Name] => domCreate(domNamespace, elemName, attribs, ...childs);",
            "",
        ]
    )

    for elem_name, element in elements.items():
        quoted = quote_literal(elem_name)
        lines.extend(format_doc_comment(element.description, element.ref))
        lines.append(
            f"export const {factory_identifier(elem_name)} = "
            f"(attribs: ElementAttribsMap[{quoted}], ...childs: Child[]) => "
            f"create({quoted}, attribs, ...childs);"
        )
        lines.append("")

    if lines[-1] == "":
        lines.pop()
    return tuple(lines)


# ===--- Declarations writer ---=== #


@dataclass(frozen=True)
class WriteConfig:
    """Shared generation metadata embedded in the file preamble.

    Attributes:
        spec_source: File name of the vocabulary, e.g. "html.yaml".
        namespace: Vocabulary namespace URI.
        version_ref: Reference URL of the source standard.
        version_pubdate: Publication date of the source standard.
    """

    spec_source: str
    namespace: str
    version_ref: str = ""
    version_pubdate: str = ""


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing the generated declarations file.

    Attributes:
        filename: Filename written, e.g. "html.ts".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


_HEADER_BORDER: str = "// x-------------------------------------------x //"


def format_file_header(config: WriteConfig) -> list[str]:
    """Return comment-block lines for the generated file header.

    Output format:
        // x-------------------------------------------x //
        // | DOM element bindings for TypeScript
        // | Generated by domgen
        // | Source: html.yaml
        // | Standard: https://html.spec.whatwg.org/ (2023-01-01)
        // | Namespace: http://www.w3.org/1999/xhtml
        // x-------------------------------------------x //

    The Standard line is omitted when the vocabulary has no version ref and
    no pubdate; the parenthesised date is omitted when pubdate is empty.
    No timestamps are written, so output is stable across runs.

    Raises:
        ValueError: If config.spec_source is empty.
    """
    if not config.spec_source:
        raise ValueError("spec_source must not be empty")

    lines: list[str] = [
        _HEADER_BORDER,
        "// | DOM element bindings for TypeScript",
        "// | Generated by domgen",
        f"// | Source: {config.spec_source}",
    ]
    if config.version_ref or config.version_pubdate:
        standard = config.version_ref
        if config.version_pubdate:
            standard = f"{standard} ({config.version_pubdate})".strip()
        lines.append(f"// | Standard: {standard}")
    lines.append(f"// | Namespace: {config.namespace}")
    lines.append(_HEADER_BORDER)
    return lines


def assemble_declarations_source(
    config: WriteConfig, content_lines: tuple[str, ...]
) -> str:
    """Join the header and declaration lines into one source string.

    Returns:
        Complete TypeScript source including trailing newline.
    """
    parts: list[str] = list(format_file_header(config))
    if content_lines:
        parts.append("")
        parts.extend(content_lines)
    return "\n".join(parts) + "\n"


def write_declarations(output_file: Path, content: str) -> FileWriteResult:
    """Write the declarations file, creating missing parent directories.

    Raises:
        OSError: Propagated directly if the filesystem write fails.
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(content, encoding="utf-8")
    resolved = output_file.resolve()
    return FileWriteResult(
        filename=output_file.name,
        path=resolved,
        line_count=content.count("\n"),
        byte_count=len(resolved.read_bytes()),
    )


# ===--- Formatting ---=== #

PRETTIER_CONFIG_FILES: tuple[str, ...] = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.json5",
    ".prettierrc.yaml",
    ".prettierrc.yml",
    ".prettierrc.toml",
    ".prettierrc.js",
    ".prettierrc.cjs",
    ".prettierrc.mjs",
    "prettier.config.js",
    "prettier.config.cjs",
    "prettier.config.mjs",
)
"""Prettier config file names, checked in this order in each directory."""


class FormatterError(RuntimeError):
    pass


def _package_json_has_prettier(package_json: Path) -> bool:
    try:
        manifest = json.loads(package_json.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return False
    return isinstance(manifest, dict) and "prettier" in manifest


def resolve_prettier_config(target: Path) -> Path:
    """Find the prettier config governing target, searching upward.

    Each directory from the target's parent to the filesystem root is checked
    for PRETTIER_CONFIG_FILES, then for a package.json with a "prettier" key.

    Raises:
        FormatterError: When no config is found.
    """
    directory = Path(target).resolve().parent
    for candidate_dir in (directory, *directory.parents):
        for name in PRETTIER_CONFIG_FILES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
        package_json = candidate_dir / "package.json"
        if package_json.is_file() and _package_json_has_prettier(package_json):
            return package_json
    raise FormatterError(f"failed to find prettier config for {target}")


def format_source(
    source: str,
    target: Path,
    config_path: Path,
    command: tuple[str, ...] = DEFAULT_PRETTIER_COMMAND,
) -> str:
    """Pipe source through prettier as if it were the file at target.

    Raises:
        FormatterError: The command is missing or exits non-zero.
    """
    argv = [*command, "--config", str(config_path), "--stdin-filepath", str(target)]
    try:
        result = subprocess.run(
            argv,
            input=source,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as err:
        raise FormatterError(f"formatter command not found: {command[0]}") from err
    except subprocess.CalledProcessError as err:
        detail = (err.stderr or "").strip()
        raise FormatterError(f"formatter failed for {target}: {detail}") from err
    return result.stdout


# ===--- Discovery commands ---=== #


@dataclass(frozen=True)
class ElementSummary:
    """One row of the --list-elements table.

    Counts cover the element's full tables, common entries included.
    """

    name: str
    interface: str
    attribute_count: int
    event_count: int


@dataclass(frozen=True)
class AttributeEntry:
    name: str
    type_expression: str
    common: bool


@dataclass(frozen=True)
class EventEntry:
    name: str
    interface: str
    common: bool


@dataclass(frozen=True)
class ElementDetail:
    """Full --info output for one element.

    Attributes:
        summary: The ElementSummary for this element.
        description: Element description from the vocabulary.
        ref: Reference URL from the vocabulary.
        attributes: Attribute entries in lexicographic order.
        events: Event entries in lexicographic order.
    """

    summary: ElementSummary
    description: str
    ref: str
    attributes: tuple[AttributeEntry, ...]
    events: tuple[EventEntry, ...]


def gather_element_summaries(vocabulary: Vocabulary) -> list[ElementSummary]:
    return [
        ElementSummary(
            name=name,
            interface=element.interface,
            attribute_count=len(element.attributes),
            event_count=len(element.events),
        )
        for name, element in vocabulary.elements.items()
    ]


def filter_elements_by_text(
    summaries: list[ElementSummary],
    filter_text: str,
) -> list[ElementSummary]:
    """Return summaries whose name contains filter_text, case-insensitively.

    Preserves input order. Empty filter_text returns all summaries.
    """
    if not filter_text:
        return list(summaries)
    needle = filter_text.lower()
    return [s for s in summaries if needle in s.name.lower()]


def gather_element_detail(
    vocabulary: Vocabulary, elem_name: str
) -> ElementDetail | None:
    """Return full detail for a named element, or None if it is not defined.

    Entries shared by every element are flagged `common`. Attribute types are
    rendered with evaluate_value_spec, so schema errors surface here too.
    """
    element = vocabulary.elements.get(elem_name)
    if element is None:
        return None

    _pruned, common = extract_common(vocabulary)
    attributes = tuple(
        AttributeEntry(
            name=name,
            type_expression=evaluate_value_spec(element.attributes[name].values),
            common=name in common.attributes,
        )
        for name in sorted(element.attributes)
    )
    events = tuple(
        EventEntry(
            name=name,
            interface=element.events[name].interface,
            common=name in common.events,
        )
        for name in sorted(element.events)
    )
    summary = ElementSummary(
        name=elem_name,
        interface=element.interface,
        attribute_count=len(attributes),
        event_count=len(events),
    )
    return ElementDetail(
        summary=summary,
        description=element.description,
        ref=element.ref,
        attributes=attributes,
        events=events,
    )


def format_elements_table(summaries: list[ElementSummary], source_label: str) -> str:
    """Return the complete --list-elements output as a single string.

    Output format:

        3 elements in html.yaml:

          a      HTMLAnchorElement     9 attributes  2 events
          div    HTMLDivElement        2 attributes  2 events

    Column widths are derived from the widest value in summaries.
    """
    lines = [f"{len(summaries)} elements in {source_label}:", ""]

    if not summaries:
        lines.append("")
        return "\n".join(lines)

    name_width = max(len(s.name) for s in summaries)
    iface_width = max(len(s.interface) for s in summaries)
    for s in summaries:
        attr_col = f"{s.attribute_count} attributes"
        lines.append(
            f"  {s.name.ljust(name_width)}  {s.interface.ljust(iface_width)}  "
            f"{attr_col:<14}{s.event_count} events"
        )

    lines.append("")
    return "\n".join(lines)


def format_element_detail(detail: ElementDetail) -> str:
    """Return the complete --info output for one element as a string.

    Output format:

        a (HTMLAnchorElement)
          The a element
          See: https://html.spec.whatwg.org/#the-a-element

          Attributes (2):
            href    string
            hidden  boolean  (common)

          Events (1):
            click   MouseEvent  (common)
    """
    s = detail.summary
    lines = [f"{s.name} ({s.interface})"]
    if detail.description:
        lines.append(f"  {detail.description}")
    if detail.ref:
        lines.append(f"  See: {detail.ref}")

    lines.append("")
    lines.append(f"  Attributes ({len(detail.attributes)}):")
    name_width = max((len(a.name) for a in detail.attributes), default=0)
    for attr in detail.attributes:
        row = f"    {attr.name.ljust(name_width)}  {attr.type_expression}"
        if attr.common:
            row += "  (common)"
        lines.append(row)

    lines.append("")
    lines.append(f"  Events ({len(detail.events)}):")
    name_width = max((len(e.name) for e in detail.events), default=0)
    for event in detail.events:
        row = f"    {event.name.ljust(name_width)}  {event.interface}"
        if event.common:
            row += "  (common)"
        lines.append(row)

    lines.append("")
    return "\n".join(lines)


def run_discovery(config: DiscoveryConfig) -> None:
    """Execute the discovery command specified in config.

    dispatch table:
      "list-elements" -> gather_element_summaries -> [filter] -> format_elements_table
      "info"          -> gather_element_detail -> [None check] -> format_element_detail

    Raises:
        SystemExit(1): When config.command == "info" and the element is not
            defined in the vocabulary.
    """
    vocabulary = load_vocabulary(config.spec_file)
    source_label = Path(config.spec_file).name

    if config.command == "list-elements":
        summaries = gather_element_summaries(vocabulary)
        if config.filter_text is not None:
            summaries = filter_elements_by_text(summaries, config.filter_text)
        print(format_elements_table(summaries, source_label), end="")

    elif config.command == "info":
        assert config.info_element is not None
        detail = gather_element_detail(vocabulary, config.info_element)
        if detail is None:
            print(
                f"Error: element '{config.info_element}' not found in {source_label}",
                file=sys.stderr,
            )
            raise SystemExit(1)
        print(format_element_detail(detail), end="")


# ===--- Pipeline ---=== #


def build_write_config(config: GenerateConfig, vocabulary: Vocabulary) -> WriteConfig:
    return WriteConfig(
        spec_source=Path(config.spec_file).name,
        namespace=vocabulary.namespace,
        version_ref=vocabulary.version.ref,
        version_pubdate=vocabulary.version.pubdate,
    )


def run_generate(config: GenerateConfig) -> FileWriteResult:
    """Execute the complete generation pipeline for a GenerateConfig.

    Stages: resolve formatter config -> load -> extract common interface ->
    build declarations -> assemble -> format -> write -> summary. Nothing is
    written unless every earlier stage succeeds.

    Raises:
        FormatterError: Formatting enabled and no prettier config, or the
            formatter failed.
        SchemaError: Invalid vocabulary.
        OSError: Vocabulary not readable or filesystem write failure.
        yaml.YAMLError: Malformed vocabulary document.
    """
    prettier_config = None
    if config.format_output:
        prettier_config = resolve_prettier_config(config.output_file)

    print(f"Loading: {config.spec_file}")
    vocabulary = load_vocabulary(config.spec_file)
    print(f"  Vocabulary: {len(vocabulary.elements)} elements")

    pruned, common = extract_common(vocabulary)
    print(
        f"  Common: {len(common.attributes)} attributes, "
        f"{len(common.events)} events"
    )

    content_lines = build_declarations(pruned, common)
    write_config = build_write_config(config, vocabulary)
    source = assemble_declarations_source(write_config, content_lines)

    if prettier_config is not None:
        print(f"  Formatting: {prettier_config}")
        source = format_source(
            source, config.output_file, prettier_config, config.prettier_command
        )

    result = write_declarations(config.output_file, source)
    print(f"  Written: {result.line_count} lines to {result.path}")

    summary = build_generation_summary(write_config, pruned, common, result)
    print_generation_summary(summary)
    return result


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class GenerationCounts:
    """Per-category counts derived from the pruned vocabulary.

    Invariant: element_types + trivial_elements == elements.

    Attributes:
        elements: Elements in the vocabulary (one factory each).
        common_attributes: Attributes in the global attributes type.
        common_events: Events in the global attributes type.
        element_types: Elements with their own attributes type.
        trivial_elements: Elements that reuse the global attributes type.
    """

    elements: int
    common_attributes: int
    common_events: int
    element_types: int
    trivial_elements: int


@dataclass(frozen=True)
class GenerationSummary:
    source_label: str
    namespace: str
    counts: GenerationCounts
    file: FileWriteResult


def build_generation_counts(
    pruned: Vocabulary, common: InterfaceEntries
) -> GenerationCounts:
    elements = len(pruned.elements)
    element_types = sum(1 for e in pruned.elements.values() if has_local_entries(e))
    trivial = elements - element_types
    assert element_types + trivial == elements
    return GenerationCounts(
        elements=elements,
        common_attributes=len(common.attributes),
        common_events=len(common.events),
        element_types=element_types,
        trivial_elements=trivial,
    )


def build_generation_summary(
    write_config: WriteConfig,
    pruned: Vocabulary,
    common: InterfaceEntries,
    write_result: FileWriteResult,
) -> GenerationSummary:
    return GenerationSummary(
        source_label=write_config.spec_source,
        namespace=write_config.namespace,
        counts=build_generation_counts(pruned, common),
        file=write_result,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary to the multi-section console string.

    Line counts use thousands separators. Returns a string with exactly one
    trailing newline.
    """
    counts = summary.counts
    lines: list[str] = [
        "DOM bindings generated:",
        "",
        f"  Source:     {summary.source_label}",
        f"  Namespace:  {summary.namespace}",
        f"  Output:     {summary.file.path}",
        "",
        "  Declarations generated:",
        f"    {'Factories:':<20}{counts.elements:>6}",
        f"    {'Element types:':<20}{counts.element_types:>6}"
        f"  ({counts.trivial_elements} use global attributes)",
        f"    {'Common attributes:':<20}{counts.common_attributes:>6}",
        f"    {'Common events:':<20}{counts.common_events:>6}",
        "",
        f"  Total: {summary.file.line_count:,} lines, "
        f"{summary.file.byte_count:,} bytes in {summary.file.filename}",
        "",
    ]
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Main generation ---=== #


def main():
    try:
        config = build_config()
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        if isinstance(config, DiscoveryConfig):
            run_discovery(config)
        else:
            run_generate(config)
    except SchemaError as err:
        print(f"Schema error [{err.code}]: {err.message}")
        raise SystemExit(1) from err
    except FormatterError as err:
        print(f"Format error: {err}")
        raise SystemExit(1) from err
    except (OSError, yaml.YAMLError) as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
