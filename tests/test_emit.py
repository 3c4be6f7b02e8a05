from collections.abc import Callable
from pathlib import Path

import pytest

import domgen


def _declarations(vocabulary: domgen.Vocabulary) -> tuple[str, ...]:
    pruned, common = domgen.extract_common(vocabulary)
    return domgen.build_declarations(pruned, common)


# ===--- Identifiers ---=== #


@pytest.mark.parametrize("name", ["class", "var", "switch", "delete", "await"])
def test_dereserve_name_appends_suffix_to_reserved_words(name: str) -> None:
    assert domgen.is_reserved(name)
    assert domgen.dereserve_name(name) == f"{name}_"


@pytest.mark.parametrize("name", ["div", "a", "object", "select", "Class"])
def test_dereserve_name_leaves_other_names_alone(name: str) -> None:
    assert domgen.dereserve_name(name) == name


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("div", "div"),
        ("font-face", "font_face"),
        ("h1", "h1"),
        ("3d", "_3d"),
        ("class", "class_"),
    ],
)
def test_factory_identifier_sanitizes_then_dereserves(name: str, expected: str) -> None:
    assert domgen.factory_identifier(name) == expected


# ===--- build_declarations ---=== #


def test_build_declarations_full_output_for_small_vocabulary(
    make_attribute: Callable[..., domgen.AttributeDef],
    make_event: Callable[..., domgen.EventDef],
    make_element: Callable[..., domgen.ElementDef],
    make_vocabulary: Callable[..., domgen.Vocabulary],
) -> None:
    hidden = make_attribute(domgen.TypedValue("boolean"), description="Hidden")
    click = make_event("MouseEvent", description="Click")
    vocabulary = make_vocabulary(
        {
            "a": make_element(
                "HTMLAnchorElement",
                attributes={"hidden": hidden, "href": make_attribute(description="Link")},
                events={"click": click},
                description="Anchor",
                ref="https://x.test/#a",
            ),
            "class": make_element(
                "HTMLElement",
                attributes={"hidden": hidden},
                events={"click": click},
                description="Class",
            ),
        },
        namespace="urn:test",
    )

    lines = _declarations(vocabulary)

    assert lines == (
        "import { EventHandler, create as domCreate } from \"./\";",
        "",
        'export const domNamespace = "urn:test";',
        "",
        "type GlobalAttributes<IFace extends Element> = {",
        "  /** Hidden",
        "   *",
        "   */",
        '  "hidden"?: boolean;',
        "",
        "  /** Click",
        "   *",
        "   */",
        '  "onclick"?: EventHandler<IFace, MouseEvent>;',
        "};",
        "",
        "/** Attributes for the a element */",
        "export type aAttribs = GlobalAttributes<HTMLAnchorElement> & {",
        "  /** Link",
        "   *",
        "   */",
        '  "href"?: string;',
        "};",
        "",
        "export type ElementAttribsMap = {",
        '  "a": aAttribs;',
        '  "class": GlobalAttributes<HTMLElement>;',
        "};",
        "",
        "export type ElementInterfaceMap = {",
        '  "a": HTMLAnchorElement;',
        '  "class": HTMLElement;',
        "};",
        "",
        "export type Child = string | Element;",
        "",
        "export const create = <Name extends keyof ElementInterfaceMap>(",
        "  elemName: Name,",
        "  attribs: ElementAttribsMap[Name],",
        "  ...childs: Child[]",
        "): ElementInterfaceMap[Name] => domCreate(domNamespace, elemName, attribs, ...childs);",
        "",
        "/** Anchor",
        " *",
        " * @see https://x.test/#a",
        " */",
        'export const a = (attribs: ElementAttribsMap["a"], ...childs: Child[]) => create("a", attribs, ...childs);',
        "",
        "/** Class",
        " *",
        " */",
        'export const class_ = (attribs: ElementAttribsMap["class"], ...childs: Child[]) => create("class", attribs, ...childs);',
    )


def test_build_declarations_trivial_elements_get_no_named_type(
    fixture_spec: Path,
) -> None:
    text = "\n".join(_declarations(domgen.load_vocabulary(fixture_spec)))

    assert "export type aAttribs = GlobalAttributes<HTMLAnchorElement> & {" in text
    assert "export type inputAttribs = GlobalAttributes<HTMLInputElement> & {" in text
    assert "divAttribs" not in text
    assert "varAttribs" not in text
    assert '  "div": GlobalAttributes<HTMLDivElement>;' in text
    assert '  "var": GlobalAttributes<HTMLElement>;' in text


def test_build_declarations_fixture_value_types(fixture_spec: Path) -> None:
    lines = _declarations(domgen.load_vocabulary(fixture_spec))

    assert '  "target"?: "_blank" | "_self" | "_parent" | "_top" | ({} & string);' in lines
    assert '  "maxlength"?: number;' in lines
    assert '  "pattern"?: string;' in lines
    assert '  "type"?: "text" | "checkbox" | "number";' in lines
    assert '  "value"?: boolean | number | ({} & string);' in lines
    assert '  "oninput"?: EventHandler<HTMLInputElement, InputEvent>;' in lines
    assert '  "onclick"?: EventHandler<IFace, MouseEvent>;' in lines


def test_build_declarations_sections_appear_in_contract_order(fixture_spec: Path) -> None:
    text = "\n".join(_declarations(domgen.load_vocabulary(fixture_spec)))

    markers = [
        "import { EventHandler",
        "type GlobalAttributes<",
        "export type aAttribs",
        "export type inputAttribs",
        "export type ElementAttribsMap",
        "export type ElementInterfaceMap",
        "export const create =",
        "export const a =",
        "export const div =",
        "export const var_ =",
        "export const input =",
    ]
    positions = [text.index(marker) for marker in markers]

    assert positions == sorted(positions)


def test_build_declarations_lookup_tables_cover_every_element_in_input_order(
    fixture_spec: Path,
) -> None:
    lines = _declarations(domgen.load_vocabulary(fixture_spec))
    start = lines.index("export type ElementInterfaceMap = {")
    end = lines.index("};", start)

    assert lines[start + 1 : end] == (
        '  "a": HTMLAnchorElement;',
        '  "div": HTMLDivElement;',
        '  "var": HTMLElement;',
        '  "input": HTMLInputElement;',
    )


def test_build_declarations_empty_vocabulary_still_emits_valid_skeleton(
    make_vocabulary: Callable[..., domgen.Vocabulary],
) -> None:
    lines = _declarations(make_vocabulary({}))

    assert "type GlobalAttributes<IFace extends Element> = {" in lines
    assert "export type ElementAttribsMap = {" in lines
    assert lines[-1].startswith("): ElementInterfaceMap[Name]")


def test_build_declarations_rejects_identifier_collisions(
    make_element: Callable[..., domgen.ElementDef],
    make_vocabulary: Callable[..., domgen.Vocabulary],
) -> None:
    vocabulary = make_vocabulary({"font-face": make_element(), "font_face": make_element()})

    with pytest.raises(domgen.SchemaError) as exc_info:
        _declarations(vocabulary)

    assert exc_info.value.code == "MALFORMED_SCHEMA"


def test_build_declarations_is_deterministic(fixture_spec: Path) -> None:
    first = _declarations(domgen.load_vocabulary(fixture_spec))
    second = _declarations(domgen.load_vocabulary(fixture_spec))

    assert first == second
