import argparse
import shutil
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import domgen  # noqa: E402

FIXTURE_SPEC = GENERATOR_DIR / "tests" / "fixtures" / "html_minimal.yaml"


@pytest.fixture
def fixture_spec() -> Path:
    return FIXTURE_SPEC


@pytest.fixture
def existing_paths(tmp_path: Path) -> dict[str, Path]:
    spec_file = tmp_path / "html.yaml"
    shutil.copyfile(FIXTURE_SPEC, spec_file)

    output_file = tmp_path / "out" / "html.ts"
    return {
        "spec_file": spec_file,
        "output_file": output_file,
    }


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "missing"


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "spec": existing_paths["spec_file"],
            "output": None,
            "no_format": False,
            "prettier_command": None,
            "list_elements": False,
            "info": None,
            "filter": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_attribute() -> Callable[..., domgen.AttributeDef]:
    def _make_attribute(
        values: domgen.ValueSpec | None = None,
        *,
        description: str = "",
        ref: str = "",
    ) -> domgen.AttributeDef:
        return domgen.AttributeDef(
            description=description,
            ref=ref,
            values=domgen.TypedValue("string") if values is None else values,
        )

    return _make_attribute


@pytest.fixture
def make_event() -> Callable[..., domgen.EventDef]:
    def _make_event(
        interface: str = "Event", *, description: str = "", ref: str = ""
    ) -> domgen.EventDef:
        return domgen.EventDef(description=description, ref=ref, interface=interface)

    return _make_event


@pytest.fixture
def make_element() -> Callable[..., domgen.ElementDef]:
    def _make_element(
        interface: str = "HTMLElement",
        *,
        attributes: dict[str, domgen.AttributeDef] | None = None,
        events: dict[str, domgen.EventDef] | None = None,
        description: str = "",
        ref: str = "",
    ) -> domgen.ElementDef:
        return domgen.ElementDef(
            description=description,
            ref=ref,
            interface=interface,
            attributes={} if attributes is None else attributes,
            events={} if events is None else events,
        )

    return _make_element


@pytest.fixture
def make_vocabulary() -> Callable[..., domgen.Vocabulary]:
    def _make_vocabulary(
        elements: dict[str, domgen.ElementDef],
        *,
        namespace: str = "http://www.w3.org/1999/xhtml",
    ) -> domgen.Vocabulary:
        return domgen.Vocabulary(
            namespace=namespace,
            version=domgen.SpecVersion(ref="https://example.test/", pubdate="2023-01-01"),
            elements=elements,
        )

    return _make_vocabulary
