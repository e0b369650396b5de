"""Tests for domain/protocol assembly and the global passes."""

from __future__ import annotations

import pytest

from cdpgen.codegen.protocol import ProtocolGenerator, generate_file, summarize
from cdpgen.codegen.render import render_file, render_type
from cdpgen.codegen.syntax import (
    Allow,
    Derive,
    Doc,
    EnumItem,
    ImplItem,
    Item,
    Marker,
    ModItem,
    StructItem,
    UseItem,
)
from cdpgen.config.models import GeneratorConfig
from cdpgen.domain.errors import DuplicateDeclarationError
from cdpgen.domain.model import Protocol
from cdpgen.domain.parsing import parse_protocol

FULL_DERIVE = Derive(("Debug", "Clone", "Default", "serde::Serialize", "serde::Deserialize"))


def _module(protocol: Protocol, name: str, config: GeneratorConfig | None = None) -> ModItem:
    file = generate_file(protocol, config)
    (module,) = [m for m in file.items if isinstance(m, ModItem) and m.name == name]
    return module


def _label(item: Item) -> str:
    if isinstance(item, ImplItem):
        return f"impl {render_type(item.self_ty)}"
    if isinstance(item, UseItem):
        return "use " + "::".join(item.path)
    return item.name


class TestDomainModule:
    def test_item_order(self, sample_protocol: Protocol) -> None:
        module = _module(sample_protocol, "runtime")
        assert [_label(i) for i in module.items] == [
            "ScriptId",
            "RemoteObjectType",
            "RemoteObject",
            "StackTrace",
            "CallFrame",
            "Enable",
            "impl Enable",
            "EvaluateParams",
            "EvaluateReturns",
            "Evaluate",
            "impl Evaluate",
            "ExecutionContextDestroyedEvent",
            "impl ExecutionContextDestroyedEvent",
        ]

    def test_dependency_imports_first(self, sample_protocol: Protocol) -> None:
        module = _module(sample_protocol, "debugger")
        assert module.items[0] == UseItem(("super", "runtime"))

    def test_dependency_imports_disabled(self, sample_protocol: Protocol) -> None:
        config = GeneratorConfig(emit_dependency_imports=False)
        module = _module(sample_protocol, "debugger", config)
        assert not any(isinstance(i, UseItem) for i in module.items)

    def test_every_struct_and_enum_derives(self, sample_protocol: Protocol) -> None:
        file = generate_file(sample_protocol)
        for module in file.items:
            for item in module.items:  # type: ignore[union-attr]
                if isinstance(item, (StructItem, EnumItem)):
                    assert FULL_DERIVE in item.attrs, item.name

    def test_module_attrs(self, sample_protocol: Protocol) -> None:
        runtime = _module(sample_protocol, "runtime")
        assert runtime.attrs == [
            Doc(" Runtime domain exposes JavaScript runtime."),
            Allow(("deprecated", "unused_imports", "clippy::enum_variant_names")),
        ]
        debugger = _module(sample_protocol, "debugger")
        assert debugger.attrs[0] == Doc(" **Experimental**")

    def test_no_lint_allows(self, sample_protocol: Protocol) -> None:
        module = _module(sample_protocol, "runtime", GeneratorConfig(lint_allows=[]))
        assert not any(isinstance(a, Allow) for a in module.attrs)


class TestProtocolFile:
    def test_header(self, sample_protocol: Protocol) -> None:
        file = generate_file(sample_protocol)
        texts = [a.text for a in file.attrs if isinstance(a, Doc)]
        assert all(a.inner for a in file.attrs)  # type: ignore[union-attr]
        assert " # Chrome DevTools Protocol" in texts
        assert " Version: `V1.3`" in texts

    def test_recursion_broken(self, sample_protocol: Protocol) -> None:
        generator = ProtocolGenerator()
        file = generator.generate(sample_protocol)
        runtime = file.items[0]
        (stack,) = [i for i in runtime.items if getattr(i, "name", None) == "StackTrace"]  # type: ignore[union-attr]
        types = {f.name: render_type(f.ty) for f in stack.fields}  # type: ignore[union-attr]
        assert types["parent"] == "Option<Box<StackTrace>>"
        assert types["call_frames"] == "Vec<CallFrame>"
        assert generator.report.boxed_fields == 1

    def test_enum_defaults(self, sample_protocol: Protocol) -> None:
        generator = ProtocolGenerator()
        file = generator.generate(sample_protocol)
        enums = [
            i for m in file.items for i in m.items if isinstance(i, EnumItem)  # type: ignore[union-attr]
        ]
        assert [e.name for e in enums] == ["RemoteObjectType", "ScopeType", "PausedReason"]
        for enum in enums:
            assert Marker("default") in enum.variants[0].attrs
        assert generator.report.enum_defaults == 3

    def test_no_default(self, sample_protocol: Protocol) -> None:
        config = GeneratorConfig(derive_default=False)
        generator = ProtocolGenerator(config)
        text = render_file(generator.generate(sample_protocol))
        assert "Default" not in text
        assert "#[default]" not in text
        assert generator.report.enum_defaults == 0

    def test_domain_prefixed_inline_enum(self, sample_protocol: Protocol) -> None:
        """Inline enum names drop the domain unless configured to keep it.

        `Debugger.paused`'s `reason` hoists as `PausedReason` by default and
        as `DebuggerPausedReason` with `inline_enum_domain_prefix`; either way
        it lands right before the event struct that uses it.
        """
        default = [_label(i) for i in _module(sample_protocol, "debugger").items]
        assert default.index("PausedReason") == default.index("PausedEvent") - 1
        assert "DebuggerPausedReason" not in default

        module = _module(
            sample_protocol, "debugger", GeneratorConfig(inline_enum_domain_prefix=True)
        )
        labels = [_label(i) for i in module.items]
        assert labels.index("DebuggerPausedReason") == labels.index("PausedEvent") - 1
        assert "PausedReason" not in labels

    @pytest.mark.parametrize("config", [GeneratorConfig(), GeneratorConfig(derive_default=False)])
    def test_deterministic(self, sample_protocol: Protocol, config: GeneratorConfig) -> None:
        first = render_file(generate_file(sample_protocol, config))
        second = render_file(generate_file(sample_protocol, config))
        assert first == second


class TestSummarize:
    def test_counts(self, sample_protocol: Protocol) -> None:
        rows = summarize(generate_file(sample_protocol))
        assert rows[0] == {
            "domain": "runtime",
            "structs": 8,
            "enums": 1,
            "aliases": 1,
            "impls": 3,
        }
        assert rows[1]["domain"] == "debugger"
        assert rows[1]["impls"] == 2


def _single_domain(**members: list[dict]) -> Protocol:
    return parse_protocol(
        {"version": {"major": "1", "minor": "0"}, "domains": [{"domain": "Zoo", **members}]}
    )


MODE = {"name": "mode", "type": "string", "enum": ["open", "closed"]}


class TestDuplicateDeclarations:
    def test_identical_inline_enums_are_merged(self) -> None:
        protocol = _single_domain(
            commands=[{"name": "setMode", "parameters": [MODE], "returns": [MODE]}]
        )
        labels = [_label(i) for i in _module(protocol, "zoo").items]
        assert labels == [
            "SetModeMode",
            "SetModeParams",
            "SetModeReturns",
            "SetMode",
            "impl SetMode",
        ]
        assert "pub enum SetModeMode {" in render_file(generate_file(protocol))

    def test_conflicting_inline_enums_raise(self) -> None:
        other = {**MODE, "enum": ["ajar"]}
        protocol = _single_domain(
            commands=[{"name": "setMode", "parameters": [MODE], "returns": [other]}]
        )
        with pytest.raises(DuplicateDeclarationError, match="`SetModeMode`") as exc_info:
            generate_file(protocol)
        assert exc_info.value.code == "DUPLICATE_DECLARATION"
        assert exc_info.value.location == "Zoo.SetModeMode"

    def test_type_named_like_command_struct_raises(self) -> None:
        protocol = _single_domain(
            types=[{"id": "Feed", "type": "string"}],
            commands=[{"name": "feed"}],
        )
        with pytest.raises(DuplicateDeclarationError, match="Domain Zoo declares `Feed`"):
            generate_file(protocol)

    def test_same_names_in_different_domains_are_fine(self) -> None:
        protocol = parse_protocol(
            {
                "version": {"major": "1", "minor": "0"},
                "domains": [
                    {"domain": "Zoo", "types": [{"id": "Id", "type": "string"}]},
                    {"domain": "Farm", "types": [{"id": "Id", "type": "string"}]},
                ],
            }
        )
        assert len(generate_file(protocol).items) == 2
