"""Shared pytest fixtures and test helpers for cdpgen tests."""

from __future__ import annotations

import copy
import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from cdpgen.config.settings import CdpSettings
from cdpgen.domain.model import Protocol
from cdpgen.domain.parsing import parse_protocol

# A small but representative two-domain document: aliases, structs,
# field-level inline enums, a self-referential struct, cross-domain
# references, commands with and without parameter groups, and events
# with and without payloads.
SAMPLE_PROTOCOL: dict[str, Any] = {
    "version": {"major": "1", "minor": "3"},
    "domains": [
        {
            "domain": "Runtime",
            "description": "Runtime domain exposes JavaScript runtime.",
            "types": [
                {"id": "ScriptId", "description": "Unique script identifier.", "type": "string"},
                {
                    "id": "RemoteObject",
                    "description": "Mirror object referencing original JavaScript object.",
                    "type": "object",
                    "properties": [
                        {
                            "name": "type",
                            "description": "Object type.",
                            "type": "string",
                            "enum": ["object", "function", "undefined"],
                        },
                        {"name": "objectId", "optional": True, "type": "string"},
                        {"name": "value", "optional": True, "type": "any"},
                    ],
                },
                {
                    "id": "StackTrace",
                    "type": "object",
                    "properties": [
                        {"name": "description", "optional": True, "type": "string"},
                        {"name": "callFrames", "type": "array", "items": {"$ref": "CallFrame"}},
                        {"name": "parent", "optional": True, "$ref": "StackTrace"},
                    ],
                },
                {
                    "id": "CallFrame",
                    "type": "object",
                    "properties": [
                        {"name": "functionName", "type": "string"},
                        {"name": "lineNumber", "type": "integer"},
                    ],
                },
            ],
            "commands": [
                {"name": "enable", "description": "Enables reporting."},
                {
                    "name": "evaluate",
                    "description": "Evaluates expression on global object.",
                    "parameters": [
                        {"name": "expression", "type": "string"},
                        {"name": "silent", "optional": True, "type": "boolean"},
                    ],
                    "returns": [{"name": "result", "$ref": "RemoteObject"}],
                },
            ],
            "events": [
                {
                    "name": "executionContextDestroyed",
                    "parameters": [{"name": "executionContextId", "type": "integer"}],
                },
                {"name": "executionContextsCleared"},
            ],
        },
        {
            "domain": "Debugger",
            "experimental": True,
            "dependencies": ["Runtime"],
            "types": [
                {
                    "id": "Location",
                    "type": "object",
                    "properties": [
                        {"name": "scriptId", "$ref": "Runtime.ScriptId"},
                        {"name": "lineNumber", "type": "integer"},
                    ],
                },
                {"id": "ScopeType", "type": "string", "enum": ["global", "local", "with"]},
            ],
            "commands": [
                {
                    "name": "setBreakpoint",
                    "deprecated": True,
                    "parameters": [{"name": "location", "$ref": "Location"}],
                    "returns": [{"name": "breakpointId", "type": "string"}],
                },
            ],
            "events": [
                {
                    "name": "paused",
                    "parameters": [
                        {
                            "name": "reason",
                            "type": "string",
                            "enum": ["ambiguous", "exception", "other"],
                        },
                        {"name": "stackTrace", "optional": True, "$ref": "Runtime.StackTrace"},
                    ],
                },
            ],
        },
    ],
}


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A fresh deep copy of the sample schema document."""
    return copy.deepcopy(SAMPLE_PROTOCOL)


@pytest.fixture
def sample_protocol(sample_document: dict[str, Any]) -> Protocol:
    return parse_protocol(sample_document)


@pytest.fixture
def schema_file(tmp_path: Path, sample_document: dict[str, Any]) -> Path:
    """The sample document written to a JSON file."""
    path = tmp_path / "protocol.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CdpSettings:
    """Settings rooted at a temp project with no config file."""
    monkeypatch.delenv("CDPGEN_CONFIG", raising=False)
    return CdpSettings.from_cli(project_root=tmp_path)


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Change CWD to a temp directory so the CLI finds no stray config."""
    monkeypatch.delenv("CDPGEN_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    yield

