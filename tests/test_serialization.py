"""Determinism and round-trip tests for artifacts and manifests."""

import json
from dataclasses import replace

import pytest

from exprdoc.errors import IncompleteMetadata, MalformedArtifact
from exprdoc.helpers import example, function_doc, optional, param, returns
from exprdoc.model import FunctionDoc
from exprdoc.registry import FunctionRegistry
from exprdoc.serialization import (
    Manifest,
    artifact_filename,
    doc_to_json,
    generate,
    generate_manifest,
    parse_artifact,
    parse_manifest,
)
from exprdoc.stdlib import build_registry


def test_generate_is_deterministic(upcase_doc: FunctionDoc) -> None:
    first = generate(upcase_doc)
    assert first == generate(upcase_doc)
    assert first == generate(replace(upcase_doc))
    assert first.endswith(b"}\n")
    assert first.startswith(b'{\n  "identifier": "upcase",\n')


def test_fixed_key_order(parse_json_doc: FunctionDoc) -> None:
    data = json.loads(generate(parse_json_doc))
    assert list(data) == [
        "identifier",
        "summary",
        "description",
        "category",
        "fallible",
        "parameters",
        "returns",
        "internal_failure_reasons",
        "examples",
        "notices",
    ]
    assert list(data["parameters"][0]) == ["name", "type", "description", "required", "default", "enum"]
    assert list(data["examples"][0]) == ["title", "source", "input", "result", "notes", "requires_host"]
    assert data["fallible"] is True
    assert data["examples"][0]["result"] == {"error": {"kind": "function_call", "message": ""}}


def test_success_and_null_results_are_distinct(upcase_doc: FunctionDoc) -> None:
    doc = replace(upcase_doc, examples=(example(None, "upcase(null)", None),))
    data = doc_to_json(doc)
    assert data["examples"][0]["result"] == {"ok": None}


def test_non_ascii_is_kept(upcase_doc: FunctionDoc) -> None:
    doc = replace(upcase_doc, summary="Größe ändern.")
    assert "Größe ändern.".encode() in generate(doc)


def test_round_trip(upcase_doc: FunctionDoc, parse_json_doc: FunctionDoc) -> None:
    doc = function_doc(
        "encode",
        summary="Encode.",
        category="codec",
        description="Encodes `value`.",
        parameters=[
            param("value", "string | array<string>", "The value."),
            optional("padding", "boolean", "Pad.", default=False),
            optional("charset", "string", "Charset.", default="standard", enum=[("standard", "Std."), ("url_safe", "URL.")]),
        ],
        returns=returns("string", "Encoded.", "Returns text."),
        failures=["never"],
        examples=[example("With input", "encode!(.v)", "x", notes="Reads the event.", input={"v": "a"})],
        notices=["Be careful."],
    )
    for d in (upcase_doc, parse_json_doc, doc):
        data = generate(d)
        assert parse_artifact(data) == d
        assert generate(parse_artifact(data)) == data


def test_stdlib_round_trip() -> None:
    for entry in build_registry():
        data = generate(entry.doc)
        assert parse_artifact(data) == entry.doc, entry.identifier
        assert generate(parse_artifact(data)) == data, entry.identifier


def test_generate_rejects_incomplete_docs(upcase_doc: FunctionDoc) -> None:
    with pytest.raises(IncompleteMetadata) as exc_info:
        generate(replace(upcase_doc, description=""))
    assert exc_info.value.missing_fields == {"description"}


class TestMalformedArtifacts:
    def _mutated(self, doc: FunctionDoc, **changes) -> bytes:  # type: ignore[no-untyped-def]
        data = doc_to_json(doc)
        for key, value in changes.items():
            if value is None:
                del data[key]
            else:
                data[key] = value
        return json.dumps(data).encode()

    @pytest.mark.parametrize("raw", [b"{not json", b"[]", b"\xff\xfe", b'"a string"'])
    def test_unparseable(self, raw: bytes) -> None:
        with pytest.raises(MalformedArtifact):
            parse_artifact(raw, "functions/x.json")

    def test_missing_key(self, upcase_doc: FunctionDoc) -> None:
        with pytest.raises(MalformedArtifact, match="missing key 'returns'"):
            parse_artifact(self._mutated(upcase_doc, returns=None))

    def test_bad_type_spec(self, upcase_doc: FunctionDoc) -> None:
        bad = {"type": "strng", "description": "x", "rules": []}
        with pytest.raises(MalformedArtifact, match="invalid type spec"):
            parse_artifact(self._mutated(upcase_doc, returns=bad))

    def test_unknown_category(self, upcase_doc: FunctionDoc) -> None:
        with pytest.raises(MalformedArtifact):
            parse_artifact(self._mutated(upcase_doc, category="strings"))

    def test_fallible_flag_must_agree(self, upcase_doc: FunctionDoc) -> None:
        with pytest.raises(MalformedArtifact, match="fallible"):
            parse_artifact(self._mutated(upcase_doc, fallible=True))

    def test_incomplete_doc(self, upcase_doc: FunctionDoc) -> None:
        with pytest.raises(MalformedArtifact, match="summary"):
            parse_artifact(self._mutated(upcase_doc, summary=""))

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("notices", "Prefer X"),
            ("internal_failure_reasons", "bad input"),
            ("summary", 3),
            ("parameters", {"value": "string"}),
            ("examples", ["upcase(\"a\")"]),
            ("fallible", "no"),
        ],
    )
    def test_wrong_top_level_type(self, upcase_doc: FunctionDoc, key: str, value: object) -> None:
        with pytest.raises(MalformedArtifact, match=key):
            parse_artifact(self._mutated(upcase_doc, **{key: value}))

    @pytest.mark.parametrize(
        ("section", "key", "value"),
        [
            ("returns", "rules", "abc"),
            ("returns", "rules", [1]),
            ("parameters", "required", "yes"),
            ("parameters", "enum", "a"),
            ("examples", "requires_host", 0),
            ("examples", "title", ["Upcase"]),
            ("examples", "notes", 1),
            ("examples", "result", "ABC"),
        ],
    )
    def test_wrong_nested_type(
        self, upcase_doc: FunctionDoc, section: str, key: str, value: object
    ) -> None:
        data = doc_to_json(upcase_doc)
        target = data[section] if section == "returns" else data[section][0]
        target[key] = value
        with pytest.raises(MalformedArtifact, match=key):
            parse_artifact(json.dumps(data).encode())

    def test_failure_fields_must_be_strings(self, parse_json_doc: FunctionDoc) -> None:
        data = doc_to_json(parse_json_doc)
        data["examples"][0]["result"] = {"error": {"kind": "function_call", "message": None}}
        with pytest.raises(MalformedArtifact, match="message"):
            parse_artifact(json.dumps(data).encode())

    def test_error_carries_path(self) -> None:
        with pytest.raises(MalformedArtifact) as exc_info:
            parse_artifact(b"{", "functions/x.json")
        assert str(exc_info.value.path) == "functions/x.json"


def test_artifact_filename() -> None:
    assert artifact_filename("parse_json") == "parse_json.json"
    assert artifact_filename("a.b/c") == "a_b_c.json"


class TestManifest:
    def test_round_trip(self, registry: FunctionRegistry) -> None:
        data = generate_manifest(registry)
        assert parse_manifest(data) == Manifest("test", ("upcase", "parse_json"))
        assert data == generate_manifest(registry)

    def test_repository_override(self, registry: FunctionRegistry) -> None:
        assert parse_manifest(generate_manifest(registry, "other")).repository == "other"

    @pytest.mark.parametrize(
        "raw",
        [
            b"{",
            b"[]",
            b'{"functions": []}',
            b'{"repository": "", "functions": []}',
            b'{"repository": "r", "functions": "upcase"}',
            b'{"repository": "r", "functions": ["a", "a"]}',
        ],
    )
    def test_malformed(self, raw: bytes) -> None:
        with pytest.raises(MalformedArtifact):
            parse_manifest(raw)
