import pytest

from exprdoc.errors import ExpressionError
from exprdoc.lang import Runtime, iter_calls, parse
from exprdoc.model import Failure
from exprdoc.result import Err, Ok
from exprdoc.stdlib import build_registry


@pytest.fixture(scope="module")
def runtime() -> Runtime:
    return Runtime(build_registry())


def _failure(result: Ok[object] | Err[Failure]) -> Failure:
    assert isinstance(result, Err), f"expected a failure, got {result}"
    return result.error


class TestParse:
    def test_calls_outermost_first(self) -> None:
        calls = iter_calls(parse('upcase(downcase("A")); [length("ab")]'))
        assert [c.name for c in calls] == ["upcase", "downcase", "length"]

    def test_call_span_and_abort_marker(self) -> None:
        (call,) = iter_calls(parse("bool!(42)"))
        assert call.abort_on_error
        assert str(call.span) == "(0:9)"

    def test_error_reports_position(self) -> None:
        with pytest.raises(ExpressionError, match=r"at \(7:8\)") as exc_info:
            parse("upcase(,)")
        assert exc_info.value.kind == "parse"

    @pytest.mark.parametrize(
        "source",
        [
            'upcase("abc"',
            '"unterminated',
            "r'('",
            "1 2",
            '{1: "a"}',
            "@",
            r'"\q"',
            "upcase(²)",
            "1.²",
            "-٣",
        ],
    )
    def test_syntax_errors(self, runtime: Runtime, source: str) -> None:
        assert _failure(runtime.evaluate(source)).kind == "parse"


class TestEvaluate:
    def test_call(self, runtime: Runtime) -> None:
        assert runtime.evaluate('upcase("abc")') == Ok("ABC")

    def test_literals(self, runtime: Runtime) -> None:
        result = runtime.evaluate('{"a": [1, -2, 3.5, true, null, s\'raw\\n\']}')
        assert result == Ok({"a": [1, -2, 3.5, True, None, "raw\\n"]})

    def test_string_escapes(self, runtime: Runtime) -> None:
        assert runtime.evaluate(r'"tab\there \"quoted\""') == Ok('tab\there "quoted"')

    def test_named_arguments(self, runtime: Runtime) -> None:
        result = runtime.evaluate('encode_base64(padding: false, value: "please encode me")')
        assert result == Ok("cGxlYXNlIGVuY29kZSBtZQ")

    def test_defaults_fill_omitted_arguments(self, runtime: Runtime) -> None:
        assert runtime.evaluate('encode_base64("please encode me")') == Ok("cGxlYXNlIGVuY29kZSBtZQ==")

    def test_statements_and_variables(self, runtime: Runtime) -> None:
        result = runtime.evaluate('x = upcase("a"); y = downcase(x)\n[x, y]')
        assert result == Ok(["A", "a"])

    def test_comments(self, runtime: Runtime) -> None:
        assert runtime.evaluate('# leading\nupcase("a") # trailing\n') == Ok("A")

    def test_event_paths(self, runtime: Runtime) -> None:
        assert runtime.evaluate(".user.name", {"user": {"name": "ada"}}) == Ok("ada")
        assert runtime.evaluate(".missing.deeper", {"user": {}}) == Ok(None)
        assert runtime.evaluate(".", None) == Ok({})

    def test_path_assignment(self, runtime: Runtime) -> None:
        result = runtime.evaluate('.a.b = "x"\n.', {"c": 1})
        assert result == Ok({"c": 1, "a": {"b": "x"}})

    def test_bindings_are_not_mutated(self, runtime: Runtime) -> None:
        event = {"a": 1}
        assert runtime.evaluate(".a = 2", event) == Ok(2)
        assert event == {"a": 1}

    def test_each_evaluation_is_isolated(self, runtime: Runtime) -> None:
        assert runtime.evaluate("x = 1") == Ok(1)
        assert _failure(runtime.evaluate("x")).kind == "compile"


class TestCompileErrors:
    def test_undefined_function(self, runtime: Runtime) -> None:
        failure = _failure(runtime.evaluate("nope(1)"))
        assert failure == Failure("compile", 'call to undefined function "nope" at (0:7)')

    def test_fallible_call_needs_abort_marker(self, runtime: Runtime) -> None:
        failure = _failure(runtime.evaluate('parse_json("{}")'))
        assert failure.kind == "compile"
        assert 'must be marked with "!"' in failure.message

    @pytest.mark.parametrize(
        ("source", "fragment"),
        [
            ("upcase()", 'missing required argument "value"'),
            ('upcase(value: "a", extra: 1)', 'unknown argument "extra"'),
            ('upcase("a", "b")', "too many arguments"),
            ('upcase("a", value: "b")', 'argument "value" given twice'),
            ('encode_base64(value: "a", false)', "positional argument after named"),
        ],
    )
    def test_bad_arguments(self, runtime: Runtime, source: str, fragment: str) -> None:
        failure = _failure(runtime.evaluate(source))
        assert failure.kind == "compile"
        assert fragment in failure.message


class TestFunctionCallErrors:
    def test_argument_type(self, runtime: Runtime) -> None:
        failure = _failure(runtime.evaluate("upcase(42)"))
        assert failure == Failure(
            "function_call",
            'function call error for "upcase" at (0:10): expected string for argument "value", got integer',
        )

    def test_enum_argument(self, runtime: Runtime) -> None:
        failure = _failure(runtime.evaluate('encode_base64("a", charset: "nope")'))
        assert failure.kind == "function_call"
        assert 'invalid value for argument "charset"' in failure.message

    def test_function_failure(self, runtime: Runtime) -> None:
        failure = _failure(runtime.evaluate('parse_json!("{ invalid")'))
        assert failure.kind == "function_call"
        assert failure.message.startswith('function call error for "parse_json" at (0:24): unable to parse json')
