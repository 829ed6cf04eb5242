"""
Tests for the message renderer

Tests cover:
- The rendering table for every named cause
- Frame rendering (arity form and argument form)
- Opaque cause dumps
- format_exit and registered-name unwrapping
"""

import pytest

from faultrelay.models import Fun, Pid
from faultrelay.reasons import MessageRenderer


@pytest.fixture
def renderer():
    """Renderer with the default term width."""
    return MessageRenderer()


class TestRenderTable:
    """Test rendering of named causes."""

    @pytest.mark.parametrize("raw,expected", [
        (("function not exported", [("m", "f", 1)]), "call to undefined function m:f/1"),
        (("undef", [("m", "f", [1, b"x"])]), 'call to undefined function m:f(1, <<"x">>)'),
        (("bad_return", (("m", "init", 1), "oops")), "bad return value oops from m:init/1"),
        (("bad_return_value", 42), "bad return value 42"),
        (("badarg", [("m", "f", 2)]), "bad argument in m:f/2"),
        ((("badmatch", 3), [("m", "f", 1)]), "no match of right hand value 3 in m:f/1"),
        ((("badrecord", "user"), [("m", "f", 1)]), "bad record user in m:f/1"),
        ((("case_clause", ("ok", 1)), [("m", "f", 1)]), "no case clause matching {ok, 1} in m:f/1"),
        (("function_clause", [("m", "f", ["a"])]), "no function clause matching m:f(a)"),
        (("if_clause", [("m", "f", 0)]),
         "no true branch found while evaluating if expression in m:f/0"),
        ((("try_clause", "x"), [("m", "f", 0)]), "no try clause matching x in m:f/0"),
        (("badarith", [("m", "f", 2)]), "bad arithmetic expression in m:f/2"),
        (("noproc", [("gen_server", "call", 2)]),
         "no such process or port in call to gen_server:call/2"),
        ((("badfun", 5), [("m", "f", 0)]), "bad function 5 in m:f/0"),
    ])
    def test_named_causes(self, renderer, raw, expected):
        """Each named cause uses its template."""
        assert renderer.render_reason(raw) == expected

    def test_emfile(self, renderer):
        """emfile renders a fixed hint regardless of trace."""
        expected = "maximum number of file descriptors exhausted, check ulimit -n"
        assert renderer.render_reason("emfile") == expected
        assert renderer.render_reason(("emfile", [("m", "f", 1)])) == expected
        assert renderer.render_reason(("emfile", "accept")) == expected

    @pytest.mark.parametrize("module,function,phrase", [
        ("erlang", "open_port", "maximum number of ports exceeded"),
        ("erlang", "spawn", "maximum number of processes exceeded"),
        ("erlang", "spawn_opt", "maximum number of processes exceeded"),
        ("erlang", "list_to_atom",
         "tried to create an atom larger than 255, or maximum atom count exceeded"),
        ("ets", "new", "maximum number of ETS tables exceeded"),
    ])
    def test_system_limit_resources(self, renderer, module, function, phrase):
        """Known resources get a specific phrase."""
        raw = ("system_limit", [(module, function, 2)])
        assert renderer.render_reason(raw) == f"system limit: {phrase}"

    def test_system_limit_unknown_resource(self, renderer):
        """Other resources fall back to the frame."""
        assert renderer.render_reason(("system_limit", [("m", "f", 1)])) == "system limit: m:f/1"

    def test_badarity_with_fun(self, renderer):
        """badarity reports the call and declared arities."""
        raw = (("badarity", (Fun("m", "-f/0-fun-0-", 1), [1, 2])), [("m", "f", 0)])
        assert renderer.render_reason(raw) == (
            "fun called with wrong arity of 2 instead of 1 in m:f/0"
        )

    def test_badarity_with_callable(self, renderer):
        """A Python callable's signature provides the declared arity."""
        raw = (("badarity", (lambda a, b, c: None, [1])), [("m", "f", 0)])
        assert renderer.render_reason(raw) == (
            "fun called with wrong arity of 1 instead of 3 in m:f/0"
        )


class TestOpaqueCauses:
    """Test the generic dump fallback."""

    def test_opaque_atom(self, renderer):
        """An atom renders as itself."""
        assert renderer.render_reason("normal") == "normal"

    def test_opaque_tuple(self, renderer):
        """An opaque tuple renders its elements."""
        assert renderer.render_reason(("shutdown", "foo")) == "shutdown, foo"

    def test_opaque_with_trace(self, renderer):
        """An opaque cause with a trace names the frame."""
        raw = (("shutdown", "x"), [("m", "f", 1)])
        assert renderer.render_reason(raw) == "{shutdown, x} in m:f/1"

    def test_class_tagged_opaque(self, renderer):
        """A class-tagged cause with an empty trace renders the cause only."""
        assert renderer.render_reason((("exit", "killed"), [])) == "killed"

    def test_empty_trace_dumps_raw_term(self, renderer):
        """When no frame is recognised the raw trace term is shown."""
        assert renderer.render_reason(("badarg", "nowhere")) == "bad argument in nowhere"

    def test_long_cause_bounded(self):
        """Dumps respect the configured width."""
        text = MessageRenderer(term_width=30).render_reason(list(range(200)))
        assert len(text) <= 30


class TestDeterminism:
    """Test that rendering is pure."""

    def test_same_input_same_output(self, renderer):
        """Rendering twice gives the same string."""
        raw = ((("case_clause", {"k": [1, 2]}), [("m", "f", 1)]))
        assert renderer.render_reason(raw) == renderer.render_reason(raw)

    def test_frame_and_wrapped_frame_render_identically(self, renderer):
        """A single frame and a one-element trace render the same."""
        assert renderer.render_reason(("badarg", ("m", "f", 2))) == (
            renderer.render_reason(("badarg", [("m", "f", 2)]))
        )


class TestFormatMfa:
    """Test frame rendering."""

    def test_four_element_frame(self, renderer):
        """Location information is not rendered."""
        assert renderer.format_mfa(("m", "f", 1, [("line", 3)])) == "m:f/1"

    def test_trace_uses_head(self, renderer):
        """A trace renders by its head frame."""
        assert renderer.format_mfa([("a", "b", 0), ("c", "d", 1)]) == "a:b/0"

    def test_non_frame_dumped(self, renderer):
        """Anything else is dumped."""
        assert renderer.format_mfa(None) == "undefined"

    def test_quoted_function_names(self, renderer):
        """Function atoms needing quotes are quoted."""
        assert renderer.format_mfa(("m", "-f/0-fun-0-", 0)) == "m:'-f/0-fun-0-'/0"


class TestFormatExit:
    """Test exit summaries and name rendering."""

    def test_pid_subject_omits_name(self, renderer):
        """A bare pid subject is not repeated in the message."""
        text = renderer.format_exit("gen_server", Pid(0, 1, 0), "normal")
        assert text == "gen_server terminated with reason: normal"

    def test_named_subject(self, renderer):
        """Names appear between tag and verb."""
        text = renderer.format_exit("gen_server", "my_server", ("badarg", [("m", "f", 2)]))
        assert text == "gen_server my_server terminated with reason: bad argument in m:f/2"

    @pytest.mark.parametrize("name,expected", [
        (("local", "my_server"), "my_server"),
        (("global", b"cluster_lock"), "cluster_lock"),
        (("via", "registry", "conn_1"), "conn_1"),
        (b"binary_name", "binary_name"),
        (("global", ("lock", 1)), "{lock, 1}"),
    ])
    def test_name_unwrapping(self, renderer, name, expected):
        """Registered-name wrappers unwrap to their inner name."""
        assert renderer.format_name(name) == expected
