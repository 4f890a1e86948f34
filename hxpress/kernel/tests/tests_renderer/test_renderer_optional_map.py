"""
hxpress Renderer -- Optional, Default and Map Tests

Scalar field policies:
  - optional + absent, no default → the element is skipped entirely
  - optional + absent + default   → the default fills the content slot
  - optional + present            → rendered like a plain field
  - map                           → content receives map(value)
  - optional + map                → map runs on present values only

Also pins down the value conversions the map and default paths feed into
content (booleans, numbers, empty strings).
"""

from dataclasses import dataclass

from hxpress.kernel.renderer import render
from hxpress.kernel.types import (
    ElementSpec,
    Field,
    FormatExpr,
    MapExpr,
    MapPolicy,
    NestPolicy,
    OptionalPolicy,
    Schema,
)

# ============================================================================
# Optional and default
# ============================================================================


@dataclass
class Maybe:
    foo: str | None
    bar: int | None
    qux: str | None
    qua: str | None


def maybe_schema():
    return Schema(
        fields=(
            Field("foo", OptionalPolicy(), ElementSpec("p")),
            Field("bar", OptionalPolicy(), ElementSpec("p", content=FormatExpr("bar: {}"))),
            Field("qux", OptionalPolicy(default="foo"), ElementSpec("p")),
            Field("qua", OptionalPolicy(default="qua"), ElementSpec("p", content=FormatExpr("{}ck"))),
        ),
        record_type=Maybe,
    )


class TestOptional:
    def test_absent_skipped_present_rendered_defaults_filled(self):
        html = render(maybe_schema(), Maybe(foo=None, bar=420, qux=None, qua=None))
        assert html == "<p>bar: 420</p><p>foo</p><p>quack</p>"

    def test_all_present(self):
        html = render(maybe_schema(), Maybe(foo="a", bar=1, qux="b", qua="d"))
        assert html == "<p>a</p><p>bar: 1</p><p>b</p><p>dck</p>"

    def test_all_absent_leaves_only_defaults(self):
        html = render(maybe_schema(), Maybe(foo=None, bar=None, qux=None, qua=None))
        assert html == "<p>foo</p><p>quack</p>"

    def test_absent_leaves_no_residue_inside_record_element(self):
        schema = Schema(
            element=ElementSpec("div"),
            fields=(Field("foo", OptionalPolicy(), ElementSpec("p", before="<i>", after="</i>")),),
        )
        assert render(schema, {"foo": None}) == "<div></div>"

    def test_empty_string_is_present(self):
        schema = Schema(fields=(Field("foo", OptionalPolicy(default="x"), ElementSpec("p")),))
        assert render(schema, {"foo": ""}) == "<p></p>"

    def test_missing_mapping_key_is_absent(self):
        schema = Schema(fields=(Field("foo", OptionalPolicy(), ElementSpec("p")),))
        assert render(schema, {}) == ""

    def test_zero_and_false_are_present(self):
        schema = Schema(
            fields=(
                Field("n", OptionalPolicy(), ElementSpec("i")),
                Field("b", OptionalPolicy(), ElementSpec("b")),
            ),
        )
        assert render(schema, {"n": 0, "b": False}) == "<i>0</i><b>false</b>"

    def test_default_uses_record_references_too(self):
        schema = Schema(
            fields=(
                Field(
                    "nick",
                    OptionalPolicy(default="anonymous"),
                    ElementSpec("span", content=FormatExpr("{} ({})", ("uid",))),
                ),
            ),
        )
        assert render(schema, {"nick": None, "uid": 12}) == "<span>anonymous (12)</span>"


# ============================================================================
# Optional nested records
# ============================================================================


@dataclass
class Leaf:
    c: str | None


@dataclass
class Holder:
    _foo: Leaf | None


def holder_schema(wrapper=None):
    leaf = Schema(
        fields=(Field("c", OptionalPolicy(default="foo"), ElementSpec("p", content=FormatExpr("c: {}"))),),
        record_type=Leaf,
    )
    return Schema(fields=(Field("_foo", NestPolicy(leaf, optional=True), wrapper),), record_type=Holder)


class TestOptionalNest:
    def test_present(self):
        assert render(holder_schema(), Holder(_foo=Leaf(c="s"))) == "<p>c: s</p>"

    def test_present_with_inner_default(self):
        assert render(holder_schema(), Holder(_foo=Leaf(c=None))) == "<p>c: foo</p>"

    def test_absent_renders_nothing(self):
        assert render(holder_schema(), Holder(_foo=None)) == ""

    def test_absent_skips_wrapper_too(self):
        assert render(holder_schema(ElementSpec("section")), Holder(_foo=None)) == ""

    def test_present_inside_wrapper(self):
        html = render(holder_schema(ElementSpec("section")), Holder(_foo=Leaf(c="s")))
        assert html == "<section><p>c: s</p></section>"


# ============================================================================
# Map
# ============================================================================


def is_empty():
    return MapExpr("var", lambda var: len(var) == 0)


class TestMap:
    def schema(self, policy):
        return Schema(
            element=ElementSpec("div"),
            fields=(Field("some_property", policy, ElementSpec("p", content=FormatExpr("empty: {}"))),),
        )

    def test_map_false(self):
        assert render(self.schema(MapPolicy(is_empty())), {"some_property": "foo"}) == "<div><p>empty: false</p></div>"

    def test_map_true(self):
        assert render(self.schema(MapPolicy(is_empty())), {"some_property": ""}) == "<div><p>empty: true</p></div>"

    def test_optional_map_present(self):
        schema = self.schema(OptionalPolicy(map=is_empty()))
        assert render(schema, {"some_property": "bar"}) == "<div><p>empty: false</p></div>"

    def test_optional_map_absent_skips_and_never_calls_map(self):
        calls = []

        def record_call(var):
            calls.append(var)
            return var

        schema = self.schema(OptionalPolicy(map=MapExpr("var", record_call)))
        assert render(schema, {"some_property": None}) == "<div></div>"
        assert calls == []

    def test_map_without_template_uses_result_directly(self):
        schema = Schema(fields=(Field("n", MapPolicy(MapExpr("n", lambda n: n * 2)), ElementSpec("b")),))
        assert render(schema, {"n": 21}) == "<b>42</b>"

    def test_map_receives_raw_value(self):
        """Non-string values reach the map unconverted."""
        seen = []

        def keep(value):
            seen.append(value)
            return value

        items = [1, 2]
        schema = Schema(fields=(Field("xs", MapPolicy(MapExpr("xs", keep)), ElementSpec("b")),))
        render(schema, {"xs": items})
        assert seen[0] is items

    def test_map_result_types(self):
        schema = Schema(fields=(Field("v", MapPolicy(MapExpr("v", lambda v: v / 4)), ElementSpec("b")),))
        assert render(schema, {"v": 2}) == "<b>0.5</b>"
        assert render(schema, {"v": 8}) == "<b>2</b>"

    def test_map_to_none_renders_empty_content(self):
        schema = Schema(fields=(Field("v", MapPolicy(MapExpr("v", lambda v: None)), ElementSpec("b")),))
        assert render(schema, {"v": "x"}) == "<b></b>"
