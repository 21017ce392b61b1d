"""Tests for refbridge.script."""

import math

import pytest

from refbridge.errors import EngineOperationFailed, ErrorKind
from refbridge.script import (
    Attribute,
    Context,
    IteratorResult,
    JsArray,
    JsBigInt,
    JsBoolean,
    JsInteger,
    JsMap,
    JsNull,
    JsObject,
    JsRational,
    JsSet,
    JsString,
    JsSymbol,
    JsUndefined,
    Null,
    ObjectInitializer,
    Undefined,
    ValueTag,
    property_key_to_string,
    same_value_zero,
    throw,
    to_property_key,
)


@pytest.fixture
def ctx():
    return Context()


# ---------------------------------------------------------------------------
# Primitive values
# ---------------------------------------------------------------------------

class TestPrimitives:
    def test_null_undefined_singletons(self):
        assert JsNull() is Null
        assert JsUndefined() is Undefined
        assert not Null
        assert Null.is_null_or_undefined()
        assert Undefined.is_null_or_undefined()
        assert not JsBoolean(False).is_null_or_undefined()

    def test_tags(self):
        assert Null.tag == ValueTag.NULL
        assert JsInteger(1).tag == ValueTag.INTEGER
        assert JsRational(1.0).tag == ValueTag.RATIONAL
        assert JsBigInt(1).tag == ValueTag.BIGINT
        assert JsSymbol().tag == ValueTag.SYMBOL

    def test_integer_is_32_bit(self):
        assert JsInteger(2 ** 31 - 1).value == 2 ** 31 - 1
        with pytest.raises(ValueError):
            JsInteger(2 ** 31)
        with pytest.raises(TypeError):
            JsInteger(True)

    def test_value_equality_is_tag_sensitive(self):
        assert JsInteger(1) == JsInteger(1)
        assert JsInteger(1) != JsRational(1.0)
        assert JsString("1") != JsBigInt(1)

    def test_symbols_are_unique(self):
        a = JsSymbol("a")
        assert a == a
        assert a != JsSymbol("a")
        assert a.descriptive_string() == "Symbol(a)"
        assert JsSymbol().descriptive_string() == "Symbol()"

    def test_to_std_string(self):
        assert JsString("hi").to_std_string() == "hi"
        assert JsBigInt(-42).to_std_string() == "-42"


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

class TestContext:
    def test_allocations(self, ctx):
        a = JsObject.new(ctx)
        b = JsArray.new(ctx)
        assert ctx.allocations == 2
        assert a.id != b.id

    def test_intern(self, ctx):
        s1 = "".join(["ab", "c"])
        s2 = "".join(["a", "bc"])
        assert ctx.intern(s1) is ctx.intern(s2)


# ---------------------------------------------------------------------------
# Property keys
# ---------------------------------------------------------------------------

class TestPropertyKeys:
    def test_index_strings_become_ints(self):
        assert to_property_key("10") == 10
        assert to_property_key(JsString("3")) == 3
        assert to_property_key(JsInteger(2)) == 2

    def test_non_canonical_strings_stay(self):
        assert to_property_key("01") == "01"
        assert to_property_key("-1") == "-1"
        assert to_property_key("x") == "x"

    def test_negative_int_becomes_string(self):
        assert to_property_key(-1) == "-1"

    def test_invalid_keys(self):
        with pytest.raises(TypeError):
            to_property_key(True)
        with pytest.raises(TypeError):
            to_property_key(1.5)

    def test_key_to_string(self):
        assert property_key_to_string(3) == "3"
        assert property_key_to_string(JsSymbol("k")) == "Symbol(k)"


# ---------------------------------------------------------------------------
# Plain objects
# ---------------------------------------------------------------------------

class TestObject:
    def test_initializer_keeps_insertion_order(self, ctx):
        obj = (
            ObjectInitializer(ctx)
            .property("b", JsInteger(1))
            .property("a", JsInteger(2))
            .build()
        )
        assert obj.own_property_keys(ctx) == ["b", "a"]
        assert obj.get("a", ctx) == JsInteger(2)
        assert obj.property_attributes("a") == Attribute.ALL

    def test_own_property_key_order(self, ctx):
        sym = JsSymbol("s")
        obj = JsObject.new(ctx)
        obj.set("b", Null, ctx)
        obj.set(2, Null, ctx)
        obj.set(sym, Null, ctx)
        obj.set("a", Null, ctx)
        obj.set("0", Null, ctx)
        assert obj.own_property_keys(ctx) == [0, 2, "b", "a", sym]

    def test_missing_property_is_undefined(self, ctx):
        assert JsObject.new(ctx).get("nope", ctx) is Undefined

    def test_read_only_property(self, ctx):
        obj = JsObject.new(ctx)
        obj.define_property("x", JsInteger(1), Attribute.ENUMERABLE)
        with pytest.raises(EngineOperationFailed) as excinfo:
            obj.set("x", JsInteger(2), ctx)
        assert excinfo.value.kind == ErrorKind.TYPE
        assert obj.get("x", ctx) == JsInteger(1)

    def test_non_configurable_cannot_be_redefined(self, ctx):
        obj = JsObject.new(ctx)
        obj.define_property("x", JsInteger(1), Attribute.WRITABLE)
        with pytest.raises(EngineOperationFailed):
            obj.define_property("x", JsInteger(2))

    def test_prevent_extensions(self, ctx):
        obj = JsObject.new(ctx)
        obj.set("a", JsInteger(1), ctx)
        obj.prevent_extensions()
        assert not obj.is_extensible()
        obj.set("a", JsInteger(2), ctx)
        with pytest.raises(EngineOperationFailed):
            obj.set("b", JsInteger(1), ctx)

    def test_freeze(self, ctx):
        obj = JsObject.new(ctx)
        obj.set("a", JsInteger(1), ctx)
        obj.freeze()
        with pytest.raises(EngineOperationFailed):
            obj.set("a", JsInteger(2), ctx)

    def test_accessor(self, ctx):
        obj = JsObject.new(ctx)
        obj.define_accessor("x", lambda this, c: JsString("computed"))
        assert obj.get("x", ctx) == JsString("computed")
        assert obj.peek("x") is None
        with pytest.raises(EngineOperationFailed):
            obj.set("x", Null, ctx)

    def test_accessor_throwing(self, ctx):
        err = throw(JsString("boom"))

        def getter(this, c):
            raise err

        obj = JsObject.new(ctx)
        obj.define_accessor("x", getter)
        with pytest.raises(EngineOperationFailed) as excinfo:
            obj.get("x", ctx)
        assert excinfo.value is err
        assert err.kind == ErrorKind.OPAQUE
        assert err.value == JsString("boom")

    def test_kind_tests(self, ctx):
        obj = JsObject.new(ctx)
        assert not (obj.is_array() or obj.is_map() or obj.is_set())
        assert JsArray.new(ctx).is_array()
        assert JsMap.new(ctx).is_map()
        assert JsSet.new(ctx).is_set()

    def test_identity_equality(self, ctx):
        assert JsObject.new(ctx) != JsObject.new(ctx)


# ---------------------------------------------------------------------------
# Arrays
# ---------------------------------------------------------------------------

class TestArray:
    def test_push_get_length(self, ctx):
        arr = JsArray.new(ctx)
        assert arr.push(JsInteger(1), ctx) == 1
        arr.push(JsString("a"), ctx)
        assert arr.length(ctx) == 2
        assert arr.get(1, ctx) == JsString("a")
        assert arr.get(2, ctx) is Undefined
        assert arr.get("length", ctx) == JsInteger(2)

    def test_own_keys_are_indices(self, ctx):
        arr = JsArray.from_list([Null, Null], ctx)
        assert arr.own_property_keys(ctx) == [0, 1]
        assert arr.peek(1) is Null

    def test_push_on_frozen_array_fails(self, ctx):
        arr = JsArray.from_list([JsInteger(1)], ctx)
        arr.freeze()
        with pytest.raises(EngineOperationFailed) as excinfo:
            arr.push(JsInteger(2), ctx)
        assert "not extensible" in str(excinfo.value)

    def test_index_properties_are_elements(self, ctx):
        arr = JsArray.from_list([JsString("a")], ctx)
        arr.define_property(0, JsString("b"))
        arr.define_property(1, JsString("c"))
        assert arr.own_property_keys(ctx) == [0, 1]
        assert arr.length(ctx) == 2
        assert arr.get(0, ctx) == JsString("b")
        assert arr.get("1", ctx) == JsString("c")

    def test_set_past_end_pads_with_undefined(self, ctx):
        arr = JsArray.new(ctx)
        arr.set(2, JsInteger(7), ctx)
        assert arr.length(ctx) == 3
        assert arr.get(0, ctx) is Undefined
        assert arr.has_own_property(2)
        assert arr.property_attributes(2) == Attribute.ALL

    def test_named_keys_follow_indices(self, ctx):
        arr = JsArray.from_list([Null], ctx)
        arr.set("name", JsString("n"), ctx)
        arr.set(1, Null, ctx)
        assert arr.own_property_keys(ctx) == [0, 1, "name"]

    def test_frozen_elements_are_read_only(self, ctx):
        arr = JsArray.from_list([JsInteger(1)], ctx)
        arr.freeze()
        with pytest.raises(EngineOperationFailed):
            arr.set(0, JsInteger(2), ctx)
        with pytest.raises(EngineOperationFailed):
            arr.define_property(0, JsInteger(2))
        assert arr.get(0, ctx) == JsInteger(1)
        assert arr.property_attributes(0) == Attribute.ENUMERABLE

    def test_index_accessor_rejected(self, ctx):
        arr = JsArray.new(ctx)
        with pytest.raises(EngineOperationFailed):
            arr.define_accessor(0, lambda this, c: Null)
        assert arr.length(ctx) == 0


# ---------------------------------------------------------------------------
# Maps and sets
# ---------------------------------------------------------------------------

def _drain(iterator, ctx):
    out = []
    while True:
        step = iterator.next(ctx)
        if step.done:
            return out
        out.append(step.value)


class TestMap:
    def test_set_keeps_insertion_order(self, ctx):
        m = JsMap.new(ctx)
        m.set(JsString("b"), JsInteger(1), ctx)
        m.set(JsString("a"), JsInteger(2), ctx)
        m.set(JsString("b"), JsInteger(3), ctx)
        entries = _drain(m.entries(ctx), ctx)
        assert [(e.get(0, ctx), e.get(1, ctx)) for e in entries] == [
            (JsString("b"), JsInteger(3)),
            (JsString("a"), JsInteger(2)),
        ]
        assert m.size() == 2

    def test_same_value_zero_keys(self, ctx):
        m = JsMap.new(ctx)
        m.set(JsInteger(1), JsString("int"), ctx)
        m.set(JsRational(1.0), JsString("float"), ctx)
        m.set(JsRational(math.nan), JsString("nan1"), ctx)
        m.set(JsRational(math.nan), JsString("nan2"), ctx)
        assert m.size() == 2
        assert m.get_entry(JsInteger(1), ctx) == JsString("float")
        assert m.get_entry(JsRational(math.nan), ctx) == JsString("nan2")

    def test_object_keys_by_identity(self, ctx):
        a, b = JsObject.new(ctx), JsObject.new(ctx)
        m = JsMap.new(ctx)
        m.set(a, JsInteger(1), ctx)
        m.set(b, JsInteger(2), ctx)
        assert m.size() == 2
        assert m.get_entry(a, ctx) == JsInteger(1)

    def test_keys_must_be_script_values(self, ctx):
        with pytest.raises(TypeError):
            JsMap.new(ctx).set("raw", Null, ctx)

    def test_iterator_stays_done(self, ctx):
        it = JsMap.new(ctx).entries(ctx)
        assert it.next(ctx) == IteratorResult(Undefined, True)
        assert it.next(ctx).done

    def test_iterator_is_live(self, ctx):
        m = JsMap.new(ctx)
        m.set(JsInteger(1), Null, ctx)
        it = m.entries(ctx)
        it.next(ctx)
        m.set(JsInteger(2), Null, ctx)
        step = it.next(ctx)
        assert not step.done
        assert step.value.get(0, ctx) == JsInteger(2)


class TestSet:
    def test_add_deduplicates(self, ctx):
        s = JsSet.new(ctx)
        s.add(JsInteger(1), ctx)
        s.add(JsString("a"), ctx)
        s.add(JsInteger(1), ctx)
        assert s.size() == 2
        assert _drain(s.values(ctx), ctx) == [JsInteger(1), JsString("a")]
        assert s.has(JsRational(1.0))


def test_same_value_zero():
    sym = JsSymbol()
    assert same_value_zero(JsInteger(0), JsRational(-0.0))
    assert same_value_zero(sym, sym)
    assert not same_value_zero(sym, JsSymbol())
    assert not same_value_zero(JsString("1"), JsInteger(1))
    assert same_value_zero(Null, Null)
    assert not same_value_zero(Null, Undefined)
