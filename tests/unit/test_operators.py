"""Tests for operator tables and index reads/writes."""

from __future__ import annotations

from goflow.operators import Operators, read_index, write_index
from goflow.values import (
    ABSENT,
    BoolValue,
    FloatValue,
    IntValue,
    MapValue,
    SliceValue,
    StrValue,
)


class TestIntBinops:
    def test_arithmetic(self):
        assert Operators.eval_binop("+", IntValue(2), IntValue(3)) == IntValue(5)
        assert Operators.eval_binop("*", IntValue(4), IntValue(3)) == IntValue(12)

    def test_addition_wraps_at_64_bits(self):
        result = Operators.eval_binop("+", IntValue(2**63 - 1), IntValue(1))
        assert result == IntValue(-(2**63))

    def test_division_truncates_toward_zero(self):
        assert Operators.eval_binop("/", IntValue(-7), IntValue(2)) == IntValue(-3)
        assert Operators.eval_binop("%", IntValue(-7), IntValue(2)) == IntValue(-1)
        assert Operators.eval_binop("%", IntValue(7), IntValue(-2)) == IntValue(1)

    def test_division_by_zero_is_zero(self):
        assert Operators.eval_binop("/", IntValue(5), IntValue(0)) == IntValue(0)
        assert Operators.eval_binop("%", IntValue(5), IntValue(0)) == IntValue(0)

    def test_comparisons(self):
        assert Operators.eval_binop("<", IntValue(1), IntValue(2)) == BoolValue(True)
        assert Operators.eval_binop(">=", IntValue(1), IntValue(2)) == BoolValue(False)
        assert Operators.eval_binop("!=", IntValue(1), IntValue(2)) == BoolValue(True)


class TestBoolBinops:
    def test_logical_operators(self):
        t, f = BoolValue(True), BoolValue(False)
        assert Operators.eval_binop("&&", t, f) == f
        assert Operators.eval_binop("||", t, f) == t

    def test_bool_arithmetic_is_absent(self):
        assert Operators.eval_binop("+", BoolValue(True), BoolValue(True)) is ABSENT


class TestMixedKinds:
    def test_int_float_mix_is_absent(self):
        assert Operators.eval_binop("+", IntValue(1), FloatValue(1.0)) is ABSENT

    def test_strings_are_absent(self):
        assert Operators.eval_binop("+", StrValue("a"), StrValue("b")) is ABSENT


class TestUnops:
    def test_negation(self):
        assert Operators.eval_unop("-", IntValue(3)) == IntValue(-3)
        assert Operators.eval_unop("-", FloatValue(1.5)) == FloatValue(-1.5)

    def test_not(self):
        assert Operators.eval_unop("!", BoolValue(True)) == BoolValue(False)

    def test_not_on_int_is_absent(self):
        assert Operators.eval_unop("!", IntValue(1)) is ABSENT


class TestIndex:
    def test_missing_map_key_reads_zero_without_inserting(self):
        m = MapValue(key_type="string", value_type="int")
        assert read_index(m, StrValue("k")) == IntValue(0)
        assert m.entries == {}

    def test_slice_read_out_of_range_is_absent(self):
        s = SliceValue(elem_type="int", items=[IntValue(1)])
        assert read_index(s, IntValue(0)) == IntValue(1)
        assert read_index(s, IntValue(1)) is ABSENT
        assert read_index(s, IntValue(-1)) is ABSENT

    def test_map_write_inserts(self):
        m = MapValue(key_type="string", value_type="int")
        write_index(m, StrValue("k"), IntValue(3))
        assert m.entries == {StrValue("k"): IntValue(3)}

    def test_slice_write_requires_matching_kind(self):
        s = SliceValue(elem_type="int", items=[IntValue(1)])
        write_index(s, IntValue(0), StrValue("x"))
        assert s.items == [IntValue(1)]
        write_index(s, IntValue(0), IntValue(9))
        assert s.items == [IntValue(9)]

    def test_slice_write_out_of_range_is_noop(self):
        s = SliceValue(elem_type="int", items=[IntValue(1)])
        write_index(s, IntValue(4), IntValue(9))
        assert s.items == [IntValue(1)]

    def test_integer_written_into_float_map_becomes_float(self):
        m = MapValue(key_type="string", value_type="float64")
        write_index(m, StrValue("a"), IntValue(1))
        assert m.entries == {StrValue("a"): FloatValue(1.0)}
        assert isinstance(m.entries[StrValue("a")], FloatValue)

    def test_integer_written_into_float_slice_becomes_float(self):
        s = SliceValue(elem_type="float64", items=[FloatValue(0.5)])
        write_index(s, IntValue(0), IntValue(2))
        assert s.items == [FloatValue(2.0)]
