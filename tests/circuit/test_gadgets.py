"""
회로 가젯 테스트
=================

각 가젯에 대해 정직한 값은 만족하고, 힌트 배선을 조작하면 만족하지 않음을 확인한다.
"""

import pytest

from zkvote.circuit.gadgets import (
    assert_nonzero, is_zero, num2bits, poseidon_hash, select_pair, vote_range,
)
from zkvote.circuit.r1cs import ConstraintSystem
from zkvote.field import FR
from zkvote.poseidon import poseidon


def _single_input(value):
    cs = ConstraintSystem()
    x = cs.public_input("x", value)
    return cs, x


class TestIsZero:

    @pytest.mark.parametrize("value, expected", [(0, 1), (5, 0)])
    def test_indicator(self, value, expected):
        cs, x = _single_input(value)
        out = is_zero(cs, x, "x")
        assert out.value == FR(expected)
        assert cs.is_satisfied()

    def test_forged_indicator_fails(self):
        cs, x = _single_input(5)
        is_zero(cs, x, "x")
        witness = cs.witness()
        out_index = cs.wire_names.index("x.is_zero")
        witness[out_index] = FR(1)
        assert not cs.is_satisfied(witness)

    def test_assert_nonzero(self):
        cs, x = _single_input(5)
        assert_nonzero(cs, x, "x")
        assert cs.is_satisfied()

        cs, x = _single_input(0)
        assert_nonzero(cs, x, "x")
        assert "x: ≠ 0" in cs.unsatisfied()

    def test_no_unconstrained_wires(self):
        cs, x = _single_input(5)
        assert_nonzero(cs, x, "x")
        assert cs.unconstrained_wires() == []


class TestNum2Bits:

    def test_decomposition(self):
        cs, x = _single_input(11)
        bits = num2bits(cs, x, 4, "x")
        assert [int(b.value) for b in bits] == [1, 1, 0, 1]
        assert cs.is_satisfied()

    def test_too_large_fails(self):
        cs, x = _single_input(2)
        num2bits(cs, x, 1, "x")
        assert "x: recompose" in cs.unsatisfied()

    def test_non_binary_bit_fails(self):
        cs, x = _single_input(2)
        num2bits(cs, x, 1, "x")
        witness = cs.witness()
        witness[cs.wire_names.index("x.bit[0]")] = FR(2)
        assert "x.bit[0]: binary" in cs.unsatisfied(witness)


class TestSelectPair:

    @pytest.mark.parametrize("selector, expected", [(0, (3, 8)), (1, (8, 3))])
    def test_ordering(self, selector, expected):
        cs = ConstraintSystem()
        s = cs.public_input("s", selector)
        current = cs.private_input("current", 3)
        sibling = cs.private_input("sibling", 8)
        left, right = select_pair(cs, s, current, sibling, "level")
        assert (int(left.value), int(right.value)) == expected
        assert cs.is_satisfied()


class TestVoteRange:

    @pytest.mark.parametrize("value", [0, 1, 2])
    def test_allowed(self, value):
        cs, v = _single_input(value)
        vote_range(cs, v, "vote")
        assert cs.is_satisfied()

    @pytest.mark.parametrize("value", [3, 4, 100])
    def test_rejected(self, value):
        cs, v = _single_input(value)
        vote_range(cs, v, "vote")
        assert not cs.is_satisfied()

    def test_constraint_count(self):
        cs, v = _single_input(1)
        vote_range(cs, v, "vote")
        assert cs.num_constraints == 2


class TestPoseidonGadget:

    @pytest.mark.parametrize("inputs", [[7], [3, 4]])
    def test_matches_native_hash(self, inputs):
        cs = ConstraintSystem()
        wires = [cs.public_input(f"in{i}", v) for i, v in enumerate(inputs)]
        out = poseidon_hash(cs, wires, "h")
        assert out.value == poseidon(inputs)
        assert cs.is_satisfied()
        assert cs.unconstrained_wires() == []

    def test_forged_output_fails(self):
        cs = ConstraintSystem()
        wires = [cs.public_input("a", 3), cs.public_input("b", 4)]
        poseidon_hash(cs, wires, "h")
        witness = cs.witness()
        witness[-1] = witness[-1] + FR(1)
        assert "h.out" in cs.unsatisfied(witness)

    def test_structure_independent_of_values(self):
        with_values = ConstraintSystem()
        poseidon_hash(with_values, [with_values.public_input("a", 3)], "h")
        without = ConstraintSystem()
        poseidon_hash(without, [without.public_input("a")], "h")
        assert with_values.num_constraints == without.num_constraints
        assert with_values.num_wires == without.num_wires
