"""
투표 회로 테스트
=================

테스트 범위:
  - 완전성: 정직한 멤버의 witness는 깊이 20 회로를 만족
  - 공개 신호 순서 [root, nullifier_hash, proposal_id, vote_value]
  - 건전성 감사: 제약 없는 배선 없음
  - 변조: 공개 입력/비공개 입력 하나만 바꿔도 불만족
  - 제약 구조는 witness와 무관

깊이 20 합성은 비싸므로 module fixture로 한 번만 만들고,
재합성이 필요한 변조 테스트는 깊이 2 회로를 사용한다.
"""

import dataclasses

import pytest

from zkvote.circuit.vote import (
    PUBLIC_SIGNALS, VoteCircuit, VoteWitness, vote_public_signals,
)
from zkvote.commitment import member_from_secrets
from zkvote.field import FR
from zkvote.membership import MembershipSet


MEMBER_SECRETS = [(101, 201), (102, 202), (103, 203), (104, 204)]
PROPOSAL_ID = 1
SMALL_DEPTH = 2


def _members():
    return [
        member_from_secrets(nullifier, secret, index)
        for index, (nullifier, secret) in enumerate(MEMBER_SECRETS)
    ]


@pytest.fixture(scope="module")
def members():
    return _members()


@pytest.fixture(scope="module")
def full_depth(members):
    membership = MembershipSet([m.commitment for m in members])
    witness = membership.witness_for(members[2], PROPOSAL_ID, "yes")
    cs = VoteCircuit().synthesize(witness)
    return {"membership": membership, "witness": witness, "cs": cs}


@pytest.fixture(scope="module")
def small(members):
    membership = MembershipSet([m.commitment for m in members], depth=SMALL_DEPTH)
    witness = membership.witness_for(members[2], PROPOSAL_ID, 1)
    return {"membership": membership, "witness": witness, "circuit": VoteCircuit(SMALL_DEPTH)}


class TestPublicSignals:

    def test_order(self):
        assert PUBLIC_SIGNALS == ("root", "nullifier_hash", "proposal_id", "vote_value")
        assert vote_public_signals(FR(9), 8, 7, 1) == [9, 8, 7, 1]

    def test_witness_signals(self, small):
        w = small["witness"]
        assert w.public_signals() == [w.root, w.nullifier_hash, w.proposal_id, w.vote_value]


class TestFullDepth:

    def test_satisfied(self, full_depth):
        assert full_depth["cs"].unsatisfied() == []

    def test_public_values_order(self, full_depth):
        cs = full_depth["cs"]
        assert cs.num_public == 4
        assert [int(v) for v in cs.public_values()] == full_depth["witness"].public_signals()

    def test_no_unconstrained_wires(self, full_depth):
        assert full_depth["cs"].unconstrained_wires() == []

    def test_root_matches_proposal_tree(self, full_depth):
        assert full_depth["witness"].root == int(full_depth["membership"].root_for(PROPOSAL_ID))

    @pytest.mark.parametrize("position", [1, 2, 3, 4])
    def test_tampered_public_input(self, full_depth, position):
        cs = full_depth["cs"]
        witness = cs.witness()
        witness[position] = witness[position] + FR(1)
        assert not cs.is_satisfied(witness)

    def test_tampered_path_element(self, full_depth):
        cs = full_depth["cs"]
        witness = cs.witness()
        witness[cs.wire_names.index("path_elements[5]")] += FR(1)
        assert not cs.is_satisfied(witness)


class TestSmallCircuit:

    def test_satisfied(self, small):
        assert small["circuit"].check(small["witness"]) == []

    def test_structure_independent_of_witness(self, small):
        with_witness = small["circuit"].synthesize(small["witness"])
        without = small["circuit"].synthesize()
        assert with_witness.num_constraints == without.num_constraints
        assert with_witness.wire_names == without.wire_names

    def test_no_unconstrained_wires(self, small):
        assert small["circuit"].synthesize().unconstrained_wires() == []

    def test_wrong_root(self, small):
        w = dataclasses.replace(small["witness"], root=small["witness"].root + 1)
        assert small["circuit"].check(w) == ["root: computed root"]

    def test_wrong_nullifier_hash(self, small):
        w = dataclasses.replace(small["witness"], nullifier_hash=12345)
        assert small["circuit"].check(w) == ["nullifier_hash: H(nullifier)"]

    def test_vote_out_of_range(self, small):
        w = dataclasses.replace(small["witness"], vote_value=3)
        assert small["circuit"].check(w) == ["vote_value: ∏(v - k) = 0"]

    @pytest.mark.parametrize("vote_value", [0, 1, 2])
    def test_all_vote_values(self, small, members, vote_value):
        w = small["membership"].witness_for(members[0], PROPOSAL_ID, vote_value)
        assert small["circuit"].check(w) == []

    def test_wrong_proposal_id(self, small):
        # 다른 제안 ID로는 leaf가 달라져 루트가 맞지 않는다
        w = dataclasses.replace(small["witness"], proposal_id=PROPOSAL_ID + 1)
        assert small["circuit"].check(w) == ["root: computed root"]

    def test_proposal_id_zero(self, small, members):
        # 제안 0의 트리로 만든 witness는 경로가 맞아도 0 금지 제약에 걸린다
        w = small["membership"].witness_for(members[2], 0, 1)
        assert small["circuit"].check(w) == ["proposal_id: ≠ 0"]

    def test_non_binary_path_index(self, small):
        indices = list(small["witness"].path_indices)
        indices[0] = 2
        w = dataclasses.replace(small["witness"], path_indices=indices)
        assert "path_indices[0]: recompose" in small["circuit"].check(w)

    def test_flipped_path_index(self, small):
        indices = list(small["witness"].path_indices)
        indices[1] = 1 - indices[1]
        w = dataclasses.replace(small["witness"], path_indices=indices)
        assert small["circuit"].check(w) == ["root: computed root"]

    def test_wrong_secret(self, small):
        w = dataclasses.replace(small["witness"], secret=small["witness"].secret + 1)
        assert small["circuit"].check(w) == ["root: computed root"]

    def test_zero_secret(self, small):
        w = dataclasses.replace(small["witness"], secret=0)
        failed = small["circuit"].check(w)
        assert "secret: ≠ 0" in failed

    def test_other_members_leaf(self, small, members):
        # 멤버 0의 경로에 멤버 2의 비밀 값 → 루트 불일치
        other = small["membership"].witness_for(members[0], PROPOSAL_ID, 1)
        w = dataclasses.replace(
            small["witness"],
            path_elements=other.path_elements,
            path_indices=other.path_indices,
        )
        assert small["circuit"].check(w) == ["root: computed root"]

    def test_wrong_path_length(self, small):
        w = dataclasses.replace(small["witness"], path_elements=[0])
        with pytest.raises(ValueError):
            small["circuit"].synthesize(w)

    def test_witness_type(self, small):
        assert isinstance(small["witness"], VoteWitness)
