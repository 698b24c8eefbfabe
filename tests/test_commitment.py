"""
커밋먼트 스킴 및 투표 값 인코딩 테스트
========================================

테스트 범위:
  - commitment = H(nullifier, secret), nullifier_hash = H(nullifier)
  - 교차 제안 독립성: nullifier 해시는 같고 제안별 leaf는 다름
  - 0 추출 시 재추출, 0 비밀 값 거부
  - Vote 열거형과 이름 파싱
"""

import pytest

from zkvote.ballot import TALLY_FIELDS, Vote, parse_vote
from zkvote.commitment import (
    Member, commitment, generate_member, member_from_secrets,
    nullifier_hash, proposal_leaf, random_field_element,
)
from zkvote.field import FR, CURVE_ORDER
from zkvote.poseidon import poseidon


class TestCommitment:

    def test_formulas(self):
        assert commitment(3, 5) == poseidon([3, 5])
        assert nullifier_hash(3) == poseidon([3])
        assert proposal_leaf(9, 1) == poseidon([9, 1])

    def test_member_from_secrets(self):
        member = member_from_secrets(3, 5, index=2)
        assert isinstance(member, Member)
        assert member.commitment == commitment(3, 5)
        assert member.index == 2

    def test_member_is_immutable(self):
        member = member_from_secrets(3, 5, index=0)
        with pytest.raises(AttributeError):
            member.secret = FR(1)

    @pytest.mark.parametrize("nullifier, secret", [(0, 5), (3, 0)])
    def test_zero_rejected(self, nullifier, secret):
        with pytest.raises(ValueError):
            member_from_secrets(nullifier, secret, index=0)

    def test_out_of_field_rejected(self):
        with pytest.raises(ValueError):
            member_from_secrets(CURVE_ORDER, 5, index=0)


class TestCrossProposal:

    def test_nullifier_hash_is_member_scoped(self):
        member = member_from_secrets(3, 5, index=0)
        # 제안과 무관하게 같은 값
        assert nullifier_hash(member.nullifier) == nullifier_hash(FR(3))

    def test_leaf_is_proposal_scoped(self):
        member = member_from_secrets(3, 5, index=0)
        assert proposal_leaf(member.commitment, 1) != proposal_leaf(member.commitment, 2)


class TestGeneration:

    def test_zero_draw_is_resampled(self):
        draws = iter([0, 0, 17])
        assert random_field_element(lambda bound: next(draws)) == FR(17)

    def test_generate_member_with_zero_draws(self):
        draws = iter([0, 4, 0, 6])
        member = generate_member(1, randbelow=lambda bound: next(draws))
        assert member.nullifier == FR(4)
        assert member.secret == FR(6)

    def test_randbelow_bound_is_field_order(self):
        bounds = []

        def randbelow(bound):
            bounds.append(bound)
            return 1

        random_field_element(randbelow)
        assert bounds == [CURVE_ORDER]

    def test_generate_member_random(self):
        a = generate_member(0)
        b = generate_member(1)
        assert a.commitment != b.commitment
        assert a.nullifier != FR(0) and a.secret != FR(0)


class TestBallot:

    def test_numeric_mapping(self):
        assert [int(v) for v in (Vote.NO, Vote.YES, Vote.ABSTAIN)] == [0, 1, 2]

    def test_tally_fields(self):
        assert TALLY_FIELDS[Vote.NO] == "no_votes"
        assert TALLY_FIELDS[Vote.YES] == "yes_votes"
        assert TALLY_FIELDS[Vote.ABSTAIN] == "abstain_votes"

    @pytest.mark.parametrize("value, expected", [
        ("yes", Vote.YES), ("No", Vote.NO), (" ABSTAIN ", Vote.ABSTAIN),
        (0, Vote.NO), (2, Vote.ABSTAIN), (Vote.YES, Vote.YES),
    ])
    def test_parse_vote(self, value, expected):
        assert parse_vote(value) is expected

    @pytest.mark.parametrize("value", [3, -1, "maybe", True, 1.0, None])
    def test_parse_vote_rejects(self, value):
        with pytest.raises(ValueError):
            parse_vote(value)
