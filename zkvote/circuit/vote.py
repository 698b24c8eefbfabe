"""
투표 회로 (VoteCircuit)
=======================

"나는 등록된 멤버이며 이 제안에 아직 투표하지 않았다"를 신원 공개 없이 증명하는 명제.

**공개 입력** (순서 고정, 검증자와 원장이 같은 순서를 사용해야 함):
  [root, nullifier_hash, proposal_id, vote_value]

**비공개 입력**:
  nullifier, secret, path_elements[depth], path_indices[depth]

**제약 (합성 순서)**:
  1. vote_value · (vote_value - 1) · (vote_value - 2) = 0
  2. nullifier ≠ 0, secret ≠ 0, proposal_id ≠ 0
  3. commitment = H(nullifier, secret),  H(nullifier) = nullifier_hash
  4. leaf = H(commitment, proposal_id)
  5. 레벨 i마다: path_indices[i]를 1비트로 분해 → 선택자로 (현재, 형제) 순서 결정 → 해시
     최종 값 = root

**건전성**:
  모든 중간 배선은 적어도 하나의 제약에 등장한다 (ConstraintSystem.unconstrained_wires로 감사).
  특히 commitment와 leaf는 계산만 하는 것이 아니라 해시 가젯의 출력 배선으로 고정된다.

**완전성**:
  제안별 leaf H(commitment, proposal_id)가 주어진 root의 트리에 실제로 들어 있는
  멤버는 항상 만족하는 witness를 만들 수 있다.

예시:
    >>> circuit = VoteCircuit(depth=20)
    >>> cs = circuit.synthesize(witness)
    >>> cs.is_satisfied()
"""

from dataclasses import dataclass

from zkvote.circuit.gadgets import (
    assert_nonzero,
    num2bits,
    poseidon_hash,
    select_pair,
    vote_range,
)
from zkvote.circuit.r1cs import ConstraintSystem
from zkvote.merkle import TREE_DEPTH


PUBLIC_SIGNALS = ("root", "nullifier_hash", "proposal_id", "vote_value")


def vote_public_signals(root, nullifier_hash, proposal_id, vote_value):
    """공개 신호를 회로의 순서대로 나열한다: [root, nullifier_hash, proposal_id, vote_value]."""
    return [int(root), int(nullifier_hash), int(proposal_id), int(vote_value)]


@dataclass
class VoteWitness:
    """투표 회로의 전체 입력 (공개 + 비공개)."""
    root: int
    nullifier_hash: int
    proposal_id: int
    vote_value: int
    nullifier: int
    secret: int
    path_elements: list
    path_indices: list

    def public_signals(self):
        return vote_public_signals(
            self.root, self.nullifier_hash, self.proposal_id, self.vote_value
        )


class VoteCircuit:
    """깊이 depth의 투표 회로. depth는 테스트용 축소 인스턴스를 위해서만 바꾼다."""

    def __init__(self, depth=TREE_DEPTH):
        self.depth = depth

    def synthesize(self, witness=None):
        """제약 시스템을 만든다. witness가 주어지면 모든 배선 값도 채운다.

        Raises:
            ValueError: 경로 길이가 depth와 다르거나 값이 필드 범위 밖인 경우
        """
        if witness is not None and (
            len(witness.path_elements) != self.depth
            or len(witness.path_indices) != self.depth
        ):
            raise ValueError(
                f"경로 길이는 {self.depth}이어야 합니다: "
                f"{len(witness.path_elements)}, {len(witness.path_indices)}"
            )

        def value(attr, i=None):
            if witness is None:
                return None
            v = getattr(witness, attr)
            return v if i is None else v[i]

        cs = ConstraintSystem()

        # 공개 입력 (PUBLIC_SIGNALS 순서)
        root = cs.public_input("root", value("root"))
        nullifier_hash = cs.public_input("nullifier_hash", value("nullifier_hash"))
        proposal_id = cs.public_input("proposal_id", value("proposal_id"))
        vote_value = cs.public_input("vote_value", value("vote_value"))

        # 비공개 입력
        nullifier = cs.private_input("nullifier", value("nullifier"))
        secret = cs.private_input("secret", value("secret"))
        path_elements = [
            cs.private_input(f"path_elements[{i}]", value("path_elements", i))
            for i in range(self.depth)
        ]
        path_indices = [
            cs.private_input(f"path_indices[{i}]", value("path_indices", i))
            for i in range(self.depth)
        ]

        # 1. 투표 값 범위
        vote_range(cs, vote_value, "vote_value")

        # 2. 0 금지
        assert_nonzero(cs, nullifier, "nullifier")
        assert_nonzero(cs, secret, "secret")
        assert_nonzero(cs, proposal_id, "proposal_id")

        # 3. 커밋먼트와 nullifier 해시
        commitment = poseidon_hash(cs, [nullifier, secret], "commitment")
        computed_nullifier_hash = poseidon_hash(cs, [nullifier], "nullifier_hash")
        cs.assert_equal(computed_nullifier_hash, nullifier_hash, "nullifier_hash: H(nullifier)")

        # 4. 제안별 leaf
        current = poseidon_hash(cs, [commitment, proposal_id], "leaf")

        # 5. 멤버십 경로
        for i in range(self.depth):
            (selector,) = num2bits(cs, path_indices[i], 1, f"path_indices[{i}]")
            left, right = select_pair(cs, selector, current, path_elements[i], f"level[{i}]")
            current = poseidon_hash(cs, [left, right], f"level[{i}].hash")
        cs.assert_equal(current, root, "root: computed root")

        return cs

    def check(self, witness):
        """witness가 만족하지 않는 제약의 label 목록 (비어 있으면 만족)."""
        return self.synthesize(witness).unsatisfied()
