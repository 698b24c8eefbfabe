"""
멤버 측 도구 (오프체인)
=======================

합의된 커밋먼트 목록으로부터 제안별 트리를 만들고, 멤버 한 명의 투표 witness와
Groth16 증명을 생성한다.

**제안별 leaf**:
  회로는 leaf = H(commitment, proposal_id)에서 출발해 루트까지 해시하므로,
  트리도 제안 ID마다 H(commitmentᵢ, proposal_id) 목록으로 만든다.

  leaves_for(pid) = [H(c₀, pid), H(c₁, pid), ...]   (멤버 순서 보존)

**witness 생성 순서**:
  1. tree_for(pid) 로 포함 증명 획득
  2. compute_root로 루트 재계산 → 트리 루트와 비교 (불일치 시 ValueError)
  3. VoteWitness 조립 (공개 신호 순서는 vote_public_signals 한 곳에서 결정)

트리 빌드는 전체 커밋먼트 목록이 있어야 가능한 동기화 지점이다.
멤버 추가/삭제는 전체 재빌드를 뜻하며 기존 증명과 원장 루트를 모두 무효화한다.
"""

import logging

from zkvote.ballot import parse_vote
from zkvote.circuit.vote import VoteCircuit, VoteWitness
from zkvote.commitment import nullifier_hash, proposal_leaf
from zkvote.groth16.proving import prove as groth16_prove
from zkvote.merkle import TREE_DEPTH, MerkleTree, compute_root
from zkvote.oracle import Proof

logger = logging.getLogger(__name__)


class MembershipSet:
    """합의된 순서의 멤버 커밋먼트 집합."""

    def __init__(self, commitments, depth=TREE_DEPTH):
        self.commitments = list(commitments)
        if not self.commitments:
            raise ValueError("멤버가 없습니다")
        self.depth = depth
        self._trees = {}

    def __len__(self):
        return len(self.commitments)

    def leaves_for(self, proposal_id):
        return [proposal_leaf(c, proposal_id) for c in self.commitments]

    def tree_for(self, proposal_id):
        """제안별 트리 (제안 ID마다 한 번 빌드하여 캐시)."""
        tree = self._trees.get(proposal_id)
        if tree is None:
            tree = MerkleTree(self.leaves_for(proposal_id), self.depth)
            self._trees[proposal_id] = tree
        return tree

    def root_for(self, proposal_id):
        return self.tree_for(proposal_id).root

    def witness_for(self, member, proposal_id, vote):
        """member가 proposal_id에 vote로 투표하는 witness.

        Raises:
            ValueError: 허용되지 않는 투표 값, 또는 멤버의 커밋먼트가 해당 위치에 없는 경우
        """
        choice = parse_vote(vote)
        if not 0 <= member.index < len(self.commitments) or \
                self.commitments[member.index] != member.commitment:
            raise ValueError(f"멤버 {member.index}의 커밋먼트가 집합에 없습니다")

        tree = self.tree_for(proposal_id)
        leaf = proposal_leaf(member.commitment, proposal_id)
        proof = tree.proof(member.index)
        if compute_root(leaf, proof) != tree.root:
            raise ValueError("재계산한 루트가 트리 루트와 다릅니다")

        logger.debug("witness for member %d on proposal %s", member.index, proposal_id)
        return VoteWitness(
            root=int(tree.root),
            nullifier_hash=int(nullifier_hash(member.nullifier)),
            proposal_id=int(proposal_id),
            vote_value=int(choice),
            nullifier=int(member.nullifier),
            secret=int(member.secret),
            path_elements=[int(e) for e in proof.path_elements],
            path_indices=list(proof.path_indices),
        )

    def prove(self, witness, proving_key, qap):
        """witness에 대한 Groth16 Proof.

        proving_key와 qap은 같은 깊이의 VoteCircuit에서 만들어져야 한다.

        Raises:
            ValueError: witness가 회로를 만족하지 않는 경우
        """
        cs = VoteCircuit(self.depth).synthesize(witness)
        failed = cs.unsatisfied()
        if failed:
            raise ValueError(f"회로를 만족하지 않는 witness입니다: {failed[:3]}")
        return Proof.from_points(*groth16_prove(proving_key, qap, cs.witness()))
