"""
Merkle 누적기 (고정 깊이 20)
=============================

합의된 순서의 leaf 목록에서 고정 깊이 Merkle 트리를 만들고,
leaf 하나에 대한 포함 증명(inclusion proof)을 생성한다.

**영 값(zero values)**:
  zero_values[0] = 0
  zero_values[i] = H(zero_values[i-1], zero_values[i-1])

**레벨별 구성**:
  각 레벨에서 인접 노드를 왼쪽부터 짝지어 해시한다.
  노드 수가 홀수이면 짝이 없는 마지막 노드의 형제는 그 레벨의 zero value이다
  (자기 자신을 복제하지 않는다). 이 규칙은 회로 쪽 경로 계산과 정확히 일치해야
  하며, 어긋나면 오프라인에서 만든 증명이 아무 진단 없이 거부된다.

  layers[0] = leaves, layers[depth] = [root]

**포함 증명**:
  아래에서 위로 올라가며 현재 인덱스가
    - 짝수: 형제가 오른쪽, path_index = 0
    - 홀수: 형제가 왼쪽,   path_index = 1
  을 기록하고 인덱스를 절반으로 줄인다.

예시 (leaf 3개, 레벨 0):
  | 인덱스 | 노드 | 형제            | path_index |
  |--------|------|-----------------|------------|
  | 0      | L0   | L1              | 0          |
  | 1      | L1   | L0              | 1          |
  | 2      | L2   | zero_values[0]  | 0          |

빌드 비용은 O(n) 해시, 증명은 O(depth).
"""

from dataclasses import dataclass

from zkvote.field import FR, to_field
from zkvote.poseidon import hash_pair


TREE_DEPTH = 20


@dataclass(frozen=True)
class InclusionProof:
    """한 leaf의 포함 증명.

    path_elements[i]: 레벨 i의 형제 노드
    path_indices[i]: 0이면 형제가 오른쪽, 1이면 왼쪽
    """
    path_elements: tuple
    path_indices: tuple

    def __len__(self):
        return len(self.path_elements)


def zero_values(depth=TREE_DEPTH, hasher=hash_pair):
    """레벨별 빈 노드 값 [z₀, ..., z_{depth-1}]."""
    zeros = [FR(0)]
    for _ in range(1, depth):
        zeros.append(hasher(zeros[-1], zeros[-1]))
    return zeros


class MerkleTree:
    """append 불가능한 고정 깊이 Merkle 트리. 한 번에 전체 leaf로 빌드한다.

    속성:
        depth: 트리 깊이
        leaves: FR leaf 리스트 (순서 보존)
        zero_values: 레벨별 빈 노드 값 (길이 depth)
        layers: 길이 depth+1, layers[depth] = [root]
    """

    def __init__(self, leaves, depth=TREE_DEPTH, hasher=hash_pair):
        leaves = [to_field(leaf) for leaf in leaves]
        if not leaves:
            raise ValueError("빈 leaf 목록으로는 트리를 만들 수 없습니다")
        if len(leaves) > (1 << depth):
            raise ValueError(
                f"깊이 {depth} 트리의 용량(2^{depth})을 초과했습니다: {len(leaves)}"
            )
        self.depth = depth
        self.hasher = hasher
        self.leaves = leaves
        self.zero_values = zero_values(depth, hasher)
        self.layers = [leaves]
        self._build()

    def _build(self):
        for level in range(self.depth):
            current = self.layers[level]
            parents = []
            for i in range(0, len(current), 2):
                left = current[i]
                if i + 1 < len(current):
                    right = current[i + 1]
                else:
                    right = self.zero_values[level]
                parents.append(self.hasher(left, right))
            self.layers.append(parents)

    @property
    def root(self):
        return self.layers[self.depth][0]

    def proof(self, index):
        """index번째 leaf의 포함 증명.

        Raises:
            IndexError: 존재하지 않는 leaf 인덱스
        """
        if index < 0 or index >= len(self.leaves):
            raise IndexError(f"leaf 인덱스 범위 밖입니다: {index}")
        elements = []
        indices = []
        for level in range(self.depth):
            current = self.layers[level]
            if index % 2 == 0:
                if index + 1 < len(current):
                    elements.append(current[index + 1])
                else:
                    elements.append(self.zero_values[level])
                indices.append(0)
            else:
                elements.append(current[index - 1])
                indices.append(1)
            index //= 2
        return InclusionProof(tuple(elements), tuple(indices))


def build(leaves, depth=TREE_DEPTH):
    """leaf 목록의 루트를 계산한다."""
    return MerkleTree(leaves, depth).root


def prove_inclusion(leaves, index, depth=TREE_DEPTH):
    """leaf 목록에서 index번째 leaf의 포함 증명을 만든다."""
    return MerkleTree(leaves, depth).proof(index)


def compute_root(leaf, proof, hasher=hash_pair):
    """leaf와 포함 증명에서 루트를 다시 계산한다.

    path_index가 0/1이 아니면 ValueError (회로의 비트 분해와 같은 규칙).
    """
    current = to_field(leaf)
    for sibling, side in zip(proof.path_elements, proof.path_indices):
        if side == 0:
            current = hasher(current, sibling)
        elif side == 1:
            current = hasher(sibling, current)
        else:
            raise ValueError(f"path_index는 0 또는 1이어야 합니다: {side}")
    return current
