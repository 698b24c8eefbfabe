"""
증명 검증 오라클 (ProofOracle)
===============================

원장(Registry)이 투표를 받아들이기 전에 호출하는 유일한 비싼 검사.

  verify(a, b, c, public_inputs) -> bool

**성질**:
  - 순수 함수: 같은 (증명, 공개 입력)에 항상 같은 결과, 부작용 없음
  - 거부 사유를 구분하지 않는다: 잘못된 루트, 변조된 공개 입력, 곡선 밖의 점,
    필드 범위 밖의 값, 위조된 witness 모두 False 하나로 수렴한다.
    예외를 던지지 않으므로 호출자는 실패 원인을 관찰할 수 없다.

**증명 표현** (Proof):
  | 필드 | 형태                    | 군   |
  |------|-------------------------|------|
  | a    | (x, y)                  | G1   |
  | b    | ((x₀, x₁), (y₀, y₁))    | G2   |
  | c    | (x, y)                  | G1   |

  G2 좌표는 FQ2 원소의 계수 [c₀, c₁] (x = c₀ + c₁·i) 순서이다.

**Groth16Oracle**:
  공개 배선 열거 [(0, 1), (1, root), (2, nullifier_hash), (3, proposal_id), (4, vote_value)]
  로 e(A, B) = e(α, β) · e(Σ xᵢ·ICᵢ, γ) · e(C, δ) 를 확인한다.
"""

import logging
from dataclasses import dataclass

from py_ecc import bn128

from zkvote.field import is_field_element
from zkvote.groth16.proving import build_rpub_enum
from zkvote.groth16.verifying import verify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proof:
    a: tuple
    b: tuple
    c: tuple

    @classmethod
    def from_points(cls, prf_A, prf_B, prf_C):
        """py_ecc 점 (A ∈ G1, B ∈ G2, C ∈ G1) → Proof."""
        return cls(
            a=(int(prf_A[0]), int(prf_A[1])),
            b=(
                (int(prf_B[0].coeffs[0]), int(prf_B[0].coeffs[1])),
                (int(prf_B[1].coeffs[0]), int(prf_B[1].coeffs[1])),
            ),
            c=(int(prf_C[0]), int(prf_C[1])),
        )

    def to_points(self):
        """Proof → py_ecc 점 (A, B, C).

        Raises:
            ValueError: 형태가 잘못되었거나, 좌표가 기저 필드 밖이거나,
                점이 곡선(또는 G2 부분군) 위에 있지 않은 경우
        """
        return decode_g1(self.a), decode_g2(self.b), decode_g1(self.c)


def _coordinate(value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"좌표는 정수여야 합니다: {value!r}")
    if value < 0 or value >= bn128.field_modulus:
        raise ValueError(f"기저 필드 범위를 벗어난 좌표입니다: {value}")
    return value


def decode_g1(data):
    x, y = data
    point = (bn128.FQ(_coordinate(x)), bn128.FQ(_coordinate(y)))
    if not bn128.is_on_curve(point, bn128.b):
        raise ValueError("G1 곡선 위의 점이 아닙니다")
    return point


def decode_g2(data):
    (x0, x1), (y0, y1) = data
    point = (
        bn128.FQ2([_coordinate(x0), _coordinate(x1)]),
        bn128.FQ2([_coordinate(y0), _coordinate(y1)]),
    )
    if not bn128.is_on_curve(point, bn128.b2):
        raise ValueError("G2 곡선 위의 점이 아닙니다")
    if bn128.multiply(point, bn128.curve_order) is not None:
        raise ValueError("G2 부분군의 점이 아닙니다")
    return point


class ProofOracle:
    """결정적이고 부작용 없는 증명 검증기의 인터페이스."""

    def verify(self, a, b, c, public_inputs):
        raise NotImplementedError


class Groth16Oracle(ProofOracle):
    """검증 키 하나에 묶인 Groth16 검증 오라클."""

    def __init__(self, verifying_key):
        self.verifying_key = verifying_key

    @property
    def num_public(self):
        return len(self.verifying_key.pub_r_indexs) - 1

    def verify(self, a, b, c, public_inputs):
        try:
            prf_A, prf_B, prf_C = Proof(a, b, c).to_points()
        except (TypeError, ValueError) as e:
            logger.debug("malformed proof: %s", e)
            return False

        public_inputs = list(public_inputs)
        if len(public_inputs) != self.num_public:
            logger.debug("public input count %d != %d", len(public_inputs), self.num_public)
            return False
        if not all(is_field_element(x) for x in public_inputs):
            logger.debug("public input outside the scalar field")
            return False

        r_vec = [1] + [int(x) for x in public_inputs]
        rx_pub = build_rpub_enum(self.verifying_key.pub_r_indexs, r_vec)
        return verify(
            prf_A,
            prf_B,
            prf_C,
            self.verifying_key.sigma1_1,
            self.verifying_key.sigma1_3,
            self.verifying_key.sigma2_1,
            rx_pub,
        )
