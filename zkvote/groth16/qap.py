"""
R1CS → QAP 변환
================

제약 시스템의 행렬 (A, B, C)를 단위근 도메인 위의 다항식으로 옮긴다.

**도메인**:
  H = {1, ω, ..., ω^(n-1)},  n = next_power_of_2(제약 수 + 공개 배선 수)
  Z(x) = x^n - 1

**공개 배선 행**:
  상수 1을 포함한 공개 배선 i마다 x_i · 0 = 0 행을 추가한다.
  공개 배선의 u_i(x)가 서로 선형 독립이 되어, 검증 키의 공개 입력 항이
  다른 배선의 조합으로 위조되지 않는다.

**배선 다항식**:
  u_i(ω^j) = A[j][i],  v_i(ω^j) = B[j][i],  w_i(ω^j) = C[j][i]

  setup은 독성 값 x에서 u_i(x) 등을 라그랑주 기저로 직접 평가하고,
  prover는 witness r에 대해 A(x) = Σ rᵢuᵢ(x)를 평가값 → IFFT로 한 번에 만든다.
"""

from zkvote.field import FR, get_root_of_unity, get_roots_of_unity, next_power_of_2
from zkvote.polynomial import Polynomial


class QAP:
    """단위근 도메인 위의 QAP.

    속성:
        n: 도메인 크기 (2의 거듭제곱)
        omega: n차 원시 단위근
        num_wires: 배선 수 (상수 1 포함)
        num_public: 공개 입력 수 (상수 1 제외)
        a_rows, b_rows, c_rows: 행별 희소 계수 {배선: FR}
    """

    def __init__(self, a_rows, b_rows, c_rows, num_wires, num_public):
        self.num_wires = num_wires
        self.num_public = num_public
        self.n = next_power_of_2(len(a_rows))
        self.omega = get_root_of_unity(self.n)
        self.a_rows = a_rows
        self.b_rows = b_rows
        self.c_rows = c_rows

    @property
    def public_indices(self):
        """검증자가 보는 배선 인덱스: 상수 1과 공개 입력."""
        return list(range(self.num_public + 1))

    def lagrange_at(self, x):
        """L_j(x) = (x^n - 1) / n · ω^j / (x - ω^j),  j = 0..n-1.

        x가 도메인 점이면 해당 기저만 1이다.
        """
        roots = get_roots_of_unity(self.n)
        for j, root in enumerate(roots):
            if x == root:
                basis = [FR(0)] * self.n
                basis[j] = FR(1)
                return basis
        z_over_n = (x ** self.n - FR(1)) / FR(self.n)
        return [z_over_n * root / (x - root) for root in roots]

    def evaluate_at(self, x):
        """모든 배선에 대해 (u_i(x), v_i(x), w_i(x))."""
        basis = self.lagrange_at(x)
        Ax_val = [FR(0)] * self.num_wires
        Bx_val = [FR(0)] * self.num_wires
        Cx_val = [FR(0)] * self.num_wires
        for rows, vals in ((self.a_rows, Ax_val), (self.b_rows, Bx_val), (self.c_rows, Cx_val)):
            for j, row in enumerate(rows):
                for wire, coeff in row.items():
                    vals[wire] = vals[wire] + coeff * basis[j]
        return Ax_val, Bx_val, Cx_val

    def vanishing_at(self, x):
        return x ** self.n - FR(1)

    def _row_evaluations(self, rows, witness):
        evals = [FR(0)] * self.n
        for j, row in enumerate(rows):
            total = FR(0)
            for wire, coeff in row.items():
                total = total + coeff * witness[wire]
            evals[j] = total
        return evals

    def witness_polynomials(self, witness):
        """A(x), B(x), C(x) = Σ rᵢ·(uᵢ, vᵢ, wᵢ)(x)."""
        return tuple(
            Polynomial.from_evaluations(self._row_evaluations(rows, witness), self.omega)
            for rows in (self.a_rows, self.b_rows, self.c_rows)
        )

    def h_polynomial(self, witness):
        """H(x) = (A·B - C) / Z.

        Raises:
            ValueError: witness가 제약을 만족하지 않는 경우
        """
        Ax, Bx, Cx = self.witness_polynomials(witness)
        return (Ax * Bx - Cx).divide_by_vanishing(self.n)


def r1cs_to_qap(cs):
    """ConstraintSystem을 QAP로 변환한다."""
    a_rows, b_rows, c_rows = cs.matrices()
    for i in range(cs.num_public + 1):
        a_rows.append({i: FR(1)})
        b_rows.append({})
        c_rows.append({})
    return QAP(a_rows, b_rows, c_rows, cs.num_wires, cs.num_public)
