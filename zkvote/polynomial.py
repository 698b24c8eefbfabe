"""
다항식(Polynomial) 및 FFT
==========================

Groth16 QAP 변환에서 사용되는 다항식 연산을 제공한다.

**QAP에서의 역할**:
  R1CS의 각 배선 i에 대해, 제약 j번째 행의 계수를 도메인 점 ω^j에서의
  평가값으로 보는 다항식 u_i(x), v_i(x), w_i(x)를 IFFT로 보간한다.

  만족하는 witness r에 대해
      (Σ rᵢuᵢ(x)) · (Σ rᵢvᵢ(x)) - Σ rᵢwᵢ(x) = h(x) · Z(x),   Z(x) = x^n - 1
  이 성립하며, divide_by_vanishing이 h(x)를 계산한다.

사용 예시:
    >>> p = Polynomial([FR(1), FR(2), FR(3)])  # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))  # FR(17)
"""

from zkvote.field import FR, CURVE_ORDER


class Polynomial:
    """유한체 FR 위의 다항식. coeffs = [c₀, c₁, ...] → c₀ + c₁x + ..."""

    def __init__(self, coeffs=None):
        if coeffs is None:
            self.coeffs = [FR(0)]
        else:
            self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
            if not self.coeffs:
                self.coeffs = [FR(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거한다."""
        while len(self.coeffs) > 1 and self.coeffs[-1] == FR(0):
            self.coeffs.pop()

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == FR(0)

    def evaluate(self, point):
        """Horner's method로 p(point)를 계산한다."""
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __add__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        max_len = max(len(self.coeffs), len(other.coeffs))
        result = []
        for i in range(max_len):
            a = self.coeffs[i] if i < len(self.coeffs) else FR(0)
            b = other.coeffs[i] if i < len(other.coeffs) else FR(0)
            result.append(a + b)
        return Polynomial(result)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        return self + (-other)

    def __neg__(self):
        return Polynomial([FR(0) - c for c in self.coeffs])

    def __mul__(self, other):
        """다항식 × 다항식 (O(n²) 나이브 곱셈) 또는 스칼라곱."""
        if isinstance(other, (int, FR)):
            if isinstance(other, int):
                other = FR(other)
            return Polynomial([c * other for c in self.coeffs])
        result = [FR(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a == FR(0):
                continue
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return False
        return self.coeffs == other.coeffs

    def __len__(self):
        return len(self.coeffs)

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == FR(0):
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*x")
            else:
                terms.append(f"{int(c)}*x^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    def divide_by_vanishing(self, n):
        """Z(x) = x^n - 1 로 나눈 몫을 반환한다.

        Raises:
            ValueError: 나머지가 0이 아닌 경우 (제약 불만족)
        """
        q, r = poly_div(self, Polynomial.vanishing(n))
        if not r.is_zero():
            raise ValueError("소거 다항식으로 나누어 떨어지지 않습니다 (제약 불만족)")
        return q

    @classmethod
    def vanishing(cls, n):
        """소거 다항식 Z(x) = x^n - 1."""
        coeffs = [FR(0)] * (n + 1)
        coeffs[0] = FR(CURVE_ORDER - 1)  # -1 mod p
        coeffs[n] = FR(1)
        return cls(coeffs)

    @classmethod
    def from_evaluations(cls, evals, omega):
        """도메인 {1, ω, ..., ω^(n-1)} 위의 평가값을 보간한다 (IFFT)."""
        return cls(ifft(evals, omega))


# ─────────────────────────────────────────────────────────────────────
# FFT / IFFT (Number Theoretic Transform)
# ─────────────────────────────────────────────────────────────────────

def fft(coeffs, omega):
    """재귀적 Cooley-Tukey radix-2 NTT: 계수 → 평가값.

    Args:
        coeffs: 길이가 2의 거듭제곱인 FR 리스트
        omega: n차 원시 단위근

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^{n-1})]
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    omega_sq = omega * omega
    even_vals = fft(coeffs[0::2], omega_sq)
    odd_vals = fft(coeffs[1::2], omega_sq)

    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega
    return result


def ifft(evals, omega):
    """역변환: 평가값 → 계수. ω^{-1}로 FFT 후 n으로 나눈다."""
    n = len(evals)
    coeffs = fft(evals, FR(1) / omega)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


def poly_div(a, b):
    """긴 나눗셈: a(x) = b(x) · q(x) + r(x).

    Returns:
        tuple: (몫 Polynomial, 나머지 Polynomial)

    Raises:
        ValueError: 제수가 영 다항식인 경우
    """
    if b.is_zero():
        raise ValueError("0으로 나눌 수 없습니다")

    remainder = list(a.coeffs)
    divisor = b.coeffs
    deg_b = len(divisor) - 1
    deg_a = len(remainder) - 1

    if deg_a < deg_b:
        return Polynomial(), Polynomial(remainder)

    quotient = [FR(0)] * (deg_a - deg_b + 1)
    lead_inv = FR(1) / divisor[-1]

    for i in range(deg_a - deg_b, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv
        quotient[i] = coeff
        if coeff == FR(0):
            continue
        for j in range(deg_b + 1):
            remainder[i + j] = remainder[i + j] - coeff * divisor[j]

    return Polynomial(quotient), Polynomial(remainder)
