"""
기반 모듈: 유한체(Finite Field) 및 타원곡선 연산
==================================================

투표 시스템 전체(Poseidon 해시, Merkle 누적기, R1CS 제약, Groth16)에서
사용되는 기본 대수적 도구를 정의한다.

**유한체 FR**:
  bn128(BN254) 타원곡선의 스칼라 필드. 커밋먼트, nullifier 해시,
  Merkle 노드, 회로의 모든 배선 값은 이 필드의 원소이다.
  - 위수 p ≈ 2^254, 소수체
  - 모든 연산은 py_ecc FQ가 매 연산마다 mod p로 환원한다.

**공개 데이터 검증 (to_field)**:
  외부에서 들어오는 정수(루트, nullifier 해시, 제안 ID 등)는
  [0, p) 범위를 벗어나면 조용히 환원하지 않고 ValueError를 발생시킨다.
  p 이상의 값을 환원하면 서로 다른 두 입력이 같은 필드 원소가 된다.

**단위근(Roots of Unity)**:
  Groth16 QAP 도메인 H = {1, ω, ..., ω^(n-1)}에 사용한다.

사용 예시:
    >>> from zkvote.field import FR, to_field
    >>> to_field(5) * FR(3)   # FR(15)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 연산을 제공한다.
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# 필드 원소의 비트 길이 (Poseidon 파라미터 생성에 사용)
FIELD_BITS = CURVE_ORDER.bit_length()


def to_field(value):
    """정수 또는 FR을 범위 검사 후 FR로 변환한다.

    Args:
        value: FR 원소 또는 0 <= value < p 인 정수

    Returns:
        FR

    Raises:
        ValueError: 정수가 아니거나 필드 범위를 벗어난 경우
    """
    if isinstance(value, FR):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"필드 원소는 정수여야 합니다: {value!r}")
    if value < 0 or value >= CURVE_ORDER:
        raise ValueError(f"필드 범위를 벗어난 값입니다: {value}")
    return FR(value)


def is_field_element(value):
    """value가 [0, p) 범위의 정수(또는 FR)인지 확인한다."""
    try:
        to_field(value)
    except ValueError:
        return False
    return True


# ─────────────────────────────────────────────────────────────────────
# 타원곡선 상수 및 연산
# ─────────────────────────────────────────────────────────────────────

G1 = bn128.G1
G2 = bn128.G2

# 영점 (point at infinity)
Z1 = None  # bn128에서 항등원은 None으로 표현


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point."""
    if isinstance(scalar, FR):
        scalar = int(scalar)
    if point is None:
        return None
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """타원곡선 점의 역원: -point."""
    return bn128.neg(point)


def ec_pairing(g2_point, g1_point):
    """쌍선형 페어링 e(G1, G2) → GT.

    주의:
        py_ecc.bn128.pairing의 인자 순서는 (G2, G1)이다.
    """
    return bn128.pairing(g2_point, g1_point)


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """n차 원시 단위근 ω를 반환한다.

    p - 1 = 2^28 × m 이므로 최대 2^28차 단위근까지 지원한다.
    생성자 g = FR(5)에서 ω = g^((p-1)/n)으로 계산한다.

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << 28):
        raise ValueError(f"n은 2^28 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)
    return FR(5) ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """[1, ω, ω², ..., ω^(n-1)]을 반환한다."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots


def next_power_of_2(n):
    """n 이상인 가장 작은 2의 거듭제곱."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()
