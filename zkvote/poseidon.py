"""
Poseidon 해시 (BN254 스칼라 필드)
==================================

커밋먼트, nullifier 해시, 제안별 leaf, Merkle 내부 노드에 공통으로 쓰이는
대수적(algebraic) 해시 함수이다. 비트 지향 해시(SHA-256 등)와 달리 필드 연산만으로
구성되므로 회로 안에서도 적은 수의 제약으로 같은 함수를 계산할 수 있다.

**순열 구조** (폭 t = 입력 수 + 1):
  R_F = 8 전체 라운드 (앞 4, 뒤 4) + R_P 부분 라운드 (가운데)

  매 라운드:
    1. ARK: 모든 상태 원소에 라운드 상수를 더한다
    2. S-box: x ↦ x^5 (전체 라운드는 모든 원소, 부분 라운드는 state[0]만)
    3. MDS: 상태 벡터에 MDS 행렬을 곱한다

  | 입력 수 | t | R_F | R_P |
  |---------|---|-----|-----|
  | 1       | 2 | 8   | 56  |
  | 2       | 3 | 8   | 57  |

**파라미터 생성**:
  라운드 상수와 Cauchy MDS 행렬은 Poseidon 참조 구현의 Grain LFSR로
  결정론적으로 유도한다 (field=소수체, sbox=x^α, n=254비트).
  폭마다 한 번 생성하여 캐시한다.

**해시 모드**:
  state = [0, in₀, in₁, ...] 로 초기화, 순열 적용 후 state[0]을 출력한다.

사용 예시:
    >>> h = poseidon([FR(1), FR(2)])
    >>> h == poseidon([1, 2])   # True
"""

from functools import lru_cache

from zkvote.field import FR, CURVE_ORDER, FIELD_BITS, to_field


FULL_ROUNDS = 8

# t = 2 .. 17 에 대한 부분 라운드 수
PARTIAL_ROUNDS = [56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68]

MAX_INPUTS = len(PARTIAL_ROUNDS)

SBOX_ALPHA = 5


# ─────────────────────────────────────────────────────────────────────
# Grain LFSR (파라미터 생성기)
# ─────────────────────────────────────────────────────────────────────

class GrainLFSR:
    """Poseidon 참조 파라미터 생성기에서 쓰는 80비트 Grain LFSR.

    초기 상태 (80비트):
        field(2) | sbox(4) | n(12) | t(12) | R_F(10) | R_P(10) | 1...1(30)

    처음 160비트는 버린다. 이후 비트는 쌍 (b₁, b₂)로 읽어
    b₁ = 1이면 b₂를 출력하고, b₁ = 0이면 b₂를 버린다.
    """

    def __init__(self, field, sbox, n, t, full_rounds, partial_rounds):
        init = (
            format(field, "02b")
            + format(sbox, "04b")
            + format(n, "012b")
            + format(t, "012b")
            + format(full_rounds, "010b")
            + format(partial_rounds, "010b")
            + "1" * 30
        )
        self.state = [int(b) for b in init]
        for _ in range(160):
            self._update()

    def _update(self):
        s = self.state
        new_bit = s[62] ^ s[51] ^ s[38] ^ s[23] ^ s[13] ^ s[0]
        s.pop(0)
        s.append(new_bit)
        return new_bit

    def next_bit(self):
        while True:
            first = self._update()
            second = self._update()
            if first == 1:
                return second

    def random_bits(self, num_bits):
        """num_bits개의 비트를 big-endian 정수로 읽는다."""
        value = 0
        for _ in range(num_bits):
            value = (value << 1) | self.next_bit()
        return value

    def field_element(self):
        """p 미만이 나올 때까지 거부 샘플링한다 (라운드 상수용)."""
        while True:
            value = self.random_bits(FIELD_BITS)
            if value < CURVE_ORDER:
                return FR(value)


class PoseidonParams:
    """폭 t에 대한 Poseidon 파라미터.

    속성:
        t: 상태 폭
        full_rounds: R_F
        partial_rounds: R_P
        round_constants: 길이 (R_F + R_P) · t 의 FR 리스트 (라운드 r, 원소 i → r·t + i)
        mds: t × t FR 행렬
    """

    def __init__(self, t, full_rounds, partial_rounds, round_constants, mds):
        self.t = t
        self.full_rounds = full_rounds
        self.partial_rounds = partial_rounds
        self.round_constants = round_constants
        self.mds = mds

    @property
    def total_rounds(self):
        return self.full_rounds + self.partial_rounds

    def is_full_round(self, r):
        """라운드 r이 전체 라운드인지 (앞 R_F/2, 뒤 R_F/2)."""
        half = self.full_rounds // 2
        return r < half or r >= half + self.partial_rounds

    def round_constant(self, r, i):
        return self.round_constants[r * self.t + i]


def _cauchy_mds(grain, t):
    """Cauchy 행렬 M[i][j] = 1 / (x_i + y_j).

    2t개의 원소가 서로 다르고 모든 x_i + y_j ≠ 0 일 때까지 다시 뽑는다.
    """
    while True:
        samples = [FR(grain.random_bits(FIELD_BITS)) for _ in range(2 * t)]
        if len(set(int(s) for s in samples)) != 2 * t:
            continue
        xs, ys = samples[:t], samples[t:]
        if any(x + y == FR(0) for x in xs for y in ys):
            continue
        return [[FR(1) / (x + y) for y in ys] for x in xs]


@lru_cache(maxsize=None)
def get_params(t):
    """폭 t의 Poseidon 파라미터를 생성한다 (캐시됨).

    Raises:
        ValueError: 지원하지 않는 폭
    """
    if t < 2 or t > MAX_INPUTS + 1:
        raise ValueError(f"지원하지 않는 Poseidon 폭입니다: t={t}")
    partial_rounds = PARTIAL_ROUNDS[t - 2]
    grain = GrainLFSR(1, 0, FIELD_BITS, t, FULL_ROUNDS, partial_rounds)
    round_constants = [
        grain.field_element()
        for _ in range((FULL_ROUNDS + partial_rounds) * t)
    ]
    mds = _cauchy_mds(grain, t)
    return PoseidonParams(t, FULL_ROUNDS, partial_rounds, round_constants, mds)


# ─────────────────────────────────────────────────────────────────────
# 순열 및 해시
# ─────────────────────────────────────────────────────────────────────

def permute(state, params=None):
    """Poseidon 순열을 적용한 새 상태를 반환한다."""
    t = len(state)
    if params is None:
        params = get_params(t)
    state = list(state)
    for r in range(params.total_rounds):
        state = [state[i] + params.round_constant(r, i) for i in range(t)]
        if params.is_full_round(r):
            state = [s ** SBOX_ALPHA for s in state]
        else:
            state[0] = state[0] ** SBOX_ALPHA
        state = [
            sum((params.mds[i][j] * state[j] for j in range(t)), FR(0))
            for i in range(t)
        ]
    return state


def poseidon(inputs):
    """Poseidon(inputs), 1 ≤ len(inputs) ≤ 16.

    Args:
        inputs: FR 또는 [0, p) 범위 정수의 리스트

    Returns:
        FR: 해시 값

    Raises:
        ValueError: 입력 개수나 값의 범위가 잘못된 경우
    """
    inputs = [to_field(x) for x in inputs]
    if not 1 <= len(inputs) <= MAX_INPUTS:
        raise ValueError(f"Poseidon 입력 개수는 1..{MAX_INPUTS}: {len(inputs)}")
    state = [FR(0)] + inputs
    return permute(state)[0]


def hash_pair(left, right):
    """두 노드를 해시한다 (Merkle 내부 노드)."""
    return poseidon([left, right])
