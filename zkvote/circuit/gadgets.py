"""
회로 가젯 (Gadgets)
===================

투표 회로를 구성하는 재사용 가능한 부분 회로들.
모든 가젯은 (cs, 입력 LinearCombination들, 이름) 을 받아 출력 LinearCombination을 반환한다.

| 가젯          | 의미                           | 제약 수          |
|---------------|--------------------------------|------------------|
| is_zero       | out = (x == 0 ? 1 : 0)         | 2                |
| assert_nonzero| x ≠ 0                          | 3                |
| num2bits      | x = Σ bᵢ·2^i, bᵢ ∈ {0,1}       | n + 1            |
| select_pair   | s ? (sib, cur) : (cur, sib)    | 1                |
| vote_range    | ∏ (v - k) = 0, k ∈ Vote        | len(Vote) - 1    |
| poseidon_hash | Poseidon(inputs)               | 3·(S-box 수) + 1 |

**힌트(hint)와 제약**:
  is_zero의 역원, num2bits의 비트처럼 prover가 계산해서 넣는 값은 반드시
  제약으로 고정한다. 힌트 배선이 제약에 등장하지 않으면 부정직한 prover가
  임의의 값을 넣을 수 있다.
"""

from zkvote.ballot import Vote
from zkvote.circuit.r1cs import LinearCombination
from zkvote.field import FR
from zkvote.poseidon import get_params


def is_zero(cs, x, name):
    """x == 0 이면 1, 아니면 0인 배선.

    제약:
        x · inv = 1 - out
        x · out = 0
    x ≠ 0 이면 두 번째 식에서 out = 0, 첫 번째 식에서 inv = 1/x 로 고정된다.
    x = 0 이면 첫 번째 식에서 out = 1 이 된다.
    """
    inv_value = None
    out_value = None
    if x.value is not None:
        if x.value == FR(0):
            inv_value, out_value = FR(0), FR(1)
        else:
            inv_value, out_value = FR(1) / x.value, FR(0)
    inv = cs.alloc(f"{name}.inv", inv_value)
    out = cs.alloc(f"{name}.is_zero", out_value)
    cs.constrain(x, inv, cs.one() - out, f"{name}: x·inv = 1 - out")
    cs.constrain(x, out, LinearCombination.zero(), f"{name}: x·out = 0")
    return out


def assert_nonzero(cs, x, name):
    """x ≠ 0 을 강제한다 (영 판별 지시자가 0이어야 함)."""
    indicator = is_zero(cs, x, name)
    cs.assert_zero(indicator, f"{name}: ≠ 0")


def num2bits(cs, x, n, name):
    """x를 n개의 비트 배선으로 분해한다 (little-endian).

    각 비트는 b·(b - 1) = 0 으로 이진값이 강제되고,
    Σ bᵢ·2^i = x 로 재구성이 강제된다. x ≥ 2^n 이면 만족 불가능하다.
    """
    bits = []
    for i in range(n):
        value = None
        if x.value is not None:
            value = FR((int(x.value) >> i) & 1)
        bit = cs.alloc(f"{name}.bit[{i}]", value)
        cs.constrain(bit, bit - cs.one(), LinearCombination.zero(), f"{name}.bit[{i}]: binary")
        bits.append(bit)
    recomposed = LinearCombination.combine((FR(2) ** i, bit) for i, bit in enumerate(bits))
    cs.assert_equal(recomposed, x, f"{name}: recompose")
    return bits


def select_pair(cs, selector, current, sibling, name):
    """selector = 0 → (current, sibling), selector = 1 → (sibling, current).

    d = s · (sibling - current) 하나의 곱셈으로
    left = current + d, right = sibling - d 를 만든다.
    """
    d = cs.mul(selector, sibling - current, f"{name}.swap")
    return current + d, sibling - d


def vote_range(cs, vote_value, name):
    """∏_{k ∈ Vote} (v - k) = 0, 즉 v ∈ {0, 1, 2}."""
    factors = [vote_value - int(k) for k in sorted(Vote)]
    acc = factors[0]
    for i, factor in enumerate(factors[1:-1], start=1):
        acc = cs.mul(acc, factor, f"{name}.prod[{i}]")
    cs.constrain(acc, factors[-1], LinearCombination.zero(), f"{name}: ∏(v - k) = 0")


# ─────────────────────────────────────────────────────────────────────
# Poseidon
# ─────────────────────────────────────────────────────────────────────

def _sbox(cs, x, name):
    # x^5 = (x²)² · x
    x2 = cs.mul(x, x, f"{name}^2")
    x4 = cs.mul(x2, x2, f"{name}^4")
    return cs.mul(x4, x, f"{name}^5")


def poseidon_hash(cs, inputs, name):
    """회로 안의 Poseidon(inputs). zkvote.poseidon.permute와 같은 라운드 순서를 따른다.

    ARK와 MDS는 선형이므로 제약 없이 LinearCombination으로 처리하고,
    S-box만 곱셈 제약을 만든다. 출력은 별도 배선으로 고정한다.
    """
    t = len(inputs) + 1
    params = get_params(t)
    state = [LinearCombination.constant(0)] + list(inputs)
    for r in range(params.total_rounds):
        state = [state[i] + params.round_constant(r, i) for i in range(t)]
        if params.is_full_round(r):
            state = [_sbox(cs, s, f"{name}.r{r}[{i}]") for i, s in enumerate(state)]
        else:
            state[0] = _sbox(cs, state[0], f"{name}.r{r}[0]")
        state = [
            LinearCombination.combine(
                (params.mds[i][j], state[j]) for j in range(t)
            )
            for i in range(t)
        ]
    return cs.assign(state[0], f"{name}.out")
