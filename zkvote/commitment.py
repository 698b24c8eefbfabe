"""
커밋먼트 스킴
==============

멤버의 비밀 값 (nullifier, secret)에서 공개 값을 유도한다.

  commitment     = H(nullifier, secret)        : 트리 leaf의 재료
  nullifier_hash = H(nullifier)                : 멤버 단위, 제안과 무관하게 동일
  proposal_leaf  = H(commitment, proposal_id)  : 회로가 증명하는 제안별 leaf

nullifier_hash는 모든 제안에서 같지만 leaf는 제안마다 다르므로,
한 제안용 포함 증명을 다른 제안에 재사용할 수 없다.

**0 금지**:
  nullifier = 0 또는 secret = 0 이면 커밋먼트가 고정되고 추측 가능하다.
  무작위 추출이 정확히 0이 나오면 (확률 1/p) 오류 없이 다시 뽑는다.
"""

import secrets
from dataclasses import dataclass

from zkvote.field import FR, CURVE_ORDER, to_field
from zkvote.poseidon import poseidon


@dataclass(frozen=True)
class Member:
    """등록 멤버. 오프체인에서 생성되며 이후 변경되지 않는다."""
    secret: FR
    nullifier: FR
    commitment: FR
    index: int


def commitment(nullifier, secret):
    return poseidon([nullifier, secret])


def nullifier_hash(nullifier):
    return poseidon([nullifier])


def proposal_leaf(member_commitment, proposal_id):
    return poseidon([member_commitment, proposal_id])


def random_field_element(randbelow=secrets.randbelow):
    """0이 아닌 임의의 필드 원소. 0이 나오면 다시 뽑는다."""
    while True:
        value = randbelow(CURVE_ORDER)
        if value != 0:
            return FR(value)


def member_from_secrets(nullifier, secret, index):
    """주어진 비밀 값으로 Member를 만든다.

    Raises:
        ValueError: nullifier 또는 secret이 0이거나 필드 범위 밖인 경우
    """
    nullifier = to_field(nullifier)
    secret = to_field(secret)
    if nullifier == FR(0) or secret == FR(0):
        raise ValueError("nullifier와 secret은 0이 될 수 없습니다")
    return Member(
        secret=secret,
        nullifier=nullifier,
        commitment=commitment(nullifier, secret),
        index=index,
    )


def generate_member(index, randbelow=secrets.randbelow):
    """새 멤버 신원을 생성한다."""
    nullifier = random_field_element(randbelow)
    secret = random_field_element(randbelow)
    return member_from_secrets(nullifier, secret, index)
