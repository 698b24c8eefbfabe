"""
투표 값 인코딩
==============

투표 값은 두 곳에서 같은 숫자로 쓰인다.

  | 값 | Vote    | 집계 필드      |
  |----|---------|----------------|
  | 0  | NO      | no_votes       |
  | 1  | YES     | yes_votes      |
  | 2  | ABSTAIN | abstain_votes  |

  - 회로: v·(v-1)·(v-2) = 0 (모든 Vote 값의 곱)
  - 원장: 집계 필드 선택
"""

from enum import IntEnum


class Vote(IntEnum):
    NO = 0
    YES = 1
    ABSTAIN = 2


TALLY_FIELDS = {
    Vote.NO: "no_votes",
    Vote.YES: "yes_votes",
    Vote.ABSTAIN: "abstain_votes",
}


def parse_vote(value):
    """Vote, 정수, 또는 이름("yes"/"no"/"abstain")을 Vote로 변환한다.

    Raises:
        ValueError: 허용되지 않는 값
    """
    if isinstance(value, Vote):
        return value
    if isinstance(value, str):
        try:
            return Vote[value.strip().upper()]
        except KeyError:
            raise ValueError(f"허용되지 않는 투표 값입니다: {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"허용되지 않는 투표 값입니다: {value!r}")
    try:
        return Vote(value)
    except ValueError:
        raise ValueError(f"허용되지 않는 투표 값입니다: {value!r}") from None
