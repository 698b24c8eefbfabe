"""
투표 데이터 직렬화/역직렬화 헬퍼
==================================

JSON과 TinyDB에 저장 가능한 형태로 투표 객체를 변환한다.
모든 필드 원소와 좌표는 10진수 문자열로 표현한다 (JavaScript 정수 정밀도 문제 회피).

  Proof         {"a": [x, y], "b": [[x0, x1], [y0, y1]], "c": [x, y]}
  VerifyingKey  {"sigma1_1": [G1×3], "sigma1_3": [G1...], "sigma2_1": [G2×3], "pub_r_indexs": [...]}
"""

from py_ecc import bn128
from py_ecc.fields import bn128_FQ as FQ

from zkvote.field import to_field
from zkvote.groth16.setup import VerifyingKey
from zkvote.oracle import Proof


def _parse_int(value):
    """10진수 문자열 또는 정수 → int. 그 밖의 값은 ValueError."""
    if isinstance(value, bool):
        raise ValueError(f"정수가 아닙니다: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    raise ValueError(f"정수가 아닙니다: {value!r}")


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR (범위 검사)"""
    return to_field(_parse_int(s))


# ─── G1 point ───

def serialize_g1(point):
    """G1 point → [str, str] or None"""
    if point is None:
        return None
    return [str(int(point[0])), str(int(point[1]))]


def deserialize_g1(data):
    """[str, str] or None → G1 point"""
    if data is None:
        return None
    return (FQ(_parse_int(data[0])), FQ(_parse_int(data[1])))


# ─── G2 point ───

def serialize_g2(point):
    """G2 point → [[str,str],[str,str]] or None"""
    if point is None:
        return None
    return [
        [str(int(point[0].coeffs[0])), str(int(point[0].coeffs[1]))],
        [str(int(point[1].coeffs[0])), str(int(point[1].coeffs[1]))]
    ]


def deserialize_g2(data):
    """[[str,str],[str,str]] or None → G2 point"""
    if data is None:
        return None
    return (
        bn128.FQ2([_parse_int(data[0][0]), _parse_int(data[0][1])]),
        bn128.FQ2([_parse_int(data[1][0]), _parse_int(data[1][1])])
    )


# ─── Proof ───

def serialize_proof(proof):
    """Proof → {"a", "b", "c"} (10진수 문자열)"""
    return {
        "a": [str(v) for v in proof.a],
        "b": [[str(v) for v in pair] for pair in proof.b],
        "c": [str(v) for v in proof.c],
    }


def deserialize_proof(data):
    """{"a", "b", "c"} → Proof. 곡선 검사는 오라클이 한다.

    Raises:
        ValueError: 형태가 잘못된 경우
    """
    try:
        a = data["a"]
        b = data["b"]
        c = data["c"]
        if len(a) != 2 or len(c) != 2 or len(b) != 2 or any(len(pair) != 2 for pair in b):
            raise ValueError("증명 형태가 잘못되었습니다")
        return Proof(
            a=tuple(_parse_int(v) for v in a),
            b=tuple(tuple(_parse_int(v) for v in pair) for pair in b),
            c=tuple(_parse_int(v) for v in c),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"증명 형태가 잘못되었습니다: {e}") from None


# ─── VerifyingKey ───

def serialize_verifying_key(vk):
    return {
        "sigma1_1": [serialize_g1(p) for p in vk.sigma1_1],
        "sigma1_3": [serialize_g1(p) for p in vk.sigma1_3],
        "sigma2_1": [serialize_g2(p) for p in vk.sigma2_1],
        "pub_r_indexs": list(vk.pub_r_indexs),
    }


def deserialize_verifying_key(data):
    return VerifyingKey(
        sigma1_1=[deserialize_g1(p) for p in data["sigma1_1"]],
        sigma1_3=[deserialize_g1(p) for p in data["sigma1_3"]],
        sigma2_1=[deserialize_g2(p) for p in data["sigma2_1"]],
        pub_r_indexs=[int(i) for i in data["pub_r_indexs"]],
    )


# ─── Proposal ───

def serialize_proposal(snapshot):
    """Registry.get_proposal 스냅샷 → JSON"""
    return {
        "id": snapshot["id"],
        "description": snapshot["description"],
        "deadline": snapshot["deadline"],
        "yes_votes": snapshot["yes_votes"],
        "no_votes": snapshot["no_votes"],
        "abstain_votes": snapshot["abstain_votes"],
        "executed": snapshot["executed"],
        "state": snapshot["state"],
    }


def serialize_tally(tally):
    yes, no, abstain = tally
    return {"yes": yes, "no": no, "abstain": abstain}

