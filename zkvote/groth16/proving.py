import logging

from zkvote.commitment import random_field_element
from zkvote.field import FR, ec_add, ec_mul, ec_neg

logger = logging.getLogger(__name__)


def _commit(bases, poly):
    # Σ cⱼ · basesⱼ  (계수 형태의 다항식을 [x^j] 기저에 커밋)
    acc = None
    for base, coeff in zip(bases, poly.coeffs):
        if coeff == FR(0):
            continue
        acc = ec_add(acc, ec_mul(base, coeff))
    return acc


def proof_a(sigma1_1, sigma1_2, Ax, r):
    # A = α + A(x) + r·δ
    proof_A = ec_add(sigma1_1[0], _commit(sigma1_2, Ax))
    return ec_add(proof_A, ec_mul(sigma1_1[2], r))


def proof_b(sigma2_1, sigma2_2, Bx, s):
    # B = β + B(x) + s·δ  (G2)
    proof_B = ec_add(sigma2_1[0], _commit(sigma2_2, Bx))
    return ec_add(proof_B, ec_mul(sigma2_1[2], s))


def proof_c(sigma1_1, sigma1_2, sigma1_4, sigma1_5, Bx, Rx, Hx, s, r, prf_A, pub_r_indexs):
    # B를 G1에서 다시 계산
    temp_proof_B = ec_add(sigma1_1[1], _commit(sigma1_2, Bx))
    temp_proof_B = ec_add(temp_proof_B, ec_mul(sigma1_1[2], s))

    # C = s·A + r·B₁ - r·s·δ + Σ_priv rᵢ·σ₁₄ᵢ + Σ hᵢ·σ₁₅ᵢ
    proof_C = ec_add(
        ec_add(ec_mul(prf_A, s), ec_mul(temp_proof_B, r)),
        ec_neg(ec_mul(sigma1_1[2], s * r)),
    )

    for i in range(len(Rx)):
        if i in pub_r_indexs or Rx[i] == FR(0):
            continue
        proof_C = ec_add(proof_C, ec_mul(sigma1_4[i], Rx[i]))

    proof_C = ec_add(proof_C, _commit(sigma1_5, Hx))
    return proof_C


def prove(proving_key, qap, witness, r=None, s=None):
    """witness 벡터에 대한 Groth16 증명 (A, B, C).

    Raises:
        ValueError: witness가 제약을 만족하지 않는 경우
    """
    if r is None:
        r = random_field_element()
    if s is None:
        s = random_field_element()

    Ax, Bx, _ = qap.witness_polynomials(witness)
    Hx = qap.h_polynomial(witness)

    prf_A = proof_a(proving_key.sigma1_1, proving_key.sigma1_2, Ax, r)
    prf_B = proof_b(proving_key.sigma2_1, proving_key.sigma2_2, Bx, s)
    prf_C = proof_c(
        proving_key.sigma1_1,
        proving_key.sigma1_2,
        proving_key.sigma1_4,
        proving_key.sigma1_5,
        Bx,
        witness,
        Hx,
        s,
        r,
        prf_A,
        proving_key.pub_r_indexs,
    )
    logger.debug("groth16 proof generated: wires=%d, domain=%d", len(witness), qap.n)
    return prf_A, prf_B, prf_C


def build_rpub_enum(pub_r_indexs, r_vec):
    o = []
    for i in pub_r_indexs:
        o.append((i, r_vec[i]))
    return o
