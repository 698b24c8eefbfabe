import logging
from dataclasses import dataclass

from zkvote.commitment import random_field_element
from zkvote.field import FR, G1, G2, ec_mul

logger = logging.getLogger(__name__)


@dataclass
class ToxicWaste:
    alpha: FR
    beta: FR
    gamma: FR
    delta: FR
    x_val: FR

    @classmethod
    def random(cls):
        return cls(*(random_field_element() for _ in range(5)))


@dataclass
class ProvingKey:
    sigma1_1: list
    sigma1_2: list
    sigma1_4: list
    sigma1_5: list
    sigma2_1: list
    sigma2_2: list
    pub_r_indexs: list


@dataclass
class VerifyingKey:
    # sigma1_1 = [α, β, δ]₁, sigma2_1 = [β, γ, δ]₂, sigma1_3는 공개 배선 항만 사용
    sigma1_1: list
    sigma1_3: list
    sigma2_1: list
    pub_r_indexs: list


def sigma11(alpha, beta, delta):
    return [ec_mul(G1, alpha), ec_mul(G1, beta), ec_mul(G1, delta)]


def sigma12(numGates, x_val):
    sigma1_2 = []
    val = FR(1)
    for _ in range(numGates):
        sigma1_2.append(ec_mul(G1, val))
        val = val * x_val
    return sigma1_2


def sigma13(numWires, alpha, beta, gamma, Ax_val, Bx_val, Cx_val, pub_r_indexs):
    sigma1_3 = []
    for i in range(numWires):
        if i in pub_r_indexs:
            val = (beta * Ax_val[i] + alpha * Bx_val[i] + Cx_val[i]) / gamma
            sigma1_3.append(ec_mul(G1, val))
        else:
            sigma1_3.append(None)
    return sigma1_3


def sigma14(numWires, alpha, beta, delta, Ax_val, Bx_val, Cx_val, pub_r_indexs):
    sigma1_4 = []
    for i in range(numWires):
        if i in pub_r_indexs:
            sigma1_4.append(None)
        else:
            val = (beta * Ax_val[i] + alpha * Bx_val[i] + Cx_val[i]) / delta
            sigma1_4.append(ec_mul(G1, val))
    return sigma1_4


def sigma15(numGates, delta, x_val, Zx_val):
    sigma1_5 = []
    for i in range(numGates - 1):
        sigma1_5.append(ec_mul(G1, (x_val ** i * Zx_val) / delta))
    return sigma1_5


def sigma21(beta, delta, gamma):
    return [ec_mul(G2, beta), ec_mul(G2, gamma), ec_mul(G2, delta)]


def sigma22(numGates, x_val):
    sigma2_2 = []
    val = FR(1)
    for _ in range(numGates):
        sigma2_2.append(ec_mul(G2, val))
        val = val * x_val
    return sigma2_2


def setup(qap, toxic=None):
    """QAP에 대한 (ProvingKey, VerifyingKey)를 만든다. toxic은 호출 후 버려야 한다."""
    if toxic is None:
        toxic = ToxicWaste.random()
    alpha, beta, gamma, delta, x_val = (
        toxic.alpha, toxic.beta, toxic.gamma, toxic.delta, toxic.x_val
    )
    numGates = qap.n
    numWires = qap.num_wires
    pub_r_indexs = qap.public_indices
    logger.info("groth16 setup: wires=%d, domain=%d, public=%d", numWires, numGates, len(pub_r_indexs))

    Ax_val, Bx_val, Cx_val = qap.evaluate_at(x_val)
    Zx_val = qap.vanishing_at(x_val)

    sigma1_1 = sigma11(alpha, beta, delta)
    sigma1_2 = sigma12(numGates, x_val)
    sigma1_3 = sigma13(numWires, alpha, beta, gamma, Ax_val, Bx_val, Cx_val, pub_r_indexs)
    sigma1_4 = sigma14(numWires, alpha, beta, delta, Ax_val, Bx_val, Cx_val, pub_r_indexs)
    sigma1_5 = sigma15(numGates, delta, x_val, Zx_val)
    sigma2_1 = sigma21(beta, delta, gamma)
    sigma2_2 = sigma22(numGates, x_val)

    proving_key = ProvingKey(
        sigma1_1, sigma1_2, sigma1_4, sigma1_5, sigma2_1, sigma2_2, pub_r_indexs
    )
    verifying_key = VerifyingKey(
        sigma1_1, [sigma1_3[i] for i in pub_r_indexs], sigma2_1, pub_r_indexs
    )
    return proving_key, verifying_key
