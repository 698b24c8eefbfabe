from zkvote.field import ec_add, ec_mul, ec_pairing


def lhs(prf_A, prf_B):
    return ec_pairing(prf_B, prf_A)


def rhs(prf_C, sigma1_1, sigma1_3, sigma2_1, rx_pub):
    RHS = ec_pairing(sigma2_1[0], sigma1_1[0])
    temp = None
    for i, ri in rx_pub:
        temp = ec_add(temp, ec_mul(sigma1_3[i], ri))
    RHS = (RHS * ec_pairing(sigma2_1[1], temp)) * ec_pairing(sigma2_1[2], prf_C)
    return RHS


# rx_pub = [(index_i, ri), ... ]
def verify(prf_A, prf_B, prf_C, sigma1_1, sigma1_3, sigma2_1, rx_pub):
    return lhs(prf_A, prf_B) == rhs(prf_C, sigma1_1, sigma1_3, sigma2_1, rx_pub)


def verify_with_key(verifying_key, proof_points, public_values):
    """검증 키와 공개 입력 값 [x₁, ..., x_k]로 검증한다 (상수 1은 자동 추가)."""
    prf_A, prf_B, prf_C = proof_points
    rx_pub = [(0, 1)] + [(i, int(v)) for i, v in enumerate(public_values, start=1)]
    return verify(
        prf_A,
        prf_B,
        prf_C,
        verifying_key.sigma1_1,
        verifying_key.sigma1_3,
        verifying_key.sigma2_1,
        rx_pub,
    )
