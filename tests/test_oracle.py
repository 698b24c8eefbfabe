"""
증명 검증 오라클 테스트
========================

테스트 범위:
  - Proof ↔ py_ecc 점 변환
  - Groth16Oracle: 올바른 증명 수락, 변조된 공개 입력 거부
  - 잘못된 형태 / 곡선 밖 / 필드 밖 데이터 → 예외 없이 False
"""

import pytest
from py_ecc import bn128

from zkvote.field import CURVE_ORDER
from zkvote.oracle import Groth16Oracle, Proof, ProofOracle, decode_g1, decode_g2

from conftest import toy_public_inputs


@pytest.fixture(scope="module")
def oracle(toy_groth16):
    return Groth16Oracle(toy_groth16["verifying_key"])


class TestProof:

    def test_round_trip(self, toy_groth16):
        proof = toy_groth16["proof"]
        prf_A, prf_B, prf_C = proof.to_points()
        assert Proof.from_points(prf_A, prf_B, prf_C) == proof
        assert prf_A == toy_groth16["points"][0]

    def test_shape(self, toy_groth16):
        proof = toy_groth16["proof"]
        assert len(proof.a) == 2 and len(proof.c) == 2
        assert len(proof.b) == 2 and all(len(pair) == 2 for pair in proof.b)

    def test_generator_points(self):
        assert decode_g1((1, 2)) == bn128.G1
        g2 = Proof.from_points(bn128.G1, bn128.G2, bn128.G1).b
        assert decode_g2(g2) == bn128.G2

    def test_off_curve(self):
        with pytest.raises(ValueError):
            decode_g1((1, 3))

    def test_coordinate_out_of_field(self):
        with pytest.raises(ValueError):
            decode_g1((bn128.field_modulus + 1, 2))


class TestGroth16Oracle:

    def test_interface(self, oracle):
        assert isinstance(oracle, ProofOracle)
        assert oracle.num_public == 4

    def test_accepts_valid_proof(self, oracle, toy_groth16):
        proof = toy_groth16["proof"]
        assert oracle.verify(proof.a, proof.b, proof.c, toy_public_inputs()) is True

    def test_rejects_tampered_nullifier_hash(self, oracle, toy_groth16):
        proof = toy_groth16["proof"]
        public = toy_public_inputs()
        public[1] += 1
        assert oracle.verify(proof.a, proof.b, proof.c, public) is False

    def test_malformed_proof(self, oracle, toy_groth16):
        proof = toy_groth16["proof"]
        assert oracle.verify((1,), proof.b, proof.c, toy_public_inputs()) is False
        assert oracle.verify(proof.a, "b", proof.c, toy_public_inputs()) is False
        assert oracle.verify(proof.a, proof.b, ("x", 2), toy_public_inputs()) is False

    def test_off_curve_point(self, oracle, toy_groth16):
        proof = toy_groth16["proof"]
        assert oracle.verify((1, 3), proof.b, proof.c, toy_public_inputs()) is False

    def test_wrong_public_input_count(self, oracle, toy_groth16):
        proof = toy_groth16["proof"]
        assert oracle.verify(proof.a, proof.b, proof.c, toy_public_inputs()[:3]) is False

    def test_public_input_out_of_field(self, oracle, toy_groth16):
        proof = toy_groth16["proof"]
        public = toy_public_inputs()
        public[0] = CURVE_ORDER + public[0]
        assert oracle.verify(proof.a, proof.b, proof.c, public) is False

    def test_base_interface_not_implemented(self):
        with pytest.raises(NotImplementedError):
            ProofOracle().verify((1, 2), ((1, 2), (3, 4)), (1, 2), [1, 2, 3, 4])
