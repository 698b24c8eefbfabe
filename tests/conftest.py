import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkvote.circuit.gadgets import vote_range
from zkvote.circuit.r1cs import ConstraintSystem
from zkvote.circuit.vote import VoteCircuit
from zkvote.field import FR
from zkvote.groth16.proving import prove
from zkvote.groth16.qap import r1cs_to_qap
from zkvote.groth16.setup import ToxicWaste, setup
from zkvote.oracle import Proof, ProofOracle


# ── 테스트 상수 ──
START_TIME = 1_700_000_000

DUMMY_A = (1, 2)
DUMMY_B = ((1, 2), (3, 4))
DUMMY_C = (5, 6)

TOXIC_ALPHA = 3926
TOXIC_BETA = 3604
TOXIC_GAMMA = 2971
TOXIC_DELTA = 1357
TOXIC_X_VAL = 3721

PROVER_R = 4106
PROVER_S = 4565

# 소형 회로의 정직한 입력: root·pid 곱, secret² = nullifier_hash, vote ∈ {0,1,2}
TOY_ROOT = 11
TOY_SECRET = 7
TOY_NULLIFIER_HASH = 49
TOY_PROPOSAL_ID = 1
TOY_VOTE = 1


class FakeClock:
    """수동으로 움직이는 시계."""

    def __init__(self, now=START_TIME):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class StubOracle(ProofOracle):
    """호출을 기록하고 고정된 결과를 반환하는 오라클."""

    def __init__(self, accept=True):
        self.accept = accept
        self.calls = []

    def verify(self, a, b, c, public_inputs):
        self.calls.append((a, b, c, list(public_inputs)))
        return self.accept


class WitnessOracle(ProofOracle):
    """증명 토큰을 witness에 연결해 두고, 회로 만족 여부와 공개 입력으로 판정한다.

    건전한 증명 시스템 대신 회로 자체를 검사하므로 Groth16 없이도
    원장 + 회로 전체 흐름을 확인할 수 있다.
    """

    def __init__(self, depth):
        self.circuit = VoteCircuit(depth)
        self.witnesses = {}

    def issue(self, witness):
        token = len(self.witnesses) + 1
        self.witnesses[token] = witness
        return (token, 0), ((0, 0), (0, 0)), (0, 0)

    def verify(self, a, b, c, public_inputs):
        witness = self.witnesses.get(a[0])
        if witness is None:
            return False
        if list(public_inputs) != witness.public_signals():
            return False
        return not self.circuit.check(witness)


def build_toy_circuit(root=None, nullifier_hash=None, proposal_id=None, vote_value=None,
                      secret=None):
    """공개 입력 4개짜리 소형 회로 (Groth16 파이프라인 테스트용)."""
    cs = ConstraintSystem()
    root = cs.public_input("root", root)
    nullifier_hash = cs.public_input("nullifier_hash", nullifier_hash)
    proposal_id = cs.public_input("proposal_id", proposal_id)
    vote_value = cs.public_input("vote_value", vote_value)
    secret = cs.private_input("secret", secret)

    vote_range(cs, vote_value, "vote_value")
    square = cs.mul(secret, secret, "secret²")
    cs.assert_equal(square, nullifier_hash, "nullifier_hash = secret²")
    cs.mul(root, proposal_id, "root·proposal_id")
    return cs


def toy_public_inputs():
    return [TOY_ROOT, TOY_NULLIFIER_HASH, TOY_PROPOSAL_ID, TOY_VOTE]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_oracle():
    return StubOracle(accept=True)


@pytest.fixture(scope="session")
def toy_groth16():
    """소형 회로의 setup → prove 결과."""
    cs = build_toy_circuit(*toy_public_inputs(), secret=TOY_SECRET)
    qap = r1cs_to_qap(cs)
    toxic = ToxicWaste(
        alpha=FR(TOXIC_ALPHA),
        beta=FR(TOXIC_BETA),
        gamma=FR(TOXIC_GAMMA),
        delta=FR(TOXIC_DELTA),
        x_val=FR(TOXIC_X_VAL),
    )
    proving_key, verifying_key = setup(qap, toxic)
    witness = cs.witness()
    points = prove(proving_key, qap, witness, r=FR(PROVER_R), s=FR(PROVER_S))
    return {
        "cs": cs,
        "qap": qap,
        "witness": witness,
        "proving_key": proving_key,
        "verifying_key": verifying_key,
        "points": points,
        "proof": Proof.from_points(*points),
    }
