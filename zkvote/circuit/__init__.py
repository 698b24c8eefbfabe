from zkvote.circuit.r1cs import ConstraintSystem, LinearCombination
from zkvote.circuit.vote import (
    PUBLIC_SIGNALS,
    VoteCircuit,
    VoteWitness,
    vote_public_signals,
)

__all__ = [
    "ConstraintSystem",
    "LinearCombination",
    "PUBLIC_SIGNALS",
    "VoteCircuit",
    "VoteWitness",
    "vote_public_signals",
]
