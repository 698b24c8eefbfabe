"""
원장 오류 분류
==============

| 오류                | code                   | 발생 조건                          |
|---------------------|------------------------|------------------------------------|
| ProposalNotFound    | proposal_not_found     | 존재하지 않는 제안 ID              |
| InvalidVoteValue    | invalid_vote_value     | 투표 값 ∉ {0, 1, 2}                |
| VotingClosed        | voting_closed          | now > deadline 에 투표             |
| NullifierReused     | nullifier_reused       | 이 제안에서 이미 쓴 nullifier 해시 |
| VotingNotYetClosed  | voting_not_yet_closed  | now ≤ deadline 에 실행             |
| AlreadyExecuted     | already_executed       | 두 번째 실행                       |
| ProofRejected       | proof_rejected         | 오라클이 False를 반환              |

ProofRejected만 비싼 암호 검사의 결과이며, 거부 사유를 담지 않는다.
모든 오류는 상태 변경 없이 연산 전체를 중단시킨다.
"""


class VotingError(Exception):
    code = "voting_error"


class ProposalNotFound(VotingError):
    code = "proposal_not_found"

    def __init__(self, proposal_id):
        super().__init__(f"proposal {proposal_id} does not exist")
        self.proposal_id = proposal_id


class VotingClosed(VotingError):
    code = "voting_closed"


class VotingNotYetClosed(VotingError):
    code = "voting_not_yet_closed"


class AlreadyExecuted(VotingError):
    code = "already_executed"


class InvalidVoteValue(VotingError):
    code = "invalid_vote_value"


class NullifierReused(VotingError):
    code = "nullifier_reused"


class ProofRejected(VotingError):
    code = "proof_rejected"

    def __init__(self):
        super().__init__("invalid proof")
