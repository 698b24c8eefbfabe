"""
투표 원장 (Registry)
=====================

제안의 생명주기, nullifier 기록, 집계를 관리한다. 가변 공유 상태를 가진 유일한 구성요소.

**제안 상태**:

  OPEN ──(now > deadline)──▶ CLOSED ──execute_proposal──▶ EXECUTED (종료)

  - OPEN:     now ≤ deadline, 투표 가능
  - CLOSED:   now > deadline, 실행 가능
  - EXECUTED: 단방향 최종 상태

**vote 검사 순서**:
  1. ProposalNotFound    (존재하지 않는 제안)
  2. InvalidVoteValue    (v ∉ {0, 1, 2})
  3. VotingClosed        (now > deadline)
  4. NullifierReused     (이 제안에서 이미 쓴 nullifier 해시)
  5. 오라클 호출          공개 입력 [root, nullifier_hash, proposal_id, vote_value]
     → False 이면 ProofRejected

  1~4는 싸고 지역적인 검사로 오라클보다 먼저 수행한다.
  2단계에서 nullifier_hash도 검사한다. 필드 원소가 아니면 ValueError (오류 코드 밖의 입력 오류).
  모든 검사를 통과한 뒤에만 nullifier 소비와 집계 증가를 함께 반영한다.
  어느 단계에서 실패하든 상태는 바뀌지 않는다.

**이벤트와 원자성**:
  상태 변경 뒤 이벤트를 남긴다. emit이 실패하면 (구독자 예외, 저장소 쓰기 실패)
  방금 반영한 변경을 되돌리고 예외를 그대로 전달한다.

**루트 고정**:
  merkle_root는 생성 시 정해지며 바꾸는 연산이 없다. 멤버 추가/삭제는 새 원장을 뜻한다.

**nullifier 기록**:
  제안별 집합(Proposal.nullifiers)만 투표를 막는다. 같은 멤버가 다른 제안에 투표할 때
  nullifier 해시는 같으므로 전역 중복 금지는 요구사항이 아니다.
  LedgerStore.spent_nullifiers는 관찰용 전역 기록으로 남겨 두되 검사에 쓰지 않는다.

**동시성**:
  상태 변경 연산은 호스트가 하나씩 직렬로 호출한다고 가정한다 (단일 작성자).
  Registry 자체는 잠금을 두지 않는다. HTTP 계층이 잠금으로 이 모델을 만든다.
"""

import enum
import logging
import time
from dataclasses import dataclass, field

from zkvote.ballot import TALLY_FIELDS, Vote
from zkvote.circuit.vote import vote_public_signals
from zkvote.errors import (
    AlreadyExecuted,
    InvalidVoteValue,
    NullifierReused,
    ProofRejected,
    ProposalNotFound,
    VotingClosed,
    VotingNotYetClosed,
)
from zkvote.events import EventKind, EventLog
from zkvote.field import to_field

logger = logging.getLogger(__name__)


class ProposalState(enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    EXECUTED = "executed"


@dataclass
class Proposal:
    id: int
    description: str
    deadline: int
    yes_votes: int = 0
    no_votes: int = 0
    abstain_votes: int = 0
    executed: bool = False
    nullifiers: set = field(default_factory=set)

    def tally(self):
        return self.yes_votes, self.no_votes, self.abstain_votes

    def state(self, now):
        if self.executed:
            return ProposalState.EXECUTED
        if now > self.deadline:
            return ProposalState.CLOSED
        return ProposalState.OPEN


@dataclass
class LedgerStore:
    """원장의 모든 가변 상태."""
    proposals: dict = field(default_factory=dict)
    proposal_count: int = 0
    spent_nullifiers: set = field(default_factory=set)


def _system_clock():
    return int(time.time())


class Registry:
    """익명 투표 원장.

    Args:
        merkle_root: 고정된 멤버십 루트 (FR 또는 [0, p) 정수)
        oracle: verify(a, b, c, public_inputs) -> bool 을 제공하는 객체
        clock: 현재 시각(초)을 반환하는 함수. 기본값은 시스템 시계
        events: EventLog. 기본값은 메모리 로그
    """

    def __init__(self, merkle_root, oracle, clock=None, events=None):
        self._merkle_root = int(to_field(merkle_root))
        self._oracle = oracle
        self._clock = clock if clock is not None else _system_clock
        self.events = events if events is not None else EventLog()
        self.store = LedgerStore()

    @property
    def merkle_root(self):
        return self._merkle_root

    @property
    def oracle(self):
        return self._oracle

    @property
    def proposal_count(self):
        return self.store.proposal_count

    def _proposal(self, proposal_id):
        proposal = self.store.proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFound(proposal_id)
        return proposal

    # ── 제안 ──

    def create_proposal(self, description, duration):
        """새 제안을 만들고 ID를 반환한다. deadline = now + duration.

        Raises:
            ValueError: duration이 음수이거나 정수가 아닌 경우
        """
        if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
            raise ValueError(f"duration은 0 이상의 정수(초)여야 합니다: {duration!r}")
        proposal_id = self.store.proposal_count
        deadline = self._clock() + duration
        self.store.proposals[proposal_id] = Proposal(
            id=proposal_id, description=str(description), deadline=deadline
        )
        self.store.proposal_count += 1
        try:
            self.events.emit(
                EventKind.PROPOSAL_CREATED,
                proposal_id=proposal_id,
                description=str(description),
                deadline=deadline,
            )
        except Exception:
            del self.store.proposals[proposal_id]
            self.store.proposal_count -= 1
            raise
        logger.info("proposal %d created, deadline=%d", proposal_id, deadline)
        return proposal_id

    def get_proposal(self, proposal_id):
        """제안의 읽기 전용 스냅샷 (dict)."""
        proposal = self._proposal(proposal_id)
        return {
            "id": proposal.id,
            "description": proposal.description,
            "deadline": proposal.deadline,
            "yes_votes": proposal.yes_votes,
            "no_votes": proposal.no_votes,
            "abstain_votes": proposal.abstain_votes,
            "executed": proposal.executed,
            "state": proposal.state(self._clock()).value,
        }

    def proposal_state(self, proposal_id):
        return self._proposal(proposal_id).state(self._clock())

    def get_proposal_votes(self, proposal_id):
        """(yes, no, abstain) 집계."""
        return self._proposal(proposal_id).tally()

    def is_nullifier_spent(self, nullifier_hash, proposal_id=None):
        """proposal_id가 주어지면 그 제안에서, 아니면 어느 제안에서든 사용되었는지."""
        nullifier_hash = int(nullifier_hash)
        if proposal_id is None:
            return nullifier_hash in self.store.spent_nullifiers
        return nullifier_hash in self._proposal(proposal_id).nullifiers

    # ── 투표 ──

    def vote(self, proposal_id, nullifier_hash, vote_value, a, b, c):
        """증명을 검증하고 투표를 반영한다.

        Raises:
            ProposalNotFound, InvalidVoteValue, VotingClosed, NullifierReused, ProofRejected
            ValueError: nullifier_hash가 필드 원소가 아닌 경우
        """
        proposal = self._proposal(proposal_id)

        if isinstance(vote_value, bool) or not isinstance(vote_value, int):
            raise InvalidVoteValue(f"vote value must be 0, 1 or 2: {vote_value!r}")
        try:
            choice = Vote(vote_value)
        except ValueError:
            raise InvalidVoteValue(f"vote value must be 0, 1 or 2: {vote_value!r}") from None
        nullifier_key = int(to_field(nullifier_hash))

        if self._clock() > proposal.deadline:
            raise VotingClosed(f"voting on proposal {proposal_id} has ended")

        if nullifier_key in proposal.nullifiers:
            raise NullifierReused(f"nullifier already used on proposal {proposal_id}")

        public_inputs = vote_public_signals(
            self._merkle_root, nullifier_key, proposal_id, choice
        )
        if not self._oracle.verify(a, b, c, public_inputs):
            logger.info("proposal %d: proof rejected", proposal_id)
            raise ProofRejected()

        first_spend = nullifier_key not in self.store.spent_nullifiers
        proposal.nullifiers.add(nullifier_key)
        self.store.spent_nullifiers.add(nullifier_key)
        field_name = TALLY_FIELDS[choice]
        setattr(proposal, field_name, getattr(proposal, field_name) + 1)

        try:
            self.events.emit(
                EventKind.VOTE_CAST,
                proposal_id=proposal_id,
                nullifier_hash=str(nullifier_key),
                vote_value=int(choice),
            )
        except Exception:
            setattr(proposal, field_name, getattr(proposal, field_name) - 1)
            proposal.nullifiers.discard(nullifier_key)
            if first_spend:
                self.store.spent_nullifiers.discard(nullifier_key)
            raise
        logger.info("proposal %d: vote %s accepted", proposal_id, choice.name)

    # ── 실행 ──

    def execute_proposal(self, proposal_id):
        """마감된 제안을 한 번만 EXECUTED로 전환한다.

        Raises:
            ProposalNotFound, AlreadyExecuted, VotingNotYetClosed
        """
        proposal = self._proposal(proposal_id)
        if proposal.executed:
            raise AlreadyExecuted(f"proposal {proposal_id} already executed")
        if self._clock() <= proposal.deadline:
            raise VotingNotYetClosed(f"voting on proposal {proposal_id} is still open")
        proposal.executed = True
        try:
            self.events.emit(EventKind.PROPOSAL_EXECUTED, proposal_id=proposal_id)
        except Exception:
            proposal.executed = False
            raise
        logger.info("proposal %d executed", proposal_id)
