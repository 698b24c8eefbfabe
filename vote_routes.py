"""
투표 원장 Flask Blueprint
==========================

| 메서드 | 경로                                | 동작                    |
|--------|-------------------------------------|-------------------------|
| POST   | /dao/proposals                      | 제안 생성               |
| GET    | /dao/proposals/<id>                 | 제안 조회               |
| GET    | /dao/proposals/<id>/votes           | 집계 조회               |
| POST   | /dao/proposals/<id>/votes           | 투표 (증명 포함)        |
| POST   | /dao/proposals/<id>/execute         | 제안 실행               |
| GET    | /dao/events                         | 이벤트 로그             |
| GET    | /dao/ledger                         | 루트, 제안 수           |

상태 변경 요청은 하나의 잠금으로 직렬화된다 (단일 작성자 모델).
집계 조회도 같은 잠금 안에서 읽어 반영이 끝난 상태만 본다.
원장 오류는 {"error": code, "message": ...} JSON과 아래 상태 코드로 변환된다.

  404 ProposalNotFound
  400 InvalidVoteValue, 잘못된 요청 본문
  409 VotingClosed, VotingNotYetClosed, AlreadyExecuted, NullifierReused
  422 ProofRejected
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from zkvote.errors import (
    AlreadyExecuted,
    InvalidVoteValue,
    NullifierReused,
    ProofRejected,
    ProposalNotFound,
    VotingClosed,
    VotingError,
    VotingNotYetClosed,
)

from vote_serializers import (
    deserialize_fr,
    deserialize_proof,
    serialize_fr,
    serialize_proposal,
    serialize_tally,
)

logger = logging.getLogger(__name__)

vote_bp = Blueprint('vote', __name__, url_prefix='/dao')

ERROR_STATUS = {
    ProposalNotFound: 404,
    InvalidVoteValue: 400,
    VotingClosed: 409,
    VotingNotYetClosed: 409,
    AlreadyExecuted: 409,
    NullifierReused: 409,
    ProofRejected: 422,
}


def init_vote_bp(app, registry, lock):
    """app.py에서 원장과 잠금을 주입받는다. 읽기와 쓰기 모두 이 잠금 안에서 원장을 본다."""
    app.extensions["zkvote.registry"] = registry
    app.extensions["zkvote.lock"] = lock


def get_registry():
    return current_app.extensions["zkvote.registry"]


def get_lock():
    return current_app.extensions["zkvote.lock"]


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("JSON 객체 본문이 필요합니다")
    return data


# ─── 오류 처리 ───

@vote_bp.errorhandler(VotingError)
def handle_voting_error(e):
    status = ERROR_STATUS.get(type(e), 400)
    logger.info("%s %s -> %s", request.method, request.path, e.code)
    return jsonify({"error": e.code, "message": str(e)}), status


@vote_bp.errorhandler(ValueError)
def handle_bad_request(e):
    return jsonify({"error": "bad_request", "message": str(e)}), 400


# ─── 제안 ───

@vote_bp.route("/proposals", methods=["POST"])
def create_proposal():
    data = _json_body()
    description = data.get("description", "")
    duration = data.get("duration")
    with get_lock():
        proposal_id = get_registry().create_proposal(description, duration)
    return jsonify({"id": proposal_id}), 201


@vote_bp.route("/proposals/<int:proposal_id>")
def get_proposal(proposal_id):
    with get_lock():
        snapshot = get_registry().get_proposal(proposal_id)
    return jsonify(serialize_proposal(snapshot))


@vote_bp.route("/proposals/<int:proposal_id>/votes")
def get_votes(proposal_id):
    with get_lock():
        tally = get_registry().get_proposal_votes(proposal_id)
    return jsonify(serialize_tally(tally))


@vote_bp.route("/proposals/<int:proposal_id>/votes", methods=["POST"])
def cast_vote(proposal_id):
    data = _json_body()
    nullifier_hash = int(deserialize_fr(data.get("nullifier_hash")))
    proof = deserialize_proof(data.get("proof") or {})
    vote_value = data.get("vote_value")
    registry = get_registry()
    with get_lock():
        registry.vote(proposal_id, nullifier_hash, vote_value, proof.a, proof.b, proof.c)
        tally = registry.get_proposal_votes(proposal_id)
    return jsonify(serialize_tally(tally))


@vote_bp.route("/proposals/<int:proposal_id>/execute", methods=["POST"])
def execute_proposal(proposal_id):
    registry = get_registry()
    with get_lock():
        registry.execute_proposal(proposal_id)
        snapshot = registry.get_proposal(proposal_id)
    return jsonify(serialize_proposal(snapshot))


# ─── 원장 ───

@vote_bp.route("/events")
def list_events():
    kind = request.args.get("kind")
    proposal_id = request.args.get("proposal_id", type=int)
    with get_lock():
        records = get_registry().events.records(kind=kind, proposal_id=proposal_id)
    return jsonify(records)


@vote_bp.route("/ledger")
def ledger_info():
    registry = get_registry()
    with get_lock():
        info = {
            "merkle_root": serialize_fr(registry.merkle_root),
            "proposal_count": registry.proposal_count,
        }
    return jsonify(info)
