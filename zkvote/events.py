"""
원장 이벤트 로그
================

Registry의 모든 상태 변경은 이벤트 하나를 남긴다.

| EventKind          | 필드                                     |
|--------------------|------------------------------------------|
| proposal_created   | proposal_id, description, deadline       |
| vote_cast          | proposal_id, nullifier_hash, vote_value  |
| proposal_executed  | proposal_id                              |

레코드는 TinyDB "events" 테이블에 추가만 된다 (기본 MemoryStorage, 설정 시 JSON 파일).
구독자(subscriber)는 레코드가 저장된 직후 동기적으로 호출된다.
구독자가 예외를 던지면 방금 저장한 레코드를 지우고 예외를 그대로 전달한다.
"""

import enum
import logging

from tinydb import Query, TinyDB
from tinydb.storages import MemoryStorage

logger = logging.getLogger(__name__)

EVENT = Query()


class EventKind(str, enum.Enum):
    PROPOSAL_CREATED = "proposal_created"
    VOTE_CAST = "vote_cast"
    PROPOSAL_EXECUTED = "proposal_executed"


class EventLog:
    """TinyDB에 저장되는 추가 전용 이벤트 로그."""

    def __init__(self, db=None):
        if db is None:
            db = TinyDB(storage=MemoryStorage)
        self.db = db
        self.table = db.table("events")
        self._subscribers = []

    def subscribe(self, callback):
        """callback(record)를 등록한다."""
        self._subscribers.append(callback)

    def emit(self, kind, **fields):
        kind = EventKind(kind)
        record = {"seq": len(self.table), "kind": kind.value}
        record.update(fields)
        doc_id = self.table.insert(record)
        logger.debug("event %s %s", kind.value, fields)
        try:
            for callback in self._subscribers:
                callback(record)
        except Exception:
            self.table.remove(doc_ids=[doc_id])
            raise
        return record

    def records(self, kind=None, proposal_id=None):
        """저장 순서대로 레코드를 반환한다 (kind, proposal_id로 필터 가능)."""
        if kind is None and proposal_id is None:
            rows = self.table.all()
        else:
            cond = EVENT.seq.exists()
            if kind is not None:
                cond &= EVENT.kind == EventKind(kind).value
            if proposal_id is not None:
                cond &= EVENT.proposal_id == proposal_id
            rows = self.table.search(cond)
        return sorted((dict(row) for row in rows), key=lambda row: row["seq"])

    def __len__(self):
        return len(self.table)
