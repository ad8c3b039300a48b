"""
계정 저장소 (TinyDB)
====================

계정 ID → 바이트 인코딩된 계정 데이터.
TinyDB 문서 형식: {"id": str, "kind": int | None, "data": hex str}

TinyDB 는 스레드 안전하지 않으므로 모든 읽기/쓰기는 lock 안에서 수행한다.
Runtime 은 트랜잭션 하나를 처리하는 동안 같은 lock 을 잡고 있으므로
읽기-검증-쓰기가 원자적으로 수행된다 (RLock 이므로 재진입 가능).
"""

import threading

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage


ACCOUNT = Query()


class AccountStore:

    def __init__(self, db=None, table="accounts"):
        if db is None:
            db = TinyDB(storage=MemoryStorage)
        self.db = db
        self.table = db.table(table)
        self.lock = threading.RLock()

    @classmethod
    def open(cls, path=None):
        """path 가 None 이면 메모리 DB, 아니면 JSON 파일 DB 를 연다."""
        if path is None:
            return cls()
        return cls(TinyDB(path))

    def get(self, account_id):
        """계정 바이트열을 반환한다. 없으면 None."""
        with self.lock:
            row = self.table.get(ACCOUNT.id == account_id)
        if row is None:
            return None
        return bytes.fromhex(row["data"])

    def exists(self, account_id):
        with self.lock:
            return self.table.contains(ACCOUNT.id == account_id)

    def put(self, account_id, data, kind=None):
        with self.lock:
            self.table.upsert(
                {"id": account_id, "kind": None if kind is None else int(kind),
                 "data": bytes(data).hex()},
                ACCOUNT.id == account_id,
            )

    def ids(self):
        with self.lock:
            rows = self.table.all()
        return sorted(row["id"] for row in rows)

    def clear(self):
        with self.lock:
            self.table.truncate()
