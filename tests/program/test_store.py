import threading

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from vrfgame.program.store import AccountStore


class TestAccountStore:

    def test_missing_account(self):
        store = AccountStore()
        assert store.get("nope") is None
        assert not store.exists("nope")

    def test_put_get(self):
        store = AccountStore()
        store.put("a", b"\x01\x02\x03")
        assert store.get("a") == b"\x01\x02\x03"
        assert store.exists("a")

    def test_put_overwrites(self):
        store = AccountStore()
        store.put("a", b"\x01old")
        store.put("a", b"\x02new")
        assert store.get("a") == b"\x02new"
        assert store.ids() == ["a"]

    def test_kind_column(self):
        store = AccountStore()
        store.put("g", b"\x02rest", kind=2)
        assert store.table.all()[0]["kind"] == 2

    def test_kind_defaults_to_none(self):
        store = AccountStore()
        store.put("a", b"\x01")
        assert store.table.all()[0]["kind"] is None

    def test_reads_wait_for_lock(self):
        store = AccountStore()
        store.put("a", b"\x01")
        results = []
        with store.lock:
            reader = threading.Thread(target=lambda: results.append(store.get("a")))
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert results == []
        reader.join()
        assert results == [b"\x01"]

    def test_ids_sorted(self):
        store = AccountStore()
        for name in ("c", "a", "b"):
            store.put(name, b"\x01")
        assert store.ids() == ["a", "b", "c"]

    def test_clear(self):
        store = AccountStore()
        store.put("a", b"\x01")
        store.clear()
        assert store.ids() == []

    def test_shared_db_separate_tables(self):
        db = TinyDB(storage=MemoryStorage)
        first = AccountStore(db, table="one")
        second = AccountStore(db, table="two")
        first.put("a", b"\x01")
        assert second.get("a") is None

    def test_json_file_persistence(self, tmp_path):
        path = str(tmp_path / "accounts.json")
        store = AccountStore.open(path)
        store.put("vrf-1", b"\x01\xff")
        store.db.close()

        reopened = AccountStore.open(path)
        assert reopened.get("vrf-1") == b"\x01\xff"
        reopened.db.close()
