"""
Runtime (processor) 통합 테스트.

요청 → 이행 → 추측 전체 흐름과, 거부된 트랜잭션이 계정 바이트열을
바꾸지 않는다는 성질을 확인한다.
"""

import threading

import pytest

from vrfgame.crypto import schnorr
from vrfgame.crypto.prover import generate
from vrfgame.errors import (
    AccountMismatch, AccountNotFound, AlreadyInitialized, AlreadyResolved,
    InvalidInstruction, InvalidStateTransition, MissingRequiredSignature,
    InvalidSeed, ProofInvalid, RandomnessNotReady, StaleTransaction, Unauthorized,
    VrfError,
)
from vrfgame.program.consumer import derive
from vrfgame.program.instruction import (
    FulfillRandomness, InitGame, InitRandomness, PlayGame, RequestRandomness,
)
from vrfgame.program.state import GameResult, GameState, RandomnessState
from vrfgame.program.transaction import Transaction, signing_message


def _submit(runtime, keys, instruction):
    nonce = runtime.current_cycle(instruction.vrf_account)
    return runtime.process_transaction(Transaction.create(keys, instruction, nonce))


@pytest.fixture
def vrf(runtime, player_keys, authority_keys):
    """authority A 에 묶인 vrf-1 계정 (Uninitialized)."""
    _submit(runtime, player_keys, InitRandomness("vrf-1", authority_keys.public_bytes))
    return "vrf-1"


@pytest.fixture
def requested(runtime, vrf, player_keys, round1):
    _submit(runtime, player_keys, RequestRandomness(vrf, round1["seed"]))
    return vrf


@pytest.fixture
def game(runtime, vrf, player_keys):
    _submit(runtime, player_keys, InitGame("game-1", vrf, player_keys.public_bytes))
    return "game-1"


# ─────────────────────────────────────────────────────────────────────
# 정상 흐름
# ─────────────────────────────────────────────────────────────────────

class TestHappyPath:

    def test_full_round(self, runtime, requested, game, authority_keys, player_keys, round1):
        _, account = _submit(runtime, authority_keys,
                             FulfillRandomness(requested, round1["output"], round1["proof"]))
        assert account.state == RandomnessState.FULFILLED

        winning = derive(round1["output"])
        account_id, result = _submit(runtime, player_keys, PlayGame(game, requested, winning))
        assert account_id == game
        assert result.result == GameResult.WIN

        stored = runtime.load_game(game)
        assert stored.state == GameState.RESOLVED
        assert stored.winning_number == winning

    def test_state_is_persisted(self, runtime, requested, round1):
        account = runtime.load_randomness(requested)
        assert account.state == RandomnessState.REQUESTED
        assert account.seed == round1["seed"]

    def test_any_signer_may_request(self, runtime, vrf, stranger_keys):
        _, account = _submit(runtime, stranger_keys, RequestRandomness(vrf, b"from-B"))
        assert account.state == RandomnessState.REQUESTED


# ─────────────────────────────────────────────────────────────────────
# 거부 흐름
# ─────────────────────────────────────────────────────────────────────

class TestRejections:

    def test_fulfill_by_non_authority(self, runtime, requested, stranger_keys, round1):
        before = runtime.store.get(requested)
        with pytest.raises(Unauthorized):
            _submit(runtime, stranger_keys,
                    FulfillRandomness(requested, round1["output"], round1["proof"]))
        assert runtime.store.get(requested) == before

    def test_replay_of_fulfillment(self, runtime, requested, authority_keys, round1):
        tx = Transaction.create(authority_keys,
                                FulfillRandomness(requested, round1["output"], round1["proof"]), 1)
        runtime.process_transaction(tx)
        before = runtime.store.get(requested)
        with pytest.raises(InvalidStateTransition):
            runtime.process_transaction(tx)
        assert runtime.store.get(requested) == before

    def test_fulfill_from_uninitialized(self, runtime, vrf, authority_keys, round1):
        before = runtime.store.get(vrf)
        with pytest.raises(InvalidStateTransition):
            _submit(runtime, authority_keys,
                    FulfillRandomness(vrf, round1["output"], round1["proof"]))
        assert runtime.store.get(vrf) == before

    def test_fulfill_with_invalid_proof(self, runtime, requested, authority_keys):
        output, proof = generate(authority_keys.secret, b"other-seed")
        with pytest.raises(ProofInvalid):
            _submit(runtime, authority_keys, FulfillRandomness(requested, output, proof))
        assert runtime.load_randomness(requested).state == RandomnessState.REQUESTED

    def test_bad_signature(self, runtime, vrf, player_keys, stranger_keys):
        tx = Transaction.create(player_keys, RequestRandomness(vrf, b"seed"), 0)
        forged = Transaction(stranger_keys.public_bytes, tx.instruction, tx.nonce, tx.signature)
        before = runtime.store.get(vrf)
        with pytest.raises(MissingRequiredSignature):
            runtime.process_transaction(forged)
        assert runtime.store.get(vrf) == before

    def test_already_initialized(self, runtime, vrf, player_keys, stranger_keys):
        before = runtime.store.get(vrf)
        with pytest.raises(AlreadyInitialized):
            _submit(runtime, player_keys, InitRandomness(vrf, stranger_keys.public_bytes))
        assert runtime.store.get(vrf) == before

    def test_invalid_authority_key(self, runtime, player_keys):
        with pytest.raises(InvalidInstruction):
            _submit(runtime, player_keys, InitRandomness("vrf-x", b"\x05" * 33))
        assert not runtime.store.exists("vrf-x")

    def test_request_unknown_account(self, runtime, player_keys):
        with pytest.raises(AccountNotFound):
            _submit(runtime, player_keys, RequestRandomness("missing", b"seed"))

    def test_game_against_unknown_vrf(self, runtime, player_keys):
        with pytest.raises(AccountNotFound):
            _submit(runtime, player_keys, InitGame("game-x", "missing", player_keys.public_bytes))
        assert not runtime.store.exists("game-x")

    def test_play_before_fulfilled(self, runtime, requested, game, player_keys):
        with pytest.raises(RandomnessNotReady):
            _submit(runtime, player_keys, PlayGame(game, requested, 5))

    def test_play_out_of_range(self, runtime, requested, game, authority_keys, player_keys, round1):
        _submit(runtime, authority_keys,
                FulfillRandomness(requested, round1["output"], round1["proof"]))
        before = runtime.store.get(game)
        with pytest.raises(VrfError) as info:
            _submit(runtime, player_keys, PlayGame(game, requested, 150))
        assert info.value.kind == "GuessOutOfRange"
        assert runtime.store.get(game) == before

    def test_play_against_other_vrf(self, runtime, vrf, game, player_keys, authority_keys):
        _submit(runtime, player_keys, InitRandomness("vrf-2", authority_keys.public_bytes))
        with pytest.raises(AccountMismatch):
            _submit(runtime, player_keys, PlayGame(game, "vrf-2", 5))

    def test_play_by_non_player(self, runtime, requested, game, stranger_keys):
        with pytest.raises(Unauthorized):
            _submit(runtime, stranger_keys, PlayGame(game, requested, 5))

    def test_garbage_instruction(self, runtime, player_keys):
        data = b"\x09garbage"
        signature = schnorr.sign(player_keys, signing_message(data, 0))
        tx = Transaction(player_keys.public_bytes, data, 0, signature)
        with pytest.raises(InvalidInstruction):
            runtime.process_transaction(tx)


# ─────────────────────────────────────────────────────────────────────
# 여러 주기
# ─────────────────────────────────────────────────────────────────────

class TestCycles:

    def _fulfill(self, runtime, vrf, keys, seed):
        output, proof = generate(keys.secret, seed)
        _submit(runtime, keys, FulfillRandomness(vrf, output, proof))
        return output

    def test_one_guess_per_cycle(self, runtime, requested, game, authority_keys, player_keys, round1):
        self._fulfill(runtime, requested, authority_keys, round1["seed"])
        _submit(runtime, player_keys, PlayGame(game, requested, 1))
        with pytest.raises(AlreadyResolved):
            _submit(runtime, player_keys, PlayGame(game, requested, 2))

    def test_new_cycle_reopens_game(self, runtime, requested, game, authority_keys, player_keys, round1):
        self._fulfill(runtime, requested, authority_keys, round1["seed"])
        _submit(runtime, player_keys, PlayGame(game, requested, 1))

        _submit(runtime, player_keys, RequestRandomness(requested, b"round-2"))
        output = self._fulfill(runtime, requested, authority_keys, b"round-2")
        _, result = _submit(runtime, player_keys, PlayGame(game, requested, 2))
        assert result.cycle == 2
        assert result.winning_number == derive(output)

    def test_request_while_pending(self, runtime, requested, player_keys):
        with pytest.raises(InvalidStateTransition):
            _submit(runtime, player_keys, RequestRandomness(requested, b"override"))

    def test_re_request_with_fulfilled_seed(self, runtime, requested, authority_keys,
                                            stranger_keys, round1):
        self._fulfill(runtime, requested, authority_keys, round1["seed"])
        before = runtime.store.get(requested)
        with pytest.raises(InvalidSeed):
            _submit(runtime, stranger_keys, RequestRandomness(requested, round1["seed"]))
        assert runtime.store.get(requested) == before

    def test_old_fulfillment_not_accepted_in_later_cycle(self, runtime, requested, authority_keys,
                                                         stranger_keys, round1):
        """round-1 → round-2 → round-1 로 시드를 되돌려도 이전 이행 트랜잭션은 무효."""
        fulfill_tx = Transaction.create(
            authority_keys, FulfillRandomness(requested, round1["output"], round1["proof"]), 1,
        )
        runtime.process_transaction(fulfill_tx)
        _submit(runtime, stranger_keys, RequestRandomness(requested, b"round-2"))
        self._fulfill(runtime, requested, authority_keys, b"round-2")
        _submit(runtime, stranger_keys, RequestRandomness(requested, round1["seed"]))

        before = runtime.store.get(requested)
        with pytest.raises(StaleTransaction):
            runtime.process_transaction(fulfill_tx)
        assert runtime.store.get(requested) == before
        assert runtime.load_randomness(requested).state == RandomnessState.REQUESTED

    def test_guess_not_replayable_into_next_cycle(self, runtime, requested, game, authority_keys,
                                                  player_keys, stranger_keys, round1):
        """한 주기에 서명된 추측을 다음 주기에 제3자가 재전송할 수 없다."""
        self._fulfill(runtime, requested, authority_keys, round1["seed"])
        play_tx = Transaction.create(player_keys, PlayGame(game, requested, 7), 1)
        runtime.process_transaction(play_tx)

        _submit(runtime, stranger_keys, RequestRandomness(requested, b"round-2"))
        self._fulfill(runtime, requested, authority_keys, b"round-2")

        before = runtime.store.get(game)
        with pytest.raises(StaleTransaction):
            runtime.process_transaction(play_tx)
        assert runtime.store.get(game) == before
        assert runtime.load_game(game).cycle == 1

        # 플레이어는 새 주기에 직접 다시 추측할 수 있다
        _, result = _submit(runtime, player_keys, PlayGame(game, requested, 7))
        assert result.cycle == 2

    def test_future_nonce_rejected(self, runtime, requested, player_keys):
        tx = Transaction.create(player_keys, RequestRandomness(requested, b"x"), 5)
        with pytest.raises(StaleTransaction):
            runtime.process_transaction(tx)

    def test_play_after_re_request_not_ready(self, runtime, requested, game, authority_keys,
                                             player_keys, stranger_keys, round1):
        """판정 후 새 요청이 들어오면 새 이행 전까지 추측할 수 없다."""
        self._fulfill(runtime, requested, authority_keys, round1["seed"])
        _submit(runtime, player_keys, PlayGame(game, requested, 1))
        _submit(runtime, stranger_keys, RequestRandomness(requested, b"round-2"))

        before = runtime.store.get(game)
        with pytest.raises(RandomnessNotReady):
            _submit(runtime, player_keys, PlayGame(game, requested, 2))
        assert runtime.store.get(game) == before

        self._fulfill(runtime, requested, authority_keys, b"round-2")
        _, result = _submit(runtime, player_keys, PlayGame(game, requested, 2))
        assert result.guess == 2


# ─────────────────────────────────────────────────────────────────────
# 동시성
# ─────────────────────────────────────────────────────────────────────

class TestConcurrency:

    def test_concurrent_fulfill_exactly_one_wins(self, runtime, requested, authority_keys, round1):
        """같은 요청에 대한 동시 이행은 정확히 하나만 성공한다."""
        tx = Transaction.create(authority_keys,
                                FulfillRandomness(requested, round1["output"], round1["proof"]), 1)
        outcomes = []
        barrier = threading.Barrier(4)

        def worker():
            barrier.wait()
            try:
                runtime.process_transaction(tx)
                outcomes.append("ok")
            except InvalidStateTransition:
                outcomes.append("rejected")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["ok", "rejected", "rejected", "rejected"]
        assert runtime.load_randomness(requested).output == round1["output"]

