"""
VRF 게임 클라이언트
====================

Runtime 에 서명된 트랜잭션을 제출하는 얇은 래퍼.

  VrfClient : payer 키로 계정 생성, 난수 요청, 추측 제출, 계정 조회
  Oracle    : authority 키로 대기 중인 요청을 이행 (ProofEngine 호출)

사용 예시:
    >>> client = VrfClient(runtime, payer)
    >>> client.initialize_vrf("vrf-1", authority=oracle_keys.public_bytes)
    >>> client.initialize_game("game-1", "vrf-1")
    >>> client.request_randomness("vrf-1", b"round-1")
    >>> Oracle(runtime, oracle_keys).fulfill("vrf-1")
    >>> client.submit_guess("game-1", "vrf-1", 42)
"""

import logging
import secrets
import time

from vrfgame.crypto.prover import generate
from vrfgame.crypto.verifier import verify
from vrfgame.errors import ProofInvalid
from vrfgame.program.instruction import (
    FulfillRandomness, InitGame, InitRandomness, PlayGame, RequestRandomness,
)
from vrfgame.program.state import RandomnessState
from vrfgame.program.transaction import Transaction


logger = logging.getLogger(__name__)


class VrfClient:

    def __init__(self, runtime, payer):
        self.runtime = runtime
        self.payer = payer

    def send(self, instruction, signer=None):
        """vrf_account 의 현재 주기(nonce)에 묶어 서명하고 제출한다."""
        nonce = self.runtime.current_cycle(instruction.vrf_account)
        tx = Transaction.create(signer or self.payer, instruction, nonce)
        return self.runtime.process_transaction(tx)

    def initialize_vrf(self, vrf_account, authority=None):
        """authority 를 생략하면 payer 가 authority 가 된다."""
        authority = authority or self.payer.public_bytes
        return self.send(InitRandomness(vrf_account, authority))

    def initialize_game(self, game_account, vrf_account, player=None):
        player = player or self.payer.public_bytes
        return self.send(InitGame(game_account, vrf_account, player))

    def request_randomness(self, vrf_account, seed=None):
        """seed 를 생략하면 32바이트 난수 시드를 사용한다."""
        if seed is None:
            seed = secrets.token_bytes(32)
        logger.info("requesting randomness on %s with seed %s", vrf_account, seed.hex())
        return self.send(RequestRandomness(vrf_account, seed))

    def submit_guess(self, game_account, vrf_account, guess, player=None):
        return self.send(PlayGame(game_account, vrf_account, guess), signer=player)

    def get_vrf_account_data(self, vrf_account):
        return self.runtime.load_randomness(vrf_account)

    def get_game_account_data(self, game_account):
        return self.runtime.load_game(game_account)

    def wait_for_game_state(self, game_account, expected_state, attempts=30, interval=2.0):
        for _ in range(attempts):
            game = self.get_game_account_data(game_account)
            if game.state == expected_state:
                return game
            time.sleep(interval)
        raise TimeoutError("Timed out waiting for game state change")


class Oracle:
    """단일 authority 이행자.

    계정에 기록된 시드로 증명을 만들고, 제출 전에 로컬에서 한 번 더 검증한다.
    """

    def __init__(self, runtime, keys):
        self.runtime = runtime
        self.keys = keys

    def is_pending(self, vrf_account):
        account = self.runtime.load_randomness(vrf_account)
        return (account.state == RandomnessState.REQUESTED
                and account.authority == self.keys.public_bytes)

    def fulfill(self, vrf_account):
        account = self.runtime.load_randomness(vrf_account)
        output, proof = generate(self.keys.secret, account.seed)
        if not verify(self.keys.public_bytes, account.seed, output, proof):
            raise ProofInvalid("locally generated proof failed verification")
        tx = Transaction.create(
            self.keys, FulfillRandomness(vrf_account, output, proof), account.nonce,
        )
        return self.runtime.process_transaction(tx)
