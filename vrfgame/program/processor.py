"""
프로그램 Processor
==================

서명된 트랜잭션 하나를 원자적으로 처리한다.

  1. 서명 검증 (MissingRequiredSignature)
  2. 명령 디코딩 (InvalidInstruction)
  3. nonce 가 vrf_account 의 현재 주기와 같은지 확인 (StaleTransaction)
  4. 명령 타입별 분기 → 계정 로드 → 상태 전이 → 저장

저장소 lock 을 잡은 채로 2~4를 수행하고, 전이가 성공했을 때만
계정 하나를 기록한다. 실패하면 아무것도 쓰지 않으므로 계정 바이트열은
변경되지 않는다. 명령 하나는 최대 두 계정을 읽고 한 계정만 쓴다.
"""

import logging

from vrfgame.crypto.keys import public_from_bytes
from vrfgame.errors import (
    AccountMismatch, AccountNotFound, AlreadyInitialized, InvalidAccountData,
    InvalidInstruction, MissingRequiredSignature, StaleTransaction, Unauthorized,
    VrfError,
)
from vrfgame.program.instruction import (
    FulfillRandomness, InitGame, InitRandomness, PlayGame, RequestRandomness,
    decode_instruction,
)
from vrfgame.program.state import GameAccount, RandomnessAccount


logger = logging.getLogger(__name__)


class Runtime:
    """AccountStore 위에서 트랜잭션을 실행한다."""

    def __init__(self, store):
        self.store = store

    # ─── 계정 로드 ───

    def _load(self, account_id, cls):
        data = self.store.get(account_id)
        if data is None:
            raise AccountNotFound(f"account {account_id!r} does not exist")
        try:
            return cls.from_bytes(data)
        except InvalidAccountData as exc:
            raise InvalidAccountData(f"account {account_id!r}: {exc}") from exc

    def load_randomness(self, account_id):
        return self._load(account_id, RandomnessAccount)

    def load_game(self, account_id):
        return self._load(account_id, GameAccount)

    def current_cycle(self, vrf_account):
        """vrf_account 의 현재 nonce. 아직 없는 계정이면 0."""
        with self.store.lock:
            if not self.store.exists(vrf_account):
                return 0
            return self.load_randomness(vrf_account).nonce

    # ─── 트랜잭션 ───

    def process_transaction(self, tx):
        """트랜잭션을 실행하고 (계정 ID, 갱신된 계정) 을 반환한다.

        Raises:
            VrfError 하위 타입
        """
        if not tx.is_signed():
            logger.warning("rejected transaction: bad signature for %s", tx.signer.hex()[:16])
            raise MissingRequiredSignature()

        with self.store.lock:
            try:
                instruction = decode_instruction(tx.instruction)
                current = self.current_cycle(instruction.vrf_account)
                if tx.nonce != current:
                    raise StaleTransaction(
                        f"signed for cycle {tx.nonce}, {instruction.vrf_account!r} is at {current}"
                    )
                return self.process_instruction(tx.signer, instruction)
            except VrfError as exc:
                logger.warning("rejected transaction from %s: %s (%s)",
                               tx.signer.hex()[:16], exc.kind, exc)
                raise

    def process_instruction(self, signer, instruction):
        """이미 인증된 signer 로 명령을 실행한다."""
        if isinstance(instruction, InitRandomness):
            return self.init_randomness(instruction)
        if isinstance(instruction, RequestRandomness):
            return self.request_randomness(instruction)
        if isinstance(instruction, FulfillRandomness):
            return self.fulfill_randomness(signer, instruction)
        if isinstance(instruction, InitGame):
            return self.init_game(instruction)
        if isinstance(instruction, PlayGame):
            return self.play_game(signer, instruction)
        raise InvalidInstruction(f"unsupported instruction {type(instruction).__name__}")

    def init_randomness(self, ix):
        if self.store.exists(ix.vrf_account):
            raise AlreadyInitialized(f"account {ix.vrf_account!r} already exists")
        _require_public_key(ix.authority, "authority")

        account = RandomnessAccount.initialize(ix.authority)
        self.store.put(ix.vrf_account, account.to_bytes(), kind=account.KIND)
        logger.info("VRF account %s initialized", ix.vrf_account)
        return ix.vrf_account, account

    def request_randomness(self, ix):
        account = self.load_randomness(ix.vrf_account)
        account.request(ix.seed)
        self.store.put(ix.vrf_account, account.to_bytes(), kind=account.KIND)
        logger.info("randomness requested on %s (nonce=%d)", ix.vrf_account, account.nonce)
        return ix.vrf_account, account

    def fulfill_randomness(self, signer, ix):
        account = self.load_randomness(ix.vrf_account)
        account.fulfill(signer, ix.output, ix.proof)
        self.store.put(ix.vrf_account, account.to_bytes(), kind=account.KIND)
        logger.info("randomness fulfilled on %s: %s", ix.vrf_account, account.output.hex())
        return ix.vrf_account, account

    def init_game(self, ix):
        if self.store.exists(ix.game_account):
            raise AlreadyInitialized(f"account {ix.game_account!r} already exists")
        _require_public_key(ix.player, "player")
        # 존재하는 RandomnessAccount 에만 바인딩한다
        self.load_randomness(ix.vrf_account)

        game = GameAccount.initialize(ix.vrf_account, ix.player)
        self.store.put(ix.game_account, game.to_bytes(), kind=game.KIND)
        logger.info("game account %s initialized against %s", ix.game_account, ix.vrf_account)
        return ix.game_account, game

    def play_game(self, signer, ix):
        game = self.load_game(ix.game_account)
        if game.vrf_ref != ix.vrf_account:
            raise AccountMismatch(
                f"game is bound to {game.vrf_ref!r}, not {ix.vrf_account!r}"
            )
        if bytes(signer) != game.player:
            raise Unauthorized("signer is not the game's player")
        vrf_account = self.load_randomness(game.vrf_ref)

        result = game.play(vrf_account, ix.guess)
        self.store.put(ix.game_account, game.to_bytes(), kind=game.KIND)
        logger.info("game %s complete: number=%d guess=%d result=%s",
                    ix.game_account, game.winning_number, game.guess, result.name)
        return ix.game_account, game


def _require_public_key(data, label):
    try:
        public_from_bytes(data)
    except ValueError as exc:
        raise InvalidInstruction(f"{label} is not a valid public key: {exc}") from exc
