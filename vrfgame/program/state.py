"""
계정 상태 머신: RandomnessAccount, GameAccount
================================================

**RandomnessAccount**:
  Uninitialized ──request──▶ Requested ──fulfill──▶ Fulfilled
                                 ▲                      │
                                 └──────request─────────┘

  - output / proof 는 Fulfilled 일 때만 존재한다.
  - fulfill 은 authority 만 가능하며, 시드 하나당 정확히 한 번만 성공한다.
  - nonce 는 request 마다 1씩 증가하며 이행 주기(cycle)를 식별한다.

**GameAccount**:
  AwaitingGuess ──play──▶ Resolved

  - 참조하는 RandomnessAccount 가 Fulfilled 일 때만 play 가능.
  - 이행 주기당 한 번만 추측할 수 있다. RandomnessAccount 의 nonce 가
    증가(새 주기가 이행)하면 다시 한 번 play 할 수 있다.
  - GameAccount 는 RandomnessAccount 를 읽기만 하고 절대 수정하지 않는다.

모든 전이 메서드는 검사를 먼저 끝낸 뒤에만 필드를 변경한다.
따라서 예외가 발생하면 계정은 이전 상태 그대로 남는다.
"""

from enum import IntEnum

from vrfgame.crypto.field import POINT_LEN
from vrfgame.crypto.proof import Proof, PROOF_LEN
from vrfgame.crypto.prover import OUTPUT_LEN, validate_seed
from vrfgame.crypto.verifier import verify
from vrfgame.errors import (
    AlreadyResolved, GuessOutOfRange, InvalidAccountData, InvalidSeed,
    InvalidStateTransition, ProofInvalid, RandomnessNotReady, Unauthorized,
)
from vrfgame.program import consumer
from vrfgame.program import encoding
from vrfgame.program.encoding import EncodingError


class AccountKind(IntEnum):
    RANDOMNESS = 1
    GAME = 2


class RandomnessState(IntEnum):
    UNINITIALIZED = 0
    REQUESTED = 1
    FULFILLED = 2


class GameState(IntEnum):
    AWAITING_GUESS = 0
    RESOLVED = 1


class GameResult(IntEnum):
    WIN = 0
    LOSE = 1


# ─────────────────────────────────────────────────────────────────────
# RandomnessAccount
# ─────────────────────────────────────────────────────────────────────

class RandomnessAccount:
    """VRF 요청/이행 상태를 보관하는 계정.

    속성:
        authority: 이행 권한을 가진 공개키 (33바이트)
        state: RandomnessState
        seed: 현재 주기의 시드
        output: 32바이트 출력값 (Fulfilled 일 때만)
        proof: 81바이트 증명 (Fulfilled 일 때만)
        nonce: 지금까지의 request 횟수
    """

    KIND = AccountKind.RANDOMNESS

    def __init__(self, authority, state=RandomnessState.UNINITIALIZED,
                 seed=b"", output=None, proof=None, nonce=0):
        self.authority = bytes(authority)
        self.state = RandomnessState(state)
        self.seed = bytes(seed)
        self.output = output
        self.proof = proof
        self.nonce = nonce

    @classmethod
    def initialize(cls, authority):
        """새 계정을 Uninitialized 상태로 만든다.

        이미 존재하는 계정에 대한 AlreadyInitialized 검사는
        저장소를 알고 있는 processor 가 담당한다.
        """
        return cls(authority)

    @property
    def is_fulfilled(self):
        return self.state == RandomnessState.FULFILLED

    def request(self, seed):
        """새 시드로 난수를 요청한다.

        Raises:
            InvalidStateTransition: Requested 상태에서 호출될 때
                (이행 대기 중인 요청을 덮어쓸 수 없다)
            InvalidSeed: 시드가 비었거나 너무 길 때, 또는 방금 이행된 시드와 같을 때
        """
        if self.state == RandomnessState.REQUESTED:
            raise InvalidStateTransition("a request is already pending fulfillment")
        seed = validate_seed(seed)
        # 같은 시드로 되돌리면 이전 이행 트랜잭션이 그대로 다시 유효해진다
        if self.state == RandomnessState.FULFILLED and seed == self.seed:
            raise InvalidSeed("seed was already fulfilled on this account")

        self.seed = seed
        self.output = None
        self.proof = None
        self.nonce += 1
        self.state = RandomnessState.REQUESTED

    def fulfill(self, caller, output, proof):
        """authority 가 제출한 (output, proof) 를 검증하고 기록한다.

        신뢰할 수 없는 난수가 영구 상태로 들어오는 유일한 관문이다.

        Raises:
            InvalidStateTransition: Requested 상태가 아닐 때 (재이행 방지)
            Unauthorized: caller 가 authority 가 아닐 때
            MalformedProofEncoding: 증명 바이트열을 해석할 수 없을 때
            ProofInvalid: 증명이 검증되지 않을 때
        """
        if self.state != RandomnessState.REQUESTED:
            raise InvalidStateTransition(
                f"cannot fulfill from state {self.state.name}"
            )
        if bytes(caller) != self.authority:
            raise Unauthorized()
        Proof.from_bytes(proof)
        if not verify(self.authority, self.seed, output, proof):
            raise ProofInvalid()

        self.output = bytes(output)
        self.proof = bytes(proof)
        self.state = RandomnessState.FULFILLED

    def winning_number(self):
        if not self.is_fulfilled:
            return None
        return consumer.derive(self.output)

    # ─── 직렬화 ───

    def to_bytes(self):
        return encoding.dumps([
            int(self.KIND),
            self.authority,
            int(self.state),
            self.nonce,
            self.seed,
            self.output,
            self.proof,
        ])

    @classmethod
    def from_bytes(cls, data):
        try:
            fields = encoding.expect_len(encoding.loads(data), 7, "randomness account")
            kind, authority, state, nonce, seed, output, proof = fields
            if encoding.expect_int(kind, "kind") != cls.KIND:
                raise EncodingError("not a randomness account")
            authority = encoding.expect_bytes(authority, "authority", POINT_LEN)
            state = RandomnessState(encoding.expect_int(state, "state"))
            nonce = encoding.expect_int(nonce, "nonce")
            seed = encoding.expect_bytes(seed, "seed")
            output = encoding.optional(output, encoding.expect_bytes, "output", OUTPUT_LEN)
            proof = encoding.optional(proof, encoding.expect_bytes, "proof", PROOF_LEN)
        except ValueError as exc:
            raise InvalidAccountData(f"randomness account: {exc}") from exc

        fulfilled = state == RandomnessState.FULFILLED
        if (output is not None) != fulfilled or (proof is not None) != fulfilled:
            raise InvalidAccountData("output/proof must be present iff fulfilled")
        return cls(authority, state, seed, output, proof, nonce)

    def __eq__(self, other):
        return isinstance(other, RandomnessAccount) and self.to_bytes() == other.to_bytes()

    def __repr__(self):
        return (f"RandomnessAccount(authority={self.authority.hex()[:12]}..., "
                f"state={self.state.name}, nonce={self.nonce})")


# ─────────────────────────────────────────────────────────────────────
# GameAccount
# ─────────────────────────────────────────────────────────────────────

class GameAccount:
    """숫자 맞추기 게임 계정.

    속성:
        vrf_ref: 참조하는 RandomnessAccount 의 계정 ID
        player: 플레이어 공개키 (33바이트)
        state: GameState
        guess, winning_number, result, cycle: 판정 시 함께 기록된다
    """

    KIND = AccountKind.GAME

    def __init__(self, vrf_ref, player, state=GameState.AWAITING_GUESS,
                 guess=None, winning_number=None, result=None, cycle=None):
        self.vrf_ref = vrf_ref
        self.player = bytes(player)
        self.state = GameState(state)
        self.guess = guess
        self.winning_number = winning_number
        self.result = None if result is None else GameResult(result)
        self.cycle = cycle

    @classmethod
    def initialize(cls, vrf_ref, player):
        return cls(vrf_ref, player)

    def play(self, vrf_account, guess):
        """추측을 제출하고 게임을 판정한다.

        Args:
            vrf_account: vrf_ref 로 조회한 RandomnessAccount (읽기 전용)
            guess: 0 ~ 99

        Returns:
            GameResult

        Raises:
            RandomnessNotReady, GuessOutOfRange, AlreadyResolved
        """
        if not vrf_account.is_fulfilled:
            raise RandomnessNotReady()
        if isinstance(guess, bool) or not isinstance(guess, int) or not 0 <= guess < consumer.WINNING_RANGE:
            raise GuessOutOfRange(f"guess {guess!r} is not in [0, {consumer.WINNING_RANGE})")
        if self.state == GameState.RESOLVED and self.cycle == vrf_account.nonce:
            raise AlreadyResolved()

        winning_number = consumer.derive(vrf_account.output)
        result = GameResult.WIN if guess == winning_number else GameResult.LOSE

        self.guess = guess
        self.winning_number = winning_number
        self.result = result
        self.cycle = vrf_account.nonce
        self.state = GameState.RESOLVED
        return result

    # ─── 직렬화 ───

    def to_bytes(self):
        return encoding.dumps([
            int(self.KIND),
            self.vrf_ref,
            self.player,
            int(self.state),
            self.guess,
            self.winning_number,
            None if self.result is None else int(self.result),
            self.cycle,
        ])

    @classmethod
    def from_bytes(cls, data):
        try:
            fields = encoding.expect_len(encoding.loads(data), 8, "game account")
            kind, vrf_ref, player, state, guess, winning_number, result, cycle = fields
            if encoding.expect_int(kind, "kind") != cls.KIND:
                raise EncodingError("not a game account")
            vrf_ref = encoding.expect_str(vrf_ref, "vrf_ref")
            player = encoding.expect_bytes(player, "player", POINT_LEN)
            state = GameState(encoding.expect_int(state, "state"))
            guess = encoding.optional(guess, encoding.expect_int, "guess", 0, 255)
            winning_number = encoding.optional(
                winning_number, encoding.expect_int, "winning_number", 0, 255,
            )
            result = encoding.optional(result, encoding.expect_int, "result")
            result = None if result is None else GameResult(result)
            cycle = encoding.optional(cycle, encoding.expect_int, "cycle")
        except ValueError as exc:
            raise InvalidAccountData(f"game account: {exc}") from exc

        resolved = state == GameState.RESOLVED
        fields = (guess, winning_number, result, cycle)
        if any((f is not None) != resolved for f in fields):
            raise InvalidAccountData("guess/result must be present iff resolved")
        return cls(vrf_ref, player, state, guess, winning_number, result, cycle)

    def __eq__(self, other):
        return isinstance(other, GameAccount) and self.to_bytes() == other.to_bytes()

    def __repr__(self):
        return (f"GameAccount(vrf_ref={self.vrf_ref!r}, state={self.state.name}, "
                f"guess={self.guess}, result={self.result.name if self.result is not None else None})")


def decode_account(data):
    """첫 필드(kind)를 보고 알맞은 계정 타입으로 디코딩한다."""
    try:
        fields = encoding.loads(data)
    except EncodingError as exc:
        raise InvalidAccountData(f"account: {exc}") from exc
    kind = fields[0] if fields else None
    if kind == AccountKind.RANDOMNESS:
        return RandomnessAccount.from_bytes(data)
    if kind == AccountKind.GAME:
        return GameAccount.from_bytes(data)
    raise InvalidAccountData(f"unknown account kind {kind!r}")
