"""
프로그램 명령(Instruction)
==========================

닫힌(closed) 태그 집합. CBOR 배열 [tag, field...] 로 인코딩한다.

  0 InitRandomness     vrf_account: str, authority: [33]
  1 RequestRandomness  vrf_account: str, seed: bytes
  2 FulfillRandomness  vrf_account: str, output: [32], proof: bytes
  3 InitGame           game_account: str, vrf_account: str, player: [33]
  4 PlayGame           game_account: str, vrf_account: str, guess: 0..255

모든 명령은 vrf_account 를 가진다. 트랜잭션은 이 계정의 nonce(주기)에 묶인다.

트랜잭션마다 decode_instruction 으로 한 번 디코딩한 뒤
processor 가 타입별로 한 번 분기한다.
"""

from dataclasses import dataclass, fields

from vrfgame.crypto.field import POINT_LEN
from vrfgame.crypto.prover import OUTPUT_LEN
from vrfgame.errors import InvalidInstruction
from vrfgame.program import encoding
from vrfgame.program.encoding import EncodingError


@dataclass(frozen=True)
class InitRandomness:
    TAG = 0
    vrf_account: str
    authority: bytes

    def _fields(self):
        return [
            encoding.expect_str(self.vrf_account, "vrf_account"),
            encoding.expect_bytes(self.authority, "authority", POINT_LEN),
        ]


@dataclass(frozen=True)
class RequestRandomness:
    TAG = 1
    vrf_account: str
    seed: bytes

    def _fields(self):
        return [
            encoding.expect_str(self.vrf_account, "vrf_account"),
            encoding.expect_bytes(self.seed, "seed"),
        ]


@dataclass(frozen=True)
class FulfillRandomness:
    TAG = 2
    vrf_account: str
    output: bytes
    proof: bytes

    def _fields(self):
        return [
            encoding.expect_str(self.vrf_account, "vrf_account"),
            encoding.expect_bytes(self.output, "output", OUTPUT_LEN),
            # 증명 길이는 가변으로 둔다. 길이 검증은 ProofVerifier 의 몫이다.
            encoding.expect_bytes(self.proof, "proof"),
        ]


@dataclass(frozen=True)
class InitGame:
    TAG = 3
    game_account: str
    vrf_account: str
    player: bytes

    def _fields(self):
        return [
            encoding.expect_str(self.game_account, "game_account"),
            encoding.expect_str(self.vrf_account, "vrf_account"),
            encoding.expect_bytes(self.player, "player", POINT_LEN),
        ]


@dataclass(frozen=True)
class PlayGame:
    TAG = 4
    game_account: str
    vrf_account: str
    guess: int

    def _fields(self):
        return [
            encoding.expect_str(self.game_account, "game_account"),
            encoding.expect_str(self.vrf_account, "vrf_account"),
            encoding.expect_int(self.guess, "guess", 0, 255),
        ]


INSTRUCTIONS = {
    cls.TAG: cls
    for cls in (InitRandomness, RequestRandomness, FulfillRandomness, InitGame, PlayGame)
}


def encode_instruction(instruction):
    """Instruction → bytes.

    Raises:
        InvalidInstruction: 필드 타입, 길이, 범위가 맞지 않을 때
    """
    try:
        return encoding.dumps([instruction.TAG] + instruction._fields())
    except EncodingError as exc:
        raise InvalidInstruction(f"{type(instruction).__name__}: {exc}") from exc


def decode_instruction(data):
    """bytes → Instruction.

    Raises:
        InvalidInstruction: 알 수 없는 태그, 잘린 데이터, 남는 바이트, 잘못된 필드
    """
    try:
        items = encoding.loads(data)
        if not items:
            raise EncodingError("empty instruction")
        tag = encoding.expect_int(items[0], "tag")
        cls = INSTRUCTIONS.get(tag)
        if cls is None:
            raise InvalidInstruction(f"unknown instruction tag {tag}")
        encoding.expect_len(items[1:], len(fields(cls)), cls.__name__)
        instruction = cls(*items[1:])
        instruction._fields()
    except EncodingError as exc:
        raise InvalidInstruction(str(exc)) from exc
    return instruction
