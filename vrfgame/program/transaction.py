"""
서명된 트랜잭션
================

Transaction = (signer 공개키, 명령 바이트열, nonce, signer 의 Schnorr 서명)

서명 메시지는 CBOR 배열 [nonce, 명령 바이트열] 이다.

  - 명령 바이트열 전체에 서명하므로 명령의 어떤 필드를 바꿔도 서명이 깨진다.
  - nonce 는 명령이 가리키는 RandomnessAccount 의 현재 nonce(주기)이다.
    Runtime 은 서명된 nonce 가 현재 주기와 같을 때만 트랜잭션을 실행하므로,
    한 주기에 서명된 트랜잭션은 다음 주기에 재전송해도 받아들여지지 않는다.
"""

from dataclasses import dataclass

from vrfgame.crypto import schnorr
from vrfgame.program import encoding
from vrfgame.program.encoding import EncodingError
from vrfgame.program.instruction import encode_instruction


def signing_message(instruction, nonce):
    return encoding.dumps([encoding.expect_int(nonce, "nonce"), bytes(instruction)])


@dataclass(frozen=True)
class Transaction:
    signer: bytes
    instruction: bytes
    nonce: int
    signature: bytes

    @classmethod
    def create(cls, keys, instruction, nonce):
        """명령을 인코딩하고 (명령, nonce) 에 keys 로 서명한다."""
        data = encode_instruction(instruction)
        return cls(keys.public_bytes, data, nonce, schnorr.sign(keys, signing_message(data, nonce)))

    def is_signed(self):
        try:
            message = signing_message(self.instruction, self.nonce)
        except EncodingError:
            return False
        return schnorr.verify(self.signer, message, self.signature)
