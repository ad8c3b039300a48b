"""
VRF 증명 데이터 컨테이너
=========================

증명 π = (Γ, c, s)

  Γ : x·H (VRF 출력 점)
  c : 128비트 챌린지
  s : k + c·x (mod q) 응답

바이트 레이아웃 (총 81바이트):
  encode(Γ) (33) || c (16, 빅엔디안) || s (32, 빅엔디안)
"""

from vrfgame.crypto.field import (
    CURVE_ORDER, POINT_LEN, SCALAR_LEN, encode_point, decode_point,
)
from vrfgame.crypto.transcript import CHALLENGE_LEN
from vrfgame.errors import MalformedProofEncoding


PROOF_LEN = POINT_LEN + CHALLENGE_LEN + SCALAR_LEN


class Proof:
    """VRF 증명.

    속성:
        gamma: G1 점 Γ
        c: 챌린지 (int, < 2^128)
        s: 응답 (int, < q)
    """

    def __init__(self, gamma, c, s):
        self.gamma = gamma
        self.c = c
        self.s = s

    def to_bytes(self):
        return (
            encode_point(self.gamma)
            + self.c.to_bytes(CHALLENGE_LEN, "big")
            + self.s.to_bytes(SCALAR_LEN, "big")
        )

    @classmethod
    def from_bytes(cls, data):
        """81바이트 → Proof.

        Raises:
            MalformedProofEncoding: 길이, Γ 인코딩, s 범위가 잘못되었을 때
        """
        try:
            data = bytes(data)
        except TypeError as exc:
            raise MalformedProofEncoding(f"증명은 바이트열이어야 합니다: {exc}") from exc
        if len(data) != PROOF_LEN:
            raise MalformedProofEncoding(
                f"증명 길이는 {PROOF_LEN}바이트여야 합니다: {len(data)}"
            )
        try:
            gamma = decode_point(data[:POINT_LEN])
        except ValueError as exc:
            raise MalformedProofEncoding(f"Γ 디코딩 실패: {exc}") from exc
        c = int.from_bytes(data[POINT_LEN:POINT_LEN + CHALLENGE_LEN], "big")
        s = int.from_bytes(data[POINT_LEN + CHALLENGE_LEN:], "big")
        if s >= CURVE_ORDER:
            raise MalformedProofEncoding("s 가 곡선 위수 이상입니다")
        return cls(gamma, c, s)

    def __eq__(self, other):
        return (isinstance(other, Proof)
                and self.gamma == other.gamma
                and self.c == other.c
                and self.s == other.s)

    def __repr__(self):
        return f"Proof({self.to_bytes().hex()})"
