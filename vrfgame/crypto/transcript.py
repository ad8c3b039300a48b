"""
VRF 도메인 분리 해시 트랜스크립트
=================================

VRF 의 모든 해시 연산(hash-to-curve, 챌린지, 출력값)은
하나의 스위트 문자열(suite string)과 단계별 구분 바이트로 도메인이 분리된다.

  hash_to_curve : SUITE || 0x01 || PK || seed || ctr || 0x00
  challenge     : SUITE || 0x02 || PK || H || Γ || U || V || 0x00
  proof_to_hash : SUITE || 0x03 || Γ || 0x00

**Fiat-Shamir 챌린지**:
  DLEQ 증명은 원래 대화식 프로토콜이다 (Prover 가 U, V 를 보내면
  Verifier 가 c 를 보낸다). Prover 와 Verifier 가 같은 순서로 점을
  추가하면 동일한 c 를 얻는다.

사용 예시:
    >>> t = Transcript(CHALLENGE_DST)
    >>> t.append_point(public)
    >>> c = t.challenge_scalar()
"""

import hashlib

from vrfgame.crypto.field import encode_point


# 스위트 문자열 (BN254 G1, SHA-256, try-and-increment)
SUITE = b"VRFGAME-BN254-SHA256-TAI"

HASH_TO_CURVE_DST = b"\x01"
CHALLENGE_DST = b"\x02"
PROOF_TO_HASH_DST = b"\x03"
FRONT_END = b"\x00"

# 챌린지 길이 (바이트). c 는 128비트 정수이다.
CHALLENGE_LEN = 16


class Transcript:
    """SHA-256 기반 도메인 분리 트랜스크립트.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열
    """

    def __init__(self, domain):
        self.state = bytearray()
        self.state.extend(SUITE)
        self.state.extend(domain)

    def append_bytes(self, data):
        self.state.extend(data)

    def append_point(self, point):
        """G1 점을 압축 인코딩(33바이트)으로 추가한다."""
        self.state.extend(encode_point(point))

    def digest(self):
        """종결 바이트(0x00)를 붙여 SHA-256 다이제스트를 반환한다."""
        return hashlib.sha256(bytes(self.state) + FRONT_END).digest()

    def challenge_scalar(self):
        """다이제스트 앞 CHALLENGE_LEN 바이트를 챌린지 정수로 해석한다.

        c < 2^128 < q 이므로 모듈러 축소가 필요 없다.
        """
        return int.from_bytes(self.digest()[:CHALLENGE_LEN], "big")
