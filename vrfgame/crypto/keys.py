"""
VRF 키 쌍 (KeyMaterial)
========================

비밀 스칼라 x 와 공개키 Y = x·G1 으로 구성된다.

  - 비밀키는 계정 데이터나 트랜잭션에 절대 기록되지 않는다.
  - 공개키는 33바이트 압축 점으로 공유된다.
  - 같은 키 쌍이 VRF 증명 생성과 트랜잭션 서명에 모두 사용된다.

사용 예시:
    >>> keys = KeyMaterial.generate(seed=b"authority-1")   # 결정론적 (테스트용)
    >>> keys.public_bytes.hex()
"""

import hashlib
import secrets

from vrfgame.crypto.field import (
    CURVE_ORDER, G1, SCALAR_LEN, ec_mul, encode_point, decode_point,
)


class KeyMaterial:
    """서명/VRF 키 쌍.

    속성:
        secret: 비밀 스칼라 (1 ≤ secret < q)
        public: 공개키 G1 점
    """

    __slots__ = ("_secret", "_public")

    def __init__(self, secret):
        secret = int(secret)
        if not 0 < secret < CURVE_ORDER:
            raise ValueError("비밀키는 [1, q) 범위여야 합니다")
        self._secret = secret
        self._public = ec_mul(G1, secret)

    @classmethod
    def generate(cls, seed=None):
        """새 키 쌍을 생성한다.

        Args:
            seed: 결정론적 생성을 위한 시드 (bytes 또는 str).
                  None 이면 secrets 모듈의 난수를 사용한다.
        """
        if seed is not None:
            if isinstance(seed, str):
                seed = seed.encode()
            h = hashlib.sha256(b"vrfgame-keygen" + seed).digest()
            secret = int.from_bytes(h, "big") % (CURVE_ORDER - 1) + 1
        else:
            secret = secrets.randbelow(CURVE_ORDER - 1) + 1
        return cls(secret)

    @classmethod
    def from_secret_bytes(cls, data):
        if len(data) != SCALAR_LEN:
            raise ValueError(f"비밀키는 {SCALAR_LEN}바이트여야 합니다")
        return cls(int.from_bytes(data, "big"))

    @property
    def secret(self):
        return self._secret

    @property
    def public(self):
        return self._public

    @property
    def public_bytes(self):
        return encode_point(self._public)

    def secret_bytes(self):
        return self._secret.to_bytes(SCALAR_LEN, "big")

    def __eq__(self, other):
        return isinstance(other, KeyMaterial) and self._secret == other._secret

    def __hash__(self):
        return hash(self.public_bytes)

    def __repr__(self):
        return f"KeyMaterial(public={self.public_bytes.hex()})"


def public_from_bytes(data):
    """33바이트 공개키 → G1 점. 잘못된 인코딩이면 ValueError."""
    return decode_point(data)
