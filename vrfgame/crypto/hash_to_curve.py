"""
Hash-to-Curve (try-and-increment)
==================================

시드(seed)를 G1 위의 점 H 로 결정론적으로 사상한다.

  for ctr in 0..255:
      candidate = SHA-256(SUITE || 0x01 || PK || seed || ctr || 0x00)
      H = decode_point(0x02 || candidate)
      성공하면 반환

후보 x 가 p 보다 작고 x³ + 3 이 이차잉여일 확률은 약 1/8 이므로
256번 안에 실패할 확률은 무시할 수 있다.
공개키를 입력에 포함하므로 같은 시드라도 키마다 다른 H 가 나온다.
"""

from vrfgame.crypto.field import decode_point, encode_point
from vrfgame.crypto.transcript import Transcript, HASH_TO_CURVE_DST


def hash_to_curve(public, seed):
    """(공개키, 시드) → G1 점 H.

    Args:
        public: 공개키 G1 점
        seed: 시드 바이트열

    Returns:
        G1 점

    Raises:
        ValueError: 256번의 시도 안에 곡선 위의 점을 찾지 못했을 때
    """
    pk_string = encode_point(public)
    for ctr in range(256):
        t = Transcript(HASH_TO_CURVE_DST)
        t.append_bytes(pk_string)
        t.append_bytes(seed)
        t.append_bytes(bytes([ctr]))
        try:
            return decode_point(b"\x02" + t.digest())
        except ValueError:
            continue
    raise ValueError("hash_to_curve: 유효한 점을 찾지 못했습니다")
