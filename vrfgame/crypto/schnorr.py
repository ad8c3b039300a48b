"""
트랜잭션 서명 (Schnorr over BN254 G1)
======================================

트랜잭션 제출자가 주장하는 공개키의 비밀키를 실제로 보유하고 있음을 보장한다.

  서명:  k = H(x || m) mod q,  R = k·G
         e = H(SIG_DST || R || Y || m) mod q
         z = k + e·x (mod q)
         σ = encode(R) || z   (65바이트)

  검증:  z·G == R + e·Y
"""

import hashlib

from vrfgame.crypto.field import (
    CURVE_ORDER, G1, POINT_LEN, SCALAR_LEN,
    ec_add, ec_mul, encode_point, decode_point, scalar_to_bytes,
)


SIG_DST = b"VRFGAME-SCHNORR-BN254-SHA256"

SIGNATURE_LEN = POINT_LEN + SCALAR_LEN


def _challenge(r_bytes, public_bytes, message):
    h = hashlib.sha256(SIG_DST + r_bytes + public_bytes + message).digest()
    return int.from_bytes(h, "big") % CURVE_ORDER


def sign(keys, message):
    """메시지에 서명한다.

    Args:
        keys: KeyMaterial
        message: 서명할 바이트열

    Returns:
        bytes: 65바이트 서명
    """
    message = bytes(message)
    k_string = hashlib.sha512(SIG_DST + scalar_to_bytes(keys.secret) + message).digest()
    k = int.from_bytes(k_string, "big") % CURVE_ORDER or 1
    r_bytes = encode_point(ec_mul(G1, k))
    e = _challenge(r_bytes, keys.public_bytes, message)
    z = (k + e * keys.secret) % CURVE_ORDER
    return r_bytes + z.to_bytes(SCALAR_LEN, "big")


def verify(public_bytes, message, signature):
    """서명을 검증한다. 잘못된 인코딩은 False 를 반환한다."""
    if len(signature) != SIGNATURE_LEN:
        return False
    try:
        r_point = decode_point(signature[:POINT_LEN])
        y_point = decode_point(public_bytes)
    except ValueError:
        return False
    z = int.from_bytes(signature[POINT_LEN:], "big")
    if z >= CURVE_ORDER:
        return False

    e = _challenge(bytes(signature[:POINT_LEN]), bytes(public_bytes), bytes(message))
    lhs = ec_mul(G1, z)
    rhs = ec_add(r_point, ec_mul(y_point, e))
    return lhs == rhs
