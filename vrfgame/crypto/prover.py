"""
VRF Prover (ECVRF 구성)
=========================

비밀키 x 와 시드 α 로부터 출력값 β 와 증명 π 를 생성한다.

**증명 생성 과정**:
  1. H = hash_to_curve(Y, α)
  2. Γ = x·H
  3. k = nonce(x, H)                 (결정론적 논스)
  4. c = challenge(Y, H, Γ, k·G, k·H)
  5. s = k + c·x  (mod q)
  6. π = (Γ, c, s),  β = proof_to_hash(Γ)

(c, s) 는 (H, Γ, Y) 세 값을 묶는 Schnorr 형태의 서명이며,
log_G(Y) = log_H(Γ) 임을 증명한다 (DLEQ).

**결정론성**:
  같은 (x, α) 는 항상 같은 (β, π) 를 만든다. 논스 k 도
  비밀키와 H 로부터 해시로 유도되므로 난수원이 필요 없다.

사용 예시:
    >>> output, proof = generate(keys.secret, b"round-1")
    >>> len(output), len(proof)   # (32, 81)
"""

import hashlib

from vrfgame.crypto.field import (
    CURVE_ORDER, G1, ec_mul, encode_point, scalar_to_bytes,
)
from vrfgame.crypto.hash_to_curve import hash_to_curve
from vrfgame.crypto.proof import Proof
from vrfgame.crypto.transcript import Transcript, CHALLENGE_DST, PROOF_TO_HASH_DST
from vrfgame.errors import InvalidSeed


# 시드 최대 길이 (바이트)
MAX_SEED_LENGTH = 256

OUTPUT_LEN = 32


def validate_seed(seed):
    """시드가 비어 있지 않고 MAX_SEED_LENGTH 이하인지 확인한다.

    Raises:
        InvalidSeed
    """
    if not isinstance(seed, (bytes, bytearray)):
        raise InvalidSeed("시드는 바이트열이어야 합니다")
    if len(seed) == 0:
        raise InvalidSeed("시드가 비어 있습니다")
    if len(seed) > MAX_SEED_LENGTH:
        raise InvalidSeed(f"시드 길이 {len(seed)} 가 최대값 {MAX_SEED_LENGTH} 를 초과합니다")
    return bytes(seed)


def generate_nonce(secret, h_point):
    """결정론적 논스 k.

    k = SHA-512( SHA-512(x)[32:] || encode(H) ) mod q
    """
    hashed_sk = hashlib.sha512(scalar_to_bytes(secret)).digest()
    k_string = hashlib.sha512(hashed_sk[32:] + encode_point(h_point)).digest()
    k = int.from_bytes(k_string, "big") % CURVE_ORDER
    if k == 0:
        raise ValueError("논스가 0 입니다")
    return k


def challenge(public, h_point, gamma, u_point, v_point):
    """c = SHA-256(SUITE || 0x02 || Y || H || Γ || U || V || 0x00)[:16]"""
    t = Transcript(CHALLENGE_DST)
    t.append_point(public)
    t.append_point(h_point)
    t.append_point(gamma)
    t.append_point(u_point)
    t.append_point(v_point)
    return t.challenge_scalar()


def gamma_to_hash(gamma):
    """β = SHA-256(SUITE || 0x03 || encode(Γ) || 0x00)

    bn128 G1 의 코팩터는 1 이므로 Γ 를 그대로 사용한다.
    """
    t = Transcript(PROOF_TO_HASH_DST)
    t.append_point(gamma)
    return t.digest()


def prove(secret, seed):
    """VRF 증명 π 를 생성한다.

    Args:
        secret: 비밀 스칼라 (int)
        seed: 시드 바이트열

    Returns:
        Proof
    """
    seed = validate_seed(seed)
    public = ec_mul(G1, secret)
    h_point = hash_to_curve(public, seed)
    gamma = ec_mul(h_point, secret)

    k = generate_nonce(secret, h_point)
    c = challenge(public, h_point, gamma, ec_mul(G1, k), ec_mul(h_point, k))
    s = (k + c * secret) % CURVE_ORDER

    return Proof(gamma, c, s)


def generate(secret, seed):
    """(비밀키, 시드) → (출력값 32바이트, 증명 81바이트).

    Raises:
        InvalidSeed: 시드가 비었거나 너무 길 때
    """
    proof = prove(secret, seed)
    return gamma_to_hash(proof.gamma), proof.to_bytes()
