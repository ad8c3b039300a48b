"""
VRF Verifier
=============

공개 정보만으로 VRF 출력값과 증명을 검증한다.

**검증 과정**:
  1. Y, π = (Γ, c, s) 디코딩 (실패하면 False)
  2. H = hash_to_curve(Y, α)
  3. U = s·G - c·Y
     V = s·H - c·Γ
  4. c == challenge(Y, H, Γ, U, V) 확인
  5. β == proof_to_hash(Γ) 확인

**정당성**:
  s = k + c·x 이면
    s·G - c·Y = k·G + c·x·G - c·x·G = k·G
    s·H - c·Γ = k·H + c·x·H - c·x·H = k·H
  이므로 Prover 가 계산한 (U, V) 가 그대로 복원된다.

verify 는 부작용이 없는 순수 함수이며, 잘못된 입력에도 예외를 던지지 않는다.
"""

import hmac
import logging

from vrfgame.crypto.field import (
    G1, ec_mul, ec_sub, decode_point, encode_point, is_on_curve,
)
from vrfgame.crypto.hash_to_curve import hash_to_curve
from vrfgame.crypto.proof import Proof
from vrfgame.crypto.prover import (
    MAX_SEED_LENGTH, OUTPUT_LEN, challenge, gamma_to_hash,
)
from vrfgame.errors import MalformedProofEncoding


logger = logging.getLogger(__name__)


def proof_to_hash(proof):
    """증명 바이트열 → 출력값 β (검증 없이).

    Raises:
        MalformedProofEncoding
    """
    return gamma_to_hash(Proof.from_bytes(proof).gamma)


def _decode_public(public):
    if isinstance(public, (bytes, bytearray)):
        try:
            return decode_point(public)
        except ValueError as exc:
            raise MalformedProofEncoding(f"공개키 디코딩 실패: {exc}") from exc
    if public is None:
        raise MalformedProofEncoding("공개키가 무한원점입니다")
    try:
        if not is_on_curve(public):
            raise MalformedProofEncoding("공개키가 곡선 위에 있지 않습니다")
        # 좌표를 FQ 로 정규화한다
        return decode_point(encode_point(public))
    except (TypeError, ValueError) as exc:
        raise MalformedProofEncoding(f"공개키 형식 오류: {exc}") from exc


def verify(public, seed, output, proof):
    """VRF 증명을 검증한다.

    Args:
        public: 공개키 (33바이트 압축 인코딩 또는 G1 점)
        seed: 시드 바이트열
        output: 주장된 출력값 (32바이트)
        proof: 증명 바이트열 (81바이트)

    Returns:
        bool: 검증 성공 여부
    """
    if not isinstance(seed, (bytes, bytearray)) or not 0 < len(seed) <= MAX_SEED_LENGTH:
        return False
    if not isinstance(output, (bytes, bytearray)) or len(output) != OUTPUT_LEN:
        return False

    try:
        y_point = _decode_public(public)
        pi = Proof.from_bytes(proof)
    except MalformedProofEncoding as exc:
        logger.debug("malformed VRF input: %s", exc)
        return False

    h_point = hash_to_curve(y_point, bytes(seed))

    # U = s·G - c·Y,  V = s·H - c·Γ
    u_point = ec_sub(ec_mul(G1, pi.s), ec_mul(y_point, pi.c))
    v_point = ec_sub(ec_mul(h_point, pi.s), ec_mul(pi.gamma, pi.c))
    if u_point is None or v_point is None:
        return False

    if challenge(y_point, h_point, pi.gamma, u_point, v_point) != pi.c:
        return False

    return hmac.compare_digest(gamma_to_hash(pi.gamma), bytes(output))
