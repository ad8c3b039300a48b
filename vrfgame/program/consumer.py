"""
RandomnessConsumer: VRF 출력값 → 당첨 번호
===========================================

당첨 번호 = int(output, 빅엔디안) mod 100

클라이언트 측 예측과 온체인 판정이 반드시 같은 해석(빅엔디안 전체 정수)을
사용해야 한다. 엔디안이 다르면 검증은 통과해도 당첨 번호가 어긋난다.
"""

from vrfgame.crypto.prover import OUTPUT_LEN


WINNING_RANGE = 100


def derive(output):
    """32바이트 VRF 출력값에서 [0, 100) 범위의 당첨 번호를 계산한다.

    Raises:
        ValueError: output 이 32바이트가 아닐 때
    """
    if len(output) != OUTPUT_LEN:
        raise ValueError(f"output must be {OUTPUT_LEN} bytes, got {len(output)}")
    return int.from_bytes(bytes(output), "big") % WINNING_RANGE


def predict(output, guess):
    """guess 가 당첨인지 미리 계산한다 (클라이언트 측)."""
    return derive(output) == guess
