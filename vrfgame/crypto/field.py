"""
VRF 기반 모듈: G1 점 연산 및 점 인코딩
======================================

VRF 증명 생성/검증 전체에서 사용되는 기본 대수적 도구를 정의한다.

**G1 그룹**:
  y² = x³ + 3 (mod p) 위의 점. 코팩터(cofactor)가 1이므로
  곡선 위의 모든 유한 점이 소수 위수 q 의 부분군에 속한다.
  무한원점(항등원)은 py_ecc 관례대로 None 으로 표현한다.

**점 인코딩 (33 바이트 압축형)**:
  prefix(0x02: y 짝수, 0x03: y 홀수) || x (32바이트 빅엔디안)
  공개키, Γ, 서명의 R 값이 모두 이 형식으로 직렬화된다.

사용 예시:
    >>> from vrfgame.crypto.field import G1, ec_mul, encode_point, decode_point
    >>> P = ec_mul(G1, 5)
    >>> decode_point(encode_point(P)) == P   # True
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# 곡선 위수 q (스칼라 필드 크기)
CURVE_ORDER = bn128.curve_order

# 기저 필드 크기 p
FIELD_MODULUS = bn128.field_modulus

# 곡선 방정식 y² = x³ + B
CURVE_B = 3

# 압축 점 길이 (prefix 1 + x 32)
POINT_LEN = 33

# 스칼라 직렬화 길이
SCALAR_LEN = 32


# ─────────────────────────────────────────────────────────────────────
# G1 연산
# ─────────────────────────────────────────────────────────────────────

# G1 그룹 생성자
G1 = bn128.G1


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point.

    Args:
        point: G1 위의 점
        scalar: 정수

    Returns:
        scalar · point
    """
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """타원곡선 점의 역원: -point."""
    return bn128.neg(point)


def ec_sub(p1, p2):
    """p1 - p2."""
    return bn128.add(p1, bn128.neg(p2))


def is_on_curve(point):
    """점이 G1 곡선 위에 있는지 확인한다. 무한원점은 True."""
    if point is None:
        return True
    return bn128.is_on_curve(point, bn128.b)


# ─────────────────────────────────────────────────────────────────────
# 점 / 스칼라 직렬화
# ─────────────────────────────────────────────────────────────────────

def sqrt_mod_p(value):
    """p ≡ 3 (mod 4) 이므로 √a = a^((p+1)/4) 이다.

    Returns:
        int 제곱근, 이차잉여가 아니면 None
    """
    value %= FIELD_MODULUS
    root = pow(value, (FIELD_MODULUS + 1) // 4, FIELD_MODULUS)
    if (root * root) % FIELD_MODULUS != value:
        return None
    return root


def encode_point(point):
    """G1 점 → 33바이트 압축 인코딩.

    Raises:
        ValueError: 무한원점은 인코딩하지 않는다
    """
    if point is None:
        raise ValueError("무한원점은 인코딩할 수 없습니다")
    x, y = int(point[0]), int(point[1])
    prefix = b"\x03" if y & 1 else b"\x02"
    return prefix + x.to_bytes(32, "big")


def decode_point(data):
    """33바이트 압축 인코딩 → G1 점.

    prefix 가 0x02/0x03 이 아니거나, x ≥ p 이거나,
    x³ + 3 이 이차잉여가 아니면 ValueError 를 던진다.

    Args:
        data: bytes (길이 33)

    Returns:
        (FQ, FQ) 튜플
    """
    data = bytes(data)
    if len(data) != POINT_LEN:
        raise ValueError(f"점 인코딩 길이는 {POINT_LEN}바이트여야 합니다: {len(data)}")
    prefix = data[0]
    if prefix not in (2, 3):
        raise ValueError(f"잘못된 점 prefix: {prefix:#04x}")
    x = int.from_bytes(data[1:], "big")
    if x >= FIELD_MODULUS:
        raise ValueError("x 좌표가 기저 필드 범위를 벗어났습니다")
    y = sqrt_mod_p(x * x * x + CURVE_B)
    if y is None:
        raise ValueError("x 좌표에 대응하는 곡선 위의 점이 없습니다")
    if (y & 1) != (prefix & 1):
        y = FIELD_MODULUS - y
    return (FQ(x), FQ(y))


def scalar_to_bytes(value, length=SCALAR_LEN):
    """스칼라 → 고정 길이 빅엔디안 바이트열."""
    return (int(value) % CURVE_ORDER).to_bytes(length, "big")
