"""
계정/명령 CBOR 인코딩
=====================

계정, 명령, 서명 메시지는 모두 CBOR 배열 하나로 직렬화된다 (cbor2, canonical 모드).

  RandomnessAccount : [kind, authority, state, nonce, seed, output|null, proof|null]
  GameAccount       : [kind, vrf_ref, player, state, guess|null, winning_number|null,
                       result|null, cycle|null]
  Instruction       : [tag, field...]

디코딩은 정확히 한 개의 배열만 허용한다. 배열이 아니거나, 잘렸거나,
뒤에 바이트가 남으면 EncodingError 를 던진다. 필드 타입은 expect_* 로 검사한다.
"""

from io import BytesIO

import cbor2


U64_MAX = 2 ** 64 - 1


class EncodingError(ValueError):
    pass


def dumps(fields):
    """필드 리스트 → canonical CBOR 배열."""
    return cbor2.dumps(list(fields), canonical=True)


def loads(data):
    """CBOR 배열 → 필드 리스트.

    Raises:
        EncodingError
    """
    try:
        fp = BytesIO(bytes(data))
        value = cbor2.CBORDecoder(fp).decode()
    except (cbor2.CBORDecodeError, ValueError, TypeError, EOFError) as exc:
        raise EncodingError(f"invalid CBOR: {exc}") from exc
    if fp.read(1):
        raise EncodingError("trailing bytes after CBOR item")
    if not isinstance(value, list):
        raise EncodingError(f"expected a CBOR array, got {type(value).__name__}")
    return value


# ─── 필드 검사 ───

def expect_len(fields, count, name):
    if len(fields) != count:
        raise EncodingError(f"{name}: expected {count} fields, got {len(fields)}")
    return fields


def expect_int(value, name, low=0, high=U64_MAX):
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an integer")
    if not low <= value <= high:
        raise EncodingError(f"{name} {value} is not in [{low}, {high}]")
    return value


def expect_bytes(value, name, length=None):
    if not isinstance(value, (bytes, bytearray)):
        raise EncodingError(f"{name} must be bytes")
    if length is not None and len(value) != length:
        raise EncodingError(f"{name}: expected {length} bytes, got {len(value)}")
    return bytes(value)


def expect_str(value, name):
    if not isinstance(value, str):
        raise EncodingError(f"{name} must be a string")
    return value


def optional(value, check, *args):
    """None 은 그대로 통과시키고, 아니면 check(value, *args)."""
    if value is None:
        return None
    return check(value, *args)
