"""
VRF 데이터 직렬화/역직렬화 헬퍼
================================

JSON 요청/응답에 쓸 수 있는 형태로 계정, 트랜잭션, 오류를 변환한다.
바이트열은 모두 hex 문자열로 주고받는다.
"""

from vrfgame.errors import InvalidInstruction
from vrfgame.program.state import GameAccount, RandomnessAccount
from vrfgame.program.transaction import Transaction


# ─── bytes ───

def serialize_bytes(data):
    """bytes → hex str or None"""
    if data is None:
        return None
    return bytes(data).hex()


def deserialize_bytes(s, field="value"):
    """hex str → bytes"""
    if not isinstance(s, str):
        raise InvalidInstruction(f"{field} must be a hex string")
    s = s.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError as exc:
        raise InvalidInstruction(f"{field} is not valid hex: {exc}") from exc


# ─── 계정 ───

def serialize_randomness_account(account):
    return {
        "kind": "randomness",
        "authority": serialize_bytes(account.authority),
        "state": account.state.name.lower(),
        "nonce": account.nonce,
        "seed": serialize_bytes(account.seed),
        "output": serialize_bytes(account.output),
        "proof": serialize_bytes(account.proof),
        "winning_number": account.winning_number(),
    }


def serialize_game_account(game):
    return {
        "kind": "game",
        "vrf_ref": game.vrf_ref,
        "player": serialize_bytes(game.player),
        "state": game.state.name.lower(),
        "guess": game.guess,
        "winning_number": game.winning_number,
        "result": game.result.name.lower() if game.result is not None else None,
        "cycle": game.cycle,
    }


def serialize_account(account):
    if isinstance(account, RandomnessAccount):
        return serialize_randomness_account(account)
    if isinstance(account, GameAccount):
        return serialize_game_account(account)
    raise TypeError(f"unknown account type {type(account).__name__}")


# ─── 트랜잭션 ───

def deserialize_nonce(value):
    """JSON 정수 → nonce"""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInstruction("nonce must be a non-negative integer")
    return value


def serialize_transaction(tx):
    return {
        "signer": serialize_bytes(tx.signer),
        "instruction": serialize_bytes(tx.instruction),
        "nonce": tx.nonce,
        "signature": serialize_bytes(tx.signature),
    }


def deserialize_transaction(data):
    if not isinstance(data, dict):
        raise InvalidInstruction("transaction must be a JSON object")
    return Transaction(
        signer=deserialize_bytes(data.get("signer"), "signer"),
        instruction=deserialize_bytes(data.get("instruction"), "instruction"),
        nonce=deserialize_nonce(data.get("nonce")),
        signature=deserialize_bytes(data.get("signature"), "signature"),
    )


# ─── 오류 ───

def serialize_error(exc):
    return {
        "error": exc.kind,
        "code": exc.code,
        "message": str(exc),
    }
