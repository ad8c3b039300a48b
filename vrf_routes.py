"""
VRF Flask Blueprint
====================

  POST /vrf/transactions      서명된 트랜잭션 제출
  GET  /vrf/accounts          계정 ID 목록
  GET  /vrf/accounts/<id>     계정 조회
  POST /vrf/verify            오프체인 증명 감사 (공개 정보만 사용)
"""

from flask import Blueprint, current_app, jsonify, request

from vrfgame.crypto.verifier import verify
from vrfgame.errors import (
    AccountNotFound, InvalidAccountData, MissingRequiredSignature, StaleTransaction,
    Unauthorized, VrfError,
)
from vrfgame.program.state import decode_account

from vrf_serializers import (
    deserialize_bytes, deserialize_transaction,
    serialize_account, serialize_error,
)

vrf_bp = Blueprint('vrf', __name__, url_prefix='/vrf')

# Runtime 은 app.py 에서 주입
RUNTIME = None


def init_vrf_bp(runtime):
    """app.py 에서 Runtime 을 주입받는다."""
    global RUNTIME
    RUNTIME = runtime


def _status_for(exc):
    if isinstance(exc, (Unauthorized, MissingRequiredSignature)):
        return 403
    if isinstance(exc, AccountNotFound):
        return 404
    if isinstance(exc, StaleTransaction):
        return 409
    if isinstance(exc, InvalidAccountData):
        return 500
    return 400


@vrf_bp.errorhandler(VrfError)
def handle_vrf_error(exc):
    return jsonify(serialize_error(exc)), _status_for(exc)


@vrf_bp.route("/transactions", methods=["POST"])
def submit_transaction():
    """트랜잭션을 실행하고 갱신된 계정을 반환한다."""
    tx = deserialize_transaction(request.get_json(silent=True))
    account_id, account = RUNTIME.process_transaction(tx)
    current_app.logger.info("transaction from %s applied to %s", tx.signer.hex()[:16], account_id)
    return jsonify({
        "ok": True,
        "account_id": account_id,
        "account": serialize_account(account),
    })


@vrf_bp.route("/accounts")
def list_accounts():
    return jsonify({"accounts": RUNTIME.store.ids()})


@vrf_bp.route("/accounts/<account_id>")
def get_account(account_id):
    data = RUNTIME.store.get(account_id)
    if data is None:
        raise AccountNotFound(f"account {account_id!r} does not exist")
    return jsonify(serialize_account(decode_account(data)))


@vrf_bp.route("/verify", methods=["POST"])
def verify_proof():
    """(public_key, seed, output, proof) 를 검증한다."""
    body = request.get_json(silent=True) or {}
    valid = verify(
        deserialize_bytes(body.get("public_key"), "public_key"),
        deserialize_bytes(body.get("seed"), "seed"),
        deserialize_bytes(body.get("output"), "output"),
        deserialize_bytes(body.get("proof"), "proof"),
    )
    return jsonify({"valid": valid})
