"""
VRF 프로그램 오류 타입
=======================

모든 오류는 VrfError 를 상속하며, 전송 계층(HTTP 응답, 로그)에서
식별할 수 있도록 고정된 숫자 코드(code)를 가진다.

오류는 해당 연산에 대해 종결적(terminal)이다. 내부 재시도는 없으며
거부된 전이는 계정 상태를 바이트 단위로 변경하지 않는다.
"""


class VrfError(Exception):
    """VRF 프로그램 오류의 기반 클래스."""

    code = 0
    message = "VRF program error"

    def __init__(self, message=None):
        super().__init__(message or self.message)

    @property
    def kind(self):
        return type(self).__name__


class InvalidSeed(VrfError):
    code = 1
    message = "Seed is empty or exceeds the maximum length"


class AlreadyInitialized(VrfError):
    code = 2
    message = "Account is already initialized"


class InvalidStateTransition(VrfError):
    code = 3
    message = "Operation is not allowed in the current account state"


class Unauthorized(VrfError):
    code = 4
    message = "Signer is not the account authority"


class ProofInvalid(VrfError):
    code = 5
    message = "Invalid VRF proof"


class MalformedProofEncoding(ProofInvalid):
    """증명 바이트열 자체를 해석할 수 없을 때.

    ProofInvalid 의 하위 타입이므로 fulfill 에서 ProofInvalid 를
    기대하는 호출자도 그대로 처리할 수 있다.
    """
    code = 6
    message = "Proof encoding is malformed"


class RandomnessNotReady(VrfError):
    code = 7
    message = "Randomness not yet available"


class GuessOutOfRange(VrfError):
    code = 8
    message = "Guess must be between 0 and 99"


class AlreadyResolved(VrfError):
    code = 9
    message = "Game is already resolved for this randomness cycle"


class InvalidInstruction(VrfError):
    code = 10
    message = "Invalid instruction"


class MissingRequiredSignature(VrfError):
    code = 11
    message = "Transaction signature does not verify for the claimed signer"


class AccountNotFound(VrfError):
    code = 12
    message = "Account does not exist"


class AccountMismatch(VrfError):
    code = 13
    message = "Account does not match the referenced account"


class InvalidAccountData(VrfError):
    code = 14
    message = "Account data could not be decoded"


class StaleTransaction(VrfError):
    """트랜잭션에 서명된 nonce 가 대상 RandomnessAccount 의 현재 주기와 다를 때.

    이전 주기의 서명된 트랜잭션을 다음 주기에 재전송하는 것을 막는다.
    """
    code = 15
    message = "Transaction is bound to a different randomness cycle"
