import pytest

from vrfgame.client import Oracle, VrfClient
from vrfgame.crypto.keys import KeyMaterial
from vrfgame.crypto.prover import generate
from vrfgame.program.processor import Runtime
from vrfgame.program.store import AccountStore


ROUND_1_SEED = b"round-1"


@pytest.fixture(scope="session")
def authority_keys():
    """authority A (결정론적)."""
    return KeyMaterial.generate(seed=b"authority-A")


@pytest.fixture(scope="session")
def stranger_keys():
    """A 가 아닌 키 B."""
    return KeyMaterial.generate(seed=b"stranger-B")


@pytest.fixture(scope="session")
def player_keys():
    return KeyMaterial.generate(seed=b"player-1")


@pytest.fixture(scope="session")
def round1(authority_keys):
    """A 와 시드 "round-1" 로 만든 (output, proof)."""
    output, proof = generate(authority_keys.secret, ROUND_1_SEED)
    return {"seed": ROUND_1_SEED, "output": output, "proof": proof}


@pytest.fixture
def runtime():
    return Runtime(AccountStore())


@pytest.fixture
def client(runtime, player_keys):
    return VrfClient(runtime, player_keys)


@pytest.fixture
def oracle(runtime, authority_keys):
    return Oracle(runtime, authority_keys)
