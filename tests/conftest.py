import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest

from websess.auth.manager import SessionManager
from websess.auth.passwords import PasswordHasher
from websess.auth.session import SessionStore
from websess.auth.users import CredentialStore
from websess.config import Settings


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    # Cheapest argon2 parameters; production cost comes from Settings.
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def credentials(hasher) -> CredentialStore:
    return CredentialStore(hasher)


@pytest.fixture()
def sessions(clock) -> SessionStore:
    return SessionStore(idle_timeout=600, sweep_interval=60, clock=clock)


@pytest.fixture()
def manager(credentials, sessions) -> SessionManager:
    return SessionManager(credentials, sessions)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        users_path=tmp_path / "data" / "users.yml",
        idle_timeout_seconds=600,
        hash_time_cost=1,
        hash_memory_cost=8,
        hash_parallelism=1,
    )
