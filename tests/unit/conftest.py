import pytest

from fakes import FakeClock, FakeSession
from patient_ui.core.config import PatientConfig
from patient_ui.core.driver import PatientDriver
from patient_ui.utils import timing
from patient_ui.utils.timing import PatientWait


@pytest.fixture(autouse=True)
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr(timing, "now_ms", fake.now_ms)
    monkeypatch.setattr(timing, "sleep_ms", fake.sleep_ms)
    return fake


@pytest.fixture
def config() -> PatientConfig:
    return PatientConfig(
        wait=PatientWait.fixed(100),
        present_timeout_ms=1000,
        not_present_timeout_ms=500,
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def driver(session, config) -> PatientDriver:
    return PatientDriver(lambda: session, config=config)
