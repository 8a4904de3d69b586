from __future__ import annotations

from typing import Any, Dict

import pytest

from rtoc_bot.config import Settings

ENV_NAMES = (
    "TG_BOT_TOKEN",
    "VEHICLES",
    "MASTER_ID",
    "RTOC_API_URL",
    "RTOC_TIMEOUT_SECONDS",
    "RTOC_SWEEP_HOUR",
    "RTOC_SWEEP_MINUTE",
    "RTOC_UTC_OFFSET_HOURS",
    "RTOC_SWEEP_COOLDOWN_MINUTES",
    "RTOC_CHECK_COOLDOWN_MINUTES",
    "RTOC_NOTIFY_ATTEMPTS",
    "RTOC_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings_values() -> Dict[str, Any]:
    return {
        "TG_BOT_TOKEN": "123456:TEST-TOKEN",
        "VEHICLES": "t945cap, T267DFF",
        "MASTER_ID": "424242",
        "RTOC_API_URL": "https://rtoc.example.test/api/check",
    }


@pytest.fixture
def settings(settings_values: Dict[str, Any]) -> Settings:
    return Settings(_env_file=None, **settings_values)


@pytest.fixture
def success_payload() -> Dict[str, Any]:
    return {
        "status": "success",
        "totalPendingAmount": "20000",
        "pending_transactions": [
            {
                "reference": "R1",
                "issued_date": "2024-01-01",
                "operator": "Officer A",
                "vehicle": "T945CAP",
                "licence": "L-1",
                "location": "Dar",
                "offence": "Speeding",
                "charge": "10000",
                "penalty": "20000",
                "status": "UNPAID",
                "receipt": None,
                "paydate": None,
                "pendate": None,
            }
        ],
        "inspection_data": [
            {
                "id": 7,
                "vir_no": "VIR-7",
                "finalresult": "PASSED",
                "inspector": "Inspector B",
                "region": "Dar es Salaam",
                "district": "Ilala",
                "prohibition_on_use": "NO",
                "weight": "1500",
                "licence": "L-1",
                "driver_name": "Driver C",
                "vehicle_passed_for": "Private use",
                "inspection_date": "2024-03-05T10:00:00Z",
                "valid_untill": "2025-03-05T10:00:00Z",
                "noplate": "T945CAP",
                "reason_en": "Annual inspection",
                "remarks": "",
            }
        ],
    }
