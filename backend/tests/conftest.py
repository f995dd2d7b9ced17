"""
Pytest configuration and fixtures
"""
import json
from typing import List, Optional

import pytest

from models.enums import SystemType, UnitTag
from models.schemas import DiagnosticRequest, PromptPair, Reading


class StubGenerator:
    """GeneratorClient stand-in: returns canned text (or raises) and records every call"""

    def __init__(self, response: str = "", error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[tuple] = []

    async def generate(self, prompt: PromptPair, model_id: str) -> str:
        self.calls.append((prompt, model_id))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def well_formed_response() -> str:
    return json.dumps({
        "system_status": "normal",
        "faults": [
            {
                "severity": "info",
                "component": "Airflow",
                "issue": "Delta T within range",
                "explanation": "Supply/return split of 20F is typical for cooling",
                "recommended_action": "No action required",
                "confidence": 90
            }
        ],
        "metrics": {
            "delta_t": 20,
            "superheat": None,
            "efficiency_rating": "good"
        },
        "summary": "System operating normally.",
        "recommendations": ["Replace filter at next visit"]
    })


@pytest.fixture
def make_generator():
    """Factory for StubGenerator instances with a given response or error"""
    return StubGenerator


@pytest.fixture
def stub_generator(well_formed_response) -> StubGenerator:
    return StubGenerator(well_formed_response)


@pytest.fixture
def diagnostic_request() -> DiagnosticRequest:
    return DiagnosticRequest(
        system_type=SystemType.gas_split_ac,
        refrigerant="R-410A",
        readings={"supply_air_temp": 55, "return_air_temp": 75},
        user_notes="Customer reports weak cooling in the afternoon",
        model_id="gemini-2.0-flash",
        api_key="test-key"
    )


@pytest.fixture
def sample_readings() -> List[Reading]:
    return [
        Reading(id="r1", parameter="Supply Temp", value="55", unit=UnitTag.fahrenheit),
        Reading(id="r2", parameter="Return Air Temp", value="24", unit=UnitTag.celsius),
        Reading(id="r3", parameter="Low Side Pressure", value="827.4", unit=UnitTag.kpa),
        Reading(id="r4", parameter="Filter Condition", value="Dirty", unit=UnitTag.text),
    ]
