import pytest

from models.enums import SystemType
from models.schemas import DiagnosticRequest
from services.diagnostic_prompts import (
    NO_REFRIGERANT_NOTE,
    REFRIGERANT_GUIDANCE,
    SYSTEM_TYPE_CONTEXTS,
    DiagnosticPromptBuilder,
    format_reading_value,
    prompt_builder,
)


def make_request(**overrides) -> DiagnosticRequest:
    fields = dict(
        system_type=SystemType.gas_split_ac,
        refrigerant="R-410A",
        readings={
            "cfm": 1200,
            "custom_probe": 42.5,
            "supply_air_temp": 55.0,
            "voltage": 240,
            "return_air_temp": 75,
            "filter_condition": "Dirty",
        },
        user_notes="Short cycling",
        model_id="gemini-2.0-flash",
        api_key="secret-key",
    )
    fields.update(overrides)
    return DiagnosticRequest(**fields)


class TestUserPrompt:

    def test_golden_grouping_order(self):
        expected = (
            "Please analyze the following HVAC system:\n\n"
            "**System Type:** Gas Split AC System\n"
            "**Refrigerant Type:** R-410A\n"
            "\n**System Readings:**\n"
            "\nTemperatures:\n- Supply Air: 55°F\n- Return Air: 75°F\n"
            "\nElectrical:\n- Voltage: 240V\n"
            "\nAirflow:\n- CFM: 1200\n"
            "\nOther:\n- Filter Condition: Dirty\n"
            "\nAdditional Readings:\n- custom_probe: 42.5\n"
            "\n**Technician Notes:** Short cycling\n"
            "\n**Please provide a comprehensive diagnostic analysis in the specified JSON format.**"
        )
        assert prompt_builder.build(make_request()).user == expected

    def test_empty_categories_have_no_header(self):
        user = prompt_builder.build(make_request(readings={"suction_pressure": 118})).user
        assert "\nPressures:\n- Suction: 118 PSIG\n" in user
        for header in ("Temperatures:", "Electrical:", "Airflow:", "Other:", "Additional Readings:"):
            assert header not in user

    def test_optional_fields_omitted(self):
        user = prompt_builder.build(make_request(refrigerant=None, user_notes=None)).user
        assert "Refrigerant Type" not in user
        assert "Technician Notes" not in user

    def test_custom_keys_keep_insertion_order(self):
        user = prompt_builder.build(make_request(readings={"zeta": 1, "alpha": 2})).user
        assert user.index("- zeta: 1") < user.index("- alpha: 2")

    def test_api_key_never_in_prompts(self):
        prompt = prompt_builder.build(make_request())
        assert "secret-key" not in prompt.system
        assert "secret-key" not in prompt.user


class TestSystemPrompt:

    @pytest.mark.parametrize("system_type", list(SystemType))
    def test_equipment_context_included(self, system_type):
        system = prompt_builder.build(make_request(system_type=system_type)).system
        assert f"**System Type Being Analyzed:** {system_type.value}" in system
        assert SYSTEM_TYPE_CONTEXTS[system_type] in system

    def test_refrigerant_guidance_gated(self):
        with_refrigerant = prompt_builder.build(make_request()).system
        without = prompt_builder.build(make_request(refrigerant="")).system
        assert REFRIGERANT_GUIDANCE in with_refrigerant
        assert NO_REFRIGERANT_NOTE not in with_refrigerant
        assert NO_REFRIGERANT_NOTE in without

    def test_output_contract(self):
        system = prompt_builder.build(make_request()).system
        for key in ('"system_status"', '"faults"', '"metrics"', '"summary"', '"recommendations"',
                    '"severity"', '"component"', '"issue"', '"explanation"', '"recommended_action"',
                    '"confidence"'):
            assert key in system
        assert "Return ONLY the JSON object, nothing else" in system
        assert "use null not a string" in system
        assert "Do not include any newlines within string values" in system

    def test_deterministic(self):
        assert prompt_builder.build(make_request()) == prompt_builder.build(make_request())

    def test_custom_context_profile(self):
        builder = DiagnosticPromptBuilder({SystemType.gas_pack: "Rooftop unit notes"})
        assert "Rooftop unit notes" in builder.build(make_request(system_type=SystemType.gas_pack)).system
        assert "perform general HVAC analysis" in builder.build(make_request()).system


@pytest.mark.parametrize("value,expected", [(55.0, "55"), (55.5, "55.5"), (-0.0, "0"), (240, "240"), ("Dirty", "Dirty")])
def test_format_reading_value(value, expected):
    assert format_reading_value(value) == expected
