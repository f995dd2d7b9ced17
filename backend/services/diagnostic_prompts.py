"""
HVAC Diagnostic Prompts
Deterministic system/user prompt rendering for the diagnostic generator
"""

import logging
from typing import Mapping, Optional, Sequence, Tuple, Union

from models.enums import SystemType
from models.schemas import DiagnosticRequest, PromptPair, StandardReadings

logger = logging.getLogger(__name__)


SYSTEM_TYPE_CONTEXTS: Mapping[SystemType, str] = {
    SystemType.gas_split_ac: """This is a split system with a gas furnace for heating and electric AC for cooling.
- Outdoor condensing unit contains compressor and condenser coil
- Indoor unit contains evaporator coil and gas furnace
- When in cooling mode, focus on refrigerant circuit and airflow
- When in heating mode, focus on gas valve operation, heat exchanger, and combustion efficiency""",

    SystemType.heat_pump_split: """This is a reversible heat pump system that provides both heating and cooling.
- Can reverse refrigerant flow for heating mode
- Outdoor unit contains compressor and coil that acts as condenser (cooling) or evaporator (heating)
- Indoor unit contains coil that acts as evaporator (cooling) or condenser (heating)
- Defrost cycle operation is critical in heating mode
- Check for proper reversing valve operation
- Heating efficiency drops with outdoor temperature""",

    SystemType.gas_pack: """This is a packaged unit containing both gas heating and electric cooling in one cabinet.
- All components in single outdoor unit
- Gas furnace and AC compressor share the same cabinet
- Return air enters unit, conditioned air supplied to building
- Check for proper airflow through combined heat exchanger and evaporator
- Monitor flue gas venting and combustion air intake""",

    SystemType.straight_ac_pack: """This is a packaged air conditioning unit with electric heat or no heating.
- All cooling components in single outdoor cabinet
- May include electric resistance heat strips
- Simpler refrigerant circuit than split systems
- Focus on compressor, condenser, and evaporator performance
- Check condenser coil cleanliness and fan operation""",

    SystemType.dual_fuel: """This is a hybrid system combining heat pump and gas furnace for optimal efficiency.
- Heat pump provides primary heating and all cooling
- Gas furnace provides backup/supplemental heat in extreme cold
- Automatic switchover based on outdoor temperature or efficiency
- Most complex system type requiring analysis of both heat pump and furnace operation
- Check switchover logic and both heating sources""",
}

UNKNOWN_SYSTEM_CONTEXT = "Unknown system type - perform general HVAC analysis"

REFRIGERANT_GUIDANCE = """**Refrigerant Analysis:**
- Use refrigerant-specific pressure-temperature relationships
- Calculate superheat and subcooling based on refrigerant properties
- Consider refrigerant charge level indicators
- Evaluate system efficiency based on refrigerant circuit performance"""

NO_REFRIGERANT_NOTE = (
    "**Note:** Refrigerant information not provided or not applicable for this analysis. "
    "Focus on temperature differentials, airflow, and electrical readings."
)

# The exact object shape the parser expects back. Changing it breaks
# compatibility with stored results.
OUTPUT_CONTRACT = """**CRITICAL - Output Format:**
You MUST return ONLY valid JSON. Do not include any markdown, explanations, or text outside the JSON object.

Return this exact structure:
{
  "system_status": "normal",
  "faults": [
    {
      "severity": "warning",
      "component": "Refrigerant Circuit",
      "issue": "Low subcooling detected",
      "explanation": "Subcooling of 8F is below optimal range indicating possible undercharge",
      "recommended_action": "Check for refrigerant leaks and verify charge level",
      "confidence": 85
    }
  ],
  "metrics": {
    "delta_t": 20,
    "superheat": 12,
    "subcooling": 8,
    "efficiency_rating": "good"
  },
  "summary": "System operating adequately but shows signs of slight refrigerant undercharge. Performance is acceptable but could be optimized.",
  "recommendations": ["Perform leak test", "Verify refrigerant charge", "Monitor performance"]
}

RULES:
- Return ONLY the JSON object, nothing else
- All string values must be properly escaped
- Use double quotes for all strings
- Do not include any newlines within string values
- Ensure all JSON is valid and parseable
- If a metric cannot be calculated, use null not a string"""

# (header, ((key, line template), ...)) in the order they are rendered
READING_GROUPS: Sequence[Tuple[str, Sequence[Tuple[str, str]]]] = (
    ("Temperatures", (
        ("indoor_temp", "Indoor Temp: {}°F"),
        ("outdoor_temp", "Outdoor Temp: {}°F"),
        ("supply_air_temp", "Supply Air: {}°F"),
        ("return_air_temp", "Return Air: {}°F"),
        ("liquid_line_temp", "Liquid Line: {}°F"),
        ("suction_line_temp", "Suction Line: {}°F"),
    )),
    ("Pressures", (
        ("suction_pressure", "Suction: {} PSIG"),
        ("discharge_pressure", "Discharge: {} PSIG"),
        ("liquid_line_pressure", "Liquid Line: {} PSIG"),
    )),
    ("Electrical", (
        ("voltage", "Voltage: {}V"),
        ("amperage", "Amperage: {}A"),
    )),
    ("Airflow", (
        ("static_pressure", "Static Pressure: {} in. w.c."),
        ("cfm", "CFM: {}"),
    )),
    ("Other", (
        ("runtime_minutes", "Runtime: {} minutes"),
        ("filter_condition", "Filter Condition: {}"),
    )),
)

GROUPED_KEYS = frozenset(key for _, lines in READING_GROUPS for key, _ in lines)

CUSTOM_READINGS_HEADER = "Additional Readings"


def format_reading_value(value: Union[int, float, str]) -> str:
    """Render a reading the way a technician would write it (55, not 55.0)"""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class DiagnosticPromptBuilder:
    """Renders the system and user prompts for one DiagnosticRequest"""

    def __init__(self, system_contexts: Optional[Mapping[SystemType, str]] = None):
        self.system_contexts = system_contexts if system_contexts is not None else SYSTEM_TYPE_CONTEXTS

    def build(self, request: DiagnosticRequest) -> PromptPair:
        return PromptPair(
            system=self.build_system_prompt(request.system_type, bool(request.refrigerant)),
            user=self.build_user_prompt(request)
        )

    def system_context(self, system_type: Optional[SystemType]) -> str:
        if system_type is None or system_type not in self.system_contexts:
            logger.warning(f"No prompt context for system type {system_type!r}, using general guidance")
            return UNKNOWN_SYSTEM_CONTEXT
        return self.system_contexts[system_type]

    def build_system_prompt(self, system_type: Optional[SystemType], has_refrigerant: bool) -> str:
        """
        Static domain framing + equipment context + output contract.

        Never includes anything time-dependent so identical requests get
        byte-identical prompts.
        """
        system_type_name = system_type.value if isinstance(system_type, SystemType) else str(system_type)
        refrigerant_section = REFRIGERANT_GUIDANCE if has_refrigerant else NO_REFRIGERANT_NOTE

        return f"""You are an expert HVAC diagnostic AI assistant with deep knowledge of residential and commercial HVAC systems.

Your task is to analyze HVAC system readings and provide accurate diagnostic assessments.

**System Type Being Analyzed:** {system_type_name}

**Key Responsibilities:**
1. Calculate derived performance metrics (ΔT, superheat, subcooling, approach temperature, etc.) from the provided readings
2. Identify potential faults, inefficiencies, or abnormal operating conditions
3. Provide severity ratings (critical, warning, info) for each identified issue
4. Offer specific, actionable recommendations for technicians
5. Consider the specific characteristics of the system type when analyzing

**System Type Context:**
{self.system_context(system_type)}

{refrigerant_section}

**Analysis Guidelines:**
- Normal cooling ΔT (supply-return): 18-22°F for AC systems
- Normal heating ΔT: 30-50°F for heat pumps/furnaces
- Typical superheat range: 8-15°F (varies by system and conditions)
- Typical subcooling range: 10-15°F (varies by system and conditions)
- Consider outdoor ambient conditions in your analysis
- Flag any readings that are outside normal operating ranges
- Provide confidence levels when calculations depend on incomplete data

{OUTPUT_CONTRACT}

Be thorough, accurate, and practical in your analysis. When data is insufficient, acknowledge limitations in the summary."""

    def build_user_prompt(self, request: DiagnosticRequest) -> str:
        system_type = request.system_type.value if request.system_type else ""
        message = "Please analyze the following HVAC system:\n\n"
        message += f"**System Type:** {system_type}\n"

        if request.refrigerant:
            message += f"**Refrigerant Type:** {request.refrigerant}\n"

        message += "\n**System Readings:**\n"
        message += self.render_readings(request.readings)

        if request.user_notes:
            message += f"\n**Technician Notes:** {request.user_notes}\n"

        message += "\n**Please provide a comprehensive diagnostic analysis in the specified JSON format.**"
        return message

    def render_readings(self, readings: StandardReadings) -> str:
        """Fixed category order; a category with no readings gets no header"""
        rendered = ""
        for header, lines in READING_GROUPS:
            present = [
                template.format(format_reading_value(readings[key]))
                for key, template in lines
                if key in readings and readings[key] is not None
            ]
            if present:
                rendered += f"\n{header}:\n" + "\n".join(f"- {line}" for line in present) + "\n"

        custom = [
            f"- {key}: {format_reading_value(value)}"
            for key, value in readings.items()
            if key not in GROUPED_KEYS
        ]
        if custom:
            rendered += f"\n{CUSTOM_READINGS_HEADER}:\n" + "\n".join(custom) + "\n"

        return rendered


prompt_builder = DiagnosticPromptBuilder()
