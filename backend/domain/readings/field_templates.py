"""
Per-equipment data-entry templates.

Each system type has an ordered set of sections listing the readings a
technician is expected to take on that equipment, the unit each is usually
measured in, and which troubleshooting mode makes it a priority.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from domain.readings.parameters import slugify
from models.enums import SystemType, TroubleshootingMode, UnitTag
from models.schemas import Reading

logger = logging.getLogger(__name__)

COOLING = TroubleshootingMode.cooling
HEATING = TroubleshootingMode.heating
BOTH = TroubleshootingMode.both


@dataclass(frozen=True)
class FieldTemplate:
    parameter: str
    unit: UnitTag
    section: str
    placeholder: Optional[str] = None
    is_required: bool = False
    priority_modes: Tuple[TroubleshootingMode, ...] = ()


@dataclass(frozen=True)
class SectionTemplate:
    name: str
    fields: Tuple[FieldTemplate, ...]


@dataclass(frozen=True)
class SystemTemplate:
    system_type: SystemType
    sections: Tuple[SectionTemplate, ...]

    def all_fields(self) -> List[FieldTemplate]:
        return [f for section in self.sections for f in section.fields]


@dataclass
class SectionPriorityInfo:
    total_priority: int
    filled_priority: int
    is_priority_section: bool


def _section(name: str, section: str, *rows) -> SectionTemplate:
    fields = []
    for row in rows:
        parameter, unit = row[0], row[1]
        options = row[2] if len(row) > 2 else {}
        fields.append(FieldTemplate(
            parameter=parameter,
            unit=UnitTag(unit),
            section=section,
            placeholder=options.get('placeholder'),
            is_required=options.get('required', False),
            priority_modes=tuple(options.get('modes', ())),
        ))
    return SectionTemplate(name=name, fields=tuple(fields))


_REQUIRED = {'required': True}
_REFRIGERANT = {'placeholder': 'e.g., R-410A'}
_TONS = {'placeholder': 'Tons'}
_PASS_FAIL = {'placeholder': 'Pass/Fail'}
_FILTER = {'placeholder': 'Clean/Dirty/Replace'}
_MICROAMPS = {'placeholder': 'µA'}
_PPM = {'placeholder': 'ppm'}


def _modes(*modes, **extra):
    return {'modes': modes, **extra}


SYSTEM_TEMPLATES: Dict[SystemType, SystemTemplate] = {
    SystemType.gas_split_ac: SystemTemplate(SystemType.gas_split_ac, (
        _section('General Info', 'General Info',
                 ('Outdoor Model #', 'text', {'placeholder': 'e.g., ABC-1234'}),
                 ('Indoor Model #', 'text', {'placeholder': 'e.g., XYZ-5678'}),
                 ('Serial # (Outdoor)', 'text'),
                 ('Serial # (Indoor)', 'text'),
                 ('Refrigerant Type', 'text', _REFRIGERANT),
                 ('System Age', 'text', {'placeholder': 'Years'}),
                 ('System Capacity', 'text', _TONS),
                 ('Ambient Temp', '°F', _REQUIRED),
                 ('Relative Humidity', 'text', {'placeholder': '%'})),
        _section('Cooling Readings', 'Cooling Readings',
                 ('Suction Pressure', 'PSI', _modes(COOLING, BOTH)),
                 ('Head Pressure', 'PSI', _modes(COOLING, BOTH)),
                 ('Suction Line Temp', '°F', _modes(COOLING, BOTH)),
                 ('Liquid Line Temp', '°F', _modes(COOLING, BOTH)),
                 ('Superheat', '°F', _modes(COOLING, BOTH)),
                 ('Subcooling', '°F', _modes(COOLING, BOTH)),
                 ('Compressor Amps', 'A', _modes(COOLING, BOTH)),
                 ('Condenser Fan Amps', 'A', _modes(COOLING, BOTH)),
                 ('Blower Amps', 'A', _modes(COOLING, BOTH)),
                 ('Voltage', 'V', _modes(COOLING, HEATING, BOTH)),
                 ('Supply Temp', '°F', _modes(COOLING, BOTH)),
                 ('Return Temp', '°F', _modes(COOLING, BOTH)),
                 ('Temperature Split (ΔT)', '°F', _modes(COOLING, BOTH)),
                 ('Static Pressure', 'in. w.c.', _modes(COOLING, HEATING, BOTH))),
        _section('Heating Readings (Furnace)', 'Heating Readings',
                 ('Manifold Gas Pressure', 'in. w.c.', _modes(HEATING, BOTH)),
                 ('Inlet Gas Pressure', 'in. w.c.', _modes(HEATING, BOTH)),
                 ('Temperature Rise', '°F', _modes(HEATING, BOTH)),
                 ('Flame Sensor', 'text', _modes(HEATING, BOTH, placeholder='µA')),
                 ('Inducer Motor Amps', 'A', _modes(HEATING, BOTH)),
                 ('CO', 'text', _modes(HEATING, BOTH, placeholder='ppm')),
                 ('Safety Controls Checked', 'yes/no', _modes(HEATING, BOTH))),
        _section('Inspection Fields', 'Inspection',
                 ('Filter Condition', 'text', _FILTER),
                 ('Drain Line Condition', 'text'),
                 ('Coil Condition', 'text'),
                 ('Electrical Connections', 'text', _PASS_FAIL),
                 ('Safety Switch Test', 'yes/no'),
                 ('Thermostat Operation', 'text', _PASS_FAIL)),
    )),

    SystemType.heat_pump_split: SystemTemplate(SystemType.heat_pump_split, (
        _section('General Info', 'General Info',
                 ('Outdoor Model #', 'text', {'placeholder': 'e.g., HP-1234'}),
                 ('Indoor Model #', 'text'),
                 ('Serial # (Outdoor)', 'text'),
                 ('Serial # (Indoor)', 'text'),
                 ('Refrigerant Type', 'text', _REFRIGERANT),
                 ('System Capacity', 'text', _TONS),
                 ('Reversing Valve Type', 'text', {'placeholder': 'O or B'}),
                 ('Ambient Temp', '°F', _REQUIRED)),
        _section('Cooling Mode Readings', 'Cooling Mode',
                 ('Suction Pressure', 'PSI', _REQUIRED),
                 ('Head Pressure', 'PSI', _REQUIRED),
                 ('Suction Line Temp', '°F'),
                 ('Liquid Line Temp', '°F'),
                 ('Superheat', '°F'),
                 ('Subcooling', '°F'),
                 ('Compressor Amps', 'A'),
                 ('Outdoor Fan Amps', 'A'),
                 ('Blower Amps', 'A'),
                 ('Supply Temp', '°F', _REQUIRED),
                 ('Return Temp', '°F', _REQUIRED),
                 ('ΔT', '°F'),
                 ('Static Pressure', 'in. w.c.')),
        _section('Heating Mode Readings', 'Heating Mode',
                 ('Suction Pressure (Heat)', 'PSI'),
                 ('Discharge Pressure (Heat)', 'PSI'),
                 ('Defrost Operation Verified', 'yes/no'),
                 ('Reversing Valve Operation', 'text', _PASS_FAIL),
                 ('Outdoor Coil Frosting', 'yes/no'),
                 ('Electric Heat Strip Amps', 'A'),
                 ('Temperature Rise (Heat)', '°F'),
                 ('Auxiliary Heat Operation', 'text', _PASS_FAIL)),
        _section('Inspection Fields', 'Inspection',
                 ('Filter Condition', 'text', _FILTER),
                 ('Indoor Coil Condition', 'text'),
                 ('Outdoor Coil Condition', 'text'),
                 ('Electrical Connections', 'text', _PASS_FAIL),
                 ('Drain Condition', 'text'),
                 ('Thermostat Operation', 'text', _PASS_FAIL)),
    )),

    SystemType.gas_pack: SystemTemplate(SystemType.gas_pack, (
        _section('General Info', 'General Info',
                 ('Unit Model #', 'text'),
                 ('Serial #', 'text'),
                 ('Refrigerant Type', 'text', _REFRIGERANT),
                 ('Capacity', 'text', _TONS),
                 ('Gas Type', 'text', {'placeholder': 'Natural/LP'}),
                 ('Ambient Temp', '°F', _REQUIRED)),
        _section('Cooling Readings', 'Cooling Readings',
                 ('Suction Pressure', 'PSI', _REQUIRED),
                 ('Head Pressure', 'PSI', _REQUIRED),
                 ('Superheat', '°F'),
                 ('Subcooling', '°F'),
                 ('Compressor Amps', 'A'),
                 ('Supply Temp', '°F', _REQUIRED),
                 ('Return Temp', '°F', _REQUIRED),
                 ('ΔT', '°F'),
                 ('Fan Motor Amps', 'A')),
        _section('Heating Readings', 'Heating Readings',
                 ('Manifold Pressure', 'in. w.c.'),
                 ('Inlet Pressure', 'in. w.c.'),
                 ('Temp Rise', '°F'),
                 ('Flame Sensor', 'text', _MICROAMPS),
                 ('Inducer Amps', 'A'),
                 ('CO', 'text', _PPM),
                 ('Safety Check', 'yes/no')),
        _section('Inspection Fields', 'Inspection',
                 ('Filter Condition', 'text', _FILTER),
                 ('Coil Condition', 'text'),
                 ('Blower Wheel Condition', 'text'),
                 ('Drainage', 'text'),
                 ('Gas Line Tightness', 'text', _PASS_FAIL),
                 ('Thermostat Operation', 'text', _PASS_FAIL)),
    )),

    SystemType.straight_ac_pack: SystemTemplate(SystemType.straight_ac_pack, (
        _section('General Info', 'General Info',
                 ('Model #', 'text'),
                 ('Serial #', 'text'),
                 ('Refrigerant Type', 'text', _REFRIGERANT),
                 ('Capacity', 'text', _TONS),
                 ('Ambient Temp', '°F', _REQUIRED)),
        _section('Cooling Readings', 'Cooling Readings',
                 ('Suction Pressure', 'PSI', _REQUIRED),
                 ('Head Pressure', 'PSI', _REQUIRED),
                 ('Suction Line Temp', '°F'),
                 ('Liquid Line Temp', '°F'),
                 ('Superheat', '°F'),
                 ('Subcooling', '°F'),
                 ('Compressor Amps', 'A'),
                 ('Fan Amps', 'A'),
                 ('Supply Temp', '°F', _REQUIRED),
                 ('Return Temp', '°F', _REQUIRED),
                 ('ΔT', '°F'),
                 ('Static Pressure', 'in. w.c.')),
        _section('Inspection Fields', 'Inspection',
                 ('Filter Condition', 'text', _FILTER),
                 ('Coil Cleanliness', 'text'),
                 ('Electrical Connections', 'text', _PASS_FAIL),
                 ('Condensate Line', 'text'),
                 ('Thermostat Operation', 'text', _PASS_FAIL),
                 ('Capacitor Test', 'text', _PASS_FAIL)),
    )),

    SystemType.dual_fuel: SystemTemplate(SystemType.dual_fuel, (
        _section('General Info', 'General Info',
                 ('Outdoor Model #', 'text'),
                 ('Indoor Model #', 'text'),
                 ('Serial # (Outdoor)', 'text'),
                 ('Serial # (Indoor)', 'text'),
                 ('Refrigerant Type', 'text', _REFRIGERANT),
                 ('Capacity', 'text', _TONS),
                 ('Changeover Control Type', 'text', {'placeholder': 'Thermostat/Board'}),
                 ('Ambient Temp', '°F', _REQUIRED)),
        _section('Cooling Mode', 'Cooling Mode',
                 ('Suction Pressure', 'PSI', _REQUIRED),
                 ('Head Pressure', 'PSI', _REQUIRED),
                 ('Superheat', '°F'),
                 ('Subcooling', '°F'),
                 ('Compressor Amps', 'A'),
                 ('Fan Amps', 'A'),
                 ('Supply Temp', '°F', _REQUIRED),
                 ('Return Temp', '°F', _REQUIRED),
                 ('ΔT', '°F'),
                 ('Static Pressure', 'in. w.c.')),
        _section('Heat Pump Mode', 'Heat Pump Mode',
                 ('Suction Pressure (HP)', 'PSI'),
                 ('Discharge Pressure (HP)', 'PSI'),
                 ('Reversing Valve Operation', 'text', _PASS_FAIL),
                 ('Defrost Cycle Operation', 'yes/no'),
                 ('Electric Heat Strip Amps', 'A'),
                 ('Aux Heat Function', 'yes/no')),
        _section('Gas Heat Mode', 'Gas Heat Mode',
                 ('Manifold Gas Pressure', 'in. w.c.'),
                 ('Inlet Gas Pressure', 'in. w.c.'),
                 ('Temperature Rise', '°F'),
                 ('Flame Sensor Reading', 'text', _MICROAMPS),
                 ('Blower Amps', 'A'),
                 ('CO', 'text', _PPM),
                 ('Safety Checks', 'yes/no')),
        _section('Inspection Fields', 'Inspection',
                 ('Filter Condition', 'text', _FILTER),
                 ('Coil Condition', 'text'),
                 ('Electrical Connections', 'text', _PASS_FAIL),
                 ('Thermostat Operation', 'text', _PASS_FAIL)),
    )),
}


def get_template(system_type) -> Optional[SystemTemplate]:
    """Template for ``system_type`` (enum or display name), or None if unknown"""
    try:
        return SYSTEM_TEMPLATES.get(SystemType(system_type))
    except ValueError:
        logger.warning(f"No field template for system type {system_type!r}")
        return None


def all_system_types() -> List[str]:
    return [system_type.value for system_type in SYSTEM_TEMPLATES]


def is_field_priority(template_field: FieldTemplate, mode: Optional[TroubleshootingMode]) -> bool:
    """Without a mode (or in 'both') every field matters; otherwise only fields tagged for the mode"""
    if mode is None or mode == TroubleshootingMode.both:
        return True
    return mode in template_field.priority_modes


def section_priority_info(
    fields: List[FieldTemplate],
    mode: Optional[TroubleshootingMode]
) -> SectionPriorityInfo:
    priority_fields = [f for f in fields if is_field_priority(f, mode)]
    filled = [f for f in priority_fields if f.parameter]
    return SectionPriorityInfo(
        total_priority=len(priority_fields),
        filled_priority=len(filled),
        is_priority_section=len(priority_fields) > 0
    )


def blank_readings(system_type) -> List[Reading]:
    """One empty form row per template field, ready to be filled in"""
    template = get_template(system_type)
    if template is None:
        return []

    rows = []
    for section in template.sections:
        section_slug = slugify(section.name).replace('_', '-')
        for index, template_field in enumerate(section.fields, start=1):
            rows.append(Reading(
                id=f"{section_slug}-{index}",
                parameter=template_field.parameter,
                value="",
                unit=template_field.unit,
                is_required=template_field.is_required,
                section=template_field.section,
            ))
    return rows
