"""
Enums for HVAC diagnostic models to ensure type safety and consistency
"""

from enum import Enum


class UnitTag(str, Enum):
    """Units a technician can attach to a reading"""
    fahrenheit = '°F'
    celsius = '°C'
    psi = 'PSI'
    kpa = 'kPa'
    cfm = 'CFM'
    liters_per_second = 'L/s'
    volts = 'V'
    amps = 'A'
    watts = 'W'
    inches_water_column = 'in. w.c.'
    text = 'text'
    yes_no = 'yes/no'

    @property
    def is_numeric(self) -> bool:
        return self not in (UnitTag.text, UnitTag.yes_no)


class SystemType(str, Enum):
    """Equipment categories the diagnostic prompt knows about"""
    gas_split_ac = 'Gas Split AC System'
    heat_pump_split = 'Heat Pump Split System'
    gas_pack = 'Gas Pack Unit'
    straight_ac_pack = 'Straight AC Pack Unit'
    dual_fuel = 'Dual Fuel Unit'


class TroubleshootingMode(str, Enum):
    """Which side of the system the technician is troubleshooting"""
    cooling = 'cooling'
    heating = 'heating'
    both = 'both'


class FaultSeverity(str, Enum):
    """Severity the generator assigns to a diagnosed fault"""
    critical = 'critical'
    warning = 'warning'
    info = 'info'


class SystemStatus(str, Enum):
    """Overall equipment condition reported by the generator"""
    normal = 'normal'
    attention_needed = 'attention_needed'
    critical = 'critical'


class ResultStatus(str, Enum):
    """Whether the diagnostic round trip succeeded"""
    success = 'success'
    error = 'error'


class EfficiencyRating(str, Enum):
    excellent = 'excellent'
    good = 'good'
    fair = 'fair'
    poor = 'poor'
