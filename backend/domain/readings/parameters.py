"""
Parameter name normalization.

Technicians label readings however they like ("Supply Temp", "High Side
Pressure", "amps"). Everything downstream keys readings by a canonical
snake_case name, so labels are slugified and then passed through an exact
match alias table that folds common synonyms onto one key.
"""

import logging
import re
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Keys the prompt builder and range table know by name
CANONICAL_PARAMETERS = (
    'indoor_temp',
    'outdoor_temp',
    'supply_air_temp',
    'return_air_temp',
    'liquid_line_temp',
    'suction_line_temp',
    'suction_pressure',
    'discharge_pressure',
    'liquid_line_pressure',
    'voltage',
    'amperage',
    'static_pressure',
    'cfm',
    'runtime_minutes',
    'filter_condition',
)

DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType({
    'supply_temp': 'supply_air_temp',
    'supply_temperature': 'supply_air_temp',
    'return_temp': 'return_air_temp',
    'return_temperature': 'return_air_temp',
    'suction_temp': 'suction_line_temp',
    'suction_temperature': 'suction_line_temp',
    'liquid_temp': 'liquid_line_temp',
    'liquid_temperature': 'liquid_line_temp',
    'high_pressure': 'discharge_pressure',
    'low_pressure': 'suction_pressure',
    'high_side_pressure': 'discharge_pressure',
    'low_side_pressure': 'suction_pressure',
    'head_pressure': 'discharge_pressure',
    'amps': 'amperage',
    'current': 'amperage',
    'volts': 'voltage',
    'ambient_temp': 'outdoor_temp',
    'indoor_air_temp': 'indoor_temp',
    'outdoor_air_temp': 'outdoor_temp',
})

_WHITESPACE = re.compile(r'\s+')
_NON_SLUG = re.compile(r'[^a-z0-9_]')


def slugify(label: str) -> str:
    """Lower-case, trim, whitespace runs to ``_``, drop anything outside [a-z0-9_]"""
    slug = _WHITESPACE.sub('_', label.lower().strip())
    return _NON_SLUG.sub('', slug)


class ParameterNormalizer:
    """
    Maps free-text parameter labels onto canonical keys.

    The alias table is matched exactly against the slug, never by substring,
    so "supply_temp_2" stays "supply_temp_2" rather than colliding with
    "supply_air_temp".
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        table = dict(DEFAULT_ALIASES if aliases is None else aliases)
        self._check_table(table)
        self.aliases: Mapping[str, str] = MappingProxyType(table)

    @staticmethod
    def _check_table(table: Mapping[str, str]) -> None:
        # Every entry must already be a slug and no target may itself be an
        # alias, otherwise normalize() would stop being idempotent.
        for alias, target in table.items():
            if slugify(alias) != alias or slugify(target) != target:
                raise ValueError(f"Alias entry {alias!r} -> {target!r} is not in slug form")
            if target in table:
                raise ValueError(f"Alias target {target!r} is itself an alias")

    def normalize(self, label: str) -> str:
        slug = slugify(label)
        return self.aliases.get(slug, slug)

    def is_canonical(self, key: str) -> bool:
        return key in CANONICAL_PARAMETERS


default_normalizer = ParameterNormalizer()


def normalize_parameter_name(label: str) -> str:
    """Normalize ``label`` with the default alias table"""
    return default_normalizer.normalize(label)
