from __future__ import annotations

import json
import logging
import os
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import CatalogError

logger = logging.getLogger(__name__)


# =========================================================
# Families + states
# =========================================================
class Family(str, Enum):
    ALKALI_METAL = "alkali metal"
    ALKALINE_EARTH_METAL = "alkaline earth metal"
    TRANSITION_METAL = "transition metal"
    POST_TRANSITION_METAL = "post-transition metal"
    LANTHANIDE = "lanthanide"
    ACTINIDE = "actinide"
    METALLOID = "metalloid"
    NONMETAL = "nonmetal"
    HALOGEN = "halogen"
    NOBLE_GAS = "noble gas"

    @property
    def label(self) -> str:
        return _FAMILY_LABELS[self]

    @property
    def short_label(self) -> str:
        # Used inside short prompts ("Iron is a transition metal")
        return self.value

    @property
    def is_metal(self) -> bool:
        return self in METAL_FAMILIES


_FAMILY_LABELS = {
    Family.ALKALI_METAL: "Alkali Metals",
    Family.ALKALINE_EARTH_METAL: "Alkaline Earth Metals",
    Family.TRANSITION_METAL: "Transition Metals",
    Family.POST_TRANSITION_METAL: "Post-transition Metals",
    Family.LANTHANIDE: "Lanthanides",
    Family.ACTINIDE: "Actinides",
    Family.METALLOID: "Metalloids",
    Family.NONMETAL: "Nonmetals",
    Family.HALOGEN: "Halogens",
    Family.NOBLE_GAS: "Noble Gases",
}

METAL_FAMILIES = frozenset(
    {
        Family.ALKALI_METAL,
        Family.ALKALINE_EARTH_METAL,
        Family.TRANSITION_METAL,
        Family.POST_TRANSITION_METAL,
        Family.LANTHANIDE,
        Family.ACTINIDE,
    }
)


class MatterState(str, Enum):
    SOLID = "solid"
    LIQUID = "liquid"
    GAS = "gas"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# =========================================================
# Data model
# =========================================================
@dataclass(frozen=True)
class ElementRecord:
    atomic_number: int
    symbol: str
    name: str
    family: Family
    period: int
    group: Optional[int]
    state: MatterState = MatterState.UNKNOWN
    atomic_mass: Optional[float] = None
    melting_point_c: Optional[float] = None
    boiling_point_c: Optional[float] = None
    density: Optional[float] = None
    electronegativity: Optional[float] = None
    atomic_radius_pm: Optional[float] = None
    ionization_energy: Optional[float] = None
    names: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_metal(self) -> bool:
        return self.family.is_metal

    def localized_name(self, locale: str = "en") -> str:
        return self.names.get(locale) or self.name


def is_lanthanoid_or_actinoid(atomic_number: int) -> bool:
    return (57 <= atomic_number <= 71) or (89 <= atomic_number <= 103)


# =========================================================
# Catalog
# =========================================================
class ElementCatalog:
    """Ordered, read-only collection of element records keyed by atomic number."""

    def __init__(self, records: Iterable[ElementRecord]):
        ordered = sorted(records, key=lambda e: e.atomic_number)
        by_id: Dict[int, ElementRecord] = {}
        for e in ordered:
            if e.atomic_number in by_id:
                raise CatalogError(f"duplicate atomic number {e.atomic_number} ({e.symbol})")
            by_id[e.atomic_number] = e
        self._elements: List[ElementRecord] = ordered
        self._by_id = by_id
        self._by_symbol = {e.symbol.lower(): e for e in ordered}

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[ElementRecord]:
        return iter(self._elements)

    def all_elements(self) -> List[ElementRecord]:
        return list(self._elements)

    def by_id(self, atomic_number: int) -> Optional[ElementRecord]:
        return self._by_id.get(atomic_number)

    def by_symbol(self, symbol: str) -> Optional[ElementRecord]:
        return self._by_symbol.get((symbol or "").strip().lower())

    def random_element(self, rng: Optional[random.Random] = None) -> Optional[ElementRecord]:
        if not self._elements:
            return None
        return (rng or random).choice(self._elements)

    def random_elements(self, count: int, rng: Optional[random.Random] = None) -> List[ElementRecord]:
        count = max(0, min(count, len(self._elements)))
        return (rng or random).sample(self._elements, count)

    def search(self, text: str, locale: str = "en") -> List[ElementRecord]:
        needle = (text or "").strip().lower()
        if not needle:
            return []
        return [e for e in self._elements if needle in e.localized_name(locale).lower()]

    def filter(
        self,
        family: Optional[Family] = None,
        state: Optional[MatterState] = None,
        period: Optional[int] = None,
        group: Optional[int] = None,
        metals_only: Optional[bool] = None,
    ) -> List[ElementRecord]:
        out = self._elements
        if family is not None:
            out = [e for e in out if e.family == family]
        if state is not None:
            out = [e for e in out if e.state == state]
        if period is not None:
            out = [e for e in out if e.period == period]
        if group is not None:
            out = [e for e in out if e.group == group]
        if metals_only is not None:
            out = [e for e in out if e.is_metal == metals_only]
        return list(out)

    def by_family(self) -> Dict[Family, List[ElementRecord]]:
        groups: Dict[Family, List[ElementRecord]] = {}
        for e in self._elements:
            groups.setdefault(e.family, []).append(e)
        return groups

    def by_period(self) -> Dict[int, List[ElementRecord]]:
        groups: Dict[int, List[ElementRecord]] = {}
        for e in self._elements:
            groups.setdefault(e.period, []).append(e)
        return groups


# =========================================================
# Chemistry corrections (in-code)
# =========================================================
CATEGORY_OVERRIDES = {"Hydrogen": Family.NONMETAL}

_CATEGORY_KEYWORDS = [
    ("noble gas", Family.NOBLE_GAS),
    ("alkaline earth", Family.ALKALINE_EARTH_METAL),
    ("alkali", Family.ALKALI_METAL),
    ("post-transition", Family.POST_TRANSITION_METAL),
    ("transition", Family.TRANSITION_METAL),
    ("lanthan", Family.LANTHANIDE),
    ("actin", Family.ACTINIDE),
    ("metalloid", Family.METALLOID),
    ("halogen", Family.HALOGEN),
    ("nonmetal", Family.NONMETAL),
]


def normalize_state(phase: Optional[str]) -> MatterState:
    t = (phase or "").lower().strip()
    try:
        return MatterState(t)
    except ValueError:
        return MatterState.UNKNOWN


def normalize_family(raw_category: Optional[str], name: str, atomic_number: int, group: Optional[int]) -> Family:
    if name in CATEGORY_OVERRIDES:
        return CATEGORY_OVERRIDES[name]
    if 57 <= atomic_number <= 71:
        return Family.LANTHANIDE
    if 89 <= atomic_number <= 103:
        return Family.ACTINIDE
    if group == 17:
        return Family.HALOGEN
    if group == 18:
        return Family.NOBLE_GAS

    t = (raw_category or "").lower()
    # "unknown, probably transition metal" -> "transition metal"
    if "probably" in t:
        t = t.split("probably", 1)[1]
    for keyword, family in _CATEGORY_KEYWORDS:
        if keyword in t:
            return family
    if "metal" in t:
        return Family.POST_TRANSITION_METAL
    return Family.NONMETAL


def _number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _kelvin_to_celsius(value) -> Optional[float]:
    k = _number(value)
    return None if k is None else round(k - 273.15, 2)


def _first_ionization(raw) -> Optional[float]:
    if isinstance(raw, list) and raw:
        return _number(raw[0])
    return _number(raw)


def record_from_json(r: Mapping) -> ElementRecord:
    """Normalize one entry of the PeriodicTableJSON dataset."""
    name = (r.get("name") or "").strip()
    symbol = (r.get("symbol") or "").strip()
    number = int(r.get("number"))
    group = r.get("group")
    group = int(group) if isinstance(group, int) and 1 <= group <= 18 else None
    if is_lanthanoid_or_actinoid(number):
        group = None
    period = int(r.get("period") or 0)

    names = {"en": name}
    extra_names = r.get("names")
    if isinstance(extra_names, dict):
        names.update({str(k): str(v) for k, v in extra_names.items() if v})

    return ElementRecord(
        atomic_number=number,
        symbol=symbol,
        name=name,
        names=names,
        family=normalize_family(r.get("category"), name, number, group),
        period=period,
        group=group,
        state=normalize_state(r.get("phase")),
        atomic_mass=_number(r.get("atomic_mass")),
        melting_point_c=_kelvin_to_celsius(r.get("melt")),
        boiling_point_c=_kelvin_to_celsius(r.get("boil")),
        density=_number(r.get("density")),
        electronegativity=_number(r.get("electronegativity_pauling")),
        atomic_radius_pm=_number(r.get("atomic_radius")),
        ionization_energy=_first_ionization(r.get("ionization_energies")),
    )


# =========================================================
# Load elements
# =========================================================
def load_elements(path: str = "PeriodicTableJSON.json") -> List[ElementRecord]:
    if not os.path.exists(path):
        raise CatalogError(f"{path} not found (run setup_data.py to download it)")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise CatalogError(f"could not read {path}: {exc}") from exc

    raw = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(raw, list):
        raise CatalogError(f"{path}: expected an 'elements' list")

    out = [record_from_json(r) for r in raw]
    logger.info("Loaded %d elements from %s", len(out), path)
    return sorted(out, key=lambda e: e.atomic_number)


def load_catalog(path: str = "PeriodicTableJSON.json") -> ElementCatalog:
    return ElementCatalog(load_elements(path))
