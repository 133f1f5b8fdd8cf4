import random

import pytest

from element_games.catalog import ElementCatalog, ElementRecord, Family, MatterState

F = Family
S = MatterState

# (number, symbol, name, family, period, group, state, mass, melting C, density, electronegativity)
ELEMENT_ROWS = [
    (1, "H", "Hydrogen", F.NONMETAL, 1, 1, S.GAS, 1.008, -259.16, 0.00008988, 2.20),
    (2, "He", "Helium", F.NOBLE_GAS, 1, 18, S.GAS, 4.0026, None, 0.0001785, None),
    (3, "Li", "Lithium", F.ALKALI_METAL, 2, 1, S.SOLID, 6.94, 180.50, 0.534, 0.98),
    (4, "Be", "Beryllium", F.ALKALINE_EARTH_METAL, 2, 2, S.SOLID, 9.0122, 1287.0, 1.85, 1.57),
    (5, "B", "Boron", F.METALLOID, 2, 13, S.SOLID, 10.81, 2076.0, 2.08, 2.04),
    (6, "C", "Carbon", F.NONMETAL, 2, 14, S.SOLID, 12.011, 3550.0, 1.821, 2.55),
    (7, "N", "Nitrogen", F.NONMETAL, 2, 15, S.GAS, 14.007, -210.0, 0.0012506, 3.04),
    (8, "O", "Oxygen", F.NONMETAL, 2, 16, S.GAS, 15.999, -218.79, 0.001429, 3.44),
    (9, "F", "Fluorine", F.HALOGEN, 2, 17, S.GAS, 18.998, -219.67, 0.001696, 3.98),
    (10, "Ne", "Neon", F.NOBLE_GAS, 2, 18, S.GAS, 20.180, -248.59, 0.0008999, None),
    (11, "Na", "Sodium", F.ALKALI_METAL, 3, 1, S.SOLID, 22.990, 97.79, 0.968, 0.93),
    (12, "Mg", "Magnesium", F.ALKALINE_EARTH_METAL, 3, 2, S.SOLID, 24.305, 650.0, 1.738, 1.31),
    (13, "Al", "Aluminium", F.POST_TRANSITION_METAL, 3, 13, S.SOLID, 26.982, 660.32, 2.70, 1.61),
    (14, "Si", "Silicon", F.METALLOID, 3, 14, S.SOLID, 28.085, 1414.0, 2.329, 1.90),
    (15, "P", "Phosphorus", F.NONMETAL, 3, 15, S.SOLID, 30.974, 44.15, 1.823, 2.19),
    (16, "S", "Sulfur", F.NONMETAL, 3, 16, S.SOLID, 32.06, 115.21, 2.07, 2.58),
    (17, "Cl", "Chlorine", F.HALOGEN, 3, 17, S.GAS, 35.45, -101.5, 0.0032, 3.16),
    (18, "Ar", "Argon", F.NOBLE_GAS, 3, 18, S.GAS, 39.948, -189.34, 0.001784, None),
    (19, "K", "Potassium", F.ALKALI_METAL, 4, 1, S.SOLID, 39.098, 63.5, 0.862, 0.82),
    (20, "Ca", "Calcium", F.ALKALINE_EARTH_METAL, 4, 2, S.SOLID, 40.078, 842.0, 1.55, 1.00),
    (21, "Sc", "Scandium", F.TRANSITION_METAL, 4, 3, S.SOLID, 44.956, 1541.0, 2.985, 1.36),
    (22, "Ti", "Titanium", F.TRANSITION_METAL, 4, 4, S.SOLID, 47.867, 1668.0, 4.506, 1.54),
    (23, "V", "Vanadium", F.TRANSITION_METAL, 4, 5, S.SOLID, 50.942, 1910.0, 6.0, 1.63),
    (24, "Cr", "Chromium", F.TRANSITION_METAL, 4, 6, S.SOLID, 51.996, 1907.0, 7.19, 1.66),
    (25, "Mn", "Manganese", F.TRANSITION_METAL, 4, 7, S.SOLID, 54.938, 1246.0, 7.21, 1.55),
    (26, "Fe", "Iron", F.TRANSITION_METAL, 4, 8, S.SOLID, 55.845, 1538.0, 7.874, 1.83),
    (27, "Co", "Cobalt", F.TRANSITION_METAL, 4, 9, S.SOLID, 58.933, 1495.0, 8.90, 1.88),
    (28, "Ni", "Nickel", F.TRANSITION_METAL, 4, 10, S.SOLID, 58.693, 1455.0, 8.908, 1.91),
    (29, "Cu", "Copper", F.TRANSITION_METAL, 4, 11, S.SOLID, 63.546, 1084.62, 8.96, 1.90),
    (30, "Zn", "Zinc", F.TRANSITION_METAL, 4, 12, S.SOLID, 65.38, 419.53, 7.14, 1.65),
    (31, "Ga", "Gallium", F.POST_TRANSITION_METAL, 4, 13, S.SOLID, 69.723, 29.76, 5.91, 1.81),
    (32, "Ge", "Germanium", F.METALLOID, 4, 14, S.SOLID, 72.630, 938.25, 5.323, 2.01),
    (33, "As", "Arsenic", F.METALLOID, 4, 15, S.SOLID, 74.922, 817.0, 5.727, 2.18),
    (34, "Se", "Selenium", F.NONMETAL, 4, 16, S.SOLID, 78.971, 221.0, 4.81, 2.55),
    (35, "Br", "Bromine", F.HALOGEN, 4, 17, S.LIQUID, 79.904, -7.2, 3.1028, 2.96),
    (36, "Kr", "Krypton", F.NOBLE_GAS, 4, 18, S.GAS, 83.798, -157.37, 0.003749, 3.00),
    (47, "Ag", "Silver", F.TRANSITION_METAL, 5, 11, S.SOLID, 107.87, 961.78, 10.49, 1.93),
    (57, "La", "Lanthanum", F.LANTHANIDE, 6, None, S.SOLID, 138.91, 920.0, 6.162, 1.10),
    (58, "Ce", "Cerium", F.LANTHANIDE, 6, None, S.SOLID, 140.12, 795.0, 6.770, 1.12),
    (79, "Au", "Gold", F.TRANSITION_METAL, 6, 11, S.SOLID, 196.97, 1064.18, 19.3, 2.54),
    (92, "U", "Uranium", F.ACTINIDE, 7, None, S.SOLID, 238.03, 1132.2, 19.1, 1.38),
]


def make_record(row) -> ElementRecord:
    number, symbol, name, family, period, group, state, mass, melt, density, en = row
    return ElementRecord(
        atomic_number=number,
        symbol=symbol,
        name=name,
        names={"en": name},
        family=family,
        period=period,
        group=group,
        state=state,
        atomic_mass=mass,
        melting_point_c=melt,
        density=density,
        electronegativity=en,
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class RecordingSink:
    """Progress sink that keeps every call for inspection."""

    def __init__(self):
        self.sessions = []
        self.answers = []

    def record_session(self, game_type, duration_seconds, correct_count, total_count, score):
        self.sessions.append(
            dict(
                game_type=game_type,
                duration_seconds=duration_seconds,
                correct_count=correct_count,
                total_count=total_count,
                score=score,
            )
        )

    def record_answer(self, element_id, was_correct):
        self.answers.append((element_id, was_correct))


@pytest.fixture
def elements():
    return [make_record(r) for r in ELEMENT_ROWS]


@pytest.fixture
def catalog(elements):
    return ElementCatalog(elements)


@pytest.fixture
def small_catalog(elements):
    return ElementCatalog(elements[:3])


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()
