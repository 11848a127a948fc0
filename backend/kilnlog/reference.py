from typing import Dict, List, Optional

# Pyrometric cone reference table, deg F (medium heating rate)
CONE_TEMPS: Dict[str, int] = {
    "04": 1830, "03": 1850, "02": 1870, "01": 1890, "1": 1910,
    "2": 1920, "3": 1930, "4": 1945, "5": 1975, "6": 1995,
    "7": 2015, "8": 2035, "9": 2055, "10": 2075,
}

CLAY_BODIES: List[str] = [
    "Cone 6 Stoneware",
    "Porcelain",
    "Buff Stoneware",
    "White Stoneware",
    "Speckled Stoneware",
    "Dark Stoneware",
    "Earthenware",
    "Custom Mix",
]

ZONES = ("top", "middle", "bottom")
FIRING_TYPES = ("bisque", "glaze", "test")
LOAD_DENSITIES = ("full", "partial", "test")

# New-program form defaults
PROGRAM_DEFAULTS = {
    "type": "glaze",
    "target_temp": 2165,
    "ramp_rate": 150,
    "hold_time": 10,
}


def cone_temperature(cone: str) -> Optional[int]:
    """Look up the reference temperature for a cone label such as "6" or "04"."""
    return CONE_TEMPS.get(str(cone).strip())


def list_cones() -> List[Dict]:
    return [{"cone": cone, "temp_f": temp} for cone, temp in CONE_TEMPS.items()]
