MONTHS_IN_YEAR: int = 12
DAYS_IN_YEAR: int = 365
HOURS_IN_DAY: int = 24

# Non-leap year
DAYS_IN_MONTH: tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

MONTH_NAMES: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

REPRESENTATIVE_DAY_OF_MONTH: int = 15

G_STC: float = 1000.0  # W/m², Standard Test Condition irradiance
T_STC: float = 25.0  # °C
NOCT_AMBIENT: float = 20.0  # °C, ambient reference of the NOCT rating
GROUND_ALBEDO: float = 0.2
MAX_DECLINATION: float = 23.45  # degrees

# Default depth of discharge (%) applied when a battery's chemistry changes
DEFAULT_DOD: dict[str, float] = {
    "Lead-Acid": 50.0,
    "AGM": 50.0,
    "Gel": 50.0,
    "Lithium-Ion": 80.0,
    "LiFePO4": 90.0,
}
