"""
Physical unit to device pixel conversion.
"""

# Standard Library
import dataclasses
import enum

# local repo modules
import badge_card_renderer as bcr
import badge_card_renderer.config


MM_PER_INCH = bcr.config.MM_PER_INCH
MM_PER_CM = bcr.config.MM_PER_CM
POINTS_PER_INCH = bcr.config.POINTS_PER_INCH


class Unit(enum.Enum):
	MILLIMETER = "mm"
	CENTIMETER = "cm"
	POINT = "pt"


@dataclasses.dataclass(frozen=True)
class PhysicalValue:
	magnitude: float
	unit: Unit

	def __post_init__(self) -> None:
		if self.magnitude < 0:
			raise ValueError(f"negative physical value: {self.magnitude}{self.unit.value}")

	def to_pixels(self, dpi: float) -> float:
		return pixels(self.magnitude, self.unit, dpi)


#============================================
def mm_to_pixels(value: float, dpi: float) -> float:
	"""
	Convert millimeters to pixels.

	Args:
		value: Millimeters value.
		dpi: Render resolution.

	Returns:
		Pixels value.
	"""
	return value * dpi / MM_PER_INCH


#============================================
def cm_to_pixels(value: float, dpi: float) -> float:
	"""
	Convert centimeters to pixels by way of millimeters.
	"""
	return mm_to_pixels(value * MM_PER_CM, dpi)


#============================================
def points_to_pixels(value: float, dpi: float) -> float:
	"""
	Convert typographic points to pixels.
	"""
	return value * dpi / POINTS_PER_INCH


#============================================
def pixels(value: float, unit: Unit, dpi: float) -> float:
	"""
	Convert a physical measurement to pixels at the given resolution.

	Args:
		value: Magnitude.
		unit: Unit tag.
		dpi: Render resolution.

	Returns:
		Pixels value, not rounded.
	"""
	if unit is Unit.MILLIMETER:
		return mm_to_pixels(value, dpi)
	if unit is Unit.CENTIMETER:
		return cm_to_pixels(value, dpi)
	if unit is Unit.POINT:
		return points_to_pixels(value, dpi)
	raise ValueError(f"unknown unit: {unit}")
