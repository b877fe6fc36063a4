"""
Shared configuration and constants.
"""

import dataclasses


MM_PER_INCH = 25.4
MM_PER_CM = 10.0
POINTS_PER_INCH = 72.0
DEFAULT_DPI = 300.0

# CR80 (ID-1) card size
CARD_WIDTH_MM = 85.60
CARD_HEIGHT_MM = 53.98

DEFAULT_CONFIG_FILENAME = "card_config.json"
DEFAULT_OUTPUT_FILENAME = "card_preview.png"

ID_GAP_MM = 1.5
NAME_GAP_MM = 1.0

BACKGROUND_COLOR = (255, 255, 255)
TEXT_COLOR = (0, 0, 0)
BORDER_COLOR = (0, 0, 0)
BORDER_WIDTH = 1
PLACEHOLDER_FILL = (211, 211, 211)
PLACEHOLDER_FONT_NAME = "Arial"
PLACEHOLDER_FONT_SIZE = 8.0
PHOTO_PLACEHOLDER_TEXT = "NO PHOTO"
LOGO_PLACEHOLDER_TEXT = "NO LOGO"

FALLBACK_FONT_REGULAR = [
	"DejaVuSans.ttf",
	"LiberationSans-Regular.ttf",
	"/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
	"/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
	"/usr/share/fonts/TTF/DejaVuSans.ttf",
	"/System/Library/Fonts/Supplemental/Arial.ttf",
	"C:/Windows/Fonts/arial.ttf",
]
FALLBACK_FONT_BOLD = [
	"DejaVuSans-Bold.ttf",
	"LiberationSans-Bold.ttf",
	"/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
	"/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
	"/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
	"/System/Library/Fonts/Supplemental/Arial Bold.ttf",
	"C:/Windows/Fonts/arialbd.ttf",
]


@dataclasses.dataclass
class FontSettings:
	badge_font_name: str | None = None
	badge_font_size_points: float = 0.0
	badge_font_style: str | None = None
	name_font_name: str | None = None
	name_font_size_points: float = 0.0
	name_font_style: str | None = None
	bottom_font_name: str | None = None
	bottom_font_size_points: float = 0.0
	bottom_font_style: str | None = None


@dataclasses.dataclass
class CardData:
	employee_id: str | None = None
	full_name: str | None = None
	additional_text: str | None = None
	card_margin_mm: float = 0.0


@dataclasses.dataclass
class ImageSettings:
	photo_path: str | None = None
	photo_width_cm: float = 0.0
	photo_height_cm: float = 0.0
	logo_path: str | None = None
	logo_width_cm: float = 0.0
	logo_height_cm: float = 0.0


@dataclasses.dataclass
class PrinterSettings:
	enable_physical_printing: bool = False
	ip_address: str | None = None
	port: int = 0


@dataclasses.dataclass
class CardSpec:
	font_settings: FontSettings
	card_data: CardData
	images: ImageSettings
	printer_settings: PrinterSettings


#============================================
def card_size_pixels(dpi: float) -> tuple[int, int]:
	"""
	Compute the integer canvas size for a CR80 card.

	Args:
		dpi: Render resolution.

	Returns:
		Tuple of (width, height) in pixels.
	"""
	width = int(round(CARD_WIDTH_MM * dpi / MM_PER_INCH))
	height = int(round(CARD_HEIGHT_MM * dpi / MM_PER_INCH))
	return (width, height)
