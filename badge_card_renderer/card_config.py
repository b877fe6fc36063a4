"""
Load and validate the JSON card configuration.
"""

# Standard Library
import json
import math
import pathlib

# local repo modules
import badge_card_renderer as bcr
import badge_card_renderer.config
import badge_card_renderer.errors


CardSpec = bcr.config.CardSpec
FontSettings = bcr.config.FontSettings
CardData = bcr.config.CardData
ImageSettings = bcr.config.ImageSettings
PrinterSettings = bcr.config.PrinterSettings
ConfigMissingError = bcr.errors.ConfigMissingError
ConfigMalformedError = bcr.errors.ConfigMalformedError

REQUIRED_SECTIONS = ("FontSettings", "CardData", "Images", "PrinterSettings")

# JSON key -> (dataclass field, kind)
FONT_FIELDS = {
	"BadgeFontName": ("badge_font_name", "str"),
	"BadgeFontSizePoints": ("badge_font_size_points", "length"),
	"BadgeFontStyle": ("badge_font_style", "str"),
	"NameFontName": ("name_font_name", "str"),
	"NameFontSizePoints": ("name_font_size_points", "length"),
	"NameFontStyle": ("name_font_style", "str"),
	"BottomFontName": ("bottom_font_name", "str"),
	"BottomFontSizePoints": ("bottom_font_size_points", "length"),
	"BottomFontStyle": ("bottom_font_style", "str"),
}
CARD_FIELDS = {
	"EmployeeId": ("employee_id", "str"),
	"FullName": ("full_name", "str"),
	"AdditionalText": ("additional_text", "str"),
	"CardMarginMm": ("card_margin_mm", "length"),
}
IMAGE_FIELDS = {
	"PhotoPath": ("photo_path", "str"),
	"PhotoWidthCm": ("photo_width_cm", "length"),
	"PhotoHeightCm": ("photo_height_cm", "length"),
	"LogoPath": ("logo_path", "str"),
	"LogoWidthCm": ("logo_width_cm", "length"),
	"LogoHeightCm": ("logo_height_cm", "length"),
}
PRINTER_FIELDS = {
	"EnablePhysicalPrinting": ("enable_physical_printing", "bool"),
	"IpAddress": ("ip_address", "str"),
	"Port": ("port", "int"),
}


#============================================
def convert_value(value: object, kind: str, location: str) -> object:
	"""
	Check and convert a single JSON value.

	Args:
		value: Raw JSON value.
		kind: One of "str", "length", "bool", "int".
		location: Field path for error messages.

	Returns:
		Converted value.
	"""
	if kind == "str":
		if value is None or isinstance(value, str):
			return value
		raise ConfigMalformedError("expected a string", location)
	if kind == "bool":
		if isinstance(value, bool):
			return value
		raise ConfigMalformedError("expected true or false", location)
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise ConfigMalformedError("expected a number", location)
	if not math.isfinite(value):
		raise ConfigMalformedError("must be a finite number", location)
	if kind == "int":
		if isinstance(value, float) and not value.is_integer():
			raise ConfigMalformedError("expected an integer", location)
		return int(value)
	if value < 0:
		raise ConfigMalformedError("must not be negative", location)
	return float(value)


#============================================
def build_section(raw: object, section: str, fields: dict[str, tuple[str, str]], factory: type) -> object:
	"""
	Build one configuration dataclass from its JSON object.

	Missing keys keep the dataclass defaults; unknown keys are ignored.
	"""
	if not isinstance(raw, dict):
		raise ConfigMalformedError("expected an object", section)
	kwargs = {}
	for key, (field_name, kind) in fields.items():
		if key not in raw:
			continue
		kwargs[field_name] = convert_value(raw[key], kind, f"{section}.{key}")
	return factory(**kwargs)


#============================================
def parse_card_spec(data: object) -> CardSpec:
	"""
	Build a CardSpec from decoded JSON data.

	Args:
		data: Decoded JSON document.

	Returns:
		CardSpec.
	"""
	if not isinstance(data, dict):
		raise ConfigMalformedError("top level must be an object", "$")
	for section in REQUIRED_SECTIONS:
		if data.get(section) is None:
			raise ConfigMalformedError("missing required section", section)
	return CardSpec(
		font_settings=build_section(data["FontSettings"], "FontSettings", FONT_FIELDS, FontSettings),
		card_data=build_section(data["CardData"], "CardData", CARD_FIELDS, CardData),
		images=build_section(data["Images"], "Images", IMAGE_FIELDS, ImageSettings),
		printer_settings=build_section(
			data["PrinterSettings"], "PrinterSettings", PRINTER_FIELDS, PrinterSettings,
		),
	)


#============================================
def validate_card_spec(spec: CardSpec) -> None:
	"""
	Reject a CardSpec the renderer cannot lay out.

	Args:
		spec: Card specification.
	"""
	if spec is None:
		raise ConfigMalformedError("no card specification", "$")
	sections = (
		("FontSettings", spec.font_settings),
		("CardData", spec.card_data),
		("Images", spec.images),
		("PrinterSettings", spec.printer_settings),
	)
	for name, section in sections:
		if section is None:
			raise ConfigMalformedError("missing required section", name)
	checks = (
		("CardData.CardMarginMm", spec.card_data.card_margin_mm),
		("Images.PhotoWidthCm", spec.images.photo_width_cm),
		("Images.PhotoHeightCm", spec.images.photo_height_cm),
		("Images.LogoWidthCm", spec.images.logo_width_cm),
		("Images.LogoHeightCm", spec.images.logo_height_cm),
		("FontSettings.BadgeFontSizePoints", spec.font_settings.badge_font_size_points),
		("FontSettings.NameFontSizePoints", spec.font_settings.name_font_size_points),
		("FontSettings.BottomFontSizePoints", spec.font_settings.bottom_font_size_points),
	)
	for location, value in checks:
		if not math.isfinite(value):
			raise ConfigMalformedError("must be a finite number", location)
		if value < 0:
			raise ConfigMalformedError("must not be negative", location)


#============================================
def load_card_spec(path: pathlib.Path) -> CardSpec:
	"""
	Read and validate a card configuration file.

	Args:
		path: JSON configuration path.

	Returns:
		CardSpec.
	"""
	path = pathlib.Path(path)
	if not path.is_file():
		raise ConfigMissingError(str(path))
	try:
		text = path.read_text(encoding="utf-8-sig")
	except (OSError, UnicodeDecodeError) as error:
		raise ConfigMalformedError(f"cannot read configuration: {error}", str(path)) from error
	try:
		data = json.loads(text)
	except json.JSONDecodeError as error:
		location = f"line {error.lineno}, column {error.colno}"
		raise ConfigMalformedError(f"invalid JSON: {error.msg}", location) from error
	spec = parse_card_spec(data)
	validate_card_spec(spec)
	return spec
