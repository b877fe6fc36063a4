"""
Font style parsing, font resolution and line metrics.
"""

# Standard Library
import dataclasses
import enum
import os
import pathlib

# PIP3 modules
import PIL.ImageFont

# local repo modules
import badge_card_renderer as bcr
import badge_card_renderer.config
import badge_card_renderer.units


FALLBACK_FONT_REGULAR = bcr.config.FALLBACK_FONT_REGULAR
FALLBACK_FONT_BOLD = bcr.config.FALLBACK_FONT_BOLD

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")
MIN_PIXEL_SIZE = 1.0


class FontStyle(enum.IntFlag):
	REGULAR = 0
	BOLD = 1
	ITALIC = 2
	UNDERLINE = 4
	STRIKEOUT = 8


ALL_STYLES = FontStyle.BOLD | FontStyle.ITALIC | FontStyle.UNDERLINE | FontStyle.STRIKEOUT
STYLE_NAMES = {
	"Regular": FontStyle.REGULAR,
	"Bold": FontStyle.BOLD,
	"Italic": FontStyle.ITALIC,
	"Underline": FontStyle.UNDERLINE,
	"Strikeout": FontStyle.STRIKEOUT,
}

FACE_SUFFIXES = {
	FontStyle.REGULAR: ["Regular", "", "Roman", "Book"],
	FontStyle.BOLD: ["Bold", "bd", "B"],
	FontStyle.ITALIC: ["Italic", "Oblique", "i", "I"],
	FontStyle.BOLD | FontStyle.ITALIC: ["BoldItalic", "Bold Italic", "BoldOblique", "bi", "BI"],
}


@dataclasses.dataclass
class ResolvedFont:
	family: str
	size_points: float
	style: FontStyle
	pixel_size: float
	font: PIL.ImageFont.FreeTypeFont
	source: str
	substituted: bool = False
	synthetic_bold: bool = False

	@property
	def ascent(self) -> int:
		return self.font.getmetrics()[0]

	@property
	def line_height(self) -> float:
		ascent, descent = self.font.getmetrics()
		return float(ascent + descent)

	@property
	def stroke_width(self) -> int:
		if not self.synthetic_bold:
			return 0
		return max(1, int(round(self.pixel_size / 24.0)))

	def text_width(self, text: str) -> float:
		return self.font.getlength(text)


#============================================
def parse_font_style_strict(value: str | None) -> FontStyle | None:
	"""
	Parse a style string such as "Bold" or "Bold, Italic".

	Args:
		value: Style text; member names are case sensitive, integers
			0 to 15 are also accepted.

	Returns:
		FontStyle, or None when the text is not a style.
	"""
	if value is None:
		return None
	text = value.strip()
	if not text:
		return None
	if text.lstrip("+-").isdigit():
		number = int(text)
		if number < 0 or number > int(ALL_STYLES):
			return None
		return FontStyle(number)
	style = FontStyle.REGULAR
	for token in text.split(","):
		name = token.strip()
		if name not in STYLE_NAMES:
			return None
		style |= STYLE_NAMES[name]
	return style


#============================================
def parse_font_style(value: str | None) -> FontStyle:
	"""
	Parse a style string, falling back to Regular.
	"""
	style = parse_font_style_strict(value)
	if style is None:
		return FontStyle.REGULAR
	return style


#============================================
def font_search_dirs() -> list[pathlib.Path]:
	"""
	List directories that commonly hold installed fonts.
	"""
	dirs = [
		"/usr/share/fonts",
		"/usr/local/share/fonts",
		os.path.expanduser("~/.fonts"),
		os.path.expanduser("~/.local/share/fonts"),
		"/Library/Fonts",
		"/System/Library/Fonts",
		os.path.expanduser("~/Library/Fonts"),
	]
	windir = os.environ.get("WINDIR")
	if windir:
		dirs.append(os.path.join(windir, "Fonts"))
	return [pathlib.Path(entry) for entry in dirs if os.path.isdir(entry)]


#============================================
def index_font_files() -> dict[str, pathlib.Path]:
	"""
	Map lower-cased font file names to paths across the font directories.
	"""
	index: dict[str, pathlib.Path] = {}
	for directory in font_search_dirs():
		for root, dirs, files in os.walk(directory):
			dirs.sort()
			for name in sorted(files):
				if not name.lower().endswith(FONT_EXTENSIONS):
					continue
				index.setdefault(name.lower(), pathlib.Path(root) / name)
	return index


#============================================
def face_file_candidates(family: str, style: FontStyle) -> list[str]:
	"""
	Build candidate file names for a family and its bold/italic face.

	Args:
		family: Font family name, for example "Arial".
		style: Requested style; only bold and italic pick a face.

	Returns:
		Candidate file names without directories.
	"""
	face = style & (FontStyle.BOLD | FontStyle.ITALIC)
	bases = [family, family.replace(" ", "")]
	names: list[str] = []
	for base in bases:
		for suffix in FACE_SUFFIXES[FontStyle(face)]:
			stems = [base] if not suffix else [
				f"{base}-{suffix}",
				f"{base} {suffix}",
				f"{base}{suffix}",
			]
			for stem in stems:
				for extension in FONT_EXTENSIONS:
					name = f"{stem}{extension}"
					if name not in names:
						names.append(name)
	return names


#============================================
def find_font_file(names: list[str], index: dict[str, pathlib.Path]) -> pathlib.Path | None:
	"""
	Find the first candidate that exists as a path or in the font index.
	"""
	for name in names:
		path = pathlib.Path(name)
		if path.is_file():
			return path
		match = index.get(name.lower())
		if match is not None:
			return match
	return None


#============================================
def resolve_font(
	family: str | None,
	size_points: float,
	style: FontStyle,
	dpi: float,
	index: dict[str, pathlib.Path] | None = None,
) -> ResolvedFont:
	"""
	Resolve a font family, point size and style to a loaded face.

	The pixel size follows the render DPI, so text stays consistent with
	millimeter based layout. Missing families fall back to common sans
	faces and finally to Pillow's built-in font.

	Args:
		family: Family name.
		size_points: Size in points.
		style: Style flags.
		dpi: Render resolution.
		index: Font file index from index_font_files, built when omitted.

	Returns:
		ResolvedFont.
	"""
	family = (family or "").strip()
	pixel_size = max(MIN_PIXEL_SIZE, bcr.units.points_to_pixels(size_points, dpi))
	wants_bold = bool(style & FontStyle.BOLD)
	if index is None:
		index = index_font_files()

	if family:
		path = find_font_file(face_file_candidates(family, style), index)
		if path is not None:
			font = PIL.ImageFont.truetype(str(path), pixel_size)
			return ResolvedFont(family, size_points, style, pixel_size, font, str(path))
		# no dedicated face; bold is emulated with a stroke, italic is dropped
		path = find_font_file(face_file_candidates(family, FontStyle.REGULAR), index)
		if path is not None:
			font = PIL.ImageFont.truetype(str(path), pixel_size)
			return ResolvedFont(
				family, size_points, style, pixel_size, font, str(path), synthetic_bold=wants_bold,
			)

	fallbacks = FALLBACK_FONT_BOLD if wants_bold else FALLBACK_FONT_REGULAR
	path = find_font_file(fallbacks, index)
	if path is not None:
		font = PIL.ImageFont.truetype(str(path), pixel_size)
		return ResolvedFont(
			family, size_points, style, pixel_size, font, str(path), substituted=True,
		)

	font = PIL.ImageFont.load_default(size=pixel_size)
	return ResolvedFont(
		family,
		size_points,
		style,
		pixel_size,
		font,
		"Pillow default",
		substituted=True,
		synthetic_bold=wants_bold,
	)
