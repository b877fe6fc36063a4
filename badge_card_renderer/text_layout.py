"""
Text wrapping and vertical stacking of the card text blocks.
"""

# Standard Library
import dataclasses

# local repo modules
import badge_card_renderer as bcr
import badge_card_renderer.config
import badge_card_renderer.fonts
import badge_card_renderer.geometry
import badge_card_renderer.units


ResolvedFont = bcr.fonts.ResolvedFont
BoxRegion = bcr.geometry.BoxRegion
CardData = bcr.config.CardData

ID_GAP_MM = bcr.config.ID_GAP_MM
NAME_GAP_MM = bcr.config.NAME_GAP_MM

ROLE_BADGE = "badge"
ROLE_NAME = "name"
ROLE_BOTTOM = "bottom"


@dataclasses.dataclass
class TextBlock:
	role: str
	text: str
	font: ResolvedFont
	x: float
	y: float
	width: float
	height: float
	lines: list[str] = dataclasses.field(default_factory=list)
	align_vertical: str = "TOP"

	@property
	def box(self) -> BoxRegion:
		return BoxRegion(self.x, self.y, max(0.0, self.width), max(0.0, self.height))

	@property
	def bottom(self) -> float:
		return self.y + self.height


#============================================
def wrap_text_to_width(text: str, font: ResolvedFont, max_width: float) -> list[str]:
	"""
	Wrap text to fit within a max width.

	Explicit newlines start a new line. A single word wider than the
	line stays on its own line.

	Args:
		text: Input text.
		font: Font used for width calculation.
		max_width: Maximum line width in pixels.

	Returns:
		Wrapped lines.
	"""
	lines: list[str] = []
	for paragraph in text.splitlines():
		words = paragraph.split()
		if not words:
			lines.append("")
			continue
		current = ""
		for word in words:
			candidate = word if not current else f"{current} {word}"
			width = font.text_width(candidate)
			if width <= max_width or not current:
				current = candidate
				continue
			lines.append(current)
			current = word
		if current:
			lines.append(current)
	return lines


#============================================
def measure_wrapped_height(lines: list[str], font: ResolvedFont) -> float:
	"""
	Height of wrapped lines using the font line metric.
	"""
	return len(lines) * font.line_height


#============================================
def stack_text_blocks(
	canvas_size: tuple[int, int],
	margin: float,
	photo_box: BoxRegion,
	card_data: CardData,
	badge_font: ResolvedFont,
	name_font: ResolvedFont,
	bottom_font: ResolvedFont,
	dpi: float,
	badge_step_height: float | None = None,
) -> list[TextBlock]:
	"""
	Place the badge, name and bottom text blocks.

	The badge line sits below the photo box, the name below the badge
	line (stepped by the badge font metric, not the name font's), and
	the wrapped bottom text grows upward from the bottom margin.

	Args:
		canvas_size: Canvas (width, height) in pixels.
		margin: Card margin in pixels.
		photo_box: Unfitted photo slot box.
		card_data: Text content.
		badge_font: Badge/ID font.
		name_font: Full name font.
		bottom_font: Additional text font.
		dpi: Render resolution.
		badge_step_height: Line height used to step from the badge line
			to the name line; defaults to the badge font line height.

	Returns:
		List of TextBlock in drawing order (badge, name, bottom).
	"""
	canvas_width, canvas_height = canvas_size
	if badge_step_height is None:
		badge_step_height = badge_font.line_height
	gap_id = bcr.units.mm_to_pixels(ID_GAP_MM, dpi)
	gap_name = bcr.units.mm_to_pixels(NAME_GAP_MM, dpi)

	badge_text = card_data.employee_id or ""
	badge_y = photo_box.y + photo_box.height + gap_id
	badge = TextBlock(
		role=ROLE_BADGE,
		text=badge_text,
		font=badge_font,
		x=photo_box.x,
		y=badge_y,
		width=photo_box.width,
		height=badge_font.line_height,
		lines=[badge_text],
	)

	name_text = card_data.full_name or ""
	name = TextBlock(
		role=ROLE_NAME,
		text=name_text,
		font=name_font,
		x=photo_box.x,
		y=badge_y + badge_step_height + gap_name,
		width=photo_box.width,
		height=name_font.line_height,
		lines=[name_text],
	)

	bottom_text = card_data.additional_text or ""
	bottom_width = canvas_width - 2.0 * margin
	# wrap width is truncated to whole pixels
	lines = wrap_text_to_width(bottom_text, bottom_font, float(int(bottom_width)))
	wrapped_height = measure_wrapped_height(lines, bottom_font)
	bottom = TextBlock(
		role=ROLE_BOTTOM,
		text=bottom_text,
		font=bottom_font,
		x=margin,
		y=canvas_height - margin - wrapped_height,
		width=bottom_width,
		height=wrapped_height,
		lines=lines,
		align_vertical="BOTTOM",
	)
	return [badge, name, bottom]
