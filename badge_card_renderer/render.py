"""
Card composition, PNG output and the PDF proof.
"""

# Standard Library
import dataclasses
import io
import math
import os
import pathlib
import tempfile

# PIP3 modules
import PIL.Image
import PIL.ImageDraw
import reportlab.lib.units
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import badge_card_renderer as bcr
import badge_card_renderer.card_config
import badge_card_renderer.config
import badge_card_renderer.errors
import badge_card_renderer.fonts
import badge_card_renderer.geometry
import badge_card_renderer.report
import badge_card_renderer.text_layout
import badge_card_renderer.units


CardSpec = bcr.config.CardSpec
BoxRegion = bcr.geometry.BoxRegion
Missing = bcr.geometry.Missing
FontStyle = bcr.fonts.FontStyle
ResolvedFont = bcr.fonts.ResolvedFont
TextBlock = bcr.text_layout.TextBlock
RenderFailureError = bcr.errors.RenderFailureError
PhysicalValue = bcr.units.PhysicalValue
Unit = bcr.units.Unit

DEFAULT_DPI = bcr.config.DEFAULT_DPI
CARD_WIDTH_MM = bcr.config.CARD_WIDTH_MM
CARD_HEIGHT_MM = bcr.config.CARD_HEIGHT_MM
BACKGROUND_COLOR = bcr.config.BACKGROUND_COLOR
TEXT_COLOR = bcr.config.TEXT_COLOR
BORDER_COLOR = bcr.config.BORDER_COLOR
BORDER_WIDTH = bcr.config.BORDER_WIDTH
PLACEHOLDER_FILL = bcr.config.PLACEHOLDER_FILL
PLACEHOLDER_FONT_NAME = bcr.config.PLACEHOLDER_FONT_NAME
PLACEHOLDER_FONT_SIZE = bcr.config.PLACEHOLDER_FONT_SIZE

SLOT_PHOTO = "photo"
SLOT_LOGO = "logo"


@dataclasses.dataclass(frozen=True)
class SlotPolicy:
	border: bool
	placeholder_text: str


SLOT_POLICIES = {
	SLOT_PHOTO: SlotPolicy(border=True, placeholder_text=bcr.config.PHOTO_PLACEHOLDER_TEXT),
	SLOT_LOGO: SlotPolicy(border=False, placeholder_text=bcr.config.LOGO_PLACEHOLDER_TEXT),
}


@dataclasses.dataclass
class SlotOutcome:
	slot: str
	box: BoxRegion
	region: BoxRegion
	placeholder_used: bool
	bordered: bool
	reason: str = ""


@dataclasses.dataclass
class CardComposition:
	image: PIL.Image.Image
	dpi: float
	margin: float
	slots: dict[str, SlotOutcome]
	text_blocks: list[TextBlock]

	@property
	def size(self) -> tuple[int, int]:
		return self.image.size


@dataclasses.dataclass
class RenderResult:
	output_path: pathlib.Path
	width: int
	height: int
	dpi: float
	slots: dict[str, SlotOutcome]
	text_blocks: list[TextBlock]

	@property
	def photo_placeholder_used(self) -> bool:
		return self.slots[SLOT_PHOTO].placeholder_used

	@property
	def logo_placeholder_used(self) -> bool:
		return self.slots[SLOT_LOGO].placeholder_used


#============================================
def compute_slot_boxes(spec: CardSpec, canvas_width: int, margin: float, dpi: float) -> dict[str, BoxRegion]:
	"""
	Compute the unfitted photo (top left) and logo (top right) boxes.

	Args:
		spec: Card specification.
		canvas_width: Canvas width in pixels.
		margin: Margin in pixels.
		dpi: Render resolution.

	Returns:
		Boxes keyed by slot name.
	"""
	images = spec.images
	photo_width = PhysicalValue(images.photo_width_cm, Unit.CENTIMETER).to_pixels(dpi)
	photo_height = PhysicalValue(images.photo_height_cm, Unit.CENTIMETER).to_pixels(dpi)
	logo_width = PhysicalValue(images.logo_width_cm, Unit.CENTIMETER).to_pixels(dpi)
	logo_height = PhysicalValue(images.logo_height_cm, Unit.CENTIMETER).to_pixels(dpi)
	return {
		SLOT_PHOTO: BoxRegion(margin, margin, photo_width, photo_height),
		SLOT_LOGO: BoxRegion(canvas_width - margin - logo_width, margin, logo_width, logo_height),
	}


#============================================
def draw_text_lines(
	canvas: PIL.Image.Image,
	box: BoxRegion,
	lines: list[str],
	font: ResolvedFont,
	offset_x: float = 0.0,
	offset_y: float = 0.0,
) -> None:
	"""
	Draw text lines clipped to a box.

	Lines are drawn into a coverage mask the size of the box, so nothing
	spills outside it, then the text colour is pasted through the mask.

	Args:
		canvas: Target image.
		box: Layout box in canvas pixels.
		lines: Lines drawn top to bottom, one line metric apart.
		font: Resolved font.
		offset_x: Horizontal offset of the text inside the box.
		offset_y: Vertical offset of the first line inside the box.
	"""
	left, top, right, bottom = box.to_pixel_box()
	width = right - left
	height = bottom - top
	if width <= 0 or height <= 0 or not any(lines):
		return
	mask = PIL.Image.new("L", (width, height), 0)
	draw = PIL.ImageDraw.Draw(mask)
	line_height = font.line_height
	rule_width = max(1, int(round(font.pixel_size / 14.0)))
	for index, line in enumerate(lines):
		if not line:
			continue
		text_x = offset_x
		text_y = offset_y + index * line_height
		draw.text(
			(text_x, text_y),
			line,
			font=font.font,
			fill=255,
			stroke_width=font.stroke_width,
			stroke_fill=255,
		)
		line_width = font.text_width(line)
		if font.style & FontStyle.UNDERLINE:
			rule_y = text_y + font.ascent + rule_width
			draw.line([(text_x, rule_y), (text_x + line_width, rule_y)], fill=255, width=rule_width)
		if font.style & FontStyle.STRIKEOUT:
			rule_y = text_y + font.ascent * 0.65
			draw.line([(text_x, rule_y), (text_x + line_width, rule_y)], fill=255, width=rule_width)
	canvas.paste(TEXT_COLOR, (left, top, right, bottom), mask)
	mask.close()


#============================================
def draw_placeholder(
	canvas: PIL.Image.Image,
	box: BoxRegion,
	label: str,
	font: ResolvedFont,
) -> None:
	"""
	Fill a slot box with the neutral placeholder and a centered label.

	Args:
		canvas: Target image.
		box: Untouched slot box.
		label: Placeholder text.
		font: Placeholder font.
	"""
	left, top, right, bottom = box.to_pixel_box()
	if right <= left or bottom <= top:
		return
	draw = PIL.ImageDraw.Draw(canvas)
	draw.rectangle([left, top, right - 1, bottom - 1], fill=PLACEHOLDER_FILL)
	offset_x = (box.width - font.text_width(label)) / 2.0
	offset_y = (box.height - font.line_height) / 2.0
	draw_text_lines(canvas, box, [label], font, offset_x=offset_x, offset_y=offset_y)


#============================================
def draw_fitted_image(
	canvas: PIL.Image.Image,
	region: BoxRegion,
	source: PIL.Image.Image,
	border: bool,
) -> None:
	"""
	Scale a source image into its fitted region, with an optional border.

	Args:
		canvas: Target image.
		region: Fitted region.
		source: Decoded source image.
		border: Draw a 1 px outline around the region.
	"""
	left, top, right, bottom = region.to_pixel_box()
	width = max(1, right - left)
	height = max(1, bottom - top)
	resized = source.resize((width, height), PIL.Image.Resampling.BICUBIC)
	if resized.mode == "RGBA":
		canvas.paste(resized.convert("RGB"), (left, top), resized.getchannel("A"))
	else:
		canvas.paste(resized, (left, top))
	resized.close()
	if border:
		draw = PIL.ImageDraw.Draw(canvas)
		draw.rectangle(
			[left, top, left + width, top + height],
			outline=BORDER_COLOR,
			width=BORDER_WIDTH,
		)


#============================================
def draw_image_slot(
	canvas: PIL.Image.Image,
	slot: str,
	path: str | None,
	box: BoxRegion,
	placeholder_font: ResolvedFont,
	reporter: bcr.report.Reporter,
) -> SlotOutcome:
	"""
	Resolve one image slot and draw the image or its placeholder.

	Args:
		canvas: Target image.
		slot: Slot name, a key of SLOT_POLICIES.
		path: Configured image path.
		box: Unfitted slot box.
		placeholder_font: Font for the placeholder label.
		reporter: Event sink.

	Returns:
		SlotOutcome.
	"""
	policy = SLOT_POLICIES[slot]
	fitted = bcr.geometry.resolve_image_slot(path, box)
	if isinstance(fitted, Missing):
		reporter.report(bcr.report.AssetUnavailable(slot=slot, path=path, reason=fitted.reason))
		draw_placeholder(canvas, fitted.region, policy.placeholder_text, placeholder_font)
		return SlotOutcome(slot, box, fitted.region, True, False, fitted.reason)
	try:
		draw_fitted_image(canvas, fitted.region, fitted.source, policy.border)
	finally:
		fitted.source.close()
	return SlotOutcome(slot, box, fitted.region, False, policy.border)


#============================================
def resolve_role_font(
	role: str,
	family: str | None,
	size_points: float,
	style_text: str | None,
	dpi: float,
	font_index: dict[str, pathlib.Path],
	reporter: bcr.report.Reporter,
) -> ResolvedFont:
	"""
	Resolve the font for one text role, reporting any fallback.
	"""
	style = bcr.fonts.parse_font_style_strict(style_text)
	if style is None:
		if style_text and style_text.strip():
			reporter.report(bcr.report.FontStyleFallback(role=role, style=style_text))
		style = FontStyle.REGULAR
	font = bcr.fonts.resolve_font(family, size_points, style, dpi, index=font_index)
	if font.substituted:
		reporter.report(
			bcr.report.FontFamilyFallback(role=role, family=family or "", used=font.source)
		)
	return font


#============================================
def compose_card(
	spec: CardSpec,
	dpi: float = DEFAULT_DPI,
	reporter: bcr.report.Reporter | None = None,
) -> CardComposition:
	"""
	Compose the card bitmap in memory.

	Order: canvas, white background, photo slot, logo slot, text blocks.
	The caller owns the returned image and must close it.

	Args:
		spec: Card specification.
		dpi: Render resolution, used for both layout and font sizes.
		reporter: Event sink; events are dropped when omitted.

	Returns:
		CardComposition.
	"""
	if reporter is None:
		reporter = bcr.report.NullReporter()
	bcr.card_config.validate_card_spec(spec)
	if not math.isfinite(dpi) or dpi <= 0:
		cause = f"DPI must be a positive number, got {dpi}"
		reporter.report(bcr.report.RenderFailure(output_path=None, cause=cause))
		raise RenderFailureError(cause)

	canvas_width, canvas_height = bcr.config.card_size_pixels(dpi)
	try:
		canvas = PIL.Image.new("RGB", (canvas_width, canvas_height), BACKGROUND_COLOR)
	except (ValueError, MemoryError) as error:
		cause = f"cannot allocate {canvas_width}x{canvas_height} canvas: {error}"
		reporter.report(bcr.report.RenderFailure(output_path=None, cause=cause))
		raise RenderFailureError(cause) from error
	canvas.info["dpi"] = (dpi, dpi)

	try:
		margin = bcr.units.pixels(spec.card_data.card_margin_mm, Unit.MILLIMETER, dpi)
		boxes = compute_slot_boxes(spec, canvas_width, margin, dpi)
		font_index = bcr.fonts.index_font_files()
		placeholder_font = bcr.fonts.resolve_font(
			PLACEHOLDER_FONT_NAME, PLACEHOLDER_FONT_SIZE, FontStyle.REGULAR, dpi, index=font_index,
		)

		slots = {
			SLOT_PHOTO: draw_image_slot(
				canvas, SLOT_PHOTO, spec.images.photo_path, boxes[SLOT_PHOTO], placeholder_font, reporter,
			),
			SLOT_LOGO: draw_image_slot(
				canvas, SLOT_LOGO, spec.images.logo_path, boxes[SLOT_LOGO], placeholder_font, reporter,
			),
		}

		fonts = spec.font_settings
		badge_font = resolve_role_font(
			"badge", fonts.badge_font_name, fonts.badge_font_size_points,
			fonts.badge_font_style, dpi, font_index, reporter,
		)
		name_font = resolve_role_font(
			"name", fonts.name_font_name, fonts.name_font_size_points,
			fonts.name_font_style, dpi, font_index, reporter,
		)
		bottom_font = resolve_role_font(
			"bottom", fonts.bottom_font_name, fonts.bottom_font_size_points,
			fonts.bottom_font_style, dpi, font_index, reporter,
		)
		# the name line steps down by the unstyled badge face metric
		badge_step_font = bcr.fonts.resolve_font(
			fonts.badge_font_name, fonts.badge_font_size_points, FontStyle.REGULAR, dpi, index=font_index,
		)

		blocks = bcr.text_layout.stack_text_blocks(
			(canvas_width, canvas_height),
			margin,
			boxes[SLOT_PHOTO],
			spec.card_data,
			badge_font,
			name_font,
			bottom_font,
			dpi,
			badge_step_height=badge_step_font.line_height,
		)
		for block in blocks:
			draw_text_lines(canvas, block.box, block.lines, block.font)
	except Exception:
		canvas.close()
		raise

	return CardComposition(
		image=canvas,
		dpi=dpi,
		margin=margin,
		slots=slots,
		text_blocks=blocks,
	)


#============================================
def write_bytes_atomic(data: bytes, output_path: pathlib.Path) -> None:
	"""
	Write bytes through a temp file so a failure leaves no partial output.

	Args:
		data: File content.
		output_path: Final path.
	"""
	output_path = pathlib.Path(output_path)
	directory = output_path.parent
	directory.mkdir(parents=True, exist_ok=True)
	handle, temp_name = tempfile.mkstemp(prefix=f".{output_path.name}.", dir=directory)
	try:
		with os.fdopen(handle, "wb") as temp_file:
			temp_file.write(data)
		# mkstemp creates 0600; match a plain open() under the current umask
		umask = os.umask(0)
		os.umask(umask)
		os.chmod(temp_name, 0o666 & ~umask)
		os.replace(temp_name, output_path)
	except BaseException:
		if os.path.exists(temp_name):
			os.remove(temp_name)
		raise


#============================================
def encode_png(image: PIL.Image.Image, dpi: float) -> bytes:
	"""
	Encode an image as PNG with DPI metadata.
	"""
	buffer = io.BytesIO()
	image.save(buffer, format="PNG", dpi=(dpi, dpi))
	return buffer.getvalue()


#============================================
def render_card(
	spec: CardSpec,
	output_path: pathlib.Path,
	dpi: float = DEFAULT_DPI,
	reporter: bcr.report.Reporter | None = None,
) -> RenderResult:
	"""
	Render the card and write it as a PNG file.

	Args:
		spec: Card specification.
		output_path: Output PNG path.
		dpi: Render resolution.
		reporter: Event sink.

	Returns:
		RenderResult.
	"""
	if reporter is None:
		reporter = bcr.report.NullReporter()
	output_path = pathlib.Path(output_path)
	composition = compose_card(spec, dpi=dpi, reporter=reporter)
	try:
		width, height = composition.size
		try:
			data = encode_png(composition.image, dpi)
			write_bytes_atomic(data, output_path)
		except (OSError, ValueError) as error:
			reporter.report(bcr.report.RenderFailure(output_path=str(output_path), cause=str(error)))
			raise RenderFailureError(f"cannot write {output_path}: {error}") from error
	finally:
		composition.image.close()

	reporter.report(bcr.report.CardWritten(output_path=str(output_path), width=width, height=height))
	return RenderResult(
		output_path=output_path,
		width=width,
		height=height,
		dpi=dpi,
		slots=composition.slots,
		text_blocks=composition.text_blocks,
	)


#============================================
def write_card_pdf(
	png_path: pathlib.Path,
	pdf_path: pathlib.Path,
	reporter: bcr.report.Reporter | None = None,
) -> None:
	"""
	Write a one page PDF proof at the physical CR80 card size.

	The rendered bitmap is placed edge to edge, so the page prints at
	85.60 x 53.98 mm whatever the bitmap resolution.

	Args:
		png_path: Rendered card PNG.
		pdf_path: Output PDF path.
		reporter: Event sink.
	"""
	if reporter is None:
		reporter = bcr.report.NullReporter()
	page_width = CARD_WIDTH_MM * reportlab.lib.units.mm
	page_height = CARD_HEIGHT_MM * reportlab.lib.units.mm
	try:
		buffer = io.BytesIO()
		pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
		pdf.setTitle(pathlib.Path(png_path).stem)
		with PIL.Image.open(png_path) as bitmap:
			bitmap.load()
			image_reader = reportlab.lib.utils.ImageReader(bitmap)
			pdf.drawImage(
				image_reader,
				0,
				0,
				width=page_width,
				height=page_height,
				mask=None,
				preserveAspectRatio=False,
				anchor="sw",
			)
		pdf.showPage()
		pdf.save()
		write_bytes_atomic(buffer.getvalue(), pdf_path)
	except (OSError, ValueError) as error:
		reporter.report(bcr.report.RenderFailure(output_path=str(pdf_path), cause=str(error)))
		raise RenderFailureError(f"cannot write {pdf_path}: {error}") from error
	reporter.report(bcr.report.ProofWritten(output_path=str(pdf_path)))
