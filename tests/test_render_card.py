import pathlib

import PIL.Image
import pytest

import badge_card_renderer.config
import badge_card_renderer.errors
import badge_card_renderer.fonts
import badge_card_renderer.render
import badge_card_renderer.report
import badge_card_renderer.units

config = badge_card_renderer.config
render = badge_card_renderer.render
report = badge_card_renderer.report
units = badge_card_renderer.units

DPI = 300.0
PHOTO_COLOR = (20, 110, 190)
LOGO_COLOR = (230, 30, 40)


#============================================
def build_spec(
	photo_path: str | None,
	logo_path: str | None,
	additional_text: str = "Property of ACME",
	photo_size_cm: tuple[float, float] = (2.5, 3.0),
) -> config.CardSpec:
	"""
	Build a CardSpec for render tests.
	"""
	return config.CardSpec(
		font_settings=config.FontSettings(
			badge_font_name="DejaVu Sans",
			badge_font_size_points=8.0,
			badge_font_style="Bold",
			name_font_name="DejaVu Sans",
			name_font_size_points=9.0,
			name_font_style="Regular",
			bottom_font_name="DejaVu Sans",
			bottom_font_size_points=6.0,
			bottom_font_style="NotAStyle",
		),
		card_data=config.CardData(
			employee_id="ID 0042",
			full_name="Alex Sample",
			additional_text=additional_text,
			card_margin_mm=3.0,
		),
		images=config.ImageSettings(
			photo_path=photo_path,
			photo_width_cm=photo_size_cm[0],
			photo_height_cm=photo_size_cm[1],
			logo_path=logo_path,
			logo_width_cm=2.0,
			logo_height_cm=1.0,
		),
		printer_settings=config.PrinterSettings(),
	)


#============================================
def write_image(path: pathlib.Path, size: tuple[int, int], color: tuple[int, int, int]) -> str:
	"""
	Write a solid-color test image.
	"""
	PIL.Image.new("RGB", size, color).save(path)
	return str(path)


#============================================
def test_output_canvas_size(tmp_path: pathlib.Path) -> None:
	"""
	The PNG is CR80 sized at the render DPI and carries DPI metadata.
	"""
	output = tmp_path / "card.png"
	result = render.render_card(build_spec(None, None), output, dpi=DPI)
	assert (result.width, result.height) == config.card_size_pixels(DPI) == (1011, 638)
	with PIL.Image.open(output) as image:
		assert image.format == "PNG"
		assert image.size == (1011, 638)
		assert image.info["dpi"][0] == pytest.approx(DPI, abs=0.5)
		assert image.getpixel((2, 2)) == config.BACKGROUND_COLOR


#============================================
def test_valid_photo_fills_box_and_gets_border(tmp_path: pathlib.Path) -> None:
	"""
	A 300x400 photo in a 3x4 cm box is placed full width with a border.
	"""
	photo = write_image(tmp_path / "photo.png", (300, 400), PHOTO_COLOR)
	spec = build_spec(photo, None, photo_size_cm=(3.0, 4.0))
	output = tmp_path / "card.png"
	result = render.render_card(spec, output, dpi=DPI)

	outcome = result.slots[render.SLOT_PHOTO]
	assert not outcome.placeholder_used
	assert outcome.bordered
	assert outcome.box.width == pytest.approx(units.cm_to_pixels(3.0, DPI))
	assert outcome.region.width == pytest.approx(outcome.box.width)
	assert outcome.region.x == pytest.approx(outcome.box.x)

	left, top, _right, _bottom = outcome.region.to_pixel_box()
	with PIL.Image.open(output) as image:
		rgb = image.convert("RGB")
		assert rgb.getpixel((left, top)) == config.BORDER_COLOR
		assert rgb.getpixel((left + 5, top + 5)) == PHOTO_COLOR


#============================================
def test_missing_photo_draws_placeholder_without_border(tmp_path: pathlib.Path) -> None:
	"""
	A missing photo leaves a light gray box with a centered label and no border.
	"""
	reporter = report.CollectingReporter()
	spec = build_spec(str(tmp_path / "absent.jpg"), None)
	output = tmp_path / "card.png"
	result = render.render_card(spec, output, dpi=DPI, reporter=reporter)

	outcome = result.slots[render.SLOT_PHOTO]
	assert result.photo_placeholder_used
	assert not outcome.bordered
	margin = units.mm_to_pixels(3.0, DPI)
	assert outcome.region == outcome.box
	assert outcome.box.x == margin and outcome.box.y == margin
	assert outcome.box.width == units.cm_to_pixels(2.5, DPI)
	assert outcome.box.height == units.cm_to_pixels(3.0, DPI)

	left, top, right, bottom = outcome.box.to_pixel_box()
	with PIL.Image.open(output) as image:
		rgb = image.convert("RGB")
		for corner in ((left, top), (right - 1, top), (left, bottom - 1), (right - 1, bottom - 1)):
			assert rgb.getpixel(corner) == config.PLACEHOLDER_FILL
		assert rgb.getpixel((left - 1, top)) == config.BACKGROUND_COLOR
		center = rgb.crop((left + 10, top + (bottom - top) // 3, right - 10, bottom - (bottom - top) // 3))
		assert min(center.convert("L").getdata()) < 128

	unavailable = reporter.of_type(report.AssetUnavailable)
	assert [event.slot for event in unavailable] == ["photo", "logo"]
	assert unavailable[0].path == spec.images.photo_path


#============================================
def test_missing_photo_render_is_repeatable(tmp_path: pathlib.Path) -> None:
	"""
	Two renders with an unreadable photo give identical placeholder pixels.
	"""
	broken = tmp_path / "broken.jpg"
	broken.write_bytes(b"\x00\x01garbage")
	spec = build_spec(str(broken), None)
	first = render.render_card(spec, tmp_path / "first.png", dpi=DPI)
	second = render.render_card(spec, tmp_path / "second.png", dpi=DPI)
	box = first.slots[render.SLOT_PHOTO].box.to_pixel_box()
	logo_box = first.slots[render.SLOT_LOGO].box.to_pixel_box()
	with PIL.Image.open(first.output_path) as one, PIL.Image.open(second.output_path) as two:
		assert one.crop(box).tobytes() == two.crop(box).tobytes()
		assert one.crop(logo_box).tobytes() == two.crop(logo_box).tobytes()


#============================================
def test_logo_is_never_bordered(tmp_path: pathlib.Path) -> None:
	"""
	A placed logo is centered top right with no outline.
	"""
	logo = write_image(tmp_path / "logo.png", (400, 100), LOGO_COLOR)
	output = tmp_path / "card.png"
	result = render.render_card(build_spec(None, logo), output, dpi=DPI)

	outcome = result.slots[render.SLOT_LOGO]
	assert not outcome.placeholder_used
	assert not outcome.bordered
	canvas_width, _height = config.card_size_pixels(DPI)
	margin = units.mm_to_pixels(3.0, DPI)
	assert outcome.box.right == pytest.approx(canvas_width - margin)
	assert outcome.region.width == pytest.approx(outcome.box.width)
	assert outcome.region.y > outcome.box.y

	left, top, right, bottom = outcome.region.to_pixel_box()
	with PIL.Image.open(output) as image:
		rgb = image.convert("RGB")
		assert rgb.getpixel((left, top)) == LOGO_COLOR
		assert rgb.getpixel((right - 1, bottom - 1)) == LOGO_COLOR
		assert rgb.getpixel((left, top - 1)) == config.BACKGROUND_COLOR


#============================================
def test_transparent_logo_keeps_white_background(tmp_path: pathlib.Path) -> None:
	"""
	Transparent logo pixels show the white card.
	"""
	logo_path = tmp_path / "logo.png"
	PIL.Image.new("RGBA", (200, 100), (0, 0, 0, 0)).save(logo_path)
	output = tmp_path / "card.png"
	result = render.render_card(build_spec(None, str(logo_path)), output, dpi=DPI)
	left, top, right, bottom = result.slots[render.SLOT_LOGO].region.to_pixel_box()
	with PIL.Image.open(output) as image:
		rgb = image.convert("RGB")
		assert rgb.getpixel(((left + right) // 2, (top + bottom) // 2)) == config.BACKGROUND_COLOR


#============================================
def test_wrapped_bottom_text_grows_upward(tmp_path: pathlib.Path) -> None:
	"""
	Longer additional text moves the block top up, not its bottom edge.
	"""
	short = render.render_card(build_spec(None, None, "One line"), tmp_path / "short.png", dpi=DPI)
	long_text = " ".join(["Property of ACME, please return to the front desk if found."] * 5)
	tall = render.render_card(build_spec(None, None, long_text), tmp_path / "tall.png", dpi=DPI)
	short_block = short.text_blocks[2]
	tall_block = tall.text_blocks[2]
	assert len(tall_block.lines) > len(short_block.lines) == 1
	assert tall_block.y < short_block.y
	margin = units.mm_to_pixels(3.0, DPI)
	assert tall_block.bottom == pytest.approx(short.height - margin)
	assert short_block.bottom == pytest.approx(short.height - margin)
	line_height = tall_block.font.line_height
	assert short_block.y - tall_block.y == pytest.approx((len(tall_block.lines) - 1) * line_height)


#============================================
def test_text_blocks_follow_photo_box(tmp_path: pathlib.Path) -> None:
	"""
	Badge and name lines stack under the unfitted photo box.
	"""
	result = render.render_card(build_spec(None, None), tmp_path / "card.png", dpi=DPI)
	badge, name, _bottom = result.text_blocks
	photo_box = result.slots[render.SLOT_PHOTO].box
	assert badge.y == pytest.approx(photo_box.bottom + units.mm_to_pixels(1.5, DPI))
	assert name.y > badge.y
	assert badge.text == "ID 0042"
	assert name.text == "Alex Sample"


#============================================
def test_unknown_font_style_is_reported_not_fatal(tmp_path: pathlib.Path) -> None:
	"""
	An unknown style string falls back to Regular and is reported.
	"""
	reporter = report.CollectingReporter()
	result = render.render_card(build_spec(None, None), tmp_path / "card.png", dpi=DPI, reporter=reporter)
	fallbacks = reporter.of_type(report.FontStyleFallback)
	assert [(event.role, event.style) for event in fallbacks] == [("bottom", "NotAStyle")]
	assert result.text_blocks[2].font.style == badge_card_renderer.render.FontStyle.REGULAR
	assert reporter.of_type(report.CardWritten)


#============================================
def test_write_failure_leaves_no_output(tmp_path: pathlib.Path) -> None:
	"""
	A write failure raises RenderFailure and leaves no file behind.
	"""
	blocker = tmp_path / "blocker"
	blocker.write_text("not a directory", encoding="utf-8")
	output = blocker / "card.png"
	reporter = report.CollectingReporter()
	with pytest.raises(badge_card_renderer.errors.RenderFailureError):
		render.render_card(build_spec(None, None), output, dpi=DPI, reporter=reporter)
	assert not output.exists()
	assert reporter.of_type(report.RenderFailure)
	assert not reporter.of_type(report.CardWritten)


#============================================
def test_invalid_spec_is_rejected_before_rendering(tmp_path: pathlib.Path) -> None:
	"""
	Negative measurements abort the render with no output.
	"""
	spec = build_spec(None, None)
	spec.images.photo_width_cm = -1.0
	output = tmp_path / "card.png"
	with pytest.raises(badge_card_renderer.errors.ConfigMalformedError):
		render.render_card(spec, output, dpi=DPI)
	assert not output.exists()


#============================================
def test_name_line_steps_by_unstyled_badge_face(tmp_path: pathlib.Path) -> None:
	"""
	With a bold badge style, the name line steps by the regular badge face metric plus 1 mm.
	"""
	spec = build_spec(None, None)
	assert spec.font_settings.badge_font_style == "Bold"
	result = render.render_card(spec, tmp_path / "card.png", dpi=DPI)
	badge, name, _bottom = result.text_blocks
	step_font = badge_card_renderer.fonts.resolve_font(
		spec.font_settings.badge_font_name,
		spec.font_settings.badge_font_size_points,
		badge_card_renderer.fonts.FontStyle.REGULAR,
		DPI,
	)
	assert badge.font.style == badge_card_renderer.fonts.FontStyle.BOLD
	expected = badge.y + step_font.line_height + units.mm_to_pixels(1.0, DPI)
	assert name.y == pytest.approx(expected)


#============================================
def test_output_files_follow_umask(tmp_path: pathlib.Path) -> None:
	"""
	The PNG and PDF get the same permissions as a plain file write.
	"""
	output = tmp_path / "card.png"
	render.render_card(build_spec(None, None), output, dpi=DPI)
	pdf_path = tmp_path / "card.pdf"
	render.write_card_pdf(output, pdf_path)
	plain = tmp_path / "plain.bin"
	plain.write_bytes(b"x")
	expected = plain.stat().st_mode & 0o777
	assert output.stat().st_mode & 0o777 == expected
	assert pdf_path.stat().st_mode & 0o777 == expected
	leftovers = [path.name for path in tmp_path.iterdir() if path.name.startswith(".")]
	assert leftovers == []


#============================================
def test_canvas_allocation_failure_is_reported(tmp_path: pathlib.Path, monkeypatch) -> None:
	"""
	A canvas allocation failure emits RenderFailure and writes nothing.
	"""
	def fail_new(*args, **kwargs):
		raise MemoryError("no room for canvas")

	monkeypatch.setattr(render.PIL.Image, "new", fail_new)
	reporter = report.CollectingReporter()
	output = tmp_path / "card.png"
	with pytest.raises(badge_card_renderer.errors.RenderFailureError):
		render.render_card(build_spec(None, None), output, dpi=DPI, reporter=reporter)
	failures = reporter.of_type(report.RenderFailure)
	assert len(failures) == 1
	assert "no room for canvas" in failures[0].cause
	assert not output.exists()


#============================================
def test_slot_boxes_use_centimeter_sizes() -> None:
	"""
	Photo and logo boxes are sized from their centimeter settings.
	"""
	spec = build_spec(None, None)
	canvas_width, _canvas_height = config.card_size_pixels(DPI)
	margin = units.mm_to_pixels(3.0, DPI)
	boxes = render.compute_slot_boxes(spec, canvas_width, margin, DPI)
	photo = boxes[render.SLOT_PHOTO]
	logo = boxes[render.SLOT_LOGO]
	assert (photo.x, photo.y) == (margin, margin)
	assert photo.width == pytest.approx(units.cm_to_pixels(2.5, DPI))
	assert photo.height == pytest.approx(units.cm_to_pixels(3.0, DPI))
	assert logo.width == pytest.approx(units.cm_to_pixels(2.0, DPI))
	assert logo.height == pytest.approx(units.cm_to_pixels(1.0, DPI))
	assert logo.right == pytest.approx(canvas_width - margin)
