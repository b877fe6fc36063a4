"""
Box regions, aspect-ratio fitting and image slot loading.
"""

# Standard Library
import dataclasses
import pathlib

# PIP3 modules
import PIL.Image


@dataclasses.dataclass(frozen=True)
class BoxRegion:
	x: float
	y: float
	width: float
	height: float

	def __post_init__(self) -> None:
		if self.width < 0 or self.height < 0:
			raise ValueError(f"box size must not be negative: {self.width}x{self.height}")

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	def contains(self, other: "BoxRegion", tolerance: float = 1e-9) -> bool:
		return (
			other.x >= self.x - tolerance
			and other.y >= self.y - tolerance
			and other.right <= self.right + tolerance
			and other.bottom <= self.bottom + tolerance
		)

	def to_pixel_box(self) -> tuple[int, int, int, int]:
		"""
		Round edges to integer pixels as (left, top, right, bottom).
		"""
		left = int(round(self.x))
		top = int(round(self.y))
		right = int(round(self.right))
		bottom = int(round(self.bottom))
		return (left, top, right, bottom)


@dataclasses.dataclass
class Placed:
	region: BoxRegion
	source: PIL.Image.Image


@dataclasses.dataclass
class Missing:
	region: BoxRegion
	reason: str


FittedImage = Placed | Missing


#============================================
def fit_box(source_aspect: float, box: BoxRegion) -> BoxRegion:
	"""
	Fit the largest rectangle of a given aspect ratio inside a box.

	A relatively wider source fills the box width and is centered
	vertically; otherwise it fills the box height and is centered
	horizontally. Equal aspects take the height branch, so the box is
	returned with no offset.

	Args:
		source_aspect: Source width divided by height.
		box: Destination box.

	Returns:
		Sub-rectangle of box.
	"""
	if box.width <= 0 or box.height <= 0 or source_aspect <= 0:
		return box
	box_aspect = box.width / box.height
	x = box.x
	y = box.y
	if source_aspect > box_aspect:
		final_width = box.width
		final_height = box.width / source_aspect
		y += (box.height - final_height) / 2.0
	else:
		final_height = box.height
		final_width = box.height * source_aspect
		x += (box.width - final_width) / 2.0
	return BoxRegion(x, y, final_width, final_height)


#============================================
def load_source_image(path: str | None) -> tuple[PIL.Image.Image | None, str]:
	"""
	Load and fully decode a source image.

	Args:
		path: Image path, may be empty.

	Returns:
		Tuple of (image or None, reason when None).
	"""
	if not path:
		return (None, "no path configured")
	source_path = pathlib.Path(path)
	if not source_path.is_file():
		return (None, "file not found")
	try:
		with PIL.Image.open(source_path) as handle:
			handle.load()
			if handle.mode in ("RGBA", "LA") or "transparency" in handle.info:
				image = handle.convert("RGBA")
			else:
				image = handle.convert("RGB")
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as error:
		return (None, f"cannot decode image: {error}")
	if image.width <= 0 or image.height <= 0:
		return (None, "image has no pixels")
	return (image, "")


#============================================
def resolve_image_slot(path: str | None, box: BoxRegion) -> FittedImage:
	"""
	Load a slot image and fit it to its box, or report it missing.

	A missing image keeps the untouched box for the placeholder.

	Args:
		path: Image path.
		box: Slot box.

	Returns:
		Placed or Missing.
	"""
	image, reason = load_source_image(path)
	if image is None:
		return Missing(region=box, reason=reason)
	region = fit_box(image.width / image.height, box)
	return Placed(region=region, source=image)
