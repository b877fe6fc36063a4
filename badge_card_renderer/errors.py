"""
Fatal error kinds raised by the card pipeline.

Recoverable problems (missing photo or logo, unknown font style) never
raise; they are reported as events and degrade one slot only.
"""


class CardRenderError(Exception):
	"""
	Base class for fatal card pipeline errors.
	"""


class ConfigMissingError(CardRenderError):
	"""
	The configuration file could not be located.
	"""

	def __init__(self, path: str) -> None:
		super().__init__(f"Configuration file not found: {path}")
		self.path = path


class ConfigMalformedError(CardRenderError):
	"""
	The configuration could not be parsed or is incomplete.
	"""

	def __init__(self, message: str, location: str | None = None) -> None:
		text = message
		if location:
			text = f"{message} (at {location})"
		super().__init__(text)
		self.message = message
		self.location = location


class RenderFailureError(CardRenderError):
	"""
	Canvas allocation, encoding or writing failed.
	"""
