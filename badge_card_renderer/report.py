"""
Structured render events and the reporters that receive them.
"""

# Standard Library
import dataclasses
import typing


@dataclasses.dataclass(frozen=True)
class AssetUnavailable:
	slot: str
	path: str | None
	reason: str


@dataclasses.dataclass(frozen=True)
class FontStyleFallback:
	role: str
	style: str


@dataclasses.dataclass(frozen=True)
class FontFamilyFallback:
	role: str
	family: str
	used: str


@dataclasses.dataclass(frozen=True)
class RenderFailure:
	output_path: str | None
	cause: str


@dataclasses.dataclass(frozen=True)
class CardWritten:
	output_path: str
	width: int
	height: int


@dataclasses.dataclass(frozen=True)
class ProofWritten:
	output_path: str


@dataclasses.dataclass(frozen=True)
class PrintRequested:
	ip_address: str | None
	port: int


@dataclasses.dataclass(frozen=True)
class PrintDisabled:
	pass


RenderEvent = typing.Union[
	AssetUnavailable,
	FontStyleFallback,
	FontFamilyFallback,
	RenderFailure,
	CardWritten,
	ProofWritten,
	PrintRequested,
	PrintDisabled,
]


class Reporter(typing.Protocol):
	def report(self, event: RenderEvent) -> None:
		...


class CollectingReporter:
	"""
	Keep every event in order.
	"""

	def __init__(self) -> None:
		self.events: list[RenderEvent] = []

	def report(self, event: RenderEvent) -> None:
		self.events.append(event)

	def of_type(self, event_type: type) -> list[RenderEvent]:
		return [event for event in self.events if isinstance(event, event_type)]


class NullReporter:
	def report(self, event: RenderEvent) -> None:
		return None


#============================================
def format_event(event: RenderEvent) -> str:
	"""
	Format an event as a single console line.

	Args:
		event: Render event.

	Returns:
		Message text.
	"""
	if isinstance(event, AssetUnavailable):
		return f"Warning: {event.slot} image unavailable ({event.path}): {event.reason}. Using placeholder."
	if isinstance(event, FontStyleFallback):
		return f"Warning: unknown {event.role} font style {event.style!r}, using Regular."
	if isinstance(event, FontFamilyFallback):
		return f"Warning: {event.role} font {event.family!r} not found, using {event.used}."
	if isinstance(event, RenderFailure):
		if event.output_path is None:
			return f"Error: could not render card: {event.cause}"
		return f"Error: could not render {event.output_path}: {event.cause}"
	if isinstance(event, CardWritten):
		return f"Card preview saved: {event.output_path} ({event.width}x{event.height} px)"
	if isinstance(event, ProofWritten):
		return f"Card PDF proof saved: {event.output_path}"
	if isinstance(event, PrintRequested):
		return (
			f"Physical print requested: {event.ip_address}:{event.port}\n"
			"Physical printing is not implemented."
		)
	if isinstance(event, PrintDisabled):
		return "Physical printing disabled in configuration (EnablePhysicalPrinting: false)."
	return str(event)


class ConsoleReporter:
	"""
	Print each event to the console.
	"""

	def report(self, event: RenderEvent) -> None:
		print(format_event(event))
