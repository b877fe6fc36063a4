"""
CLI entry points for badge card rendering.
"""

# Standard Library
import argparse
import pathlib
import time

# local repo modules
import badge_card_renderer as bcr
import badge_card_renderer.card_config
import badge_card_renderer.config
import badge_card_renderer.errors
import badge_card_renderer.render
import badge_card_renderer.report


PrinterSettings = bcr.config.PrinterSettings

DEFAULT_CONFIG_FILENAME = bcr.config.DEFAULT_CONFIG_FILENAME
DEFAULT_OUTPUT_FILENAME = bcr.config.DEFAULT_OUTPUT_FILENAME
DEFAULT_DPI = bcr.config.DEFAULT_DPI


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, sys.argv when None.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render a CR80 badge card preview from a JSON configuration.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument(
		"-c", "--config", dest="config_path", default=DEFAULT_CONFIG_FILENAME,
		help=f"Card configuration JSON (default: {DEFAULT_CONFIG_FILENAME}).",
	)

	output_group = parser.add_argument_group("Output")
	output_group.add_argument(
		"-o", "--output", dest="output_path", default=DEFAULT_OUTPUT_FILENAME,
		help=f"Output PNG path (default: {DEFAULT_OUTPUT_FILENAME}).",
	)
	output_group.add_argument(
		"-p", "--pdf", dest="pdf_path", default=None,
		help="Also write a PDF proof at physical card size.",
	)
	output_group.add_argument(
		"-r", "--dpi", dest="dpi", type=float, default=DEFAULT_DPI,
		help=f"Render resolution in DPI (default: {DEFAULT_DPI:g}).",
	)

	args = parser.parse_args(argv)
	return args


#============================================
def report_print_intent(printer: PrinterSettings, reporter: bcr.report.Reporter) -> None:
	"""
	Report the physical print destination; sending is not implemented.

	Args:
		printer: Printer settings.
		reporter: Event sink.
	"""
	if printer.enable_physical_printing:
		reporter.report(bcr.report.PrintRequested(ip_address=printer.ip_address, port=printer.port))
	else:
		reporter.report(bcr.report.PrintDisabled())


#============================================
def run_pipeline(args: argparse.Namespace, reporter: bcr.report.Reporter | None = None) -> int:
	"""
	Load the configuration, render the card and report the print intent.

	Args:
		args: Parsed argparse namespace.
		reporter: Event sink, console when None.

	Returns:
		Process exit code.
	"""
	if reporter is None:
		reporter = bcr.report.ConsoleReporter()
	print("Badge card renderer")
	print(f"Config: {args.config_path}")
	print(f"Output PNG: {args.output_path}")
	if args.pdf_path:
		print(f"Output PDF: {args.pdf_path}")
	print(f"DPI: {args.dpi:g}")

	start_time = time.perf_counter()
	try:
		spec = bcr.card_config.load_card_spec(pathlib.Path(args.config_path))
	except bcr.errors.ConfigMissingError as error:
		print(f"Error: {error}")
		print("Make sure the configuration file exists and is readable.")
		return 1
	except bcr.errors.ConfigMalformedError as error:
		print(f"Error: configuration is malformed: {error}")
		return 1
	print("Configuration loaded.")

	render_start = time.perf_counter()
	try:
		result = bcr.render.render_card(
			spec,
			pathlib.Path(args.output_path),
			dpi=args.dpi,
			reporter=reporter,
		)
		if args.pdf_path:
			bcr.render.write_card_pdf(result.output_path, pathlib.Path(args.pdf_path), reporter=reporter)
	except bcr.errors.CardRenderError as error:
		print(f"Error: {error}")
		return 1
	render_end = time.perf_counter()

	report_print_intent(spec.printer_settings, reporter)

	total_time = time.perf_counter() - start_time
	print(
		"Timing: render={:.2f}s total={:.2f}s".format(
			render_end - render_start,
			total_time,
		)
	)
	return 0


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	exit_code = run_pipeline(args)
	if exit_code:
		raise SystemExit(exit_code)
