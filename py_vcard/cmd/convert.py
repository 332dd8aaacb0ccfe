"""vCard conversion command-line tool."""

import argparse
import sys
from pathlib import Path

FORMATS = ("text", "xml", "json", "html")
VERSIONS = ("2.1", "3.0", "4.0")


def _reader(fmt: str, source: Path | str, page_url: str | None):
    from py_vcard import HCardReader, JCardReader, VCardReader, XCardReader

    if fmt == "xml":
        return XCardReader(source)
    if fmt == "json":
        return JCardReader(source)
    if fmt == "html":
        return HCardReader(source, page_url=page_url)
    return VCardReader(source)


def _writer(fmt: str, out, version: str):
    from py_vcard import HCardWriter, JCardWriter, VCardVersion, VCardWriter, XCardWriter

    if fmt == "xml":
        return XCardWriter(out, indent=True)
    if fmt == "json":
        return JCardWriter(out, indent=True)
    if fmt == "html":
        return HCardWriter(out)
    return VCardWriter(out, VCardVersion.from_string(version))


def _guess_format(path: str | None) -> str:
    suffix = Path(path).suffix.lower() if path else ""
    return {
        ".xml": "xml",
        ".json": "json",
        ".html": "html",
        ".htm": "html",
    }.get(suffix, "text")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the converter."""
    parser = argparse.ArgumentParser(
        description="Convert vCards between the text, xCard, jCard and hCard formats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a 2.1 vCard file to 4.0
  py-vcard-convert --version 4.0 contacts.vcf out.vcf

  # Convert to xCard, reading from stdin
  cat contacts.vcf | py-vcard-convert --to xml

  # Extract the hCards of a web page
  py-vcard-convert --from html --page-url https://example.com/ page.html

The format of a file is guessed from its extension unless --from or --to is
given. Warnings are printed to stderr.
        """,
    )
    parser.add_argument(
        "--from",
        dest="from_format",
        choices=FORMATS,
        help="input format (default: guessed from the input file name)",
    )
    parser.add_argument(
        "--to",
        dest="to_format",
        choices=FORMATS,
        help="output format (default: guessed from the output file name)",
    )
    parser.add_argument(
        "--version",
        choices=VERSIONS,
        default="3.0",
        help="vCard version of text output (default: 3.0)",
    )
    parser.add_argument(
        "--page-url",
        help="URL of an HTML input page, used to resolve relative links",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="enable debug logging",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="input file (default: stdin)",
    )
    parser.add_argument(
        "output",
        nargs="?",
        help="output file (default: stdout)",
    )

    args = parser.parse_args(argv)

    if args.debug:
        from py_vcard.debug import setup_debug_logging
        setup_debug_logging()

    from py_vcard import VCardError

    from_format = args.from_format or _guess_format(args.input)
    to_format = args.to_format or _guess_format(args.output)

    if args.input:
        source = Path(args.input)
        if not source.is_file():
            print(f"Error: input file does not exist: {source}", file=sys.stderr)
            return 1
    else:
        source = sys.stdin.read()

    out = Path(args.output) if args.output else sys.stdout

    try:
        reader = _reader(from_format, source, args.page_url)
    except VCardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    count = 0
    with reader, _writer(to_format, out, args.version) as writer:
        for vcard in reader:
            for warning in reader.warnings:
                print(f"Warning (read #{count + 1}): {warning}", file=sys.stderr)
            writer.write(vcard)
            for warning in writer.warnings:
                print(f"Warning (write #{count + 1}): {warning}", file=sys.stderr)
            count += 1

    if count == 0:
        print("Error: no vCards found in the input", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
