#!/usr/bin/env python3
"""
spongeschem CLI - Inspect and validate Sponge schematic files.

Usage:
    spongeschem info house.schem
    spongeschem verify house.schem
    spongeschem palette house.schem
    spongeschem formats
"""

import argparse
import logging
import sys
from collections import Counter


def cmd_info(args):
    """Show dimensions, position and contents of a schematic."""
    from spongeschem.schematic import load_schematic

    try:
        clipboard = load_schematic(args.schematic)

        width, height, length = clipboard.dimensions
        print(f"File: {args.schematic}")
        print(f"Dimensions: {width} x {height} x {length} ({clipboard.region.volume} blocks)")
        print(f"Minimum: {tuple(clipboard.minimum)}")
        print(f"Maximum: {tuple(clipboard.maximum)}")
        print(f"Origin: {tuple(clipboard.origin)}")

        states = {block.state for _, block in clipboard.iter_blocks()}
        print(f"Palette: {len(states)} block states")
        print(f"Tile entities: {clipboard.tile_entity_count()}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_verify(args):
    """Fully decode a schematic and report whether it is valid."""
    from spongeschem.errors import SchematicFormatError
    from spongeschem.schematic import load_schematic

    try:
        load_schematic(args.schematic)
        print("✓ Schematic is valid")
        return 0
    except SchematicFormatError as e:
        print("✗ Verification failed:")
        print(f"  - {type(e).__name__}: {e}")
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_palette(args):
    """List block states with the number of blocks using each."""
    from spongeschem.schematic import load_schematic

    try:
        clipboard = load_schematic(args.schematic)

        counts = Counter(
            block.state
            for _, block in clipboard.iter_blocks()
            if not (args.no_air and block.state.is_air)
        )

        for state, count in counts.most_common():
            print(f"{count:>10}  {state}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_formats(args):
    """List supported formats."""
    from spongeschem.schematic import FILE_EXTENSION, VERSION

    print("Available formats (Name: Aliases):")
    print(f"  Sponge Schematic v{VERSION}: sponge, schem ({FILE_EXTENSION}, gzip or raw NBT)")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="spongeschem - Inspect and validate Sponge schematic files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spongeschem info house.schem
  spongeschem verify house.schem
  spongeschem palette house.schem --no-air
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # info
    info_parser = subparsers.add_parser(
        "info",
        help="Show information about a schematic",
    )
    info_parser.add_argument("schematic", help="Path to .schem file")
    info_parser.set_defaults(func=cmd_info)

    # verify
    verify_parser = subparsers.add_parser(
        "verify",
        help="Decode a schematic and report format errors",
    )
    verify_parser.add_argument("schematic", help="Path to .schem file")
    verify_parser.set_defaults(func=cmd_verify)

    # palette
    palette_parser = subparsers.add_parser(
        "palette",
        help="List block states and their counts",
    )
    palette_parser.add_argument("schematic", help="Path to .schem file")
    palette_parser.add_argument("--no-air", action="store_true", help="Leave air out of the listing")
    palette_parser.set_defaults(func=cmd_palette)

    # formats
    formats_parser = subparsers.add_parser(
        "formats",
        help="List supported schematic formats",
    )
    formats_parser.set_defaults(func=cmd_formats)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
