"""Command line interface for labposter."""
import argparse
import logging
import sys
from pathlib import Path

from labposter.palette_export import format_color
from labposter.pipeline import PosterizePipeline
from labposter.stylist import CHARACTERS
from labposter.types import HarmonyMode, ModificationSettings, PosterizationError, PosterizeConfig, Weighting


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='labposter',
        description='Posterize an image to a small perceptual palette'
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Output PNG path (default: <input>_poster.png)'
    )

    parser.add_argument(
        '--colors',
        type=int,
        default=8,
        help='Number of palette colors (default: 8)'
    )

    parser.add_argument(
        '--detail',
        type=int,
        default=100,
        help='Detail level; sampling stride is 1000 // detail (default: 100)'
    )

    parser.add_argument(
        '--iterations',
        type=int,
        default=20,
        help='Maximum K-means iterations (default: 20)'
    )

    parser.add_argument(
        '--weighting',
        type=str,
        choices=[w.value for w in Weighting],
        default=Weighting.CONTRAST.value,
        help='Sample importance heuristic (default: contrast)'
    )

    parser.add_argument(
        '--character',
        type=str,
        choices=sorted(CHARACTERS),
        default=None,
        help='Palette character style'
    )

    parser.add_argument(
        '--value',
        type=float,
        default=None,
        help='Lightness shift applied to every palette color, -100 to 100'
    )

    parser.add_argument(
        '--harmony',
        type=str,
        choices=[m.value for m in HarmonyMode],
        default=HarmonyMode.NONE.value,
        help='Color harmony enforced on the final palette (default: none)'
    )

    parser.add_argument(
        '--full-coverage',
        action='store_true',
        help='Map every pixel, not only the sampled prefix'
    )

    parser.add_argument(
        '--palette-image',
        type=str,
        default=None,
        help='Save a palette swatch PNG to this path'
    )

    parser.add_argument(
        '--palette-code',
        type=str,
        default=None,
        help='Save CSS/SCSS/JSON palette code to this path'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s'
    )

    # Resolve input path
    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if parsed_args.output:
        output_path = Path(parsed_args.output)
    else:
        output_path = input_path.with_name(f"{input_path.stem}_poster.png")

    try:
        config = PosterizeConfig(
            n_colors=parsed_args.colors,
            detail_level=parsed_args.detail,
            max_iterations=parsed_args.iterations,
            weighting=parsed_args.weighting,
            modifications=ModificationSettings(
                character=parsed_args.character,
                value=parsed_args.value
            ),
            harmony=parsed_args.harmony,
            full_coverage=parsed_args.full_coverage
        )

        pipeline = PosterizePipeline(config)
        result = pipeline.process(
            input_path,
            output_path,
            palette_image_path=parsed_args.palette_image,
            palette_code_path=parsed_args.palette_code
        )
    except (PosterizationError, OSError) as e:
        logging.getLogger(__name__).debug("Posterization failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Palette ({len(result.palette)} colors):")
    for rgb in result.palette:
        print(f"  {format_color(rgb)}")
    print(f"Output: {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
