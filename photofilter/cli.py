#!/usr/bin/env python3
"""
Command line interface: list filters, apply a filter to an image, manage the artwork library,
and show the candidate image catalog.
"""

import os
import sys
import logging
import argparse

from .capture import prompt_capture, CaptureResult, CANCELLED
from .config import load_config, catalog_from_config
from .pixel_image import PixelImage, DecodeError
from .source import fetch_candidate_images, CatalogFetchError, ImageStream
from .storage import ArtworkLibrary, validate_rating

logger = logging.getLogger(__name__)

LOGLEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def cmd_filters(args, config):
    catalog = catalog_from_config(config)
    for (identifier, title, _) in catalog.entries():
        print(f"{identifier:16} {title}")
    return 0


def capture_from_args(args):
    if args.caption is not None or args.rating is not None:
        return CaptureResult(args.caption or '', args.rating or 0)
    return prompt_capture()


def save_output(out, path, config):
    """Write `out` to `path`; returns False and reports the problem if the format can't be written."""
    try:
        out.save(path, quality=config['output']['jpeg_quality'])
    except ValueError as e:
        print(f"Cannot write '{path}': {e}", file=sys.stderr)
        return False
    return True


def apply_directory(args, config, f):
    """Filter every image under args.input into the same place under args.output."""
    if args.save:
        print("--save needs a single input image", file=sys.stderr)
        return 2
    failures = 0
    for img in ImageStream(args.input):
        src = img.history[0][1]
        dst = os.path.join(args.output, os.path.relpath(src, args.input))
        out = f.apply(img)
        if out is None:
            print(f"Filter '{f.title}' failed on {src}", file=sys.stderr)
            failures += 1
            continue
        os.makedirs(os.path.dirname(dst), exist_ok=True)
        if not save_output(out, dst, config):
            failures += 1
            continue
        print(f"{src} -> {dst} ({f.title}, {out.width}x{out.height})")
    return 1 if failures else 0


def cmd_apply(args, config):
    catalog = catalog_from_config(config)
    try:
        f = catalog.get(args.filter)
    except KeyError as e:
        print(e.args[0], file=sys.stderr)
        return 2
    if os.path.isdir(args.input):
        return apply_directory(args, config, f)
    try:
        img = PixelImage.from_file(args.input)
    except (FileNotFoundError, DecodeError) as e:
        print(f"Cannot read '{args.input}': {e}", file=sys.stderr)
        return 1
    out = f.apply(img)
    if out is None:
        print(f"Filter '{f.title}' failed on {args.input}", file=sys.stderr)
        return 1
    if not save_output(out, args.output, config):
        return 1
    print(f"{args.input} -> {args.output} ({f.title}, {out.width}x{out.height})")

    if args.save:
        result = capture_from_args(args)
        if result is CANCELLED:
            print("not saved")
            return 0
        library = ArtworkLibrary(config['library']['root'],
                                 jpeg_quality=config['output']['jpeg_quality'])
        record = library.save(out, caption=result.caption, rating=result.rating)
        print(f"saved {record.record_id}")
    return 0


def cmd_library(args, config):
    library = ArtworkLibrary(config['library']['root'])
    if args.remove:
        try:
            library.remove(library.get(args.remove))
        except KeyError:
            print(f"No artwork {args.remove}", file=sys.stderr)
            return 1
        print(f"removed {args.remove}")
        return 0
    for record in library.list_all(order_by_timestamp=True):
        stars = '*' * record.rating
        print(f"{record.record_id}  {record.created:%Y-%m-%d %H:%M:%S}  {stars:5}  {record.caption}")
    return 0


def cmd_fetch(args, config):
    endpoint = args.url or config['api']['endpoint']
    try:
        images = fetch_candidate_images(endpoint, timeout=config['api']['timeout'])
    except CatalogFetchError as e:
        print(e, file=sys.stderr)
        return 1
    for d in images:
        print(f"{d.id:6}  {d.title or '':30}  {d.author or '':20}  {d.url}")
    return 0


def rating_arg(s):
    try:
        v = int(s)
        validate_rating(v)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return v


def make_parser():
    parser = argparse.ArgumentParser(description="Apply photo filters and keep the results",
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("--config", help='YAML configuration file')
    parser.add_argument("--loglevel", help="logging level", choices=LOGLEVELS, default='WARNING')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('filters', help='list the available filters')
    p.set_defaults(func=cmd_filters)

    p = sub.add_parser('apply', help='apply a filter to an image')
    p.add_argument("filter", help="filter identifier (see 'filters')")
    p.add_argument("input", help="image to read, or a directory of images")
    p.add_argument("output", help="image to write, format from the extension; a directory if input is one")
    p.add_argument("--save", help="also store the result in the library", action='store_true')
    p.add_argument("--caption", help="caption for the library; asked for if neither --caption nor --rating")
    p.add_argument("--rating", type=rating_arg, help="rating 0-5 for the library")
    p.set_defaults(func=cmd_apply)

    p = sub.add_parser('library', help='list the stored artworks')
    p.add_argument("--remove", metavar='ID', help="remove the artwork with this id")
    p.set_defaults(func=cmd_library)

    p = sub.add_parser('fetch', help='show the candidate images offered for filtering')
    p.add_argument("url", nargs='?', help="catalog endpoint (default from config)")
    p.set_defaults(func=cmd_fetch)
    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)
    logging.basicConfig(level=args.loglevel,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')
    config = load_config(args.config)
    return args.func(args, config)


if __name__=="__main__":
    sys.exit(main())
