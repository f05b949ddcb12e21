"""Command line interface for splitting and reconstructing text and image secrets."""

import argparse
import logging
import sys

from bytewise import reconstruct_text, select_participants, share_text
from image_utils import load_image, pixels_to_image, reconstruct_image, share_image
from share_codec import read_shares_file, write_shares_file
from sss_core import PRIME, ThresholdScheme
from sss_errors import SecretSharingError

logger = logging.getLogger("sss")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _participants(value):
    try:
        xs = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected comma separated integers, got {value!r}")
    if not xs:
        raise argparse.ArgumentTypeError("At least one participant is required")
    return xs


def _add_scheme_args(parser, shares_required):
    parser.add_argument("-k", "--threshold", type=int, required=True,
                        help="Minimum shares needed to reconstruct")
    parser.add_argument("-n", "--shares", type=int, required=shares_required,
                        help="Total number of shares")
    parser.add_argument("--prime", type=int, default=PRIME, help="Field modulus")


def _reconstruction_input(args):
    secret_shares, width, height = read_shares_file(args.input)
    if args.use:
        secret_shares = select_participants(secret_shares, args.use)
    num_shares = args.shares
    if num_shares is None:
        num_shares = max([args.threshold] + [len(shares) for shares in secret_shares])
    scheme = ThresholdScheme(args.threshold, num_shares, args.prime)
    return secret_shares, width, height, scheme


def cmd_share_text(args):
    scheme = ThresholdScheme(args.threshold, args.shares, args.prime)
    if args.text is not None:
        text = args.text
    else:
        text = sys.stdin.read()
        # Drop the newline that terminates piped or typed input
        if text.endswith("\n"):
            text = text[:-1]
            if text.endswith("\r"):
                text = text[:-1]
    secret_shares = share_text(text, scheme)
    write_shares_file(args.output, secret_shares)
    print(f"Generated {scheme.num_shares} shares for {len(secret_shares)} bytes -> {args.output}")


def cmd_reconstruct_text(args):
    secret_shares, _, _, scheme = _reconstruction_input(args)
    print(reconstruct_text(secret_shares, scheme))


def cmd_share_image(args):
    scheme = ThresholdScheme(args.threshold, args.shares, args.prime)
    secret_shares, width, height = share_image(load_image(args.image), scheme)
    write_shares_file(args.output, secret_shares, width, height)
    print(f"Generated shares for {width}x{height} image ({len(secret_shares)} pixels) -> {args.output}")


def cmd_reconstruct_image(args):
    secret_shares, width, height, scheme = _reconstruction_input(args)
    if width is None:
        raise SecretSharingError(f"{args.input} holds text shares, not image shares")
    output = args.output
    if not output.lower().endswith(".png"):
        output += ".png"
    pixels = reconstruct_image(secret_shares, width, height, scheme)
    pixels_to_image(pixels).save(output, format="PNG")
    print(f"Image reconstructed -> {output}")


def build_parser():
    parser = argparse.ArgumentParser(prog="sss", description="Shamir's Secret Sharing for text and images")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_share_text = sub.add_parser("share-text", help="Split a text secret")
    _add_scheme_args(p_share_text, shares_required=True)
    p_share_text.add_argument("-o", "--output", required=True, help="Share file to write")
    p_share_text.add_argument("text", nargs="?", help="Secret text, read from stdin if omitted")
    p_share_text.set_defaults(func=cmd_share_text)

    p_rec_text = sub.add_parser("reconstruct-text", help="Reconstruct a text secret")
    _add_scheme_args(p_rec_text, shares_required=False)
    p_rec_text.add_argument("--use", type=_participants, help="Participants to use, e.g. 1,3,5")
    p_rec_text.add_argument("input", help="Share file to read")
    p_rec_text.set_defaults(func=cmd_reconstruct_text)

    p_share_image = sub.add_parser("share-image", help="Split a grayscale version of an image")
    _add_scheme_args(p_share_image, shares_required=True)
    p_share_image.add_argument("-o", "--output", required=True, help="Share file to write")
    p_share_image.add_argument("image", help="Image to share (JPG, PNG, ...)")
    p_share_image.set_defaults(func=cmd_share_image)

    p_rec_image = sub.add_parser("reconstruct-image", help="Reconstruct an image secret")
    _add_scheme_args(p_rec_image, shares_required=False)
    p_rec_image.add_argument("--use", type=_participants, help="Participants to use, e.g. 1,3,5")
    p_rec_image.add_argument("-o", "--output", required=True, help="PNG file to write")
    p_rec_image.add_argument("input", help="Share file to read")
    p_rec_image.set_defaults(func=cmd_reconstruct_image)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)

    try:
        args.func(args)
    except (SecretSharingError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
