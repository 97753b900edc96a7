import argparse
import logging
import sys
from pathlib import Path

from bbpe.errors import TokenizerError
from bbpe.tokenizer import Tokenizer

DEFAULT_TEXT = "你好<|endoftext|><<|endoftext|>"


def main(argv: list[str] | None = None) -> int:
    # fmt: off
    # Parse command line arguments
    parser = argparse.ArgumentParser(description="Byte-level BPE tokenizer")
    parser.add_argument("tokenizer_file", type=str, help="Path to a tokenizer.json file")
    parser.add_argument("--text", type=str, default=None, help="Text to encode")
    parser.add_argument("--input-file", type=str, default=None, help="File whose contents to encode")
    parser.add_argument("--decode", type=str, default=None, help="Comma separated token ids to decode instead of encoding")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level: DEBUG|INFO|WARNING")
    # fmt: on

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        logging.info(f"Loading tokenizer from {args.tokenizer_file}")
        with Tokenizer.from_file(args.tokenizer_file) as tokenizer:
            if args.decode is not None:
                try:
                    ids = [int(idx) for idx in args.decode.split(",") if idx.strip()]
                except ValueError:
                    parser.error(f"--decode expects comma separated integers: {args.decode!r}")
                print(tokenizer.decode(ids))
                return 0

            if args.input_file is not None:
                text = Path(args.input_file).read_text(encoding="utf-8")
            elif args.text is not None:
                text = args.text
            else:
                text = DEFAULT_TEXT

            ids = tokenizer.encode(text)
            print(f"Token IDs: {ids}")
            if ids:
                decoded = tokenizer.decode(ids)
                print(f"Decoded text: {decoded}")
                print(f"Round trip OK? {'YES' if decoded == text else 'NO'}")
    except (TokenizerError, OSError) as e:
        logging.error(f"{type(e).__name__}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
