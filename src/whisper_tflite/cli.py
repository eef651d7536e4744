"""Command line interface.

Usage:
    whisper-tflite transcribe MODEL AUDIO --bundle vocab-mel.bin
    whisper-tflite transcribe MODEL --features input_features.bin --bundle vocab-mel.bin
    whisper-tflite inspect-bundle vocab-mel.bin
    whisper-tflite serve MODEL --bundle vocab-mel.bin --port 8000

Environment variables (overridden by flags):
    WHISPER_TFLITE_MODEL, WHISPER_TFLITE_BUNDLE, WHISPER_TFLITE_THREADS,
    WHISPER_TFLITE_MULTILINGUAL, WHISPER_TFLITE_LOG_LEVEL,
    WHISPER_TFLITE_HOST, WHISPER_TFLITE_PORT

Exit codes:
    0 success, 1 model failure, 2 bad arguments, 3 unreadable audio,
    4 wrong channel count, 5 wrong sample rate, 6 wrong bit depth,
    7 feature extraction failure, 8 corrupt bundle
"""

import argparse
import logging
import sys

from whisper_tflite.bundle import Bundle, load_bundle
from whisper_tflite.config import Settings
from whisper_tflite.errors import WhisperTfliteError
from whisper_tflite.pipeline import Transcriber, load_features_file

logger = logging.getLogger("whisper_tflite")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout is reserved for transcripts."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def _build_transcriber(
    model_path: str, bundle: Bundle, threads: int, with_extractor: bool = True
) -> Transcriber:
    from whisper_tflite.engine.tflite import TFLiteEngine

    extractor = None
    if with_extractor:
        from whisper_tflite.features.torch_mel import TorchMelExtractor

        extractor = TorchMelExtractor()
    engine = TFLiteEngine(model_path, num_threads=threads)
    return Transcriber(bundle, extractor, engine, n_threads=threads)


def _require(parser: argparse.ArgumentParser, value: str | None, what: str) -> str:
    if not value:
        parser.error(f"{what} is required (flag or environment variable)")
    return value


def cmd_transcribe(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    model = _require(parser, args.model, "MODEL")
    bundle_path = _require(parser, args.bundle, "--bundle")
    if args.audio is None and args.features is None:
        parser.error("either AUDIO or --features is required")

    bundle = load_bundle(bundle_path, multilingual=args.multilingual)
    logger.info("Vocabulary holds %d tokens", bundle.vocab.size)

    if args.audio is not None:
        transcriber = _build_transcriber(model, bundle, args.threads)
        result = transcriber.transcribe_file(args.audio)
    else:
        transcriber = _build_transcriber(model, bundle, args.threads, with_extractor=False)
        result = transcriber.transcribe_features(load_features_file(args.features))

    print(result.text)
    return 0


def cmd_inspect_bundle(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    filters, vocab = load_bundle(args.bundle, multilingual=args.multilingual)
    special = vocab.special
    print(f"mel filters:   {filters.mel_bands} x {filters.fft_bins}")
    print(f"vocab size:    {vocab.size}")
    print(f"multilingual:  {vocab.is_multilingual}")
    print(f"end of text:   {special.eot}")
    print(f"start of text: {special.sot}")
    print(f"no timestamps: {special.no_timestamps}")
    return 0


def cmd_serve(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    import uvicorn

    from whisper_tflite.server import create_app

    model = _require(parser, args.model, "MODEL")
    bundle = load_bundle(_require(parser, args.bundle, "--bundle"), multilingual=args.multilingual)
    transcriber = _build_transcriber(model, bundle, args.threads)
    transcriber.engine.warmup()

    uvicorn.run(create_app(transcriber), host=args.host, port=args.port)
    return 0


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whisper-tflite",
        description="Transcribe 16kHz PCM audio with a Whisper TFLite model",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_bundle_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--multilingual",
            action=argparse.BooleanOptionalAction,
            default=settings.multilingual,
            help="Vocabulary belongs to a multilingual model (default: %(default)s)",
        )

    def add_model_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("model", nargs="?", default=settings.model_path, help="Path to the .tflite model")
        p.add_argument("--bundle", default=settings.bundle_path, help="Path to the vocab/mel bundle")
        p.add_argument(
            "--threads",
            type=int,
            default=settings.threads,
            help="Threads for feature extraction and inference (default: %(default)s)",
        )
        add_bundle_args(p)

    transcribe = subparsers.add_parser("transcribe", help="Transcribe one audio file")
    add_model_args(transcribe)
    transcribe.add_argument("audio", nargs="?", help="16kHz 16-bit PCM WAV file")
    transcribe.add_argument("--features", help="Pre-computed float32 input features instead of audio")
    transcribe.set_defaults(func=cmd_transcribe)

    inspect = subparsers.add_parser("inspect-bundle", help="Print a bundle's contents")
    inspect.add_argument("bundle", help="Path to the vocab/mel bundle")
    add_bundle_args(inspect)
    inspect.set_defaults(func=cmd_inspect_bundle)

    serve = subparsers.add_parser("serve", help="Run the HTTP transcription server")
    add_model_args(serve)
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"whisper-tflite: error: {e}", file=sys.stderr)
        return 2

    parser = build_parser(settings)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.func(args, parser)
    except WhisperTfliteError as e:
        logger.error("%s", e)
        return e.exit_code
