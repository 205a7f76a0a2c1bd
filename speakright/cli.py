"""
命令行入口

    speakright analyze --spoken "the quick brown fox" [--target "..."]
    speakright check recording.wav
    speakright record out.wav
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from speakright.capture.mic import MicError, SoundDeviceMicSource
from speakright.capture.recorder import Recorder
from speakright.capture.validation import CaptureError, validate_upload
from speakright.client import AnalysisClient, AnalysisRequestError
from speakright.config import settings
from speakright.presentation import render_markdown

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="speakright", description="Pronunciation practice client")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a transcript against a target sentence")
    analyze.add_argument("--spoken", required=True, help="Recognized speech text")
    analyze.add_argument("--target", default="", help="Target sentence (generated when empty)")
    analyze.add_argument("--server", default=settings.server_url, help="Gateway base URL")

    check = sub.add_parser("check", help="Validate an audio file before practice")
    check.add_argument("file", help="Audio file (.mp3 / .m4a / .wav)")
    check.add_argument("--max-seconds", type=float, default=settings.max_audio_seconds)

    record = sub.add_parser("record", help="Record from the microphone (stops at the time limit)")
    record.add_argument("output", help="Where to write the WAV file")
    record.add_argument("--device", type=int, default=None, help="Input device id")
    record.add_argument("--max-seconds", type=float, default=settings.max_audio_seconds)

    return parser


def _cmd_analyze(args: argparse.Namespace) -> int:
    client = AnalysisClient(base_url=args.server)
    try:
        response = asyncio.run(client.analyze(spoken_text=args.spoken, target_text=args.target))
    except (AnalysisRequestError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1

    print(render_markdown(response.content, spoken_text=args.spoken, target_text=response.target_text))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    try:
        capture = validate_upload(args.file, max_seconds=args.max_seconds)
    except CaptureError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(f"OK: {capture.filename} ({capture.duration:.1f}s)")
    return 0


def _cmd_record(args: argparse.Namespace) -> int:
    recorder = Recorder(max_seconds=args.max_seconds, on_limit=lambda msg: print(msg, file=sys.stderr))
    source = SoundDeviceMicSource(device=args.device)
    print("Recording... press Ctrl+C to stop.", file=sys.stderr)

    recorder.start()
    chunks = source.chunks()
    try:
        for chunk in chunks:
            if not recorder.feed(chunk):
                break
    except KeyboardInterrupt:
        pass
    except MicError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        chunks.close()

    try:
        capture = recorder.stop()
    except CaptureError as e:
        print(str(e), file=sys.stderr)
        return 1

    with open(args.output, "wb") as f:
        f.write(capture.data)
    print(f"Saved {args.output} ({capture.duration:.1f}s)")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "analyze":
        return _cmd_analyze(args)
    if args.command == "record":
        return _cmd_record(args)
    return _cmd_check(args)


if __name__ == "__main__":
    raise SystemExit(main())
