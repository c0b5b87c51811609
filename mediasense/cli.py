# File: mediasense/cli.py
import argparse
import json
import logging
import sys

from mediasense.core.common.enums import TranscriptionProvider
from mediasense.core.config.logging import configure_logging
from mediasense.core.config.settings import settings
from mediasense.core.errors import MediaSenseError

logger = logging.getLogger("mediasense.cli")


def _options_from_args(args):
    from mediasense.features.analysis.domain.models import AnalysisOptions
    from mediasense.features.ocr_captions.domain.models import OCROptions

    return AnalysisOptions(
        provider=TranscriptionProvider(args.provider),
        identify_speakers=not args.no_speakers,
        include_ocr=not args.no_ocr,
        include_objects=not args.no_objects,
        ocr=OCROptions.from_dict({"min_interval": args.min_interval, "max_frames": args.max_frames}),
    )


def cmd_analyze(args) -> int:
    from mediasense.features.analysis.service.api import analyze_media

    result = analyze_media(args.location, _options_from_args(args))
    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0


def cmd_submit(args) -> int:
    """Runs the analysis through the job table so repeated files hit the cache."""
    from mediasense.core.database.connection import SessionLocal, init_db
    from mediasense.core.jobs.domain.models import JobSubmission
    from mediasense.core.jobs.manager import JobManager
    from mediasense.core.jobs.models import JobModel
    from mediasense.core.jobs.types import JobType
    from mediasense.features.media_intake.service.api import MediaIntakeService

    init_db()
    source = MediaIntakeService().resolve(args.location)
    options = _options_from_args(args)

    manager = JobManager()
    job_id = manager.submit_job(JobSubmission(
        file_path=str(source.path),
        job_type=JobType.MULTIMEDIA_ANALYSIS,
        media_type=source.media_type,
        file_hash=source.file_hash,
        payload={
            "provider": options.provider.value,
            "identify_speakers": options.identify_speakers,
            "include_ocr": options.include_ocr,
            "include_objects": options.include_objects,
            "ocr": {"min_interval": args.min_interval, "max_frames": args.max_frames},
        },
    ))
    manager.run_job(job_id)

    with SessionLocal() as db:
        job = db.get(JobModel, job_id)
        print(json.dumps({
            "job_id": str(job.id),
            "status": job.status.value,
            "error": job.error_message,
            "result": job.result_meta,
        }, indent=2, default=str))
        return 0 if job.error_message is None else 1


def cmd_init_db(args) -> int:
    from mediasense.core.database.connection import init_db

    init_db()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediasense",
        description="Transcribe and identify the contents of audio, video and image files",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("analyze", cmd_analyze, "Analyze a file or URL and print the JSON result"),
        ("submit", cmd_submit, "Analyze through the job queue, reusing cached results"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("location", help="Local path or http(s) URL")
        p.add_argument(
            "--provider",
            choices=[v.value for v in TranscriptionProvider],
            default=TranscriptionProvider.AUTO.value,
            help="Speech provider (default: %(default)s)",
        )
        p.add_argument("--no-ocr", action="store_true", help="Skip on-screen text captions")
        p.add_argument("--no-speakers", action="store_true", help="Skip speaker identification")
        p.add_argument("--no-objects", action="store_true", help="Skip object and label detection")
        p.add_argument("--min-interval", type=float, default=1.0, help="Minimum seconds between OCR frames")
        p.add_argument("--max-frames", type=int, default=30, help="Maximum OCR frames per video")
        p.set_defaults(func=func)

    p = sub.add_parser("init-db", help="Create the processing jobs table")
    p.set_defaults(func=cmd_init_db)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings.ensure_dirs()

    try:
        return args.func(args)
    except MediaSenseError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
