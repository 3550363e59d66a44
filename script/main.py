"""Entry point: load a force capture JSON, run the analysis pipeline, print and optionally export results."""
import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from grf_analysis import PROFILES, get_profile, load_series, run_analysis
from grf_analysis.config import ConditionerConfig
from grf_analysis.physics import G


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dual force platform test analysis")
    parser.add_argument("file", help="Path to capture JSON (left_force, right_force, sample_rate, ...)")
    parser.add_argument(
        "--test-type",
        default="CMJ",
        help=f"Test type (default: CMJ). One of: {', '.join(sorted(PROFILES))}",
    )
    weight = parser.add_mutually_exclusive_group(required=True)
    weight.add_argument("--body-weight", type=float, metavar="N", help="Athlete body weight in N")
    weight.add_argument("--mass", type=float, metavar="KG", help="Athlete mass in kg (body weight = mass * g)")
    parser.add_argument(
        "--expected-duration",
        type=float,
        default=None,
        metavar="S",
        help="Expected test duration in s (default: from the test-type profile)",
    )
    parser.add_argument(
        "--filter",
        type=float,
        default=None,
        metavar="HZ",
        help="Low-pass filter cutoff in Hz applied during conditioning (e.g. 50)",
    )
    parser.add_argument(
        "--noise-ceiling",
        type=float,
        default=10.0,
        metavar="N",
        help="Windowed noise ceiling in N RMS (default: 10)",
    )
    parser.add_argument("--export", type=str, default=None, metavar="PATH", help="Write the result JSON to PATH")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    profile = get_profile(args.test_type)
    body_weight = args.body_weight if args.body_weight is not None else args.mass * G
    series = load_series(Path(args.file))
    result = run_analysis(
        series,
        body_weight,
        profile,
        expected_duration_s=args.expected_duration,
        conditioner_config=ConditionerConfig(lowpass_cutoff_hz=args.filter, noise_ceiling_n=args.noise_ceiling),
    )

    print(f"Test: {profile.name}  Samples: {len(series)}  Rate: {series.sample_rate_hz:.0f} Hz")
    print(f"Bodyweight: {body_weight:.1f} N  Mass: {body_weight / G:.2f} kg")
    print("Phases:")
    for p in result.phases:
        st, et = p.start_index / series.sample_rate_hz, p.end_index / series.sample_rate_hz
        print(f"  {p.kind.value}: {st:.3f} s -> {et:.3f} s")
    print("Metrics:")
    for k, val in sorted(result.metrics.items()):
        print(f"  {k}: {val:.4f}")
    print(f"Quality: {result.quality.score:.0f} ({result.quality.grade})")
    for reason in result.quality.reasons:
        print(f"  - {reason}")
    for action in result.quality.recommended_actions:
        print(f"  > {action}")

    if args.export:
        path = Path(args.export)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"Exported result JSON to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
