from __future__ import annotations

import argparse
import logging
from pathlib import Path

from atucha.config import PROJECT_ROOT, load_plant_config
from atucha.lattice.generator import LatticeGeometry, generate
from atucha.lattice.visuals import lattice_to_frame, summarize_lattice
from atucha.logging_config import setup_logging

DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "data" / "processed" / "lattice"

logger = logging.getLogger("atucha.scripts.export_lattice")


def export_lattice(
    *,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
    config_path: Path | None = None,
    target_tube_count: int | None = None,
    rod_stride: int | None = None,
    max_rod_count: int | None = None,
    file_format: str = "csv",
) -> Path:
    config = load_plant_config(config_path)
    tubes, rods = generate(
        config.target_tube_count if target_tube_count is None else target_tube_count,
        config.rod_stride if rod_stride is None else rod_stride,
        config.max_rod_count if max_rod_count is None else max_rod_count,
        geometry=LatticeGeometry.from_config(config),
    )
    df = lattice_to_frame(tubes, rods)

    output_dir.mkdir(parents=True, exist_ok=True)
    if file_format == "parquet":
        output_path = output_dir / "core_lattice.parquet"
        df.to_parquet(output_path, index=False)
    else:
        output_path = output_dir / "core_lattice.csv"
        df.to_csv(output_path, index=False)

    summary = summarize_lattice(tubes, rods)
    logger.info(
        "Exported %d tubes and %d control rods (mean %.1f C)",
        int(summary["tube_count"]),
        int(summary["control_rod_count"]),
        summary["mean_temperature_c"],
    )
    logger.info("Wrote lattice table to: %s", output_path)
    return output_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export the reactor core lattice table.")
    parser.add_argument(
        "--output-dir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Directory where the lattice table is written.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional plant config JSON with overrides.",
    )
    parser.add_argument("--tubes", type=int, default=None, help="Target pressure tube count.")
    parser.add_argument("--rod-stride", type=int, default=None, help="Control rod stride.")
    parser.add_argument("--max-rods", type=int, default=None, help="Control rod cap.")
    parser.add_argument(
        "--format",
        choices=("csv", "parquet"),
        default="csv",
        help="Output file format.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    export_lattice(
        output_dir=Path(args.output_dir),
        config_path=Path(args.config) if args.config else None,
        target_tube_count=args.tubes,
        rod_stride=args.rod_stride,
        max_rod_count=args.max_rods,
        file_format=args.format,
    )


if __name__ == "__main__":
    main()
