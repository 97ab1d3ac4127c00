from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, HeartConfig, load_config
from ..excel.columns import match_headers
from ..excel.reader import DatasetLoadError, normalize_sheet, read_workbook
from ..logging.anomaly_log import AnomalyLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.country_record import CountryRecord
from ..models.grades import affordability_grade, resilience_for
from ..services.calculator import INPUT_MODES, UNIT_MULTIPLIERS, CalculatorInput, calculate
from ..services.dataset import HeartDataset, load_dataset
from ..services.summary import format_currency, format_large_number, format_percent, render_summary_line

"""CLI entrypoint: ``heart-score`` / ``python -m heart_score.cli``.

Commands:
    list             one line per country + SUMMARY
    show NAME        details for one country
    export PATH      JSON dump of records and global metrics
    inspect          sheet headers, alias resolution and first rows
    calc [options]   manual-entry calculator (no workbook needed)
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NOT_FOUND = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env via python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="heart-score", description="HEART Score workbook ingestion")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--anomaly-log", action="store_true", help="Write anomalies to logs/anomalies-*.log")
    sub = p.add_subparsers(dest="command")

    sub.add_parser("list", help="List countries with their HEART Score")

    show = sub.add_parser("show", help="Show one country")
    show.add_argument("name")

    export = sub.add_parser("export", help="Export records as JSON")
    export.add_argument("output", help="Output JSON path")

    inspect = sub.add_parser("inspect", help="Print headers, alias resolution and first rows")
    inspect.add_argument("--rows", type=int, default=3)

    calc = sub.add_parser("calc", help="Manual HEART Score calculation")
    calc.add_argument("--gdp", required=True, help="Country GDP in --unit")
    calc.add_argument("--unit", choices=sorted(UNIT_MULTIPLIERS), default="B")
    calc.add_argument("--mode", dest="input_mode", choices=INPUT_MODES, default="percentage")
    for name in ("housing", "health", "energy", "education", "interest-payment", "trade-balance"):
        calc.add_argument(f"--{name}", default=None)
    calc.add_argument("--global-share", dest="global_gdp_share", default=None, help="Global GDP share (%%)")
    calc.add_argument("--pci", default=None)
    calc.add_argument("--inflation", default=None, help="Inflation in %% (2.5 for 2.5%%)")
    calc.add_argument("--hdi", default=None)
    calc.add_argument("--gini", default=None)
    args = p.parse_args(argv)
    if args.command is None:
        args.command = "list"
    return args


def _run_calc(args: argparse.Namespace) -> int:
    inputs = CalculatorInput(
        gdp=args.gdp,
        unit=args.unit,
        input_mode=args.input_mode,
        housing=args.housing,
        health=args.health,
        energy=args.energy,
        education=args.education,
        global_gdp_share=args.global_gdp_share,
        interest_payment=args.interest_payment,
        trade_balance=args.trade_balance,
        pci=args.pci,
        inflation=args.inflation,
        hdi=args.hdi,
        gini=args.gini,
    )
    result = calculate(inputs)
    if result is None:
        print("calc: GDP must be non-zero")
        return EXIT_FATAL
    grade = affordability_grade(result.heart_affordability_value)
    print(f"HEART Score: {result.heart_score}")
    print(f"  Heart Value: {result.heart_value:.3f} ({result.resilience}) raw={result.raw_heart_value:.2f}")
    print(f"  Adjusted PCI: {format_currency(result.adjusted_pci)}")
    print(f"  Adjusted HDI: {result.adjusted_hdi:.3f}")
    print(f"  HAV: {format_currency(result.heart_affordability_value)}")
    print(f"  HAR: {result.heart_affordability_ranking} ({grade.description})")
    return EXIT_SUCCESS


def _inspect_data(cfg: HeartConfig, rows: int) -> int:
    sheet_name, df = read_workbook(cfg.source_file, cfg.sheet_name)
    sheet = normalize_sheet(df, sheet_name, header_row=cfg.header_row, null_sentinels=cfg.null_sentinels)
    print(f"FILE: {cfg.source_file.name}")
    print(f"  SHEET: {sheet_name} cols={sheet.columns}")
    for field, header in match_headers(sheet.columns, cfg.column_aliases).items():
        print(f"    {field:<28} <- {header!r}" if header is not None else f"    {field:<28} <- (missing)")
    for r in sheet.rows[:rows]:
        print(f"    row {r.row_number}: {r.values}")
    return EXIT_SUCCESS


def _list_line(rec: CountryRecord) -> str:
    return (
        f"{rec.s_no:>4} {rec.country:<28} {rec.heart_score:>7}  "
        f"HV={rec.heart_value:.3f} ({resilience_for(rec.heart_value)}, {rec.heart_value_basis})  "
        f"HAR={rec.heart_affordability_ranking:<2} HAV={format_currency(rec.heart_affordability_value)}"
    )


def _show(rec: CountryRecord) -> None:
    print(f"{rec.country} (#{rec.s_no}) HEART Score {rec.heart_score}")
    print(f"  GDP:             {format_currency(rec.country_gdp)} (rank {rec.gdp_rank}, {format_percent(rec.gdp_share_pct)} of world)")
    print(f"  Population:      {format_large_number(rec.population)} ({format_percent(rec.population_share_pct)} of world)")
    print(f"  PCI / APCI:      {format_currency(rec.per_capita_income)} / {format_currency(rec.adjusted_pci)} (inflation {format_percent(rec.inflation, fraction=True)})")
    print(f"  Debt:            {format_currency(rec.total_debt)} at {format_percent(rec.interest_rate_pct)}, interest {format_currency(rec.interest_payment)}")
    print(f"  Adj. debt/GDP:   {format_percent(rec.adjusted_debt_to_gdp_pct)}")
    print(f"  Trade balance:   {format_currency(rec.trade_balance)} ({format_percent(rec.trade_balance_to_gdp_pct)} of GDP)")
    print(
        f"  Sectors % GDP:   housing {format_percent(rec.housing_pct)}, health {format_percent(rec.health_pct)}, "
        f"energy {format_percent(rec.energy_pct)}, education {format_percent(rec.education_pct)}"
    )
    print(f"  Housing units:   {format_large_number(rec.housing_units)} ({rec.houses_per_person:.3f} per person)")
    print(f"  HDI / GINI:      {rec.hdi:.3f} / {rec.gini:.3f} -> AHDI {rec.adjusted_hdi:.3f}")
    print(f"  HAV / HAR:       {format_currency(rec.heart_affordability_value)} / {rec.heart_affordability_ranking}")
    print(f"  Heart Value:     {rec.heart_value:.3f} ({resilience_for(rec.heart_value)}; raw {rec.raw_heart_value:.2f}, {rec.heart_value_basis})")
    if rec.description:
        print(f"  {rec.description}")


def _export(dataset: HeartDataset, output: str) -> None:
    payload = {
        "global_metrics": {
            "global_gdp": dataset.global_metrics.global_gdp,
            "global_population": dataset.global_metrics.global_population,
            "global_trade": dataset.global_metrics.global_trade,
        },
        "countries": [rec.to_dict() for rec in dataset.records],
    }
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    Path(output).write_text(text + "\n", encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む ([] はテストからの明示呼び出し)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    if args.command == "calc":
        return _run_calc(args)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        try:
            return _inspect_data(cfg, args.rows)
        except DatasetLoadError as e:
            logger.error(f"load: {e}")
            return EXIT_FATAL

    anomalies = AnomalyLogBuffer()
    try:
        dataset = load_dataset(cfg, anomalies=anomalies)
    except DatasetLoadError as e:
        logger.error(f"load: {e}")
        return EXIT_FATAL

    anomaly_count = len(anomalies)
    if anomaly_count:
        counts = ", ".join(f"{k}={v}" for k, v in sorted(anomalies.counts_by_kind().items()))
        logger.info(f"anomalies: {counts}")
    if args.anomaly_log:
        path = anomalies.flush()
        if path is not None:
            logger.info(f"anomaly log written: {path}")

    code = EXIT_SUCCESS
    if args.command == "list":
        for rec in dataset.records:
            print(_list_line(rec))
    elif args.command == "show":
        rec = dataset.find(args.name)
        if rec is None:
            logger.error(f"country not found: {args.name}")
            code = EXIT_NOT_FOUND
        else:
            _show(rec)
    elif args.command == "export":
        try:
            _export(dataset, args.output)
        except OSError as e:
            logger.error(f"export: {e}")
            code = EXIT_FATAL
        else:
            logger.info(f"exported {len(dataset)} countries to {args.output}")

    summary_line = render_summary_line(dataset, anomaly_count)
    log_summary(summary_line[len("SUMMARY "):])
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
