"""Command-line interface for converting i18n JSON files to Excel and back."""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from openai import AsyncOpenAI

from i18n_sheet.analyzer import analyze_project
from i18n_sheet.app_config import AppConfig, ConfigError, load_app_config
from i18n_sheet.convert import convert_to_excel, convert_to_json
from i18n_sheet.errors import ConversionError
from i18n_sheet.logging_config import setup_logger
from i18n_sheet.reporters import ConsoleReporter, JsonFileReporter
from i18n_sheet.translate import translate_workbook
from i18n_sheet.translator import OpenAIProvider, TranslationError

TOOL_NAME = 'i18n-sheet'

logger = logging.getLogger("i18n_sheet.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description='Tool for converting i18n files to Excel and back',
    )
    parser.add_argument('--config', help='path to a YAML config file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    to_excel = subparsers.add_parser('to-excel', help='convert i18n JSON files to an Excel workbook')
    to_excel.add_argument('-i', '--input', help='directory containing <lang>.json files')
    to_excel.add_argument('-o', '--output', help='target Excel file')
    to_excel.add_argument('-s', '--sheet-name', help='name of the Excel worksheet')
    to_excel.add_argument('-d', '--dry-run', action='store_true', help='simulate only, do not write files')
    to_excel.add_argument('--no-report', action='store_true', help='skip generating translation report')
    to_excel.add_argument('--report-file', help='write the dry-run report to this JSON file')

    to_json = subparsers.add_parser('to-json', help='convert an Excel workbook to i18n JSON files')
    to_json.add_argument('-i', '--input', help='source Excel file')
    to_json.add_argument('-o', '--output', help='target directory for i18n JSON files')
    to_json.add_argument('-s', '--sheet-name', help='name of the Excel worksheet')
    to_json.add_argument('-d', '--dry-run', action='store_true', help='simulate only, do not write files')
    to_json.add_argument('--fail-on-duplicates', action='store_true', default=None,
                         help='fail if duplicate keys are detected in the Excel sheet')

    translate = subparsers.add_parser('translate', help='fill missing translations in a workbook using AI')
    translate.add_argument('-i', '--input', help='Excel file to translate in place')
    translate.add_argument('-s', '--sheet-name', help='worksheet to translate (default: first sheet)')
    translate.add_argument('--source-lang', help='source language code')
    translate.add_argument('--api-key', help='OpenAI API key (default: $OPENAI_API_KEY)')
    translate.add_argument('--model', help='model name')

    analyze = subparsers.add_parser('analyze', help='compare keys used in code with keys in i18n files')
    analyze.add_argument('-i', '--input', help='directory containing <lang>.json files')
    analyze.add_argument('-p', '--pattern', required=True, help='glob pattern of source files to scan')
    analyze.add_argument('--report-file', help='write the analysis to this JSON file')

    return parser


def run_to_excel(args: argparse.Namespace, config: AppConfig) -> None:
    source_path = args.input or config.source_path
    target_file = args.output or config.target_file
    logger.info("Converting i18n files from %s to %s", source_path, target_file)

    reporter = JsonFileReporter(args.report_file) if args.report_file else ConsoleReporter()
    convert_to_excel(
        source_path,
        target_file,
        sheet_name=args.sheet_name or config.sheet_name,
        dry_run=args.dry_run,
        language_map=config.languages,
        report=config.report and not args.no_report,
        reporter=reporter,
    )
    if args.dry_run:
        logger.info("Dry-run: No file was written.")
    else:
        logger.info("Conversion completed: %s", target_file)


def run_to_json(args: argparse.Namespace, config: AppConfig) -> None:
    source_file = args.input or config.target_file
    target_path = args.output or config.target_path
    logger.info("Converting Excel from %s to %s", source_file, target_path)

    fail_on_duplicates = config.fail_on_duplicates if args.fail_on_duplicates is None else args.fail_on_duplicates
    convert_to_json(
        source_file,
        target_path,
        sheet_name=args.sheet_name or config.sheet_name,
        dry_run=args.dry_run,
        language_map=config.languages,
        fail_on_duplicates=fail_on_duplicates,
    )
    if args.dry_run:
        logger.info("Dry-run: No files were written.")
    else:
        logger.info("Conversion completed: %s", target_path)


def run_translate(args: argparse.Namespace, config: AppConfig) -> None:
    api_key = args.api_key or config.openai_api_key
    if not api_key:
        raise ConfigError("API Key is required for translation. Use --api-key or the OPENAI_API_KEY env var.")

    provider = OpenAIProvider(
        AsyncOpenAI(api_key=api_key),
        model_name=args.model or config.model_name,
        max_concurrent=config.max_concurrent_api_calls,
        requests_per_minute=config.requests_per_minute,
        max_batch_tokens=config.max_batch_tokens,
    )
    asyncio.run(translate_workbook(
        args.input or config.target_file,
        provider,
        source_lang=args.source_lang or config.source_language,
        language_map=config.languages,
        sheet_name=args.sheet_name,
    ))


def run_analyze(args: argparse.Namespace, config: AppConfig) -> None:
    result = analyze_project(args.input or config.source_path, args.pattern)
    if args.report_file:
        with open(args.report_file, 'w', encoding='utf-8') as f:
            json.dump(result, f, ensure_ascii=False, indent=2)
        logger.info("Wrote analysis report to %s", args.report_file)
        return

    print(f"Found {result['total_code_keys']} unique keys in code.")
    for filename, file_report in result['file_reports'].items():
        print(f"{filename}: {len(file_report['missing'])} missing, {len(file_report['unused'])} unused")
        for key in file_report['missing']:
            print(f"  - missing: {key}")
        for key in file_report['unused']:
            print(f"  - unused: {key}")


COMMANDS = {
    'to-excel': run_to_excel,
    'to-json': run_to_json,
    'translate': run_translate,
    'analyze': run_analyze,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_app_config(args.config)
    except ConfigError as e:
        setup_logger()
        logger.error("Config: %s", e)
        return 1

    setup_logger(config.log_level, config.log_file_path, config.log_to_console)

    try:
        COMMANDS[args.command](args, config)
    except ConversionError as e:
        logger.error("%s: %s", e.kind.value, e)
        return 1
    except (ConfigError, TranslationError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
