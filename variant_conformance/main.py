"""
Main CLI entry point for the Variant Conformance Engine.

Usage:
    variant-conformance analyze --input cases.csv --format text
    variant-conformance analyze --input cases.json --reference "A -> B -> C" --top 10
    variant-conformance generate --count 5000 --output cases.csv --seed 42
"""

import click
import logging
import sys
from pathlib import Path
from typing import Optional

from . import DEFAULT_CONFIG, __version__
from .conformance.checker import ConformanceChecker
from .ingest.loader import TableLoadError, TableLoader
from .ingest.paging import RowWindowBuffer
from .ingest.table import reference_from_text
from .report.generator import OUTPUT_FORMATS, ReportGenerator


class PipelineContext:
    """Holds settings shared between CLI commands."""

    def __init__(self):
        self.config = DEFAULT_CONFIG.copy()


pass_context = click.make_pass_decorator(PipelineContext, ensure=True)


@click.group()
@click.version_option(version=__version__)
@click.option('--seed', default=42, help='Random seed for reproducibility')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, seed: int, verbose: bool):
    """Variant Conformance Engine

    Compares case variants against a happy path and ranks the most
    frequent skipped and extra steps by vendor/specification.
    """
    ctx.ensure_object(PipelineContext)
    ctx.obj.config['random_seed'] = seed

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )


@cli.command()
@click.option('--input', '-i', 'input_file', required=True, type=click.Path(exists=True),
              help='CSV or JSON case table')
@click.option('--reference', '-r', default=None,
              help='Happy path as "A -> B -> C" (default: the flagged row)')
@click.option('--top', '-n', 'top_n', type=click.IntRange(min=1), default=None,
              help='Keep only the N most frequent violations')
@click.option('--max-display', type=click.IntRange(min=1),
              default=DEFAULT_CONFIG['max_display'],
              help='Maximum violations listed in text and markdown reports')
@click.option('--breakdown-limit', type=click.IntRange(min=1),
              default=DEFAULT_CONFIG['breakdown_limit'],
              help='Maximum specifications listed per violation')
@click.option('--format', '-f', 'output_format', type=click.Choice(list(OUTPUT_FORMATS)),
              default='text', help='Output format')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Write the report to a file instead of stdout')
@click.option('--invalid-case-ids', type=click.Choice(['sentinel', 'skip']),
              default=DEFAULT_CONFIG['invalid_case_ids'],
              help='Keep unparseable case ids as NaN, or skip those rows')
@click.option('--delimiter', default=DEFAULT_CONFIG['variant_delimiter'],
              help='Activity separator in the variant column')
@click.option('--max-rows', type=click.IntRange(min=1), default=None,
              help='Stop reading after this many rows')
@click.option('--window-size', type=click.IntRange(min=1), default=None,
              help='Read the table in windows of this many rows')
@pass_context
def analyze(ctx, input_file: str, reference: Optional[str], top_n: Optional[int],
            max_display: int, breakdown_limit: int, output_format: str,
            output: Optional[str], invalid_case_ids: str, delimiter: str,
            max_rows: Optional[int], window_size: Optional[int]):
    """Find and rank conformance violations in a case table.

    The table needs four columns: case id, happy path flag ("true"/"yes"),
    variant ("A -> B -> C") and specification/vendor.
    """
    ctx.config.update({
        'top_n': top_n,
        'max_display': max_display,
        'breakdown_limit': breakdown_limit,
        'invalid_case_ids': invalid_case_ids,
        'variant_delimiter': delimiter,
        'max_rows': max_rows,
    })

    try:
        rows = TableLoader().load(Path(input_file))
    except (TableLoadError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if max_rows is not None or window_size is not None:
        rows = _buffer_rows(rows, window_size or len(rows) or 1, max_rows)

    explicit_reference = reference_from_text(reference, delimiter) if reference else None
    if reference is not None and not explicit_reference:
        click.echo("Error: --reference contains no activities", err=True)
        sys.exit(1)

    checker = ConformanceChecker(config=ctx.config, reference=explicit_reference)
    result = checker.check_rows(rows)

    if not result.checked:
        click.echo("Warning: no happy path row found, conformance not checked", err=True)

    generator = ReportGenerator(
        output_format=output_format,
        max_display=max_display,
        breakdown_limit=breakdown_limit,
    )
    report_content = generator.generate(result)

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(report_content)
        click.echo(f"Report saved to {output_path}")
        click.echo(f"Found {len(result.violations)} violation groups in {result.total_cases} cases")
    else:
        click.echo(report_content)


def _buffer_rows(rows, window_size: int, max_rows: Optional[int]):
    """Feed rows through a window buffer, honoring the row limit."""
    buffer = RowWindowBuffer(max_rows=max_rows)
    for start in range(0, max(len(rows), 1), window_size):
        window = rows[start:start + window_size]
        more = start + window_size < len(rows)
        if not buffer.add_window(window, more):
            break
    click.echo(buffer.status_message(), err=True)
    return buffer.rows


@cli.command()
@click.option('--count', '-c', type=click.IntRange(min=1), default=1000,
              help='Number of cases to generate')
@click.option('--output', '-o', required=True, type=click.Path(),
              help='Output file (.csv or .json)')
@click.option('--deviation-rate', type=click.FloatRange(0.0, 1.0), default=0.35,
              help='Base share of cases deviating from the happy path')
@click.option('--vendors', type=click.IntRange(min=1), default=25,
              help='Number of vendors (specifications)')
@pass_context
def generate(ctx, count: int, output: str, deviation_rate: float, vendors: int):
    """Generate a synthetic purchase-to-pay case table."""
    from .synthetic import P2PLogGenerator

    generator = P2PLogGenerator(
        count=count,
        seed=ctx.config['random_seed'],
        deviation_rate=deviation_rate,
        num_vendors=vendors,
        delimiter=DEFAULT_CONFIG['variant_delimiter'],
    )

    try:
        generator.generate_all()
        output_path = generator.save_output(Path(output))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Generated {count} cases ({generator.stats['deviating_cases']} deviating)")
    click.echo(f"Saved to {output_path}")


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
