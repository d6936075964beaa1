"""
Command-Line Interface for sqlseed

Provides commands for:
- generate: Generate a ZIP archive of SQL INSERT scripts from a schema
- inspect: Show tables, generation order and generators of a schema
- config: Manage configurations
"""

import argparse
import sys
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel

from sqlseed.config import Config, ConfigLoader, ConfigValidator, get_default_config
from sqlseed.errors import SQLSeedError
from sqlseed.orchestrator import DataOrchestrator
from sqlseed.sql.dialects import list_dialects
from sqlseed.utils import FileHandler, setup_logging

# Setup console
console = Console()


def parse_row_count(value: str) -> Tuple[str, int]:
    """Parse a TABLE=N row count override"""
    name, sep, count = value.partition('=')
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected TABLE=N, got '{value}'")
    try:
        rows = int(count)
    except ValueError:
        raise argparse.ArgumentTypeError(f"row count for '{name}' must be an integer, got '{count}'")
    if rows < 0:
        raise argparse.ArgumentTypeError(f"row count for '{name}' cannot be negative")
    return name.strip(), rows


class CLI:
    """Main CLI class"""

    def __init__(self):
        self.parser = self._create_parser()
        self.config_loader = ConfigLoader()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser"""
        parser = argparse.ArgumentParser(
            description="sqlseed - SQL test data generator",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Generate an archive of INSERT scripts
  python cli.py generate schema.xml --output data.zip --seed 42

  # Override row counts per table
  python cli.py generate schema.yaml --rows users=100 --rows orders=1000

  # Show generation order and column generators
  python cli.py inspect schema.xml

  # Use preset configuration
  python cli.py generate schema.xml --preset postgres
            """
        )

        parser.add_argument(
            '--verbose', '-v',
            action='store_true',
            help='Enable verbose output'
        )
        parser.add_argument('--log-file', help='Also write logs to this file')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Generate command
        generate_parser = subparsers.add_parser('generate', help='Generate SQL test data')
        generate_parser.add_argument('schema', help='Schema document (XML, YAML or JSON)')
        generate_parser.add_argument('--output', '-o', help='Output archive (defaults to the configured filename)')
        generate_parser.add_argument('--rows', '-n', action='append', type=parse_row_count, default=[],
                                     metavar='TABLE=N', help='Row count override (repeatable)')
        generate_parser.add_argument('--seed', '-s', type=int, help='Random seed for reproducibility')
        generate_parser.add_argument('--preset', '-p', help='Configuration preset')
        generate_parser.add_argument('--config', '-c', help='Custom configuration file')
        generate_parser.add_argument('--dialect', '-d', choices=list_dialects(), help='SQL dialect')
        generate_parser.add_argument('--null-probability', type=float, help='Chance of NULL in nullable columns')
        generate_parser.add_argument('--rows-per-statement', type=int, help='Rows per INSERT (0 = one statement)')
        generate_parser.add_argument('--anchor', help='ISO date closing the default date window')
        generate_parser.add_argument('--csv-dir', help='Also write each table as CSV into this directory')
        generate_parser.add_argument('--preview', type=int, default=0, metavar='N',
                                     help='Print the first N rows of each table')

        # Inspect command
        inspect_parser = subparsers.add_parser('inspect', help='Inspect a schema document')
        inspect_parser.add_argument('schema', help='Schema document (XML, YAML or JSON)')
        inspect_parser.add_argument('--rows', '-n', action='append', type=parse_row_count, default=[],
                                    metavar='TABLE=N', help='Row count override (repeatable)')
        inspect_parser.add_argument('--preset', '-p', help='Configuration preset')
        inspect_parser.add_argument('--config', '-c', help='Custom configuration file')

        # Config command
        config_parser = subparsers.add_parser('config', help='Manage configurations')
        config_subparsers = config_parser.add_subparsers(dest='config_command')

        # Config list
        config_subparsers.add_parser('list', help='List available presets')

        # Config show
        show_parser = config_subparsers.add_parser('show', help='Show preset configuration')
        show_parser.add_argument('preset', help='Preset name')

        # Config create
        create_parser = config_subparsers.add_parser('create', help='Create custom configuration')
        create_parser.add_argument('output', help='Output configuration file')
        create_parser.add_argument('--preset', '-p', help='Start from this preset')

        return parser

    def run(self, args=None):
        """Run CLI"""
        args = self.parser.parse_args(args)

        # Setup logging
        log_level = logging.DEBUG if args.verbose else logging.WARNING
        setup_logging(level=log_level, log_file=args.log_file)

        # Execute command
        if args.command == 'generate':
            self.cmd_generate(args)
        elif args.command == 'inspect':
            self.cmd_inspect(args)
        elif args.command == 'config':
            self.cmd_config(args)
        else:
            self.parser.print_help()

    def _load_config(self, args) -> Config:
        if args.config:
            config = self.config_loader.load_from_file(args.config)
            console.print(f"✓ Loaded custom configuration: {args.config}")
        elif args.preset:
            config = self.config_loader.load_preset(args.preset)
            console.print(f"✓ Loaded preset: {args.preset}")
        else:
            config = get_default_config()
            console.print("✓ Using default configuration")

        is_valid, errors = ConfigValidator.validate(config)
        if not is_valid:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        return config

    def _fail(self, args, error: Exception):
        console.print(f"[bold red]✗ Error:[/bold red] {error}")
        if args.verbose:
            console.print_exception()
        sys.exit(1)

    def cmd_generate(self, args):
        """Generate SQL test data"""
        console.print(Panel.fit(
            "🌱 [bold]SQL Test Data Generation[/bold]",
            border_style="blue"
        ))

        try:
            config = self._load_config(args)
            document = FileHandler.read_document(args.schema)
            orchestrator = DataOrchestrator(config)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console
            ) as progress:
                task = progress.add_task("Generating rows...", total=None)
                result = orchestrator.generate(
                    document,
                    row_counts=dict(args.rows),
                    seed=args.seed,
                    null_probability=args.null_probability,
                    dialect=args.dialect,
                    rows_per_statement=args.rows_per_statement,
                    anchor=args.anchor,
                )
                progress.update(task, completed=True)

            output = Path(args.output or result.filename)
            FileHandler.write_bytes(result.archive, output)
            console.print(f"✓ Saved archive to: {output}")

            if args.csv_dir:
                FileHandler.write_frames(result.to_dataframes(), args.csv_dir)
                console.print(f"✓ Saved CSV files to: {args.csv_dir}")

            if args.preview > 0:
                self._print_preview(result, args.preview)

            # Summary
            table = Table(title="Generation Summary", show_header=True)
            table.add_column("Table", style="cyan")
            table.add_column("Rows", style="green", justify="right")

            for name, count in result.row_counts.items():
                table.add_row(name, f"{count:,}")

            console.print(table)
            console.print(f"Seed: {result.seed}  Dialect: {result.metadata['dialect']}  "
                          f"Archive: {len(result.archive):,} bytes")
            console.print("\n[bold green]✓ Generation complete![/bold green]")

        except (SQLSeedError, ValueError, OSError) as e:
            self._fail(args, e)

    def _print_preview(self, result, limit: int):
        for name, frame in result.to_dataframes().items():
            table = Table(title=f"{name} (first {min(limit, len(frame))} of {len(frame)})", show_header=True)
            for column in frame.columns:
                table.add_column(str(column), style="white")
            for row in frame.head(limit).itertuples(index=False, name=None):
                table.add_row(*["NULL" if value is None else str(value) for value in row])
            console.print(table)

    def cmd_inspect(self, args):
        """Inspect a schema document"""
        console.print(Panel.fit(
            "🔍 [bold]Schema Inspection[/bold]",
            border_style="cyan"
        ))

        try:
            config = self._load_config(args)
            document = FileHandler.read_document(args.schema)
            plan = DataOrchestrator(config).plan(document, dict(args.rows))

            console.print(f"✓ {len(plan.tables)} tables, generation order: {' → '.join(plan.order)}")

            for table_plan in plan.tables:
                table = Table(title=f"{table_plan.name} ({table_plan.row_count} rows)", show_header=True)
                table.add_column("Column", style="cyan")
                table.add_column("Type", style="yellow")
                table.add_column("Constraints", style="green")
                table.add_column("Generator", style="blue")

                references = self._references(table_plan.table)
                for column in table_plan.table.columns:
                    flags = []
                    if column.primary_key:
                        flags.append("PK")
                    if column.unique:
                        flags.append("UNIQUE")
                    if not column.nullable:
                        flags.append("NOT NULL")
                    generator = references.get(column.name) or table_plan.generators[column.name].name
                    table.add_row(column.name, column.type.value, " ".join(flags), generator)

                console.print(table)

            console.print("\n[bold green]✓ Inspection complete![/bold green]")

        except (SQLSeedError, ValueError, OSError) as e:
            self._fail(args, e)

    @staticmethod
    def _references(table) -> Dict[str, str]:
        references = {}
        for fk in table.foreign_keys:
            for column, target in zip(fk.columns, fk.referenced_columns):
                references[column] = f"→ {fk.referenced_table}.{target}"
        return references

    def cmd_config(self, args):
        """Manage configurations"""
        console.print(Panel.fit(
            "⚙️ [bold]Configuration Management[/bold]",
            border_style="magenta"
        ))

        try:
            if args.config_command == 'list':
                presets = self.config_loader.list_presets()

                table = Table(title="Available Presets", show_header=True)
                table.add_column("Preset", style="cyan")
                table.add_column("Description", style="white")

                descriptions = {
                    'default': 'Default configuration (ANSI SQL)',
                    'postgres': 'PostgreSQL with quoted identifiers',
                    'mysql': 'MySQL with backtick identifiers and 1/0 booleans',
                    'sqlite': 'SQLite with smaller INSERT batches',
                }

                for preset in presets:
                    desc = descriptions.get(preset, 'Custom preset')
                    table.add_row(preset, desc)

                console.print(table)

            elif args.config_command == 'show':
                config = self.config_loader.load_preset(args.preset)

                console.print(f"\n[bold]Preset: {args.preset}[/bold]\n")
                console.print_json(data=config.to_dict())

            elif args.config_command == 'create':
                if args.preset:
                    config = self.config_loader.load_preset(args.preset)
                else:
                    config = get_default_config()
                self.config_loader.save_config(config, args.output)

                console.print(f"✓ Created configuration file: {args.output}")
                console.print("  Edit this file to customize settings")

            else:
                console.print("Use 'config list', 'config show <preset>', or 'config create <file>'")

        except (ValueError, OSError) as e:
            self._fail(args, e)


def main(argv: Optional[List[str]] = None):
    """CLI entry point"""
    cli = CLI()
    cli.run(argv)


if __name__ == "__main__":
    main()
