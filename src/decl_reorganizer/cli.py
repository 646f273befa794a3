"""
Main CLI entry point for the declaration reorganizer
"""

import logging
import sys
from pathlib import Path

import click

from decl_reorganizer import __version__
from decl_reorganizer.commands.cleanup import CleanUpCommand
from decl_reorganizer.core.backup_manager import BackupManager
from decl_reorganizer.core.base_processor import ProcessingStatus
from decl_reorganizer.core.code_items import DeclarationItem
from decl_reorganizer.core.config import PROJECT_CONFIG_NAME, Config
from decl_reorganizer.core.document import Document
from decl_reorganizer.core.item_comparer import CodeItemTypeComparer
from decl_reorganizer.core.retriever import CodeItemRetriever
from decl_reorganizer.core.tree_builder import CodeTreeBuilder

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(
    version=__version__,
    prog_name="decl-reorganizer",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress output",
)
@click.pass_context
def cli(
    ctx,
    config: str | None,
    verbose: bool,
    quiet: bool,
):
    """Declaration reorganizer

    Reorders the declarations of source files into a canonical order:
    constants, fields, constructors, methods, properties and destructors,
    most visible first, keeping attached comments with their declarations.
    """
    ctx.ensure_object(dict)

    if config:
        ctx.obj["config"] = Config.from_file(Path(config))
    else:
        ctx.obj["config"] = Config.load_hierarchy(Path.cwd())

    if verbose:
        ctx.obj["config"].verbose = True
        logging.getLogger().setLevel(logging.DEBUG)

    if quiet:
        ctx.obj["config"].quiet = True
        logging.getLogger().setLevel(logging.WARNING)


@cli.command()
@click.argument(
    "path",
    type=click.Path(exists=True),
)
@click.option(
    "--recursive",
    "-r",
    is_flag=True,
    help="Process subdirectories",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the changes without writing them",
)
@click.option(
    "--no-backup",
    is_flag=True,
    help="Do not back up files before rewriting them",
)
@click.option(
    "--black",
    "apply_black",
    is_flag=True,
    help="Format reorganized Python files with black",
)
@click.pass_context
def reorganize(
    ctx,
    path: str,
    recursive: bool,
    dry_run: bool,
    no_backup: bool,
    apply_black: bool,
):
    """Reorganize the declarations of a file or directory.

    Examples:
        decl-reorganizer reorganize ./models.py
        decl-reorganizer reorganize ./src --recursive --dry-run
    """
    config = ctx.obj["config"]
    if dry_run:
        config.dry_run = True
    if no_backup:
        config.backup.enabled = False
    if apply_black:
        config.reorganize.apply_black = True

    errors = config.validate()
    if errors:
        for error in errors:
            click.echo(f"Configuration error: {error}", err=True)
        sys.exit(1)

    command = CleanUpCommand(config)
    result = command.execute(Path(path), recursive=recursive)

    if not config.quiet:
        for file_result in command.results:
            click.echo(str(file_result))
            if config.dry_run and file_result.diff:
                click.echo(file_result.diff)

        click.echo(f"\n{result.message or ''}")
        if config.dry_run:
            click.echo("[DRY RUN] No files were modified")

    if result.status == ProcessingStatus.ERROR:
        if result.error_message:
            click.echo(result.error_message, err=True)
        sys.exit(1)


@cli.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False),
)
@click.pass_context
def outline(ctx, file: str):
    """Print the declaration tree of a file with the rank of each item"""
    config = ctx.obj["config"]
    document = Document.from_file(Path(file))
    code_items = CodeItemRetriever().retrieve(document, load_lazy_values=True)
    if not code_items:
        click.echo(f"No declarations found in {file}")
        return

    comparer = CodeItemTypeComparer(config.reorganize.secondary_order_by_name)
    for item in CodeTreeBuilder().build(code_items):
        _echo_item(item, comparer, depth=0)


def _echo_item(item: DeclarationItem, comparer: CodeItemTypeComparer, depth: int):
    indent = "  " * depth
    access = item.access.value if item.access else "-"
    line = f"{indent}{comparer.rank(item):>5}  {item.kind.value} {item.name} [{access}]"
    signature = item.lazy_values.get("signature")
    if signature:
        line += f"  {signature}"
    click.echo(line)
    for child in item.children:
        _echo_item(child, comparer, depth + 1)


@cli.command()
@click.pass_context
def init(ctx):
    """Initialize configuration in current directory

    Creates a default .decl-reorganizer.yaml configuration file in the
    current directory.
    """
    config_path = Path.cwd() / PROJECT_CONFIG_NAME

    if config_path.exists():
        click.confirm(f"{config_path} already exists. Overwrite?", abort=True)

    Config().save(config_path)

    click.echo(f"Created configuration file: {config_path}")
    click.echo("Edit this file to customize your settings.")


@cli.command()
@click.option(
    "--sessions",
    is_flag=True,
    help="List backup sessions",
)
@click.option(
    "--restore",
    help="Restore from backup session ID",
)
@click.option(
    "--clean",
    is_flag=True,
    help="Clean old backup sessions",
)
@click.pass_context
def backup(
    ctx,
    sessions: bool,
    restore: str | None,
    clean: bool,
):
    """Manage backup sessions

    View, restore, or clean the backups taken before files are rewritten.
    """
    config = ctx.obj["config"]

    manager = BackupManager(
        backup_dir=config.backup.directory,
        compression=config.backup.compression,
        keep_sessions=config.backup.keep_sessions,
    )

    if sessions:
        all_sessions = manager.list_sessions()
        if not all_sessions:
            click.echo("No backup sessions found.")
        else:
            click.echo(f"Found {len(all_sessions)} backup sessions:")
            for session in all_sessions:
                click.echo(f"  - {session['session_id']} ({session['timestamp']})")
                if "files_backed_up" in session:
                    click.echo(f"    Files: {len(session['files_backed_up'])}")

    elif restore:
        click.confirm(f"Restore all files from session {restore}?", abort=True)
        if manager.restore_session(restore):
            click.echo(f"Successfully restored session: {restore}")
        else:
            click.echo(f"Failed to restore session: {restore}", err=True)
            sys.exit(1)

    elif clean:
        click.confirm(
            f"Remove backup sessions older than {config.backup.keep_sessions} most recent?",
            abort=True,
        )
        manager.cleanup_old_sessions()
        click.echo("Cleaned old backup sessions.")

    else:
        click.echo("Use --sessions, --restore, or --clean")


def main():
    """Main entry point"""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user.", err=True)
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            logger.exception("Traceback")
        sys.exit(1)


if __name__ == "__main__":
    main()
