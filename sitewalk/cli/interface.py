# sitewalk/cli/interface.py
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List
from dataclasses import fields as dataclass_fields, MISSING

import click
from click_option_group import optgroup
from rich.console import Console as RichConsole
from rich.progress import Progress, SpinnerColumn, TextColumn
import logging as stdlib_logging

from sitewalk import __version__ as app_version
from sitewalk.config.settings import (
    ListConfig, ErrorPolicy, ExecutionMode, OutputFormat,
    DEFAULT_ERROR_POLICY, DEFAULT_EXECUTION_MODE, DEFAULT_OUTPUT_FORMAT,
    DEFAULT_CONSOLE_SHOW_SUMMARY,
)
from sitewalk.config.loader import load_and_merge_configs, config_values_for_profile, save_config_to_profile
from sitewalk.logging_setup import configure_logging, get_logger
from sitewalk.core.output import render_entries, write_to_stdout, write_to_file
from sitewalk.core.traversal import (
    DEFAULT_SITE_EXCLUDE_DIRS, DEFAULT_TEXT_FILETYPES, FileEntry, PathEntry, is_directory_entry,
    drop_node_modules, filter_by_filetype, filter_by_globs, walk_async, walk_sync,
)
from sitewalk.exceptions import SiteWalkError, ConfigError

log = get_logger(__name__)

# cli parameter holding a string choice -> (enum, ListConfig attribute)
ENUM_CLI_ARGS_MAP = {
    "error_policy_str": (ErrorPolicy, "error_policy"),
    "execution_mode_str": (ExecutionMode, "execution_mode"),
    "output_format_str": (OutputFormat, "output_format"),
}
PATH_ATTRS = ("root_path", "output_file")
LIST_ATTRS = ("exclude_dirs", "extensions", "exclude_globs")


def _dataclass_defaults() -> Dict[str, Any]:
    return {
        f.name: f.default_factory() if f.default_factory is not MISSING else f.default
        for f in dataclass_fields(ListConfig) if f.init
    }


def _coerce_config_values(options: Dict[str, Any]) -> Dict[str, Any]:
    # values from toml arrive as plain strings and lists; turn them into the dataclass types.
    defaults = _dataclass_defaults()
    for attr in list(options):
        val = options[attr]
        if attr in PATH_ATTRS and isinstance(val, str):
            options[attr] = Path(val) if val else defaults[attr]
        elif attr in LIST_ATTRS and isinstance(val, (list, tuple)):
            options[attr] = [str(v) for v in val]
        elif attr in LIST_ATTRS and isinstance(val, str):
            options[attr] = [val]
        else:
            enum_cls = next((cls for cls, a in ENUM_CLI_ARGS_MAP.values() if a == attr), None)
            if enum_cls and isinstance(val, str):
                parsed = enum_cls.from_string(val)
                options[attr] = parsed if parsed else defaults[attr]
    return options


def _build_effective_config(ctx: click.Context, cli_params: Dict[str, Any]) -> ListConfig:
    # dataclass defaults < config files < profile < command line.
    effective_options = _dataclass_defaults()
    raw_configs_from_toml_files = load_and_merge_configs()
    effective_options.update(
        config_values_for_profile(raw_configs_from_toml_files, cli_params.get("active_config_profile_name"))
    )
    _coerce_config_values(effective_options)

    valid_lc_fields = set(effective_options)
    for param_name, value in cli_params.items():
        if ctx.get_parameter_source(param_name) != click.core.ParameterSource.COMMANDLINE:
            continue
        if param_name in ENUM_CLI_ARGS_MAP:
            enum_cls, attr = ENUM_CLI_ARGS_MAP[param_name]
            parsed = enum_cls.from_string(value)
            if parsed: effective_options[attr] = parsed
        elif param_name in LIST_ATTRS:
            effective_options[param_name] = list(value)
        elif param_name in valid_lc_fields:
            effective_options[param_name] = value

    if cli_params.get("site_defaults"):
        effective_options["exclude_dirs"] = list(DEFAULT_SITE_EXCLUDE_DIRS) + [
            d for d in effective_options["exclude_dirs"] if d not in DEFAULT_SITE_EXCLUDE_DIRS
        ]
        effective_options["skip_node_modules"] = True
    if cli_params.get("text_files"):
        effective_options["extensions"] = sorted(DEFAULT_TEXT_FILETYPES)

    return ListConfig(**{k: v for k, v in effective_options.items() if k in valid_lc_fields})


def apply_filters(config: ListConfig, entries: List[PathEntry]) -> List[PathEntry]:
    # applies the post-walk filters selected in the config, preserving order.
    if config.skip_node_modules:
        entries = drop_node_modules(entries)
    if config.extensions:
        entries = filter_by_filetype(entries, config.extensions)
    if config.exclude_globs:
        entries = filter_by_globs(entries, config.exclude_globs)
    return entries


def _print_cli_summary_output(config: ListConfig, entries: List[PathEntry]):
    click.secho("--- walk summary ---", fg="cyan", err=True)
    if config.attach_metadata:
        dirs = sum(1 for e in entries if is_directory_entry(e))
        links = sum(1 for e in entries if isinstance(e, FileEntry) and e.is_symlink)
        click.echo(f"Entries: {len(entries)} ({dirs} directories, {len(entries) - dirs} files, {links} symlinks)", err=True)
    else:
        click.echo(f"Entries: {len(entries)}", err=True)


def _run_walk_flow(config: ListConfig):
    request = config.to_walk_request()
    log.info("walk_orchestration_started", root=request.root_path, mode=request.execution_mode.value)

    app_log_level = stdlib_logging.getLogger("sitewalk").getEffectiveLevel()
    progress_disabled = app_log_level > stdlib_logging.INFO or not sys.stderr.isatty()
    stderr_console = RichConsole(file=sys.stderr)

    with Progress(
        SpinnerColumn(), TextColumn("[bold blue]{task.description}"),
        transient=True, disable=progress_disabled, console=stderr_console
    ) as progress:
        walk_task = progress.add_task(f"walking {request.root_path}...", total=None)
        if request.execution_mode is ExecutionMode.ASYNCHRONOUS:
            entries = asyncio.run(walk_async(request))
        else:
            entries = walk_sync(request)
        progress.update(walk_task, completed=True, description=f"listed {len(entries)} entries.")

    entries = apply_filters(config, entries)
    root_name = config.root_path.resolve().name or str(config.root_path)
    output_to_write = render_entries(entries, config.output_format, root_name)

    if config.output_file:
        write_to_file(config.output_file, output_to_write)
        click.echo(f"Info: Output written to: {config.output_file}", err=True)
    else:
        log.info("writing_final_output_to_stdout")
        write_to_stdout(output_to_write)

    if config.console_show_summary:
        _print_cli_summary_output(config, entries)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("root_path", required=False, type=click.Path(file_okay=False, path_type=Path))
@optgroup.group("Traversal Options", help="Control how the directory tree is walked.")
@optgroup.option("-x", "--exclude-dir", "exclude_dirs", multiple=True, help="Directory to skip, relative to ROOT (e.g. .git or docs/drafts). Repeatable.")
@optgroup.option("--folders/--no-folders", "include_folders", default=None, help="List directories themselves, not just their files. Default: off.")
@optgroup.option("--files/--no-files", "include_files", default=None, help="List plain files. Default: on.")
@optgroup.option("-T", "--types", "attach_metadata", is_flag=True, default=False, help="Tag each entry as file or directory.")
@optgroup.option("--log-dirs", "log_visited_directories", is_flag=True, default=False, help="Log each directory before it is read.")
@optgroup.option("--on-error", "error_policy_str", type=click.Choice([p.value for p in ErrorPolicy]), default=None, help=f"What to do when a subdirectory cannot be read. Default: {DEFAULT_ERROR_POLICY.value}.")
@optgroup.option("--mode", "execution_mode_str", type=click.Choice([m.value for m in ExecutionMode]), default=None, help=f"Blocking or asyncio traversal. Default: {DEFAULT_EXECUTION_MODE.value}.")
@optgroup.option("--max-concurrency", "max_concurrency", type=click.IntRange(min=1), default=None, help="Cap on concurrent directory reads in async mode.")
@optgroup.group("Filtering Options", help="Narrow the listing after the walk.")
@optgroup.option("--ext", "extensions", multiple=True, help="Keep only files of this type (extension, or whole name for files without one). Repeatable.")
@optgroup.option("--text-files", "text_files", is_flag=True, default=False, help="Keep only the text file types the site scripts rewrite.")
@optgroup.option("--site-defaults", "site_defaults", is_flag=True, default=False, help="Exclude .git and .vs and drop node_modules content.")
@optgroup.option("--exclude-glob", "exclude_globs", multiple=True, help="Gitignore-style pattern to drop from the result. Repeatable.")
@optgroup.option("--skip-node-modules/--keep-node-modules", "skip_node_modules", default=None, help="Drop entries inside node_modules directories.")
@optgroup.group("Output Options", help="Control the rendered result.")
@optgroup.option("-F", "--format", "output_format_str", type=click.Choice([f.value for f in OutputFormat]), default=None, help=f"Output format. Default: {DEFAULT_OUTPUT_FORMAT.value}.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@optgroup.option("--summary/--no-summary", "console_show_summary", default=None, help=f"Show entry counts on stderr. Default: {'on' if DEFAULT_CONSOLE_SHOW_SUMMARY else 'off'}.")
@optgroup.group("Application Behavior", help="Configuration profiles, saving, and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--save", "save_profile_name", type=str, metavar="PROFILE_NAME", default=None, help="Save options to a profile in the project's .sitewalk.toml. Exits after saving.")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="sitewalk", prog_name="sitewalk", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, **cli_params: Any):
    """sitewalk: recursively list a site directory, relative to ROOT (default: .)."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))

    log.debug("cli_command_invoked", params={k: v for k, v in cli_params.items() if v is not None})

    try:
        final_config = _build_effective_config(ctx, cli_params)

        if final_config.log_visited_directories:
            sitewalk_logger = stdlib_logging.getLogger("sitewalk")
            if sitewalk_logger.getEffectiveLevel() > stdlib_logging.INFO:
                sitewalk_logger.setLevel(stdlib_logging.INFO)

        if final_config.save_profile_name:
            if save_config_to_profile(final_config, final_config.save_profile_name):
                click.echo(f"Info: Profile '{final_config.save_profile_name}' saved.", err=True)
            else:
                click.echo(f"Info: No non-default options to save for '{final_config.save_profile_name}'.", err=True)
            ctx.exit(0)

        _run_walk_flow(final_config)

    except click.exceptions.Exit as e: raise e
    except (ConfigError, SiteWalkError) as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException as e:
        log.error("click_exception_in_cli", error_type=type(e).__name__, message=str(e))
        e.show(); sys.exit(e.exit_code)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)
