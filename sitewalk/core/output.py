# sitewalk/core/output.py
"""
Renders walk results for the terminal or a file, and writes them out.
"""
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

from sitewalk.config.settings import OutputFormat
from sitewalk.core.traversal.entries import DirectoryEntry, FileEntry, PathEntry, entry_path, is_directory_entry
from sitewalk.exceptions import OutputError
from sitewalk.logging_setup import get_logger

log = get_logger(__name__)


def _entry_to_json(entry: PathEntry) -> Any:
    if isinstance(entry, FileEntry):
        return {"path": entry.path, "type": entry.entry_type.value, "is_symlink": entry.is_symlink}
    if isinstance(entry, DirectoryEntry):
        return {"path": entry.path, "type": entry.entry_type.value, "is_symlink": False}
    return entry


def _entry_to_line(entry: PathEntry) -> str:
    if isinstance(entry, DirectoryEntry):
        return f"d\t{entry.path}"
    if isinstance(entry, FileEntry):
        return f"{'l' if entry.is_symlink else 'f'}\t{entry.path}"
    return entry


def build_tree(entries: Sequence[PathEntry], root_name: str) -> str:
    """Generates a text-based directory tree from the relative paths of a walk result."""
    if not entries: return "(no entries for tree view.)"

    tree_structure_dict: Dict[str, Any] = {}
    for entry in entries:
        path_str = entry_path(entry)
        if path_str == ".":
            continue
        parts = path_str.split("/")
        current_dict_level = tree_structure_dict
        for i, part_name in enumerate(parts):
            is_last_part_of_path = (i == len(parts) - 1)
            is_file = is_last_part_of_path and not is_directory_entry(entry)
            node_data = current_dict_level.setdefault(part_name, {"_type_": "file" if is_file else "dir", "_children_": {}})
            if not is_file and node_data["_type_"] == "file":
                node_data["_type_"] = "dir"
            current_dict_level = node_data["_children_"]

    def format_tree_nodes_recursively(node_dict_level: Dict[str, Any], indent_str: str = "") -> List[str]:
        output_lines: List[str] = []
        # tree view is sorted case-insensitively; the walk order is kept by the other formats.
        item_names_to_display = sorted(node_dict_level, key=str.lower)
        for i, item_name in enumerate(item_names_to_display):
            item_data = node_dict_level[item_name]
            is_last_item_at_this_level = i == len(item_names_to_display) - 1
            connector_str = "└── " if is_last_item_at_this_level else "├── "
            suffix = "/" if item_data["_type_"] == "dir" else ""
            output_lines.append(f"{indent_str}{connector_str}{item_name}{suffix}")
            if item_data["_children_"]:
                new_indent_str = indent_str + ("    " if is_last_item_at_this_level else "│   ")
                output_lines.extend(format_tree_nodes_recursively(item_data["_children_"], new_indent_str))
        return output_lines

    final_tree_lines = [f"{root_name}/"]
    final_tree_lines.extend(format_tree_nodes_recursively(tree_structure_dict))
    return "\n".join(final_tree_lines)


def render_entries(entries: Sequence[PathEntry], output_format: OutputFormat, root_name: str = ".") -> str:
    # renders a walk result in the requested output format.
    log.debug("rendering_entries", count=len(entries), format=output_format.value)
    if output_format == OutputFormat.JSON:
        return json.dumps([_entry_to_json(e) for e in entries], indent=2) + "\n"
    if output_format == OutputFormat.NULL:
        return "".join(f"{entry_path(e)}\0" for e in entries)
    if output_format == OutputFormat.TREE:
        return build_tree(entries, root_name) + "\n"
    if not entries:
        return ""
    return "\n".join(_entry_to_line(e) for e in entries) + "\n"


def write_to_stdout(text_content: str):
    # writes text to standard output.
    try:
        sys.stdout.write(text_content)
        sys.stdout.flush()
    except Exception as e:
        log.warning("stdout_write_failed_trying_binary_fallback", error=str(e))
        try:
            sys.stdout.buffer.write(text_content.encode("utf-8", errors="replace"))
            sys.stdout.buffer.flush()
        except Exception as inner_e:
            log.critical("stdout_binary_fallback_failed_critical_error", error=str(inner_e))

def write_to_file(output_file_path: Path, text_content: str):
    # writes text content to the specified file path.
    log.info("writing_output_to_file", path=str(output_file_path))
    try:
        output_file_path.write_text(text_content, encoding="utf-8")
    except Exception as e:
        raise OutputError(f"failed to write to file '{output_file_path}': {e}")
