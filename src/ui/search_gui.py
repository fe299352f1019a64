"""
DearPyGui front-end for csvscan.
Lets the user pick a file, a column and a key, then runs the chunked search.
"""
from pathlib import Path

import dearpygui.dearpygui as dpg

from common.config import DEFAULT_PROFILE, load_runtime_config
from common.errors import BackendError
from ui.search_backend import SearchRequest, run_search


def run_search_from_ui(path, column, key, find_all, has_header, chunk_size, status_text, results_box):
    dpg.set_value(status_text, "Searching...")
    dpg.set_value(results_box, "")
    try:
        runtime = load_runtime_config(DEFAULT_PROFILE)
        report = run_search(
            SearchRequest(
                path=Path(path),
                column=int(column),
                key=key,
                find_all=find_all,
                has_header=has_header,
                chunk_size=int(chunk_size),
            ),
            runtime,
        )
    except (BackendError, ValueError) as e:
        dpg.set_value(status_text, f"Error: {e}")
        with dpg.window(label="Error", modal=True, no_close=False, width=400, height=120):
            dpg.add_text(f"An error occurred:\n{e}")
            dpg.add_button(label="Close", callback=lambda: dpg.delete_item(dpg.last_container()))
        return

    lines = list(report.lines)
    if report.header is not None:
        lines.insert(0, report.header)
    dpg.set_value(results_box, "\n".join(lines))
    summary = report.summary
    scanned = f" ({summary.rows_scanned} rows, {summary.chunks_scanned} chunks scanned)" if summary else ""
    dpg.set_value(status_text, (report.message or "Row found") + scanned)


def main():
    dpg.create_context()
    dpg.create_viewport(title='csvscan', width=640, height=460)

    TEXT = {
        "path": "CSV file to search:",
        "column": "Column index (0-based):",
        "key": "Search key:",
        "chunk_size": "Rows per chunk:",
    }

    with dpg.window(label="csvscan search", width=620, height=440):
        dpg.add_text(TEXT["path"])
        path_input = dpg.add_input_text(label="File", width=420, hint="Path to a .csv file")

        dpg.add_text(TEXT["column"])
        column_input = dpg.add_input_int(label="Column", default_value=0, min_value=0, min_clamped=True, width=200)

        dpg.add_text(TEXT["key"])
        key_input = dpg.add_input_text(label="Key", width=420)

        dpg.add_text(TEXT["chunk_size"])
        chunk_input = dpg.add_slider_int(label="Chunk Size (rows)", default_value=200, min_value=1, max_value=100000, width=200)

        all_checkbox = dpg.add_checkbox(label="Return all matching rows")
        header_checkbox = dpg.add_checkbox(label="First row is a header")

        dpg.add_separator()
        status_text = dpg.add_text("")
        results_box = dpg.add_input_text(label="Results", multiline=True, readonly=True, width=580, height=180, default_value="")
        dpg.add_button(label="Search", callback=lambda: run_search_from_ui(
            dpg.get_value(path_input),
            dpg.get_value(column_input),
            dpg.get_value(key_input),
            dpg.get_value(all_checkbox),
            dpg.get_value(header_checkbox),
            dpg.get_value(chunk_input),
            status_text,
            results_box,
        ))

    dpg.setup_dearpygui()
    dpg.show_viewport()
    dpg.start_dearpygui()
    dpg.destroy_context()


if __name__ == "__main__":
    main()
