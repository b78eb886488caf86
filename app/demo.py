"""
Minesweeper Group Solver - Interactive Demo

Run with: streamlit run app/demo.py
"""

import random
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Any, Dict, List, Optional, Set, Tuple

from minegroups import GridMineField, GroupSolver, PuzzleTruthViolation, format_mine_groups
from minegroups.analysis import pick_seed_cell

COLORS = {
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}


def cell_style(width: int) -> Tuple[int, str]:
    """Scale cell size based on field width."""
    if width >= 30:
        return 14, "10px"
    if width >= 25:
        return 16, "11px"
    if width >= 16:
        return 20, "13px"
    return 26, "15px"


def render_field_html(
    field: GridMineField,
    explored: Set[Tuple[int, int]],
    flagged: Set[Tuple[int, int]],
    uncertain: Set[Tuple[int, int]],
    highlight_cell: Optional[Tuple[int, int]] = None,
    show_mines: bool = False,
) -> str:
    """Render the field as an HTML table for the given explored/flagged sets."""
    cell_size, font_size = cell_style(field.width)

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for y in range(field.height):
        html += "<tr>"
        for x in range(field.width):
            cell = field.cell(x, y)
            if (x, y) in flagged:
                text, bg, color = "F", "#ffa500", "#ffffff"
            elif (x, y) in explored:
                count = cell.surrounding_mine_count()
                text = str(count) if count else " "
                bg, color = "#ffffff", COLORS.get(text, "#000000")
            elif show_mines and cell.mined:
                text, bg, color = "M", "#ffcccc", "#ff0000"
            elif (x, y) in uncertain:
                text, bg, color = "?", "#9fb6cd", "#333333"
            else:
                text, bg, color = ".", "#c0c0c0", "#666666"

            border = "2px solid #ff0000" if (x, y) == highlight_cell else "1px solid #999"
            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {color};
                font-weight: bold;
                font-size: {font_size};
            ">{text}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def run_solver(
    field: GridMineField, solver: GroupSolver, max_solve_attempts: int, reseed: bool
) -> Dict[str, Any]:
    """Solve from the safe point, optionally re-seeding while groups remain."""
    rng = random.Random(0)
    attempts = 0
    status = "stuck"
    cell = field.safe_cell()
    while cell is not None and attempts < max_solve_attempts:
        attempts += 1
        try:
            if solver.solve(cell):
                status = "solved"
                break
        except PuzzleTruthViolation as exc:
            if exc.cell is not cell:
                raise
            status = "lost on re-seed"
            break
        if not reseed:
            break
        cell = pick_seed_cell(field, rng, 1000)
    return {"status": status, "attempts": attempts}


def main():
    st.set_page_config(
        page_title="Minesweeper Group Solver",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minesweeper Group Solver")
    st.markdown("""
    Constraint propagation over mine groups: no guessing, no recursion.
    """)

    # Sidebar configuration
    st.sidebar.header("Field Configuration")

    preset = st.sidebar.selectbox(
        "Difficulty Preset",
        ["Beginner (9x9, 10)", "Intermediate (16x16, 40)", "Expert (30x16, 99)", "Custom"],
    )

    if preset == "Beginner (9x9, 10)":
        width, height, mines = 9, 9, 10
    elif preset == "Intermediate (16x16, 40)":
        width, height, mines = 16, 16, 40
    elif preset == "Expert (30x16, 99)":
        width, height, mines = 30, 16, 99
    else:
        width = st.sidebar.slider("Width", 5, 30, 16)
        height = st.sidebar.slider("Height", 5, 30, 16)
        max_mines = width * height - 9
        mines = st.sidebar.slider("Mines", 1, max_mines, min(40, max_mines))

    algorithm = st.sidebar.selectbox(
        "Mine Generation",
        ["safe_neighborhood_rule", "safe_first_action_rule"],
        help="safe_neighborhood_rule: the centre cell and its neighbors are safe. "
             "safe_first_action_rule: only the centre cell is safe.",
    )
    seed = st.sidebar.number_input("Seed", min_value=0, value=42, step=1)

    st.sidebar.header("Solver Configuration")
    range_test = st.sidebar.selectbox(
        "Range Test",
        ["boundary", "exact"],
        help="boundary: extract only when one range's minimum equals the other's maximum. "
             "exact: extract whenever both ranges share a single value.",
    )
    intersection_search = st.sidebar.selectbox(
        "Intersection Search",
        ["first_success", "exhaustive"],
    )
    reseed = st.sidebar.checkbox(
        "Re-seed from random cells when stuck",
        value=False,
        help="Each re-seed is a blind guess and may hit a mine.",
    )

    settings = (width, height, mines, algorithm, int(seed), range_test, intersection_search, reseed)
    if st.session_state.get("settings") != settings:
        st.session_state.settings = settings
        st.session_state.field = None
        st.session_state.solver = None
        st.session_state.result = None
        st.session_state.current_step = 0

    if st.button("Solve", type="primary"):
        field = GridMineField(width, height, mines, algorithm, seed=int(seed))
        solver = GroupSolver(
            field,
            range_test=range_test,
            intersection_search=intersection_search,
            record_steps=True,
        )
        st.session_state.result = run_solver(field, solver, 100, reseed)
        st.session_state.field = field
        st.session_state.solver = solver
        st.session_state.current_step = len(solver.steps_history)
        st.rerun()

    field: Optional[GridMineField] = st.session_state.field
    solver: Optional[GroupSolver] = st.session_state.solver
    if field is None or solver is None:
        st.info("Click 'Solve' to generate and solve a new field.")
        return

    col1, col2 = st.columns([3, 1])

    with col1:
        st.subheader("Field")
        steps: List[Dict[str, Any]] = solver.steps_history
        step = st.session_state.current_step
        if steps:
            step = st.slider("Step", 0, len(steps), step, key="step_slider")
            st.session_state.current_step = step

        explored: Set[Tuple[int, int]] = set()
        flagged: Set[Tuple[int, int]] = set()
        for entry in steps[:step]:
            coord = entry["cell"].coord
            (explored if entry["action"] == "explore" else flagged).add(coord)

        final = step == len(steps)
        if final:
            uncertain = {cell.coord for group in solver.mine_groups for cell in group.options}
            highlight = None
        else:
            uncertain = {cell.coord for _, options in steps[step]["live_groups"] for cell in options}
            highlight = steps[step]["cell"].coord
            action = "Explore" if steps[step]["action"] == "explore" else "Flag"
            st.info(f"**Step {step + 1}/{len(steps)}**: next move is {action} {highlight}")

        html = render_field_html(
            field, explored, flagged, uncertain, highlight_cell=highlight, show_mines=final
        )
        st.markdown(html, unsafe_allow_html=True)

        st.markdown("""
        <div style="font-size: 12px; margin-top: 10px;">
        <b>Legend:</b>
        <span style="background: #c0c0c0; color: #666666; padding: 2px 6px; margin: 0 4px; font-weight: bold;">.</span> Unknown
        <span style="background: #9fb6cd; color: #333333; padding: 2px 6px; margin: 0 4px; font-weight: bold;">?</span> In a live group
        <span style="background: #ffa500; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">F</span> Flagged
        <span style="background: #ffcccc; color: #ff0000; padding: 2px 6px; margin: 0 4px; font-weight: bold;">M</span> Mine (shown at end)
        </div>
        """, unsafe_allow_html=True)

    with col2:
        st.subheader("Solver Statistics")
        result = st.session_state.result
        stats = solver.stats()
        st.metric("Result", result["status"])
        st.metric("Solve Attempts", result["attempts"])
        st.metric("Cells Explored", stats["explored_count"])
        st.metric("Mines Flagged", stats["flagged_count"])

        st.markdown("---")
        st.markdown("**Group Statistics**")
        st.text(f"Created: {stats['groups_created']} (reused {stats['groups_reused']})")
        st.text(
            f"Intersections: {stats['intersections_extracted']} extracted / "
            f"{stats['intersections_attempted']} attempted"
        )
        st.text(f"Max live groups: {stats['max_live_groups']}")
        st.text(f"Live groups: {stats['live_groups']}")

        with st.expander("Residual groups"):
            st.text(format_mine_groups(solver))


if __name__ == "__main__":
    main()
