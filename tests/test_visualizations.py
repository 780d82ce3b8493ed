from datetime import date

from habits_dashboard.metrics import summarize_activity
from habits_dashboard.visualizations import build_heatmap_matrix


def test_heatmap_matrix_has_one_column_per_week():
    today = date(2026, 3, 15)
    summary = summarize_activity([{"date": "2026-03-15", "value": 2}], target=2, today=today)
    z, text, week_labels = build_heatmap_matrix(summary.grid, uom="glasses")
    assert len(z) == 7
    assert all(len(row) == 13 for row in z)
    assert len(week_labels) == 13
    assert z[6][12] == 4
    assert text[6][12].startswith("2026-03-15 • 2 glasses")
    assert z[0][0] == 0


def test_heatmap_matrix_for_empty_grid():
    assert build_heatmap_matrix([]) == ([], [], [])
