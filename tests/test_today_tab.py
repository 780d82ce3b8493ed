from habits_dashboard.tabs.today_tab import habit_heading_html


def test_heading_escapes_user_text():
    habit = {
        "name": "<img src=x onerror=alert(1)>",
        "category": {"name": "<b>Health</b>", "icon": "💪", "color": "red' onmouseover='x"},
    }
    heading = habit_heading_html(habit, value=0, target=1)
    assert "<img" not in heading
    assert "&lt;img src=x onerror=alert(1)&gt;" in heading
    assert "&lt;b&gt;Health&lt;/b&gt;" in heading
    assert "red&#x27; onmouseover=&#x27;x" in heading


def test_heading_marks_completed_habit():
    habit = {"name": "Water", "category": None}
    assert "✅" in habit_heading_html(habit, value=3, target=3)
    assert "✅" not in habit_heading_html(habit, value=2, target=3)
    assert "category-chip" not in habit_heading_html(habit, value=2, target=3)
