import base64
from io import BytesIO
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from bunktrack.engine.attendance import AttendanceCalculator, format_percent
from bunktrack.engine.store import Subject
from bunktrack.engine.stream import app_logger


def generate_graph(subjects: Sequence[Subject]) -> str:
    """Render attended/skipped bars per subject as a base64 encoded PNG."""
    names, attended, skipped, threshold_marks, labels = [], [], [], [], []

    for subject in subjects:
        attended_classes = min(subject.attended, subject.total)
        # matplotlib reads text between $ signs as mathtext
        names.append(subject.subject_name.replace("$", r"\$"))
        attended.append(attended_classes)
        skipped.append(subject.total - attended_classes)
        threshold_marks.append(
            AttendanceCalculator.threshold_mark(subject.total, subject.required_percent)
        )
        labels.append(f"{format_percent(subject.required_percent)}%")

    app_logger.debug(f"Rendering attendance chart for {len(names)} subjects")

    fig, ax = plt.subplots(figsize=(12, 8))
    x = np.arange(len(names))
    ax.bar(x, attended, color="seagreen")
    ax.bar(x, skipped, bottom=attended, color="firebrick")

    for i in range(len(names)):
        ax.text(x[i], threshold_marks[i] + 1, f"{labels[i]}: {threshold_marks[i]}", ha="center", fontsize=9)

    tick_labels = [f"{name}\n{att}/{att + skip}" for name, att, skip in zip(names, attended, skipped)]
    ax.set_xticks(x)
    ax.set_xticklabels(tick_labels, rotation=45, ha="right")
    ax.set_xlabel("Subjects")
    ax.set_ylabel("Classes")
    ax.set_title("Attendance")
    ax.legend(["Attended", "Skipped"])
    fig.tight_layout()

    buf = BytesIO()
    fig.savefig(buf, format="png")
    plt.close(fig)
    buf.seek(0)

    return base64.b64encode(buf.getvalue()).decode("utf-8")
