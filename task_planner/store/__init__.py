# Store package
from task_planner.store.csv_store import TaskItemStore, read_csv_text, to_csv_text

__all__ = ["TaskItemStore", "read_csv_text", "to_csv_text"]
