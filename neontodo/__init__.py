"""NeonTodo - local-first task manager (data, query and backup layer)."""
