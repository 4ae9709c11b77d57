"""Hour tracking service: time entries, breaks, idle detection and reports."""
