"""HTTP middleware: errors, rate limits and metrics."""
